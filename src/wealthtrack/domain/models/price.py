"""Price snapshot and resolution models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from wealthtrack.domain.models.enums import PriceStatus


@dataclass(frozen=True)
class PriceSnapshot:
    """Current price of one instrument as reported by a provider."""

    instrument_id: str
    price: float
    as_of: datetime
    source: str
    change: Optional[float] = None
    change_percent: Optional[float] = None


@dataclass(frozen=True)
class PriceResolution:
    """Per-instrument result of a current-price resolution."""

    instrument_id: str
    status: PriceStatus
    snapshot: Optional[PriceSnapshot] = None
    error: Optional[str] = None

    @classmethod
    def resolved(cls, snapshot: PriceSnapshot) -> "PriceResolution":
        return cls(
            instrument_id=snapshot.instrument_id,
            status=PriceStatus.RESOLVED,
            snapshot=snapshot,
        )

    @classmethod
    def unresolved(cls, instrument_id: str, error: str) -> "PriceResolution":
        return cls(instrument_id=instrument_id, status=PriceStatus.UNRESOLVED, error=error)

    @property
    def is_resolved(self) -> bool:
        return self.status == PriceStatus.RESOLVED

    @property
    def price(self) -> Optional[float]:
        return self.snapshot.price if self.snapshot else None
