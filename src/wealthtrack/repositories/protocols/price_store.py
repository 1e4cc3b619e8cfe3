"""Price snapshot store protocol."""

from typing import Mapping, Optional, Protocol

from wealthtrack.domain.models import PriceSnapshot


class PriceStore(Protocol):
    """
    Interface for the key/value store behind the price cache.

    Implementations may raise on storage failure; the cache absorbs it.
    """

    def get(self, instrument_id: str) -> Optional[PriceSnapshot]:
        """Return the stored snapshot for an instrument, fresh or not."""
        ...

    def put_many(self, snapshots: Mapping[str, PriceSnapshot]) -> None:
        """Insert or replace snapshots."""
        ...

    def clear(self) -> None:
        """Remove every snapshot."""
        ...
