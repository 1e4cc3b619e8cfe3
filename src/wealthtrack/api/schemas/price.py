"""Pydantic schemas for price endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from wealthtrack.domain.models.enums import PriceStatus


class PriceResponse(BaseModel):
    """Resolution of one instrument: a price, or an explicit unresolved status."""

    instrument_id: str
    status: PriceStatus
    price: Optional[float] = None
    as_of: Optional[datetime] = None
    source: Optional[str] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    error: Optional[str] = None


class PricesResponse(BaseModel):
    prices: list[PriceResponse]
    resolved_count: int
    unresolved_count: int
