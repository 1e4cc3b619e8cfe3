"""Pydantic schemas for transaction endpoints."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from wealthtrack.domain.models.enums import TransactionKind


class TransactionCreateRequest(BaseModel):
    """Request schema for appending a transaction."""

    instrument_id: str = Field(..., min_length=1, max_length=32, description="Ticker or cash account")
    kind: TransactionKind = Field(..., description="buy (deposit for cash) or sell (withdrawal)")
    occurred_at: Optional[date] = Field(default=None, description="Trade date; defaults to today")
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    commission: float = Field(default=0.0, ge=0)
    is_cash: bool = False
    category: str = Field(default="Other", max_length=64)

    @field_validator("instrument_id")
    @classmethod
    def uppercase_instrument(cls, v: str) -> str:
        return v.strip().upper()


class TransactionResponse(BaseModel):
    """Response schema for a single transaction."""

    model_config = {"from_attributes": True}

    txn_id: str
    instrument_id: str
    occurred_at: date
    kind: TransactionKind
    quantity: float
    unit_price: float
    commission: float
    is_cash: bool
    category: str


class TransactionListResponse(BaseModel):
    """Response schema for listing transactions."""

    transactions: list[TransactionResponse]
    count: int
