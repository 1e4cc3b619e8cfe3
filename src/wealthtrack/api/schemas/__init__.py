"""Pydantic schemas for API request/response."""

from wealthtrack.api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from wealthtrack.api.schemas.portfolio import (
    HoldingResponse,
    HoldingsResponse,
    MonthlyPointResponse,
    MonthlySeriesResponse,
    CagrResponse,
    MonthStatResponse,
    GoalProjectionResponse,
    PerformanceResponse,
    CashAccountResponse,
    CashMovementResponse,
    CashFlowResponse,
)
from wealthtrack.api.schemas.price import PriceResponse, PricesResponse

__all__ = [
    "TransactionCreateRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "HoldingResponse",
    "HoldingsResponse",
    "MonthlyPointResponse",
    "MonthlySeriesResponse",
    "CagrResponse",
    "MonthStatResponse",
    "GoalProjectionResponse",
    "PerformanceResponse",
    "CashAccountResponse",
    "CashMovementResponse",
    "CashFlowResponse",
    "PriceResponse",
    "PricesResponse",
]
