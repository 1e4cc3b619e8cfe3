"""Pydantic schemas for portfolio endpoints."""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class HoldingResponse(BaseModel):
    """Open position with price-derived fields (null when no price is known)."""

    model_config = {"from_attributes": True}

    instrument_id: str
    quantity: float
    total_cost: float
    avg_price: float
    category: str
    last_price: Optional[float] = None
    market_value: Optional[float] = None
    unrealized_pnl: Optional[float] = None
    unrealized_pnl_pct: Optional[float] = None
    weight_pct: Optional[float] = None


class HoldingsResponse(BaseModel):
    holdings: list[HoldingResponse]
    total_market_value: float
    total_cost: float


class MonthlyPointResponse(BaseModel):
    """One month of the valuation series."""

    period_key: str
    market_value: float
    cash_balance: float
    total_equity: float
    net_cash_flow: float
    period_return: float
    deposits: float = 0.0
    withdrawals: float = 0.0
    purchases: float = 0.0
    sales: float = 0.0
    category_values: dict[str, float]
    missing_prices: list[str]
    is_partial: bool
    is_projected: bool


class MonthlySeriesResponse(BaseModel):
    points: list[MonthlyPointResponse]
    count: int


class CagrResponse(BaseModel):
    value: float
    reliable: bool


class MonthStatResponse(BaseModel):
    period_key: str
    period_return: float


class GoalProjectionResponse(BaseModel):
    status: str
    target_amount: float
    months_to_goal: Optional[int] = None
    years_to_goal: Optional[float] = None
    projected_value: Optional[float] = None


class PerformanceResponse(BaseModel):
    """
    Performance statistics of the realized series.

    sortino is null when there was no downside month (unbounded ratio);
    sortino_unbounded tells that case apart from "not computable".
    """

    has_history: bool
    months: int
    years: float
    initial_investment: float
    final_value: float
    total_return: float
    total_return_pct: float
    cagr: CagrResponse
    twr: float
    twr_annualized: float
    max_drawdown: float
    recovery_time: int
    sharpe: float
    sortino: Optional[float] = None
    sortino_unbounded: bool = False
    volatility: float
    avg_monthly_return: float
    best_month: Optional[MonthStatResponse] = None
    worst_month: Optional[MonthStatResponse] = None
    goal_projection: Optional[GoalProjectionResponse] = None


class CashAccountResponse(BaseModel):
    name: str
    deposits: float
    withdrawals: float
    balance: float


class CashMovementResponse(BaseModel):
    date: date
    amount: float
    kind: str
    instrument_id: Optional[str] = None
    balance: float


class CashFlowResponse(BaseModel):
    """Ledger-wide cash movements."""

    deposits: float
    withdrawals: float
    purchases: float
    sales: float
    available_cash: float
    total_inflows: float
    total_outflows: float
    accounts: list[CashAccountResponse]
    recent_movements: list[CashMovementResponse]
