"""View models for holdings output."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class HoldingView:
    """Holding enriched with its current price, when one is known."""

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
