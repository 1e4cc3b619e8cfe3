"""Monthly valuation series model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MonthlyValuationPoint:
    """
    Portfolio state at the end of one calendar month.

    Generated by the valuation builder, never mutated. Projected points
    (is_projected=True) are forecasts and never feed backward-looking statistics.
    """

    period_key: str
    market_value: float
    cash_balance: float
    net_cash_flow: float = 0.0
    period_return: float = 0.0
    # Cash movements of the month, as positive amounts
    deposits: float = 0.0
    withdrawals: float = 0.0
    purchases: float = 0.0
    sales: float = 0.0
    category_values: dict[str, float] = field(default_factory=dict)
    missing_prices: tuple[str, ...] = ()
    is_projected: bool = False

    @property
    def total_equity(self) -> float:
        return self.market_value + self.cash_balance

    @property
    def is_partial(self) -> bool:
        """True when some held instrument had no usable price this month."""
        return bool(self.missing_prices)
