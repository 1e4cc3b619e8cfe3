"""View models for performance analytics results."""

from dataclasses import dataclass, field
from typing import Optional

from wealthtrack.domain.models.enums import GoalStatus


@dataclass(frozen=True)
class CagrResult:
    """CAGR value plus whether the period is long enough (>= 1 year) to trust it."""

    value: float
    reliable: bool


@dataclass(frozen=True)
class TwrResult:
    """Chain-linked time-weighted return and its annualized form."""

    twr: float
    annualized: float


@dataclass(frozen=True)
class DrawdownResult:
    """Largest peak-to-trough decline, as a fraction of the peak."""

    max_drawdown: float = 0.0
    peak_index: int = 0
    trough_index: int = 0
    peak_value: float = 0.0
    trough_value: float = 0.0


@dataclass(frozen=True)
class GoalProjection:
    """Months needed to reach a target amount under constant growth and contributions."""

    status: GoalStatus
    target_amount: float
    months_to_goal: Optional[int] = None
    projected_value: Optional[float] = None

    @property
    def years_to_goal(self) -> Optional[float]:
        if self.months_to_goal is None:
            return None
        return round(self.months_to_goal / 12, 1)

    @property
    def achieved(self) -> bool:
        return self.status == GoalStatus.ACHIEVED


@dataclass(frozen=True)
class MonthStat:
    """Return of a single month, used for best/worst month."""

    period_key: str
    period_return: float


@dataclass
class PerformanceSummary:
    """
    All backward-looking statistics for a realized valuation series.

    has_history=False means there was nothing to measure ("no data yet"),
    which the presentation layer must show differently from a zero result.
    """

    has_history: bool = False
    months: int = 0
    years: float = 0.0
    initial_investment: float = 0.0
    final_value: float = 0.0
    total_return: float = 0.0
    total_return_pct: float = 0.0
    cagr: CagrResult = field(default_factory=lambda: CagrResult(0.0, False))
    twr: TwrResult = field(default_factory=lambda: TwrResult(0.0, 0.0))
    drawdown: DrawdownResult = field(default_factory=DrawdownResult)
    recovery_time: int = 0
    sharpe: float = 0.0
    sortino: float = 0.0
    volatility: float = 0.0
    avg_monthly_return: float = 0.0
    best_month: Optional[MonthStat] = None
    worst_month: Optional[MonthStat] = None
    goal_projection: Optional[GoalProjection] = None

    @property
    def max_drawdown(self) -> float:
        return self.drawdown.max_drawdown
