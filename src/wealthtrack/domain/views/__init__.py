"""View models for service outputs."""

from wealthtrack.domain.views.portfolio import HoldingView
from wealthtrack.domain.views.performance import (
    CagrResult,
    TwrResult,
    DrawdownResult,
    GoalProjection,
    MonthStat,
    PerformanceSummary,
)

__all__ = [
    "HoldingView",
    "CagrResult",
    "TwrResult",
    "DrawdownResult",
    "GoalProjection",
    "MonthStat",
    "PerformanceSummary",
]
