"""
Unit tests for performance analytics.

Tests cover:
- CAGR (round trip, reliability, degenerate input)
- Time-weighted return
- Maximum drawdown and recovery time
- Sharpe, Sortino and volatility
- Goal projection
- Summary over a valuation series
"""

import math

import pytest

from wealthtrack.domain.models import GoalStatus, MonthlyValuationPoint
from wealthtrack.services.performance_analytics import (
    calculate_cagr,
    max_drawdown,
    project_goal,
    recovery_time,
    sharpe_ratio,
    sortino_ratio,
    summarize,
    time_weighted_return,
    volatility,
)

from tests.conftest import assert_close


def point(key: str, equity: float, flow: float = 0.0, ret: float = 0.0, projected: bool = False):
    return MonthlyValuationPoint(
        period_key=key,
        market_value=equity,
        cash_balance=0.0,
        net_cash_flow=flow,
        period_return=ret,
        is_projected=projected,
    )


# =============================================================================
# CAGR / TWR
# =============================================================================


class TestCagr:
    """Tests for calculate_cagr."""

    @pytest.mark.parametrize("rate, years", [(0.07, 5), (-0.3, 2), (0.5, 0.5), (0.0, 10), (1.2, 1.75)])
    def test_round_trip(self, rate, years):
        """
        GIVEN final = 100 * (1 + r) ** y
        WHEN CAGR is computed
        THEN it recovers r
        """
        result = calculate_cagr(100.0, 100.0 * (1 + rate) ** years, years)

        assert_close(result.value, rate, 1e-9)

    def test_reliability_flag(self):
        assert calculate_cagr(100.0, 110.0, 1.0).reliable
        assert not calculate_cagr(100.0, 110.0, 0.5).reliable

    @pytest.mark.parametrize("initial, final, years", [(0, 100, 1), (-5, 100, 1), (100, 0, 1), (100, 110, 0)])
    def test_degenerate_input(self, initial, final, years):
        result = calculate_cagr(initial, final, years)

        assert result.value == 0.0
        assert not result.reliable


class TestTimeWeightedReturn:
    def test_chain_linking(self):
        result = time_weighted_return([0.1, -0.1, 0.05], 0.25)

        assert_close(result.twr, 1.1 * 0.9 * 1.05 - 1)
        assert_close(result.annualized, (1.1 * 0.9 * 1.05) ** 4 - 1)

    def test_degenerate(self):
        assert time_weighted_return([], 0).annualized == 0.0
        total_loss = time_weighted_return([-1.0], 1.0)
        assert total_loss.twr == -1.0
        assert total_loss.annualized == 0.0


# =============================================================================
# DRAWDOWN
# =============================================================================


class TestDrawdown:
    """Tests for max_drawdown and recovery_time."""

    def test_reference_series(self):
        """
        GIVEN equity [100, 120, 80, 90, 130]
        WHEN drawdown is computed
        THEN max drawdown is 40/120 and recovery takes 2 periods
        """
        values = [100, 120, 80, 90, 130]

        drawdown = max_drawdown(values)

        assert_close(drawdown.max_drawdown, 1 / 3)
        assert (drawdown.peak_index, drawdown.trough_index) == (1, 2)
        assert (drawdown.peak_value, drawdown.trough_value) == (120, 80)
        assert recovery_time(values, drawdown) == 2

    def test_not_recovered(self):
        values = [100, 120, 80, 90, 110]

        assert recovery_time(values, max_drawdown(values)) == 0

    @pytest.mark.parametrize("values", [[], [100], [100, 100, 100], [1, 2, 3]])
    def test_no_drawdown(self, values):
        drawdown = max_drawdown(values)

        assert drawdown.max_drawdown == 0.0
        assert recovery_time(values, drawdown) == 0

    def test_largest_of_several(self):
        drawdown = max_drawdown([100, 90, 100, 150, 90, 95])

        assert_close(drawdown.max_drawdown, 0.4)
        assert drawdown.peak_index == 3

    def test_non_positive_peak_is_ignored(self):
        assert max_drawdown([-10, -20, -5]).max_drawdown == 0.0


# =============================================================================
# RISK RATIOS
# =============================================================================


class TestRiskRatios:
    """Tests for Sharpe, Sortino and volatility."""

    RETURNS = [0.02, -0.01, 0.03, 0.01]

    def test_sharpe(self):
        mean = sum(self.RETURNS) / 4
        std = math.sqrt(sum((r - mean) ** 2 for r in self.RETURNS) / 4)

        assert_close(sharpe_ratio(self.RETURNS, 0.12), (mean - 0.01) / std)

    def test_sortino(self):
        mean = sum(self.RETURNS) / 4

        assert_close(sortino_ratio(self.RETURNS), mean / 0.01)

    def test_sortino_without_downside(self):
        assert sortino_ratio([0.01, 0.02]) == math.inf

    def test_volatility(self):
        mean = sum(self.RETURNS) / 4
        std = math.sqrt(sum((r - mean) ** 2 for r in self.RETURNS) / 4)

        assert_close(volatility(self.RETURNS), std * math.sqrt(12))

    @pytest.mark.parametrize("returns", [[], [0.05]])
    def test_insufficient_observations(self, returns):
        assert sharpe_ratio(returns) == 0.0
        assert sortino_ratio(returns) == 0.0
        assert volatility(returns) == 0.0

    def test_zero_variance(self):
        assert sharpe_ratio([0.01, 0.01, 0.01]) == 0.0
        assert volatility([0.01, 0.01]) == 0.0


# =============================================================================
# GOAL PROJECTION
# =============================================================================


class TestGoalProjection:
    """Tests for project_goal."""

    def test_already_achieved(self):
        goal = project_goal(current=10000, target=5000)

        assert goal.status == GoalStatus.ACHIEVED
        assert goal.achieved
        assert goal.months_to_goal == 0

    def test_contributions_only(self):
        """
        GIVEN 1000 now, 100/month and no growth
        WHEN the goal is 2000
        THEN it takes exactly 10 months
        """
        goal = project_goal(current=1000, target=2000, monthly_contribution=100, annual_growth_rate=0)

        assert goal.status == GoalStatus.PROJECTED
        assert goal.months_to_goal == 10
        assert goal.years_to_goal == 0.8
        assert_close(goal.projected_value, 2000.0)

    def test_growth_only(self):
        goal = project_goal(current=1000, target=2000, annual_growth_rate=0.10)

        # 1.1 ** 7.27 ~= 2
        assert goal.months_to_goal == 88

    def test_unreachable_without_growth_or_contribution(self):
        goal = project_goal(current=1000, target=2000)

        assert goal.status == GoalStatus.UNREACHABLE
        assert goal.months_to_goal is None
        assert goal.years_to_goal is None

    def test_unreachable_within_cap(self):
        goal = project_goal(current=0, target=1_000_000, monthly_contribution=1, max_months=1200)

        assert goal.status == GoalStatus.UNREACHABLE


# =============================================================================
# SUMMARY
# =============================================================================


class TestSummarize:
    """Tests for summarize."""

    def test_empty_series(self):
        """
        GIVEN no realized points
        WHEN summarized
        THEN every metric is neutral and has_history is False
        """
        summary = summarize([])

        assert not summary.has_history
        assert summary.cagr.value == 0.0
        assert summary.max_drawdown == 0.0
        assert summary.sharpe == 0.0
        assert summary.sortino == 0.0
        assert summary.best_month is None
        assert summary.goal_projection is None

    def test_projected_points_are_ignored(self):
        realized = [point("2024-01", 1000, flow=1000), point("2024-02", 1100, ret=0.1)]
        projected = [point("2024-03", 500, ret=-0.5, projected=True)]

        assert summarize(realized + projected) == summarize(realized)

    def test_statistics_from_series(self):
        """
        GIVEN the reference drawdown series as monthly equity
        WHEN summarized with 1000 deposited up front
        THEN drawdown, recovery, returns and best/worst months are reported
        """
        equities = [100, 120, 80, 90, 130]
        returns = [0.0, 0.2, -1 / 3, 0.125, 130 / 90 - 1]
        points = [
            point(f"2024-{i + 1:02d}", e, flow=100 if i == 0 else 0, ret=r)
            for i, (e, r) in enumerate(zip(equities, returns))
        ]

        summary = summarize(points, risk_free_rate=0.0)

        assert summary.has_history
        assert summary.months == 5
        assert_close(summary.years, 5 / 12)
        assert summary.initial_investment == 100
        assert summary.final_value == 130
        assert_close(summary.total_return_pct, 0.3)
        assert_close(summary.max_drawdown, 1 / 3)
        assert summary.recovery_time == 2
        assert not summary.cagr.reliable
        assert summary.best_month.period_key == "2024-05"
        assert summary.worst_month.period_key == "2024-03"
        assert_close(summary.avg_monthly_return, sum(returns[1:]) / 4)
        assert_close(summary.twr.twr, 0.3)

    def test_initial_investment_override(self):
        points = [point("2024-01", 1000, flow=1000), point("2024-02", 1100, ret=0.1)]

        summary = summarize(points, initial_investment=500)

        assert summary.initial_investment == 500
        assert_close(summary.total_return, 600.0)

    def test_falls_back_to_first_equity(self):
        points = [point("2024-01", 1000), point("2024-02", 1100, ret=0.1)]

        assert summarize(points).initial_investment == 1000

    def test_goal_uses_total_return_when_cagr_unreliable(self):
        """
        GIVEN a 2-month history with +10% total return
        WHEN a goal without explicit growth rate is requested
        THEN the projection compounds at the total return (10%/year)
        """
        points = [point("2024-01", 1000, flow=1000), point("2024-02", 1100, ret=0.1)]

        summary = summarize(points, goal={"target_amount": 2200, "monthly_contribution": 0})

        expected = project_goal(1100, 2200, 0, summary.total_return_pct)
        assert summary.goal_projection == expected
        assert summary.goal_projection.status == GoalStatus.PROJECTED

    def test_goal_with_explicit_growth(self):
        points = [point("2024-01", 1000, flow=1000)]

        summary = summarize(
            points,
            goal={"target_amount": 2000, "monthly_contribution": 100, "annual_growth_rate": 0},
        )

        assert summary.goal_projection.months_to_goal == 10

    def test_goal_without_history(self):
        summary = summarize([], goal={"target_amount": 1000, "monthly_contribution": 100})

        assert summary.goal_projection.months_to_goal == 10
