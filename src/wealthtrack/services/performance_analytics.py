"""
Performance analytics over a realized monthly valuation series.

Every function is pure and guards its denominators: degenerate input gives a
neutral value (0) instead of NaN or an exception. The one exception is the
Sortino ratio, which returns math.inf when there is no downside at all.
"""

import math
from typing import Optional, Sequence

from wealthtrack.domain.models import GoalStatus, MonthlyValuationPoint
from wealthtrack.domain.views import (
    CagrResult,
    DrawdownResult,
    GoalProjection,
    MonthStat,
    PerformanceSummary,
    TwrResult,
)

MONTHS_PER_YEAR = 12
MAX_GOAL_MONTHS = 1200


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _std(values: Sequence[float], center: Optional[float] = None) -> float:
    """Population standard deviation around `center` (the mean by default)."""
    if not values:
        return 0.0
    center = _mean(values) if center is None else center
    return math.sqrt(sum((v - center) ** 2 for v in values) / len(values))


def calculate_cagr(initial: float, final: float, years: float) -> CagrResult:
    """(final / initial) ** (1 / years) - 1, flagged reliable from one year on."""
    if initial <= 0 or final <= 0 or years <= 0:
        return CagrResult(value=0.0, reliable=False)
    return CagrResult(
        value=(final / initial) ** (1 / years) - 1,
        reliable=years >= 1,
    )


def time_weighted_return(returns: Sequence[float], years: float) -> TwrResult:
    """Chain-link (1 + r) over all periods and annualize over `years`."""
    growth = 1.0
    for r in returns:
        growth *= 1 + r
    twr = growth - 1
    if years <= 0 or growth <= 0:
        return TwrResult(twr=twr, annualized=0.0)
    return TwrResult(twr=twr, annualized=growth ** (1 / years) - 1)


def max_drawdown(values: Sequence[float]) -> DrawdownResult:
    """Largest decline from a running peak, scanning the series once."""
    if not values:
        return DrawdownResult()

    best = DrawdownResult(peak_value=values[0], trough_value=values[0])
    peak_index = 0
    for i, value in enumerate(values):
        if value > values[peak_index]:
            peak_index = i
        peak = values[peak_index]
        if peak <= 0:
            continue
        drawdown = (peak - value) / peak
        if drawdown > best.max_drawdown:
            best = DrawdownResult(
                max_drawdown=drawdown,
                peak_index=peak_index,
                trough_index=i,
                peak_value=peak,
                trough_value=value,
            )
    return best


def recovery_time(values: Sequence[float], drawdown: DrawdownResult) -> int:
    """Periods from the trough until the series is back at the peak; 0 if never."""
    if drawdown.max_drawdown <= 0:
        return 0
    for i in range(drawdown.trough_index + 1, len(values)):
        if values[i] >= drawdown.peak_value:
            return i - drawdown.trough_index
    return 0


def sharpe_ratio(returns: Sequence[float], annual_risk_free_rate: float = 0.02) -> float:
    """Monthly Sharpe ratio against annual_risk_free_rate / 12."""
    if len(returns) < 2:
        return 0.0
    std = _std(returns)
    if std == 0:
        return 0.0
    return (_mean(returns) - annual_risk_free_rate / MONTHS_PER_YEAR) / std


def sortino_ratio(returns: Sequence[float], target: float = 0.0) -> float:
    """Like Sharpe, but only sub-target returns count as risk."""
    if len(returns) < 2:
        return 0.0
    downside = [r for r in returns if r < target]
    if not downside:
        return math.inf
    downside_deviation = _std(downside, center=target)
    if downside_deviation == 0:
        return math.inf
    return (_mean(returns) - target) / downside_deviation


def volatility(returns: Sequence[float]) -> float:
    """Annualized volatility: monthly standard deviation * sqrt(12)."""
    if len(returns) < 2:
        return 0.0
    return _std(returns) * math.sqrt(MONTHS_PER_YEAR)


def project_goal(
    current: float,
    target: float,
    monthly_contribution: float = 0.0,
    annual_growth_rate: float = 0.0,
    max_months: int = MAX_GOAL_MONTHS,
) -> GoalProjection:
    """
    Simulate value = value * (1 + monthly_rate) + contribution until target.

    Non-positive growth does not compound. The simulation stops at max_months
    and reports UNREACHABLE instead of looping forever.
    """
    if target <= current:
        return GoalProjection(
            status=GoalStatus.ACHIEVED,
            target_amount=target,
            months_to_goal=0,
            projected_value=current,
        )
    if annual_growth_rate <= 0 and monthly_contribution <= 0:
        return GoalProjection(status=GoalStatus.UNREACHABLE, target_amount=target)

    monthly_rate = (1 + annual_growth_rate) ** (1 / 12) - 1 if annual_growth_rate > 0 else 0.0
    value = current
    months = 0
    while value < target and months < max_months:
        value = value * (1 + monthly_rate) + monthly_contribution
        months += 1

    if value < target:
        return GoalProjection(status=GoalStatus.UNREACHABLE, target_amount=target)
    return GoalProjection(
        status=GoalStatus.PROJECTED,
        target_amount=target,
        months_to_goal=months,
        projected_value=value,
    )


def summarize(
    points: Sequence[MonthlyValuationPoint],
    initial_investment: Optional[float] = None,
    risk_free_rate: float = 0.02,
    goal: Optional[dict] = None,
) -> PerformanceSummary:
    """
    Compute every statistic for the realized part of a valuation series.

    Projected points are ignored. CAGR starts from initial_investment when
    given, otherwise from total deposits, otherwise from the first month's
    equity. `goal` may hold target_amount, monthly_contribution and
    annual_growth_rate; without a growth rate, CAGR is used when reliable and
    the total return otherwise.
    """
    realized = [p for p in points if not p.is_projected]
    if not realized:
        summary = PerformanceSummary()
        if goal and goal.get("target_amount"):
            summary.goal_projection = _goal_from(goal, 0.0, None)
        return summary

    equities = [p.total_equity for p in realized]
    returns = [p.period_return for p in realized]
    months = len(realized)
    years = months / MONTHS_PER_YEAR
    final_value = equities[-1]

    if initial_investment is None or initial_investment <= 0:
        net_invested = sum(p.net_cash_flow for p in realized)
        initial_investment = net_invested if net_invested > 0 else equities[0]

    cagr = calculate_cagr(initial_investment, final_value, years)
    drawdown = max_drawdown(equities)

    total_return = final_value - initial_investment
    total_return_pct = total_return / initial_investment if initial_investment > 0 else 0.0

    # Average over months that had capital at work
    active = [
        p.period_return
        for prev_equity, p in zip([0.0] + equities[:-1], realized)
        if prev_equity > 0
    ]
    month_stats = [MonthStat(p.period_key, p.period_return) for p in realized]

    summary = PerformanceSummary(
        has_history=True,
        months=months,
        years=years,
        initial_investment=initial_investment,
        final_value=final_value,
        total_return=total_return,
        total_return_pct=total_return_pct,
        cagr=cagr,
        twr=time_weighted_return(returns, years),
        drawdown=drawdown,
        recovery_time=recovery_time(equities, drawdown),
        sharpe=sharpe_ratio(returns, risk_free_rate),
        sortino=sortino_ratio(returns),
        volatility=volatility(returns),
        avg_monthly_return=_mean(active),
        best_month=max(month_stats, key=lambda m: m.period_return),
        worst_month=min(month_stats, key=lambda m: m.period_return),
    )
    if goal and goal.get("target_amount"):
        summary.goal_projection = _goal_from(goal, final_value, summary)
    return summary


def _goal_from(
    goal: dict,
    current: float,
    summary: Optional[PerformanceSummary],
) -> GoalProjection:
    growth = goal.get("annual_growth_rate")
    if growth is None:
        if summary is None:
            growth = 0.0
        elif summary.cagr.reliable:
            growth = summary.cagr.value
        else:
            growth = summary.total_return_pct
    return project_goal(
        current=current,
        target=float(goal["target_amount"]),
        monthly_contribution=float(goal.get("monthly_contribution") or 0.0),
        annual_growth_rate=float(growth),
    )
