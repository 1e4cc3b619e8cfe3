"""Portfolio endpoints: holdings, monthly series, performance and cash flow."""

import math
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from wealthtrack.api.deps import get_portfolio_service
from wealthtrack.api.schemas import (
    CagrResponse,
    CashAccountResponse,
    CashFlowResponse,
    CashMovementResponse,
    GoalProjectionResponse,
    HoldingResponse,
    HoldingsResponse,
    MonthlyPointResponse,
    MonthlySeriesResponse,
    MonthStatResponse,
    PerformanceResponse,
)
from wealthtrack.services import PortfolioService

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/holdings", response_model=HoldingsResponse)
def get_holdings(
    cutoff: Optional[date] = Query(None, description="Replay the ledger up to this date"),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> HoldingsResponse:
    """Open positions with current prices where available."""
    holdings = portfolio.get_holdings(cutoff)
    return HoldingsResponse(
        holdings=[HoldingResponse.model_validate(h) for h in holdings],
        total_market_value=sum(h.market_value or 0.0 for h in holdings),
        total_cost=sum(h.total_cost for h in holdings),
    )


@router.get("/monthly", response_model=MonthlySeriesResponse)
def get_monthly_series(
    year: Optional[int] = Query(None, ge=1900, le=2200),
    category: Optional[str] = Query(None, description="Narrow values to one category"),
    include_projection: bool = Query(False, description="Append projected months"),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> MonthlySeriesResponse:
    """Month-end valuation series (realized, optionally followed by projected)."""
    series = portfolio.get_monthly_series(
        year=year,
        category=category,
        include_projection=include_projection,
    )
    return MonthlySeriesResponse(
        points=[
            MonthlyPointResponse(
                period_key=p.period_key,
                market_value=p.market_value,
                cash_balance=p.cash_balance,
                total_equity=p.total_equity,
                net_cash_flow=p.net_cash_flow,
                period_return=p.period_return,
                deposits=p.deposits,
                withdrawals=p.withdrawals,
                purchases=p.purchases,
                sales=p.sales,
                category_values=p.category_values,
                missing_prices=list(p.missing_prices),
                is_partial=p.is_partial,
                is_projected=p.is_projected,
            )
            for p in series
        ],
        count=len(series),
    )


@router.get("/performance", response_model=PerformanceResponse)
def get_performance(
    target_amount: Optional[float] = Query(None, gt=0, description="Goal amount"),
    monthly_contribution: float = Query(0.0, ge=0),
    annual_growth_rate: Optional[float] = Query(
        None, description="Growth assumption for the goal; CAGR or total return when omitted"
    ),
    initial_investment: Optional[float] = Query(None, gt=0),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> PerformanceResponse:
    """Backward-looking statistics plus an optional goal projection."""
    strategy = {
        "target_amount": target_amount,
        "monthly_contribution": monthly_contribution,
        "annual_growth_rate": annual_growth_rate,
        "initial_investment": initial_investment,
    }
    summary = portfolio.get_performance_summary(strategy)

    goal = None
    if summary.goal_projection is not None:
        g = summary.goal_projection
        goal = GoalProjectionResponse(
            status=g.status.value,
            target_amount=g.target_amount,
            months_to_goal=g.months_to_goal,
            years_to_goal=g.years_to_goal,
            projected_value=g.projected_value,
        )

    sortino_unbounded = math.isinf(summary.sortino)
    return PerformanceResponse(
        has_history=summary.has_history,
        months=summary.months,
        years=summary.years,
        initial_investment=summary.initial_investment,
        final_value=summary.final_value,
        total_return=summary.total_return,
        total_return_pct=summary.total_return_pct,
        cagr=CagrResponse(value=summary.cagr.value, reliable=summary.cagr.reliable),
        twr=summary.twr.twr,
        twr_annualized=summary.twr.annualized,
        max_drawdown=summary.max_drawdown,
        recovery_time=summary.recovery_time,
        sharpe=summary.sharpe,
        sortino=None if sortino_unbounded else summary.sortino,
        sortino_unbounded=sortino_unbounded,
        volatility=summary.volatility,
        avg_monthly_return=summary.avg_monthly_return,
        best_month=(
            MonthStatResponse(**vars(summary.best_month)) if summary.best_month else None
        ),
        worst_month=(
            MonthStatResponse(**vars(summary.worst_month)) if summary.worst_month else None
        ),
        goal_projection=goal,
    )


@router.get("/cash-flow", response_model=CashFlowResponse)
def get_cash_flow(
    limit: int = Query(10, ge=0, le=500, description="Number of recent movements"),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> CashFlowResponse:
    """Deposits, withdrawals, purchases and sales across the ledger."""
    summary = portfolio.get_cash_flow_summary()
    return CashFlowResponse(
        deposits=summary.deposits,
        withdrawals=summary.withdrawals,
        purchases=summary.purchases,
        sales=summary.sales,
        available_cash=summary.available_cash,
        total_inflows=summary.total_inflows,
        total_outflows=summary.total_outflows,
        accounts=[
            CashAccountResponse(
                name=a.name,
                deposits=a.deposits,
                withdrawals=a.withdrawals,
                balance=a.balance,
            )
            for a in summary.accounts
        ],
        recent_movements=[
            CashMovementResponse(
                date=m.date,
                amount=m.amount,
                kind=m.kind.value,
                instrument_id=m.instrument_id,
                balance=m.balance,
            )
            for m in summary.recent_movements(limit)
        ],
    )
