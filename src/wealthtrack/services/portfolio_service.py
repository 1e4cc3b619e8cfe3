"""
Portfolio service: the read-side facade used by the API.

Computes the full valuation series internally and applies year and category
filters afterwards, so valuation never depends on what is being displayed.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, Optional

from wealthtrack.core.exceptions import RefreshInProgressError
from wealthtrack.core.timezone import now_local
from wealthtrack.domain.models import (
    CashFlowSummary,
    MonthlyValuationPoint,
    PriceResolution,
    Transaction,
)
from wealthtrack.domain.views import HoldingView, PerformanceSummary
from wealthtrack.repositories.protocols import TransactionRepository
from wealthtrack.services import performance_analytics
from wealthtrack.services.historical_price_service import HistoricalPriceService
from wealthtrack.services.ledger_replayer import CASH_CATEGORY, LedgerReplayer
from wealthtrack.services.price_resolver import PriceResolver
from wealthtrack.services.valuation_builder import MonthlyValuationBuilder

logger = logging.getLogger(__name__)


def _today() -> date:
    return now_local().date()


class PortfolioService:
    """
    Holdings, monthly series and performance statistics derived from the ledger.

    Nothing is stored: every call replays the ledger from the repository.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        price_resolver: PriceResolver,
        historical_service: HistoricalPriceService,
        risk_free_rate: float = 0.02,
        projection_months: int = 12,
        projection_growth_rate: float = 0.05,
        today: Callable[[], date] = _today,
    ):
        self._transaction_repo = transaction_repo
        self._resolver = price_resolver
        self._historical = historical_service
        self._risk_free_rate = risk_free_rate
        self._projection_months = projection_months
        self._projection_growth_rate = projection_growth_rate
        self._today = today

    def get_holdings(self, cutoff: Optional[date] = None) -> list[HoldingView]:
        """
        Open positions as of cutoff, enriched with current prices where known.

        Weights are computed over the priced holdings only.
        """
        replayer = LedgerReplayer()
        holdings = replayer.holdings_as_of(self._ledger(), cutoff)
        if not holdings:
            return []

        prices = self._current_prices(holdings.keys())
        views: list[HoldingView] = []
        for holding in holdings.values():
            view = HoldingView(
                instrument_id=holding.instrument_id,
                quantity=holding.quantity,
                total_cost=holding.total_cost,
                avg_price=holding.avg_price,
                category=holding.category,
            )
            price = prices.get(holding.instrument_id)
            if price is not None:
                view.last_price = price
                view.market_value = holding.quantity * price
                view.unrealized_pnl = view.market_value - holding.total_cost
                if holding.total_cost > 0:
                    view.unrealized_pnl_pct = view.unrealized_pnl / holding.total_cost * 100
            views.append(view)

        total_value = sum(v.market_value for v in views if v.market_value is not None)
        if total_value > 0:
            for view in views:
                if view.market_value is not None:
                    view.weight_pct = view.market_value / total_value * 100
        return views

    def get_monthly_series(
        self,
        year: Optional[int] = None,
        category: Optional[str] = None,
        include_projection: bool = False,
    ) -> list[MonthlyValuationPoint]:
        """
        Month-end valuation series, optionally narrowed to a year or a category.

        With a category filter, market_value is that category's value and the
        cash balance is dropped, except for the "Cash" category which keeps
        only the cash balance. Returns and flows are not meaningful per
        category and are zeroed.
        """
        builder = MonthlyValuationBuilder()
        series = self._build_series(builder)
        if include_projection:
            series = builder.project(
                series, self._projection_months, self._projection_growth_rate
            )

        if year is not None:
            series = [p for p in series if p.period_key.startswith(f"{year:04d}-")]
        if category:
            series = [_narrow_to_category(p, category) for p in series]
        return series

    def get_performance_summary(self, strategy: Optional[dict] = None) -> PerformanceSummary:
        """
        Performance statistics of the realized series.

        `strategy` may carry target_amount, monthly_contribution,
        annual_growth_rate and initial_investment.
        """
        strategy = strategy or {}
        series = self._build_series(MonthlyValuationBuilder())
        return performance_analytics.summarize(
            series,
            initial_investment=strategy.get("initial_investment"),
            risk_free_rate=self._risk_free_rate,
            goal=strategy if strategy.get("target_amount") else None,
        )

    def get_cash_flow_summary(self) -> CashFlowSummary:
        return LedgerReplayer().cash_flow_summary(self._ledger())

    def get_current_prices(self, instrument_ids: Iterable[str]) -> dict[str, PriceResolution]:
        """Per-instrument price resolution; raises RefreshInProgressError when busy."""
        return self._resolver.resolve_current(instrument_ids)

    def _ledger(self) -> list[Transaction]:
        return self._transaction_repo.list_transactions()

    def _build_series(self, builder: MonthlyValuationBuilder) -> list[MonthlyValuationPoint]:
        ledger = self._ledger()
        transactions = LedgerReplayer().prepare(ledger)
        if not transactions:
            return []

        today = self._today()
        instrument_ids = sorted({t.instrument_id for t in transactions if not t.is_cash})
        price_tables = self._historical.get_price_tables(
            instrument_ids, transactions[0].occurred_at, today
        )
        current_prices = self._current_prices(instrument_ids)
        return builder.build(ledger, price_tables, current_prices, today=today)

    def _current_prices(self, instrument_ids: Iterable[str]) -> dict[str, float]:
        ids = list(instrument_ids)
        if not ids:
            return {}
        try:
            return self._resolver.current_prices(ids)
        except RefreshInProgressError:
            logger.info("Price refresh already running; using cached prices")
            return self._resolver.cached_prices(ids)


def _narrow_to_category(point: MonthlyValuationPoint, category: str) -> MonthlyValuationPoint:
    if category == CASH_CATEGORY:
        market_value, cash_balance = 0.0, point.cash_balance
    else:
        market_value, cash_balance = point.category_values.get(category, 0.0), 0.0
    return replace(
        point,
        market_value=market_value,
        cash_balance=cash_balance,
        net_cash_flow=0.0,
        period_return=0.0,
        deposits=0.0,
        withdrawals=0.0,
        purchases=0.0,
        sales=0.0,
        category_values={category: market_value} if category != CASH_CATEGORY else {},
    )
