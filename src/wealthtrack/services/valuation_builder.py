"""
Monthly valuation builder.

Joins the replayed ledger with monthly price tables and current prices into a
gap-free series of month-end portfolio states, and optionally extends it with
projected months.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from wealthtrack.core.timezone import iter_months, month_end, month_key, now_local, shift_month
from wealthtrack.domain.models import CashEntryKind, MonthlyValuationPoint
from wealthtrack.services.ledger_replayer import LedgerRecord, LedgerReplayer

logger = logging.getLogger(__name__)

TRAILING_MONTHS = 6


def period_return(start_equity: float, end_equity: float, net_cash_flow: float) -> float:
    """Time-weighted return of one period; 0 when start + flow is not positive."""
    base = start_equity + net_cash_flow
    if base <= 0:
        return 0.0
    return (end_equity - base) / base


def lookup_price(
    instrument_id: str,
    period_key: str,
    price_tables: Mapping[str, Mapping[str, float]],
    current_prices: Mapping[str, float],
    current_period_key: str,
) -> Optional[float]:
    """
    Price of an instrument for one month, or None when every source is exhausted.

    Order: exact monthly price, current price for the current month, latest
    earlier monthly price, current price.
    """
    table = price_tables.get(instrument_id) or {}
    current = current_prices.get(instrument_id)
    if current is not None and current <= 0:
        current = None

    exact = table.get(period_key)
    if exact is not None and exact > 0:
        return exact
    if period_key == current_period_key and current is not None:
        return current
    earlier = [k for k, p in table.items() if k <= period_key and p is not None and p > 0]
    if earlier:
        return table[max(earlier)]
    return current


@dataclass
class _MonthFlows:
    deposits: float = 0.0
    withdrawals: float = 0.0
    purchases: float = 0.0
    sales: float = 0.0

    @property
    def net_cash_flow(self) -> float:
        return self.deposits - self.withdrawals


class MonthlyValuationBuilder:
    """Builds the realized monthly series and its forward projection."""

    def __init__(self, replayer: Optional[LedgerReplayer] = None):
        self._replayer = replayer or LedgerReplayer()
        self.warnings: list[str] = []

    def build(
        self,
        ledger: Iterable[LedgerRecord],
        price_tables: Mapping[str, Mapping[str, float]],
        current_prices: Mapping[str, float],
        today: Optional[date] = None,
    ) -> list[MonthlyValuationPoint]:
        """
        One point per month from the first transaction's month to today's month.

        An empty ledger gives an empty series. A held instrument with no price
        from any source contributes zero and is listed in missing_prices.
        """
        transactions = self._replayer.prepare(ledger)
        self.warnings = list(self._replayer.warnings)
        if not transactions:
            return []

        today = today or now_local().date()
        current_key = month_key(today)
        first = transactions[0].occurred_at

        flows: dict[str, _MonthFlows] = defaultdict(_MonthFlows)
        for entry in self._replayer.cash_ledger(transactions):
            month = flows[month_key(entry.date)]
            if entry.kind == CashEntryKind.DEPOSIT:
                month.deposits += entry.amount
            elif entry.kind == CashEntryKind.WITHDRAWAL:
                month.withdrawals -= entry.amount
            elif entry.kind == CashEntryKind.PURCHASE:
                month.purchases -= entry.amount
            else:
                month.sales += entry.amount

        points: list[MonthlyValuationPoint] = []
        cash_balance = 0.0
        previous_equity = 0.0
        for key in iter_months(first, max(today, first)):
            cutoff = month_end(key)
            month = flows.get(key, _MonthFlows())
            cash_balance += month.deposits - month.withdrawals - month.purchases + month.sales

            market_value = 0.0
            category_values: dict[str, float] = defaultdict(float)
            missing: list[str] = []
            for instrument_id, holding in self._replayer.holdings_as_of(transactions, cutoff).items():
                price = lookup_price(instrument_id, key, price_tables, current_prices, current_key)
                if price is None:
                    missing.append(instrument_id)
                    continue
                value = holding.quantity * price
                market_value += value
                category_values[holding.category] += value

            if missing:
                logger.warning("No price for %s in %s; valued at zero", ", ".join(missing), key)

            equity = market_value + cash_balance
            points.append(
                MonthlyValuationPoint(
                    period_key=key,
                    market_value=market_value,
                    cash_balance=cash_balance,
                    net_cash_flow=month.net_cash_flow,
                    period_return=period_return(previous_equity, equity, month.net_cash_flow),
                    deposits=month.deposits,
                    withdrawals=month.withdrawals,
                    purchases=month.purchases,
                    sales=month.sales,
                    category_values=dict(category_values),
                    missing_prices=tuple(missing),
                )
            )
            previous_equity = equity

        return points

    def project(
        self,
        series: list[MonthlyValuationPoint],
        months: int,
        annual_growth_rate: float,
    ) -> list[MonthlyValuationPoint]:
        """
        Extend the realized series by `months` projected points.

        Uses the trailing six-month averages of deposits, withdrawals and net
        investment (purchases minus sales) carried by the realized points, and
        compounds market value monthly at (1 + annual)^(1/12) - 1.
        """
        realized = [p for p in series if not p.is_projected]
        if not realized or months <= 0:
            return list(series)

        trailing = realized[-TRAILING_MONTHS:]
        count = len(trailing)
        income = sum(p.deposits for p in trailing) / count
        expense = sum(p.withdrawals for p in trailing) / count
        investment = sum(p.purchases - p.sales for p in trailing) / count
        monthly_rate = (1 + annual_growth_rate) ** (1 / 12) - 1 if annual_growth_rate > -1 else -1.0

        last = realized[-1]
        market_value = last.market_value
        cash_balance = last.cash_balance
        previous_equity = last.total_equity
        projected: list[MonthlyValuationPoint] = []
        for step in range(1, months + 1):
            market_value = market_value * (1 + monthly_rate) + investment
            cash_balance = cash_balance + income - expense - investment
            equity = market_value + cash_balance
            net_flow = income - expense
            projected.append(
                MonthlyValuationPoint(
                    period_key=shift_month(last.period_key, step),
                    market_value=market_value,
                    cash_balance=cash_balance,
                    net_cash_flow=net_flow,
                    deposits=income,
                    withdrawals=expense,
                    period_return=period_return(previous_equity, equity, net_flow),
                    is_projected=True,
                )
            )
            previous_equity = equity

        return list(series) + projected
