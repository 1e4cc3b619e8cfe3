"""
Historical price service: monthly close tables for the valuation series.

Raw observations come from a HistoricalPriceProvider (yfinance monthly closes
in production, the stub offline) and are reduced to one price per calendar
month. The last observation of a month wins.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from wealthtrack.core.concurrency import batch_timeout
from wealthtrack.core.timezone import month_key, parse_date
from wealthtrack.providers.market_data_provider import HistoricalPriceProvider

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0


def _observation_date(raw) -> Optional[date]:
    try:
        return parse_date(raw.get("date"))
    except (ValueError, OverflowError, TypeError, AttributeError):
        return None


def _observation_price(raw) -> Optional[float]:
    try:
        price = float(raw.get("price"))
    except (TypeError, ValueError, AttributeError):
        return None
    if math.isnan(price) or math.isinf(price) or price <= 0:
        return None
    return price


def build_month_table(raw_series: Optional[Sequence[dict]]) -> dict[str, float]:
    """
    Reduce raw {date, price} observations to {"YYYY-MM": price}.

    Observations are sorted by date first so the chronologically last one of
    each month wins regardless of input order. Undated, non-numeric and
    non-positive observations are dropped. Empty input gives an empty table.
    """
    observations: list[tuple[date, float]] = []
    for raw in raw_series or []:
        obs_date = _observation_date(raw)
        price = _observation_price(raw)
        if obs_date is None or price is None:
            continue
        observations.append((obs_date, price))

    table: dict[str, float] = {}
    for obs_date, price in sorted(observations, key=lambda o: o[0]):
        table[month_key(obs_date)] = price
    return table


class HistoricalPriceService:
    """
    Fetch monthly price tables for many instruments in parallel.

    A provider error or timeout for one instrument yields an empty table for
    that instrument only.
    """

    def __init__(
        self,
        provider: HistoricalPriceProvider,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = 8,
    ):
        self._provider = provider
        self._fetch_timeout = fetch_timeout_seconds
        self._max_workers = max_workers

    def get_price_tables(
        self,
        instrument_ids: Iterable[str],
        start: date | datetime,
        end: date | datetime,
    ) -> dict[str, dict[str, float]]:
        """Return {instrument: {"YYYY-MM": price}} for every requested instrument."""
        ids = sorted({(i or "").strip().upper() for i in instrument_ids} - {""})
        start_date = parse_date(start)
        end_date = parse_date(end)
        if not ids:
            return {}
        if start_date is None or end_date is None or start_date > end_date:
            return {i: {} for i in ids}

        executor = ThreadPoolExecutor(max_workers=self._max_workers)
        try:
            futures = {
                executor.submit(self._fetch_table, i, start_date, end_date): i
                for i in ids
            }
            done, not_done = wait(
                futures,
                timeout=batch_timeout(self._fetch_timeout, len(futures), self._max_workers),
            )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        tables: dict[str, dict[str, float]] = {}
        for future in done:
            tables[futures[future]] = future.result()
        for future in not_done:
            logger.warning("Historical price fetch timed out for %s", futures[future])
            tables[futures[future]] = {}
        return tables

    def _fetch_table(self, instrument_id: str, start: date, end: date) -> dict[str, float]:
        try:
            raw_series = self._provider.get_history(instrument_id, start, end)
        except Exception as exc:
            logger.warning("Historical prices unavailable for %s: %s", instrument_id, exc)
            return {}
        table = build_month_table(raw_series)
        logger.debug("Built %d monthly prices for %s", len(table), instrument_id)
        return table
