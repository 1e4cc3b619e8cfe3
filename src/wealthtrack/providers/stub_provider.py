"""Stub market data provider for offline/testing use."""

import random
from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

from wealthtrack.core.exceptions import ProviderError
from wealthtrack.providers.coingecko_provider import base_symbol, is_crypto
from wealthtrack.providers.market_data_provider import RawHistoryPoint, RawQuote


# Deterministic fake (last, previous close) prices for common symbols
_STUB_PRICES: dict[str, tuple[float, float]] = {
    "VWCE.DE": (118.40, 117.95),
    "SWDA.MI": (97.10, 96.80),
    "AAPL": (185.50, 184.25),
    "MSFT": (378.25, 376.80),
    "SPY": (485.25, 484.10),
    "BTC": (58200.00, 57450.00),
    "ETH": (2950.00, 2990.00),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Serves as crypto provider, security transport and historical source at once.
    Unknown symbols get a seeded random price; historical series drift linearly
    towards the current price.
    """

    name = "stub"

    def __init__(self, seed: int = 42, unavailable: tuple[str, ...] = ()):
        """Initialize with random seed; symbols in `unavailable` always fail."""
        self._rng = random.Random(seed)
        self._unavailable = {s.upper() for s in unavailable}
        self._generated: dict[str, tuple[float, float]] = {}

    def _prices(self, instrument_id: str) -> tuple[float, float]:
        key = base_symbol(instrument_id) if is_crypto(instrument_id) else instrument_id.upper()
        if key in self._unavailable:
            raise ProviderError(self.name, f"{instrument_id}: unavailable")
        if key in _STUB_PRICES:
            return _STUB_PRICES[key]
        if key not in self._generated:
            last = round(50 + self._rng.random() * 200, 2)
            change_pct = (self._rng.random() - 0.5) * 0.04
            self._generated[key] = (last, round(last / (1 + change_pct), 2))
        return self._generated[key]

    def _quote(self, instrument_id: str) -> RawQuote:
        last, prev_close = self._prices(instrument_id)
        change = last - prev_close
        return {
            "price": last,
            "change": change,
            "changePercent": change / prev_close * 100,
            "asOf": datetime.now(timezone.utc).isoformat(),
        }

    def get_quotes(self, instrument_ids: list[str]) -> dict[str, RawQuote]:
        """Crypto batch interface: unavailable symbols are omitted."""
        result: dict[str, RawQuote] = {}
        for instrument_id in instrument_ids:
            try:
                result[instrument_id] = self._quote(instrument_id)
            except ProviderError:
                continue
        return result

    def fetch_quote(self, ticker: str) -> RawQuote:
        """Security transport interface."""
        return self._quote(ticker)

    def get_history(self, instrument_id: str, start: date, end: date) -> list[RawHistoryPoint]:
        """One observation on the first of every month, ending at 90%..100% of the last price."""
        last, _ = self._prices(instrument_id)
        months: list[date] = []
        current = date(start.year, start.month, 1)
        while current <= end:
            months.append(current)
            current += relativedelta(months=1)
        if not months:
            return []
        step = 0.1 / max(len(months) - 1, 1)
        return [
            {"date": d.isoformat(), "price": round(last * (0.9 + step * i), 2)}
            for i, d in enumerate(months)
        ]
