"""
Yahoo Finance security prices.

Two transports reach the same source: the yfinance library and the public
chart endpoint over plain HTTP. The resolver rotates between them on failure.
Historical monthly closes come from yfinance.
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import requests

from wealthtrack.core.exceptions import ProviderError
from wealthtrack.providers.coingecko_provider import base_symbol, is_crypto
from wealthtrack.providers.market_data_provider import RawHistoryPoint, RawQuote

logger = logging.getLogger(__name__)

_CHART_HOSTS = (
    "https://query1.finance.yahoo.com",
    "https://query2.finance.yahoo.com",
)
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    )
}


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not (isinstance(value, float) and math.isnan(value))


class YFinanceTransport:
    """
    Quotes through the yfinance library (Ticker.info).

    Ticker.info takes no timeout: the resolver stops waiting at its deadline, but
    the worker thread runs until yfinance returns.
    """

    name = "yfinance"

    def fetch_quote(self, ticker: str) -> RawQuote:
        yf = _get_yf()
        try:
            info = yf.Ticker(ticker).info
        except Exception as exc:  # yfinance raises a wide range of errors
            raise ProviderError(self.name, f"{ticker}: {exc}") from exc
        if not isinstance(info, dict):
            raise ProviderError(self.name, f"{ticker}: no quote data")

        # Price: currentPrice preferred, then regularMarketPrice
        price = info.get("currentPrice")
        if price is None:
            price = info.get("regularMarketPrice")
        prev_close = info.get("previousClose") or info.get("regularMarketPreviousClose")
        return _quote_from(price, prev_close)


class YahooChartTransport:
    """Quotes from the v8 chart endpoint over HTTP."""

    def __init__(
        self,
        host: str = _CHART_HOSTS[0],
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._host = host.rstrip("/")
        self._timeout = timeout_seconds
        self._http = session or requests.Session()
        self._http.headers.update(_HEADERS)
        self.name = f"yahoo-chart:{self._host.split('//')[-1]}"

    def fetch_quote(self, ticker: str) -> RawQuote:
        try:
            response = self._http.get(
                f"{self._host}/v8/finance/chart/{ticker}",
                params={"interval": "1d", "range": "1d"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, f"{ticker}: {exc}") from exc
        if response.status_code != 200:
            raise ProviderError(self.name, f"{ticker}: HTTP {response.status_code}")

        try:
            result = response.json()["chart"]["result"][0]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(self.name, f"{ticker}: invalid chart response") from exc

        meta = result.get("meta") or {}
        price = meta.get("regularMarketPrice")
        if price is None:
            closes = ((result.get("indicators") or {}).get("quote") or [{}])[0].get("close") or []
            closes = [c for c in closes if _is_number(c)]
            price = closes[-1] if closes else None
        prev_close = meta.get("previousClose") or meta.get("chartPreviousClose")
        return _quote_from(price, prev_close)


def _quote_from(price, prev_close) -> RawQuote:
    change = None
    change_pct = None
    if _is_number(price) and _is_number(prev_close) and prev_close:
        change = price - prev_close
        change_pct = change / prev_close * 100
    return {
        "price": price,
        "change": change,
        "changePercent": change_pct,
        "asOf": datetime.now(timezone.utc).isoformat(),
    }


def default_transports(timeout_seconds: float = 10.0) -> list:
    """
    Chart endpoint on both hosts first, yfinance last.

    The chart calls honor timeout_seconds; yfinance has no timeout, so a stalled
    call keeps its worker thread busy after the resolver has given up on it.
    """
    return [
        YahooChartTransport(host=host, timeout_seconds=timeout_seconds) for host in _CHART_HOSTS
    ] + [YFinanceTransport()]


class YahooHistoricalProvider:
    """Monthly closes from yfinance; crypto symbols are quoted against vs_currency."""

    def __init__(self, vs_currency: str = "eur"):
        self._vs = vs_currency.upper()

    def yahoo_symbol(self, instrument_id: str) -> str:
        if is_crypto(instrument_id) and "-" not in instrument_id:
            return f"{base_symbol(instrument_id)}-{self._vs}"
        return instrument_id

    def get_history(self, instrument_id: str, start: date, end: date) -> list[RawHistoryPoint]:
        yf = _get_yf()
        symbol = self.yahoo_symbol(instrument_id)
        try:
            hist = yf.Ticker(symbol).history(
                start=start,
                end=end + timedelta(days=1),
                interval="1mo",
                auto_adjust=False,
            )
        except Exception as exc:  # yfinance raises a wide range of errors
            raise ProviderError("yfinance", f"{symbol}: {exc}") from exc

        points: list[RawHistoryPoint] = []
        if hist is None or hist.empty:
            return points
        for idx, row in hist.iterrows():
            close = row.get("Close")
            if not _is_number(close):
                continue
            dt = idx.date() if hasattr(idx, "date") else idx
            points.append({"date": dt.isoformat(), "price": float(close)})
        return points
