"""
Tests for the market data providers.

Uses mocks to avoid hitting CoinGecko and Yahoo Finance.
"""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
import requests

from wealthtrack.core.exceptions import ProviderError
from wealthtrack.providers import (
    CoinGeckoProvider,
    StubMarketDataProvider,
    YahooChartTransport,
    YahooHistoricalProvider,
    YFinanceTransport,
    get_crypto_id,
    is_crypto,
)
from wealthtrack.providers import yahoo_provider


def http_response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock(status_code=status_code)
    response.json.return_value = payload
    return response


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


class TestCryptoClassification:
    @pytest.mark.parametrize("instrument_id", ["BTC", "btc", "BTC-EUR", "ETH-USD", "SOL"])
    def test_crypto(self, instrument_id):
        assert is_crypto(instrument_id)

    @pytest.mark.parametrize("instrument_id", ["AAPL", "VWCE.DE", "", None])
    def test_not_crypto(self, instrument_id):
        assert not is_crypto(instrument_id)

    def test_crypto_id(self):
        assert get_crypto_id("BTC-EUR") == "bitcoin"
        assert get_crypto_id("avax") == "avalanche-2"
        assert get_crypto_id("NEWCOIN") == "newcoin"


# -----------------------------------------------------------------------------
# CoinGecko
# -----------------------------------------------------------------------------


class TestCoinGeckoProvider:
    """One batched simple/price call; results keyed by the caller's ids."""

    def test_batched_quotes(self):
        session = MagicMock()
        session.get.return_value = http_response(payload={
            "bitcoin": {"eur": 58200.0, "eur_24h_change": 2.0, "last_updated_at": 1718454600},
            "ethereum": {"eur": 2950.0},
        })
        provider = CoinGeckoProvider(vs_currency="EUR", session=session)

        quotes = provider.get_quotes(["BTC-EUR", "ETH"])

        session.get.assert_called_once()
        params = session.get.call_args.kwargs["params"]
        assert params["ids"] == "bitcoin,ethereum"
        assert params["vs_currencies"] == "eur"
        assert quotes["BTC-EUR"]["price"] == 58200.0
        assert quotes["BTC-EUR"]["change"] == pytest.approx(1164.0)
        assert quotes["BTC-EUR"]["asOf"].startswith("2024-06-15T12:30:00")
        assert quotes["ETH"]["asOf"] is None

    def test_missing_coin_is_omitted(self):
        session = MagicMock()
        session.get.return_value = http_response(payload={"bitcoin": {"eur": 58200.0}})

        quotes = CoinGeckoProvider(session=session).get_quotes(["BTC", "DOGE"])

        assert list(quotes) == ["BTC"]

    def test_http_error_raises(self):
        session = MagicMock()
        session.get.return_value = http_response(status_code=429)

        with pytest.raises(ProviderError, match="HTTP 429"):
            CoinGeckoProvider(session=session).get_quotes(["BTC"])

    def test_network_error_raises(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")

        with pytest.raises(ProviderError):
            CoinGeckoProvider(session=session).get_quotes(["BTC"])

    def test_empty_request_makes_no_call(self):
        session = MagicMock()

        assert CoinGeckoProvider(session=session).get_quotes([]) == {}
        session.get.assert_not_called()


# -----------------------------------------------------------------------------
# Yahoo transports
# -----------------------------------------------------------------------------


class TestYahooChartTransport:
    def test_price_from_meta(self):
        session = MagicMock(headers={})
        session.get.return_value = http_response(payload={
            "chart": {"result": [{"meta": {"regularMarketPrice": 118.4, "previousClose": 117.95}}]}
        })
        transport = YahooChartTransport(session=session)

        quote = transport.fetch_quote("VWCE.DE")

        assert quote["price"] == 118.4
        assert quote["change"] == pytest.approx(0.45)
        assert transport.name == "yahoo-chart:query1.finance.yahoo.com"
        assert "User-Agent" in session.headers

    def test_price_from_last_close(self):
        session = MagicMock(headers={})
        session.get.return_value = http_response(payload={
            "chart": {"result": [{"meta": {}, "indicators": {"quote": [{"close": [10.0, None, 11.5]}]}}]}
        })

        assert YahooChartTransport(session=session).fetch_quote("X")["price"] == 11.5

    @pytest.mark.parametrize(
        "response",
        [http_response(status_code=404), http_response(payload={"chart": {"result": []}})],
    )
    def test_failures_raise(self, response):
        session = MagicMock(headers={})
        session.get.return_value = response

        with pytest.raises(ProviderError):
            YahooChartTransport(session=session).fetch_quote("X")


class TestYFinanceTransport:
    def test_current_price_then_regular_market_price(self, monkeypatch):
        yf = MagicMock()
        yf.Ticker.return_value = MagicMock(info={"regularMarketPrice": 22.0, "previousClose": 21.5})
        monkeypatch.setattr(yahoo_provider, "_get_yf", lambda: yf)

        quote = YFinanceTransport().fetch_quote("X")

        assert quote["price"] == 22.0
        assert quote["change"] == pytest.approx(0.5)

    def test_library_error_raises(self, monkeypatch):
        yf = MagicMock()
        yf.Ticker.side_effect = RuntimeError("rate limited")
        monkeypatch.setattr(yahoo_provider, "_get_yf", lambda: yf)

        with pytest.raises(ProviderError, match="rate limited"):
            YFinanceTransport().fetch_quote("X")

    def test_default_order_puts_timed_transports_first(self):
        """
        GIVEN the default security transports
        WHEN they are listed
        THEN both chart hosts, which honor the timeout, come before yfinance
        """
        transports = yahoo_provider.default_transports(5)

        assert [t.name for t in transports] == [
            "yahoo-chart:query1.finance.yahoo.com",
            "yahoo-chart:query2.finance.yahoo.com",
            "yfinance",
        ]
        assert all(t._timeout == 5 for t in transports[:2])


class TestYahooHistoricalProvider:
    def test_monthly_closes(self, monkeypatch):
        hist = MagicMock(empty=False)
        hist.iterrows.return_value = [
            (datetime(2024, 1, 1), {"Close": 150.0}),
            (datetime(2024, 2, 1), {"Close": float("nan")}),
            (datetime(2024, 3, 1), {"Close": 170.0}),
        ]
        yf = MagicMock()
        yf.Ticker.return_value.history.return_value = hist
        monkeypatch.setattr(yahoo_provider, "_get_yf", lambda: yf)

        points = YahooHistoricalProvider().get_history("AAPL", date(2024, 1, 1), date(2024, 3, 31))

        assert points == [
            {"date": "2024-01-01", "price": 150.0},
            {"date": "2024-03-01", "price": 170.0},
        ]
        assert yf.Ticker.return_value.history.call_args.kwargs["interval"] == "1mo"

    def test_crypto_symbol_uses_vs_currency(self):
        provider = YahooHistoricalProvider(vs_currency="eur")

        assert provider.yahoo_symbol("BTC") == "BTC-EUR"
        assert provider.yahoo_symbol("ETH-USD") == "ETH-USD"
        assert provider.yahoo_symbol("AAPL") == "AAPL"


# -----------------------------------------------------------------------------
# Stub
# -----------------------------------------------------------------------------


class TestStubProvider:
    def test_known_prices(self, market_provider: StubMarketDataProvider):
        assert market_provider.fetch_quote("AAPL")["price"] == 185.5
        assert market_provider.get_quotes(["BTC-EUR"])["BTC-EUR"]["price"] == 58200.0

    def test_unknown_symbols_are_deterministic(self):
        first = StubMarketDataProvider(seed=7).fetch_quote("ZZZ")["price"]
        second = StubMarketDataProvider(seed=7).fetch_quote("ZZZ")["price"]

        assert first == second
        assert 50 <= first <= 250

    def test_unavailable_symbols_fail(self):
        stub = StubMarketDataProvider(unavailable=("AAPL", "BTC"))

        with pytest.raises(ProviderError):
            stub.fetch_quote("AAPL")
        assert stub.get_quotes(["BTC", "ETH"]).keys() == {"ETH"}

    def test_history_ends_at_last_price(self, market_provider):
        points = market_provider.get_history("AAPL", date(2024, 1, 15), date(2024, 6, 15))

        assert [p["date"] for p in points][:2] == ["2024-01-01", "2024-02-01"]
        assert len(points) == 6
        assert points[-1]["price"] == 185.5
        assert points[0]["price"] == round(185.5 * 0.9, 2)
