"""Market data providers module."""

from wealthtrack.providers.market_data_provider import (
    RawQuote,
    RawHistoryPoint,
    CryptoPriceProvider,
    SecurityQuoteTransport,
    HistoricalPriceProvider,
)
from wealthtrack.providers.coingecko_provider import CoinGeckoProvider, is_crypto, get_crypto_id
from wealthtrack.providers.yahoo_provider import (
    YFinanceTransport,
    YahooChartTransport,
    YahooHistoricalProvider,
    default_transports,
)
from wealthtrack.providers.stub_provider import StubMarketDataProvider

__all__ = [
    "RawQuote",
    "RawHistoryPoint",
    "CryptoPriceProvider",
    "SecurityQuoteTransport",
    "HistoricalPriceProvider",
    "CoinGeckoProvider",
    "is_crypto",
    "get_crypto_id",
    "YFinanceTransport",
    "YahooChartTransport",
    "YahooHistoricalProvider",
    "default_transports",
    "StubMarketDataProvider",
]
