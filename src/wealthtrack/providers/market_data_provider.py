"""Market data provider protocols and raw quote shape."""

from datetime import date
from typing import Optional, Protocol, TypedDict


class RawQuote(TypedDict, total=False):
    """
    Untrusted provider response for one instrument.

    Providers fill what they have; the resolver validates and normalizes.
    """

    price: Optional[float]
    change: Optional[float]
    changePercent: Optional[float]
    asOf: Optional[str]


class RawHistoryPoint(TypedDict):
    date: str
    price: float


class CryptoPriceProvider(Protocol):
    """
    Crypto-class price source, queried in one batch by normalized identifier.

    Raises ProviderError when the call itself fails. Instruments the provider
    does not know are omitted from the result.
    """

    name: str

    def get_quotes(self, instrument_ids: list[str]) -> dict[str, RawQuote]:
        ...


class SecurityQuoteTransport(Protocol):
    """
    One network route to the security-class price source.

    The resolver rotates between transports on failure. Raises ProviderError
    (or any network exception) when the quote cannot be fetched.
    """

    name: str

    def fetch_quote(self, ticker: str) -> RawQuote:
        ...


class HistoricalPriceProvider(Protocol):
    """Source of raw historical price observations."""

    def get_history(self, instrument_id: str, start: date, end: date) -> list[RawHistoryPoint]:
        """Return observations between start and end; empty when nothing is known."""
        ...
