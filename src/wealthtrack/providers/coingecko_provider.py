"""
CoinGecko crypto price provider.

Queried directly (no proxy) with one batched simple/price call per resolution.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from wealthtrack.core.exceptions import ProviderError
from wealthtrack.providers.market_data_provider import RawQuote

logger = logging.getLogger(__name__)

COINGECKO_API = "https://api.coingecko.com/api/v3"

# Map common crypto symbols to CoinGecko IDs
CRYPTO_ID_MAP: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "ADA": "cardano",
    "SOL": "solana",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "XRP": "ripple",
    "DOGE": "dogecoin",
    "SHIB": "shiba-inu",
    "LTC": "litecoin",
    "BCH": "bitcoin-cash",
    "ALGO": "algorand",
    "XLM": "stellar",
    "USDT": "tether",
    "USDC": "usd-coin",
    "DAI": "dai",
}


def base_symbol(instrument_id: str) -> str:
    """BTC from BTC-EUR, ETH from eth-usd."""
    return (instrument_id or "").split("-")[0].strip().upper()


def is_crypto(instrument_id: Optional[str]) -> bool:
    """Static classification: base symbol is a known crypto symbol."""
    if not instrument_id:
        return False
    return base_symbol(instrument_id) in CRYPTO_ID_MAP


def get_crypto_id(instrument_id: str) -> str:
    """CoinGecko id for a symbol; unknown symbols are passed through lower-cased."""
    symbol = base_symbol(instrument_id)
    return CRYPTO_ID_MAP.get(symbol, symbol.lower())


class CoinGeckoProvider:
    """Batch crypto quotes from the CoinGecko public API."""

    name = "coingecko"

    def __init__(
        self,
        vs_currency: str = "eur",
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._vs = vs_currency.lower()
        self._timeout = timeout_seconds
        self._http = session or requests.Session()

    def get_quotes(self, instrument_ids: list[str]) -> dict[str, RawQuote]:
        """Return raw quotes keyed by the caller's instrument id."""
        if not instrument_ids:
            return {}
        ids_by_instrument = {i: get_crypto_id(i) for i in instrument_ids}
        try:
            response = self._http.get(
                f"{COINGECKO_API}/simple/price",
                params={
                    "ids": ",".join(sorted(set(ids_by_instrument.values()))),
                    "vs_currencies": self._vs,
                    "include_24hr_change": "true",
                    "include_last_updated_at": "true",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, str(exc)) from exc
        if response.status_code != 200:
            raise ProviderError(self.name, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(self.name, "invalid JSON response") from exc

        result: dict[str, RawQuote] = {}
        for instrument_id, crypto_id in ids_by_instrument.items():
            data = payload.get(crypto_id)
            if not isinstance(data, dict):
                logger.info("CoinGecko has no data for %s (%s)", instrument_id, crypto_id)
                continue
            price = data.get(self._vs)
            change_pct = data.get(f"{self._vs}_24h_change")
            updated = data.get("last_updated_at")
            result[instrument_id] = {
                "price": price,
                "change": price * change_pct / 100 if price is not None and change_pct is not None else None,
                "changePercent": change_pct,
                "asOf": (
                    datetime.fromtimestamp(updated, tz=timezone.utc).isoformat()
                    if updated
                    else None
                ),
            }
        return result
