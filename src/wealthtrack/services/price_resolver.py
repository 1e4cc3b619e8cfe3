"""
Price resolver: current prices for a set of instruments.

Routes crypto-class instruments to the crypto provider (one batched call) and
security-class instruments to the security transports (one call per
instrument, with retry, exponential backoff and transport rotation). Requests
are fanned out on a thread pool and collected with a deadline, so a stalled
provider only leaves its own instruments unresolved.
"""

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

import pytz
from dateutil import parser as date_parser

from wealthtrack.core.concurrency import batch_timeout
from wealthtrack.core.exceptions import (
    ProviderError,
    RefreshInProgressError,
    ResolutionCancelled,
)
from wealthtrack.core.timezone import now_local
from wealthtrack.domain.models import PriceResolution, PriceSnapshot
from wealthtrack.providers.coingecko_provider import is_crypto
from wealthtrack.providers.market_data_provider import (
    CryptoPriceProvider,
    RawQuote,
    SecurityQuoteTransport,
)
from wealthtrack.services.price_cache import PriceCache

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0


def normalize_quote(
    instrument_id: str,
    raw: RawQuote,
    source: str,
    fallback_as_of: datetime,
) -> PriceSnapshot:
    """Validate an untrusted provider quote and turn it into a PriceSnapshot."""
    price = raw.get("price") if isinstance(raw, dict) else None
    try:
        price = float(price)
    except (TypeError, ValueError):
        raise ProviderError(source, f"{instrument_id}: missing or non-numeric price")
    if math.isnan(price) or math.isinf(price) or price <= 0:
        raise ProviderError(source, f"{instrument_id}: non-positive price {price}")

    as_of = fallback_as_of
    if raw.get("asOf"):
        try:
            as_of = date_parser.isoparse(str(raw["asOf"]))
        except ValueError:
            logger.debug("Unparseable asOf %r from %s", raw["asOf"], source)
    if as_of.tzinfo is None:
        as_of = pytz.utc.localize(as_of)

    return PriceSnapshot(
        instrument_id=instrument_id,
        price=price,
        as_of=as_of,
        source=source,
        change=_optional_float(raw.get("change")),
        change_percent=_optional_float(raw.get("changePercent")),
    )


def _optional_float(value) -> Optional[float]:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


class PriceResolver:
    """
    Resolve current prices with cache, fan-out and per-instrument failure status.

    Only one resolution runs at a time; a concurrent call raises
    RefreshInProgressError instead of duplicating the network fan-out.
    """

    def __init__(
        self,
        cache: PriceCache,
        crypto_provider: CryptoPriceProvider,
        security_transports: Sequence[SecurityQuoteTransport],
        retries: int = DEFAULT_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = 8,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = now_local,
    ):
        if not security_transports:
            raise ValueError("At least one security transport is required")
        self._cache = cache
        self._crypto = crypto_provider
        self._transports = list(security_transports)
        self._retries = max(retries, 0)
        self._backoff = backoff_seconds
        self._max_workers = max_workers
        self._sleep = sleep
        self._now = now
        # Worst case for one security: every attempt times out plus every backoff
        self._call_deadline = fetch_timeout_seconds * (self._retries + 1) + sum(
            self._backoff_delay(a) for a in range(self._retries)
        )
        self._in_flight = threading.Lock()

    def resolve_current(
        self,
        instrument_ids: Iterable[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> dict[str, PriceResolution]:
        """
        Resolve current prices for every instrument.

        Returns one PriceResolution per instrument (RESOLVED or UNRESOLVED).
        Raises ResolutionCancelled when cancel_event is set before results are
        committed; nothing is written to the cache in that case.
        """
        if not self._in_flight.acquire(blocking=False):
            raise RefreshInProgressError()
        try:
            return self._resolve(instrument_ids, cancel_event)
        finally:
            self._in_flight.release()

    def current_prices(self, instrument_ids: Iterable[str]) -> dict[str, float]:
        """Resolved prices only; unresolved instruments are omitted."""
        return {
            instrument_id: resolution.price
            for instrument_id, resolution in self.resolve_current(instrument_ids).items()
            if resolution.is_resolved
        }

    def cached_prices(self, instrument_ids: Iterable[str]) -> dict[str, float]:
        """Fresh cached prices only, without touching the network."""
        ids = {(i or "").strip().upper() for i in instrument_ids} - {""}
        return {i: s.price for i, s in self._cache.get_many(sorted(ids)).items()}

    @property
    def is_refreshing(self) -> bool:
        return self._in_flight.locked()

    def _resolve(
        self,
        instrument_ids: Iterable[str],
        cancel_event: Optional[threading.Event],
    ) -> dict[str, PriceResolution]:
        ids = sorted({(i or "").strip().upper() for i in instrument_ids} - {""})
        if not ids:
            return {}

        results: dict[str, PriceResolution] = {}
        for instrument_id, snapshot in self._cache.get_many(ids).items():
            results[instrument_id] = PriceResolution.resolved(snapshot)

        pending = [i for i in ids if i not in results]
        if not pending:
            return results

        crypto_ids = [i for i in pending if is_crypto(i)]
        security_ids = [i for i in pending if not is_crypto(i)]
        logger.info(
            "Resolving %d prices (%d cached, %d crypto, %d securities)",
            len(ids), len(results), len(crypto_ids), len(security_ids),
        )

        executor = ThreadPoolExecutor(max_workers=self._max_workers)
        futures: dict[Future, list[str]] = {}
        try:
            if crypto_ids:
                futures[executor.submit(self._fetch_crypto, crypto_ids)] = crypto_ids
            for ticker in security_ids:
                futures[executor.submit(self._fetch_security, ticker, cancel_event)] = [ticker]
            done, not_done = wait(
                futures,
                timeout=batch_timeout(self._call_deadline, len(futures), self._max_workers),
            )
        finally:
            # Do not wait for stalled providers
            executor.shutdown(wait=False, cancel_futures=True)

        fetched: dict[str, PriceResolution] = {}
        for future in done:
            fetched.update(future.result())
        for future in not_done:
            for instrument_id in futures[future]:
                logger.warning("Price fetch timed out for %s", instrument_id)
                fetched[instrument_id] = PriceResolution.unresolved(instrument_id, "timed out")

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Price resolution cancelled; discarding %d results", len(fetched))
            raise ResolutionCancelled()

        self._cache.put(
            {i: r.snapshot for i, r in fetched.items() if r.is_resolved and r.snapshot}
        )
        results.update(fetched)
        return results

    def _fetch_crypto(self, instrument_ids: list[str]) -> dict[str, PriceResolution]:
        """One batched call; a failed call fails every crypto instrument immediately."""
        source = getattr(self._crypto, "name", "crypto")
        try:
            raw_quotes = self._crypto.get_quotes(instrument_ids)
        except Exception as exc:
            logger.warning("Crypto provider failed for %s: %s", instrument_ids, exc)
            return {i: PriceResolution.unresolved(i, str(exc)) for i in instrument_ids}

        results = {}
        fallback_as_of = self._now()
        for instrument_id in instrument_ids:
            raw = raw_quotes.get(instrument_id)
            if raw is None:
                results[instrument_id] = PriceResolution.unresolved(instrument_id, "not found")
                continue
            try:
                snapshot = normalize_quote(instrument_id, raw, source, fallback_as_of)
            except ProviderError as exc:
                logger.warning("Rejected crypto quote: %s", exc.message)
                results[instrument_id] = PriceResolution.unresolved(instrument_id, exc.message)
            else:
                results[instrument_id] = PriceResolution.resolved(snapshot)
        return results

    def _fetch_security(
        self,
        ticker: str,
        cancel_event: Optional[threading.Event],
    ) -> dict[str, PriceResolution]:
        """Retry with exponential backoff, moving to the next transport after each failure."""
        last_error = "no attempt made"
        for attempt in range(self._retries + 1):
            if cancel_event is not None and cancel_event.is_set():
                return {ticker: PriceResolution.unresolved(ticker, "cancelled")}
            transport = self._transports[attempt % len(self._transports)]
            try:
                raw = transport.fetch_quote(ticker)
                snapshot = normalize_quote(ticker, raw, transport.name, self._now())
                return {ticker: PriceResolution.resolved(snapshot)}
            except Exception as exc:
                last_error = str(exc)
                logger.debug(
                    "Attempt %d/%d for %s via %s failed: %s",
                    attempt + 1, self._retries + 1, ticker, transport.name, exc,
                )
            if attempt < self._retries:
                self._sleep(self._backoff_delay(attempt))

        logger.warning("Price unresolved for %s: %s", ticker, last_error)
        return {ticker: PriceResolution.unresolved(ticker, last_error)}

    def _backoff_delay(self, attempt: int) -> float:
        return self._backoff * (2 ** attempt)
