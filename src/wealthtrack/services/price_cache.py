"""Price cache: TTL-checked snapshots over an injected store."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Mapping, Optional

from wealthtrack.core.timezone import now_local
from wealthtrack.domain.models import PriceSnapshot
from wealthtrack.repositories.protocols import PriceStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


class PriceCache:
    """
    Key/value cache of {instrument -> PriceSnapshot} with a time-to-live.

    Staleness is checked lazily on read; nothing is evicted in the background.
    Store failures degrade to a cache miss and are never raised to the caller.
    """

    def __init__(
        self,
        store: PriceStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        now: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._now = now

    def get(self, instrument_id: str) -> Optional[PriceSnapshot]:
        """Return the snapshot if it is younger than the TTL, else None."""
        try:
            snapshot = self._store.get(instrument_id)
        except Exception as exc:
            logger.warning("Price cache read failed for %s: %s", instrument_id, exc)
            return None
        if snapshot is None:
            return None
        if self._now() - snapshot.as_of >= self._ttl:
            logger.debug("Price cache expired for %s", instrument_id)
            return None
        return snapshot

    def get_many(self, instrument_ids: Iterable[str]) -> dict[str, PriceSnapshot]:
        """Fresh snapshots for the given instruments; stale and missing are omitted."""
        result = {}
        for instrument_id in instrument_ids:
            snapshot = self.get(instrument_id)
            if snapshot is not None:
                result[instrument_id] = snapshot
        return result

    def put(self, snapshots: Mapping[str, PriceSnapshot]) -> None:
        if not snapshots:
            return
        try:
            self._store.put_many(dict(snapshots))
        except Exception as exc:
            logger.warning("Price cache write failed (%d snapshots): %s", len(snapshots), exc)

    def clear(self) -> None:
        try:
            self._store.clear()
        except Exception as exc:
            logger.warning("Price cache clear failed: %s", exc)

    def age_seconds(self, instrument_id: str) -> Optional[int]:
        """Age of the stored snapshot, fresh or not; None when absent."""
        try:
            snapshot = self._store.get(instrument_id)
        except Exception:
            return None
        if snapshot is None:
            return None
        return int((self._now() - snapshot.as_of).total_seconds())
