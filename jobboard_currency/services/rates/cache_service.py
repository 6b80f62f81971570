from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from jobboard_currency.db.store import KeyValueStore
from jobboard_currency.models.constants import RATES_CACHE_KEY, RATES_TIMESTAMP_KEY

"""Persisted rate cache.

Purpose:
    Keep the last fetched rate table in the key/value store together with the
    epoch-millis time it was fetched, so a new session within the freshness
    window skips the network entirely.

Design:
    - The table and its timestamp are two store keys read and written as one
      unit. Either key missing, an unparseable timestamp or undecodable JSON
      means "no snapshot".
    - The clock is injected (seconds since epoch) so tests can move time.
    - No locking: concurrent writers race and the last write wins, which is
      fine for a replaceable snapshot.
"""

logger = logging.getLogger("jobboard_currency.rates.cache")

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateSnapshot:
    rates: Dict[str, float]
    fetched_at_ms: int

    @property
    def fetched_at(self) -> datetime:
        return datetime.fromtimestamp(self.fetched_at_ms / 1000, tz=timezone.utc)


class PersistedRateCache:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        ttl_seconds: int,
        clock: Clock = time.time,
    ):
        self._store = store
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def read(self) -> Optional[RateSnapshot]:
        values = self._store.get_many([RATES_CACHE_KEY, RATES_TIMESTAMP_KEY])
        raw_rates = values[RATES_CACHE_KEY]
        raw_ts = values[RATES_TIMESTAMP_KEY]
        if raw_rates is None or raw_ts is None:
            return None
        try:
            fetched_at_ms = int(raw_ts)
            decoded = json.loads(raw_rates)
        except ValueError:
            logger.warning("discarding unreadable rate cache entry")
            return None
        if not isinstance(decoded, dict):
            logger.warning("discarding rate cache entry with unexpected shape")
            return None
        try:
            rates = {str(k): float(v) for k, v in decoded.items()}
        except (TypeError, ValueError):
            logger.warning("discarding rate cache entry with non-numeric rates")
            return None
        return RateSnapshot(rates=rates, fetched_at_ms=fetched_at_ms)

    def is_fresh(self, snapshot: RateSnapshot) -> bool:
        return snapshot.fetched_at_ms > self.now_ms() - self._ttl_ms

    def read_fresh(self) -> Optional[RateSnapshot]:
        snapshot = self.read()
        if snapshot is not None and self.is_fresh(snapshot):
            return snapshot
        return None

    def write(self, rates: Dict[str, float]) -> RateSnapshot:
        snapshot = RateSnapshot(rates=dict(rates), fetched_at_ms=self.now_ms())
        self._store.set_many(
            {
                RATES_CACHE_KEY: json.dumps(snapshot.rates),
                RATES_TIMESTAMP_KEY: str(snapshot.fetched_at_ms),
            }
        )
        return snapshot

    def clear(self) -> None:
        self._store.delete(RATES_CACHE_KEY, RATES_TIMESTAMP_KEY)
