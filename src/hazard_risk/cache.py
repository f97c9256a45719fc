"""In-process observation cache with TTL and stale fallback."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from hazard_risk.errors import IngestionError
from hazard_risk.models import Location

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 600  # 10 minutes

CacheKey = tuple[str, float, float]


def cache_key(dataset: str, location: Location) -> CacheKey:
    """Key observations by dataset and coordinates rounded to 2 decimals.

    Query parameters (seismic radius, minimum magnitude, window, forecast
    days) are not part of the key. A cache must only be shared between
    callers using the same HazardRiskConfig; use one cache per config
    otherwise.
    """
    return (dataset, round(location.latitude, 2), round(location.longitude, 2))


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    payload: Any
    fetched_at: float


@dataclass(frozen=True)
class Fresh(Generic[T]):
    """Payload fetched within the TTL window."""

    data: T
    fetched_at: float
    status = "fresh"


@dataclass(frozen=True)
class Stale(Generic[T]):
    """Older payload served because the latest fetch failed."""

    data: T
    fetched_at: float
    status = "stale"


@dataclass(frozen=True)
class Unavailable:
    """No payload: the fetch failed and nothing was cached."""

    reason: str = ""
    status = "unavailable"

    @property
    def data(self) -> None:
        return None


Outcome = Union[Fresh[T], Stale[T], Unavailable]


class ObservationCache:
    """Keyed, time-bounded memoization of fetched observations.

    Expiry is advisory: an expired entry is not served as fresh, but is
    kept so that it can stand in when a refetch fails.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> CacheEntry | None:
        """Return the entry for *key* if it is still inside the TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > self.ttl_seconds:
            logger.debug("Cache expired for %s", key)
            return None
        return entry

    def get_any(self, key: CacheKey) -> CacheEntry | None:
        """Return the most recent entry for *key* regardless of age."""
        return self._entries.get(key)

    def put(self, key: CacheKey, payload: Any) -> CacheEntry:
        """Store *payload* under *key* with the current timestamp."""
        entry = CacheEntry(key=key, payload=payload, fetched_at=self._clock())
        self._entries[key] = entry
        logger.debug("Cached %s", key)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def fallback(self, key: CacheKey, reason: str = "") -> Stale | Unavailable:
        """Degraded outcome for *key* after a failed fetch."""
        entry = self.get_any(key)
        if entry is not None:
            logger.info("Serving stale %s from %.0fs ago", key, self._clock() - entry.fetched_at)
            return Stale(data=entry.payload, fetched_at=entry.fetched_at)
        return Unavailable(reason=reason)

    def fetch(self, key: CacheKey, loader: Callable[[], T]) -> Outcome[T]:
        """Return a fresh cached payload, or load, store and return a new one.

        Ingestion failures raised by *loader* are recovered into a Stale
        or Unavailable outcome; this method does not raise them.
        """
        entry = self.get(key)
        if entry is not None:
            logger.debug("Cache hit for %s", key)
            return Fresh(data=entry.payload, fetched_at=entry.fetched_at)

        try:
            payload = loader()
        except IngestionError as exc:
            logger.warning("Fetch failed for %s: %s", key, exc)
            return self.fallback(key, reason=str(exc))

        entry = self.put(key, payload)
        return Fresh(data=payload, fetched_at=entry.fetched_at)
