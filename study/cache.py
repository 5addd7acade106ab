"""
Scripture Study - Response Cache

One bounded, TTL-expiring cache shared by every fetcher:
- O(1) get/set with LRU eviction once ``max_entries`` is reached
- Lazy expiry on read plus an optional periodic sweep
- Thread-safe, so tasks and worker threads may share it
- Injectable monotonic clock for deterministic tests

Keys come from :func:`cache_key`, e.g. ``verse:John 3:16:kjv``.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Optional,
    TypeVar,
)

from opentelemetry import trace

from core.async_utils import run_periodically
from observability.logging import get_logger

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_MAX_ENTRIES = 5000


def cache_key(operation: str, reference: str, variant: str = "") -> str:
    """``cache_key("verse", "John 3:16", "kjv")`` -> ``"verse:John 3:16:kjv"``."""
    if variant:
        return f"{operation}:{reference}:{variant}"
    return f"{operation}:{reference}"


@dataclass
class CacheEntry(Generic[T]):
    """Stored value plus the clock reading at insertion."""

    value: T
    stored_at: float


@dataclass
class CacheStats:
    """Statistics for cache monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    entry_count: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "entry_count": self.entry_count,
        }


class TTLCache(Generic[T]):
    """
    LRU cache with bounded size and per-entry TTL.

    An entry is absent once ``clock() - stored_at > ttl_seconds``.

    Usage:
        cache = TTLCache(ttl_seconds=3600, max_entries=5000)
        cache.set(cache_key("verse", "John 3:16", "kjv"), result)
        result = cache.get(cache_key("verse", "John 3:16", "kjv"))
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Clock = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock

        self._cache: OrderedDict[str, CacheEntry[T]] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.stored_at > self.ttl_seconds

    def _evict_oldest(self) -> None:
        """Evict the least recently used entry. Must be called with lock held."""
        if self._cache:
            self._cache.popitem(last=False)
            self._stats.evictions += 1

    def get(self, key: str) -> Optional[T]:
        """
        Value for ``key`` if present and fresh, else None.

        A hit marks the entry most recently used.
        """
        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats.misses += 1
                return None

            if self._is_expired(entry, self._clock()):
                del self._cache[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: T) -> None:
        """Insert or overwrite, evicting the least recently used entry if full."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            while len(self._cache) >= self.max_entries:
                self._evict_oldest()

            self._cache[key] = CacheEntry(value=value, stored_at=self._clock())

    def delete(self, key: str) -> bool:
        """Remove a key from the cache."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()
            self._stats = CacheStats()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with tracer.start_as_current_span("cache.purge_expired") as span:
            with self._lock:
                now = self._clock()
                expired = [
                    key for key, entry in self._cache.items()
                    if self._is_expired(entry, now)
                ]
                for key in expired:
                    del self._cache[key]
                self._stats.expirations += len(expired)
            span.set_attribute("cache.purged", len(expired))

        if expired:
            logger.debug("Purged expired cache entries", count=len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        """Snapshot of the counters."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                expirations=self._stats.expirations,
                entry_count=len(self._cache),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        """True if ``key`` is present and fresh. Does not touch LRU order."""
        with self._lock:
            entry = self._cache.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._is_expired(entry, self._clock())


async def run_sweeper(cache: TTLCache[Any], interval_seconds: float) -> None:
    """
    Purge expired entries every ``interval_seconds`` until cancelled.

    Usage:
        task = asyncio.create_task(run_sweeper(cache, 300))
    """
    await run_periodically(interval_seconds, cache.purge_expired)
