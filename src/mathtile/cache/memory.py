"""In-memory LRU render cache with per-entry TTL."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from mathtile.cache.stats import CacheEntry, CacheStats
from mathtile.errors.exceptions import CapacityConfigurationError
from mathtile.types import RenderResult

logger = logging.getLogger(__name__)

_DEFAULT_CAPACITY = 256
_DEFAULT_TTL_SECONDS = 3600.0


class RenderCache:
    """Fixed-capacity LRU cache keyed by render fingerprint.

    Expiry is checked lazily on ``get``; expired entries that are never read
    still count against capacity until LRU eviction reaches them. Every
    operation holds the lock for its whole read-check-touch or
    insert-evict sequence and never performs I/O.
    """

    def __init__(
        self,
        capacity: int = _DEFAULT_CAPACITY,
        ttl_seconds: float = _DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        _check_capacity(capacity)
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._capacity = capacity
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._stats = CacheStats(capacity=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: str) -> RenderResult | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._stats.misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: RenderResult, ttl: float | None = None) -> None:
        entry = CacheEntry(
            key=key,
            value=value,
            inserted_at=self._clock(),
            ttl_seconds=self._ttl_seconds if ttl is None else ttl,
        )
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = entry
            self._evict_over_capacity()

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def resize(self, capacity: int) -> None:
        """Change capacity, evicting least-recently-used entries if it shrank."""
        _check_capacity(capacity)
        with self._lock:
            self._capacity = capacity
            self._stats.capacity = capacity
            self._evict_over_capacity()

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            size_bytes = sum(e.size_bytes for e in self._store.values())
            return self._stats.model_copy(
                update={"entries": len(self._store), "size_mb": size_bytes / (1024 * 1024)}
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def _evict_over_capacity(self) -> None:
        while len(self._store) > self._capacity:
            key, _ = self._store.popitem(last=False)
            self._stats.evictions += 1
            logger.debug("Evicted LRU cache entry %r", key)


def _check_capacity(capacity: int) -> None:
    if capacity < 1:
        raise CapacityConfigurationError(
            f"Cache capacity must be at least 1, got {capacity}",
            capacity=capacity,
        )
