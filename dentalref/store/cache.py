"""
DentalRef - Caching Module
==========================

TTL-gated key/value cache for loaded datasets.

Entries are stamped when stored and expire once ``now - timestamp`` exceeds
the TTL. Both ``now`` and ``timestamp`` may be passed explicitly (epoch
seconds), which keeps expiry deterministic in tests; when omitted the
current wall-clock time is used.

Usage:
    from dentalref.store.cache import TTLCache

    cache = TTLCache(ttl_seconds=3600, capacity=16)
    materials = cache.get_or_load("materials", repository_loader)
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class CacheEntry(Generic[T]):
    """Cache entry stamped with its store time."""
    value: T
    timestamp: float


class TTLCache(Generic[T]):
    """
    TTL (Time To Live) cache with insertion-order eviction.

    Items expire a fixed duration after they were stored.
    """

    def __init__(self, ttl_seconds: float = 3600, capacity: int = 16):
        """
        Initialize TTL cache.

        Args:
            ttl_seconds: Time to live in seconds (default: 3600 = 1 hour)
            capacity: Maximum number of items
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self.cache: Dict[str, CacheEntry[T]] = {}
        self._hits = 0
        self._misses = 0

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def get(self, key: str, now: Optional[float] = None) -> Optional[T]:
        """Get item from cache if not expired."""
        now = time.time() if now is None else now
        entry = self.cache.get(key)

        if entry is not None:
            if not self._is_expired(entry, now):
                self._hits += 1
                return entry.value

            # Expired - remove
            del self.cache[key]
            logger.debug(f"Cache entry expired: {key}")

        self._misses += 1
        return None

    def put(self, key: str, value: T, timestamp: Optional[float] = None) -> None:
        """Add item to cache, stamped with ``timestamp`` (default: now)."""
        if key in self.cache:
            # Re-inserting moves the key to the newest position
            del self.cache[key]
        elif len(self.cache) >= self.capacity:
            oldest_key = next(iter(self.cache))
            del self.cache[oldest_key]

        self.cache[key] = CacheEntry(
            value=value,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value, calling ``loader`` and storing its result on a miss."""
        value = self.get(key)
        if value is None:
            value = loader()
            self.put(key, value)
        return value

    def invalidate(self, key: str) -> bool:
        """Drop one key. Returns True when it was present."""
        return self.cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cached items."""
        self.cache.clear()
        self._hits = 0
        self._misses = 0

    def evict_expired(self, now: Optional[float] = None) -> int:
        """Remove expired entries. Returns count of evicted."""
        now = time.time() if now is None else now
        expired_keys = [
            key for key, entry in self.cache.items()
            if self._is_expired(entry, now)
        ]

        for key in expired_keys:
            del self.cache[key]

        return len(expired_keys)

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    @property
    def size(self) -> int:
        """Current cache size."""
        return len(self.cache)

    @property
    def hit_rate(self) -> float:
        """Cache hit rate."""
        total = self._hits + self._misses
        return self._hits / total if total > 0 else 0

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        return {
            "capacity": self.capacity,
            "size": self.size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self.hit_rate,
        }
