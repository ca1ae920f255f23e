"""
In-memory TTL cache for composed word of the day results.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from shared.logging import get_logger


DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 10

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """A stored value and the moment it was written."""

    key: str
    value: V
    inserted_at: float

    def is_valid(self, now: float, ttl_seconds: float) -> bool:
        return now - self.inserted_at < ttl_seconds


class ResultCache(Generic[V]):
    """
    Bounded, TTL-based store keyed by string.

    Expiry is evaluated lazily on read: an expired entry behaves as absent and
    is dropped the first time it is seen. When a write would exceed
    ``max_entries`` the least recently used key is evicted. All operations are
    guarded by a lock so concurrent readers never need outside coordination.
    """

    def __init__(self,
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0
        self.logger = get_logger("wotd.result_cache")

    def get_if_valid(self, key: str) -> Optional[V]:
        """Return the cached value for ``key`` unless it is missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if not entry.is_valid(self._clock(), self.ttl_seconds):
                del self._entries[key]
                self._misses += 1
                self._expirations += 1
                self.logger.debug("Cache entry expired", key=key)
                return None

            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def put(self, key: str, value: V) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=self._clock())

            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self._evictions += 1
                self.logger.debug("Evicted least recently used entry", key=evicted_key)

    def invalidate(self, key: str) -> bool:
        """Remove ``key`` regardless of age. Returns True if something was removed."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            self.logger.info("Cache entry invalidated", key=key)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.is_valid(self._clock(), self.ttl_seconds)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }
