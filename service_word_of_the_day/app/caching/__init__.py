"""
Word of the Day caching package.

Holds the in-memory result cache and the per-key locks that keep concurrent
misses from stampeding the upstream providers. Entries expire by TTL or by
explicit invalidation.
"""

from .result_cache import CacheEntry, ResultCache
from .single_flight import KeyedLocks

__all__ = ["CacheEntry", "ResultCache", "KeyedLocks"]
