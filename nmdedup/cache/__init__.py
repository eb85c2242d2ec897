"""Memoization backends used by the resolution cache.

Caches are scoped to one build session: created with the session and
dropped with the process, with no invalidation in between.
"""

from .base import CacheBackend, CacheStats, MISSING
from .memory_cache import MemoryCacheBackend

__all__ = [
    "CacheBackend",
    "CacheStats",
    "MISSING",
    "MemoryCacheBackend",
]
