"""In-memory cache backend with optional LRU eviction."""

import threading
from collections import OrderedDict
from typing import Any, Callable, Hashable

from .base import CacheBackend, MISSING


class MemoryCacheBackend(CacheBackend):
    """Thread-safe in-memory cache.

    Entries live for the lifetime of the backend.  ``max_size=0`` means
    unbounded; otherwise the least recently used entry is evicted.
    """

    def __init__(self, max_size: int = 0, name: str = "memory"):
        super().__init__(name)
        self.max_size = max_size
        self.cache: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = MISSING) -> Any:
        """Get value from memory cache."""
        with self._lock:
            if key in self.cache:
                if self.max_size:
                    self.cache.move_to_end(key)
                self._record_hit()
                return self.cache[key]

            self._record_miss()
            return default

    def set(self, key: Hashable, value: Any) -> None:
        """Set value in memory cache."""
        with self._lock:
            self.cache[key] = value
            if self.max_size:
                self.cache.move_to_end(key)
                while len(self.cache) > self.max_size:
                    self.cache.popitem(last=False)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss.

        ``compute`` runs outside the lock; concurrent callers may both compute
        the same key and the last write wins.
        """
        value = self.get(key)
        if value is MISSING:
            value = compute()
            self.set(key, value)
        return value

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self.cache.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def get_stats(self):
        """Get memory cache statistics."""
        return {
            **super().get_stats(),
            "max_size": self.max_size,
            "eviction_policy": "LRU" if self.max_size else "none",
        }
