"""Abstract base classes for memoization backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable


class _Missing:
    """Sentinel type for cache misses, distinct from a cached ``None``."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class CacheBackend(ABC):
    """Abstract base class for cache backends."""

    def __init__(self, name: str):
        self.name = name
        self.hits = 0
        self.misses = 0

    @abstractmethod
    def get(self, key: Hashable, default: Any = MISSING) -> Any:
        """Get value from cache by key, or ``default`` on a miss."""

    @abstractmethod
    def set(self, key: Hashable, value: Any) -> None:
        """Store value under key, overwriting any previous value."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all cache entries."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored entries."""

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats = CacheStats()
        stats.hits = self.hits
        stats.misses = self.misses
        stats.size = len(self)
        return {**stats.to_dict(), "backend": self.name}

    def _record_hit(self) -> None:
        self.hits += 1

    def _record_miss(self) -> None:
        self.misses += 1


class CacheStats:
    """Cache statistics data structure."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.size = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate_percent": self.hit_rate,
            "size": self.size,
        }

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0
