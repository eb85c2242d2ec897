"""Unit tests for the memory cache backend."""

import threading

import pytest

from nmdedup.cache import MISSING, MemoryCacheBackend


class TestMemoryCacheBackend:
    """Test memory cache backend."""

    @pytest.fixture
    def memory_cache(self):
        return MemoryCacheBackend(name="test_memory")

    def test_basic_operations(self, memory_cache):
        """Test set, get and clear."""
        memory_cache.set("key1", "value1")
        assert memory_cache.get("key1") == "value1"
        assert "key1" in memory_cache
        assert "missing" not in memory_cache

        memory_cache.clear()
        assert memory_cache.get("key1") is MISSING
        assert len(memory_cache) == 0

    def test_none_is_a_cached_value(self, memory_cache):
        memory_cache.set(("request", "/ctx"), None)
        assert memory_cache.get(("request", "/ctx")) is None
        assert memory_cache.get(("other", "/ctx")) is MISSING
        assert memory_cache.get("absent", default="fallback") == "fallback"

    def test_unbounded_by_default(self, memory_cache):
        for i in range(500):
            memory_cache.set(f"key{i}", i)
        assert len(memory_cache) == 500
        assert memory_cache.get("key0") == 0

    def test_lru_eviction(self):
        """Least recently used entry goes first when a bound is set."""
        cache = MemoryCacheBackend(max_size=3)
        for i in range(3):
            cache.set(f"key{i}", i)

        cache.get("key0")  # key1 is now the least recently used
        cache.set("key3", 3)

        assert "key1" not in cache
        assert "key0" in cache
        assert "key3" in cache

    def test_cache_stats(self, memory_cache):
        stats = memory_cache.get_stats()
        assert stats["backend"] == "test_memory"
        assert stats["size"] == 0
        assert stats["hits"] == 0
        assert stats["misses"] == 0

        memory_cache.set("test_key", "test_value")
        memory_cache.get("test_key")  # Hit
        memory_cache.get("nonexistent")  # Miss

        stats = memory_cache.get_stats()
        assert stats["size"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0
        assert stats["eviction_policy"] == "none"

    def test_get_or_compute_computes_once(self, memory_cache):
        calls = []

        def compute():
            calls.append(1)
            return "result"

        assert memory_cache.get_or_compute("k", compute) == "result"
        assert memory_cache.get_or_compute("k", compute) == "result"
        assert len(calls) == 1

    def test_get_or_compute_does_not_cache_errors(self, memory_cache):
        def failing():
            raise PermissionError("denied")

        with pytest.raises(PermissionError):
            memory_cache.get_or_compute("k", failing)
        assert "k" not in memory_cache

    def test_concurrent_writes(self, memory_cache):
        """Concurrent writers of the same keys leave a consistent table."""

        def worker():
            for i in range(200):
                memory_cache.get_or_compute(i % 50, lambda i=i: (i % 50) * 2)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(memory_cache) == 50
        assert all(memory_cache.get(k) == k * 2 for k in range(50))
