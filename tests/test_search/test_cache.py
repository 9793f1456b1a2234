"""Tests for the evaluation cache."""

from sum100.search.cache import EvaluationCache


class TestEvaluationCache:
    """Test EvaluationCache."""

    def test_miss_then_hit(self):
        """Test lookup counters."""
        cache = EvaluationCache(max_size=10)

        assert cache.get("(1 + 2)") is None
        cache.set("(1 + 2)", 3.0)
        assert cache.get("(1 + 2)") == 3.0

        assert cache.misses == 1
        assert cache.hits == 1
        assert "(1 + 2)" in cache

    def test_zero_value_is_a_hit(self):
        """Test that a cached 0.0 is not mistaken for a miss."""
        cache = EvaluationCache()
        cache.set("(1 - 1)", 0.0)

        assert cache.get("(1 - 1)") == 0.0
        assert cache.hits == 1

    def test_cleared_when_full(self):
        """Test that the cache is emptied once it reaches max_size."""
        cache = EvaluationCache(max_size=2)
        cache.set("a", 1.0)
        cache.set("b", 2.0)
        cache.set("c", 3.0)

        assert len(cache) == 1
        assert cache.clears == 1
        assert "a" not in cache
        assert cache.get("c") == 3.0

    def test_clear(self):
        """Test explicit clear."""
        cache = EvaluationCache()
        cache.set("a", 1.0)
        cache.clear()

        assert len(cache) == 0
