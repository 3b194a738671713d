"""
Tests for bulk LRU-style eviction

These tests verify clear_least_recently_used():
- Removes ceil(n * portion) entries with the oldest write time
- Behaves as flush() for portion >= 1.0 or an empty pool
- Recency tracks writes, never reads

Run with: python -m pytest tests/test_eviction.py -v
"""

import math
import pytest
from kvpool.cache.pool import Pool


def fill(pool: Pool, clock, count: int, step: float = 1) -> None:
    """Write key1..keyN at strictly increasing timestamps."""
    for i in range(1, count + 1):
        pool.set(f"key{i}", "value")
        clock.advance(step)


class TestClearLeastRecentlyUsed:
    """Test clear_least_recently_used()."""

    def test_removes_oldest_half(self, pool: Pool, clock):
        """Test 12 keys, portion 0.5: the 6 oldest go, the 6 newest stay."""
        fill(pool, clock, 12)

        assert pool.clear_least_recently_used(0.5) is True

        for i in range(1, 7):
            assert pool.has(f"key{i}") is False
        for i in range(7, 13):
            assert pool.has(f"key{i}") is True

    def test_replace_refreshes_recency(self, pool: Pool, clock):
        """Test rewriting keys in reverse order reverses eviction order."""
        fill(pool, clock, 12)
        for i in range(12, 0, -1):
            pool.replace(f"key{i}", "rewritten")
            clock.advance(1)

        pool.clear_least_recently_used(0.5)

        for i in range(7, 13):
            assert pool.has(f"key{i}") is False
        for i in range(1, 7):
            assert pool.has(f"key{i}") is True

    @pytest.mark.parametrize("count,portion", [(10, 0.25), (7, 0.5), (3, 0.1), (100, 0.33)])
    def test_removes_ceil_count(self, pool: Pool, clock, count, portion):
        """Test exactly ceil(n * portion) entries are removed."""
        fill(pool, clock, count)

        pool.clear_least_recently_used(portion)

        assert pool.item_count() == count - math.ceil(count * portion)

    def test_default_portion(self, pool: Pool, clock):
        """Test the default portion is a quarter."""
        fill(pool, clock, 8)
        pool.clear_least_recently_used()
        assert pool.item_count() == 6
        assert pool.has("key1") is False
        assert pool.has("key2") is False

    @pytest.mark.parametrize("portion", [1.0, 1.5])
    def test_full_portion_flushes(self, pool: Pool, clock, portion):
        """Test portion >= 1.0 behaves like flush()."""
        fill(pool, clock, 5)

        assert pool.clear_least_recently_used(portion) is True
        assert pool.item_count() == 0

    def test_empty_pool(self, pool: Pool):
        """Test eviction on an empty pool."""
        assert pool.clear_least_recently_used(0.5) is True
        assert pool.item_count() == 0

    def test_zero_portion(self, pool: Pool, clock):
        """Test portion 0 removes nothing."""
        fill(pool, clock, 4)
        pool.clear_least_recently_used(0.0)
        assert pool.item_count() == 4

    def test_reads_do_not_protect(self, pool: Pool, clock):
        """Test get/has don't refresh recency."""
        fill(pool, clock, 4)
        pool.get("key1")
        pool.has("key1")

        pool.clear_least_recently_used(0.25)

        assert pool.has("key1") is False
        assert pool.item_count() == 3

    def test_ties_evict_from_oldest_group(self, pool: Pool, clock):
        """Test equal write times: removed keys all come from the oldest group."""
        old = {f"old{i}" for i in range(4)}
        for key in old:
            pool.set(key, "v")
        clock.advance(10)
        for i in range(4):
            pool.set(f"new{i}", "v")

        pool.clear_least_recently_used(0.25)

        remaining = set(pool._store)
        removed = (old | {f"new{i}" for i in range(4)}) - remaining
        assert len(removed) == 2
        assert removed <= old

    def test_ranks_by_write_time_not_insert_order(self, pool: Pool, clock):
        """Test a clock that steps back still ranks by write time."""
        pool.set("later", "v")
        clock.advance(-100)
        pool.set("earlier", "v")
        clock.advance(200)
        pool.set("latest", "v")

        pool.clear_least_recently_used(0.3)

        assert pool.has("earlier") is False
        assert pool.has("later") is True
        assert pool.has("latest") is True
