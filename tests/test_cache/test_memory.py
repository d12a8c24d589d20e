"""Tests for the in-memory LRU render cache."""

import threading

import pytest

from mathtile.cache.memory import RenderCache
from mathtile.errors.exceptions import CapacityConfigurationError
from mathtile.types import RenderResult, TileRecord


def _result(tag: int = 0, density: float = 1.0) -> RenderResult:
    tile = TileRecord(data=bytes([tag % 256] * 4), width=1, height=1)
    return RenderResult(tiles=(tile,), width=1, height=1, pixel_density=density)


class TestRenderCache:
    def test_get_set(self):
        cache = RenderCache()
        value = _result(1)
        cache.set("k1", value)
        assert cache.get("k1") is value

    def test_get_miss(self):
        cache = RenderCache()
        assert cache.get("nonexistent") is None
        assert len(cache) == 0

    def test_delete(self):
        cache = RenderCache()
        cache.set("k1", _result())
        cache.delete("k1")
        assert cache.get("k1") is None
        assert len(cache) == 0

    def test_delete_missing_is_noop(self):
        cache = RenderCache()
        cache.set("k1", _result())
        cache.delete("other")
        assert len(cache) == 1

    def test_overwrite_existing_key(self):
        cache = RenderCache()
        first, second = _result(1), _result(2)
        cache.set("k1", first)
        cache.set("k1", second)
        assert cache.get("k1") is second
        assert len(cache) == 1

    def test_clear(self):
        cache = RenderCache()
        cache.set("k1", _result())
        cache.set("k2", _result())
        cache.clear()
        assert len(cache) == 0
        assert cache.get("k1") is None

    def test_contains_has_no_side_effects(self):
        cache = RenderCache()
        cache.set("k1", _result())
        assert "k1" in cache
        assert "k2" not in cache
        assert cache.stats().hits == 0


class TestCapacity:
    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_capacity_below_one(self, capacity):
        with pytest.raises(CapacityConfigurationError):
            RenderCache(capacity=capacity)

    def test_capacity_error_is_value_error(self):
        with pytest.raises(ValueError):
            RenderCache(capacity=0)

    @pytest.mark.parametrize("capacity", [1, 3, 5])
    def test_size_is_min_of_capacity_and_inserted(self, capacity):
        cache = RenderCache(capacity=capacity)
        for i in range(1, 9):
            cache.set(f"k{i}", _result(i))
            assert len(cache) == min(capacity, i)

    def test_eviction_counted(self):
        cache = RenderCache(capacity=2)
        for i in range(5):
            cache.set(f"k{i}", _result(i))
        assert cache.stats().evictions == 3

    def test_resize_shrinks(self):
        cache = RenderCache(capacity=4)
        for i in range(4):
            cache.set(f"k{i}", _result(i))
        cache.resize(2)
        assert len(cache) == 2
        assert cache.capacity == 2
        assert cache.get("k0") is None
        assert cache.get("k3") is not None

    def test_resize_rejects_zero(self):
        cache = RenderCache(capacity=2)
        with pytest.raises(CapacityConfigurationError):
            cache.resize(0)
        assert cache.capacity == 2


class TestLRUOrder:
    def test_oldest_evicted(self):
        cache = RenderCache(capacity=3)
        for key in ["k1", "k2", "k3", "k4"]:
            cache.set(key, _result())
        assert cache.get("k1") is None
        assert all(cache.get(k) is not None for k in ["k2", "k3", "k4"])

    def test_get_refreshes_recency(self):
        cache = RenderCache(capacity=3)
        for key in ["k1", "k2", "k3"]:
            cache.set(key, _result())
        cache.get("k1")
        cache.set("k4", _result())
        assert "k2" not in cache
        assert "k1" in cache

    def test_overwrite_refreshes_recency(self):
        cache = RenderCache(capacity=2)
        cache.set("k1", _result())
        cache.set("k2", _result())
        cache.set("k1", _result())
        cache.set("k3", _result())
        assert "k2" not in cache
        assert "k1" in cache


class TestTTL:
    def test_expired_entry_returns_none(self, fake_clock):
        cache = RenderCache(clock=fake_clock)
        cache.set("k1", _result(), ttl=1)
        fake_clock.advance(2)
        assert cache.get("k1") is None
        assert cache.get("k1") is None
        assert len(cache) == 0

    def test_expiry_at_exact_boundary(self, fake_clock):
        cache = RenderCache(clock=fake_clock)
        cache.set("k1", _result(), ttl=5)
        fake_clock.advance(4.5)
        assert cache.get("k1") is not None
        fake_clock.advance(0.5)
        assert cache.get("k1") is None

    def test_default_ttl_used(self, fake_clock):
        cache = RenderCache(ttl_seconds=10, clock=fake_clock)
        cache.set("k1", _result())
        fake_clock.advance(9)
        assert cache.get("k1") is not None
        fake_clock.advance(1)
        assert cache.get("k1") is None

    def test_get_does_not_extend_ttl(self, fake_clock):
        cache = RenderCache(clock=fake_clock)
        cache.set("k1", _result(), ttl=3)
        fake_clock.advance(2)
        assert cache.get("k1") is not None
        fake_clock.advance(2)
        assert cache.get("k1") is None

    def test_reset_resets_insertion_time(self, fake_clock):
        cache = RenderCache(clock=fake_clock)
        cache.set("k1", _result(), ttl=3)
        fake_clock.advance(2)
        cache.set("k1", _result(), ttl=3)
        fake_clock.advance(2)
        assert cache.get("k1") is not None

    def test_expirations_counted(self, fake_clock):
        cache = RenderCache(clock=fake_clock)
        cache.set("k1", _result(), ttl=1)
        fake_clock.advance(1)
        cache.get("k1")
        stats = cache.stats()
        assert stats.expirations == 1
        assert stats.misses == 1


class TestIdempotentGet:
    def test_repeated_get_same_value_same_size(self):
        cache = RenderCache(capacity=4)
        cache.set("k1", _result(1))
        cache.set("k2", _result(2))
        first = cache.get("k1")
        second = cache.get("k1")
        assert first is second
        assert len(cache) == 2


class TestStats:
    def test_hits_and_misses(self):
        cache = RenderCache(capacity=4)
        cache.set("k1", _result())
        cache.get("k1")
        cache.get("k1")
        cache.get("missing")
        stats = cache.stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.entries == 1
        assert stats.capacity == 4
        assert stats.hit_rate == pytest.approx(2 / 3)
        assert stats.size_mb > 0


class TestConcurrency:
    def test_size_invariant_under_threads(self):
        cache = RenderCache(capacity=16)

        def worker(offset: int) -> None:
            for i in range(200):
                key = f"k{(offset * 200 + i) % 50}"
                cache.set(key, _result(i))
                cache.get(key)
                if i % 7 == 0:
                    cache.delete(key)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) <= 16
