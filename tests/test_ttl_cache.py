"""
Tests for utils/ttl_cache.py

Uses a fake clock so expiry is deterministic.
"""

import pytest

from utils.ttl_cache import TTLCache


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _make_cache(ttl: float = 10.0, max_entries: int | None = None) -> tuple[TTLCache, _FakeClock]:
    clock = _FakeClock()
    return TTLCache(ttl_seconds=ttl, max_entries=max_entries, clock=clock), clock


class TestExpiry:
    def test_value_live_before_ttl(self):
        cache, clock = _make_cache()
        cache.set("a", 1)
        clock.now += 9.9
        assert cache.get("a") == 1

    def test_value_gone_after_ttl(self):
        cache, clock = _make_cache()
        cache.set("a", 1)
        clock.now += 10.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_set_refreshes_expiry(self):
        cache, clock = _make_cache()
        cache.set("a", 1)
        clock.now += 8
        cache.set("a", 2)
        clock.now += 8
        assert cache.get("a") == 2

    def test_evict_expired(self):
        cache, clock = _make_cache()
        cache.set("old", 1)
        clock.now += 5
        cache.set("new", 2)
        clock.now += 6
        assert cache.evict_expired() == 1
        assert "new" in cache
        assert "old" not in cache


class TestBasics:
    def test_default(self):
        cache, _ = _make_cache()
        assert cache.get("missing", "fallback") == "fallback"

    def test_falsy_values_are_cached(self):
        cache, _ = _make_cache()
        cache.set("zero", 0)
        assert "zero" in cache
        assert cache.get("zero", 99) == 0

    def test_invalidate_and_clear(self):
        cache, _ = _make_cache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        cache.invalidate("never-set")
        assert "a" not in cache
        cache.clear()
        assert len(cache) == 0

    def test_max_entries_drops_oldest(self):
        cache, clock = _make_cache(max_entries=2)
        cache.set("a", 1)
        clock.now += 1
        cache.set("b", 2)
        clock.now += 1
        cache.set("c", 3)
        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=0)
