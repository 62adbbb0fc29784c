"""Tests for the POI response cache."""

from __future__ import annotations

from backend.youpick.cache import PlacesCache, make_cache_key
from backend.youpick.matching.types import Intent


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_cache_key_rounds_coordinates():
    assert make_cache_key(30.26715, -97.74306, "food") == "30.267_-97.743_food"
    assert make_cache_key(30.2672, -97.7431, None) == "30.267_-97.743_surprise"
    assert make_cache_key(1, 2, Intent.WELLNESS) == make_cache_key(1, 2, "services")


class TestPlacesCache:
    def test_set_and_get(self):
        cache = PlacesCache(ttl_seconds=60, clock=FakeClock())
        cache.set("k", ["a"])
        assert cache.get("k") == ["a"]
        assert cache.get("missing") is None

    def test_entries_expire(self):
        clock = FakeClock()
        cache = PlacesCache(ttl_seconds=60, clock=clock)
        cache.set("k", "v")
        clock.advance(59)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None
        assert cache.stats()["size"] == 0

    def test_per_entry_ttl_override(self):
        clock = FakeClock()
        cache = PlacesCache(ttl_seconds=600, clock=clock)
        cache.set("short", "v", ttl_seconds=5)
        clock.advance(10)
        assert cache.get("short") is None

    def test_oldest_entry_evicted_past_capacity(self):
        cache = PlacesCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.stats()["evictions"] == 1

    def test_invalidate_single_key_and_all(self):
        cache = PlacesCache(clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.invalidate("a") == 1
        assert cache.invalidate("a") == 0
        assert cache.invalidate() == 2
        assert cache.stats()["size"] == 0

    def test_stats_track_hit_rate(self):
        cache = PlacesCache(name="test", clock=FakeClock())
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats["name"] == "test"
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50.0
