"""Tests for omdb_mcp.cache.store: namespaced TTL/LRU cache."""

import threading

import pytest

from omdb_fixtures import FakeClock
from omdb_mcp.cache.store import (
    MOVIE_BY_IMDB_ID_NAMESPACE,
    MOVIE_BY_TITLE_NAMESPACE,
    MOVIE_SEARCH_NAMESPACE,
    CacheStats,
    CacheStore,
)


def _store(clock, ttl=60.0, max_entries=3):
    return CacheStore(
        {
            MOVIE_SEARCH_NAMESPACE: (ttl, max_entries),
            MOVIE_BY_TITLE_NAMESPACE: (ttl, max_entries),
            MOVIE_BY_IMDB_ID_NAMESPACE: (ttl * 10, max_entries),
        },
        clock=clock,
    )


class TestGetPut:
    def test_miss_then_hit(self, clock):
        store = _store(clock)
        assert store.get(MOVIE_SEARCH_NAMESPACE, ("Matrix", None, None)) is None
        store.put(MOVIE_SEARCH_NAMESPACE, ("Matrix", None, None), "result")
        assert store.get(MOVIE_SEARCH_NAMESPACE, ("Matrix", None, None)) == "result"
        assert store.stats(MOVIE_SEARCH_NAMESPACE) == CacheStats(size=1, hits=1, misses=1, evictions=0)

    def test_put_replaces_existing_entry(self, clock):
        store = _store(clock)
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "old")
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "new")
        assert store.get(MOVIE_SEARCH_NAMESPACE, "k") == "new"
        assert store.stats(MOVIE_SEARCH_NAMESPACE).size == 1

    def test_namespaces_are_isolated(self, clock):
        store = _store(clock)
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "search")
        assert store.get(MOVIE_BY_TITLE_NAMESPACE, "k") is None

    def test_unknown_namespace_raises(self, clock):
        store = _store(clock)
        with pytest.raises(KeyError):
            store.get("nope", "k")
        with pytest.raises(KeyError):
            store.put("nope", "k", "v")
        with pytest.raises(KeyError):
            store.invalidate("nope")

    def test_rejects_invalid_namespace_settings(self):
        with pytest.raises(ValueError):
            CacheStore({})
        with pytest.raises(ValueError):
            CacheStore({MOVIE_SEARCH_NAMESPACE: (0, 10)})
        with pytest.raises(ValueError):
            CacheStore({MOVIE_SEARCH_NAMESPACE: (10, 0)})


class TestExpiry:
    def test_entry_expires_after_ttl(self, clock):
        store = _store(clock, ttl=60.0)
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "v")
        clock.advance(59.9)
        assert store.get(MOVIE_SEARCH_NAMESPACE, "k") == "v"
        clock.advance(0.1)
        assert store.get(MOVIE_SEARCH_NAMESPACE, "k") is None
        assert store.stats(MOVIE_SEARCH_NAMESPACE).size == 0

    def test_ttl_is_per_namespace(self, clock):
        store = _store(clock, ttl=60.0)
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "short")
        store.put(MOVIE_BY_IMDB_ID_NAMESPACE, "k", "long")
        clock.advance(120)
        assert store.get(MOVIE_SEARCH_NAMESPACE, "k") is None
        assert store.get(MOVIE_BY_IMDB_ID_NAMESPACE, "k") == "long"

    def test_put_ttl_override(self, clock):
        store = _store(clock, ttl=60.0)
        store.put(MOVIE_SEARCH_NAMESPACE, "k", "v", ttl=5.0)
        clock.advance(5.0)
        assert store.get(MOVIE_SEARCH_NAMESPACE, "k") is None

    def test_expired_entries_swept_before_lru_eviction(self, clock):
        store = _store(clock, ttl=60.0, max_entries=2)
        store.put(MOVIE_SEARCH_NAMESPACE, "a", 1, ttl=1.0)
        store.put(MOVIE_SEARCH_NAMESPACE, "b", 2)
        clock.advance(2.0)
        store.put(MOVIE_SEARCH_NAMESPACE, "c", 3)
        assert store.get(MOVIE_SEARCH_NAMESPACE, "b") == 2
        assert store.get(MOVIE_SEARCH_NAMESPACE, "c") == 3
        assert store.stats(MOVIE_SEARCH_NAMESPACE).evictions == 0


class TestLruEviction:
    def test_least_recently_used_is_evicted(self, clock):
        store = _store(clock, max_entries=3)
        for key in ("a", "b", "c"):
            store.put(MOVIE_SEARCH_NAMESPACE, key, key)
        # touch "a" so "b" becomes the eviction candidate
        assert store.get(MOVIE_SEARCH_NAMESPACE, "a") == "a"
        store.put(MOVIE_SEARCH_NAMESPACE, "d", "d")

        assert store.get(MOVIE_SEARCH_NAMESPACE, "b") is None
        for key in ("a", "c", "d"):
            assert store.get(MOVIE_SEARCH_NAMESPACE, key) == key
        stats = store.stats(MOVIE_SEARCH_NAMESPACE)
        assert stats.size == 3
        assert stats.evictions == 1

    def test_burst_in_one_namespace_does_not_evict_another(self, clock):
        store = _store(clock, max_entries=2)
        store.put(MOVIE_BY_TITLE_NAMESPACE, "keep", "kept")
        for i in range(50):
            store.put(MOVIE_SEARCH_NAMESPACE, i, i)
        assert store.get(MOVIE_BY_TITLE_NAMESPACE, "keep") == "kept"
        assert store.stats(MOVIE_SEARCH_NAMESPACE).size == 2
        assert store.stats(MOVIE_BY_TITLE_NAMESPACE).evictions == 0


class TestInvalidation:
    def test_invalidate_one_namespace(self, clock):
        store = _store(clock)
        store.put(MOVIE_SEARCH_NAMESPACE, "a", 1)
        store.put(MOVIE_SEARCH_NAMESPACE, "b", 2)
        store.put(MOVIE_BY_TITLE_NAMESPACE, "a", 1)
        assert store.invalidate(MOVIE_SEARCH_NAMESPACE) == 2
        assert store.get(MOVIE_SEARCH_NAMESPACE, "a") is None
        assert store.get(MOVIE_BY_TITLE_NAMESPACE, "a") == 1

    def test_invalidate_all(self, clock):
        store = _store(clock)
        store.put(MOVIE_SEARCH_NAMESPACE, "a", 1)
        store.put(MOVIE_BY_IMDB_ID_NAMESPACE, "a", 1)
        assert store.invalidate_all() == 2
        for name in store.namespaces():
            assert store.stats(name).size == 0


class TestStats:
    def test_hit_rate_and_dict(self, clock):
        store = _store(clock)
        store.put(MOVIE_SEARCH_NAMESPACE, "a", 1)
        store.get(MOVIE_SEARCH_NAMESPACE, "a")
        store.get(MOVIE_SEARCH_NAMESPACE, "a")
        store.get(MOVIE_SEARCH_NAMESPACE, "missing")
        stats = store.stats(MOVIE_SEARCH_NAMESPACE)
        assert stats.hit_rate == pytest.approx(2 / 3)
        assert stats.to_dict() == {
            "size": 1,
            "hits": 2,
            "misses": 1,
            "evictions": 0,
            "hit_rate": 0.6667,
        }

    def test_empty_hit_rate_is_zero(self, clock):
        assert _store(clock).stats(MOVIE_SEARCH_NAMESPACE).hit_rate == 0.0


def test_concurrent_writers_on_distinct_keys():
    store = CacheStore({MOVIE_SEARCH_NAMESPACE: (60.0, 10_000)}, clock=FakeClock())

    def writer(offset: int) -> None:
        for i in range(200):
            key = (offset, i)
            store.put(MOVIE_SEARCH_NAMESPACE, key, i)
            assert store.get(MOVIE_SEARCH_NAMESPACE, key) == i

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.stats(MOVIE_SEARCH_NAMESPACE).size == 1600
