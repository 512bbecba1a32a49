"""
Cache-aside store
-----------------
Namespaced in-memory cache with a TTL and an LRU capacity bound per namespace.

Values are only ever written by callers after a real upstream call; the store
never loads anything on its own. Expiry is lazy: an entry past its TTL reads
as a miss and is dropped on that read (or swept before a capacity eviction).
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple

logger = logging.getLogger("OmdbMcp.cache.store")

MOVIE_SEARCH_NAMESPACE = "movieSearch"
MOVIE_BY_TITLE_NAMESPACE = "movieByTitle"
MOVIE_BY_IMDB_ID_NAMESPACE = "movieByImdbId"


@dataclass
class CacheEntry:
    """A cached value with its write time and absolute expiry."""
    value: Any
    written_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    """Point-in-time counters for one namespace."""
    size: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }


class _Namespace:
    __slots__ = ("ttl", "max_entries", "entries", "hits", "misses", "evictions")

    def __init__(self, ttl: float, max_entries: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self.entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0


class CacheStore:
    """Thread-safe namespaced cache with per-namespace TTL and LRU eviction.

    Namespaces are fixed at construction. Bursts in one namespace never evict
    entries of another. All operations hold a single reentrant lock, so
    concurrent readers and writers on different keys cannot corrupt state.

    Args:
        namespaces: mapping of namespace name to ``(ttl_seconds, max_entries)``
        clock: monotonic time source, injectable for tests
    """

    def __init__(
        self,
        namespaces: Dict[str, Tuple[float, int]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not namespaces:
            raise ValueError("at least one namespace is required")
        self._clock = clock
        self._lock = threading.RLock()
        self._namespaces: Dict[str, _Namespace] = {
            name: _Namespace(ttl, max_entries)
            for name, (ttl, max_entries) in namespaces.items()
        }

    def namespaces(self) -> Iterable[str]:
        return tuple(self._namespaces)

    def _namespace(self, name: str) -> _Namespace:
        try:
            return self._namespaces[name]
        except KeyError:
            raise KeyError(f"Unknown cache namespace: {name}") from None

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        """Return the live value for ``key`` or ``None`` on a miss."""
        with self._lock:
            ns = self._namespace(namespace)
            entry = ns.entries.get(key)
            if entry is None:
                ns.misses += 1
                return None
            if entry.expired(self._clock()):
                del ns.entries[key]
                ns.misses += 1
                return None
            ns.entries.move_to_end(key)
            ns.hits += 1
            return entry.value

    def put(self, namespace: str, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``; ``ttl`` overrides the namespace TTL."""
        with self._lock:
            ns = self._namespace(namespace)
            now = self._clock()
            ns.entries.pop(key, None)
            if len(ns.entries) >= ns.max_entries:
                self._evict_unlocked(ns, now)
            ns.entries[key] = CacheEntry(
                value=value,
                written_at=now,
                expires_at=now + (ttl if ttl is not None else ns.ttl),
            )

    def _evict_unlocked(self, ns: _Namespace, now: float) -> None:
        """Drop expired entries, then least recently used ones until there is room. Caller holds lock."""
        expired = [k for k, entry in ns.entries.items() if entry.expired(now)]
        for key in expired:
            del ns.entries[key]
        while len(ns.entries) >= ns.max_entries:
            ns.entries.popitem(last=False)
            ns.evictions += 1

    def invalidate(self, namespace: str) -> int:
        """Remove every entry of one namespace. Returns count removed."""
        with self._lock:
            ns = self._namespace(namespace)
            removed = len(ns.entries)
            ns.entries.clear()
        logger.info("Cleared cache namespace '%s' (%d entries)", namespace, removed)
        return removed

    def invalidate_all(self) -> int:
        """Remove every entry of every namespace. Returns count removed."""
        with self._lock:
            removed = 0
            for ns in self._namespaces.values():
                removed += len(ns.entries)
                ns.entries.clear()
        logger.info("Cleared all cache namespaces (%d entries)", removed)
        return removed

    def stats(self, namespace: str) -> CacheStats:
        with self._lock:
            ns = self._namespace(namespace)
            return CacheStats(
                size=len(ns.entries),
                hits=ns.hits,
                misses=ns.misses,
                evictions=ns.evictions,
            )
