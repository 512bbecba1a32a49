"""
Cache-aside adapter in front of the OMDb client.

Each lookup normalizes its arguments, consults its cache namespace and, on a
miss, performs exactly one upstream call. Found results and domain misses are
cached; transport failures propagate and are never cached.
"""

import logging
import time
from typing import Callable, Dict, Hashable, Optional, TypeVar, Union

from omdb_mcp.cache.store import (
    MOVIE_BY_IMDB_ID_NAMESPACE,
    MOVIE_BY_TITLE_NAMESPACE,
    MOVIE_SEARCH_NAMESPACE,
    CacheStore,
)
from omdb_mcp.omdb.client import OmdbClient
from omdb_mcp.omdb.models import Movie, SearchResponse

logger = logging.getLogger("OmdbMcp.omdb.service")

DEFAULT_PLOT = "full"

_ResultT = TypeVar("_ResultT", bound=Union[SearchResponse, Movie])


def _clean(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace, preserving case; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class MovieService:
    """Movie lookups backed by ``OmdbClient`` and fronted by a ``CacheStore``."""

    def __init__(
        self,
        client: OmdbClient,
        cache: CacheStore,
        not_found_ttls: Optional[Dict[str, Optional[float]]] = None,
    ):
        self.client = client
        self.cache = cache
        self._not_found_ttls = dict(not_found_ttls or {})

    def _cached(
        self,
        namespace: str,
        key: Hashable,
        fetch: Callable[[], _ResultT],
    ) -> _ResultT:
        cached = self.cache.get(namespace, key)
        if cached is not None:
            logger.debug("Cache hit %s %r", namespace, key)
            return cached

        started = time.monotonic()
        result = fetch()
        elapsed_ms = (time.monotonic() - started) * 1000.0
        logger.info(
            "OMDb lookup %s %r found=%s elapsed_ms=%.1f",
            namespace,
            key,
            result.found,
            elapsed_ms,
        )

        ttl = None if result.found else self._not_found_ttls.get(namespace)
        self.cache.put(namespace, key, result, ttl=ttl)
        return result

    def search(self, title: str, year: Optional[str] = None, type: Optional[str] = None) -> SearchResponse:
        title_value = _clean(title)
        if title_value is None:
            raise ValueError("title is required")
        year_value = _clean(year)
        type_value = _clean(type)
        key = (title_value, year_value, type_value)
        return self._cached(
            MOVIE_SEARCH_NAMESPACE,
            key,
            lambda: self.client.search(title_value, year=year_value, type=type_value),
        )

    def by_title(self, title: str, year: Optional[str] = None, plot: Optional[str] = None) -> Movie:
        title_value = _clean(title)
        if title_value is None:
            raise ValueError("title is required")
        year_value = _clean(year)
        plot_value = _clean(plot) or DEFAULT_PLOT
        key = (title_value, year_value, plot_value)
        return self._cached(
            MOVIE_BY_TITLE_NAMESPACE,
            key,
            lambda: self.client.get_by_title(title_value, year=year_value, plot=plot_value),
        )

    def by_id(self, imdb_id: str, plot: Optional[str] = None) -> Movie:
        id_value = _clean(imdb_id)
        if id_value is None:
            raise ValueError("imdb_id is required")
        plot_value = _clean(plot) or DEFAULT_PLOT
        key = (id_value, plot_value)
        return self._cached(
            MOVIE_BY_IMDB_ID_NAMESPACE,
            key,
            lambda: self.client.get_by_imdb_id(id_value, plot=plot_value),
        )
