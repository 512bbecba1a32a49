from omdb_mcp.cache.store import (
    MOVIE_BY_IMDB_ID_NAMESPACE,
    MOVIE_BY_TITLE_NAMESPACE,
    MOVIE_SEARCH_NAMESPACE,
    CacheStats,
    CacheStore,
)

__all__ = [
    "CacheStore",
    "CacheStats",
    "MOVIE_SEARCH_NAMESPACE",
    "MOVIE_BY_TITLE_NAMESPACE",
    "MOVIE_BY_IMDB_ID_NAMESPACE",
]
