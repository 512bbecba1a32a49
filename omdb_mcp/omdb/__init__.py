"""
OMDb upstream access: HTTP client, payload models and the cached lookup service.
"""

from omdb_mcp.omdb.client import OmdbClient
from omdb_mcp.omdb.errors import OmdbAPIError, OmdbConnectionError, OmdbError
from omdb_mcp.omdb.models import Movie, SearchResponse, SearchResult
from omdb_mcp.omdb.service import MovieService

__all__ = [
    "OmdbClient",
    "MovieService",
    "Movie",
    "SearchResponse",
    "SearchResult",
    "OmdbError",
    "OmdbConnectionError",
    "OmdbAPIError",
]
