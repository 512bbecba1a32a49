"""
OMDb MCP Server: movie metadata tools for AI assistants over the Model Context Protocol.
"""

from omdb_mcp.omdb import (
    Movie,
    MovieService,
    OmdbAPIError,
    OmdbClient,
    OmdbConnectionError,
    OmdbError,
    SearchResponse,
)
from omdb_mcp.version import __version__

__all__ = [
    "__version__",
    "OmdbClient",
    "MovieService",
    "Movie",
    "SearchResponse",
    "OmdbError",
    "OmdbConnectionError",
    "OmdbAPIError",
]
