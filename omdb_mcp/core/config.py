"""
OMDb MCP Configuration
----------------------
Centralized configuration for the server, the upstream client and the cache.
Loads from environment variables and YAML config files.
"""

import os
import logging
from typing import Dict, Optional
import yaml
from pydantic import BaseModel, Field

from omdb_mcp.cache.store import (
    MOVIE_BY_IMDB_ID_NAMESPACE,
    MOVIE_BY_TITLE_NAMESPACE,
    MOVIE_SEARCH_NAMESPACE,
)
from omdb_mcp.version import __version__

logger = logging.getLogger("OmdbMcp.Config")

DEFAULT_OMDB_API_URL = "https://www.omdbapi.com/"
DEFAULT_SERVER_NAME = "OMDB Movie Database Server"
DEFAULT_SERVER_DESCRIPTION = "MCP Server for searching and retrieving movie information from OMDB API"
DEFAULT_CACHE_TTL_SECONDS = 3600.0
DEFAULT_CACHE_MAX_ENTRIES = 1000


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
        if value < minimum:
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s value '%s'; expected integer >= %d. Using %d.",
            name,
            raw,
            minimum,
            default,
        )
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
        if value <= 0:
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s value '%s'; expected positive float. Using %s.",
            name,
            raw,
            default,
        )
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class OmdbConfig(BaseModel):
    """Upstream OMDb API configuration."""
    api_url: str = DEFAULT_OMDB_API_URL
    api_key: str = ""
    timeout: float = 10.0


class CacheNamespaceConfig(BaseModel):
    """TTL and capacity for one cache namespace."""
    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    # None keeps domain misses for the same TTL as found results.
    not_found_ttl_seconds: Optional[float] = None


class CacheConfig(BaseModel):
    """Cache-aside store configuration, one section per upstream operation."""
    search: CacheNamespaceConfig = Field(default_factory=CacheNamespaceConfig)
    by_title: CacheNamespaceConfig = Field(default_factory=CacheNamespaceConfig)
    by_imdb_id: CacheNamespaceConfig = Field(default_factory=CacheNamespaceConfig)

    def namespaces(self) -> Dict[str, CacheNamespaceConfig]:
        return {
            MOVIE_SEARCH_NAMESPACE: self.search,
            MOVIE_BY_TITLE_NAMESPACE: self.by_title,
            MOVIE_BY_IMDB_ID_NAMESPACE: self.by_imdb_id,
        }


class McpServerInfoConfig(BaseModel):
    """Identity reported to clients in the initialize handshake."""
    name: str = DEFAULT_SERVER_NAME
    version: str = __version__
    description: str = DEFAULT_SERVER_DESCRIPTION


class TransportConfig(BaseModel):
    """Stdio transport and tool output limits."""
    stdio_enabled: bool = False
    dispatch_max_workers: int = 8
    dispatch_queue_limit: int = 64
    tool_response_max_chars: int = 32768
    log_file: Optional[str] = None


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"


class OmdbMcpConfig(BaseModel):
    """Root configuration for the OMDb MCP server."""
    omdb: OmdbConfig = Field(default_factory=OmdbConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    server_info: McpServerInfoConfig = Field(default_factory=McpServerInfoConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "OmdbMcpConfig":
        """
        Load configuration from environment variables.

        Environment variables override defaults:
        - OMDB_API_KEY / OMDB_API_URL / OMDB_API_TIMEOUT: Upstream access
        - OMDB_MCP_SERVER_NAME / _VERSION / _DESCRIPTION: Reported server identity
        - OMDB_MCP_CACHE_TTL_SECONDS / OMDB_MCP_CACHE_MAX_ENTRIES: Cache defaults
        - OMDB_MCP_CACHE_{SEARCH,BY_TITLE,BY_IMDB_ID}_{TTL_SECONDS,MAX_ENTRIES}: Per-namespace overrides
        - OMDB_MCP_CACHE_NOT_FOUND_TTL_SECONDS: TTL for cached "not found" results
        - MCP_STDIO_ENABLED: Serve over stdio instead of HTTP
        - OMDB_MCP_DISPATCH_MAX_WORKERS / OMDB_MCP_DISPATCH_QUEUE_LIMIT: Stdio dispatch pool
        - OMDB_MCP_TOOL_RESPONSE_MAX_CHARS: Tool text truncation limit
        - OMDB_MCP_HOST / OMDB_MCP_PORT / OMDB_MCP_LOG_LEVEL / OMDB_MCP_LOG_FILE
        """
        default_ttl = _env_float("OMDB_MCP_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)
        default_max = _env_int("OMDB_MCP_CACHE_MAX_ENTRIES", DEFAULT_CACHE_MAX_ENTRIES)
        not_found_ttl = _env_float("OMDB_MCP_CACHE_NOT_FOUND_TTL_SECONDS", None)

        def namespace(prefix: str) -> CacheNamespaceConfig:
            return CacheNamespaceConfig(
                ttl_seconds=_env_float(f"OMDB_MCP_CACHE_{prefix}_TTL_SECONDS", default_ttl),
                max_entries=_env_int(f"OMDB_MCP_CACHE_{prefix}_MAX_ENTRIES", default_max),
                not_found_ttl_seconds=not_found_ttl,
            )

        max_workers = _env_int("OMDB_MCP_DISPATCH_MAX_WORKERS", 8)

        return cls(
            omdb=OmdbConfig(
                api_url=os.environ.get("OMDB_API_URL", DEFAULT_OMDB_API_URL),
                api_key=os.environ.get("OMDB_API_KEY", ""),
                timeout=_env_float("OMDB_API_TIMEOUT", 10.0),
            ),
            cache=CacheConfig(
                search=namespace("SEARCH"),
                by_title=namespace("BY_TITLE"),
                by_imdb_id=namespace("BY_IMDB_ID"),
            ),
            server_info=McpServerInfoConfig(
                name=os.environ.get("OMDB_MCP_SERVER_NAME", DEFAULT_SERVER_NAME),
                version=os.environ.get("OMDB_MCP_SERVER_VERSION", __version__),
                description=os.environ.get("OMDB_MCP_SERVER_DESCRIPTION", DEFAULT_SERVER_DESCRIPTION),
            ),
            transport=TransportConfig(
                stdio_enabled=_env_flag("MCP_STDIO_ENABLED", False),
                dispatch_max_workers=max_workers,
                dispatch_queue_limit=max(
                    max_workers,
                    _env_int("OMDB_MCP_DISPATCH_QUEUE_LIMIT", max_workers * 8),
                ),
                tool_response_max_chars=_env_int("OMDB_MCP_TOOL_RESPONSE_MAX_CHARS", 32768, minimum=64),
                log_file=os.environ.get("OMDB_MCP_LOG_FILE") or None,
            ),
            server=ServerConfig(
                host=os.environ.get("OMDB_MCP_HOST", "127.0.0.1"),
                port=_env_int("OMDB_MCP_PORT", 8080),
                log_level=os.environ.get("OMDB_MCP_LOG_LEVEL", "info"),
            ),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "OmdbMcpConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
            return cls(**(data or {}))
        except FileNotFoundError:
            logger.warning("Config file not found: %s; using environment defaults", path)
            return cls.from_env()
