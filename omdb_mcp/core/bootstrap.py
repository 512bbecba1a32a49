"""
Process wiring: builds the registry, cache, upstream client, service and
engine from one configuration object.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from omdb_mcp.cache.store import CacheStore
from omdb_mcp.core.config import OmdbMcpConfig
from omdb_mcp.mcp.definitions import ToolRegistry
from omdb_mcp.mcp.handlers import ProtocolEngine
from omdb_mcp.omdb.client import OmdbClient
from omdb_mcp.omdb.service import MovieService

logger = logging.getLogger("OmdbMcp.bootstrap")


@dataclass
class Runtime:
    """The process-wide objects shared by both transports."""
    config: OmdbMcpConfig
    cache: CacheStore
    client: OmdbClient
    service: MovieService
    engine: ProtocolEngine

    def close(self) -> None:
        self.client.close()


def build_cache(config: OmdbMcpConfig, clock: Optional[Callable[[], float]] = None) -> CacheStore:
    namespaces = {
        name: (section.ttl_seconds, section.max_entries)
        for name, section in config.cache.namespaces().items()
    }
    if clock is None:
        return CacheStore(namespaces)
    return CacheStore(namespaces, clock=clock)


def build_runtime(
    config: Optional[OmdbMcpConfig] = None,
    session: Optional[requests.Session] = None,
    clock: Optional[Callable[[], float]] = None,
) -> Runtime:
    config = config or OmdbMcpConfig.from_env()
    cache = build_cache(config, clock=clock)
    client = OmdbClient(
        api_key=config.omdb.api_key,
        api_url=config.omdb.api_url,
        timeout=config.omdb.timeout,
        session=session,
    )
    service = MovieService(
        client,
        cache,
        not_found_ttls={
            name: section.not_found_ttl_seconds
            for name, section in config.cache.namespaces().items()
        },
    )
    engine = ProtocolEngine(
        ToolRegistry(),
        service,
        server_info=config.server_info,
        tool_response_max_chars=config.transport.tool_response_max_chars,
    )
    logger.info(
        "OMDb MCP runtime ready (api_url=%s, tools=%d)",
        config.omdb.api_url,
        len(engine.registry.list()),
    )
    return Runtime(config=config, cache=cache, client=client, service=service, engine=engine)


def build_engine(
    config: Optional[OmdbMcpConfig] = None,
    session: Optional[requests.Session] = None,
) -> ProtocolEngine:
    return build_runtime(config, session=session).engine
