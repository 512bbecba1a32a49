"""
OMDb MCP Server: HTTP API
=========================
HTTP surface for the protocol engine and the cache store:

  POST   /mcp  one JSON-RPC envelope in, one envelope out
  GET    /mcp/health  plain-text liveness check
  GET    /cache/stats  per-namespace cache counters
  DELETE /cache/clear  drop every cached entry
  DELETE /cache/clear/{name}  drop one namespace

The engine is synchronous; each request runs it via asyncio.to_thread() so
upstream calls never block the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from omdb_mcp.cache.store import CacheStore
from omdb_mcp.mcp.errors import InternalError
from omdb_mcp.mcp.handlers import ProtocolEngine
from omdb_mcp.mcp.models import JsonRpcResponse
from omdb_mcp.version import __version__

logger = logging.getLogger("OmdbMcp.api")

HEALTH_MESSAGE = "MCP Server is running"

# ---------------------------------------------------------------------------
# Module-level singletons, bound by create_app() before any request is served
# ---------------------------------------------------------------------------

_engine: Optional[ProtocolEngine] = None
_cache: Optional[CacheStore] = None


def init_api(engine: ProtocolEngine, cache: CacheStore) -> None:
    """Bind the HTTP routes to the engine and cache store singletons."""
    global _engine, _cache
    _engine = engine
    _cache = cache
    logger.info(
        "HTTP API initialised (engine=%s, cache=%s)",
        type(engine).__name__,
        type(cache).__name__,
    )


def _require_engine() -> ProtocolEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="MCP engine not initialized")
    return _engine


def _require_cache() -> CacheStore:
    if _cache is None:
        raise HTTPException(status_code=503, detail="Cache not initialized")
    return _cache


# ---------------------------------------------------------------------------
# /mcp
# ---------------------------------------------------------------------------

mcp_router = APIRouter(prefix="/mcp", tags=["mcp"])


@mcp_router.post("")
async def handle_mcp_request(request: Request) -> Response:
    """Process one MCP JSON-RPC request; notifications get 202 with no body."""
    engine = _require_engine()
    body = await request.body()
    try:
        response = await asyncio.to_thread(engine.handle_message, body)
    except Exception as exc:
        logger.exception("Unexpected error during RPC dispatch")
        error = InternalError(f"Internal error: {exc}").to_error()
        return JSONResponse(content=JsonRpcResponse.failure(None, error).to_wire())
    if response is None:
        return Response(status_code=202)
    return JSONResponse(content=response.to_wire())


@mcp_router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    return HEALTH_MESSAGE


# ---------------------------------------------------------------------------
# /cache
# ---------------------------------------------------------------------------

cache_router = APIRouter(prefix="/cache", tags=["cache"])


@cache_router.get("/stats")
async def cache_stats() -> Dict[str, Any]:
    cache = _require_cache()
    return {name: cache.stats(name).to_dict() for name in cache.namespaces()}


@cache_router.delete("/clear")
async def clear_all_caches() -> Dict[str, Any]:
    cache = _require_cache()
    removed = cache.invalidate_all()
    return {"message": "All caches cleared successfully", "removed": removed}


@cache_router.delete("/clear/{name}")
async def clear_cache(name: str) -> Dict[str, Any]:
    cache = _require_cache()
    try:
        removed = cache.invalidate(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Cache '{name}' not found")
    return {"message": f"Cache '{name}' cleared successfully", "removed": removed}


def create_app(engine: ProtocolEngine, cache: CacheStore) -> FastAPI:
    """Build the FastAPI application around an already-wired engine."""
    init_api(engine, cache)
    app = FastAPI(
        title="OMDb MCP Server",
        description="Model Context Protocol server for the OMDb movie database",
        version=__version__,
    )
    app.include_router(mcp_router)
    app.include_router(cache_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
