"""
MCP protocol engine.

Maps decoded JSON-RPC requests onto method handlers and tool handlers. Both
dispatch tables are built once per engine; unknown names fall through a
single path each. The engine keeps no per-session state, so one instance is
shared by every transport and worker thread.
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from omdb_mcp.core.config import McpServerInfoConfig
from omdb_mcp.mcp.definitions import (
    GET_MOVIE_BY_IMDB_ID,
    GET_MOVIE_DETAILS,
    SEARCH_MOVIES,
    ToolRegistry,
)
from omdb_mcp.mcp.errors import InternalError, InvalidParams, McpError, MethodNotFound, ParseError
from omdb_mcp.mcp.models import (
    InitializeParams,
    JsonRpcRequest,
    JsonRpcResponse,
    MovieByImdbIdArguments,
    MovieDetailsArguments,
    SearchMoviesArguments,
    ToolCallParams,
    parse_request,
)
from omdb_mcp.mcp.protocol import (
    METHOD_INITIALIZE,
    METHOD_PING,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    NOTIFICATION_INITIALIZED,
    NOTIFICATION_PREFIX,
    PROTOCOL_VERSION,
    protocol_version_matches,
)
from omdb_mcp.mcp.utils import (
    DEFAULT_TOOL_RESPONSE_MAX_CHARS,
    format_movie_details,
    format_search_results,
    truncate_tool_text,
)
from omdb_mcp.omdb.errors import OmdbError
from omdb_mcp.omdb.service import MovieService

logger = logging.getLogger("OmdbMcp.mcp.handlers")

_ArgsT = TypeVar("_ArgsT", bound=BaseModel)

REQUIRED_ARGUMENT_MESSAGES = {
    "title": "Title parameter is required",
    "imdbId": "imdbId parameter is required",
}


def _required_message(field: str) -> str:
    return REQUIRED_ARGUMENT_MESSAGES.get(field, f"{field} parameter is required")


class ProtocolEngine:
    """Stateless JSON-RPC dispatcher for the OMDb MCP tool set."""

    def __init__(
        self,
        registry: ToolRegistry,
        service: MovieService,
        server_info: Optional[McpServerInfoConfig] = None,
        tool_response_max_chars: int = DEFAULT_TOOL_RESPONSE_MAX_CHARS,
    ):
        self.registry = registry
        self.service = service
        self.server_info = server_info or McpServerInfoConfig()
        self.tool_response_max_chars = tool_response_max_chars

        self._methods: Dict[str, Callable[[JsonRpcRequest], Any]] = {
            METHOD_INITIALIZE: self._initialize,
            METHOD_TOOLS_LIST: self._list_tools,
            METHOD_TOOLS_CALL: self._call_tool,
            METHOD_PING: self._ping,
        }
        self._tools: Dict[str, Callable[[Mapping[str, Any]], str]] = {
            SEARCH_MOVIES: self._search_movies,
            GET_MOVIE_DETAILS: self._get_movie_details,
            GET_MOVIE_BY_IMDB_ID: self._get_movie_by_imdb_id,
        }
        unhandled = [name for name in registry.names() if name not in self._tools]
        if unhandled:
            raise ValueError(f"Registered tools without a handler: {unhandled}")

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def handle_message(self, payload: Union[str, bytes, Dict[str, Any]]) -> Optional[JsonRpcResponse]:
        """Decode a raw envelope and handle it; malformed input yields a ParseError response."""
        try:
            request = parse_request(payload)
        except ParseError as exc:
            logger.warning("Rejecting malformed JSON-RPC message: %s", exc.data)
            return JsonRpcResponse.failure(exc.request_id, exc.to_error())
        return self.handle(request)

    def handle(self, request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        """Handle one request. Returns None when no response must be sent."""
        if request.method.startswith(NOTIFICATION_PREFIX) or request.is_notification:
            self._handle_notification(request)
            return None

        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise MethodNotFound(f"Method not found: {request.method}")
            return JsonRpcResponse.success(request.id, handler(request))
        except McpError as exc:
            return JsonRpcResponse.failure(request.id, exc.to_error())
        except Exception as exc:
            logger.exception("Unexpected error handling method %s", request.method)
            error = InternalError(f"Internal error: {exc}")
            return JsonRpcResponse.failure(request.id, error.to_error())

    def _handle_notification(self, request: JsonRpcRequest) -> None:
        if request.method == NOTIFICATION_INITIALIZED:
            logger.info("Client initialization complete")
        elif request.method.startswith(NOTIFICATION_PREFIX):
            logger.debug("Ignoring notification: %s", request.method)
        else:
            logger.debug("Ignoring %s sent without an id", request.method)

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def _initialize(self, request: JsonRpcRequest) -> Dict[str, Any]:
        try:
            params = InitializeParams.model_validate(request.params or {})
        except ValidationError as exc:
            raise InvalidParams("Invalid params: initialize params are malformed", data=str(exc)) from exc

        if not protocol_version_matches(params.protocol_version):
            logger.warning(
                "Client requested protocol version %s; serving %s",
                params.protocol_version,
                PROTOCOL_VERSION,
            )
        if params.client_info:
            logger.info(
                "Client connected: %s %s",
                params.client_info.get("name", "unknown"),
                params.client_info.get("version", ""),
            )

        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "logging": {"level": "info"},
            },
            "serverInfo": {
                "name": self.server_info.name,
                "version": self.server_info.version,
                "description": self.server_info.description,
            },
        }

    def _list_tools(self, request: JsonRpcRequest) -> Dict[str, Any]:
        return {"tools": [descriptor.to_wire() for descriptor in self.registry.list()]}

    def _ping(self, request: JsonRpcRequest) -> Dict[str, Any]:
        return {"pong": True}

    def _call_tool(self, request: JsonRpcRequest) -> Dict[str, Any]:
        try:
            call = ToolCallParams.model_validate(request.params or {})
        except ValidationError as exc:
            raise InvalidParams(
                "Invalid params: tools/call requires a string name and an object of arguments",
                data=str(exc),
            ) from exc

        name = call.name
        handler = self._tools.get(name)
        if handler is None or self.registry.get(name) is None:
            raise InvalidParams(f"Invalid tool name: {name}")

        arguments = call.argument_map
        missing = self.registry.validate(name, arguments)
        if missing is not None:
            raise InvalidParams(_required_message(missing))

        started = time.monotonic()
        outcome = "error"
        try:
            text = handler(arguments)
            outcome = "success"
        except OmdbError as exc:
            logger.warning("Upstream failure in tool %s: %s", name, exc)
            raise InternalError(f"Internal error: {exc}") from exc
        finally:
            elapsed_ms = (time.monotonic() - started) * 1000.0
            logger.info(
                "Tool call telemetry: name=%s id=%r outcome=%s elapsed_ms=%.1f",
                name,
                request.id,
                outcome,
                elapsed_ms,
            )

        return {
            "content": [
                {"type": "text", "text": truncate_tool_text(text, name, self.tool_response_max_chars)}
            ]
        }

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    @staticmethod
    def _tool_arguments(model: Type[_ArgsT], name: str, arguments: Mapping[str, Any]) -> _ArgsT:
        try:
            return model.model_validate(dict(arguments))
        except ValidationError as exc:
            raise InvalidParams(f"Invalid arguments for tool {name}", data=str(exc)) from exc

    def _search_movies(self, arguments: Mapping[str, Any]) -> str:
        args = self._tool_arguments(SearchMoviesArguments, SEARCH_MOVIES, arguments)
        result = self.service.search(args.title, year=args.year, type=args.type)
        if not result.found:
            return f"No movies found: {result.miss_reason}"
        return format_search_results(result)

    def _get_movie_details(self, arguments: Mapping[str, Any]) -> str:
        args = self._tool_arguments(MovieDetailsArguments, GET_MOVIE_DETAILS, arguments)
        movie = self.service.by_title(args.title, year=args.year, plot=args.plot)
        if not movie.found:
            return f"Movie not found: {movie.miss_reason}"
        return format_movie_details(movie)

    def _get_movie_by_imdb_id(self, arguments: Mapping[str, Any]) -> str:
        args = self._tool_arguments(MovieByImdbIdArguments, GET_MOVIE_BY_IMDB_ID, arguments)
        movie = self.service.by_id(args.imdb_id, plot=args.plot)
        if not movie.found:
            return f"Movie not found: {movie.miss_reason}"
        return format_movie_details(movie)
