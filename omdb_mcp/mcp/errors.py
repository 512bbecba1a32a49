"""
Protocol-level exceptions, one per JSON-RPC error code.
"""

from __future__ import annotations

from typing import Any, Optional

from omdb_mcp.mcp.protocol import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, PARSE_ERROR


class McpError(Exception):
    """Base class for errors that become a JSON-RPC error object."""

    code: int = INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        data: Optional[Any] = None,
        request_id: Optional[Any] = None,
    ) -> None:
        self.message = message
        self.data = data
        self.request_id = request_id
        super().__init__(message)

    def to_error(self) -> "JsonRpcError":
        from omdb_mcp.mcp.models import JsonRpcError
        return JsonRpcError(code=self.code, message=self.message, data=self.data)


class ParseError(McpError):
    """Raised when an inbound envelope cannot be decoded."""

    code = PARSE_ERROR


class MethodNotFound(McpError):
    """Raised when no handler exists for the requested method."""

    code = METHOD_NOT_FOUND


class InvalidParams(McpError):
    """Raised for unknown tools or missing/blank required arguments."""

    code = INVALID_PARAMS


class InternalError(McpError):
    """Raised for upstream failures and unexpected internal errors."""

    code = INTERNAL_ERROR
