"""JSON-RPC 2.0 envelopes and typed MCP parameter shapes.

The engine decodes the untyped wire bag into these models at its boundary;
handlers only ever see typed values.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from omdb_mcp.mcp.errors import ParseError
from omdb_mcp.mcp.protocol import JSONRPC_VERSION

RequestId = Union[StrictStr, StrictInt]


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """An inbound request; ``id`` absent (or null) marks a notification."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[RequestId] = None
    method: StrictStr
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """An outbound response carrying exactly one of ``result`` or ``error``."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[RequestId] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "JsonRpcResponse":
        if (self.result is None) == (self.error is None):
            raise ValueError("response must carry exactly one of result or error")
        return self

    @classmethod
    def success(cls, request_id: Optional[RequestId], result: Any) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Optional[RequestId], error: JsonRpcError) -> "JsonRpcResponse":
        return cls(id=request_id, error=error)

    def to_wire(self) -> Dict[str, Any]:
        """Plain dict for serialization; absent fields are omitted, ``id`` always kept."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result
        return message


def _salvage_id(payload: Any) -> Optional[RequestId]:
    if isinstance(payload, dict):
        candidate = payload.get("id")
        if isinstance(candidate, str) or (isinstance(candidate, int) and not isinstance(candidate, bool)):
            return candidate
    return None


def parse_request(raw: Union[str, bytes, Dict[str, Any]]) -> JsonRpcRequest:
    """Decode raw text or an already-parsed object into a request.

    Raises ``ParseError``; its ``request_id`` is set when the payload was
    readable enough to recover one.
    """
    payload: Any = raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
            raise ParseError("Parse error", data=str(exc)) from exc

    if not isinstance(payload, dict):
        raise ParseError("Parse error", data="request must be a JSON object")

    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(
            "Parse error",
            data=f"invalid request envelope: {exc.error_count()} validation error(s)",
            request_id=_salvage_id(payload),
        ) from exc


# ---------------------------------------------------------------------------
# MCP method parameters
# ---------------------------------------------------------------------------


class InitializeParams(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    protocol_version: Optional[str] = Field(default=None, alias="protocolVersion")
    capabilities: Optional[Dict[str, Any]] = None
    client_info: Optional[Dict[str, Any]] = Field(default=None, alias="clientInfo")


class ToolCallParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    arguments: Optional[Dict[str, Any]] = None

    @property
    def argument_map(self) -> Dict[str, Any]:
        return dict(self.arguments or {})


# ---------------------------------------------------------------------------
# Tool arguments
# ---------------------------------------------------------------------------


class _ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, populate_by_name=True)


class SearchMoviesArguments(_ToolArguments):
    title: str
    year: Optional[str] = None
    type: Optional[str] = None


class MovieDetailsArguments(_ToolArguments):
    title: str
    year: Optional[str] = None
    plot: Optional[str] = None


class MovieByImdbIdArguments(_ToolArguments):
    imdb_id: str = Field(alias="imdbId")
    plot: Optional[str] = None
