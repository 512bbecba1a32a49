from omdb_mcp.mcp.definitions import TOOL_DESCRIPTORS, ToolDescriptor, ToolRegistry
from omdb_mcp.mcp.errors import InternalError, InvalidParams, McpError, MethodNotFound, ParseError
from omdb_mcp.mcp.handlers import ProtocolEngine
from omdb_mcp.mcp.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse, parse_request

__all__ = [
    "ProtocolEngine",
    "ToolRegistry",
    "ToolDescriptor",
    "TOOL_DESCRIPTORS",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "parse_request",
    "McpError",
    "ParseError",
    "MethodNotFound",
    "InvalidParams",
    "InternalError",
]
