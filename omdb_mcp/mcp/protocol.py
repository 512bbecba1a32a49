"""
OMDb MCP Protocol Constants
"""

from typing import Optional

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

# Standard JSON-RPC / MCP error codes (wire contract)
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Method names
METHOD_INITIALIZE = "initialize"
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"
METHOD_PING = "ping"
NOTIFICATION_INITIALIZED = "notifications/initialized"
NOTIFICATION_PREFIX = "notifications/"


def protocol_version_matches(version: Optional[str]) -> bool:
    """A missing version is accepted; a differing one is tolerated but reported by the caller."""
    return not version or version == PROTOCOL_VERSION
