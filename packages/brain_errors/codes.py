"""Numeric code constants for annotated errors.

MCP codes follow the JSON-RPC 2.0 error object specification. The server-error
range is reserved by JSON-RPC for implementation-defined errors; application
tool failures use the start of that range.
"""

from typing import Final

# JSON-RPC 2.0 standard errors
MCP_PARSE_ERROR: Final[int] = -32700
MCP_INVALID_REQUEST: Final[int] = -32600
MCP_METHOD_NOT_FOUND: Final[int] = -32601
MCP_INVALID_PARAMS: Final[int] = -32602
MCP_INTERNAL_ERROR: Final[int] = -32603

# Application-defined tool failure (server-error range)
MCP_TOOL_ERROR: Final[int] = -32000

MCP_STANDARD_CODES: Final[frozenset[int]] = frozenset(
    {
        MCP_PARSE_ERROR,
        MCP_INVALID_REQUEST,
        MCP_METHOD_NOT_FOUND,
        MCP_INVALID_PARAMS,
        MCP_INTERNAL_ERROR,
    }
)
MCP_RESERVED_MIN: Final[int] = -32768
MCP_RESERVED_MAX: Final[int] = -32000

HTTP_STATUS_MIN: Final[int] = 100
HTTP_STATUS_MAX: Final[int] = 599

# Separator used when auxiliary errors are rendered on one line.
INLINE_GLYPH: Final[str] = "↩"
