"""Protocol errors surfaced to MCP callers.

Every failure a tool call can produce is an `McpError` carrying one of the
JSON-RPC codes from `mcp.types`. Handlers build them through the helpers
below so the codes stay consistent across tools.
"""
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
)

__all__ = [
    "McpError",
    "method_not_found",
    "invalid_request",
    "invalid_params",
    "internal_error",
    "error_code",
]


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def method_not_found(message: str) -> McpError:
    return _error(METHOD_NOT_FOUND, message)


def invalid_request(message: str) -> McpError:
    """Missing precondition: no session, no API key, unknown request name."""
    return _error(INVALID_REQUEST, message)


def invalid_params(message: str) -> McpError:
    return _error(INVALID_PARAMS, message)


def internal_error(message: str) -> McpError:
    """Outbound HTTP failure or any unexpected handler exception."""
    return _error(INTERNAL_ERROR, message)


def error_code(exc: McpError) -> int:
    return exc.error.code
