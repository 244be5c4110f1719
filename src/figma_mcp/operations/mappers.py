"""
Error mapping utilities.

Provides centralized exception-to-protocol-error mapping and a tool wrapper
so every tool renders failures the same way: tools return an error result,
resource handlers raise ProtocolError.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from ..errors import FigmaError, ProtocolError
from ..models import ToolResult
from .formatters import to_pretty_json

logger = logging.getLogger(__name__)

# JSON-RPC / MCP error codes
RESOURCE_NOT_FOUND = -32002
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ERROR_CODES = {
    "ResourceNotFoundError": RESOURCE_NOT_FOUND,
    "ValidationError": INVALID_PARAMS,
}


def error_code_for(exc: BaseException) -> int:
    """
    Map exception to a protocol error code.

    - -32002: Unknown resource URI (ResourceNotFoundError)
    - -32602: Invalid tool arguments (ValidationError)
    - -32603: Everything else, including expired URLs and download failures

    Args:
        exc: Exception to map

    Returns:
        Error code (INTERNAL_ERROR as fallback for unknown exceptions)
    """
    if isinstance(exc, ProtocolError):
        return exc.code
    return ERROR_CODES.get(type(exc).__name__, INTERNAL_ERROR)


def protocol_error_for(exc: BaseException, message: Optional[str] = None) -> ProtocolError:
    """Wrap ``exc`` as a ProtocolError, keeping its message unless overridden."""
    if isinstance(exc, ProtocolError) and message is None:
        return exc
    return ProtocolError(error_code_for(exc), message if message is not None else str(exc))


async def run_tool(error_prefix: str, func: Callable[[], Awaitable[Any]]) -> ToolResult:
    """
    Unified error wrapper for tool handlers.

    Awaits ``func`` and renders its JSON-ready result as pretty-printed text.
    FigmaError failures become an error result prefixed with
    ``error_prefix``, so the host sees a failed tool call rather than a
    broken session. Other exceptions propagate.

    Args:
        error_prefix: Human readable prefix, e.g. "Error fetching file"
        func: Zero-argument coroutine function producing the payload

    Returns:
        ToolResult with the payload or the error message
    """
    try:
        payload = await func()
    except FigmaError as e:
        logger.info(f"{error_prefix}: {e}")
        return ToolResult.error(f"{error_prefix}: {e}")
    return ToolResult.success(to_pretty_json(payload))
