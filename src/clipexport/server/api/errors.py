"""Standardized API error response helper.

All error responses include:
- ``error``: Human-readable error message
- ``code``: Machine-readable error code string
- ``details`` (optional): Additional context for the error

Usage:
    from clipexport.server.api.errors import api_error, INVALID_REQUEST

    return api_error("video_path is required", code=INVALID_REQUEST)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from clipexport.exceptions import ClipExportError, ErrorKind

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
INVALID_JSON = "INVALID_JSON"
INPUT_ERROR = "INPUT_ERROR"
VALIDATION_FAILED = "VALIDATION_FAILED"
PARSE_ERROR = "PARSE_ERROR"
TOOL_NOT_AVAILABLE = "TOOL_NOT_AVAILABLE"
ALREADY_RUNNING = "ALREADY_RUNNING"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Error kind -> (code, HTTP status)
_KIND_RESPONSES: dict[ErrorKind, tuple[str, int]] = {
    ErrorKind.INPUT: (INPUT_ERROR, 400),
    ErrorKind.VALIDATION: (VALIDATION_FAILED, 400),
    ErrorKind.PARSE: (PARSE_ERROR, 422),
    ErrorKind.EXTERNAL_TOOL: (TOOL_NOT_AVAILABLE, 503),
    ErrorKind.ALREADY_RUNNING: (ALREADY_RUNNING, 409),
}


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (use constants from this module).
        status: HTTP status code (default 400).
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def error_response(error: ClipExportError) -> web.Response:
    """Map a ClipExportError to its error response by kind."""
    code, status = _KIND_RESPONSES.get(error.kind, (INTERNAL_ERROR, 500))
    return api_error(error.message, code=code, status=status)
