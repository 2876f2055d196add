"""Server-Sent Events (SSE) API handler.

Endpoints:
    GET /api/events/export - SSE stream of export progress events
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import web

from clipexport.server.api.errors import SERVICE_UNAVAILABLE, api_error
from clipexport.server.broadcast import ProgressBroadcaster

logger = logging.getLogger(__name__)

SSE_HEARTBEAT_INTERVAL = 15  # seconds
SSE_WRITE_TIMEOUT = 5.0  # seconds - timeout for writing to slow clients
MAX_SSE_CONNECTIONS = 100


async def _write_sse_event(
    response: web.StreamResponse,
    event_type: str,
    data: dict[str, Any],
    timeout: float = SSE_WRITE_TIMEOUT,
) -> bool:
    """Write an SSE event to the response stream.

    Args:
        response: The streaming response object.
        event_type: Event type name (e.g., 'progress', 'heartbeat').
        data: Event data to JSON-serialize.
        timeout: Write timeout in seconds.

    Returns:
        True if write succeeded, False if connection was closed or timed out.
    """
    payload = f"event: {event_type}\ndata: {json.dumps(data)}\n\n"
    try:
        await asyncio.wait_for(
            response.write(payload.encode("utf-8")),
            timeout=timeout,
        )
        return True
    except asyncio.TimeoutError:
        logger.warning("SSE write timeout - slow client")
        return False
    except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError):
        logger.debug("SSE client disconnected")
        return False


async def sse_export_handler(request: web.Request) -> web.StreamResponse:
    """Handle GET /api/events/export - SSE stream of progress events.

    On connect the current export status is sent as a ``status`` event,
    then every progress event as a ``progress`` event. A ``heartbeat``
    event keeps idle connections alive.
    """
    broadcaster: ProgressBroadcaster = request.app["broadcaster"]

    if broadcaster.subscriber_count >= MAX_SSE_CONNECTIONS:
        logger.warning(
            "SSE connection limit reached (%d), rejecting client=%s",
            MAX_SSE_CONNECTIONS,
            request.remote or "unknown",
        )
        resp = api_error(
            "Service temporarily unavailable - too many connections",
            code=SERVICE_UNAVAILABLE,
            status=503,
        )
        resp.headers["Retry-After"] = "10"
        return resp

    response = web.StreamResponse(
        status=200,
        headers={
            "Content-Type": "text/event-stream",
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
    await response.prepare(request)

    queue = broadcaster.subscribe()
    logger.debug("SSE export connection established client=%s", request.remote)
    try:
        service = request.app["service"]
        if not await _write_sse_event(response, "status", service.status()):
            return response

        while True:
            try:
                event = await asyncio.wait_for(
                    queue.get(), timeout=SSE_HEARTBEAT_INTERVAL
                )
            except asyncio.TimeoutError:
                if not await _write_sse_event(response, "heartbeat", {}):
                    break
                continue

            if event is None:
                # Server shutting down
                await _write_sse_event(response, "close", {"reason": "server_shutdown"})
                break

            if not await _write_sse_event(response, "progress", event.to_dict()):
                break
    finally:
        broadcaster.unsubscribe(queue)
        logger.debug("SSE export connection closed client=%s", request.remote)

    return response


def get_events_routes() -> list[tuple[str, str, object]]:
    """Return SSE event route definitions as (method, path, handler) tuples."""
    return [
        ("GET", "/api/events/export", sse_export_handler),
    ]
