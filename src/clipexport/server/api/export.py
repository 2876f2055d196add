"""Export API handlers.

Endpoints:
    POST /api/preview - Read a clip list CSV and report validation errors
    POST /api/export - Start an export (202; 409 if one is running)
    POST /api/export/stop - Request the running export to stop
    GET /api/export/status - Current job status and per-row states
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from aiohttp import web

from clipexport.exceptions import ClipExportError
from clipexport.jobs.orchestrator import ExportJobHandle
from clipexport.jobs.service import ExportService
from clipexport.server.api.errors import (
    INVALID_JSON,
    INVALID_REQUEST,
    api_error,
    error_response,
)
from clipexport.server.broadcast import ProgressBroadcaster

logger = logging.getLogger(__name__)


async def _read_json_object(request: web.Request) -> dict[str, Any] | web.Response:
    """Parse the request body as a JSON object, or build the error response."""
    if not request.body_exists:
        return {}
    try:
        body = await request.json()
    except Exception:
        return api_error("Invalid JSON body", code=INVALID_JSON)
    if not isinstance(body, dict):
        return api_error("Request body must be a JSON object", code=INVALID_REQUEST)
    return body


def _optional_str(body: dict[str, Any], key: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


def _edited_rows(body: dict[str, Any]) -> list[dict[str, Any]] | None:
    rows = body.get("edited_rows")
    if rows is None:
        return None
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise TypeError("edited_rows must be a list of objects")
    return rows


async def preview_handler(request: web.Request) -> web.Response:
    """Handle POST /api/preview.

    Body: ``{"csv_path": "..."}``. Returns rows, total_rows and
    validation_errors.
    """
    body = await _read_json_object(request)
    if isinstance(body, web.Response):
        return body

    try:
        csv_path = _optional_str(body, "csv_path")
    except TypeError as e:
        return api_error(str(e), code=INVALID_REQUEST)

    service: ExportService = request.app["service"]
    try:
        preview = await asyncio.to_thread(service.list_preview, csv_path)
    except ClipExportError as e:
        return error_response(e)

    return web.json_response(preview.to_dict())


async def start_export_handler(request: web.Request) -> web.Response:
    """Handle POST /api/export.

    Body::

        {
            "video_path": "...",
            "output_dir": "...",
            "csv_path": "...",          # or "edited_rows": [...]
            "settings": {...}           # optional, defaults from config
        }

    Returns 202 with the job id; progress is streamed on
    /api/events/export.
    """
    body = await _read_json_object(request)
    if isinstance(body, web.Response):
        return body

    try:
        video_path = _optional_str(body, "video_path")
        output_dir = _optional_str(body, "output_dir")
        csv_path = _optional_str(body, "csv_path")
        edited_rows = _edited_rows(body)
    except TypeError as e:
        return api_error(str(e), code=INVALID_REQUEST)

    settings = body.get("settings")
    if settings is not None and not isinstance(settings, dict):
        return api_error("settings must be an object", code=INVALID_REQUEST)

    service: ExportService = request.app["service"]
    broadcaster: ProgressBroadcaster = request.app["broadcaster"]

    def _start() -> ExportJobHandle:
        handle = service.start_export(
            video_path,
            output_dir,
            settings,
            csv_path=csv_path,
            edited_rows=edited_rows,
            wait=False,
            reporter=broadcaster,
        )
        assert isinstance(handle, ExportJobHandle)
        return handle

    try:
        handle = await asyncio.to_thread(_start)
    except ClipExportError as e:
        logger.info("Export request rejected: %s", e.message)
        return error_response(e)

    return web.json_response(
        {
            "job_id": handle.job_id,
            "status": handle.status.value,
            "total_rows": len(handle.row_states),
        },
        status=202,
    )


async def stop_export_handler(request: web.Request) -> web.Response:
    """Handle POST /api/export/stop.

    Body (optional): ``{"kill": true}`` to also terminate the running
    ffmpeg process. Idempotent; stopping when idle is not an error.
    """
    body = await _read_json_object(request)
    if isinstance(body, web.Response):
        return body

    kill = body.get("kill", False)
    if not isinstance(kill, bool):
        return api_error("kill must be a boolean", code=INVALID_REQUEST)

    service: ExportService = request.app["service"]
    requested = service.stop_export(kill=kill)
    return web.json_response(
        {"stop_requested": requested, "status": service.orchestrator.status.value}
    )


async def export_status_handler(request: web.Request) -> web.Response:
    """Handle GET /api/export/status."""
    service: ExportService = request.app["service"]
    return web.json_response(service.status())


def get_export_routes() -> list[tuple[str, str, object]]:
    """Return export route definitions as (method, path, handler) tuples."""
    return [
        ("POST", "/api/preview", preview_handler),
        ("POST", "/api/export", start_export_handler),
        ("POST", "/api/export/stop", stop_export_handler),
        ("GET", "/api/export/status", export_status_handler),
    ]
