"""HTTP application for serve mode.

This module provides the aiohttp Application with the health check
endpoint, the export API, and the progress event stream.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass

from aiohttp import web

from clipexport import __version__
from clipexport.executor.interface import find_tool
from clipexport.jobs.service import ExportService
from clipexport.server.api import setup_api_routes
from clipexport.server.broadcast import ProgressBroadcaster

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy' or 'degraded'."""

    version: str
    """clipexport version string."""

    export_status: str
    """Status of the current or most recent export."""

    ffmpeg_available: bool
    """True if an ffmpeg executable could be located."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def create_app(service: ExportService) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        service: Export service shared by all requests. Exports started
            over HTTP report progress to the app's broadcaster.

    Returns:
        Configured aiohttp Application instance.
    """
    app = web.Application()

    # Store runtime state in app dict
    app["service"] = service
    app["broadcaster"] = ProgressBroadcaster()

    app.router.add_get("/health", health_handler)
    setup_api_routes(app)

    app.on_startup.append(_attach_broadcaster)
    app.on_shutdown.append(_close_broadcaster)

    return app


async def _attach_broadcaster(app: web.Application) -> None:
    broadcaster: ProgressBroadcaster = app["broadcaster"]
    broadcaster.attach_loop(asyncio.get_running_loop())


async def _close_broadcaster(app: web.Application) -> None:
    """Release open event streams so shutdown does not wait on them."""
    broadcaster: ProgressBroadcaster = app["broadcaster"]
    broadcaster.close()
    logger.debug("Closed progress broadcaster")


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns 200 when ffmpeg can be located, 503 (degraded) otherwise.
    """
    service: ExportService = request.app["service"]
    ffmpeg = await asyncio.to_thread(find_tool, "ffmpeg", service.configured_ffmpeg)
    ffmpeg_available = ffmpeg is not None

    health = HealthStatus(
        status="healthy" if ffmpeg_available else "degraded",
        version=__version__,
        export_status=service.orchestrator.status.value,
        ffmpeg_available=ffmpeg_available,
    )
    http_status = 200 if ffmpeg_available else 503
    return web.json_response(health.to_dict(), status=http_status)
