"""API route modules for the clipexport HTTP server.

- export.py: preview, start, stop, and status endpoints
- events.py: Server-Sent Events stream of export progress
- errors.py: error envelope helpers
"""

from aiohttp import web

from clipexport.server.api.events import get_events_routes
from clipexport.server.api.export import get_export_routes

__all__ = [
    "setup_api_routes",
]

_ROUTE_GETTERS = [
    get_export_routes,
    get_events_routes,
]


def setup_api_routes(app: web.Application) -> None:
    """Register all API routes with the application."""
    for get_routes in _ROUTE_GETTERS:
        for method, path, handler in get_routes():
            app.router.add_route(method, path, handler)
