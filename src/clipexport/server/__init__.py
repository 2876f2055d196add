"""HTTP server for clipexport.

Exposes preview, export, stop, and status over JSON, plus a
Server-Sent Events stream of export progress.
"""

from clipexport.server.app import create_app
from clipexport.server.broadcast import ProgressBroadcaster

__all__ = [
    "ProgressBroadcaster",
    "create_app",
]
