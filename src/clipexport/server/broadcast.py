"""Fan-out of export progress events to event-stream subscribers.

ProgressBroadcaster is a ProgressReporter: the orchestrator's dispatcher
thread calls on_event(), which hands the event to every subscriber queue
on the server's event loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from clipexport.domain.models import ProgressEvent

logger = logging.getLogger(__name__)

# Per-subscriber backlog before the oldest events are dropped
SUBSCRIBER_QUEUE_SIZE = 1000


class ProgressBroadcaster:
    """Thread-safe bridge from the export worker to asyncio subscribers."""

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._subscribers: set[asyncio.Queue[ProgressEvent | None]] = set()
        self._last_event: ProgressEvent | None = None
        self._lock = threading.Lock()

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Bind to the event loop that owns the subscriber queues."""
        self._loop = loop

    @property
    def last_event(self) -> ProgressEvent | None:
        with self._lock:
            return self._last_event

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[ProgressEvent | None]:
        """Register a subscriber. Must be called on the event loop."""
        queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue(
            maxsize=SUBSCRIBER_QUEUE_SIZE
        )
        with self._lock:
            self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ProgressEvent | None]) -> None:
        with self._lock:
            self._subscribers.discard(queue)

    def on_event(self, event: ProgressEvent) -> None:
        """Deliver an event to every subscriber (any thread)."""
        with self._lock:
            self._last_event = event
            subscribers = list(self._subscribers)

        loop = self._loop
        if loop is None or loop.is_closed():
            return
        for queue in subscribers:
            try:
                loop.call_soon_threadsafe(self._put, queue, event)
            except RuntimeError:
                # Loop closed between the check and the call
                logger.debug("Event loop closed, dropping progress event")
                return

    def close(self) -> None:
        """Signal every subscriber that the stream is over. Loop thread only."""
        with self._lock:
            subscribers = list(self._subscribers)
        for queue in subscribers:
            self._put(queue, None)

    @staticmethod
    def _put(
        queue: asyncio.Queue[ProgressEvent | None], event: ProgressEvent | None
    ) -> None:
        if queue.full():
            # Slow client: drop its oldest event rather than block others
            queue.get_nowait()
            logger.warning("SSE subscriber backlog full, dropped oldest event")
        queue.put_nowait(event)
