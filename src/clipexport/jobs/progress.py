"""Progress reporting for export runs.

The orchestrator emits ProgressEvents; reporters render them for a
particular context (CLI stderr line, HTTP event stream, tests). Events are
delivered through a ProgressDispatcher so a slow reporter never holds up
the row loop.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from typing import Protocol

from clipexport.domain.enums import EventStatus
from clipexport.domain.models import ProgressEvent

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Protocol for consuming export progress events.

    Implementations provide context-specific progress display:
    - CLI: stderr status line
    - Server: fan-out to event stream subscribers
    - Tests: collecting or null reporter
    """

    def on_event(self, event: ProgressEvent) -> None:
        """Handle one progress event.

        Args:
            event: The event, in emission order.
        """
        ...


class NullProgressReporter:
    """No-op progress reporter for tests or quiet runs."""

    def on_event(self, event: ProgressEvent) -> None:
        """No-op."""
        pass


class CollectingProgressReporter:
    """Reporter that keeps every event it receives.

    Thread-safe; the dispatcher thread appends while callers read.
    """

    def __init__(self) -> None:
        self._events: list[ProgressEvent] = []
        self._lock = threading.Lock()

    def on_event(self, event: ProgressEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[ProgressEvent]:
        """Snapshot of events received so far."""
        with self._lock:
            return list(self._events)


class StderrProgressReporter:
    """Progress reporter that writes an in-place status line to stderr.

    Suitable for `clipexport export` in a terminal.
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output (for JSON mode or tests).
        """
        self.enabled = enabled

    def on_event(self, event: ProgressEvent) -> None:
        if not self.enabled:
            return

        if event.status == EventStatus.RUNNING:
            sys.stderr.write(
                f"\r\033[K[{event.completed}/{event.total}] {event.message}"
            )
        else:
            # Final event: finish the status line
            sys.stderr.write(f"\r\033[K{event.message}\n")
        sys.stderr.flush()


class CompositeProgressReporter:
    """Progress reporter that delegates to multiple reporters."""

    def __init__(self, reporters: list[ProgressReporter]) -> None:
        self.reporters = reporters

    def on_event(self, event: ProgressEvent) -> None:
        """Delegate to all reporters."""
        for reporter in self.reporters:
            reporter.on_event(event)


_CLOSE = object()


class ProgressDispatcher:
    """Delivers progress events to a reporter on a dedicated thread.

    emit() never blocks the caller. Events are delivered one at a time in
    emission order. A reporter that raises is logged and skipped for that
    event; delivery continues.

    Example:
        dispatcher = ProgressDispatcher(StderrProgressReporter())
        dispatcher.emit(event)
        dispatcher.flush()  # wait until the reporter has seen it
        dispatcher.close()
    """

    def __init__(self, reporter: ProgressReporter) -> None:
        self.reporter = reporter
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread = threading.Thread(
            target=self._deliver_loop, name="progress-dispatcher", daemon=True
        )
        self._closed = False
        self._thread.start()

    def emit(self, event: ProgressEvent) -> None:
        """Queue an event for delivery."""
        if self._closed:
            logger.debug("Dropping progress event after close: %s", event.message)
            return
        self._queue.put(event)

    def flush(self) -> None:
        """Block until every queued event has been delivered."""
        self._queue.join()

    def close(self) -> None:
        """Deliver outstanding events and stop the delivery thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSE)
        self._thread.join()

    def _deliver_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _CLOSE:
                    return
                try:
                    self.reporter.on_event(item)  # type: ignore[arg-type]
                except Exception:
                    logger.exception("Progress reporter failed")
            finally:
                self._queue.task_done()
