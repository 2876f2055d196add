"""Job context for structured logging.

Provides context propagation for the export worker thread using
contextvars, so job_id and row_index are injected into log records
without being passed through every call.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_row_index: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "row_index", default=None
)


def set_job_context(job_id: str, row_index: int | None = None) -> None:
    """Set the current job context.

    Args:
        job_id: Export job identifier.
        row_index: Zero-based index of the row being processed, or None.
    """
    _job_id.set(job_id)
    _row_index.set(row_index)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_id.set(None)
    _row_index.set(None)


@contextmanager
def job_context(
    job_id: str, row_index: int | None = None
) -> Generator[None, None, None]:
    """Context manager for export job context.

    Sets the context on entry and restores the previous one on exit.

    Example:
        with job_context(job.job_id, 3):
            logger.info("Exporting clip")  # tagged [a1b2c3d4:R004]
    """
    old_job_id = _job_id.get()
    old_row_index = _row_index.get()
    try:
        set_job_context(job_id, row_index)
        yield
    finally:
        _job_id.set(old_job_id)
        _row_index.set(old_row_index)


def get_job_context() -> tuple[str | None, int | None]:
    """Get current job context.

    Returns:
        Tuple of (job_id, row_index), either may be None.
    """
    return _job_id.get(), _row_index.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and row_index attributes for JSON output, and a compact
    job_tag such as ``[a1b2c3d4:R004] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, row_index = get_job_context()

        record.job_id = job_id
        record.row_index = row_index

        if job_id:
            short_id = job_id[:8]
            if row_index is not None:
                # Row numbers in tags are 1-based, like output file names
                record.job_tag = f"[{short_id}:R{row_index + 1:03d}] "
            else:
                record.job_tag = f"[{short_id}] "
        else:
            record.job_tag = ""

        return True
