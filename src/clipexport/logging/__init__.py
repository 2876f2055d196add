"""Structured logging module for clipexport.

Provides configurable logging with JSON format support and file rotation,
plus job context tagging for the export worker.
"""

from clipexport.logging.config import configure_logging
from clipexport.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)
from clipexport.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "clear_job_context",
    "configure_logging",
    "get_job_context",
    "job_context",
    "set_job_context",
]
