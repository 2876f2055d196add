"""Export job orchestration.

- orchestrator: single-job worker with row loop and stop handling
- progress: reporter protocol, reporters, and the dispatcher thread
- summary: summary text
- service: boundary operations used by the CLI and HTTP shells
"""

from clipexport.jobs.orchestrator import (
    ExportJob,
    ExportJobHandle,
    ExportOrchestrator,
    ExportRequest,
)
from clipexport.jobs.progress import (
    CollectingProgressReporter,
    CompositeProgressReporter,
    NullProgressReporter,
    ProgressDispatcher,
    ProgressReporter,
    StderrProgressReporter,
)
from clipexport.jobs.service import ExportService
from clipexport.jobs.summary import (
    aborted_message,
    format_summary_lines,
    stopped_message,
    summary_message,
)

__all__ = [
    # Orchestrator
    "ExportJob",
    "ExportJobHandle",
    "ExportOrchestrator",
    "ExportRequest",
    # Progress
    "CollectingProgressReporter",
    "CompositeProgressReporter",
    "NullProgressReporter",
    "ProgressDispatcher",
    "ProgressReporter",
    "StderrProgressReporter",
    # Service
    "ExportService",
    # Summary
    "aborted_message",
    "format_summary_lines",
    "stopped_message",
    "summary_message",
]
