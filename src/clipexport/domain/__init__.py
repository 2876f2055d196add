"""Domain types shared across clip export modules."""

from clipexport.domain.enums import (
    AudioMode,
    EventStatus,
    JobStatus,
    Preset,
    ProcessingMode,
    Resolution,
    RowResult,
    RowStatus,
)
from clipexport.domain.models import (
    ClipSpec,
    EncodingSettings,
    ExportSummary,
    ProgressEvent,
    RowState,
)

__all__ = [
    # Enums
    "AudioMode",
    "EventStatus",
    "JobStatus",
    "Preset",
    "ProcessingMode",
    "Resolution",
    "RowResult",
    "RowStatus",
    # Models
    "ClipSpec",
    "EncodingSettings",
    "ExportSummary",
    "ProgressEvent",
    "RowState",
]
