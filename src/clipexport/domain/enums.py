"""Domain enums for clip export.

Encoding choices are closed enums so that invalid combinations never reach
the invocation builder. Values match the wire names used by the editing
shell and the config file.
"""

from enum import Enum


class ProcessingMode(Enum):
    """How each clip is cut from the source."""

    PRECISE = "reencode_precise"  # Frame-accurate seek, full re-encode
    COPY_FAST = "copy_fast"  # Stream copy, keyframe-aligned cut
    FAST_SEEK = "reencode_fast_seek"  # Compressed-stream seek, then re-encode


class Resolution(Enum):
    """Output resolution. SOURCE leaves the frame size untouched."""

    SOURCE = "source"
    P1080 = "1080p"
    P720 = "720p"
    P480 = "480p"

    @property
    def height(self) -> int | None:
        """Target frame height in pixels, or None for SOURCE."""
        return _RESOLUTION_HEIGHTS.get(self)


_RESOLUTION_HEIGHTS = {
    Resolution.P1080: 1080,
    Resolution.P720: 720,
    Resolution.P480: 480,
}


class Preset(Enum):
    """libx264 speed presets offered for re-encoding."""

    ULTRAFAST = "ultrafast"
    SUPERFAST = "superfast"
    VERYFAST = "veryfast"
    FASTER = "faster"
    FAST = "fast"
    MEDIUM = "medium"


class AudioMode(Enum):
    """Audio handling for re-encode modes."""

    AAC = "aac"
    COPY = "copy"
    NONE = "none"


class RowStatus(Enum):
    """Lifecycle of a single row within an export job."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class JobStatus(Enum):
    """Lifecycle of an export job."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


class EventStatus(Enum):
    """Status carried on progress events."""

    RUNNING = "running"
    DONE = "done"
    STOPPED = "stopped"


class RowResult(Enum):
    """Per-row result carried on progress events."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
