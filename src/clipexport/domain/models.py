"""Domain models for clip export.

Frozen dataclasses validated in __post_init__, shared by the validator,
invocation builder, orchestrator, and shells.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from clipexport.domain.enums import (
    AudioMode,
    EventStatus,
    Preset,
    ProcessingMode,
    Resolution,
    RowResult,
    RowStatus,
)

CRF_MIN = 16
CRF_MAX = 35
AUDIO_BITRATE_MIN_KBPS = 64
AUDIO_BITRATE_MAX_KBPS = 320
FPS_MAX = 120.0


@dataclass(frozen=True)
class ClipSpec:
    """One named time interval to extract from the source video."""

    name: str
    start: float
    """Start offset in seconds."""

    end: float
    """End offset in seconds (exclusive of start, always greater)."""

    def __post_init__(self) -> None:
        """Validate 0 <= start < end."""
        if not self.name.strip():
            raise ValueError("Clip name must not be empty")
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.start >= self.end:
            raise ValueError(
                f"start ({self.start}) must be less than end ({self.end})"
            )

    @property
    def duration(self) -> float:
        """Clip length in seconds."""
        return self.end - self.start


@dataclass(frozen=True)
class EncodingSettings:
    """Encoding options for one export run.

    audio_bitrate_kbps is only used when audio_mode is AAC.
    """

    processing_mode: ProcessingMode = ProcessingMode.COPY_FAST
    resolution: Resolution = Resolution.SOURCE
    preset: Preset = Preset.ULTRAFAST
    crf: int = 20
    audio_mode: AudioMode = AudioMode.AAC
    audio_bitrate_kbps: int = 128
    fps: float | None = None

    def __post_init__(self) -> None:
        """Validate numeric ranges."""
        if not CRF_MIN <= self.crf <= CRF_MAX:
            raise ValueError(
                f"crf must be between {CRF_MIN} and {CRF_MAX}, got {self.crf}"
            )
        if not AUDIO_BITRATE_MIN_KBPS <= self.audio_bitrate_kbps <= (
            AUDIO_BITRATE_MAX_KBPS
        ):
            raise ValueError(
                f"audio_bitrate_kbps must be between {AUDIO_BITRATE_MIN_KBPS} "
                f"and {AUDIO_BITRATE_MAX_KBPS}, got {self.audio_bitrate_kbps}"
            )
        if self.fps is not None and (
            not math.isfinite(self.fps) or not 0 < self.fps <= FPS_MAX
        ):
            raise ValueError(f"fps must be in (0, {FPS_MAX:g}], got {self.fps}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict using wire names."""
        return {
            "processing_mode": self.processing_mode.value,
            "resolution": self.resolution.value,
            "preset": self.preset.value,
            "crf": self.crf,
            "audio_mode": self.audio_mode.value,
            "audio_bitrate_kbps": self.audio_bitrate_kbps,
            "fps": self.fps,
        }


# Forward-only row transitions
_ALLOWED_TRANSITIONS: dict[RowStatus, frozenset[RowStatus]] = {
    RowStatus.PENDING: frozenset({RowStatus.RUNNING, RowStatus.FAILED}),
    RowStatus.RUNNING: frozenset({RowStatus.SUCCESS, RowStatus.FAILED}),
    RowStatus.SUCCESS: frozenset(),
    RowStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class RowState:
    """State of one row: Pending, Running, Success, or Failed(reason).

    PENDING may go straight to FAILED for rows that never reach the
    transcoder (validation failures).
    """

    status: RowStatus = RowStatus.PENDING
    reason: str | None = None

    def transition(self, status: RowStatus, reason: str | None = None) -> RowState:
        """Return the next state, enforcing forward-only transitions.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise ValueError(
                f"Illegal row transition: {self.status.value} -> {status.value}"
            )
        if status == RowStatus.FAILED and not reason:
            raise ValueError("FAILED row state requires a reason")
        return RowState(status=status, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.status in (RowStatus.SUCCESS, RowStatus.FAILED)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "reason": self.reason}


@dataclass(frozen=True)
class ExportSummary:
    """Final outcome of an export run."""

    total_rows: int
    exported: int = 0
    skipped: int = 0
    failed: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def processed(self) -> int:
        """Rows that reached a terminal outcome."""
        return self.exported + self.skipped + self.failed

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["errors"] = list(self.errors)
        return data


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification emitted by the orchestrator.

    Carries enough for a consumer to render a live status column
    without polling.
    """

    completed: int
    total: int
    message: str
    status: EventStatus = EventStatus.RUNNING
    row_index: int | None = None
    row_result: RowResult | None = None
    current_clip: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "message": self.message,
            "status": self.status.value,
            "row_index": self.row_index,
            "row_result": self.row_result.value if self.row_result else None,
            "current_clip": self.current_clip,
        }
