"""Executor data types."""

from dataclasses import dataclass
from pathlib import Path

from clipexport.exceptions import ExternalToolError


@dataclass(frozen=True)
class Invocation:
    """One fully built ffmpeg call for a single clip."""

    args: tuple[str, ...]
    """Complete argument vector, executable first."""

    output_path: Path
    """Final location of the clip once the run succeeds."""

    temp_path: Path
    """Where ffmpeg actually writes; renamed to output_path on success."""


@dataclass(frozen=True)
class RunOutcome:
    """Result of running one invocation."""

    success: bool
    returncode: int | None = None
    error_message: str | None = None
    output_path: Path | None = None

    def as_error(self) -> ExternalToolError | None:
        """The failure as an ExternalToolError, or None for a successful run."""
        if self.success:
            return None
        return ExternalToolError(self.error_message or "ffmpeg failed", self.returncode)
