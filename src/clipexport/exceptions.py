"""Exception hierarchy for clip export.

Every error carries a human-readable message and a discriminant kind so that
shells (CLI, HTTP) can map failures to exit codes or error codes without
string matching:

- InputError: missing or unreadable CSV, source video, or output directory
- ValidationError: a single row failed validation (non-fatal to the batch)
- ParseError: malformed timecode (row-fatal) or missing column (batch-fatal)
- ExternalToolError: ffmpeg exited non-zero or produced no output
- AlreadyRunningError: an export was started while another is running
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Discriminant for ClipExportError subclasses."""

    INPUT = "input"
    VALIDATION = "validation"
    PARSE = "parse"
    EXTERNAL_TOOL = "external_tool"
    ALREADY_RUNNING = "already_running"


class ParseErrorReason(Enum):
    """Why a ParseError was raised."""

    MALFORMED = "malformed"
    MISSING_COLUMN = "missing_column"


class ClipExportError(Exception):
    """Base exception for all clip export errors.

    Attributes:
        message: Human-readable description.
        kind: Error discriminant.
    """

    kind: ErrorKind = ErrorKind.INPUT

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputError(ClipExportError):
    """Raised when a required input path is absent or unusable."""

    kind = ErrorKind.INPUT


class ToolNotAvailableError(InputError):
    """Raised when the external transcoder cannot be located."""

    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(self, tool_name: str, hint: str = "") -> None:
        self.tool_name = tool_name
        message = f"Required tool not available: {tool_name}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class ValidationError(ClipExportError):
    """Raised for a single row that fails validation.

    Attributes:
        line_number: 1-based CSV line number of the offending row.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        super().__init__(message)


class ParseError(ClipExportError):
    """Raised for malformed timecodes or a missing required column.

    Attributes:
        reason: MALFORMED for bad time text, MISSING_COLUMN for headers.
    """

    kind = ErrorKind.PARSE

    def __init__(
        self, message: str, reason: ParseErrorReason = ParseErrorReason.MALFORMED
    ) -> None:
        self.reason = reason
        super().__init__(message)


class ExternalToolError(ClipExportError):
    """An ffmpeg failure for a single clip.

    Row failures never abort an export, so the runner reports them as a
    RunOutcome; RunOutcome.as_error() gives the typed form used for the row
    reason and log records.

    Attributes:
        returncode: Process exit code, or None if it never started.
    """

    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(self, message: str, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message)


class OrchestratorError(ClipExportError):
    """Base class for export orchestrator state errors."""

    kind = ErrorKind.ALREADY_RUNNING


class AlreadyRunningError(OrchestratorError):
    """Raised when starting an export while another one is running.

    Attributes:
        job_id: ID of the job that is currently running.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Export {job_id[:8]} is already running")
