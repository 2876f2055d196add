"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (rows, settings, config)
    20-29: Input file errors
    30-39: Tool/dependency errors
    40-49: Operation errors
    50-59: Parse errors
    60-69: Warning states
"""

from enum import IntEnum

from clipexport.exceptions import ClipExportError, ErrorKind


class ExitCode(IntEnum):
    """Exit codes for clipexport CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Export stopped by Ctrl+C

    # Validation errors (10-19)
    VALIDATION_ERROR = 10
    CONFIG_ERROR = 11

    # Input file errors (20-29)
    INPUT_ERROR = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    ALREADY_RUNNING = 41

    # Parse errors (50-59)
    PARSE_ERROR = 51

    # Warning states (60-69)
    WARNINGS = 60


_KIND_EXIT_CODES: dict[ErrorKind, ExitCode] = {
    ErrorKind.INPUT: ExitCode.INPUT_ERROR,
    ErrorKind.VALIDATION: ExitCode.VALIDATION_ERROR,
    ErrorKind.PARSE: ExitCode.PARSE_ERROR,
    ErrorKind.EXTERNAL_TOOL: ExitCode.TOOL_NOT_AVAILABLE,
    ErrorKind.ALREADY_RUNNING: ExitCode.ALREADY_RUNNING,
}


def exit_code_for_error(error: ClipExportError) -> ExitCode:
    """Map an error's kind to the CLI exit code."""
    return _KIND_EXIT_CODES.get(error.kind, ExitCode.GENERAL_ERROR)
