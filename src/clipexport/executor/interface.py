"""Runner protocol and tool availability utilities.

This module defines the interface for clip runners and resolves the path
of the external transcoder.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from clipexport.exceptions import ToolNotAvailableError

from .types import Invocation, RunOutcome

INSTALL_HINTS: dict[str, str] = {
    "ffmpeg": (
        "Install ffmpeg (https://ffmpeg.org/download.html) and make sure it "
        "is on PATH, or set CLIPEXPORT_FFMPEG_PATH."
    ),
}


class ClipRunner(Protocol):
    """Protocol for executing one built invocation.

    Implementations block until the external process exits. terminate()
    may be called from another thread to abandon the in-flight process.
    """

    def run(self, invocation: Invocation) -> RunOutcome:
        """Run the invocation and report its outcome.

        Args:
            invocation: The built ffmpeg call.

        Returns:
            RunOutcome describing success or failure.
        """
        ...

    def terminate(self) -> bool:
        """Kill the in-flight process, if any.

        Returns:
            True if a process was running and has been signalled.
        """
        ...


def find_tool(tool_name: str, configured: Path | None = None) -> Path | None:
    """Locate an executable.

    A configured path wins when it exists; otherwise PATH is searched.

    Args:
        tool_name: Executable name.
        configured: Optional explicit path from config or environment.

    Returns:
        Path to the tool, or None if not found.
    """
    if configured is not None:
        configured = configured.expanduser()
        if configured.is_file():
            return configured
        # Allow a bare command name in config
        found = shutil.which(str(configured))
        return Path(found) if found else None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    When no explicit path is passed, the configured tool path from
    get_config() is used.

    Args:
        tool_name: Name of the tool to find.
        configured: Optional explicit path overriding configuration.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotAvailableError: If the tool cannot be found.
    """
    if configured is None:
        from clipexport.config import get_config

        configured = getattr(get_config().tools, tool_name, None)

    path = find_tool(tool_name, configured)
    if path is None:
        raise ToolNotAvailableError(tool_name, INSTALL_HINTS.get(tool_name, ""))
    return path
