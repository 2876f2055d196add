"""Execution layer for clip export.

This module provides:
- command: ffmpeg argument construction per clip
- runner: blocking ffmpeg execution with temp-file promotion
- interface: ClipRunner protocol and tool path resolution
- ffmpeg_utils: temp naming, output validation, cleanup
"""

from clipexport.executor.command import build_invocation, output_filename
from clipexport.executor.interface import ClipRunner, find_tool, require_tool
from clipexport.executor.runner import STOPPED_BY_USER, FFmpegClipRunner
from clipexport.executor.types import Invocation, RunOutcome

__all__ = [
    # Command building
    "build_invocation",
    "output_filename",
    # Interface
    "ClipRunner",
    "find_tool",
    "require_tool",
    # Runner
    "FFmpegClipRunner",
    "STOPPED_BY_USER",
    # Types
    "Invocation",
    "RunOutcome",
]
