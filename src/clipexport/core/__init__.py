"""Core utilities package.

Pure functions with no external dependencies: timecode parsing and
string normalization used by the clip reader and invocation builder.
"""

from clipexport.core.string_utils import (
    normalize_header,
    sanitize_filename,
)
from clipexport.core.timecode import FRAME_RATE, format_timecode, parse_timecode

__all__ = [
    # string_utils
    "normalize_header",
    "sanitize_filename",
    # timecode
    "FRAME_RATE",
    "format_timecode",
    "parse_timecode",
]
