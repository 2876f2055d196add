"""String manipulation utilities.

Case-insensitive operations use casefold() for proper Unicode handling.
"""

from __future__ import annotations

import re

_BOM = "\ufeff"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_DASH_RUNS = re.compile(r"-+")


def normalize_header(header: str) -> str:
    """Normalize a CSV header for alias matching.

    Strips a leading byte-order mark, casefolds, treats ``_`` and ``-`` as
    spaces, and collapses whitespace runs.

    Example:
        >>> normalize_header("\\ufeff Clip_Start-Time ")
        'clip start time'
    """
    cleaned = header.lstrip(_BOM).casefold().replace("_", " ").replace("-", " ")
    return " ".join(cleaned.split())


def sanitize_filename(name: str, fallback: str = "clip") -> str:
    """Reduce a clip name to a filesystem-safe stem.

    Keeps ASCII letters, digits, ``_`` and ``-``; every other character
    becomes ``-``. Dash runs collapse and edge dashes are trimmed.

    Example:
        >>> sanitize_filename("Goal! (2nd half)")
        'Goal-2nd-half'
    """
    dashed = _UNSAFE_FILENAME_CHARS.sub("-", name)
    compact = _DASH_RUNS.sub("-", dashed).strip("-")
    return compact or fallback
