"""Timecode parsing.

Converts the textual time representations found in clip lists into elapsed
seconds. Accepted forms, tried in this order:

1. ``HH:MM:SS:FF`` - frames at 30 fps
2. ``HH:MM:SS``
3. ``MM:SS``
4. raw decimal seconds (``92.5``)
"""

from __future__ import annotations

import math
import re

from clipexport.exceptions import ParseError, ParseErrorReason

FRAME_RATE = 30

# Unsigned ASCII integer field; signs, decimals and exponents are rejected
_INT_FIELD = re.compile(r"[0-9]+")
# Plain decimal seconds with '.' separator only
_DECIMAL_SECONDS = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


def _malformed(text: str, detail: str) -> ParseError:
    return ParseError(
        f"Invalid timecode '{text}': {detail}", reason=ParseErrorReason.MALFORMED
    )


def _int_fields(text: str, parts: list[str]) -> list[int]:
    values = []
    for part in parts:
        if not _INT_FIELD.fullmatch(part):
            raise _malformed(text, f"'{part}' is not a whole number")
        try:
            values.append(int(part))
        except ValueError:
            # Exceeds the interpreter's integer string conversion limit
            raise _malformed(text, f"'{part[:12]}...' is too long") from None
    return values


def _check_range(text: str, label: str, value: int, limit: int) -> None:
    if value >= limit:
        raise _malformed(text, f"{label} {value} out of range (must be < {limit})")


def _total_seconds(
    text: str, hours: int, minutes: int, seconds: int, frames: int = 0
) -> float:
    try:
        total = float(hours) * 3600 + minutes * 60 + seconds + frames / FRAME_RATE
    except OverflowError:
        raise _malformed(text, "hours out of range") from None
    if not math.isfinite(total):
        raise _malformed(text, "hours out of range")
    return total


def parse_timecode(text: str) -> float:
    """Parse a timecode into seconds.

    Args:
        text: Time text such as ``"00:01:22:15"``, ``"01:34"`` or ``"92.5"``.

    Returns:
        Elapsed seconds as a float.

    Raises:
        ParseError: If the text matches none of the accepted shapes, a field
            is non-numeric, or minutes/seconds/frames exceed their range.

    Example:
        >>> parse_timecode("00:01:22:15")
        82.5
        >>> parse_timecode("92.5")
        92.5
    """
    stripped = text.strip()
    if not stripped:
        raise _malformed(text, "empty value")

    parts = stripped.split(":")

    if len(parts) == 4:
        hours, minutes, seconds, frames = _int_fields(text, parts)
        _check_range(text, "minutes", minutes, 60)
        _check_range(text, "seconds", seconds, 60)
        _check_range(text, "frames", frames, FRAME_RATE)
        return _total_seconds(text, hours, minutes, seconds, frames)

    if len(parts) == 3:
        hours, minutes, seconds = _int_fields(text, parts)
        _check_range(text, "minutes", minutes, 60)
        _check_range(text, "seconds", seconds, 60)
        return _total_seconds(text, hours, minutes, seconds)

    if len(parts) == 2:
        minutes, seconds = _int_fields(text, parts)
        _check_range(text, "minutes", minutes, 60)
        _check_range(text, "seconds", seconds, 60)
        return _total_seconds(text, 0, minutes, seconds)

    if len(parts) == 1:
        if not _DECIMAL_SECONDS.fullmatch(stripped):
            raise _malformed(text, "expected HH:MM:SS[:FF], MM:SS or seconds")
        value = float(stripped)
        if not math.isfinite(value):
            raise _malformed(text, "seconds must be finite")
        return value

    raise _malformed(text, "too many ':' separated fields")


def format_timecode(seconds: float) -> str:
    """Format seconds as a compact ``HHMMSS`` label for file names.

    Fractions are truncated.

    Example:
        >>> format_timecode(82.5)
        '000122'
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}{minutes:02d}{secs:02d}"
