"""Row validation for clip lists.

Turns raw tabular records into ClipSpec objects. Validation is total:
every input row yields either a ClipSpec or a None slot plus an error
message, and processing never stops at the first bad row. Only a missing
required column fails the whole batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from clipexport.clips.models import (
    COLUMN_ALIASES,
    FIRST_DATA_LINE,
    ColumnMap,
    RawRow,
    ValidationResult,
)
from clipexport.core.string_utils import normalize_header
from clipexport.core.timecode import parse_timecode
from clipexport.domain.models import ClipSpec
from clipexport.exceptions import ParseError, ParseErrorReason, ValidationError

logger = logging.getLogger(__name__)

# Keys sent by editing shells for pre-keyed rows
EDITED_ROW_KEYS = {"name": "clip_name", "start": "start_time", "end": "end_time"}


def _find_header_index(normalized: list[str], aliases: Iterable[str]) -> int | None:
    alias_set = set(aliases)
    for idx, header in enumerate(normalized):
        if header in alias_set:
            return idx
    return None


def resolve_columns(header_row: Sequence[str]) -> ColumnMap:
    """Locate the name, start and end columns in a header row.

    Args:
        header_row: Raw header cells.

    Returns:
        ColumnMap with the index of each logical column.

    Raises:
        ParseError: With reason MISSING_COLUMN if any column has no match.
    """
    normalized = [normalize_header(h) for h in header_row]
    positions: dict[str, int] = {}
    missing: list[str] = []

    for column, aliases in COLUMN_ALIASES.items():
        idx = _find_header_index(normalized, aliases)
        if idx is None:
            missing.append(column)
        else:
            positions[column] = idx

    if missing:
        expected = "; ".join(
            f"{col}: {', '.join(repr(a) for a in COLUMN_ALIASES[col])}"
            for col in missing
        )
        raise ParseError(
            f"CSV missing required column(s) {', '.join(missing)} "
            f"(accepted headers - {expected})",
            reason=ParseErrorReason.MISSING_COLUMN,
        )

    return ColumnMap(**positions)


def validate_row(row: RawRow) -> ClipSpec:
    """Validate a single raw row.

    Args:
        row: Raw row keyed by logical column.

    Returns:
        The validated ClipSpec.

    Raises:
        ValidationError: Describing the first problem found.
    """
    line = row.line_number
    name = row.get("name").strip()
    if not name:
        raise ValidationError(f"Row {line}: clip name is empty", line)

    start_text = row.get("start")
    end_text = row.get("end")

    try:
        start = parse_timecode(start_text)
    except ParseError as e:
        raise ValidationError(
            f"Row {line}: invalid start time '{start_text.strip()}' ({e.message})",
            line,
        ) from e

    try:
        end = parse_timecode(end_text)
    except ParseError as e:
        raise ValidationError(
            f"Row {line}: invalid end time '{end_text.strip()}' ({e.message})",
            line,
        ) from e

    if start >= end:
        raise ValidationError(
            f"Row {line}: start >= end "
            f"(start {start_text.strip()} is not before end {end_text.strip()})",
            line,
        )

    return ClipSpec(name=name, start=start, end=end)


def validate_raw_rows(raw_rows: Iterable[RawRow]) -> ValidationResult:
    """Validate already-keyed rows, keeping one output slot per row."""
    result = ValidationResult()
    for idx, row in enumerate(raw_rows):
        try:
            result.rows.append(validate_row(row))
        except ValidationError as e:
            result.rows.append(None)
            result.errors.append(e.message)
            result.row_errors[idx] = e.message

    if result.errors:
        logger.info(
            "Validated %d row(s): %d valid, %d with errors",
            len(result.rows),
            result.valid_count,
            len(result.errors),
        )
    return result


def validate(
    raw_rows: Iterable[Sequence[str]],
    header_row: Sequence[str],
) -> ValidationResult:
    """Validate positional CSV records against a header row.

    Args:
        raw_rows: Data records (header excluded), one list of cells each.
        header_row: Header cells used for column resolution.

    Returns:
        ValidationResult with one slot per input row.

    Raises:
        ParseError: If a required column is missing (batch-fatal).
    """
    columns = resolve_columns(header_row)
    keyed = (
        columns.extract(list(record), FIRST_DATA_LINE + idx)
        for idx, record in enumerate(raw_rows)
    )
    return validate_raw_rows(keyed)


def to_raw_rows(records: Iterable[Mapping[str, str | None]]) -> list[RawRow]:
    """Convert edited-row mappings into RawRow objects.

    Accepts either ``clip_name``/``start_time``/``end_time`` keys or the
    logical ``name``/``start``/``end`` keys.
    """
    rows = []
    for idx, record in enumerate(records):
        fields = {}
        for column, edited_key in EDITED_ROW_KEYS.items():
            value = record.get(edited_key)
            if value is None:
                value = record.get(column)
            fields[column] = str(value) if value is not None else ""
        rows.append(RawRow(fields=fields, line_number=FIRST_DATA_LINE + idx))
    return rows


def validate_records(records: Iterable[Mapping[str, str | None]]) -> ValidationResult:
    """Validate edited rows supplied as mappings instead of a CSV file."""
    return validate_raw_rows(to_raw_rows(records))
