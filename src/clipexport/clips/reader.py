"""CSV reading for clip lists."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from clipexport.clips.models import (
    FIRST_DATA_LINE,
    CsvPreview,
    RowPreview,
    ValidationResult,
)
from clipexport.clips.validator import resolve_columns, validate
from clipexport.exceptions import InputError

logger = logging.getLogger(__name__)


def read_csv(path: Path) -> tuple[list[str], list[list[str]]]:
    """Read a clip list CSV.

    The file is decoded as UTF-8; a leading byte-order mark is tolerated.
    Blank lines are kept as empty records so they surface as validation
    errors instead of disappearing.

    Args:
        path: Path to the CSV file.

    Returns:
        Tuple of (header_row, data_rows).

    Raises:
        InputError: If the file is missing, unreadable, or has no header.
    """
    if not path.exists():
        raise InputError(f"CSV file not found: {path}")
    if not path.is_file():
        raise InputError(f"CSV path is not a file: {path}")

    try:
        with path.open(newline="", encoding="utf-8-sig") as f:
            records = list(csv.reader(f))
    except UnicodeDecodeError as e:
        raise InputError(f"CSV file is not valid UTF-8: {path} ({e})") from e
    except (OSError, csv.Error) as e:
        raise InputError(f"Failed to read CSV {path}: {e}") from e

    if not records:
        raise InputError(f"CSV file is empty: {path}")

    header, data = records[0], records[1:]
    # A trailing newline yields no record, but trailing blank lines do
    while data and not any(cell.strip() for cell in data[-1]):
        data.pop()

    logger.debug("Read %d data row(s) from %s", len(data), path)
    return header, data


def load_clips(path: Path) -> ValidationResult:
    """Read and validate a clip list CSV in one step."""
    header, data = read_csv(path)
    return validate(data, header)


def preview_csv(path: Path) -> CsvPreview:
    """Build a preview of a clip list with validation problems.

    Raises:
        InputError: If the CSV cannot be read.
        ParseError: If a required column is missing.
    """
    header, data = read_csv(path)
    columns = resolve_columns(header)
    previews = []
    for idx, record in enumerate(data):
        raw = columns.extract(record, FIRST_DATA_LINE + idx)
        previews.append(
            RowPreview(
                clip_name=raw.get("name").strip(),
                start_time=raw.get("start").strip(),
                end_time=raw.get("end").strip(),
            )
        )
    result = validate(data, header)
    return CsvPreview(
        rows=tuple(previews),
        total_rows=len(previews),
        validation_errors=tuple(result.errors),
    )
