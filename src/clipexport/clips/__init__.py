"""Clip list reading and validation.

- models: RawRow, ColumnMap, ValidationResult, preview types
- validator: header resolution and per-row validation
- reader: CSV loading and preview
"""

from clipexport.clips.models import (
    COLUMN_ALIASES,
    ColumnMap,
    CsvPreview,
    RawRow,
    RowPreview,
    ValidationResult,
)
from clipexport.clips.reader import load_clips, preview_csv, read_csv
from clipexport.clips.validator import (
    resolve_columns,
    validate,
    validate_records,
    validate_row,
)

__all__ = [
    "COLUMN_ALIASES",
    "ColumnMap",
    "CsvPreview",
    "RawRow",
    "RowPreview",
    "ValidationResult",
    "load_clips",
    "preview_csv",
    "read_csv",
    "resolve_columns",
    "validate",
    "validate_records",
    "validate_row",
]
