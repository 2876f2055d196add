"""Data types for clip list reading and validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from clipexport.domain.models import ClipSpec

# Logical column -> accepted header aliases (already normalized)
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("clip name", "name", "clip"),
    "start": ("clip start time", "start time", "start", "in"),
    "end": ("clip end time", "end time", "end", "out"),
}

# First data row sits below the header row
FIRST_DATA_LINE = 2


@dataclass(frozen=True)
class RawRow:
    """One unvalidated input record keyed by logical column."""

    fields: Mapping[str, str]
    line_number: int

    def get(self, column: str) -> str:
        return self.fields.get(column, "")


@dataclass(frozen=True)
class ColumnMap:
    """Positions of the logical columns within the header row."""

    name: int
    start: int
    end: int

    def extract(self, record: list[str], line_number: int) -> RawRow:
        """Build a RawRow from a positional CSV record.

        Short records are padded with empty strings.
        """

        def cell(idx: int) -> str:
            return record[idx] if idx < len(record) else ""

        return RawRow(
            fields={
                "name": cell(self.name),
                "start": cell(self.start),
                "end": cell(self.end),
            },
            line_number=line_number,
        )


@dataclass
class ValidationResult:
    """Output of row validation: one slot per input row plus errors."""

    rows: list[ClipSpec | None] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    row_errors: dict[int, str] = field(default_factory=dict)
    """Row index -> first error message for rows that failed."""

    @property
    def valid_rows(self) -> list[ClipSpec]:
        return [row for row in self.rows if row is not None]

    @property
    def valid_count(self) -> int:
        return len(self.valid_rows)


@dataclass(frozen=True)
class RowPreview:
    """Raw text of one row, for display before export."""

    clip_name: str
    start_time: str
    end_time: str

    def to_dict(self) -> dict[str, str]:
        return {
            "clip_name": self.clip_name,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True)
class CsvPreview:
    """Preview of a clip list: raw rows plus validation problems."""

    rows: tuple[RowPreview, ...]
    total_rows: int
    validation_errors: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "total_rows": self.total_rows,
            "validation_errors": list(self.validation_errors),
        }
