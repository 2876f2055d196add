"""Tests for export summary text."""

from clipexport.domain.models import ExportSummary
from clipexport.jobs.summary import (
    aborted_message,
    format_summary_lines,
    stopped_message,
    summary_message,
)


def test_summary_message() -> None:
    summary = ExportSummary(total_rows=4, exported=2, skipped=1, failed=1)
    assert summary_message(summary) == "Done. Exported: 2, Skipped: 1, Failed: 1"


def test_stopped_message() -> None:
    summary = ExportSummary(total_rows=5, exported=2)
    assert stopped_message(summary) == (
        "Export stopped by user after 2 of 5 rows. "
        "Exported: 2, Skipped: 0, Failed: 0"
    )


def test_aborted_message() -> None:
    summary = ExportSummary(total_rows=3, exported=1, failed=1)
    assert aborted_message(summary, RuntimeError("worker bug")) == (
        "Export aborted after 2 of 3 rows: worker bug"
    )


def test_format_summary_lines_with_errors() -> None:
    summary = ExportSummary(
        total_rows=2, exported=1, failed=1, errors=("Row 3 failed (B): boom",)
    )

    lines = format_summary_lines(summary)

    assert lines[0] == "Rows:     2"
    assert "Errors:" in lines
    assert lines[-1] == "  - Row 3 failed (B): boom"


def test_format_summary_lines_without_errors() -> None:
    lines = format_summary_lines(ExportSummary(total_rows=1, exported=1))
    assert "Errors:" not in lines
    assert len(lines) == 4
