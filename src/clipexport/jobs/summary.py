"""Export summary text generation."""

from __future__ import annotations

from clipexport.domain.models import ExportSummary


def summary_message(summary: ExportSummary) -> str:
    """Final status line for a run.

    Example:
        >>> summary_message(ExportSummary(total_rows=3, exported=2, failed=1))
        'Done. Exported: 2, Skipped: 0, Failed: 1'
    """
    return (
        f"Done. Exported: {summary.exported}, Skipped: {summary.skipped}, "
        f"Failed: {summary.failed}"
    )


def stopped_message(summary: ExportSummary) -> str:
    """Status line for a run the user stopped."""
    return (
        f"Export stopped by user after {summary.processed} of "
        f"{summary.total_rows} rows. "
        f"Exported: {summary.exported}, Skipped: {summary.skipped}, "
        f"Failed: {summary.failed}"
    )


def aborted_message(summary: ExportSummary, error: BaseException) -> str:
    """Status line for a run halted by an unexpected error."""
    return (
        f"Export aborted after {summary.processed} of {summary.total_rows} rows: "
        f"{error}"
    )


def format_summary_lines(summary: ExportSummary) -> list[str]:
    """Multi-line human-readable report for CLI output."""
    lines = [
        f"Rows:     {summary.total_rows}",
        f"Exported: {summary.exported}",
        f"Skipped:  {summary.skipped}",
        f"Failed:   {summary.failed}",
    ]
    if summary.errors:
        lines.append("")
        lines.append("Errors:")
        lines.extend(f"  - {error}" for error in summary.errors)
    return lines
