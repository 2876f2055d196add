"""CLI preview command: show the rows of a clip list and their problems."""

import logging
from pathlib import Path

import click
from wcwidth import wcswidth

from clipexport.cli.exit_codes import exit_code_for_error
from clipexport.cli.output import error_exit, json_output
from clipexport.clips.models import CsvPreview
from clipexport.exceptions import ClipExportError
from clipexport.jobs.service import ExportService

logger = logging.getLogger(__name__)


def _display_width(s: str) -> int:
    """Terminal column width of a string; wide characters take 2 columns."""
    width = wcswidth(s)
    # wcswidth returns -1 for strings with non-printable characters
    return width if width >= 0 else len(s)


def _pad_to_width(s: str, width: int) -> str:
    return s + " " * max(0, width - _display_width(s))


def format_preview(preview: CsvPreview) -> str:
    """Render a preview as an aligned table followed by any errors."""
    headers = ("#", "Clip name", "Start", "End")
    body = [
        (str(idx + 1), row.clip_name, row.start_time, row.end_time)
        for idx, row in enumerate(preview.rows)
    ]
    widths = [
        max(_display_width(cells[col]) for cells in [headers, *body])
        for col in range(4)
    ]

    def fmt(cells: tuple[str, ...]) -> str:
        return "  ".join(
            _pad_to_width(cell, width) for cell, width in zip(cells, widths)
        )

    lines = [fmt(headers), "  ".join("-" * width for width in widths)]
    lines.extend(fmt(cells) for cells in body)
    lines.append("")
    lines.append(f"{preview.total_rows} row(s)")

    if preview.validation_errors:
        lines.append("")
        lines.append(f"Validation errors ({len(preview.validation_errors)}):")
        lines.extend(f"  - {error}" for error in preview.validation_errors)
    return "\n".join(lines)


@click.command("preview")
@click.argument("csv_file", type=click.Path(path_type=Path))
@click.option(
    "--json",
    "json_flag",
    is_flag=True,
    default=False,
    help="Output the preview as JSON.",
)
@click.pass_context
def preview_command(ctx: click.Context, csv_file: Path, json_flag: bool) -> None:
    """Show the clips in CSV_FILE and any rows that fail validation.

    \b
    Examples:
        clipexport preview clips.csv
        clipexport preview clips.csv --json
    """
    service: ExportService = ctx.obj["service"]

    try:
        preview = service.list_preview(csv_file)
    except ClipExportError as e:
        error_exit(e.message, exit_code_for_error(e), json_flag)

    if json_flag:
        json_output(preview.to_dict())
    else:
        click.echo(format_preview(preview))
