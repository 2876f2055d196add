"""CLI export command: cut every clip of a clip list out of a video."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from clipexport.cli.exit_codes import ExitCode, exit_code_for_error
from clipexport.cli.output import error_exit, json_output
from clipexport.domain.enums import AudioMode, JobStatus, Preset, Resolution
from clipexport.domain.models import ExportSummary
from clipexport.exceptions import ClipExportError
from clipexport.jobs.orchestrator import ExportJobHandle
from clipexport.jobs.progress import StderrProgressReporter
from clipexport.jobs.service import ExportService
from clipexport.jobs.summary import format_summary_lines

logger = logging.getLogger(__name__)

MODE_CHOICES = [
    "precise",
    "copy",
    "fast_seek",
    "reencode_precise",
    "copy_fast",
    "reencode_fast_seek",
]


def wait_for_export(service: ExportService, handle: ExportJobHandle) -> ExportSummary:
    """Wait for the export, turning Ctrl+C into stop requests.

    The first Ctrl+C stops after the clip in progress; a second one also
    kills the running ffmpeg process.
    """
    try:
        summary = handle.wait()
    except KeyboardInterrupt:
        click.echo(
            "\nStopping after the current clip (Ctrl+C again to abort it)...",
            err=True,
        )
        service.stop_export()
        try:
            summary = handle.wait()
        except KeyboardInterrupt:
            service.stop_export(kill=True)
            summary = handle.wait()
    assert summary is not None  # wait() without timeout always returns one
    return summary


def exit_code_for_summary(status: JobStatus, summary: ExportSummary) -> ExitCode:
    """Exit code for a finished export."""
    if status == JobStatus.STOPPED:
        return ExitCode.INTERRUPTED
    if summary.failed:
        return ExitCode.OPERATION_FAILED
    if summary.skipped:
        return ExitCode.WARNINGS
    return ExitCode.SUCCESS


@click.command("export")
@click.argument("csv_file", type=click.Path(path_type=Path))
@click.argument("video", type=click.Path(path_type=Path))
@click.argument("output_dir", type=click.Path(path_type=Path))
@click.option(
    "--mode",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Processing mode (default: copy).",
)
@click.option(
    "--resolution",
    type=click.Choice([r.value for r in Resolution], case_sensitive=False),
    default=None,
    help="Output resolution for re-encode modes (default: source).",
)
@click.option(
    "--preset",
    type=click.Choice([p.value for p in Preset], case_sensitive=False),
    default=None,
    help="x264 preset for re-encode modes (default: ultrafast).",
)
@click.option("--crf", type=int, default=None, help="x264 CRF, 16-35 (default: 20).")
@click.option(
    "--audio",
    type=click.Choice([a.value for a in AudioMode], case_sensitive=False),
    default=None,
    help="Audio handling for re-encode modes (default: aac).",
)
@click.option(
    "--audio-bitrate",
    type=int,
    default=None,
    help="AAC bitrate in kbps, 64-320 (default: 128).",
)
@click.option("--fps", type=float, default=None, help="Output frame rate.")
@click.option(
    "--json",
    "json_flag",
    is_flag=True,
    default=False,
    help="Print the summary as JSON (disables the progress line).",
)
@click.pass_context
def export_command(
    ctx: click.Context,
    csv_file: Path,
    video: Path,
    output_dir: Path,
    mode: str | None,
    resolution: str | None,
    preset: str | None,
    crf: int | None,
    audio: str | None,
    audio_bitrate: int | None,
    fps: float | None,
    json_flag: bool,
) -> None:
    """Export every clip listed in CSV_FILE from VIDEO into OUTPUT_DIR.

    Rows that fail validation are skipped; a clip that ffmpeg cannot
    produce is reported and the export moves on. Press Ctrl+C to stop
    after the current clip.

    \b
    Examples:
        clipexport export clips.csv match.mp4 out/
        clipexport export clips.csv match.mp4 out/ --mode precise --resolution 720p
        clipexport export clips.csv match.mkv out/ --json
    """
    service: ExportService = ctx.obj["service"]

    overrides = {
        "processing_mode": mode,
        "resolution": resolution,
        "preset": preset,
        "crf": crf,
        "audio_mode": audio,
        "audio_bitrate_kbps": audio_bitrate,
        "fps": fps,
    }

    try:
        settings = service.resolve_settings(
            {key: value for key, value in overrides.items() if value is not None}
        )
        handle = service.start_export(
            video,
            output_dir,
            settings,
            csv_path=csv_file,
            wait=False,
            reporter=StderrProgressReporter(enabled=not json_flag),
        )
    except ClipExportError as e:
        error_exit(e.message, exit_code_for_error(e), json_flag)

    assert isinstance(handle, ExportJobHandle)
    summary = wait_for_export(service, handle)
    status = handle.status

    if json_flag:
        json_output(
            {
                "status": status.value,
                "job_id": handle.job_id,
                "settings": settings.to_dict(),
                "summary": summary.to_dict(),
            }
        )
    else:
        for line in format_summary_lines(summary):
            click.echo(line)

    ctx.exit(int(exit_code_for_summary(status, summary)))
