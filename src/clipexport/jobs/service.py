"""Export service: the boundary operations the CLI and HTTP shells call.

ExportService validates inputs up front (batch-fatal errors surface
before any row runs), resolves ffmpeg, and hands the validated rows to a
single ExportOrchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from clipexport.clips.models import CsvPreview, ValidationResult
from clipexport.clips.reader import load_clips, preview_csv
from clipexport.clips.validator import validate_records
from clipexport.config.models import ClipExportConfig
from clipexport.domain.enums import JobStatus
from clipexport.domain.models import EncodingSettings, ExportSummary
from clipexport.domain.schema import parse_encoding_settings
from clipexport.exceptions import InputError, ValidationError
from clipexport.executor.interface import ClipRunner, require_tool
from clipexport.executor.runner import FFmpegClipRunner
from clipexport.jobs.orchestrator import (
    ExportJobHandle,
    ExportOrchestrator,
    ExportRequest,
)
from clipexport.jobs.progress import ProgressReporter

logger = logging.getLogger(__name__)


def _require_path(value: Path | str | None, what: str) -> Path:
    if value is None or not str(value).strip():
        raise InputError(f"No {what} provided")
    return Path(value).expanduser()


class ExportService:
    """Boundary operations for previewing and exporting clip lists.

    One service owns one orchestrator, so at most one export runs at a
    time per service instance.
    """

    def __init__(
        self,
        runner: ClipRunner | None = None,
        reporter: ProgressReporter | None = None,
        *,
        config: ClipExportConfig | None = None,
        ffmpeg_path: Path | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            runner: Clip runner; defaults to FFmpegClipRunner.
            reporter: Default progress reporter for exports.
            config: Loaded configuration; supplies default encoding settings
                and the configured ffmpeg path.
            ffmpeg_path: Explicit ffmpeg path, overriding configuration.
        """
        self._config = config
        self._ffmpeg_path = ffmpeg_path
        self.orchestrator = ExportOrchestrator(runner or FFmpegClipRunner(), reporter)

    @property
    def configured_ffmpeg(self) -> Path | None:
        """Explicit ffmpeg path, else the configured one, else None (PATH)."""
        if self._ffmpeg_path is not None:
            return self._ffmpeg_path
        if self._config is not None:
            return self._config.get_tool_path("ffmpeg")
        return None

    @property
    def default_settings(self) -> EncodingSettings:
        if self._config is None:
            return EncodingSettings()
        return self._config.export.settings

    def list_preview(self, csv_path: Path | str | None) -> CsvPreview:
        """Read a clip list and report its rows and validation errors.

        Raises:
            InputError: If the path is absent or the CSV cannot be read.
            ParseError: If a required column is missing.
        """
        path = _require_path(csv_path, "CSV file")
        return preview_csv(path)

    def resolve_settings(
        self, settings: EncodingSettings | Mapping[str, Any] | None
    ) -> EncodingSettings:
        """Turn a settings object or raw mapping into EncodingSettings.

        Mapping keys that are absent fall back to the configured defaults.

        Raises:
            ValidationError: If a mapping value is invalid.
        """
        if isinstance(settings, EncodingSettings):
            return settings
        try:
            return parse_encoding_settings(
                dict(settings) if settings else None, base=self.default_settings
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def start_export(
        self,
        video_path: Path | str | None,
        output_dir: Path | str | None,
        settings: EncodingSettings | Mapping[str, Any] | None = None,
        *,
        csv_path: Path | str | None = None,
        edited_rows: Iterable[Mapping[str, str | None]] | None = None,
        wait: bool = True,
        reporter: ProgressReporter | None = None,
    ) -> ExportSummary | ExportJobHandle:
        """Validate inputs and start exporting clips.

        Rows come from edited_rows when given, otherwise from csv_path.

        Args:
            video_path: Source video file.
            output_dir: Directory receiving clips; created if missing.
            settings: Encoding settings, or a raw mapping of overrides.
            csv_path: Clip list CSV.
            edited_rows: Row mappings (clip_name/start_time/end_time).
            wait: Block until the export finishes and return its summary;
                if False, return the job handle immediately.
            reporter: Progress reporter for this export only.

        Returns:
            ExportSummary when wait=True, otherwise an ExportJobHandle.

        Raises:
            InputError: Missing paths, unreadable CSV, missing video,
                ffmpeg unavailable, or no valid rows.
            ParseError: A required CSV column is missing.
            ValidationError: Invalid encoding settings.
            AlreadyRunningError: Another export is running.
        """
        if edited_rows is None and (csv_path is None or not str(csv_path).strip()):
            raise InputError("No clip list provided (CSV file or edited rows)")
        source = _require_path(video_path, "source video")
        target_dir = _require_path(output_dir, "output directory")
        resolved_settings = self.resolve_settings(settings)

        if not source.is_file():
            raise InputError(f"Source video not found: {source}")
        if target_dir.exists() and not target_dir.is_dir():
            raise InputError(f"Output path is not a directory: {target_dir}")

        result = self._load_rows(csv_path, edited_rows)
        if result.valid_count == 0:
            detail = f": {result.errors[0]}" if result.errors else ""
            raise InputError(f"No valid rows to export{detail}")

        ffmpeg = require_tool("ffmpeg", self.configured_ffmpeg)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InputError(
                f"Could not create output directory {target_dir}: {e}"
            ) from e

        request = ExportRequest(
            source_path=source,
            output_dir=target_dir,
            settings=resolved_settings,
            rows=tuple(result.rows),
            row_errors=dict(result.row_errors),
            ffmpeg=ffmpeg,
        )
        handle = self.orchestrator.start(request, reporter)
        if not wait:
            return handle
        summary = handle.wait()
        assert summary is not None  # wait() without timeout always returns one
        return summary

    def stop_export(self, kill: bool = False) -> bool:
        """Request the running export to stop. No-op when idle.

        Returns:
            True if a running export received the request.
        """
        return self.orchestrator.stop(kill=kill)

    def status(self) -> dict[str, Any]:
        """Snapshot of the current or most recent export."""
        handle = self.orchestrator.current
        if handle is None:
            return {"status": JobStatus.IDLE.value, "job": None}
        return {"status": handle.status.value, "job": handle.to_dict()}

    def _load_rows(
        self,
        csv_path: Path | str | None,
        edited_rows: Iterable[Mapping[str, str | None]] | None,
    ) -> ValidationResult:
        if edited_rows is not None:
            result = validate_records(edited_rows)
            logger.debug("Validated %d edited row(s)", len(result.rows))
            return result
        return load_clips(_require_path(csv_path, "CSV file"))
