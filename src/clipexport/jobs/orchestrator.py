"""Export orchestrator.

Runs one export job at a time on a dedicated worker thread:
- rows are processed strictly in order, one ffmpeg invocation at a time
- a failing row is recorded and never aborts the job
- stop requests are honoured at row boundaries (optionally killing the
  in-flight ffmpeg process)
- progress is emitted after every row and when the job finishes
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from clipexport.domain.enums import EventStatus, JobStatus, RowResult, RowStatus
from clipexport.domain.models import (
    ClipSpec,
    EncodingSettings,
    ExportSummary,
    ProgressEvent,
    RowState,
)
from clipexport.exceptions import AlreadyRunningError
from clipexport.executor.command import build_invocation
from clipexport.executor.interface import ClipRunner
from clipexport.executor.runner import STOPPED_BY_USER
from clipexport.executor.types import RunOutcome
from clipexport.jobs.progress import (
    NullProgressReporter,
    ProgressDispatcher,
    ProgressReporter,
)
from clipexport.jobs.summary import (
    aborted_message,
    stopped_message,
    summary_message,
)
from clipexport.logging import job_context

logger = logging.getLogger(__name__)

VALIDATION_FAILURE_REASON = "validation error"
STARTING_MESSAGE = "Starting export..."


def row_number(index: int) -> int:
    """CSV line number for a zero-based data row (line 1 is the header)."""
    return index + 2


@dataclass(frozen=True)
class ExportRequest:
    """Everything needed to run one export.

    rows holds one slot per input row; None marks a row that failed
    validation, with its message in row_errors.
    """

    source_path: Path
    output_dir: Path
    settings: EncodingSettings
    rows: tuple[ClipSpec | None, ...]
    row_errors: Mapping[int, str] = field(default_factory=dict)
    ffmpeg: str | Path = "ffmpeg"

    @property
    def total(self) -> int:
        return len(self.rows)


@dataclass
class ExportJob:
    """Mutable state of one export run, owned by the orchestrator."""

    job_id: str
    request: ExportRequest
    row_states: list[RowState]
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    status: JobStatus = JobStatus.RUNNING
    summary: ExportSummary | None = None
    finished: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)


@dataclass
class _RunTally:
    exported: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_summary(self, total: int) -> ExportSummary:
        return ExportSummary(
            total_rows=total,
            exported=self.exported,
            skipped=self.skipped,
            failed=self.failed,
            errors=tuple(self.errors),
        )


class ExportJobHandle:
    """Read-only view of a running or finished export job."""

    def __init__(self, job: ExportJob) -> None:
        self._job = job

    @property
    def job_id(self) -> str:
        return self._job.job_id

    @property
    def status(self) -> JobStatus:
        with self._job.lock:
            return self._job.status

    @property
    def row_states(self) -> tuple[RowState, ...]:
        """Snapshot of per-row states."""
        with self._job.lock:
            return tuple(self._job.row_states)

    @property
    def summary(self) -> ExportSummary | None:
        """Final summary, or None while the job is running."""
        with self._job.lock:
            return self._job.summary

    @property
    def done(self) -> bool:
        return self._job.finished.is_set()

    def wait(self, timeout: float | None = None) -> ExportSummary | None:
        """Block until the job finishes and all its events are delivered.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely.

        Returns:
            The final summary, or None if the timeout expired first.
        """
        if not self._job.finished.wait(timeout):
            return None
        return self.summary

    def to_dict(self) -> dict:
        with self._job.lock:
            summary = self._job.summary
            return {
                "job_id": self._job.job_id,
                "status": self._job.status.value,
                "total_rows": self._job.request.total,
                "rows": [state.to_dict() for state in self._job.row_states],
                "summary": summary.to_dict() if summary else None,
            }


class ExportOrchestrator:
    """Runs export jobs one at a time.

    State machine: IDLE -> RUNNING -> {COMPLETED, STOPPED}. A finished
    orchestrator accepts a new start().
    """

    def __init__(
        self,
        runner: ClipRunner,
        reporter: ProgressReporter | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            runner: Executes one ffmpeg invocation per clip.
            reporter: Receives progress events (on a dispatcher thread).
        """
        self._runner = runner
        self._reporter = reporter or NullProgressReporter()
        self._lock = threading.Lock()
        self._current: ExportJob | None = None
        self._thread: threading.Thread | None = None

    @property
    def status(self) -> JobStatus:
        with self._lock:
            job = self._current
        if job is None:
            return JobStatus.IDLE
        with job.lock:
            return job.status

    @property
    def current(self) -> ExportJobHandle | None:
        """Handle of the running or most recent job."""
        with self._lock:
            job = self._current
        return ExportJobHandle(job) if job is not None else None

    def start(
        self,
        request: ExportRequest,
        reporter: ProgressReporter | None = None,
    ) -> ExportJobHandle:
        """Start an export on a new worker thread.

        Args:
            request: The export to run.
            reporter: Optional per-job reporter; defaults to the
                orchestrator's reporter.

        Returns:
            Handle for observing the job.

        Raises:
            AlreadyRunningError: If a job is already running. The running
                job is not affected.
        """
        with self._lock:
            current = self._current
            if current is not None and not current.finished.is_set():
                raise AlreadyRunningError(current.job_id)

            job = ExportJob(
                job_id=str(uuid.uuid4()),
                request=request,
                row_states=[RowState() for _ in request.rows],
            )
            dispatcher = ProgressDispatcher(reporter or self._reporter)
            thread = threading.Thread(
                target=self._run_job,
                args=(job, dispatcher),
                name=f"export-{job.job_id[:8]}",
                daemon=True,
            )
            self._current = job
            self._thread = thread
            thread.start()

        logger.info(
            "Started export %s: %d rows from %s",
            job.job_id[:8],
            request.total,
            request.source_path,
            extra={"output_dir": str(request.output_dir)},
        )
        return ExportJobHandle(job)

    def stop(self, kill: bool = False) -> bool:
        """Request cancellation of the running job.

        The request is observed before the next row starts. With kill=True
        the in-flight ffmpeg process is also terminated.

        Args:
            kill: Also terminate the in-flight ffmpeg process.

        Returns:
            True if a running job received the request; False when idle.
        """
        with self._lock:
            job = self._current
        if job is None or job.finished.is_set():
            return False

        if not job.cancel_flag.is_set():
            logger.info("Stop requested for export %s", job.job_id[:8])
        job.cancel_flag.set()
        if kill:
            self._runner.terminate()
        return True

    def join(self, timeout: float | None = None) -> None:
        """Wait for the worker thread of the current job to exit."""
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout)

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _run_job(self, job: ExportJob, dispatcher: ProgressDispatcher) -> None:
        tally = _RunTally()
        stopped = False
        abort_error: Exception | None = None

        with job_context(job.job_id):
            try:
                stopped = self._process_rows(job, dispatcher, tally)
            except Exception as e:
                logger.exception("Export %s aborted", job.job_id[:8])
                abort_error = e
                self._fail_running_rows(job, tally, e)
            finally:
                try:
                    self._finish_job(job, dispatcher, tally, stopped, abort_error)
                finally:
                    job.finished.set()

    def _process_rows(
        self, job: ExportJob, dispatcher: ProgressDispatcher, tally: _RunTally
    ) -> bool:
        """Run every row in order. Returns True if the job was stopped."""
        request = job.request
        total = request.total

        dispatcher.emit(
            ProgressEvent(completed=0, total=total, message=STARTING_MESSAGE)
        )

        for index, clip in enumerate(request.rows):
            if job.cancel_flag.is_set():
                logger.info("Stopping before row %d", row_number(index))
                return True

            with job_context(job.job_id, index):
                if clip is None:
                    message = request.row_errors.get(
                        index,
                        f"Row {row_number(index)}: {VALIDATION_FAILURE_REASON}",
                    )
                    self._set_row_state(
                        job, index, RowStatus.FAILED, VALIDATION_FAILURE_REASON
                    )
                    tally.skipped += 1
                    tally.errors.append(message)
                    logger.info("Skipping invalid row: %s", message)
                    dispatcher.emit(
                        ProgressEvent(
                            completed=index + 1,
                            total=total,
                            message=message,
                            row_index=index,
                            row_result=RowResult.SKIPPED,
                        )
                    )
                    continue

                self._set_row_state(job, index, RowStatus.RUNNING)
                dispatcher.emit(
                    ProgressEvent(
                        completed=index,
                        total=total,
                        message=f"Exporting clip {index + 1} of {total}",
                        row_index=index,
                        row_result=RowResult.RUNNING,
                        current_clip=clip.name,
                    )
                )

                outcome = self._export_clip(request, clip, index)

                if outcome.success:
                    self._set_row_state(job, index, RowStatus.SUCCESS)
                    tally.exported += 1
                    logger.info("Exported %s", outcome.output_path)
                else:
                    error = outcome.as_error()
                    reason = error.message
                    self._set_row_state(job, index, RowStatus.FAILED, reason)
                    tally.failed += 1
                    if reason == STOPPED_BY_USER:
                        tally.errors.append(
                            f"Stopped while exporting row {row_number(index)}"
                        )
                    else:
                        tally.errors.append(
                            f"Row {row_number(index)} failed ({clip.name}): {reason}"
                        )
                    logger.warning(
                        "Clip %r failed: %s",
                        clip.name,
                        reason,
                        extra={
                            "error_kind": error.kind.value,
                            "returncode": error.returncode,
                        },
                    )

                dispatcher.emit(
                    ProgressEvent(
                        completed=index + 1,
                        total=total,
                        message=f"Finished clip {index + 1} of {total}",
                        row_index=index,
                        row_result=(
                            RowResult.SUCCESS if outcome.success else RowResult.FAILED
                        ),
                        current_clip=clip.name,
                    )
                )

                if outcome.error_message == STOPPED_BY_USER:
                    return True

        # A stop that arrived during the final row still ends the job as stopped
        return job.cancel_flag.is_set()

    def _fail_running_rows(
        self, job: ExportJob, tally: _RunTally, error: Exception
    ) -> None:
        reason = f"export aborted: {error}"
        with job.lock:
            for index, state in enumerate(job.row_states):
                if state.status == RowStatus.RUNNING:
                    job.row_states[index] = state.transition(RowStatus.FAILED, reason)
                    tally.failed += 1
        tally.errors.append(f"Export aborted: {error}")

    def _finish_job(
        self,
        job: ExportJob,
        dispatcher: ProgressDispatcher,
        tally: _RunTally,
        stopped: bool,
        abort_error: Exception | None,
    ) -> None:
        summary = tally.to_summary(job.request.total)
        halted = stopped or abort_error is not None
        final_status = JobStatus.STOPPED if halted else JobStatus.COMPLETED
        logger.info(
            "Export %s: exported=%d skipped=%d failed=%d",
            final_status.value,
            summary.exported,
            summary.skipped,
            summary.failed,
        )

        if abort_error is not None:
            message = aborted_message(summary, abort_error)
        elif stopped:
            message = stopped_message(summary)
        else:
            message = summary_message(summary)

        try:
            dispatcher.emit(
                ProgressEvent(
                    completed=summary.processed,
                    total=summary.total_rows,
                    message=message,
                    status=EventStatus.STOPPED if halted else EventStatus.DONE,
                )
            )
            # Deliver every event before waiters are released
            dispatcher.close()
        finally:
            with job.lock:
                job.summary = summary
                job.status = final_status

    def _export_clip(
        self, request: ExportRequest, clip: ClipSpec, index: int
    ) -> RunOutcome:
        """Build and run the invocation for one clip."""
        try:
            invocation = build_invocation(
                request.source_path,
                request.output_dir,
                clip,
                request.settings,
                index,
                ffmpeg=request.ffmpeg,
            )
            return self._runner.run(invocation)
        except Exception as e:
            # Build or runner bugs must fail the row, not the worker thread
            logger.exception("Could not export %r", clip.name)
            return RunOutcome(success=False, error_message=str(e) or type(e).__name__)

    @staticmethod
    def _set_row_state(
        job: ExportJob, index: int, status: RowStatus, reason: str | None = None
    ) -> None:
        with job.lock:
            job.row_states[index] = job.row_states[index].transition(status, reason)
