"""Tests for the export orchestrator."""

import logging
from pathlib import Path

import pytest

from clipexport.domain.enums import EventStatus, JobStatus, RowResult, RowStatus
from clipexport.domain.models import ClipSpec, EncodingSettings
from clipexport.exceptions import AlreadyRunningError
from clipexport.jobs.orchestrator import ExportOrchestrator, ExportRequest
from clipexport.jobs.progress import CollectingProgressReporter

WAIT = 5.0


def _clips(*names: str) -> tuple[ClipSpec, ...]:
    return tuple(
        ClipSpec(name=name, start=float(i * 10), end=float(i * 10 + 5))
        for i, name in enumerate(names)
    )


def _request(tmp_path: Path, rows, row_errors=None) -> ExportRequest:
    return ExportRequest(
        source_path=tmp_path / "match.mp4",
        output_dir=tmp_path / "out",
        settings=EncodingSettings(),
        rows=tuple(rows),
        row_errors=row_errors or {},
    )


@pytest.fixture
def reporter() -> CollectingProgressReporter:
    return CollectingProgressReporter()


@pytest.fixture
def orchestrator(fake_runner, reporter) -> ExportOrchestrator:
    orch = ExportOrchestrator(fake_runner, reporter)
    yield orch
    orch.stop(kill=True)
    orch.join(WAIT)


class TestExportOrchestrator:
    """Tests for the row loop and final summary."""

    def test_idle_before_first_job(self, orchestrator: ExportOrchestrator) -> None:
        assert orchestrator.status == JobStatus.IDLE
        assert orchestrator.current is None
        assert orchestrator.stop() is False

    def test_exports_every_row_in_order(
        self, orchestrator, fake_runner, reporter, tmp_path: Path
    ) -> None:
        handle = orchestrator.start(_request(tmp_path, _clips("A", "B")))
        summary = handle.wait(WAIT)

        assert summary is not None
        assert (summary.exported, summary.skipped, summary.failed) == (2, 0, 0)
        assert handle.status == JobStatus.COMPLETED
        assert [s.status for s in handle.row_states] == [RowStatus.SUCCESS] * 2
        assert [inv.output_path.name for inv in fake_runner.invocations] == [
            "001-A-000000.mp4",
            "002-B-000010.mp4",
        ]

        messages = [event.message for event in reporter.events]
        assert messages == [
            "Starting export...",
            "Exporting clip 1 of 2",
            "Finished clip 1 of 2",
            "Exporting clip 2 of 2",
            "Finished clip 2 of 2",
            "Done. Exported: 2, Skipped: 0, Failed: 0",
        ]

    def test_progress_counts(self, orchestrator, reporter, tmp_path: Path) -> None:
        """completed counts rows finished; only the last event is terminal."""
        orchestrator.start(_request(tmp_path, _clips("A", "B"))).wait(WAIT)

        events = reporter.events
        assert [e.completed for e in events] == [0, 0, 1, 1, 2, 2]
        assert all(e.total == 2 for e in events)
        assert [e.status for e in events[:-1]] == [EventStatus.RUNNING] * 5
        assert events[-1].status == EventStatus.DONE
        assert events[1].row_result == RowResult.RUNNING
        assert events[2].row_result == RowResult.SUCCESS
        assert events[2].current_clip == "A"

    def test_invalid_row_is_skipped(
        self, orchestrator, fake_runner, reporter, tmp_path: Path
    ) -> None:
        a, b = _clips("A", "B")
        error = "Row 3: invalid start time 'abc' (bad)"
        handle = orchestrator.start(
            _request(tmp_path, [a, None, b], row_errors={1: error})
        )
        summary = handle.wait(WAIT)

        assert (summary.exported, summary.skipped, summary.failed) == (2, 1, 0)
        assert summary.errors == (error,)
        assert len(fake_runner.invocations) == 2

        state = handle.row_states[1]
        assert state.status == RowStatus.FAILED
        assert state.reason == "validation error"

        skipped = [e for e in reporter.events if e.row_result == RowResult.SKIPPED]
        assert len(skipped) == 1
        assert skipped[0].message == error
        assert skipped[0].completed == 2
        assert reporter.events[-1].message == (
            "Done. Exported: 2, Skipped: 1, Failed: 0"
        )

    def test_failed_row_does_not_block_later_rows(
        self, orchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.fail_names = {"Bad"}
        handle = orchestrator.start(_request(tmp_path, _clips("A", "Bad", "C")))
        summary = handle.wait(WAIT)

        assert (summary.exported, summary.skipped, summary.failed) == (2, 0, 1)
        assert summary.errors == ("Row 3 failed (Bad): boom",)
        assert [s.status for s in handle.row_states] == [
            RowStatus.SUCCESS,
            RowStatus.FAILED,
            RowStatus.SUCCESS,
        ]
        assert handle.row_states[1].reason == "boom"
        assert handle.status == JobStatus.COMPLETED

    def test_failed_row_logs_error_kind(
        self, orchestrator, fake_runner, caplog, tmp_path: Path
    ) -> None:
        caplog.set_level(logging.WARNING, logger="clipexport.jobs.orchestrator")
        fake_runner.fail_names = {"Bad"}

        orchestrator.start(_request(tmp_path, _clips("Bad"))).wait(WAIT)

        records = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(records) == 1
        assert records[0].error_kind == "external_tool"
        assert records[0].returncode == 1

    def test_runner_exception_fails_only_that_row(
        self, fake_runner, reporter, tmp_path: Path
    ) -> None:
        class ExplodingRunner(type(fake_runner)):
            def run(self, invocation):
                if "B" in invocation.output_path.name:
                    raise RuntimeError("runner bug")
                return super().run(invocation)

        orch = ExportOrchestrator(ExplodingRunner(), reporter)
        summary = orch.start(_request(tmp_path, _clips("A", "B", "C"))).wait(WAIT)

        assert (summary.exported, summary.failed) == (2, 1)
        assert "runner bug" in summary.errors[0]

    def test_build_failure_fails_only_that_row(
        self, orchestrator, monkeypatch, tmp_path: Path
    ) -> None:
        from clipexport.jobs import orchestrator as orchestrator_module

        real_build = orchestrator_module.build_invocation

        def build(source, output_dir, clip, settings, index, **kwargs):
            if clip.name == "B":
                raise OSError("no space left on device")
            return real_build(source, output_dir, clip, settings, index, **kwargs)

        monkeypatch.setattr(orchestrator_module, "build_invocation", build)

        handle = orchestrator.start(_request(tmp_path, _clips("A", "B", "C")))
        summary = handle.wait(WAIT)

        assert handle.status == JobStatus.COMPLETED
        assert (summary.exported, summary.failed) == (2, 1)
        assert handle.row_states[1].reason == "no space left on device"

    def test_unexpected_error_still_finishes_job(
        self, fake_runner, reporter, tmp_path: Path
    ) -> None:
        """A broken outcome halts the job but never leaves it running."""

        class BrokenRunner(type(fake_runner)):
            def run(self, invocation):
                if "B" in invocation.output_path.name:
                    return None
                return super().run(invocation)

        orch = ExportOrchestrator(BrokenRunner(), reporter)
        handle = orch.start(_request(tmp_path, _clips("A", "B", "C")))
        summary = handle.wait(WAIT)

        assert summary is not None
        assert handle.done
        assert handle.status == JobStatus.STOPPED
        assert (summary.exported, summary.failed) == (1, 1)
        assert summary.errors[0].startswith("Export aborted:")
        assert [s.status for s in handle.row_states] == [
            RowStatus.SUCCESS,
            RowStatus.FAILED,
            RowStatus.PENDING,
        ]
        assert handle.row_states[1].reason.startswith("export aborted:")

        final = reporter.events[-1]
        assert final.status == EventStatus.STOPPED
        assert final.message.startswith("Export aborted after 2 of 3 rows")

        # The orchestrator accepts the next job
        follow_up = orch.start(_request(tmp_path, _clips("D")))
        assert follow_up.wait(WAIT).exported == 1

    def test_new_job_after_completion(self, orchestrator, tmp_path: Path) -> None:
        first = orchestrator.start(_request(tmp_path, _clips("A")))
        first.wait(WAIT)

        second = orchestrator.start(_request(tmp_path, _clips("B")))
        second.wait(WAIT)

        assert second.job_id != first.job_id
        assert orchestrator.current.job_id == second.job_id

    def test_to_dict(self, orchestrator, tmp_path: Path) -> None:
        handle = orchestrator.start(_request(tmp_path, _clips("A")))
        handle.wait(WAIT)

        data = handle.to_dict()

        assert data["job_id"] == handle.job_id
        assert data["status"] == "completed"
        assert data["total_rows"] == 1
        assert data["rows"] == [{"status": "success", "reason": None}]
        assert data["summary"]["exported"] == 1


class TestStopAndConcurrency:
    """Tests for stop requests and the single-job guard."""

    def test_stop_after_second_of_five_rows(
        self, orchestrator, fake_runner, reporter, tmp_path: Path
    ) -> None:
        """A stop during row 2 lets it finish; rows 3-5 never start."""
        fake_runner.block_at = 1
        handle = orchestrator.start(
            _request(tmp_path, _clips("A", "B", "C", "D", "E"))
        )
        assert fake_runner.started.wait(WAIT)

        assert orchestrator.stop() is True
        fake_runner.release.set()
        summary = handle.wait(WAIT)

        assert handle.status == JobStatus.STOPPED
        assert (summary.exported, summary.skipped, summary.failed) == (2, 0, 0)
        assert len(fake_runner.invocations) == 2
        assert [s.status for s in handle.row_states] == [
            RowStatus.SUCCESS,
            RowStatus.SUCCESS,
            RowStatus.PENDING,
            RowStatus.PENDING,
            RowStatus.PENDING,
        ]

        final = reporter.events[-1]
        assert final.status == EventStatus.STOPPED
        assert final.message == (
            "Export stopped by user after 2 of 5 rows. "
            "Exported: 2, Skipped: 0, Failed: 0"
        )

    def test_stop_during_last_row_reports_stopped(
        self, orchestrator, fake_runner, reporter, tmp_path: Path
    ) -> None:
        fake_runner.block_at = 1
        handle = orchestrator.start(_request(tmp_path, _clips("A", "B")))
        assert fake_runner.started.wait(WAIT)

        assert orchestrator.stop() is True
        fake_runner.release.set()
        summary = handle.wait(WAIT)

        assert handle.status == JobStatus.STOPPED
        assert summary.exported == 2
        assert [s.status for s in handle.row_states] == [
            RowStatus.SUCCESS,
            RowStatus.SUCCESS,
        ]
        final = reporter.events[-1]
        assert final.status == EventStatus.STOPPED
        assert final.message.startswith("Export stopped by user after 2 of 2 rows")

    def test_kill_abandons_current_row(
        self, orchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.block_at = 1
        handle = orchestrator.start(_request(tmp_path, _clips("A", "B", "C")))
        assert fake_runner.started.wait(WAIT)

        assert orchestrator.stop(kill=True) is True
        summary = handle.wait(WAIT)

        assert fake_runner.terminated
        assert handle.status == JobStatus.STOPPED
        assert (summary.exported, summary.failed) == (1, 1)
        assert summary.errors == ("Stopped while exporting row 3",)
        assert handle.row_states[1].reason == "stopped by user"
        assert handle.row_states[2].status == RowStatus.PENDING

    def test_start_while_running_is_rejected(
        self, orchestrator, fake_runner, tmp_path: Path
    ) -> None:
        """The running job is untouched by a rejected start."""
        fake_runner.block_at = 0
        running = orchestrator.start(_request(tmp_path, _clips("A", "B")))
        assert fake_runner.started.wait(WAIT)

        with pytest.raises(AlreadyRunningError) as exc_info:
            orchestrator.start(_request(tmp_path, _clips("X")))

        assert exc_info.value.job_id == running.job_id
        assert orchestrator.current.job_id == running.job_id

        fake_runner.release.set()
        summary = running.wait(WAIT)
        assert summary.exported == 2
        assert running.status == JobStatus.COMPLETED

    def test_stop_after_completion_is_noop(
        self, orchestrator, tmp_path: Path
    ) -> None:
        orchestrator.start(_request(tmp_path, _clips("A"))).wait(WAIT)
        assert orchestrator.stop() is False
        assert orchestrator.status == JobStatus.COMPLETED

    def test_wait_timeout_returns_none(
        self, orchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.block_at = 0
        handle = orchestrator.start(_request(tmp_path, _clips("A")))
        assert fake_runner.started.wait(WAIT)

        assert handle.wait(0.01) is None
        assert not handle.done
        assert handle.summary is None

        fake_runner.release.set()
        assert handle.wait(WAIT) is not None
