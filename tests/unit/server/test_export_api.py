"""Tests for the export HTTP API and health endpoint."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from clipexport.jobs.service import ExportService
from clipexport.server.app import create_app

WAIT = 5.0


@pytest.fixture
def service(fake_runner, fake_ffmpeg: Path) -> ExportService:
    svc = ExportService(runner=fake_runner, ffmpeg_path=fake_ffmpeg)
    yield svc
    svc.stop_export(kill=True)
    svc.orchestrator.join(WAIT)


@pytest.fixture
async def client(service: ExportService):
    async with TestClient(TestServer(create_app(service))) as test_client:
        yield test_client


async def _wait_for_job(service: ExportService) -> None:
    await asyncio.to_thread(service.orchestrator.join, WAIT)


class TestHealth:
    async def test_healthy(self, client: TestClient) -> None:
        resp = await client.get("/health")

        assert resp.status == 200
        data = await resp.json()
        assert data["status"] == "healthy"
        assert data["export_status"] == "idle"
        assert data["ffmpeg_available"] is True
        assert data["version"] == "0.1.0"

    async def test_degraded_without_ffmpeg(self, fake_runner, tmp_path: Path) -> None:
        service = ExportService(runner=fake_runner, ffmpeg_path=tmp_path / "none")

        with patch("shutil.which", return_value=None):
            async with TestClient(TestServer(create_app(service))) as test_client:
                resp = await test_client.get("/health")

                assert resp.status == 503
                assert (await resp.json())["ffmpeg_available"] is False


class TestPreviewEndpoint:
    """Tests for POST /api/preview."""

    async def test_preview(self, client: TestClient, sample_csv: Path) -> None:
        resp = await client.post("/api/preview", json={"csv_path": str(sample_csv)})

        assert resp.status == 200
        data = await resp.json()
        assert data["total_rows"] == 3
        assert len(data["validation_errors"]) == 1

    async def test_missing_path(self, client: TestClient) -> None:
        resp = await client.post("/api/preview", json={})

        assert resp.status == 400
        assert (await resp.json()) == {
            "error": "No CSV file provided",
            "code": "INPUT_ERROR",
        }

    async def test_missing_column(self, client: TestClient, tmp_path: Path) -> None:
        path = tmp_path / "cols.csv"
        path.write_text("title,start,end\nA,1,2\n")

        resp = await client.post("/api/preview", json={"csv_path": str(path)})

        assert resp.status == 422
        assert (await resp.json())["code"] == "PARSE_ERROR"

    async def test_invalid_json(self, client: TestClient) -> None:
        resp = await client.post(
            "/api/preview",
            data="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert resp.status == 400
        assert (await resp.json())["code"] == "INVALID_JSON"

    async def test_non_string_path(self, client: TestClient) -> None:
        resp = await client.post("/api/preview", json={"csv_path": 42})

        assert resp.status == 400
        assert (await resp.json())["code"] == "INVALID_REQUEST"


class TestExportEndpoints:
    """Tests for start, stop and status."""

    async def test_start_and_status(
        self,
        client: TestClient,
        service: ExportService,
        sample_csv: Path,
        source_video: Path,
        tmp_path: Path,
    ) -> None:
        resp = await client.post(
            "/api/export",
            json={
                "csv_path": str(sample_csv),
                "video_path": str(source_video),
                "output_dir": str(tmp_path / "out"),
            },
        )

        assert resp.status == 202
        started = await resp.json()
        assert started["total_rows"] == 3
        assert started["status"] == "running"

        await _wait_for_job(service)
        status = await (await client.get("/api/export/status")).json()

        assert status["status"] == "completed"
        assert status["job"]["job_id"] == started["job_id"]
        assert status["job"]["summary"]["exported"] == 2
        assert status["job"]["summary"]["skipped"] == 1

    async def test_edited_rows_and_settings(
        self,
        client: TestClient,
        service: ExportService,
        fake_runner,
        source_video: Path,
        tmp_path: Path,
    ) -> None:
        resp = await client.post(
            "/api/export",
            json={
                "video_path": str(source_video),
                "output_dir": str(tmp_path / "out"),
                "edited_rows": [
                    {"clip_name": "Edited", "start_time": "1", "end_time": "4"}
                ],
                "settings": {"processing_mode": "precise", "resolution": "480p"},
            },
        )

        assert resp.status == 202
        await _wait_for_job(service)
        args = fake_runner.invocations[0].args
        assert "scale=-2:480" in args

    async def test_invalid_settings(
        self, client: TestClient, sample_csv: Path, source_video: Path, tmp_path
    ) -> None:
        resp = await client.post(
            "/api/export",
            json={
                "csv_path": str(sample_csv),
                "video_path": str(source_video),
                "output_dir": str(tmp_path),
                "settings": {"crf": 2},
            },
        )

        assert resp.status == 400
        assert (await resp.json())["code"] == "VALIDATION_FAILED"

    async def test_bad_edited_rows(self, client: TestClient, tmp_path) -> None:
        resp = await client.post(
            "/api/export",
            json={"video_path": "x", "output_dir": "y", "edited_rows": "nope"},
        )

        assert resp.status == 400
        assert (await resp.json())["code"] == "INVALID_REQUEST"

    async def test_missing_video(
        self, client: TestClient, sample_csv: Path, tmp_path: Path
    ) -> None:
        resp = await client.post(
            "/api/export",
            json={"csv_path": str(sample_csv), "output_dir": str(tmp_path)},
        )

        assert resp.status == 400
        assert (await resp.json())["error"] == "No source video provided"

    async def test_conflict_while_running(
        self,
        client: TestClient,
        service: ExportService,
        fake_runner,
        sample_csv: Path,
        source_video: Path,
        tmp_path: Path,
    ) -> None:
        fake_runner.block_at = 0
        body = {
            "csv_path": str(sample_csv),
            "video_path": str(source_video),
            "output_dir": str(tmp_path / "out"),
        }

        first = await client.post("/api/export", json=body)
        assert first.status == 202
        assert await asyncio.to_thread(fake_runner.started.wait, WAIT)

        second = await client.post("/api/export", json=body)

        assert second.status == 409
        assert (await second.json())["code"] == "ALREADY_RUNNING"

        fake_runner.release.set()
        await _wait_for_job(service)
        status = await (await client.get("/api/export/status")).json()
        assert status["job"]["job_id"] == (await first.json())["job_id"]
        assert status["status"] == "completed"

    async def test_stop_when_idle(self, client: TestClient) -> None:
        resp = await client.post("/api/export/stop")

        assert resp.status == 200
        assert await resp.json() == {"stop_requested": False, "status": "idle"}

    async def test_stop_running_export(
        self,
        client: TestClient,
        service: ExportService,
        fake_runner,
        sample_csv: Path,
        source_video: Path,
        tmp_path: Path,
    ) -> None:
        fake_runner.block_at = 0
        await client.post(
            "/api/export",
            json={
                "csv_path": str(sample_csv),
                "video_path": str(source_video),
                "output_dir": str(tmp_path / "out"),
            },
        )
        assert await asyncio.to_thread(fake_runner.started.wait, WAIT)

        resp = await client.post("/api/export/stop", json={"kill": True})

        assert (await resp.json())["stop_requested"] is True
        await _wait_for_job(service)
        status = await (await client.get("/api/export/status")).json()
        assert status["status"] == "stopped"
        assert status["job"]["rows"][0]["reason"] == "stopped by user"

    async def test_stop_kill_must_be_boolean(self, client: TestClient) -> None:
        resp = await client.post("/api/export/stop", json={"kill": "yes"})
        assert resp.status == 400


class TestEventStream:
    """Tests for GET /api/events/export."""

    @staticmethod
    async def _read_event(resp) -> tuple[str, dict]:
        event_type = ""
        data: dict = {}
        while True:
            raw = await asyncio.wait_for(resp.content.readline(), WAIT)
            line = raw.decode("utf-8").rstrip("\n")
            if line.startswith("event: "):
                event_type = line[len("event: ") :]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: ") :])
            elif not line and event_type:
                return event_type, data

    async def test_streams_progress_until_done(
        self,
        client: TestClient,
        sample_csv: Path,
        source_video: Path,
        tmp_path: Path,
    ) -> None:
        resp = await client.get("/api/events/export")
        assert resp.status == 200
        assert resp.headers["Content-Type"].startswith("text/event-stream")

        event_type, data = await self._read_event(resp)
        assert event_type == "status"
        assert data == {"status": "idle", "job": None}

        started = await client.post(
            "/api/export",
            json={
                "csv_path": str(sample_csv),
                "video_path": str(source_video),
                "output_dir": str(tmp_path / "out"),
            },
        )
        assert started.status == 202

        progress = []
        while True:
            event_type, data = await self._read_event(resp)
            assert event_type == "progress"
            progress.append(data)
            if data["status"] != "running":
                break

        assert progress[0]["message"] == "Starting export..."
        assert progress[-1]["status"] == "done"
        assert progress[-1]["message"] == "Done. Exported: 2, Skipped: 1, Failed: 0"
        skipped = [p for p in progress if p["row_result"] == "skipped"]
        assert [p["row_index"] for p in skipped] == [2]
        resp.close()
