"""Shared test fixtures for clipexport."""

import os
import shutil
import tempfile
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from clipexport.config import clear_config_cache
from clipexport.executor.runner import STOPPED_BY_USER
from clipexport.executor.types import RunOutcome

SAMPLE_CSV = """\
Clip Name,Clip Start Time,Clip End Time
Kickoff,00:00:05:00,00:00:12:15
Goal,01:20,01:34
Bad,abc,00:00:10
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def sample_csv(temp_dir: Path) -> Path:
    """Write a clip list with two valid rows and one invalid row."""
    path = temp_dir / "clips.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def source_video(temp_dir: Path) -> Path:
    """Create a placeholder source video file."""
    path = temp_dir / "match.mp4"
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def fake_ffmpeg(temp_dir: Path) -> Path:
    """Create a file that stands in for the ffmpeg executable path."""
    path = temp_dir / "bin" / "ffmpeg"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path


@pytest.fixture(autouse=True)
def clipexport_data_dir(temp_dir: Path):
    """Point CLIPEXPORT_DATA_DIR at an empty temp directory for every test.

    Keeps tests from reading the developer's ~/.clipexport/config.toml and
    clears the config file cache around each test.
    """
    data_dir = temp_dir / ".clipexport"
    data_dir.mkdir(parents=True, exist_ok=True)

    clear_config_cache()
    env = {"CLIPEXPORT_DATA_DIR": str(data_dir)}
    with patch.dict(os.environ, env):
        os.environ.pop("CLIPEXPORT_CONFIG_PATH", None)
        os.environ.pop("CLIPEXPORT_FFMPEG_PATH", None)
        yield data_dir
    clear_config_cache()


class FakeClipRunner:
    """ClipRunner double that records invocations instead of running ffmpeg.

    Attributes:
        fail_names: Clip output names containing any of these substrings fail.
        block_at: Zero-based call number that blocks until release is set.
        started: Set when the blocking call has begun.
        release: Set to let the blocking call finish.
    """

    def __init__(self) -> None:
        self.invocations = []
        self.fail_names: set[str] = set()
        self.block_at: int | None = None
        self.started = threading.Event()
        self.release = threading.Event()
        self.terminated = False

    def run(self, invocation):
        call_number = len(self.invocations)
        self.invocations.append(invocation)

        if call_number == self.block_at:
            self.started.set()
            self.release.wait(timeout=5)

        if self.terminated:
            return RunOutcome(success=False, error_message=STOPPED_BY_USER)
        if any(name in invocation.output_path.name for name in self.fail_names):
            return RunOutcome(success=False, returncode=1, error_message="boom")
        return RunOutcome(
            success=True, returncode=0, output_path=invocation.output_path
        )

    def terminate(self) -> bool:
        self.terminated = True
        self.release.set()
        return True


@pytest.fixture
def fake_runner() -> FakeClipRunner:
    """Runner double; set fail_names or block_at before starting an export."""
    runner = FakeClipRunner()
    yield runner
    # Never leave a worker thread parked on the gate
    runner.release.set()
