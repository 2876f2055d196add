"""Unit tests for tool resolution."""

from pathlib import Path
from unittest.mock import patch

import pytest

from clipexport.config.models import ClipExportConfig, ToolPathsConfig
from clipexport.exceptions import ErrorKind, ToolNotAvailableError
from clipexport.executor.interface import find_tool, require_tool


class TestFindTool:
    def test_configured_file_wins(self, fake_ffmpeg: Path) -> None:
        with patch("shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_tool("ffmpeg", fake_ffmpeg) == fake_ffmpeg

    def test_configured_command_name_is_looked_up(self) -> None:
        with patch("shutil.which", return_value="/opt/bin/ffmpeg6") as mock_which:
            result = find_tool("ffmpeg", Path("ffmpeg6"))

        mock_which.assert_called_once_with("ffmpeg6")
        assert result == Path("/opt/bin/ffmpeg6")

    def test_path_search(self) -> None:
        with patch("shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_tool("ffmpeg") == Path("/usr/bin/ffmpeg")

    def test_not_found(self) -> None:
        with patch("shutil.which", return_value=None):
            assert find_tool("ffmpeg") is None


class TestRequireTool:
    def test_returns_path(self, fake_ffmpeg: Path) -> None:
        assert require_tool("ffmpeg", fake_ffmpeg) == fake_ffmpeg

    def test_missing_tool_raises_with_hint(self) -> None:
        with patch("shutil.which", return_value=None):
            with pytest.raises(ToolNotAvailableError) as exc_info:
                require_tool("ffmpeg", Path("/nonexistent/ffmpeg"))

        err = exc_info.value
        assert err.kind == ErrorKind.EXTERNAL_TOOL
        assert err.tool_name == "ffmpeg"
        assert "CLIPEXPORT_FFMPEG_PATH" in err.message

    def test_falls_back_to_configured_path(self, fake_ffmpeg: Path) -> None:
        config = ClipExportConfig(tools=ToolPathsConfig(ffmpeg=fake_ffmpeg))

        with patch("clipexport.config.get_config", return_value=config):
            assert require_tool("ffmpeg") == fake_ffmpeg
