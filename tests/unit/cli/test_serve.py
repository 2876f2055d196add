"""Tests for the serve command."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from clipexport.cli.exit_codes import ExitCode
from clipexport.cli.serve import serve_command
from clipexport.config.models import ClipExportConfig, ServerConfig


@pytest.fixture
def obj() -> dict:
    return {
        "config": ClipExportConfig(server=ServerConfig(port=9100)),
        "service": MagicMock(),
    }


class TestServeCommand:
    """Tests for option handling; the server itself is not started."""

    def test_uses_config_defaults(self, obj: dict) -> None:
        with patch("clipexport.cli.serve.run_server") as mock_run, patch(
            "clipexport.cli.serve.asyncio.run", return_value=0
        ):
            result = CliRunner().invoke(serve_command, [], obj=obj)

        assert result.exit_code == 0
        mock_run.assert_called_once_with(obj["service"], "127.0.0.1", 9100, 10.0)

    def test_cli_overrides_config(self, obj: dict) -> None:
        with patch("clipexport.cli.serve.run_server") as mock_run, patch(
            "clipexport.cli.serve.asyncio.run", return_value=0
        ):
            CliRunner().invoke(
                serve_command, ["--bind", "0.0.0.0", "-p", "9200"], obj=obj
            )

        mock_run.assert_called_once_with(obj["service"], "0.0.0.0", 9200, 10.0)

    def test_invalid_port(self, obj: dict) -> None:
        with patch("clipexport.cli.serve.asyncio.run") as mock_asyncio_run:
            result = CliRunner().invoke(serve_command, ["--port", "0"], obj=obj)

        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_asyncio_run.assert_not_called()

    def test_server_error_exit_code(self, obj: dict) -> None:
        with patch("clipexport.cli.serve.run_server"), patch(
            "clipexport.cli.serve.asyncio.run", return_value=1
        ):
            result = CliRunner().invoke(serve_command, [], obj=obj)

        assert result.exit_code == 1
