"""Tests for EnvReader."""

from pathlib import Path

from clipexport.config.env import EnvReader


class TestEnvReader:
    """Tests for typed environment access."""

    def test_get_str(self) -> None:
        reader = EnvReader(env={"A": "value"})
        assert reader.get_str("A") == "value"
        assert reader.get_str("B", "default") == "default"

    def test_get_int(self) -> None:
        reader = EnvReader(env={"PORT": "9000", "BAD": "nine"})
        assert reader.get_int("PORT") == 9000
        assert reader.get_int("BAD", 8765) == 8765
        assert reader.get_int("MISSING") is None

    def test_invalid_int_logs_warning(self, caplog) -> None:
        EnvReader(env={"BAD": "nine"}).get_int("BAD")
        assert "Invalid integer value for BAD" in caplog.text

    def test_get_path_must_exist(self, tmp_path: Path) -> None:
        reader = EnvReader(
            env={"HERE": str(tmp_path), "GONE": str(tmp_path / "missing")}
        )
        assert reader.get_path("HERE") == tmp_path
        assert reader.get_path("GONE") is None
        assert reader.get_path("GONE", must_exist=False) == tmp_path / "missing"
