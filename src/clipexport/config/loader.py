"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (CLIPEXPORT_*)
3. Config file (~/.clipexport/config.toml)
4. Default values

Environment variables:
- CLIPEXPORT_FFMPEG_PATH: Path to ffmpeg executable
- CLIPEXPORT_LOG_LEVEL: Log level (debug, info, warning, error)
- CLIPEXPORT_LOG_FILE: Log file path
- CLIPEXPORT_LOG_FORMAT: Log format (text, json)
- CLIPEXPORT_SERVER_BIND: Bind address for `clipexport serve`
- CLIPEXPORT_SERVER_PORT: Port for `clipexport serve`
- CLIPEXPORT_CONFIG_PATH: Path to config file (overrides default location)
- CLIPEXPORT_DATA_DIR: Path to data directory (overrides ~/.clipexport/)
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from clipexport.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from clipexport.config.env import EnvReader
from clipexport.config.models import ClipExportConfig
from clipexport.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".clipexport"
CONFIG_FILE_NAME = "config.toml"

# path -> (parsed dict, mtime); reloaded automatically when the file changes
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_data_dir() -> Path:
    """Get the clipexport data directory.

    Holds config.toml and the default log location. Can be overridden by
    the CLIPEXPORT_DATA_DIR environment variable.

    Returns:
        Path to the data directory (~/.clipexport/ by default).
    """
    env_path = os.environ.get("CLIPEXPORT_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_DIR


def get_default_config_path() -> Path:
    """Get the config file path.

    CLIPEXPORT_CONFIG_PATH wins; otherwise config.toml in the data dir.
    """
    env_path = os.environ.get("CLIPEXPORT_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_data_dir() / CONFIG_FILE_NAME


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation. Use
    clear_config_cache() to force a reload regardless of mtime.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        TomlParseError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> ClipExportConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides CLIPEXPORT_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        log_level: CLI override for log level.
        log_file: CLI override for log file.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        ClipExportConfig with merged configuration.

    Raises:
        TomlParseError: When strict=True and the config file cannot be parsed.
        ValueError: If a merged value fails validation.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        ffmpeg_path=ffmpeg_path,
        logging_level=log_level,
        logging_file=log_file,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    builder.apply(cli_source)
    return builder.build()
