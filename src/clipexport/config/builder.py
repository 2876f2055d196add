"""Configuration builder with explicit layering.

ConfigBuilder composes ClipExportConfig from file, environment, and CLI
sources. Later sources override earlier ones for non-None values.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from clipexport.config.env import EnvReader
from clipexport.config.models import (
    ClipExportConfig,
    ExportDefaultsConfig,
    LoggingConfig,
    ServerConfig,
    ToolPathsConfig,
)
from clipexport.domain.schema import parse_encoding_settings


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Tool paths
    ffmpeg_path: Path | None = None

    # Export defaults (raw [export] mapping, validated at build time)
    export_settings: dict[str, Any] | None = None

    # Server config
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds ClipExportConfig by layering ConfigSources with precedence.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Non-None values from the source override existing values.
        None values are ignored (preserve existing).
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> ClipExportConfig:
        """Build the final ClipExportConfig with defaults for unset values.

        Raises:
            ValueError: If any section fails validation.
        """
        tools = ToolPathsConfig(ffmpeg=self._get("ffmpeg_path", None))

        export = ExportDefaultsConfig(
            settings=parse_encoding_settings(self._get("export_settings", None))
        )

        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 8765),
            shutdown_timeout=self._get("server_shutdown_timeout", 10.0),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return ClipExportConfig(
            tools=tools,
            export=export,
            logging=logging_config,
            server=server,
        )


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from parsed TOML config file."""
    tools = file_config.get("tools", {})
    export = file_config.get("export", {})
    server = file_config.get("server", {})
    logging_conf = file_config.get("logging", {})

    log_file_str = logging_conf.get("file")
    log_file = Path(log_file_str).expanduser() if log_file_str else None

    return ConfigSource(
        # Tool paths
        ffmpeg_path=(
            Path(tools["ffmpeg"]).expanduser() if tools.get("ffmpeg") else None
        ),
        # Export defaults
        export_settings=dict(export) if export else None,
        # Server
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=log_file,
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from CLIPEXPORT_* environment variables."""
    return ConfigSource(
        ffmpeg_path=reader.get_path("CLIPEXPORT_FFMPEG_PATH"),
        server_bind=reader.get_str("CLIPEXPORT_SERVER_BIND"),
        server_port=reader.get_int("CLIPEXPORT_SERVER_PORT"),
        logging_level=reader.get_str("CLIPEXPORT_LOG_LEVEL"),
        logging_file=reader.get_path("CLIPEXPORT_LOG_FILE", must_exist=False),
        logging_format=reader.get_str("CLIPEXPORT_LOG_FORMAT"),
    )
