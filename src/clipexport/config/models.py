"""Configuration data models.

This module defines dataclasses for clipexport configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from clipexport.domain.models import EncodingSettings


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class ExportDefaultsConfig:
    """Default encoding settings for exports.

    Read from the [export] config section. Requests that omit a setting
    fall back to these values.
    """

    settings: EncodingSettings = field(default_factory=EncodingSettings)


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class ServerConfig:
    """Configuration for `clipexport serve`."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 8765
    """Port number for the HTTP server."""

    shutdown_timeout: float = 10.0
    """Seconds to wait for graceful shutdown before cancelling tasks."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )


@dataclass
class ClipExportConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    export: ExportDefaultsConfig = field(default_factory=ExportDefaultsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool, or None if not configured."""
        return getattr(self.tools, tool_name.lower(), None)
