"""Configuration management for clipexport.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (CLIPEXPORT_*)
3. Config file (~/.clipexport/config.toml)
4. Default values (lowest priority)
"""

from clipexport.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from clipexport.config.env import EnvReader
from clipexport.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from clipexport.config.logging_factory import build_logging_config
from clipexport.config.models import (
    ClipExportConfig,
    ExportDefaultsConfig,
    LoggingConfig,
    ServerConfig,
    ToolPathsConfig,
)
from clipexport.config.toml_parser import (
    TomlParseError,
    load_toml_file,
    parse_toml,
)

__all__ = [
    # Models
    "ClipExportConfig",
    "ExportDefaultsConfig",
    "LoggingConfig",
    "ServerConfig",
    "ToolPathsConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Logging
    "build_logging_config",
    # TOML
    "TomlParseError",
    "load_toml_file",
    "parse_toml",
]
