"""CLI module for clipexport."""

import logging
from pathlib import Path

import click

from clipexport.config.models import ClipExportConfig

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config: ClipExportConfig,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options over the loaded config.

    Args:
        config: Loaded configuration (supplies the base logging settings).
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from clipexport.config.logging_factory import build_logging_config
    from clipexport.logging import configure_logging

    configure_logging(
        build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    )
    _logging_configured = True


def _load_config() -> ClipExportConfig:
    """Load configuration, exiting with CONFIG_ERROR if it is invalid."""
    from clipexport.cli.exit_codes import ExitCode
    from clipexport.cli.output import error_exit
    from clipexport.config import TomlParseError, get_config

    try:
        return get_config(strict=True)
    except (TomlParseError, ValueError) as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)


@click.group()
@click.version_option(package_name="clipexport")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """clipexport - Cut a list of named clips out of one video with ffmpeg."""
    ctx.ensure_object(dict)

    # Preserve objects injected by tests
    if "config" not in ctx.obj:
        ctx.obj["config"] = _load_config()
    config: ClipExportConfig = ctx.obj["config"]

    _configure_logging(config, log_level, log_file, log_json)

    if "service" not in ctx.obj:
        from clipexport.jobs.service import ExportService

        ctx.obj["service"] = ExportService(config=config)


# Defer import to avoid circular dependency
def _register_commands():
    from clipexport.cli.export import export_command
    from clipexport.cli.preview import preview_command
    from clipexport.cli.serve import serve_command

    main.add_command(preview_command)
    main.add_command(export_command)
    main.add_command(serve_command)


_register_commands()
