"""CLI serve command: run the HTTP API for interactive front ends."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

import click

from clipexport.cli.exit_codes import ExitCode
from clipexport.config.models import ClipExportConfig
from clipexport.jobs.service import ExportService

logger = logging.getLogger(__name__)


async def run_server(
    service: ExportService,
    bind: str,
    port: int,
    shutdown_timeout: float,
) -> int:
    """Run the HTTP server until SIGINT or SIGTERM.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from aiohttp import web

    from clipexport.server.app import create_app

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_shutdown_signal(sig: signal.Signals) -> None:
        logger.info("Received %s, initiating graceful shutdown", sig.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_shutdown_signal, sig)
        except NotImplementedError:
            # add_signal_handler is not available on Windows event loops
            logger.debug("Signal handlers not supported on this platform")

    app = create_app(service)
    runner = web.AppRunner(app, shutdown_timeout=shutdown_timeout)
    await runner.setup()

    try:
        site = web.TCPSite(runner, bind, port)
        await site.start()

        logger.info(
            "clipexport server started on http://%s:%d (PID %d)",
            bind,
            port,
            os.getpid(),
        )
        logger.info("Health endpoint: http://%s:%d/health", bind, port)
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()
    except OSError as e:
        logger.error("Cannot serve on %s:%d: %s", bind, port, e)
        return 1
    finally:
        if service.stop_export(kill=True):
            logger.info("Stopped running export for shutdown")
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass
        await runner.cleanup()
        logger.info("clipexport server stopped")

    return 0


@click.command("serve")
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 8765).",
)
@click.pass_context
def serve_command(ctx: click.Context, bind: str | None, port: int | None) -> None:
    """Run the HTTP API with a live progress event stream.

    The server binds to localhost by default. Override with --bind to
    expose it on other interfaces.

    \b
    Examples:
        clipexport serve
        clipexport serve --port 9000
    """
    config: ClipExportConfig = ctx.obj["config"]
    service: ExportService = ctx.obj["service"]

    server_bind = bind if bind is not None else config.server.bind
    server_port = port if port is not None else config.server.port

    if not 1 <= server_port <= 65535:
        logger.error("Port must be 1-65535, got %d", server_port)
        sys.exit(ExitCode.CONFIG_ERROR)

    logger.info(
        "Starting clipexport server (bind=%s, port=%d)", server_bind, server_port
    )

    try:
        exit_code = asyncio.run(
            run_server(
                service,
                server_bind,
                server_port,
                config.server.shutdown_timeout,
            )
        )
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
