"""FFmpeg clip runner.

Runs one built invocation as a blocking subprocess, then validates and
promotes the temp output. Failed or abandoned runs never leave a file at
the final output path: the temp file is removed instead.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time

from .ffmpeg_utils import cleanup_temp_file, promote_temp_output, validate_output
from .types import Invocation, RunOutcome

logger = logging.getLogger(__name__)

STOPPED_BY_USER = "stopped by user"


def summarize_stderr(stderr: str, returncode: int | None) -> str:
    """Reduce ffmpeg stderr to a one-line failure reason.

    Uses the last non-empty line (with -loglevel error this is usually the
    fatal message), falling back to the exit code.
    """
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    if lines:
        return lines[-1]
    return f"ffmpeg exited with code {returncode}"


class FFmpegClipRunner:
    """Runs ffmpeg invocations one at a time.

    Thread-safe with respect to terminate(): the orchestrator's worker
    thread calls run() while a shell thread may call terminate().
    """

    def __init__(self) -> None:
        self._process: subprocess.Popen[str] | None = None
        self._terminated = False
        self._lock = threading.Lock()

    def run(self, invocation: Invocation) -> RunOutcome:
        """Run the invocation and wait for it to exit.

        No timeout is applied; a hung ffmpeg blocks until it exits or
        terminate() is called.
        """
        cmd = list(invocation.args)
        command_name = cmd[0].split("/")[-1] if cmd else "unknown"
        logger.debug(
            "Executing command: %s",
            " ".join(cmd),
            extra={"command": command_name, "arg_count": len(cmd)},
        )

        start_time = time.monotonic()
        with self._lock:
            self._terminated = False
            try:
                process = subprocess.Popen(  # nosec B603 - args built internally
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    text=True,
                    errors="replace",
                    # Own session: a terminal Ctrl+C reaches us, not ffmpeg
                    start_new_session=True,
                )
            except OSError as e:
                logger.error("Failed to start ffmpeg process: %s", e)
                return RunOutcome(
                    success=False,
                    error_message=f"Failed to start ffmpeg process: {e}",
                )
            self._process = process

        try:
            _, stderr = process.communicate()
        finally:
            with self._lock:
                self._process = None
                terminated = self._terminated

        returncode = process.returncode
        elapsed = time.monotonic() - start_time
        logger.debug(
            "Command completed",
            extra={
                "command": command_name,
                "elapsed_seconds": round(elapsed, 3),
                "returncode": returncode,
            },
        )

        return self._finish(invocation, returncode, stderr or "", terminated)

    def _finish(
        self,
        invocation: Invocation,
        returncode: int | None,
        stderr: str,
        terminated: bool,
    ) -> RunOutcome:
        temp_path = invocation.temp_path

        if terminated:
            cleanup_temp_file(temp_path)
            return RunOutcome(
                success=False, returncode=returncode, error_message=STOPPED_BY_USER
            )

        if returncode != 0:
            cleanup_temp_file(temp_path)
            return RunOutcome(
                success=False,
                returncode=returncode,
                error_message=summarize_stderr(stderr, returncode),
            )

        is_valid, error = validate_output(temp_path)
        if not is_valid:
            cleanup_temp_file(temp_path)
            return RunOutcome(success=False, returncode=returncode, error_message=error)

        try:
            promote_temp_output(temp_path, invocation.output_path)
        except OSError as e:
            cleanup_temp_file(temp_path)
            return RunOutcome(
                success=False,
                returncode=returncode,
                error_message=f"Could not move output into place: {e}",
            )

        return RunOutcome(
            success=True, returncode=returncode, output_path=invocation.output_path
        )

    def terminate(self) -> bool:
        """Kill the running ffmpeg process, if any."""
        with self._lock:
            process = self._process
            if process is None or process.poll() is not None:
                return False
            self._terminated = True
            logger.info("Killing ffmpeg process (pid=%d)", process.pid)
            process.kill()
            return True
