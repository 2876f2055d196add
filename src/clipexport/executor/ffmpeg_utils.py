"""FFmpeg executor utilities.

Temp file naming, output validation, and cleanup shared by the
invocation builder and the clip runner.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".clipexport_temp_"


def create_temp_output(output_path: Path, prefix: str = TEMP_PREFIX) -> Path:
    """Generate temp output path for safe write-then-move pattern.

    The temp file sits next to the final output so the final rename stays
    on one filesystem. The extension is preserved so ffmpeg still infers
    the container from it.

    Args:
        output_path: Final output path.
        prefix: Prefix for temp file name.

    Returns:
        Path for temporary output file.
    """
    return output_path.with_name(f"{prefix}{output_path.name}")


def validate_output(output_path: Path) -> tuple[bool, str | None]:
    """Validate ffmpeg output file.

    Args:
        output_path: Path to output file.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    if not output_path.exists():
        return False, f"Output file does not exist: {output_path}"

    try:
        output_size = output_path.stat().st_size
    except OSError as e:
        return False, f"Could not stat output file: {e}"

    if output_size == 0:
        return False, f"Output file is empty: {output_path}"

    return True, None


def promote_temp_output(temp_path: Path, output_path: Path) -> None:
    """Atomically move a finished temp file to its final name.

    Raises:
        OSError: If the rename fails.
    """
    temp_path.replace(output_path)
    logger.debug("Promoted %s -> %s", temp_path.name, output_path.name)


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary file, logging any errors.

    Args:
        path: Path to temp file to remove.
    """
    if path.exists():
        try:
            path.unlink()
            logger.debug("Cleaned up temp file: %s", path)
        except OSError as e:
            logger.warning("Could not clean up temp file %s: %s", path, e)
