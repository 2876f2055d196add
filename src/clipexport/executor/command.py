"""FFmpeg command building for clip extraction.

Builds the argument vector for one ffmpeg call per clip. Construction is
pure: the same inputs always give the same arguments, and nothing touches
the filesystem.

Mode summary:
- COPY_FAST: seek before the input, stream copy, keyframe-aligned cut
- PRECISE: seek after the input is opened, so the boundary is frame-accurate
- FAST_SEEK: seek before the input, then re-encode like PRECISE
"""

from __future__ import annotations

from pathlib import Path

from clipexport.core.string_utils import sanitize_filename
from clipexport.core.timecode import format_timecode
from clipexport.domain.enums import AudioMode, ProcessingMode
from clipexport.domain.models import ClipSpec, EncodingSettings

from .ffmpeg_utils import create_temp_output
from .types import Invocation


VIDEO_ENCODER = "libx264"
REENCODE_EXTENSION = "mp4"
DEFAULT_EXTENSION = "mp4"
FASTSTART_EXTENSIONS = frozenset({"mp4", "m4v"})


def format_seconds(value: float) -> str:
    """Format a seconds value for ffmpeg without float noise.

    Example:
        >>> format_seconds(82.5)
        '82.5'
        >>> format_seconds(12.0)
        '12'
    """
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"


def output_extension(source_path: Path, settings: EncodingSettings) -> str:
    """Choose the output container extension.

    Stream copy keeps the source container; re-encoding always writes mp4.
    """
    if settings.processing_mode == ProcessingMode.COPY_FAST:
        ext = source_path.suffix.lstrip(".").casefold()
        return ext or DEFAULT_EXTENSION
    return REENCODE_EXTENSION


def output_filename(
    clip: ClipSpec, index: int, source_path: Path, settings: EncodingSettings
) -> str:
    """Build the output file name for a clip.

    Format: ``{row:03d}-{sanitized name}-{HHMMSS start}.{ext}``. The 1-based
    row number keeps names unique when clip names repeat.
    """
    ext = output_extension(source_path, settings)
    return (
        f"{index + 1:03d}-{sanitize_filename(clip.name)}-"
        f"{format_timecode(clip.start)}.{ext}"
    )


def build_scale_filter(settings: EncodingSettings) -> str | None:
    """Build the scale filter for the target resolution.

    Width ``-2`` keeps the aspect ratio and rounds to an even value, which
    libx264 requires.
    """
    height = settings.resolution.height
    if height is None:
        return None
    return f"scale=-2:{height}"


def build_video_args(settings: EncodingSettings) -> list[str]:
    """Build video re-encode arguments (encoder, preset, CRF, scale, fps)."""
    args = [
        "-c:v",
        VIDEO_ENCODER,
        "-preset",
        settings.preset.value,
        "-crf",
        str(settings.crf),
    ]

    scale_filter = build_scale_filter(settings)
    if scale_filter:
        args.extend(["-vf", scale_filter])

    if settings.fps is not None:
        args.extend(["-r", format_seconds(settings.fps)])

    return args


def build_audio_args(settings: EncodingSettings) -> list[str]:
    """Build audio arguments for re-encode modes."""
    if settings.audio_mode == AudioMode.NONE:
        return ["-an"]
    if settings.audio_mode == AudioMode.COPY:
        return ["-c:a", "copy"]
    return ["-c:a", "aac", "-b:a", f"{settings.audio_bitrate_kbps}k"]


def build_seek_args(
    source_path: Path, clip: ClipSpec, mode: ProcessingMode
) -> list[str]:
    """Build input and seek arguments for the processing mode."""
    source = str(source_path)
    start = format_seconds(clip.start)
    if mode == ProcessingMode.PRECISE:
        # -ss after -i: decode and discard up to the exact start frame
        return ["-i", source, "-ss", start, "-to", format_seconds(clip.end)]
    # -ss before -i: jump in the compressed stream
    return ["-ss", start, "-i", source, "-t", format_seconds(clip.duration)]


def build_invocation(
    source_path: Path,
    output_dir: Path,
    clip: ClipSpec,
    settings: EncodingSettings,
    index: int,
    *,
    ffmpeg: str | Path = "ffmpeg",
) -> Invocation:
    """Build the ffmpeg invocation for one clip.

    Args:
        source_path: Source video file.
        output_dir: Directory receiving the clip.
        clip: Validated clip specification.
        settings: Encoding settings for the run.
        index: Zero-based row index (used to disambiguate file names).
        ffmpeg: Path or name of the ffmpeg executable.

    Returns:
        Invocation with the argument vector, final output path, and the
        temp path ffmpeg writes to.
    """
    output_path = output_dir / output_filename(clip, index, source_path, settings)
    temp_path = create_temp_output(output_path)
    mode = settings.processing_mode

    args: list[str] = [str(ffmpeg), "-y", "-loglevel", "error", "-nostats"]
    args.extend(build_seek_args(source_path, clip, mode))

    if mode == ProcessingMode.COPY_FAST:
        args.extend(["-c", "copy"])
    else:
        args.extend(build_video_args(settings))
        args.extend(build_audio_args(settings))

    if output_path.suffix.lstrip(".") in FASTSTART_EXTENSIONS:
        args.extend(["-movflags", "+faststart"])

    args.append(str(temp_path))

    return Invocation(args=tuple(args), output_path=output_path, temp_path=temp_path)
