"""Clip Export - batch-extract named clips from a video with ffmpeg."""

__version__ = "0.1.0"
