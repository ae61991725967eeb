"""
Thumbnail capture from the rendered main video.
"""

import logging

from .io_ffmpeg import capture_representative_frame

logger = logging.getLogger("narrator")

THUMBNAIL_WIDTH = 1280
THUMBNAIL_HEIGHT = 720


def generate_thumbnail(video_path: str, output_path: str, title: str = "") -> str | None:
    """Write a 1280x720 PNG to ``output_path``; returns None if capture failed."""
    logger.info(f"Generating thumbnail '{title}' -> {output_path}")
    try:
        capture_representative_frame(video_path, output_path, THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT)
    except RuntimeError as e:
        logger.warning(f"Thumbnail capture failed: {e}")
        return None
    return output_path
