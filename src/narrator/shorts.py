"""
Vertical Shorts extraction: 9:16 crop heuristics and per-hook clip cutting.
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass

from .io_ffmpeg import extract_clip, get_video_info
from .models import ShortsHook
from .timing import timestamp_to_seconds

logger = logging.getLogger("narrator")

SHORTS_WIDTH = 1080
SHORTS_HEIGHT = 1920


@dataclass(frozen=True)
class CropRegion:
    x: int
    y: int
    width: int
    height: int

    def ffmpeg_filter(self) -> str:
        """Crop then scale to the Shorts canvas."""
        return (
            f"crop={self.width}:{self.height}:{self.x}:{self.y},"
            f"scale={SHORTS_WIDTH}:{SHORTS_HEIGHT}:flags=lanczos"
        )


@dataclass(frozen=True)
class ShortsOutput:
    hook_index: int
    output_path: str


def calculate_vertical_crop(
    source_width: int,
    source_height: int,
    focus: str,
    face_x: float | None = None,
) -> CropRegion:
    """
    Full-height 9:16 window inside a landscape frame.
    ``speaker``/``dynamic`` follow ``face_x`` when known, else center like ``center``.
    """
    crop_width = min(source_width, round(source_height * 9 / 16))
    centered = round((source_width - crop_width) / 2)

    if focus == "left":
        x = 0
    elif focus == "right":
        x = source_width - crop_width
    elif focus in ("speaker", "dynamic") and face_x is not None:
        x = int(max(0, min(face_x - crop_width / 2, source_width - crop_width)))
    else:
        x = centered

    logger.debug(
        "Vertical crop %dx%d focus=%s -> x=%d w=%d",
        source_width,
        source_height,
        focus,
        x,
        crop_width,
    )
    return CropRegion(x=x, y=0, width=crop_width, height=source_height)


def shorts_output_path(output_dir: str, project_id: str, index: int) -> str:
    return os.path.join(output_dir, f"{project_id}_shorts_{index + 1:02d}.mp4")


def extract_shorts(
    main_video: str,
    hooks: Sequence[ShortsHook],
    output_dir: str,
    project_id: str,
    focus: str = "center",
) -> list[ShortsOutput]:
    """Cut one vertical clip per hook. Failures are logged and skipped."""
    outputs: list[ShortsOutput] = []
    try:
        info = get_video_info(main_video)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to probe video {main_video}: {e}")
        return outputs

    crop = calculate_vertical_crop(info.width, info.height, focus)
    for i, hook in enumerate(hooks):
        start = timestamp_to_seconds(hook.timestamp_start)
        end = timestamp_to_seconds(hook.timestamp_end)
        if end <= start:
            logger.warning(
                f"Skipping hook {i}: empty range {hook.timestamp_start}-{hook.timestamp_end}"
            )
            continue
        out_path = shorts_output_path(output_dir, project_id, i)
        logger.info(f"Extracting Shorts clip {i} ({hook.hook_type}) {start}s-{end}s")
        try:
            extract_clip(main_video, out_path, start, end, crop.ffmpeg_filter())
        except RuntimeError as e:
            logger.error(f"Failed to extract Shorts clip {i}: {e}")
            continue
        outputs.append(ShortsOutput(hook_index=i, output_path=out_path))
    return outputs
