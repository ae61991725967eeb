"""
Output layout and the render report.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .models import AudioTimeline
from .render_profile import RenderProfile

logger = logging.getLogger("narrator")


@dataclass(frozen=True)
class OutputPaths:
    output_dir: str
    project_id: str

    @property
    def main_video(self) -> str:
        return os.path.join(self.output_dir, f"{self.project_id}_main.mp4")

    @property
    def audio(self) -> str:
        return os.path.join(self.output_dir, f"{self.project_id}_audio.wav")

    @property
    def segments_dir(self) -> str:
        return os.path.join(self.output_dir, "segments")

    @property
    def timeline(self) -> str:
        return os.path.join(self.output_dir, f"{self.project_id}_timeline.json")

    @property
    def subtitles(self) -> str:
        return os.path.join(self.output_dir, f"{self.project_id}.srt")

    @property
    def thumbnail(self) -> str:
        return os.path.join(self.output_dir, f"{self.project_id}_thumbnail.png")

    @property
    def manifest(self) -> str:
        return os.path.join(self.output_dir, "manifest.json")

    @property
    def render_report(self) -> str:
        return os.path.join(self.output_dir, "render_report.json")


def build_render_report(
    *,
    project_id: str,
    profile: RenderProfile,
    render_time_seconds: float,
    estimated_time_seconds: float,
    timeline: AudioTimeline | None,
    main_video: str,
    shorts_count: int,
    has_thumbnail: bool,
    audio_segments: int,
    estimated_duration_seconds: float,
) -> dict:
    """Render summary; ``pacing_stats`` is copied verbatim from the timeline."""
    efficiency = estimated_time_seconds / render_time_seconds if render_time_seconds > 0 else 0.0
    return {
        "project_id": project_id,
        "render_profile": profile.name,
        "resolution": {"width": profile.width, "height": profile.height},
        "fps": profile.fps,
        "render_time_seconds": render_time_seconds,
        "estimated_time_seconds": estimated_time_seconds,
        "efficiency": f"{efficiency:.2f}",
        "pacing_stats": timeline.pacing_stats.to_dict() if timeline is not None else None,
        "retention_stats": (
            timeline.retention_stats.to_dict()
            if timeline is not None and timeline.retention_stats is not None
            else None
        ),
        "outputs": {
            "main_video": main_video,
            "shorts": shorts_count,
            "thumbnail": has_thumbnail,
        },
        "audio_segments": audio_segments,
        "total_duration_seconds": (
            timeline.total_duration_seconds if timeline is not None else estimated_duration_seconds
        ),
    }


def write_json(data: dict, path: str) -> None:
    Path(path).write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Saved {Path(path).name} -> {path}")
