"""
Render profiles: resolution, frame rate and encoder settings per render target.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("narrator")


@dataclass(frozen=True)
class RenderProfile:
    name: str
    width: int
    height: int
    fps: int
    crf: int
    codec: str  # h264 | h265
    pixel_format: str  # yuv420p | yuv444p
    skip_shorts: bool
    skip_thumbnail: bool
    skip_audio_sync: bool
    concurrency: int
    auto_preview: bool


RENDER_PROFILES: dict[str, RenderProfile] = {
    "draft": RenderProfile("draft", 854, 480, 15, 35, "h264", "yuv420p", True, True, True, 8, True),
    "preview": RenderProfile(
        "preview", 1280, 720, 24, 28, "h264", "yuv420p", False, True, False, 6, False
    ),
    "production": RenderProfile(
        "production", 1920, 1080, 30, 18, "h264", "yuv420p", False, False, False, 4, False
    ),
    "shorts_only": RenderProfile(
        "shorts_only", 1080, 1920, 30, 20, "h264", "yuv420p", False, True, False, 4, False
    ),
    "4k": RenderProfile("4k", 3840, 2160, 30, 15, "h265", "yuv444p", False, False, False, 2, False),
}

_ENV_PROFILES = {"development": "draft", "staging": "preview", "production": "production"}

_RENDER_TIME_MULTIPLIERS = {
    "draft": 0.3,
    "preview": 0.8,
    "production": 2.0,
    "shorts_only": 1.5,
    "4k": 5.0,
}


def select_render_profile(explicit: str | None = None, env: str | None = None) -> RenderProfile:
    """Explicit name wins; otherwise map ``RENDER_ENV`` (default: preview)."""
    if explicit:
        try:
            return RENDER_PROFILES[explicit]
        except KeyError:
            raise ValueError(
                f"Unknown render profile '{explicit}' (choose from {', '.join(RENDER_PROFILES)})"
            ) from None
    env_name = env if env is not None else os.getenv("RENDER_ENV", "")
    return RENDER_PROFILES[_ENV_PROFILES.get(env_name, "preview")]


def estimate_render_time(duration_seconds: float, profile: RenderProfile) -> float:
    return duration_seconds * _RENDER_TIME_MULTIPLIERS.get(profile.name, 1.0)


def profile_summary(profile: RenderProfile) -> str:
    return (
        f"{profile.name} ({profile.width}x{profile.height}@{profile.fps}fps, CRF {profile.crf})"
    )
