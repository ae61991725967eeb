"""
Composition rendering through the Remotion CLI.

The React compositions live outside this package; this module only assembles
their input props (the timeline is the scheduling contract) and shells out.
"""

import json
import logging
from pathlib import Path

from .io_ffmpeg import ensure_dir, run
from .models import AudioTimeline, ContentEngine
from .render_profile import RenderProfile

logger = logging.getLogger("narrator")

THEMES = ("cyberpunk", "minimalist", "dark_mode", "whiteboard", "corporate")

_THEME_MATRIX: dict[str, dict[str, str]] = {
    "tutorial": {
        "professional": "corporate",
        "casual": "whiteboard",
        "energetic": "cyberpunk",
        "calm": "minimalist",
    },
    "news": {
        "professional": "corporate",
        "casual": "dark_mode",
        "energetic": "cyberpunk",
        "calm": "minimalist",
    },
    "analysis": {
        "professional": "corporate",
        "casual": "dark_mode",
        "energetic": "dark_mode",
        "calm": "minimalist",
    },
    "entertainment": {
        "professional": "dark_mode",
        "casual": "cyberpunk",
        "energetic": "cyberpunk",
        "calm": "whiteboard",
    },
}


def select_theme(content: ContentEngine) -> str:
    if content.theme_suggestion in THEMES:
        return content.theme_suggestion
    return _THEME_MATRIX.get(content.content_type, {}).get(content.mood, "minimalist")


def build_input_props(
    content: ContentEngine,
    audio_path: str,
    timeline: AudioTimeline | None,
    theme: str,
    fps: int,
) -> dict:
    """Props for the MainVideo composition."""
    return {
        "segments": [
            {
                "timestamp": s.timestamp,
                "voiceover": s.voiceover,
                "visual_hint": s.visual_hint.value,
                "estimated_duration_seconds": s.estimated_duration_seconds,
                "emotional_trigger": s.emotional_trigger.value if s.emotional_trigger else None,
                "emphasis_words": list(s.emphasis_words),
            }
            for s in content.script
        ],
        "audioPath": audio_path,
        "audioTimeline": timeline.to_dict() if timeline is not None else None,
        "chapters": content.chapters,
        "seoTags": list(content.tags),
        "theme": theme,
        "fps": fps,
    }


def render_composition(
    entry_point: str,
    composition_id: str,
    props: dict,
    output_path: str,
    profile: RenderProfile,
) -> str:
    """Render one composition to ``output_path`` with the profile's encoder settings."""
    ensure_dir(str(Path(output_path).parent))
    props_path = str(Path(output_path).with_suffix("")) + "_props.json"
    Path(props_path).write_text(json.dumps(props, ensure_ascii=False), encoding="utf-8")

    cmd = [
        "npx",
        "remotion",
        "render",
        entry_point,
        composition_id,
        output_path,
        f"--props={props_path}",
        f"--codec={profile.codec}",
        f"--crf={profile.crf}",
        f"--pixel-format={profile.pixel_format}",
        f"--concurrency={profile.concurrency}",
        f"--width={profile.width}",
        f"--height={profile.height}",
    ]
    logger.info(f"Rendering {composition_id} -> {output_path}")
    run(cmd)
    return output_path
