"""
Project manifest loading and updating.

The manifest is validated upstream; this module only converts the JSON into
the pipeline's dataclasses and fails loudly when a required field is absent.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .models import (
    ContentEngine,
    EmotionalTrigger,
    PredictedEngagement,
    ScriptSegment,
    ShortsHook,
    VisualHint,
    VoicePersona,
)

logger = logging.getLogger("narrator")


@dataclass
class ProjectManifest:
    project_id: str
    status: str
    content_engine: ContentEngine
    primary_language: str = "en"
    raw: dict = field(default_factory=dict)


def _require(data: dict, key: str, where: str):
    if key not in data or data[key] is None:
        raise ValueError(f"Manifest is missing '{where}.{key}'")
    return data[key]


def _trigger(value) -> EmotionalTrigger | None:
    return EmotionalTrigger(value) if value else None


def parse_segment(data: dict) -> ScriptSegment:
    duration = float(_require(data, "estimated_duration_seconds", "script[]"))
    if duration <= 0:
        raise ValueError(f"estimated_duration_seconds must be positive, got {duration}")
    return ScriptSegment(
        timestamp=str(_require(data, "timestamp", "script[]")),
        voiceover=str(_require(data, "voiceover", "script[]")),
        visual_hint=VisualHint.parse(_require(data, "visual_hint", "script[]")),
        estimated_duration_seconds=duration,
        emotional_trigger=_trigger(data.get("emotional_trigger")),
        emphasis_words=tuple(data.get("emphasis_words") or ()),
        asset_url=data.get("asset_url"),
    )


def parse_hook(data: dict) -> ShortsHook:
    engagement = data.get("predicted_engagement") or {}
    return ShortsHook(
        text=str(data.get("text", "")),
        timestamp_start=str(_require(data, "timestamp_start", "shorts.hooks[]")),
        timestamp_end=str(_require(data, "timestamp_end", "shorts.hooks[]")),
        hook_type=str(data.get("hook_type", "")),
        emotional_trigger=_trigger(data.get("emotional_trigger")),
        controversy_score=float(data.get("controversy_score", 0.0)),
        predicted_engagement=PredictedEngagement(
            comments=engagement.get("comments", "medium"),
            shares=engagement.get("shares", "medium"),
            completion_rate=engagement.get("completion_rate"),
        ),
        injected_cta=data.get("injected_cta"),
    )


def parse_content_engine(data: dict) -> ContentEngine:
    seo = data.get("seo") or {}
    shorts = data.get("shorts") or {}
    media = _require(data, "media_preference", "content_engine")
    visual = _require(media, "visual", "content_engine.media_preference")
    voice_data = media.get("voice")
    voice = (
        VoicePersona(
            provider=voice_data["provider"],
            voice_id=voice_data.get("voice_id", ""),
            style=voice_data.get("style", "narrative"),
            language=voice_data.get("language", "en"),
        )
        if voice_data
        else None
    )
    titles: list[str] = []
    for regional in seo.get("regional_seo") or []:
        titles.extend(regional.get("titles") or [])

    return ContentEngine(
        content_type=str(_require(visual, "content_type", "media_preference.visual")),
        estimated_duration_seconds=float(
            _require(data, "estimated_duration_seconds", "content_engine")
        ),
        chapters=seo.get("chapters") or "",
        hooks=tuple(parse_hook(h) for h in shorts.get("hooks") or []),
        script=tuple(parse_segment(s) for s in _require(data, "script", "content_engine")),
        tags=tuple(seo.get("tags") or ()),
        titles=tuple(titles),
        vertical_crop_focus=shorts.get("vertical_crop_focus", "center"),
        face_detection_hint=bool(shorts.get("face_detection_hint", False)),
        voice=voice,
        mood=visual.get("mood", "professional"),
        theme_suggestion=visual.get("theme_suggestion"),
        music_mood=shorts.get("recommended_music_mood") or "none",
    )


def parse_manifest(data: dict) -> ProjectManifest:
    engine = _require(data, "content_engine", "manifest")
    return ProjectManifest(
        project_id=str(_require(data, "project_id", "manifest")),
        status=str(data.get("status", "")),
        content_engine=parse_content_engine(engine),
        primary_language=(engine.get("seo") or {}).get("primary_language", "en"),
        raw=data,
    )


def load_manifest(path: str) -> ProjectManifest:
    """Read and parse a manifest JSON file."""
    logger.info(f"Loading manifest {path}")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    manifest = parse_manifest(data)
    logger.info(
        f"Manifest {manifest.project_id}: {len(manifest.content_engine.script)} segments, "
        f"{len(manifest.content_engine.hooks)} hooks"
    )
    return manifest


def write_updated_manifest(manifest: ProjectManifest, assets: dict, path: str) -> dict:
    """Write the manifest back with its rendered assets and ``uploading`` status."""
    updated = copy.deepcopy(manifest.raw)
    updated["status"] = "uploading"
    updated["assets"] = {k: v for k, v in assets.items() if v is not None}
    updated["updated_at"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    Path(path).write_text(json.dumps(updated, indent=2, ensure_ascii=False), encoding="utf-8")
    return updated
