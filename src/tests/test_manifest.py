"""
Tests for manifest parsing and the updated manifest written after rendering.
"""

import json

import pytest

from src.narrator.manifest import load_manifest, parse_manifest, write_updated_manifest
from src.narrator.models import EmotionalTrigger, VisualHint


def _manifest() -> dict:
    return {
        "project_id": "vid-001",
        "status": "rendering",
        "content_engine": {
            "estimated_duration_seconds": 95,
            "media_preference": {
                "visual": {"content_type": "analysis", "mood": "calm"},
                "voice": {"provider": "elevenlabs", "voice_id": "v-123", "style": "energetic"},
            },
            "script": [
                {
                    "timestamp": "00:00",
                    "voiceover": "Why did the market move?",
                    "visual_hint": "talking_head_placeholder",
                    "estimated_duration_seconds": 4,
                    "emotional_trigger": "curiosity",
                },
                {
                    "timestamp": "00:04",
                    "voiceover": "Here is the chart.",
                    "visual_hint": "b-roll",
                    "estimated_duration_seconds": 6.5,
                    "emphasis_words": ["chart"],
                },
            ],
            "seo": {
                "chapters": "00:00 - Hook\n00:04 - Chart",
                "tags": ["markets", "analysis"],
                "primary_language": "de",
                "regional_seo": [{"titles": ["Why markets moved", "Market recap"]}],
            },
            "shorts": {
                "vertical_crop_focus": "left",
                "recommended_music_mood": "chill",
                "face_detection_hint": True,
                "hooks": [
                    {
                        "text": "Nobody saw this coming",
                        "timestamp_start": "00:00",
                        "timestamp_end": "00:30",
                        "hook_type": "shock",
                        "controversy_score": 7,
                        "predicted_engagement": {"completion_rate": "high"},
                    }
                ],
            },
        },
    }


def test_parse_manifest():
    manifest = parse_manifest(_manifest())
    engine = manifest.content_engine

    assert manifest.project_id == "vid-001"
    assert manifest.primary_language == "de"
    assert engine.content_type == "analysis"
    assert engine.estimated_duration_seconds == 95.0
    assert engine.mood == "calm"
    assert engine.vertical_crop_focus == "left"
    assert engine.face_detection_hint is True
    assert engine.music_mood == "chill"
    assert engine.titles == ("Why markets moved", "Market recap")
    assert engine.voice.provider == "elevenlabs"
    assert engine.voice.voice_id == "v-123"

    first, second = engine.script
    assert first.emotional_trigger is EmotionalTrigger.CURIOSITY
    assert second.visual_hint is VisualHint.B_ROLL
    assert second.emphasis_words == ("chart",)
    assert second.emotional_trigger is None

    (hook,) = engine.hooks
    assert hook.controversy_score == 7.0
    assert hook.predicted_engagement.completion_rate == "high"
    assert hook.predicted_engagement.comments == "medium"


def test_missing_required_field():
    data = _manifest()
    del data["content_engine"]["script"][0]["voiceover"]
    with pytest.raises(ValueError, match="voiceover"):
        parse_manifest(data)


def test_non_positive_segment_estimate_rejected():
    data = _manifest()
    data["content_engine"]["script"][1]["estimated_duration_seconds"] = 0
    with pytest.raises(ValueError):
        parse_manifest(data)


def test_unknown_visual_hint_rejected():
    data = _manifest()
    data["content_engine"]["script"][0]["visual_hint"] = "hologram"
    with pytest.raises(ValueError):
        parse_manifest(data)


def test_optional_sections_default():
    data = _manifest()
    engine_data = data["content_engine"]
    del engine_data["seo"]
    del engine_data["shorts"]
    del engine_data["media_preference"]["voice"]
    engine = parse_manifest(data).content_engine
    assert engine.chapters == ""
    assert engine.hooks == ()
    assert engine.voice is None
    assert engine.vertical_crop_focus == "center"
    assert engine.music_mood == "none"


def test_load_and_write_updated_manifest(tmp_path):
    src = tmp_path / "in.json"
    src.write_text(json.dumps(_manifest()), encoding="utf-8")
    manifest = load_manifest(str(src))

    out = tmp_path / "manifest.json"
    write_updated_manifest(
        manifest,
        {"video_url": "out/vid-001_main.mp4", "shorts_urls": [], "thumbnail_url": None},
        str(out),
    )
    written = json.loads(out.read_text(encoding="utf-8"))
    assert written["status"] == "uploading"
    assert written["assets"] == {"video_url": "out/vid-001_main.mp4", "shorts_urls": []}
    assert written["updated_at"].endswith("Z")
    assert written["content_engine"] == _manifest()["content_engine"]
    # the source mapping is left untouched
    assert manifest.raw["status"] == "rendering"
