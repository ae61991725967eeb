"""
Tests for composition props, theme selection and thumbnail capture.
"""

import json

from src.narrator import renderer, thumbnail
from src.narrator.models import ContentEngine, ScriptSegment, VisualHint, EmotionalTrigger
from src.narrator.render_profile import RENDER_PROFILES
from src.narrator.renderer import build_input_props, render_composition, select_theme


def _engine(**kwargs) -> ContentEngine:
    defaults = dict(
        content_type="tutorial",
        estimated_duration_seconds=10,
        script=(
            ScriptSegment("00:00", "Hi.", VisualHint.CODE_BLOCK, 2.0, EmotionalTrigger.AWE, ("Hi",)),
        ),
        tags=("python",),
    )
    defaults.update(kwargs)
    return ContentEngine(**defaults)


def test_select_theme():
    assert select_theme(_engine()) == "corporate"
    assert select_theme(_engine(mood="energetic")) == "cyberpunk"
    assert select_theme(_engine(content_type="podcast")) == "minimalist"
    assert select_theme(_engine(theme_suggestion="whiteboard")) == "whiteboard"
    assert select_theme(_engine(theme_suggestion="neon")) == "corporate"


def test_build_input_props_without_timeline():
    props = build_input_props(_engine(), "out/a.wav", None, "corporate", 30)
    assert props["audioTimeline"] is None
    assert props["segments"][0]["visual_hint"] == "code_block"
    assert props["segments"][0]["emotional_trigger"] == "awe"
    assert props["seoTags"] == ["python"]
    assert props["fps"] == 30


def test_render_composition(monkeypatch, tmp_path):
    commands = []
    monkeypatch.setattr(renderer, "run", lambda cmd: commands.append(cmd))
    out = tmp_path / "vid_main.mp4"
    props = {"fps": 30}
    render_composition("src/index.tsx", "MainVideo", props, str(out), RENDER_PROFILES["4k"])

    (cmd,) = commands
    assert cmd[:6] == ["npx", "remotion", "render", "src/index.tsx", "MainVideo", str(out)]
    assert "--codec=h265" in cmd
    assert "--width=3840" in cmd
    props_path = tmp_path / "vid_main_props.json"
    assert json.loads(props_path.read_text(encoding="utf-8")) == props


def test_thumbnail_failure_returns_none(monkeypatch, tmp_path):
    def fail(*args, **kwargs):
        raise RuntimeError("ffmpeg missing")

    monkeypatch.setattr(thumbnail, "capture_representative_frame", fail)
    assert thumbnail.generate_thumbnail("main.mp4", str(tmp_path / "t.png"), "Title") is None


def test_thumbnail_success(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(
        thumbnail, "capture_representative_frame", lambda *args: calls.append(args)
    )
    out = str(tmp_path / "t.png")
    assert thumbnail.generate_thumbnail("main.mp4", out) == out
    assert calls == [("main.mp4", out, 1280, 720)]
