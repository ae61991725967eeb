"""
Tests for render profile selection.
"""

import pytest

from src.narrator.render_profile import (
    RENDER_PROFILES,
    estimate_render_time,
    profile_summary,
    select_render_profile,
)


def test_explicit_profile_wins():
    assert select_render_profile("4k", env="development").name == "4k"


def test_profile_from_environment():
    assert select_render_profile(env="development").name == "draft"
    assert select_render_profile(env="staging").name == "preview"
    assert select_render_profile(env="production").name == "production"
    assert select_render_profile(env="").name == "preview"
    assert select_render_profile(env="qa").name == "preview"


def test_render_env_variable(monkeypatch):
    monkeypatch.setenv("RENDER_ENV", "development")
    assert select_render_profile().name == "draft"
    monkeypatch.delenv("RENDER_ENV")
    assert select_render_profile().name == "preview"


def test_unknown_profile_rejected():
    with pytest.raises(ValueError, match="Unknown render profile"):
        select_render_profile("8k")


def test_profile_values():
    draft = RENDER_PROFILES["draft"]
    assert (draft.width, draft.height, draft.fps, draft.crf) == (854, 480, 15, 35)
    assert draft.skip_shorts and draft.skip_thumbnail and draft.skip_audio_sync
    shorts = RENDER_PROFILES["shorts_only"]
    assert (shorts.width, shorts.height) == (1080, 1920)
    assert RENDER_PROFILES["4k"].codec == "h265"


def test_estimate_render_time():
    assert estimate_render_time(100, RENDER_PROFILES["production"]) == 200.0
    assert estimate_render_time(100, RENDER_PROFILES["draft"]) == pytest.approx(30.0)


def test_profile_summary():
    assert profile_summary(RENDER_PROFILES["production"]) == "production (1920x1080@30fps, CRF 18)"
