"""
Tests for background music selection, ducking and mixing.
"""

import os

import pytest
from pydub import AudioSegment
from pydub.generators import Sine

from src.narrator.io_ffmpeg import mix_tracks
from src.narrator.models import AudioSegmentTiming, AudioTimeline, PacingGap, PacingStats
from src.narrator.music import (
    add_background_music,
    calculate_music_volume,
    calculate_playback_rate,
    duck_music,
    get_sidechain_config,
    music_envelope,
    music_volume_at,
    select_background_music,
)

BASE = 0.25
DUCKED = 0.25 * 0.15


def _timeline() -> AudioTimeline:
    """Two segments at 30fps: 60 audio + 15 gap frames, then 30 audio + 30 gap frames."""
    segments = (
        AudioSegmentTiming(0, 0, 75, 75, 2.5, "a.wav", "One.", PacingGap(15, 0.5, "base")),
        AudioSegmentTiming(1, 75, 135, 60, 2.0, "b.wav", "Two.", PacingGap(30, 1.0, "chapter")),
    )
    return AudioTimeline(segments, 135, 4.5, PacingStats(1.5, 0.75, "tutorial"))


def test_attack_ramps_down_to_ducked_volume():
    assert calculate_music_volume(100, True, 100, 160, "professional") == pytest.approx(BASE)
    assert calculate_music_volume(102, True, 100, 160, "professional") == pytest.approx(
        BASE + (DUCKED - BASE) * 0.4
    )
    assert calculate_music_volume(105, True, 100, 160, "professional") == pytest.approx(DUCKED)
    assert calculate_music_volume(150, True, 100, 160, "professional") == pytest.approx(DUCKED)


def test_release_ramps_back_to_base_volume():
    assert calculate_music_volume(160, False, 100, 160, "professional") == pytest.approx(DUCKED)
    assert calculate_music_volume(166, False, 100, 160, "professional") == pytest.approx(
        DUCKED + (BASE - DUCKED) * 0.5
    )
    assert calculate_music_volume(172, False, 100, 160, "professional") == pytest.approx(BASE)


def test_steady_state_without_voiceover():
    assert calculate_music_volume(50, False, 100, 160, "professional") == BASE
    assert calculate_music_volume(500, False, 100, 160, "calm") == 0.20


def test_unknown_mood_ducks_like_professional():
    assert get_sidechain_config("moody") == get_sidechain_config("professional")


def test_volume_follows_timeline_voiceover():
    timeline = _timeline()
    assert music_volume_at(timeline, 0, "professional") == pytest.approx(BASE)
    assert music_volume_at(timeline, 30, "professional") == pytest.approx(DUCKED)
    # release starts where the first voiceover ends
    assert music_volume_at(timeline, 60, "professional") == pytest.approx(DUCKED)
    assert music_volume_at(timeline, 74, "professional") == pytest.approx(BASE)
    assert music_volume_at(timeline, 75, "professional") == pytest.approx(BASE)
    assert music_volume_at(timeline, 90, "professional") == pytest.approx(DUCKED)
    assert music_volume_at(timeline, 500, "professional") == pytest.approx(BASE)
    assert len(music_envelope(timeline, "professional")) == 135


def test_playback_rate_is_clamped():
    assert calculate_playback_rate(120, "professional") == 0.85
    assert calculate_playback_rate(120, "energetic") == 1.15
    assert calculate_playback_rate(120, "casual") == pytest.approx(110 / 120)


def test_select_background_music(tmp_path):
    for name in ("chill-01.mp3", "chill-02.mp3", "upbeat-01.mp3", "chill-notes.txt"):
        (tmp_path / name).write_bytes(b"x")
    music_dir = str(tmp_path)

    assert select_background_music("chill", music_dir, random=lambda: 0.0).endswith("chill-01.mp3")
    assert select_background_music("chill", music_dir, random=lambda: 0.99).endswith("chill-02.mp3")
    assert select_background_music("dramatic", music_dir) is None
    assert select_background_music("none", music_dir) is None
    assert select_background_music("chill", None) is None
    first = select_background_music("chill", music_dir, project_id="vid")
    assert select_background_music("chill", music_dir, project_id="vid") == first


def test_duck_music_lowers_bed_under_voiceover():
    music = Sine(440).to_audio_segment(duration=1000)
    ducked = duck_music(music, _timeline(), 30, "professional")

    assert abs(len(ducked) - 4500) <= 5
    under_voice = ducked[1000:1900]
    after_release = ducked[4000:4450]
    assert under_voice.dBFS < after_release.dBFS - 10


def test_mix_tracks_pads_to_longest():
    voice = AudioSegment.silent(duration=1000)
    bed = Sine(220).to_audio_segment(duration=400)
    assert len(mix_tracks(voice, bed)) == 1000
    assert mix_tracks(voice, None) is voice


def test_add_background_music(tmp_path):
    voice_path = str(tmp_path / "vid_audio.wav")
    track_path = str(tmp_path / "chill-01.wav")
    AudioSegment.silent(duration=4500, frame_rate=44100).export(voice_path, format="wav")
    Sine(330).to_audio_segment(duration=2000).export(track_path, format="wav")

    out = add_background_music(voice_path, track_path, _timeline(), 30, "calm")

    assert out == voice_path
    mixed = AudioSegment.from_file(voice_path)
    assert abs(len(mixed) - 4500) <= 5
    assert mixed.dBFS > -60
    assert os.path.getsize(voice_path) > 0
