"""
Tests for SRT output timed from the audio timeline.
"""

from src.narrator.models import AudioSegmentTiming, AudioTimeline, PacingGap, PacingStats
from src.narrator.subtitles import format_srt_time, timeline_to_cues, wrap_lines, write_timeline_srt


def _timeline() -> AudioTimeline:
    segments = (
        AudioSegmentTiming(0, 0, 75, 75, 2.5, "a.wav", "Hello  there,\nworld.", PacingGap(15, 0.5, "base")),
        AudioSegmentTiming(1, 75, 135, 60, 2.0, "b.wav", "Second line.", PacingGap(30, 1.0, "chapter")),
    )
    return AudioTimeline(segments, 135, 4.5, PacingStats(1.5, 0.75, "tutorial"))


def test_format_srt_time():
    assert format_srt_time(0) == "00:00:00,000"
    assert format_srt_time(3661.5) == "01:01:01,500"
    assert format_srt_time(59.9996) == "00:01:00,000"


def test_wrap_lines():
    text = "one two three four five six"
    assert wrap_lines(text, max_chars=10) == "one two\nthree four\nfive six"
    assert wrap_lines(text, max_chars=10, max_lines=2) == "one two\nthree four"


def test_cues_cover_audio_only():
    cues = timeline_to_cues(_timeline(), 30)
    assert cues == [(0.0, 2.0, "Hello there, world."), (2.5, 3.5, "Second line.")]


def test_write_timeline_srt(tmp_path):
    path = tmp_path / "vid.srt"
    write_timeline_srt(_timeline(), 30, str(path))
    assert path.read_text(encoding="utf-8") == (
        "1\n00:00:00,000 --> 00:00:02,000\nHello there, world.\n\n"
        "2\n00:00:02,500 --> 00:00:03,500\nSecond line.\n\n"
    )
