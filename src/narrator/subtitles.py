"""
SRT subtitles timed from an audio timeline.
"""

import logging
from pathlib import Path

from .models import AudioTimeline
from .timing import frames_to_seconds

logger = logging.getLogger("narrator")


def format_srt_time(t: float) -> str:
    ms = int(round(t * 1000))
    h, ms = divmod(ms, 3_600_000)
    m, ms = divmod(ms, 60_000)
    s, ms = divmod(ms, 1000)
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def wrap_lines(text: str, max_chars: int = 42, max_lines: int = 3) -> str:
    """Wrap text to specified character and line limits."""
    words = text.split()
    lines: list[str] = []
    cur: list[str] = []
    for w in words:
        if sum(len(x) for x in cur) + len(cur) + len(w) > max_chars and cur:
            lines.append(" ".join(cur))
            cur = []
            if len(lines) >= max_lines:
                break
        cur.append(w)
    if cur and len(lines) < max_lines:
        lines.append(" ".join(cur))
    return "\n".join(lines)


def timeline_to_cues(timeline: AudioTimeline, fps: float) -> list[tuple[float, float, str]]:
    """One cue per segment covering its spoken audio; the trailing gap stays blank."""
    cues: list[tuple[float, float, str]] = []
    for seg in timeline.segments:
        start = frames_to_seconds(seg.start_frame, fps)
        end = frames_to_seconds(seg.start_frame + seg.audio_frames, fps)
        text = " ".join(seg.voiceover.split())
        if text and end > start:
            cues.append((start, end, text))
    return cues


def write_timeline_srt(
    timeline: AudioTimeline, fps: float, path: str, wrap_chars: int = 42, max_lines: int = 3
) -> None:
    """Write timeline cues to an SRT file with text wrapping."""
    content = ""
    for i, (start, end, text) in enumerate(timeline_to_cues(timeline, fps), 1):
        txt = wrap_lines(text, wrap_chars, max_lines)
        content += f"{i}\n{format_srt_time(start)} --> {format_srt_time(end)}\n{txt}\n\n"
    Path(path).write_text(content, encoding="utf-8")
    logger.info(f"Saved SRT -> {path}")
