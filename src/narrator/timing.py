"""
Timestamp, chapter and frame conversion helpers.
"""

import math
import re

_MMSS_RE = re.compile(r"^(\d{2}):(\d{2})$")
_CHAPTER_START_RE = re.compile(r"^(\d{2}:\d{2})")


def timestamp_to_seconds(timestamp: str) -> int:
    """Parse ``MM:SS`` into seconds. Anything else parses to 0 (start of video)."""
    m = _MMSS_RE.match(timestamp or "")
    if not m:
        return 0
    return int(m.group(1)) * 60 + int(m.group(2))


def seconds_to_timestamp(total_seconds: float) -> str:
    """Format seconds as ``MM:SS``."""
    minutes = int(total_seconds // 60)
    seconds = int(total_seconds % 60)
    return f"{minutes:02d}:{seconds:02d}"


def parse_chapter_starts(chapters: str) -> list[str]:
    """Extract the ``MM:SS`` start of every ``MM:SS - Title`` line, verbatim."""
    starts: list[str] = []
    for line in (chapters or "").split("\n"):
        m = _CHAPTER_START_RE.match(line)
        if m:
            starts.append(m.group(1))
    return starts


def seconds_to_frames(seconds: float, fps: float) -> int:
    return math.ceil(seconds * fps)


def frames_to_seconds(frames: int, fps: float) -> float:
    return frames / fps
