"""
Align Shorts hooks to script segments by timestamp overlap.
"""

import logging
from collections.abc import Sequence

from .models import ScriptSegment, ShortsHook
from .timing import timestamp_to_seconds

logger = logging.getLogger("narrator")


def find_hook_for_timestamp(timestamp: str, hooks: Sequence[ShortsHook]) -> ShortsHook | None:
    """
    First hook whose ``[timestamp_start, timestamp_end)`` window contains ``timestamp``.
    Hooks are expected not to overlap; when they do, list order wins.
    """
    t = timestamp_to_seconds(timestamp)
    for hook in hooks:
        start = timestamp_to_seconds(hook.timestamp_start)
        end = timestamp_to_seconds(hook.timestamp_end)
        if start <= t < end:
            return hook
    return None


def map_hooks_to_segments(
    segments: Sequence[ScriptSegment], hooks: Sequence[ShortsHook]
) -> list[ShortsHook | None]:
    """Zero-or-one hook per segment, in segment order."""
    mapped = [find_hook_for_timestamp(seg.timestamp, hooks) for seg in segments]
    logger.debug(
        "Mapped %d/%d segments to hooks", sum(h is not None for h in mapped), len(segments)
    )
    return mapped
