"""
Asynchronous timeline building: probe audio durations concurrently, then run
the same sequential accumulation as the synchronous path.
"""

import asyncio
import logging
from collections.abc import Sequence

from tqdm.asyncio import tqdm

from .io_ffmpeg import probe_duration_seconds
from .models import AudioTimeline, ContentEngine
from .pacing import DEFAULT_PACING, PacingTables, RandomFn
from .timeline import (
    AudioSegmentInput,
    DurationProbe,
    accumulate_timeline,
    resolve_audio_duration,
)

logger = logging.getLogger("narrator")


async def resolve_audio_durations_async(
    audio_segments: Sequence[AudioSegmentInput],
    probe: DurationProbe = probe_duration_seconds,
    max_concurrent: int = 4,
) -> list[float]:
    """Probe every clip in worker threads; result order follows ``audio_segments``."""
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def resolve_one(i: int, path: str, segment) -> float:
        async with semaphore:
            return await asyncio.to_thread(resolve_audio_duration, path, segment, i, probe)

    tasks = [resolve_one(i, path, seg) for i, (path, seg) in enumerate(audio_segments)]
    if not tasks:
        return []
    logger.info(f"Probing {len(tasks)} audio clips asynchronously...")
    return list(await tqdm.gather(*tasks, desc="Probe audio"))


async def calculate_timeline_async(
    audio_segments: Sequence[AudioSegmentInput],
    fps: float,
    content: ContentEngine,
    *,
    project_id: str = "",
    tables: PacingTables = DEFAULT_PACING,
    random: RandomFn | None = None,
    probe: DurationProbe = probe_duration_seconds,
    track_retention: bool = True,
    max_concurrent: int = 4,
) -> AudioTimeline:
    """Same result as ``calculate_timeline``; only the probing runs concurrently."""
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    durations = await resolve_audio_durations_async(audio_segments, probe, max_concurrent)
    return accumulate_timeline(
        audio_segments,
        durations,
        fps,
        content,
        project_id=project_id,
        tables=tables,
        random=random,
        track_retention=track_retention,
    )


def calculate_timeline_concurrent(
    audio_segments: Sequence[AudioSegmentInput],
    fps: float,
    content: ContentEngine,
    **kwargs,
) -> AudioTimeline:
    """Sync wrapper for calculate_timeline_async."""
    return asyncio.run(calculate_timeline_async(audio_segments, fps, content, **kwargs))
