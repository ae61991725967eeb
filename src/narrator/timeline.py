"""
Audio-driven timeline with retention pacing.

Building a timeline is two passes:

1. resolve every segment's audio duration (probe the file, fall back to the
   script estimate on any failure);
2. fold the segments in script order over a ``(running_frames, elapsed_seconds)``
   cursor, sizing each trailing gap from the pacing tables.

Pass 2 is strictly sequential: the timeline position and pattern-interrupt
checks of segment ``i + 1`` depend on where segment ``i`` ended.
"""

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .hooks import map_hooks_to_segments
from .io_ffmpeg import probe_duration_seconds
from .models import (
    AudioSegmentTiming,
    AudioTimeline,
    ContentEngine,
    EmotionalTrigger,
    PacingGap,
    PacingStats,
    RetentionMeta,
    RetentionStats,
    ScriptSegment,
    ShortsHook,
    TimelinePosition,
)
from .pacing import (
    CHAPTER_TRANSITION_GAP,
    DEFAULT_PACING,
    MIN_GAP_SECONDS,
    PATTERN_INTERRUPT_MULTIPLIER,
    UPCOMING_INTENSITY_CEILING,
    PacingTables,
    RandomFn,
    content_type_pacing,
    get_completion_rate_adjustment,
    get_controversy_pacing_adjustment,
    get_position_pacing_multiplier,
    get_randomized_pacing,
    get_timeline_position,
    get_video_level_multiplier,
    is_pattern_interrupt_point,
)
from .seeded_random import constant_random, create_seeded_random
from .timing import frames_to_seconds, parse_chapter_starts, seconds_to_frames

logger = logging.getLogger("narrator")

DurationProbe = Callable[[str], float]
AudioSegmentInput = tuple[str, ScriptSegment]

_INTENSE_TRIGGERS = (EmotionalTrigger.FOMO, EmotionalTrigger.ANGER)


@dataclass(frozen=True)
class _Cursor:
    running_frames: int = 0
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class _Gap:
    seconds: float
    reason: str
    meta: RetentionMeta


def resolve_audio_duration(
    path: str, segment: ScriptSegment, index: int, probe: DurationProbe
) -> float:
    """Probed duration of one clip, or the script estimate if probing fails."""
    try:
        seconds = probe(path)
    except Exception as e:
        logger.warning(
            "Could not get audio duration for segment %d (%s): %s; using estimate %.2fs",
            index,
            path,
            e,
            segment.estimated_duration_seconds,
        )
        return float(segment.estimated_duration_seconds)
    if seconds is None or seconds <= 0:
        logger.warning(
            "Empty audio duration for segment %d (%s); using estimate %.2fs",
            index,
            path,
            segment.estimated_duration_seconds,
        )
        return float(segment.estimated_duration_seconds)
    return float(seconds)


def resolve_audio_durations(
    audio_segments: Sequence[AudioSegmentInput], probe: DurationProbe = probe_duration_seconds
) -> list[float]:
    return [
        resolve_audio_duration(path, seg, i, probe) for i, (path, seg) in enumerate(audio_segments)
    ]


def is_chapter_end(next_segment: ScriptSegment | None, chapter_starts: Sequence[str]) -> bool:
    """Last segment, or the next one opens a chapter (exact ``MM:SS`` string match)."""
    if next_segment is None:
        return True
    return next_segment.timestamp in chapter_starts


def compute_pacing_gap(
    segment: ScriptSegment,
    next_segment: ScriptSegment | None,
    *,
    content_type: str,
    chapter_end: bool,
    hook: ShortsHook | None,
    elapsed_seconds: float,
    total_estimated_seconds: float,
    video_multiplier: float | None,
    random: RandomFn,
    tables: PacingTables = DEFAULT_PACING,
) -> _Gap:
    """Gap in seconds after ``segment``, with a reason for every contribution."""
    parts: list[str] = []

    gap = get_randomized_pacing(content_type_pacing(content_type, tables), random)
    if content_type in tables.content_type:
        parts.append(f"base {content_type} {gap:.3f}s")
    else:
        parts.append(f"base {content_type} (as tutorial) {gap:.3f}s")

    if chapter_end:
        gap = CHAPTER_TRANSITION_GAP
        parts.append(f"chapter transition {gap:.3f}s")

    hint_config = tables.visual_hint.get(segment.visual_hint)
    if hint_config is not None:
        modifier = get_randomized_pacing(hint_config, random)
        gap += modifier
        parts.append(f"+{segment.visual_hint.value} {modifier:.3f}s")

    trigger = segment.emotional_trigger
    if trigger is not None:
        emotion_config = tables.emotional.get(trigger)
        if emotion_config is not None:
            floor = get_randomized_pacing(emotion_config, random)
            gap = max(gap, floor)
            parts.append(f"post-{trigger.value} floor {floor:.3f}s")

    upcoming = next_segment.emotional_trigger if next_segment is not None else None
    capped = upcoming in _INTENSE_TRIGGERS
    if capped:
        gap = min(gap, UPCOMING_INTENSITY_CEILING)
        parts.append(f"capped at {UPCOMING_INTENSITY_CEILING:.2f}s for upcoming {upcoming.value}")

    position = get_timeline_position(elapsed_seconds, total_estimated_seconds, tables)
    position_multiplier = get_position_pacing_multiplier(position, tables)
    gap *= position_multiplier
    parts.append(f"x{position_multiplier:.2f} {position.value}")

    completion = 1.0
    if hook is not None:
        rate = hook.predicted_engagement.completion_rate
        adjustment = get_completion_rate_adjustment(rate, tables)
        if adjustment is not None:
            completion = adjustment
            gap *= adjustment
            parts.append(f"x{adjustment:.2f} {rate} completion")
        if hook.controversy_score > 3:
            controversy = get_controversy_pacing_adjustment(hook.controversy_score)
            gap *= controversy
            parts.append(f"x{controversy:.2f} controversy {hook.controversy_score:g}")

    if video_multiplier is not None:
        gap *= video_multiplier
        parts.append(f"x{video_multiplier:.3f} video rhythm")

    interrupt = is_pattern_interrupt_point(elapsed_seconds, tables=tables)
    if interrupt:
        gap *= PATTERN_INTERRUPT_MULTIPLIER
        parts.append(f"x{PATTERN_INTERRUPT_MULTIPLIER:.2f} pattern interrupt")

    # the ceiling holds after multipliers too
    if capped and gap > UPCOMING_INTENSITY_CEILING:
        gap = UPCOMING_INTENSITY_CEILING
        parts.append(f"re-capped at {UPCOMING_INTENSITY_CEILING:.2f}s")

    if gap < MIN_GAP_SECONDS:
        gap = MIN_GAP_SECONDS
        parts.append(f"floored at {MIN_GAP_SECONDS:.2f}s")

    meta = RetentionMeta(
        timeline_position=position,
        position_multiplier=position_multiplier,
        completion_rate_adjustment=completion,
        video_level_multiplier=video_multiplier if video_multiplier is not None else 1.0,
        is_pattern_interrupt=interrupt,
    )
    return _Gap(seconds=gap, reason=", ".join(parts), meta=meta)


def _advance(
    cursor: _Cursor,
    index: int,
    audio_path: str,
    segment: ScriptSegment,
    audio_seconds: float,
    gap: _Gap,
    fps: float,
    track_retention: bool,
) -> tuple[AudioSegmentTiming, _Cursor]:
    after_gap_frames = seconds_to_frames(gap.seconds, fps)
    audio_frames = seconds_to_frames(audio_seconds, fps)
    total_segment_frames = audio_frames + after_gap_frames
    timing = AudioSegmentTiming(
        segment_index=index,
        start_frame=cursor.running_frames,
        end_frame=cursor.running_frames + total_segment_frames,
        duration_frames=total_segment_frames,
        duration_seconds=frames_to_seconds(total_segment_frames, fps),
        audio_path=audio_path,
        voiceover=segment.voiceover,
        pacing_gap=PacingGap(
            after_gap_frames=after_gap_frames, gap_seconds=gap.seconds, reason=gap.reason
        ),
        retention_meta=gap.meta if track_retention else None,
    )
    next_cursor = _Cursor(
        running_frames=cursor.running_frames + total_segment_frames,
        elapsed_seconds=cursor.elapsed_seconds + audio_seconds + gap.seconds,
    )
    return timing, next_cursor


def _retention_stats(
    timings: Sequence[AudioSegmentTiming],
    hooks: Sequence[ShortsHook | None],
    video_multiplier: float | None,
    fps: float,
) -> RetentionStats:
    by_zone: dict[str, list[float]] = {p.value: [] for p in TimelinePosition}
    interrupts = 0
    for t in timings:
        if t.retention_meta is None:
            continue
        zone = t.retention_meta.timeline_position.value
        by_zone[zone].append(frames_to_seconds(t.pacing_gap.after_gap_frames, fps))
        interrupts += t.retention_meta.is_pattern_interrupt
    completion = Counter(
        h.predicted_engagement.completion_rate
        for h in hooks
        if h is not None and h.predicted_engagement.completion_rate
    )
    return RetentionStats(
        average_gap_by_zone={
            zone: (sum(gaps) / len(gaps) if gaps else 0.0) for zone, gaps in by_zone.items()
        },
        pattern_interrupt_count=interrupts,
        video_level_multiplier=video_multiplier if video_multiplier is not None else 1.0,
        completion_rate_distribution=dict(completion),
    )


def accumulate_timeline(
    audio_segments: Sequence[AudioSegmentInput],
    audio_durations: Sequence[float],
    fps: float,
    content: ContentEngine,
    *,
    project_id: str = "",
    tables: PacingTables = DEFAULT_PACING,
    random: RandomFn | None = None,
    track_retention: bool = True,
) -> AudioTimeline:
    """Sequential pass: place every segment after the previous one."""
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    if len(audio_durations) != len(audio_segments):
        raise ValueError(
            f"{len(audio_durations)} durations for {len(audio_segments)} segments"
        )

    content_type = content.content_type
    if not audio_segments:
        return AudioTimeline(
            segments=(),
            total_frames=0,
            total_duration_seconds=0.0,
            pacing_stats=PacingStats(0.0, 0.0, content_type),
        )

    if random is None:
        random = (
            create_seeded_random(project_id) if tables.randomization_enabled else constant_random
        )
    video_multiplier = (
        get_video_level_multiplier(random, tables) if tables.randomization_enabled else None
    )

    segments = [seg for _, seg in audio_segments]
    hooks = map_hooks_to_segments(segments, content.hooks)
    chapter_starts = parse_chapter_starts(content.chapters)

    timings: list[AudioSegmentTiming] = []
    cursor = _Cursor()
    for i, ((path, segment), audio_seconds) in enumerate(zip(audio_segments, audio_durations)):
        next_segment = segments[i + 1] if i + 1 < len(segments) else None
        gap = compute_pacing_gap(
            segment,
            next_segment,
            content_type=content_type,
            chapter_end=is_chapter_end(next_segment, chapter_starts),
            hook=hooks[i],
            elapsed_seconds=cursor.elapsed_seconds,
            total_estimated_seconds=content.estimated_duration_seconds,
            video_multiplier=video_multiplier,
            random=random,
            tables=tables,
        )
        timing, cursor = _advance(
            cursor, i, path, segment, audio_seconds, gap, fps, track_retention
        )
        timings.append(timing)

    total_gap_seconds = frames_to_seconds(sum(t.pacing_gap.after_gap_frames for t in timings), fps)
    timeline = AudioTimeline(
        segments=tuple(timings),
        total_frames=cursor.running_frames,
        total_duration_seconds=frames_to_seconds(cursor.running_frames, fps),
        pacing_stats=PacingStats(
            total_gap_seconds=total_gap_seconds,
            average_gap_seconds=total_gap_seconds / len(timings),
            content_type=content_type,
        ),
        retention_stats=(
            _retention_stats(timings, hooks, video_multiplier, fps) if track_retention else None
        ),
    )
    logger.info(
        "Audio timeline for %s: %d frames (%.2fs), total gap %.2fs",
        project_id or "<unnamed>",
        timeline.total_frames,
        timeline.total_duration_seconds,
        total_gap_seconds,
    )
    return timeline


def calculate_timeline(
    audio_segments: Sequence[AudioSegmentInput],
    fps: float,
    content: ContentEngine,
    *,
    project_id: str = "",
    tables: PacingTables = DEFAULT_PACING,
    random: RandomFn | None = None,
    probe: DurationProbe = probe_duration_seconds,
    track_retention: bool = True,
) -> AudioTimeline:
    """
    Build the frame timeline for ``audio_segments`` (``(audio_path, segment)`` pairs).

    The random stream defaults to one seeded by ``project_id`` so re-renders of a
    project reproduce identical pacing; pass ``random`` to inject another.
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    logger.info(
        "Calculating audio-driven timeline: project=%s segments=%d content_type=%s fps=%g",
        project_id or "<unnamed>",
        len(audio_segments),
        content.content_type,
        fps,
    )
    durations = resolve_audio_durations(audio_segments, probe)
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


def get_segment_at_frame(timeline: AudioTimeline, frame: int) -> AudioSegmentTiming | None:
    for seg in timeline.segments:
        if seg.start_frame <= frame < seg.end_frame:
            return seg
    return None


def is_in_pacing_gap(segment: AudioSegmentTiming, frame: int) -> bool:
    """True when ``frame`` falls in the silent tail of ``segment``."""
    if segment.pacing_gap.after_gap_frames == 0:
        return False
    gap_start = segment.end_frame - segment.pacing_gap.after_gap_frames
    return gap_start <= frame < segment.end_frame


def get_segment_progress(segment: AudioSegmentTiming, frame: int) -> float:
    if segment.duration_frames <= 0:
        return 1.0
    relative = (frame - segment.start_frame) / segment.duration_frames
    return min(1.0, max(0.0, relative))
