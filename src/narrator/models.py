"""
Data models for the narrated video pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum


class VisualHint(str, Enum):
    """Visual treatment requested for a script segment."""

    CODE_BLOCK = "code_block"
    DIAGRAM = "diagram"
    TEXT_ANIMATION = "text_animation"
    B_ROLL = "b_roll"
    SCREEN_RECORDING = "screen_recording"
    TALKING_HEAD_PLACEHOLDER = "talking_head_placeholder"

    @classmethod
    def parse(cls, value: "str | VisualHint") -> "VisualHint":
        """Parse a manifest value, accepting the hyphenated ``b-roll`` spelling."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().replace("-", "_"))


class EmotionalTrigger(str, Enum):
    ANGER = "anger"
    AWE = "awe"
    CURIOSITY = "curiosity"
    FOMO = "fomo"
    VALIDATION = "validation"


class TimelinePosition(str, Enum):
    """Zone of the video a moment falls into."""

    OPENING = "opening"
    MIDDLE = "middle"
    ENDING = "ending"


@dataclass(frozen=True)
class ScriptSegment:
    """One narrated beat of the video."""

    timestamp: str  # MM:SS
    voiceover: str
    visual_hint: VisualHint
    estimated_duration_seconds: float
    emotional_trigger: EmotionalTrigger | None = None
    emphasis_words: tuple[str, ...] = ()
    asset_url: str | None = None


@dataclass(frozen=True)
class PredictedEngagement:
    comments: str = "medium"
    shares: str = "medium"
    completion_rate: str | None = None  # low | medium | high


@dataclass(frozen=True)
class ShortsHook:
    """Time-ranged engagement annotation used for Shorts and pacing."""

    text: str
    timestamp_start: str
    timestamp_end: str
    hook_type: str
    emotional_trigger: EmotionalTrigger | None = None
    controversy_score: float = 0.0
    predicted_engagement: PredictedEngagement = field(default_factory=PredictedEngagement)
    injected_cta: str | None = None


@dataclass(frozen=True)
class VoicePersona:
    provider: str  # elevenlabs | openai | google_tts | azure
    voice_id: str
    style: str = "narrative"
    language: str = "en"


@dataclass(frozen=True)
class ContentEngine:
    """Content metadata the timeline and the render pipeline read."""

    content_type: str
    estimated_duration_seconds: float
    chapters: str = ""
    hooks: tuple[ShortsHook, ...] = ()
    script: tuple[ScriptSegment, ...] = ()
    tags: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()
    vertical_crop_focus: str = "center"
    face_detection_hint: bool = False
    voice: VoicePersona | None = None
    mood: str = "professional"
    theme_suggestion: str | None = None
    music_mood: str = "none"  # upbeat | dramatic | chill | none


@dataclass(frozen=True)
class PacingGap:
    """Silence appended after a segment's audio, with its audit trail."""

    after_gap_frames: int
    gap_seconds: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "afterGapFrames": self.after_gap_frames,
            "gapSeconds": self.gap_seconds,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class RetentionMeta:
    timeline_position: TimelinePosition
    position_multiplier: float
    completion_rate_adjustment: float
    video_level_multiplier: float
    is_pattern_interrupt: bool

    def to_dict(self) -> dict:
        return {
            "timelinePosition": self.timeline_position.value,
            "positionMultiplier": self.position_multiplier,
            "completionRateAdjustment": self.completion_rate_adjustment,
            "videoLevelMultiplier": self.video_level_multiplier,
            "isPatternInterrupt": self.is_pattern_interrupt,
        }


@dataclass(frozen=True)
class AudioSegmentTiming:
    """Frame placement of one segment: audio followed by its pacing gap."""

    segment_index: int
    start_frame: int
    end_frame: int  # exclusive
    duration_frames: int
    duration_seconds: float
    audio_path: str
    voiceover: str
    pacing_gap: PacingGap
    retention_meta: RetentionMeta | None = None

    @property
    def audio_frames(self) -> int:
        return self.duration_frames - self.pacing_gap.after_gap_frames

    def to_dict(self) -> dict:
        out = {
            "segmentIndex": self.segment_index,
            "startFrame": self.start_frame,
            "endFrame": self.end_frame,
            "durationFrames": self.duration_frames,
            "durationSeconds": self.duration_seconds,
            "audioPath": self.audio_path,
            "voiceover": self.voiceover,
            "pacingGap": self.pacing_gap.to_dict(),
        }
        if self.retention_meta is not None:
            out["retentionMeta"] = self.retention_meta.to_dict()
        return out


@dataclass(frozen=True)
class PacingStats:
    total_gap_seconds: float
    average_gap_seconds: float
    content_type: str

    def to_dict(self) -> dict:
        return {
            "totalGapSeconds": self.total_gap_seconds,
            "averageGapSeconds": self.average_gap_seconds,
            "contentType": self.content_type,
        }


@dataclass(frozen=True)
class RetentionStats:
    average_gap_by_zone: dict[str, float]
    pattern_interrupt_count: int
    video_level_multiplier: float
    completion_rate_distribution: dict[str, int]

    def to_dict(self) -> dict:
        return {
            "averageGapByZone": dict(self.average_gap_by_zone),
            "patternInterruptCount": self.pattern_interrupt_count,
            "videoLevelMultiplier": self.video_level_multiplier,
            "completionRateDistribution": dict(self.completion_rate_distribution),
        }


@dataclass(frozen=True)
class AudioTimeline:
    """Contiguous frame timeline for a whole video."""

    segments: tuple[AudioSegmentTiming, ...]
    total_frames: int
    total_duration_seconds: float
    pacing_stats: PacingStats
    retention_stats: RetentionStats | None = None

    def to_dict(self) -> dict:
        out = {
            "segments": [s.to_dict() for s in self.segments],
            "totalFrames": self.total_frames,
            "totalDurationSeconds": self.total_duration_seconds,
            "pacingStats": self.pacing_stats.to_dict(),
        }
        if self.retention_stats is not None:
            out["retentionStats"] = self.retention_stats.to_dict()
        return out
