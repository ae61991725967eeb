"""
Pacing configuration: gap tables, retention multipliers and the small pure
functions that sample them.

Every table lives on a frozen ``PacingTables`` object that callers pass to the
timeline calculator, so a render can swap in its own tables with
``dataclasses.replace(DEFAULT_PACING, ...)``.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from .models import EmotionalTrigger, TimelinePosition, VisualHint

RandomFn = Callable[[], float]

MIN_GAP_SECONDS = 0.1
CHAPTER_TRANSITION_GAP = 1.0
UPCOMING_INTENSITY_CEILING = 0.25
PATTERN_INTERRUPT_MULTIPLIER = 0.7
FALLBACK_CONTENT_TYPE = "tutorial"


@dataclass(frozen=True)
class PacingConfig:
    """Gap in seconds sampled uniformly within ``base +/- variance``."""

    base: float
    variance: float

    def __post_init__(self) -> None:
        if self.variance < 0:
            raise ValueError(f"variance must be >= 0, got {self.variance}")


def _content_type_pacing() -> dict[str, PacingConfig]:
    return {
        "tutorial": PacingConfig(0.5, 0.1),
        "news": PacingConfig(0.3, 0.05),
        "analysis": PacingConfig(0.6, 0.15),
        "entertainment": PacingConfig(0.25, 0.08),
    }


def _visual_hint_pacing() -> dict[VisualHint, PacingConfig]:
    return {
        VisualHint.CODE_BLOCK: PacingConfig(0.3, 0.08),
        VisualHint.DIAGRAM: PacingConfig(0.4, 0.1),
        VisualHint.TEXT_ANIMATION: PacingConfig(0.2, 0.05),
        VisualHint.B_ROLL: PacingConfig(0.1, 0.03),
        VisualHint.SCREEN_RECORDING: PacingConfig(0.2, 0.05),
        VisualHint.TALKING_HEAD_PLACEHOLDER: PacingConfig(0.2, 0.05),
    }


def _emotional_pacing() -> dict[EmotionalTrigger, PacingConfig]:
    return {
        EmotionalTrigger.ANGER: PacingConfig(0.4, 0.1),
        EmotionalTrigger.AWE: PacingConfig(0.8, 0.15),
        EmotionalTrigger.CURIOSITY: PacingConfig(0.3, 0.08),
        EmotionalTrigger.FOMO: PacingConfig(0.2, 0.05),
        EmotionalTrigger.VALIDATION: PacingConfig(0.5, 0.1),
    }


def _completion_rate_adjustments() -> dict[str, float]:
    # low completion -> pace faster, high -> content already holds viewers
    return {"low": 0.85, "medium": 1.0, "high": 1.05}


@dataclass(frozen=True)
class PacingTables:
    """All pacing and retention knobs for one render."""

    content_type: dict[str, PacingConfig] = field(default_factory=_content_type_pacing)
    visual_hint: dict[VisualHint, PacingConfig] = field(default_factory=_visual_hint_pacing)
    emotional: dict[EmotionalTrigger, PacingConfig] = field(default_factory=_emotional_pacing)
    completion_rate_adjustments: dict[str, float] = field(
        default_factory=_completion_rate_adjustments
    )

    randomization_enabled: bool = True
    video_variance_range: tuple[float, float] = (0.8, 1.2)

    opening_zone_seconds: float = 30.0
    ending_zone_seconds: float = 30.0
    opening_pace_multiplier: float = 0.85
    mid_pace_multiplier: float = 1.0
    ending_pace_multiplier: float = 0.9

    pattern_interrupt_at: tuple[float, ...] = (15.0, 45.0, 90.0)
    pattern_interrupt_tolerance: float = 2.0
    micro_hook_interval_seconds: float = 120.0

    def __post_init__(self) -> None:
        if self.opening_zone_seconds <= 0 or self.ending_zone_seconds <= 0:
            raise ValueError("zone durations must be positive")
        lo, hi = self.video_variance_range
        if lo > hi:
            raise ValueError(f"video_variance_range is inverted: {self.video_variance_range}")


DEFAULT_PACING = PacingTables()


def content_type_pacing(content_type: str, tables: PacingTables = DEFAULT_PACING) -> PacingConfig:
    """Pacing for a content type; unknown types pace like a tutorial."""
    config = tables.content_type.get(content_type)
    if config is None:
        config = tables.content_type.get(FALLBACK_CONTENT_TYPE, _content_type_pacing()["tutorial"])
    return config


def get_randomized_pacing(config: PacingConfig, random: RandomFn) -> float:
    """Sample ``base +/- variance`` from one draw, floored at 0.1s."""
    variance = (random() * 2 - 1) * config.variance
    return max(MIN_GAP_SECONDS, config.base + variance)


def get_video_level_multiplier(random: RandomFn, tables: PacingTables = DEFAULT_PACING) -> float:
    """One multiplier per video, uniform over ``video_variance_range``."""
    lo, hi = tables.video_variance_range
    return lo + random() * (hi - lo)


def get_timeline_position(
    current_seconds: float, total_seconds: float, tables: PacingTables = DEFAULT_PACING
) -> TimelinePosition:
    if current_seconds <= tables.opening_zone_seconds:
        return TimelinePosition.OPENING
    if current_seconds >= total_seconds - tables.ending_zone_seconds:
        return TimelinePosition.ENDING
    return TimelinePosition.MIDDLE


def get_position_pacing_multiplier(
    position: TimelinePosition, tables: PacingTables = DEFAULT_PACING
) -> float:
    if position is TimelinePosition.OPENING:
        return tables.opening_pace_multiplier
    if position is TimelinePosition.ENDING:
        return tables.ending_pace_multiplier
    return tables.mid_pace_multiplier


def get_controversy_pacing_adjustment(score: float) -> float:
    """
    Extra breathing room after controversial statements (0-10 scale).
    0-3: none, 4-7: +0.03 per point, 8-10: +0.04 per point on top of 1.12.
    """
    if score <= 3:
        return 1.0
    if score <= 7:
        return 1.0 + (score - 3) * 0.03
    return 1.12 + (score - 7) * 0.04


def get_completion_rate_adjustment(
    completion_rate: str | None, tables: PacingTables = DEFAULT_PACING
) -> float | None:
    """Multiplier for a predicted completion rate, or None when unmapped."""
    if not completion_rate:
        return None
    return tables.completion_rate_adjustments.get(completion_rate)


def is_pattern_interrupt_point(
    current_seconds: float,
    tolerance: float | None = None,
    tables: PacingTables = DEFAULT_PACING,
) -> bool:
    tol = tables.pattern_interrupt_tolerance if tolerance is None else tolerance
    return any(abs(current_seconds - point) <= tol for point in tables.pattern_interrupt_at)


def should_insert_micro_hook(
    current_seconds: float, last_micro_hook_seconds: float, tables: PacingTables = DEFAULT_PACING
) -> bool:
    return (current_seconds - last_micro_hook_seconds) >= tables.micro_hook_interval_seconds
