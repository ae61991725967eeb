"""
Tests for the pacing configuration model.
"""

import dataclasses

import pytest

from src.narrator.models import TimelinePosition
from src.narrator.pacing import (
    DEFAULT_PACING,
    PacingConfig,
    content_type_pacing,
    get_completion_rate_adjustment,
    get_controversy_pacing_adjustment,
    get_position_pacing_multiplier,
    get_randomized_pacing,
    get_timeline_position,
    get_video_level_multiplier,
    is_pattern_interrupt_point,
    should_insert_micro_hook,
)


def test_randomized_pacing_range():
    """Draws of 0, 0.5 and 1 map to base - variance, base and base + variance."""
    config = PacingConfig(base=0.5, variance=0.1)
    assert get_randomized_pacing(config, lambda: 0.0) == pytest.approx(0.4)
    assert get_randomized_pacing(config, lambda: 0.5) == pytest.approx(0.5)
    assert get_randomized_pacing(config, lambda: 0.999999) == pytest.approx(0.6, abs=1e-5)


def test_randomized_pacing_floor():
    config = PacingConfig(base=0.05, variance=0.01)
    assert get_randomized_pacing(config, lambda: 0.0) == 0.1


def test_randomized_pacing_draws_once_per_call():
    draws = iter([0.0, 1.0])
    config = PacingConfig(base=1.0, variance=0.5)
    assert get_randomized_pacing(config, lambda: next(draws)) == pytest.approx(0.5)
    assert get_randomized_pacing(config, lambda: next(draws)) == pytest.approx(1.5)


def test_negative_variance_rejected():
    with pytest.raises(ValueError):
        PacingConfig(base=0.5, variance=-0.1)


def test_unknown_content_type_falls_back_to_tutorial():
    assert content_type_pacing("podcast") == DEFAULT_PACING.content_type["tutorial"]
    assert content_type_pacing("news") == PacingConfig(0.3, 0.05)


def test_video_level_multiplier_range():
    assert get_video_level_multiplier(lambda: 0.0) == pytest.approx(0.8)
    assert get_video_level_multiplier(lambda: 0.5) == pytest.approx(1.0)
    tables = dataclasses.replace(DEFAULT_PACING, video_variance_range=(0.5, 1.5))
    assert get_video_level_multiplier(lambda: 0.25, tables) == pytest.approx(0.75)


def test_timeline_position_boundaries():
    """Opening is inclusive at 30s; ending starts at total - 30s."""
    assert get_timeline_position(0.0, 100.0) is TimelinePosition.OPENING
    assert get_timeline_position(30.0, 100.0) is TimelinePosition.OPENING
    assert get_timeline_position(30.001, 100.0) is TimelinePosition.MIDDLE
    assert get_timeline_position(69.999, 100.0) is TimelinePosition.MIDDLE
    assert get_timeline_position(70.0, 100.0) is TimelinePosition.ENDING


def test_short_video_opening_wins_over_ending():
    assert get_timeline_position(10.0, 20.0) is TimelinePosition.OPENING
    assert get_timeline_position(31.0, 40.0) is TimelinePosition.ENDING


def test_position_multipliers():
    assert get_position_pacing_multiplier(TimelinePosition.OPENING) == 0.85
    assert get_position_pacing_multiplier(TimelinePosition.MIDDLE) == 1.0
    assert get_position_pacing_multiplier(TimelinePosition.ENDING) == 0.9


def test_controversy_adjustment_piecewise():
    assert get_controversy_pacing_adjustment(0) == 1.0
    assert get_controversy_pacing_adjustment(3) == 1.0
    assert get_controversy_pacing_adjustment(4) == pytest.approx(1.03)
    assert get_controversy_pacing_adjustment(7) == pytest.approx(1.12)
    assert get_controversy_pacing_adjustment(8) == pytest.approx(1.16)
    assert get_controversy_pacing_adjustment(10) == pytest.approx(1.24)


def test_completion_rate_adjustments():
    assert get_completion_rate_adjustment("low") == 0.85
    assert get_completion_rate_adjustment("medium") == 1.0
    assert get_completion_rate_adjustment("high") == 1.05
    assert get_completion_rate_adjustment("unknown") is None
    assert get_completion_rate_adjustment(None) is None


def test_pattern_interrupt_points():
    assert is_pattern_interrupt_point(15.0)
    assert is_pattern_interrupt_point(13.0)
    assert is_pattern_interrupt_point(17.0)
    assert not is_pattern_interrupt_point(12.9)
    assert is_pattern_interrupt_point(46.5)
    assert is_pattern_interrupt_point(91.0)
    assert not is_pattern_interrupt_point(60.0)
    assert is_pattern_interrupt_point(18.0, tolerance=3)


def test_micro_hook_interval():
    assert should_insert_micro_hook(120.0, 0.0)
    assert not should_insert_micro_hook(119.0, 0.0)
    assert should_insert_micro_hook(250.0, 130.0)


def test_invalid_tables_rejected():
    with pytest.raises(ValueError):
        dataclasses.replace(DEFAULT_PACING, opening_zone_seconds=0)
    with pytest.raises(ValueError):
        dataclasses.replace(DEFAULT_PACING, video_variance_range=(1.2, 0.8))
