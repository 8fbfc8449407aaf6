"""Tests for capacity/experiments/patterns.py

Day offsets are relative to a Sunday, so day % 7 is the weekday index
(0=Sunday .. 6=Saturday).

Key behaviors:
- Gating: 14 signals of history, 7 inside the trailing 30 days
- Weekday, category and consecutive detectors run independently
- Ties go to the first weekday / category in iteration order
- Results are sorted by confidence, highest first
"""

import pytest

from capacity.config_models import PatternDetectionConfig
from capacity.experiments.patterns import (
    detect_category_pattern,
    detect_consecutive_pattern,
    detect_day_of_week_pattern,
    detect_patterns,
    weekday_index,
)

from tests.conftest import at


def _states(days, low=(), mid=()):
    """Map each day offset to a state: low/mid sets, high otherwise."""
    return {d: "low" if d in low else "mid" if d in mid else "high" for d in days}


@pytest.fixture
def build(make_signal):
    """Build one signal per day from a {day: state} mapping."""

    def _build(states, extra=None):
        extra = extra or {}
        return [make_signal(day=d, state=s, **extra.get(d, {})) for d, s in states.items()]

    return _build


# ─────────────────────────────────────────────────────────────────────────────
# Day-of-Week Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestDayOfWeekPattern:
    """Tests for the weekday detector."""

    def test_weekday_index_sunday_first(self, make_signal):
        assert weekday_index(make_signal(day=0).timestamp) == 0
        assert weekday_index(make_signal(day=1).timestamp) == 1
        assert weekday_index(make_signal(day=6).timestamp) == 6

    def test_detects_low_mondays(self, build):
        """Every Monday low, everything else high."""
        days = range(7, 35)
        pattern = detect_day_of_week_pattern(build(_states(days, low={8, 15, 22, 29})))

        assert pattern.type == "day_of_week_monday"
        assert pattern.description == "Mondays often show lower capacity"
        assert pattern.confidence == 0.9
        assert pattern.data["low_count"] == 4

    def test_confidence_is_low_share(self, build):
        """3 low + 1 mid Mondays: average 12.5, confidence 3/4."""
        states = _states(range(7, 35), low={8, 15, 22}, mid={29})
        pattern = detect_day_of_week_pattern(build(states))

        assert pattern.confidence == pytest.approx(0.75)
        assert pattern.data["avg_capacity"] == pytest.approx(12.5)

    def test_average_must_be_under_40(self, build):
        """All-mid Mondays average 50 and are not reported."""
        states = _states(range(7, 35), mid={8, 15, 22, 29})
        assert detect_day_of_week_pattern(build(states)) is None

    def test_needs_three_signals_per_weekday(self, build):
        """Two weeks gives each weekday only two signals."""
        states = _states(range(7, 21), low={8, 15})
        assert detect_day_of_week_pattern(build(states)) is None

    def test_needs_two_low_signals(self, build):
        """One low and two mid average 33 but one low is not enough."""
        states = _states(range(7, 28), low={8}, mid={15, 22})
        assert detect_day_of_week_pattern(build(states)) is None

    def test_tie_goes_to_first_weekday(self, build):
        """Sunday and Wednesday equally low: Sunday wins."""
        states = _states(range(7, 35), low={7, 14, 21, 28, 10, 17, 24, 31})
        assert detect_day_of_week_pattern(build(states)).type == "day_of_week_sunday"


# ─────────────────────────────────────────────────────────────────────────────
# Category Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCategoryPattern:
    """Tests for the category detector."""

    def test_detects_social(self, build):
        states = _states(range(7, 28), low={8, 11, 14})
        signals = build(states, {d: {"category": "social"} for d in (8, 11, 14)})

        pattern = detect_category_pattern(signals)

        assert pattern.type == "category_social"
        assert pattern.description == "Social demand frequently appears with lower capacity"
        assert pattern.confidence == 0.85

    def test_tags_count_toward_categories(self, build):
        """Tags naming a category count like the explicit field."""
        states = _states(range(7, 28), low={8, 11, 14})
        signals = build(states, {d: {"tags": ("demand", "morning")} for d in (8, 11, 14)})

        assert detect_category_pattern(signals).type == "category_demand"

    def test_tie_goes_to_first_category(self, build):
        """Social via field and sensory via tag on the same signals: sensory wins."""
        states = _states(range(7, 28), low={8, 11, 14})
        extra = {d: {"category": "social", "tags": ("sensory",)} for d in (8, 11, 14)}

        assert detect_category_pattern(build(states, extra)).type == "category_sensory"

    def test_highest_low_count_wins(self, build):
        low_days = {8, 11, 14, 17, 20, 23, 26}
        states = _states(range(7, 28), low=low_days)
        extra = {d: {"category": "sensory"} for d in (8, 11, 14)}
        extra.update({d: {"category": "social"} for d in (17, 20, 23, 26)})

        pattern = detect_category_pattern(build(states, extra))

        assert pattern.type == "category_social"
        assert pattern.data["low_count"] == 4

    def test_confidence_is_low_share(self, build):
        """3 low out of 6 demand signals: 0.5."""
        states = _states(range(7, 28), low={8, 11, 14})
        extra = {d: {"category": "demand"} for d in (8, 11, 14, 9, 12, 15)}

        assert detect_category_pattern(build(states, extra)).confidence == pytest.approx(0.5)

    def test_needs_three_low(self, build):
        states = _states(range(7, 28), low={8, 11})
        extra = {d: {"category": "social"} for d in (8, 11, 14, 17)}
        assert detect_category_pattern(build(states, extra)) is None

    def test_unknown_tags_ignored(self, build):
        states = _states(range(7, 28), low={8, 11, 14})
        extra = {d: {"tags": ("weather",)} for d in (8, 11, 14)}
        assert detect_category_pattern(build(states, extra)) is None


# ─────────────────────────────────────────────────────────────────────────────
# Consecutive Depletion Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestConsecutivePattern:
    """Tests for the consecutive-low detector."""

    def test_three_days_in_a_row(self, build):
        states = _states(range(7, 28), low={10, 11, 12})
        pattern = detect_consecutive_pattern(build(states))

        assert pattern.type == "consecutive_depletion"
        assert pattern.data["max_streak"] == 3
        assert pattern.confidence == pytest.approx(0.6)

    def test_confidence_capped(self, build):
        states = _states(range(7, 28), low=set(range(10, 17)))
        assert detect_consecutive_pattern(build(states)).confidence == 0.8

    def test_same_day_lows_extend_streak(self, make_signal):
        signals = [
            make_signal(day=10, hour=8, state="low"),
            make_signal(day=10, hour=18, state="low"),
            make_signal(day=11, state="low"),
        ]
        assert detect_consecutive_pattern(signals).data["max_streak"] == 3

    def test_non_low_signal_resets(self, make_signal):
        signals = [
            make_signal(day=10, state="low"),
            make_signal(day=11, hour=8, state="low"),
            make_signal(day=11, hour=18, state="mid"),
            make_signal(day=12, state="low"),
        ]
        assert detect_consecutive_pattern(signals) is None

    def test_calendar_gap_restarts(self, make_signal):
        """Day 12 has no signal, so day 13 starts a new run."""
        signals = [make_signal(day=d, state="low") for d in (10, 11, 13)]
        assert detect_consecutive_pattern(signals) is None

    def test_local_date_preferred(self, make_signal):
        """Local dates decide adjacency when present."""
        signals = [
            make_signal(day=10, state="low", local_date="2026-01-14"),
            make_signal(day=12, state="low", local_date="2026-01-15"),
            make_signal(day=14, state="low", local_date="2026-01-16"),
        ]
        assert detect_consecutive_pattern(signals).data["max_streak"] == 3

    def test_unordered_input(self, make_signal):
        signals = [make_signal(day=d, state="low") for d in (12, 10, 11)]
        assert detect_consecutive_pattern(signals) is not None


# ─────────────────────────────────────────────────────────────────────────────
# detect_patterns Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestDetectPatterns:
    """Tests for gating, windowing and ordering."""

    def test_needs_fourteen_signals(self, build):
        states = _states(range(7, 20), low=set(range(7, 20)))
        assert detect_patterns(build(states), now=at(21)) == []

    def test_needs_seven_in_window(self, build):
        """Ten old signals plus six recent ones: nothing reported."""
        old = _states(range(0, 10), low=set(range(0, 10)))
        recent = _states(range(50, 56), low=set(range(50, 56)))

        assert detect_patterns(build({**old, **recent}), now=at(57)) == []

    def test_old_signals_outside_window_ignored(self, build):
        """Low Mondays older than 30 days do not count."""
        old = _states(range(0, 21), low={1, 8, 15})
        recent = _states(range(40, 61))

        assert detect_patterns(build({**old, **recent}), now=at(61, hour=0)) == []

    def test_sorted_by_confidence(self, build):
        states = _states(range(7, 35), low={8, 15, 22, 29, 9, 10})
        extra = {d: {"category": "demand"} for d in (8, 15, 22)}

        patterns = detect_patterns(build(states, extra), now=at(35, hour=0))

        assert [p.type for p in patterns] == [
            "day_of_week_monday",
            "category_demand",
            "consecutive_depletion",
        ]
        confidences = [p.confidence for p in patterns]
        assert confidences == sorted(confidences, reverse=True)

    def test_all_high_finds_nothing(self, build):
        assert detect_patterns(build(_states(range(7, 35))), now=at(35, hour=0)) == []

    def test_disabled_config(self, build):
        states = _states(range(7, 35), low={8, 15, 22, 29})
        config = PatternDetectionConfig(enabled=False)

        assert detect_patterns(build(states), now=at(35, hour=0), config=config) == []

    def test_pure_function(self, build):
        """Repeated calls give identical results."""
        signals = build(_states(range(7, 35), low={8, 15, 22, 29}))
        now = at(35, hour=0)

        assert detect_patterns(signals, now=now) == detect_patterns(signals, now=now)
