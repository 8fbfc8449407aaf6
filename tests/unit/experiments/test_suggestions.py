"""Tests for capacity/experiments/suggestions.py

Key behaviors:
- Every pattern type maps to a fixed question and three hypotheses
- "Write your own..." always closes the hypothesis list
- No suggestion while an experiment is active
- Declined patterns stay quiet for seven days
"""

import pytest

from capacity.experiments.models import PatternDetection
from capacity.experiments.suggestions import (
    GENERIC_SUGGESTION,
    SUGGESTIONS,
    WRITE_YOUR_OWN,
    get_suggestion,
    pattern_to_suggestion,
)
from capacity.language_filter import is_neutral

from tests.conftest import at

NOW = at(28, hour=0)


@pytest.fixture
def sensory_signals(make_signal):
    """Three weeks of signals; the only pattern is sensory load."""
    return [
        make_signal(
            day=d,
            state="low" if d in (8, 11, 14) else "high",
            category="sensory" if d in (8, 11, 14) else None,
        )
        for d in range(7, 28)
    ]


@pytest.fixture
def monday_and_demand_signals(make_signal):
    """Low Mondays, three of them tagged demand, plus a three-day low run."""
    low_days = {8, 15, 22, 29, 9, 10}
    return [
        make_signal(
            day=d,
            state="low" if d in low_days else "high",
            category="demand" if d in (8, 15, 22) else None,
        )
        for d in range(7, 35)
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Lookup Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPatternToSuggestion:
    """Tests for the static lookup."""

    def test_monday_text(self):
        pattern = PatternDetection(
            type="day_of_week_monday",
            description="Mondays often show lower capacity",
            confidence=0.9,
        )
        suggestion = pattern_to_suggestion(pattern)

        assert suggestion.id == "sug_day_of_week_monday"
        assert suggestion.pattern_type == "day_of_week_monday"
        assert suggestion.pattern_description == "Mondays often show lower capacity"
        assert suggestion.question == (
            "Mondays often show lower capacity. Would you like to explore why?"
        )
        assert suggestion.hypotheses == (
            "Reduce commitments on Mondays",
            "Add recovery time Sunday evening",
            "Start Monday with lighter tasks",
            "Write your own...",
        )

    @pytest.mark.parametrize("pattern_type", sorted(SUGGESTIONS))
    def test_every_type_has_four_options(self, pattern_type):
        suggestion = pattern_to_suggestion(PatternDetection(pattern_type, "desc", 0.5))

        assert len(suggestion.hypotheses) == 4
        assert suggestion.hypotheses[-1] == WRITE_YOUR_OWN

    def test_all_eleven_types_covered(self):
        days = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
        expected = {f"day_of_week_{d}" for d in days}
        expected |= {"category_sensory", "category_social", "category_demand"}
        expected.add("consecutive_depletion")

        assert set(SUGGESTIONS) == expected

    def test_unknown_type_gets_generic(self):
        suggestion = pattern_to_suggestion(PatternDetection("weather_front", "Rain", 0.4))

        assert suggestion.question == GENERIC_SUGGESTION["question"]
        assert suggestion.hypotheses == ("Try a change for a few weeks", WRITE_YOUR_OWN)

    @pytest.mark.parametrize("pattern_type", sorted(SUGGESTIONS))
    def test_text_is_a_question(self, pattern_type):
        """Prompts ask; they never instruct."""
        suggestion = pattern_to_suggestion(PatternDetection(pattern_type, "desc", 0.5))

        assert suggestion.question.endswith("?")
        assert is_neutral(suggestion.question)
        assert all(is_neutral(h) for h in suggestion.hypotheses)

    def test_to_dict(self):
        suggestion = pattern_to_suggestion(PatternDetection("category_social", "desc", 0.5))
        data = suggestion.to_dict()

        assert data["id"] == "sug_category_social"
        assert isinstance(data["hypotheses"], list)


# ─────────────────────────────────────────────────────────────────────────────
# get_suggestion Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestGetSuggestion:
    """Tests for choosing the suggestion to offer."""

    def test_offers_top_pattern(self, storage, monday_and_demand_signals):
        suggestion = get_suggestion(monday_and_demand_signals, storage, now=at(35, hour=0))
        assert suggestion.pattern_type == "day_of_week_monday"

    def test_none_without_patterns(self, storage, daily_signals):
        assert get_suggestion(daily_signals(range(7, 28), "high"), storage, now=NOW) is None

    def test_none_while_experiment_active(
        self, storage, sensory_signals, sample_experiment_args
    ):
        storage.create_experiment(**sample_experiment_args)
        assert get_suggestion(sensory_signals, storage, now=NOW) is None

    def test_resumes_after_conclusion(self, storage, sensory_signals, sample_experiment_args):
        experiment = storage.create_experiment(**sample_experiment_args)
        storage.conclude_experiment(experiment.id)

        assert get_suggestion(sensory_signals, storage, now=NOW).pattern_type == "category_sensory"

    def test_declined_pattern_skipped_for_next(self, storage, monday_and_demand_signals):
        storage.decline_pattern("day_of_week_monday")
        suggestion = get_suggestion(monday_and_demand_signals, storage, now=at(35, hour=0))

        assert suggestion.pattern_type == "category_demand"


class TestDeclineCooldown:
    """A declined sensory pattern stays quiet for seven days."""

    def test_suppressed_inside_cooldown(self, storage, clock, sensory_signals):
        storage.decline_pattern("category_sensory")
        clock.advance(days=6, hours=23)

        assert get_suggestion(sensory_signals, storage, now=NOW) is None

    def test_offered_again_at_seven_days(self, storage, clock, sensory_signals):
        storage.decline_pattern("category_sensory")
        clock.advance(days=7)

        suggestion = get_suggestion(sensory_signals, storage, now=NOW)
        assert suggestion.pattern_type == "category_sensory"

    def test_other_patterns_unaffected(self, storage, sensory_signals):
        storage.decline_pattern("category_social")
        assert get_suggestion(sensory_signals, storage, now=NOW).pattern_type == "category_sensory"
