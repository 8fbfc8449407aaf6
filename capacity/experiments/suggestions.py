"""
Tool: Suggestion Generator
Purpose: Turn a detected pattern into a fixed, neutral experiment prompt

Questions only - no advice, no commands. The text is a static lookup keyed
by pattern type, so the same pattern always produces the same words.
Every hypothesis list ends with a free-text option.
"""

from __future__ import annotations

from typing import Sequence

from capacity.experiments.models import ExperimentSuggestion, PatternDetection
from capacity.experiments.patterns import detect_patterns
from capacity.logging_config import get_logger
from capacity.models import Signal

logger = get_logger(__name__)

WRITE_YOUR_OWN = "Write your own..."

SUGGESTIONS: dict[str, dict] = {
    "day_of_week_monday": {
        "question": "Mondays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Reduce commitments on Mondays",
            "Add recovery time Sunday evening",
            "Start Monday with lighter tasks",
        ),
    },
    "day_of_week_tuesday": {
        "question": "Tuesdays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Reduce commitments on Tuesdays",
            "Schedule recovery after Monday",
            "Limit meetings on Tuesdays",
        ),
    },
    "day_of_week_wednesday": {
        "question": "Wednesdays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Add a midweek break",
            "Reduce Wednesday commitments",
            "Schedule lighter work midweek",
        ),
    },
    "day_of_week_thursday": {
        "question": "Thursdays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Reduce Thursday commitments",
            "Add recovery time Thursday",
            "Prepare for end-of-week earlier",
        ),
    },
    "day_of_week_friday": {
        "question": "Fridays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Reduce Friday commitments",
            "End work earlier on Fridays",
            "Avoid scheduling draining tasks Friday",
        ),
    },
    "day_of_week_saturday": {
        "question": "Saturdays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Protect Saturday for recovery",
            "Reduce weekend social obligations",
            "Schedule rest, not productivity",
        ),
    },
    "day_of_week_sunday": {
        "question": "Sundays often show lower capacity. Would you like to explore why?",
        "hypotheses": (
            "Reduce Sunday anticipation stress",
            "Create a Sunday wind-down ritual",
            "Avoid planning for Monday on Sunday",
        ),
    },
    "category_sensory": {
        "question": "Sensory load often appears with lower capacity. Would you like to explore this?",
        "hypotheses": (
            "Reduce sensory exposure when possible",
            "Add sensory breaks throughout the day",
            "Use noise-canceling or dim lighting",
        ),
    },
    "category_social": {
        "question": "Social demand often appears with lower capacity. Would you like to explore this?",
        "hypotheses": (
            "Limit social commitments per day",
            "Add recovery time after social events",
            "Schedule solo time daily",
        ),
    },
    "category_demand": {
        "question": "Task demand often appears with lower capacity. Would you like to explore this?",
        "hypotheses": (
            "Reduce concurrent tasks",
            "Set clearer boundaries on workload",
            "Add buffer time between tasks",
        ),
    },
    "consecutive_depletion": {
        "question": "Extended periods of low capacity have occurred. Would you like to explore prevention?",
        "hypotheses": (
            "Add a recovery day after 2 low days",
            "Reduce commitments when capacity drops",
            "Create an early warning ritual",
        ),
    },
}

GENERIC_SUGGESTION = {
    "question": "A pattern was noticed. Would you like to explore it?",
    "hypotheses": ("Try a change for a few weeks",),
}


def pattern_to_suggestion(pattern: PatternDetection) -> ExperimentSuggestion:
    """Look up the fixed prompt for a pattern; unknown types get the generic one."""
    match = SUGGESTIONS.get(pattern.type, GENERIC_SUGGESTION)
    return ExperimentSuggestion(
        id=f"sug_{pattern.type}",
        pattern_type=pattern.type,
        pattern_description=pattern.description,
        question=match["question"],
        hypotheses=(*match["hypotheses"], WRITE_YOUR_OWN),
    )


def get_suggestion(
    signals: Sequence[Signal],
    storage,
    now: int | None = None,
    config=None,
) -> ExperimentSuggestion | None:
    """
    Pick the suggestion to offer, if any.

    Args:
        signals: Full signal history
        storage: ExperimentStorage used for the active/declined checks
        now: Reference time in ms for the pattern window
        config: PatternDetectionConfig

    Returns:
        Suggestion for the most confident pattern not recently declined,
        or None while an experiment is active
    """
    if storage.get_active_experiment() is not None:
        return None

    for pattern in detect_patterns(signals, now=now, config=config):
        if storage.is_pattern_declined(pattern.type):
            logger.debug(f"Pattern {pattern.type} declined recently, skipping")
            continue
        return pattern_to_suggestion(pattern)

    return None
