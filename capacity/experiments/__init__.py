"""Experiment Tools - Hypothesis testing without coaching

Philosophy:
    The user is the scientist. The system observes.
    A pattern becomes a question, never advice.
    Results are correlations, never causes.

Components:
    patterns.py: Detect recurring low-capacity patterns in recent signals
    suggestions.py: Turn a pattern into a fixed, neutral question
    storage.py: Experiment lifecycle (one active at a time) and daily log
    analysis.py: Compare followed vs not-followed days

Flow:
    signals -> detect_patterns -> pattern_to_suggestion -> create_experiment
            -> record_day (daily) -> analyze_experiment

Usage:
    from capacity.experiments.storage import ExperimentStorage
    from capacity.experiments.suggestions import get_suggestion

    storage = ExperimentStorage(store)
    suggestion = get_suggestion(signals, storage)
    if suggestion:
        storage.create_experiment(
            suggestion.hypotheses[0], suggestion.pattern_type,
            suggestion.pattern_description,
        )
"""

EXPERIMENT_STATUSES = ("active", "concluded", "abandoned")
FOLLOWED_VALUES = ("yes", "no", "skipped")

EXPERIMENT_CONSTANTS = {
    "MAX_ACTIVE": 1,
    "MIN_DURATION_WEEKS": 2,
    "MAX_DURATION_WEEKS": 8,
    "DEFAULT_DURATION_WEEKS": 4,
    "MIN_SIGNALS_FOR_SUGGESTION": 14,
    "MIN_SIGNALS_IN_WINDOW": 7,
    "LOOKBACK_DAYS": 30,
    "COOLDOWN_DAYS_AFTER_DECLINE": 7,
    "CORRELATION_THRESHOLD": 15,
    "STORAGE_KEY": "@capacity:experiments",
    "DAYS_KEY": "@capacity:experiment_days",
    "LAST_PROMPT_KEY": "@capacity:experiment_last_prompt",
    "DECLINED_PATTERNS_KEY": "@capacity:experiment_declined",
}

OBSERVATIONAL_LANGUAGE = {
    "intro": "You noticed a pattern.",
    "question": "Would you like to explore this?",
    "hypothesis": "What would you like to try?",
    "tracking": "Experiment in progress",
    "followup": "Did you follow your experiment today?",
    "result_intro": "Here's what was observed:",
    "correlation": "Correlation observed. Causation unknown.",
    "no_correlation": "No clear pattern emerged.",
    "closing": "What this means is up to you.",
    "abandon": "You can stop this experiment anytime.",
    "no_judgment": "There are no wrong answers.",
}

__all__ = [
    "EXPERIMENT_STATUSES",
    "FOLLOWED_VALUES",
    "EXPERIMENT_CONSTANTS",
    "OBSERVATIONAL_LANGUAGE",
]
