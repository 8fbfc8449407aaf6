"""
Tool: Experiment Analyzer
Purpose: Compare capacity on followed vs not-followed experiment days

Computes outcomes without judgment. Reports correlation, never causation,
and never turns a result into a recommendation.

Buckets:
    Capacity values are bucketed at >=75 high, 25-74 mid, <25 low. The
    pattern detectors map states to 100/50/0, which land in the matching
    bucket; the 25/75 bounds only matter for values recorded on other
    scales.
"""

from __future__ import annotations

import math
import time
from typing import Sequence

from capacity import MS_PER_DAY
from capacity.experiments import EXPERIMENT_CONSTANTS, OBSERVATIONAL_LANGUAGE
from capacity.experiments.models import DayStats, Experiment, ExperimentDay, ExperimentResult
from capacity.models import round_half_up

HIGH_BUCKET_MIN = 75
MID_BUCKET_MIN = 25

MIN_FOLLOWED_DAYS = 2
MIN_NOT_FOLLOWED_DAYS = 1

BUCKET_LABELS = {"high": "High", "mid": "Mid", "low": "Low"}


def bucket_for(value: float) -> str:
    if value >= HIGH_BUCKET_MIN:
        return "high"
    if value >= MID_BUCKET_MIN:
        return "mid"
    return "low"


def compute_day_stats(days: Sequence[ExperimentDay]) -> DayStats:
    """Mean and bucket distribution over every capacity value in the days."""
    distribution = {"high": 0, "mid": 0, "low": 0}
    values = [value for day in days for value in day.capacity_values]

    for value in values:
        distribution[bucket_for(value)] += 1

    return DayStats(
        count=len(days),
        avg_capacity=round_half_up(sum(values) / len(values)) if values else 0,
        distribution=distribution,
    )


def analyze_experiment(
    experiment: Experiment,
    days: Sequence[ExperimentDay],
    now: int | None = None,
    threshold: float = EXPERIMENT_CONSTANTS["CORRELATION_THRESHOLD"],
) -> ExperimentResult:
    """
    Summarize an experiment's follow-up log.

    Args:
        experiment: The experiment being analyzed
        days: Its day records (records of other experiments are ignored)
        now: Reference time in ms for duration_days
        threshold: Minimum average-capacity difference reported as a correlation

    Returns:
        ExperimentResult with neutral, correlation-only summary text
    """
    own_days = [d for d in days if d.experiment_id == experiment.id]
    followed = compute_day_stats([d for d in own_days if d.followed == "yes"])
    not_followed = compute_day_stats([d for d in own_days if d.followed == "no"])

    diff = followed.avg_capacity - not_followed.avg_capacity
    has_enough_data = (
        followed.count >= MIN_FOLLOWED_DAYS and not_followed.count >= MIN_NOT_FOLLOWED_DAYS
    )

    correlation_observed = False
    direction = "neutral"
    if has_enough_data and abs(diff) >= threshold:
        correlation_observed = True
        direction = "positive" if diff > 0 else "negative"

    if not has_enough_data:
        summary = "Not enough data points to observe a pattern yet."
    elif direction == "positive":
        label = BUCKET_LABELS[bucket_for(followed.avg_capacity)]
        summary = (
            f"When you followed the experiment, capacity was {label} on average "
            f"({followed.avg_capacity}%). {OBSERVATIONAL_LANGUAGE['correlation']}"
        )
    elif direction == "negative":
        summary = (
            "Capacity was lower on days the experiment was followed. "
            f"{OBSERVATIONAL_LANGUAGE['correlation']}"
        )
    else:
        summary = (
            f"{OBSERVATIONAL_LANGUAGE['no_correlation']} "
            "Capacity was similar whether the experiment was followed or not."
        )
    summary = f"{summary} {OBSERVATIONAL_LANGUAGE['closing']}"

    now = int(time.time() * 1000) if now is None else now
    return ExperimentResult(
        experiment_id=experiment.id,
        hypothesis=experiment.hypothesis,
        duration_days=max(0, math.ceil((now - experiment.created_at) / MS_PER_DAY)),
        followed_days=followed,
        not_followed_days=not_followed,
        correlation_observed=correlation_observed,
        correlation_direction=direction,
        has_enough_data=has_enough_data,
        summary=summary,
    )


def _format_distribution(distribution: dict[str, int]) -> str:
    parts = [
        f"{distribution[bucket]} {BUCKET_LABELS[bucket]}"
        for bucket in ("high", "mid", "low")
        if distribution[bucket] > 0
    ]
    return ", ".join(parts) if parts else "No data"


def format_result_for_display(result: ExperimentResult) -> dict[str, str]:
    """Headline plus one line per partition, for rendering as-is."""
    if result.correlation_observed and result.correlation_direction == "positive":
        headline = "A positive correlation was observed"
    elif result.correlation_observed:
        headline = "An unexpected correlation was observed"
    else:
        headline = "No clear correlation was observed"

    followed = result.followed_days
    if followed.count > 0:
        followed_summary = (
            f"{followed.count} days followed - Avg capacity: {followed.avg_capacity}%\n"
            f"{_format_distribution(followed.distribution)}"
        )
    else:
        followed_summary = "No days marked as followed"

    not_followed = result.not_followed_days
    if not_followed.count > 0:
        not_followed_summary = (
            f"{not_followed.count} days not followed - Avg capacity: {not_followed.avg_capacity}%\n"
            f"{_format_distribution(not_followed.distribution)}"
        )
    else:
        not_followed_summary = "No days marked as not followed"

    return {
        "headline": headline,
        "followed_summary": followed_summary,
        "not_followed_summary": not_followed_summary,
        "conclusion": result.summary,
    }
