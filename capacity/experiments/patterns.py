"""
Tool: Pattern Detector
Purpose: Find recurring low-capacity patterns in recent signals

Patterns exist only to prompt a question. They never assert a cause and are
never stored; every call re-derives them from the signals it is given.

Pattern Types:
- day_of_week_<day>: one weekday runs noticeably lower (e.g. "Mondays")
- category_<name>: sensory/social/demand load shows up with low capacity
- consecutive_depletion: three or more low days in a row

Gating:
    Nothing is reported until the full history holds 14 signals and the
    trailing 30-day window holds 7.

Tie-breaks:
    Weekdays are scanned Sunday..Saturday and categories in
    sensory, social, demand order; the first candidate wins a tie.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Sequence

from capacity import MS_PER_DAY
from capacity.config_models import PatternDetectionConfig
from capacity.experiments.models import PatternDetection
from capacity.logging_config import get_logger
from capacity.models import CapacityState, Signal, SignalCategory, capacity_to_value, utc_date

logger = get_logger(__name__)

# Sunday first, matching weekday index 0..6
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

CATEGORY_NAMES = {
    SignalCategory.SENSORY: "Sensory load",
    SignalCategory.SOCIAL: "Social demand",
    SignalCategory.DEMAND: "Task demand",
}

# Confidence caps per detector
DAY_OF_WEEK_MAX_CONFIDENCE = 0.9
CATEGORY_MAX_CONFIDENCE = 0.85
CONSECUTIVE_MAX_CONFIDENCE = 0.8

MIN_SIGNALS_PER_BUCKET = 3
DAY_OF_WEEK_MAX_AVERAGE = 40
DAY_OF_WEEK_MIN_LOW = 2
CATEGORY_MIN_LOW = 3
MIN_STREAK = 3


def weekday_index(timestamp: int) -> int:
    """0=Sunday .. 6=Saturday, UTC."""
    return (datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).weekday() + 1) % 7


def _signal_date(signal: Signal) -> date:
    if signal.local_date:
        try:
            return date.fromisoformat(signal.local_date)
        except ValueError:
            logger.debug(f"Ignoring unparseable local_date {signal.local_date!r}")
    return date.fromisoformat(utc_date(signal.timestamp))


def detect_day_of_week_pattern(signals: Sequence[Signal]) -> PatternDetection | None:
    """Detect a weekday whose capacity runs consistently low."""
    stats = {day: {"total": 0, "count": 0, "low": 0} for day in range(7)}

    for signal in signals:
        day = stats[weekday_index(signal.timestamp)]
        day["total"] += capacity_to_value(signal.state)
        day["count"] += 1
        if signal.state is CapacityState.LOW:
            day["low"] += 1

    worst_day = -1
    worst_avg = 100.0

    for day in range(7):
        if stats[day]["count"] >= MIN_SIGNALS_PER_BUCKET:
            avg = stats[day]["total"] / stats[day]["count"]
            if avg < worst_avg:
                worst_avg = avg
                worst_day = day

    if worst_day < 0:
        return None

    low_count = stats[worst_day]["low"]
    if worst_avg >= DAY_OF_WEEK_MAX_AVERAGE or low_count < DAY_OF_WEEK_MIN_LOW:
        return None

    name = DAY_NAMES[worst_day]
    return PatternDetection(
        type=f"day_of_week_{name.lower()}",
        description=f"{name}s often show lower capacity",
        confidence=min(DAY_OF_WEEK_MAX_CONFIDENCE, low_count / stats[worst_day]["count"]),
        data={
            "day": worst_day,
            "day_name": name,
            "avg_capacity": worst_avg,
            "low_count": low_count,
        },
    )


def detect_category_pattern(signals: Sequence[Signal]) -> PatternDetection | None:
    """Detect a category that frequently appears alongside low capacity.

    A signal counts once for its explicit category and once more for each
    tag that names a category.
    """
    stats = {category: {"total": 0, "count": 0, "low": 0} for category in SignalCategory}
    by_value = {category.value: category for category in SignalCategory}

    def _add(category: SignalCategory, signal: Signal) -> None:
        stats[category]["count"] += 1
        stats[category]["total"] += capacity_to_value(signal.state)
        if signal.state is CapacityState.LOW:
            stats[category]["low"] += 1

    for signal in signals:
        if signal.category:
            _add(signal.category, signal)
        for tag in sorted(signal.tags):
            if tag in by_value:
                _add(by_value[tag], signal)

    dominant = None
    highest_low = 0

    for category in SignalCategory:
        if stats[category]["count"] >= MIN_SIGNALS_PER_BUCKET and stats[category]["low"] > highest_low:
            highest_low = stats[category]["low"]
            dominant = category

    if dominant is None or highest_low < CATEGORY_MIN_LOW:
        return None

    name = CATEGORY_NAMES[dominant]
    return PatternDetection(
        type=f"category_{dominant.value}",
        description=f"{name} frequently appears with lower capacity",
        confidence=min(CATEGORY_MAX_CONFIDENCE, highest_low / stats[dominant]["count"]),
        data={
            "category": dominant.value,
            "category_name": name,
            "low_count": highest_low,
        },
    )


def detect_consecutive_pattern(signals: Sequence[Signal]) -> PatternDetection | None:
    """Detect runs of low signals on the same or consecutive days."""
    max_streak = 0
    current_streak = 0
    last_date = None

    for signal in sorted(signals, key=lambda s: s.timestamp):
        if signal.state is not CapacityState.LOW:
            current_streak = 0
            last_date = None
            continue

        current = _signal_date(signal)
        if last_date is not None and (current - last_date).days <= 1:
            current_streak += 1
        else:
            current_streak = 1
        last_date = current
        max_streak = max(max_streak, current_streak)

    if max_streak < MIN_STREAK:
        return None

    return PatternDetection(
        type="consecutive_depletion",
        description="Extended periods of low capacity observed",
        confidence=min(CONSECUTIVE_MAX_CONFIDENCE, max_streak / 5),
        data={"max_streak": max_streak},
    )


def detect_patterns(
    signals: Sequence[Signal],
    now: int | None = None,
    config: PatternDetectionConfig | None = None,
) -> list[PatternDetection]:
    """
    Run every detector over the trailing window.

    Args:
        signals: Full signal history, any order
        now: Reference time in ms (defaults to the current time)
        config: Window and gating settings

    Returns:
        Detected patterns, highest confidence first
    """
    config = config or PatternDetectionConfig()
    if not config.enabled:
        return []

    if len(signals) < config.min_history_signals:
        logger.debug(f"Pattern detection skipped: {len(signals)} signals in history")
        return []

    now = int(time.time() * 1000) if now is None else now
    cutoff = now - config.lookback_days * MS_PER_DAY
    recent = [s for s in signals if s.timestamp >= cutoff]
    if len(recent) < config.min_window_signals:
        logger.debug(f"Pattern detection skipped: {len(recent)} signals in window")
        return []

    patterns = []
    for detector in (detect_day_of_week_pattern, detect_category_pattern, detect_consecutive_pattern):
        pattern = detector(recent)
        if pattern:
            patterns.append(pattern)

    return sorted(patterns, key=lambda p: p.confidence, reverse=True)
