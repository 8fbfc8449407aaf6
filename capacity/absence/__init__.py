"""Absence Tools - Gaps and coverage, derived at query time

Philosophy:
    Absence is data, not failure.
    A gap is the distance between two signals, nothing more.

Rules:
    1. Absence is never stored as an explicit record
    2. Gap duration = next signal timestamp - previous signal timestamp
    3. Gaps shorter than one day are normal variance, not absence
    4. Categories: short (1-3 days), medium (4-14 days), extended (15+ days)
    5. Gap data never appears in a view shorter than 90 days

Components:
    gap_detection.py: Derive gaps from a signal list
    coverage.py: Share of calendar days holding at least one signal
    gap_analysis.py: The single gate in front of both

Usage:
    from capacity.absence.gap_analysis import analyze_gaps

    result = analyze_gaps(signals, period_days=90)
    if result.is_available:
        print(result.formatted_coverage)
        # "Signals present on 72 of 90 days (80%)"
"""

from capacity import MS_PER_DAY

# Gap category upper bounds (exclusive)
SHORT_GAP_MAX_DAYS = 4
MEDIUM_GAP_MAX_DAYS = 15

GAP_CATEGORIES = ("short", "medium", "extended")

# Gate policy
MIN_DAYS_FOR_GAP_ANALYSIS = 90
MIN_SIGNALS_FOR_GAP_ANALYSIS = 7

__all__ = [
    "MS_PER_DAY",
    "SHORT_GAP_MAX_DAYS",
    "MEDIUM_GAP_MAX_DAYS",
    "GAP_CATEGORIES",
    "MIN_DAYS_FOR_GAP_ANALYSIS",
    "MIN_SIGNALS_FOR_GAP_ANALYSIS",
]
