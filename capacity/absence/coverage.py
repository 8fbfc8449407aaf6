"""
Tool: Coverage Calculator
Purpose: Share of calendar days in a period that hold at least one signal

Coverage is computed at query time and never stored. Days are UTC day
boundaries, not rolling 24-hour windows.

Permitted phrasings (nothing else is rendered for absence):
    "Signals present on 72 of 90 days (80%)"
    "80% coverage"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from capacity.absence import MS_PER_DAY
from capacity.absence.gap_detection import (
    DerivedGap,
    count_gaps_by_category,
    detect_gaps,
    get_longest_gap,
)
from capacity.models import Signal, day_index, round_half_up


@dataclass(frozen=True)
class CoverageMetric:
    """Coverage over a period. Never stored."""

    period_days: int
    signal_days: int
    coverage_percent: int
    gap_count: int
    longest_gap_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_days": self.period_days,
            "signal_days": self.signal_days,
            "coverage_percent": self.coverage_percent,
            "gap_count": self.gap_count,
            "longest_gap_days": self.longest_gap_days,
        }


@dataclass(frozen=True)
class GapSummary:
    gaps: list[DerivedGap]
    coverage: CoverageMetric
    by_category: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "gaps": [g.to_dict() for g in self.gaps],
            "coverage": self.coverage.to_dict(),
            "by_category": dict(self.by_category),
        }


def _empty_metric(period_days: int) -> CoverageMetric:
    return CoverageMetric(
        period_days=max(0, period_days),
        signal_days=0,
        coverage_percent=0,
        gap_count=0,
        longest_gap_days=0,
    )


def calculate_coverage(signals: Sequence[Signal], period_days: int) -> CoverageMetric:
    """
    Calculate coverage for signals over a period.

    Args:
        signals: Signals in any order
        period_days: Days in the analysis window

    Returns:
        CoverageMetric; all zeros for empty input or a non-positive period
    """
    if not signals or period_days <= 0:
        return _empty_metric(period_days)

    signal_days = len({day_index(s.timestamp) for s in signals})
    gaps = detect_gaps(signals)
    longest = get_longest_gap(gaps)

    return CoverageMetric(
        period_days=period_days,
        signal_days=signal_days,
        coverage_percent=round_half_up(signal_days / period_days * 100),
        gap_count=len(gaps),
        longest_gap_days=longest.duration_days if longest else 0,
    )


def signal_span_days(signals: Sequence[Signal]) -> int:
    """Days between first and last signal, rounded up, at least 1."""
    timestamps = [s.timestamp for s in signals]
    span_ms = max(timestamps) - min(timestamps)
    return max(1, math.ceil(span_ms / MS_PER_DAY))


def calculate_coverage_from_signal_span(signals: Sequence[Signal]) -> CoverageMetric:
    """Coverage using the first-to-last signal span as the period."""
    if not signals:
        return _empty_metric(0)

    if len(signals) == 1:
        return CoverageMetric(
            period_days=1,
            signal_days=1,
            coverage_percent=100,
            gap_count=0,
            longest_gap_days=0,
        )

    return calculate_coverage(signals, signal_span_days(signals))


def get_gap_summary(signals: Sequence[Signal], period_days: int) -> GapSummary:
    gaps = detect_gaps(signals)
    return GapSummary(
        gaps=gaps,
        coverage=calculate_coverage(signals, period_days),
        by_category=count_gaps_by_category(gaps),
    )


def format_coverage(coverage: CoverageMetric) -> str:
    return (
        f"Signals present on {coverage.signal_days} of {coverage.period_days} days "
        f"({coverage.coverage_percent}%)"
    )


def format_coverage_short(coverage: CoverageMetric) -> str:
    return f"{coverage.coverage_percent}% coverage"
