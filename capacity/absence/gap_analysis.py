"""
Tool: Gap Analysis Gate
Purpose: The one place that decides whether absence data may be shown

Gap and coverage information must never reach a view shorter than the
minimum window (90 days by default). Callers go through analyze_gaps or
analyze_gaps_from_span and render only what comes back; nothing downstream
repeats this check.

A refusal is not an error. It is a normal, inert result carrying a
human-readable reason, so whatever renders it always has something to show.

Usage:
    result = analyze_gaps(signals, period_days=90)
    if result.is_available:
        print(result.formatted_coverage)
    else:
        print(result.unavailable_reason)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from capacity.absence import MIN_DAYS_FOR_GAP_ANALYSIS, MIN_SIGNALS_FOR_GAP_ANALYSIS
from capacity.absence.coverage import (
    CoverageMetric,
    calculate_coverage,
    calculate_coverage_from_signal_span,
    format_coverage,
    format_coverage_short,
)
from capacity.absence.gap_detection import (
    DerivedGap,
    count_gaps_by_category,
    detect_gaps,
    get_longest_gap,
)
from capacity.logging_config import get_logger
from capacity.models import Signal

logger = get_logger(__name__)


@dataclass(frozen=True)
class GapAnalysisResult:
    is_available: bool
    unavailable_reason: str | None = None
    coverage: CoverageMetric | None = None
    gaps: list[DerivedGap] = field(default_factory=list)
    by_category: dict[str, int] | None = None
    longest_gap: DerivedGap | None = None
    formatted_coverage: str = ""
    formatted_coverage_short: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_available": self.is_available,
            "unavailable_reason": self.unavailable_reason,
            "coverage": self.coverage.to_dict() if self.coverage else None,
            "gaps": [g.to_dict() for g in self.gaps],
            "by_category": self.by_category,
            "longest_gap": self.longest_gap.to_dict() if self.longest_gap else None,
            "formatted_coverage": self.formatted_coverage,
            "formatted_coverage_short": self.formatted_coverage_short,
        }


def _unavailable(reason: str) -> GapAnalysisResult:
    logger.debug(f"Gap analysis withheld: {reason}")
    return GapAnalysisResult(is_available=False, unavailable_reason=reason)


def _available(signals: Sequence[Signal], coverage: CoverageMetric) -> GapAnalysisResult:
    gaps = detect_gaps(signals)
    return GapAnalysisResult(
        is_available=True,
        coverage=coverage,
        gaps=gaps,
        by_category=count_gaps_by_category(gaps),
        longest_gap=get_longest_gap(gaps),
        formatted_coverage=format_coverage(coverage),
        formatted_coverage_short=format_coverage_short(coverage),
    )


def analyze_gaps(
    signals: Sequence[Signal],
    period_days: int,
    min_days_override: int | None = None,
) -> GapAnalysisResult:
    """
    Gap analysis over a fixed window.

    Args:
        signals: Signals in the window, any order
        period_days: Length of the window being viewed
        min_days_override: Replace the 90-day floor (use with caution)

    Returns:
        GapAnalysisResult; is_available is False below the floor or with
        fewer than 7 signals
    """
    min_days = MIN_DAYS_FOR_GAP_ANALYSIS if min_days_override is None else min_days_override

    if period_days < min_days:
        return _unavailable(f"Gap analysis requires at least {min_days} days of data")

    if len(signals) < MIN_SIGNALS_FOR_GAP_ANALYSIS:
        return _unavailable(
            f"Gap analysis requires at least {MIN_SIGNALS_FOR_GAP_ANALYSIS} signals"
        )

    return _available(signals, calculate_coverage(signals, period_days))


def analyze_gaps_from_span(
    signals: Sequence[Signal],
    min_days_override: int | None = None,
) -> GapAnalysisResult:
    """Gap analysis with the period taken from the signals' own span.

    The same floor applies to the derived period.
    """
    min_days = MIN_DAYS_FOR_GAP_ANALYSIS if min_days_override is None else min_days_override

    if len(signals) < MIN_SIGNALS_FOR_GAP_ANALYSIS:
        return _unavailable(
            f"Gap analysis requires at least {MIN_SIGNALS_FOR_GAP_ANALYSIS} signals"
        )

    coverage = calculate_coverage_from_signal_span(signals)
    if coverage.period_days < min_days:
        return _unavailable(f"Gap analysis requires at least {min_days} days of signal history")

    return _available(signals, coverage)
