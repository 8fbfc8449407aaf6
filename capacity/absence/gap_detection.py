"""
Tool: Gap Detector
Purpose: Derive inter-signal gaps from a list of capacity signals

Gaps are computed on demand and live only as long as the call that produced
them. Nothing here writes anywhere.

Categories:
- short: 1-3 days, common and expected variation
- medium: 4-14 days
- extended: 15+ days
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from capacity.absence import MEDIUM_GAP_MAX_DAYS, MS_PER_DAY, SHORT_GAP_MAX_DAYS
from capacity.models import Signal


@dataclass(frozen=True)
class DerivedGap:
    """Interval between two consecutive signals. Never stored."""

    start_timestamp: int
    end_timestamp: int
    duration_days: int
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "duration_days": self.duration_days,
            "category": self.category,
        }


def categorize_gap(days: int) -> str:
    """Bucket a gap duration in whole days."""
    if days < SHORT_GAP_MAX_DAYS:
        return "short"
    if days < MEDIUM_GAP_MAX_DAYS:
        return "medium"
    return "extended"


def detect_gaps(signals: Sequence[Signal]) -> list[DerivedGap]:
    """
    Detect gaps between consecutive signals.

    Signals are sorted by timestamp first; input order does not matter.
    Spacing under one whole day is not reported.

    Args:
        signals: Signals in any order

    Returns:
        Gaps sorted ascending by start_timestamp
    """
    if len(signals) < 2:
        return []

    ordered = sorted(signals, key=lambda s: s.timestamp)
    gaps = []

    for prev, curr in zip(ordered, ordered[1:]):
        gap_days = (curr.timestamp - prev.timestamp) // MS_PER_DAY
        if gap_days >= 1:
            gaps.append(
                DerivedGap(
                    start_timestamp=prev.timestamp,
                    end_timestamp=curr.timestamp,
                    duration_days=gap_days,
                    category=categorize_gap(gap_days),
                )
            )

    return gaps


def get_longest_gap(gaps: Sequence[DerivedGap]) -> DerivedGap | None:
    """Longest gap, the earliest one on ties. None if there are no gaps."""
    longest = None
    for gap in gaps:
        if longest is None or gap.duration_days > longest.duration_days:
            longest = gap
    return longest


def count_gaps_by_category(gaps: Iterable[DerivedGap]) -> dict[str, int]:
    counts = {"short": 0, "medium": 0, "extended": 0}
    for gap in gaps:
        counts[gap.category] += 1
    return counts


def filter_gaps_by_duration(gaps: Iterable[DerivedGap], min_days: int) -> list[DerivedGap]:
    return [gap for gap in gaps if gap.duration_days >= min_days]


def filter_gaps_by_category(gaps: Iterable[DerivedGap], categories: Iterable[str]) -> list[DerivedGap]:
    wanted = set(categories)
    return [gap for gap in gaps if gap.category in wanted]
