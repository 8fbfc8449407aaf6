"""Experiment data models.

    PatternDetection -> ExperimentSuggestion -> Experiment
    Experiment + ExperimentDay[] -> ExperimentResult

Experiments and days round-trip through JSON via to_dict/from_dict; the
rest are ephemeral value objects.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from capacity.experiments import EXPERIMENT_STATUSES


def _status(value: Any) -> str:
    if value not in EXPERIMENT_STATUSES:
        raise ValueError(f"Unknown experiment status {value!r}")
    return value


@dataclass
class Experiment:
    """A time-boxed hypothesis the user chose to try."""

    id: str
    hypothesis: str
    trigger_pattern_type: str
    trigger_description: str
    start_date: str
    duration_weeks: int
    status: str = "active"
    end_date: str | None = None
    linked_signal_ids: list[str] = field(default_factory=list)
    followed_count: int = 0
    not_followed_count: int = 0
    skipped_count: int = 0
    created_at: int = 0
    concluded_at: int | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Experiment:
        return cls(
            id=data["id"],
            hypothesis=data.get("hypothesis", ""),
            trigger_pattern_type=data.get("trigger_pattern_type", ""),
            trigger_description=data.get("trigger_description", ""),
            start_date=data["start_date"],
            duration_weeks=int(data.get("duration_weeks", 4)),
            status=_status(data.get("status", "active")),
            end_date=data.get("end_date"),
            linked_signal_ids=list(data.get("linked_signal_ids") or []),
            followed_count=int(data.get("followed_count", 0)),
            not_followed_count=int(data.get("not_followed_count", 0)),
            skipped_count=int(data.get("skipped_count", 0)),
            created_at=int(data.get("created_at", 0)),
            concluded_at=data.get("concluded_at"),
        )


@dataclass
class ExperimentDay:
    """Follow-up record for one experiment on one calendar day."""

    experiment_id: str
    date: str
    followed: str | None = None
    signal_ids: list[str] = field(default_factory=list)
    capacity_values: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExperimentDay:
        return cls(
            experiment_id=data["experiment_id"],
            date=data["date"],
            followed=data.get("followed"),
            signal_ids=list(data.get("signal_ids") or []),
            capacity_values=[float(v) for v in data.get("capacity_values") or []],
        )


@dataclass(frozen=True)
class PatternDetection:
    type: str
    description: str
    confidence: float
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "confidence": self.confidence,
            "data": dict(self.data),
        }


@dataclass(frozen=True)
class ExperimentSuggestion:
    id: str
    pattern_type: str
    pattern_description: str
    question: str
    hypotheses: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pattern_type": self.pattern_type,
            "pattern_description": self.pattern_description,
            "question": self.question,
            "hypotheses": list(self.hypotheses),
        }


@dataclass(frozen=True)
class DayStats:
    count: int
    avg_capacity: int
    distribution: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "avg_capacity": self.avg_capacity,
            "distribution": dict(self.distribution),
        }


@dataclass(frozen=True)
class ExperimentResult:
    experiment_id: str
    hypothesis: str
    duration_days: int
    followed_days: DayStats
    not_followed_days: DayStats
    correlation_observed: bool
    correlation_direction: str
    has_enough_data: bool
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "experiment_id": self.experiment_id,
            "hypothesis": self.hypothesis,
            "duration_days": self.duration_days,
            "followed_days": self.followed_days.to_dict(),
            "not_followed_days": self.not_followed_days.to_dict(),
            "correlation_observed": self.correlation_observed,
            "correlation_direction": self.correlation_direction,
            "has_enough_data": self.has_enough_data,
            "summary": self.summary,
        }
