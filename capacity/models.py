"""Signal data models.

A signal is one timestamped capacity observation. Signals are owned by the
signal store and never modified here; every consumer re-sorts its own copy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from capacity import MS_PER_DAY


class CapacityState(str, Enum):
    """Closed set of capacity states."""

    HIGH = "high"
    MID = "mid"
    LOW = "low"


class SignalCategory(str, Enum):
    """Fixed capacity categories, in detection order."""

    SENSORY = "sensory"
    SOCIAL = "social"
    DEMAND = "demand"


# Numeric mapping used by the pattern detectors
CAPACITY_VALUES: dict[CapacityState, int] = {
    CapacityState.HIGH: 100,
    CapacityState.MID: 50,
    CapacityState.LOW: 0,
}


def capacity_to_value(state: CapacityState) -> int:
    return CAPACITY_VALUES[state]


def utc_date(timestamp: int) -> str:
    """ISO calendar date (UTC) for a millisecond timestamp."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).date().isoformat()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward."""
    return math.floor(value + 0.5)


def day_index(timestamp: int) -> int:
    """Whole UTC days since the epoch."""
    return timestamp // MS_PER_DAY


@dataclass(frozen=True)
class Signal:
    """A single capacity check-in."""

    timestamp: int
    state: CapacityState
    category: SignalCategory | None = None
    tags: frozenset[str] = field(default_factory=frozenset)
    local_date: str | None = None
    id: str | None = None

    @property
    def date(self) -> str:
        return self.local_date or utc_date(self.timestamp)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Signal:
        """Build a signal from its JSON form.

        Raises:
            ValueError: unknown state or category, or a non-numeric timestamp
            KeyError: missing timestamp or state
        """
        category = data.get("category")
        return cls(
            timestamp=int(data["timestamp"]),
            state=CapacityState(data["state"]),
            category=SignalCategory(category) if category else None,
            tags=frozenset(data.get("tags") or ()),
            local_date=data.get("local_date") or data.get("localDate"),
            id=data.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "state": self.state.value,
            "category": self.category.value if self.category else None,
            "tags": sorted(self.tags),
            "local_date": self.local_date,
        }
