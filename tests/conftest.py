"""Shared test fixtures for capacity tests.

This module provides common fixtures used across all test modules:
- In-memory and temporary SQLite key/value stores
- A controllable clock for experiment lifecycle tests
- Signal builders anchored on a fixed Sunday

Usage:
    def test_something(make_signal):
        signal = make_signal(day=3, state="low")
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from capacity.experiments.storage import ExperimentStorage
from capacity.models import Signal
from capacity.store import MemoryStore, SqliteStore


# ─────────────────────────────────────────────────────────────────────────────
# Time Constants
# ─────────────────────────────────────────────────────────────────────────────

# Sunday 2026-01-04, 00:00 UTC
BASE_TIME = datetime(2026, 1, 4, tzinfo=timezone.utc)
MS_PER_DAY = 24 * 60 * 60 * 1000


def at(day: float, hour: int = 12) -> int:
    """Millisecond timestamp `day` days after BASE_TIME at `hour` UTC."""
    moment = BASE_TIME + timedelta(days=day, hours=hour)
    return int(moment.timestamp() * 1000)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    def ms(self) -> int:
        return int(self.now.timestamp() * 1000)


# ─────────────────────────────────────────────────────────────────────────────
# Store Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory key/value store."""
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SqliteStore:
    """SQLite store in a temporary directory.

    Returns:
        SqliteStore whose file is removed with tmp_path
    """
    return SqliteStore(tmp_path / "data" / "capacity.db")


# ─────────────────────────────────────────────────────────────────────────────
# Experiment Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2026-03-02 09:00 UTC."""
    return FakeClock(datetime(2026, 3, 2, 9, tzinfo=timezone.utc))


@pytest.fixture
def storage(memory_store: MemoryStore, clock: FakeClock) -> ExperimentStorage:
    return ExperimentStorage(memory_store, clock=clock)


@pytest.fixture
def sample_experiment_args() -> dict:
    """Arguments for a typical experiment started from a weekday pattern."""
    return {
        "hypothesis": "Reduce commitments on Mondays",
        "trigger_pattern_type": "day_of_week_monday",
        "trigger_description": "Mondays often show lower capacity",
        "duration_weeks": 4,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Signal Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_signal() -> Callable[..., Signal]:
    """Factory for signals relative to BASE_TIME (a Sunday).

    Usage:
        make_signal(day=1, state="low", category="social")
    """

    def _make(
        day: float = 0,
        state: str = "mid",
        hour: int = 12,
        category: str | None = None,
        tags: tuple[str, ...] = (),
        local_date: str | None = None,
        signal_id: str | None = None,
    ) -> Signal:
        return Signal.from_dict(
            {
                "id": signal_id,
                "timestamp": at(day, hour),
                "state": state,
                "category": category,
                "tags": list(tags),
                "local_date": local_date,
            }
        )

    return _make


@pytest.fixture
def daily_signals(make_signal) -> Callable[..., list[Signal]]:
    """Factory for one signal per day over a range of day offsets."""

    def _make(days, state: str = "mid", **kwargs) -> list[Signal]:
        return [make_signal(day=d, state=state, **kwargs) for d in days]

    return _make


@pytest.fixture
def neutral_phrasings() -> list:
    """Phrasings that must never trip the language filter."""
    return [
        "Signals present on 72 of 90 days (80%)",
        "80% coverage",
        "No signals recorded",
        "Correlation observed. Causation unknown.",
        "What this means is up to you.",
    ]


@pytest.fixture
def judgmental_phrasings() -> list:
    """Deficiency phrasings the language filter must catch."""
    return [
        "You missed 12 days this quarter",
        "Check-ins are missing for last week",
        "You failed to log on Friday",
        "You broke your streak",
        "You're behind on check-ins",
        "Your record is incomplete",
    ]
