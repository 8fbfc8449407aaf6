"""
Tool: Experiment Storage
Purpose: Lifecycle for hypothesis experiments and their daily follow-up log

State machine:
    active -> concluded  (terminal)
    active -> abandoned  (terminal)

At most one experiment is active at a time. Creating another while one is
active raises ActiveExperimentError until the first is concluded or
abandoned.

Persistence:
    Four whole JSON values in a KeyValueStore:
        @capacity:experiments           list of experiments, newest first
        @capacity:experiment_days       list of (experiment, date) records
        @capacity:experiment_last_prompt  ISO date string
        @capacity:experiment_declined   append-only decline log

    Every write reads the whole list and writes it back. There is no
    locking: two writers on the same list can lose an update. Missing or
    corrupt values read as empty.

Follow-up counters:
    followed/not_followed/skipped counts are recomputed from the day records
    after every upsert, so they count distinct days. Recording the same day
    twice changes that day's answer; it never counts the day twice.
"""

from __future__ import annotations

import dataclasses
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable

from capacity import MS_PER_DAY
from capacity.experiments import EXPERIMENT_CONSTANTS, FOLLOWED_VALUES
from capacity.experiments.models import Experiment, ExperimentDay
from capacity.logging_config import get_logger
from capacity.store import KeyValueStore, read_json, write_json

logger = get_logger(__name__)

STORAGE_KEY = EXPERIMENT_CONSTANTS["STORAGE_KEY"]
DAYS_KEY = EXPERIMENT_CONSTANTS["DAYS_KEY"]
LAST_PROMPT_KEY = EXPERIMENT_CONSTANTS["LAST_PROMPT_KEY"]
DECLINED_PATTERNS_KEY = EXPERIMENT_CONSTANTS["DECLINED_PATTERNS_KEY"]


class ExperimentError(Exception):
    """Base class for experiment lifecycle errors."""


class ActiveExperimentError(ExperimentError):
    """Raised when creating an experiment while another is active."""

    def __init__(self, active_id: str):
        self.active_id = active_id
        super().__init__(
            "An experiment is already active. Conclude or abandon your current experiment first."
        )


class InvalidExperimentError(ExperimentError):
    """Raised for experiment fields outside their allowed range."""


class InvalidTransitionError(ExperimentError):
    """Raised when concluding or abandoning an experiment that is not active."""


class ExperimentNotFoundError(ExperimentError):
    """Raised when a follow-up references an unknown experiment."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExperimentStorage:
    """Experiment lifecycle over a key/value store.

    Args:
        store: KeyValueStore holding the experiment values
        clock: Returns the current time; injected so tests can fix "today"
        cooldown_days: How long a declined pattern stays suppressed
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] | None = None,
        cooldown_days: int = EXPERIMENT_CONSTANTS["COOLDOWN_DAYS_AFTER_DECLINE"],
    ):
        self.store = store
        self.clock = clock or _utc_now
        self.cooldown_days = cooldown_days

    # ─────────────────────────────────────────────────────────────────────
    # Time helpers
    # ─────────────────────────────────────────────────────────────────────

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def _today(self) -> str:
        return self.clock().date().isoformat()

    # ─────────────────────────────────────────────────────────────────────
    # Experiments
    # ─────────────────────────────────────────────────────────────────────

    def _load_experiments(self) -> list[Experiment]:
        experiments = []
        for entry in read_json(self.store, STORAGE_KEY, []):
            try:
                experiments.append(Experiment.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable experiment record: {e}")
        return experiments

    def _save_experiments(self, experiments: list[Experiment]) -> None:
        write_json(self.store, STORAGE_KEY, [e.to_dict() for e in experiments])

    def get_experiments(self) -> list[Experiment]:
        """All experiments, newest first."""
        return self._load_experiments()

    def get_experiment(self, experiment_id: str) -> Experiment | None:
        for experiment in self._load_experiments():
            if experiment.id == experiment_id:
                return experiment
        return None

    def get_active_experiment(self) -> Experiment | None:
        for experiment in self._load_experiments():
            if experiment.is_active:
                return experiment
        return None

    def create_experiment(
        self,
        hypothesis: str,
        trigger_pattern_type: str,
        trigger_description: str,
        duration_weeks: int = EXPERIMENT_CONSTANTS["DEFAULT_DURATION_WEEKS"],
    ) -> Experiment:
        """
        Start a new experiment.

        Raises:
            ActiveExperimentError: another experiment is still active
            InvalidExperimentError: duration outside 2-8 weeks or empty hypothesis
        """
        experiments = self._load_experiments()
        active = next((e for e in experiments if e.is_active), None)
        if active is not None:
            raise ActiveExperimentError(active.id)

        min_weeks = EXPERIMENT_CONSTANTS["MIN_DURATION_WEEKS"]
        max_weeks = EXPERIMENT_CONSTANTS["MAX_DURATION_WEEKS"]
        if not min_weeks <= duration_weeks <= max_weeks:
            raise InvalidExperimentError(
                f"Experiments run between {min_weeks} and {max_weeks} weeks, got {duration_weeks}"
            )
        if not hypothesis or not hypothesis.strip():
            raise InvalidExperimentError("A hypothesis is required")

        experiment = Experiment(
            id=f"exp_{str(uuid.uuid4())[:8]}",
            hypothesis=hypothesis.strip(),
            trigger_pattern_type=trigger_pattern_type,
            trigger_description=trigger_description,
            start_date=self._today(),
            duration_weeks=duration_weeks,
            status="active",
            created_at=self._now_ms(),
        )
        experiments.insert(0, experiment)
        self._save_experiments(experiments)

        logger.info(f"Experiment {experiment.id} started for {duration_weeks} weeks")
        return experiment

    def update_experiment(self, experiment_id: str, **updates: Any) -> Experiment | None:
        """Apply field updates. Returns None for unknown ids."""
        experiments = self._load_experiments()
        for index, experiment in enumerate(experiments):
            if experiment.id == experiment_id:
                experiments[index] = dataclasses.replace(experiment, **updates)
                self._save_experiments(experiments)
                return experiments[index]
        return None

    def _finish(self, experiment_id: str, status: str) -> Experiment | None:
        experiment = self.get_experiment(experiment_id)
        if experiment is None:
            return None
        if not experiment.is_active:
            raise InvalidTransitionError(
                f"Experiment {experiment_id} is already {experiment.status}"
            )

        updated = self.update_experiment(
            experiment_id,
            status=status,
            end_date=self._today(),
            concluded_at=self._now_ms(),
        )
        logger.info(f"Experiment {experiment_id} {status}")
        return updated

    def conclude_experiment(self, experiment_id: str) -> Experiment | None:
        return self._finish(experiment_id, "concluded")

    def abandon_experiment(self, experiment_id: str) -> Experiment | None:
        return self._finish(experiment_id, "abandoned")

    def link_signal(self, experiment_id: str, signal_id: str) -> None:
        """Attach a signal to an active experiment, once."""
        experiment = self.get_experiment(experiment_id)
        if experiment is None or not experiment.is_active:
            return
        if signal_id not in experiment.linked_signal_ids:
            self.update_experiment(
                experiment_id,
                linked_signal_ids=[*experiment.linked_signal_ids, signal_id],
            )

    def is_date_active(self, experiment_id: str, day: str) -> bool:
        """True when the experiment is active and day falls in its window (inclusive)."""
        experiment = self.get_experiment(experiment_id)
        if experiment is None or not experiment.is_active:
            return False

        start = date.fromisoformat(experiment.start_date)
        end = start + timedelta(days=experiment.duration_weeks * 7)
        return start <= date.fromisoformat(day) <= end

    # ─────────────────────────────────────────────────────────────────────
    # Daily follow-ups
    # ─────────────────────────────────────────────────────────────────────

    def _load_days(self) -> list[ExperimentDay]:
        days = []
        for entry in read_json(self.store, DAYS_KEY, []):
            try:
                days.append(ExperimentDay.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable experiment day: {e}")
        return days

    def get_experiment_days(self, experiment_id: str) -> list[ExperimentDay]:
        return [d for d in self._load_days() if d.experiment_id == experiment_id]

    def record_day(
        self,
        experiment_id: str,
        day: str,
        followed: str,
        signal_id: str | None = None,
        capacity_value: float | None = None,
    ) -> ExperimentDay:
        """
        Upsert the follow-up record for (experiment_id, day).

        The answer is overwritten, signal ids are merged and capacity values
        appended. Counters on the experiment are then recomputed per day.

        Raises:
            ValueError: followed is not yes/no/skipped
            ExperimentNotFoundError: unknown experiment id
            InvalidTransitionError: the experiment is concluded or abandoned
        """
        if followed not in FOLLOWED_VALUES:
            raise ValueError(f"followed must be one of {FOLLOWED_VALUES}, got {followed!r}")
        experiment = self.get_experiment(experiment_id)
        if experiment is None:
            raise ExperimentNotFoundError(f"No experiment {experiment_id}")
        if not experiment.is_active:
            raise InvalidTransitionError(
                f"Experiment {experiment_id} is {experiment.status}; its log is closed"
            )

        all_days = self._load_days()
        record = next(
            (d for d in all_days if d.experiment_id == experiment_id and d.date == day),
            None,
        )
        if record is None:
            record = ExperimentDay(experiment_id=experiment_id, date=day)
            all_days.append(record)

        record.followed = followed
        if signal_id and signal_id not in record.signal_ids:
            record.signal_ids.append(signal_id)
        if capacity_value is not None:
            record.capacity_values.append(capacity_value)

        write_json(self.store, DAYS_KEY, [d.to_dict() for d in all_days])

        own_days = [d for d in all_days if d.experiment_id == experiment_id]
        self.update_experiment(
            experiment_id,
            followed_count=sum(1 for d in own_days if d.followed == "yes"),
            not_followed_count=sum(1 for d in own_days if d.followed == "no"),
            skipped_count=sum(1 for d in own_days if d.followed == "skipped"),
        )
        return record

    def should_prompt_followup(self, experiment_id: str, day: str) -> bool:
        """True until the day has an answer."""
        for record in self.get_experiment_days(experiment_id):
            if record.date == day:
                return record.followed is None
        return True

    # ─────────────────────────────────────────────────────────────────────
    # Suggestion prompts and declines
    # ─────────────────────────────────────────────────────────────────────

    def get_last_prompt_date(self) -> str | None:
        return self.store.get(LAST_PROMPT_KEY)

    def set_last_prompt_date(self, day: str) -> None:
        self.store.set(LAST_PROMPT_KEY, day)

    def get_declined_patterns(self) -> list[dict[str, Any]]:
        """Readable decline entries; anything malformed is skipped."""
        declined = []
        for entry in read_json(self.store, DECLINED_PATTERNS_KEY, []):
            if (
                isinstance(entry, dict)
                and isinstance(entry.get("pattern"), str)
                and isinstance(entry.get("declined_at"), (int, float))
                and not isinstance(entry.get("declined_at"), bool)
            ):
                declined.append(entry)
            else:
                logger.warning(f"Skipping unreadable decline entry: {entry!r}")
        return declined

    def decline_pattern(self, pattern_type: str) -> None:
        """Append a decline. The log is never pruned."""
        declined = read_json(self.store, DECLINED_PATTERNS_KEY, [])
        declined.append({"pattern": pattern_type, "declined_at": self._now_ms()})
        write_json(self.store, DECLINED_PATTERNS_KEY, declined)
        self.set_last_prompt_date(self._today())
        logger.info(f"Pattern {pattern_type} declined")

    def is_pattern_declined(self, pattern_type: str) -> bool:
        """True while a decline for this exact pattern type is inside the cooldown."""
        cooldown_ms = self.cooldown_days * MS_PER_DAY
        now = self._now_ms()
        return any(
            entry["pattern"] == pattern_type and now - entry["declined_at"] < cooldown_ms
            for entry in self.get_declined_patterns()
        )
