#!/usr/bin/env python3
"""
Capacity Command Line Interface

Main entry point for the `capacity` command.

Usage:
    capacity gaps --signals signals.json --period 90
    capacity coverage --signals signals.json
    capacity patterns --signals signals.json
    capacity suggest --signals signals.json
    capacity create --hypothesis "Reduce commitments on Mondays" --pattern day_of_week_monday
    capacity record --followed yes --state mid
    capacity results
    capacity conclude
    capacity abandon
    capacity decline --pattern category_sensory
    capacity check-language --content "Days missed: 12"

Signals come from --signals (a JSON array) or, without it, from the
configured key in the local store. Experiment state lives in
data/capacity.db unless --db says otherwise.

Output:
    JSON result with success status; exit code 1 on failure
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from capacity import PROJECT_ROOT, __version__
from capacity.absence.gap_analysis import analyze_gaps, analyze_gaps_from_span
from capacity.config_models import CapacityConfig, load_config
from capacity.experiments.analysis import analyze_experiment, format_result_for_display
from capacity.experiments.patterns import detect_patterns
from capacity.experiments.storage import ExperimentError, ExperimentStorage
from capacity.experiments.suggestions import get_suggestion
from capacity.language_filter import check_content, filter_content
from capacity.logging_config import bind_context, clear_context, get_logger, setup_logging
from capacity.models import CAPACITY_VALUES, CapacityState
from capacity.store import SqliteStore, load_signals, load_signals_from_store

logger = get_logger(__name__)


def _open_store(args, config: CapacityConfig) -> SqliteStore:
    db_path = args.db or config.storage.db_path
    if db_path:
        path = Path(db_path)
        return SqliteStore(path if path.is_absolute() else PROJECT_ROOT / path)
    return SqliteStore()


def _storage(args, config: CapacityConfig) -> ExperimentStorage:
    return ExperimentStorage(
        _open_store(args, config),
        cooldown_days=config.experiments.cooldown_days_after_decline,
    )


def _signals(args, config: CapacityConfig):
    if args.signals:
        return load_signals(Path(args.signals))
    return load_signals_from_store(_open_store(args, config), config.storage.signals_key)


def _resolve_experiment(storage: ExperimentStorage, experiment_id: str | None):
    if experiment_id:
        return storage.get_experiment(experiment_id)
    active = storage.get_active_experiment()
    if active:
        return active
    experiments = storage.get_experiments()
    return experiments[0] if experiments else None


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────


def cmd_gaps(args, config: CapacityConfig) -> dict:
    """Gap analysis through the 90-day gate."""
    signals = _signals(args, config)
    min_days = (
        args.min_days if args.min_days is not None else config.absence.min_days_for_gap_analysis
    )
    if args.period is not None:
        result = analyze_gaps(signals, args.period, min_days_override=min_days)
    else:
        result = analyze_gaps_from_span(signals, min_days_override=min_days)
    return {"success": True, "data": result.to_dict()}


def cmd_coverage(args, config: CapacityConfig) -> dict:
    """Coverage phrasing only, still through the gate."""
    result = cmd_gaps(args, config)["data"]
    if not result["is_available"]:
        return {"success": True, "data": {"message": result["unavailable_reason"]}}
    return {
        "success": True,
        "data": {
            "message": result["formatted_coverage"],
            "short": result["formatted_coverage_short"],
        },
    }


def cmd_patterns(args, config: CapacityConfig) -> dict:
    patterns = detect_patterns(_signals(args, config), config=config.patterns)
    if not patterns:
        return {
            "success": True,
            "data": {"patterns": [], "message": "No patterns noticed yet."},
        }
    return {"success": True, "data": {"patterns": [p.to_dict() for p in patterns]}}


def cmd_suggest(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    suggestion = get_suggestion(_signals(args, config), storage, config=config.patterns)
    if suggestion is None:
        return {"success": True, "data": {"suggestion": None}}

    storage.set_last_prompt_date(storage.clock().date().isoformat())
    return {"success": True, "data": {"suggestion": suggestion.to_dict()}}


def cmd_create(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    experiment = storage.create_experiment(
        hypothesis=args.hypothesis,
        trigger_pattern_type=args.pattern or "manual",
        trigger_description=args.description or "",
        duration_weeks=args.weeks or config.experiments.default_duration_weeks,
    )
    return {"success": True, "data": {"experiment": experiment.to_dict()}}


def cmd_finish(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    experiment_id = args.experiment_id
    if not experiment_id:
        active = storage.get_active_experiment()
        if active is None:
            return {"success": False, "error": "No active experiment"}
        experiment_id = active.id

    if args.command == "conclude":
        experiment = storage.conclude_experiment(experiment_id)
    else:
        experiment = storage.abandon_experiment(experiment_id)

    if experiment is None:
        return {"success": False, "error": f"Experiment not found: {experiment_id}"}
    return {"success": True, "data": {"experiment": experiment.to_dict()}}


def cmd_record(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    if args.experiment_id:
        experiment = storage.get_experiment(args.experiment_id)
        if experiment is None:
            return {"success": False, "error": f"Experiment not found: {args.experiment_id}"}
    else:
        experiment = storage.get_active_experiment()
        if experiment is None:
            return {"success": False, "error": "No active experiment"}

    capacity_value = args.capacity
    if capacity_value is None and args.state:
        capacity_value = CAPACITY_VALUES[CapacityState(args.state)]

    day = args.date or storage.clock().date().isoformat()
    record = storage.record_day(
        experiment.id, day, args.followed, signal_id=args.signal_id, capacity_value=capacity_value
    )
    if args.signal_id:
        storage.link_signal(experiment.id, args.signal_id)
    return {"success": True, "data": {"day": record.to_dict()}}


def cmd_results(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    experiment = _resolve_experiment(storage, args.experiment_id)
    if experiment is None:
        return {"success": False, "error": "No experiment found"}

    result = analyze_experiment(
        experiment,
        storage.get_experiment_days(experiment.id),
        threshold=config.experiments.correlation_threshold,
    )
    return {
        "success": True,
        "data": {"result": result.to_dict(), "display": format_result_for_display(result)},
    }


def cmd_decline(args, config: CapacityConfig) -> dict:
    storage = _storage(args, config)
    storage.decline_pattern(args.pattern)
    return {"success": True, "data": {"pattern": args.pattern, "declined": True}}


def cmd_check_language(args, config: CapacityConfig) -> dict:
    if args.reframe:
        return filter_content(args.content, config.language)
    return check_content(args.content, config.language)


COMMANDS = {
    "gaps": cmd_gaps,
    "coverage": cmd_coverage,
    "patterns": cmd_patterns,
    "suggest": cmd_suggest,
    "create": cmd_create,
    "conclude": cmd_finish,
    "abandon": cmd_finish,
    "record": cmd_record,
    "results": cmd_results,
    "decline": cmd_decline,
    "check-language": cmd_check_language,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capacity",
        description="Capacity - longitudinal signal analysis",
    )
    parser.add_argument("--version", action="version", version=f"capacity {__version__}")
    parser.add_argument("--db", help="Path to the key/value database")
    parser.add_argument("--config", help="Path to a capacity.yaml config file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def _with_signals(sub):
        sub.add_argument("--signals", help="JSON file holding an array of signals")
        return sub

    for name, help_text in (("gaps", "Gap analysis (90-day minimum)"), ("coverage", "Coverage line")):
        sub = _with_signals(subparsers.add_parser(name, help=help_text))
        sub.add_argument("--period", type=int, help="Window in days (defaults to the signal span)")
        sub.add_argument("--min-days", type=int, help="Override the minimum window")

    _with_signals(subparsers.add_parser("patterns", help="Detect recurring patterns"))
    _with_signals(subparsers.add_parser("suggest", help="Offer an experiment suggestion"))

    create = subparsers.add_parser("create", help="Start an experiment")
    create.add_argument("--hypothesis", required=True)
    create.add_argument("--pattern", help="Pattern type that prompted the experiment")
    create.add_argument("--description", help="Trigger description")
    create.add_argument("--weeks", type=int, help="Duration in weeks (2-8)")

    for name in ("conclude", "abandon"):
        sub = subparsers.add_parser(name, help=f"{name.capitalize()} the active experiment")
        sub.add_argument("--experiment-id")

    record = subparsers.add_parser("record", help="Record today's follow-up")
    record.add_argument("--experiment-id")
    record.add_argument("--date", help="ISO date (defaults to today)")
    record.add_argument("--followed", required=True, choices=["yes", "no", "skipped"])
    record.add_argument("--signal-id")
    capacity_group = record.add_mutually_exclusive_group()
    capacity_group.add_argument("--capacity", type=float, help="Capacity value 0-100")
    capacity_group.add_argument("--state", choices=[s.value for s in CapacityState])

    results = subparsers.add_parser("results", help="Analyze an experiment")
    results.add_argument("--experiment-id")

    decline = subparsers.add_parser("decline", help="Decline a suggested pattern")
    decline.add_argument("--pattern", required=True)

    language = subparsers.add_parser("check-language", help="Check text for judgmental phrasing")
    language.add_argument("--content", required=True)
    language.add_argument("--reframe", action="store_true", help="Also return a reframed version")

    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    config = load_config(Path(args.config)) if args.config else load_config()
    clear_context()
    bind_context(command=args.command)

    try:
        result = COMMANDS[args.command](args, config)
    except (ExperimentError, ValueError) as e:
        logger.debug(f"{args.command} refused: {e}")
        result = {"success": False, "error": str(e)}

    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
