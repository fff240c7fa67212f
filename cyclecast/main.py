"""CycleCast command-line entry point.

Usage:
    cyclecast predict history.json --as-of 2026-02-10
    cyclecast in-progress --day 2026-02-09 --day 2026-02-10 --as-of 2026-02-10
    cyclecast log history.json 2026-02-09 2026-02-10 2026-02-11
    cyclecast log history.json 2026-02-12 --continue
    cyclecast delete-day history.json 2026-02-11
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from datetime import date
from pathlib import Path

from cyclecast.config import get_settings
from cyclecast.engine import history as history_ops
from cyclecast.engine.config_loader import get_engine_config, reload_engine_config
from cyclecast.engine.forecaster import CycleForecaster, confidence_label
from cyclecast.engine.in_progress import InProgressPeriodForecaster
from cyclecast.engine.phase import PhaseClassifier
from cyclecast.engine.records import InsufficientDataError, PeriodRecord, PeriodValidationError
from cyclecast.models.periods import dump_history_json, dump_predictions_json, load_history_json

logger = logging.getLogger("cyclecast")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _read_history(path: Path) -> list[PeriodRecord]:
    if not path.exists():
        return []
    return load_history_json(path.read_text(encoding="utf-8"))


def _write_history(path: Path, periods: list[PeriodRecord]) -> None:
    path.write_text(dump_history_json(periods) + "\n", encoding="utf-8")
    logger.info("Saved %d periods to %s", len(periods), path)


# ── Commands ──────────────────────────────────────────────────


def cmd_predict(args, rng: random.Random | None) -> int:
    periods = _read_history(args.history)
    forecaster = CycleForecaster(rng=rng)
    try:
        result = forecaster.forecast(periods)
    except InsufficientDataError as exc:
        print(str(exc))
        return 1

    print(dump_predictions_json(result))
    print()
    print(
        f"Next period: {result.next_period.start_date.isoformat()} "
        f"({confidence_label(result.next_period.confidence)} confidence)"
    )
    if forecaster.is_unusually_irregular(result.analysis):
        print(
            "Your cycles appear to be irregular. Predictions may be less accurate. "
            "Consider consulting a healthcare provider."
        )
    for insight in forecaster.insights(result.analysis):
        print(f"  • {insight}")

    try:
        phase = PhaseClassifier(forecaster).classify(args.as_of, periods, result)
    except InsufficientDataError:
        logger.info("No period logged on or before %s; phase not shown", args.as_of)
    else:
        print(f"Current phase ({args.as_of.isoformat()}): {phase.value}")
    return 0


def cmd_in_progress(args, rng: random.Random | None) -> int:
    periods = _read_history(args.history) if args.history else []
    forecaster = InProgressPeriodForecaster(policy=args.policy)
    forecast = forecaster.predict_remaining_days(args.day, args.as_of, periods)
    for d in forecast.possible_days:
        print(f"  {d.isoformat()}  possible ({forecast.possible_confidence}%)")
    for d in forecast.predicted_days:
        print(f"  {d.isoformat()}  predicted ({forecast.predicted_confidence}%)")
    print(forecaster.summary(args.day, args.as_of, periods))
    return 0


def cmd_log(args, rng: random.Random | None) -> int:
    periods = _read_history(args.history)
    try:
        if args.continue_last:
            updated = history_ops.continue_last_period(periods, args.days)
        else:
            updated = history_ops.log_period(periods, args.days)
    except PeriodValidationError as exc:
        print(str(exc))
        return 1
    _write_history(args.history, updated)
    return 0


def cmd_delete_day(args, rng: random.Random | None) -> int:
    periods = _read_history(args.history)
    _write_history(args.history, history_ops.delete_period_day(periods, args.day))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Menstrual cycle analysis and prediction")
    sub = parser.add_subparsers(dest="command")

    pred = sub.add_parser("predict", help="Analyze history and forecast cycles")
    pred.add_argument("history", type=Path, help="Path to history JSON")
    pred.add_argument("--as-of", type=date.fromisoformat, default=None, help="Reference date")

    prog = sub.add_parser("in-progress", help="Forecast the rest of an open period")
    prog.add_argument("--day", type=date.fromisoformat, action="append", default=[],
                      help="Logged day (repeatable)")
    prog.add_argument("--as-of", type=date.fromisoformat, default=None, help="Reference date")
    prog.add_argument("--history", type=Path, default=None,
                      help="History JSON (used by the learned policy)")
    prog.add_argument("--policy", choices=["fixed", "learned"], default=None)

    log = sub.add_parser("log", help="Log a period")
    log.add_argument("history", type=Path, help="Path to history JSON")
    log.add_argument("days", type=date.fromisoformat, nargs="+", help="Days (YYYY-MM-DD)")
    log.add_argument("--continue", dest="continue_last", action="store_true",
                     help="Add the days to the last logged period")

    rm = sub.add_parser("delete-day", help="Remove a logged day")
    rm.add_argument("history", type=Path, help="Path to history JSON")
    rm.add_argument("day", type=date.fromisoformat, help="Day (YYYY-MM-DD)")

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    _configure_logging(settings.log_level)

    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    if settings.engine_config_path:
        reload_engine_config(settings.engine_config_path)
    else:
        get_engine_config()

    # The wall clock is read here and nowhere else.
    if getattr(args, "as_of", "unset") is None:
        args.as_of = date.today()

    rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
    logger.debug("Starting %s v%s: %s", settings.app_name, settings.app_version, args.command)

    commands = {
        "predict": cmd_predict,
        "in-progress": cmd_in_progress,
        "log": cmd_log,
        "delete-day": cmd_delete_day,
    }
    return commands[args.command](args, rng)


if __name__ == "__main__":
    sys.exit(main())
