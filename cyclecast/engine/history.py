"""Pure edits over a period history.

Each function returns a new list of ``PeriodRecord`` objects; the input
sequence is never modified.  Records are immutable, so unchanged records
are shared between the old and new history.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Sequence

from cyclecast.engine.config_loader import get_engine_config
from cyclecast.engine.records import PeriodRecord, PeriodValidationError

logger = logging.getLogger("cyclecast.engine.history")


def _validate_selection(days: Iterable[date], max_days: int | None) -> list[date]:
    selected = sorted(set(days))
    limit = max_days if max_days is not None else get_engine_config().history.max_period_days
    if not selected:
        raise PeriodValidationError("Select at least one day to log a period")
    if len(selected) > limit:
        raise PeriodValidationError(
            f"Period cannot exceed {limit} days ({len(selected)} selected)"
        )
    return selected


def log_period(
    history: Sequence[PeriodRecord],
    days: Iterable[date],
    max_days: int | None = None,
) -> list[PeriodRecord]:
    """Append a new period built from the selected days.

    Raises:
        PeriodValidationError: If no days are selected or more than
                               ``max_days`` (default from config) are.
    """
    selected = _validate_selection(days, max_days)
    record = PeriodRecord.from_days(selected)
    logger.debug("Logged period %s..%s (%d days)", record.start_date, record.end_date, len(selected))
    return [*history, record]


def continue_last_period(
    history: Sequence[PeriodRecord],
    days: Iterable[date],
    max_days: int | None = None,
) -> list[PeriodRecord]:
    """Merge newly selected days into the most recent period.

    Raises:
        PeriodValidationError: If the history is empty or the selection is invalid.
    """
    if not history:
        raise PeriodValidationError("There is no period to continue")
    selected = _validate_selection(days, max_days)
    last = history[-1]
    merged = PeriodRecord.from_days([*last.days, *selected])
    return [*history[:-1], merged]


def delete_period_day(history: Sequence[PeriodRecord], day: date) -> list[PeriodRecord]:
    """Remove ``day`` from whichever period contains it.

    Start/end dates are recomputed; a period left with no days is dropped.
    """
    updated: list[PeriodRecord] = []
    for record in history:
        if not record.contains(day):
            updated.append(record)
            continue
        remaining = [d for d in record.days if d != day]
        if remaining:
            updated.append(PeriodRecord.from_days(remaining))
        else:
            logger.debug("Dropped period %s: last day removed", record.start_date)
    return updated


def delete_period(history: Sequence[PeriodRecord], start_date: date) -> list[PeriodRecord]:
    """Remove the period starting on ``start_date``."""
    return [record for record in history if record.start_date != start_date]


def logged_days(history: Sequence[PeriodRecord]) -> list[date]:
    """Every logged day across the history, sorted."""
    return sorted({day for record in history for day in record.days})


def last_period_length(history: Sequence[PeriodRecord]) -> int | None:
    """Inclusive length of the most recently started period, or None."""
    if not history:
        return None
    return max(history, key=lambda record: record.start_date).length
