"""Period records and the engine's error types.

A ``PeriodRecord`` is immutable: the engine only ever reads caller-owned
history and builds new values from it.  Records are normalized on
construction so that ``start_date``/``end_date`` always agree with the
logged day set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Sequence

logger = logging.getLogger("cyclecast.engine.records")


class InsufficientDataError(ValueError):
    """Raised when predictions are requested for an empty period history."""

    def __init__(
        self,
        message: str = "Insufficient data for predictions. Please log at least one period.",
    ) -> None:
        super().__init__(message)


class PeriodValidationError(ValueError):
    """Raised for a period record that cannot be normalized into a valid one."""


def days_between(later: date, earlier: date) -> int:
    """Whole calendar days from ``earlier`` to ``later``."""
    return (later - earlier).days


def date_range(start: date, end: date) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive (empty if end < start)."""
    return [start + timedelta(days=i) for i in range(days_between(end, start) + 1)]


@dataclass(frozen=True)
class PeriodRecord:
    """One logged menstrual period.

    Attributes:
        start_date: First logged day.
        end_date:   Last logged day.
        days:       Logged days, unique and sorted ascending.

    Normalization rules:
        - If ``days`` is non-empty, start/end are re-derived from min/max.
        - If ``days`` is empty but start <= end, days are filled in as the
          inclusive range.
        - Otherwise ``PeriodValidationError`` is raised.
    """

    start_date: date | None = None
    end_date: date | None = None
    days: tuple[date, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        days = tuple(sorted(set(self.days)))

        if days:
            start, end = days[0], days[-1]
            if (self.start_date, self.end_date) != (None, None) and (
                self.start_date != start or self.end_date != end
            ):
                logger.warning(
                    "Period record %s..%s disagrees with its days %s..%s; using days",
                    self.start_date,
                    self.end_date,
                    start,
                    end,
                )
        else:
            start, end = self.start_date, self.end_date
            if start is None or end is None:
                raise PeriodValidationError("Period record has no days and no start/end dates")
            if end < start:
                raise PeriodValidationError(
                    f"Period record ends ({end}) before it starts ({start})"
                )
            days = tuple(date_range(start, end))

        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)
        object.__setattr__(self, "days", days)

    @classmethod
    def from_days(cls, days: Iterable[date]) -> PeriodRecord:
        """Build a record from a collection of logged days."""
        return cls(days=tuple(days))

    @property
    def length(self) -> int:
        """Inclusive day count from first to last logged day."""
        return days_between(self.end_date, self.start_date) + 1

    def contains(self, day: date) -> bool:
        return day in self.days


def sort_history(history: Sequence[PeriodRecord]) -> list[PeriodRecord]:
    """Return a new list of records ordered by start date."""
    return sorted(history, key=lambda record: record.start_date)
