"""Forecast the remaining days of a period that is still being logged.

Predictions are only shown when the reference date is one of the logged
days; a period the user has not confirmed as ongoing today produces an
empty forecast.  Once five days are logged the period is treated as
complete.

Two target-length policies are supported (``in_progress.target_length_policy``):

fixed
    A fixed schedule keyed on the number of days logged::

        logged  possible      predicted
        1       +1, +2, +3    +4
        2       +1, +2        +3
        3       +1, +2        -
        4       +1            -

learned
    The analyzer's average period length is the target.  Remaining days
    are ``max(0, target - logged)``; the first three are "possible", any
    beyond that are "predicted".

Offsets are counted from the chronologically last logged day.  Days that
are already logged are never forecast.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Sequence

from cyclecast.engine.analyzer import CycleAnalyzer
from cyclecast.engine.config_loader import EngineConfig, get_engine_config
from cyclecast.engine.records import PeriodRecord

logger = logging.getLogger("cyclecast.engine.in_progress")


@dataclass
class InProgressForecast:
    """Forecast for the rest of an open period.

    Attributes:
        possible_days:        Likely next days (high confidence).
        predicted_days:       Further days (lower confidence).
        is_complete:          True once the completion threshold is logged.
        possible_confidence:  Confidence for every possible day (0 if none forecast).
        predicted_confidence: Confidence for every predicted day (0 if none forecast).
    """

    possible_days: list[date] = field(default_factory=list)
    predicted_days: list[date] = field(default_factory=list)
    is_complete: bool = False
    possible_confidence: int = 0
    predicted_confidence: int = 0


class InProgressPeriodForecaster:
    """Predict how many more days an open period will run.

    Usage::

        forecaster = InProgressPeriodForecaster()
        forecast = forecaster.predict_remaining_days(logged_days, reference_date=today)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        policy: str | None = None,
    ) -> None:
        self._config = config or get_engine_config()
        self._policy = policy or self._config.in_progress.target_length_policy
        if self._policy not in ("fixed", "learned"):
            raise ValueError(f"Unknown target length policy: {self._policy!r}")

    @property
    def policy(self) -> str:
        return self._policy

    def predict_remaining_days(
        self,
        current_period_days: Iterable[date],
        reference_date: date,
        history: Sequence[PeriodRecord] = (),
    ) -> InProgressForecast:
        """Forecast the remaining days of the open period.

        Args:
            current_period_days: Days logged so far for the open period.
            reference_date:      "Today"; must be among the logged days for
                                 any forecast to be produced.
            history:             Completed periods, used only by the
                                 ``learned`` policy for its target length.
        """
        ic = self._config.in_progress
        logged = sorted(set(current_period_days))

        if not logged or reference_date not in logged:
            return InProgressForecast()

        if len(logged) >= ic.complete_after_days:
            return InProgressForecast(is_complete=True)

        last_day = logged[-1]
        if self._policy == "learned":
            possible_offsets, predicted_offsets = self._learned_offsets(len(logged), history)
        else:
            entry = ic.schedule.get(len(logged))
            possible_offsets = entry.possible if entry else []
            predicted_offsets = entry.predicted if entry else []

        logged_set = set(logged)
        possible = [
            d for d in (last_day + timedelta(days=o) for o in possible_offsets)
            if d not in logged_set
        ]
        predicted = [
            d for d in (last_day + timedelta(days=o) for o in predicted_offsets)
            if d not in logged_set
        ]

        logger.debug(
            "%s policy: %d logged → %d possible, %d predicted",
            self._policy,
            len(logged),
            len(possible),
            len(predicted),
        )
        return InProgressForecast(
            possible_days=possible,
            predicted_days=predicted,
            is_complete=False,
            possible_confidence=ic.possible_confidence,
            predicted_confidence=ic.predicted_confidence,
        )

    def _learned_offsets(
        self, logged_count: int, history: Sequence[PeriodRecord]
    ) -> tuple[list[int], list[int]]:
        target = CycleAnalyzer(history, self._config).analyze().average_period_length
        remaining = max(0, target - logged_count)
        possible_count = min(self._config.in_progress.max_possible_days, remaining)
        possible = list(range(1, possible_count + 1))
        predicted = list(range(possible_count + 1, remaining + 1))
        return possible, predicted

    def classify_day(
        self,
        day: date,
        current_period_days: Iterable[date],
        reference_date: date,
        history: Sequence[PeriodRecord] = (),
    ) -> str | None:
        """Return 'possible', 'predicted', or None for a single calendar day."""
        forecast = self.predict_remaining_days(current_period_days, reference_date, history)
        if day in forecast.possible_days:
            return "possible"
        if day in forecast.predicted_days:
            return "predicted"
        return None

    def summary(
        self,
        current_period_days: Iterable[date],
        reference_date: date,
        history: Sequence[PeriodRecord] = (),
    ) -> str:
        """Human-readable one-line summary of the forecast."""
        days = list(current_period_days)
        forecast = self.predict_remaining_days(days, reference_date, history)
        logged_count = len(set(days))

        if forecast.is_complete:
            return (
                f"Period appears complete "
                f"({self._config.in_progress.complete_after_days}+ days logged)"
            )

        possible_count = len(forecast.possible_days)
        predicted_count = len(forecast.predicted_days)
        if possible_count + predicted_count == 0:
            return "Period may be ending soon"

        text = f"{logged_count} {_days(logged_count)} logged. "
        if possible_count and predicted_count:
            text += (
                f"{possible_count} more {_days(possible_count)} likely, "
                f"{predicted_count} possible."
            )
        elif possible_count:
            text += f"{possible_count} more {_days(possible_count)} likely."
        else:
            text += f"{predicted_count} more {_days(predicted_count)} possible."
        return text


def _days(count: int) -> str:
    return "day" if count == 1 else "days"
