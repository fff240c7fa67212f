"""Classify a calendar date into a menstrual cycle phase.

Phases are derived from the forecaster's output rather than from separate
day-count rules:

1. Only periods starting on or before the reference date are considered,
   so the classification matches what would have been forecast then.
2. A date inside a logged period is Menstrual.
3. Dates one or more whole cycles past the last period are folded back
   onto the forecast cycle; a folded date inside the next period's
   predicted days is Menstrual.
4. Otherwise the date (folded into the current cycle) is compared with
   the ovulation day at the centre of the fertile window: before is
   Follicular, the day itself is Ovulation, after is Luteal.

A forecast the caller already holds can be passed in so that the phase is
measured against the same (possibly jittered) ovulation day it displays.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Sequence

from cyclecast.engine.forecaster import CycleForecaster, PredictionResult
from cyclecast.engine.records import InsufficientDataError, PeriodRecord, days_between

logger = logging.getLogger("cyclecast.engine.phase")


class CyclePhase(str, Enum):
    menstrual = "Menstrual"
    follicular = "Follicular"
    ovulation = "Ovulation"
    luteal = "Luteal"


class PhaseClassifier:
    """Classify reference dates against a period history.

    The forecaster is injected so that the luteal jitter source (and the
    config) are under the caller's control.
    """

    def __init__(self, forecaster: CycleForecaster | None = None) -> None:
        self._forecaster = forecaster or CycleForecaster()

    def classify(
        self,
        reference_date: date,
        history: Sequence[PeriodRecord],
        prediction: PredictionResult | None = None,
    ) -> CyclePhase:
        """Return the phase ``reference_date`` falls in.

        Args:
            reference_date: Date to classify.
            history:        Logged periods.
            prediction:     Forecast already produced from ``history``.  It is
                            reused when every period starts on or before
                            ``reference_date``; otherwise the truncated
                            history is forecast afresh.

        Raises:
            InsufficientDataError: If no logged period starts on or before
                                   ``reference_date``.
        """
        relevant = [r for r in history if r.start_date <= reference_date]
        if not relevant:
            raise InsufficientDataError()
        if prediction is None or prediction.analysis is None or len(relevant) != len(history):
            prediction = self._forecaster.forecast(relevant)

        if any(record.contains(reference_date) for record in relevant):
            return CyclePhase.menstrual

        cycle_length = prediction.analysis.average_cycle_length
        anchor = max(record.start_date for record in relevant)
        cycles_elapsed = days_between(reference_date, anchor) // cycle_length

        if cycles_elapsed >= 1:
            projected = reference_date - timedelta(days=(cycles_elapsed - 1) * cycle_length)
            if projected in prediction.next_period.predicted_days:
                return CyclePhase.menstrual

        folded = reference_date - timedelta(days=cycles_elapsed * cycle_length)
        before = self._forecaster.config.ovulation.fertile_days_before
        ovulation_day = prediction.ovulation.fertile_window[before]

        if folded < ovulation_day:
            phase = CyclePhase.follicular
        elif folded == ovulation_day:
            phase = CyclePhase.ovulation
        else:
            phase = CyclePhase.luteal

        logger.debug(
            "%s → %s (folded %s, ovulation %s, %d cycles elapsed)",
            reference_date,
            phase.value,
            folded,
            ovulation_day,
            cycles_elapsed,
        )
        return phase
