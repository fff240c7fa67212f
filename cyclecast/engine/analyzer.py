"""Cycle statistics derived from logged period history.

Cycle length is measured start-to-start between consecutive periods;
period length is the inclusive day count of each record.  Both averages
are recency weighted over the last ``recent_window`` samples (6 by
default), and regularity is scored from the population standard deviation
of the most recent cycle lengths.

With no cycle samples the analyzer falls back to a 28-day cycle and a
5-day period rather than failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from cyclecast.engine.config_loader import EngineConfig, get_engine_config
from cyclecast.engine.records import PeriodRecord, days_between, sort_history
from cyclecast.engine.statistics import round_half_up, standard_deviation, weighted_average

logger = logging.getLogger("cyclecast.engine.analyzer")


@dataclass
class CycleAnalysis:
    """Summary statistics for a period history.

    Attributes:
        average_cycle_length:  Weighted average cycle length (days).
        average_period_length: Weighted average period length (days).
        cycle_variation:       Std deviation of recent cycle lengths, 1 decimal.
        regularity_score:      0–100, 100 = perfectly regular.
        total_cycles:          Number of cycle-length samples (records − 1).
        recent_cycles:         Samples used for the variation window.
    """

    average_cycle_length: int
    average_period_length: int
    cycle_variation: float
    regularity_score: int
    total_cycles: int
    recent_cycles: int


class CycleAnalyzer:
    """Compute cycle statistics over a snapshot of period history.

    The history is copied and sorted by start date on construction; the
    caller's sequence is never modified.

    Usage::

        analysis = CycleAnalyzer(history).analyze()
        print(analysis.average_cycle_length, analysis.regularity_score)
    """

    def __init__(
        self,
        history: Sequence[PeriodRecord],
        config: EngineConfig | None = None,
    ) -> None:
        self._config = config or get_engine_config()
        self._history = sort_history(history)

        limit = self._config.history.max_period_days
        for record in self._history:
            if len(record.days) > limit:
                logger.warning(
                    "Period starting %s has %d days (limit %d); analyzing it as logged",
                    record.start_date,
                    len(record.days),
                    limit,
                )

    @property
    def history(self) -> list[PeriodRecord]:
        return list(self._history)

    def cycle_lengths(self) -> list[int]:
        """Days between consecutive period starts (empty for < 2 records)."""
        return [
            days_between(current.start_date, previous.start_date)
            for previous, current in zip(self._history, self._history[1:])
        ]

    def period_lengths(self) -> list[int]:
        """Inclusive length of every logged period."""
        return [record.length for record in self._history]

    def analyze(self) -> CycleAnalysis:
        """Summarize the history into a CycleAnalysis."""
        ac = self._config.analysis
        cycle_lengths = self.cycle_lengths()
        period_lengths = self.period_lengths()

        if cycle_lengths:
            average_cycle = round_half_up(weighted_average(cycle_lengths, ac.recent_window))
        else:
            average_cycle = ac.default_cycle_length

        if period_lengths:
            average_period = round_half_up(weighted_average(period_lengths, ac.recent_window))
        else:
            average_period = ac.default_period_length

        recent = cycle_lengths[-ac.recent_window:]
        variation = standard_deviation(recent)
        regularity = max(0, min(100, round_half_up(100 - variation * ac.regularity_penalty)))

        analysis = CycleAnalysis(
            average_cycle_length=max(1, average_cycle),
            average_period_length=max(1, average_period),
            cycle_variation=round_half_up(variation * 10) / 10,
            regularity_score=regularity,
            total_cycles=len(cycle_lengths),
            recent_cycles=len(recent),
        )
        logger.debug(
            "Analyzed %d periods: cycle=%d period=%d sd=%.1f regularity=%d",
            len(self._history),
            analysis.average_cycle_length,
            analysis.average_period_length,
            analysis.cycle_variation,
            analysis.regularity_score,
        )
        return analysis
