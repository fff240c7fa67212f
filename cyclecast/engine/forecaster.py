"""Next-period, ovulation, and long-horizon cycle forecasting.

Takes a ``CycleAnalysis`` plus the most recent logged period and projects:

- Next period start, its most likely days, and a wider window of possible
  days widened by half the cycle variation on each side
- Ovulation date (luteal phase counted back from the next period) and the
  7-day fertile window around it
- Six future cycles, start/end dates only

Every forecast carries a 0–100 confidence derived from one base score.
The base score grows with the amount of data and with regularity; each
forecast category scales it down (next period > ovulation > future
cycles), and future cycles decay further the further out they are.

Irregular cycles (regularity below 70) jitter the luteal phase within
13–16 days.  The random source is injected so results can be reproduced.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Sequence

from cyclecast.engine.analyzer import CycleAnalysis, CycleAnalyzer
from cyclecast.engine.config_loader import EngineConfig, get_engine_config
from cyclecast.engine.records import InsufficientDataError, PeriodRecord, date_range, sort_history
from cyclecast.engine.statistics import round_half_up

logger = logging.getLogger("cyclecast.engine.forecaster")

# Advisory messages, keyed by the condition that triggers them
INSIGHT_LOG_MORE = "Log more cycles for more accurate predictions"
INSIGHT_VERY_REGULAR = "Your cycles are very regular"
INSIGHT_MODERATELY_REGULAR = "Your cycles are moderately regular"
INSIGHT_SOME_IRREGULARITY = "Your cycles show some irregularity"
INSIGHT_QUITE_IRREGULAR = (
    "Your cycles are quite irregular - consider consulting a healthcare provider"
)
INSIGHT_SHORT_CYCLES = "Your cycles are shorter than average"
INSIGHT_LONG_CYCLES = "Your cycles are longer than average"
INSIGHT_LONG_PERIODS = "Your periods are longer than average"
INSIGHT_SHORT_PERIODS = "Your periods are shorter than average"


@dataclass
class NextPeriodPrediction:
    """Forecast for the next period.

    Attributes:
        start_date:     Predicted first day.
        predicted_days: ``average_period_length`` consecutive days from start.
        possible_days:  Wider window including cycle variation.
        confidence:     0–100.
    """

    start_date: date
    predicted_days: list[date]
    possible_days: list[date]
    confidence: int


@dataclass
class OvulationPrediction:
    """Forecast ovulation day and fertile window.

    ``fertile_window[fertile_days_before]`` (index 5 by default) is always
    the ovulation day itself.
    """

    date: date
    fertile_window: list[date]
    confidence: int
    luteal_phase_days: int = 14


@dataclass
class FutureCycle:
    """One projected future period (1-based ``cycle_number``)."""

    start_date: date
    end_date: date
    confidence: int
    cycle_number: int


@dataclass
class PredictionResult:
    """Everything forecast from a period history."""

    next_period: NextPeriodPrediction
    ovulation: OvulationPrediction
    future_cycles: list[FutureCycle] = field(default_factory=list)
    analysis: CycleAnalysis | None = None


def confidence_label(confidence: float) -> str:
    """Bucket a 0–100 confidence into 'High', 'Medium', or 'Low'."""
    if confidence >= 80:
        return "High"
    if confidence >= 60:
        return "Medium"
    return "Low"


class CycleForecaster:
    """Produce forward-looking predictions from a cycle analysis.

    Usage::

        forecaster = CycleForecaster(rng=random.Random(7))
        result = forecaster.forecast(history)
        print(result.next_period.start_date, result.ovulation.date)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or get_engine_config()
        self._rng = rng or random.Random()

    @property
    def config(self) -> EngineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Confidence
    # ------------------------------------------------------------------

    def base_confidence(self, analysis: CycleAnalysis) -> float:
        """Data-volume and regularity driven confidence, clamped to [30, 95]."""
        cc = self._config.confidence
        confidence = cc.base
        confidence += cc.tier_bonus(analysis.total_cycles)
        confidence += (analysis.regularity_score / 100) * cc.regularity_weight
        if analysis.recent_cycles >= cc.recent_bonus_min_cycles:
            confidence += cc.recent_bonus
        return min(cc.maximum, max(cc.minimum, confidence))

    # ------------------------------------------------------------------
    # Individual forecasts
    # ------------------------------------------------------------------

    def predict_next_period(
        self, analysis: CycleAnalysis, last_period: PeriodRecord
    ) -> NextPeriodPrediction:
        base = self.base_confidence(analysis)
        start = last_period.start_date + timedelta(days=analysis.average_cycle_length)
        period_length = analysis.average_period_length

        predicted_days = [start + timedelta(days=i) for i in range(period_length)]

        variation_days = math.ceil(analysis.cycle_variation / 2)
        possible_days = date_range(
            start - timedelta(days=variation_days),
            start + timedelta(days=variation_days + period_length),
        )

        return NextPeriodPrediction(
            start_date=start,
            predicted_days=predicted_days,
            possible_days=possible_days,
            confidence=round_half_up(base * self._config.confidence.multipliers.next_period),
        )

    def luteal_phase_days(self, analysis: CycleAnalysis) -> int:
        """Luteal phase length: 14 days, jittered within 13–16 when irregular."""
        oc = self._config.ovulation
        if analysis.regularity_score >= oc.regular_threshold or not oc.jitter_irregular:
            return oc.luteal_phase_days
        span = oc.luteal_jitter_max - oc.luteal_jitter_min
        return round_half_up(oc.luteal_jitter_min + self._rng.random() * span)

    def predict_ovulation(
        self, next_period_start: date, analysis: CycleAnalysis
    ) -> OvulationPrediction:
        oc = self._config.ovulation
        base = self.base_confidence(analysis)
        luteal = self.luteal_phase_days(analysis)
        ovulation_date = next_period_start - timedelta(days=luteal)
        fertile_window = date_range(
            ovulation_date - timedelta(days=oc.fertile_days_before),
            ovulation_date + timedelta(days=oc.fertile_days_after),
        )
        return OvulationPrediction(
            date=ovulation_date,
            fertile_window=fertile_window,
            confidence=round_half_up(base * self._config.confidence.multipliers.ovulation),
            luteal_phase_days=luteal,
        )

    def predict_future_cycles(
        self, analysis: CycleAnalysis, last_period: PeriodRecord
    ) -> list[FutureCycle]:
        fc = self._config.future_cycles
        multiplier = self._config.confidence.multipliers.future_cycles
        base = self.base_confidence(analysis)

        cycles: list[FutureCycle] = []
        start = last_period.start_date + timedelta(days=analysis.average_cycle_length)
        for i in range(fc.count):
            decayed = max(fc.confidence_floor, base - i * fc.confidence_decay)
            cycles.append(
                FutureCycle(
                    start_date=start,
                    end_date=start + timedelta(days=analysis.average_period_length - 1),
                    confidence=round_half_up(decayed * multiplier),
                    cycle_number=i + 1,
                )
            )
            start += timedelta(days=analysis.average_cycle_length)
        return cycles

    # ------------------------------------------------------------------
    # Full forecast
    # ------------------------------------------------------------------

    def predict(self, analysis: CycleAnalysis, last_period: PeriodRecord) -> PredictionResult:
        """Forecast everything from an existing analysis and the latest period."""
        next_period = self.predict_next_period(analysis, last_period)
        ovulation = self.predict_ovulation(next_period.start_date, analysis)
        future_cycles = self.predict_future_cycles(analysis, last_period)
        logger.debug(
            "Forecast next period %s (conf %d), ovulation %s (conf %d)",
            next_period.start_date,
            next_period.confidence,
            ovulation.date,
            ovulation.confidence,
        )
        return PredictionResult(
            next_period=next_period,
            ovulation=ovulation,
            future_cycles=future_cycles,
            analysis=analysis,
        )

    def forecast(self, history: Sequence[PeriodRecord]) -> PredictionResult:
        """Analyze ``history`` and forecast from its most recent period.

        Raises:
            InsufficientDataError: If ``history`` is empty.
        """
        if not history:
            raise InsufficientDataError()
        ordered = sort_history(history)
        analysis = CycleAnalyzer(ordered, self._config).analyze()
        return self.predict(analysis, ordered[-1])

    # ------------------------------------------------------------------
    # Irregularity and insights
    # ------------------------------------------------------------------

    def is_unusually_irregular(self, analysis: CycleAnalysis) -> bool:
        """True only when cycles are irregular and there is enough data to say so."""
        ic = self._config.insights
        return analysis.regularity_score < ic.irregular_score and analysis.total_cycles >= ic.min_cycles

    def insights(self, analysis: CycleAnalysis) -> list[str]:
        """Advisory messages for the analysis, in display order."""
        ic = self._config.insights
        messages: list[str] = []

        if analysis.total_cycles < ic.min_cycles:
            messages.append(INSIGHT_LOG_MORE)

        if analysis.regularity_score >= ic.very_regular:
            messages.append(INSIGHT_VERY_REGULAR)
        elif analysis.regularity_score >= ic.moderately_regular:
            messages.append(INSIGHT_MODERATELY_REGULAR)
        elif analysis.regularity_score >= ic.some_irregularity:
            messages.append(INSIGHT_SOME_IRREGULARITY)
        else:
            messages.append(INSIGHT_QUITE_IRREGULAR)

        if analysis.average_cycle_length < ic.short_cycle_days:
            messages.append(INSIGHT_SHORT_CYCLES)
        elif analysis.average_cycle_length > ic.long_cycle_days:
            messages.append(INSIGHT_LONG_CYCLES)

        if analysis.average_period_length > ic.long_period_days:
            messages.append(INSIGHT_LONG_PERIODS)
        elif analysis.average_period_length < ic.short_period_days:
            messages.append(INSIGHT_SHORT_PERIODS)

        return messages
