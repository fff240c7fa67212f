"""Entry points used by storage/UI layers.

Each call works on the history snapshot it is given and returns freshly
built results; nothing is cached between calls.  The reference date is
always passed in explicitly.

Usage::

    from cyclecast.engine import service

    result = service.generate_predictions(history, rng=random.Random(1))
    phase = service.classify_phase(date(2026, 2, 10), history)
"""

from __future__ import annotations

import random
from datetime import date
from typing import Iterable, Sequence

from cyclecast.engine.analyzer import CycleAnalysis, CycleAnalyzer
from cyclecast.engine.config_loader import EngineConfig
from cyclecast.engine.forecaster import CycleForecaster, PredictionResult
from cyclecast.engine.in_progress import InProgressForecast, InProgressPeriodForecaster
from cyclecast.engine.phase import CyclePhase, PhaseClassifier
from cyclecast.engine.records import PeriodRecord


def analyze_cycles(
    history: Sequence[PeriodRecord], config: EngineConfig | None = None
) -> CycleAnalysis:
    return CycleAnalyzer(history, config).analyze()


def generate_predictions(
    history: Sequence[PeriodRecord],
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
) -> PredictionResult:
    """Forecast next period, ovulation, and future cycles.

    Raises:
        InsufficientDataError: If ``history`` is empty.
    """
    return CycleForecaster(config, rng).forecast(history)


def is_unusually_irregular(
    history: Sequence[PeriodRecord], config: EngineConfig | None = None
) -> bool:
    forecaster = CycleForecaster(config)
    return forecaster.is_unusually_irregular(CycleAnalyzer(history, forecaster.config).analyze())


def get_cycle_insights(
    history: Sequence[PeriodRecord], config: EngineConfig | None = None
) -> list[str]:
    forecaster = CycleForecaster(config)
    return forecaster.insights(CycleAnalyzer(history, forecaster.config).analyze())


def predict_remaining_days(
    current_period_days: Iterable[date],
    reference_date: date,
    history: Sequence[PeriodRecord] = (),
    config: EngineConfig | None = None,
    policy: str | None = None,
) -> InProgressForecast:
    return InProgressPeriodForecaster(config, policy).predict_remaining_days(
        current_period_days, reference_date, history
    )


def get_prediction_summary(
    current_period_days: Iterable[date],
    reference_date: date,
    history: Sequence[PeriodRecord] = (),
    config: EngineConfig | None = None,
    policy: str | None = None,
) -> str:
    return InProgressPeriodForecaster(config, policy).summary(
        current_period_days, reference_date, history
    )


def classify_phase(
    reference_date: date,
    history: Sequence[PeriodRecord],
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
    prediction: PredictionResult | None = None,
) -> CyclePhase:
    """Phase of ``reference_date``, measured against ``prediction`` when given.

    Raises:
        InsufficientDataError: If no period starts on or before ``reference_date``.
    """
    return PhaseClassifier(CycleForecaster(config, rng)).classify(
        reference_date, history, prediction
    )
