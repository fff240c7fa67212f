"""Cycle analysis and prediction engine.

Modules:
    statistics    — Recency-weighted average and population std deviation
    records       — PeriodRecord and engine error types
    analyzer      — Cycle/period length statistics and regularity score
    forecaster    — Next period, ovulation, future cycles, insights
    in_progress   — Remaining days of a period still being logged
    phase         — Menstrual/Follicular/Ovulation/Luteal classification
    history       — Pure edits over period history
    service       — Function-level entry points for callers
    config_loader — Load/validate/hot-reload cycle_config.yaml
"""

from cyclecast.engine.analyzer import CycleAnalysis, CycleAnalyzer
from cyclecast.engine.config_loader import EngineConfig, get_engine_config
from cyclecast.engine.forecaster import CycleForecaster, PredictionResult
from cyclecast.engine.in_progress import InProgressForecast, InProgressPeriodForecaster
from cyclecast.engine.phase import CyclePhase, PhaseClassifier
from cyclecast.engine.records import InsufficientDataError, PeriodRecord, PeriodValidationError

__all__ = [
    "CycleAnalysis",
    "CycleAnalyzer",
    "CycleForecaster",
    "PredictionResult",
    "InProgressForecast",
    "InProgressPeriodForecaster",
    "CyclePhase",
    "PhaseClassifier",
    "PeriodRecord",
    "InsufficientDataError",
    "PeriodValidationError",
    "EngineConfig",
    "get_engine_config",
]
