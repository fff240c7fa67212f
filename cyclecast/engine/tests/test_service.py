"""End-to-end properties of the service entry points."""

from __future__ import annotations

import copy
import random
from datetime import date, timedelta

import pytest

from cyclecast.engine import service
from cyclecast.engine.config_loader import EngineConfig
from cyclecast.engine.forecaster import INSIGHT_SOME_IRREGULARITY
from cyclecast.engine.phase import CyclePhase
from cyclecast.engine.records import InsufficientDataError, PeriodRecord
from cyclecast.engine.tests.conftest import TEST_DATE, build_history, make_period
from cyclecast.models.periods import dump_history_json, load_history_json


class TestGeneratePredictions:
    def test_empty_history_fails(self, engine_config: EngineConfig) -> None:
        with pytest.raises(InsufficientDataError, match="log at least one period"):
            service.generate_predictions([], engine_config)

    def test_single_record(
        self, engine_config: EngineConfig, single_period: list[PeriodRecord]
    ) -> None:
        analysis = service.analyze_cycles(single_period, engine_config)
        assert analysis.average_cycle_length == 28
        assert analysis.average_period_length == 5
        assert analysis.total_cycles == 0

        result = service.generate_predictions(single_period, engine_config)
        assert result.next_period.start_date == date(2026, 1, 1) + timedelta(days=28)
        assert len(result.next_period.predicted_days) == 5

    def test_history_not_mutated(
        self, engine_config: EngineConfig, irregular_history: list[PeriodRecord]
    ) -> None:
        shuffled = list(reversed(irregular_history))
        snapshot = copy.deepcopy(shuffled)
        service.generate_predictions(shuffled, engine_config, random.Random(5))
        service.analyze_cycles(shuffled, engine_config)
        assert shuffled == snapshot

    def test_identical_inputs_identical_outputs(
        self, engine_config: EngineConfig, regular_history: list[PeriodRecord]
    ) -> None:
        first = service.generate_predictions(regular_history, engine_config)
        second = service.generate_predictions(regular_history, engine_config)
        assert first == second


class TestAnalyzeCycles:
    def test_empty_history_uses_defaults(self, engine_config: EngineConfig) -> None:
        analysis = service.analyze_cycles([], engine_config)
        assert analysis.average_cycle_length == 28
        assert analysis.average_period_length == 5
        assert analysis.total_cycles == 0

    def test_round_trip_preserves_analysis(
        self, engine_config: EngineConfig, irregular_history: list[PeriodRecord]
    ) -> None:
        restored = load_history_json(dump_history_json(irregular_history))
        assert service.analyze_cycles(restored, engine_config) == service.analyze_cycles(
            irregular_history, engine_config
        )


class TestIrregularityAndInsights:
    def test_irregular_history(
        self, engine_config: EngineConfig, irregular_history: list[PeriodRecord]
    ) -> None:
        assert service.is_unusually_irregular(irregular_history, engine_config)
        assert service.get_cycle_insights(irregular_history, engine_config) == [
            INSIGHT_SOME_IRREGULARITY
        ]

    def test_two_wild_cycles_not_flagged(self, engine_config: EngineConfig) -> None:
        assert not service.is_unusually_irregular(build_history([20, 40]), engine_config)

    def test_regular_history(
        self, engine_config: EngineConfig, regular_history: list[PeriodRecord]
    ) -> None:
        assert not service.is_unusually_irregular(regular_history, engine_config)


class TestInProgress:
    def test_single_day_today(self, engine_config: EngineConfig) -> None:
        forecast = service.predict_remaining_days([TEST_DATE], TEST_DATE, config=engine_config)
        assert len(forecast.possible_days) == 3
        assert len(forecast.predicted_days) == 1
        assert not forecast.is_complete

    def test_five_days_complete(self, engine_config: EngineConfig) -> None:
        days = [TEST_DATE - timedelta(days=i) for i in range(5)]
        forecast = service.predict_remaining_days(days, TEST_DATE, config=engine_config)
        assert forecast.is_complete
        assert forecast.possible_days == []
        assert forecast.predicted_days == []

    def test_three_days_not_including_today(self, engine_config: EngineConfig) -> None:
        days = [TEST_DATE - timedelta(days=i) for i in range(1, 4)]
        forecast = service.predict_remaining_days(days, TEST_DATE, config=engine_config)
        assert forecast.possible_days == []
        assert forecast.predicted_days == []
        assert not forecast.is_complete

    def test_summary_with_learned_policy(self, engine_config: EngineConfig) -> None:
        history = build_history([28, 28], period_length=3)
        days = [TEST_DATE - timedelta(days=i) for i in range(3)]
        text = service.get_prediction_summary(
            days, TEST_DATE, history, config=engine_config, policy="learned"
        )
        assert text == "Period may be ending soon"


class TestClassifyPhase:
    def test_classifies_reference_date(self, engine_config: EngineConfig) -> None:
        history = [make_period(date(2026, 1, 1)), make_period(date(2026, 1, 29))]
        assert service.classify_phase(TEST_DATE, history, engine_config) == CyclePhase.follicular

    def test_no_history_raises(self, engine_config: EngineConfig) -> None:
        with pytest.raises(InsufficientDataError):
            service.classify_phase(TEST_DATE, [], engine_config)

    def test_uses_supplied_predictions(
        self, engine_config: EngineConfig, irregular_history: list[PeriodRecord]
    ) -> None:
        rng = random.Random(4)
        result = service.generate_predictions(irregular_history, engine_config, rng)
        phase = service.classify_phase(
            result.ovulation.date, irregular_history, engine_config, rng, prediction=result
        )
        assert phase == CyclePhase.ovulation
