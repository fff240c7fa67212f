"""Tests for JSON persistence of period history and predictions."""

from __future__ import annotations

import json
import random
from datetime import date, timedelta, timezone

import pydantic
import pytest

from cyclecast.engine.config_loader import EngineConfig
from cyclecast.engine.forecaster import CycleForecaster
from cyclecast.engine.records import PeriodRecord, PeriodValidationError
from cyclecast.engine.tests.conftest import make_period
from cyclecast.models.periods import (
    PeriodRecordSchema,
    dump_history_json,
    dump_predictions_json,
    load_history_json,
)


class TestHistoryJson:
    def test_round_trip_preserves_records(self, regular_history: list[PeriodRecord]) -> None:
        assert load_history_json(dump_history_json(regular_history)) == regular_history

    def test_dates_written_as_plain_iso_dates(self) -> None:
        document = json.loads(dump_history_json([make_period(date(2026, 1, 1), 2)]))
        assert document["version"] == 1
        assert document["periods"][0] == {
            "start_date": "2026-01-01",
            "end_date": "2026-01-02",
            "days": ["2026-01-01", "2026-01-02"],
        }

    def test_order_preserved(self) -> None:
        history = [make_period(date(2026, 2, 1)), make_period(date(2026, 1, 1))]
        loaded = load_history_json(dump_history_json(history))
        assert [r.start_date for r in loaded] == [date(2026, 2, 1), date(2026, 1, 1)]

    def test_empty_history(self) -> None:
        assert load_history_json(dump_history_json([])) == []

    def test_legacy_bare_list(self, legacy_history_text: str) -> None:
        history = load_history_json(legacy_history_text, tz=timezone.utc)
        assert len(history) == 2
        assert history[0].start_date == date(2026, 1, 1)
        assert history[0].end_date == date(2026, 1, 5)
        assert history[1].days[-1] == date(2026, 2, 2)

    def test_legacy_timestamps_read_in_writer_time_zone(
        self, legacy_east_of_utc_text: str
    ) -> None:
        history = load_history_json(legacy_east_of_utc_text, tz=timezone(timedelta(hours=2)))
        assert history[0].start_date == date(2026, 1, 1)
        assert history[0].end_date == date(2026, 1, 5)
        assert history[0].days[0] == date(2026, 1, 1)
        assert history[1].start_date == date(2026, 1, 29)
        assert history[1].days[-1] == date(2026, 2, 2)

    def test_legacy_timestamps_west_of_utc(self) -> None:
        text = json.dumps([{"days": ["2026-01-01T05:00:00.000Z", "2026-01-02T05:00:00.000Z"]}])
        (record,) = load_history_json(text, tz=timezone(timedelta(hours=-5)))
        assert record.days == (date(2026, 1, 1), date(2026, 1, 2))

    def test_legacy_naive_datetime_keeps_its_day(self) -> None:
        text = json.dumps([{"days": ["2026-01-01T00:00:00"]}])
        (record,) = load_history_json(text, tz=timezone(timedelta(hours=-5)))
        assert record.start_date == date(2026, 1, 1)

    def test_days_only_record_is_normalized(self) -> None:
        text = json.dumps({"periods": [{"days": ["2026-01-03", "2026-01-01"]}]})
        (record,) = load_history_json(text)
        assert record.start_date == date(2026, 1, 1)
        assert record.end_date == date(2026, 1, 3)

    def test_range_only_record_is_filled(self) -> None:
        text = json.dumps([{"startDate": "2026-01-01", "endDate": "2026-01-04"}])
        (record,) = load_history_json(text)
        assert len(record.days) == 4

    def test_reversed_range_rejected(self) -> None:
        text = json.dumps([{"startDate": "2026-01-04", "endDate": "2026-01-01"}])
        with pytest.raises(PeriodValidationError, match="before it starts"):
            load_history_json(text)

    def test_invalid_json_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            load_history_json('{"periods": [{"days": ["not a date"]}]}')

    def test_schema_from_record(self) -> None:
        record = make_period(date(2026, 3, 1), 3)
        schema = PeriodRecordSchema.from_record(record)
        assert schema.start_date == date(2026, 3, 1)
        assert schema.to_record() == record


class TestPredictionsJson:
    def test_prediction_document(
        self, engine_config: EngineConfig, single_period: list[PeriodRecord]
    ) -> None:
        result = CycleForecaster(engine_config, rng=random.Random(1)).forecast(single_period)
        document = json.loads(dump_predictions_json(result))
        assert document["next_period"]["start_date"] == "2026-01-29"
        assert document["next_period"]["confidence"] == 60
        assert document["ovulation"]["date"] == "2026-01-15"
        assert len(document["ovulation"]["fertile_window"]) == 7
        assert len(document["future_cycles"]) == 6
        assert document["future_cycles"][0]["cycle_number"] == 1
        assert document["analysis"]["average_cycle_length"] == 28
