"""Pydantic schemas for storing period history as JSON.

Dates are stored as ISO ``YYYY-MM-DD`` strings so a round trip can never
shift a day across time zones.  Documents written by older clients (a
bare list of records with ISO datetimes such as
``2025-12-31T22:00:00.000Z``) are still accepted.  Those clients stored
local midnight as a UTC instant, so each timestamp is converted to the
reader's time zone (or the ``tz`` passed to ``load_history_json``) before
the calendar day is taken.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Any, Sequence

from pydantic import Field, TypeAdapter, ValidationInfo, field_validator

from cyclecast.engine.forecaster import PredictionResult
from cyclecast.engine.records import PeriodRecord
from cyclecast.models.base import CycleCastBase


def _local_date(value: Any, info: ValidationInfo) -> Any:
    """Turn a legacy ISO datetime into the calendar day it named for its writer."""
    if not (isinstance(value, str) and "T" in value):
        return value
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return value
    if moment.tzinfo is None:
        return moment.date()
    tz = (info.context or {}).get("tz")
    return moment.astimezone(tz).date()


class PeriodRecordSchema(CycleCastBase):
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    days: list[date] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value: Any, info: ValidationInfo) -> Any:
        return _local_date(value, info)

    @field_validator("days", mode="before")
    @classmethod
    def _days_date_only(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, list):
            return [_local_date(v, info) for v in value]
        return value

    @classmethod
    def from_record(cls, record: PeriodRecord) -> PeriodRecordSchema:
        return cls(start_date=record.start_date, end_date=record.end_date, days=list(record.days))

    def to_record(self) -> PeriodRecord:
        """Convert to an engine record (normalized; may raise PeriodValidationError)."""
        return PeriodRecord(start_date=self.start_date, end_date=self.end_date, days=tuple(self.days))


class PeriodHistoryDocument(CycleCastBase):
    version: int = 1
    periods: list[PeriodRecordSchema] = Field(default_factory=list)


_history_adapter = TypeAdapter(PeriodHistoryDocument | list[PeriodRecordSchema])
_prediction_adapter = TypeAdapter(PredictionResult)


def dump_history_json(history: Sequence[PeriodRecord], indent: int | None = 2) -> str:
    """Serialize history, in the order given, to a JSON document."""
    document = PeriodHistoryDocument(
        periods=[PeriodRecordSchema.from_record(record) for record in history]
    )
    return document.model_dump_json(indent=indent)


def load_history_json(text: str | bytes, tz: tzinfo | None = None) -> list[PeriodRecord]:
    """Parse a JSON document (or legacy bare list) into engine records.

    Args:
        text: JSON document.
        tz:   Time zone legacy timestamps were written in.  Defaults to the
              local time zone.

    Raises:
        pydantic.ValidationError: If the JSON does not match either layout.
        PeriodValidationError:    If a record cannot be normalized.
    """
    parsed = _history_adapter.validate_json(text, context={"tz": tz})
    periods = parsed.periods if isinstance(parsed, PeriodHistoryDocument) else parsed
    return [schema.to_record() for schema in periods]


def dump_predictions_json(result: PredictionResult, indent: int | None = 2) -> str:
    return _prediction_adapter.dump_json(result, indent=indent).decode("utf-8")
