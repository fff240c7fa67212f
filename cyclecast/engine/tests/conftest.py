"""Shared fixtures and history builders for engine tests."""

from __future__ import annotations

import random
from datetime import date, timedelta
from pathlib import Path

import pytest

from cyclecast.engine.config_loader import EngineConfig, load_engine_config
from cyclecast.engine.records import PeriodRecord

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Reference "today" used across tests
TEST_DATE = date(2026, 2, 10)


def make_period(start: date, length: int = 5) -> PeriodRecord:
    """A contiguous period of ``length`` days starting on ``start``."""
    return PeriodRecord.from_days(start + timedelta(days=i) for i in range(length))


def build_history(
    cycle_lengths: list[int],
    start: date = date(2025, 6, 1),
    period_length: int = 5,
) -> list[PeriodRecord]:
    """Periods separated by the given cycle lengths (len(cycle_lengths) + 1 records)."""
    history = [make_period(start, period_length)]
    for length in cycle_lengths:
        start += timedelta(days=length)
        history.append(make_period(start, period_length))
    return history


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine_config() -> EngineConfig:
    """Load the real engine config for tests."""
    return load_engine_config()


# ---------------------------------------------------------------------------
# History fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def single_period() -> list[PeriodRecord]:
    """One 5-day period, Jan 1–5 2026."""
    return [make_period(date(2026, 1, 1))]


@pytest.fixture
def regular_history() -> list[PeriodRecord]:
    """Six 5-day periods exactly 28 days apart (five cycles)."""
    return build_history([28] * 5)


@pytest.fixture
def irregular_history() -> list[PeriodRecord]:
    """Seven periods with widely varying cycle lengths (sd ≈ 7.1 days)."""
    return build_history([22, 35, 25, 40, 21, 33], start=date(2025, 3, 1))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def legacy_history_text() -> str:
    return (FIXTURES_DIR / "legacy_history.json").read_text()


@pytest.fixture
def legacy_east_of_utc_text() -> str:
    """Jan 1–5 and Jan 29–Feb 2 2026 as written by a client at UTC+2."""
    return (FIXTURES_DIR / "legacy_history_utc_plus2.json").read_text()
