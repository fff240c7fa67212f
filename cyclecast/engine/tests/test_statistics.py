"""Tests for the statistics primitives."""

from __future__ import annotations

import pytest

from cyclecast.engine.statistics import round_half_up, standard_deviation, weighted_average


class TestWeightedAverage:
    def test_constant_values(self) -> None:
        assert weighted_average([10, 10, 10, 10]) == 10

    def test_empty_returns_zero(self) -> None:
        assert weighted_average([]) == 0

    def test_recent_values_weigh_more(self) -> None:
        # (26*1 + 28*2 + 30*3) / 6
        assert weighted_average([26, 28, 30]) == pytest.approx(172 / 6)

    def test_only_last_window_values_used(self) -> None:
        # last 6 of 1..8 are 3..8 with weights 1..6
        assert weighted_average([1, 2, 3, 4, 5, 6, 7, 8]) == pytest.approx(133 / 21)

    def test_custom_window(self) -> None:
        # 100 is outside the window of 2
        assert weighted_average([100, 20, 20], window=2) == pytest.approx(20)

    def test_single_value(self) -> None:
        assert weighted_average([31]) == 31


class TestStandardDeviation:
    def test_constant_values(self) -> None:
        assert standard_deviation([5, 5, 5]) == 0

    def test_empty(self) -> None:
        assert standard_deviation([]) == 0

    def test_single_value(self) -> None:
        assert standard_deviation([1]) == 0

    def test_population_not_sample(self) -> None:
        # population variance of [2, 4] is 1; sample variance would be 2
        assert standard_deviation([2, 4]) == pytest.approx(1.0)

    def test_known_value(self) -> None:
        assert standard_deviation([31, 28, 28]) == pytest.approx(2 ** 0.5)


class TestRoundHalfUp:
    def test_half_rounds_up(self) -> None:
        assert round_half_up(28.5) == 29
        assert round_half_up(52.5) == 53

    def test_below_half_rounds_down(self) -> None:
        assert round_half_up(28.49) == 28

    def test_integers_unchanged(self) -> None:
        assert round_half_up(30.0) == 30
