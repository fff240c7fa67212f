"""Numeric aggregation used by the cycle analyzer.

All functions are total: they return 0 instead of raising when there is
not enough data.
"""

from __future__ import annotations

import math
from typing import Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up.

    Python's ``round()`` rounds half to even (28.5 -> 28); cycle statistics
    are reported with half-up rounding (28.5 -> 29).
    """
    return math.floor(value + 0.5)


def weighted_average(values: Sequence[float], window: int = 6) -> float:
    """Recency-weighted mean of the last ``window`` values.

    The oldest value inside the window gets weight 1, the most recent
    gets weight ``k`` (the window size actually used).

    Args:
        values: Chronologically ordered samples (oldest first).
        window: Number of trailing samples to include.

    Returns:
        The weighted mean, or 0.0 for an empty input.
    """
    if not values or window < 1:
        return 0.0

    recent = list(values)[-window:]
    weighted_sum = 0.0
    total_weight = 0
    for weight, value in enumerate(recent, start=1):
        weighted_sum += value * weight
        total_weight += weight
    return weighted_sum / total_weight


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation (divides by N).

    Returns 0.0 for fewer than two values.
    """
    n = len(values)
    if n < 2:
        return 0.0

    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / n
    return math.sqrt(variance)
