"""
Distribution statistics — percentile position and mean over raw samples.
"""
import math
from bisect import bisect_left
from typing import Iterable, Optional

NEUTRAL_PERCENTILE = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (12.5 -> 13, -0.5 -> 0)."""
    return int(math.floor(value + 0.5))


def percentile(value: float, distribution: Optional[Iterable[float]]) -> int:
    """
    Share of samples strictly below `value`, as an integer 0-100.

    Samples equal to `value` count as above it: the position is the first
    sorted index whose sample is >= value. No samples means no information,
    so the median (50) is assumed. A value above every sample is 100.
    Accepts any iterable of samples, including a Distribution.
    """
    if distribution is None:
        return NEUTRAL_PERCENTILE
    ordered = sorted(distribution)
    if not ordered:
        return NEUTRAL_PERCENTILE

    index = bisect_left(ordered, value)
    if index == len(ordered):
        return 100
    return round_half_up(index / len(ordered) * 100)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean. Callers guard against empty input."""
    values = list(values)
    return sum(values) / len(values)
