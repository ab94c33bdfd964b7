"""
Statistical primitives for the analytics engine.

Pure functions over plain number sequences. Every function is total:
empty or too-short input yields 0 (or None where a value is unavailable)
instead of raising.
"""

import math
from typing import Iterable, Optional, Sequence

from fin_analytics.models import Streak


# =============================================================================
# Rounding & Date Helpers
# =============================================================================


def round_half_up(value: float, digits: int = 0):
    """
    Round half toward +infinity (2.5 -> 3, -2.5 -> -2).

    Returns an int when digits == 0, otherwise a float.
    """
    if digits == 0:
        return math.floor(value + 0.5)
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def month_of(date_str: str) -> str:
    """'2025-06-15' -> '2025-06'."""
    return date_str[:7]


def months_between(start: str, end: str) -> int:
    """Calendar-month difference between two YYYY-MM-DD (or YYYY-MM) strings."""
    start_year, start_month = int(start[:4]), int(start[5:7])
    end_year, end_month = int(end[:4]), int(end[5:7])
    return (end_year - start_year) * 12 + (end_month - start_month)


def count_unique_months(dates: Iterable[str]) -> int:
    """Number of distinct calendar months among YYYY-MM-DD dates."""
    return len({month_of(d) for d in dates})


# =============================================================================
# Descriptive Statistics
# =============================================================================


def average(values: Sequence[float]) -> float:
    """Arithmetic mean (0 for empty input)."""
    if not values:
        return 0
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """Median; mean of the two central values for even length (0 for empty input)."""
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def std_dev(values: Sequence[float], mean: float) -> float:
    """Population standard deviation around a given mean (0 below 2 values)."""
    if len(values) < 2:
        return 0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


# =============================================================================
# Rates & Trends
# =============================================================================


def change_rate(current: float, previous: float) -> Optional[float]:
    """
    Percentage change vs previous.

    Returns None (unavailable, not zero) when previous is 0.
    """
    if previous == 0:
        return None
    return (current - previous) / abs(previous) * 100


def savings_rate(income: float, expense: float) -> float:
    """(income - expense) / income as a percentage (0 when income is 0)."""
    if income == 0:
        return 0
    return (income - expense) / income * 100


def linear_slope(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of values against their index.

    Uses index-centered sums. Returns 0 for fewer than 3 points or a
    zero denominator.
    """
    n = len(values)
    if n < 3:
        return 0
    y_mean = average(values)
    x_mean = (n - 1) / 2
    numerator = 0.0
    denominator = 0.0
    for i, value in enumerate(values):
        numerator += (i - x_mean) * (value - y_mean)
        denominator += (i - x_mean) ** 2
    return numerator / denominator if denominator > 0 else 0


def streak(values: Sequence[float]) -> Streak:
    """
    Trailing run of strictly consecutive increases or decreases.

    Scans backward from the last element. A zero difference ends the run
    immediately; ties never extend a streak.
    """
    if len(values) < 2:
        return Streak(direction="none", months=0)

    direction = "none"
    count = 0
    for i in range(len(values) - 1, 0, -1):
        diff = values[i] - values[i - 1]
        if diff > 0:
            current = "increasing"
        elif diff < 0:
            current = "decreasing"
        else:
            break

        if direction == "none":
            direction = current
            count = 1
        elif current == direction:
            count += 1
        else:
            break

    return Streak(direction=direction, months=count)
