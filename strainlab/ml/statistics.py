"""
Statistics helpers shared by every calculator.

All functions are total: empty or degenerate input yields a neutral value
(usually 0) instead of raising, unlike the standard library equivalents.
"""
import math
from datetime import datetime
from statistics import fmean, pstdev, stdev
from typing import Sequence

MINUTES_PER_DAY = 24 * 60
# Times before this hour count as the tail of the previous night
EARLY_MORNING_CUTOFF_HOUR = 6


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return fmean(values)


def median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def standard_deviation(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1)."""
    if len(values) < 2:
        return 0.0
    return stdev(values)


def population_standard_deviation(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return pstdev(values)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population CV as a percentage."""
    if not values:
        return 0.0
    avg = mean(values)
    if avg <= 0:
        return 0.0
    return population_standard_deviation(values) / avg * 100


def linear_regression_slope(values: Sequence[float]) -> float:
    """Least-squares slope of values against their index."""
    if len(values) < 2:
        return 0.0

    n = float(len(values))
    sum_x = sum(range(len(values)))
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_xx = sum(i * i for i in range(len(values)))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def quartiles(values: Sequence[float]) -> tuple[float, float, float]:
    """
    (Q1, median, Q3) using plain integer indices n//4 and 3n//4 on the sorted values.

    Not interpolated. Fewer than 4 values gives (0, median, 0).
    """
    if len(values) < 4:
        return 0.0, median(values), 0.0
    ordered = sorted(values)
    count = len(ordered)
    return ordered[count // 4], median(ordered), ordered[(count * 3) // 4]


def interquartile_range(values: Sequence[float]) -> float:
    q1, _, q3 = quartiles(values)
    return q3 - q1


def remove_outliers(values: Sequence[float], threshold: float = 1.5) -> list[float]:
    """Tukey fence filter; keeps the original order of surviving values."""
    if len(values) < 4:
        return list(values)
    q1, _, q3 = quartiles(values)
    iqr = q3 - q1
    lower_bound = q1 - threshold * iqr
    upper_bound = q3 + threshold * iqr
    return [v for v in values if lower_bound <= v <= upper_bound]


def percentile(values: Sequence[float], p: float) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    index = (p / 100.0) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return ordered[lower]
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def moving_average(values: Sequence[float], window_size: int) -> list[float]:
    """Centred moving average; the window shrinks at the edges."""
    if window_size <= 0 or not values:
        return list(values)
    half_window = window_size // 2
    smoothed = []
    for i in range(len(values)):
        start = max(0, i - half_window)
        end = min(len(values), i + half_window + 1)
        smoothed.append(mean(values[start:end]))
    return smoothed


def minutes_from_midnight(moment: datetime) -> float:
    """
    Clock time in minutes on a scale that runs continuously across midnight.

    00:00-05:59 maps to 1440-1799 so a 23:30 bedtime and a 00:30 bedtime
    are 60 minutes apart rather than 1380.
    """
    minutes = float(moment.hour * 60 + moment.minute)
    if moment.hour < EARLY_MORNING_CUTOFF_HOUR:
        minutes += MINUTES_PER_DAY
    return minutes


def time_of_day_deviation(minutes: Sequence[float]) -> float:
    """Spread (population SD, in minutes) of clock times from minutes_from_midnight."""
    return population_standard_deviation(minutes)
