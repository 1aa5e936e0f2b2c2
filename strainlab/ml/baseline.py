"""
Adaptive personal baselines for HRV and resting heart rate.

The averaging window and the confidence grow with the amount of history:
a few days give a plain mean, two months give a multi-window weighted blend.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from strainlab.ml import statistics
from strainlab.schemas.enums import BaselinePhase
from strainlab.services.scoring_config import BaselineConfig, get_scoring_config

DEFAULT_SLEEP_NEED_MINUTES = 450.0

# Phase boundaries by days of history (lower bound inclusive)
CALIBRATING_MIN_DAYS = 7
ESTABLISHED_MIN_DAYS = 14
REFINED_MIN_DAYS = 28
MATURE_MIN_DAYS = 60

FULL_BLEND_CONFIDENCE = 0.95


@dataclass(frozen=True)
class AdaptiveBaseline:
    value: float
    confidence: float  # 0-1
    phase: BaselinePhase

    @property
    def is_reliable(self) -> bool:
        return self.confidence >= 0.7


def determine_baseline_phase(days_available: int) -> BaselinePhase:
    if days_available < CALIBRATING_MIN_DAYS:
        return BaselinePhase.INITIAL
    elif days_available < ESTABLISHED_MIN_DAYS:
        return BaselinePhase.CALIBRATING
    elif days_available < REFINED_MIN_DAYS:
        return BaselinePhase.ESTABLISHED
    elif days_available < MATURE_MIN_DAYS:
        return BaselinePhase.REFINED
    return BaselinePhase.MATURE


class BaselineCalculator:
    """Calculates personal baselines from daily value histories (oldest first)."""

    def __init__(self, config: Optional[BaselineConfig] = None):
        self.config = config or get_scoring_config().baseline

    def calculate_adaptive_baseline(self, values: Sequence[float]) -> AdaptiveBaseline:
        if not values:
            return AdaptiveBaseline(value=0.0, confidence=0.0, phase=BaselinePhase.INITIAL)

        days_available = len(values)
        phase = determine_baseline_phase(days_available)

        if phase == BaselinePhase.INITIAL:
            return AdaptiveBaseline(
                value=statistics.mean(values),
                confidence=days_available / 7.0,
                phase=phase,
            )

        recent_7 = self.calculate_weighted_average(values[-7:])

        if phase == BaselinePhase.CALIBRATING:
            confidence = 0.5 + (days_available - 7) / 14.0
            return AdaptiveBaseline(value=recent_7, confidence=min(confidence, 0.7), phase=phase)

        recent_14 = self.calculate_weighted_average(values[-14:])

        if phase == BaselinePhase.ESTABLISHED:
            confidence = 0.7 + (days_available - 14) / 56.0
            return AdaptiveBaseline(
                value=recent_7 * 0.6 + recent_14 * 0.4,
                confidence=min(confidence, 0.85),
                phase=phase,
            )

        # Refined and mature: 50% last week, 30% two weeks, 20% four weeks
        recent_28 = self.calculate_weighted_average(values[-28:])
        return AdaptiveBaseline(
            value=recent_7 * 0.5 + recent_14 * 0.3 + recent_28 * 0.2,
            confidence=FULL_BLEND_CONFIDENCE,
            phase=phase,
        )

    def calculate_weighted_average(self, values: Sequence[float]) -> float:
        """Exponential decay average; the last (most recent) value has weight 1."""
        if not values:
            return 0.0
        count = len(values)
        weights = [self.config.decay_factor ** (count - 1 - i) for i in range(count)]
        return sum(v * w for v, w in zip(values, weights)) / sum(weights)

    def calculate_rolling_average(self, values: Sequence[float], days: int) -> float:
        if not values or days <= 0:
            return 0.0
        return statistics.mean(values[-days:])

    def detect_outliers(self, values: Sequence[float], threshold: Optional[float] = None) -> list[float]:
        """Remove values outside the Tukey fences."""
        if threshold is None:
            threshold = self.config.outlier_threshold
        return statistics.remove_outliers(values, threshold)

    def smooth_values(self, values: Sequence[float], window_size: int = 3) -> list[float]:
        if window_size <= 0 or len(values) < window_size:
            return list(values)
        return statistics.moving_average(values, window_size)

    def calculate_sleep_need(
        self,
        sleep_durations: Sequence[float],
        recovery_scores: Sequence[float],
    ) -> float:
        """
        Personal sleep need from day-paired sleep durations and recovery scores.

        Average duration on well-recovered days, clamped to a sane range.
        Falls back to 450 minutes without enough paired history.
        """
        if (
            len(sleep_durations) < self.config.min_sleep_need_samples
            or len(sleep_durations) != len(recovery_scores)
        ):
            return DEFAULT_SLEEP_NEED_MINUTES

        good_sleep = [
            duration
            for duration, recovery in zip(sleep_durations, recovery_scores)
            if recovery >= self.config.good_recovery_score
        ]
        if not good_sleep:
            return DEFAULT_SLEEP_NEED_MINUTES

        return min(
            max(statistics.mean(good_sleep), self.config.min_sleep_need_minutes),
            self.config.max_sleep_need_minutes,
        )

    def calculate_coefficient_of_variation(self, values: Sequence[float]) -> float:
        return statistics.coefficient_of_variation(values)

    def calculate_trend(self, values: Sequence[float]) -> float:
        """Positive = rising, negative = falling (units per day)."""
        return statistics.linear_regression_slope(values)

    def is_baseline_reliable(
        self,
        values: Sequence[float],
        minimum_days: int = 7,
        max_coefficient_of_variation: float = 30.0,
    ) -> bool:
        if len(values) < minimum_days:
            return False
        return self.calculate_coefficient_of_variation(values) <= max_coefficient_of_variation
