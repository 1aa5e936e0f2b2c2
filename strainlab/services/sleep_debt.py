"""
Sleep Debt Tracker - Decayed accumulation of nightly sleep deficits.
"""
import logging
from typing import Optional, Sequence

from strainlab.ml.statistics import linear_regression_slope
from strainlab.schemas.enums import SleepDebtSeverity, SleepDebtTrend
from strainlab.schemas.guidance import SleepDebt
from strainlab.schemas.scores import SleepScore
from strainlab.services.scoring_config import SleepDebtConfig, get_scoring_config

logger = logging.getLogger(__name__)


def determine_severity(debt_minutes: float) -> SleepDebtSeverity:
    debt_hours = debt_minutes / 60
    if debt_hours < 1:
        return SleepDebtSeverity.NONE
    elif debt_hours < 3:
        return SleepDebtSeverity.MILD
    elif debt_hours < 6:
        return SleepDebtSeverity.MODERATE
    elif debt_hours < 10:
        return SleepDebtSeverity.SIGNIFICANT
    return SleepDebtSeverity.SEVERE


def generate_recommendation(
    severity: SleepDebtSeverity,
    trend: SleepDebtTrend,
    debt_minutes: float,
) -> str:
    if severity == SleepDebtSeverity.NONE:
        return "Your sleep is on track"

    if severity == SleepDebtSeverity.MILD:
        if trend == SleepDebtTrend.DECREASING:
            return "You're catching up, keep it going"
        return "Try adding 15-30 min to tonight's sleep"

    if severity == SleepDebtSeverity.MODERATE:
        if trend == SleepDebtTrend.DECREASING:
            return "Good progress on reducing sleep debt"
        elif trend == SleepDebtTrend.INCREASING:
            return "Sleep debt is building, prioritize rest"
        return "Consider an earlier bedtime this week"

    extra_hours = min(2.0, debt_minutes / 60 / 3)
    return f"Add {extra_hours:.0f}h of sleep over the next few nights"


class SleepDebtTracker:
    """Tracks accumulated sleep debt from the sleep score history."""

    def __init__(self, config: Optional[SleepDebtConfig] = None):
        self.config = config or get_scoring_config().sleep_debt

    def calculate_sleep_debt(
        self,
        sleep_scores: Sequence[SleepScore],
        target_sleep_minutes: float,
    ) -> SleepDebt:
        if not sleep_scores:
            return SleepDebt(
                total_debt_minutes=0.0,
                weekly_debt_minutes=0.0,
                trend=SleepDebtTrend.STABLE,
                severity=SleepDebtSeverity.NONE,
                recommendation="Start tracking to monitor sleep debt",
            )

        # Histories may arrive newest first; all windows below assume oldest first
        ordered = sorted(sleep_scores, key=lambda s: s.date)
        durations = [s.components.total_duration_minutes for s in ordered]

        weekly_debt = self.calculate_weekly_debt(
            durations[-self.config.weekly_window_nights:], target_sleep_minutes
        )
        rolling_debt = self.calculate_rolling_debt(durations, target_sleep_minutes)
        trend = self.calculate_debt_trend(
            durations[-self.config.trend_window_nights:], target_sleep_minutes
        )
        severity = determine_severity(rolling_debt)

        logger.debug(
            "Sleep debt calculated",
            extra={"rolling_debt": round(rolling_debt, 1), "trend": trend.value, "severity": severity.value},
        )

        return SleepDebt(
            total_debt_minutes=rolling_debt,
            weekly_debt_minutes=weekly_debt,
            trend=trend,
            severity=severity,
            recommendation=generate_recommendation(severity, trend, rolling_debt),
        )

    def calculate_weekly_debt(self, durations: Sequence[float], target_minutes: float) -> float:
        """Sum of nightly shortfalls; surplus nights count as zero."""
        return sum(max(0.0, target_minutes - d) for d in durations)

    def calculate_rolling_debt(self, durations: Sequence[float], target_minutes: float) -> float:
        """
        Walk back from the most recent night with weight decay^age.

        Deficits add to the debt. Surplus nights repay it at reduced credit
        and can never push it below zero.
        """
        rolling_debt = 0.0
        recent_first = list(reversed(durations))[:self.config.rolling_window_nights]

        for age, duration in enumerate(recent_first):
            deficit = target_minutes - duration
            weight = self.config.decay_factor ** age
            if deficit > 0:
                rolling_debt += deficit * weight
            else:
                rolling_debt = max(0.0, rolling_debt + deficit * weight * self.config.surplus_credit)

        return rolling_debt

    def calculate_debt_trend(self, durations: Sequence[float], target_minutes: float) -> SleepDebtTrend:
        if len(durations) < self.config.min_trend_nights:
            return SleepDebtTrend.STABLE

        slope = linear_regression_slope([target_minutes - d for d in durations])
        if slope > self.config.trend_threshold_minutes:
            return SleepDebtTrend.INCREASING
        elif slope < -self.config.trend_threshold_minutes:
            return SleepDebtTrend.DECREASING
        return SleepDebtTrend.STABLE
