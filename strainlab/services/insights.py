"""
Insight Generator - Plain-language daily readiness summary.

Each available metric becomes a factor with a positive, neutral or negative
status. The headline and recommendation are picked from a fixed table keyed
on the recovery category and those signals.
"""
from typing import Optional

from strainlab.schemas.enums import ConfidenceLevel, FactorStatus, FactorType, RecoveryCategory
from strainlab.schemas.insight import DailyInsight, InsightFactor
from strainlab.schemas.scores import RecoveryScore, SleepScore, StrainScore
from strainlab.services.scoring_config import InsightConfig, get_scoring_config


class InsightGenerator:
    """Generates the daily insight from the day's scores."""

    def __init__(self, config: Optional[InsightConfig] = None):
        self.config = config or get_scoring_config().insight

    def generate_insight(
        self,
        recovery: Optional[RecoveryScore],
        strain: Optional[StrainScore],
        sleep: Optional[SleepScore],
        previous_day_strain: Optional[StrainScore],
    ) -> DailyInsight:
        """Today's insight. ``strain`` is accepted for symmetry and does not affect the text."""
        if recovery is None and sleep is None:
            return DailyInsight.no_data()

        on = recovery.date if recovery is not None else sleep.date

        factors = []
        if recovery is not None:
            factors.append(self.analyze_hrv(recovery))
            factors.append(self.analyze_rhr(recovery))
        if sleep is not None:
            factors.append(self.analyze_sleep(sleep))
        if previous_day_strain is not None:
            factors.append(self.analyze_previous_strain(previous_day_strain))

        positive_signals = sum(1 for f in factors if f.status == FactorStatus.POSITIVE)
        negative_signals = sum(1 for f in factors if f.status == FactorStatus.NEGATIVE)

        headline, recommendation = self.generate_text(
            recovery, sleep, previous_day_strain, positive_signals, negative_signals
        )

        return DailyInsight(
            date=on,
            headline=headline,
            recommendation=recommendation,
            confidence=self.determine_confidence(recovery is not None, sleep is not None, factors),
            factors=factors,
        )

    def analyze_hrv(self, recovery: RecoveryScore) -> InsightFactor:
        deviation = recovery.components.hrv_deviation
        if deviation > self.config.hrv_positive_deviation:
            return InsightFactor(
                type=FactorType.HRV,
                status=FactorStatus.POSITIVE,
                description=f"HRV is {int(deviation)}% above your baseline",
            )
        elif deviation < self.config.hrv_negative_deviation:
            return InsightFactor(
                type=FactorType.HRV,
                status=FactorStatus.NEGATIVE,
                description=f"HRV is {int(abs(deviation))}% below your baseline",
            )
        return InsightFactor(
            type=FactorType.HRV, status=FactorStatus.NEUTRAL, description="HRV is within normal range"
        )

    def analyze_rhr(self, recovery: RecoveryScore) -> InsightFactor:
        deviation = recovery.components.rhr_deviation
        if deviation < self.config.rhr_positive_deviation:
            return InsightFactor(
                type=FactorType.RHR, status=FactorStatus.POSITIVE, description="Resting HR is lower than usual"
            )
        elif deviation > self.config.rhr_negative_deviation:
            return InsightFactor(
                type=FactorType.RHR, status=FactorStatus.NEGATIVE, description="Resting HR is elevated"
            )
        return InsightFactor(type=FactorType.RHR, status=FactorStatus.NEUTRAL, description="Resting HR is normal")

    def analyze_sleep(self, sleep: SleepScore) -> InsightFactor:
        duration = sleep.components.formatted_duration
        if sleep.score >= self.config.sleep_positive_score:
            return InsightFactor(
                type=FactorType.SLEEP,
                status=FactorStatus.POSITIVE,
                description=f"Sleep was excellent ({duration})",
            )
        elif sleep.score >= self.config.sleep_neutral_score:
            return InsightFactor(
                type=FactorType.SLEEP,
                status=FactorStatus.NEUTRAL,
                description=f"Sleep was adequate ({duration})",
            )
        return InsightFactor(
            type=FactorType.SLEEP,
            status=FactorStatus.NEGATIVE,
            description=f"Sleep was insufficient ({duration})",
        )

    def analyze_previous_strain(self, strain: StrainScore) -> InsightFactor:
        if strain.score >= self.config.strain_negative:
            return InsightFactor(
                type=FactorType.STRAIN,
                status=FactorStatus.NEGATIVE,
                description=f"High strain yesterday ({strain.score:.1f})",
            )
        elif strain.score >= self.config.strain_neutral:
            return InsightFactor(
                type=FactorType.STRAIN, status=FactorStatus.NEUTRAL, description="Moderate strain yesterday"
            )
        return InsightFactor(
            type=FactorType.STRAIN,
            status=FactorStatus.POSITIVE,
            description="Light strain yesterday, well rested",
        )

    def generate_text(
        self,
        recovery: Optional[RecoveryScore],
        sleep: Optional[SleepScore],
        previous_day_strain: Optional[StrainScore],
        positive_signals: int,
        negative_signals: int,
    ) -> tuple[str, str]:
        """(headline, recommendation)"""
        if recovery is None:
            if sleep is not None and sleep.score >= self.config.no_recovery_good_sleep:
                return "Sleep was solid last night", "Recovery data will be available soon"
            return "Sleep could have been better", "Try to prioritize rest today"

        previous_strain = previous_day_strain.score if previous_day_strain is not None else 0.0

        if recovery.category == RecoveryCategory.OPTIMAL:
            if sleep is not None and sleep.score >= self.config.solid_sleep_score:
                headline = "HRV is strong and sleep was solid"
            else:
                headline = "Your body is well recovered"

            if previous_strain < self.config.push_harder_max_strain:
                recommendation = "Today is a good day to push harder"
            else:
                recommendation = "Great recovery, you're ready for whatever today brings"
            return headline, recommendation

        if recovery.category == RecoveryCategory.MODERATE:
            if negative_signals > positive_signals:
                return "Mixed signals today", "Listen to your body during activity"
            return "Recovery is moderate", "A balanced training day would work well"

        if sleep is not None and sleep.score < self.config.short_sleep_score:
            headline = "Sleep was short and recovery is low"
        else:
            headline = "Your body needs more recovery time"

        if previous_strain >= self.config.demanding_strain:
            recommendation = "Consider rest or light activity, yesterday was demanding"
        else:
            recommendation = "Prioritize recovery today"
        return headline, recommendation

    def determine_confidence(
        self,
        has_recovery: bool,
        has_sleep: bool,
        factors: list[InsightFactor],
    ) -> ConfidenceLevel:
        if has_recovery and has_sleep and len(factors) >= 3:
            return ConfidenceLevel.HIGH
        elif has_recovery or (has_sleep and len(factors) >= 2):
            return ConfidenceLevel.MODERATE
        return ConfidenceLevel.LOW
