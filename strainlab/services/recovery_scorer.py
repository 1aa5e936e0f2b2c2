"""
Recovery Scorer - Morning readiness from HRV, resting heart rate and sleep.

HRV and RHR are compared against the personal baseline as percent deviations
and mapped onto 0-100 sub-scores before weighting.
"""
import logging
from datetime import date
from typing import Optional

from strainlab.schemas.enums import RecoveryCategory
from strainlab.schemas.scores import RecoveryComponents, RecoveryScore
from strainlab.services.scoring_config import RecoveryConfig, get_scoring_config

logger = logging.getLogger(__name__)


def calculate_deviation(current: float, baseline: float) -> float:
    """Percent deviation from baseline. A non-positive baseline counts as no deviation."""
    if baseline <= 0:
        return 0.0
    return (current - baseline) / baseline * 100


def _clamp_score(value: float) -> float:
    return max(0.0, min(100.0, value))


class RecoveryScorer:
    """Calculates the daily recovery score."""

    def __init__(self, config: Optional[RecoveryConfig] = None):
        self.config = config or get_scoring_config().recovery

    def normalize_hrv_deviation(self, deviation: float) -> float:
        """Higher HRV is better: -max..+max maps to 0..100."""
        return _clamp_score(50 + deviation / self.config.hrv_max_deviation * 50)

    def normalize_rhr_deviation(self, deviation: float) -> float:
        """Lower RHR is better: -max..+max maps to 100..0."""
        return _clamp_score(50 - deviation / self.config.rhr_max_deviation * 50)

    def calculate(
        self,
        current_hrv: float,
        current_rhr: float,
        hrv_baseline: float,
        rhr_baseline: float,
        sleep_quality: float,
        on: Optional[date] = None,
    ) -> RecoveryScore:
        hrv_deviation = calculate_deviation(current_hrv, hrv_baseline)
        rhr_deviation = calculate_deviation(current_rhr, rhr_baseline)

        weighted_score = (
            self.normalize_hrv_deviation(hrv_deviation) * self.config.hrv_weight
            + self.normalize_rhr_deviation(rhr_deviation) * self.config.rhr_weight
            + sleep_quality * self.config.sleep_weight
        )
        final_score = _clamp_score(weighted_score)

        logger.debug(
            "Recovery calculated",
            extra={
                "score": round(final_score, 1),
                "hrv_deviation": round(hrv_deviation, 2),
                "rhr_deviation": round(rhr_deviation, 2),
            },
        )

        return RecoveryScore(
            date=on or date.today(),
            score=final_score,
            category=RecoveryCategory.from_score(final_score),
            components=RecoveryComponents(
                hrv_deviation=hrv_deviation,
                rhr_deviation=rhr_deviation,
                sleep_quality=sleep_quality,
                hrv_baseline=hrv_baseline,
                rhr_baseline=rhr_baseline,
                current_hrv=current_hrv,
                current_rhr=current_rhr,
            ),
        )

    def calculate_with_context(
        self,
        current_hrv: float,
        current_rhr: float,
        hrv_baseline: float,
        rhr_baseline: float,
        sleep_quality: float,
        previous_day_strain: Optional[float] = None,
        on: Optional[date] = None,
    ) -> tuple[RecoveryScore, list[str]]:
        """Recovery score plus short explanatory sentences."""
        score = self.calculate(
            current_hrv, current_rhr, hrv_baseline, rhr_baseline, sleep_quality, on=on
        )
        components = score.components
        insights = []

        if components.hrv_deviation > self.config.hrv_high_deviation:
            insights.append("Your HRV is significantly above baseline, indicating excellent recovery.")
        elif components.hrv_deviation < self.config.hrv_low_deviation:
            insights.append("Your HRV is below baseline. Consider lighter activity today.")

        if components.rhr_deviation > self.config.rhr_elevated_deviation:
            insights.append(
                "Your resting heart rate is elevated, which may indicate stress or incomplete recovery."
            )
        elif components.rhr_deviation < self.config.rhr_low_deviation:
            insights.append("Your resting heart rate is lower than usual, a positive recovery sign.")

        if sleep_quality < self.config.poor_sleep_quality:
            insights.append(
                "Sleep quality was suboptimal. Prioritizing rest could improve tomorrow's recovery."
            )

        if previous_day_strain is not None and previous_day_strain > self.config.high_previous_strain:
            insights.append("Yesterday was a high strain day. Give your body time to adapt.")

        return score, insights
