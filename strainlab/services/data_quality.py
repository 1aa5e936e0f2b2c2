"""
Data quality assessment - How much the day's scores can be trusted.
"""
import logging
from typing import Optional, Sequence

from strainlab.schemas.enums import BaselinePhase
from strainlab.schemas.guidance import BaselineStatus, DataQuality
from strainlab.services.scoring_config import DataQualityConfig, get_scoring_config

logger = logging.getLogger(__name__)


def assess_hrv_quality(sample_count: int) -> float:
    """Three or more overnight readings is ideal."""
    if sample_count <= 0:
        return 0.0
    elif sample_count == 1:
        return 0.4
    elif sample_count == 2:
        return 0.7
    return 1.0


def assess_rhr_quality(sample_count: int) -> float:
    if sample_count <= 0:
        return 0.0
    elif sample_count <= 5:
        return 0.5
    elif sample_count <= 20:
        return 0.8
    return 1.0


def assess_sleep_quality(duration_minutes: Optional[float]) -> float:
    if duration_minutes is None:
        return 0.0
    hours = duration_minutes / 60
    if hours < 3:
        return 0.3
    elif hours < 5:
        return 0.6
    return 1.0


def assess_baseline_maturity(days_covered: int) -> float:
    if days_covered <= 2:
        return 0.2
    elif days_covered <= 6:
        return 0.4
    elif days_covered <= 13:
        return 0.7
    elif days_covered <= 27:
        return 0.9
    return 1.0


class DataQualityAssessor:
    """Scores the completeness of the inputs behind a day's scores."""

    def __init__(self, config: Optional[DataQualityConfig] = None):
        self.config = config or get_scoring_config().data_quality

    def assess_quality(
        self,
        hrv_samples: Sequence[float],
        rhr_samples: Sequence[float],
        sleep_duration_minutes: Optional[float],
        activity_minutes: float,
        days_covered: int,
    ) -> DataQuality:
        hrv_quality = assess_hrv_quality(len(hrv_samples))
        rhr_quality = assess_rhr_quality(len(rhr_samples))
        sleep_quality = assess_sleep_quality(sleep_duration_minutes)
        baseline_maturity = assess_baseline_maturity(days_covered)

        warnings = []
        threshold = self.config.warning_threshold
        if hrv_quality < threshold:
            warnings.append("Limited HRV data available")
        if rhr_quality < threshold:
            warnings.append("Limited heart rate data")
        if sleep_quality < threshold:
            warnings.append("No sleep data from last night")
        if baseline_maturity < threshold:
            warnings.append("Still calibrating your baseline")

        overall_confidence = (
            hrv_quality * self.config.hrv_weight
            + rhr_quality * self.config.rhr_weight
            + sleep_quality * self.config.sleep_weight
            + baseline_maturity * self.config.baseline_weight
        )

        logger.debug(
            "Data quality assessed",
            extra={"overall_confidence": round(overall_confidence, 3), "warnings": len(warnings)},
        )

        return DataQuality(
            hrv_data_available=bool(hrv_samples),
            hrv_sample_count=len(hrv_samples),
            rhr_data_available=bool(rhr_samples),
            rhr_sample_count=len(rhr_samples),
            sleep_data_available=sleep_duration_minutes is not None,
            activity_data_available=activity_minutes > 0,
            baseline_maturity=baseline_maturity,
            # float sums of the weights can land a hair above 1
            overall_confidence=min(1.0, max(0.0, overall_confidence)),
            warnings=warnings,
        )

    def has_minimum_data(
        self,
        hrv_samples: Sequence[float],
        sleep_duration_minutes: Optional[float],
    ) -> bool:
        """Either HRV or last night's sleep is enough to produce a score."""
        return bool(hrv_samples) or sleep_duration_minutes is not None

    def get_baseline_status(self, days_covered: int) -> BaselineStatus:
        if days_covered <= 2:
            return BaselineStatus(
                phase=BaselinePhase.INITIAL,
                message="Getting to know you",
                progress=max(0.0, days_covered / 7.0),
            )
        elif days_covered <= 6:
            return BaselineStatus(
                phase=BaselinePhase.CALIBRATING,
                message="Calibrating your baseline",
                progress=days_covered / 7.0,
            )
        elif days_covered <= 13:
            return BaselineStatus(
                phase=BaselinePhase.ESTABLISHED,
                message="Baseline established",
                progress=min(1.0, days_covered / 14.0),
            )
        elif days_covered <= 27:
            return BaselineStatus(
                phase=BaselinePhase.REFINED,
                message="Baseline refined",
                progress=min(1.0, days_covered / 28.0),
            )
        return BaselineStatus(phase=BaselinePhase.MATURE, message="Personalized baseline", progress=1.0)
