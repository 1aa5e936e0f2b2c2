"""
Strain guidance - Recommended strain range for today and the weekly load picture.

The range comes from the recovery category shifted by the user's training
intensity preference. The load status compares the last week's average strain
with the preference's daily target and looks at its direction.
"""
import logging
from typing import Optional, Sequence

from strainlab.ml import statistics
from strainlab.schemas.enums import (
    RECOVERY_STRAIN_RANGE,
    TRAINING_INTENSITY_RANGE_SHIFT,
    TRAINING_INTENSITY_TARGET_STRAIN,
    RecoveryCategory,
    TrainingIntensity,
    WeeklyLoadStatus,
)
from strainlab.schemas.guidance import StrainGuidance
from strainlab.schemas.scores import RecoveryScore, StrainScore
from strainlab.services.scoring_config import GuidanceConfig, get_scoring_config

logger = logging.getLogger(__name__)

MAX_STRAIN = 21.0

RECOVERY_CONTEXT = {
    RecoveryCategory.OPTIMAL: "Your recovery is strong",
    RecoveryCategory.MODERATE: "You're moderately recovered",
    RecoveryCategory.POOR: "Your body needs more rest",
}

LOAD_CONTEXT = {
    WeeklyLoadStatus.UNDER_LOADED: "you could increase training volume",
    WeeklyLoadStatus.OPTIMAL: "your training load is well balanced",
    WeeklyLoadStatus.BUILDING: "you're progressively building fitness",
    WeeklyLoadStatus.PEAKING: "you're training at high volume",
    WeeklyLoadStatus.OVER_REACHING: "consider reducing intensity",
    WeeklyLoadStatus.DELOADING: "you're in a recovery phase",
    WeeklyLoadStatus.UNKNOWN: "keep training consistently",
}


class StrainGuidanceCalculator:
    """Calculates today's strain target from recovery and training history."""

    def __init__(self, config: Optional[GuidanceConfig] = None):
        self.config = config or get_scoring_config().guidance

    def calculate_guidance(
        self,
        recovery_score: Optional[RecoveryScore],
        recent_strain_scores: Sequence[StrainScore],
        training_intensity: TrainingIntensity = TrainingIntensity.MODERATE,
    ) -> StrainGuidance:
        if recovery_score is None:
            return StrainGuidance(
                range_low=self.config.no_recovery_range_low,
                range_high=self.config.no_recovery_range_high,
                weekly_load_status=WeeklyLoadStatus.UNKNOWN,
                rationale="Waiting for recovery data",
            )

        range_low, range_high = self.calculate_target_range(recovery_score.category, training_intensity)
        load_status = self.analyze_weekly_load(recent_strain_scores, recovery_score, training_intensity)

        logger.debug(
            "Strain guidance calculated",
            extra={"range_low": range_low, "range_high": range_high, "load_status": load_status.value},
        )

        return StrainGuidance(
            range_low=range_low,
            range_high=range_high,
            weekly_load_status=load_status,
            rationale=f"{RECOVERY_CONTEXT[recovery_score.category]}, {LOAD_CONTEXT[load_status]}",
        )

    def calculate_target_range(
        self,
        category: RecoveryCategory,
        training_intensity: TrainingIntensity,
    ) -> tuple[float, float]:
        low, high = RECOVERY_STRAIN_RANGE[category]
        shift = TRAINING_INTENSITY_RANGE_SHIFT[training_intensity]
        return max(0.0, low + shift), min(MAX_STRAIN, high + shift)

    def analyze_weekly_load(
        self,
        recent_strain_scores: Sequence[StrainScore],
        recovery_score: RecoveryScore,
        training_intensity: TrainingIntensity,
    ) -> WeeklyLoadStatus:
        """First matching rule wins."""
        if len(recent_strain_scores) < self.config.min_scores:
            return WeeklyLoadStatus.UNKNOWN

        ordered = sorted(recent_strain_scores, key=lambda s: s.date)
        window = [s.score for s in ordered[-self.config.window_days:]]

        ratio = statistics.mean(window) / TRAINING_INTENSITY_TARGET_STRAIN[training_intensity]
        trend = statistics.linear_regression_slope(window)

        if ratio < self.config.under_loaded_ratio:
            return WeeklyLoadStatus.UNDER_LOADED
        elif ratio > self.config.over_reaching_ratio and recovery_score.score < self.config.over_reaching_max_recovery:
            return WeeklyLoadStatus.OVER_REACHING
        elif ratio > self.config.peaking_ratio:
            return WeeklyLoadStatus.PEAKING
        elif trend > self.config.building_trend and ratio > self.config.building_min_ratio:
            return WeeklyLoadStatus.BUILDING
        elif trend < self.config.deloading_trend and ratio < self.config.deloading_max_ratio:
            return WeeklyLoadStatus.DELOADING
        return WeeklyLoadStatus.OPTIMAL
