"""
Strain Scorer - Daily cardiovascular load on a 0-21 scale.

Time in each heart-rate zone is weighted exponentially and the raw total is
saturated onto the strain scale, so very long sessions approach 21 but never pass it.
"""
import logging
import math
from datetime import date
from typing import Optional, Sequence

from strainlab.schemas.enums import StrainCategory
from strainlab.schemas.samples import HeartRateSample, WorkoutSession
from strainlab.schemas.scores import (
    StrainComponents,
    StrainScore,
    WorkoutContribution,
    ZoneMinutes,
)
from strainlab.services.scoring_config import StrainConfig, get_scoring_config

logger = logging.getLogger(__name__)

ZONE_DESCRIPTIONS = {
    1: "Zone 1 (50-60%): Light activity, warm up",
    2: "Zone 2 (60-70%): Fat burning, easy aerobic",
    3: "Zone 3 (70-80%): Aerobic endurance",
    4: "Zone 4 (80-90%): Anaerobic threshold",
    5: "Zone 5 (90-100%): Maximum effort",
}


def estimate_max_heart_rate(age: int) -> float:
    """Age-predicted maximum heart rate (220 - age)."""
    return float(220 - age)


def zone_description(zone: int) -> str:
    return ZONE_DESCRIPTIONS.get(zone, "Unknown zone")


class StrainScorer:
    """Calculates strain from heart-rate samples."""

    def __init__(self, config: Optional[StrainConfig] = None):
        self.config = config or get_scoring_config().strain

    def calculate(
        self,
        heart_rate_samples: Sequence[HeartRateSample],
        max_heart_rate: float,
        workouts: Sequence[WorkoutSession] = (),
        on: Optional[date] = None,
    ) -> StrainScore:
        on = on or date.today()
        if max_heart_rate <= 0:
            return StrainScore(date=on, score=0.0, category=StrainCategory.LIGHT)

        zone_minutes = self.calculate_zone_minutes(heart_rate_samples, max_heart_rate)
        strain = self.convert_to_strain_scale(self.calculate_raw_strain(zone_minutes))

        contributions = [
            self.calculate_workout_contribution(workout, max_heart_rate) for workout in workouts
        ]

        logger.debug(
            "Strain calculated",
            extra={"score": round(strain, 2), "samples": len(heart_rate_samples), "workouts": len(workouts)},
        )

        return StrainScore(
            date=on,
            score=strain,
            category=StrainCategory.from_score(strain),
            components=StrainComponents(
                activity_minutes=zone_minutes.total_minutes,
                zone_minutes=zone_minutes,
                workout_contributions=contributions,
            ),
        )

    def calculate_live_strain(
        self,
        heart_rate_samples: Sequence[HeartRateSample],
        max_heart_rate: float,
    ) -> float:
        """Strain value only, for display during a workout."""
        if max_heart_rate <= 0:
            return 0.0
        zone_minutes = self.calculate_zone_minutes(heart_rate_samples, max_heart_rate)
        return self.convert_to_strain_scale(self.calculate_raw_strain(zone_minutes))

    def calculate_zone_minutes(
        self,
        samples: Sequence[HeartRateSample],
        max_heart_rate: float,
    ) -> ZoneMinutes:
        """
        Attribute each sample's duration to a zone.

        A sample lasts until the next one, capped at the max gap; the last
        sample counts as one minute. Below zone 1 nothing is counted.
        """
        zones = [0.0] * 5
        if max_heart_rate <= 0:
            return ZoneMinutes()

        ordered = sorted(samples, key=lambda s: s.timestamp)
        for i, sample in enumerate(ordered):
            if i < len(ordered) - 1:
                gap = (ordered[i + 1].timestamp - sample.timestamp).total_seconds() / 60.0
                duration = min(gap, self.config.max_sample_gap_minutes)
            else:
                duration = self.config.last_sample_minutes

            zone = self.zone_for(sample.beats_per_minute / max_heart_rate)
            if zone:
                zones[zone - 1] += duration

        return ZoneMinutes(zone1=zones[0], zone2=zones[1], zone3=zones[2], zone4=zones[3], zone5=zones[4])

    def zone_for(self, heart_rate_fraction: float) -> int:
        """Zone 1-5 for a fraction of max heart rate, 0 below zone 1."""
        for zone in range(len(self.config.zone_thresholds), 0, -1):
            if heart_rate_fraction >= self.config.zone_thresholds[zone - 1]:
                return zone
        return 0

    def calculate_raw_strain(self, zone_minutes: ZoneMinutes) -> float:
        return sum(m * w for m, w in zip(zone_minutes.as_list(), self.config.zone_weights))

    def convert_to_strain_scale(self, raw_strain: float) -> float:
        """Saturating map of weighted minutes onto 0-21."""
        strain = self.config.scale_max * (1.0 - math.exp(-raw_strain / self.config.scale_constant))
        return min(self.config.scale_max, max(0.0, strain))

    def calculate_workout_contribution(
        self,
        workout: WorkoutSession,
        max_heart_rate: float,
    ) -> WorkoutContribution:
        zone_minutes = self.calculate_zone_minutes(workout.heart_rate_samples, max_heart_rate)
        return WorkoutContribution(
            workout_id=workout.id,
            activity_type=workout.activity_type,
            strain_contribution=self.convert_to_strain_scale(self.calculate_raw_strain(zone_minutes)),
        )
