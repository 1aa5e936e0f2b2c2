"""
Sleep consistency - Regularity of bed time, wake time and sleep duration.
"""
import logging
from typing import Optional, Sequence

from strainlab.ml import statistics
from strainlab.schemas.enums import ConsistencyRating
from strainlab.schemas.guidance import SleepConsistency
from strainlab.schemas.scores import SleepScore
from strainlab.services.scoring_config import ConsistencyConfig, get_scoring_config

logger = logging.getLogger(__name__)


def determine_rating(score: float) -> ConsistencyRating:
    if score >= 80:
        return ConsistencyRating.EXCELLENT
    elif score >= 60:
        return ConsistencyRating.GOOD
    elif score >= 40:
        return ConsistencyRating.FAIR
    elif score >= 20:
        return ConsistencyRating.POOR
    return ConsistencyRating.INSUFFICIENT


def generate_insight(timing_score: float, duration_score: float, rating: ConsistencyRating) -> str:
    if rating == ConsistencyRating.EXCELLENT:
        return "Your sleep schedule is very consistent"
    elif rating == ConsistencyRating.GOOD:
        if timing_score < duration_score:
            return "Try to keep more regular bed and wake times"
        return "Your timing is good, work on consistent duration"
    elif rating == ConsistencyRating.FAIR:
        return "More consistent sleep would improve recovery"
    elif rating == ConsistencyRating.POOR:
        return "Irregular sleep is affecting your recovery"
    return "Keep tracking to build your sleep profile"


def _linear_score(value: float, best: float, worst: float) -> float:
    """100 at best, 0 at worst, clamped in between."""
    return max(0.0, min(100.0, 100 - (value - best) * (100.0 / (worst - best))))


class SleepConsistencyCalculator:
    """Scores how regular recent nights have been."""

    def __init__(self, config: Optional[ConsistencyConfig] = None):
        self.config = config or get_scoring_config().consistency

    def calculate_consistency_score(self, sleep_scores: Sequence[SleepScore]) -> SleepConsistency:
        if len(sleep_scores) < self.config.min_nights:
            return SleepConsistency(
                score=0.0,
                timing_variability=0.0,
                duration_variability=0.0,
                rating=ConsistencyRating.INSUFFICIENT,
                insight="Need at least 3 nights of data",
            )

        ordered = sorted(sleep_scores, key=lambda s: s.date)
        timing_score = self.calculate_timing_consistency(ordered)
        duration_score = self.calculate_duration_consistency(ordered)

        overall = timing_score * self.config.timing_weight + duration_score * self.config.duration_weight
        rating = determine_rating(overall)

        logger.debug(
            "Sleep consistency calculated",
            extra={"score": round(overall, 1), "timing": round(timing_score, 1), "duration": round(duration_score, 1)},
        )

        return SleepConsistency(
            score=overall,
            timing_variability=100 - timing_score,
            duration_variability=100 - duration_score,
            rating=rating,
            insight=generate_insight(timing_score, duration_score, rating),
        )

    def calculate_timing_consistency(self, sleep_scores: Sequence[SleepScore]) -> float:
        """Average of bed time and wake time scores; 0 when no night has its bounds recorded."""
        bedtimes = [statistics.minutes_from_midnight(s.sleep_start) for s in sleep_scores if s.sleep_start]
        waketimes = [statistics.minutes_from_midnight(s.sleep_end) for s in sleep_scores if s.sleep_end]
        if not bedtimes or not waketimes:
            return 0.0

        bedtime_score = _linear_score(
            statistics.time_of_day_deviation(bedtimes), self.config.best_timing_sd, self.config.worst_timing_sd
        )
        waketime_score = _linear_score(
            statistics.time_of_day_deviation(waketimes), self.config.best_timing_sd, self.config.worst_timing_sd
        )
        return (bedtime_score + waketime_score) / 2

    def calculate_duration_consistency(self, sleep_scores: Sequence[SleepScore]) -> float:
        durations = [s.components.total_duration_minutes for s in sleep_scores]
        if not durations or statistics.mean(durations) <= 0:
            return 0.0
        cv = statistics.coefficient_of_variation(durations)
        return _linear_score(cv, self.config.best_duration_cv, self.config.worst_duration_cv)
