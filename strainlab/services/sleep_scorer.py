"""
Sleep Scorer - Duration, efficiency and stage balance for one night.
"""
import logging
from datetime import date
from typing import Optional

from strainlab.schemas.enums import SleepStageType
from strainlab.schemas.samples import SleepSession
from strainlab.schemas.scores import SleepComponents, SleepScore, format_hours_minutes
from strainlab.services.scoring_config import SleepScoreConfig, get_scoring_config

logger = logging.getLogger(__name__)

NEUTRAL_DURATION_SCORE = 50.0
NEUTRAL_STAGE_SCORE = 50.0


class SleepScorer:
    """Calculates the sleep score of a session against the personal sleep need."""

    def __init__(self, config: Optional[SleepScoreConfig] = None):
        self.config = config or get_scoring_config().sleep

    def calculate(
        self,
        session: SleepSession,
        sleep_need_minutes: float,
        on: Optional[date] = None,
    ) -> SleepScore:
        total_minutes = session.total_duration_minutes
        efficiency = session.sleep_efficiency

        duration_score = self.calculate_duration_score(total_minutes, sleep_need_minutes)
        efficiency_score = self.calculate_efficiency_score(efficiency)
        deep_minutes, rem_minutes, stage_score = self.calculate_stage_score(session)

        final_score = (
            duration_score * self.config.duration_weight
            + efficiency_score * self.config.efficiency_weight
            + stage_score * self.config.stage_weight
        )
        final_score = max(0.0, min(100.0, final_score))

        logger.debug(
            "Sleep calculated",
            extra={"score": round(final_score, 1), "total_minutes": round(total_minutes, 1)},
        )

        return SleepScore(
            date=on or session.end_date.date(),
            score=final_score,
            components=SleepComponents(
                duration_score=duration_score,
                efficiency_score=efficiency_score,
                stage_score=stage_score,
                total_duration_minutes=total_minutes,
                sleep_need_minutes=sleep_need_minutes,
                efficiency=efficiency,
                deep_sleep_minutes=deep_minutes,
                rem_sleep_minutes=rem_minutes,
            ),
            sleep_start=session.start_date,
            sleep_end=session.end_date,
        )

    def calculate_duration_score(self, actual_minutes: float, need_minutes: float) -> float:
        """
        100 inside the ideal ratio band, linear below it,
        and a mild penalty (floored) for oversleeping.
        """
        if need_minutes <= 0:
            return NEUTRAL_DURATION_SCORE

        ratio = actual_minutes / need_minutes
        if self.config.ideal_ratio_low <= ratio <= self.config.ideal_ratio_high:
            return 100.0
        elif ratio < self.config.ideal_ratio_low:
            return max(0.0, ratio / self.config.ideal_ratio_low * 100)
        return max(
            self.config.oversleep_floor,
            100 - (ratio - self.config.ideal_ratio_high) * self.config.oversleep_penalty,
        )

    def calculate_efficiency_score(self, efficiency: float) -> float:
        if efficiency >= self.config.target_efficiency:
            return 100.0
        return efficiency / self.config.target_efficiency * 100

    def calculate_stage_score(self, session: SleepSession) -> tuple[float, float, float]:
        """(deep minutes, REM minutes, stage score) against the ideal deep/REM share of sleeping time."""
        sleeping_minutes = session.total_duration_minutes - session.stage_minutes(
            SleepStageType.AWAKE, SleepStageType.IN_BED
        )
        if sleeping_minutes <= 0:
            return 0.0, 0.0, NEUTRAL_STAGE_SCORE

        deep_minutes = session.deep_sleep_minutes
        rem_minutes = session.rem_sleep_minutes

        deep_score = 100 - abs(deep_minutes / sleeping_minutes - self.config.ideal_deep_fraction) * self.config.stage_penalty
        rem_score = 100 - abs(rem_minutes / sleeping_minutes - self.config.ideal_rem_fraction) * self.config.stage_penalty

        return deep_minutes, rem_minutes, (max(0.0, deep_score) + max(0.0, rem_score)) / 2

    def calculate_sleep_quality(self, session: SleepSession, sleep_need_minutes: float) -> float:
        """Sleep score value alone, as used by the recovery calculation."""
        return self.calculate(session, sleep_need_minutes).score

    def generate_insights(self, session: SleepSession, sleep_need_minutes: float) -> list[str]:
        insights = []

        if sleep_need_minutes > 0 and session.total_duration_minutes >= sleep_need_minutes:
            insights.append(f"You met your sleep goal of {format_hours_minutes(sleep_need_minutes)}.")
        else:
            deficit = sleep_need_minutes - session.total_duration_minutes
            insights.append(f"You were {int(deficit)} minutes short of your sleep goal.")

        efficiency = session.sleep_efficiency * 100
        if efficiency >= 90:
            insights.append(f"Excellent sleep efficiency at {int(efficiency)}%.")
        elif efficiency >= 80:
            insights.append(f"Good sleep efficiency at {int(efficiency)}%.")
        else:
            insights.append(
                f"Sleep efficiency was {int(efficiency)}%. Try to maintain a consistent sleep schedule."
            )

        deep_minutes = session.deep_sleep_minutes
        if deep_minutes >= 60:
            insights.append(f"Good deep sleep of {format_hours_minutes(deep_minutes)} for physical recovery.")
        elif deep_minutes >= 30:
            insights.append("Moderate deep sleep. Physical recovery may be incomplete.")

        rem_minutes = session.rem_sleep_minutes
        if rem_minutes >= 90:
            insights.append(f"Strong REM sleep of {format_hours_minutes(rem_minutes)} for cognitive recovery.")
        elif rem_minutes >= 60:
            insights.append("Adequate REM sleep for mental restoration.")

        return insights
