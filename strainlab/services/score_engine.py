"""
Score Engine - Sequences the calculators for one day.

Samples come from a HealthDataProvider, computed records go to a
ScoreRepository. Neither is implemented here; errors they raise propagate
to the caller unchanged.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Protocol, Sequence

from strainlab.config import Settings, get_settings
from strainlab.ml.baseline import AdaptiveBaseline, BaselineCalculator
from strainlab.schemas.enums import TrainingIntensity
from strainlab.schemas.guidance import DataQuality, SleepConsistency, SleepDebt, StrainGuidance
from strainlab.schemas.insight import DailyInsight
from strainlab.schemas.samples import (
    HeartRateSample,
    HRVSample,
    SleepSession,
    UserBaseline,
    WorkoutSession,
)
from strainlab.schemas.scores import RecoveryScore, SleepScore, StrainScore
from strainlab.services.data_quality import DataQualityAssessor
from strainlab.services.insights import InsightGenerator
from strainlab.services.recovery_scorer import RecoveryScorer
from strainlab.services.scoring_config import ScoringConfig, get_scoring_config
from strainlab.services.sleep_consistency import SleepConsistencyCalculator
from strainlab.services.sleep_debt import SleepDebtTracker
from strainlab.services.sleep_scorer import SleepScorer
from strainlab.services.strain_guidance import StrainGuidanceCalculator
from strainlab.services.strain_scorer import StrainScorer

logger = logging.getLogger(__name__)

DEFAULT_HRV_BASELINE = 50.0
DEFAULT_RHR_BASELINE = 60.0
DEFAULT_SLEEP_QUALITY = 50.0
CALIBRATION_DAYS = 7


class HealthDataProvider(Protocol):
    """Supplies raw samples for a time range, oldest first."""

    def fetch_hrv_samples(self, start: datetime, end: datetime) -> list[HRVSample]: ...

    def fetch_heart_rate_samples(self, start: datetime, end: datetime) -> list[HeartRateSample]: ...

    def fetch_resting_heart_rate(self, day: date) -> Optional[float]: ...

    def fetch_sleep_sessions(self, start: datetime, end: datetime) -> list[SleepSession]: ...

    def fetch_workouts(self, start: datetime, end: datetime) -> list[WorkoutSession]: ...


class ScoreRepository(Protocol):
    """
    Stores computed records and returns history.

    Score histories may come back in any order (typically newest first).
    Daily value histories are returned oldest first, one value per day.
    """

    def fetch_latest_user_baseline(self) -> Optional[UserBaseline]: ...

    def save_user_baseline(self, baseline: UserBaseline) -> None: ...

    def fetch_hrv_values(self, end: date, days: int) -> list[float]: ...

    def fetch_rhr_values(self, end: date, days: int) -> list[float]: ...

    def save_recovery_score(self, score: RecoveryScore) -> None: ...

    def save_strain_score(self, score: StrainScore) -> None: ...

    def save_sleep_score(self, score: SleepScore) -> None: ...

    def fetch_recovery_scores(self, start: date, end: date) -> list[RecoveryScore]: ...

    def fetch_strain_scores(self, start: date, end: date) -> list[StrainScore]: ...

    def fetch_sleep_scores(self, start: date, end: date) -> list[SleepScore]: ...

    def save_heart_rate_samples(self, samples: Sequence[HeartRateSample]) -> None: ...

    def save_hrv_samples(self, samples: Sequence[HRVSample]) -> None: ...


@dataclass
class NightData:
    """Overnight inputs for the morning scores."""
    hrv_samples: list[HRVSample]
    resting_heart_rate: Optional[float]
    sleep_session: Optional[SleepSession]


@dataclass
class WeeklyTrends:
    """Stored scores for the last seven days, oldest first."""
    recovery: list[RecoveryScore]
    strain: list[StrainScore]
    sleep: list[SleepScore]


@dataclass
class DailyReport:
    """Everything computed for one day."""
    date: date
    baseline: UserBaseline
    recovery: RecoveryScore
    strain: StrainScore
    sleep: Optional[SleepScore]
    insight: DailyInsight
    strain_guidance: StrainGuidance
    sleep_debt: SleepDebt
    sleep_consistency: SleepConsistency
    data_quality: DataQuality

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "baseline": self.baseline.model_dump(mode="json"),
            "recovery": self.recovery.model_dump(mode="json"),
            "strain": self.strain.model_dump(mode="json"),
            "sleep": self.sleep.model_dump(mode="json") if self.sleep else None,
            "insight": self.insight.model_dump(mode="json"),
            "strain_guidance": self.strain_guidance.model_dump(mode="json"),
            "sleep_debt": self.sleep_debt.model_dump(mode="json"),
            "sleep_consistency": self.sleep_consistency.model_dump(mode="json"),
            "data_quality": self.data_quality.model_dump(mode="json"),
        }


def _night_window(target_date: date) -> tuple[datetime, datetime]:
    """From the start of the previous day to midday of target_date."""
    return (
        datetime.combine(target_date - timedelta(days=1), time.min),
        datetime.combine(target_date, time(12, 0)),
    )


class ScoreEngine:
    """Coordinates baseline updates and score calculations."""

    def __init__(
        self,
        provider: HealthDataProvider,
        repository: ScoreRepository,
        settings: Optional[Settings] = None,
        config: Optional[ScoringConfig] = None,
    ):
        self.provider = provider
        self.repository = repository
        self.settings = settings or get_settings()
        self.config = config or get_scoring_config()

        self.baseline_calculator = BaselineCalculator(self.config.baseline)
        self.recovery_scorer = RecoveryScorer(self.config.recovery)
        self.strain_scorer = StrainScorer(self.config.strain)
        self.sleep_scorer = SleepScorer(self.config.sleep)
        self.quality_assessor = DataQualityAssessor(self.config.data_quality)
        self.sleep_debt_tracker = SleepDebtTracker(self.config.sleep_debt)
        self.guidance_calculator = StrainGuidanceCalculator(self.config.guidance)
        self.consistency_calculator = SleepConsistencyCalculator(self.config.consistency)
        self.insight_generator = InsightGenerator(self.config.insight)

    # Baseline

    def get_or_create_baseline(self, target_date: Optional[date] = None) -> UserBaseline:
        """Today's stored baseline, or a freshly computed one."""
        target_date = target_date or date.today()
        existing = self.repository.fetch_latest_user_baseline()
        if existing is not None and existing.date == target_date:
            return existing
        return self.update_baseline(target_date)

    def update_baseline(self, target_date: Optional[date] = None) -> UserBaseline:
        """Recompute the baseline from the trailing week and store it."""
        target_date = target_date or date.today()
        window_days = self.config.baseline.window_days

        cleaned_hrv = self.baseline_calculator.detect_outliers(
            self.repository.fetch_hrv_values(target_date, window_days)
        )
        cleaned_rhr = self.baseline_calculator.detect_outliers(
            self.repository.fetch_rhr_values(target_date, window_days)
        )

        hrv_baseline = (
            self.baseline_calculator.calculate_rolling_average(cleaned_hrv, window_days)
            if cleaned_hrv
            else DEFAULT_HRV_BASELINE
        )
        rhr_baseline = (
            self.baseline_calculator.calculate_rolling_average(cleaned_rhr, window_days)
            if cleaned_rhr
            else DEFAULT_RHR_BASELINE
        )

        existing = self.repository.fetch_latest_user_baseline()
        if existing is not None:
            max_heart_rate = existing.max_heart_rate
            sleep_need = existing.sleep_need_minutes
        else:
            max_heart_rate = self.settings.default_max_heart_rate
            sleep_need = self.settings.default_sleep_need_minutes

        baseline = UserBaseline(
            date=target_date,
            hrv_baseline_7day=hrv_baseline,
            rhr_baseline_7day=rhr_baseline,
            sleep_need_minutes=self._estimate_sleep_need(target_date, sleep_need),
            max_heart_rate=max_heart_rate,
        )
        self.repository.save_user_baseline(baseline)

        logger.info(
            "Baseline updated",
            extra={
                "date": target_date.isoformat(),
                "hrv_baseline": round(hrv_baseline, 2),
                "rhr_baseline": round(rhr_baseline, 2),
                "sleep_need_minutes": round(baseline.sleep_need_minutes, 1),
                "hrv_days": len(cleaned_hrv),
            },
        )
        return baseline

    def _estimate_sleep_need(self, target_date: date, fallback: float) -> float:
        """Sleep need from nights paired with the next morning's recovery; fallback without enough pairs."""
        start = target_date - timedelta(days=self.config.baseline.adaptive_history_days)
        sleep_by_date = {s.date: s for s in self.repository.fetch_sleep_scores(start, target_date)}
        recovery_by_date = {r.date: r for r in self.repository.fetch_recovery_scores(start, target_date)}

        paired_dates = sorted(sleep_by_date.keys() & recovery_by_date.keys())
        if len(paired_dates) < self.config.baseline.min_sleep_need_samples:
            return fallback

        return self.baseline_calculator.calculate_sleep_need(
            [sleep_by_date[d].components.total_duration_minutes for d in paired_dates],
            [recovery_by_date[d].score for d in paired_dates],
        )

    def adaptive_baselines(
        self, target_date: Optional[date] = None
    ) -> tuple[AdaptiveBaseline, AdaptiveBaseline]:
        """(HRV, RHR) adaptive baselines over the long history window."""
        target_date = target_date or date.today()
        days = self.config.baseline.adaptive_history_days
        hrv = self.baseline_calculator.calculate_adaptive_baseline(
            self.repository.fetch_hrv_values(target_date, days)
        )
        rhr = self.baseline_calculator.calculate_adaptive_baseline(
            self.repository.fetch_rhr_values(target_date, days)
        )
        return hrv, rhr

    # Scores

    def fetch_night_data(self, target_date: date) -> NightData:
        start, end = _night_window(target_date)
        sessions = self.provider.fetch_sleep_sessions(start, end)
        return NightData(
            hrv_samples=sorted(self.provider.fetch_hrv_samples(start, end), key=lambda s: s.timestamp),
            resting_heart_rate=self.provider.fetch_resting_heart_rate(target_date),
            sleep_session=max(sessions, key=lambda s: s.end_date) if sessions else None,
        )

    def calculate_recovery(self, target_date: Optional[date] = None) -> RecoveryScore:
        target_date = target_date or date.today()
        baseline = self.get_or_create_baseline(target_date)
        return self._score_recovery(self.fetch_night_data(target_date), baseline, target_date)

    def _score_recovery(self, night: NightData, baseline: UserBaseline, target_date: date) -> RecoveryScore:
        if night.hrv_samples:
            current_hrv = night.hrv_samples[-1].sdnn_milliseconds
        else:
            current_hrv = baseline.hrv_baseline_7day

        current_rhr = night.resting_heart_rate
        if current_rhr is None:
            current_rhr = baseline.rhr_baseline_7day

        if night.sleep_session is not None:
            sleep_quality = self.sleep_scorer.calculate_sleep_quality(
                night.sleep_session, baseline.sleep_need_minutes
            )
        else:
            sleep_quality = DEFAULT_SLEEP_QUALITY

        score = self.recovery_scorer.calculate(
            current_hrv=current_hrv,
            current_rhr=current_rhr,
            hrv_baseline=baseline.hrv_baseline_7day,
            rhr_baseline=baseline.rhr_baseline_7day,
            sleep_quality=sleep_quality,
            on=target_date,
        )
        self.repository.save_recovery_score(score)

        logger.info(
            "Recovery score computed",
            extra={"date": target_date.isoformat(), "score": round(score.score, 1), "category": score.category.value},
        )
        return score

    def calculate_strain(
        self,
        target_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> StrainScore:
        """Strain from the start of target_date up to now (or the end of that day)."""
        target_date = target_date or date.today()
        baseline = self.get_or_create_baseline(target_date)
        return self._score_strain(baseline, target_date, now)

    def _score_strain(self, baseline: UserBaseline, target_date: date, now: Optional[datetime]) -> StrainScore:
        start = datetime.combine(target_date, time.min)
        end = now or datetime.combine(target_date, time.max)

        score = self.strain_scorer.calculate(
            heart_rate_samples=self.provider.fetch_heart_rate_samples(start, end),
            max_heart_rate=baseline.max_heart_rate,
            workouts=self.provider.fetch_workouts(start, end),
            on=target_date,
        )
        self.repository.save_strain_score(score)

        logger.info(
            "Strain score computed",
            extra={"date": target_date.isoformat(), "score": round(score.score, 2), "category": score.category.value},
        )
        return score

    def calculate_sleep(self, target_date: Optional[date] = None) -> Optional[SleepScore]:
        """Last night's sleep score, None when no session was recorded."""
        target_date = target_date or date.today()
        baseline = self.get_or_create_baseline(target_date)
        return self._score_sleep(self.fetch_night_data(target_date), baseline, target_date)

    def _score_sleep(self, night: NightData, baseline: UserBaseline, target_date: date) -> Optional[SleepScore]:
        if night.sleep_session is None:
            return None

        score = self.sleep_scorer.calculate(night.sleep_session, baseline.sleep_need_minutes, on=target_date)
        self.repository.save_sleep_score(score)

        logger.info(
            "Sleep score computed",
            extra={"date": target_date.isoformat(), "score": round(score.score, 1)},
        )
        return score

    # Daily evaluation

    def evaluate_day(
        self,
        target_date: Optional[date] = None,
        training_intensity: Optional[TrainingIntensity] = None,
        now: Optional[datetime] = None,
    ) -> DailyReport:
        """Compute every score and summary for target_date."""
        target_date = target_date or date.today()
        training_intensity = training_intensity or self.settings.training_intensity

        baseline = self.get_or_create_baseline(target_date)
        night = self.fetch_night_data(target_date)

        recovery = self._score_recovery(night, baseline, target_date)
        sleep = self._score_sleep(night, baseline, target_date)
        strain = self._score_strain(baseline, target_date, now)

        # History windows exclude target_date; today's records are added explicitly
        yesterday = target_date - timedelta(days=1)
        strain_history = self.repository.fetch_strain_scores(
            target_date - timedelta(days=self.config.guidance.window_days), yesterday
        )
        strain_history = [s for s in strain_history if s.date < target_date]
        previous_day_strain = next((s for s in strain_history if s.date == yesterday), None)

        sleep_history = self.repository.fetch_sleep_scores(
            target_date - timedelta(days=self.config.sleep_debt.rolling_window_nights), yesterday
        )
        sleep_history = [s for s in sleep_history if s.date < target_date]
        if sleep is not None:
            sleep_history.append(sleep)

        hrv_history = self.repository.fetch_hrv_values(
            target_date, self.config.baseline.adaptive_history_days
        )
        days_covered = len(hrv_history)

        if days_covered < CALIBRATION_DAYS:
            insight = DailyInsight.calibrating(CALIBRATION_DAYS - days_covered, on=target_date)
        else:
            insight = self.insight_generator.generate_insight(
                recovery=recovery,
                strain=strain,
                sleep=sleep,
                previous_day_strain=previous_day_strain,
            )

        report = DailyReport(
            date=target_date,
            baseline=baseline,
            recovery=recovery,
            strain=strain,
            sleep=sleep,
            insight=insight,
            strain_guidance=self.guidance_calculator.calculate_guidance(
                recovery, strain_history, training_intensity
            ),
            sleep_debt=self.sleep_debt_tracker.calculate_sleep_debt(
                sleep_history, baseline.sleep_need_minutes
            ),
            sleep_consistency=self.consistency_calculator.calculate_consistency_score(sleep_history),
            data_quality=self._assess_data_quality(night, strain, days_covered),
        )

        logger.info(
            "Daily report ready",
            extra={
                "date": target_date.isoformat(),
                "recovery": round(recovery.score, 1),
                "strain": round(strain.score, 2),
                "sleep": round(sleep.score, 1) if sleep else None,
                "confidence": report.data_quality.confidence_level.value,
            },
        )
        return report

    def _assess_data_quality(self, night: NightData, strain: StrainScore, days_covered: int) -> DataQuality:
        session = night.sleep_session
        if session is not None:
            rhr_samples = [
                s.beats_per_minute
                for s in self.provider.fetch_heart_rate_samples(session.start_date, session.end_date)
            ]
        elif night.resting_heart_rate is not None:
            rhr_samples = [night.resting_heart_rate]
        else:
            rhr_samples = []

        return self.quality_assessor.assess_quality(
            hrv_samples=[s.sdnn_milliseconds for s in night.hrv_samples],
            rhr_samples=rhr_samples,
            sleep_duration_minutes=session.total_duration_minutes if session is not None else None,
            activity_minutes=strain.components.activity_minutes,
            days_covered=days_covered,
        )

    def process_watch_data(
        self,
        heart_rate_samples: Optional[Sequence[HeartRateSample]] = None,
        hrv_samples: Optional[Sequence[HRVSample]] = None,
        workout: Optional[WorkoutSession] = None,
        target_date: Optional[date] = None,
    ) -> Optional[StrainScore]:
        """Store incoming samples; a finished workout triggers a strain recalculation."""
        if heart_rate_samples:
            self.repository.save_heart_rate_samples(heart_rate_samples)
        if hrv_samples:
            self.repository.save_hrv_samples(hrv_samples)

        logger.debug(
            "Watch data stored",
            extra={
                "heart_rate_samples": len(heart_rate_samples or []),
                "hrv_samples": len(hrv_samples or []),
                "workout": workout is not None,
            },
        )

        if workout is None:
            return None
        return self.calculate_strain(target_date or workout.end_date.date())

    def weekly_trends(self, target_date: Optional[date] = None) -> WeeklyTrends:
        """Scores stored from seven days before target_date through target_date."""
        target_date = target_date or date.today()
        start = target_date - timedelta(days=7)

        def oldest_first(records):
            return sorted(records, key=lambda r: r.date)

        return WeeklyTrends(
            recovery=oldest_first(self.repository.fetch_recovery_scores(start, target_date)),
            strain=oldest_first(self.repository.fetch_strain_scores(start, target_date)),
            sleep=oldest_first(self.repository.fetch_sleep_scores(start, target_date)),
        )
