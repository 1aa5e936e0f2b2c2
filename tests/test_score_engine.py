"""Tests for ScoreEngine orchestration against in-memory collaborators."""
import math
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from factories import (
    InMemoryScoreRepository,
    StaticHealthDataProvider,
    make_heart_rate_samples,
    make_recovery_score,
    make_sleep_score,
    make_sleep_session,
    make_strain_score,
)
from strainlab.schemas.enums import (
    BaselinePhase,
    ConfidenceLevel,
    RecoveryCategory,
    SleepDebtSeverity,
    SleepStageType,
    WeeklyLoadStatus,
)
from strainlab.schemas.samples import HRVSample, UserBaseline, WorkoutSession
from strainlab.services.score_engine import ScoreEngine
from strainlab.services.scoring_config import ScoringConfig, StrainConfig

TARGET = date(2024, 3, 15)
BEDTIME = datetime(2024, 3, 14, 23, 0)


def night_session():
    return make_sleep_session(
        BEDTIME,
        [
            (SleepStageType.CORE, 132),
            (SleepStageType.DEEP, 96),
            (SleepStageType.REM, 120),
            (SleepStageType.CORE, 132),
        ],
    )


def hrv_sample(hour, sdnn):
    return HRVSample(timestamp=datetime(2024, 3, 15, hour, 0), sdnn_milliseconds=sdnn)


@pytest.fixture
def engine(provider, repository, settings):
    return ScoreEngine(provider, repository, settings=settings)


class TestBaseline:
    def test_defaults_without_history(self, engine, repository):
        baseline = engine.update_baseline(TARGET)

        assert baseline.hrv_baseline_7day == 50.0
        assert baseline.rhr_baseline_7day == 60.0
        assert baseline.max_heart_rate == 190.0
        assert baseline.sleep_need_minutes == 450.0
        assert repository.baselines == [baseline]

    def test_outliers_are_excluded(self, engine, repository):
        repository.hrv_values = [50, 52, 48, 51, 49, 50, 120]
        repository.rhr_values = [58.0] * 7

        baseline = engine.update_baseline(TARGET)

        assert baseline.hrv_baseline_7day == pytest.approx(50.0)
        assert baseline.rhr_baseline_7day == pytest.approx(58.0)

    def test_same_day_baseline_is_reused(self, provider, settings):
        existing = UserBaseline(
            date=TARGET, hrv_baseline_7day=45, rhr_baseline_7day=55, sleep_need_minutes=480, max_heart_rate=180
        )
        repository = InMemoryScoreRepository(baseline=existing)
        engine = ScoreEngine(provider, repository, settings=settings)

        assert engine.get_or_create_baseline(TARGET) is existing
        assert len(repository.baselines) == 1

    def test_previous_baseline_keeps_personal_values(self, provider, settings):
        existing = UserBaseline(
            date=TARGET - timedelta(days=1),
            hrv_baseline_7day=45,
            rhr_baseline_7day=55,
            sleep_need_minutes=480,
            max_heart_rate=180,
        )
        repository = InMemoryScoreRepository(hrv_values=[62.0] * 7, rhr_values=[52.0] * 7, baseline=existing)
        engine = ScoreEngine(provider, repository, settings=settings)

        baseline = engine.get_or_create_baseline(TARGET)

        assert baseline.date == TARGET
        assert baseline.hrv_baseline_7day == pytest.approx(62.0)
        assert baseline.max_heart_rate == 180
        assert baseline.sleep_need_minutes == 480
        assert len(repository.baselines) == 2

    def test_sleep_need_from_well_recovered_nights(self, engine, repository):
        for days_ago in range(1, 8):
            day = TARGET - timedelta(days=days_ago)
            repository.save_sleep_score(make_sleep_score(day, total_minutes=480))
            repository.save_recovery_score(make_recovery_score(day, 80))

        assert engine.update_baseline(TARGET).sleep_need_minutes == pytest.approx(480.0)

    def test_adaptive_baselines(self, engine, repository):
        repository.hrv_values = [50.0] * 30
        repository.rhr_values = [60.0] * 30

        hrv, rhr = engine.adaptive_baselines(TARGET)

        assert hrv.phase == BaselinePhase.REFINED
        assert hrv.value == pytest.approx(50.0)
        assert rhr.value == pytest.approx(60.0)


class TestRecovery:
    def test_recovery_from_overnight_readings(self, repository, settings):
        repository.hrv_values = [50.0] * 7
        repository.rhr_values = [60.0] * 7
        provider = StaticHealthDataProvider(hrv_samples=[hrv_sample(5, 55)], resting_heart_rate=58)
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_recovery(TARGET)

        assert score.score == pytest.approx(70 * 0.5 + (50 + 100 / 9) * 0.3 + 50 * 0.2)
        assert score.category == RecoveryCategory.MODERATE
        assert score.date == TARGET
        assert repository.recovery_scores == [score]

    def test_latest_hrv_sample_is_used(self, repository, settings):
        provider = StaticHealthDataProvider(hrv_samples=[hrv_sample(5, 60), hrv_sample(3, 40)])
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_recovery(TARGET)

        assert score.components.current_hrv == 60.0

    def test_reading_uses_the_baseline_metric(self, repository, settings):
        repository.hrv_values = [50.0] * 10
        sample = HRVSample(
            timestamp=datetime(2024, 3, 15, 5, 0), sdnn_milliseconds=50.0, rr_intervals_ms=[800, 810, 790, 805]
        )
        engine = ScoreEngine(StaticHealthDataProvider(hrv_samples=[sample]), repository, settings=settings)

        score = engine.calculate_recovery(TARGET)

        assert score.components.current_hrv == 50.0
        assert score.components.hrv_deviation == 0.0
        assert score.score == pytest.approx(50.0)

    def test_missing_readings_fall_back_to_baseline(self, engine):
        score = engine.calculate_recovery(TARGET)
        assert score.score == pytest.approx(50.0)
        assert score.components.current_rhr == 60.0

    def test_repository_errors_propagate(self, provider, settings):
        repository = MagicMock()
        repository.fetch_latest_user_baseline.side_effect = RuntimeError("store unavailable")
        engine = ScoreEngine(provider, repository, settings=settings)

        with pytest.raises(RuntimeError, match="store unavailable"):
            engine.calculate_recovery(TARGET)


class TestStrainAndSleep:
    def test_strain_for_the_day(self, repository, settings):
        provider = StaticHealthDataProvider(
            heart_rate_samples=make_heart_rate_samples(datetime(2024, 3, 15, 7, 0), [(140, 30)])
            + make_heart_rate_samples(BEDTIME, [(181, 30)])
        )
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_strain(TARGET)

        assert score.components.zone_minutes.zone3 == pytest.approx(30.0)
        assert score.components.zone_minutes.zone5 == 0.0
        assert score.score == pytest.approx(21 * (1 - math.exp(-60 / 200)))
        assert repository.strain_scores == [score]

    def test_strain_up_to_now(self, repository, settings):
        provider = StaticHealthDataProvider(
            heart_rate_samples=make_heart_rate_samples(datetime(2024, 3, 15, 7, 0), [(140, 30)])
        )
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_strain(TARGET, now=datetime(2024, 3, 15, 7, 9, 30))

        assert score.components.zone_minutes.zone3 == pytest.approx(10.0)

    def test_custom_config(self, repository, settings):
        provider = StaticHealthDataProvider(
            heart_rate_samples=make_heart_rate_samples(datetime(2024, 3, 15, 7, 0), [(140, 30)])
        )
        config = ScoringConfig(strain=StrainConfig(scale_constant=100.0))
        engine = ScoreEngine(provider, repository, settings=settings, config=config)

        assert engine.calculate_strain(TARGET).score == pytest.approx(21 * (1 - math.exp(-60 / 100)))

    def test_no_sleep_session(self, engine, repository):
        assert engine.calculate_sleep(TARGET) is None
        assert repository.sleep_scores == []

    def test_sleep_uses_the_main_night(self, repository, settings):
        nap = make_sleep_session(datetime(2024, 3, 14, 14, 0), [(SleepStageType.CORE, 40)])
        provider = StaticHealthDataProvider(sleep_sessions=[night_session(), nap])
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_sleep(TARGET)

        assert score.components.total_duration_minutes == pytest.approx(480.0)
        assert score.date == TARGET
        assert score.score == pytest.approx(100.0)
        assert repository.sleep_scores == [score]

    def test_afternoon_nap_does_not_replace_the_night(self, repository, settings):
        nap = make_sleep_session(datetime(2024, 3, 15, 14, 0), [(SleepStageType.CORE, 30)])
        provider = StaticHealthDataProvider(sleep_sessions=[night_session(), nap])
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.calculate_sleep(TARGET)

        assert score.components.total_duration_minutes == pytest.approx(480.0)


class TestEvaluateDay:
    @pytest.fixture
    def full_day(self, settings):
        repository = InMemoryScoreRepository(hrv_values=[50.0] * 10, rhr_values=[60.0] * 10)
        for days_ago in range(1, 8):
            repository.save_strain_score(make_strain_score(TARGET - timedelta(days=days_ago), 11))
        for days_ago in range(1, 7):
            repository.save_sleep_score(make_sleep_score(TARGET - timedelta(days=days_ago)))

        provider = StaticHealthDataProvider(
            hrv_samples=[hrv_sample(5, 55)],
            heart_rate_samples=make_heart_rate_samples(BEDTIME, [(55, 30)])
            + make_heart_rate_samples(datetime(2024, 3, 15, 7, 30), [(140, 30)]),
            resting_heart_rate=58,
            sleep_sessions=[night_session()],
        )
        return ScoreEngine(provider, repository, settings=settings), repository

    def test_full_report(self, full_day):
        engine, repository = full_day

        report = engine.evaluate_day(TARGET)

        assert report.recovery.score == pytest.approx(35 + (50 + 100 / 9) * 0.3 + 20)
        assert report.recovery.category == RecoveryCategory.OPTIMAL
        assert report.sleep.score == pytest.approx(100.0)
        assert report.strain.components.zone_minutes.zone3 == pytest.approx(30.0)

        assert report.insight.headline == "HRV is strong and sleep was solid"
        assert report.insight.recommendation == "Today is a good day to push harder"
        assert report.insight.confidence == ConfidenceLevel.HIGH

        assert report.strain_guidance.formatted_range == "14-18"
        assert report.strain_guidance.weekly_load_status == WeeklyLoadStatus.OPTIMAL
        assert report.sleep_debt.severity == SleepDebtSeverity.NONE

        assert report.data_quality.rhr_sample_count == 30
        assert report.data_quality.warnings == ["Limited HRV data available"]
        assert report.data_quality.overall_confidence == pytest.approx(0.14 + 0.2 + 0.25 + 0.14)

        assert len(repository.recovery_scores) == 1
        assert len(repository.strain_scores) == 8
        assert len(repository.sleep_scores) == 7

    def test_report_serializes(self, full_day):
        engine, _ = full_day

        data = engine.evaluate_day(TARGET).to_dict()

        assert data["date"] == "2024-03-15"
        assert data["insight"]["confidence"] == "high"
        assert data["sleep"]["date"] == "2024-03-15"
        assert set(data) == {
            "date",
            "baseline",
            "recovery",
            "strain",
            "sleep",
            "insight",
            "strain_guidance",
            "sleep_debt",
            "sleep_consistency",
            "data_quality",
        }

    def test_calibrating_insight_with_short_history(self, settings):
        repository = InMemoryScoreRepository(hrv_values=[50.0] * 3, rhr_values=[60.0] * 3)
        engine = ScoreEngine(StaticHealthDataProvider(), repository, settings=settings)

        report = engine.evaluate_day(TARGET)

        assert report.insight.headline == "Building your baseline"
        assert report.insight.recommendation == "Keep wearing your watch, 4 more days to personalize"
        assert report.sleep is None
        assert report.data_quality.confidence_level == ConfidenceLevel.LOW
        assert report.strain_guidance.weekly_load_status == WeeklyLoadStatus.UNKNOWN


class TestProcessWatchData:
    def test_samples_are_stored(self, engine, repository):
        samples = make_heart_rate_samples(datetime(2024, 3, 15, 9, 0), [(80, 5)])

        result = engine.process_watch_data(heart_rate_samples=samples, hrv_samples=[hrv_sample(5, 50)])

        assert result is None
        assert repository.heart_rate_samples == samples
        assert len(repository.stored_hrv_samples) == 1
        assert repository.strain_scores == []

    def test_finished_workout_recalculates_strain(self, repository, settings):
        start = datetime(2024, 3, 15, 18, 0)
        samples = make_heart_rate_samples(start, [(181, 10)])
        workout = WorkoutSession(
            activity_type="Running",
            start_date=start,
            end_date=start + timedelta(minutes=10),
            heart_rate_samples=samples,
        )
        provider = StaticHealthDataProvider(heart_rate_samples=samples, workouts=[workout])
        engine = ScoreEngine(provider, repository, settings=settings)

        score = engine.process_watch_data(heart_rate_samples=samples, workout=workout)

        assert score.date == TARGET
        assert score.components.zone_minutes.zone5 == pytest.approx(10.0)
        assert len(score.components.workout_contributions) == 1
        assert repository.strain_scores == [score]


class TestWeeklyTrends:
    def test_last_seven_days_oldest_first(self, engine, repository):
        for days_ago in (0, 3, 7, 8):
            day = TARGET - timedelta(days=days_ago)
            repository.save_recovery_score(make_recovery_score(day, 60))
            repository.save_strain_score(make_strain_score(day, 10))
        repository.save_sleep_score(make_sleep_score(TARGET - timedelta(days=2)))

        trends = engine.weekly_trends(TARGET)

        expected = [TARGET - timedelta(days=7), TARGET - timedelta(days=3), TARGET]
        assert [s.date for s in trends.recovery] == expected
        assert [s.date for s in trends.strain] == expected
        assert [s.date for s in trends.sleep] == [TARGET - timedelta(days=2)]

    def test_empty_history(self, engine):
        trends = engine.weekly_trends(TARGET)
        assert trends.recovery == trends.strain == trends.sleep == []
