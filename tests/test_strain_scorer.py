"""Tests for StrainScorer."""
import math
from datetime import date, datetime, timedelta

import pytest

from factories import make_heart_rate_samples
from strainlab.schemas.enums import StrainCategory, WorkoutActivityType
from strainlab.schemas.samples import HeartRateSample, WorkoutSession
from strainlab.schemas.scores import ZoneMinutes
from strainlab.services.strain_scorer import (
    StrainScorer,
    estimate_max_heart_rate,
    zone_description,
)

START = datetime(2024, 3, 15, 7, 0)


@pytest.fixture
def scorer():
    return StrainScorer()


class TestZones:
    @pytest.mark.parametrize(
        "fraction,zone",
        [(0.3, 0), (0.49, 0), (0.5, 1), (0.65, 2), (0.7, 3), (0.85, 4), (0.9, 5), (1.1, 5)],
    )
    def test_zone_for(self, scorer, fraction, zone):
        assert scorer.zone_for(fraction) == zone

    def test_zone_minutes_per_block(self, scorer):
        samples = make_heart_rate_samples(START, [(95, 10), (140, 10), (181, 10)])
        zones = scorer.calculate_zone_minutes(samples, 190)
        assert zones == ZoneMinutes(zone1=10, zone3=10, zone5=10)

    def test_gap_is_capped(self, scorer):
        samples = [
            HeartRateSample(timestamp=START, beats_per_minute=150),
            HeartRateSample(timestamp=START + timedelta(minutes=20), beats_per_minute=150),
        ]
        assert scorer.calculate_zone_minutes(samples, 190).zone3 == pytest.approx(6.0)

    def test_unordered_samples_are_sorted(self, scorer):
        samples = make_heart_rate_samples(START, [(181, 5)])
        assert scorer.calculate_zone_minutes(list(reversed(samples)), 190).zone5 == pytest.approx(5.0)

    def test_resting_heart_rate_is_not_counted(self, scorer):
        samples = make_heart_rate_samples(START, [(60, 30)])
        assert scorer.calculate_zone_minutes(samples, 190).total_minutes == 0.0


class TestScale:
    def test_zero_raw_strain(self, scorer):
        assert scorer.convert_to_strain_scale(0) == 0.0

    def test_scale_is_monotonic_and_bounded(self, scorer):
        values = [scorer.convert_to_strain_scale(raw) for raw in (10, 100, 500, 5000, 1e6)]
        assert values == sorted(values)
        assert all(0 <= v <= 21 for v in values)
        assert values[-1] == pytest.approx(21.0)

    def test_raw_strain_weights(self, scorer):
        assert scorer.calculate_raw_strain(ZoneMinutes(zone1=10, zone3=10, zone5=10)) == pytest.approx(105.0)


class TestCalculate:
    def test_mixed_session(self, scorer):
        samples = make_heart_rate_samples(START, [(95, 10), (140, 10), (181, 10)])

        score = scorer.calculate(samples, max_heart_rate=190, on=date(2024, 3, 15))

        assert score.score == pytest.approx(21 * (1 - math.exp(-0.525)))
        assert score.category == StrainCategory.LIGHT
        assert score.components.activity_minutes == pytest.approx(30.0)
        assert score.date == date(2024, 3, 15)

    def test_invalid_max_heart_rate_gives_empty_score(self, scorer):
        samples = make_heart_rate_samples(START, [(181, 30)])
        score = scorer.calculate(samples, max_heart_rate=0)
        assert score.score == 0.0
        assert score.category == StrainCategory.LIGHT
        assert score.components.zone_minutes.total_minutes == 0.0

    def test_no_samples(self, scorer):
        assert scorer.calculate([], max_heart_rate=190).score == 0.0

    def test_workout_contributions(self, scorer):
        workout_samples = make_heart_rate_samples(START, [(181, 10)])
        workout = WorkoutSession(
            activity_type=WorkoutActivityType.RUNNING,
            start_date=START,
            end_date=START + timedelta(minutes=10),
            heart_rate_samples=workout_samples,
        )

        score = scorer.calculate(workout_samples, max_heart_rate=190, workouts=[workout])

        [contribution] = score.components.workout_contributions
        assert contribution.workout_id == workout.id
        assert contribution.activity_type == "Running"
        assert contribution.strain_contribution == pytest.approx(21 * (1 - math.exp(-0.4)))

    def test_live_strain_matches_daily_value(self, scorer):
        samples = make_heart_rate_samples(START, [(160, 45)])
        assert scorer.calculate_live_strain(samples, 190) == pytest.approx(scorer.calculate(samples, 190).score)

    def test_live_strain_without_max_heart_rate(self, scorer):
        assert scorer.calculate_live_strain(make_heart_rate_samples(START, [(160, 5)]), 0) == 0.0


class TestHelpers:
    def test_estimate_max_heart_rate(self):
        assert estimate_max_heart_rate(30) == 190.0

    def test_zone_description(self):
        assert zone_description(5) == "Zone 5 (90-100%): Maximum effort"
        assert zone_description(7) == "Unknown zone"
