"""Tests for HRVProcessor."""
import math

import pytest

from strainlab.ml.hrv import HRVProcessor


@pytest.fixture
def processor():
    return HRVProcessor()


class TestIntervalCleaning:
    def test_out_of_range_intervals_discarded(self, processor):
        assert processor.clean_rr_intervals([250, 800, 2100, 1000, 300, 2000]) == [800, 1000, 300, 2000]

    def test_ectopic_beat_removed(self, processor):
        assert processor.remove_ectopic_beats([800, 1200, 810, 805]) == [800, 810, 805]

    def test_first_and_last_always_kept(self, processor):
        assert processor.remove_ectopic_beats([400, 800, 1600]) == [400, 1600]

    def test_short_series_unchanged(self, processor):
        assert processor.remove_ectopic_beats([800, 1500]) == [800, 1500]

    def test_zero_neighbour_average_drops_point(self, processor):
        assert processor.remove_ectopic_beats([0, 800, 0]) == [0, 0]


class TestTimeDomainMetrics:
    def test_rmssd(self, processor):
        expected = math.sqrt((10 ** 2 + 20 ** 2 + 15 ** 2) / 3)
        assert processor.calculate_rmssd([800, 810, 790, 805]) == pytest.approx(expected)

    @pytest.mark.parametrize("rr", [[], [800]])
    def test_rmssd_needs_two_intervals(self, processor, rr):
        assert processor.calculate_rmssd(rr) == 0.0

    def test_ln_rmssd(self, processor):
        assert processor.calculate_ln_rmssd([800, 810]) == pytest.approx(math.log(10))

    def test_ln_rmssd_without_variability(self, processor):
        assert processor.calculate_ln_rmssd([800, 800]) == 0.0

    def test_sdnn_is_population_sd(self, processor):
        assert processor.calculate_sdnn([800, 900]) == pytest.approx(50.0)

    def test_sdnn_of_empty(self, processor):
        assert processor.calculate_sdnn([]) == 0.0

    def test_estimate_rmssd_from_sdnn(self, processor):
        assert processor.estimate_rmssd_from_sdnn(50) == pytest.approx(40.0)

    def test_pnn50(self, processor):
        assert processor.calculate_pnn50([800, 860, 850, 900]) == pytest.approx(100 / 3)

    def test_pnn50_short_series(self, processor):
        assert processor.calculate_pnn50([800]) == 0.0
