"""
HRV signal processing from R-R intervals.

Insufficient data returns 0 rather than raising; callers treat 0 as "no signal".
"""
import math
from typing import Sequence

from strainlab.ml.statistics import population_standard_deviation

# Physiologically plausible R-R range: 300 ms (200 bpm) to 2000 ms (30 bpm)
MIN_RR_INTERVAL_MS = 300.0
MAX_RR_INTERVAL_MS = 2000.0

ECTOPIC_DEVIATION_THRESHOLD = 0.2
PNN50_DIFFERENCE_MS = 50.0

# Empirical resting ratio used when only SDNN is available
SDNN_TO_RMSSD_RATIO = 0.8


class HRVProcessor:
    """Computes time-domain HRV metrics."""

    def clean_rr_intervals(self, intervals: Sequence[float]) -> list[float]:
        return [v for v in intervals if MIN_RR_INTERVAL_MS <= v <= MAX_RR_INTERVAL_MS]

    def remove_ectopic_beats(
        self,
        intervals: Sequence[float],
        threshold: float = ECTOPIC_DEVIATION_THRESHOLD,
    ) -> list[float]:
        """
        Drop interior beats that deviate from their neighbours' mean by threshold or more.

        The first and last intervals are always kept.
        """
        if len(intervals) < 3:
            return list(intervals)

        cleaned = [intervals[0]]
        for i in range(1, len(intervals) - 1):
            avg_surrounding = (intervals[i - 1] + intervals[i + 1]) / 2
            if avg_surrounding <= 0:
                continue
            deviation = abs(intervals[i] - avg_surrounding) / avg_surrounding
            if deviation < threshold:
                cleaned.append(intervals[i])
        cleaned.append(intervals[-1])
        return cleaned

    def calculate_rmssd(self, rr_intervals: Sequence[float]) -> float:
        """Root mean square of successive differences."""
        if len(rr_intervals) < 2:
            return 0.0
        squared_diffs = [
            (rr_intervals[i] - rr_intervals[i - 1]) ** 2 for i in range(1, len(rr_intervals))
        ]
        return math.sqrt(sum(squared_diffs) / len(squared_diffs))

    def calculate_ln_rmssd(self, rr_intervals: Sequence[float]) -> float:
        rmssd = self.calculate_rmssd(rr_intervals)
        if rmssd <= 0:
            return 0.0
        return math.log(rmssd)

    def calculate_sdnn(self, rr_intervals: Sequence[float]) -> float:
        return population_standard_deviation(rr_intervals)

    def estimate_rmssd_from_sdnn(self, sdnn: float) -> float:
        return sdnn * SDNN_TO_RMSSD_RATIO

    def calculate_pnn50(self, rr_intervals: Sequence[float]) -> float:
        """Percentage of successive differences larger than 50 ms."""
        if len(rr_intervals) < 2:
            return 0.0
        over_50 = sum(
            1 for i in range(1, len(rr_intervals))
            if abs(rr_intervals[i] - rr_intervals[i - 1]) > PNN50_DIFFERENCE_MS
        )
        return over_50 / (len(rr_intervals) - 1) * 100
