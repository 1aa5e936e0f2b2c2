"""
Scoring Configuration - Weights and thresholds for every calculator.

All "magic numbers" are centralized here for easy tuning without code changes.
"""
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from strainlab.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class RecoveryConfig:
    """Recovery score weights and deviation ranges."""
    hrv_weight: float = 0.50
    rhr_weight: float = 0.30
    sleep_weight: float = 0.20

    # Deviation (%) that maps to a 0 or 100 sub-score
    hrv_max_deviation: float = 25.0
    rhr_max_deviation: float = 15.0

    # Context insight triggers
    hrv_high_deviation: float = 10.0
    hrv_low_deviation: float = -10.0
    rhr_elevated_deviation: float = 8.0
    rhr_low_deviation: float = -5.0
    poor_sleep_quality: float = 60.0
    high_previous_strain: float = 15.0


@dataclass
class StrainConfig:
    """Heart-rate zone accumulation and strain scale."""
    # Lower bound of zones 1-5 as a fraction of max heart rate
    zone_thresholds: list[float] = field(default_factory=lambda: [0.5, 0.6, 0.7, 0.8, 0.9])
    zone_weights: list[float] = field(default_factory=lambda: [0.5, 1.0, 2.0, 4.0, 8.0])

    max_sample_gap_minutes: float = 5.0  # caps sensor dropouts
    last_sample_minutes: float = 1.0

    scale_max: float = 21.0
    scale_constant: float = 200.0


@dataclass
class SleepScoreConfig:
    """Sleep score weights and stage targets."""
    duration_weight: float = 0.40
    efficiency_weight: float = 0.35
    stage_weight: float = 0.25

    # Duration ratio (actual / need) scored as 100
    ideal_ratio_low: float = 0.95
    ideal_ratio_high: float = 1.10
    oversleep_penalty: float = 50.0
    oversleep_floor: float = 70.0

    target_efficiency: float = 0.90

    # Fractions of sleeping time
    ideal_deep_fraction: float = 0.20
    ideal_rem_fraction: float = 0.25
    stage_penalty: float = 200.0


@dataclass
class SleepDebtConfig:
    """Sleep debt accumulation."""
    weekly_window_nights: int = 7
    rolling_window_nights: int = 14
    decay_factor: float = 0.9
    surplus_credit: float = 0.5  # surplus nights repay at half weight

    trend_window_nights: int = 7
    min_trend_nights: int = 3
    trend_threshold_minutes: float = 10.0


@dataclass
class GuidanceConfig:
    """Strain target range and weekly load classification."""
    no_recovery_range_low: float = 8.0
    no_recovery_range_high: float = 12.0

    min_scores: int = 3
    window_days: int = 7

    # Ratio = weekly average strain / intensity target
    under_loaded_ratio: float = 0.7
    over_reaching_ratio: float = 1.3
    over_reaching_max_recovery: float = 50.0
    peaking_ratio: float = 1.2
    building_trend: float = 0.5
    building_min_ratio: float = 0.9
    deloading_trend: float = -0.5
    deloading_max_ratio: float = 1.0


@dataclass
class ConsistencyConfig:
    """Sleep schedule consistency."""
    min_nights: int = 3

    # Standard deviation (minutes) scored as 100 and as 0
    best_timing_sd: float = 30.0
    worst_timing_sd: float = 120.0

    # Duration coefficient of variation (%) scored as 100 and as 0
    best_duration_cv: float = 5.0
    worst_duration_cv: float = 30.0

    timing_weight: float = 0.55
    duration_weight: float = 0.45


@dataclass
class InsightConfig:
    """Factor thresholds and headline cut-offs."""
    hrv_positive_deviation: float = 10.0
    hrv_negative_deviation: float = -10.0
    rhr_positive_deviation: float = -5.0
    rhr_negative_deviation: float = 8.0
    sleep_positive_score: float = 80.0
    sleep_neutral_score: float = 60.0
    strain_negative: float = 15.0
    strain_neutral: float = 10.0

    solid_sleep_score: float = 75.0
    short_sleep_score: float = 60.0
    no_recovery_good_sleep: float = 70.0
    push_harder_max_strain: float = 12.0
    demanding_strain: float = 15.0


@dataclass
class DataQualityConfig:
    """Confidence component weights."""
    hrv_weight: float = 0.35
    rhr_weight: float = 0.20
    sleep_weight: float = 0.25
    baseline_weight: float = 0.20

    warning_threshold: float = 0.5


@dataclass
class BaselineConfig:
    """Personal baseline estimation."""
    window_days: int = 7
    adaptive_history_days: int = 60
    decay_factor: float = 0.9
    outlier_threshold: float = 1.5

    # Sleep need estimation
    min_sleep_need_samples: int = 7
    good_recovery_score: float = 67.0
    min_sleep_need_minutes: float = 360.0
    max_sleep_need_minutes: float = 600.0


@dataclass
class ScoringConfig:
    """Master configuration for all scoring parameters."""
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    strain: StrainConfig = field(default_factory=StrainConfig)
    sleep: SleepScoreConfig = field(default_factory=SleepScoreConfig)
    sleep_debt: SleepDebtConfig = field(default_factory=SleepDebtConfig)
    guidance: GuidanceConfig = field(default_factory=GuidanceConfig)
    consistency: ConsistencyConfig = field(default_factory=ConsistencyConfig)
    insight: InsightConfig = field(default_factory=InsightConfig)
    data_quality: DataQualityConfig = field(default_factory=DataQualityConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ScoringConfig":
        """
        Load configuration from a YAML file.

        Sections that are absent keep their defaults. Unknown keys inside a
        section raise TypeError from the section constructor.
        """
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Scoring config {path} must be a mapping, got {type(data).__name__}")

        config = cls()
        for section in fields(cls):
            if section.name in data:
                section_type = type(getattr(config, section.name))
                setattr(config, section.name, section_type(**(data[section.name] or {})))

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {section.name: dict(getattr(self, section.name).__dict__) for section in fields(self)}


# Global default configuration instance
_default_config: Optional[ScoringConfig] = None


def get_scoring_config() -> ScoringConfig:
    """Get the current scoring configuration (singleton pattern)."""
    global _default_config
    if _default_config is None:
        path = get_settings().scoring_config_path
        if path:
            logger.info("Loading scoring config", extra={"path": path})
            _default_config = ScoringConfig.from_yaml(path)
        else:
            _default_config = ScoringConfig()
    return _default_config


def set_scoring_config(config: Optional[ScoringConfig]) -> None:
    """Set a custom scoring configuration. None resets to the defaults on next access."""
    global _default_config
    _default_config = config


def load_scoring_config_from_yaml(path: str | Path) -> ScoringConfig:
    """Load and set scoring configuration from YAML file."""
    config = ScoringConfig.from_yaml(path)
    set_scoring_config(config)
    return config
