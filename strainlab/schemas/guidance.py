from pydantic import BaseModel, ConfigDict, Field

from strainlab.schemas.enums import (
    BaselinePhase,
    ConfidenceLevel,
    ConsistencyRating,
    SleepDebtSeverity,
    SleepDebtTrend,
    TargetStatus,
    WeeklyLoadStatus,
)


class StrainGuidance(BaseModel):
    """Recommended strain range and training status for the day."""
    model_config = ConfigDict(frozen=True)

    range_low: float = Field(..., ge=0, le=21)
    range_high: float = Field(..., ge=0, le=21)
    weekly_load_status: WeeklyLoadStatus
    rationale: str

    @property
    def formatted_range(self) -> str:
        return f"{int(self.range_low)}-{int(self.range_high)}"

    @property
    def target_midpoint(self) -> float:
        return (self.range_low + self.range_high) / 2

    def remaining_to_target(self, current_strain: float) -> float:
        return max(0.0, self.range_low - current_strain)

    def over_target(self, current_strain: float) -> float:
        return max(0.0, current_strain - self.range_high)

    def target_status(self, current_strain: float) -> TargetStatus:
        if current_strain < self.range_low:
            return TargetStatus.BELOW_TARGET
        elif current_strain > self.range_high:
            return TargetStatus.ABOVE_TARGET
        return TargetStatus.IN_RANGE


class SleepDebt(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_debt_minutes: float = Field(..., ge=0)
    weekly_debt_minutes: float = Field(..., ge=0)
    trend: SleepDebtTrend
    severity: SleepDebtSeverity
    recommendation: str

    @property
    def formatted_debt(self) -> str:
        hours = int(self.total_debt_minutes // 60)
        minutes = int(self.total_debt_minutes % 60)
        if hours == 0:
            return f"{minutes}m"
        elif minutes == 0:
            return f"{hours}h"
        return f"{hours}h {minutes}m"


class SleepConsistency(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    timing_variability: float  # lower is better
    duration_variability: float  # lower is better
    rating: ConsistencyRating
    insight: str


class DataQuality(BaseModel):
    model_config = ConfigDict(frozen=True)

    hrv_data_available: bool
    hrv_sample_count: int
    rhr_data_available: bool
    rhr_sample_count: int
    sleep_data_available: bool
    activity_data_available: bool
    baseline_maturity: float = Field(..., ge=0, le=1)
    overall_confidence: float = Field(..., ge=0, le=1)
    warnings: list[str] = []

    @property
    def confidence_level(self) -> ConfidenceLevel:
        if self.overall_confidence >= 0.8:
            return ConfidenceLevel.HIGH
        elif self.overall_confidence >= 0.5:
            return ConfidenceLevel.MODERATE
        return ConfidenceLevel.LOW


class BaselineStatus(BaseModel):
    """User-facing calibration progress of the personal baseline."""
    model_config = ConfigDict(frozen=True)

    phase: BaselinePhase
    message: str
    progress: float = Field(..., ge=0, le=1)
