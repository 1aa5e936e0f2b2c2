from datetime import date as date_type, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from strainlab.schemas.enums import SampleSource, SleepStageType, WorkoutActivityType


class HeartRateSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    beats_per_minute: float = Field(..., ge=0)
    source: SampleSource = SampleSource.WATCH


class HRVSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    sdnn_milliseconds: float = Field(..., ge=0)
    rr_intervals_ms: list[float] | None = None


class SleepStage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SleepStageType
    start_date: datetime
    end_date: datetime

    @property
    def duration_minutes(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / 60.0


class SleepSession(BaseModel):
    """One night of sleep. Stages are taken as non-overlapping and within the session bounds."""
    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    stages: list[SleepStage] = []

    @property
    def total_duration_minutes(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / 60.0

    @property
    def sleep_efficiency(self) -> float:
        total_minutes = self.total_duration_minutes
        if total_minutes <= 0:
            return 0.0
        awake_minutes = self.stage_minutes(SleepStageType.AWAKE)
        return max(0.0, (total_minutes - awake_minutes) / total_minutes)

    @property
    def deep_sleep_minutes(self) -> float:
        return self.stage_minutes(SleepStageType.DEEP)

    @property
    def rem_sleep_minutes(self) -> float:
        return self.stage_minutes(SleepStageType.REM)

    @property
    def core_sleep_minutes(self) -> float:
        return self.stage_minutes(SleepStageType.CORE)

    def stage_minutes(self, *stage_types: SleepStageType) -> float:
        """Total minutes spent in any of the given stage types."""
        return sum(s.duration_minutes for s in self.stages if s.type in stage_types)


class AccelerometerSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_magnitude: float
    peak_magnitude: float
    movement_minutes: float


class WorkoutSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    activity_type: WorkoutActivityType
    start_date: datetime
    end_date: datetime
    heart_rate_samples: list[HeartRateSample] = []
    active_energy_burned: float | None = None
    accelerometer_summary: AccelerometerSummary | None = None

    @property
    def duration_minutes(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / 60.0

    @property
    def average_heart_rate(self) -> float:
        if not self.heart_rate_samples:
            return 0.0
        return sum(s.beats_per_minute for s in self.heart_rate_samples) / len(self.heart_rate_samples)

    @property
    def max_heart_rate(self) -> float:
        return max((s.beats_per_minute for s in self.heart_rate_samples), default=0.0)


class UserBaseline(BaseModel):
    """Personal reference values, recomputed daily and superseded by the next computation."""
    model_config = ConfigDict(frozen=True)

    date: date_type
    hrv_baseline_7day: float
    rhr_baseline_7day: float
    sleep_need_minutes: float = 450.0
    max_heart_rate: float

    @property
    def sleep_need_hours(self) -> float:
        return self.sleep_need_minutes / 60.0

    @classmethod
    def default_for_age(cls, age: int, on: date_type | None = None) -> "UserBaseline":
        return cls(
            date=on or date_type.today(),
            hrv_baseline_7day=50.0,
            rhr_baseline_7day=60.0,
            sleep_need_minutes=450.0,
            max_heart_rate=float(220 - age),
        )
