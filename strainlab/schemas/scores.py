from datetime import date as date_type, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from strainlab.schemas.enums import RecoveryCategory, StrainCategory, WorkoutActivityType


def format_hours_minutes(minutes: float) -> str:
    """Render minutes as e.g. "7h 30m", or "45m" when under an hour."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


class RecoveryComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    hrv_deviation: float = Field(..., description="Percent deviation of HRV from baseline")
    rhr_deviation: float = Field(..., description="Percent deviation of RHR from baseline")
    sleep_quality: float
    hrv_baseline: float
    rhr_baseline: float
    current_hrv: float
    current_rhr: float


class RecoveryScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date_type
    score: float = Field(..., ge=0, le=100)
    category: RecoveryCategory
    components: RecoveryComponents

    @property
    def formatted_score(self) -> str:
        return f"{int(self.score)}%"

    @property
    def explanation(self) -> str:
        parts = []
        c = self.components

        if c.hrv_deviation > 5:
            parts.append("Your HRV is above your baseline, indicating good recovery.")
        elif c.hrv_deviation < -5:
            parts.append("Your HRV is below your baseline, suggesting your body needs more recovery.")
        else:
            parts.append("Your HRV is close to your baseline.")

        if c.rhr_deviation < -3:
            parts.append("Your resting heart rate is lower than usual, a positive recovery sign.")
        elif c.rhr_deviation > 3:
            parts.append("Your resting heart rate is elevated, which may indicate incomplete recovery.")

        if c.sleep_quality >= 80:
            parts.append("Your sleep quality was excellent last night.")
        elif c.sleep_quality >= 60:
            parts.append("Your sleep quality was moderate last night.")
        else:
            parts.append("Your sleep quality was below optimal last night.")

        return " ".join(parts)


class ZoneMinutes(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone1: float = 0.0
    zone2: float = 0.0
    zone3: float = 0.0
    zone4: float = 0.0
    zone5: float = 0.0

    @property
    def total_minutes(self) -> float:
        return self.zone1 + self.zone2 + self.zone3 + self.zone4 + self.zone5

    def as_list(self) -> list[float]:
        return [self.zone1, self.zone2, self.zone3, self.zone4, self.zone5]


class WorkoutContribution(BaseModel):
    model_config = ConfigDict(frozen=True)

    workout_id: UUID
    activity_type: WorkoutActivityType
    strain_contribution: float


class StrainComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    activity_minutes: float = 0.0
    zone_minutes: ZoneMinutes = ZoneMinutes()
    workout_contributions: list[WorkoutContribution] = []


class StrainScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date_type
    score: float = Field(..., ge=0, le=21)
    category: StrainCategory
    components: StrainComponents = StrainComponents()

    @property
    def formatted_score(self) -> str:
        return f"{self.score:.1f}"

    @property
    def explanation(self) -> str:
        parts = [f"Today's strain is {self.formatted_score} out of 21."]

        if self.category == StrainCategory.LIGHT:
            parts.append("This is a light day, ideal for recovery.")
        elif self.category == StrainCategory.MODERATE:
            parts.append("This is moderate activity, good for building fitness.")
        elif self.category == StrainCategory.HIGH:
            parts.append("This is high strain, ensure you recover properly.")
        else:
            parts.append("This is maximum effort. Prioritize recovery tomorrow.")

        zone5 = self.components.zone_minutes.zone5
        if zone5 > 0:
            parts.append(f"You spent {int(zone5)} minutes in your peak heart rate zone.")

        return " ".join(parts)


class SleepComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration_score: float
    efficiency_score: float
    stage_score: float
    total_duration_minutes: float
    sleep_need_minutes: float
    efficiency: float
    deep_sleep_minutes: float
    rem_sleep_minutes: float

    @property
    def total_hours(self) -> float:
        return self.total_duration_minutes / 60.0

    @property
    def sleep_need_hours(self) -> float:
        return self.sleep_need_minutes / 60.0

    @property
    def formatted_duration(self) -> str:
        hours = int(self.total_duration_minutes // 60)
        minutes = int(self.total_duration_minutes % 60)
        return f"{hours}h {minutes}m"


class SleepScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date_type
    score: float = Field(..., ge=0, le=100)
    components: SleepComponents
    # Session bounds, kept so timing consistency can be derived from score history
    sleep_start: datetime | None = None
    sleep_end: datetime | None = None

    @property
    def formatted_score(self) -> str:
        return f"{int(self.score)}%"

    @property
    def category(self) -> str:
        if self.score >= 85:
            return "Excellent"
        elif self.score >= 70:
            return "Good"
        elif self.score >= 50:
            return "Fair"
        return "Poor"

    @property
    def explanation(self) -> str:
        c = self.components
        parts = []

        need_hours = f"{c.sleep_need_hours:.1f}"
        if c.sleep_need_minutes > 0 and c.total_duration_minutes / c.sleep_need_minutes >= 0.95:
            parts.append(f"You met your sleep need of {need_hours} hours.")
        else:
            deficit = c.sleep_need_minutes - c.total_duration_minutes
            parts.append(f"You were {int(deficit)} minutes short of your {need_hours} hour sleep need.")

        efficiency_percent = c.efficiency * 100
        if efficiency_percent >= 90:
            parts.append(f"Your sleep efficiency was excellent at {int(efficiency_percent)}%.")
        elif efficiency_percent >= 80:
            parts.append(f"Your sleep efficiency was good at {int(efficiency_percent)}%.")
        else:
            parts.append(f"Your sleep efficiency was {int(efficiency_percent)}%, indicating restless sleep.")

        return " ".join(parts)
