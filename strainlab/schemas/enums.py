from enum import Enum


class SampleSource(str, Enum):
    WATCH = "watch"
    MANUAL = "manual"


class SleepStageType(str, Enum):
    AWAKE = "awake"
    REM = "rem"
    CORE = "core"
    DEEP = "deep"
    IN_BED = "in_bed"
    ASLEEP_UNSPECIFIED = "asleep_unspecified"


class WorkoutActivityType(str, Enum):
    RUNNING = "Running"
    CYCLING = "Cycling"
    SWIMMING = "Swimming"
    WALKING = "Walking"
    HIKING = "Hiking"
    STRENGTH = "Strength Training"
    YOGA = "Yoga"
    HIIT = "HIIT"
    CROSS_TRAINING = "Cross Training"
    OTHER = "Other"


# Recovery category cut-offs (score is 0-100)
RECOVERY_OPTIMAL_MIN = 67.0
RECOVERY_MODERATE_MIN = 34.0

# Strain category cut-offs (score is 0-21)
STRAIN_ALL_OUT_MIN = 18.0
STRAIN_HIGH_MIN = 14.0
STRAIN_MODERATE_MIN = 10.0


class RecoveryCategory(str, Enum):
    POOR = "poor"
    MODERATE = "moderate"
    OPTIMAL = "optimal"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_score(cls, score: float) -> "RecoveryCategory":
        if score >= RECOVERY_OPTIMAL_MIN:
            return cls.OPTIMAL
        elif score >= RECOVERY_MODERATE_MIN:
            return cls.MODERATE
        return cls.POOR


class StrainCategory(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HIGH = "high"
    ALL_OUT = "all_out"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_score(cls, score: float) -> "StrainCategory":
        if score >= STRAIN_ALL_OUT_MIN:
            return cls.ALL_OUT
        elif score >= STRAIN_HIGH_MIN:
            return cls.HIGH
        elif score >= STRAIN_MODERATE_MIN:
            return cls.MODERATE
        return cls.LIGHT


class TrainingIntensity(str, Enum):
    """User preference for training intensity."""
    LIGHT = "light"
    MODERATE = "moderate"
    INTENSE = "intense"
    VERY_INTENSE = "very_intense"


class WeeklyLoadStatus(str, Enum):
    UNDER_LOADED = "under_loaded"
    OPTIMAL = "optimal"
    BUILDING = "building"
    PEAKING = "peaking"
    OVER_REACHING = "over_reaching"
    DELOADING = "deloading"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return WEEKLY_LOAD_DESCRIPTIONS[self]


WEEKLY_LOAD_DESCRIPTIONS: dict[WeeklyLoadStatus, str] = {
    WeeklyLoadStatus.UNDER_LOADED: "Training volume is below target",
    WeeklyLoadStatus.OPTIMAL: "Training load is well balanced",
    WeeklyLoadStatus.BUILDING: "Progressively increasing load",
    WeeklyLoadStatus.PEAKING: "High training volume phase",
    WeeklyLoadStatus.OVER_REACHING: "Consider reducing intensity",
    WeeklyLoadStatus.DELOADING: "Recovery-focused phase",
    WeeklyLoadStatus.UNKNOWN: "Building training history",
}


class TargetStatus(str, Enum):
    BELOW_TARGET = "below_target"
    IN_RANGE = "in_range"
    ABOVE_TARGET = "above_target"


class SleepDebtTrend(str, Enum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class SleepDebtSeverity(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    SEVERE = "severe"


class ConsistencyRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    INSUFFICIENT = "insufficient"


class BaselinePhase(str, Enum):
    INITIAL = "initial"  # 0-6 days
    CALIBRATING = "calibrating"  # 7-13 days
    ESTABLISHED = "established"  # 14-27 days
    REFINED = "refined"  # 28-59 days
    MATURE = "mature"  # 60+ days


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class FactorType(str, Enum):
    HRV = "hrv"
    RHR = "rhr"
    SLEEP = "sleep"
    STRAIN = "strain"


class FactorStatus(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


# Target average daily strain per intensity preference
TRAINING_INTENSITY_TARGET_STRAIN: dict[TrainingIntensity, float] = {
    TrainingIntensity.LIGHT: 8.0,
    TrainingIntensity.MODERATE: 11.0,
    TrainingIntensity.INTENSE: 14.0,
    TrainingIntensity.VERY_INTENSE: 16.0,
}

# Shift applied to both bounds of the recommended strain range
TRAINING_INTENSITY_RANGE_SHIFT: dict[TrainingIntensity, float] = {
    TrainingIntensity.LIGHT: -2.0,
    TrainingIntensity.MODERATE: 0.0,
    TrainingIntensity.INTENSE: 2.0,
    TrainingIntensity.VERY_INTENSE: 3.0,
}

# Base recommended strain range per recovery category
RECOVERY_STRAIN_RANGE: dict[RecoveryCategory, tuple[float, float]] = {
    RecoveryCategory.OPTIMAL: (14.0, 18.0),
    RecoveryCategory.MODERATE: (10.0, 14.0),
    RecoveryCategory.POOR: (4.0, 8.0),
}
