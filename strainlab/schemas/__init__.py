# Pydantic records exchanged with collaborators
from strainlab.schemas.guidance import (
    BaselineStatus,
    DataQuality,
    SleepConsistency,
    SleepDebt,
    StrainGuidance,
)
from strainlab.schemas.insight import DailyInsight, InsightFactor
from strainlab.schemas.samples import (
    AccelerometerSummary,
    HeartRateSample,
    HRVSample,
    SleepSession,
    SleepStage,
    UserBaseline,
    WorkoutSession,
)
from strainlab.schemas.scores import (
    RecoveryComponents,
    RecoveryScore,
    SleepComponents,
    SleepScore,
    StrainComponents,
    StrainScore,
    WorkoutContribution,
    ZoneMinutes,
)

__all__ = [
    "AccelerometerSummary",
    "BaselineStatus",
    "DailyInsight",
    "DataQuality",
    "HeartRateSample",
    "HRVSample",
    "InsightFactor",
    "RecoveryComponents",
    "RecoveryScore",
    "SleepComponents",
    "SleepConsistency",
    "SleepDebt",
    "SleepScore",
    "SleepSession",
    "SleepStage",
    "StrainComponents",
    "StrainGuidance",
    "StrainScore",
    "UserBaseline",
    "WorkoutContribution",
    "WorkoutSession",
    "ZoneMinutes",
]
