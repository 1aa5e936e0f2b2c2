from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field

from strainlab.schemas.enums import ConfidenceLevel, FactorStatus, FactorType

SHORT_HEADLINE_MAX_CHARS = 40


class InsightFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: FactorType
    status: FactorStatus
    description: str


class DailyInsight(BaseModel):
    """Readiness summary for one day. Regenerated on every evaluation, never stored as state."""
    model_config = ConfigDict(frozen=True)

    date: date_type = Field(default_factory=date_type.today)
    headline: str
    recommendation: str
    confidence: ConfidenceLevel
    factors: list[InsightFactor] = []

    @property
    def short_headline(self) -> str:
        """Headline cut to fit small displays, truncated at a word boundary."""
        if len(self.headline) <= SHORT_HEADLINE_MAX_CHARS:
            return self.headline
        truncated = self.headline[:SHORT_HEADLINE_MAX_CHARS - 3]
        last_space = truncated.rfind(" ")
        if last_space != -1:
            return truncated[:last_space] + "..."
        return truncated + "..."

    @property
    def complication_text(self) -> str:
        hrv_status = next((f.status for f in self.factors if f.type == FactorType.HRV), None)

        if hrv_status == FactorStatus.POSITIVE:
            return "Ready to push"
        if hrv_status == FactorStatus.NEUTRAL and self.confidence == ConfidenceLevel.HIGH:
            return "Balanced day"
        if hrv_status == FactorStatus.NEGATIVE:
            return "Take it easy"
        if self.confidence == ConfidenceLevel.LOW:
            return "Collecting data"
        return "Check readiness"

    @classmethod
    def no_data(cls, on: date_type | None = None) -> "DailyInsight":
        return cls(
            date=on or date_type.today(),
            headline="Getting to know you",
            recommendation="Wear your watch to start collecting data",
            confidence=ConfidenceLevel.LOW,
        )

    @classmethod
    def calibrating(cls, days_remaining: int, on: date_type | None = None) -> "DailyInsight":
        return cls(
            date=on or date_type.today(),
            headline="Building your baseline",
            recommendation=f"Keep wearing your watch, {days_remaining} more days to personalize",
            confidence=ConfidenceLevel.LOW,
        )
