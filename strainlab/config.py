from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from strainlab.schemas.enums import TrainingIntensity


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STRAINLAB_",
        case_sensitive=False,
    )

    # App
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # User defaults used until a personal baseline exists
    default_max_heart_rate: float = 190.0
    default_sleep_need_minutes: float = 450.0
    training_intensity: TrainingIntensity = TrainingIntensity.MODERATE

    # Optional YAML file overriding the scoring constants
    scoring_config_path: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
