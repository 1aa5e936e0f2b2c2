from datetime import date

import pytest

from factories import InMemoryScoreRepository, StaticHealthDataProvider
from strainlab.config import Settings
from strainlab.services.scoring_config import set_scoring_config


@pytest.fixture(autouse=True)
def reset_scoring_config():
    """Every test starts from the default scoring constants."""
    set_scoring_config(None)
    yield
    set_scoring_config(None)


@pytest.fixture
def target_date() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        default_max_heart_rate=190.0,
        default_sleep_need_minutes=450.0,
    )


@pytest.fixture
def repository() -> InMemoryScoreRepository:
    return InMemoryScoreRepository()


@pytest.fixture
def provider() -> StaticHealthDataProvider:
    return StaticHealthDataProvider()
