"""Pytest configuration and fixtures."""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from lifespan_impact.config import reset_settings  # noqa: E402
from lifespan_impact.models import (  # noqa: E402
    Gender,
    HealthMetric,
    MetricSource,
    MetricType,
    UserProfile,
)


class FakeClock:
    """Controllable replacement for ``date.today``."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1) -> None:
        self.today += timedelta(days=days)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def clock(today):
    return FakeClock(today)


@pytest.fixture
def profile_40(today):
    """Forty-year-old male profile."""
    return UserProfile(birth_year=today.year - 40, gender=Gender.MALE)


@pytest.fixture
def female_profile_40(today):
    """Forty-year-old female profile."""
    return UserProfile(birth_year=today.year - 40, gender=Gender.FEMALE)


@pytest.fixture
def empty_profile():
    """Profile with every optional field missing."""
    return UserProfile()


def make_metric(
    metric_type: MetricType,
    value: float,
    timestamp: datetime | None = None,
    source: MetricSource = MetricSource.SENSOR,
) -> HealthMetric:
    """Helper to create test readings."""
    return HealthMetric(
        type=metric_type,
        value=value,
        timestamp=timestamp or datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc),
        source=source,
    )


@pytest.fixture
def metric_factory():
    """Factory for test readings."""
    return make_metric


@pytest.fixture
def sample_readings():
    """A typical day of readings."""
    return [
        make_metric(MetricType.STEPS, 8_500),
        make_metric(MetricType.EXERCISE_MINUTES, 25),
        make_metric(MetricType.SLEEP_HOURS, 7.5),
        make_metric(MetricType.RESTING_HEART_RATE, 70),
        make_metric(MetricType.HEART_RATE_VARIABILITY, 35),
        make_metric(MetricType.BODY_MASS, 180),
        make_metric(MetricType.STRESS_LEVEL, 4, source=MetricSource.MANUAL),
        make_metric(MetricType.SMOKING_STATUS, 10, source=MetricSource.MANUAL),
    ]
