"""Research-optimal reference readings for best-case projections."""

from datetime import datetime, timezone

from .models import Gender, HealthMetric, MetricSource, MetricType

# Attainable healthy values, not curve maxima
OPTIMAL_VALUES: dict[MetricType, float] = {
    MetricType.STEPS: 12_000.0,
    MetricType.EXERCISE_MINUTES: 45.0,
    MetricType.SLEEP_HOURS: 7.5,
    MetricType.RESTING_HEART_RATE: 55.0,
    MetricType.SMOKING_STATUS: 10.0,
    MetricType.ALCOHOL_CONSUMPTION: 9.0,
    MetricType.STRESS_LEVEL: 2.0,
    MetricType.NUTRITION_QUALITY: 9.0,
    MetricType.SOCIAL_CONNECTIONS_QUALITY: 8.0,
    MetricType.ACTIVE_ENERGY_BURNED: 600.0,
    MetricType.OXYGEN_SATURATION: 98.0,
}


def optimal_hrv(age: int) -> float:
    """Excellent HRV for the age, in milliseconds."""
    return max(50.0, 60.0 - (age - 30) * 0.5)


def optimal_body_mass(gender: Gender | None) -> float:
    """Healthy body mass in pounds."""
    return 135.0 if gender == Gender.FEMALE else 155.0


def optimal_vo2_max(age: int, gender: Gender | None) -> float:
    """Age and gender adjusted VO2max."""
    multiplier = 0.88 if gender == Gender.FEMALE else 1.0
    return max(50.0 * multiplier - max(0, age - 30) * 0.3, 35.0 * multiplier)


def optimal_metrics(
    age: int,
    gender: Gender | None,
    timestamp: datetime | None = None,
) -> list[HealthMetric]:
    """Build a full set of optimal readings for a user.

    Args:
        age: User age in years.
        gender: User gender; missing or undisclosed uses male references.
        timestamp: Timestamp stamped on every reading, defaulting to now.

    Returns:
        One derived reading per metric type.
    """
    when = timestamp or datetime.now(timezone.utc)
    values = dict(OPTIMAL_VALUES)
    values[MetricType.HEART_RATE_VARIABILITY] = optimal_hrv(age)
    values[MetricType.BODY_MASS] = optimal_body_mass(gender)
    values[MetricType.VO2_MAX] = optimal_vo2_max(age, gender)
    return [
        HealthMetric(type=metric_type, value=value, timestamp=when, source=MetricSource.DERIVED)
        for metric_type, value in values.items()
    ]
