"""Baseline life expectancy, mortality weighting and behavior decay."""

import math
from collections.abc import Callable, Mapping
from datetime import date

import structlog

from .config import ProfileSettings, ProjectionSettings, get_settings
from .models import Gender, MetricType, UserProfile
from .risk import CURVES, MetricCurve
from .risk.base import DAYS_PER_YEAR, interpolate

logger = structlog.get_logger(__name__)

# Annual deaths per 100,000 at decade anchors
MORTALITY_RATES_PER_100K: Mapping[Gender, tuple[tuple[float, float], ...]] = {
    Gender.MALE: (
        (0, 4.5), (10, 0.15), (20, 0.75), (30, 1.2), (40, 2.0),
        (50, 4.5), (60, 11.0), (70, 25.0), (80, 60.0), (90, 150.0),
    ),
    Gender.FEMALE: (
        (0, 3.8), (10, 0.12), (20, 0.35), (30, 0.7), (40, 1.4),
        (50, 3.0), (60, 7.0), (70, 17.0), (80, 45.0), (90, 130.0),
    ),
}

# Remaining years of life at decade anchors
REMAINING_LIFE_YEARS: Mapping[Gender, tuple[tuple[float, float], ...]] = {
    Gender.MALE: (
        (0, 71.4), (10, 62.1), (20, 52.3), (30, 42.8), (40, 33.5),
        (50, 24.7), (60, 16.8), (70, 10.1), (80, 5.5), (90, 3.0),
    ),
    Gender.FEMALE: (
        (0, 76.8), (10, 67.4), (20, 57.5), (30, 47.7), (40, 38.1),
        (50, 28.8), (60, 20.1), (70, 12.5), (80, 6.8), (90, 3.5),
    ),
}

# Rates at or below this leave impacts untouched
BASELINE_MORTALITY_RATE = 0.001

BASE_CONFIDENCE_INTERVAL_YEARS = 2.0


class MortalityAdjuster:
    """Actuarial lookups and decay integration used by the projection.

    Gender falls back to the configured default when missing; users who
    prefer not to say get the mean of both tables.
    """

    def __init__(
        self,
        curves: Mapping[MetricType, MetricCurve] | None = None,
        profile_settings: ProfileSettings | None = None,
        projection_settings: ProjectionSettings | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        if profile_settings is None or projection_settings is None:
            settings = get_settings()
            profile_settings = profile_settings or settings.profile
            projection_settings = projection_settings or settings.projection
        self._curves = curves if curves is not None else CURVES
        self._profile_settings = profile_settings
        self._projection_settings = projection_settings
        self._clock = clock

    def _lookup(
        self,
        tables: Mapping[Gender, tuple[tuple[float, float], ...]],
        age: float,
        gender: Gender | None,
    ) -> float:
        if gender is None:
            gender = Gender(self._profile_settings.default_gender)
        if gender == Gender.PREFER_NOT_TO_SAY:
            male = interpolate(tables[Gender.MALE], age)
            female = interpolate(tables[Gender.FEMALE], age)
            return (male + female) / 2.0
        return interpolate(tables[gender], age)

    def age_of(self, profile: UserProfile) -> int:
        return profile.age_on(self._clock(), default=self._profile_settings.default_age)

    def remaining_life_expectancy(self, age: float, gender: Gender | None) -> float:
        """Expected remaining years of life at ``age``."""
        return self._lookup(REMAINING_LIFE_YEARS, age, gender)

    def baseline_life_expectancy(self, profile: UserProfile) -> float:
        """Expected total lifespan in years before any behavior adjustment."""
        age = self.age_of(profile)
        return age + self.remaining_life_expectancy(age, profile.gender)

    def annual_mortality_rate(self, age: float, gender: Gender | None) -> float:
        """Probability of dying within a year at ``age``."""
        return self._lookup(MORTALITY_RATES_PER_100K, age, gender) / 100_000.0

    def adjust_daily_impact(self, daily_minutes: float, age: float, gender: Gender | None) -> float:
        """Damp an impact by the square root of relative mortality risk.

        Above the baseline rate the impact shrinks in proportion to
        ``sqrt(baseline / rate)``; at or below it the impact is unchanged.
        """
        rate = self.annual_mortality_rate(age, gender)
        factor = BASELINE_MORTALITY_RATE / max(rate, BASELINE_MORTALITY_RATE)
        return daily_minutes * math.sqrt(factor)

    def decay_rate(self, metric_type: MetricType | None = None) -> float:
        """Yearly decay rate for a metric, or the aggregate rate for ``None``."""
        if metric_type is None:
            return self._projection_settings.aggregate_decay_rate
        return self._curves[metric_type].decay_rate

    def decay_factor(self, years_in_future: float, metric_type: MetricType | None = None) -> float:
        """Fraction of a behavior change still in effect after ``years_in_future``."""
        return math.exp(-self.decay_rate(metric_type) * max(0.0, years_in_future))

    def integrate_decayed_impact(
        self,
        daily_minutes: float,
        remaining_years: float,
        decay_rate: float,
    ) -> float:
        """Total minutes gained or lost over the horizon with decay applied.

        The horizon is cut into fixed windows; each window contributes its
        length in days times the daily rate decayed to the window midpoint.
        The last window may be shorter.
        """
        segment_years = self._projection_settings.segment_years
        total = 0.0
        elapsed = 0.0
        while elapsed < remaining_years:
            length = min(segment_years, remaining_years - elapsed)
            midpoint = elapsed + length / 2.0
            total += daily_minutes * math.exp(-decay_rate * midpoint) * length * DAYS_PER_YEAR
            elapsed += length
        return total

    def confidence_interval(self, baseline_years: float, age: float) -> tuple[float, float]:
        """Baseline interval that widens with age."""
        half_width = BASE_CONFIDENCE_INTERVAL_YEARS * (1.0 + age / 100.0)
        return baseline_years - half_width, baseline_years + half_width
