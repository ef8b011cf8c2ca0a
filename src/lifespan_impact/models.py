"""Data models for metrics, profiles and calculation results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from .config import ScalingPolicy

DEFAULT_AGE = 40
MAX_AGE = 119

# Impacts within this band (minutes/day) compare as "same"
NEUTRAL_BAND_MINUTES = 0.1


class MetricType(str, Enum):
    """Health metrics understood by the engine."""

    STEPS = "steps"
    EXERCISE_MINUTES = "exercise_minutes"
    SLEEP_HOURS = "sleep_hours"
    RESTING_HEART_RATE = "resting_heart_rate"
    HEART_RATE_VARIABILITY = "heart_rate_variability"
    BODY_MASS = "body_mass"
    ACTIVE_ENERGY_BURNED = "active_energy_burned"
    VO2_MAX = "vo2_max"
    OXYGEN_SATURATION = "oxygen_saturation"
    NUTRITION_QUALITY = "nutrition_quality"
    SMOKING_STATUS = "smoking_status"
    ALCOHOL_CONSUMPTION = "alcohol_consumption"
    SOCIAL_CONNECTIONS_QUALITY = "social_connections_quality"
    STRESS_LEVEL = "stress_level"

    @property
    def is_questionnaire(self) -> bool:
        """Whether the metric comes from the 1-10 lifestyle questionnaire."""
        return self in _QUESTIONNAIRE_METRICS


_QUESTIONNAIRE_METRICS = frozenset(
    {
        MetricType.NUTRITION_QUALITY,
        MetricType.SMOKING_STATUS,
        MetricType.ALCOHOL_CONSUMPTION,
        MetricType.SOCIAL_CONNECTIONS_QUALITY,
        MetricType.STRESS_LEVEL,
    }
)


class MetricSource(str, Enum):
    """Where a reading came from."""

    SENSOR = "sensor"
    MANUAL = "manual"
    DERIVED = "derived"


class Period(str, Enum):
    """Reporting period for impact totals."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @property
    def days(self) -> int:
        """Linear day multiplier for the period."""
        return _PERIOD_DAYS[self]


_PERIOD_DAYS = {Period.DAY: 1, Period.MONTH: 30, Period.YEAR: 365}


class Gender(str, Enum):
    """Gender as captured during onboarding."""

    MALE = "male"
    FEMALE = "female"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class Comparison(str, Enum):
    """How a metric compares to the reference population."""

    BETTER = "better"
    SAME = "same"
    WORSE = "worse"

    @classmethod
    def from_impact(cls, minutes: float, band: float = NEUTRAL_BAND_MINUTES) -> Comparison:
        """Classify a daily impact."""
        if minutes > band:
            return cls.BETTER
        if minutes < -band:
            return cls.WORSE
        return cls.SAME


class EvidenceStrength(str, Enum):
    """Reliability tier of the research behind a metric."""

    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"

    @property
    def weight(self) -> float:
        """Weight applied to impacts backed by this tier."""
        return _EVIDENCE_WEIGHTS[self]


_EVIDENCE_WEIGHTS = {
    EvidenceStrength.HIGH: 1.0,
    EvidenceStrength.MODERATE: 0.8,
    EvidenceStrength.LOW: 0.6,
}


class EffectType(str, Enum):
    """How a metric's benefit accumulates over time."""

    LINEAR = "linear"
    DIMINISHING = "diminishing"
    THRESHOLD = "threshold"
    PLATEAU = "plateau"
    EXPONENTIAL = "exponential"


class HealthMetric(BaseModel):
    """A single reading of a health metric."""

    model_config = ConfigDict(frozen=True)

    type: MetricType = Field(description="Metric type")
    value: float = Field(allow_inf_nan=False, description="Value in the metric's raw units")
    timestamp: datetime = Field(description="When the reading was taken")
    source: MetricSource = Field(default=MetricSource.SENSOR, description="Reading origin")


class UserProfile(BaseModel):
    """User attributes relevant to the calculations.

    Every field is optional; calculations fall back to defaults instead of
    failing on an incomplete profile.
    """

    model_config = ConfigDict(frozen=True)

    birth_year: int | None = Field(default=None, description="Year of birth")
    gender: Gender | None = Field(default=None, description="Gender")
    height: float | None = Field(default=None, description="Height in centimeters")
    weight: float | None = Field(default=None, description="Weight in pounds")
    is_subscribed: bool = False
    has_completed_onboarding: bool = False
    has_completed_questionnaire: bool = False

    def age_on(self, on: date | None = None, default: int = DEFAULT_AGE) -> int:
        """Age in whole years on the given day, or ``default`` if unknown."""
        if self.birth_year is None:
            return default
        year = (on or date.today()).year
        return max(0, min(MAX_AGE, year - self.birth_year))

    @property
    def age(self) -> int:
        return self.age_on()


@dataclass(frozen=True)
class MetricImpactDetail:
    """Per-metric result of one calculation pass."""

    metric_type: MetricType
    raw_value: float
    clamped_value: float
    daily_impact_minutes: float
    comparison: Comparison
    evidence_strength: EvidenceStrength

    @property
    def was_clamped(self) -> bool:
        return self.raw_value != self.clamped_value


@dataclass(frozen=True)
class ImpactSnapshot:
    """Aggregate impact for a period.

    ``contributions`` holds the evidence-weighted daily minutes per metric and
    ``period_multipliers`` the day multiplier the scaling policy assigned to
    each of them. Totals are always derived from those two maps.
    """

    period: Period
    scaling_policy: ScalingPolicy
    contributions: Mapping[MetricType, float]
    period_multipliers: Mapping[MetricType, float]
    evidence_quality_score: float
    details: tuple[MetricImpactDetail, ...] = ()
    effect_types: Mapping[MetricType, EffectType] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = set(self.contributions) - set(self.period_multipliers)
        if missing:
            raise ValueError(f"No period multiplier for: {sorted(m.value for m in missing)}")
        object.__setattr__(self, "contributions", MappingProxyType(dict(self.contributions)))
        object.__setattr__(
            self, "period_multipliers", MappingProxyType(dict(self.period_multipliers))
        )
        object.__setattr__(self, "effect_types", MappingProxyType(dict(self.effect_types)))

    @property
    def daily_total_minutes(self) -> float:
        """Weighted daily impact summed over all metrics."""
        return sum(self.contributions.values())

    @property
    def scaled_contributions(self) -> dict[MetricType, float]:
        """Per-metric contribution over the whole period."""
        return {
            metric: minutes * self.period_multipliers[metric]
            for metric, minutes in self.contributions.items()
        }

    @property
    def total_impact_minutes(self) -> float:
        """Period total: scaled contributions summed."""
        return sum(self.scaled_contributions.values())

    def detail_for(self, metric_type: MetricType) -> MetricImpactDetail | None:
        for detail in self.details:
            if detail.metric_type == metric_type:
                return detail
        return None


@dataclass(frozen=True)
class LifeProjection:
    """Projected total life expectancy."""

    baseline_expectancy_years: float
    adjusted_expectancy_years: float
    current_age: int
    confidence_percentage: float
    confidence_interval_years: float

    @property
    def net_impact_years(self) -> float:
        return self.adjusted_expectancy_years - self.baseline_expectancy_years

    @property
    def remaining_years(self) -> float:
        return max(0.0, self.adjusted_expectancy_years - self.current_age)

    @property
    def lower_bound_years(self) -> float:
        return self.adjusted_expectancy_years - self.confidence_interval_years

    @property
    def upper_bound_years(self) -> float:
        return self.adjusted_expectancy_years + self.confidence_interval_years


class DailyTarget(BaseModel):
    """A cached recommendation for one metric and period on one day."""

    model_config = ConfigDict(frozen=True)

    metric_type: MetricType
    period: Period
    target_value: float
    original_current_value: float
    original_benefit_minutes: float
    calculation_date: date
    algorithm_version: int
    approximate: bool = Field(
        default=False, description="Search hit its budget and returned a boundary"
    )

    def is_valid(self, today: date, algorithm_version: int) -> bool:
        """Whether the entry can still be served."""
        return self.calculation_date == today and self.algorithm_version == algorithm_version

    def remaining_amount(self, current_value: float) -> float:
        """Signed distance from ``current_value`` to the target."""
        return self.target_value - current_value


@dataclass(frozen=True)
class TargetProgress:
    """Live view of a target against the latest reading."""

    target: DailyTarget
    current_value: float
    benefit_minutes: float

    @property
    def remaining_amount(self) -> float:
        return self.target.remaining_amount(self.current_value)

    @property
    def is_reached(self) -> bool:
        """Whether the current value has moved past the target."""
        if self.target.target_value >= self.target.original_current_value:
            return self.current_value >= self.target.target_value
        return self.current_value <= self.target.target_value


@dataclass(frozen=True)
class StudyReference:
    """Research metadata backing a metric's curve."""

    citation: str
    sample_size: int
    follow_up_years: float
    study_type: str
    reliability: EvidenceStrength
    effect_summary: str = ""
