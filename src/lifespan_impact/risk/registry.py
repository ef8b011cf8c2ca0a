"""Curve registry and the per-metric risk model."""

from collections.abc import Callable, Iterable, Mapping
from datetime import date
from types import MappingProxyType

import structlog

from ..config import ProfileSettings, get_settings
from ..evidence import evidence_strength
from ..metrics import VALUES_CLAMPED
from ..models import Comparison, MetricImpactDetail, MetricType, UserProfile
from .activity import ACTIVITY_CURVES
from .base import ConfigurationError, MetricCurve
from .cardiovascular import CARDIOVASCULAR_CURVES
from .lifestyle import LIFESTYLE_CURVES

logger = structlog.get_logger(__name__)


def build_curve_table(curves: Iterable[MetricCurve]) -> Mapping[MetricType, MetricCurve]:
    """Index curves by metric type, validating each entry.

    Raises:
        ConfigurationError: If a curve is malformed, duplicated or missing.
    """
    table: dict[MetricType, MetricCurve] = {}
    for curve in curves:
        if curve.metric_type in table:
            raise ConfigurationError(f"Duplicate curve for {curve.metric_type.value}")
        curve.validate()
        table[curve.metric_type] = curve

    missing = set(MetricType) - set(table)
    if missing:
        raise ConfigurationError(
            f"No curve configured for: {', '.join(sorted(m.value for m in missing))}"
        )
    return MappingProxyType(table)


CURVES = build_curve_table((*ACTIVITY_CURVES, *CARDIOVASCULAR_CURVES, *LIFESTYLE_CURVES))


class MetricRiskModel:
    """Converts a raw metric reading into daily lifespan minutes.

    Every reading is clamped into its metric's domain before the curve is
    evaluated, so the model never fails on out-of-range input.
    """

    def __init__(
        self,
        curves: Mapping[MetricType, MetricCurve] | None = None,
        profile_settings: ProfileSettings | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._curves = curves if curves is not None else CURVES
        self._profile_settings = profile_settings or get_settings().profile
        self._clock = clock

    @property
    def curves(self) -> Mapping[MetricType, MetricCurve]:
        return self._curves

    def curve(self, metric_type: MetricType) -> MetricCurve:
        return self._curves[metric_type]

    def age_of(self, profile: UserProfile) -> int:
        return profile.age_on(self._clock(), default=self._profile_settings.default_age)

    def clamp(self, metric_type: MetricType, raw_value: float) -> tuple[float, bool]:
        """Clamp a reading into its domain.

        Returns:
            Tuple of (clamped_value, was_clamped).
        """
        clamped = self._curves[metric_type].clamp(raw_value)
        was_clamped = clamped != raw_value
        if was_clamped:
            curve = self._curves[metric_type]
            VALUES_CLAMPED.labels(metric_type=metric_type.value).inc()
            logger.debug(
                "metric_value_clamped",
                metric_type=metric_type.value,
                value=raw_value,
                clamped=clamped,
                lo=curve.lower,
                hi=curve.upper,
            )
        return clamped, was_clamped

    def impact_at(self, metric_type: MetricType, value: float, age: int) -> float:
        """Daily minutes for an already clamped value at a known age."""
        return self._curves[metric_type].strategy.daily_minutes(
            value, age, self._profile_settings.reference_expectancy_years
        )

    def compute_daily_impact(
        self, metric_type: MetricType, raw_value: float, profile: UserProfile
    ) -> float:
        """Daily lifespan impact in minutes for one reading."""
        clamped, _ = self.clamp(metric_type, raw_value)
        return self.impact_at(metric_type, clamped, self.age_of(profile))

    def evaluate(
        self, metric_type: MetricType, raw_value: float, profile: UserProfile
    ) -> MetricImpactDetail:
        """Compute the impact along with clamping and comparison details."""
        clamped, _ = self.clamp(metric_type, raw_value)
        minutes = self.impact_at(metric_type, clamped, self.age_of(profile))
        return MetricImpactDetail(
            metric_type=metric_type,
            raw_value=raw_value,
            clamped_value=clamped,
            daily_impact_minutes=minutes,
            comparison=Comparison.from_impact(minutes),
            evidence_strength=evidence_strength(metric_type),
        )
