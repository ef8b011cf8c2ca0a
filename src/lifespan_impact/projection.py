"""Life expectancy projection."""

import structlog
from opentelemetry import trace

from .config import ProjectionSettings, get_settings
from .metrics import PROJECTIONS, PROJECTIONS_CLAMPED
from .models import ImpactSnapshot, LifeProjection, MetricType, UserProfile
from .mortality import MortalityAdjuster
from .risk.base import DAYS_PER_YEAR, MINUTES_PER_DAY

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

MINUTES_PER_YEAR = DAYS_PER_YEAR * MINUTES_PER_DAY


class ProjectionEngine:
    """Projects total life expectancy from a steady daily impact."""

    def __init__(
        self,
        mortality: MortalityAdjuster | None = None,
        settings: ProjectionSettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().projection
        self._mortality = mortality or MortalityAdjuster(projection_settings=self._settings)

    def project(
        self,
        profile: UserProfile,
        weighted_daily_impact: float,
        evidence_quality: float,
        metric_type: MetricType | None = None,
    ) -> LifeProjection:
        """Project life expectancy for a single daily impact rate.

        Args:
            profile: User profile.
            weighted_daily_impact: Evidence-weighted minutes per day.
            evidence_quality: Mean evidence reliability in [0, 1].
            metric_type: Metric whose decay rate applies; the aggregate
                rate is used when omitted.
        """
        with tracer.start_as_current_span("lifespan_impact.project") as span:
            age = self._mortality.age_of(profile)
            baseline = self._mortality.baseline_life_expectancy(profile)
            remaining = max(1.0, baseline - age)
            minutes = self._mortality.integrate_decayed_impact(
                weighted_daily_impact, remaining, self._mortality.decay_rate(metric_type)
            )
            span.set_attribute("projection.age", age)
            span.set_attribute("projection.remaining_years", remaining)
            return self._finish(age, baseline, minutes / MINUTES_PER_YEAR, evidence_quality)

    def project_snapshot(self, profile: UserProfile, snapshot: ImpactSnapshot) -> LifeProjection:
        """Project life expectancy from a snapshot, decaying each metric at its own rate."""
        with tracer.start_as_current_span("lifespan_impact.project_snapshot") as span:
            age = self._mortality.age_of(profile)
            baseline = self._mortality.baseline_life_expectancy(profile)
            remaining = max(1.0, baseline - age)
            minutes = sum(
                self._mortality.integrate_decayed_impact(
                    daily, remaining, self._mortality.decay_rate(metric_type)
                )
                for metric_type, daily in snapshot.contributions.items()
            )
            span.set_attribute("projection.age", age)
            span.set_attribute("projection.metric_count", len(snapshot.contributions))
            return self._finish(
                age, baseline, minutes / MINUTES_PER_YEAR, snapshot.evidence_quality_score
            )

    def _finish(
        self,
        age: int,
        baseline: float,
        impact_years: float,
        evidence_quality: float,
    ) -> LifeProjection:
        quality = max(0.0, min(1.0, evidence_quality))
        projected = baseline + impact_years * quality

        lower = age + 1.0
        upper = self._settings.max_age_years
        bounded = max(lower, min(upper, projected))
        if bounded != projected:
            bound = "lower" if bounded == lower else "upper"
            PROJECTIONS_CLAMPED.labels(bound=bound).inc()
            logger.info(
                "projection_clamped",
                bound=bound,
                projected=round(projected, 2),
                bounded=round(bounded, 2),
            )

        PROJECTIONS.inc()
        logger.debug(
            "projection_computed",
            age=age,
            baseline=round(baseline, 2),
            impact_years=round(impact_years, 3),
            evidence_quality=round(quality, 3),
            adjusted=round(bounded, 2),
        )
        return LifeProjection(
            baseline_expectancy_years=baseline,
            adjusted_expectancy_years=bounded,
            current_age=age,
            confidence_percentage=quality,
            confidence_interval_years=self._settings.confidence_interval_years,
        )
