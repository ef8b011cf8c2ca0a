"""Orchestrates per-metric impacts into a period snapshot."""

import time
from collections.abc import Iterable
from dataclasses import replace

import structlog
from opentelemetry import trace

from .config import ScalingPolicy
from .evidence import reliability_weight
from .interactions import InteractionEffectEngine
from .metrics import IMPACT_CALCULATION_DURATION, IMPACT_CALCULATIONS
from .models import (
    Comparison,
    HealthMetric,
    ImpactSnapshot,
    MetricImpactDetail,
    MetricType,
    Period,
    UserProfile,
)
from .mortality import MortalityAdjuster
from .risk import MetricRiskModel
from .scaling import PeriodScaler

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


def latest_readings(metrics: Iterable[HealthMetric]) -> dict[MetricType, HealthMetric]:
    """Keep the most recent reading of each metric type.

    Readings with equal timestamps resolve to the one listed last.
    """
    latest: dict[MetricType, HealthMetric] = {}
    for metric in metrics:
        current = latest.get(metric.type)
        if current is None or metric.timestamp >= current.timestamp:
            latest[metric.type] = metric
    return latest


class AggregationEngine:
    """Runs the impact pipeline for a set of readings.

    Order is fixed: risk curve, interactions, mortality weighting, evidence
    weighting, summation, period scaling. Summation and scaling are carried
    by the returned snapshot, whose totals are derived on access.
    """

    def __init__(
        self,
        risk_model: MetricRiskModel | None = None,
        interactions: InteractionEffectEngine | None = None,
        mortality: MortalityAdjuster | None = None,
        scaler: PeriodScaler | None = None,
    ) -> None:
        self._risk_model = risk_model or MetricRiskModel()
        self._interactions = interactions or InteractionEffectEngine()
        self._mortality = mortality or MortalityAdjuster(curves=self._risk_model.curves)
        self._scaler = scaler or PeriodScaler(curves=self._risk_model.curves)

    @property
    def scaler(self) -> PeriodScaler:
        return self._scaler

    def compute_impact(
        self,
        metrics: Iterable[HealthMetric],
        period: Period,
        profile: UserProfile,
        policy: ScalingPolicy | None = None,
    ) -> ImpactSnapshot:
        """Compute the impact snapshot for ``period``.

        Args:
            metrics: Readings to evaluate; only the latest per type is used.
            period: Reporting period.
            profile: User profile.
            policy: Scaling policy; defaults to the configured one.

        Returns:
            Immutable snapshot of the weighted contributions.
        """
        policy = policy or self._scaler.policy
        started = time.perf_counter()

        with tracer.start_as_current_span("lifespan_impact.compute_impact") as span:
            readings = latest_readings(metrics)
            span.set_attribute("impact.period", period.value)
            span.set_attribute("impact.policy", policy.value)
            span.set_attribute("impact.metric_count", len(readings))

            details = {
                metric_type: self._risk_model.evaluate(metric_type, reading.value, profile)
                for metric_type, reading in readings.items()
            }
            clamped = {metric_type: d.clamped_value for metric_type, d in details.items()}
            impacts = {metric_type: d.daily_impact_minutes for metric_type, d in details.items()}

            adjusted = self._interactions.adjust(impacts, clamped)

            age = self._risk_model.age_of(profile)
            weighted: dict[MetricType, float] = {}
            final_details: list[MetricImpactDetail] = []
            weights: list[float] = []
            for metric_type, minutes in adjusted.items():
                minutes = self._mortality.adjust_daily_impact(minutes, age, profile.gender)
                weight = reliability_weight(metric_type)
                weights.append(weight)
                weighted[metric_type] = minutes * weight
                final_details.append(
                    replace(
                        details[metric_type],
                        daily_impact_minutes=minutes,
                        comparison=Comparison.from_impact(minutes),
                    )
                )

            evidence_quality = sum(weights) / len(weights) if weights else 0.0
            snapshot = ImpactSnapshot(
                period=period,
                scaling_policy=policy,
                contributions=weighted,
                period_multipliers={
                    metric_type: self._scaler.multiplier_for(metric_type, period, policy)
                    for metric_type in weighted
                },
                evidence_quality_score=evidence_quality,
                details=tuple(final_details),
                effect_types={
                    metric_type: self._scaler.effect_type(metric_type) for metric_type in weighted
                },
            )
            span.set_attribute("impact.total_minutes", snapshot.total_impact_minutes)

        IMPACT_CALCULATIONS.labels(period=period.value, policy=policy.value).inc()
        IMPACT_CALCULATION_DURATION.observe(time.perf_counter() - started)
        logger.debug(
            "impact_computed",
            period=period.value,
            policy=policy.value,
            metrics=len(weighted),
            daily_total=round(snapshot.daily_total_minutes, 2),
            total=round(snapshot.total_impact_minutes, 2),
            evidence_quality=round(evidence_quality, 3),
        )
        return snapshot
