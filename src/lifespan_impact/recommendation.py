"""Target values that neutralize or improve a metric's impact."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

import structlog
from opentelemetry import trace
from pydantic import ValidationError

from .cache import TargetCache
from .config import RecommendationSettings, get_settings
from .interactions import InteractionEffectEngine
from .metrics import (
    TARGET_CACHE_HITS,
    TARGET_CACHE_MISSES,
    TARGET_CACHE_STALE,
    TARGET_SEARCH_ITERATIONS,
    TARGET_SEARCH_NOT_CONVERGED,
)
from .models import DailyTarget, MetricType, Period, TargetProgress, UserProfile
from .mortality import MortalityAdjuster
from .risk import MetricRiskModel
from .scaling import PeriodScaler
from .tracing import annotate_span
from .types import RawMetricMap

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Bump whenever a curve, interaction or search change alters targets
ALGORITHM_VERSION = 1

# Engines sharing a cache share its key locks
_KEY_LOCKS: dict[tuple[int, str], threading.Lock] = {}
_KEY_LOCKS_GUARD = threading.Lock()


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a neutral-point search."""

    value: float
    iterations: int
    converged: bool


def cache_key(metric_type: MetricType, period: Period) -> str:
    return f"daily_target:{metric_type.value}:{period.value}"


class RecommendationEngine:
    """Finds per-metric targets and serves them through a daily cache.

    Search runs on the composed impact function (risk curve, interactions
    with the other readings held fixed, mortality weighting). Curves are not
    globally monotonic, so the search is confined to the branch between the
    current value and the curve's optimum, where they are.

    Cache keys are locked per cache object, so engines built over the same
    cache never compute the same daily target twice.
    """

    def __init__(
        self,
        cache: TargetCache,
        risk_model: MetricRiskModel | None = None,
        interactions: InteractionEffectEngine | None = None,
        mortality: MortalityAdjuster | None = None,
        scaler: PeriodScaler | None = None,
        settings: RecommendationSettings | None = None,
        clock: Callable[[], date] = date.today,
        algorithm_version: int = ALGORITHM_VERSION,
    ) -> None:
        self._cache = cache
        self._risk_model = risk_model or MetricRiskModel(clock=clock)
        self._interactions = interactions or InteractionEffectEngine()
        self._mortality = mortality or MortalityAdjuster(
            curves=self._risk_model.curves, clock=clock
        )
        self._scaler = scaler or PeriodScaler(curves=self._risk_model.curves)
        self._settings = settings or get_settings().recommendation
        self._clock = clock
        self._algorithm_version = algorithm_version

    @property
    def algorithm_version(self) -> int:
        return self._algorithm_version

    def daily_impact(
        self,
        metric_type: MetricType,
        value: float,
        profile: UserProfile,
        context: RawMetricMap | None = None,
    ) -> float:
        """Composed daily impact of ``value`` with ``context`` held fixed."""
        clamped, _ = self._risk_model.clamp(metric_type, value)
        age = self._risk_model.age_of(profile)
        impact = self._risk_model.impact_at(metric_type, clamped, age)
        if context:
            readings = {
                other: self._risk_model.curve(other).clamp(reading)
                for other, reading in context.items()
                if other != metric_type
            }
            readings[metric_type] = clamped
            impact = self._interactions.adjust({metric_type: impact}, readings)[metric_type]
        return self._mortality.adjust_daily_impact(impact, age, profile.gender)

    def find_target(
        self,
        metric_type: MetricType,
        current_value: float,
        period: Period,
        profile: UserProfile,
        context: RawMetricMap | None = None,
    ) -> DailyTarget:
        """Return today's target for a metric, computing it on a cache miss.

        Args:
            metric_type: Metric to recommend a target for.
            current_value: Latest raw reading.
            period: Period the benefit is reported over.
            profile: User profile.
            context: Latest readings of other metrics for interaction effects.

        Returns:
            A target valid for today under the current algorithm version.
        """
        key = cache_key(metric_type, period)
        with tracer.start_as_current_span("lifespan_impact.find_target") as span:
            span.set_attribute("target.metric_type", metric_type.value)
            span.set_attribute("target.period", period.value)
            with self._key_lock(key):
                today = self._clock()
                cached = self._read_cached(key, today)
                if cached is not None:
                    span.set_attribute("target.cache_hit", True)
                    return cached

                span.set_attribute("target.cache_hit", False)
                target = self._compute_target(
                    metric_type, current_value, period, profile, context, today
                )
                self._cache.set(key, target.model_dump_json())
                span.set_attribute("target.approximate", target.approximate)
                return target

    def benefit(
        self,
        target: DailyTarget,
        current_value: float,
        profile: UserProfile,
        context: RawMetricMap | None = None,
    ) -> float:
        """Period-scaled minutes still to gain by moving from ``current_value`` to the target.

        Never negative; a user past the target has nothing left to gain.
        """
        delta = self.daily_impact(
            target.metric_type, target.target_value, profile, context
        ) - self.daily_impact(target.metric_type, current_value, profile, context)
        return max(0.0, self._scaler.scale(delta, target.metric_type, target.period))

    def progress(
        self,
        metric_type: MetricType,
        current_value: float,
        period: Period,
        profile: UserProfile,
        context: RawMetricMap | None = None,
    ) -> TargetProgress:
        """Today's target with its benefit recomputed from the live reading."""
        target = self.find_target(metric_type, current_value, period, profile, context)
        return TargetProgress(
            target=target,
            current_value=current_value,
            benefit_minutes=self.benefit(target, current_value, profile, context),
        )

    def invalidate(self, metric_type: MetricType, period: Period) -> None:
        """Drop a cached target so the next request recomputes it."""
        key = cache_key(metric_type, period)
        with self._key_lock(key):
            self._cache.delete(key)

    def _key_lock(self, key: str) -> threading.Lock:
        with _KEY_LOCKS_GUARD:
            return _KEY_LOCKS.setdefault((id(self._cache), key), threading.Lock())

    def _read_cached(self, key: str, today: date) -> DailyTarget | None:
        payload = self._cache.get(key)
        if payload is None:
            TARGET_CACHE_MISSES.inc()
            return None

        try:
            target = DailyTarget.model_validate_json(payload)
        except ValidationError as e:
            TARGET_CACHE_STALE.labels(reason="unreadable").inc()
            logger.warning("daily_target_unreadable", key=key, error=str(e))
            return None

        if target.calculation_date != today:
            reason = "date"
        elif target.algorithm_version != self._algorithm_version:
            reason = "version"
        else:
            TARGET_CACHE_HITS.inc()
            return target

        TARGET_CACHE_STALE.labels(reason=reason).inc()
        logger.info(
            "daily_target_stale",
            key=key,
            reason=reason,
            calculation_date=target.calculation_date.isoformat(),
            algorithm_version=target.algorithm_version,
        )
        return None

    def _compute_target(
        self,
        metric_type: MetricType,
        current_value: float,
        period: Period,
        profile: UserProfile,
        context: RawMetricMap | None,
        today: date,
    ) -> DailyTarget:
        current, _ = self._risk_model.clamp(metric_type, current_value)
        current_impact = self.daily_impact(metric_type, current, profile, context)

        if current_impact < 0:
            result = self.search_neutral(metric_type, current, profile, context)
            target_value = result.value
            approximate = not result.converged
        else:
            target_value = self.improve(metric_type, current)
            approximate = False

        delta = self.daily_impact(metric_type, target_value, profile, context) - current_impact
        benefit = self._scaler.scale(delta, metric_type, period)
        annotate_span(
            {
                "target.current": current,
                "target.value": target_value,
                "target.benefit_minutes": benefit,
            }
        )

        logger.info(
            "daily_target_computed",
            metric_type=metric_type.value,
            period=period.value,
            current=current,
            target=round(target_value, 3),
            benefit_minutes=round(benefit, 2),
            approximate=approximate,
        )
        return DailyTarget(
            metric_type=metric_type,
            period=period,
            target_value=target_value,
            original_current_value=current_value,
            original_benefit_minutes=benefit,
            calculation_date=today,
            algorithm_version=self._algorithm_version,
            approximate=approximate,
        )

    def improve(self, metric_type: MetricType, current: float) -> float:
        """Move a reading a fixed fraction toward the curve optimum, never past it."""
        optimum = self._risk_model.curve(metric_type).optimum
        if current == optimum:
            return current
        fraction = self._settings.improvement_fraction
        step = fraction * abs(current) or fraction * abs(optimum - current)
        if optimum > current:
            return min(optimum, current + step)
        return max(optimum, current - step)

    def search_neutral(
        self,
        metric_type: MetricType,
        current: float,
        profile: UserProfile,
        context: RawMetricMap | None = None,
    ) -> SearchResult:
        """Bisect for the value where the composed impact is zero.

        The bracket runs from ``current`` (negative impact) to the curve
        optimum. If the optimum itself is negative, or the iteration cap is
        reached, the non-negative side of the bracket is returned unconverged.
        """
        impact_tolerance = self._settings.impact_tolerance_minutes
        value_tolerance = self._settings.value_tolerance

        def impact(value: float) -> float:
            return self.daily_impact(metric_type, value, profile, context)

        negative = current
        positive = self._risk_model.curve(metric_type).optimum
        if impact(positive) < 0:
            return self._not_converged(metric_type, positive, 0, "neutral_unreachable")

        for iteration in range(1, self._settings.max_iterations + 1):
            midpoint = (negative + positive) / 2.0
            value = impact(midpoint)
            if abs(value) <= impact_tolerance:
                TARGET_SEARCH_ITERATIONS.observe(iteration)
                return SearchResult(midpoint, iteration, True)
            if value < 0:
                negative = midpoint
            else:
                positive = midpoint
            if abs(positive - negative) <= value_tolerance:
                TARGET_SEARCH_ITERATIONS.observe(iteration)
                return SearchResult(positive, iteration, True)

        return self._not_converged(
            metric_type, positive, self._settings.max_iterations, "iteration_cap"
        )

    def _not_converged(
        self, metric_type: MetricType, value: float, iterations: int, reason: str
    ) -> SearchResult:
        TARGET_SEARCH_ITERATIONS.observe(iterations)
        TARGET_SEARCH_NOT_CONVERGED.labels(metric_type=metric_type.value).inc()
        logger.warning(
            "target_search_not_converged",
            metric_type=metric_type.value,
            reason=reason,
            iterations=iterations,
            value=value,
        )
        return SearchResult(value, iterations, False)
