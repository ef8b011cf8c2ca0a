"""Cross-metric interaction adjustments."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass

import structlog

from .metrics import INTERACTIONS_APPLIED
from .models import MetricType
from .types import ImpactMap, RawMetricMap

logger = structlog.get_logger(__name__)

# Trigger thresholds
OPTIMAL_SLEEP_RANGE = (7.0, 8.5)
MIN_SYNERGY_EXERCISE_MINUTES = 20.0
ANY_ALCOHOL_BELOW_SCALE = 9.0
DAILY_DRINKING_BELOW_SCALE = 7.0
HIGH_STRESS_ABOVE = 6.0
HEAVY_BODY_MASS_ABOVE = 200.0
BODY_MASS_INCREMENT = 20.0


@dataclass(frozen=True)
class InteractionRule:
    """A multiplicative adjustment applied when two metrics interact."""

    name: str
    triggers: tuple[MetricType, ...]
    targets: tuple[MetricType, ...]
    condition: Callable[[RawMetricMap], bool]
    factor: Callable[[RawMetricMap], float]

    def applies(self, raw_metrics: RawMetricMap) -> bool:
        if not all(metric in raw_metrics for metric in self.triggers):
            return False
        return self.condition(raw_metrics)


def _body_mass_factor(raw: RawMetricMap) -> float:
    excess = raw[MetricType.BODY_MASS] - HEAVY_BODY_MASS_ABOVE
    return 0.90 ** (excess / BODY_MASS_INCREMENT)


def _build_rules() -> tuple[InteractionRule, ...]:
    """Rules in application order."""
    return (
        InteractionRule(
            name="sleep_exercise_synergy",
            triggers=(MetricType.SLEEP_HOURS, MetricType.EXERCISE_MINUTES),
            targets=(MetricType.SLEEP_HOURS, MetricType.EXERCISE_MINUTES),
            condition=lambda m: (
                OPTIMAL_SLEEP_RANGE[0] <= m[MetricType.SLEEP_HOURS] <= OPTIMAL_SLEEP_RANGE[1]
                and m[MetricType.EXERCISE_MINUTES] >= MIN_SYNERGY_EXERCISE_MINUTES
            ),
            factor=lambda m: 1.15,
        ),
        InteractionRule(
            name="alcohol_hrv_antagonism",
            triggers=(MetricType.ALCOHOL_CONSUMPTION, MetricType.HEART_RATE_VARIABILITY),
            targets=(MetricType.HEART_RATE_VARIABILITY,),
            condition=lambda m: m[MetricType.ALCOHOL_CONSUMPTION] < ANY_ALCOHOL_BELOW_SCALE,
            factor=lambda m: 0.75,
        ),
        InteractionRule(
            name="alcohol_sleep_antagonism",
            triggers=(MetricType.ALCOHOL_CONSUMPTION, MetricType.SLEEP_HOURS),
            targets=(MetricType.SLEEP_HOURS,),
            condition=lambda m: m[MetricType.ALCOHOL_CONSUMPTION] < DAILY_DRINKING_BELOW_SCALE,
            factor=lambda m: 0.80,
        ),
        InteractionRule(
            name="stress_sleep_antagonism",
            triggers=(MetricType.STRESS_LEVEL, MetricType.SLEEP_HOURS),
            targets=(MetricType.SLEEP_HOURS,),
            condition=lambda m: m[MetricType.STRESS_LEVEL] > HIGH_STRESS_ABOVE,
            factor=lambda m: 0.85,
        ),
        InteractionRule(
            name="body_mass_activity_antagonism",
            triggers=(MetricType.BODY_MASS,),
            targets=(MetricType.STEPS, MetricType.EXERCISE_MINUTES),
            condition=lambda m: m[MetricType.BODY_MASS] > HEAVY_BODY_MASS_ABOVE,
            factor=_body_mass_factor,
        ),
    )


class InteractionEffectEngine:
    """Applies interaction rules to per-metric impacts.

    Each rule fires at most once per pass, in the order returned by
    ``rules``. Factors are always positive, so no impact changes sign.
    """

    def __init__(self, rules: tuple[InteractionRule, ...] | None = None) -> None:
        self._rules = rules if rules is not None else _build_rules()

    @property
    def rules(self) -> tuple[InteractionRule, ...]:
        return self._rules

    def active_interactions(self, raw_metrics: RawMetricMap) -> list[InteractionRule]:
        """Rules whose triggers hold for these readings."""
        return [rule for rule in self._rules if rule.applies(raw_metrics)]

    def adjust(
        self,
        impacts: Mapping[MetricType, float],
        raw_metrics: RawMetricMap,
    ) -> ImpactMap:
        """Return a copy of ``impacts`` with every firing rule applied.

        Args:
            impacts: Daily minutes per metric.
            raw_metrics: Clamped readings per metric used by the triggers.

        Returns:
            Adjusted daily minutes; metrics no rule targets are unchanged.
        """
        adjusted = dict(impacts)
        for rule in self.active_interactions(raw_metrics):
            factor = rule.factor(raw_metrics)
            if factor <= 0:
                raise ValueError(f"Interaction {rule.name} produced non-positive factor {factor}")
            touched = [target for target in rule.targets if target in adjusted]
            for target in touched:
                adjusted[target] *= factor
            if touched:
                INTERACTIONS_APPLIED.labels(rule=rule.name).inc()
                logger.debug(
                    "interaction_applied",
                    rule=rule.name,
                    factor=round(factor, 4),
                    targets=[t.value for t in touched],
                )
        return adjusted
