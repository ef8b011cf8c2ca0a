"""Period scaling of daily impact rates."""

import math
from collections.abc import Mapping

from .config import ScalingPolicy, ScalingSettings, get_settings
from .models import EffectType, MetricType, Period
from .risk import CURVES, MetricCurve


class PeriodScaler:
    """Turns a daily rate into a period total under one scaling policy.

    ``LINEAR`` multiplies every metric by the period's day count.
    ``EFFECT_AWARE`` shapes the multiplier by the metric's effect type:

    * linear: the day count, exactly
    * diminishing: ``days / (1 + k * ln(days))``, floored
    * threshold: a reduced fraction until the effect matures, floored
    * plateau: ``tau * (1 - exp(-days / tau))``
    * exponential: ``days * exp(r * days / 365)``, capped against linear

    A single day is always a multiplier of 1.
    """

    def __init__(
        self,
        settings: ScalingSettings | None = None,
        curves: Mapping[MetricType, MetricCurve] | None = None,
    ) -> None:
        self._settings = settings or get_settings().scaling
        self._curves = curves if curves is not None else CURVES

    @property
    def policy(self) -> ScalingPolicy:
        return self._settings.policy

    def effect_type(self, metric_type: MetricType) -> EffectType:
        return self._curves[metric_type].effect_type

    def multiplier(
        self,
        effect_type: EffectType,
        period: Period,
        policy: ScalingPolicy | None = None,
    ) -> float:
        """Day multiplier for an effect type over a period."""
        policy = policy or self._settings.policy
        days = float(period.days)
        if days <= 1.0 or policy == ScalingPolicy.LINEAR or effect_type == EffectType.LINEAR:
            return days

        s = self._settings
        if effect_type == EffectType.DIMINISHING:
            return self._floor(days / (1.0 + s.diminishing_coefficient * math.log(days)), period)
        if effect_type == EffectType.THRESHOLD:
            immature = min(days, s.threshold_days)
            credited = s.threshold_fraction * immature + (days - immature)
            return self._floor(credited, period)
        if effect_type == EffectType.PLATEAU:
            return s.plateau_days * (1.0 - math.exp(-days / s.plateau_days))
        if effect_type == EffectType.EXPONENTIAL:
            grown = days * math.exp(s.exponential_rate * days / 365.0)
            return min(grown, days * s.exponential_cap)
        raise ValueError(f"Unknown effect type: {effect_type}")

    def _floor(self, value: float, period: Period) -> float:
        if period == Period.MONTH:
            return max(value, self._settings.month_floor_days)
        if period == Period.YEAR:
            return max(value, self._settings.year_floor_days)
        return value

    def multiplier_for(
        self,
        metric_type: MetricType,
        period: Period,
        policy: ScalingPolicy | None = None,
    ) -> float:
        return self.multiplier(self.effect_type(metric_type), period, policy)

    def scale(
        self,
        daily_minutes: float,
        metric_type: MetricType,
        period: Period,
        policy: ScalingPolicy | None = None,
    ) -> float:
        """Period total for one metric's daily impact."""
        return daily_minutes * self.multiplier_for(metric_type, period, policy)
