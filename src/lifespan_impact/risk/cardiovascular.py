"""Heart and cardiorespiratory fitness curves."""

from ..models import EffectType, MetricType
from .base import LinearMinutesCurve, LinearSegment, MetricCurve, RelativeRiskCurve

# +16% relative risk per 10 bpm above 60
RESTING_HEART_RATE_CURVE = MetricCurve(
    metric_type=MetricType.RESTING_HEART_RATE,
    lower=40.0,
    upper=120.0,
    optimum=40.0,
    strategy=RelativeRiskCurve(
        segments=(LinearSegment(40.0, 120.0, 0.68, 1.96),),
        scaling=0.04,
    ),
    effect_type=EffectType.LINEAR,
    decay_rate=0.12,
)

HEART_RATE_VARIABILITY_CURVE = MetricCurve(
    metric_type=MetricType.HEART_RATE_VARIABILITY,
    lower=10.0,
    upper=100.0,
    optimum=100.0,
    strategy=LinearMinutesCurve(
        reference=40.0, unit=10.0, minutes_per_unit=17.4, max_deviation=70.0
    ),
    effect_type=EffectType.PLATEAU,
    decay_rate=0.12,
)

VO2_MAX_CURVE = MetricCurve(
    metric_type=MetricType.VO2_MAX,
    lower=15.0,
    upper=80.0,
    optimum=60.0,
    strategy=LinearMinutesCurve(
        reference=40.0, unit=5.0, minutes_per_unit=21.8, max_deviation=20.0
    ),
    effect_type=EffectType.PLATEAU,
    decay_rate=0.12,
)

OXYGEN_SATURATION_CURVE = MetricCurve(
    metric_type=MetricType.OXYGEN_SATURATION,
    lower=80.0,
    upper=100.0,
    optimum=100.0,
    strategy=LinearMinutesCurve(reference=98.0, unit=2.0, minutes_per_unit=8.7),
    effect_type=EffectType.LINEAR,
    decay_rate=0.12,
)

CARDIOVASCULAR_CURVES = (
    RESTING_HEART_RATE_CURVE,
    HEART_RATE_VARIABILITY_CURVE,
    VO2_MAX_CURVE,
    OXYGEN_SATURATION_CURVE,
)
