"""Physical activity and body composition curves."""

from ..models import EffectType, MetricType
from .base import (
    DeviationMinutesCurve,
    LinearMinutesCurve,
    LinearSegment,
    LogSegment,
    MetricCurve,
    RelativeRiskCurve,
)

# Relative risk is J-shaped in daily steps: steep gains up to ~10k, best
# around 12k, then a mild reversal at extreme volumes.
STEPS_CURVE = MetricCurve(
    metric_type=MetricType.STEPS,
    lower=0.0,
    upper=50_000.0,
    optimum=12_000.0,
    strategy=RelativeRiskCurve(
        segments=(
            LinearSegment(0.0, 2_700.0, 1.60, 1.40),
            LinearSegment(2_700.0, 4_000.0, 1.40, 1.30),
            LogSegment(4_000.0, 10_000.0, 1.30, 0.95, curvature=2.0),
            LinearSegment(10_000.0, 12_000.0, 0.95, 0.90),
            LinearSegment(12_000.0, 20_000.0, 0.90, 0.93),
            LinearSegment(20_000.0, 25_000.0, 0.93, 1.00),
            LinearSegment(25_000.0, 35_000.0, 1.00, 1.15),
        ),
        scaling=0.082,
    ),
    effect_type=EffectType.DIMINISHING,
    decay_rate=0.15,
)

# Evaluated on weekly minutes; readings are daily.
EXERCISE_CURVE = MetricCurve(
    metric_type=MetricType.EXERCISE_MINUTES,
    lower=0.0,
    upper=300.0,
    optimum=600.0 / 7.0,
    strategy=RelativeRiskCurve(
        segments=(
            LogSegment(0.0, 150.0, 1.00, 0.77),
            LinearSegment(150.0, 300.0, 0.77, 0.65),
            LinearSegment(300.0, 600.0, 0.65, 0.60),
        ),
        scaling=0.126,
        input_scale=7.0,
    ),
    effect_type=EffectType.DIMINISHING,
    decay_rate=0.15,
)

ACTIVE_ENERGY_CURVE = MetricCurve(
    metric_type=MetricType.ACTIVE_ENERGY_BURNED,
    lower=0.0,
    upper=1_300.0,
    optimum=1_300.0,
    strategy=LinearMinutesCurve(
        reference=400.0, unit=100.0, minutes_per_unit=17.4, max_deviation=900.0
    ),
    effect_type=EffectType.PLATEAU,
    decay_rate=0.12,
)

# Pounds; loses minutes symmetrically on either side of the reference.
BODY_MASS_CURVE = MetricCurve(
    metric_type=MetricType.BODY_MASS,
    lower=80.0,
    upper=400.0,
    optimum=160.0,
    strategy=DeviationMinutesCurve(reference=160.0, unit=20.0, minutes_per_unit=17.4),
    effect_type=EffectType.LINEAR,
    decay_rate=0.12,
)

ACTIVITY_CURVES = (STEPS_CURVE, EXERCISE_CURVE, ACTIVE_ENERGY_CURVE, BODY_MASS_CURVE)
