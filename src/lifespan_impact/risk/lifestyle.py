"""Sleep and questionnaire-driven lifestyle curves.

Questionnaire answers use a 1-10 scale. For smoking, alcohol, nutrition and
social connections 10 is the healthiest answer; for stress 1 is.
"""

from ..models import EffectType, MetricType
from .base import (
    KnotMinutesCurve,
    LinearMinutesCurve,
    LinearSegment,
    MetricCurve,
    RelativeRiskCurve,
    StepMinutesCurve,
    StepTable,
)

# Questionnaire scale -> drinks per day
ALCOHOL_DRINKS = StepTable(bands=((9.0, 0.0), (7.0, 0.5), (3.0, 1.0), (1.0, 2.0)))

# Questionnaire scale -> minutes/day for never, former, light and heavy smokers
SMOKING_MINUTES = StepTable(bands=((9.0, 0.0), (6.0, -116.1), (2.0, -232.2), (0.0, -348.3)))

# U-shaped around 7.5 hours
SLEEP_CURVE = MetricCurve(
    metric_type=MetricType.SLEEP_HOURS,
    lower=3.0,
    upper=12.0,
    optimum=7.5,
    strategy=RelativeRiskCurve(
        segments=(
            LinearSegment(3.0, 6.0, 1.32, 1.08),
            LinearSegment(6.0, 7.0, 1.08, 1.02),
            LinearSegment(7.0, 7.5, 1.02, 1.00),
            LinearSegment(7.5, 8.0, 1.00, 1.02),
            LinearSegment(8.0, 9.0, 1.02, 1.08),
            LinearSegment(9.0, 12.0, 1.08, 1.38),
        ),
        scaling=0.05,
    ),
    effect_type=EffectType.EXPONENTIAL,
    decay_rate=0.10,
)

ALCOHOL_CURVE = MetricCurve(
    metric_type=MetricType.ALCOHOL_CONSUMPTION,
    lower=1.0,
    upper=10.0,
    optimum=10.0,
    strategy=RelativeRiskCurve(
        segments=(
            LinearSegment(0.0, 1.0, 1.00, 1.05),
            LinearSegment(1.0, 5.0, 1.05, 1.65),
        ),
        scaling=0.08,
        conversion=ALCOHOL_DRINKS,
    ),
    effect_type=EffectType.LINEAR,
    decay_rate=0.05,
)

SMOKING_CURVE = MetricCurve(
    metric_type=MetricType.SMOKING_STATUS,
    lower=1.0,
    upper=10.0,
    optimum=10.0,
    strategy=StepMinutesCurve(table=SMOKING_MINUTES),
    effect_type=EffectType.LINEAR,
    decay_rate=0.05,
)

STRESS_CURVE = MetricCurve(
    metric_type=MetricType.STRESS_LEVEL,
    lower=1.0,
    upper=10.0,
    optimum=1.0,
    strategy=RelativeRiskCurve(
        segments=(
            LinearSegment(1.0, 3.0, 1.00, 1.00),
            LinearSegment(3.0, 6.0, 1.00, 1.09),
            LinearSegment(6.0, 8.0, 1.09, 1.19),
            LinearSegment(8.0, 10.0, 1.19, 1.35),
        ),
        scaling=0.04,
    ),
    effect_type=EffectType.EXPONENTIAL,
    decay_rate=0.12,
)

# Flat between 7 and 8, steeper penalty below than reward above
NUTRITION_CURVE = MetricCurve(
    metric_type=MetricType.NUTRITION_QUALITY,
    lower=1.0,
    upper=10.0,
    optimum=10.0,
    strategy=KnotMinutesCurve(knots=((1.0, -139.0), (7.0, 0.0), (8.0, 0.0), (10.0, 66.7))),
    effect_type=EffectType.THRESHOLD,
    decay_rate=0.10,
)

SOCIAL_CONNECTIONS_CURVE = MetricCurve(
    metric_type=MetricType.SOCIAL_CONNECTIONS_QUALITY,
    lower=1.0,
    upper=10.0,
    optimum=10.0,
    strategy=LinearMinutesCurve(reference=5.5, unit=4.5, minutes_per_unit=52.0),
    effect_type=EffectType.THRESHOLD,
    decay_rate=0.12,
)

LIFESTYLE_CURVES = (
    SLEEP_CURVE,
    ALCOHOL_CURVE,
    SMOKING_CURVE,
    STRESS_CURVE,
    NUTRITION_CURVE,
    SOCIAL_CONNECTIONS_CURVE,
)


def drinks_per_day(scale: float) -> float:
    """Convert an alcohol questionnaire answer into drinks per day."""
    return ALCOHOL_DRINKS.lookup(scale)
