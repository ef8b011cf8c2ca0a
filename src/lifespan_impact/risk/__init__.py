"""Per-metric risk curves."""

from .base import (
    ConfigurationError,
    DeviationMinutesCurve,
    KnotMinutesCurve,
    LinearMinutesCurve,
    LinearSegment,
    LogSegment,
    MetricCurve,
    RelativeRiskCurve,
    RiskCurve,
    StepMinutesCurve,
    StepTable,
    relative_risk_to_daily_minutes,
)
from .lifestyle import drinks_per_day
from .registry import CURVES, MetricRiskModel, build_curve_table

__all__ = [
    "CURVES",
    "ConfigurationError",
    "DeviationMinutesCurve",
    "KnotMinutesCurve",
    "LinearMinutesCurve",
    "LinearSegment",
    "LogSegment",
    "MetricCurve",
    "MetricRiskModel",
    "RelativeRiskCurve",
    "RiskCurve",
    "StepMinutesCurve",
    "StepTable",
    "build_curve_table",
    "drinks_per_day",
    "relative_risk_to_daily_minutes",
]
