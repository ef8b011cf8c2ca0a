"""Curve strategies and the per-metric curve record."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from ..models import EffectType, MetricType

DAYS_PER_YEAR = 365.25
MINUTES_PER_DAY = 1440.0


class ConfigurationError(Exception):
    """Raised when a curve table is malformed."""


def baseline_life_minutes(reference_expectancy_years: float) -> float:
    """Reference lifespan expressed in minutes."""
    return reference_expectancy_years * DAYS_PER_YEAR * MINUTES_PER_DAY


def relative_risk_to_daily_minutes(
    relative_risk: float,
    scaling: float,
    age: int,
    reference_expectancy_years: float,
) -> float:
    """Convert a relative risk into minutes of life gained or lost per day.

    The lifetime change ``(1 - RR) * scaling`` of the reference lifespan is
    spread evenly over the remaining years, floored at one year.
    """
    remaining_years = max(1.0, reference_expectancy_years - age)
    lifetime_minutes = baseline_life_minutes(reference_expectancy_years) * (1.0 - relative_risk)
    return lifetime_minutes * scaling / (remaining_years * DAYS_PER_YEAR)


@dataclass(frozen=True)
class LinearSegment:
    """Relative risk interpolated linearly between two breakpoints."""

    start: float
    end: float
    rr_start: float
    rr_end: float

    def evaluate(self, x: float) -> float:
        fraction = (x - self.start) / (self.end - self.start)
        return self.rr_start + (self.rr_end - self.rr_start) * fraction


@dataclass(frozen=True)
class LogSegment:
    """Relative risk falling along a logarithmic curve between two breakpoints.

    ``curvature`` controls how front-loaded the benefit is; a curvature of 1
    gives ``ln(1 + r * (e - 1))``.
    """

    start: float
    end: float
    rr_start: float
    rr_end: float
    curvature: float = 1.0

    def evaluate(self, x: float) -> float:
        fraction = (x - self.start) / (self.end - self.start)
        c = self.curvature
        progress = math.log1p(fraction * math.expm1(c)) / c
        return self.rr_start + (self.rr_end - self.rr_start) * progress


Segment = LinearSegment | LogSegment


@dataclass(frozen=True)
class StepTable:
    """Maps a value to an output by descending lower thresholds.

    The first band whose threshold is at or below the value wins; values
    under every threshold take the last band.
    """

    bands: tuple[tuple[float, float], ...]

    def lookup(self, value: float) -> float:
        for threshold, output in self.bands:
            if value >= threshold:
                return output
        return self.bands[-1][1]


class RiskCurve(ABC):
    """Strategy turning a clamped metric value into daily minutes."""

    @abstractmethod
    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        """Daily lifespan impact at ``value``."""

    def validate(self, metric_type: MetricType) -> None:
        """Raise ConfigurationError if the curve parameters are inconsistent."""


@dataclass(frozen=True)
class RelativeRiskCurve(RiskCurve):
    """Piecewise relative-risk curve converted through the lifespan formula."""

    segments: tuple[Segment, ...]
    scaling: float
    input_scale: float = 1.0
    conversion: StepTable | None = None

    def relative_risk(self, value: float) -> float:
        x = self.conversion.lookup(value) if self.conversion else value
        x *= self.input_scale
        first, last = self.segments[0], self.segments[-1]
        if x <= first.start:
            return first.rr_start
        for segment in self.segments:
            if x <= segment.end:
                return segment.evaluate(x)
        return last.rr_end

    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        return relative_risk_to_daily_minutes(
            self.relative_risk(value), self.scaling, age, reference_expectancy_years
        )

    def validate(self, metric_type: MetricType) -> None:
        if not self.segments:
            raise ConfigurationError(f"{metric_type.value}: relative-risk curve has no segments")
        if self.scaling <= 0:
            raise ConfigurationError(f"{metric_type.value}: scaling must be positive")
        previous: Segment | None = None
        for segment in self.segments:
            if segment.end <= segment.start:
                raise ConfigurationError(
                    f"{metric_type.value}: segment [{segment.start}, {segment.end}] is empty"
                )
            if previous is not None:
                if not math.isclose(previous.end, segment.start):
                    raise ConfigurationError(
                        f"{metric_type.value}: gap between {previous.end} and {segment.start}"
                    )
                if not math.isclose(previous.rr_end, segment.rr_start, abs_tol=1e-9):
                    raise ConfigurationError(
                        f"{metric_type.value}: relative risk jumps at {segment.start}"
                    )
            if min(segment.rr_start, segment.rr_end) <= 0:
                raise ConfigurationError(f"{metric_type.value}: relative risk must be positive")
            previous = segment


@dataclass(frozen=True)
class LinearMinutesCurve(RiskCurve):
    """Direct minutes proportional to the deviation from a reference.

    ``max_deviation`` caps the deviation so the curve plateaus.
    """

    reference: float
    unit: float
    minutes_per_unit: float
    max_deviation: float | None = None

    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        deviation = value - self.reference
        if self.max_deviation is not None:
            deviation = max(-self.max_deviation, min(self.max_deviation, deviation))
        return deviation / self.unit * self.minutes_per_unit

    def validate(self, metric_type: MetricType) -> None:
        if self.unit <= 0:
            raise ConfigurationError(f"{metric_type.value}: unit must be positive")
        if self.max_deviation is not None and self.max_deviation <= 0:
            raise ConfigurationError(f"{metric_type.value}: max deviation must be positive")


@dataclass(frozen=True)
class DeviationMinutesCurve(RiskCurve):
    """Direct minutes lost per unit of distance from a reference in either direction."""

    reference: float
    unit: float
    minutes_per_unit: float

    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        return -abs(value - self.reference) / self.unit * self.minutes_per_unit

    def validate(self, metric_type: MetricType) -> None:
        if self.unit <= 0:
            raise ConfigurationError(f"{metric_type.value}: unit must be positive")


@dataclass(frozen=True)
class KnotMinutesCurve(RiskCurve):
    """Direct minutes interpolated linearly between ``(value, minutes)`` knots."""

    knots: tuple[tuple[float, float], ...]

    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        return interpolate(self.knots, value)

    def validate(self, metric_type: MetricType) -> None:
        xs = [x for x, _ in self.knots]
        if len(xs) < 2 or any(b <= a for a, b in zip(xs, xs[1:])):
            raise ConfigurationError(
                f"{metric_type.value}: knots must be at least two strictly increasing points"
            )


@dataclass(frozen=True)
class StepMinutesCurve(RiskCurve):
    """Direct minutes looked up from discrete bands."""

    table: StepTable

    def daily_minutes(self, value: float, age: int, reference_expectancy_years: float) -> float:
        return self.table.lookup(value)

    def validate(self, metric_type: MetricType) -> None:
        thresholds = [threshold for threshold, _ in self.table.bands]
        if not thresholds or thresholds != sorted(thresholds, reverse=True):
            raise ConfigurationError(
                f"{metric_type.value}: step thresholds must be listed in descending order"
            )


def interpolate(knots: Sequence[tuple[float, float]], x: float) -> float:
    """Linear interpolation over sorted knots, clamped at both ends."""
    if x <= knots[0][0]:
        return knots[0][1]
    for (x0, y0), (x1, y1) in zip(knots, knots[1:]):
        if x <= x1:
            return y0 + (y1 - y0) * (x - x0) / (x1 - x0)
    return knots[-1][1]


@dataclass(frozen=True)
class MetricCurve:
    """Everything the engine knows about one metric.

    Attributes:
        metric_type: Metric this entry describes.
        lower: Lowest physiologically meaningful value.
        upper: Highest physiologically meaningful value.
        optimum: Value at which the curve peaks; bounds the monotonic
            branches used by target search.
        strategy: Curve turning a clamped value into daily minutes.
        effect_type: How the benefit accumulates across a period.
        decay_rate: Yearly exponential decay of a sustained behavior change.
    """

    metric_type: MetricType
    lower: float
    upper: float
    optimum: float
    strategy: RiskCurve
    effect_type: EffectType
    decay_rate: float

    def clamp(self, value: float) -> float:
        if math.isnan(value):
            return self.lower
        return max(self.lower, min(self.upper, value))

    def validate(self) -> None:
        name = self.metric_type.value
        if not self.lower < self.upper:
            raise ConfigurationError(f"{name}: domain [{self.lower}, {self.upper}] is empty")
        if not self.lower <= self.optimum <= self.upper:
            raise ConfigurationError(f"{name}: optimum {self.optimum} outside domain")
        if self.decay_rate < 0:
            raise ConfigurationError(f"{name}: decay rate must not be negative")
        self.strategy.validate(self.metric_type)
