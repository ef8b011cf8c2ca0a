"""Cleaning and bucketing of historical metric series for charts."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

import structlog

from .models import MetricType, Period
from .types import SeriesPoint

logger = structlog.get_logger(__name__)

CUMULATIVE_METRICS = frozenset(
    {
        MetricType.STEPS,
        MetricType.EXERCISE_MINUTES,
        MetricType.ACTIVE_ENERGY_BURNED,
    }
)

# Discrete metrics whose day-to-day noise is smoothed before display
SMOOTHED_METRICS = frozenset(
    {
        MetricType.RESTING_HEART_RATE,
        MetricType.HEART_RATE_VARIABILITY,
        MetricType.BODY_MASS,
        MetricType.OXYGEN_SATURATION,
    }
)

IQR_FENCE = 1.5
MIN_POINTS_FOR_IQR = 5

# Sleep segments before noon belong to the previous night
NIGHT_OFFSET = timedelta(hours=12)


class SmoothingLevel(str, Enum):
    """Weighted moving average strength."""

    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"

    @property
    def window(self) -> int:
        return _WINDOWS[self]


_WINDOWS = {
    SmoothingLevel.NONE: 1,
    SmoothingLevel.LIGHT: 3,
    SmoothingLevel.MODERATE: 5,
    SmoothingLevel.HEAVY: 7,
}


@dataclass(frozen=True)
class ChartPoint:
    """One bucket of a processed series."""

    timestamp: datetime
    value: float


def clip_outliers(values: Sequence[float]) -> list[float]:
    """Clip values to the interquartile fences.

    Series shorter than five points are returned unchanged.
    """
    if len(values) < MIN_POINTS_FOR_IQR:
        return list(values)
    ordered = sorted(values)
    n = len(ordered)
    q1 = ordered[n // 4]
    q3 = ordered[(3 * n) // 4]
    iqr = q3 - q1
    low, high = q1 - IQR_FENCE * iqr, q3 + IQR_FENCE * iqr
    return [max(low, min(high, v)) for v in values]


def smooth(values: Sequence[float], level: SmoothingLevel) -> list[float]:
    """Weighted moving average with weights ``1 / (1 + 0.5 * distance)``.

    Series no longer than the window are returned unchanged. Windows are
    truncated at the edges.
    """
    window = level.window
    if window <= 1 or len(values) <= window:
        return list(values)
    half = window // 2
    smoothed: list[float] = []
    for i in range(len(values)):
        total = 0.0
        weights = 0.0
        for j in range(max(0, i - half), min(len(values), i + half + 1)):
            weight = 1.0 / (1.0 + 0.5 * abs(i - j))
            total += values[j] * weight
            weights += weight
        smoothed.append(total / weights)
    return smoothed


def as_datetime(moment: date | datetime, offset: timedelta = timedelta(0)) -> datetime:
    """Promote a calendar date to midnight plus ``offset``; datetimes pass through."""
    if isinstance(moment, datetime):
        return moment
    return datetime.combine(moment, time.min) + offset


def bucket_start(timestamp: datetime, period: Period) -> datetime:
    """Start of the chart bucket a timestamp falls into."""
    if period == Period.DAY:
        return timestamp.replace(minute=0, second=0, microsecond=0)
    if period == Period.MONTH:
        return timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    return timestamp.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def night_of(timestamp: datetime) -> date:
    """Calendar date of the night a sleep segment belongs to."""
    return (timestamp - NIGHT_OFFSET).date()


class ChartDataProcessor:
    """Prepares a raw series for trend display.

    Steps run in order: outlier clipping, smoothing, period bucketing.
    Cumulative metrics are summed per bucket and never smoothed. Other
    metrics are averaged, and only the noisy sensor readings in
    ``SMOOTHED_METRICS`` are smoothed first. Date-only points are placed at
    midnight, sleep totals at noon of their night. Sleep segments are first
    summed per night, then the nightly totals are lightly smoothed and
    averaged per bucket.
    """

    def process(
        self,
        series: Sequence[SeriesPoint],
        metric_type: MetricType,
        period: Period,
        smoothing: SmoothingLevel = SmoothingLevel.LIGHT,
    ) -> list[ChartPoint]:
        if not series:
            return []
        # A sleep total dated by day already names its night
        offset = NIGHT_OFFSET if metric_type == MetricType.SLEEP_HOURS else timedelta(0)
        points = [(as_datetime(moment, offset), value) for moment, value in series]
        ordered = sorted(points, key=lambda point: point[0])

        if metric_type == MetricType.SLEEP_HOURS:
            return self._process_sleep(ordered, period)

        timestamps = [ts for ts, _ in ordered]
        values = clip_outliers([value for _, value in ordered])
        if metric_type in CUMULATIVE_METRICS:
            return self._bucket(timestamps, values, period, cumulative=True)

        if metric_type in SMOOTHED_METRICS:
            values = smooth(values, smoothing)
        return self._bucket(timestamps, values, period, cumulative=False)

    def _process_sleep(
        self, ordered: Sequence[tuple[datetime, float]], period: Period
    ) -> list[ChartPoint]:
        nights: dict[date, float] = {}
        for ts, hours in ordered:
            night = night_of(ts)
            nights[night] = nights.get(night, 0.0) + hours

        tz = ordered[0][0].tzinfo
        night_starts = [datetime(d.year, d.month, d.day, tzinfo=tz) for d in nights]
        totals = smooth(clip_outliers(list(nights.values())), SmoothingLevel.LIGHT)

        # Nightly totals are bucketed per day at the finest
        bucket_period = Period.MONTH if period == Period.DAY else period
        logger.debug("sleep_nights_aggregated", nights=len(nights), period=period.value)
        return self._bucket(night_starts, totals, bucket_period, cumulative=False)

    def _bucket(
        self,
        timestamps: Sequence[datetime],
        values: Sequence[float],
        period: Period,
        cumulative: bool,
    ) -> list[ChartPoint]:
        sums: dict[datetime, float] = {}
        counts: dict[datetime, int] = {}
        for ts, value in zip(timestamps, values):
            key = bucket_start(ts, period)
            sums[key] = sums.get(key, 0.0) + value
            counts[key] = counts.get(key, 0) + 1
        return [
            ChartPoint(key, sums[key] if cumulative else sums[key] / counts[key])
            for key in sorted(sums)
        ]
