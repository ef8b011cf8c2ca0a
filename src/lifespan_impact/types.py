"""Shared type aliases and typed dictionaries."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, TypeAlias, TypedDict

if TYPE_CHECKING:
    from .models import MetricType

SpanAttributes: TypeAlias = Mapping[str, str | int | float | bool]

ImpactMap: TypeAlias = dict["MetricType", float]
RawMetricMap: TypeAlias = Mapping["MetricType", float]
SeriesPoint: TypeAlias = tuple[date | datetime, float]


class CacheStats(TypedDict):
    """Target cache statistics payload."""

    size: int
    hits: int
    misses: int
    hit_rate_pct: float
    persist_enabled: bool
