"""Lifespan impact and projection engine.

Converts health metric readings and a user profile into daily lifespan
impacts, period totals, a life expectancy projection and per-metric targets.

Modules:
    config: Configuration management using pydantic-settings
    risk: Per-metric risk curves
    interactions: Cross-metric interaction adjustments
    mortality: Actuarial tables and behavior decay
    aggregation: Impact snapshots for a period
    projection: Life expectancy projection
    recommendation: Target search and daily target caching
    charts: Historical series cleaning for trend display

Example:
    Compute a yearly snapshot and projection::

        engine = AggregationEngine()
        snapshot = engine.compute_impact(readings, Period.YEAR, profile)
        projection = ProjectionEngine().project_snapshot(profile, snapshot)
"""

__version__ = "0.1.0"

from .aggregation import AggregationEngine
from .config import Settings, get_settings
from .models import HealthMetric, MetricType, Period, UserProfile
from .projection import ProjectionEngine
from .recommendation import RecommendationEngine

__all__ = [
    "AggregationEngine",
    "HealthMetric",
    "MetricType",
    "Period",
    "ProjectionEngine",
    "RecommendationEngine",
    "Settings",
    "UserProfile",
    "__version__",
    "get_settings",
]
