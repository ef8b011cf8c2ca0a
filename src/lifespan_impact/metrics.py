"""Prometheus metrics definitions for the lifespan impact engine."""

from prometheus_client import Counter, Histogram

# -- Impact calculations --
IMPACT_CALCULATIONS = Counter(
    "lifespan_impact_calculations_total",
    "Total impact snapshots computed",
    ["period", "policy"],
)
IMPACT_CALCULATION_DURATION = Histogram(
    "lifespan_impact_calculation_duration_seconds",
    "Impact snapshot computation latency",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
)
VALUES_CLAMPED = Counter(
    "lifespan_impact_values_clamped_total",
    "Raw metric values clamped into their physiological domain",
    ["metric_type"],
)
INTERACTIONS_APPLIED = Counter(
    "lifespan_impact_interactions_applied_total",
    "Interaction rules that fired",
    ["rule"],
)

# -- Projections --
PROJECTIONS = Counter(
    "lifespan_impact_projections_total",
    "Total life expectancy projections computed",
)
PROJECTIONS_CLAMPED = Counter(
    "lifespan_impact_projections_clamped_total",
    "Projections clamped to the age bounds",
    ["bound"],
)

# -- Target search --
TARGET_SEARCH_ITERATIONS = Histogram(
    "lifespan_impact_target_search_iterations",
    "Bisection steps used per target search",
    buckets=(1, 5, 10, 20, 30, 40, 60, 100),
)
TARGET_SEARCH_NOT_CONVERGED = Counter(
    "lifespan_impact_target_search_not_converged_total",
    "Target searches that returned an approximate boundary",
    ["metric_type"],
)

# -- Target cache --
TARGET_CACHE_HITS = Counter(
    "lifespan_impact_target_cache_hits_total",
    "Daily target cache hits",
)
TARGET_CACHE_MISSES = Counter(
    "lifespan_impact_target_cache_misses_total",
    "Daily target cache misses",
)
TARGET_CACHE_STALE = Counter(
    "lifespan_impact_target_cache_stale_total",
    "Daily target cache entries rejected as stale",
    ["reason"],
)
