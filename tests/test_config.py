"""Tests for configuration validation."""

import pytest

from lifespan_impact.config import (
    VALID_LOG_LEVELS,
    AppSettings,
    ProfileSettings,
    ProjectionSettings,
    RecommendationSettings,
    ScalingPolicy,
    ScalingSettings,
    get_settings,
    reset_settings,
)


def test_app_settings_normalize_log_fields():
    """App settings normalize log format and log level."""
    settings = AppSettings(log_level="debug", log_format="Console")

    assert settings.log_level == "DEBUG"
    assert settings.log_format == "console"
    assert settings.log_level in VALID_LOG_LEVELS


def test_app_settings_reject_unknown_format():
    """Only json and console log formats are accepted."""
    with pytest.raises(ValueError, match="Invalid log format"):
        AppSettings(log_format="xml")


def test_profile_defaults():
    """Missing profile fields fall back to a 40 year old male."""
    settings = ProfileSettings()

    assert settings.default_age == 40
    assert settings.default_gender == "male"
    assert settings.reference_expectancy_years == 78.0


def test_profile_settings_validation():
    """Profile fallbacks must be plausible."""
    with pytest.raises(ValueError, match="Default age must be between"):
        ProfileSettings(default_age=150)

    with pytest.raises(ValueError, match="Invalid default gender"):
        ProfileSettings(default_gender="unknown")


def test_scaling_policy_from_environment(monkeypatch):
    """Scaling policy is a single switch read from the environment."""
    monkeypatch.setenv("SCALING_POLICY", "LINEAR")

    assert ScalingSettings().policy == ScalingPolicy.LINEAR


def test_scaling_settings_validation():
    """Scaling constants are range checked."""
    with pytest.raises(ValueError, match="Threshold fraction must be between"):
        ScalingSettings(threshold_fraction=1.5)

    with pytest.raises(ValueError, match="Exponential cap must be at least"):
        ScalingSettings(exponential_cap=0.9)


def test_projection_settings_validation():
    """Projection bounds are range checked."""
    with pytest.raises(ValueError, match="Segment length must be positive"):
        ProjectionSettings(segment_years=0)

    with pytest.raises(ValueError, match="Maximum age must be between"):
        ProjectionSettings(max_age_years=90)

    with pytest.raises(ValueError, match="Maximum age must be between"):
        ProjectionSettings(max_age_years=150)

    assert ProjectionSettings(max_age_years=120).max_age_years == 120


def test_recommendation_settings_validation():
    """Search settings are range checked."""
    with pytest.raises(ValueError, match="Max iterations must be at least 1"):
        RecommendationSettings(max_iterations=0)

    with pytest.raises(ValueError, match="Tolerance must be positive"):
        RecommendationSettings(impact_tolerance_minutes=0)

    with pytest.raises(ValueError, match="Improvement fraction"):
        RecommendationSettings(improvement_fraction=0)


def test_get_settings_is_singleton(monkeypatch):
    """Settings load once until reset."""
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("RECOMMENDATION_MAX_ITERATIONS", "10")
    assert get_settings().recommendation.max_iterations == first.recommendation.max_iterations

    reset_settings()
    assert get_settings().recommendation.max_iterations == 10
