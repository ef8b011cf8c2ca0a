"""Configuration management using pydantic-settings."""

import threading
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Valid log levels
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ScalingPolicy(str, Enum):
    """Rule used to turn a daily impact rate into a period total."""

    LINEAR = "linear"
    EFFECT_AWARE = "effect_aware"


class AppSettings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="APP_")

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        normalized = v.upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return normalized

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is valid."""
        normalized = v.lower()
        if normalized not in ("json", "console"):
            raise ValueError(f"Invalid log format '{v}'. Must be 'json' or 'console'")
        return normalized


class ProfileSettings(BaseSettings):
    """Fallbacks used when a user profile is incomplete."""

    model_config = SettingsConfigDict(env_prefix="PROFILE_")

    default_age: int = Field(default=40, description="Age assumed when birth year is missing")
    default_gender: str = Field(
        default="male", description="Mortality table used when gender is missing"
    )
    reference_expectancy_years: float = Field(
        default=78.0, description="Reference life expectancy for relative-risk conversion"
    )

    @field_validator("default_age")
    @classmethod
    def validate_default_age(cls, v: int) -> int:
        """Validate default age is plausible."""
        if not 0 <= v <= 119:
            raise ValueError(f"Default age must be between 0 and 119, got {v}")
        return v

    @field_validator("default_gender")
    @classmethod
    def validate_default_gender(cls, v: str) -> str:
        """Validate default gender has a mortality table."""
        normalized = v.lower()
        if normalized not in ("male", "female"):
            raise ValueError(f"Invalid default gender '{v}'. Must be 'male' or 'female'")
        return normalized

    @field_validator("reference_expectancy_years")
    @classmethod
    def validate_reference_expectancy(cls, v: float) -> float:
        """Validate reference expectancy is positive."""
        if v <= 0:
            raise ValueError(f"Reference expectancy must be positive, got {v}")
        return v


class ScalingSettings(BaseSettings):
    """Period scaling policy and effect-type constants."""

    model_config = SettingsConfigDict(env_prefix="SCALING_")

    policy: ScalingPolicy = Field(
        default=ScalingPolicy.EFFECT_AWARE, description="Period scaling policy"
    )
    month_floor_days: float = Field(
        default=20.0, description="Minimum monthly multiplier for sub-linear effects"
    )
    year_floor_days: float = Field(
        default=180.0, description="Minimum yearly multiplier for sub-linear effects"
    )
    diminishing_coefficient: float = Field(
        default=0.1, description="Log coefficient for diminishing-returns effects"
    )
    threshold_fraction: float = Field(
        default=0.3, description="Daily fraction credited before maturation"
    )
    threshold_days: int = Field(default=21, description="Days until a threshold effect matures")
    plateau_days: float = Field(default=30.0, description="Time constant of plateau effects")
    exponential_rate: float = Field(
        default=0.6, description="Yearly growth rate of exponential effects"
    )
    exponential_cap: float = Field(
        default=1.5, description="Cap on exponential effects as a multiple of linear"
    )

    @field_validator("policy", mode="before")
    @classmethod
    def normalize_policy(cls, v: object) -> object:
        """Accept policy names in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("month_floor_days", "year_floor_days", "plateau_days")
    @classmethod
    def validate_positive_days(cls, v: float) -> float:
        """Validate day constants are positive."""
        if v <= 0:
            raise ValueError(f"Day constants must be positive, got {v}")
        return v

    @field_validator("threshold_fraction")
    @classmethod
    def validate_threshold_fraction(cls, v: float) -> float:
        """Validate threshold fraction is a proportion."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Threshold fraction must be between 0 and 1, got {v}")
        return v

    @field_validator("exponential_cap")
    @classmethod
    def validate_exponential_cap(cls, v: float) -> float:
        """Validate exponential cap does not compress below linear."""
        if v < 1.0:
            raise ValueError(f"Exponential cap must be at least 1.0, got {v}")
        return v


class ProjectionSettings(BaseSettings):
    """Life expectancy projection settings."""

    model_config = SettingsConfigDict(env_prefix="PROJECTION_")

    segment_years: float = Field(default=5.0, description="Decay integration window in years")
    max_age_years: float = Field(default=120.0, description="Upper bound of any projection")
    confidence_interval_years: float = Field(
        default=2.0, description="Half-width of the projection confidence interval"
    )
    aggregate_decay_rate: float = Field(
        default=0.10, description="Decay rate used when no metric type is known"
    )

    @field_validator("segment_years")
    @classmethod
    def validate_segment_years(cls, v: float) -> float:
        """Validate segment length is positive."""
        if v <= 0:
            raise ValueError(f"Segment length must be positive, got {v}")
        return v

    @field_validator("max_age_years")
    @classmethod
    def validate_max_age(cls, v: float) -> float:
        """Validate maximum age is plausible."""
        if not 100 <= v <= 120:
            raise ValueError(f"Maximum age must be between 100 and 120, got {v}")
        return v

    @field_validator("confidence_interval_years", "aggregate_decay_rate")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Validate value is not negative."""
        if v < 0:
            raise ValueError(f"Value must not be negative, got {v}")
        return v


class RecommendationSettings(BaseSettings):
    """Target search settings."""

    model_config = SettingsConfigDict(env_prefix="RECOMMENDATION_")

    improvement_fraction: float = Field(
        default=0.2, description="Relative improvement suggested for non-negative impacts"
    )
    impact_tolerance_minutes: float = Field(
        default=0.5, description="Search stops when |impact| falls below this"
    )
    value_tolerance: float = Field(
        default=1e-3, description="Search stops when the bracket is narrower than this"
    )
    max_iterations: int = Field(default=60, description="Hard cap on bisection steps")

    @field_validator("improvement_fraction")
    @classmethod
    def validate_improvement_fraction(cls, v: float) -> float:
        """Validate improvement fraction is a proportion."""
        if not 0.0 < v <= 1.0:
            raise ValueError(f"Improvement fraction must be in (0, 1], got {v}")
        return v

    @field_validator("impact_tolerance_minutes", "value_tolerance")
    @classmethod
    def validate_tolerance(cls, v: float) -> float:
        """Validate tolerance is positive."""
        if v <= 0:
            raise ValueError(f"Tolerance must be positive, got {v}")
        return v

    @field_validator("max_iterations")
    @classmethod
    def validate_max_iterations(cls, v: int) -> int:
        """Validate iteration cap is reasonable."""
        if v < 1:
            raise ValueError(f"Max iterations must be at least 1, got {v}")
        if v > 1000:
            raise ValueError(f"Max iterations too large (max 1000), got {v}")
        return v


class TracingSettings(BaseSettings):
    """OpenTelemetry tracing settings."""

    model_config = SettingsConfigDict(env_prefix="OTEL_")

    enabled: bool = Field(default=False, description="Enable OpenTelemetry tracing")
    service_name: str = Field(default="lifespan-impact", description="Service name for traces")


class Settings(BaseSettings):
    """Combined engine settings."""

    app: AppSettings = Field(default_factory=AppSettings)
    profile: ProfileSettings = Field(default_factory=ProfileSettings)
    scaling: ScalingSettings = Field(default_factory=ScalingSettings)
    projection: ProjectionSettings = Field(default_factory=ProjectionSettings)
    recommendation: RecommendationSettings = Field(default_factory=RecommendationSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            app=AppSettings(),
            profile=ProfileSettings(),
            scaling=ScalingSettings(),
            projection=ProjectionSettings(),
            recommendation=RecommendationSettings(),
            tracing=TracingSettings(),
        )


# Global settings instance with thread-safe initialization
_settings: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get or create the global settings instance.

    Thread-safe singleton pattern using double-checked locking.
    """
    global _settings
    if _settings is None:
        with _settings_lock:
            # Double-check after acquiring lock
            if _settings is None:
                _settings = Settings.load()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call reloads the environment."""
    global _settings
    with _settings_lock:
        _settings = None
