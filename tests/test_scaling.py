"""Tests for period scaling policies."""

import math

import pytest

from lifespan_impact.config import ScalingPolicy, ScalingSettings
from lifespan_impact.models import EffectType, MetricType, Period
from lifespan_impact.scaling import PeriodScaler


@pytest.fixture
def scaler():
    return PeriodScaler(ScalingSettings(policy=ScalingPolicy.EFFECT_AWARE))


class TestPeriodScaler:
    """Tests for PeriodScaler."""

    @pytest.mark.parametrize("effect_type", list(EffectType))
    def test_linear_policy_is_day_count(self, scaler, effect_type):
        """Linear policy multiplies by the day count."""
        assert scaler.multiplier(effect_type, Period.MONTH, ScalingPolicy.LINEAR) == 30
        assert scaler.multiplier(effect_type, Period.YEAR, ScalingPolicy.LINEAR) == 365

    @pytest.mark.parametrize("effect_type", list(EffectType))
    def test_single_day_is_identity(self, scaler, effect_type):
        """A single day always scales by one."""
        assert scaler.multiplier(effect_type, Period.DAY) == 1

    def test_linear_effects_exact_under_effect_aware(self, scaler):
        """Linear effects scale exactly under the effect-aware policy."""
        daily = -18.917
        metric = MetricType.RESTING_HEART_RATE

        assert scaler.scale(daily, metric, Period.MONTH) == 30 * daily
        assert scaler.scale(daily, metric, Period.YEAR) == 365 * daily

    @pytest.mark.parametrize("effect_type", [EffectType.DIMINISHING, EffectType.THRESHOLD])
    def test_sub_linear_effects_respect_floors(self, scaler, effect_type):
        """Sub-linear effects never drop below the floors."""
        month = scaler.multiplier(effect_type, Period.MONTH)
        year = scaler.multiplier(effect_type, Period.YEAR)

        assert 20 <= month <= 30
        assert 180 <= year <= 365

    @pytest.mark.parametrize(
        "metric_type",
        [
            MetricType.STEPS,
            MetricType.EXERCISE_MINUTES,
            MetricType.NUTRITION_QUALITY,
            MetricType.SOCIAL_CONNECTIONS_QUALITY,
        ],
    )
    def test_floors_hold_for_negative_impacts(self, scaler, metric_type):
        """Floors apply to negative impacts too."""
        daily = -4.2

        assert abs(scaler.scale(daily, metric_type, Period.MONTH)) >= 20 * abs(daily)
        assert abs(scaler.scale(daily, metric_type, Period.YEAR)) >= 180 * abs(daily)

    def test_diminishing_formula(self, scaler):
        """Diminishing effects follow the logarithmic formula."""
        year = scaler.multiplier(EffectType.DIMINISHING, Period.YEAR)
        assert year == pytest.approx(365 / (1 + 0.1 * math.log(365)))

    def test_threshold_credits_reduced_fraction_first(self, scaler):
        """Threshold effects credit the early days at a reduced fraction."""
        year = scaler.multiplier(EffectType.THRESHOLD, Period.YEAR)

        assert year == pytest.approx(0.3 * 21 + (365 - 21))

    def test_floor_applies_when_formula_falls_short(self):
        """The floor wins when the formula falls short."""
        scaler = PeriodScaler(ScalingSettings(threshold_fraction=0.0, threshold_days=28))

        assert scaler.multiplier(EffectType.THRESHOLD, Period.MONTH) == 20

    def test_exponential_capped(self, scaler):
        """Exponential growth is capped at 150% of linear."""
        month = scaler.multiplier(EffectType.EXPONENTIAL, Period.MONTH)
        year = scaler.multiplier(EffectType.EXPONENTIAL, Period.YEAR)

        assert 30 < month <= 45
        assert year == pytest.approx(365 * 1.5)

    def test_plateau_saturates(self, scaler):
        """Plateau effects saturate."""
        month = scaler.multiplier(EffectType.PLATEAU, Period.MONTH)
        year = scaler.multiplier(EffectType.PLATEAU, Period.YEAR)

        assert month < 30
        assert month < year < 0.2 * 365

    def test_policy_from_settings(self):
        """The default policy comes from settings."""
        scaler = PeriodScaler(ScalingSettings(policy=ScalingPolicy.LINEAR))

        assert scaler.policy == ScalingPolicy.LINEAR
        assert scaler.multiplier_for(MetricType.SLEEP_HOURS, Period.YEAR) == 365
