"""Tests for per-metric risk curves."""

import math
from dataclasses import replace

import pytest

from lifespan_impact.models import Comparison, EvidenceStrength, MetricType, UserProfile
from lifespan_impact.risk import (
    CURVES,
    ConfigurationError,
    LinearMinutesCurve,
    LinearSegment,
    MetricRiskModel,
    RelativeRiskCurve,
    build_curve_table,
    drinks_per_day,
    relative_risk_to_daily_minutes,
)
from lifespan_impact.risk.activity import EXERCISE_CURVE, STEPS_CURVE
from lifespan_impact.risk.lifestyle import SLEEP_CURVE

# Minutes of life per unit of (1 - RR) per day at age 40
K_AT_40 = 78 * 365.25 * 1440 / (38 * 365.25)


@pytest.fixture
def model(clock):
    return MetricRiskModel(clock=clock)


def sweep(lo: float, hi: float, steps: int = 200) -> list[float]:
    return [lo + (hi - lo) * i / steps for i in range(steps + 1)]


class TestCurveTable:
    """Tests for the curve registry."""

    def test_every_metric_has_a_curve(self):
        """Each metric type has exactly one curve entry."""
        assert set(CURVES) == set(MetricType)

    def test_duplicate_curve_rejected(self):
        """Registering a metric twice is a configuration error."""
        with pytest.raises(ConfigurationError, match="Duplicate curve"):
            build_curve_table([*CURVES.values(), STEPS_CURVE])

    def test_missing_curve_rejected(self):
        """Every metric type must be covered."""
        curves = [c for c in CURVES.values() if c.metric_type != MetricType.VO2_MAX]
        with pytest.raises(ConfigurationError, match="vo2_max"):
            build_curve_table(curves)

    def test_discontinuous_segments_rejected(self):
        """Relative risk may not jump between segments."""
        broken = replace(
            STEPS_CURVE,
            strategy=RelativeRiskCurve(
                segments=(
                    LinearSegment(0.0, 5_000.0, 1.5, 1.2),
                    LinearSegment(5_000.0, 12_000.0, 1.1, 0.9),
                ),
                scaling=0.082,
            ),
        )
        curves = [broken if c.metric_type == MetricType.STEPS else c for c in CURVES.values()]
        with pytest.raises(ConfigurationError, match="jumps"):
            build_curve_table(curves)

    def test_optimum_outside_domain_rejected(self):
        """Optimum must lie in the metric's domain."""
        broken = replace(SLEEP_CURVE, optimum=14.0)
        with pytest.raises(ConfigurationError, match="optimum"):
            broken.validate()


class TestRelativeRiskConversion:
    """Tests for the relative-risk to minutes formula."""

    def test_neutral_risk_is_zero(self):
        """A relative risk of one has no impact."""
        assert relative_risk_to_daily_minutes(1.0, 0.05, 40, 78.0) == 0.0

    def test_remaining_years_floored_at_one(self):
        """Ages at or past the reference expectancy do not divide by zero."""
        at_77 = relative_risk_to_daily_minutes(1.1, 0.04, 77, 78.0)
        at_95 = relative_risk_to_daily_minutes(1.1, 0.04, 95, 78.0)

        assert at_95 == at_77
        assert math.isfinite(at_95)


class TestMetricRiskModel:
    """Tests for MetricRiskModel."""

    def test_steps_8500_positive_on_log_branch(self, model, profile_40):
        """8,500 steps sits on the logarithmic branch just past break-even."""
        minutes = model.compute_daily_impact(MetricType.STEPS, 8_500, profile_40)

        assert minutes > 0
        assert minutes == pytest.approx(1.79, abs=0.05)

    def test_sleep_optimum_is_neutral(self, model, profile_40):
        """7.5 hours of sleep has no impact."""
        assert model.compute_daily_impact(MetricType.SLEEP_HOURS, 7.5, profile_40) == (
            pytest.approx(0.0, abs=1e-9)
        )

    def test_resting_heart_rate_70(self, model, profile_40):
        """70 bpm carries +16% relative risk."""
        minutes = model.compute_daily_impact(MetricType.RESTING_HEART_RATE, 70, profile_40)

        assert minutes == pytest.approx(-0.16 * 0.04 * K_AT_40, rel=1e-9)
        assert minutes == pytest.approx(-18.92, abs=0.01)

    def test_steps_monotonic_up_to_optimum(self, model, profile_40):
        """Steps impact rises all the way to the optimum."""
        values = [
            model.compute_daily_impact(MetricType.STEPS, s, profile_40)
            for s in sweep(0, 12_000)
        ]
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_steps_mildly_reverse_above_ceiling(self, model, profile_40):
        """Very high step counts lose a little benefit."""
        at_optimum = model.compute_daily_impact(MetricType.STEPS, 12_000, profile_40)
        at_30k = model.compute_daily_impact(MetricType.STEPS, 30_000, profile_40)
        at_50k = model.compute_daily_impact(MetricType.STEPS, 50_000, profile_40)

        assert at_30k < at_optimum
        assert at_50k <= at_30k

    def test_sleep_u_shape(self, model, profile_40):
        """Impact rises toward 7.5 hours and falls after it."""
        below = [
            model.compute_daily_impact(MetricType.SLEEP_HOURS, h, profile_40)
            for h in sweep(3, 7.5, 90)
        ]
        above = [
            model.compute_daily_impact(MetricType.SLEEP_HOURS, h, profile_40)
            for h in sweep(7.5, 12, 90)
        ]

        assert all(b > a for a, b in zip(below, below[1:]))
        assert all(b < a for a, b in zip(above, above[1:]))

    def test_sleep_continuous_at_breakpoints(self, model, profile_40):
        """Sleep impact has no jumps at its breakpoints."""
        for breakpoint in (6.0, 7.0, 8.0, 9.0):
            left = model.compute_daily_impact(MetricType.SLEEP_HOURS, breakpoint - 1e-9, profile_40)
            right = model.compute_daily_impact(
                MetricType.SLEEP_HOURS, breakpoint + 1e-9, profile_40
            )
            assert left == pytest.approx(right, abs=1e-5)

    def test_resting_heart_rate_monotonic_decreasing(self, model, profile_40):
        """Higher resting heart rate always costs more."""
        values = [
            model.compute_daily_impact(MetricType.RESTING_HEART_RATE, b, profile_40)
            for b in sweep(40, 120)
        ]
        assert all(b < a for a, b in zip(values, values[1:]))

    def test_exercise_evaluated_weekly(self, model, profile_40):
        """150 weekly minutes lands on the 0.77 relative risk breakpoint."""
        minutes = model.compute_daily_impact(MetricType.EXERCISE_MINUTES, 150 / 7, profile_40)

        assert minutes == pytest.approx(0.23 * 0.126 * K_AT_40, rel=1e-9)
        assert EXERCISE_CURVE.strategy.relative_risk(0) == 1.0

    def test_body_mass_symmetric_penalty(self, model, profile_40):
        """Body mass is penalized equally either side of the reference."""
        light = model.compute_daily_impact(MetricType.BODY_MASS, 140, profile_40)
        heavy = model.compute_daily_impact(MetricType.BODY_MASS, 180, profile_40)

        assert light == pytest.approx(heavy)
        assert heavy == pytest.approx(-17.4)
        assert model.compute_daily_impact(MetricType.BODY_MASS, 160, profile_40) == 0.0

    def test_direct_curves_ignore_age(self, model, profile_40, today):
        """Direct-minute curves do not depend on age."""
        older = UserProfile(birth_year=today.year - 70)
        for metric_type, value in (
            (MetricType.HEART_RATE_VARIABILITY, 60),
            (MetricType.VO2_MAX, 45),
            (MetricType.OXYGEN_SATURATION, 96),
        ):
            assert model.compute_daily_impact(metric_type, value, profile_40) == (
                model.compute_daily_impact(metric_type, value, older)
            )

    def test_hrv_reference_values(self, model, profile_40):
        """HRV gains 17.4 minutes per 10 ms above 40."""
        assert model.compute_daily_impact(MetricType.HEART_RATE_VARIABILITY, 40, profile_40) == 0
        assert model.compute_daily_impact(
            MetricType.HEART_RATE_VARIABILITY, 50, profile_40
        ) == pytest.approx(17.4)

    def test_plateau_caps_deviation(self):
        """Deviation past the plateau adds nothing."""
        curve = LinearMinutesCurve(
            reference=40.0, unit=10.0, minutes_per_unit=17.4, max_deviation=70.0
        )

        assert curve.daily_minutes(150, 40, 78) == pytest.approx(7 * 17.4)
        assert curve.daily_minutes(200, 40, 78) == curve.daily_minutes(150, 40, 78)

    def test_questionnaire_conversions(self, model, profile_40):
        """Questionnaire answers map to drinks and smoking status."""
        assert drinks_per_day(10) == 0.0
        assert drinks_per_day(8) == 0.5
        assert drinks_per_day(5) == 1.0
        assert drinks_per_day(1) == 2.0

        smoking = {
            scale: model.compute_daily_impact(MetricType.SMOKING_STATUS, scale, profile_40)
            for scale in (10, 7, 4, 1)
        }
        assert smoking == pytest.approx({10: 0.0, 7: -116.1, 4: -232.2, 1: -348.3})

    def test_nutrition_knots(self, model, profile_40):
        """Nutrition follows its knots."""
        impact = lambda q: model.compute_daily_impact(  # noqa: E731
            MetricType.NUTRITION_QUALITY, q, profile_40
        )

        assert impact(7.5) == 0.0
        assert impact(10) == pytest.approx(66.7)
        assert impact(1) == pytest.approx(-139.0)
        assert impact(4) == pytest.approx(-69.5)

    def test_stress_flat_when_low(self, model, profile_40):
        """Low stress is neutral and high stress costs minutes."""
        assert model.compute_daily_impact(MetricType.STRESS_LEVEL, 2, profile_40) == 0.0
        assert model.compute_daily_impact(MetricType.STRESS_LEVEL, 9, profile_40) < 0

    @pytest.mark.parametrize("curve", list(CURVES.values()), ids=lambda c: c.metric_type.value)
    def test_rises_toward_optimum(self, model, profile_40, curve):
        """Impact never falls while moving up from the lower bound to the optimum."""
        if curve.optimum == curve.lower:
            pytest.skip("optimum at lower bound")
        impacts = [
            model.compute_daily_impact(curve.metric_type, v, profile_40)
            for v in sweep(curve.lower, curve.optimum)
        ]

        assert all(b >= a - 1e-9 for a, b in zip(impacts, impacts[1:]))

    @pytest.mark.parametrize("curve", list(CURVES.values()), ids=lambda c: c.metric_type.value)
    def test_falls_past_optimum(self, model, profile_40, curve):
        """Impact never rises while moving from the optimum to the upper bound."""
        if curve.optimum == curve.upper:
            pytest.skip("optimum at upper bound")
        impacts = [
            model.compute_daily_impact(curve.metric_type, v, profile_40)
            for v in sweep(curve.optimum, curve.upper)
        ]

        assert all(b <= a + 1e-9 for a, b in zip(impacts, impacts[1:]))


class TestClamping:
    """Tests for domain clamping."""

    def test_out_of_range_clamped(self, model, profile_40):
        """Out-of-range values evaluate at the bound."""
        clamped, was_clamped = model.clamp(MetricType.SLEEP_HOURS, 20)

        assert clamped == 12.0
        assert was_clamped is True
        assert model.compute_daily_impact(MetricType.SLEEP_HOURS, 20, profile_40) == (
            model.compute_daily_impact(MetricType.SLEEP_HOURS, 12, profile_40)
        )

    def test_in_range_not_clamped(self, model):
        """In-range values pass through."""
        assert model.clamp(MetricType.STEPS, 5_000) == (5_000, False)

    def test_negative_steps_clamped_to_zero(self, model, profile_40):
        """Negative steps clamp to zero."""
        detail = model.evaluate(MetricType.STEPS, -100, profile_40)

        assert detail.raw_value == -100
        assert detail.clamped_value == 0.0
        assert detail.was_clamped

    def test_nan_clamped_to_lower_bound(self, model):
        """NaN clamps to the lower bound."""
        clamped, was_clamped = model.clamp(MetricType.RESTING_HEART_RATE, float("nan"))

        assert clamped == 40.0
        assert was_clamped

    def test_evaluate_details(self, model, profile_40):
        """Evaluation reports comparison and evidence strength."""
        detail = model.evaluate(MetricType.RESTING_HEART_RATE, 70, profile_40)

        assert detail.comparison == Comparison.WORSE
        assert detail.evidence_strength == EvidenceStrength.HIGH
        assert not detail.was_clamped

    def test_missing_age_uses_default(self, model, profile_40, empty_profile):
        """Missing age falls back to the default."""
        assert model.compute_daily_impact(MetricType.STEPS, 3_000, empty_profile) == (
            model.compute_daily_impact(MetricType.STEPS, 3_000, profile_40)
        )
