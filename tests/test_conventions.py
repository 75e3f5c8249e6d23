"""
Unit tests for compounding conventions and settings.
"""

import math

import pytest

from ratesens.autodiff import derivative
from ratesens.config import RiskSettings
from ratesens.conventions import (
    BP_SCALE,
    CompoundingConvention,
    discount_factor_from_zero,
    zero_from_discount_factor,
)
from ratesens.pricers import StandardValuation
from ratesens.risk import compute_sensitivities


class TestCompoundingConvention:
    """Tests for compounding conventions."""

    def test_from_string(self):
        assert CompoundingConvention.from_string("continuous") == CompoundingConvention.CONTINUOUS
        assert CompoundingConvention.from_string("Semi-Annual") == CompoundingConvention.SEMI_ANNUAL
        assert CompoundingConvention.from_string("annual") == CompoundingConvention.ANNUAL

    def test_from_string_unknown(self):
        with pytest.raises(ValueError):
            CompoundingConvention.from_string("monthly-ish")

    def test_periods_per_year(self):
        assert CompoundingConvention.QUARTERLY.periods_per_year == 4
        assert CompoundingConvention.CONTINUOUS.periods_per_year == 0

    @pytest.mark.parametrize("compounding,expected", [
        (CompoundingConvention.CONTINUOUS, math.exp(-0.05 * 2)),
        (CompoundingConvention.ANNUAL, 1.05 ** -2),
        (CompoundingConvention.SEMI_ANNUAL, 1.025 ** -4),
        (CompoundingConvention.QUARTERLY, 1.0125 ** -8),
        (CompoundingConvention.SIMPLE, 1 / 1.1),
    ])
    def test_discount_factor(self, compounding, expected):
        assert discount_factor_from_zero(0.05, 2.0, compounding) == pytest.approx(expected, rel=1e-12)

    @pytest.mark.parametrize("compounding", list(CompoundingConvention))
    def test_zero_rate_inverts_discount_factor(self, compounding):
        df = discount_factor_from_zero(0.037, 3.5, compounding)
        assert zero_from_discount_factor(df, 3.5, compounding) == pytest.approx(0.037, rel=1e-12)

    def test_differentiable_in_rate(self):
        """d/dz (1+z)^-t = -t (1+z)^(-t-1)."""
        d = derivative(
            lambda z: discount_factor_from_zero(z, 3.0, CompoundingConvention.ANNUAL), 0.03
        )
        assert d == pytest.approx(-3.0 * 1.03 ** -4, rel=1e-12)


class TestRiskSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = RiskSettings.from_env({})
        assert settings.default_method == "linear"
        assert settings.default_compounding == CompoundingConvention.CONTINUOUS
        assert settings.log_level == "WARNING"

    def test_overrides(self):
        settings = RiskSettings.from_env({
            "RATESENS_COMPOUNDING": "annual",
            "RATESENS_LOG_LEVEL": "debug",
        })
        assert settings.default_compounding == CompoundingConvention.ANNUAL
        assert settings.log_level == "DEBUG"

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            RiskSettings.from_env({"RATESENS_COMPOUNDING": "bogus"})

    def test_bp_scale_is_fixed(self):
        """The basis-point scale is a constant, not an environment setting."""
        settings = RiskSettings.from_env({"RATESENS_BP_SCALE": "100"})
        assert not hasattr(settings, "bp_scale")
        assert BP_SCALE == 10_000.0

        result = compute_sensitivities(0.03, StandardValuation([5, 5, 105]))
        assert result.dv01 == pytest.approx(-result.gradient.sum() / 10_000.0, rel=1e-12)
