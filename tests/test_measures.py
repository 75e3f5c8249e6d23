"""
Unit tests for the risk measure API.
"""

import math

import numpy as np
import pytest

from ratesens.curves import RateCurve, create_flat_curve
from ratesens.exceptions import TenorMismatchError
from ratesens.pricers import StandardValuation, fixed_rate_bond_cashflows
from ratesens.risk import (
    ConvexityBlocks,
    RiskMeasure,
    SensitivityReport,
    TwoCurveSensitivityReport,
    compute_sensitivities,
    convexity,
    duration,
    sensitivities,
)

TENORS = (1.0, 2.0, 3.0, 5.0)
CASHFLOWS = [4.0, 4.0, 4.0, 4.0, 104.0]
TIMES = [1.0, 2.0, 3.0, 4.0, 5.0]


@pytest.fixture
def curve():
    return RateCurve((0.02, 0.025, 0.03, 0.032), TENORS)


@pytest.fixture
def credit():
    return RateCurve((0.010, 0.012, 0.015, 0.02), TENORS)


class TestRiskMeasure:
    """Tests for measure parsing."""

    @pytest.mark.parametrize("name,expected", [
        ("macaulay", RiskMeasure.MACAULAY),
        ("Modified", RiskMeasure.MODIFIED),
        ("dv01", RiskMeasure.DV01),
        (" IR01 ", RiskMeasure.IR01),
        ("cs01", RiskMeasure.CS01),
    ])
    def test_from_string(self, name, expected):
        assert RiskMeasure.from_string(name) == expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            RiskMeasure.from_string("gamma")


class TestDuration:
    """Reference bond: 3y 5% annual coupon at a flat 3% yield."""

    def test_reference_bond(self):
        assert duration("modified", 0.03, [5, 5, 105]) == pytest.approx(2.7801, abs=1e-4)
        assert duration(RiskMeasure.MACAULAY, 0.03, [5, 5, 105]) == pytest.approx(2.8635, abs=1e-4)
        assert convexity(0.03, [5, 5, 105]) == pytest.approx(10.6258, abs=1e-4)

    def test_default_is_modified(self):
        assert duration(0.03, [5, 5, 105]) == pytest.approx(2.780101622010806, rel=1e-12)
        assert duration(0.03, [5, 5, 105]) == duration("modified", 0.03, [5, 5, 105])

    def test_default_with_curve(self, curve):
        np.testing.assert_allclose(
            duration(curve, CASHFLOWS, TIMES, key_rates=True),
            duration("modified", curve, CASHFLOWS, TIMES, key_rates=True),
        )

    def test_dv01_is_duration_times_value(self):
        value = StandardValuation([5, 5, 105])(RateCurve((0.03,), (1.0,), compounding="annual").build())
        dv01 = duration("dv01", 0.03, [5, 5, 105])
        assert dv01 == pytest.approx(duration("modified", 0.03, [5, 5, 105]) * value / 1e4)

    def test_key_rates_sum_to_total(self, curve):
        key_rates = duration("modified", curve, CASHFLOWS, TIMES, key_rates=True)
        assert key_rates.shape == (len(TENORS),)
        assert key_rates.sum() == pytest.approx(duration("modified", curve, CASHFLOWS, TIMES))

        kr_dv01 = duration("dv01", curve, CASHFLOWS, TIMES, key_rates=True)
        assert kr_dv01.shape == (len(TENORS),)
        assert np.all(kr_dv01 > 0)

    def test_valuation_function(self):
        """A custom function is differentiated like any other valuation."""
        curve = create_flat_curve(0.03, tenors=(1.0, 2.0, 3.0))
        krd = duration("modified", curve, lambda c: 100.0 * c(2.0), key_rates=True)
        np.testing.assert_allclose(krd, [0.0, 2.0, 0.0], atol=1e-12)

    def test_macaulay_rejects_key_rates(self):
        with pytest.raises(ValueError):
            duration("macaulay", 0.03, [5, 5, 105], key_rates=True)

    def test_macaulay_rejects_function(self):
        with pytest.raises(ValueError):
            duration("macaulay", 0.03, lambda c: c(1.0))

    def test_macaulay_rejects_two_curves(self, curve, credit):
        with pytest.raises(ValueError):
            duration("macaulay", curve, credit, CASHFLOWS, TIMES)

    def test_curve_count(self, curve, credit):
        with pytest.raises(ValueError):
            duration("ir01", curve, CASHFLOWS, TIMES)
        with pytest.raises(ValueError):
            duration("modified", curve, credit, CASHFLOWS, TIMES)

    def test_missing_curve(self):
        with pytest.raises(TypeError):
            duration("modified", [5, 5, 105])

    def test_missing_valuation(self, curve):
        with pytest.raises(TypeError):
            duration("modified", curve)


class TestParKeyRates:
    """Key-rate durations against par rates."""

    @pytest.fixture
    def periodic_curve(self):
        """Flat 4% semi-annual curve on 1y..10y."""
        return RateCurve((0.04,) * 10, tuple(range(1, 11)), compounding="semiannual")

    def test_par_bond(self, periodic_curve):
        """A 5y 4% semi-annual bond on a flat 4% curve only feels the 5y par rate."""
        amounts, times = fixed_rate_bond_cashflows(0.04, 5.0, frequency=2)
        krd = duration("modified", periodic_curve, amounts, times, key_rates=True, par_frequency=2)

        annuity = 0.5 * (1 - 1.02 ** -10) / 0.02
        assert krd.shape == (10,)
        np.testing.assert_allclose(krd[:4], 0.0, atol=1e-8)
        assert krd[4] == pytest.approx(annuity, rel=1e-8)
        assert krd[4] == pytest.approx(4.45, abs=0.05)
        np.testing.assert_allclose(krd[5:], 0.0, atol=1e-8)

    def test_par_dv01(self, periodic_curve):
        amounts, times = fixed_rate_bond_cashflows(0.04, 5.0, frequency=2)
        dv01 = duration("dv01", periodic_curve, amounts, times, par_frequency=2)
        annuity = 0.5 * (1 - 1.02 ** -10) / 0.02
        assert dv01 == pytest.approx(100.0 * annuity / 1e4, rel=1e-8)

    def test_par_convexity(self, curve):
        matrix = convexity(curve, CASHFLOWS, TIMES, key_rates=True, par_frequency=1)
        assert matrix.shape == (len(TENORS), len(TENORS))
        np.testing.assert_allclose(matrix, matrix.T, atol=1e-8)

    def test_unsupported_measures(self, curve, credit):
        with pytest.raises(ValueError):
            duration("macaulay", 0.03, [5, 5, 105], par_frequency=2)
        with pytest.raises(ValueError):
            duration("ir01", curve, credit, CASHFLOWS, TIMES, par_frequency=2)
        with pytest.raises(ValueError):
            convexity(curve, credit, CASHFLOWS, TIMES, par_frequency=2)


class TestTwoCurveMeasures:
    """IR01/CS01 through the API."""

    def test_ir01_cs01(self, curve, credit):
        ir01 = duration("ir01", curve, credit, CASHFLOWS, TIMES)
        cs01 = duration("cs01", curve, credit, CASHFLOWS, TIMES)
        assert ir01 > 0
        assert ir01 == pytest.approx(cs01, abs=1e-10)

        combined = RateCurve(tuple(b + c for b, c in zip(curve.rates, credit.rates)), TENORS)
        single = compute_sensitivities(combined, StandardValuation(CASHFLOWS, TIMES))
        assert ir01 == pytest.approx(single.dv01, abs=1e-10)

    def test_flat_yields(self):
        """Two bare yields behave like continuously compounded curves that add up."""
        ir01 = duration("ir01", 0.03, 0.01, [5, 5, 105], [1, 2, 3])
        cs01 = duration("cs01", 0.03, 0.01, [5, 5, 105], [1, 2, 3])
        assert ir01 == pytest.approx(cs01, abs=1e-10)

        combined = RateCurve((math.log(1.03) + math.log(1.01),), (1.0,), compounding="continuous")
        assert ir01 == pytest.approx(duration("dv01", combined, [5, 5, 105], [1, 2, 3]), abs=1e-10)

        blocks = convexity(0.03, 0.01, [5, 5, 105], [1, 2, 3])
        assert blocks.base == pytest.approx(blocks.cross)

    def test_key_rate_ir01(self, curve, credit):
        kr = duration("ir01", curve, credit, CASHFLOWS, TIMES, key_rates=True)
        assert kr.shape == (len(TENORS),)
        assert kr.sum() == pytest.approx(duration("ir01", curve, credit, CASHFLOWS, TIMES))

    def test_two_curve_function(self, curve, credit):
        """Only the credit curve enters: IR01 is zero."""
        def credit_only(base, spread):
            return 100.0 * spread(3.0)

        assert duration("ir01", curve, credit, credit_only) == pytest.approx(0.0, abs=1e-15)
        assert duration("cs01", curve, credit, credit_only) > 0

    def test_tenor_mismatch(self, curve):
        other = RateCurve((0.01, 0.012), (1.0, 2.0))
        with pytest.raises(TenorMismatchError):
            duration("cs01", curve, other, CASHFLOWS, TIMES)

    def test_convexity_blocks(self, curve, credit):
        blocks = convexity(curve, credit, CASHFLOWS, TIMES)
        assert isinstance(blocks, ConvexityBlocks)
        assert blocks.base == pytest.approx(blocks.credit)
        assert blocks.base == pytest.approx(blocks.cross)

        matrices = convexity(curve, credit, CASHFLOWS, TIMES, key_rates=True)
        assert matrices.base.shape == (len(TENORS), len(TENORS))
        assert matrices.cross.sum() == pytest.approx(blocks.cross)


class TestReports:
    """Tests for the one-pass reports."""

    def test_single_curve(self, curve):
        report = sensitivities(curve, CASHFLOWS, TIMES)
        assert isinstance(report, SensitivityReport)
        assert report.durations.sum() == pytest.approx(duration("modified", curve, CASHFLOWS, TIMES))
        assert report.convexities.sum() == pytest.approx(convexity(curve, CASHFLOWS, TIMES))

        d = report.to_dict()
        assert d["value"] == pytest.approx(report.value)
        assert isinstance(d["durations"], list)
        assert len(d["convexities"]) == len(TENORS)

    def test_two_curve(self, curve, credit):
        report = sensitivities(curve, credit, CASHFLOWS, TIMES)
        assert isinstance(report, TwoCurveSensitivityReport)
        np.testing.assert_allclose(report.base_durations, report.credit_durations, atol=1e-12)

        d = report.to_dict()
        assert set(d["convexities"]) == {"base", "credit", "cross"}
        assert isinstance(d["base_durations"], list)
