"""
Unit tests for Monte Carlo simulation and pathwise sensitivities.
"""

import math

import numpy as np
import pytest

from ratesens.autodiff import primal
from ratesens.curves import RateCurve, create_flat_curve
from ratesens.pricers import StandardValuation
from ratesens.risk import compute_sensitivities
from ratesens.simulation import (
    HoLeeModel,
    MonteCarloValuation,
    SimulationConfig,
    callable_bond_payoff,
    draw_shocks,
    fixed_cashflow_payoff,
    simulate_short_rates,
)

CASHFLOWS = [5.0, 5.0, 105.0]
TIMES = [1.0, 2.0, 3.0]


@pytest.fixture
def flat_curve():
    return create_flat_curve(0.03, tenors=(1.0, 2.0, 3.0))


@pytest.fixture
def config():
    return SimulationConfig(n_scenarios=200, time_step=0.25, horizon=3.0, seed=42, antithetic=True)


class TestSimulationConfig:
    """Tests for simulation settings."""

    def test_steps(self, config):
        assert config.n_steps == 12

    def test_seed_required(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_scenarios=10, time_step=0.5, horizon=1.0, seed=None)

    def test_horizon_multiple_of_step(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_scenarios=10, time_step=0.3, horizon=1.0, seed=1)

    def test_antithetic_even(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_scenarios=11, time_step=0.5, horizon=1.0, seed=1, antithetic=True)

    def test_positive(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_scenarios=0, time_step=0.5, horizon=1.0, seed=1)


class TestShocks:
    """Tests for shock generation."""

    def test_reproducible(self, config):
        np.testing.assert_array_equal(draw_shocks(config), draw_shocks(config))

    def test_row_major_assignment(self):
        """Path i receives the same row whatever the number of paths."""
        small = SimulationConfig(n_scenarios=5, time_step=0.5, horizon=2.0, seed=7)
        large = SimulationConfig(n_scenarios=50, time_step=0.5, horizon=2.0, seed=7)
        np.testing.assert_array_equal(draw_shocks(small), draw_shocks(large)[:5])

    def test_antithetic(self):
        config = SimulationConfig(n_scenarios=6, time_step=0.5, horizon=1.0, seed=3, antithetic=True)
        shocks = draw_shocks(config)
        assert shocks.shape == (6, 2)
        np.testing.assert_array_equal(shocks[3:], -shocks[:3])

    def test_explicit_generator(self):
        config = SimulationConfig(n_scenarios=200, time_step=0.25, horizon=3.0, seed=42)
        rng = np.random.default_rng(123)
        expected = np.random.default_rng(123).standard_normal((200, 12))
        np.testing.assert_array_equal(draw_shocks(config, rng), expected)


class TestHoLeeModel:
    """Tests for the short-rate model."""

    def test_zero_volatility_reproduces_curve(self, flat_curve):
        scenarios = simulate_short_rates(flat_curve, 3, 0.5, 3.0, seed=1, volatility=0.0)
        np.testing.assert_allclose(scenarios.short_rates, 0.03, atol=1e-12)
        np.testing.assert_allclose(scenarios.discount_at(2.0), math.exp(-0.06), rtol=1e-12)

    def test_shapes(self, flat_curve):
        scenarios = simulate_short_rates(flat_curve, 4, 0.5, 2.0, seed=1)
        assert scenarios.times.shape == (5,)
        assert scenarios.short_rates.shape == (4, 4)
        assert scenarios.brownian.shape == (4, 5)
        assert scenarios.discount_factors.shape == (4, 5)
        np.testing.assert_array_equal(scenarios.discount_factors[:, 0], 1.0)
        np.testing.assert_array_equal(scenarios.brownian[:, 0], 0.0)

    def test_martingale(self, flat_curve):
        """Average path discount reproduces the curve."""
        scenarios = simulate_short_rates(flat_curve, 4000, 0.25, 3.0, seed=11, volatility=0.01)
        curve = flat_curve.build()
        for t in (1.0, 2.0, 3.0):
            assert scenarios.discount_at(t).mean() == pytest.approx(curve(t), rel=2e-3)

    def test_bond_price_at_origin(self, flat_curve):
        curve = flat_curve.build()
        model = HoLeeModel(0.01)
        assert model.zero_coupon_bond(curve, 0.0, 4.0, 0.0) == pytest.approx(curve(4.0))

    def test_off_grid_discount(self, flat_curve):
        """Between grid points the model bond price bridges the gap."""
        scenarios = simulate_short_rates(flat_curve, 2, 0.5, 2.0, seed=5, volatility=0.0)
        np.testing.assert_allclose(scenarios.discount_at(1.3), math.exp(-0.039), rtol=1e-12)
        np.testing.assert_allclose(scenarios.discount_at(4.0), math.exp(-0.12), rtol=1e-12)

    def test_negative_volatility(self):
        with pytest.raises(ValueError):
            HoLeeModel(-0.01)


class TestMonteCarloValuation:
    """Pathwise AD through the Monte Carlo estimator."""

    def test_value_close_to_deterministic(self, flat_curve, config):
        mc = MonteCarloValuation(fixed_cashflow_payoff(CASHFLOWS, TIMES), config)
        deterministic = StandardValuation(CASHFLOWS, TIMES)(flat_curve.build())
        assert mc(flat_curve.build()) == pytest.approx(deterministic, rel=5e-3)
        assert mc.standard_error(flat_curve.build()) > 0

    def test_reproducible(self, flat_curve, config):
        """Same seed, same gradient; repeated evaluation is deterministic."""
        payoff = fixed_cashflow_payoff(CASHFLOWS, TIMES)
        first = compute_sensitivities(flat_curve, MonteCarloValuation(payoff, config))
        second = compute_sensitivities(flat_curve, MonteCarloValuation(payoff, config))
        np.testing.assert_array_equal(first.gradient, second.gradient)

        mc = MonteCarloValuation(payoff, config)
        assert mc(flat_curve.build()) == mc(flat_curve.build())

    def test_summed_duration_matches_deterministic(self, flat_curve, config):
        """Total key-rate duration survives the stochastic model."""
        mc = compute_sensitivities(
            flat_curve, MonteCarloValuation(fixed_cashflow_payoff(CASHFLOWS, TIMES), config)
        )
        deterministic = compute_sensitivities(flat_curve, StandardValuation(CASHFLOWS, TIMES))
        assert mc.duration == pytest.approx(deterministic.duration, abs=0.05)

    def test_sloped_curve_gradient_matches_bumping(self, config):
        """Pathwise AD agrees with bump-and-reprice under fixed shocks."""
        from ratesens.risk import BumpEngine

        curve = RateCurve((0.02, 0.025, 0.03), (1.0, 2.0, 3.0))
        small = SimulationConfig(n_scenarios=50, time_step=0.25, horizon=3.0, seed=9)
        mc = MonteCarloValuation(fixed_cashflow_payoff(CASHFLOWS, TIMES), small)
        result = compute_sensitivities(curve, mc)
        fd = BumpEngine(curve).compute_gradient(mc, eps=1e-5)
        np.testing.assert_allclose(result.gradient, fd, atol=1e-4)

    def test_hessian(self, flat_curve):
        """Second-order pass through the nested forward-rate derivative."""
        small = SimulationConfig(n_scenarios=20, time_step=0.5, horizon=3.0, seed=5)
        mc = MonteCarloValuation(fixed_cashflow_payoff(CASHFLOWS, TIMES), small)
        first = compute_sensitivities(flat_curve, mc)
        second = compute_sensitivities(flat_curve, mc, second_order=True)

        assert second.value == pytest.approx(first.value, rel=1e-12)
        np.testing.assert_allclose(second.gradient, first.gradient, rtol=1e-10)
        np.testing.assert_allclose(second.hessian, second.hessian.T, atol=1e-8)
        assert second.convexity > 0

    def test_callable_below_bullet(self, flat_curve, config):
        """Issuer call can only lower the holder's value."""
        bullet = MonteCarloValuation(fixed_cashflow_payoff(CASHFLOWS, TIMES), config)
        callable_bond = MonteCarloValuation(
            callable_bond_payoff([3.0, 3.0, 103.0], TIMES, call_time=1.0, call_price=100.0),
            config,
        )
        low_coupon = MonteCarloValuation(fixed_cashflow_payoff([3.0, 3.0, 103.0], TIMES), config)
        curve = flat_curve.build()
        assert callable_bond(curve) < low_coupon(curve)
        assert bullet(curve) > low_coupon(curve)

        never_called = MonteCarloValuation(
            callable_bond_payoff([3.0, 3.0, 103.0], TIMES, call_time=1.0, call_price=1e9),
            config,
        )
        assert np.all(callable_bond.path_values(curve) <= never_called.path_values(curve))

    def test_callable_beyond_horizon(self, flat_curve):
        short = SimulationConfig(n_scenarios=4, time_step=0.5, horizon=1.0, seed=1)
        mc = MonteCarloValuation(callable_bond_payoff(CASHFLOWS, TIMES, call_time=2.0), short)
        with pytest.raises(ValueError):
            mc(flat_curve.build())

    def test_callable_differentiable(self, flat_curve, config):
        mc = MonteCarloValuation(
            callable_bond_payoff([3.0, 3.0, 103.0], TIMES, call_time=1.0), config
        )
        result = compute_sensitivities(flat_curve, mc)
        assert primal(result.value) > 0
        assert result.duration > 0
