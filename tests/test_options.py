"""
Tests for European option pricing.
"""

import math

import numpy as np
import pytest
from scipy.stats import norm

from ratesens.autodiff import derivative
from ratesens.pricers import euro_greeks, eurocall, europut


class TestBlackScholes:
    """Reference prices for S=1, tau=1, r=5%, sigma=25%."""

    def test_no_dividend(self):
        assert eurocall(1.0, 1.0, 1.0, 0.05, 0.25) == pytest.approx(0.12336, abs=1e-5)
        assert europut(1.0, 1.0, 1.0, 0.05, 0.25) == pytest.approx(0.07459, abs=1e-5)

    def test_dividend(self):
        assert eurocall(1.0, 1.0, 1.0, 0.05, 0.25, q=0.03) == pytest.approx(0.105493, abs=1e-5)
        assert europut(1.0, 1.0, 1.0, 0.05, 0.25, q=0.03) == pytest.approx(0.086277, abs=1e-5)

    def test_deep_in_the_money(self):
        assert eurocall(1.0, 0.5, 1.0, 0.05, 0.25, q=0.03) == pytest.approx(0.49494, abs=1e-5)
        assert europut(1.0, 0.5, 1.0, 0.05, 0.25, q=0.03) == pytest.approx(0.00011, abs=1e-5)

    def test_expiry(self):
        assert eurocall(1.0, 0.5, 0.0, 0.05, 0.25) == pytest.approx(0.5)
        assert europut(1.0, 0.5, 0.0, 0.05, 0.25) == pytest.approx(0.0)
        assert eurocall(1.0, 1.5, 0.0, 0.05, 0.25) == pytest.approx(0.0)
        assert europut(1.0, 1.5, 0.0, 0.05, 0.25) == pytest.approx(0.5)

    def test_put_call_parity(self):
        S, K, tau, r, sigma, q = 1.2, 1.0, 0.75, 0.03, 0.2, 0.01
        lhs = eurocall(S, K, tau, r, sigma, q) - europut(S, K, tau, r, sigma, q)
        rhs = S * math.exp(-q * tau) - K * math.exp(-r * tau)
        assert lhs == pytest.approx(rhs, abs=1e-12)

    def test_non_positive_volatility(self):
        with pytest.raises(ValueError):
            eurocall(1.0, 1.0, 1.0, 0.05, 0.0)


class TestGreeks:
    """AD Greeks against the closed forms."""

    S, K, TAU, R, SIGMA, Q = 1.0, 1.0, 1.0, 0.05, 0.25, 0.03

    def d1(self):
        return (math.log(self.S / self.K) + (self.R - self.Q + 0.5 * self.SIGMA ** 2) * self.TAU) / (
            self.SIGMA * math.sqrt(self.TAU)
        )

    def test_call_greeks(self):
        greeks = euro_greeks(self.S, self.K, self.TAU, self.R, self.SIGMA, self.Q)
        d1 = self.d1()
        d2 = d1 - self.SIGMA * math.sqrt(self.TAU)
        disc_q = math.exp(-self.Q * self.TAU)

        assert greeks["price"] == pytest.approx(0.105493, abs=1e-5)
        assert greeks["delta"] == pytest.approx(disc_q * norm.cdf(d1), rel=1e-10)
        assert greeks["gamma"] == pytest.approx(
            disc_q * norm.pdf(d1) / (self.S * self.SIGMA * math.sqrt(self.TAU)), rel=1e-10
        )
        assert greeks["vega"] == pytest.approx(
            self.S * disc_q * norm.pdf(d1) * math.sqrt(self.TAU), rel=1e-10
        )
        assert greeks["rho"] == pytest.approx(
            self.K * self.TAU * math.exp(-self.R * self.TAU) * norm.cdf(d2), rel=1e-10
        )

    def test_put_delta(self):
        greeks = euro_greeks(self.S, self.K, self.TAU, self.R, self.SIGMA, self.Q, is_call=False)
        expected = -math.exp(-self.Q * self.TAU) * norm.cdf(-self.d1())
        assert greeks["delta"] == pytest.approx(expected, rel=1e-10)

    def test_theta_matches_derivative(self):
        greeks = euro_greeks(self.S, self.K, self.TAU, self.R, self.SIGMA, self.Q)
        dtau = derivative(lambda tau: eurocall(self.S, self.K, tau, self.R, self.SIGMA, self.Q), self.TAU)
        assert greeks["theta"] == pytest.approx(-dtau, rel=1e-12)

    def test_greeks_need_time(self):
        with pytest.raises(ValueError):
            euro_greeks(1.0, 1.0, 0.0, 0.05, 0.25)

    def test_vega_positive_across_strikes(self):
        vegas = [euro_greeks(1.0, k, 1.0, 0.05, 0.25)["vega"] for k in np.linspace(0.6, 1.4, 5)]
        assert all(v > 0 for v in vegas)
