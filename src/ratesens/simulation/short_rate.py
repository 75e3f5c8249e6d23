"""
Ho-Lee short-rate simulation calibrated to a discount curve.

Model:
    dr = theta(t) dt + sigma dW

With theta fitted to the initial curve the short rate is

    r(t) = f(0, t) + 0.5 sigma^2 t^2 + sigma W(t)

where f(0, t) is the instantaneous forward rate. On a grid t_i = i dt the
simulation uses

    r_i = f(0, t_i + dt/2) + 0.5 sigma^2 t_i^2 + sigma W_i
    D_k = exp(-sum_{i<k} r_i dt)

The 0.5 sigma^2 t_i^2 term is the exact discrete convexity correction, so
E[D_k] reproduces the curve's discount factors up to the midpoint
approximation of the forward integral.

Forward rates come from a time-derivative AD pass nested inside whatever
pass is running over the curve rates. Random shocks are drawn once from an
explicitly seeded generator and passed in, so every re-evaluation of the
curve sees exactly the same draws.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from ..autodiff import exp, is_dual
from ..curves.curve import RateCurve, as_rate_curve

logger = logging.getLogger(__name__)


def _numeric_array(values) -> np.ndarray:
    """Float array, or object array when any entry is a dual."""
    arr = np.array(values, dtype=object)
    if not any(is_dual(v) for v in arr.flat):
        arr = arr.astype(float)
    return arr


@dataclass(frozen=True)
class SimulationConfig:
    """
    Monte Carlo settings.

    Attributes:
        n_scenarios: Number of paths
        time_step: Step size in years
        horizon: Simulation horizon in years (a whole number of steps)
        seed: Seed of the random generator (required)
        antithetic: Pair every path with its negated shocks
    """
    n_scenarios: int
    time_step: float
    horizon: float
    seed: int
    antithetic: bool = False

    def __post_init__(self):
        if self.seed is None:
            raise ValueError("A random seed is required for reproducible sensitivities")
        if self.n_scenarios <= 0:
            raise ValueError("n_scenarios must be positive")
        if self.time_step <= 0 or self.horizon <= 0:
            raise ValueError("time_step and horizon must be positive")
        n_steps = round(self.horizon / self.time_step)
        if n_steps == 0 or abs(n_steps * self.time_step - self.horizon) > 1e-9:
            raise ValueError(
                f"Horizon {self.horizon} is not a whole number of steps of {self.time_step}"
            )
        if self.antithetic and self.n_scenarios % 2:
            raise ValueError("Antithetic sampling needs an even number of scenarios")

    @property
    def n_steps(self) -> int:
        return int(round(self.horizon / self.time_step))


def draw_shocks(config: SimulationConfig, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Draw standard normal shocks for all paths at once.

    Shocks are drawn as one row-major (n_scenarios, n_steps) block, so path
    i always receives row i whatever order paths are later evaluated in.

    Args:
        config: Simulation settings
        rng: Generator to draw from (seeded from config.seed when omitted)

    Returns:
        Array of shape (n_scenarios, n_steps)
    """
    rng = rng if rng is not None else np.random.default_rng(config.seed)
    if config.antithetic:
        half = rng.standard_normal((config.n_scenarios // 2, config.n_steps))
        return np.vstack([half, -half])
    return rng.standard_normal((config.n_scenarios, config.n_steps))


@dataclass
class ScenarioSet:
    """
    Simulated short-rate paths.

    Attributes:
        times: Grid 0, dt, ..., horizon (n_steps + 1 points)
        short_rates: r_i per path and step, shape (n_scenarios, n_steps)
        brownian: W(t) per path on the grid, shape (n_scenarios, n_steps + 1)
        discount_factors: Pathwise D(t) on the grid, shape (n_scenarios, n_steps + 1)
        curve: Discount curve the paths were calibrated to
        model: Model that generated the paths
    """
    times: np.ndarray
    short_rates: np.ndarray
    brownian: np.ndarray
    discount_factors: np.ndarray
    curve: Any = field(repr=False, default=None)
    model: Any = field(repr=False, default=None)

    @property
    def n_scenarios(self) -> int:
        return self.short_rates.shape[0]

    @property
    def time_step(self) -> float:
        return float(self.times[1] - self.times[0])

    @property
    def horizon(self) -> float:
        return float(self.times[-1])

    def grid_index(self, t: float) -> int:
        """Index of the last grid point at or before t (capped at the horizon)."""
        if t < 0:
            raise ValueError("Time must be non-negative")
        k = int(np.floor(t / self.time_step + 1e-9))
        return min(k, len(self.times) - 1)

    def discount_at(self, t: float) -> np.ndarray:
        """
        Pathwise discount factor to time t.

        On the grid this is the accumulated short-rate discount. Between
        grid points (or past the horizon) the path discount to the previous
        grid point is multiplied by the model's zero-coupon bond price.

        Returns:
            Array of shape (n_scenarios,)
        """
        k = self.grid_index(t)
        t_k = float(self.times[k])
        path_discount = self.discount_factors[:, k]
        if abs(t - t_k) < 1e-9:
            return path_discount
        return path_discount * self.bond_price(t_k, t)

    def bond_price(self, t: float, maturity: float) -> np.ndarray:
        """Model price at grid time t of a zero-coupon bond maturing at maturity."""
        if self.model is None or self.curve is None:
            raise ValueError("Scenario set carries no model to price bonds with")
        k = self.grid_index(t)
        return self.model.zero_coupon_bond(self.curve, float(self.times[k]), maturity,
                                           self.brownian[:, k])


class HoLeeModel:
    """
    Ho-Lee model fitted to the initial discount curve.

    Attributes:
        volatility: Absolute (normal) short-rate volatility
    """

    def __init__(self, volatility: float = 0.01):
        if volatility < 0:
            raise ValueError("Volatility must be non-negative")
        self.volatility = volatility

    def drift(self, curve, times: np.ndarray, time_step: float) -> np.ndarray:
        """
        Deterministic part of r_i for each step start t_i.

        Args:
            curve: Discount curve (rates may be duals)
            times: Step start times t_i
            time_step: dt

        Returns:
            Array of f(0, t_i + dt/2) + 0.5 sigma^2 t_i^2
        """
        sigma2 = self.volatility ** 2
        return _numeric_array([
            curve.instantaneous_forward(float(t) + 0.5 * time_step) + 0.5 * sigma2 * float(t) ** 2
            for t in times
        ])

    def simulate(self, curve, shocks: np.ndarray, time_step: float) -> ScenarioSet:
        """
        Generate short-rate paths from pre-drawn shocks.

        Args:
            curve: Discount curve to calibrate to
            shocks: Standard normals of shape (n_scenarios, n_steps)
            time_step: dt

        Returns:
            ScenarioSet
        """
        n_scenarios, n_steps = shocks.shape
        grid = np.arange(n_steps + 1) * time_step

        brownian = np.zeros((n_scenarios, n_steps + 1))
        brownian[:, 1:] = np.cumsum(np.sqrt(time_step) * shocks, axis=1)

        drift = self.drift(curve, grid[:-1], time_step)
        short_rates = drift[np.newaxis, :] + self.volatility * brownian[:, :-1]

        integrated = np.cumsum(short_rates * time_step, axis=1)
        zeros = np.zeros((n_scenarios, 1), dtype=integrated.dtype)
        discount_factors = exp(-np.concatenate([zeros, integrated], axis=1))

        logger.debug("Simulated %d paths x %d steps (dt=%s, sigma=%s)",
                     n_scenarios, n_steps, time_step, self.volatility)

        return ScenarioSet(
            times=grid,
            short_rates=short_rates,
            brownian=brownian,
            discount_factors=discount_factors,
            curve=curve,
            model=self,
        )

    def zero_coupon_bond(self, curve, t: float, maturity: float, brownian):
        """
        Closed-form P(t, T) given W(t).

        P(t,T) = P(0,T) / P(0,t) * exp(-sigma (T-t) W(t) - 0.5 sigma^2 t T (T-t))

        Args:
            curve: Initial discount curve
            t: Current time
            maturity: Bond maturity T >= t
            brownian: W(t), scalar or array over paths

        Returns:
            Bond price(s)
        """
        if maturity < t:
            raise ValueError("Bond maturity is before the pricing time")
        tau = maturity - t
        sigma = self.volatility
        ratio = curve(maturity) / curve(t)
        exponent = -sigma * tau * np.asarray(brownian, dtype=float) - 0.5 * sigma ** 2 * t * maturity * tau
        return ratio * exp(exponent)

    def __repr__(self) -> str:
        return f"HoLeeModel(volatility={self.volatility})"


def simulate_short_rates(
    curve,
    n_scenarios: int,
    time_step: float,
    horizon: float,
    seed: int,
    volatility: float = 0.01
) -> ScenarioSet:
    """
    Simulate Ho-Lee paths calibrated to a curve.

    Args:
        curve: DiscountCurve, RateCurve or flat yield
        n_scenarios: Number of paths
        time_step: Step size in years
        horizon: Horizon in years
        seed: Random seed (required)
        volatility: Short-rate volatility

    Returns:
        ScenarioSet
    """

    if isinstance(curve, RateCurve) or not callable(curve):
        curve = as_rate_curve(curve).build()

    config = SimulationConfig(n_scenarios, time_step, horizon, seed)
    return HoLeeModel(volatility).simulate(curve, draw_shocks(config), time_step)


__all__ = [
    "SimulationConfig",
    "draw_shocks",
    "ScenarioSet",
    "HoLeeModel",
    "simulate_short_rates",
]
