"""
Monte Carlo valuations usable by the AD engines.

A MonteCarloValuation is an ordinary curve -> scalar valuation: it simulates
paths calibrated to the curve it receives and averages a payoff. Shocks are
drawn once at construction, so the estimator is a smooth function of the
curve rates and its AD gradient is the exact pathwise derivative.

Caveat: pathwise derivatives are biased where the payoff is discontinuous
in the rates (digital or barrier features) and are only piecewise valid
across exercise boundaries such as the call decision of a callable bond.
Use the bump engine for such payoffs.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from ..autodiff import primal
from ..pricers.cashflows import as_cashflow_arrays
from .short_rate import HoLeeModel, ScenarioSet, SimulationConfig, draw_shocks

logger = logging.getLogger(__name__)

Payoff = Callable[[ScenarioSet], np.ndarray]


def fixed_cashflow_payoff(cashflows, times: Optional[Sequence[float]] = None) -> Payoff:
    """
    Pathwise discounted value of fixed cashflows.

    Args:
        cashflows: Cashflow amounts (or Cashflow objects)
        times: Payment times

    Returns:
        Payoff mapping a ScenarioSet to per-path values
    """
    amounts, times_arr = as_cashflow_arrays(cashflows, times)

    def payoff(scenarios: ScenarioSet) -> np.ndarray:
        total = 0.0
        for a, t in zip(amounts, times_arr):
            total = total + float(a) * scenarios.discount_at(float(t))
        return total

    return payoff


def callable_bond_payoff(
    cashflows,
    times: Optional[Sequence[float]],
    call_time: float,
    call_price: float = 100.0
) -> Payoff:
    """
    Pathwise value of a bond callable once at call_time.

    Cashflows up to call_time are paid. At call_time the issuer redeems
    when the continuation value (remaining cashflows priced with the
    model's bond formula on that path) exceeds call_price.

    Args:
        cashflows: Cashflow amounts
        times: Payment times
        call_time: Exercise date (must not exceed the simulation horizon)
        call_price: Redemption price

    Returns:
        Payoff mapping a ScenarioSet to per-path values
    """
    amounts, times_arr = as_cashflow_arrays(cashflows, times)
    paid = times_arr <= call_time + 1e-12

    def payoff(scenarios: ScenarioSet) -> np.ndarray:
        if call_time > scenarios.horizon + 1e-9:
            raise ValueError(
                f"Call time {call_time} is beyond the simulation horizon {scenarios.horizon}"
            )

        value = 0.0
        for a, t in zip(amounts[paid], times_arr[paid]):
            value = value + float(a) * scenarios.discount_at(float(t))

        continuation = 0.0
        for a, t in zip(amounts[~paid], times_arr[~paid]):
            continuation = continuation + float(a) * scenarios.bond_price(call_time, float(t))

        if np.isscalar(continuation):
            return value

        holder = np.array(
            [c if c < call_price else call_price for c in continuation],
            dtype=continuation.dtype,
        )
        return value + scenarios.discount_at(call_time) * holder

    return payoff


class MonteCarloValuation:
    """
    Monte Carlo estimator of a payoff under a short-rate model.

    Attributes:
        payoff: Function of a ScenarioSet returning per-path values
        config: Simulation settings (seed required)
        model: Short-rate model (Ho-Lee with 1% volatility by default)
        shocks: Standard normals drawn once and reused on every call
    """

    n_curves = 1

    def __init__(
        self,
        payoff: Payoff,
        config: SimulationConfig,
        model: Optional[HoLeeModel] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.payoff = payoff
        self.config = config
        self.model = model if model is not None else HoLeeModel()
        self.shocks = draw_shocks(config, rng)
        self.shocks.setflags(write=False)

    def simulate(self, curve) -> ScenarioSet:
        """Paths calibrated to curve using the stored shocks."""
        return self.model.simulate(curve, self.shocks, self.config.time_step)

    def path_values(self, curve) -> np.ndarray:
        """Per-path payoff values."""
        values = self.payoff(self.simulate(curve))
        return np.broadcast_to(values, (self.config.n_scenarios,))

    def __call__(self, curve):
        values = self.path_values(curve)
        return values.sum() / len(values)

    def standard_error(self, curve) -> float:
        """Monte Carlo standard error of the estimate (plain float)."""
        values = np.array([float(primal(v)) for v in self.path_values(curve)])
        return float(values.std(ddof=1) / np.sqrt(len(values)))

    def __repr__(self) -> str:
        return (f"MonteCarloValuation(n_scenarios={self.config.n_scenarios}, "
                f"steps={self.config.n_steps}, model={self.model!r})")


__all__ = [
    "fixed_cashflow_payoff",
    "callable_bond_payoff",
    "MonteCarloValuation",
]
