"""
Simulation package - Monte Carlo valuations differentiable by the AD engines.

Provides:
- Ho-Lee short-rate model calibrated to a discount curve
- Explicitly seeded shock generation
- Payoffs and the MonteCarloValuation adapter
"""

from .short_rate import (
    SimulationConfig,
    draw_shocks,
    ScenarioSet,
    HoLeeModel,
    simulate_short_rates,
)
from .adapter import (
    fixed_cashflow_payoff,
    callable_bond_payoff,
    MonteCarloValuation,
)

__all__ = [
    "SimulationConfig",
    "draw_shocks",
    "ScenarioSet",
    "HoLeeModel",
    "simulate_short_rates",
    "fixed_cashflow_payoff",
    "callable_bond_payoff",
    "MonteCarloValuation",
]
