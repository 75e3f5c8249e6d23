"""
RateSens: Yield Curve Risk Sensitivities by Automatic Differentiation

A modular library for:
- Differentiating arbitrary cashflow valuations with respect to curve rates
- Key-rate durations, DV01 and convexity matrices in one forward pass
- Base / credit curve decomposition (IR01, CS01, cross convexity)
- Pathwise sensitivities of seeded Monte Carlo valuations
- Par-rate key-rate durations, cashflow roll-back, option Greeks

Scope: deterministic and short-rate-model valuations on zero-rate curves.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import BP_SCALE, CompoundingConvention
from .config import RiskSettings, settings, configure_logging
from .exceptions import RatesensError, DimensionMismatchError, TenorMismatchError
from .dates import years_between, policy_year, accum_offset

# Autodiff
from .autodiff import Dual, gradient, hessian, derivative

# Curves
from .curves import (
    RateCurve,
    DiscountCurve,
    build_curve,
    create_flat_curve,
    par_rates,
    bootstrap_curve,
)

# Pricers
from .pricers import (
    Cashflow,
    StandardValuation,
    TwoCurveStandardValuation,
    CustomValuation,
    present_value,
    present_values,
    moic,
    fixed_rate_bond_cashflows,
    callable_bond_valuation,
    floating_rate_note_valuation,
    eurocall,
    europut,
    euro_greeks,
)

# Risk
from .risk import (
    RiskMeasure,
    duration,
    convexity,
    sensitivities,
    compute_sensitivities,
    compute_par_sensitivities,
    compute_two_curve_sensitivities,
    SensitivityResult,
    TwoCurveSensitivityResult,
    SensitivityReport,
    TwoCurveSensitivityReport,
    ConvexityBlocks,
    BumpEngine,
)

# Simulation
from .simulation import (
    SimulationConfig,
    HoLeeModel,
    MonteCarloValuation,
    fixed_cashflow_payoff,
    callable_bond_payoff,
    simulate_short_rates,
)

__all__ = [
    # Core
    "BP_SCALE",
    "CompoundingConvention",
    "RiskSettings",
    "settings",
    "configure_logging",
    "RatesensError",
    "DimensionMismatchError",
    "TenorMismatchError",
    "years_between",
    "policy_year",
    "accum_offset",
    # Autodiff
    "Dual",
    "gradient",
    "hessian",
    "derivative",
    # Curves
    "RateCurve",
    "DiscountCurve",
    "build_curve",
    "create_flat_curve",
    "par_rates",
    "bootstrap_curve",
    # Pricers
    "Cashflow",
    "StandardValuation",
    "TwoCurveStandardValuation",
    "CustomValuation",
    "present_value",
    "present_values",
    "moic",
    "fixed_rate_bond_cashflows",
    "callable_bond_valuation",
    "floating_rate_note_valuation",
    "eurocall",
    "europut",
    "euro_greeks",
    # Risk
    "RiskMeasure",
    "duration",
    "convexity",
    "sensitivities",
    "compute_sensitivities",
    "compute_par_sensitivities",
    "compute_two_curve_sensitivities",
    "SensitivityResult",
    "TwoCurveSensitivityResult",
    "SensitivityReport",
    "TwoCurveSensitivityReport",
    "ConvexityBlocks",
    "BumpEngine",
    # Simulation
    "SimulationConfig",
    "HoLeeModel",
    "MonteCarloValuation",
    "fixed_cashflow_payoff",
    "callable_bond_payoff",
    "simulate_short_rates",
]
