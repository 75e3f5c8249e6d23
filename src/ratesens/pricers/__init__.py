"""
Pricers package - valuation functions of discount curves.

Provides:
- Cashflow streams, present value and rolled-back values
- Standard (fixed cashflow) single- and two-curve valuations
- Custom valuation wrapper and sample custom instruments
- Black-Scholes European options with AD Greeks
"""

from .cashflows import (
    Cashflow,
    as_cashflow_arrays,
    fixed_rate_bond_cashflows,
    present_value,
    present_values,
    moic,
)
from .valuation import (
    StandardValuation,
    TwoCurveStandardValuation,
    CustomValuation,
    make_valuation,
)
from .instruments import (
    callable_bond_valuation,
    floating_rate_note_valuation,
)
from .options import (
    eurocall,
    europut,
    euro_greeks,
)

__all__ = [
    "Cashflow",
    "as_cashflow_arrays",
    "fixed_rate_bond_cashflows",
    "present_value",
    "present_values",
    "moic",
    "StandardValuation",
    "TwoCurveStandardValuation",
    "CustomValuation",
    "make_valuation",
    "callable_bond_valuation",
    "floating_rate_note_valuation",
    "eurocall",
    "europut",
    "euro_greeks",
]
