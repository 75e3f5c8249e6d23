"""
Valuation functions.

Every valuation is a callable from discount curve(s) to a scalar. Standard
valuations discount a fixed cashflow stream; custom valuations wrap any
caller function of one curve (or of a base and a credit curve).

Custom functions must depend on their curve arguments only (plus an
explicitly passed random generator). Hidden mutable state makes the
computed derivatives silently wrong.
"""

from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from .cashflows import as_cashflow_arrays


class StandardValuation:
    """
    Sum of discounted cashflows on a single curve.

    V = sum_i amount_i * P(t_i)
    """

    n_curves = 1

    def __init__(self, cashflows, times: Optional[Sequence[float]] = None):
        self.amounts, self.times = as_cashflow_arrays(cashflows, times)

    def present_values(self, curve) -> list:
        """Discounted value of each cashflow."""
        return [float(a) * curve(float(t)) for a, t in zip(self.amounts, self.times)]

    def __call__(self, curve):
        total = 0.0
        for pv in self.present_values(curve):
            total = total + pv
        return total

    def macaulay_duration(self, curve) -> float:
        """PV-weighted average time of the cashflows."""
        pvs = np.asarray(self.present_values(curve), dtype=float)
        value = pvs.sum()
        if value == 0:
            raise ZeroDivisionError("Macaulay duration undefined for zero present value")
        return float(np.dot(self.times, pvs) / value)

    def __add__(self, other: "StandardValuation") -> "StandardValuation":
        if not isinstance(other, StandardValuation):
            return NotImplemented
        return StandardValuation(
            np.concatenate([self.amounts, other.amounts]),
            np.concatenate([self.times, other.times]),
        )

    def __repr__(self) -> str:
        return f"StandardValuation(n_cashflows={len(self.amounts)})"


class TwoCurveStandardValuation:
    """
    Sum of cashflows discounted on a base and a credit curve.

    V = sum_i amount_i * P_base(t_i) * P_credit(t_i)

    Multiplying discount factors is equivalent to adding continuously
    compounded rates, so for fixed cashflows IR01 equals CS01.
    """

    n_curves = 2

    def __init__(self, cashflows, times: Optional[Sequence[float]] = None):
        self.amounts, self.times = as_cashflow_arrays(cashflows, times)

    def __call__(self, base_curve, credit_curve):
        total = 0.0
        for a, t in zip(self.amounts, self.times):
            t = float(t)
            total = total + float(a) * base_curve(t) * credit_curve(t)
        return total

    def __repr__(self) -> str:
        return f"TwoCurveStandardValuation(n_cashflows={len(self.amounts)})"


class CustomValuation:
    """
    Caller-supplied valuation of one or two curves.

    Attributes:
        func: Callable taking n_curves discount curves, returning a scalar
        n_curves: 1 (single curve) or 2 (base, credit)
    """

    def __init__(self, func: Callable[..., Any], n_curves: int = 1):
        if n_curves not in (1, 2):
            raise ValueError(f"n_curves must be 1 or 2, got {n_curves}")
        self.func = func
        self.n_curves = n_curves

    def __call__(self, *curves):
        return self.func(*curves)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        return f"CustomValuation({name}, n_curves={self.n_curves})"


def make_valuation(args: Tuple, n_curves: int = 1):
    """
    Normalize API arguments to a valuation callable.

    Args:
        args: (valuation_function,), (cashflows,) or (cashflows, times)
        n_curves: Number of curves the valuation must accept

    Returns:
        Valuation callable
    """
    if len(args) == 1 and callable(args[0]):
        func = args[0]
        arity = getattr(func, "n_curves", None)
        if arity is None:
            return CustomValuation(func, n_curves)
        if arity != n_curves:
            raise ValueError(
                f"Valuation takes {arity} curve(s) but {n_curves} were given"
            )
        return func

    if len(args) not in (1, 2):
        raise TypeError(
            "Expected a valuation function, (cashflows,) or (cashflows, times)"
        )

    cashflows = args[0]
    times = args[1] if len(args) == 2 else None
    if n_curves == 1:
        return StandardValuation(cashflows, times)
    return TwoCurveStandardValuation(cashflows, times)


__all__ = [
    "StandardValuation",
    "TwoCurveStandardValuation",
    "CustomValuation",
    "make_valuation",
]
