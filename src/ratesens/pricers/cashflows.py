"""
Cashflow streams.

A cashflow stream is an ordered set of (amount, time) pairs. Streams can be
given as Cashflow objects, as amounts plus times, or as amounts alone (paid
at times 1, 2, ..., n).

Payment times of a valuation are strictly positive. The rollback helpers
(present_values, moic) also take an immediate flow at time 0, e.g. an
initial investment.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..autodiff import Dual
from ..curves.curve import RateCurve, as_rate_curve
from ..exceptions import DimensionMismatchError


@dataclass(frozen=True)
class Cashflow:
    """A single cashflow."""
    amount: float
    time: float  # Year fraction from valuation date


def _as_vector(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim > 1 and max(arr.shape) == arr.size:
        # single row or column matrix
        arr = arr.ravel()
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


def as_cashflow_arrays(
    cashflows: Iterable,
    times: Optional[Sequence[float]] = None,
    allow_zero: bool = False
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Normalize a cashflow stream to (amounts, times) arrays.

    Args:
        cashflows: Cashflow objects or amounts
        times: Payment times (omit for Cashflow objects; defaults to 1..n
            for bare amounts)
        allow_zero: Accept flows paid at time 0

    Returns:
        Tuple of (amounts, times)

    Raises:
        DimensionMismatchError: amounts and times differ in length
        ValueError: a time is negative, or zero without allow_zero
    """
    items = list(cashflows) if not isinstance(cashflows, np.ndarray) else cashflows

    if len(items) > 0 and all(isinstance(cf, Cashflow) for cf in items):
        if times is not None:
            raise ValueError("times must be omitted when passing Cashflow objects")
        amounts = _as_vector([cf.amount for cf in items], "Cashflows")
        times_arr = _as_vector([cf.time for cf in items], "Times")
    else:
        amounts = _as_vector(items, "Cashflows")
        if times is None:
            times_arr = np.arange(1, len(amounts) + 1, dtype=float)
        else:
            times_arr = _as_vector(list(times), "Times")

    if len(amounts) != len(times_arr):
        raise DimensionMismatchError("Cashflow/time", len(amounts), len(times_arr))
    if allow_zero:
        if np.any(times_arr < 0):
            raise ValueError("Cashflow times must be non-negative")
    elif np.any(times_arr <= 0):
        raise ValueError("Cashflow times must be positive")

    return amounts, times_arr


def fixed_rate_bond_cashflows(
    coupon_rate: float,
    maturity: float,
    frequency: int = 2,
    face_value: float = 100.0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cashflows of a bullet fixed-rate bond issued today.

    Args:
        coupon_rate: Annual coupon rate (decimal)
        maturity: Maturity in years (a whole number of coupon periods)
        frequency: Coupons per year
        face_value: Face/par value

    Returns:
        Tuple of (amounts, times)
    """
    n_periods = int(round(maturity * frequency))
    if n_periods <= 0 or abs(n_periods - maturity * frequency) > 1e-9:
        raise ValueError(
            f"Maturity {maturity} is not a whole number of periods at frequency {frequency}"
        )

    times = np.arange(1, n_periods + 1, dtype=float) / frequency
    amounts = np.full(n_periods, face_value * coupon_rate / frequency)
    amounts[-1] += face_value
    return amounts, times


def _discount_function(curve):
    if not callable(curve) or isinstance(curve, RateCurve):
        return as_rate_curve(curve).build()
    return curve


def present_value(curve, cashflows: Iterable, times: Optional[Sequence[float]] = None):
    """
    Present value of a cashflow stream.

    Args:
        curve: Discount function t -> P(0,t), RateCurve, or flat yield
        cashflows: Cashflow objects or amounts
        times: Payment times

    Returns:
        Sum of discounted amounts
    """
    curve = _discount_function(curve)

    amounts, times_arr = as_cashflow_arrays(cashflows, times)
    total = 0.0
    for amount, t in zip(amounts, times_arr):
        total = total + float(amount) * curve(float(t))
    return total


def present_values(curve, cashflows: Iterable, times: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Rolled-back values of the remaining cashflows.

    Entry i is the value of flows i, i+1, ..., n at the time of the previous
    flow (time 0 for the first entry), so entry 0 is the present value and
    the last entry is the final flow discounted over its own period:

        pv_n = a_n P(t_n) / P(t_{n-1})
        pv_i = (a_i + pv_{i+1}) P(t_i) / P(t_{i-1})

    Args:
        curve: Discount function, RateCurve, or flat yield
        cashflows: Cashflow objects or amounts (a flow at time 0 is allowed)
        times: Payment times in increasing order (default 1..n)

    Returns:
        Array of rolled-back values (object dtype when the curve carries duals)

    Example:
        >>> present_values(0.0, [1, 1, 1])
        array([3., 2., 1.])
    """
    curve = _discount_function(curve)
    amounts, times_arr = as_cashflow_arrays(cashflows, times, allow_zero=True)
    if np.any(np.diff(times_arr) < 0):
        raise ValueError("Cashflow times must be in increasing order")

    previous = np.concatenate(([0.0], times_arr[:-1]))
    values = np.empty(len(amounts), dtype=object)
    carry = 0.0
    for i in range(len(amounts) - 1, -1, -1):
        growth = curve(float(times_arr[i])) / curve(float(previous[i]))
        carry = (float(amounts[i]) + carry) * growth
        values[i] = carry

    if any(isinstance(v, Dual) for v in values):
        return values
    return values.astype(float)


def moic(cashflows: Iterable) -> float:
    """
    Multiple on invested capital: inflows over outflows, undiscounted.

    Args:
        cashflows: Cashflow objects or amounts; negative amounts are invested

    Returns:
        Sum of positive amounts divided by the magnitude of the negative ones
    """
    amounts, _ = as_cashflow_arrays(cashflows, allow_zero=True)
    invested = -amounts[amounts < 0].sum()
    if invested == 0:
        raise ValueError("MOIC needs at least one negative (invested) cashflow")
    return float(amounts[amounts > 0].sum() / invested)


__all__ = [
    "Cashflow",
    "as_cashflow_arrays",
    "fixed_rate_bond_cashflows",
    "present_value",
    "present_values",
    "moic",
]
