"""
Par curve bootstrapping.

Converts between a zero-rate curve and par coupon rates on the same tenor
grid:
1. par_rates: read the par rate of a bullet bond maturing at each tenor
2. bootstrap_zero_rates: solve for the zero rate at each tenor in turn so
   that the par bond maturing there prices at 1

Coupon dates step back from maturity in periods of 1/frequency; the first
period is a short stub when the maturity is not a whole number of periods.

Each node is found with brentq on plain floats and then refined with two
Newton steps carried out on the (possibly dual) inputs. The first step makes
first derivatives exact, the second makes second derivatives exact, so par
rates can be seeded like any other rate vector.

Only local interpolation methods are supported: the coupons of the k-th
bond must depend on nodes 1..k alone.
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np
from scipy.optimize import brentq

from ..autodiff import derivative, primal
from ..conventions import CompoundingConvention
from .curve import RateCurve, as_rate_curve, build_curve
from .interpolation import normalize_method

logger = logging.getLogger(__name__)

LOCAL_METHODS = ("linear", "step", "log_linear")


def coupon_schedule(maturity: float, frequency: int = 2) -> np.ndarray:
    """
    Coupon times of a bullet bond issued today.

    Args:
        maturity: Final payment time (years)
        frequency: Coupons per year

    Returns:
        Increasing payment times ending at maturity
    """
    if maturity <= 0:
        raise ValueError("Maturity must be positive")
    if frequency <= 0:
        raise ValueError("Coupon frequency must be positive")

    period = 1.0 / frequency
    n_periods = int(np.ceil(maturity * frequency - 1e-9))
    return maturity - period * np.arange(n_periods - 1, -1, -1)


def par_rate(curve, maturity: float, frequency: int = 2):
    """
    Par coupon rate of a bullet bond on a discount curve.

    c = (1 - P(T)) / sum_j alpha_j P(t_j), with alpha_j the accrual of the
    period ending at t_j.

    Args:
        curve: Discount function t -> P(0,t)
        maturity: Bond maturity
        frequency: Coupons per year

    Returns:
        Annualized coupon rate (float or dual)
    """
    times = coupon_schedule(maturity, frequency)
    accruals = np.diff(np.concatenate(([0.0], times)))
    annuity = 0.0
    for alpha, t in zip(accruals, times):
        annuity = annuity + float(alpha) * curve(float(t))
    return (1.0 - curve(float(maturity))) / annuity


def par_rates(rate_curve, frequency: int = 2) -> list:
    """
    Par rates of a zero curve at each of its tenors.

    Args:
        rate_curve: RateCurve (or flat yield)
        frequency: Coupons per year of the par bonds

    Returns:
        List of par rates, one per tenor
    """
    rate_curve = as_rate_curve(rate_curve)
    curve = rate_curve.build()
    return [par_rate(curve, t, frequency) for t in rate_curve.tenors]


def _par_bond_residual(zeros: list, tenors: Sequence[float], par, frequency: int,
                       method: str, compounding: CompoundingConvention):
    """Price minus one of the par bond maturing at the last tenor."""
    maturity = tenors[-1]
    curve = build_curve(zeros, tenors, method, compounding)
    times = coupon_schedule(maturity, frequency)
    accruals = np.diff(np.concatenate(([0.0], times)))
    price = curve(float(maturity))
    for alpha, t in zip(accruals, times):
        price = price + par * float(alpha) * curve(float(t))
    return price - 1.0


def _bracket(func, guess: float, step: float = 0.01, max_expansions: int = 20):
    """Interval around guess on which func changes sign."""
    lo, hi = guess - step, guess + step
    for _ in range(max_expansions):
        f_lo, f_hi = func(lo), func(hi)
        if f_lo * f_hi <= 0:
            return lo, hi
        step *= 2.0
        lo, hi = guess - step, guess + step
    raise ValueError(f"Could not bracket a zero rate around {guess:.6f}")


def bootstrap_zero_rates(
    par: Sequence,
    tenors: Sequence[float],
    frequency: int = 2,
    method: Optional[str] = None,
    compounding: Union[CompoundingConvention, str, None] = None,
    tolerance: float = 1e-15
) -> List:
    """
    Zero rates that reprice a par bond at every tenor.

    Args:
        par: Par coupon rates, one per tenor (floats or duals)
        tenors: Strictly increasing maturities
        frequency: Coupons per year of the par bonds
        method: Local interpolation method of the zero curve
        compounding: Convention of the returned zero rates
        tolerance: Absolute brentq tolerance on each zero rate

    Returns:
        List of zero rates, duals wherever the par rates are duals
    """
    template = RateCurve(tuple(primal(p) for p in par), tenors, method, compounding)
    method = normalize_method(template.method)
    if method not in LOCAL_METHODS:
        raise ValueError(
            f"Bootstrapping needs a local interpolation method {LOCAL_METHODS}, got {method}"
        )
    tenors = template.tenors

    zeros: List = []
    for k, p in enumerate(par):
        grid = tenors[:k + 1]
        plain = [primal(z) for z in zeros]
        p_plain = primal(p)

        def plain_residual(z):
            return _par_bond_residual(plain + [z], grid, p_plain, frequency,
                                      method, template.compounding)

        def residual(z):
            return _par_bond_residual(zeros + [z], grid, p, frequency,
                                      method, template.compounding)

        lo, hi = _bracket(plain_residual, p_plain)
        z = brentq(plain_residual, lo, hi, xtol=tolerance)

        # Newton on the dual inputs; z is a root, so only the derivatives move
        for _ in range(2):
            z = z - residual(z) / derivative(residual, z)
        zeros.append(z)

    logger.debug("Bootstrapped %d zero rates from par (frequency %d, %s)",
                 len(zeros), frequency, method)
    return zeros


def bootstrap_curve(
    par: Sequence[float],
    tenors: Sequence[float],
    frequency: int = 2,
    method: Optional[str] = None,
    compounding: Union[CompoundingConvention, str, None] = None
) -> RateCurve:
    """
    Zero-rate curve repricing par bonds at the given tenors.

    Args:
        par: Par coupon rates
        tenors: Bond maturities (curve tenors)
        frequency: Coupons per year
        method: Local interpolation method
        compounding: Convention of the zero rates

    Returns:
        RateCurve of bootstrapped zero rates
    """
    zeros = bootstrap_zero_rates(par, tenors, frequency, method, compounding)
    return RateCurve(tuple(float(primal(z)) for z in zeros), tenors, method, compounding)


__all__ = [
    "LOCAL_METHODS",
    "coupon_schedule",
    "par_rate",
    "par_rates",
    "bootstrap_zero_rates",
    "bootstrap_curve",
]
