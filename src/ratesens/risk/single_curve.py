"""
Single-curve sensitivity engine.

Differentiates a valuation with respect to every rate of the curve in one
forward-mode pass:
- Key-rate durations  -dV/dr_i / V
- Key-rate DV01       -dV/dr_i / 10,000
- Convexity matrix    d2V/dr_i dr_j / V

Summary duration, DV01 and convexity are the sums of the key-rate entries,
i.e. the response to a parallel move of all rates.

The same measures are available against par rates: the curve is re-expressed
as par coupon rates at its tenors and bootstrapped back inside the pass.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from ..autodiff import gradient, hessian
from ..conventions import BP_SCALE
from ..curves.bootstrap import bootstrap_zero_rates, par_rates
from ..curves.curve import RateCurve, as_rate_curve, build_curve

logger = logging.getLogger(__name__)


def _frozen(values) -> Optional[np.ndarray]:
    """Read-only copy of an array (None passes through)."""
    if values is None:
        return None
    arr = np.array(values)
    if arr.dtype != object:
        arr = arr.astype(float)
    arr.setflags(write=False)
    return arr


def _per_value(values: np.ndarray, value) -> np.ndarray:
    if value == 0:
        raise ZeroDivisionError("Value-normalized sensitivities undefined for zero value")
    return values / value


@dataclass(frozen=True)
class SensitivityResult:
    """
    Raw output of one differentiation pass over a curve's rates.

    Attributes:
        value: Valuation at the unperturbed rates
        gradient: dV/dr_i, one entry per tenor
        hessian: d2V/dr_i dr_j (None for first-order passes)
        tenors: Tenor grid the rates live on
    """
    value: Any
    gradient: np.ndarray
    hessian: Optional[np.ndarray] = None
    tenors: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "gradient", _frozen(self.gradient))
        object.__setattr__(self, "hessian", _frozen(self.hessian))
        object.__setattr__(self, "tenors", tuple(self.tenors))

    @property
    def n_rates(self) -> int:
        return len(self.gradient)

    @property
    def key_rate_durations(self) -> np.ndarray:
        """Key-rate (partial) durations."""
        return _per_value(-self.gradient, self.value)

    @property
    def key_rate_dv01(self) -> np.ndarray:
        """Value change per 1bp move of each rate."""
        return -self.gradient / BP_SCALE

    @property
    def key_rate_convexities(self) -> np.ndarray:
        """Convexity matrix normalized by value."""
        if self.hessian is None:
            raise ValueError("Second-order sensitivities were not computed")
        return _per_value(self.hessian, self.value)

    @property
    def duration(self):
        """Effective (modified) duration for a parallel move."""
        return self.key_rate_durations.sum()

    @property
    def dv01(self):
        return self.key_rate_dv01.sum()

    @property
    def convexity(self):
        """Effective convexity for a parallel move."""
        return self.key_rate_convexities.sum()

    def to_frame(self) -> pd.DataFrame:
        """
        Per-tenor report.

        Columns: gradient, key_rate_duration, key_rate_dv01 and, when second
        order was computed, convexity_contribution (row sums of the
        convexity matrix, which add up to the total convexity).
        """
        frame = pd.DataFrame(
            {
                "gradient": self.gradient,
                "key_rate_duration": self.key_rate_durations,
                "key_rate_dv01": self.key_rate_dv01,
            },
            index=pd.Index(self.tenors or range(self.n_rates), name="tenor"),
        )
        if self.hessian is not None:
            frame["convexity_contribution"] = self.key_rate_convexities.sum(axis=1)
        return frame

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        result = {
            "value": self.value,
            "tenors": list(self.tenors),
            "duration": self.duration,
            "dv01": self.dv01,
            "key_rate_durations": self.key_rate_durations.tolist(),
            "key_rate_dv01": self.key_rate_dv01.tolist(),
        }
        if self.hessian is not None:
            result["convexity"] = self.convexity
            result["key_rate_convexities"] = self.key_rate_convexities.tolist()
        return result


def compute_sensitivities(
    rate_curve,
    valuation: Callable[[Any], Any],
    second_order: bool = False
) -> SensitivityResult:
    """
    Differentiate a valuation with respect to the curve rates.

    The curve is rebuilt from seeded rates inside the pass, so the
    valuation must reach the rates only through its curve argument.

    Args:
        rate_curve: RateCurve (or flat yield)
        valuation: Callable curve -> scalar
        second_order: Also compute the Hessian (cost ~ n^2 instead of n)

    Returns:
        SensitivityResult
    """
    curve: RateCurve = as_rate_curve(rate_curve)
    n = curve.n_rates

    def priced(rates):
        return valuation(build_curve(rates, curve.tenors, curve.method, curve.compounding))

    logger.debug("AD pass over %d rates (order %d, method %s)",
                 n, 2 if second_order else 1, curve.method)

    if second_order:
        value, grad, hess = hessian(priced, curve.rates)
    else:
        value, grad = gradient(priced, curve.rates)
        hess = None

    logger.debug("Value %s", value)
    return SensitivityResult(value=value, gradient=grad, hessian=hess, tenors=curve.tenors)


def compute_par_sensitivities(
    rate_curve,
    valuation: Callable[[Any], Any],
    frequency: int = 2,
    second_order: bool = False
) -> SensitivityResult:
    """
    Differentiate a valuation with respect to par rates at the curve tenors.

    The par rates of the zero curve are seeded and the zero curve is
    bootstrapped back from them inside the pass, so the gradient answers
    "what if the par bond maturing at tenor k yields one unit more".

    Args:
        rate_curve: RateCurve with a local interpolation method (or flat yield)
        valuation: Callable curve -> scalar
        frequency: Coupons per year of the par bonds
        second_order: Also compute the Hessian in par rates

    Returns:
        SensitivityResult whose rates are the par rates
    """
    curve: RateCurve = as_rate_curve(rate_curve)
    par = par_rates(curve, frequency)

    def priced(rates):
        zeros = bootstrap_zero_rates(
            rates, curve.tenors, frequency, curve.method, curve.compounding
        )
        return valuation(build_curve(zeros, curve.tenors, curve.method, curve.compounding))

    logger.debug("Par-rate AD pass over %d rates (order %d, frequency %d)",
                 curve.n_rates, 2 if second_order else 1, frequency)

    if second_order:
        value, grad, hess = hessian(priced, par)
    else:
        value, grad = gradient(priced, par)
        hess = None

    return SensitivityResult(value=value, gradient=grad, hessian=hess, tenors=curve.tenors)


__all__ = [
    "SensitivityResult",
    "compute_sensitivities",
    "compute_par_sensitivities",
]
