"""
Two-curve (base / credit) sensitivity engine.

Both rate vectors are concatenated into one parameter vector [base; credit]
of length 2n and differentiated in a single pass. The gradient and Hessian
are then split into blocks:

    gradient = [ base | credit ]

    hessian  = [ base   cross  ]
               [ cross' credit ]

IR01 and CS01 are the DV01 equivalents of the base and credit blocks.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from ..autodiff import gradient, hessian
from ..conventions import BP_SCALE
from ..curves.curve import RateCurve, as_rate_curve, build_curve
from ..exceptions import TenorMismatchError
from .single_curve import _frozen, _per_value

logger = logging.getLogger(__name__)


def validate_tenor_grids(base_curve: RateCurve, credit_curve: RateCurve) -> None:
    """
    Check that base and credit curves share a tenor grid.

    Raises:
        TenorMismatchError: grids differ in length or in any tenor
    """
    if not base_curve.same_grid(credit_curve):
        raise TenorMismatchError(base_curve.tenors, credit_curve.tenors)


@dataclass(frozen=True)
class TwoCurveSensitivityResult:
    """
    Output of one pass over concatenated base and credit rates.

    Attributes:
        value: Valuation at the unperturbed rates
        gradient: Gradient over [base; credit] (length 2n)
        hessian: Full 2n x 2n Hessian (None for first-order passes)
        tenors: Shared tenor grid
    """
    value: Any
    gradient: np.ndarray
    hessian: Optional[np.ndarray] = None
    tenors: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "gradient", _frozen(self.gradient))
        object.__setattr__(self, "hessian", _frozen(self.hessian))
        object.__setattr__(self, "tenors", tuple(self.tenors))
        if len(self.gradient) % 2:
            raise ValueError("Two-curve gradient must have even length")

    @property
    def n_rates(self) -> int:
        """Rates per curve."""
        return len(self.gradient) // 2

    @property
    def base_gradient(self) -> np.ndarray:
        return self.gradient[:self.n_rates]

    @property
    def credit_gradient(self) -> np.ndarray:
        return self.gradient[self.n_rates:]

    def _require_hessian(self) -> np.ndarray:
        if self.hessian is None:
            raise ValueError("Second-order sensitivities were not computed")
        return self.hessian

    @property
    def base_hessian(self) -> np.ndarray:
        n = self.n_rates
        return self._require_hessian()[:n, :n]

    @property
    def credit_hessian(self) -> np.ndarray:
        n = self.n_rates
        return self._require_hessian()[n:, n:]

    @property
    def cross_hessian(self) -> np.ndarray:
        """Mixed partials d2V/dbase_i dcredit_j."""
        n = self.n_rates
        return self._require_hessian()[:n, n:]

    @property
    def key_rate_ir01(self) -> np.ndarray:
        return -self.base_gradient / BP_SCALE

    @property
    def key_rate_cs01(self) -> np.ndarray:
        return -self.credit_gradient / BP_SCALE

    @property
    def ir01(self):
        """Value change per 1bp parallel move of the base curve."""
        return self.key_rate_ir01.sum()

    @property
    def cs01(self):
        """Value change per 1bp parallel move of the credit curve."""
        return self.key_rate_cs01.sum()

    @property
    def base_durations(self) -> np.ndarray:
        return _per_value(-self.base_gradient, self.value)

    @property
    def credit_durations(self) -> np.ndarray:
        return _per_value(-self.credit_gradient, self.value)

    @property
    def base_convexities(self) -> np.ndarray:
        return _per_value(self.base_hessian, self.value)

    @property
    def credit_convexities(self) -> np.ndarray:
        return _per_value(self.credit_hessian, self.value)

    @property
    def cross_convexities(self) -> np.ndarray:
        return _per_value(self.cross_hessian, self.value)

    def to_frame(self) -> pd.DataFrame:
        """Per-tenor report of base and credit sensitivities."""
        return pd.DataFrame(
            {
                "base_duration": self.base_durations,
                "credit_duration": self.credit_durations,
                "key_rate_ir01": self.key_rate_ir01,
                "key_rate_cs01": self.key_rate_cs01,
            },
            index=pd.Index(self.tenors or range(self.n_rates), name="tenor"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        result = {
            "value": self.value,
            "tenors": list(self.tenors),
            "ir01": self.ir01,
            "cs01": self.cs01,
            "base_durations": self.base_durations.tolist(),
            "credit_durations": self.credit_durations.tolist(),
        }
        if self.hessian is not None:
            result["convexities"] = {
                "base": self.base_convexities.tolist(),
                "credit": self.credit_convexities.tolist(),
                "cross": self.cross_convexities.tolist(),
            }
        return result


def compute_two_curve_sensitivities(
    base_curve,
    credit_curve,
    valuation: Callable[[Any, Any], Any],
    second_order: bool = False
) -> TwoCurveSensitivityResult:
    """
    Differentiate a two-curve valuation in one pass.

    Args:
        base_curve: Risk-free RateCurve (or flat annual yield)
        credit_curve: Credit-spread RateCurve (or flat annual spread) on the same tenors
        valuation: Callable (base_discount, credit_discount) -> scalar
        second_order: Also compute the full 2n x 2n Hessian

    Returns:
        TwoCurveSensitivityResult

    Raises:
        TenorMismatchError: curves are on different grids
    """
    # Flat yields go in continuously compounded so the two rates are additive
    base = as_rate_curve(base_curve, continuous=True)
    credit = as_rate_curve(credit_curve, continuous=True)
    validate_tenor_grids(base, credit)
    n = base.n_rates

    def priced(rates):
        base_discount = build_curve(rates[:n], base.tenors, base.method, base.compounding)
        credit_discount = build_curve(rates[n:], credit.tenors, credit.method, credit.compounding)
        return valuation(base_discount, credit_discount)

    values = list(base.rates) + list(credit.rates)
    logger.debug("Two-curve AD pass over 2 x %d rates (order %d)",
                 n, 2 if second_order else 1)

    if second_order:
        value, grad, hess = hessian(priced, values)
    else:
        value, grad = gradient(priced, values)
        hess = None

    return TwoCurveSensitivityResult(value=value, gradient=grad, hessian=hess, tenors=base.tenors)


__all__ = [
    "validate_tenor_grids",
    "TwoCurveSensitivityResult",
    "compute_two_curve_sensitivities",
]
