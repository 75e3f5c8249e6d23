"""
Risk measure API.

Maps a requested measure, a key-rate flag and the number of curves onto
the right engine call. Positional arguments are one or two curves
(RateCurve or flat yield) followed by one of:

    (cashflows, times)
    (cashflows,)            times default to 1..n
    (valuation_function,)

duration(curve, cashflows, ...) without a measure is the modified duration.

Shapes:
- MACAULAY: scalar, fixed cashflows on one curve only
- MODIFIED, DV01: one curve; vector with key_rates=True, else the sum
- IR01, CS01: two curves on the same tenors; vector or sum

Modified duration, DV01 and single-curve convexity can also be taken against
par rates at the curve tenors (par_frequency=coupons per year).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from ..curves.curve import RateCurve, as_rate_curve
from ..pricers.valuation import StandardValuation, make_valuation
from .single_curve import SensitivityResult, compute_par_sensitivities, compute_sensitivities
from .two_curve import compute_two_curve_sensitivities

_YIELD_TYPES = (int, float, np.integer, np.floating)


class RiskMeasure(Enum):
    """Duration-type risk measure."""
    MACAULAY = "Macaulay"
    MODIFIED = "Modified"
    DV01 = "DV01"
    IR01 = "IR01"
    CS01 = "CS01"

    @classmethod
    def from_string(cls, s: str) -> "RiskMeasure":
        """Parse a measure name (case-insensitive)."""
        key = s.strip().upper()
        for member in cls:
            if member.name == key or member.value.upper() == key:
                return member
        raise ValueError(f"Unknown risk measure: {s}")


@dataclass(frozen=True)
class ConvexityBlocks:
    """Convexity blocks of a two-curve decomposition."""
    base: Any
    credit: Any
    cross: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": _plain(self.base),
            "credit": _plain(self.credit),
            "cross": _plain(self.cross),
        }


@dataclass(frozen=True)
class SensitivityReport:
    """
    Single-curve risk report.

    Attributes:
        value: Valuation
        durations: Key-rate durations
        convexities: Key-rate convexity matrix
    """
    value: Any
    durations: np.ndarray
    convexities: np.ndarray

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "value": self.value,
            "durations": _plain(self.durations),
            "convexities": _plain(self.convexities),
        }


@dataclass(frozen=True)
class TwoCurveSensitivityReport:
    """
    Two-curve risk report.

    Attributes:
        value: Valuation
        base_durations: Key-rate durations to the base curve
        credit_durations: Key-rate durations to the credit curve
        convexities: Base, credit and cross convexity blocks
    """
    value: Any
    base_durations: np.ndarray
    credit_durations: np.ndarray
    convexities: ConvexityBlocks

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "value": self.value,
            "base_durations": _plain(self.base_durations),
            "credit_durations": _plain(self.credit_durations),
            "convexities": self.convexities.to_dict(),
        }


def _plain(x):
    return x.tolist() if isinstance(x, np.ndarray) else x


def _split_args(args: Tuple) -> Tuple[List[RateCurve], Tuple]:
    """
    Split leading curves (at most two) from the valuation arguments.

    A pair of flat yields is converted to continuously compounded curves,
    as in compute_two_curve_sensitivities.
    """
    leading = []
    rest = list(args)
    while rest and len(leading) < 2 and isinstance(rest[0], (RateCurve,) + _YIELD_TYPES):
        leading.append(rest.pop(0))
    curves = [as_rate_curve(c, continuous=len(leading) == 2) for c in leading]
    if not curves:
        raise TypeError("Expected at least one curve or yield before the valuation arguments")
    if not rest:
        raise TypeError("Expected cashflows or a valuation function after the curve(s)")
    return curves, tuple(rest)


def _require_curves(curves: List[RateCurve], n: int, kind: RiskMeasure) -> None:
    if len(curves) != n:
        raise ValueError(f"{kind.value} needs {n} curve(s), got {len(curves)}")


def _summarize(values: np.ndarray, key_rates: bool):
    return values if key_rates else values.sum()


def _single_curve_result(curve: RateCurve, rest: Tuple, par_frequency: Optional[int],
                         second_order: bool = False) -> SensitivityResult:
    valuation = make_valuation(rest, 1)
    if par_frequency is None:
        return compute_sensitivities(curve, valuation, second_order=second_order)
    return compute_par_sensitivities(curve, valuation, par_frequency, second_order=second_order)


def duration(kind: Union[RiskMeasure, str, RateCurve, float], *args, key_rates: bool = False,
             par_frequency: Optional[int] = None):
    """
    Duration-type measure of a valuation.

    Args:
        kind: RiskMeasure (or its name). A curve or yield here instead means
            modified duration, e.g. duration(0.03, [5, 5, 105])
        *args: Curve(s) followed by valuation arguments
        key_rates: Return the per-tenor decomposition instead of the sum
        par_frequency: Differentiate against par rates with this many coupons
            per year instead of zero rates (Modified and DV01 only)

    Returns:
        Scalar, or array with one entry per tenor
    """
    if isinstance(kind, (RateCurve,) + _YIELD_TYPES):
        args = (kind,) + args
        kind = RiskMeasure.MODIFIED
    elif isinstance(kind, str):
        kind = RiskMeasure.from_string(kind)
    curves, rest = _split_args(args)
    if par_frequency is not None and kind not in (RiskMeasure.MODIFIED, RiskMeasure.DV01):
        raise ValueError(f"{kind.value} has no par-rate form")

    if kind == RiskMeasure.MACAULAY:
        _require_curves(curves, 1, kind)
        if key_rates:
            raise ValueError("Macaulay duration has no key-rate decomposition")
        valuation = make_valuation(rest, 1)
        if not isinstance(valuation, StandardValuation):
            raise ValueError("Macaulay duration needs fixed cashflows, not a valuation function")
        return valuation.macaulay_duration(curves[0].build())
    elif kind == RiskMeasure.MODIFIED:
        _require_curves(curves, 1, kind)
        result = _single_curve_result(curves[0], rest, par_frequency)
        return _summarize(result.key_rate_durations, key_rates)
    elif kind == RiskMeasure.DV01:
        _require_curves(curves, 1, kind)
        result = _single_curve_result(curves[0], rest, par_frequency)
        return _summarize(result.key_rate_dv01, key_rates)
    elif kind == RiskMeasure.IR01:
        _require_curves(curves, 2, kind)
        result = compute_two_curve_sensitivities(curves[0], curves[1], make_valuation(rest, 2))
        return _summarize(result.key_rate_ir01, key_rates)
    elif kind == RiskMeasure.CS01:
        _require_curves(curves, 2, kind)
        result = compute_two_curve_sensitivities(curves[0], curves[1], make_valuation(rest, 2))
        return _summarize(result.key_rate_cs01, key_rates)
    else:
        raise ValueError(f"Unsupported risk measure: {kind}")


def convexity(*args, key_rates: bool = False, par_frequency: Optional[int] = None):
    """
    Convexity of a valuation.

    With one curve returns the total convexity (or the key-rate matrix),
    against par rates when par_frequency is given. With two curves returns
    ConvexityBlocks holding the base, credit and cross blocks (matrices, or
    their sums).
    """
    curves, rest = _split_args(args)

    if len(curves) == 1:
        result = _single_curve_result(curves[0], rest, par_frequency, second_order=True)
        return _summarize(result.key_rate_convexities, key_rates)
    if par_frequency is not None:
        raise ValueError("Par-rate convexity is single-curve only")

    result = compute_two_curve_sensitivities(
        curves[0], curves[1], make_valuation(rest, 2), second_order=True
    )
    return ConvexityBlocks(
        base=_summarize(result.base_convexities, key_rates),
        credit=_summarize(result.credit_convexities, key_rates),
        cross=_summarize(result.cross_convexities, key_rates),
    )


def sensitivities(*args) -> Union[SensitivityReport, TwoCurveSensitivityReport]:
    """
    Value, key-rate durations and convexities in one second-order pass.

    Returns:
        SensitivityReport for one curve, TwoCurveSensitivityReport for two
    """
    curves, rest = _split_args(args)

    if len(curves) == 1:
        result = compute_sensitivities(curves[0], make_valuation(rest, 1), second_order=True)
        return SensitivityReport(
            value=result.value,
            durations=result.key_rate_durations,
            convexities=result.key_rate_convexities,
        )

    result = compute_two_curve_sensitivities(
        curves[0], curves[1], make_valuation(rest, 2), second_order=True
    )
    return TwoCurveSensitivityReport(
        value=result.value,
        base_durations=result.base_durations,
        credit_durations=result.credit_durations,
        convexities=ConvexityBlocks(
            base=result.base_convexities,
            credit=result.credit_convexities,
            cross=result.cross_convexities,
        ),
    )


__all__ = [
    "RiskMeasure",
    "ConvexityBlocks",
    "SensitivityReport",
    "TwoCurveSensitivityReport",
    "duration",
    "convexity",
    "sensitivities",
]
