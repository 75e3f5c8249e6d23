"""
Curves package - rate curve inputs and the discount curve builder.

Provides:
- RateCurve: Immutable zero-rate vector on a tenor grid
- build_curve: Rate vector -> discount function, generic over numeric type
- Interpolators: linear, step, cubic spline, log-linear, PCHIP, Akima
- Par rates and bootstrapping of zero rates from par rates
"""

from .curve import (
    RateCurve,
    DiscountCurve,
    build_curve,
    create_flat_curve,
    as_rate_curve,
)
from .bootstrap import (
    coupon_schedule,
    par_rate,
    par_rates,
    bootstrap_zero_rates,
    bootstrap_curve,
)
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    StepInterpolator,
    CubicSplineInterpolator,
    LogLinearInterpolator,
    PchipInterpolator,
    AkimaInterpolator,
    INTERPOLATION_METHODS,
    create_interpolator,
)

__all__ = [
    "RateCurve",
    "DiscountCurve",
    "build_curve",
    "create_flat_curve",
    "as_rate_curve",
    "coupon_schedule",
    "par_rate",
    "par_rates",
    "bootstrap_zero_rates",
    "bootstrap_curve",
    "Interpolator",
    "LinearInterpolator",
    "StepInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "PchipInterpolator",
    "AkimaInterpolator",
    "INTERPOLATION_METHODS",
    "create_interpolator",
]
