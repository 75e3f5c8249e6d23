"""
Yield curve representation.

RateCurve is the immutable market input: one zero rate per tenor, an
interpolation method and a compounding convention.

DiscountCurve is what the curve builder returns for a given rate vector:
- Discount factor P(0,t) (also available by calling the curve)
- Zero rate z(t)
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)

The builder never inspects the numeric type of the rates, so the same code
prices with floats and differentiates with dual numbers.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..autodiff import derivative, exp, log
from ..config import settings
from ..conventions import (
    CompoundingConvention,
    discount_factor_from_zero,
    zero_from_discount_factor,
)
from ..exceptions import DimensionMismatchError
from .interpolation import Interpolator, create_interpolator, normalize_method


@dataclass(frozen=True)
class RateCurve:
    """
    Zero-rate curve inputs.

    Attributes:
        rates: Zero rates, one per tenor (floats or duals)
        tenors: Strictly increasing positive year fractions
        method: Interpolation method name (default from settings)
        compounding: Convention the rates are quoted in (default from settings)
    """
    rates: Tuple
    tenors: Tuple[float, ...]
    method: Optional[str] = None
    compounding: Optional[CompoundingConvention] = None

    def __post_init__(self):
        rates = tuple(self.rates)
        tenors = tuple(float(t) for t in self.tenors)

        if len(rates) != len(tenors):
            raise DimensionMismatchError("Rates/tenors", len(rates), len(tenors))
        if len(tenors) == 0:
            raise ValueError("Curve needs at least one tenor")
        if tenors[0] <= 0:
            raise ValueError("Tenors must be positive")
        if any(t1 <= t0 for t0, t1 in zip(tenors, tenors[1:])):
            raise ValueError("Tenors must be strictly increasing")

        method = self.method if self.method is not None else settings.default_method
        compounding = self.compounding
        if compounding is None:
            compounding = settings.default_compounding
        elif isinstance(compounding, str):
            compounding = CompoundingConvention.from_string(compounding)

        object.__setattr__(self, "rates", rates)
        object.__setattr__(self, "tenors", tenors)
        object.__setattr__(self, "method", normalize_method(method))
        object.__setattr__(self, "compounding", compounding)

    @property
    def n_rates(self) -> int:
        """Number of rate parameters."""
        return len(self.rates)

    def same_grid(self, other: "RateCurve") -> bool:
        """Whether other is defined on exactly the same tenors."""
        return self.tenors == other.tenors

    def with_rates(self, rates: Sequence) -> "RateCurve":
        """Copy of this curve with a different rate vector."""
        return replace(self, rates=tuple(rates))

    def bump_parallel(self, bp: float) -> "RateCurve":
        """
        Create a new curve with parallel bump.

        Args:
            bp: Bump size in basis points

        Returns:
            New bumped curve
        """
        bump = bp / 10000.0
        return self.with_rates([r + bump for r in self.rates])

    def bump_node(self, node_index: int, bp: float) -> "RateCurve":
        """
        Create a new curve with a single rate bumped.

        Args:
            node_index: Index of rate to bump (0-based)
            bp: Bump size in basis points

        Returns:
            New bumped curve
        """
        if node_index < 0 or node_index >= self.n_rates:
            raise IndexError(f"Invalid node index: {node_index}")
        bump = bp / 10000.0
        return self.with_rates(
            [r + bump if i == node_index else r for i, r in enumerate(self.rates)]
        )

    def build(self) -> "DiscountCurve":
        """Discount curve for the current rates."""
        return build_curve(self.rates, self.tenors, self.method, self.compounding)

    def __repr__(self) -> str:
        return (f"RateCurve(n={self.n_rates}, tenors={list(self.tenors)}, "
                f"method={self.method}, compounding={self.compounding.value})")


class DiscountCurve:
    """
    Discount function built from a rate vector.

    Attributes:
        rates: Rate vector the curve was built from (not copied or mutated)
        tenors: Tenor grid
        method: Interpolation method name
        compounding: Convention of the rates

    Conventions:
        - Times are year fractions
        - Discount factor at t <= 0 is 1.0
    """

    def __init__(
        self,
        rates: Sequence,
        tenors: Sequence[float],
        method: str = "linear",
        compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS
    ):
        self.rates = rates
        self.tenors = [float(t) for t in tenors]
        self.method = normalize_method(method)
        self.compounding = compounding

        if self.method == "log_linear":
            knot_values = [
                log(discount_factor_from_zero(r, t, compounding))
                for r, t in zip(rates, self.tenors)
            ]
        else:
            knot_values = list(rates)

        self._interpolator: Interpolator = create_interpolator(self.method)
        self._interpolator.fit(self.tenors, knot_values)

    def discount_factor(self, t):
        """
        Get discount factor P(0,t).

        Args:
            t: Year fraction (float or dual)

        Returns:
            Discount factor
        """
        if t <= 0:
            return 1.0
        if self.method == "log_linear":
            return exp(self._interpolator(t))
        return discount_factor_from_zero(self._interpolator(t), t, self.compounding)

    def __call__(self, t):
        return self.discount_factor(t)

    def zero_rate(self, t):
        """
        Get zero rate z(t) in the curve's compounding convention.

        For t <= 0 the rate at the first tenor is returned.
        """
        if t <= 0:
            t = self.tenors[0]
        if self.method == "log_linear":
            return zero_from_discount_factor(self.discount_factor(t), t, self.compounding)
        return self._interpolator(t)

    def forward_rate(self, t1, t2):
        """
        Simple forward rate between t1 and t2.

        Args:
            t1: Start time
            t2: End time

        Returns:
            (P(t1) / P(t2) - 1) / (t2 - t1)
        """
        if t2 <= t1:
            raise ValueError("t2 must be greater than t1")
        return (self.discount_factor(t1) / self.discount_factor(t2) - 1) / (t2 - t1)

    def instantaneous_forward(self, t):
        """
        Instantaneous forward rate f(t) = -d/dt log P(0,t).

        The time derivative is taken with its own AD pass, so it nests inside
        any pass already running over the curve rates.
        """
        if t <= 0:
            t = min(1e-6, self.tenors[0])
        return derivative(lambda s: -log(self.discount_factor(s)), t)

    def __repr__(self) -> str:
        return (f"DiscountCurve(nodes={len(self.tenors)}, method={self.method}, "
                f"compounding={self.compounding.value})")


def build_curve(
    rates: Sequence,
    tenors: Sequence[float],
    method: Optional[str] = None,
    compounding: Union[CompoundingConvention, str, None] = None
) -> DiscountCurve:
    """
    Build a discount function from a rate vector.

    Args:
        rates: Zero rates (floats or duals)
        tenors: Strictly increasing tenors
        method: Interpolation method
        compounding: Convention of the rates

    Returns:
        DiscountCurve, callable as t -> P(0,t)
    """
    method = method if method is not None else settings.default_method
    if compounding is None:
        compounding = settings.default_compounding
    elif isinstance(compounding, str):
        compounding = CompoundingConvention.from_string(compounding)
    if len(rates) != len(tenors):
        raise DimensionMismatchError("Rates/tenors", len(rates), len(tenors))
    return DiscountCurve(rates, tenors, method, compounding)


def create_flat_curve(
    rate: float,
    tenors: Sequence[float] = (0.25, 0.5, 1, 2, 3, 5, 7, 10, 20, 30),
    method: Optional[str] = None,
    compounding: Union[CompoundingConvention, str, None] = None
) -> RateCurve:
    """
    Create a flat yield curve.

    Args:
        rate: Flat zero rate
        tenors: Tenor grid
        method: Interpolation method
        compounding: Convention of the rate

    Returns:
        Flat RateCurve
    """
    return RateCurve(
        rates=tuple(rate for _ in tenors),
        tenors=tuple(tenors),
        method=method,
        compounding=compounding,
    )


def as_rate_curve(curve_or_yield, continuous: bool = False) -> RateCurve:
    """
    Coerce API input to a RateCurve.

    A bare number is read as a flat annual-effective yield. With
    continuous=True it becomes the equivalent continuously compounded rate
    log(1 + y): same discount factors, but rates of two such curves add up,
    so base and credit sensitivities are taken per basis point of the same
    rate.
    """
    if isinstance(curve_or_yield, RateCurve):
        return curve_or_yield
    if isinstance(curve_or_yield, (int, float, np.integer, np.floating)):
        if continuous:
            return RateCurve(
                rates=(float(np.log1p(curve_or_yield)),),
                tenors=(1.0,),
                method="linear",
                compounding=CompoundingConvention.CONTINUOUS,
            )
        return RateCurve(
            rates=(float(curve_or_yield),),
            tenors=(1.0,),
            method="linear",
            compounding=CompoundingConvention.ANNUAL,
        )
    raise TypeError(f"Expected a RateCurve or a yield, got {type(curve_or_yield).__name__}")


__all__ = [
    "RateCurve",
    "DiscountCurve",
    "build_curve",
    "create_flat_curve",
    "as_rate_curve",
]
