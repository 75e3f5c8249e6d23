"""
Forward-mode dual numbers.

A Dual carries a value and a vector of partial derivatives with respect to
the variables seeded by one differentiation pass. Arithmetic propagates the
partials by the chain rule, so any composition of the supported primitives
evaluated on seeded duals returns its exact gradient in one pass.

Nesting:
    The value and the partials of a Dual may themselves be Duals from an
    earlier pass. Each pass owns a Tag; tags are ordered by creation and a
    dual with a newer tag treats duals with older tags as plain scalars.
    A Dual-of-Dual therefore carries first and second partials (Hessians),
    and an inner derivative taken while an outer pass is running (e.g. a
    forward rate differentiated in time while the curve rates are seeded)
    never mixes its partials with the outer ones.

Non-smooth operations:
    Comparisons, min/max and abs look only at the innermost real value.
    They select one branch and return that branch's derivative, so the
    gradient jumps where the branch changes. Ties select the first branch.
"""

import itertools
import math
from typing import Any

import numpy as np
from scipy.stats import norm


_levels = itertools.count(1)

_REAL_TYPES = (int, float, np.integer, np.floating)

_SQRT_2PI = math.sqrt(2.0 * math.pi)


class Tag:
    """Identity of one differentiation pass. Newer tags nest outside older ones."""

    __slots__ = ("level", "name")

    def __init__(self, name: str = "d"):
        self.level = next(_levels)
        self.name = name

    def __repr__(self) -> str:
        return f"Tag({self.name}#{self.level})"


def is_dual(x: Any) -> bool:
    """Whether x is a Dual number."""
    return isinstance(x, Dual)


def primal(x: Any):
    """Innermost real value of a (possibly nested) dual."""
    while isinstance(x, Dual):
        x = x.value
    return x


def _is_operand(x: Any) -> bool:
    return isinstance(x, Dual) or isinstance(x, _REAL_TYPES)


def _lead(a: Any, b: Any) -> Tag:
    """Tag of the outermost dual among two operands."""
    if isinstance(a, Dual):
        if isinstance(b, Dual) and b.tag.level > a.tag.level:
            return b.tag
        return a.tag
    return b.tag


def _split(x: Any, tag: Tag):
    """Value and partials of x seen from pass `tag` (partials None if constant)."""
    if isinstance(x, Dual) and x.tag is tag:
        return x.value, x.partials
    return x, None


def _add(a, b):
    tag = _lead(a, b)
    av, ap = _split(a, tag)
    bv, bp = _split(b, tag)
    if ap is None:
        partials = bp
    elif bp is None:
        partials = ap
    else:
        partials = ap + bp
    return Dual._make(av + bv, partials, tag)


def _sub(a, b):
    tag = _lead(a, b)
    av, ap = _split(a, tag)
    bv, bp = _split(b, tag)
    if ap is None:
        partials = -bp
    elif bp is None:
        partials = ap
    else:
        partials = ap - bp
    return Dual._make(av - bv, partials, tag)


def _mul(a, b):
    tag = _lead(a, b)
    av, ap = _split(a, tag)
    bv, bp = _split(b, tag)
    if ap is None:
        partials = bp * av
    elif bp is None:
        partials = ap * bv
    else:
        partials = ap * bv + bp * av
    return Dual._make(av * bv, partials, tag)


def _div(a, b):
    tag = _lead(a, b)
    av, ap = _split(a, tag)
    bv, bp = _split(b, tag)
    if primal(bv) == 0:
        raise ZeroDivisionError("dual number division by zero")
    value = av / bv
    if bp is None:
        partials = ap / bv
    elif ap is None:
        partials = -(bp * (value / bv))
    else:
        partials = ap / bv - bp * (value / bv)
    return Dual._make(value, partials, tag)


def _pow(a, b):
    tag = _lead(a, b)
    av, ap = _split(a, tag)
    bv, bp = _split(b, tag)
    if bp is None:
        return Dual._make(av ** bv, ap * (bv * av ** (bv - 1)), tag)
    # variable exponent
    return exp(b * log(a))


class Dual:
    """
    Dual number with a vector of partials.

    Attributes:
        value: Real value, or a Dual from an older pass
        partials: 1-D numpy array of partials (float, or object holding
            older-pass Duals)
        tag: Tag of the pass that seeded this number
    """

    __slots__ = ("value", "partials", "tag")

    def __init__(self, value, partials, tag: Tag = None):
        partials = np.asarray(partials)
        if partials.ndim != 1:
            raise ValueError("Dual partials must be a 1-D sequence")
        if partials.dtype != object:
            partials = partials.astype(float)
        self.value = value
        self.partials = partials
        self.tag = tag if tag is not None else Tag()

    @classmethod
    def _make(cls, value, partials, tag: Tag) -> "Dual":
        obj = object.__new__(cls)
        obj.value = value
        obj.partials = partials
        obj.tag = tag
        return obj

    @property
    def n_partials(self) -> int:
        return len(self.partials)

    def __repr__(self) -> str:
        return f"Dual({self.value!r}, {self.partials!r}, {self.tag!r})"

    # Arithmetic

    def __add__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _add(self, other)

    def __radd__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _add(other, self)

    def __sub__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _sub(self, other)

    def __rsub__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _sub(other, self)

    def __mul__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _mul(self, other)

    def __rmul__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _mul(other, self)

    def __truediv__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _div(self, other)

    def __rtruediv__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _div(other, self)

    def __pow__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _pow(self, other)

    def __rpow__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return _pow(other, self)

    def __neg__(self) -> "Dual":
        return Dual._make(-self.value, -self.partials, self.tag)

    def __pos__(self) -> "Dual":
        return self

    def __abs__(self) -> "Dual":
        if primal(self.value) < 0:
            return -self
        return self

    # Comparisons act on the innermost real value

    def __lt__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) < primal(other)

    def __le__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) <= primal(other)

    def __gt__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) > primal(other)

    def __ge__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) >= primal(other)

    def __eq__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) == primal(other)

    def __ne__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return primal(self) != primal(other)

    __hash__ = None

    # Elementary functions

    def exp(self) -> "Dual":
        value = exp(self.value)
        return Dual._make(value, self.partials * value, self.tag)

    def log(self) -> "Dual":
        if primal(self.value) <= 0:
            raise ValueError("math domain error")
        return Dual._make(log(self.value), self.partials / self.value, self.tag)

    def sqrt(self) -> "Dual":
        p = primal(self.value)
        if p < 0:
            raise ValueError("math domain error")
        if p == 0:
            raise ZeroDivisionError("derivative of sqrt at zero")
        value = sqrt(self.value)
        return Dual._make(value, self.partials / (2.0 * value), self.tag)


def exp(x):
    """Exponential of a real, a Dual or an array of either."""
    if isinstance(x, Dual):
        return x.exp()
    if isinstance(x, np.ndarray):
        if x.dtype == object:
            return _exp_objects(x)
        return np.exp(x)
    return math.exp(x)


def log(x):
    """Natural logarithm; non-positive arguments raise ValueError."""
    if isinstance(x, Dual):
        return x.log()
    if isinstance(x, np.ndarray):
        if x.dtype == object:
            return _log_objects(x)
        if np.any(x <= 0):
            raise ValueError("math domain error")
        return np.log(x)
    return math.log(x)


def sqrt(x):
    """Square root; negative arguments raise ValueError."""
    if isinstance(x, Dual):
        return x.sqrt()
    if isinstance(x, np.ndarray):
        if x.dtype == object:
            return _sqrt_objects(x)
        if np.any(x < 0):
            raise ValueError("math domain error")
        return np.sqrt(x)
    return math.sqrt(x)


def absolute(x):
    """Absolute value of a real, a Dual or an array of either."""
    if isinstance(x, np.ndarray):
        if x.dtype == object:
            return _abs_objects(x)
        return np.abs(x)
    return abs(x)


def norm_pdf(x):
    """Standard normal density of a real or a Dual."""
    return exp(-0.5 * x * x) / _SQRT_2PI


def norm_cdf(x):
    """Standard normal distribution function of a real or a Dual."""
    if isinstance(x, Dual):
        return Dual._make(norm_cdf(x.value), x.partials * norm_pdf(x.value), x.tag)
    return float(norm.cdf(x))


_exp_objects = np.frompyfunc(exp, 1, 1)
_log_objects = np.frompyfunc(log, 1, 1)
_sqrt_objects = np.frompyfunc(sqrt, 1, 1)
_abs_objects = np.frompyfunc(abs, 1, 1)


__all__ = [
    "Tag",
    "Dual",
    "is_dual",
    "primal",
    "exp",
    "log",
    "sqrt",
    "absolute",
    "norm_pdf",
    "norm_cdf",
]
