"""
Seeding and extraction helpers for forward-mode passes.

gradient():  one pass with n partials, cost ~ n per elementary operation.
hessian():   one pass over Dual-of-Dual seeds, cost ~ n^2 per operation;
             returns value, gradient and the full Hessian together.
derivative(): scalar derivative, typically used inside another pass.
"""

from typing import Any, Callable, List, Sequence, Tuple

import numpy as np

from .dual import Dual, Tag


def _real(x: Any):
    """Plain float unless x still carries derivatives of an outer pass."""
    if isinstance(x, Dual):
        return x
    return float(x)


def _as_array(values) -> np.ndarray:
    """Float array unless some entry carries derivatives of an outer pass."""
    arr = np.asarray(values)
    if arr.dtype == object and not any(isinstance(v, Dual) for v in arr.flat):
        arr = arr.astype(float)
    return arr


def seed(values: Sequence, tag: Tag = None) -> List[Dual]:
    """
    Seed one dual per value with an identity tangent basis.

    Args:
        values: Point at which to differentiate
        tag: Pass tag (a fresh one is created when omitted)

    Returns:
        List of duals, the i-th carrying partials e_i
    """
    tag = tag if tag is not None else Tag("grad")
    n = len(values)
    basis = np.eye(n)
    return [Dual._make(v, basis[i], tag) for i, v in enumerate(values)]


def seed_hessian(values: Sequence) -> Tuple[List[Dual], Tag, Tag]:
    """
    Seed Dual-of-Dual numbers for a second-order pass.

    The inner tag is created first so that the outer tag nests outside it.

    Returns:
        Tuple of (seeds, inner_tag, outer_tag)
    """
    inner = Tag("hess-inner")
    outer = Tag("hess-outer")
    basis = np.eye(len(values))
    seeds = [
        Dual._make(Dual._make(v, basis[i], inner), basis[i], outer)
        for i, v in enumerate(values)
    ]
    return seeds, inner, outer


def extract_gradient(result: Any, tag: Tag, n: int) -> Tuple[Any, np.ndarray]:
    """
    Split a pass result into value and gradient.

    A result that does not depend on the seeded variables has a zero gradient.
    """
    if isinstance(result, Dual):
        if result.tag is tag:
            return _real(result.value), _as_array(result.partials)
        if result.tag.level > tag.level:
            raise ValueError(
                f"Result carries derivatives of an unfinished inner pass {result.tag!r}"
            )
    return _real(result), np.zeros(n)


def extract_hessian(
    result: Any,
    inner: Tag,
    outer: Tag,
    n: int
) -> Tuple[Any, np.ndarray, np.ndarray]:
    """Split a second-order pass result into value, gradient and Hessian."""
    if isinstance(result, Dual) and result.tag is outer:
        base, tangents = result.value, result.partials
    else:
        base, tangents = result, np.zeros(n)

    value, grad = extract_gradient(base, inner, n)

    rows = []
    for tangent in tangents:
        _, row = extract_gradient(tangent, inner, n)
        rows.append(row)
    hess = _as_array(np.array(rows, dtype=object).reshape(n, n))
    return value, grad, hess


def derivative(func: Callable[[Any], Any], x: Any):
    """
    Derivative of a scalar function at x.

    Works inside another pass: x may itself be a dual of an older pass and
    the returned derivative then carries that pass's partials.
    """
    tag = Tag("deriv")
    result = func(Dual._make(x, np.ones(1), tag))
    if isinstance(result, Dual):
        if result.tag is tag:
            return result.partials[0]
        if result.tag.level > tag.level:
            raise ValueError(
                f"Result carries derivatives of an unfinished inner pass {result.tag!r}"
            )
    return 0.0


def gradient(func: Callable[[List[Any]], Any], values: Sequence) -> Tuple[Any, np.ndarray]:
    """
    Value and gradient of func at values in one forward pass.

    Args:
        func: Function of a list of numbers returning a scalar
        values: Evaluation point

    Returns:
        Tuple of (value, gradient array)
    """
    tag = Tag("grad")
    return extract_gradient(func(seed(values, tag)), tag, len(values))


def hessian(
    func: Callable[[List[Any]], Any],
    values: Sequence
) -> Tuple[Any, np.ndarray, np.ndarray]:
    """Value, gradient and Hessian of func at values in one nested pass."""
    seeds, inner, outer = seed_hessian(values)
    return extract_hessian(func(seeds), inner, outer, len(values))


__all__ = [
    "seed",
    "seed_hessian",
    "extract_gradient",
    "extract_hessian",
    "derivative",
    "gradient",
    "hessian",
]
