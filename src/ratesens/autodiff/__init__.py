"""
Automatic differentiation package - forward-mode dual numbers.

Provides:
- Dual: value plus partials, nestable for second order
- Elementary functions that accept reals, duals and arrays
- Standard normal pdf/cdf for option pricing
- Seeding/extraction helpers for gradients and Hessians
"""

from .dual import (
    Tag,
    Dual,
    is_dual,
    primal,
    exp,
    log,
    sqrt,
    absolute,
    norm_pdf,
    norm_cdf,
)
from .derivatives import (
    seed,
    seed_hessian,
    extract_gradient,
    extract_hessian,
    derivative,
    gradient,
    hessian,
)

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
    "seed",
    "seed_hessian",
    "extract_gradient",
    "extract_hessian",
    "derivative",
    "gradient",
    "hessian",
]
