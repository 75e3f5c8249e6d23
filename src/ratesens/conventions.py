"""
Compounding conventions for zero rates.

Supported conventions:
- Continuous: P = exp(-z t)
- Annual: P = (1 + z)^-t (annual effective)
- SemiAnnual / Quarterly: P = (1 + z/m)^(-m t)
- Simple: P = 1 / (1 + z t)

Conversions are written with the autodiff elementary functions so that
rates may be plain floats or dual numbers.
"""

from enum import Enum

from .autodiff import exp, log

# Basis points per unit rate. DV01, IR01 and CS01 are quoted per basis point.
BP_SCALE = 10_000.0


class CompoundingConvention(Enum):
    """Interest rate compounding convention."""
    CONTINUOUS = "Continuous"
    ANNUAL = "Annual"
    SEMI_ANNUAL = "SemiAnnual"
    QUARTERLY = "Quarterly"
    SIMPLE = "Simple"

    @classmethod
    def from_string(cls, s: str) -> "CompoundingConvention":
        """Parse compounding convention from string representation."""
        mapping = {
            "CONTINUOUS": cls.CONTINUOUS,
            "CONT": cls.CONTINUOUS,
            "ANNUAL": cls.ANNUAL,
            "EFFECTIVE": cls.ANNUAL,
            "SEMIANNUAL": cls.SEMI_ANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "SIMPLE": cls.SIMPLE,
        }
        key = s.upper().replace(" ", "").replace("_", "").replace("-", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown compounding convention: {s}")

    @property
    def periods_per_year(self) -> int:
        """Compounding periods per year (0 for continuous and simple)."""
        return {
            CompoundingConvention.ANNUAL: 1,
            CompoundingConvention.SEMI_ANNUAL: 2,
            CompoundingConvention.QUARTERLY: 4,
        }.get(self, 0)


def discount_factor_from_zero(zero_rate, t, compounding: CompoundingConvention):
    """
    Discount factor implied by a zero rate.

    Args:
        zero_rate: Zero rate (float or dual)
        t: Year fraction (float or dual)
        compounding: Convention the zero rate is quoted in

    Returns:
        Discount factor P(0, t)
    """
    if compounding == CompoundingConvention.CONTINUOUS:
        return exp(-zero_rate * t)
    if compounding == CompoundingConvention.SIMPLE:
        return 1.0 / (1.0 + zero_rate * t)
    m = compounding.periods_per_year
    return exp(-m * t * log(1.0 + zero_rate / m))


def zero_from_discount_factor(discount_factor, t, compounding: CompoundingConvention):
    """
    Zero rate implied by a discount factor (inverse of discount_factor_from_zero).

    Args:
        discount_factor: P(0, t), must be positive
        t: Year fraction, must be positive
        compounding: Convention of the returned rate

    Returns:
        Zero rate
    """
    if compounding == CompoundingConvention.CONTINUOUS:
        return -log(discount_factor) / t
    if compounding == CompoundingConvention.SIMPLE:
        return (1.0 / discount_factor - 1.0) / t
    m = compounding.periods_per_year
    return m * (exp(-log(discount_factor) / (m * t)) - 1.0)


__all__ = [
    "BP_SCALE",
    "CompoundingConvention",
    "discount_factor_from_zero",
    "zero_from_discount_factor",
]
