"""
Exception types raised by the sensitivity engines.

Structural input errors are raised before any differentiation pass runs.
Both concrete errors subclass ValueError so callers that already guard
pricing inputs with ``except ValueError`` keep working.
"""


class RatesensError(Exception):
    """Base class for library errors."""


class DimensionMismatchError(RatesensError, ValueError):
    """Cashflow amounts and times (or rates and tenors) differ in length."""

    def __init__(self, what: str, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"{what} length mismatch: {left} != {right}")


class TenorMismatchError(RatesensError, ValueError):
    """Base and credit curves were given on different tenor grids."""

    def __init__(self, base_tenors, credit_tenors):
        self.base_tenors = tuple(base_tenors)
        self.credit_tenors = tuple(credit_tenors)
        super().__init__(
            f"Base and credit curves must share a tenor grid: "
            f"{list(self.base_tenors)} vs {list(self.credit_tenors)}"
        )


__all__ = [
    "RatesensError",
    "DimensionMismatchError",
    "TenorMismatchError",
]
