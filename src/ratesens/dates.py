"""
Date and schedule utilities.

Provides:
- Whole years elapsed between two dates (anniversary counting)
- Policy year of a projection date
- Offset accumulation for survivorship-style vectors
"""

import operator
from datetime import date
from typing import Callable, Sequence

import numpy as np


def years_between(d1: date, d2: date, overlap: bool = True) -> int:
    """
    Whole years from d1 to d2, counted on anniversaries of d1.

    Args:
        d1: Start date
        d2: End date (may precede d1, giving a negative count)
        overlap: Count the anniversary day itself as a completed year

    Returns:
        Number of completed years

    Example:
        >>> years_between(date(2018, 9, 30), date(2019, 9, 30))
        1
        >>> years_between(date(2018, 9, 30), date(2019, 9, 30), overlap=False)
        0
    """
    years = d2.year - d1.year
    if d2.month == d1.month:
        if d2.day > d1.day or (overlap and d2.day == d1.day):
            years += 1
    elif d2.month > d1.month:
        years += 1
    return years - 1


def policy_year(issue_date: date, projection_date: date) -> int:
    """
    Policy year of a projection date.

    The first year after issue, [0, 1), is policy year 1; dates before issue
    give zero or negative years.

    Args:
        issue_date: Issue date
        projection_date: Date to classify

    Returns:
        Policy year
    """
    return years_between(issue_date, projection_date, overlap=True) + 1


def accum_offset(
    x: Sequence,
    op: Callable = operator.mul,
    init: float = 1.0
) -> np.ndarray:
    """
    Scan x with op, starting from init and lagged by one element.

    result[0] = init and result[i] = op(result[i-1], x[i-1]), e.g. survival
    probabilities from a vector of one-year survival rates.

    Args:
        x: Values to accumulate
        op: Binary operator (default multiplication)
        init: First value of the result

    Returns:
        Array of the same length as x
    """
    values = list(x)
    if not values:
        return np.array([])
    result = [init]
    for v in values[:-1]:
        result.append(op(result[-1], v))
    return np.array(result)


__all__ = [
    "years_between",
    "policy_year",
    "accum_offset",
]
