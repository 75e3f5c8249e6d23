"""
Sample custom valuations.

Both functions return CustomValuation objects that plug into every risk
entry point the same way a caller-written function would.
"""

import numpy as np

from .cashflows import fixed_rate_bond_cashflows
from .valuation import CustomValuation, StandardValuation


def callable_bond_valuation(
    coupon_rate: float,
    maturity: float,
    call_time: float,
    call_price: float = 100.0,
    frequency: int = 1,
    face_value: float = 100.0
) -> CustomValuation:
    """
    Bond the issuer may redeem at call_time for call_price.

    The issuer calls when that is cheaper, so the holder's value is the
    smaller of the bullet value and the value of the called bond. The
    value is not differentiable where the two legs cross.

    Args:
        coupon_rate: Annual coupon rate (decimal)
        maturity: Final maturity in years
        call_time: Call date in years (on or before maturity)
        call_price: Redemption price paid on call
        frequency: Coupons per year
        face_value: Face/par value

    Returns:
        CustomValuation of one curve
    """
    if not 0 < call_time <= maturity:
        raise ValueError(f"Call time {call_time} must lie in (0, {maturity}]")

    amounts, times = fixed_rate_bond_cashflows(coupon_rate, maturity, frequency, face_value)
    bullet = StandardValuation(amounts, times)

    keep = times <= call_time + 1e-12
    called_amounts = np.where(np.isclose(times, maturity), amounts - face_value, amounts)[keep]
    called = StandardValuation(
        np.append(called_amounts, call_price),
        np.append(times[keep], call_time),
    )

    def callable_bond(curve):
        return min(bullet(curve), called(curve))

    return CustomValuation(callable_bond)


def floating_rate_note_valuation(
    maturity: float,
    frequency: int = 4,
    spread: float = 0.0,
    face_value: float = 100.0
) -> CustomValuation:
    """
    Floating rate note fixing off the discount curve itself.

    Each coupon pays the simple forward rate of its period plus spread, so
    at zero spread the note prices at par and carries no rate risk.

    Args:
        maturity: Maturity in years
        frequency: Resets per year
        spread: Quoted margin over the forward rate (decimal)
        face_value: Face/par value

    Returns:
        CustomValuation of one curve
    """
    n_periods = int(round(maturity * frequency))
    if n_periods <= 0:
        raise ValueError(f"Invalid maturity {maturity} for frequency {frequency}")
    accrual = 1.0 / frequency

    def floating_rate_note(curve):
        pv = 0.0
        for k in range(1, n_periods + 1):
            start, end = (k - 1) * accrual, k * accrual
            coupon = face_value * (curve.forward_rate(start, end) + spread) * accrual
            pv = pv + coupon * curve(end)
        return pv + face_value * curve(n_periods * accrual)

    return CustomValuation(floating_rate_note)


__all__ = [
    "callable_bond_valuation",
    "floating_rate_note_valuation",
]
