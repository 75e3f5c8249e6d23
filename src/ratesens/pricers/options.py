"""
European equity options.

Implements:
- Black-Scholes call and put with a continuous dividend yield
- Greeks by automatic differentiation of the price

The prices are written with the autodiff elementary functions, so every
input may be a dual number and the Greeks need no closed forms.
"""

from typing import Dict

from ..autodiff import exp, hessian, log, norm_cdf, sqrt


def _d1_d2(S, K, tau, r, sigma, q):
    if sigma <= 0:
        raise ValueError("Volatility must be positive")
    vol_t = sigma * sqrt(tau)
    d1 = (log(S / K) + (r - q + 0.5 * sigma ** 2) * tau) / vol_t
    return d1, d1 - vol_t


def eurocall(S, K, tau, r, sigma, q=0.0):
    """
    Black-Scholes price of a European call.

    C = S e^{-q tau} N(d1) - K e^{-r tau} N(d2)

    Args:
        S: Spot price
        K: Strike
        tau: Time to expiry (years); at or after expiry the payoff is returned
        r: Continuously compounded risk-free rate
        sigma: Volatility
        q: Continuous dividend yield

    Returns:
        Call price
    """
    if tau <= 0:
        return max(S - K, 0.0)
    d1, d2 = _d1_d2(S, K, tau, r, sigma, q)
    return S * exp(-q * tau) * norm_cdf(d1) - K * exp(-r * tau) * norm_cdf(d2)


def europut(S, K, tau, r, sigma, q=0.0):
    """
    Black-Scholes price of a European put.

    P = K e^{-r tau} N(-d2) - S e^{-q tau} N(-d1)

    Args:
        S: Spot price
        K: Strike
        tau: Time to expiry (years); at or after expiry the payoff is returned
        r: Continuously compounded risk-free rate
        sigma: Volatility
        q: Continuous dividend yield

    Returns:
        Put price
    """
    if tau <= 0:
        return max(K - S, 0.0)
    d1, d2 = _d1_d2(S, K, tau, r, sigma, q)
    return K * exp(-r * tau) * norm_cdf(-d2) - S * exp(-q * tau) * norm_cdf(-d1)


def euro_greeks(
    S: float,
    K: float,
    tau: float,
    r: float,
    sigma: float,
    q: float = 0.0,
    is_call: bool = True
) -> Dict[str, float]:
    """
    Price and Greeks of a European option in one second-order pass.

    Args:
        S: Spot price
        K: Strike
        tau: Time to expiry (must be positive)
        r: Risk-free rate
        sigma: Volatility
        q: Dividend yield
        is_call: True for call, False for put

    Returns:
        Dict with price, delta, gamma, vega, theta (per year of calendar
        time, i.e. -dV/dtau) and rho
    """
    if tau <= 0:
        raise ValueError("Greeks need a positive time to expiry")
    pricer = eurocall if is_call else europut

    def priced(x):
        return pricer(x[0], K, x[1], x[2], x[3], q)

    value, grad, hess = hessian(priced, [S, tau, r, sigma])
    return {
        "price": float(value),
        "delta": float(grad[0]),
        "gamma": float(hess[0, 0]),
        "vega": float(grad[3]),
        "theta": -float(grad[1]),
        "rho": float(grad[2]),
    }


__all__ = [
    "eurocall",
    "europut",
    "euro_greeks",
]
