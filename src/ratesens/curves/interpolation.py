"""
Interpolation methods for yield curves.

Provides:
- LinearInterpolator: Linear on zero rates, flat extrapolation
- StepInterpolator: Piecewise constant, rate of the first tenor at or after t
- CubicSplineInterpolator: Natural cubic spline on zero rates
- LogLinearInterpolator: Linear on log discount factors anchored at t=0
- PchipInterpolator: Monotone piecewise cubic Hermite (Fritsch-Carlson)
- AkimaInterpolator: Akima piecewise cubic Hermite

Knot times are plain floats. Knot values may be floats or dual numbers and
every interpolator is written with arithmetic only, so derivatives with
respect to the knot values (and to t) flow through untouched. Branch
selection (which segment, which slope formula) uses real values only.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from ..autodiff import primal


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    def __init__(self):
        self.times: List[float] = []
        self.values: List = []
        self._grid: np.ndarray = np.empty(0)

    def fit(self, times: Sequence[float], values: Sequence) -> "Interpolator":
        """
        Fit the interpolator to knot points.

        Args:
            times: Knot year fractions (strictly increasing)
            values: Knot values (floats or duals)

        Returns:
            self
        """
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 1:
            raise ValueError("Need at least 1 point for interpolation")

        self.times = [float(t) for t in times]
        self.values = list(values)
        self._grid = np.asarray(self.times, dtype=float)
        if np.any(np.diff(self._grid) <= 0):
            raise ValueError("Knot times must be strictly increasing")
        self._prepare()
        return self

    def _prepare(self) -> None:
        """Precompute coefficients after fit."""

    @abstractmethod
    def interpolate(self, t):
        """
        Interpolate at a single point.

        Args:
            t: Year fraction (float or dual)

        Returns:
            Interpolated value
        """

    def __call__(self, t):
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    def _ensure_fitted(self) -> None:
        if not self.times:
            raise RuntimeError("Interpolator not fitted")

    def _segment(self, t) -> int:
        """Index i of the knot interval [t_i, t_i+1] containing t."""
        idx = int(np.searchsorted(self._grid, primal(t), side="right")) - 1
        return max(0, min(idx, len(self.times) - 2))


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Simple linear interpolation between knot points.
    Extrapolates flat beyond boundaries.
    """

    def interpolate(self, t):
        self._ensure_fitted()

        if t <= self.times[0]:
            return self.values[0]
        if t >= self.times[-1]:
            return self.values[-1]

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]

        w = (t - t0) / (t1 - t0)
        return v0 + w * (v1 - v0)


class StepInterpolator(Interpolator):
    """
    Piecewise constant interpolation.

    The value for the period (t_i-1, t_i] is the value at knot i, so a
    rate applies up to and including its own tenor. Flat beyond the last knot.
    """

    def interpolate(self, t):
        self._ensure_fitted()
        idx = int(np.searchsorted(self._grid, primal(t), side="left"))
        return self.values[min(idx, len(self.values) - 1)]


class CubicSplineInterpolator(Interpolator):
    """
    Cubic spline interpolation.

    Uses natural cubic splines (second derivative = 0 at boundaries).
    The tridiagonal system depends only on the knot times, so its inverse
    is computed once in floats and applied to the (possibly dual) values.
    """

    def _prepare(self) -> None:
        n = len(self.times)
        v = self.values

        if n == 1:
            self.coefficients = [(v[0], 0.0, 0.0, 0.0)]
            return

        h = np.diff(self._grid)

        if n == 2:
            # Degenerate to linear
            self.coefficients = [(v[0], (v[1] - v[0]) / float(h[0]), 0.0, 0.0)]
            return

        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        A[0, 0] = 1.0
        A[n - 1, n - 1] = 1.0
        rhs = [0.0] * n

        for i in range(1, n - 1):
            A[i, i - 1] = h[i - 1]
            A[i, i] = 2 * (h[i - 1] + h[i])
            A[i, i + 1] = h[i]
            rhs[i] = 6 * ((v[i + 1] - v[i]) / float(h[i]) -
                          (v[i] - v[i - 1]) / float(h[i - 1]))

        inverse = np.linalg.inv(A)
        M = [_weighted_sum(inverse[i], rhs) for i in range(n)]

        # S_i(x) = a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3
        self.coefficients = []
        for i in range(n - 1):
            hi = float(h[i])
            a = v[i]
            b = (v[i + 1] - v[i]) / hi - hi * (M[i + 1] + 2 * M[i]) / 6
            c = M[i] / 2
            d = (M[i + 1] - M[i]) / (6 * hi)
            self.coefficients.append((a, b, c, d))

    def interpolate(self, t):
        self._ensure_fitted()

        # Flat extrapolation
        if t <= self.times[0]:
            return self.values[0]
        if t >= self.times[-1]:
            return self.values[-1]

        idx = self._segment(t)
        dx = t - self.times[idx]
        a, b, c, d = self.coefficients[idx]
        return a + b * dx + c * dx ** 2 + d * dx ** 3


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation on discount factors.

    Values are log discount factors. The knot (0, 0) is implied, so the
    first segment runs from the anchor. Linear in log space corresponds to
    piecewise constant forward rates; the last forward is extended beyond
    the final knot.
    """

    def _prepare(self) -> None:
        self._knots = [0.0] + self.times
        self._logs = [0.0] + self.values
        self._knot_grid = np.asarray(self._knots)

    def interpolate(self, t):
        self._ensure_fitted()

        if t <= 0:
            return 0.0

        knots, logs = self._knots, self._logs
        if t >= knots[-1]:
            slope = (logs[-1] - logs[-2]) / (knots[-1] - knots[-2])
            return logs[-1] + slope * (t - knots[-1])

        idx = int(np.searchsorted(self._knot_grid, primal(t), side="right")) - 1
        idx = max(0, min(idx, len(knots) - 2))

        t0, t1 = knots[idx], knots[idx + 1]
        w = (t - t0) / (t1 - t0)
        return logs[idx] + w * (logs[idx + 1] - logs[idx])


class _HermiteInterpolator(Interpolator):
    """Piecewise cubic Hermite interpolation with flat extrapolation."""

    def _prepare(self) -> None:
        n = len(self.times)
        if n == 1:
            self.slopes = [0.0]
            return

        h = [self.times[i + 1] - self.times[i] for i in range(n - 1)]
        deltas = [(self.values[i + 1] - self.values[i]) / h[i] for i in range(n - 1)]

        if n == 2:
            self.slopes = [deltas[0], deltas[0]]
            return

        self.slopes = self._slopes(h, deltas)

    @abstractmethod
    def _slopes(self, h: List[float], deltas: List) -> List:
        """Knot slopes for n >= 3 points."""

    def interpolate(self, t):
        self._ensure_fitted()

        if t <= self.times[0]:
            return self.values[0]
        if t >= self.times[-1]:
            return self.values[-1]

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        y0, y1 = self.values[idx], self.values[idx + 1]
        d0, d1 = self.slopes[idx], self.slopes[idx + 1]

        h = t1 - t0
        s = (t - t0) / h
        h00 = (1 + 2 * s) * (1 - s) ** 2
        h10 = s * (1 - s) ** 2
        h01 = s ** 2 * (3 - 2 * s)
        h11 = s ** 2 * (s - 1)
        return h00 * y0 + h10 * h * d0 + h01 * y1 + h11 * h * d1


class PchipInterpolator(_HermiteInterpolator):
    """
    Monotone piecewise cubic Hermite interpolation.

    Interior slopes are weighted harmonic means of the adjacent secants
    (zero where the secants change sign or vanish); end slopes use the
    shape-preserving three-point formula.
    """

    def _slopes(self, h, deltas):
        n = len(self.times)
        slopes = [0.0] * n

        for k in range(1, n - 1):
            m0, m1 = deltas[k - 1], deltas[k]
            if _sign(m0) != _sign(m1) or _sign(m0) == 0 or _sign(m1) == 0:
                slopes[k] = 0.0
                continue
            w1 = 2 * h[k] + h[k - 1]
            w2 = h[k] + 2 * h[k - 1]
            slopes[k] = (w1 + w2) / (w1 / m0 + w2 / m1)

        slopes[0] = _pchip_end_slope(h[0], h[1], deltas[0], deltas[1])
        slopes[-1] = _pchip_end_slope(h[-1], h[-2], deltas[-1], deltas[-2])
        return slopes


def _pchip_end_slope(h0, h1, m0, m1):
    d = ((2 * h0 + h1) * m0 - h0 * m1) / (h0 + h1)
    if _sign(d) != _sign(m0):
        return 0.0
    if _sign(m0) != _sign(m1) and abs(primal(d)) > 3 * abs(primal(m0)):
        return 3 * m0
    return d


class AkimaInterpolator(_HermiteInterpolator):
    """
    Akima piecewise cubic Hermite interpolation.

    Slopes are weighted by neighbouring secant differences, which limits
    overshoot near outliers. Two ghost secants are extrapolated at each end.
    """

    def _slopes(self, h, deltas):
        n = len(self.times)

        m = [0.0] * (n + 3)
        m[2:n + 1] = deltas
        m[1] = 2 * m[2] - m[3]
        m[0] = 2 * m[1] - m[2]
        m[n + 1] = 2 * m[n] - m[n - 1]
        m[n + 2] = 2 * m[n + 1] - m[n]

        dm = [abs(m[i + 1] - m[i]) for i in range(n + 2)]
        f1 = dm[2:]
        f2 = dm[:-2]
        f12 = [a + b for a, b in zip(f1, f2)]
        threshold = 1e-9 * max(primal(f) for f in f12)

        slopes = []
        for i in range(n):
            if primal(f12[i]) > threshold:
                slopes.append((f1[i] * m[i + 1] + f2[i] * m[i + 2]) / f12[i])
            else:
                slopes.append(0.5 * (m[i + 3] + m[i]))
        return slopes


def _sign(x) -> float:
    return float(np.sign(primal(x)))


def _weighted_sum(weights: np.ndarray, values: Sequence):
    """Sum of w_i * v_i, skipping zero weights."""
    total = 0.0
    for w, v in zip(weights, values):
        w = float(w)
        if w != 0.0:
            total = total + w * v
    return total


INTERPOLATION_METHODS = {
    "linear": LinearInterpolator,
    "step": StepInterpolator,
    "cubic_spline": CubicSplineInterpolator,
    "log_linear": LogLinearInterpolator,
    "pchip": PchipInterpolator,
    "akima": AkimaInterpolator,
}

_ALIASES = {
    "lin": "linear",
    "stepwise": "step",
    "constant": "step",
    "cubic": "cubic_spline",
    "spline": "cubic_spline",
    "loglinear": "log_linear",
    "monotone_cubic": "pchip",
}


def normalize_method(method: str) -> str:
    """Canonical interpolation method name."""
    key = method.lower().replace("-", "_").replace(" ", "_")
    key = _ALIASES.get(key, key)
    if key not in INTERPOLATION_METHODS:
        raise ValueError(f"Unknown interpolation method: {method}")
    return key


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "step", "cubic_spline", "log_linear",
            "pchip", "akima" (or an alias)

    Returns:
        Interpolator instance
    """
    return INTERPOLATION_METHODS[normalize_method(method)]()


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "StepInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "PchipInterpolator",
    "AkimaInterpolator",
    "INTERPOLATION_METHODS",
    "normalize_method",
    "create_interpolator",
]
