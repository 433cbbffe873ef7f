"""
Coefficients of the area series.

The area between a geodesic and the equator is c2 * alp12 + A4 * (I4(sig2) - I4(sig1))
where

    I4(sig) = -int((t(ep2) - t(k2 * sin(sig')**2)) / (ep2 - k2 * sin(sig')**2)
                   * sin(sig') / 2, sig', pi/2, sig)
    t(x) = x + sqrt(1 + x) * asinh(sqrt(x)) / sqrt(x)

and I4 is expanded as sum(C4[l] * cos((2*l+1) * sig), l, 0, nC4-1). The integrand
is sampled at the midpoints of [0, pi/2] and the odd harmonics of its sine
series are recovered with a type IV discrete sine transform, which is exact for
any flattening rather than a truncated expansion in it.
"""

__all__ = ['C4Series']

import math
from typing import List

import numpy as np
from scipy import fft

from exactgeodesic._const import EPSILON, NC4
from exactgeodesic.errors import C4MisalignmentError
from exactgeodesic.geomath import polyval

_PERMITTED_ORDERS = (24, 27, 30)

# Below this magnitude u(x) - 1 is summed from its power series
_SERIES_LIMIT = 0.1
_SERIES_TERMS = 20


def _u1_series():
    """
    Power series coefficients of u(x) - 1 = sqrt(1 + x) * asinh(sqrt(x)) / sqrt(x) - 1,
    lowest order (x**1) first.

    u(x) = (1 + x) * sum(a[n] * x**n) with a[n] = (-1)**n * 4**n * n!**2 / (2*n+1)!
    """
    a = [1.0]
    for n in range(1, _SERIES_TERMS + 1):
        a.append(-a[-1] * 2 * n / (2 * n + 1))
    return [a[n] + a[n - 1] for n in range(1, _SERIES_TERMS + 1)]


_U1_SERIES = _u1_series()
# u1(x) = x * sum(c[n-1] * x**(n-1)); u1'(x) = sum(n * c[n-1] * x**(n-1)); highest order first
_U1_COEFFS = _U1_SERIES[::-1]
_U1_DERIV_COEFFS = [(n + 1) * cn for n, cn in enumerate(_U1_SERIES)][::-1]


def _asinhsqrt(x: np.ndarray) -> np.ndarray:
    """asinh(sqrt(x)) / sqrt(x), continued as asin(sqrt(-x)) / sqrt(-x) for x < 0"""
    s = np.sqrt(np.abs(x))
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(
            x > 0, np.arcsinh(s) / s,
            np.where(x < 0, np.arcsin(s) / s, 1.0)
        )


def _u1(x: np.ndarray) -> np.ndarray:
    """u(x) - 1, accurate for small x"""
    direct = np.sqrt(1 + x) * _asinhsqrt(x) - 1
    series = x * polyval(_SERIES_TERMS - 1, _U1_COEFFS, 0, x)
    return np.where(np.abs(x) < _SERIES_LIMIT, series, direct)


def _u1_deriv(x: np.ndarray) -> np.ndarray:
    """The derivative of u(x)"""
    with np.errstate(divide='ignore', invalid='ignore'):
        direct = (1 - _asinhsqrt(x) / np.sqrt(1 + x)) / (2 * x)
    series = polyval(_SERIES_TERMS - 1, _U1_DERIV_COEFFS, 0, x)
    return np.where(np.abs(x) < _SERIES_LIMIT, series, direct)


def _u1_divided(x: float, y: np.ndarray) -> np.ndarray:
    """
    (u1(x) - u1(y)) / (x - y) summed term by term, for |x|, |y| below the series
    limit. (x**n - y**n) / (x - y) is built up without cancellation.
    """
    total = np.zeros_like(y)
    quotient = np.zeros_like(y)
    ypow = np.ones_like(y)
    for c in _U1_SERIES:
        quotient = x * quotient + ypow
        ypow = ypow * y
        total += c * quotient
    return total


class C4Series:
    """
    Builds the area series coefficients for one ellipsoid.

    Args:
        ep2:
            The second eccentricity squared of the ellipsoid

        nc4:
            The number of terms in the series; one of 24, 27 or 30
    """

    def __init__(self, ep2: float, nc4: int = NC4):
        if nc4 not in _PERMITTED_ORDERS:
            raise C4MisalignmentError(
                f'C4 misalignment: order {nc4} is not one of {_PERMITTED_ORDERS}'
            )

        self.nc4 = nc4
        self._ep2 = ep2
        self._nodes = 2 * nc4

        sig = (2 * np.arange(self._nodes) + 1) * (math.pi / (4 * self._nodes))
        self._sin2 = np.sin(sig) ** 2
        self._half_sin = np.sin(sig) / 2
        self._scale = 1 / (self._nodes * (2 * np.arange(nc4) + 1))
        if not (self._sin2.size == self._half_sin.size == self._nodes):
            raise C4MisalignmentError('C4 misalignment')

        # Near-spherical ellipsoids take the series divided difference throughout
        self._small = abs(ep2) < _SERIES_LIMIT
        x = np.asarray(ep2, dtype=float)
        self._u1x = _u1(x)
        # Below this separation the divided difference switches to the derivative
        self._dtol = np.cbrt(EPSILON) * max(1.0, abs(ep2))

    def _integrand(self, k2: float) -> np.ndarray:
        """(t(ep2) - t(y)) / (ep2 - y) * sin(sig) / 2 at the sample nodes"""
        y = k2 * self._sin2
        if self._small:
            return (1 + _u1_divided(self._ep2, y)) * self._half_sin

        d = self._ep2 - y
        with np.errstate(divide='ignore', invalid='ignore'):
            spread = (self._u1x - _u1(y)) / d
        close = _u1_deriv((self._ep2 + y) / 2)
        dt = 1 + np.where(np.abs(d) > self._dtol, spread, close)
        return dt * self._half_sin

    def coefficients(self, eps: float) -> List[float]:
        """
        Evaluate the C4 coefficients.

        Args:
            eps:
                The series parameter k2 / (2 * (1 + sqrt(1 + k2)) + k2)

        Returns:
            List of nC4 coefficients of cos((2*l+1) * sig)
        """
        k2 = 4 * eps / (1 - eps) ** 2
        # Sum of (2*l+1) * C4[l] * sin((2*l+1) * sig) recovered by the transform
        harmonics = fft.dst(self._integrand(k2), type=4)
        coeffs = harmonics[:self.nc4] * self._scale
        if coeffs.size != self.nc4:
            raise C4MisalignmentError('C4 misalignment')

        return coeffs.tolist()
