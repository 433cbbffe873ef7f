"""
Floating point helpers shared by the geodesic solvers: error-free summation,
angle normalization and differencing, and degree-based trigonometry.
"""

__all__ = [
    'INF', 'NAN', 'ang_diff', 'ang_normalize', 'ang_round', 'atan2d', 'digits',
    'hypot', 'lat_fix', 'norm', 'polyval', 'sincosd', 'sq', 'sum_error'
]

import math
from math import hypot
from typing import Sequence, Tuple

from exactgeodesic._const import DIGITS

NAN = math.nan
INF = math.inf

# Degrees per quarter, half and full turn
QD, HD, TD = 90, 180, 360


def digits() -> int:
    """Bits of precision of the working float type"""
    return DIGITS


def sq(x: float) -> float:
    """Square a number"""
    return x * x


def norm(s: float, c: float) -> Tuple[float, float]:
    """
    Normalize a sine/cosine pair so that s**2 + c**2 == 1.

    Args:
        s:
            The (unnormalized) sine

        c:
            The (unnormalized) cosine

    Returns:
        The normalized (sine, cosine) pair
    """
    r = hypot(s, c)
    return s / r, c / r


def sum_error(u: float, v: float) -> Tuple[float, float]:
    """
    Error-free transformation of a sum (Knuth, TAOCP vol. 2, 4.2.2, Theorem B).

    Args:
        u:
            The first addend

        v:
            The second addend

    Returns:
        (s, t) where s is the rounded sum and u + v == s + t exactly
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    # u + v =       s      + t
    #       = round(u + v) + t
    t = 0.0 - (up + vpp) if s != 0 else s
    return s, t


def polyval(n: int, p: Sequence[float], s: int, x: float) -> float:
    """
    Evaluate the polynomial p[s] * x**n + p[s+1] * x**(n-1) + ... + p[s+n]
    by Horner's method.

    Args:
        n:
            The order of the polynomial; n < 0 yields 0

        p:
            The coefficient sequence, highest order first

        s:
            Offset of the leading coefficient within p

        x:
            The evaluation point

    Returns:
        (float) the value of the polynomial
    """
    y = p[s] if n >= 0 else 0.0
    while n > 0:
        n -= 1
        s += 1
        y = y * x + p[s]
    return y


def _remainder(x: float) -> float:
    # math.remainder raises on infinities
    return math.remainder(x, TD) if math.isfinite(x) else NAN


def ang_round(x: float) -> float:
    """
    Coarsen an angle so that tiny values are rounded to zero-ish multiples of
    the quantum 1/16 - (1/16 - |x|). This prevents underflow in subsequent trig
    and treats e.g. 1e-200 the same as 0. Sign is preserved.
    """
    z = 1 / 16
    y = abs(x)
    w = z - y
    # z - (z - y) rounds y to the spacing of floats near z
    y = z - w if w > 0 else y
    return math.copysign(y, x)


def ang_normalize(x: float) -> float:
    """
    Reduce an angle to [-180, 180]. -180 is only returned for inputs whose
    sign is negative; the sign of a zero result follows x.
    """
    y = _remainder(x)
    if y == 0:
        y = math.copysign(y, x)
    return math.copysign(HD, x) if abs(y) == HD else y


def lat_fix(x: float) -> float:
    """Replace latitudes outside [-90, 90] with NaN"""
    return NAN if abs(x) > QD else x


def ang_diff(x: float, y: float) -> Tuple[float, float]:
    """
    Compute y - x exactly, reduced to [-180, 180].

    Args:
        x:
            The first angle, in degrees

        y:
            The second angle, in degrees

    Returns:
        (d, e) such that d + e == y - x (mod 360) with d the rounded difference
    """
    d, t = sum_error(_remainder(-x), _remainder(y))
    d, t = sum_error(_remainder(d), t)
    if d == 0 or abs(d) == HD:
        # Attach the sign of the exact difference to the boundary values
        d = math.copysign(d, y - x if t == 0 else -t)
    return d, t


def sincosd(x: float) -> Tuple[float, float]:
    """
    Sine and cosine of an angle in degrees, exact at multiples of 90.

    Returns:
        (sin(x), cos(x)); a zero sine carries the sign of x and the cosine is
        never -0
    """
    r = math.fmod(x, TD) if math.isfinite(x) else NAN
    q = 0 if math.isnan(r) else int(round(r / QD))
    r -= QD * q
    r = math.radians(r)
    s, c = math.sin(r), math.cos(r)
    q %= 4
    if q == 1:
        s, c = c, -s
    elif q == 2:
        s, c = -s, -c
    elif q == 3:
        s, c = -c, s
    c = c + 0.0
    if s == 0:
        s = math.copysign(s, x)
    return s, c


def atan2d(y: float, x: float) -> float:
    """
    Two-argument arctangent in degrees, result in [-180, 180]. Arguments are
    swapped and reflected so that the underlying atan2 only ever sees the first
    octant, which makes multiples of 45 exact.
    """
    if abs(y) > abs(x):
        q = 2
        x, y = y, x
    else:
        q = 0
    if math.copysign(1, x) < 0:
        q += 1
        x = -x
    ang = math.degrees(math.atan2(y, x))
    if q == 1:
        ang = math.copysign(HD, y) - ang
    elif q == 2:
        ang = QD - ang
    elif q == 3:
        ang = -QD + ang
    return ang
