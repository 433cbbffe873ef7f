import math

import numpy as np
import pytest
from pytest import approx
from scipy import integrate

from exactgeodesic._area import C4Series, _u1, _u1_deriv
from exactgeodesic.errors import C4MisalignmentError
from exactgeodesic.geodesic import GeodesicExact


def _t(x):
    if x == 0:
        return 1.
    if x > 0:
        return x + math.sqrt(1 + x) * math.asinh(math.sqrt(x)) / math.sqrt(x)
    return x + math.sqrt(1 + x) * math.asin(math.sqrt(-x)) / math.sqrt(-x)


def _i4(ep2, k2, sig):
    """The area integral evaluated by quadrature"""
    def integrand(s):
        y = k2 * math.sin(s) ** 2
        return (_t(ep2) - _t(y)) / (ep2 - y) * math.sin(s) / 2

    return -integrate.quad(integrand, math.pi / 2, sig, epsabs=1e-15, epsrel=1e-14)[0]


def _series(coeffs, sig):
    return sum(c * math.cos((2 * l + 1) * sig) for l, c in enumerate(coeffs))


def test_u1():
    x = np.array([-0.5, -0.05, -1e-8, 1e-8, 0.05, 0.5, 3.])
    expected = np.array([_t(v) - v - 1 for v in x])
    assert _u1(x) == approx(expected, abs=1e-15)

    # Series and closed form agree at the switch-over point
    assert _u1(np.array(0.0999999)) == approx(_u1(np.array(0.1000001)), abs=1e-7)
    assert float(_u1(np.array(0.))) == 0.


def test_u1_deriv():
    for x in (-0.3, -0.01, 0., 0.02, 0.4, 2.):
        h = 1e-6
        numeric = (_t(x + h) - _t(x - h)) / (2 * h) - 1
        assert float(_u1_deriv(np.array(x))) == approx(numeric, abs=1e-8)

    assert float(_u1_deriv(np.array(0.))) == approx(1 / 3)


def test_leading_coefficient():
    # As the eccentricity vanishes I4 reduces to 2/3 * cos(sig)
    coeffs = C4Series(1e-12).coefficients(0.)
    assert len(coeffs) == 30
    assert coeffs[0] == approx(2 / 3, abs=1e-12)
    assert max(abs(c) for c in coeffs[1:]) < 1e-12


@pytest.mark.parametrize('ep2,calp0', [
    (0.00673949674227643, 0.6),  # WGS84
    (0.00673949674227643, 0.95),
    (0.25, 0.8),
    (-0.2, 0.7),
    (1.5, 0.3),
])
def test_coefficients_match_quadrature(ep2, calp0):
    k2 = calp0 ** 2 * ep2
    eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
    coeffs = C4Series(ep2).coefficients(eps)
    for sig in (0.1, 0.9, 1.5, 2.4):
        assert _series(coeffs, sig) == approx(_i4(ep2, k2, sig), abs=1e-12)


def test_coefficients_decay_for_wgs84():
    geod = GeodesicExact.WGS84
    k2 = geod._ep2  # pylint: disable=protected-access
    eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
    coeffs = geod._c4f(eps)  # pylint: disable=protected-access
    assert abs(coeffs[6]) < 1e-14
    assert all(math.isfinite(c) for c in coeffs)


def test_permitted_orders():
    for order in (24, 27, 30):
        assert len(C4Series(0.01, order).coefficients(0.001)) == order

    with pytest.raises(C4MisalignmentError):
        C4Series(0.01, 25)

    with pytest.raises(C4MisalignmentError, match='C4 misalignment'):
        C4Series(0.01, 6)
