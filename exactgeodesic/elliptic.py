"""
Elliptic integrals of the first, second and third kinds, built on the Carlson
symmetric forms. The complete integrals are cached when the parameters are set
so the geodesic solvers can evaluate many incomplete integrals cheaply.

The parameterization follows Byrd & Friedman: k2 is the square of the modulus
and alpha2 the characteristic of the integral of the third kind. The
complementary values kp2 = 1 - k2 and alphap2 = 1 - alpha2 may be supplied
separately so that they keep full precision when k2 or alpha2 is close to 1.
"""

__all__ = ['EllipticFunction', 'rc', 'rd', 'rf', 'rg', 'rj']

import math
from typing import Optional, Tuple

from scipy import special

from exactgeodesic._const import EPSILON
from exactgeodesic.errors import EllipticParameterError
from exactgeodesic.geomath import sq

# Newton iterations and tolerance for inverting E
_NUM_EINV = 13
_TOL_JAC = math.sqrt(EPSILON * 0.01)


def rf(x: float, y: float, z: float = 0.0) -> float:
    """Carlson's symmetric integral of the first kind, R_F(x, y, z)"""
    return float(special.elliprf(x, y, z))


def rd(x: float, y: float, z: float) -> float:
    """Carlson's degenerate integral of the third kind, R_D(x, y, z)"""
    return float(special.elliprd(x, y, z))


def rg(x: float, y: float, z: float = 0.0) -> float:
    """Carlson's completely symmetric integral of the second kind, R_G(x, y, z)"""
    return float(special.elliprg(x, y, z))


def rj(x: float, y: float, z: float, p: float) -> float:
    """Carlson's symmetric integral of the third kind, R_J(x, y, z, p)"""
    return float(special.elliprj(x, y, z, p))


def rc(x: float, y: float) -> float:
    """Carlson's degenerate integral R_C(x, y) = R_F(x, y, y)"""
    return float(special.elliprc(x, y))


class EllipticFunction:
    """
    Complete and incomplete elliptic integrals for a fixed modulus and
    characteristic.

    Args:
        k2:
            The square of the modulus, in (-inf, 1]

        alpha2:
            The characteristic of the integral of the third kind, in (-inf, 1]

        kp2:
            The complementary modulus squared (defaults to 1 - k2)

        alphap2:
            The complementary characteristic (defaults to 1 - alpha2)
    """

    def __init__(
        self,
        k2: float = 0.0,
        alpha2: float = 0.0,
        kp2: Optional[float] = None,
        alphap2: Optional[float] = None,
    ):
        self.reset(k2, alpha2, kp2, alphap2)

    def __repr__(self):
        return f'<EllipticFunction k2={self._k2} alpha2={self._alpha2}>'

    def reset(
        self,
        k2: float = 0.0,
        alpha2: float = 0.0,
        kp2: Optional[float] = None,
        alphap2: Optional[float] = None,
    ) -> None:
        """
        Replace the parameters and recompute the complete integrals. NaNs are
        accepted and propagate to every integral.
        """
        kp2 = 1 - k2 if kp2 is None else kp2
        alphap2 = 1 - alpha2 if alphap2 is None else alphap2
        if k2 > 1:
            raise EllipticParameterError('Parameter k2 is not in (-inf, 1]')
        if alpha2 > 1:
            raise EllipticParameterError('Parameter alpha2 is not in (-inf, 1]')
        if kp2 < 0:
            raise EllipticParameterError('Parameter kp2 is not in [0, inf)')
        if alphap2 < 0:
            raise EllipticParameterError('Parameter alphap2 is not in [0, inf)')

        self._k2 = k2
        self._kp2 = kp2
        self._alpha2 = alpha2
        self._alphap2 = alphap2
        self._eps = k2 / sq(math.sqrt(kp2) + 1)

        # Limiting values
        #         K     E     D
        # k = 0:  pi/2  pi/2  pi/4
        # k = 1:  inf   1     inf
        if kp2 != 0:
            self._kkc = rf(kp2, 1)
            self._eec = 2 * rg(kp2, 1)
            self._ddc = rd(0, kp2, 1) / 3
        else:
            self._kkc = math.inf
            self._eec = 1.0
            self._ddc = math.inf

        if alpha2 != 0:
            # Pi(alpha2, k2) = K(k2) + alpha2 * RJ(0, kp2, 1, alphap2) / 3
            rjc = rj(0, kp2, 1, alphap2) if kp2 != 0 and alphap2 != 0 else math.inf
            # Only used when kp2 == 0
            rcc = 0.0 if kp2 != 0 else (rc(1, alphap2) if alphap2 != 0 else math.inf)
            self._ppic = self._kkc + alpha2 * rjc / 3 if kp2 != 0 else math.inf
            self._ggc = self._kkc + (alpha2 - k2) * rjc / 3 if kp2 != 0 else rcc
            self._hhc = (
                self._kkc - (alphap2 * rjc if alphap2 != 0 else 0) / 3
                if kp2 != 0 else rcc
            )
        else:
            self._ppic = self._kkc
            self._ggc = self._eec
            # H = K - D written to avoid cancellation as k2 -> 1
            self._hhc = kp2 * rd(0, 1, kp2) / 3 if kp2 != 0 else 1.0

    @property
    def k2(self) -> float:
        return self._k2

    @property
    def kp2(self) -> float:
        return self._kp2

    @property
    def alpha2(self) -> float:
        return self._alpha2

    @property
    def alphap2(self) -> float:
        return self._alphap2

    # Complete integrals

    def K(self) -> float:  # pylint: disable=invalid-name
        """Complete integral of the first kind"""
        return self._kkc

    def E(self) -> float:  # pylint: disable=invalid-name
        """Complete integral of the second kind"""
        return self._eec

    def D(self) -> float:  # pylint: disable=invalid-name
        """Complete integral (K - E) / k2"""
        return self._ddc

    def Pi(self) -> float:  # pylint: disable=invalid-name
        """Complete integral of the third kind"""
        return self._ppic

    def G(self) -> float:  # pylint: disable=invalid-name
        """Legendre's complete integral G, (alpha2 - k2) weighted third kind"""
        return self._ggc

    def H(self) -> float:  # pylint: disable=invalid-name
        """Cayley's complete integral H, alphap2 weighted third kind"""
        return self._hhc

    # Incomplete integrals, as functions of sn = sin(phi), cn = cos(phi)
    # and dn = Delta(phi)

    def delta(self, sn: float, cn: float) -> float:
        """Delta(phi) = sqrt(1 - k2 * sin(phi)**2)"""
        return math.sqrt(
            1 - self._k2 * sn * sn if self._k2 < 0 else self._kp2 + self._k2 * cn * cn
        )

    def _reflect(self, value: float, complete: float, sn: float, cn: float) -> float:
        # Enforce the usual trig-like symmetries
        if math.copysign(1, cn) < 0:
            value = 2 * complete - value
        return math.copysign(value, sn)

    def F_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Incomplete integral of the first kind"""
        cn2, dn2 = cn * cn, dn * dn
        fi = abs(sn) * rf(cn2, dn2, 1) if cn2 != 0 else self.K()
        return self._reflect(fi, self.K(), sn, cn)

    def E_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Incomplete integral of the second kind"""
        cn2, dn2, sn2 = cn * cn, dn * dn, sn * sn
        if cn2 == 0:
            ei = self.E()
        elif self._k2 <= 0:
            ei = abs(sn) * (rf(cn2, dn2, 1) - self._k2 * sn2 * rd(cn2, dn2, 1) / 3)
        elif self._kp2 >= 0:
            ei = abs(sn) * (
                self._kp2 * rf(cn2, dn2, 1)
                + self._k2 * self._kp2 * sn2 * rd(cn2, 1, dn2) / 3
                + self._k2 * abs(cn) / dn
            )
        else:
            ei = abs(sn) * (-self._kp2 * sn2 * rd(dn2, 1, cn2) / 3 + dn / abs(cn))
        return self._reflect(ei, self.E(), sn, cn)

    def D_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Incomplete integral (F - E) / k2"""
        cn2, dn2, sn2 = cn * cn, dn * dn, sn * sn
        di = abs(sn) * sn2 * rd(cn2, dn2, 1) / 3 if cn2 != 0 else self.D()
        return self._reflect(di, self.D(), sn, cn)

    def Pi_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Incomplete integral of the third kind"""
        cn2, dn2, sn2 = cn * cn, dn * dn, sn * sn
        pi = abs(sn) * (
            rf(cn2, dn2, 1)
            + self._alpha2 * sn2 * rj(cn2, dn2, 1, cn2 + self._alphap2 * sn2) / 3
        ) if cn2 != 0 else self.Pi()
        return self._reflect(pi, self.Pi(), sn, cn)

    def G_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Legendre's incomplete integral G"""
        cn2, dn2, sn2 = cn * cn, dn * dn, sn * sn
        gi = abs(sn) * (
            rf(cn2, dn2, 1)
            + (self._alpha2 - self._k2) * sn2
            * rj(cn2, dn2, 1, cn2 + self._alphap2 * sn2) / 3
        ) if cn2 != 0 else self.G()
        return self._reflect(gi, self.G(), sn, cn)

    def H_incomplete(self, sn: float, cn: float, dn: float) -> float:  # pylint: disable=invalid-name
        """Cayley's incomplete integral H"""
        cn2, dn2, sn2 = cn * cn, dn * dn, sn * sn
        # Large cancellation if k2 = 1, alpha2 = 0, and phi near pi/2
        hi = abs(sn) * (
            rf(cn2, dn2, 1)
            - self._alphap2 * sn2 * rj(cn2, dn2, 1, cn2 + self._alphap2 * sn2) / 3
        ) if cn2 != 0 else self.H()
        return self._reflect(hi, self.H(), sn, cn)

    # Periodic parts, f(phi) * (pi/2) / f_complete - phi.  Each has period pi.

    @staticmethod
    def _half_turn(sn: float, cn: float) -> Tuple[float, float]:
        if math.copysign(1, cn) < 0:
            return -sn, -cn
        return sn, cn

    def delta_f(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.F_incomplete(sn, cn, dn) * (math.pi / 2) / self.K() - math.atan2(sn, cn)

    def delta_e(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.E_incomplete(sn, cn, dn) * (math.pi / 2) / self.E() - math.atan2(sn, cn)

    def delta_d(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.D_incomplete(sn, cn, dn) * (math.pi / 2) / self.D() - math.atan2(sn, cn)

    def delta_pi(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.Pi_incomplete(sn, cn, dn) * (math.pi / 2) / self.Pi() - math.atan2(sn, cn)

    def delta_g(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.G_incomplete(sn, cn, dn) * (math.pi / 2) / self.G() - math.atan2(sn, cn)

    def delta_h(self, sn: float, cn: float, dn: float) -> float:
        sn, cn = self._half_turn(sn, cn)
        return self.H_incomplete(sn, cn, dn) * (math.pi / 2) / self.H() - math.atan2(sn, cn)

    def einv(self, x: float) -> float:
        """
        Invert the incomplete integral of the second kind.

        Args:
            x:
                The value of E(phi)

        Returns:
            (float) phi, in radians
        """
        if not math.isfinite(x):
            return math.nan
        n = math.floor(x / (2 * self._eec) + 0.5)
        x -= 2 * self._eec * n  # x now in [-ec, ec)
        # Linear approximation plus a first order correction
        phi = math.pi * x / (2 * self._eec)
        phi -= self._eps * math.sin(2 * phi) / 2
        for _ in range(_NUM_EINV):
            sn, cn = math.sin(phi), math.cos(phi)
            dn = self.delta(sn, cn)
            err = (self.E_incomplete(sn, cn, dn) - x) / dn
            phi -= err
            if not abs(err) > _TOL_JAC:
                break
        return n * math.pi + phi

    def delta_einv(self, stau: float, ctau: float) -> float:
        """
        The periodic part of the inverse of E: given tau (as a sine/cosine
        pair), return phi - tau where E(phi) * (pi/2) / E() == tau.
        """
        stau, ctau = self._half_turn(stau, ctau)
        tau = math.atan2(stau, ctau)
        return self.einv(tau * self.E() / (math.pi / 2)) - tau
