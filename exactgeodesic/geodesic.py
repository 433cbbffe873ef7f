"""
Exact geodesics on an ellipsoid of revolution.

The direct and inverse geodesic problems are solved in terms of elliptic
integrals, so the results stay accurate for any flattening, including very
oblate and prolate ellipsoids where series expansions in the flattening fail.
Angles are in degrees; lengths are in the units of the equatorial radius.

The algorithms are described in

    C. F. F. Karney, Algorithms for geodesics, J. Geodesy 87, 43-55 (2013)
    C. F. F. Karney, Geodesics on an ellipsoid of revolution, arXiv:1102.1215

Typical usage:

    >>> from exactgeodesic import GeodesicExact
    >>> res = GeodesicExact.WGS84.inverse(40.6, -73.8, 1.4, 104.0)
    >>> sorted(res)
    ['a12', 'azi1', 'azi2', 'lat1', 'lat2', 'lon1', 'lon2', 's12']
"""

__all__ = ['GeodesicExact']

import math
from typing import Any, Dict, List, Sequence, Tuple

from exactgeodesic import config
from exactgeodesic._area import C4Series
from exactgeodesic._const import (
    MAXIT1, MAXIT2, NC4, TINY, TOL0, TOL1, TOL2, TOLB, WGS84_A, WGS84_F, XTHRESH
)
from exactgeodesic.capabilities import GeodesicCapability
from exactgeodesic.elliptic import EllipticFunction
from exactgeodesic.errors import ConvergenceError, GeodesicError
from exactgeodesic.geodesicline import GeodesicLineExact, build_result
from exactgeodesic.geomath import (
    NAN, ang_diff, ang_normalize, ang_round, atan2d, hypot, lat_fix, norm,
    sincosd, sq
)
from exactgeodesic.utils.mixins import LoggingMixin


class _SharedEllipsoid:  # pylint: disable=too-few-public-methods
    """Class-level attribute that builds its engine on first access"""

    def __init__(self, a: float, f: float):
        self._a = a
        self._f = f
        self._instance = None

    def __get__(self, obj, owner):
        if self._instance is None:
            self._instance = owner(self._a, self._f)
        return self._instance


class GeodesicExact(GeodesicCapability, LoggingMixin):
    """
    Solve geodesic problems on an ellipsoid of revolution.

    Args:
        a:
            The equatorial radius of the ellipsoid

        f:
            The flattening of the ellipsoid. f = 0 gives a sphere; negative
            values give a prolate ellipsoid.

    Raises:
        GeodesicError: if either semi-axis is non-finite or not positive
    """

    WGS84 = _SharedEllipsoid(WGS84_A, WGS84_F)

    def __init__(self, a: float, f: float):
        super().__init__()
        self._a = float(a)
        self._f = float(f)
        self._f1 = 1 - self._f
        self._b = self._a * self._f1
        if not (math.isfinite(self._a) and self._a > 0):
            raise GeodesicError('Equatorial radius is not positive')
        if not (math.isfinite(self._b) and self._b > 0):
            raise GeodesicError('Polar semi-axis is not positive')

        self._e2 = self._f * (2 - self._f)
        self._ep2 = self._e2 / sq(self._f1)
        self._n = self._f / (2 - self._f)
        # authalic radius squared
        if self._e2 == 0:
            g = 1.0
        elif self._e2 > 0:
            g = math.asinh(math.sqrt(self._ep2)) / math.sqrt(abs(self._e2))
        else:
            g = math.atan(math.sqrt(-self._e2)) / math.sqrt(abs(self._e2))
        self._c2 = (sq(self._a) + sq(self._b) * g) / 2
        # The sig12 threshold for "really short".  Using the auxiliary sphere
        # solution with dnm computed at (bet1 + bet2) / 2, the relative error in
        # the azimuth consistency check is sig12^2 * abs(f) * min(1, 1-f/2) / 2.
        # The 0.1 factor leaves a safety margin of 100 over TOL0.
        self._etol2 = 0.1 * TOL2 / math.sqrt(
            max(0.001, abs(self._f)) * min(1.0, 1 - self._f / 2) / 2
        )

        self._nC4 = NC4
        self._c4 = C4Series(self._ep2, self._nC4)

    def __repr__(self):
        return f'<GeodesicExact a={self._a} f={self._f}>'

    @property
    def a(self) -> float:
        """The equatorial radius"""
        return self._a

    @property
    def f(self) -> float:
        """The flattening"""
        return self._f

    @property
    def b(self) -> float:
        """The polar semi-axis"""
        return self._b

    @property
    def c2(self) -> float:
        """The authalic radius squared"""
        return self._c2

    def ellipsoid_area(self) -> float:
        """The total area of the ellipsoid"""
        return 4 * math.pi * self._c2

    # -------------------------------------------------------------------------
    # Series and integrals
    # -------------------------------------------------------------------------

    @staticmethod
    def _cos_series(sinx: float, cosx: float, c: Sequence[float], n: int) -> float:
        """
        Evaluate sum(c[i] * cos((2*i+1) * x), i, 0, n-1) by Clenshaw summation.

        Args:
            sinx:
                sin(x)

            cosx:
                cos(x)

            c:
                The coefficients

            n:
                The number of terms

        Returns:
            (float) the value of the series
        """
        k = n  # Point to one beyond last element
        ar = 2 * (cosx - sinx) * (cosx + sinx)  # 2 * cos(2 * x)
        if n & 1:
            k -= 1
            y0 = c[k]
        else:
            y0 = 0.0
        y1 = 0.0  # accumulators for sum
        # Now n is even
        n //= 2
        while n:
            n -= 1
            # Unroll loop x 2, so accumulators return to their original role
            k -= 1
            y1 = ar * y0 - y1 + c[k]
            k -= 1
            y0 = ar * y1 - y0 + c[k]
        return cosx * (y0 - y1)  # cos(x) * (y0 - y1)

    def _c4f(self, eps: float) -> List[float]:
        """Evaluate the area series coefficients for parameter eps"""
        return self._c4.coefficients(eps)

    def _lengths(
        self,
        E: EllipticFunction,  # pylint: disable=invalid-name
        sig12: float,
        ssig1: float, csig1: float, dn1: float,
        ssig2: float, csig2: float, dn2: float,
        cbet1: float, cbet2: float,
        outmask: int,
    ) -> Tuple[float, float, float, float, float]:
        """
        Distance and reduced length along a geodesic, both scaled by 1/b.

        Returns:
            (s12b, m12b, m0, M12, M21), with NaN for quantities outmask does
            not request. m0 is the coefficient of the secular term in the
            reduced length.
        """
        outmask &= self.OUT_ALL
        s12b = m12b = m0 = M12 = M21 = NAN  # pylint: disable=invalid-name

        if outmask & self.DISTANCE:
            # Missing a factor of b
            s12b = E.E() / (math.pi / 2) * (
                sig12 + (E.delta_e(ssig2, csig2, dn2) - E.delta_e(ssig1, csig1, dn1))
            )

        if outmask & (self.REDUCEDLENGTH | self.GEODESICSCALE):
            m0x = -E.k2 * E.D() / (math.pi / 2)
            J12 = m0x * (  # pylint: disable=invalid-name
                sig12 + (E.delta_d(ssig2, csig2, dn2) - E.delta_d(ssig1, csig1, dn1))
            )
            if outmask & self.REDUCEDLENGTH:
                m0 = m0x
                # Missing a factor of b.  The parentheses around (csig1 * ssig2)
                # and (ssig1 * csig2) keep coincident points accurate.
                m12b = dn2 * (csig1 * ssig2) - dn1 * (ssig1 * csig2) - csig1 * csig2 * J12
            if outmask & self.GEODESICSCALE:
                csig12 = csig1 * csig2 + ssig1 * ssig2
                t = self._ep2 * (cbet1 - cbet2) * (cbet1 + cbet2) / (dn1 + dn2)
                M12 = csig12 + (t * ssig2 - csig2 * J12) * ssig1 / dn1  # pylint: disable=invalid-name
                M21 = csig12 - (t * ssig1 - csig1 * J12) * ssig2 / dn2  # pylint: disable=invalid-name

        return s12b, m12b, m0, M12, M21

    @staticmethod
    def _astroid(x: float, y: float) -> float:
        """
        Solve k**4 + 2*k**3 - (x**2 + y**2 - 1)*k**2 - 2*y**2*k - y**2 = 0 for the
        positive root k.
        """
        p = sq(x)
        q = sq(y)
        r = (p + q - 1) / 6
        if q == 0 and r <= 0:
            # y = 0 with |x| <= 1.  For y small, the positive root is
            # k = abs(y) / sqrt(1 - x**2)
            return 0.0

        # Avoid possible division by zero when r = 0 by multiplying equations
        # for s and t by r**3 and r, resp.
        S = p * q / 4  # S = r**3 * s  pylint: disable=invalid-name
        r2 = sq(r)
        r3 = r * r2
        # The discriminant of the quadratic equation for T3.  This is zero on
        # the evolute curve p**(1/3) + q**(1/3) = 1
        disc = S * (S + 2 * r3)
        u = r
        if disc >= 0:
            T3 = S + r3  # pylint: disable=invalid-name
            # Pick the sign on the sqrt to maximize abs(T3), which minimizes
            # loss of precision due to cancellation.
            T3 += -math.sqrt(disc) if T3 < 0 else math.sqrt(disc)  # T3 = (r * t)**3
            # Real cube root
            T = math.copysign(abs(T3) ** (1 / 3), T3)  # T = r * t  pylint: disable=invalid-name
            # T can be zero; but then r2 / T -> 0.
            u += T + (r2 / T if T != 0 else 0)
        else:
            # T is complex, but the way u is defined the result is real.
            ang = math.atan2(math.sqrt(-disc), -(S + r3))
            # Of the three cube roots, choose the one which avoids cancellation.
            # Note that disc < 0 implies that r < 0.
            u += 2 * r * math.cos(ang / 3)

        v = math.sqrt(sq(u) + q)  # guaranteed positive
        # Avoid loss of accuracy when u < 0.
        uv = q / (v - u) if u < 0 else u + v  # u+v, guaranteed positive
        w = (uv - q) / (2 * v)  # positive?
        # Rearrange expression for k to avoid loss of accuracy due to
        # subtraction.  Division by 0 not possible because uv > 0, w >= 0.
        return uv / (math.sqrt(uv + sq(w)) + w)  # guaranteed positive

    # -------------------------------------------------------------------------
    # Inverse problem
    # -------------------------------------------------------------------------

    def _inverse_start(
        self,
        E: EllipticFunction,  # pylint: disable=invalid-name
        sbet1: float, cbet1: float, dn1: float,
        sbet2: float, cbet2: float, dn2: float,
        lam12: float, slam12: float, clam12: float,
    ) -> Tuple[float, float, float, float, float, float]:
        """
        Starting point for Newton's method.

        Returns:
            (sig12, salp1, calp1, salp2, calp2, dnm). sig12 is -1 when Newton's
            method is still needed; otherwise the short-line solution is complete
            and salp2, calp2 and dnm are set.
        """
        sig12 = -1.0
        salp2 = calp2 = dnm = NAN
        # bet12 = bet2 - bet1 in [0, pi); bet12a = bet2 + bet1 in (-pi, 0]
        sbet12 = sbet2 * cbet1 - cbet2 * sbet1
        cbet12 = cbet2 * cbet1 + sbet2 * sbet1
        sbet12a = sbet2 * cbet1 + cbet2 * sbet1
        shortline = cbet12 >= 0 and sbet12 < 0.5 and cbet2 * lam12 < 0.5
        if shortline:
            # sin((bet1+bet2)/2)**2
            # =  (sbet1 + sbet2)**2 / ((sbet1 + sbet2)**2 + (cbet1 + cbet2)**2)
            sbetm2 = sq(sbet1 + sbet2)
            sbetm2 /= sbetm2 + sq(cbet1 + cbet2)
            dnm = math.sqrt(1 + self._ep2 * sbetm2)
            omg12 = lam12 / (self._f1 * dnm)
            somg12, comg12 = math.sin(omg12), math.cos(omg12)
        else:
            somg12, comg12 = slam12, clam12

        salp1 = cbet2 * somg12
        calp1 = (
            sbet12 + cbet2 * sbet1 * sq(somg12) / (1 + comg12) if comg12 >= 0 else
            sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)
        )

        ssig12 = hypot(salp1, calp1)
        csig12 = sbet1 * sbet2 + cbet1 * cbet2 * comg12

        if shortline and ssig12 < self._etol2:
            # really short lines
            salp2 = cbet1 * somg12
            calp2 = sbet12 - cbet1 * sbet2 * (
                sq(somg12) / (1 + comg12) if comg12 >= 0 else 1 - comg12
            )
            salp2, calp2 = norm(salp2, calp2)
            sig12 = math.atan2(ssig12, csig12)
        elif (abs(self._n) > 0.1 or  # Skip astroid calc if too eccentric
              csig12 >= 0 or
              ssig12 >= 6 * abs(self._n) * math.pi * sq(cbet1)):
            # Nothing to do, zeroth order spherical approximation is OK
            pass
        else:
            # Scale lam12 and bet2 to x, y coordinate system where antipodal
            # point is at origin and singular point is at y = 0, x = -1.
            lam12x = math.atan2(-slam12, -clam12)  # lam12 - pi
            if self._f >= 0:  # In fact f == 0 does not get here
                # x = dlong, y = dlat
                k2 = sq(sbet1) * self._ep2
                E.reset(-k2, -self._ep2, 1 + k2, 1 + self._ep2)
                lamscale = self._e2 / self._f1 * cbet1 * 2 * E.H()
                betscale = lamscale * cbet1
                x = lam12x / lamscale
                y = sbet12a / betscale
            else:
                # x = dlat, y = dlong
                cbet12a = cbet2 * cbet1 - sbet2 * sbet1
                bet12a = math.atan2(sbet12a, cbet12a)
                # In the case of lon12 = 180, this repeats a calculation made in
                # the inverse solver.
                _, m12b, m0, _, _ = self._lengths(
                    E, math.pi + bet12a, sbet1, -cbet1, dn1, sbet2, cbet2, dn2,
                    cbet1, cbet2, self.REDUCEDLENGTH
                )
                x = -1 + m12b / (cbet1 * cbet2 * m0 * math.pi)
                betscale = (
                    sbet12a / x if x < -0.01 else -self._f * sq(cbet1) * math.pi
                )
                lamscale = betscale / cbet1
                y = lam12x / lamscale

            if y > -TOL1 and x > -1 - XTHRESH:
                # strip near cut
                if self._f >= 0:
                    salp1 = min(1.0, -x)
                    calp1 = -math.sqrt(1 - sq(salp1))
                else:
                    calp1 = max(0.0 if x > -TOL1 else -1.0, x)
                    salp1 = math.sqrt(1 - sq(calp1))
            else:
                # Estimate omg12 by solving the astroid problem and use the
                # spherical formula to compute alp1.  omg12 is near pi, so work
                # with omg12a = pi - omg12.
                k = self._astroid(x, y)
                omg12a = lamscale * (
                    -x * k / (1 + k) if self._f >= 0 else -y * (1 + k) / k
                )
                somg12, comg12 = math.sin(omg12a), -math.cos(omg12a)
                # Update spherical estimate of alp1 using omg12 instead of lam12
                salp1 = cbet2 * somg12
                calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

        # Sanity check on starting guess.  Backwards check allows NaN through.
        if not salp1 <= 0:
            salp1, calp1 = norm(salp1, calp1)
        else:
            salp1, calp1 = 1.0, 0.0

        return sig12, salp1, calp1, salp2, calp2, dnm

    def _lambda12(
        self,
        sbet1: float, cbet1: float, dn1: float,
        sbet2: float, cbet2: float, dn2: float,
        salp1: float, calp1: float,
        slam120: float, clam120: float,
        E: EllipticFunction,  # pylint: disable=invalid-name
        diffp: bool,
    ) -> Tuple[float, ...]:
        """
        The longitude difference reached by heading from point 1 at azimuth
        alp1, relative to the target difference lam120.

        E is reset to the parameters of this geodesic.

        Returns:
            (lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2, domg12,
            dlam12), where dlam12 is the derivative with respect to alp1 (NaN
            unless diffp)
        """
        if sbet1 == 0 and calp1 == 0:
            # Break degeneracy of equatorial line.  This case has already been
            # handled.
            calp1 = -TINY

        # sin(alp1) * cos(bet1) = sin(alp0)
        salp0 = salp1 * cbet1
        calp0 = hypot(calp1, salp1 * sbet1)  # calp0 > 0

        # tan(bet1) = tan(sig1) * cos(alp1)
        # tan(omg1) = sin(alp0) * tan(sig1) = tan(omg1)=tan(alp1)*sin(bet1)
        ssig1 = sbet1
        somg1 = salp0 * sbet1
        csig1 = comg1 = calp1 * cbet1
        # Without normalization we have schi1 = somg1.
        cchi1 = self._f1 * dn1 * comg1
        ssig1, csig1 = norm(ssig1, csig1)
        # somg1, comg1 and schi1, cchi1 need no normalization

        # Enforce symmetries in the case abs(bet2) = -bet1.  Need to be careful
        # about this case, since this can yield singularities in the Newton
        # iteration.
        # sin(alp2) * cos(bet2) = sin(alp0)
        salp2 = salp0 / cbet2 if cbet2 != cbet1 else salp1
        # calp2 = sqrt(1 - sq(salp2))
        #       = sqrt(sq(calp0) - sq(sbet2)) / cbet2
        # and subst for calp0 and rearrange to give (choose positive sqrt
        # to give alp2 in [0, pi/2]).
        if cbet2 != cbet1 or abs(sbet2) != -sbet1:
            calp2 = math.sqrt(
                sq(calp1 * cbet1) + (
                    (cbet2 - cbet1) * (cbet1 + cbet2) if cbet1 < -sbet1 else
                    (sbet1 - sbet2) * (sbet1 + sbet2)
                )
            ) / cbet2
        else:
            calp2 = abs(calp1)
        # tan(bet2) = tan(sig2) * cos(alp2)
        # tan(omg2) = sin(alp0) * tan(sig2).
        ssig2 = sbet2
        somg2 = salp0 * sbet2
        csig2 = comg2 = calp2 * cbet2
        # Without normalization we have schi2 = somg2.
        cchi2 = self._f1 * dn2 * comg2
        ssig2, csig2 = norm(ssig2, csig2)

        # sig12 = sig2 - sig1, limit to [0, pi]
        sig12 = math.atan2(
            max(0.0, csig1 * ssig2 - ssig1 * csig2), csig1 * csig2 + ssig1 * ssig2
        )
        # omg12 = omg2 - omg1, limit to [0, pi]
        somg12 = max(0.0, comg1 * somg2 - somg1 * comg2)
        comg12 = comg1 * comg2 + somg1 * somg2
        k2 = sq(calp0) * self._ep2
        E.reset(-k2, -self._ep2, 1 + k2, 1 + self._ep2)
        # chi12 = chi2 - chi1, limit to [0, pi]
        schi12 = max(0.0, cchi1 * somg2 - somg1 * cchi2)
        cchi12 = cchi1 * cchi2 + somg1 * somg2
        # eta = chi12 - lam120
        eta = math.atan2(
            schi12 * clam120 - cchi12 * slam120, cchi12 * clam120 + schi12 * slam120
        )
        deta12 = -self._e2 / self._f1 * salp0 * E.H() / (math.pi / 2) * (
            sig12 + (E.delta_h(ssig2, csig2, dn2) - E.delta_h(ssig1, csig1, dn1))
        )
        lam12 = eta + deta12
        # domg12 = deta12 + chi12 - omg12
        domg12 = deta12 + math.atan2(
            schi12 * comg12 - cchi12 * somg12, cchi12 * comg12 + schi12 * somg12
        )

        dlam12 = NAN
        if diffp:
            if calp2 == 0:
                dlam12 = -2 * self._f1 * dn1 / sbet1
            else:
                _, dlam12, _, _, _ = self._lengths(
                    E, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                    cbet1, cbet2, self.REDUCEDLENGTH
                )
                dlam12 *= self._f1 / (calp2 * cbet2)

        return (
            lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2, domg12, dlam12
        )

    def _convergence_failure(self, lat1: float, lon1: float, lat2: float, lon2: float):
        """Apply the configured policy to an exhausted Newton/bisection loop"""
        policy = config.get_convergence_policy()
        if policy == 'raise':
            raise ConvergenceError('Convergence failure')

        if policy == 'warn':
            self.warn_once(
                'Inverse geodesic solver reached its iteration limit; '
                'results may be less accurate than usual.'
            )

        self.logger.debug(
            'Iteration limit reached for inverse problem %s %s %s %s',
            lat1, lon1, lat2, lon2
        )

    def _gen_inverse(
        self, lat1: float, lon1: float, lat2: float, lon2: float, outmask: int
    ) -> Tuple[float, ...]:
        """
        General version of the inverse problem.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            lat2:
                Latitude of point 2, in degrees

            lon2:
                Longitude of point 2, in degrees

            outmask:
                Bitor'ed output flags selecting the quantities to compute

        Returns:
            (a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12) with NaN
            for the quantities outmask does not request
        """
        orig = (lat1, lon1, lat2, lon2)
        a12 = s12 = m12 = M12 = M21 = S12 = NAN  # pylint: disable=invalid-name
        outmask &= self.OUT_MASK

        # Compute longitude difference (ang_diff does this carefully).  Result is
        # in [-180, 180] but -180 is only for west-going geodesics.  180 is for
        # east-going and meridional geodesics.
        lon12, lon12s = ang_diff(lon1, lon2)
        # Make longitude difference positive.
        lonsign = -1 if math.copysign(1, lon12) < 0 else 1
        # If very close to being on the same half-meridian, then make it so.
        lon12 = lonsign * ang_round(lon12)
        lon12s = ang_round((180 - lon12) - lonsign * lon12s)
        lam12 = math.radians(lon12)
        if lon12 > 90:
            slam12, clam12 = sincosd(lon12s)
            clam12 = -clam12
        else:
            slam12, clam12 = sincosd(lon12)

        # If really close to the equator, treat as on equator.
        lat1 = ang_round(lat_fix(lat1))
        lat2 = ang_round(lat_fix(lat2))
        # Swap points so that point with higher (abs) latitude is point 1.
        # If one latitude is a nan, then it becomes lat1.
        swapp = -1 if abs(lat1) < abs(lat2) or math.isnan(lat2) else 1
        if swapp < 0:
            lonsign *= -1
            lat2, lat1 = lat1, lat2
        # Make lat1 <= -0
        latsign = 1 if math.copysign(1, lat1) < 0 else -1
        lat1 *= latsign
        lat2 *= latsign
        # Now we have
        #
        #     0 <= lon12 <= 180
        #     -90 <= lat1 <= -0
        #     lat1 <= lat2 <= -lat1
        #
        # lonsign, swapp, latsign register the transformation to bring the
        # coordinates to this canonical form.  In all cases, 1 means no change
        # was made.

        sbet1, cbet1 = sincosd(lat1)
        sbet1 *= self._f1
        # Ensure cbet1 = +epsilon at poles; doing the fix on beta means that
        # sig12 will be <= 2*tiny for two points at the same pole.
        sbet1, cbet1 = norm(sbet1, cbet1)
        cbet1 = max(TINY, cbet1)

        sbet2, cbet2 = sincosd(lat2)
        sbet2 *= self._f1
        # Ensure cbet2 = +epsilon at poles
        sbet2, cbet2 = norm(sbet2, cbet2)
        cbet2 = max(TINY, cbet2)

        # If cbet1 < -sbet1, then cbet2 - cbet1 is a sensitive measure of the
        # |bet1| - |bet2|.  Alternatively (cbet1 >= -sbet1), abs(sbet2) + sbet1
        # is a better measure.  Sometimes these quantities vanish and in that
        # case we force bet2 = +/- bet1 exactly.  An example where this is
        # necessary is the inverse problem
        # 48.522876735459 0 -48.52287673545898293 179.599720456223079643
        if cbet1 < -sbet1:
            if cbet2 == cbet1:
                sbet2 = math.copysign(sbet1, sbet2)
        elif abs(sbet2) == -sbet1:
            cbet2 = cbet1

        if self._f >= 0:
            dn1 = math.sqrt(1 + self._ep2 * sq(sbet1))
            dn2 = math.sqrt(1 + self._ep2 * sq(sbet2))
        else:
            dn1 = math.sqrt(1 - self._e2 * sq(cbet1)) / self._f1
            dn2 = math.sqrt(1 - self._e2 * sq(cbet2)) / self._f1

        # Initialize for the meridian.
        E = EllipticFunction(-self._ep2)  # pylint: disable=invalid-name

        s12x = m12x = NAN
        salp1 = calp1 = salp2 = calp2 = NAN
        meridian = lat1 == -90 or slam12 == 0

        if meridian:
            # Endpoints are on a single full meridian, so the geodesic might
            # lie on a meridian.
            calp1, salp1 = clam12, slam12  # Head to the target longitude
            calp2, salp2 = 1.0, 0.0  # At the target we're heading north

            # tan(bet) = tan(sig) * cos(alp)
            ssig1, csig1 = sbet1, calp1 * cbet1
            ssig2, csig2 = sbet2, calp2 * cbet2

            # sig12 = sig2 - sig1
            sig12 = math.atan2(
                max(0.0, csig1 * ssig2 - ssig1 * csig2), csig1 * csig2 + ssig1 * ssig2
            )
            s12x, m12x, _, M12, M21 = self._lengths(  # pylint: disable=invalid-name
                E, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2, cbet1, cbet2,
                outmask | self.REDUCEDLENGTH
            )
            # Add the check for sig12 since zero length geodesics might yield
            # m12 < 0.  Test case was
            #
            #    echo 20.001 0 20.001 0 | GeodSolve -i
            #
            # In fact, we will have sig12 > pi/2 for meridional geodesic which
            # is not a shortest path.
            if sig12 < 1 or m12x >= 0:
                if sig12 < 3 * TINY or (sig12 < TOL0 and (s12x < 0 or m12x < 0)):
                    # Prevent negative s12 or m12 for short lines
                    sig12 = m12x = s12x = 0.0
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
                self.logger.debug('Inverse problem solved as meridional')
            else:
                # m12 < 0, i.e., prolate and too close to anti-podal
                meridian = False

        # somg12 > 1 marks that it needs to be calculated
        omg12 = 0.0
        somg12 = 2.0
        comg12 = 0.0
        if (not meridian and
                sbet1 == 0 and  # and sbet2 == 0
                (self._f <= 0 or lon12s >= self._f * 180)):
            # Geodesic runs along equator
            calp1 = calp2 = 0.0
            salp1 = salp2 = 1.0
            s12x = self._a * lam12
            sig12 = omg12 = lam12 / self._f1
            m12x = self._b * math.sin(sig12)
            if outmask & self.GEODESICSCALE:
                M12 = M21 = math.cos(sig12)  # pylint: disable=invalid-name
            a12 = lon12 / self._f1
            self.logger.debug('Inverse problem solved as equatorial')

        elif not meridian:
            # Now point1 and point2 belong within a hemisphere bounded by a
            # meridian and geodesic is neither meridional or equatorial.

            # Figure a starting point for Newton's method
            sig12, salp1, calp1, s2, c2, dnm = self._inverse_start(
                E, sbet1, cbet1, dn1, sbet2, cbet2, dn2, lam12, slam12, clam12
            )

            if sig12 >= 0:
                # Short lines (_inverse_start sets salp2, calp2, dnm)
                salp2, calp2 = s2, c2
                s12x = sig12 * self._b * dnm
                m12x = sq(dnm) * self._b * math.sin(sig12 / dnm)
                if outmask & self.GEODESICSCALE:
                    M12 = M21 = math.cos(sig12 / dnm)  # pylint: disable=invalid-name
                a12 = math.degrees(sig12)
                omg12 = lam12 / (self._f1 * dnm)
                self.logger.debug('Inverse problem solved as a short line')
            else:
                # Newton's method.  This is a straightforward solution of
                # f(alp1) = lambda12(alp1) - lam12 = 0 with one wrinkle.  f(alp)
                # has exactly one root in the interval (0, pi) and its derivative
                # is positive at the root.  Thus f(alp) is positive for alp >
                # alp1 and negative for alp < alp1.  During the course of the
                # iteration, a range (alp1a, alp1b) is maintained which brackets
                # the root and with each evaluation of f(alp) the range is shrunk
                # if possible.  Newton's method is restarted whenever the
                # derivative of f is negative (because the new value of alp1 is
                # then further from the solution) or if the new estimate of alp1
                # lies outside (0,pi); in this case, the new starting guess is
                # taken to be (alp1a + alp1b) / 2.
                ssig1 = csig1 = ssig2 = csig2 = domg12 = 0.0
                tripn = tripb = False
                # Bracketing range
                salp1a, calp1a, salp1b, calp1b = TINY, 1.0, TINY, -1.0
                numit = 0
                for numit in range(MAXIT2):
                    (v, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
                     domg12, dv) = self._lambda12(
                        sbet1, cbet1, dn1, sbet2, cbet2, dn2, salp1, calp1,
                        slam12, clam12, E, numit < MAXIT1
                    )
                    # Reversed test to allow escape with NaNs
                    if tripb or not abs(v) >= (8 if tripn else 1) * TOL0:
                        break
                    # Update bracketing values
                    if v > 0 and (numit > MAXIT1 or calp1 / salp1 > calp1b / salp1b):
                        salp1b, calp1b = salp1, calp1
                    elif v < 0 and (numit > MAXIT1 or calp1 / salp1 < calp1a / salp1a):
                        salp1a, calp1a = salp1, calp1
                    if numit < MAXIT1 and dv > 0:
                        dalp1 = -v / dv
                        if abs(dalp1) < math.pi:
                            sdalp1, cdalp1 = math.sin(dalp1), math.cos(dalp1)
                            nsalp1 = salp1 * cdalp1 + calp1 * sdalp1
                            if nsalp1 > 0:
                                calp1 = calp1 * cdalp1 - salp1 * sdalp1
                                salp1 = nsalp1
                                salp1, calp1 = norm(salp1, calp1)
                                # In some regimes we don't get quadratic
                                # convergence because slope -> 0.  So use
                                # convergence conditions based on epsilon
                                # instead of sqrt(epsilon).
                                tripn = abs(v) <= 16 * TOL0
                                continue
                    # Either dv was not positive or updated value was outside
                    # legal range.  Use the midpoint of the bracket as the next
                    # estimate.  This mechanism is not needed for the WGS84
                    # ellipsoid, but it does catch problems with more eccentric
                    # ellipsoids.
                    salp1 = (salp1a + salp1b) / 2
                    calp1 = (calp1a + calp1b) / 2
                    salp1, calp1 = norm(salp1, calp1)
                    tripn = False
                    tripb = (abs(salp1a - salp1) + (calp1a - calp1) < TOLB or
                             abs(salp1 - salp1b) + (calp1 - calp1b) < TOLB)
                else:
                    self._convergence_failure(*orig)

                self.logger.debug('Inverse problem solved by Newton iteration (%d steps)', numit)
                s12x, m12x, _, M12, M21 = self._lengths(  # pylint: disable=invalid-name
                    E, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2, cbet1, cbet2, outmask
                )
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
                if outmask & self.AREA:
                    sdomg12, cdomg12 = math.sin(domg12), math.cos(domg12)
                    somg12 = slam12 * cdomg12 - clam12 * sdomg12
                    comg12 = clam12 * cdomg12 + slam12 * sdomg12

        if outmask & self.DISTANCE:
            s12 = 0.0 + s12x  # Convert -0 to 0

        if outmask & self.REDUCEDLENGTH:
            m12 = 0.0 + m12x  # Convert -0 to 0

        if outmask & self.AREA:
            # From _lambda12: sin(alp1) * cos(bet1) = sin(alp0)
            salp0 = salp1 * cbet1
            calp0 = hypot(calp1, salp1 * sbet1)  # calp0 > 0
            if calp0 != 0 and salp0 != 0:
                # From _lambda12: tan(bet) = tan(sig) * cos(alp)
                ssig1, csig1 = norm(sbet1, calp1 * cbet1)
                ssig2, csig2 = norm(sbet2, calp2 * cbet2)
                k2 = sq(calp0) * self._ep2
                eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
                # Multiplier = a^2 * e^2 * cos(alpha0) * sin(alpha0).
                A4 = sq(self._a) * calp0 * salp0 * self._e2  # pylint: disable=invalid-name
                C4a = self._c4f(eps)  # pylint: disable=invalid-name
                B41 = self._cos_series(ssig1, csig1, C4a, self._nC4)  # pylint: disable=invalid-name
                B42 = self._cos_series(ssig2, csig2, C4a, self._nC4)  # pylint: disable=invalid-name
                S12 = A4 * (B42 - B41)  # pylint: disable=invalid-name
            else:
                # Avoid problems with indeterminate sig1, sig2 on equator
                S12 = 0.0  # pylint: disable=invalid-name

            if not meridian and somg12 > 1:
                somg12, comg12 = math.sin(omg12), math.cos(omg12)

            if (not meridian and
                    # omg12 < 3/4 * pi
                    comg12 > -0.7071 and  # Long difference not too big
                    sbet2 - sbet1 < 1.75):  # Lat difference not too big
                # Use tan(Gamma/2) = tan(omg12/2)
                # * (tan(bet1/2)+tan(bet2/2))/(1+tan(bet1/2)*tan(bet2/2))
                # with tan(x/2) = sin(x)/(1+cos(x))
                domg12 = 1 + comg12
                dbet1 = 1 + cbet1
                dbet2 = 1 + cbet2
                alp12 = 2 * math.atan2(
                    somg12 * (sbet1 * dbet2 + sbet2 * dbet1),
                    domg12 * (sbet1 * sbet2 + dbet1 * dbet2)
                )
            else:
                # alp12 = alp2 - alp1, used in atan2 so no need to normalize
                salp12 = salp2 * calp1 - calp2 * salp1
                calp12 = calp2 * calp1 + salp2 * salp1
                # The right thing appears to happen if alp1 = +/-180 and
                # alp2 = 0, viz salp12 = -0 and alp12 = -180.  However this
                # depends on the sign being attached to 0 correctly.  The
                # following ensures the correct behavior.
                if salp12 == 0 and calp12 < 0:
                    salp12 = TINY * calp1
                    calp12 = -1.0
                alp12 = math.atan2(salp12, calp12)
            S12 += self._c2 * alp12  # pylint: disable=invalid-name
            S12 *= swapp * lonsign * latsign  # pylint: disable=invalid-name
            # Convert -0 to 0
            S12 += 0.0  # pylint: disable=invalid-name

        # Convert calp, salp to azimuth accounting for lonsign, swapp, latsign.
        if swapp < 0:
            salp2, salp1 = salp1, salp2
            calp2, calp1 = calp1, calp2
            if outmask & self.GEODESICSCALE:
                M21, M12 = M12, M21  # pylint: disable=invalid-name

        salp1 *= swapp * lonsign
        calp1 *= swapp * latsign
        salp2 *= swapp * lonsign
        calp2 *= swapp * latsign

        return a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12

    def _gen_inverse_azi(
        self, lat1: float, lon1: float, lat2: float, lon2: float, outmask: int
    ) -> Tuple[float, ...]:
        """
        The inverse problem with azimuths in degrees.

        Returns:
            (a12, s12, azi1, azi2, m12, M12, M21, S12)
        """
        outmask &= self.OUT_MASK
        (a12, s12, salp1, calp1, salp2, calp2,
         m12, M12, M21, S12) = self._gen_inverse(  # pylint: disable=invalid-name
            lat1, lon1, lat2, lon2, outmask
        )
        azi1 = azi2 = NAN
        if outmask & self.AZIMUTH:
            azi1 = atan2d(salp1, calp1)
            azi2 = atan2d(salp2, calp2)
        return a12, s12, azi1, azi2, m12, M12, M21, S12

    gen_inverse = _gen_inverse_azi

    def inverse(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
        outmask: int = GeodesicCapability.STANDARD,
    ) -> Dict[str, Any]:
        """
        Solve the inverse geodesic problem.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            lat2:
                Latitude of point 2, in degrees

            lon2:
                Longitude of point 2, in degrees

            outmask:
                (Default STANDARD) Bitor'ed output flags selecting the
                quantities to compute

        Returns:
            A dict with lat1, lon1, lat2, lon2 and a12, plus any of s12, azi1,
            azi2, m12, M12, M21 and S12 requested by outmask. With LONG_UNROLL,
            lon2 is lon1 plus the longitude difference along the geodesic.
        """
        a12, s12, azi1, azi2, m12, M12, M21, S12 = self._gen_inverse_azi(  # pylint: disable=invalid-name
            lat1, lon1, lat2, lon2, outmask
        )
        outmask &= self.OUT_MASK
        if outmask & self.LONG_UNROLL:
            lon12, e = ang_diff(lon1, lon2)
            lon2 = (lon1 + lon12) + e
        else:
            lon1 = ang_normalize(lon1)
            lon2 = ang_normalize(lon2)

        result = {'lat1': lat_fix(lat1), 'lon1': lon1, 'lat2': lat_fix(lat2), 'lon2': lon2}
        return build_result(
            result, outmask,
            a12=a12, s12=s12, azi1=azi1, azi2=azi2, m12=m12, M12=M12, M21=M21, S12=S12
        )

    # -------------------------------------------------------------------------
    # Direct problem
    # -------------------------------------------------------------------------

    def _gen_direct(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        arcmode: bool,
        s12_a12: float,
        outmask: int,
    ) -> Tuple[float, ...]:
        """
        General version of the direct problem.

        Returns:
            (a12, lat2, lon2, azi2, s12, m12, M12, M21, S12)
        """
        # Automatically supply DISTANCE_IN if necessary
        if not arcmode:
            outmask |= self.DISTANCE_IN
        line = GeodesicLineExact(self, lat1, lon1, azi1, outmask)
        return line._gen_position(arcmode, s12_a12, outmask)  # pylint: disable=protected-access

    gen_direct = _gen_direct

    def direct(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        s12: float,
        outmask: int = GeodesicCapability.STANDARD,
    ) -> Dict[str, Any]:
        """
        Solve the direct geodesic problem where the length of the geodesic is
        specified in terms of distance.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            azi1:
                Azimuth at point 1, in degrees

            s12:
                The distance from point 1 to point 2

            outmask:
                (Default STANDARD) Bitor'ed output flags selecting the
                quantities to compute

        Returns:
            A dict with lat1, lon1, azi1, s12 and a12, plus any of lat2, lon2,
            azi2, m12, M12, M21 and S12 requested by outmask
        """
        a12, lat2, lon2, azi2, s12, m12, M12, M21, S12 = self._gen_direct(  # pylint: disable=invalid-name
            lat1, lon1, azi1, False, s12, outmask
        )
        outmask &= self.OUT_MASK
        result = {
            'lat1': lat_fix(lat1),
            'lon1': lon1 if outmask & self.LONG_UNROLL else ang_normalize(lon1),
            'azi1': ang_normalize(azi1),
            's12': s12,
        }
        return build_result(
            result, outmask,
            a12=a12, lat2=lat2, lon2=lon2, azi2=azi2, m12=m12, M12=M12, M21=M21, S12=S12
        )

    def arc_direct(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        a12: float,
        outmask: int = GeodesicCapability.STANDARD,
    ) -> Dict[str, Any]:
        """
        Solve the direct geodesic problem where the length of the geodesic is
        specified in terms of arc length on the auxiliary sphere.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            azi1:
                Azimuth at point 1, in degrees

            a12:
                The arc length from point 1 to point 2, in degrees

            outmask:
                (Default STANDARD) Bitor'ed output flags selecting the
                quantities to compute

        Returns:
            A dict with lat1, lon1, azi1 and a12, plus any of lat2, lon2, azi2,
            s12, m12, M12, M21 and S12 requested by outmask
        """
        a12, lat2, lon2, azi2, s12, m12, M12, M21, S12 = self._gen_direct(  # pylint: disable=invalid-name
            lat1, lon1, azi1, True, a12, outmask
        )
        outmask &= self.OUT_MASK
        result = {
            'lat1': lat_fix(lat1),
            'lon1': lon1 if outmask & self.LONG_UNROLL else ang_normalize(lon1),
            'azi1': ang_normalize(azi1),
            'a12': a12,
        }
        return build_result(
            result, outmask,
            lat2=lat2, lon2=lon2, azi2=azi2, s12=s12, m12=m12, M12=M12, M21=M21, S12=S12
        )

    # -------------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------------

    def line(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        caps: int = GeodesicCapability.ALL,
    ) -> GeodesicLineExact:
        """
        Set up to compute several points on a single geodesic.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            azi1:
                Azimuth at point 1, in degrees

            caps:
                (Default ALL) Bitor'ed capabilities the line needs to support

        Returns:
            GeodesicLineExact
        """
        return GeodesicLineExact(self, lat1, lon1, azi1, caps)

    def _gen_direct_line(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        arcmode: bool,
        s12_a12: float,
        caps: int,
    ) -> GeodesicLineExact:
        """Line through point 1 with point 3 set by distance or arc length"""
        # Automatically supply DISTANCE_IN if necessary
        if not arcmode:
            caps |= self.DISTANCE_IN
        azi1 = ang_normalize(azi1)
        # Guard against underflow in salp0.  Also -0 is converted to +0.
        salp1, calp1 = sincosd(ang_round(azi1))
        line = GeodesicLineExact(self, lat1, lon1, azi1, caps, salp1, calp1)
        line._gen_set_distance(arcmode, s12_a12)  # pylint: disable=protected-access
        return line

    def direct_line(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        s12: float,
        caps: int = GeodesicCapability.ALL,
    ) -> GeodesicLineExact:
        """
        Define a GeodesicLineExact in terms of the direct geodesic problem
        specified in terms of distance. Point 3 of the line is point 2 of the
        direct problem.
        """
        return self._gen_direct_line(lat1, lon1, azi1, False, s12, caps)

    def arc_direct_line(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        a12: float,
        caps: int = GeodesicCapability.ALL,
    ) -> GeodesicLineExact:
        """
        Define a GeodesicLineExact in terms of the direct geodesic problem
        specified in terms of arc length. Point 3 of the line is point 2 of the
        direct problem.
        """
        return self._gen_direct_line(lat1, lon1, azi1, True, a12, caps)

    def inverse_line(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
        caps: int = GeodesicCapability.ALL,
    ) -> GeodesicLineExact:
        """
        Define a GeodesicLineExact in terms of the inverse geodesic problem.
        The line heads from point 1 towards point 2, which becomes point 3 of
        the line.

        Args:
            lat1:
                Latitude of point 1, in degrees

            lon1:
                Longitude of point 1, in degrees

            lat2:
                Latitude of point 2, in degrees

            lon2:
                Longitude of point 2, in degrees

            caps:
                (Default ALL) Bitor'ed capabilities the line needs to support

        Returns:
            GeodesicLineExact
        """
        a12, _, salp1, calp1, _, _, _, _, _, _ = self._gen_inverse(
            lat1, lon1, lat2, lon2, 0
        )
        azi1 = atan2d(salp1, calp1)
        # Ensure that a12 can be converted to a distance
        if caps & (self.OUT_MASK & self.DISTANCE_IN):
            caps |= self.DISTANCE
        line = GeodesicLineExact(self, lat1, lon1, azi1, caps, salp1, calp1)
        line._gen_set_distance(True, a12)  # pylint: disable=protected-access
        return line
