import logging
import math

import pytest
from pytest import approx

from exactgeodesic import config
from exactgeodesic.elliptic import EllipticFunction
from exactgeodesic.errors import ConvergenceError, GeodesicError
from exactgeodesic.geodesic import GeodesicExact
from exactgeodesic.utils.mixins import LoggingMixin

from tests.functions import angle_diff, assert_all_nan

WGS84 = GeodesicExact.WGS84
G = GeodesicExact

# lat1, lon1, azi1, lat2, lon2, azi2, s12, a12, m12, M12, M21, S12
TESTCASES = [
    [35.60777, -139.44815, 111.098748429560326,
     -11.17491, -69.95921, 129.289270889708762,
     8935244.5604818305, 80.50729714281974, 6273170.2055303837,
     0.16606318447386067, 0.16479116945612937, 12841384694976.432],
    [55.52454, 106.05087, 22.020059880982801,
     77.03196, 197.18234, 109.112041110671519,
     4105086.1713924406, 36.892740690445894, 3828869.3344387607,
     0.80076349608092607, 0.80101006984201008, 61674961290615.615],
]


@pytest.fixture
def policy():
    yield config
    config.set_convergence_policy('ignore')


def test_construction():
    geod = GeodesicExact(6378137, 1 / 298.257223563)
    assert geod.a == 6378137
    assert geod.f == approx(1 / 298.257223563)
    assert geod.b == approx(6356752.314245)
    assert 'GeodesicExact' in repr(geod)

    with pytest.raises(GeodesicError, match='Equatorial radius is not positive'):
        GeodesicExact(0, 0)

    with pytest.raises(GeodesicError, match='Equatorial radius is not positive'):
        GeodesicExact(math.inf, 0)

    with pytest.raises(GeodesicError, match='Polar semi-axis is not positive'):
        GeodesicExact(1, 1)

    with pytest.raises(GeodesicError, match='Polar semi-axis is not positive'):
        GeodesicExact(1, math.nan)


def test_shared_wgs84():
    assert GeodesicExact.WGS84 is GeodesicExact.WGS84
    assert WGS84.a == 6378137
    assert WGS84.f == 1 / 298.257223563


def test_ellipsoid_area():
    # Total area of the WGS84 ellipsoid
    assert WGS84.ellipsoid_area() == approx(510065621724088.5, rel=1e-12)

    sphere = GeodesicExact(6.4e6, 0)
    assert sphere.ellipsoid_area() == approx(4 * math.pi * 6.4e6 ** 2)


@pytest.mark.parametrize('case', TESTCASES)
def test_inverse_reference(case):
    lat1, lon1, azi1, lat2, lon2, azi2, s12, a12, m12, M12, M21, S12 = case
    res = WGS84.inverse(lat1, lon1, lat2, lon2, G.ALL | G.LONG_UNROLL)
    assert res['lon2'] == approx(lon2, abs=1e-13)
    assert res['azi1'] == approx(azi1, abs=1e-10)
    assert res['azi2'] == approx(azi2, abs=1e-10)
    assert res['s12'] == approx(s12, abs=1e-6)
    assert res['a12'] == approx(a12, abs=1e-10)
    assert res['m12'] == approx(m12, abs=1e-6)
    assert res['M12'] == approx(M12, abs=1e-13)
    assert res['M21'] == approx(M21, abs=1e-13)
    assert res['S12'] == approx(S12, abs=1)


@pytest.mark.parametrize('case', TESTCASES)
def test_direct_reference(case):
    lat1, lon1, azi1, lat2, lon2, azi2, s12, a12, m12, M12, M21, S12 = case
    res = WGS84.direct(lat1, lon1, azi1, s12, G.ALL | G.LONG_UNROLL)
    assert res['lat2'] == approx(lat2, abs=1e-10)
    assert res['lon2'] == approx(lon2, abs=1e-10)
    assert res['azi2'] == approx(azi2, abs=1e-10)
    assert res['a12'] == approx(a12, abs=1e-10)
    assert res['m12'] == approx(m12, abs=1e-6)
    assert res['M12'] == approx(M12, abs=1e-13)
    assert res['M21'] == approx(M21, abs=1e-13)
    assert res['S12'] == approx(S12, abs=1)


@pytest.mark.parametrize('case', TESTCASES)
def test_arc_direct_reference(case):
    lat1, lon1, azi1, lat2, lon2, azi2, s12, a12, m12, M12, M21, S12 = case
    res = WGS84.arc_direct(lat1, lon1, azi1, a12, G.ALL | G.LONG_UNROLL)
    assert res['lat2'] == approx(lat2, abs=1e-10)
    assert res['lon2'] == approx(lon2, abs=1e-10)
    assert res['azi2'] == approx(azi2, abs=1e-10)
    assert res['s12'] == approx(s12, abs=1e-6)
    assert res['m12'] == approx(m12, abs=1e-6)
    assert res['S12'] == approx(S12, abs=1)


def test_new_york_to_singapore():
    res = WGS84.inverse(40.6, -73.8, 1.4, 104.0)
    assert 15.3e6 < res['s12'] < 15.4e6
    # Northbound over the pole, arriving heading south
    assert 0 < res['azi1'] < 10
    assert 170 < res['azi2'] < 180

    back = WGS84.direct(40.6, -73.8, res['azi1'], res['s12'])
    assert back['lat2'] == approx(1.4, abs=1e-12)
    assert back['lon2'] == approx(104.0, abs=1e-12)
    assert back['azi2'] == approx(res['azi2'], abs=1e-12)


def test_inverse_classic():
    res = WGS84.inverse(40.6, -73.8, 49.01666667, 2.55)
    assert res['azi1'] == approx(53.47022, abs=0.5e-5)
    assert res['azi2'] == approx(111.59367, abs=0.5e-5)
    assert res['s12'] == approx(5853226, abs=0.5)

    res = WGS84.inverse(-(41 + 19 / 60), 174 + 49 / 60, 40 + 58 / 60, -(5 + 30 / 60))
    assert res['azi1'] == approx(160.39137649664, abs=1e-9)
    assert res['azi2'] == approx(19.50042925176, abs=1e-9)
    assert res['s12'] == approx(19960543.857179, abs=1e-5)

    res = WGS84.inverse(27.2, 0.0, -27.1, 179.5)
    assert res['azi1'] == approx(45.82468716758, abs=1e-9)
    assert res['azi2'] == approx(134.22776532670, abs=1e-9)
    assert res['s12'] == approx(19974354.765767, abs=1e-5)


def test_direct_classic():
    res = WGS84.direct(40.63972222, -73.77888889, 53.5, 5850e3)
    assert res['lat2'] == approx(49.01467, abs=0.5e-5)
    assert res['lon2'] == approx(2.56106, abs=0.5e-5)
    assert res['azi2'] == approx(111.62947, abs=0.5e-5)


@pytest.mark.parametrize('lat1,lat2,lon2,s12', [
    (88.202499451857, -88.202499451857, 179.981022032992859592, 20003898.214),
    (89.262080389218, -89.262080389218, 179.992207982775375662, 20003925.854),
    (89.333123580033, -89.333123580032997687, 179.99295812360148422, 20003926.881),
    (56.320923501171, -56.320923501171, 179.664747671772880215, 19993558.287),
    (52.784459512564, -52.784459512563990912, 179.634407464943777557, 19991596.095),
    (48.522876735459, -48.52287673545898293, 179.599720456223079643, 19989144.774),
])
def test_inverse_near_antipodal(lat1, lat2, lon2, s12):
    res = WGS84.inverse(lat1, 0, lat2, lon2)
    assert res['s12'] == approx(s12, abs=1e-2)


def test_inverse_symmetric_latitudes(policy):
    policy.set_convergence_policy('raise')
    res = WGS84.inverse(
        48.522876735459, 0, -48.52287673545898293, 179.599720456223079643, G.ALL
    )
    for key in ('azi1', 'azi2', 's12', 'a12', 'm12', 'M12', 'M21', 'S12'):
        assert math.isfinite(res[key])
    assert res['s12'] > 19_000_000


def test_inverse_short_line():
    res = WGS84.inverse(36.493349428792, 0, 36.49334942879201, .0000008)
    assert res['s12'] == approx(0.072, abs=0.5e-3)


def test_inverse_coincident_points():
    res = WGS84.inverse(20.001, 0, 20.001, 0, G.ALL)
    assert res['s12'] == 0
    assert res['a12'] == 0
    assert res['m12'] == 0
    assert res['M12'] == approx(1)
    assert res['M21'] == approx(1)

    res = WGS84.inverse(90, 0, 90, 180, G.ALL)
    assert res['a12'] == approx(0, abs=5e-14)
    assert res['s12'] == approx(0, abs=5e-9)
    assert res['azi1'] == approx(0, abs=5e-14)
    assert res['azi2'] == approx(180, abs=5e-14)
    assert res['m12'] == approx(0, abs=5e-9)
    assert res['M12'] == approx(1, abs=5e-15)
    assert res['M21'] == approx(1, abs=5e-15)


def test_inverse_equatorial():
    res = WGS84.inverse(0, 0, 0, 90, G.GEODESICSCALE)
    assert res['M12'] == approx(-0.00528427534, abs=0.5e-10)
    assert res['M21'] == approx(-0.00528427534, abs=0.5e-10)

    res = WGS84.inverse(0, 0, 0, 30)
    assert res['azi1'] == 90
    assert res['azi2'] == 90
    assert res['s12'] == approx(WGS84.a * math.radians(30), rel=1e-15)

    res = WGS84.inverse(0, 0, 0, -30)
    assert res['azi1'] == -90
    assert res['azi2'] == -90


@pytest.mark.parametrize('a,f,lat2,lon2,azi1,azi2,s12', [
    (6378137, 1 / 298.257223563, 0, 179, 90, 90, 19926189),
    (6378137, 1 / 298.257223563, 0, 179.5, 55.96650, 124.03350, 19980862),
    (6378137, 1 / 298.257223563, 0, 180, 0, 180, 20003931),
    (6378137, 1 / 298.257223563, 1, 180, 0, 180, 19893357),
    (6.4e6, 0, 0, 179, 90, 90, 19994492),
    (6.4e6, 0, 0, 180, 0, 180, 20106193),
    (6.4e6, 0, 1, 180, 0, 180, 19994492),
    (6.4e6, -1 / 300, 0, 179, 90, 90, 19994492),
    (6.4e6, -1 / 300, 0, 180, 90, 90, 20106193),
    (6.4e6, -1 / 300, 0.5, 180, 33.02493, 146.97364, 20082617),
    (6.4e6, -1 / 300, 1, 180, 0, 180, 20027270),
])
def test_inverse_equatorial_antipodes(a, f, lat2, lon2, azi1, azi2, s12):
    res = GeodesicExact(a, f).inverse(0, 0, lat2, lon2)
    assert res['azi1'] == approx(azi1, abs=0.5e-5)
    assert res['azi2'] == approx(azi2, abs=0.5e-5)
    assert res['s12'] == approx(s12, abs=0.5)


def test_inverse_prolate():
    geod = GeodesicExact(6.4e6, -1 / 150)
    res = geod.inverse(0.07476, 0, -0.07476, 180)
    assert res['azi1'] == approx(90.00078, abs=0.5e-5)
    assert res['azi2'] == approx(90.00078, abs=0.5e-5)
    assert res['s12'] == approx(20106193, abs=0.5)

    res = geod.inverse(0.1, 0, -0.1, 180)
    assert res['azi1'] == approx(90.00105, abs=0.5e-5)
    assert res['azi2'] == approx(90.00105, abs=0.5e-5)
    assert res['s12'] == approx(20106193, abs=0.5)

    # Near-antipodal on the prolate ellipsoid; check against the direct problem
    res = geod.inverse(0, 0, 0.5, 179.5)
    back = geod.direct(0, 0, res['azi1'], res['s12'])
    assert back['lat2'] == approx(0.5, abs=1e-12)
    assert back['lon2'] == approx(179.5, abs=1e-12)


def test_inverse_extreme_prolate():
    geod = GeodesicExact(89.8, -1.83)
    res = geod.inverse(0, 0, -10, 160)
    assert res['azi1'] == approx(120.27, abs=1e-2)
    assert res['azi2'] == approx(105.15, abs=1e-2)
    assert res['s12'] == approx(266.7, abs=1e-1)


def test_inverse_very_oblate():
    # Beyond the reach of series expansions in the flattening
    geod = GeodesicExact(6.4e6, 0.5)
    res = geod.inverse(-30, 0, 40, 150, G.ALL)
    back = geod.direct(-30, 0, res['azi1'], res['s12'], G.ALL)
    assert back['lat2'] == approx(40, abs=1e-10)
    assert back['lon2'] == approx(150, abs=1e-10)
    assert back['azi2'] == approx(res['azi2'], abs=1e-10)
    assert back['m12'] == approx(res['m12'], abs=1e-5)
    assert back['S12'] == approx(res['S12'], abs=1e3)


def test_inverse_nan():
    res = WGS84.inverse(0, 0, 1, math.nan)
    assert_all_nan(res['azi1'], res['azi2'], res['s12'])

    res = WGS84.inverse(math.nan, 0, 0, 90)
    assert_all_nan(res['azi1'], res['azi2'], res['s12'])

    res = WGS84.inverse(91, 0, 0, 90)
    assert_all_nan(res['lat1'], res['azi1'], res['azi2'], res['s12'])


def test_inverse_long_unroll():
    res = WGS84.inverse(0, 539, 0, 181)
    assert res['lon1'] == approx(179, abs=1e-10)
    assert res['lon2'] == approx(-179, abs=1e-10)
    assert res['s12'] == approx(222639, abs=0.5)

    res = WGS84.inverse(0, 539, 0, 181, G.STANDARD | G.LONG_UNROLL)
    assert res['lon1'] == approx(539, abs=1e-10)
    assert res['lon2'] == approx(541, abs=1e-10)
    assert res['s12'] == approx(222639, abs=0.5)


def test_inverse_outmask():
    res = WGS84.inverse(10, 20, 30, 40, G.DISTANCE)
    assert set(res) == {'lat1', 'lon1', 'lat2', 'lon2', 'a12', 's12'}

    res = WGS84.inverse(10, 20, 30, 40, G.ALL)
    assert {'azi1', 'azi2', 's12', 'm12', 'M12', 'M21', 'S12'} <= set(res)


def test_gen_inverse_tuples():
    a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12 = WGS84._gen_inverse(
        10, 20, 30, 40, G.ALL
    )
    assert salp1 ** 2 + calp1 ** 2 == approx(1)
    assert salp2 ** 2 + calp2 ** 2 == approx(1)

    a12b, s12b, azi1, azi2, m12b, _, _, S12b = WGS84.gen_inverse(10, 20, 30, 40, G.ALL)
    assert (a12b, s12b, m12b, S12b) == (a12, s12, m12, S12)
    assert azi1 == approx(math.degrees(math.atan2(salp1, calp1)))
    assert azi2 == approx(math.degrees(math.atan2(salp2, calp2)))

    # Quantities left out of the mask come back as NaN
    _, s12, _, _, _, _, m12, M12, M21, S12 = WGS84._gen_inverse(10, 20, 30, 40, G.AZIMUTH)
    assert_all_nan(s12, m12, M12, M21, S12)


def test_direct_from_pole():
    res = WGS84.direct(90, 0, 0, 1000)
    assert res['lat2'] == approx(89.9910, abs=1e-4)
    assert abs(res['lon2']) == approx(180)
    assert res['azi2'] == approx(180)

    res = WGS84.direct(90, 10, 180, -1e6)
    assert res['lat2'] == approx(81.04623, abs=0.5e-5)
    assert res['lon2'] == approx(-170, abs=0.5e-5)
    assert angle_diff(res['azi2'], 0) == approx(0, abs=0.5e-5)


def test_direct_to_pole():
    res = WGS84.direct(0.01777745589997, 30, 0, 10e6)
    assert res['lat2'] == approx(90, abs=0.5e-5)
    if res['lon2'] < 0:
        assert res['lon2'] == approx(-150, abs=0.5e-5)
        assert abs(res['azi2']) == approx(180, abs=0.5e-5)
    else:
        assert res['lon2'] == approx(30, abs=0.5e-5)
        assert res['azi2'] == approx(0, abs=0.5e-5)


def test_direct_long_unroll():
    res = WGS84.direct(40, -75, -10, 2e7, G.STANDARD | G.LONG_UNROLL)
    assert res['lat2'] == approx(-39, abs=1)
    assert res['lon2'] == approx(-254, abs=1)
    assert res['azi2'] == approx(-170, abs=1)

    res = WGS84.direct(40, -75, -10, 2e7)
    assert res['lon2'] == approx(105, abs=1)


def test_direct_tiny_azimuth():
    res = WGS84.direct(45, 0, -0.000000000000000003, 1e7, G.STANDARD | G.LONG_UNROLL)
    assert res['lat2'] == approx(45.30632, abs=0.5e-5)
    assert res['lon2'] == approx(-180, abs=0.5e-5)
    assert abs(res['azi2']) == approx(180, abs=0.5e-5)


def test_arc_direct_general_ellipsoid():
    geod = GeodesicExact(6.4e6, 0.1)
    res = geod.direct(1, 2, 10, 5e6)
    assert res['a12'] == approx(48.55570690, abs=0.5e-8)


@pytest.mark.parametrize('lat1,azi1,s12', [
    (math.nan, 30, 1e6),
    (40, math.nan, 1e6),
    (40, 30, math.nan),
    (91, 30, 1e6),
    (40, 30, math.inf),
    (40, 30, -math.inf),
])
def test_direct_nan(lat1, azi1, s12):
    res = WGS84.direct(lat1, 10, azi1, s12, G.ALL)
    assert_all_nan(
        res['lat2'], res['lon2'], res['azi2'], res['a12'],
        res['m12'], res['M12'], res['M21'], res['S12']
    )

    res = WGS84.direct(lat1, 10, azi1, s12, G.STANDARD | G.LONG_UNROLL)
    assert_all_nan(res['lat2'], res['lon2'], res['azi2'], res['a12'])


@pytest.mark.parametrize('lat1,azi1,a12', [
    (math.nan, 30, 10),
    (40, math.nan, 10),
    (40, 30, math.nan),
    (91, 30, 10),
    (40, 30, math.inf),
    (40, 30, -math.inf),
])
def test_arc_direct_nan(lat1, azi1, a12):
    res = WGS84.arc_direct(lat1, 10, azi1, a12, G.ALL)
    assert_all_nan(
        res['lat2'], res['lon2'], res['azi2'], res['s12'],
        res['m12'], res['M12'], res['M21'], res['S12']
    )

    res = WGS84.arc_direct(lat1, 10, azi1, a12, G.STANDARD | G.DISTANCE | G.LONG_UNROLL)
    assert_all_nan(res['lat2'], res['lon2'], res['azi2'], res['s12'])


def test_area_sphere():
    sphere = GeodesicExact(6.4e6, 0)
    res = sphere.inverse(1, 2, 3, 4, G.AREA)
    assert res['S12'] == approx(49911046115.0, abs=0.5)


def test_area_prolate():
    geod = GeodesicExact(6.4e6, -1 / 150)
    res = geod.direct(1, 2, 3, 4, G.AREA)
    assert res['S12'] == approx(23700, abs=0.5)


def test_area_polar_cap():
    # Square around the north pole with vertices at latitude 89
    res = WGS84.inverse(89, 0, 89, 90, G.DISTANCE | G.AREA)
    assert 4 * res['s12'] == approx(631819.8745, abs=1e-4)
    assert 4 * res['S12'] == approx(WGS84.ellipsoid_area() / 2 - 24952305678.0, abs=4)


def test_area_antisymmetric_and_additive():
    res = WGS84.inverse(-30, 10, 40, 80, G.AREA | G.DISTANCE | G.AZIMUTH)
    back = WGS84.inverse(40, 80, -30, 10, G.AREA)
    assert back['S12'] == approx(-res['S12'], abs=1e-2)

    first = WGS84.direct(-30, 10, res['azi1'], res['s12'] / 3, G.ALL)
    second = WGS84.direct(first['lat2'], first['lon2'], first['azi2'], 2 * res['s12'] / 3, G.ALL)
    assert first['S12'] + second['S12'] == approx(res['S12'], abs=1e-1)


@pytest.mark.parametrize('lat1,lon1,azi1,s12', [
    (0, 0, 30, 1e6),
    (-45, 100, 135, 5e6),
    (60, -20, -80, 1.5e7),
    (12.5, 3.1, 0.5, 19e6),
    (-89.9, 0, 45, 3e6),
])
def test_round_trip(lat1, lon1, azi1, s12):
    fwd = WGS84.direct(lat1, lon1, azi1, s12, G.ALL)
    inv = WGS84.inverse(lat1, lon1, fwd['lat2'], fwd['lon2'], G.ALL)
    assert inv['s12'] == approx(s12, abs=15e-9)
    assert angle_diff(inv['azi1'], azi1) == approx(0, abs=1e-10)
    assert angle_diff(inv['azi2'], fwd['azi2']) == approx(0, abs=1e-10)
    assert inv['m12'] == approx(fwd['m12'], abs=1e-7)


@pytest.mark.parametrize('p1,p2', [
    ((10, 20), (30, 40)),
    ((-60, 0), (50, 170)),
    ((0, 0), (0.5, 179.7)),
])
def test_symmetry(p1, p2):
    fwd = WGS84.inverse(*p1, *p2, G.ALL)
    rev = WGS84.inverse(*p2, *p1, G.ALL)
    assert rev['s12'] == approx(fwd['s12'], abs=1e-8)
    assert rev['m12'] == approx(fwd['m12'], abs=1e-7)
    assert rev['M12'] == approx(fwd['M21'], abs=1e-14)
    assert angle_diff(rev['azi1'], fwd['azi2'] + 180) == approx(0, abs=1e-10)
    assert angle_diff(rev['azi2'], fwd['azi1'] + 180) == approx(0, abs=1e-10)


def test_meridional():
    res = WGS84.inverse(10, 30, 50, 30)
    assert res['azi1'] == 0
    assert res['azi2'] == 0

    res = WGS84.inverse(50, 30, 10, 30)
    assert abs(res['azi1']) == 180
    assert abs(res['azi2']) == 180

    # Meridian arc length from the elliptic integral of the second kind
    ell = EllipticFunction(-WGS84._ep2)  # pylint: disable=protected-access

    def meridian(lat):
        bet = math.atan2((1 - WGS84.f) * math.sin(math.radians(lat)), math.cos(math.radians(lat)))
        sn, cn = math.sin(bet), math.cos(bet)
        return ell.E_incomplete(sn, cn, ell.delta(sn, cn))

    assert res['s12'] == approx(WGS84.b * abs(meridian(50) - meridian(10)), rel=1e-14)


def test_clairaut():
    line = WGS84.line(20, 30, 50)
    sbet1 = (1 - WGS84.f) * math.sin(math.radians(20))
    cbet1 = math.cos(math.radians(20))
    const = math.sin(math.radians(50)) * cbet1 / math.hypot(sbet1, cbet1)
    for s in (1e5, 3e6, 1.2e7, 3.5e7):
        pos = line.position(s)
        lat = math.radians(pos['lat2'])
        sbet = (1 - WGS84.f) * math.sin(lat)
        cbet = math.cos(lat)
        assert math.sin(math.radians(pos['azi2'])) * cbet / math.hypot(sbet, cbet) == approx(
            const, abs=1e-13
        )


def test_convergence_policy(policy, monkeypatch, caplog):
    monkeypatch.setattr('exactgeodesic.geodesic.MAXIT2', 1)
    args = (52.784459512564, 0, -52.784459512563990912, 179.634407464943777557)

    # Default policy returns the best estimate
    res = WGS84.inverse(*args)
    assert math.isfinite(res['s12'])

    policy.set_convergence_policy('raise')
    with pytest.raises(ConvergenceError, match='Convergence failure'):
        WGS84.inverse(*args)

    LoggingMixin.WARNED_ONCE.clear()
    policy.set_convergence_policy('warn')
    WGS84.inverse(*args)
    assert 'iteration limit' in caplog.text


def test_debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger='exactgeodesic')
    WGS84.inverse(10, 20, 30, 40)
    assert 'Newton iteration' in caplog.text

    WGS84.inverse(10, 20, 50, 20)
    assert 'meridional' in caplog.text
