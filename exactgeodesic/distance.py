"""
Coordinate-level geodesic calculations.

Each function solves a single geodesic problem between Coordinates on an
ellipsoid, WGS84 unless another GeodesicExact is passed as `geod`.
"""

__all__ = [
    'geodesic_bearing', 'geodesic_destination', 'geodesic_distance',
    'geodesic_midpoint', 'geodesic_waypoints',
]

from typing import List, Optional

import numpy as np

from exactgeodesic.capabilities import GeodesicCapability
from exactgeodesic.coordinates import Coordinate
from exactgeodesic.geodesic import GeodesicExact

_POSITION_CAPS = (
    GeodesicCapability.LATITUDE | GeodesicCapability.LONGITUDE | GeodesicCapability.DISTANCE_IN
)


def _engine(geod: Optional[GeodesicExact]) -> GeodesicExact:
    return GeodesicExact.WGS84 if geod is None else geod


def geodesic_distance(
    coord1: Coordinate,
    coord2: Coordinate,
    geod: Optional[GeodesicExact] = None,
) -> float:
    """
    Calculate the length of the shortest geodesic between two coordinates.

    Args:
        coord1:
            The first coordinate

        coord2:
            The second coordinate

        geod:
            (Default WGS84) The ellipsoid to measure on

    Returns:
        The distance, in units of the ellipsoid's equatorial radius (meters for
        WGS84)
    """
    res = _engine(geod).inverse(
        coord1.latitude, coord1.longitude,
        coord2.latitude, coord2.longitude,
        GeodesicCapability.DISTANCE
    )
    return res['s12']


def geodesic_destination(
    start: Coordinate,
    bearing_degrees: float,
    distance: float,
    geod: Optional[GeodesicExact] = None,
) -> Coordinate:
    """
    Calculate the coordinate reached by travelling a distance from a start
    point along a geodesic with the given initial bearing.
    """
    res = _engine(geod).direct(
        start.latitude, start.longitude,
        bearing_degrees, distance,
        GeodesicCapability.LATITUDE | GeodesicCapability.LONGITUDE
    )
    return Coordinate(res['lon2'], res['lat2'])


def geodesic_bearing(
    start: Coordinate,
    end: Coordinate,
    geod: Optional[GeodesicExact] = None,
) -> float:
    """
    Calculate the initial bearing of the shortest geodesic from start to end.

    Returns:
        The bearing in degrees clockwise from north, in [0, 360)
    """
    res = _engine(geod).inverse(
        start.latitude, start.longitude,
        end.latitude, end.longitude,
        GeodesicCapability.AZIMUTH
    )

    # Azimuths come back in [-180, 180]; normalize to [0, 360)
    return (res['azi1'] + 360) % 360


def geodesic_midpoint(
    coord1: Coordinate,
    coord2: Coordinate,
    geod: Optional[GeodesicExact] = None,
) -> Coordinate:
    """Find the point halfway along the shortest geodesic between two coordinates"""
    line = _engine(geod).inverse_line(
        coord1.latitude, coord1.longitude,
        coord2.latitude, coord2.longitude,
        _POSITION_CAPS
    )
    res = line.position(line.distance() / 2, _POSITION_CAPS)
    return Coordinate(res['lon2'], res['lat2'])


def geodesic_waypoints(
    coord1: Coordinate,
    coord2: Coordinate,
    n: int,
    geod: Optional[GeodesicExact] = None,
) -> List[Coordinate]:
    """
    Divide the shortest geodesic between two coordinates into steps of equal
    length.

    Args:
        coord1:
            The first coordinate

        coord2:
            The second coordinate

        n:
            The number of steps; n + 1 coordinates are returned, starting with
            coord1 and ending with coord2

        geod:
            (Default WGS84) The ellipsoid to measure on

    Returns:
        List of Coordinates
    """
    if n < 1:
        raise ValueError('Number of steps must be at least 1')

    line = _engine(geod).inverse_line(
        coord1.latitude, coord1.longitude,
        coord2.latitude, coord2.longitude,
        _POSITION_CAPS
    )
    points = line.track(np.linspace(0, line.distance(), n + 1), outmask=_POSITION_CAPS)
    return [
        Coordinate(lon, lat) for lon, lat in zip(points['lon2'], points['lat2'])
    ]
