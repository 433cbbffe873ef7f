"""
Representation of a specific point on the ellipsoid
"""

__all__ = ['Coordinate']

from typing import Tuple, Union

from exactgeodesic.geomath import ang_normalize


class Coordinate:
    """
    Representation of a geographic position (i.e., a lon/lat pair)

    Args:
        longitude:
            The longitude in degrees; normalized to [-180, 180]

        latitude:
            The latitude in degrees; must lie within [-90, 90]

    Raises:
        ValueError: if the latitude is outside [-90, 90]
    """

    def __init__(
        self,
        longitude: Union[float, int, str],
        latitude: Union[float, int, str],
    ):
        lon, lat = float(longitude), float(latitude)
        if not -90 <= lat <= 90:
            raise ValueError(f'Latitude {lat} is outside [-90, 90]')

        self.longitude = ang_normalize(lon)
        self.latitude = lat

    def __eq__(self, other):
        if not isinstance(other, Coordinate):
            return False

        return (
            self.latitude == other.latitude and
            self.longitude == other.longitude
        )

    def __hash__(self):
        return hash((self.longitude, self.latitude))

    def __repr__(self):
        return f'<Coordinate({self.longitude}, {self.latitude})>'

    @classmethod
    def from_dms(cls, lon: Tuple[int, int, float, str], lat: Tuple[int, int, float, str]):
        """
        Creates a Coordinate from a Degree Minutes Seconds (lon, lat) pair.

        The quadrant value should consist of either 'E'/'W' (longitude) or 'N'/'S' (latitude)

        Args:
            lon:
                Longitude, as a 4-tuple of
                ( <degrees> (float),  <minutes> (float), <seconds> (float), <quadrant> (str))
            lat:
                Latitude, as a 4-tuple of
                ( <degrees> (float),  <minutes> (float), <seconds> (float), <quadrant> (str) )

        Returns:
            Coordinate
        """
        def convert(dms: Tuple[int, int, float, str]):
            mult = -1 if dms[3] in ('S', 'W') else 1
            return mult * (dms[0] + (dms[1] / 60) + (dms[2] / 3600))

        return cls(convert(lon), convert(lat))

    def to_float(self, reverse: bool = False) -> Tuple[float, float]:
        """
        Converts the coordinate to a tuple of floats (longitude, latitude).

        Args:
            reverse: (bool)
                (Default False) If True, reverses the coordinate order to (latitude, longitude)

        Returns:
            Tuple of (longitude, latitude)
        """
        if reverse:
            return self.latitude, self.longitude

        return self.longitude, self.latitude
