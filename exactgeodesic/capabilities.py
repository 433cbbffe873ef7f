"""
Bit masks selecting which quantities the geodesic solvers compute.

The low bits (CAP_*) name the series a GeodesicLineExact has to prepare; each
output flag carries the capability bits it depends on, so a line built with an
output flag is always able to produce it.
"""

__all__ = ['GeodesicCapability']


class GeodesicCapability:  # pylint: disable=too-few-public-methods
    """Capability and output flags shared by GeodesicExact and GeodesicLineExact"""

    CAP_NONE = 0
    CAP_E = 1 << 0
    # Skip 1 << 1 for compatibility with the series method's CAP_C2
    CAP_D = 1 << 2
    CAP_H = 1 << 3
    CAP_C4 = 1 << 4
    CAP_ALL = 0x1F
    CAP_MASK = CAP_ALL
    OUT_ALL = 0x7F80
    # Includes LONG_UNROLL
    OUT_MASK = 0xFF80

    EMPTY = 0
    LATITUDE = 1 << 7 | CAP_NONE
    LONGITUDE = 1 << 8 | CAP_H
    AZIMUTH = 1 << 9 | CAP_NONE
    DISTANCE = 1 << 10 | CAP_E
    STANDARD = LATITUDE | LONGITUDE | AZIMUTH | DISTANCE
    DISTANCE_IN = 1 << 11 | CAP_E
    REDUCEDLENGTH = 1 << 12 | CAP_D
    GEODESICSCALE = 1 << 13 | CAP_D
    AREA = 1 << 14 | CAP_C4
    LONG_UNROLL = 1 << 15
    ALL = OUT_ALL | CAP_ALL
