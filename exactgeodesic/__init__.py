
from exactgeodesic._version import __version__  # noqa: F401
from exactgeodesic.utils.logging import LOGGER
from exactgeodesic.capabilities import GeodesicCapability
from exactgeodesic.coordinates import Coordinate
from exactgeodesic.errors import (
    C4MisalignmentError, ConvergenceError, EllipticParameterError, GeodesicError
)
from exactgeodesic.geodesic import GeodesicExact
from exactgeodesic.geodesicline import GeodesicLineExact

__all__ = [
    'C4MisalignmentError',
    'ConvergenceError',
    'Coordinate',
    'EllipticParameterError',
    'GeodesicCapability',
    'GeodesicError',
    'GeodesicExact',
    'GeodesicLineExact',
    'LOGGER',
]
