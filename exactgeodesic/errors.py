"""Exceptions raised by exactgeodesic"""

__all__ = [
    'C4MisalignmentError', 'ConvergenceError', 'EllipticParameterError', 'GeodesicError'
]


class GeodesicError(ValueError):
    """Base class for errors raised while building or evaluating geodesics"""


class EllipticParameterError(GeodesicError):
    """An elliptic integral parameter lies outside its permitted range"""


class C4MisalignmentError(GeodesicError):
    """The area series table does not match its declared layout"""


class ConvergenceError(GeodesicError):
    """The inverse solver exhausted its iteration budget"""
