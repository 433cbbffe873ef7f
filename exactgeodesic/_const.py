"""
Constants declarations for exactgeodesic
"""
import math
import sys

# WGS84 Ellipsoid Constants
WGS84_A = 6378137.0  # Major axis (meters)
WGS84_F = 1 / 298.257223563  # Flattening

# Floating point limits
DIGITS = sys.float_info.mant_dig
EPSILON = sys.float_info.epsilon
TINY = math.sqrt(sys.float_info.min)

# Convergence tolerances shared by the engine
TOL0 = EPSILON
TOL1 = 200 * TOL0
TOL2 = math.sqrt(TOL0)
TOLB = TOL0 * TOL2  # bisection termination
XTHRESH = 1000 * TOL2

# Newton iterations before falling back to bisection, and the hard cap
MAXIT1 = 20
MAXIT2 = MAXIT1 + DIGITS + 10

# Order of the area (C4) series
NC4 = 30
