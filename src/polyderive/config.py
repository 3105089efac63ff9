"""Numeric settings shared by every rewrite pass."""

# Coefficients and literals closer than this to a value compare equal to it.
EPSILON = 1e-10

# Multi-term polynomial bases are expanded up to this integer power.
MAX_POWER_EXPANSION = 16


def almost_equal(a: float, b: float) -> bool:
    return abs(a - b) < EPSILON
