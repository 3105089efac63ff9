"""Helper functions exposed to generated evaluators."""

from __future__ import annotations

import numpy as np

HELPER_NAME_MAP = {
    "cos": "_pd_cos",
    "sin": "_pd_sin",
    "pow": "_pd_pow",
}


def _maybe_scalar(value: object) -> object:
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return value.item()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _pd_cos(value: object) -> object:
    return _maybe_scalar(np.cos(value))


def _pd_sin(value: object) -> object:
    return _maybe_scalar(np.sin(value))


def _pd_pow(base: object, exponent: float) -> object:
    """Raise ``base`` to ``exponent``, elementwise for arrays.

    Integral exponents on negative bases stay real; fractional exponents on
    negative bases yield ``nan`` rather than complex values.
    """
    with np.errstate(invalid="ignore", divide="ignore"):
        result = np.power(np.asarray(base, dtype=float), exponent)
    return _maybe_scalar(result)


HELPER_FUNCTIONS = {
    "_pd_cos": _pd_cos,
    "_pd_sin": _pd_sin,
    "_pd_pow": _pd_pow,
}

__all__ = [
    "HELPER_FUNCTIONS",
    "HELPER_NAME_MAP",
    "_pd_cos",
    "_pd_pow",
    "_pd_sin",
]
