"""Canonical monomial keys and polynomial term arithmetic.

A monomial key is a product of single-letter symbols such as ``xxy^2z``.
Reduced keys list every symbol once, sorted, with exponent ``1`` written bare
and any other exponent as ``symbol^n``: ``xxy^2z`` reduces to ``x^2y^2z``.
"""

from __future__ import annotations

import logging
import re
import string
from collections.abc import Mapping

from .config import EPSILON
from .errors import MonomialError, PolynomialError
from .expressions import (
    Expression,
    Number,
    Polynomial,
    Power,
    Product,
    Sum,
    Symbol,
)

logger = logging.getLogger(__name__)

EXPLICIT_POWER_PATTERN = re.compile(r"([a-z])\^([0-9\-]+)")


def parse_monomial(key: str) -> dict[str, int]:
    """Return the accumulated exponent of every symbol in ``key``.

    Symbols whose exponents cancel are kept with exponent ``0``.

    Raises
    ------
    MonomialError
        If an explicit exponent is not an integer or a character outside an
        exponent group is not a lowercase letter.

    """
    exponents: dict[str, int] = {}
    for symbol, raw in EXPLICIT_POWER_PATTERN.findall(key):
        try:
            power = int(raw, 10)
        except ValueError as exc:
            raise MonomialError(
                f"Invalid exponent {raw!r} in monomial {key!r}",
                monomial=key,
            ) from exc
        exponents[symbol] = exponents.get(symbol, 0) + power
    for char in EXPLICIT_POWER_PATTERN.sub("", key):
        if char not in string.ascii_lowercase:
            raise MonomialError(
                f"Unexpected character {char!r} in monomial {key!r}",
                monomial=key,
            )
        exponents[char] = exponents.get(char, 0) + 1
    return exponents


def format_monomial(exponents: Mapping[str, int]) -> str:
    parts: list[str] = []
    for symbol in sorted(exponents):
        power = exponents[symbol]
        if power == 0:
            continue
        parts.append(symbol if power == 1 else f"{symbol}^{power}")
    return "".join(parts)


def reduce_monomial(key: str) -> str:
    """Return the canonical form of a monomial key."""
    if not key:
        return ""
    return format_monomial(parse_monomial(key))


def _accumulate(terms: dict[str, float], key: str, value: float) -> None:
    total = terms.get(key, 0.0) + value
    if abs(total) < EPSILON:
        terms.pop(key, None)
    else:
        terms[key] = total


def new_polynomial(raw_terms: Mapping[str, float]) -> Polynomial:
    """Build a polynomial from arbitrary monomial keys.

    Every key is reduced to canonical form; two keys that reduce to the same
    canonical key are rejected. Coefficients below ``EPSILON`` are dropped.
    """
    terms: dict[str, float] = {}
    for raw_key, value in raw_terms.items():
        key = reduce_monomial(raw_key)
        if key in terms:
            raise PolynomialError(
                f"Monomial {raw_key!r} duplicates canonical term {key!r}",
                key=key,
            )
        terms[key] = float(value)
    return Polynomial(
        {key: value for key, value in terms.items() if abs(value) >= EPSILON},
    )


def add_polynomials(p: Polynomial, q: Polynomial) -> Polynomial:
    terms: dict[str, float] = {}
    for operand in (p, q):
        for key, value in operand.terms.items():
            _accumulate(terms, key, value)
    return Polynomial(terms)


def multiply_polynomials(p: Polynomial, q: Polynomial) -> Polynomial:
    terms: dict[str, float] = {}
    for left_key, left_value in p.terms.items():
        for right_key, right_value in q.terms.items():
            key = reduce_monomial(left_key + right_key)
            _accumulate(terms, key, left_value * right_value)
    return Polynomial(terms)


def power_polynomial(p: Polynomial, exponent: int) -> Polynomial:
    """Raise ``p`` to an integer power.

    Non-negative powers expand by repeated multiplication. Negative powers are
    only defined for a single non-zero term, whose symbol exponents are scaled.
    """
    if exponent >= 0:
        result = Polynomial({"": 1.0})
        for _ in range(exponent):
            result = multiply_polynomials(result, p)
        return result
    if len(p.terms) != 1:
        raise PolynomialError(
            "Negative powers are only defined for single-term polynomials",
        )
    ((key, value),) = p.terms.items()
    scaled = {
        symbol: power * exponent for symbol, power in parse_monomial(key).items()
    }
    terms: dict[str, float] = {}
    _accumulate(terms, format_monomial(scaled), value**exponent)
    return Polynomial(terms)


def _chain_product(factors: list[Expression]) -> Expression:
    result = factors[-1]
    for factor in reversed(factors[:-1]):
        result = Product(factor, result)
    return result


def expand_polynomial(p: Polynomial) -> Expression:
    """Rewrite ``p`` as a structural sum of products, keys in sorted order."""
    summands: list[Expression] = []
    for key in sorted(p.terms):
        value = p.terms[key]
        factors: list[Expression] = []
        for symbol, power in sorted(parse_monomial(key).items()):
            if power == 0:
                continue
            base = Symbol(symbol)
            factors.append(base if power == 1 else Power(base, power))
        if not factors or value != 1.0:
            factors.insert(0, Number(value))
        summands.append(_chain_product(factors))
    if not summands:
        return Number(0.0)
    result = summands[-1]
    for summand in reversed(summands[:-1]):
        result = Sum(summand, result)
    logger.debug("Expanded polynomial with %d terms", len(summands))
    return result


__all__ = [
    "EXPLICIT_POWER_PATTERN",
    "add_polynomials",
    "expand_polynomial",
    "format_monomial",
    "multiply_polynomials",
    "new_polynomial",
    "parse_monomial",
    "power_polynomial",
    "reduce_monomial",
]
