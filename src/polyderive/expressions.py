"""Immutable expression tree nodes."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .config import EPSILON
from .errors import ExpressionError, PolynomialError

SYMBOL_PATTERN = re.compile(r"^[a-z]$")


@dataclass(frozen=True)
class Number:
    """Literal scalar."""

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class Symbol:
    """Free variable named by a single lowercase letter."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not SYMBOL_PATTERN.match(self.name):
            raise ExpressionError(
                f"Unsupported symbol name: {self.name!r}",
                expression=self.name,
            )


@dataclass(frozen=True)
class Sum:
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Product:
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Quotient:
    numerator: Expression
    denominator: Expression


@dataclass(frozen=True)
class Power:
    """``base`` raised to a literal real exponent."""

    base: Expression
    exponent: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "exponent", float(self.exponent))


@dataclass(frozen=True)
class Cosine:
    operand: Expression


@dataclass(frozen=True)
class Sine:
    operand: Expression


@dataclass(frozen=True)
class Constant:
    """Marks a subtree that does not depend on the differentiation variable.

    Only produced by :func:`polyderive.marking.mark_constant` and consumed by
    :func:`polyderive.derive.derive`. Every other pass treats ``Constant(x)``
    as ``x``.
    """

    operand: Expression


@dataclass(frozen=True)
class Polynomial:
    """Canonical multivariate polynomial.

    ``terms`` maps canonical monomial keys to coefficients; the empty key is
    the constant term and an empty mapping is zero. Keys must already be
    canonical and coefficients below ``EPSILON`` are dropped. Use
    :func:`polyderive.monomial.new_polynomial` to build one from arbitrary
    monomial text.
    """

    terms: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # monomial imports this module, so the codec is resolved at call time.
        from .monomial import reduce_monomial

        terms: dict[str, float] = {}
        for key, value in self.terms.items():
            if reduce_monomial(key) != key:
                raise PolynomialError(
                    f"Monomial key {key!r} is not canonical",
                    key=key,
                )
            if abs(value) >= EPSILON:
                terms[key] = float(value)
        object.__setattr__(self, "terms", MappingProxyType(terms))

    def __hash__(self) -> int:
        return hash(frozenset(self.terms.items()))

    def __repr__(self) -> str:
        return f"Polynomial({dict(self.terms)!r})"


Expression = (
    Number
    | Symbol
    | Sum
    | Product
    | Quotient
    | Power
    | Cosine
    | Sine
    | Constant
    | Polynomial
)


__all__ = [
    "Constant",
    "Cosine",
    "Expression",
    "Number",
    "Polynomial",
    "Power",
    "Product",
    "Quotient",
    "SYMBOL_PATTERN",
    "Sine",
    "Sum",
    "Symbol",
]
