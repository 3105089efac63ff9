"""Fold polynomial-shaped subtrees into :class:`Polynomial` values."""

from __future__ import annotations

import logging

from .config import MAX_POWER_EXPANSION
from .expressions import (
    Constant,
    Expression,
    Number,
    Polynomial,
    Power,
    Product,
    Sum,
    Symbol,
)
from .monomial import (
    add_polynomials,
    multiply_polynomials,
    new_polynomial,
    power_polynomial,
)
from .traversal import ExpressionTransformer

logger = logging.getLogger(__name__)


def _foldable_power(base: Polynomial, exponent: float) -> bool:
    if not exponent.is_integer():
        return False
    if len(base.terms) == 1:
        return True
    return 0 <= exponent <= MAX_POWER_EXPANSION


class PolynomialCombiner(ExpressionTransformer):
    """Replace sums and products of polynomials by a single polynomial."""

    def after(self, node: Expression) -> Expression:
        match node:
            case Symbol(name=name):
                return Polynomial({name: 1.0})
            case Number(value=value):
                return new_polynomial({"": value})
            case Constant(operand=operand):
                return operand
            case Sum(left=Polynomial() as left, right=Polynomial() as right):
                return add_polynomials(left, right)
            case Product(left=Polynomial() as left, right=Polynomial() as right):
                return multiply_polynomials(left, right)
            case Power(base=Polynomial() as base, exponent=exponent) if _foldable_power(
                base, exponent,
            ):
                return power_polynomial(base, int(exponent))
        return node


def to_polynomial(expression: Expression) -> Expression:
    """Fold every polynomial-shaped subtree of ``expression``.

    Intended for the output of :func:`~polyderive.simplify.simplify`, so that
    mathematically equal derivatives compare equal structurally. Cosine, Sine
    and Quotient nodes stay structural with their operands folded.
    """
    logger.debug("Folding %s into polynomial form", type(expression).__name__)
    return PolynomialCombiner().transform(expression)


__all__ = ["PolynomialCombiner", "to_polynomial"]
