"""Symbolic differentiation by structural rewriting."""

from __future__ import annotations

import logging

from .errors import InvalidNodeError
from .expressions import (
    Constant,
    Cosine,
    Expression,
    Number,
    Polynomial,
    Power,
    Product,
    Quotient,
    Sine,
    Sum,
    Symbol,
)
from .marking import mark_constant, strip_constants
from .monomial import expand_polynomial

logger = logging.getLogger(__name__)


def _outer_derivative(node: Expression) -> Expression:
    # Derivative of the outermost function only; callers apply the chain rule.
    match node:
        case Power(base=base, exponent=exponent):
            return Product(Number(exponent), Power(base, exponent - 1.0))
        case Cosine(operand=operand):
            return Product(Number(-1.0), Sine(operand))
        case Sine(operand=operand):
            return Cosine(operand)
        case Number() | Constant():
            return Number(0.0)
        case Symbol():
            return Number(1.0)
    raise InvalidNodeError(
        f"No derivative rule for node type {type(node).__name__!r}",
        node=node,
    )


def _derive(expression: Expression) -> Expression:
    match expression:
        case Number() | Symbol() | Constant():
            return _outer_derivative(expression)
        case Cosine(operand=inner) | Sine(operand=inner) | Power(base=inner):
            return Product(_outer_derivative(expression), _derive(inner))
        case Product(left=left, right=right):
            return Sum(
                Product(left, _derive(right)),
                Product(_derive(left), right),
            )
        case Quotient(numerator=numerator, denominator=denominator):
            return Quotient(
                Sum(
                    Product(_derive(numerator), denominator),
                    Product(Number(-1.0), Product(numerator, _derive(denominator))),
                ),
                Product(denominator, denominator),
            )
        case Sum(left=left, right=right):
            return Sum(_derive(left), _derive(right))
        case Polynomial():
            return _derive(expand_polynomial(expression))
    raise InvalidNodeError(
        f"No derivative rule for node type {type(expression).__name__!r}",
        node=expression,
    )


def derive(expression: Expression) -> Expression:
    """Differentiate ``expression``.

    Every symbol is treated as the variable of differentiation; subtrees
    wrapped in :class:`~polyderive.expressions.Constant` differentiate to zero.
    The result is not simplified.
    """
    logger.debug("Deriving %s", type(expression).__name__)
    return _derive(expression)


def partial_derive(variable: Symbol | str, expression: Expression) -> Expression:
    """Differentiate ``expression`` with respect to ``variable`` only.

    Subtrees that never mention ``variable`` are held constant. The result is
    not simplified but carries no constant markers.
    """
    if isinstance(variable, str):
        variable = Symbol(variable)
    logger.debug("Partial derivative with respect to %s", variable.name)
    return strip_constants(_derive(mark_constant(variable, expression)))


__all__ = ["derive", "partial_derive"]
