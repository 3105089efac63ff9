"""Reduce expression trees to a flattened, coefficient-first normal form."""

from __future__ import annotations

import logging

from .config import almost_equal
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

logger = logging.getLogger(__name__)


def _is_number(node: Expression, value: float) -> bool:
    return isinstance(node, Number) and almost_equal(node.value, value)


def _flatten(kind: type[Sum] | type[Product], node: Expression) -> list[Expression]:
    if isinstance(node, kind):
        return _flatten(kind, node.left) + _flatten(kind, node.right)
    return [node]


def _chain(kind: type[Sum] | type[Product], operands: list[Expression]) -> Expression:
    result = operands[-1]
    for operand in reversed(operands[:-1]):
        result = kind(operand, result)
    return result


def _split_numbers(operands: list[Expression]) -> tuple[list[float], list[Expression]]:
    numbers: list[float] = []
    rest: list[Expression] = []
    for operand in operands:
        if isinstance(operand, Number):
            numbers.append(operand.value)
        else:
            rest.append(operand)
    return numbers, rest


def _simplify_sum(left: Expression, right: Expression) -> Expression:
    if _is_number(left, 0.0):
        return right
    if _is_number(right, 0.0):
        return left

    numbers, rest = _split_numbers(_flatten(Sum, left) + _flatten(Sum, right))
    total = sum(numbers)
    if almost_equal(total, 0.0):
        if not rest:
            return Number(0.0)
    else:
        rest.insert(0, Number(total))
    return _chain(Sum, rest)


def _simplify_product(left: Expression, right: Expression) -> Expression:
    if _is_number(left, 0.0) or _is_number(right, 0.0):
        return Number(0.0)
    if _is_number(left, 1.0):
        return right
    if _is_number(right, 1.0):
        return left

    numbers, rest = _split_numbers(_flatten(Product, left) + _flatten(Product, right))
    coefficient = 1.0
    for number in numbers:
        coefficient *= number
    if almost_equal(coefficient, 0.0):
        return Number(0.0)
    if not rest:
        return Number(coefficient)
    if not almost_equal(coefficient, 1.0):
        rest.insert(0, Number(coefficient))

    # Distribute the leading factors over a trailing sum.
    *head, last = rest
    if head and isinstance(last, Sum):
        factor = _chain(Product, head)
        return _simplify(
            Sum(Product(factor, last.left), Product(factor, last.right)),
        )
    return _chain(Product, rest)


def _simplify(expression: Expression) -> Expression:
    match expression:
        case Constant(operand=operand):
            return _simplify(operand)
        case Number() | Symbol() | Polynomial():
            return expression
        case Cosine(operand=operand):
            return Cosine(_simplify(operand))
        case Sine(operand=operand):
            return Sine(_simplify(operand))
        case Power(base=base, exponent=exponent):
            return Power(_simplify(base), exponent)
        case Quotient(numerator=numerator, denominator=denominator):
            return Quotient(_simplify(numerator), _simplify(denominator))
        case Sum(left=left, right=right):
            return _simplify_sum(_simplify(left), _simplify(right))
        case Product(left=left, right=right):
            return _simplify_product(_simplify(left), _simplify(right))
    raise InvalidNodeError(
        f"Unsupported node type {type(expression).__name__!r}",
        node=expression,
    )


def simplify(expression: Expression) -> Expression:
    """Return the normal form of ``expression``.

    Sum and product chains are flattened and rebuilt right-associated with
    their folded numeric term first, identities are removed, and leading
    factors are distributed over a trailing sum. Constant markers are
    stripped. ``simplify`` is idempotent.
    """
    logger.debug("Simplifying %s", type(expression).__name__)
    return _simplify(expression)


__all__ = ["simplify"]
