"""Generic pre-order/post-order rewriting of expression trees."""

from __future__ import annotations

from collections.abc import Callable

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

Before = Callable[[Expression], tuple[Expression, bool]]
After = Callable[[Expression], Expression]


def traverse(before: Before, after: After, node: Expression) -> Expression:
    """Rewrite ``node`` bottom-up, gated by a pre-order hook.

    ``before`` returns a possibly rewritten node and whether to descend into
    it. When it declines, its node is the result for the whole subtree and
    ``after`` is not called. Otherwise every child of the rewritten node is
    replaced by its own traversal and ``after`` receives the rebuilt node.
    """
    node, descend = before(node)
    if not descend:
        return node

    def visit(child: Expression) -> Expression:
        return traverse(before, after, child)

    match node:
        case Number() | Symbol() | Polynomial():
            rebuilt = node
        case Cosine(operand=operand):
            rebuilt = Cosine(visit(operand))
        case Sine(operand=operand):
            rebuilt = Sine(visit(operand))
        case Constant(operand=operand):
            rebuilt = Constant(visit(operand))
        case Power(base=base, exponent=exponent):
            rebuilt = Power(visit(base), exponent)
        case Sum(left=left, right=right):
            rebuilt = Sum(visit(left), visit(right))
        case Product(left=left, right=right):
            rebuilt = Product(visit(left), visit(right))
        case Quotient(numerator=numerator, denominator=denominator):
            rebuilt = Quotient(visit(numerator), visit(denominator))
        case _:
            raise InvalidNodeError(
                f"Unsupported node type {type(node).__name__!r}",
                node=node,
            )
    return after(rebuilt)


class ExpressionTransformer:
    """Base class for passes built on :func:`traverse`.

    Subclasses override :meth:`before` and/or :meth:`after`; the defaults
    always descend and return nodes unchanged.
    """

    def before(self, node: Expression) -> tuple[Expression, bool]:
        return node, True

    def after(self, node: Expression) -> Expression:
        return node

    def transform(self, node: Expression) -> Expression:
        return traverse(self.before, self.after, node)


__all__ = ["After", "Before", "ExpressionTransformer", "traverse"]
