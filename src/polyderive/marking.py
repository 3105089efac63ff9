"""Mark subtrees that do not depend on a differentiation variable."""

from __future__ import annotations

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
from .monomial import expand_polynomial, parse_monomial
from .traversal import ExpressionTransformer, traverse


def _mentions(polynomial: Polynomial, name: str) -> bool:
    return any(parse_monomial(key).get(name, 0) != 0 for key in polynomial.terms)


class ConstantMarker(ExpressionTransformer):
    """Wrap every maximal subtree free of ``variable`` in :class:`Constant`."""

    def __init__(self, variable: Symbol) -> None:
        self.variable = variable

    def before(self, node: Expression) -> tuple[Expression, bool]:
        match node:
            case Constant():
                return node, False
            case Number():
                return Constant(node), False
            case Symbol():
                if node == self.variable:
                    return node, False
                return Constant(node), False
            case Polynomial():
                if _mentions(node, self.variable.name):
                    return expand_polynomial(node), True
                return Constant(node), False
        return node, True

    def after(self, node: Expression) -> Expression:
        match node:
            case Cosine(operand=Constant()) | Sine(operand=Constant()):
                return Constant(node)
            case Power(base=Constant()):
                return Constant(node)
            case (
                Sum(left=Constant(), right=Constant())
                | Product(left=Constant(), right=Constant())
                | Quotient(numerator=Constant(), denominator=Constant())
            ):
                return Constant(node)
        return node


def mark_constant(variable: Symbol, expression: Expression) -> Expression:
    return ConstantMarker(variable).transform(expression)


def _unwrap(node: Expression) -> Expression:
    if isinstance(node, Constant):
        return node.operand
    return node


def strip_constants(expression: Expression) -> Expression:
    """Remove every :class:`Constant` wrapper, keeping the wrapped subtrees."""
    return traverse(lambda node: (node, True), _unwrap, expression)


__all__ = ["ConstantMarker", "mark_constant", "strip_constants"]
