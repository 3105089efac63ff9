"""Human-readable text for expression trees."""

from __future__ import annotations

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
from .simplify import simplify


def format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _format_polynomial(polynomial: Polynomial) -> str:
    if not polynomial.terms:
        return "P{0}"
    parts = []
    for key in sorted(polynomial.terms):
        coefficient = format_number(polynomial.terms[key])
        parts.append(f"{coefficient}*{key}" if key else coefficient)
    return "P{" + " + ".join(parts) + "}"


def _render(node: Expression) -> str:
    match node:
        case Cosine(operand=operand):
            return f"Cos({_render(operand)})"
        case Sine(operand=operand):
            return f"Sin({_render(operand)})"
        case Product(left=left, right=right):
            return f"({_render(left)}*{_render(right)})"
        case Quotient(numerator=numerator, denominator=denominator):
            return f"({_render(numerator)}/{_render(denominator)})"
        case Sum(left=left, right=right):
            return f"({_render(left)}+{_render(right)})"
        case Power(base=base, exponent=exponent):
            return f"{_render(base)}^{format_number(exponent)}"
        case Number(value=value):
            return format_number(value)
        case Symbol(name=name):
            return name
        case Constant(operand=operand):
            return f"CONST({_render(operand)})"
        case Polynomial():
            return _format_polynomial(node)
    raise InvalidNodeError(
        f"Cannot render node type {type(node).__name__!r}",
        node=node,
    )


def render(expression: Expression) -> str:
    """Simplify ``expression`` and format it, e.g. ``(-1*Sin(x))``."""
    return _render(simplify(expression))


__all__ = ["format_number", "render"]
