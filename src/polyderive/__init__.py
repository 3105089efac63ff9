"""Public API for polyderive."""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .combine import to_polynomial
from .compiler import CompilationResult, compile_expression
from .derive import derive, partial_derive
from .errors import (
    ExpressionError,
    InputValidationError,
    InvalidNodeError,
    MonomialError,
    PolynomialError,
    UnknownIdentifierError,
)
from .expressions import (
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
from .monomial import new_polynomial
from .parse import dump, parse
from .render import render
from .simplify import simplify

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Cosine",
    "Expression",
    "ExpressionError",
    "InputValidationError",
    "InvalidNodeError",
    "MonomialError",
    "Number",
    "Polynomial",
    "PolynomialError",
    "Power",
    "Product",
    "Quotient",
    "Sine",
    "Sum",
    "Symbol",
    "UnknownIdentifierError",
    "build_evaluator",
    "derive",
    "dump",
    "new_polynomial",
    "parse",
    "partial_derive",
    "render",
    "simplify",
    "to_polynomial",
]


def build_evaluator(
    expression: Expression,
    *,
    variables: Iterable[str] | None = None,
    include_source: bool = False,
) -> Callable[[Mapping[str, Any]], Any]:
    """Compile ``expression`` into a reusable numeric callable.

    The returned function expects a single mapping from symbol names to
    scalars or numpy arrays and returns the value of the expression. The
    accepted names are available as ``__polyderive_variables__``.
    """
    result: CompilationResult = compile_expression(expression, variables=variables)

    func = result.function
    func.__polyderive_variables__ = result.variables

    if include_source:
        func.__polyderive_source__ = ast.unparse(result.module_ast)

    return func
