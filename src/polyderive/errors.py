"""Custom exceptions for the polyderive package."""

from __future__ import annotations

from typing import Any


class ExpressionError(RuntimeError):
    """Base class for expression related failures."""

    def __init__(self, message: str, *, expression: Any = None):
        self.expression = expression
        super().__init__(message)


class MonomialError(ExpressionError):
    """Raised when monomial text cannot be decoded."""

    def __init__(self, message: str, *, monomial: str):
        super().__init__(message, expression=monomial)
        self.monomial = monomial


class PolynomialError(ExpressionError):
    """Raised when a polynomial cannot be built from the given terms."""

    def __init__(self, message: str, *, key: str | None = None):
        super().__init__(message)
        self.key = key


class InvalidNodeError(ExpressionError):
    """Raised when an expression tree contains an unsupported node."""

    def __init__(self, message: str, *, node: Any = None):
        super().__init__(message, expression=node)
        self.node = node


class UnknownIdentifierError(ExpressionError):
    """Raised when an expression references an undeclared symbol."""

    def __init__(
        self,
        message: str,
        *,
        expression: Any,
        identifier: str,
    ):
        super().__init__(message, expression=expression)
        self.identifier = identifier


class InputValidationError(ExpressionError):
    """Raised when inputs passed to a compiled evaluator are invalid."""
