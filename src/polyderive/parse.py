"""JSON serialization of expression trees powered by Pydantic."""

from __future__ import annotations

from json import JSONDecodeError
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .errors import ExpressionError, InvalidNodeError
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
from .monomial import new_polynomial

__all__ = ["dump", "parse"]


class _ExpressionBaseModel(BaseModel):
    """Base model rejecting unknown fields."""

    model_config = ConfigDict(extra="forbid")

    def to_expression(self) -> Expression:
        """Build the immutable expression node; every concrete model overrides this."""
        raise NotImplementedError


class NumberNode(_ExpressionBaseModel):
    type: Literal["Number"] = "Number"
    value: float

    def to_expression(self) -> Expression:
        return Number(self.value)


class SymbolNode(_ExpressionBaseModel):
    type: Literal["Symbol"] = "Symbol"
    name: str = Field(pattern=r"^[a-z]$")

    def to_expression(self) -> Expression:
        return Symbol(self.name)


class SumNode(_ExpressionBaseModel):
    type: Literal["Sum"] = "Sum"
    left: ExpressionNode
    right: ExpressionNode

    def to_expression(self) -> Expression:
        return Sum(self.left.to_expression(), self.right.to_expression())


class ProductNode(_ExpressionBaseModel):
    type: Literal["Product"] = "Product"
    left: ExpressionNode
    right: ExpressionNode

    def to_expression(self) -> Expression:
        return Product(self.left.to_expression(), self.right.to_expression())


class QuotientNode(_ExpressionBaseModel):
    type: Literal["Quotient"] = "Quotient"
    numerator: ExpressionNode
    denominator: ExpressionNode

    def to_expression(self) -> Expression:
        return Quotient(
            self.numerator.to_expression(),
            self.denominator.to_expression(),
        )


class PowerNode(_ExpressionBaseModel):
    type: Literal["Power"] = "Power"
    base: ExpressionNode
    exponent: float

    def to_expression(self) -> Expression:
        return Power(self.base.to_expression(), self.exponent)


class CosineNode(_ExpressionBaseModel):
    type: Literal["Cosine"] = "Cosine"
    operand: ExpressionNode

    def to_expression(self) -> Expression:
        return Cosine(self.operand.to_expression())


class SineNode(_ExpressionBaseModel):
    type: Literal["Sine"] = "Sine"
    operand: ExpressionNode

    def to_expression(self) -> Expression:
        return Sine(self.operand.to_expression())


class PolynomialNode(_ExpressionBaseModel):
    type: Literal["Polynomial"] = "Polynomial"
    terms: dict[str, float] = Field(default_factory=dict)

    @field_validator("terms")
    @classmethod
    def _canonical_terms(cls, value: dict[str, float]) -> dict[str, float]:
        try:
            return dict(new_polynomial(value).terms)
        except ExpressionError as exc:
            raise ValueError(str(exc)) from exc

    def to_expression(self) -> Expression:
        return Polynomial(self.terms)


ExpressionNode = (
    NumberNode
    | SymbolNode
    | SumNode
    | ProductNode
    | QuotientNode
    | PowerNode
    | CosineNode
    | SineNode
    | PolynomialNode
)


for model in (
    NumberNode,
    SymbolNode,
    SumNode,
    ProductNode,
    QuotientNode,
    PowerNode,
    CosineNode,
    SineNode,
    PolynomialNode,
):
    model.model_rebuild()


_NODE_ADAPTER = TypeAdapter(ExpressionNode)


def parse(source: str) -> Expression:
    """Parse a JSON expression tree.

    Parameters
    ----------
    source:
        JSON string such as
        ``{"type": "Sine", "operand": {"type": "Symbol", "name": "x"}}``.

    Returns
    -------
    Expression
        The equivalent immutable expression tree.

    Raises
    ------
    ValueError
        If the input cannot be decoded or does not match the supported schema.

    """
    try:
        node = _NODE_ADAPTER.validate_json(source)
    except (ValidationError, JSONDecodeError) as exc:
        raise ValueError("Invalid expression JSON payload") from exc
    if not isinstance(node, _ExpressionBaseModel):
        raise TypeError("Unexpected node type produced by parser")
    return node.to_expression()


def _to_node(expression: Expression) -> _ExpressionBaseModel:
    match expression:
        case Number(value=value):
            return NumberNode(value=value)
        case Symbol(name=name):
            return SymbolNode(name=name)
        case Sum(left=left, right=right):
            return SumNode(left=_to_node(left), right=_to_node(right))
        case Product(left=left, right=right):
            return ProductNode(left=_to_node(left), right=_to_node(right))
        case Quotient(numerator=numerator, denominator=denominator):
            return QuotientNode(
                numerator=_to_node(numerator),
                denominator=_to_node(denominator),
            )
        case Power(base=base, exponent=exponent):
            return PowerNode(base=_to_node(base), exponent=exponent)
        case Cosine(operand=operand):
            return CosineNode(operand=_to_node(operand))
        case Sine(operand=operand):
            return SineNode(operand=_to_node(operand))
        case Constant(operand=operand):
            return _to_node(operand)
        case Polynomial(terms=terms):
            return PolynomialNode(terms=dict(terms))
    raise InvalidNodeError(
        f"Cannot serialize node type {type(expression).__name__!r}",
        node=expression,
    )


def dump(expression: Expression) -> str:
    """Serialize ``expression`` to the JSON accepted by :func:`parse`."""
    return _to_node(expression).model_dump_json()
