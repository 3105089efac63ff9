from dataclasses import dataclass

import pytest

from polyderive import InvalidNodeError
from polyderive.expressions import (
    Constant,
    Cosine,
    Number,
    Polynomial,
    Power,
    Product,
    Quotient,
    Sine,
    Sum,
    Symbol,
)
from polyderive.marking import mark_constant, strip_constants
from polyderive.traversal import ExpressionTransformer, traverse


def descend(node):
    return node, True


def identity(node):
    return node


@dataclass(frozen=True)
class Tangent:
    operand: object


EXPR = Sum(
    Product(Number(2), Cosine(Symbol("x"))),
    Quotient(Power(Symbol("y"), 3), Sine(Constant(Symbol("z")))),
)


def test_identity_hooks_rebuild_equal_tree():
    assert traverse(descend, identity, EXPR) == EXPR


def test_after_runs_post_order():
    seen = []

    def record(node):
        seen.append(type(node).__name__)
        return node

    traverse(descend, record, Product(Cosine(Symbol("x")), Number(1)))
    assert seen == ["Symbol", "Cosine", "Number", "Product"]


def test_before_runs_pre_order():
    seen = []

    def record(node):
        seen.append(type(node).__name__)
        return node, True

    traverse(record, identity, Sum(Power(Symbol("x"), 2), Number(1)))
    assert seen == ["Sum", "Power", "Symbol", "Number"]


def test_before_can_stop_descent_without_after():
    calls = []

    def stop_at_cosine(node):
        if isinstance(node, Cosine):
            return Number(7), False
        return node, True

    def record(node):
        calls.append(node)
        return node

    result = traverse(stop_at_cosine, record, Sum(Cosine(Symbol("x")), Symbol("y")))
    assert result == Sum(Number(7), Symbol("y"))
    assert Number(7) not in calls
    assert Symbol("x") not in calls


def test_before_rewrite_is_descended_into():
    def expand(node):
        if isinstance(node, Polynomial):
            return Sum(Symbol("a"), Symbol("b")), True
        return node, True

    def rename(node):
        if node == Symbol("a"):
            return Symbol("c")
        return node

    assert traverse(expand, rename, Polynomial({"x": 1.0})) == Sum(
        Symbol("c"),
        Symbol("b"),
    )


def test_power_exponent_is_kept():
    def bump(node):
        if isinstance(node, Number):
            return Number(node.value + 1)
        return node

    result = traverse(descend, bump, Power(Number(1), 2.5))
    assert result == Power(Number(2), 2.5)


def test_unknown_variant_raises():
    with pytest.raises(InvalidNodeError, match=r"Unsupported node type 'Tangent'"):
        traverse(descend, identity, Sum(Symbol("x"), Tangent(Symbol("x"))))


def test_transformer_defaults_are_identity():
    assert ExpressionTransformer().transform(EXPR) == EXPR


def test_traverse_does_not_mutate_input():
    original = Sum(Symbol("x"), Number(1))
    traverse(descend, lambda node: Number(0) if node == Symbol("x") else node, original)
    assert original == Sum(Symbol("x"), Number(1))


@pytest.mark.parametrize(
    "variable,expression,expected",
    [
        ("x", Number(3), Constant(Number(3))),
        ("x", Symbol("x"), Symbol("x")),
        ("x", Symbol("y"), Constant(Symbol("y"))),
        (
            "a",
            Product(Symbol("a"), Sine(Sum(Number(5), Symbol("b")))),
            Product(
                Symbol("a"),
                Constant(Sine(Constant(Sum(Constant(Number(5)), Constant(Symbol("b")))))),
            ),
        ),
        (
            "b",
            Product(Symbol("a"), Sine(Sum(Number(5), Symbol("b")))),
            Product(
                Constant(Symbol("a")),
                Sine(Sum(Constant(Number(5)), Symbol("b"))),
            ),
        ),
        (
            "x",
            Power(Cosine(Product(Symbol("y"), Symbol("x"))), 3),
            Power(Cosine(Product(Constant(Symbol("y")), Symbol("x"))), 3),
        ),
        (
            "x",
            Quotient(Symbol("y"), Power(Symbol("z"), 2)),
            Constant(
                Quotient(
                    Constant(Symbol("y")),
                    Constant(Power(Constant(Symbol("z")), 2)),
                ),
            ),
        ),
        ("x", Constant(Symbol("x")), Constant(Symbol("x"))),
    ],
)
def test_mark_constant(variable, expression, expected):
    assert mark_constant(Symbol(variable), expression) == expected


def test_mark_constant_polynomial_without_variable():
    p = Polynomial({"y": 2.0, "": 1.0})
    assert mark_constant(Symbol("x"), p) == Constant(p)


def test_mark_constant_expands_polynomial_with_variable():
    p = Polynomial({"xy": 2.0})
    assert mark_constant(Symbol("x"), p) == Product(
        Constant(Number(2.0)),
        Product(Symbol("x"), Constant(Symbol("y"))),
    )


def test_strip_constants_removes_every_marker():
    marked = mark_constant(
        Symbol("a"),
        Product(Symbol("a"), Sine(Sum(Number(5), Symbol("b")))),
    )
    assert strip_constants(marked) == Product(
        Symbol("a"),
        Sine(Sum(Number(5), Symbol("b"))),
    )
