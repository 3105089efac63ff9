import math

import numpy as np
import pytest

from polyderive import (
    Cosine,
    ExpressionError,
    InputValidationError,
    InvalidNodeError,
    Number,
    Polynomial,
    Power,
    Product,
    Quotient,
    Sine,
    Sum,
    Symbol,
    UnknownIdentifierError,
    build_evaluator,
    new_polynomial,
)
from polyderive.compiler import collect_symbols, compile_expression
from polyderive.expressions import Constant


def sym(name):
    return Symbol(name)


def const(value):
    return Number(value)


@pytest.mark.parametrize(
    "expression,expected",
    [
        (Sum(const(2), const(3)), 5),
        (Product(const(-3), const(9)), -27),
        (Quotient(const(14), const(4)), 3.5),
        (Power(const(2), 5), 32),
        (Power(const(9), 0.5), 3),
        (Power(const(-2), 3), -8),
        (Cosine(const(0)), 1),
        (Sine(const(math.pi / 2)), 1),
        (Constant(const(7)), 7),
        (Polynomial(), 0),
        (new_polynomial({"": 2.5}), 2.5),
    ],
)
def test_constant_expressions(expression, expected):
    evaluator = build_evaluator(expression)
    assert evaluator({}) == pytest.approx(expected)


@pytest.mark.parametrize(
    "expression,scope,expected",
    [
        (Sum(sym("x"), const(5)), {"x": 7}, 12),
        (Product(sym("a"), sym("b")), {"a": 4, "b": 5}, 20),
        (Quotient(sym("t"), const(2)), {"t": 9}, 4.5),
        (Power(sym("n"), 3), {"n": 2}, 8),
        (Power(sym("n"), -1), {"n": 4}, 0.25),
        (Cosine(Product(sym("x"), sym("y"))), {"x": 0.5, "y": 2}, math.cos(1.0)),
        (
            new_polynomial({"x^2y": 3.0, "x^-1": 2.0, "": 1.0}),
            {"x": 2.0, "y": -1.0},
            3.0 * 4.0 * -1.0 + 2.0 / 2.0 + 1.0,
        ),
    ],
)
def test_expressions_with_inputs(expression, scope, expected):
    evaluator = build_evaluator(expression)
    assert evaluator(scope) == pytest.approx(expected)


def test_array_inputs_evaluate_elementwise():
    evaluator = build_evaluator(Sum(Sine(sym("x")), Power(sym("x"), 2)))
    xs = np.array([0.0, 1.0, 2.0])
    assert np.allclose(evaluator({"x": xs}), np.sin(xs) + xs**2)


def test_scalar_results_are_python_floats():
    evaluator = build_evaluator(Cosine(sym("x")))
    assert isinstance(evaluator({"x": 0.0}), float)


def test_variables_metadata_defaults_to_sorted_symbols():
    evaluator = build_evaluator(Sum(sym("y"), Product(sym("b"), sym("y"))))
    assert evaluator.__polyderive_variables__ == ("b", "y")


def test_declared_variables_may_exceed_used_symbols():
    evaluator = build_evaluator(sym("x"), variables=["x", "z"])
    assert evaluator.__polyderive_variables__ == ("x", "z")
    assert evaluator({"x": 3, "z": 100}) == 3


def test_include_source_attaches_generated_code():
    evaluator = build_evaluator(Sine(sym("x")), include_source=True)
    source = evaluator.__polyderive_source__
    assert "def _compiled(scope):" in source
    assert "_pd_sin(x)" in source


def test_missing_inputs_raise():
    evaluator = build_evaluator(Sum(sym("x"), sym("y")))
    with pytest.raises(InputValidationError, match=r"Missing required inputs: \['y'\]"):
        evaluator({"x": 1})


def test_unexpected_inputs_raise():
    evaluator = build_evaluator(sym("x"))
    with pytest.raises(InputValidationError, match=r"Unexpected inputs provided: \['q'\]"):
        evaluator({"x": 1, "q": 2})


def test_non_mapping_scope_raises():
    evaluator = build_evaluator(sym("x"))
    with pytest.raises(InputValidationError, match=r"must be a mapping"):
        evaluator([("x", 1)])


def test_undeclared_symbol_raises():
    with pytest.raises(UnknownIdentifierError) as excinfo:
        build_evaluator(Product(sym("x"), sym("y")), variables=["x"])
    assert excinfo.value.identifier == "y"


@pytest.mark.parametrize("variables", [["x", "x"], ["xy"], ["X"], [1]])
def test_invalid_variable_declarations(variables):
    with pytest.raises(ExpressionError):
        compile_expression(sym("x"), variables=variables)


def test_unknown_node_raises():
    with pytest.raises(InvalidNodeError):
        compile_expression(Sum(sym("x"), "y"))


def test_collect_symbols_reads_polynomial_keys():
    expression = Sum(
        new_polynomial({"ab^2": 1.0, "c^-1": 2.0}),
        Cosine(Constant(sym("d"))),
    )
    assert collect_symbols(expression) == {"a", "b", "c", "d"}


def test_compilation_result_exposes_module_ast():
    result = compile_expression(Sum(sym("x"), const(1)))
    assert result.variables == ("x",)
    assert result.module_ast.body[0].name == "_compiled"
    assert result.function({"x": 1}) == 2


def test_scope_keys_compared_once_in_generated_code():
    source = build_evaluator(sym("x"), include_source=True).__polyderive_source__
    assert source.count("frozenset(scope)") == 1
    assert "_missing = _declared - _provided" in source
    assert "_extra = _provided - _declared" in source


def test_expression_without_symbols_rejects_any_input():
    evaluator = build_evaluator(const(3))
    assert evaluator({}) == 3
    with pytest.raises(InputValidationError, match=r"Unexpected inputs provided: \['a', 'b'\]"):
        evaluator({"b": 1, "a": 2})


def test_missing_inputs_reported_before_unexpected_ones():
    evaluator = build_evaluator(Sum(sym("x"), sym("y")))
    with pytest.raises(InputValidationError, match=r"Missing required inputs: \['x', 'y'\]"):
        evaluator({"z": 1})
