"""Compile expression trees into numpy-backed Python callables."""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterable
from collections.abc import Mapping as AbcMapping
from dataclasses import dataclass
from typing import Any

from .errors import (
    ExpressionError,
    InputValidationError,
    InvalidNodeError,
    UnknownIdentifierError,
)
from .expressions import (
    SYMBOL_PATTERN,
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
from .helpers import HELPER_FUNCTIONS, HELPER_NAME_MAP
from .monomial import parse_monomial
from .traversal import traverse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilationResult:
    """A compiled evaluator and the variables it expects."""

    function: Any
    variables: tuple[str, ...]
    module_ast: ast.Module


def collect_symbols(expression: Expression) -> set[str]:
    """Return the names of every symbol ``expression`` mentions."""
    names: set[str] = set()

    def record(node: Expression) -> tuple[Expression, bool]:
        match node:
            case Symbol(name=name):
                names.add(name)
            case Polynomial(terms=terms):
                for key in terms:
                    names.update(
                        symbol
                        for symbol, power in parse_monomial(key).items()
                        if power != 0
                    )
        return node, True

    traverse(record, lambda node: node, expression)
    return names


def _helper(name: str, *args: ast.expr) -> ast.expr:
    return ast.Call(
        func=ast.Name(id=HELPER_NAME_MAP[name], ctx=ast.Load()),
        args=list(args),
        keywords=[],
    )


class ExpressionAstBuilder:
    """Translate expression trees into Python AST expressions."""

    def build(self, node: Expression) -> ast.expr:
        return self.visit(node)

    def visit(self, node: Expression) -> ast.expr:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise InvalidNodeError(
                f"Unsupported node type {type(node).__name__!r}",
                node=node,
            )
        return method(node)

    def _binary(self, left: Expression, op: ast.operator, right: Expression) -> ast.expr:
        return ast.BinOp(left=self.visit(left), op=op, right=self.visit(right))

    def visit_Number(self, node: Number) -> ast.expr:
        return ast.Constant(value=node.value)

    def visit_Symbol(self, node: Symbol) -> ast.expr:
        return ast.Name(id=node.name, ctx=ast.Load())

    def visit_Sum(self, node: Sum) -> ast.expr:
        return self._binary(node.left, ast.Add(), node.right)

    def visit_Product(self, node: Product) -> ast.expr:
        return self._binary(node.left, ast.Mult(), node.right)

    def visit_Quotient(self, node: Quotient) -> ast.expr:
        return self._binary(node.numerator, ast.Div(), node.denominator)

    def visit_Power(self, node: Power) -> ast.expr:
        return _helper("pow", self.visit(node.base), ast.Constant(value=node.exponent))

    def visit_Cosine(self, node: Cosine) -> ast.expr:
        return _helper("cos", self.visit(node.operand))

    def visit_Sine(self, node: Sine) -> ast.expr:
        return _helper("sin", self.visit(node.operand))

    def visit_Constant(self, node: Constant) -> ast.expr:
        return self.visit(node.operand)

    def visit_Polynomial(self, node: Polynomial) -> ast.expr:
        result: ast.expr | None = None
        for key in sorted(node.terms):
            term: ast.expr = ast.Constant(value=node.terms[key])
            for symbol, power in sorted(parse_monomial(key).items()):
                if power == 0:
                    continue
                factor = _helper(
                    "pow",
                    ast.Name(id=symbol, ctx=ast.Load()),
                    ast.Constant(value=float(power)),
                )
                term = ast.BinOp(left=term, op=ast.Mult(), right=factor)
            result = term if result is None else ast.BinOp(
                left=result, op=ast.Add(), right=term,
            )
        return result if result is not None else ast.Constant(value=0.0)


def _normalise_variables(variables: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for raw in variables:
        if not isinstance(raw, str) or not SYMBOL_PATTERN.match(raw):
            raise ExpressionError(f"Unsupported variable name: {raw!r}")
        if raw in seen:
            raise ExpressionError(f"Duplicate variable: {raw}")
        seen.add(raw)
        ordered.append(raw)
    return tuple(ordered)


def _load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _input_error(message: ast.expr) -> ast.Raise:
    return ast.Raise(
        exc=ast.Call(func=_load("InputValidationError"), args=[message], keywords=[]),
        cause=None,
    )


def _key_mismatch(name: str, left: ast.expr, right: ast.expr, label: str) -> list[ast.stmt]:
    """``name = left - right``, raising with the sorted names when non-empty."""
    message = ast.JoinedStr(
        values=[
            ast.Constant(value=f"{label}: "),
            ast.FormattedValue(
                value=ast.Call(func=_load("sorted"), args=[_load(name)], keywords=[]),
                conversion=-1,
                format_spec=None,
            ),
        ],
    )
    return [
        ast.Assign(
            targets=[ast.Name(id=name, ctx=ast.Store())],
            value=ast.BinOp(left=left, op=ast.Sub(), right=right),
        ),
        ast.If(test=_load(name), body=[_input_error(message)], orelse=[]),
    ]


def _scope_guard(variables: tuple[str, ...]) -> list[ast.stmt]:
    """Statements rejecting a non-mapping scope or one whose keys differ from ``variables``."""
    not_mapping = ast.UnaryOp(
        op=ast.Not(),
        operand=ast.Call(
            func=_load("isinstance"),
            args=[_load("scope"), _load("Mapping")],
            keywords=[],
        ),
    )
    declared = ast.Call(
        func=_load("frozenset"),
        args=[ast.Tuple(elts=[ast.Constant(value=name) for name in variables], ctx=ast.Load())],
        keywords=[],
    )
    provided = ast.Call(func=_load("frozenset"), args=[_load("scope")], keywords=[])
    return [
        ast.If(
            test=not_mapping,
            body=[_input_error(ast.Constant(value="Inputs payload must be a mapping"))],
            orelse=[],
        ),
        ast.Assign(targets=[ast.Name(id="_declared", ctx=ast.Store())], value=declared),
        ast.Assign(targets=[ast.Name(id="_provided", ctx=ast.Store())], value=provided),
        *_key_mismatch(
            "_missing", _load("_declared"), _load("_provided"), "Missing required inputs"
        ),
        *_key_mismatch(
            "_extra", _load("_provided"), _load("_declared"), "Unexpected inputs provided"
        ),
    ]


def _build_function_ast(
    *,
    expression: Expression,
    variables: tuple[str, ...],
) -> ast.Module:
    body = _scope_guard(variables)
    body.extend(
        ast.Assign(
            targets=[ast.Name(id=name, ctx=ast.Store())],
            value=ast.Subscript(
                value=_load("scope"),
                slice=ast.Constant(value=name),
                ctx=ast.Load(),
            ),
        )
        for name in variables
    )
    body.append(ast.Return(value=ExpressionAstBuilder().build(expression)))

    func_def = ast.FunctionDef(
        name="_compiled",
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg="scope")],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            defaults=[],
        ),
        body=body,
        decorator_list=[],
    )

    module = ast.Module(body=[func_def], type_ignores=[])
    ast.fix_missing_locations(module)
    return module


def compile_expression(
    expression: Expression,
    *,
    variables: Iterable[str] | None = None,
) -> CompilationResult:
    """Compile ``expression`` into a function of a mapping of symbol values.

    ``variables`` defaults to the sorted symbols of ``expression``; when given
    it may declare extra symbols but must cover every symbol used.
    """
    used = collect_symbols(expression)
    if variables is None:
        declared = tuple(sorted(used))
    else:
        declared = _normalise_variables(variables)
        unknown = used - set(declared)
        if unknown:
            identifier = sorted(unknown)[0]
            raise UnknownIdentifierError(
                f"Expression references undeclared symbol {identifier!r}",
                expression=expression,
                identifier=identifier,
            )

    module_ast = _build_function_ast(expression=expression, variables=declared)
    logger.debug("Compiled evaluator over variables %s", declared)

    compiled = compile(module_ast, filename="<polyderive>", mode="exec")
    safe_globals: dict[str, Any] = {
        "__builtins__": {},
        "InputValidationError": InputValidationError,
        "Mapping": AbcMapping,
        "isinstance": isinstance,
        "frozenset": frozenset,
        "sorted": sorted,
    }
    safe_globals.update(HELPER_FUNCTIONS)

    namespace: dict[str, Any] = {}
    exec(compiled, safe_globals, namespace)
    function = namespace["_compiled"]

    return CompilationResult(
        function=function,
        variables=declared,
        module_ast=module_ast,
    )


__all__ = ["CompilationResult", "collect_symbols", "compile_expression"]
