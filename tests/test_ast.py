import dataclasses

import hypothesis.strategies as st
import pytest
from hypothesis import given

from waixg.waixg_ast import (
    NODE_TYPES,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
)


def test_let_statement_str() -> None:
    node = LetStatement(Identifier("myVar"), Identifier("anotherVar"))
    assert str(node) == "let myVar = anotherVar;"


def test_program_str() -> None:
    program = Program(
        (
            LetStatement(Identifier("x"), IntegerLiteral(5)),
            ReturnStatement(Identifier("x")),
        )
    )
    assert str(program) == "let x = 5; return x;"


def test_expression_str_is_parenthesized() -> None:
    node = InfixExpression(
        PrefixExpression("-", Identifier("a")),
        "*",
        CallExpression(Identifier("f"), (IntegerLiteral(1), BooleanLiteral(True))),
    )
    assert str(node) == "((-a) * f(1, true))"


def test_if_and_function_str() -> None:
    body = BlockStatement((ExpressionStatement(Identifier("x")),))
    alt = BlockStatement((ExpressionStatement(Identifier("y")),))
    node = IfExpression(Identifier("c"), body, alt)
    assert str(node) == "if c { x } else { y }"
    fn = FunctionLiteral((Identifier("a"), Identifier("b")), body)
    assert str(fn) == "fn(a, b) { x }"


def test_string_literal_str_escapes_quotes() -> None:
    assert str(StringLiteral('say "hi"')) == '"say \\"hi\\""'


def test_equality_ignores_position() -> None:
    n1 = Identifier("x", line=1, col=1)
    n2 = Identifier("x", line=3, col=7)
    assert n1 == n2
    assert n1 != Identifier("y")


def test_nodes_are_immutable() -> None:
    node = IntegerLiteral(1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.value = 2  # type: ignore[misc]


def test_to_dict_nested() -> None:
    node = LetStatement(Identifier("x", line=1, col=5), IntegerLiteral(1), line=1, col=1)
    d = node.to_dict()
    assert d["kind"] == "let"
    assert d["line"] == 1
    assert d["name"] == {"kind": "identifier", "value": "x", "line": 1, "col": 5}
    assert d["value"]["kind"] == "integer"


def test_to_dict_sequences_become_lists() -> None:
    fn = FunctionLiteral((Identifier("a"),), BlockStatement(()))
    d = fn.to_dict()
    assert d["parameters"] == [{"kind": "identifier", "value": "a", "line": 0, "col": 0}]
    assert d["body"]["statements"] == []


def test_if_without_alternative_defaults_to_none() -> None:
    node = IfExpression(BooleanLiteral(True), BlockStatement(()))
    assert node.alternative is None
    assert node.to_dict()["alternative"] is None


def test_node_kinds_are_unique() -> None:
    kinds = [cls.kind for cls in NODE_TYPES]
    assert len(kinds) == len(set(kinds))


@given(st.integers(min_value=0, max_value=2**63 - 1))
def test_integer_literal_str(value: int) -> None:
    assert str(IntegerLiteral(value)) == str(value)
