"""Pytest-based parser tests.

Test cases live in parse/*.tests files. Expected output is either the
canonical rendering of the parsed program or 'error: <message substring>'.
"""

from pathlib import Path

import pytest

from cases import discover
from jerboa import render
from jerboa.ast import (
    BinaryExpression,
    CallExpression,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    IntegerLiteral,
    UnaryExpression,
    VarStatement,
)
from jerboa.parse import (
    IntConversionError,
    InvalidOperandType,
    ParserError,
    ParserSyntaxError,
    UnexpectedToken,
    UnknownParserError,
    parse,
)

PARSE_DIR = Path(__file__).parent / "parse"


def discover_parse_tests() -> list[tuple[str, str, str]]:
    """Find all parse tests, returns (test_id, input, expected)."""
    return discover(PARSE_DIR)


def pytest_generate_tests(metafunc):
    """Parametrize tests over parse test files."""
    if "parse_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_parse_tests()
        ]
        metafunc.parametrize("parse_input,parse_expected", params)


def test_parse(parse_input: str, parse_expected: str):
    """Verify the parser renders or rejects each case as expected."""
    if parse_expected.startswith("error:"):
        expected_msg = parse_expected[6:].strip()
        with pytest.raises(ParserError) as exc_info:
            parse(parse_input)
        assert expected_msg in str(exc_info.value)
        return
    assert render(parse_input) == parse_expected


def test_render_is_idempotent(parse_input: str, parse_expected: str):
    """Re-parsing a rendering gives back the same rendering."""
    if parse_expected.startswith("error:"):
        return
    once = render(parse_input)
    assert render(once) == once


def test_test_files_found():
    assert len(discover_parse_tests()) > 50


# ---- Tree shape ------------------------------------------------------------


def test_let_statement_shape():
    program = parse("let answer = 42;")
    assert len(program.statements) == 1
    st = program.statements[0]
    assert isinstance(st, VarStatement)
    assert st.name == "answer"
    assert isinstance(st.value, IntegerLiteral)
    assert st.value.value == 42


def test_binary_tree_shape():
    st = parse("a + b * c").statements[0]
    assert isinstance(st, ExpressionStatement)
    expr = st.expr
    assert isinstance(expr, BinaryExpression)
    assert expr.op == "+"
    assert isinstance(expr.left, Identifier)
    assert isinstance(expr.right, BinaryExpression)
    assert expr.right.op == "*"


def test_negative_literal_is_unary():
    expr = parse("-5").statements[0].expr
    assert isinstance(expr, UnaryExpression)
    assert expr.op == "-"
    assert expr.operand == IntegerLiteral(None, 5)


def test_function_expression_shape():
    expr = parse("fn(x, y) { x + y }").statements[0].expr
    assert isinstance(expr, FunctionExpression)
    assert expr.parameters == ["x", "y"]
    assert len(expr.body.statements) == 1


def test_call_expression_shape():
    expr = parse("add(1, 2 * 3)").statements[0].expr
    assert isinstance(expr, CallExpression)
    assert expr.callee == Identifier(None, "add")
    assert len(expr.arguments) == 2


def test_equality_ignores_positions():
    assert parse("1 + 2") == parse("1 +\n   2")


def test_positions_are_recorded():
    st = parse("let x = 1;\n  y").statements[1]
    assert st.pos.line == 2
    assert st.pos.col == 3


# ---- Error classes ---------------------------------------------------------


def test_error_classes():
    with pytest.raises(ParserSyntaxError):
        parse("()")
    with pytest.raises(IntConversionError) as exc_info:
        parse("let big = 99999999999;")
    assert exc_info.value.literal == "99999999999"
    with pytest.raises(UnexpectedToken) as exc_info:
        parse("let 5 = x;")
    assert exc_info.value.token.literal == "5"
    with pytest.raises(InvalidOperandType) as exc_info:
        parse("1 * )")
    assert exc_info.value.token.literal == ")"


def test_unknown_parser_error_message():
    assert str(UnknownParserError()) == "unknown parsing error"
