"""Jerboa parser — recursive descent for statements, Pratt for expressions."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from .ast import (
    ArrayLiteral,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionExpression,
    GroupedExpression,
    Identifier,
    IfExpression,
    IndexExpression,
    IntegerLiteral,
    MapLiteral,
    Pos,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpression,
    VarStatement,
)
from .tokens import (
    TK_AND,
    TK_ASSIGN,
    TK_ASTERISK,
    TK_BANG,
    TK_COLON,
    TK_COMMA,
    TK_ELSE,
    TK_EOF,
    TK_EQ,
    TK_FALSE,
    TK_FUNCTION,
    TK_GT,
    TK_GT_EQ,
    TK_IDENT,
    TK_IF,
    TK_INT,
    TK_LBRACE,
    TK_LBRACKET,
    TK_LET,
    TK_LPAREN,
    TK_LT,
    TK_LT_EQ,
    TK_MINUS,
    TK_NOT_EQ,
    TK_OR,
    TK_PERCENT,
    TK_PLUS,
    TK_RBRACE,
    TK_RBRACKET,
    TK_RETURN,
    TK_RPAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STRING,
    TK_TRUE,
    Lexer,
    Token,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# (left, right) binding powers, increasing with precedence
INFIX_BINDING: dict[str, tuple[int, int]] = {
    TK_OR: (1, 2),
    TK_AND: (3, 4),
    TK_EQ: (5, 6),
    TK_NOT_EQ: (5, 6),
    TK_LT: (7, 8),
    TK_GT: (7, 8),
    TK_LT_EQ: (7, 8),
    TK_GT_EQ: (7, 8),
    TK_PLUS: (9, 10),
    TK_MINUS: (9, 10),
    TK_ASTERISK: (10, 11),
    TK_SLASH: (10, 11),
    TK_PERCENT: (10, 11),
}

POSTFIX_BINDING: dict[str, int] = {
    TK_LPAREN: 12,
    TK_LBRACKET: 12,
}

PREFIX_BINDING: dict[str, int] = {
    TK_BANG: 13,
    TK_MINUS: 13,
}

# Tokens that can never begin an operand
CLOSERS: set[str] = {TK_RPAREN, TK_RBRACKET, TK_RBRACE, TK_SEMICOLON, TK_COMMA, TK_EOF}


# ============================================================
# Errors
# ============================================================


class ParserError(Exception):
    """Base error for parsing, with optional location info."""

    def __init__(self, msg: str, pos: Pos | None = None):
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} at line {pos.line} col {pos.col}")
        self.msg = msg
        self.pos = pos


class ParserSyntaxError(ParserError):
    """Structural violation with no more specific code."""


class UnexpectedToken(ParserError):
    """An expect-token check failed, or no rule applies to the token."""

    def __init__(self, token: Token):
        super().__init__("unexpected token " + token.describe())
        self.token = token


class InvalidOperandType(ParserError):
    """Operator/operand mismatch detected at parse time."""

    def __init__(self, token: Token):
        super().__init__("operator received an invalid operand type: " + token.describe())
        self.token = token


class IntConversionError(ParserError):
    """Integer literal does not fit in 32 signed bits."""

    def __init__(self, literal: str, pos: Pos | None = None):
        super().__init__(f"failed to parse '{literal}' as a 32-bit integer", pos)
        self.literal = literal


class UnknownParserError(ParserError):
    def __init__(self, pos: Pos | None = None):
        super().__init__("unknown parsing error", pos)


# ============================================================
# Parser
# ============================================================


class Parser:
    """Two-token lookahead parser over a Lexer."""

    def __init__(self, lexer: Lexer):
        self.lexer: Lexer = lexer
        self.current: Token = lexer.next_token()
        self.peek: Token = lexer.next_token()

    # ── Helpers ──────────────────────────────────────────────

    def advance(self) -> Token:
        tok = self.current
        self.current = self.peek
        self.peek = self.lexer.next_token()
        return tok

    def at(self, kind: str) -> bool:
        return self.current.kind == kind

    def expect(self, kind: str) -> Token:
        if self.current.kind != kind:
            raise UnexpectedToken(self.current)
        return self.advance()

    def _pos(self) -> Pos:
        return Pos(self.current.line, self.current.col)

    def error(self, msg: str) -> ParserSyntaxError:
        return ParserSyntaxError(msg, self._pos())

    # ── Statements ───────────────────────────────────────────

    def parse_program(self) -> Program:
        statements: list[Statement] = []
        while not self.at(TK_EOF):
            statements.append(self.parse_statement())
        logger.debug("parsed program with %d statements", len(statements))
        return Program(statements)

    def parse_statement(self) -> Statement:
        if self.at(TK_LET):
            return self.parse_var_statement()
        if self.at(TK_RETURN):
            return self.parse_return_statement()
        if self.at(TK_LBRACE):
            block = self.parse_block_statement()
            if self.at(TK_SEMICOLON):
                self.advance()
            return block
        return self.parse_expression_statement()

    def parse_var_statement(self) -> VarStatement:
        pos = self._pos()
        self.expect(TK_LET)
        name_tok = self.expect(TK_IDENT)
        self.expect(TK_ASSIGN)
        value = self.parse_expression(0)
        self.expect(TK_SEMICOLON)
        return VarStatement(pos, name_tok.literal, value)

    def parse_return_statement(self) -> ReturnStatement:
        pos = self._pos()
        self.expect(TK_RETURN)
        value = self.parse_expression(0)
        self.expect(TK_SEMICOLON)
        return ReturnStatement(pos, value)

    def parse_block_statement(self) -> BlockStatement:
        pos = self._pos()
        self.expect(TK_LBRACE)
        statements: list[Statement] = []
        while not self.at(TK_RBRACE):
            if self.at(TK_EOF):
                raise UnexpectedToken(self.current)
            statements.append(self.parse_statement())
        self.expect(TK_RBRACE)
        return BlockStatement(pos, statements)

    def parse_expression_statement(self) -> ExpressionStatement:
        pos = self._pos()
        expr = self.parse_expression(0)
        # Optional, so the last expression of a block can be its value
        if self.at(TK_SEMICOLON):
            self.advance()
        return ExpressionStatement(pos, expr)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self, min_bp: int) -> Expression:
        """Parse one prefix-rooted expression, then fold in postfix and
        infix operators whose left binding power is at least min_bp."""
        left = self.parse_prefix()
        while True:
            kind = self.current.kind
            postfix_bp = POSTFIX_BINDING.get(kind)
            if postfix_bp is not None:
                if postfix_bp < min_bp:
                    break
                left = self.parse_postfix(left)
                continue
            infix_bp = INFIX_BINDING.get(kind)
            if infix_bp is None:
                break
            left_bp, right_bp = infix_bp
            if left_bp < min_bp:
                break
            op = self.advance().literal
            self._expect_operand()
            right = self.parse_expression(right_bp)
            left = BinaryExpression(left.pos, left, op, right)
        return left

    def parse_prefix(self) -> Expression:
        tok = self.current
        pos = self._pos()

        if tok.kind == TK_INT:
            self.advance()
            return IntegerLiteral(pos, self._parse_int(tok.literal, pos))
        if tok.kind == TK_TRUE:
            self.advance()
            return BooleanLiteral(pos, True)
        if tok.kind == TK_FALSE:
            self.advance()
            return BooleanLiteral(pos, False)
        if tok.kind == TK_STRING:
            self.advance()
            return StringLiteral(pos, tok.literal)
        if tok.kind == TK_IDENT:
            self.advance()
            return Identifier(pos, tok.literal)
        if tok.kind == TK_LPAREN:
            return self.parse_grouped_expression()
        if tok.kind in PREFIX_BINDING:
            op = self.advance().literal
            self._expect_operand()
            operand = self.parse_expression(PREFIX_BINDING[tok.kind])
            return UnaryExpression(pos, op, operand)
        if tok.kind == TK_IF:
            return self.parse_if_expression()
        if tok.kind == TK_FUNCTION:
            return self.parse_function_expression()
        if tok.kind == TK_LBRACKET:
            self.advance()
            elements = self._parse_list(TK_RBRACKET, lambda: self.parse_expression(0))
            return ArrayLiteral(pos, elements)
        if tok.kind == TK_LBRACE:
            return self.parse_map_literal()
        raise UnexpectedToken(tok)

    def parse_postfix(self, left: Expression) -> Expression:
        if self.at(TK_LBRACKET):
            self.advance()
            index = self.parse_expression(0)
            self.expect(TK_RBRACKET)
            return IndexExpression(left.pos, left, index)
        self.expect(TK_LPAREN)
        args = self._parse_list(TK_RPAREN, lambda: self.parse_expression(0))
        return CallExpression(left.pos, left, args)

    def _expect_operand(self) -> None:
        """An operator was just consumed; the next token must start its operand."""
        if self.current.kind in CLOSERS or self.current.kind in INFIX_BINDING:
            if self.current.kind not in PREFIX_BINDING:
                raise InvalidOperandType(self.current)

    def _parse_int(self, literal: str, pos: Pos) -> int:
        value = int(literal)
        if value < INT32_MIN or value > INT32_MAX:
            raise IntConversionError(literal, pos)
        return value

    def _parse_list(self, end: str, parse_item: Callable[[], T]) -> list[T]:
        """Items = ( Item ( ',' Item )* ','? )? end — current is past the opener."""
        items: list[T] = []
        while not self.at(end):
            items.append(parse_item())
            if self.at(TK_COMMA):
                self.advance()
            elif not self.at(end):
                raise self.error(
                    "expected ',' or '" + end + "', got " + self.current.describe()
                )
        self.expect(end)
        return items

    def parse_grouped_expression(self) -> GroupedExpression:
        pos = self._pos()
        if self.peek.kind == TK_RPAREN:
            raise self.error("empty grouped expression")
        self.expect(TK_LPAREN)
        inner = self.parse_expression(0)
        self.expect(TK_RPAREN)
        return GroupedExpression(pos, inner)

    def parse_if_expression(self) -> IfExpression:
        """If = 'if' Expr Block ( 'else' ( Block | If ) )?"""
        pos = self._pos()
        self.expect(TK_IF)
        condition = self.parse_expression(0)
        consequence = self.parse_block_statement()
        alternative: Statement | None = None
        if self.at(TK_ELSE):
            self.advance()
            if self.at(TK_IF):
                nested_pos = self._pos()
                alternative = ExpressionStatement(nested_pos, self.parse_if_expression())
            else:
                alternative = self.parse_block_statement()
        return IfExpression(pos, condition, consequence, alternative)

    def parse_function_expression(self) -> FunctionExpression:
        """Fn = 'fn' '(' ( IDENT ( ',' IDENT )* ','? )? ')' Block"""
        pos = self._pos()
        self.expect(TK_FUNCTION)
        self.expect(TK_LPAREN)
        params = self._parse_list(TK_RPAREN, lambda: self.expect(TK_IDENT).literal)
        body = self.parse_block_statement()
        return FunctionExpression(pos, params, body)

    def parse_map_literal(self) -> MapLiteral:
        """Map = '{' ( STRING ':' Expr ( ',' STRING ':' Expr )* ','? )? '}'"""
        pos = self._pos()
        self.expect(TK_LBRACE)
        entries: dict[str, Expression] = {}

        def parse_entry() -> None:
            key_tok = self.current
            if key_tok.kind != TK_STRING:
                raise self.error("map keys must be strings, got " + key_tok.describe())
            self.advance()
            if key_tok.literal in entries:
                raise ParserSyntaxError(
                    "duplicate map key '" + key_tok.literal + "'",
                    Pos(key_tok.line, key_tok.col),
                )
            self.expect(TK_COLON)
            entries[key_tok.literal] = self.parse_expression(0)

        self._parse_list(TK_RBRACE, parse_entry)
        return MapLiteral(pos, entries)


def parse(source: str) -> Program:
    """Parse Jerboa source code into a Program AST."""
    return Parser(Lexer(source)).parse_program()
