"""Jerboa AST — parse-time node definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Statement:
    """Base for all statements. Position is excluded from equality."""

    pos: Pos = field(compare=False, repr=False)


@dataclass
class VarStatement(Statement):
    """let name = value;"""

    name: str
    value: Expression


@dataclass
class ReturnStatement(Statement):
    """return value;"""

    value: Expression


@dataclass
class ExpressionStatement(Statement):
    """Bare expression as statement; trailing ';' optional."""

    expr: Expression


@dataclass
class BlockStatement(Statement):
    """{ statements }"""

    statements: list[Statement]


@dataclass
class Program:
    """Top-level program — ordered list of statements."""

    statements: list[Statement]


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expression:
    """Base for all expressions. Position is excluded from equality."""

    pos: Pos = field(compare=False, repr=False)


@dataclass
class Identifier(Expression):
    name: str


@dataclass
class IntegerLiteral(Expression):
    """Signed 32-bit integer literal."""

    value: int


@dataclass
class BooleanLiteral(Expression):
    value: bool


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class ArrayLiteral(Expression):
    """[e1, e2, ...]"""

    elements: list[Expression]


@dataclass
class MapLiteral(Expression):
    """{"k": v, ...} — unique string keys; order does not affect equality."""

    entries: dict[str, Expression]


@dataclass
class BinaryExpression(Expression):
    """left op right"""

    left: Expression
    op: str
    right: Expression


@dataclass
class UnaryExpression(Expression):
    """op operand, where op is '!' or '-'."""

    op: str
    operand: Expression


@dataclass
class IndexExpression(Expression):
    """collection[index]"""

    collection: Expression
    index: Expression


@dataclass
class GroupedExpression(Expression):
    """( inner ) — kept for precedence only."""

    inner: Expression


@dataclass
class CallExpression(Expression):
    """callee(arguments)"""

    callee: Expression
    arguments: list[Expression]


@dataclass
class IfExpression(Expression):
    """if condition { ... } else { ... }

    The alternative is a block, or an expression statement holding a nested
    IfExpression for `else if`.
    """

    condition: Expression
    consequence: Statement
    alternative: Statement | None


@dataclass
class FunctionExpression(Expression):
    """fn(parameters) { body }"""

    parameters: list[str]
    body: Statement
