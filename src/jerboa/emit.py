"""Jerboa emitter — renders AST nodes back into canonical source text.

Binary, unary and index expressions are fully parenthesized, so the output
shows how the parser grouped an expression. Grouping parentheses from the
input are dropped. Every node type in `ast.py` needs a case here.
"""

from __future__ import annotations

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
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpression,
    VarStatement,
)

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def to_source(node: Program | Statement | Expression) -> str:
    """Render a program, statement, or expression as canonical text."""
    emitter = _Emitter()
    if isinstance(node, Program):
        return emitter.render_program(node)
    if isinstance(node, Statement):
        return emitter.render_stmt(node)
    return emitter.render_expr(node)


def quote_string(s: str) -> str:
    return '"' + "".join(_ESCAPES.get(c, c) for c in s) + '"'


class _Emitter:
    def render_program(self, program: Program) -> str:
        return "".join(self.render_stmt(st) for st in program.statements)

    # ── Statements ──────────────────────────────────────────

    def render_stmt(self, st: Statement) -> str:
        if isinstance(st, VarStatement):
            return f"let {st.name} = {self.render_expr(st.value)};"
        if isinstance(st, ReturnStatement):
            return f"return {self.render_expr(st.value)};"
        if isinstance(st, ExpressionStatement):
            return self.render_expr(st.expr)
        if isinstance(st, BlockStatement):
            return "{" + "".join(self.render_stmt(s) for s in st.statements) + "}"
        raise TypeError("unhandled statement type: " + type(st).__name__)

    # ── Expressions ─────────────────────────────────────────

    def render_expr(self, expr: Expression) -> str:
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)
        if isinstance(expr, BooleanLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, StringLiteral):
            return quote_string(expr.value)
        if isinstance(expr, ArrayLiteral):
            return "[" + self._render_list(expr.elements) + "]"
        if isinstance(expr, MapLiteral):
            parts = [
                quote_string(k) + ": " + self.render_expr(v)
                for k, v in expr.entries.items()
            ]
            return "{" + ", ".join(parts) + "}"
        if isinstance(expr, BinaryExpression):
            left = self.render_expr(expr.left)
            right = self.render_expr(expr.right)
            return f"({left} {expr.op} {right})"
        if isinstance(expr, UnaryExpression):
            return f"({expr.op}{self.render_expr(expr.operand)})"
        if isinstance(expr, IndexExpression):
            coll = self.render_expr(expr.collection)
            return f"({coll}[{self.render_expr(expr.index)}])"
        if isinstance(expr, GroupedExpression):
            return self.render_expr(expr.inner)
        if isinstance(expr, CallExpression):
            callee = self.render_expr(expr.callee)
            return f"{callee}({self._render_list(expr.arguments)})"
        if isinstance(expr, IfExpression):
            cond = self.render_expr(expr.condition)
            text = f"if {cond} {self.render_stmt(expr.consequence)}"
            if expr.alternative is not None:
                text += f" else {self.render_stmt(expr.alternative)}"
            return text
        if isinstance(expr, FunctionExpression):
            params = ", ".join(expr.parameters)
            return f"fn({params}) {self.render_stmt(expr.body)}"
        raise TypeError("unhandled expression type: " + type(expr).__name__)

    def _render_list(self, exprs: list[Expression]) -> str:
        return ", ".join(self.render_expr(e) for e in exprs)
