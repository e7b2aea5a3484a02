"""Jerboa evaluator — walks a parsed program and reduces it to values."""

from __future__ import annotations

import logging
import sys
from typing import Callable, TextIO

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
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpression,
    VarStatement,
)
from .emit import to_source
from .environment import Environment, NotFound
from .parse import Parser, ParserError
from .tokens import Lexer
from .values import (
    UNIT,
    ArrayValue,
    BooleanValue,
    BuiltinValue,
    Closure,
    FunctionValue,
    IntegerValue,
    MapValue,
    ReturnValue,
    StringValue,
    Value,
    unwrap_return,
)

logger = logging.getLogger(__name__)


# ============================================================
# Diagnostics
# ============================================================


class EvalError(Exception):
    """Base error for evaluation, with optional location info."""

    def __init__(self, msg: str, pos: Pos | None = None):
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} at line {pos.line} col {pos.col}")
        self.msg = msg
        self.pos = pos


class IdentifierNotFound(EvalError):
    def __init__(self, name: str, pos: Pos | None = None):
        super().__init__(f"identifier not found: '{name}'", pos)
        self.name = name


class TypeMismatch(EvalError):
    """Operand kinds do not fit the operation."""


class ModuloByZero(EvalError):
    def __init__(self, pos: Pos | None = None):
        super().__init__("modulo by zero", pos)


class DivisionByZero(EvalError):
    def __init__(self, pos: Pos | None = None):
        super().__init__("division by zero", pos)


class FunctionNotFound(EvalError):
    def __init__(self, description: str, pos: Pos | None = None):
        super().__init__(f"not a function: {description}", pos)
        self.description = description


class FunctionCallWrongArity(EvalError):
    def __init__(
        self, expected: int, got: int, pos: Pos | None = None, *, at_least: bool = False
    ):
        bound = "at least " if at_least else ""
        super().__init__(
            f"wrong number of arguments: expected {bound}{expected}, got {got}", pos
        )
        self.expected = expected
        self.got = got


class ReturnOutsideExpression(EvalError):
    def __init__(self, pos: Pos | None = None):
        super().__init__("return outside of a function", pos)


class UnsupportedOperator(EvalError):
    def __init__(self, op: str, kind: str, pos: Pos | None = None):
        super().__init__(f"unsupported operator '{op}' for {kind}", pos)
        self.op = op
        self.kind = kind


class UnsupportedArgumentType(EvalError):
    def __init__(self, function: str, kind: str, pos: Pos | None = None):
        super().__init__(f"argument to '{function}' not supported, got {kind}", pos)
        self.function = function
        self.kind = kind


class InvalidIndexUsage(EvalError):
    def __init__(self, kind: str, pos: Pos | None = None):
        super().__init__(f"index operator not supported on {kind}", pos)
        self.kind = kind


class InvalidIndexType(EvalError):
    def __init__(self, collection: str, kind: str, pos: Pos | None = None):
        super().__init__(f"cannot index {collection} with {kind}", pos)
        self.collection = collection
        self.kind = kind


class IndexOutOfBounds(EvalError):
    def __init__(self, length: int, index: int, pos: Pos | None = None):
        super().__init__(f"index out of bounds: length is {length}, index is {index}", pos)
        self.length = length
        self.index = index


class ValueNotFound(EvalError):
    def __init__(self, key: str, pos: Pos | None = None):
        super().__init__(f"key not found: '{key}'", pos)
        self.key = key


class ParsingError(EvalError):
    """A parser failure, surfaced through evaluation."""

    def __init__(self, error: ParserError):
        super().__init__(str(error))
        self.error = error
        self.pos = error.pos


# ============================================================
# Integer arithmetic (signed 32-bit)
# ============================================================


def _wrap_i32(n: int) -> int:
    return (n + 2**31) % 2**32 - 2**31


def _int_divmod_trunc(a: int, b: int) -> tuple[int, int]:
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    r = a - q * b
    return (q, r)


def _cmp(op: str, a: object, b: object) -> bool:
    if op == "==":
        return a == b
    if op == "!=":
        return a != b
    if op == "<":
        return a < b
    if op == "<=":
        return a <= b
    if op == ">":
        return a > b
    if op == ">=":
        return a >= b
    raise AssertionError(op)


COMPARE_OPS: set[str] = {"==", "!=", "<", "<=", ">", ">="}


# ============================================================
# Evaluator
# ============================================================


class Evaluator:
    """Evaluates one source text against a single root scope.

    `env` is the current-scope cursor: entering a block or a call points it
    at a fresh child scope, and leaving always restores the previous one.
    """

    def __init__(self, source: str, *, stdout: TextIO | None = None):
        self.parser: Parser = Parser(Lexer(source))
        self.root: Environment = Environment()
        self.env: Environment = self.root
        self._stdout = stdout
        self._call_depth = 0

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def load(self, source: str) -> None:
        """Replace the pending source, keeping every top-level binding."""
        self.parser = Parser(Lexer(source))

    def eval_program(self) -> list[Value]:
        try:
            program = self.parser.parse_program()
        except ParserError as e:
            raise ParsingError(e) from e
        results: list[Value] = []
        for st in program.statements:
            results.append(self._eval_statement(st))
        return results

    # ---- Statements --------------------------------------------------------

    def _eval_statement(self, st: Statement) -> Value:
        if isinstance(st, VarStatement):
            value = self._eval_expr(st.value)
            if isinstance(value, ReturnValue):
                return value
            self.env.set(st.name, value)
            return UNIT

        if isinstance(st, ReturnStatement):
            if self._call_depth == 0:
                raise ReturnOutsideExpression(st.pos)
            return ReturnValue(unwrap_return(self._eval_expr(st.value)))

        if isinstance(st, ExpressionStatement):
            return self._eval_expr(st.expr)

        if isinstance(st, BlockStatement):
            return self._eval_block(st.statements, self.env.child())

        raise TypeError("unsupported statement: " + type(st).__name__)

    def _eval_block(self, statements: list[Statement], scope: Environment) -> Value:
        previous = self.env
        self.env = scope
        try:
            result: Value = UNIT
            for st in statements:
                result = self._eval_statement(st)
                if isinstance(result, ReturnValue):
                    break
            return result
        finally:
            self.env = previous

    # ---- Expressions -------------------------------------------------------

    def _eval_expr(self, expr: Expression) -> Value:
        if isinstance(expr, IntegerLiteral):
            return IntegerValue(expr.value)
        if isinstance(expr, BooleanLiteral):
            return BooleanValue(expr.value)
        if isinstance(expr, StringLiteral):
            return StringValue(expr.value)

        if isinstance(expr, Identifier):
            try:
                return self.env.get(expr.name)
            except NotFound:
                if expr.name in _BUILTINS:
                    return BuiltinValue(expr.name)
                raise IdentifierNotFound(expr.name, expr.pos) from None

        if isinstance(expr, GroupedExpression):
            return self._eval_expr(expr.inner)

        if isinstance(expr, ArrayLiteral):
            elements = self._eval_all(expr.elements)
            if isinstance(elements, ReturnValue):
                return elements
            return ArrayValue(elements)

        if isinstance(expr, MapLiteral):
            values = self._eval_all(list(expr.entries.values()))
            if isinstance(values, ReturnValue):
                return values
            return MapValue(dict(zip(expr.entries, values)))

        if isinstance(expr, UnaryExpression):
            operand = self._eval_expr(expr.operand)
            if isinstance(operand, ReturnValue):
                return operand
            return self._eval_unary(expr.op, operand, pos=expr.pos)

        if isinstance(expr, BinaryExpression):
            if expr.op == "&&" or expr.op == "||":
                return self._eval_logical(expr)
            operands = self._eval_all([expr.left, expr.right])
            if isinstance(operands, ReturnValue):
                return operands
            left, right = operands
            return self._eval_binary(expr.op, left, right, pos=expr.pos)

        if isinstance(expr, IndexExpression):
            parts = self._eval_all([expr.collection, expr.index])
            if isinstance(parts, ReturnValue):
                return parts
            coll, idx = parts
            return self._eval_index(coll, idx, pos=expr.pos)

        if isinstance(expr, IfExpression):
            cond = self._eval_expr(expr.condition)
            if isinstance(cond, ReturnValue):
                return cond
            if not isinstance(cond, BooleanValue):
                raise TypeMismatch(
                    f"if condition must be a boolean, got {cond.kind()}", expr.pos
                )
            if cond.value:
                return self._eval_statement(expr.consequence)
            if expr.alternative is not None:
                return self._eval_statement(expr.alternative)
            return UNIT

        if isinstance(expr, FunctionExpression):
            closure = Closure(list(expr.parameters), expr.body, self.env)
            logger.debug(
                "closure created: params=(%s) env=%#x",
                ", ".join(closure.parameters),
                id(self.env),
            )
            return FunctionValue(closure)

        if isinstance(expr, CallExpression):
            return self._eval_call(expr)

        raise TypeError("unsupported expression: " + type(expr).__name__)

    def _eval_all(self, exprs: list[Expression]) -> list[Value] | ReturnValue:
        """Evaluate left to right, stopping at the first `return` reached."""
        values: list[Value] = []
        for e in exprs:
            v = self._eval_expr(e)
            if isinstance(v, ReturnValue):
                return v
            values.append(v)
        return values

    def _eval_logical(self, expr: BinaryExpression) -> Value:
        left = self._eval_expr(expr.left)
        if isinstance(left, ReturnValue):
            return left
        if not isinstance(left, BooleanValue):
            raise TypeMismatch(
                f"'{expr.op}' needs boolean operands, got {left.kind()}", expr.pos
            )
        if expr.op == "&&" and not left.value:
            return left
        if expr.op == "||" and left.value:
            return left
        right = self._eval_expr(expr.right)
        if isinstance(right, ReturnValue):
            return right
        if not isinstance(right, BooleanValue):
            raise TypeMismatch(
                f"'{expr.op}' needs boolean operands, got {right.kind()}", expr.pos
            )
        return right

    def _eval_unary(self, op: str, operand: Value, *, pos: Pos) -> Value:
        if op == "!":
            if isinstance(operand, BooleanValue):
                return BooleanValue(not operand.value)
            if isinstance(operand, IntegerValue):
                return IntegerValue(~operand.value)
        elif op == "-":
            if isinstance(operand, IntegerValue):
                return IntegerValue(_wrap_i32(-operand.value))
        raise UnsupportedOperator(op, operand.kind(), pos)

    def _eval_binary(self, op: str, left: Value, right: Value, *, pos: Pos) -> Value:
        if type(left) is not type(right):
            raise TypeMismatch(
                f"cannot apply '{op}' to {left.kind()} and {right.kind()}", pos
            )

        if isinstance(left, IntegerValue) and isinstance(right, IntegerValue):
            a = left.value
            b = right.value
            if op in COMPARE_OPS:
                return BooleanValue(_cmp(op, a, b))
            if op == "+":
                return IntegerValue(_wrap_i32(a + b))
            if op == "-":
                return IntegerValue(_wrap_i32(a - b))
            if op == "*":
                return IntegerValue(_wrap_i32(a * b))
            if op == "/":
                if b == 0:
                    raise DivisionByZero(pos)
                q, _ = _int_divmod_trunc(a, b)
                return IntegerValue(_wrap_i32(q))
            if op == "%":
                if b == 0:
                    raise ModuloByZero(pos)
                _, r = _int_divmod_trunc(a, b)
                return IntegerValue(r)

        if isinstance(left, BooleanValue) and isinstance(right, BooleanValue):
            if op in COMPARE_OPS:
                return BooleanValue(_cmp(op, left.value, right.value))

        if isinstance(left, StringValue) and isinstance(right, StringValue):
            if op == "+":
                return StringValue(left.value + right.value)

        raise UnsupportedOperator(op, left.kind(), pos)

    def _eval_index(self, coll: Value, idx: Value, *, pos: Pos) -> Value:
        if isinstance(coll, ArrayValue):
            if not isinstance(idx, IntegerValue):
                raise InvalidIndexType(coll.kind(), idx.kind(), pos)
            i = idx.value
            if i < 0 or i >= len(coll.elements):
                raise IndexOutOfBounds(len(coll.elements), i, pos)
            return coll.elements[i]
        if isinstance(coll, MapValue):
            if not isinstance(idx, StringValue):
                raise InvalidIndexType(coll.kind(), idx.kind(), pos)
            if idx.value not in coll.entries:
                raise ValueNotFound(idx.value, pos)
            return coll.entries[idx.value]
        raise InvalidIndexUsage(coll.kind(), pos)

    # ---- Calls -------------------------------------------------------------

    def _eval_call(self, call: CallExpression) -> Value:
        # A bare built-in name wins over any user binding of the same name.
        if isinstance(call.callee, Identifier) and call.callee.name in _BUILTINS:
            args = self._eval_all(call.arguments)
            if isinstance(args, ReturnValue):
                return args
            return self._call_builtin(call.callee.name, args, call.pos)

        fnv = self._eval_expr(call.callee)
        if isinstance(fnv, ReturnValue):
            return fnv
        if isinstance(fnv, FunctionValue):
            closure = fnv.closure
            if len(call.arguments) != len(closure.parameters):
                raise FunctionCallWrongArity(
                    len(closure.parameters), len(call.arguments), call.pos
                )
            args = self._eval_all(call.arguments)
            if isinstance(args, ReturnValue):
                return args
            return self._call_closure(closure, args)
        if isinstance(fnv, BuiltinValue):
            args = self._eval_all(call.arguments)
            if isinstance(args, ReturnValue):
                return args
            return self._call_builtin(fnv.name, args, call.pos)
        raise FunctionNotFound(
            f"{to_source(call.callee)} is {fnv.kind()}", call.pos
        )

    def _call_closure(self, closure: Closure, args: list[Value]) -> Value:
        call_env = closure.env.child()
        for name, value in zip(closure.parameters, args):
            call_env.set(name, value)
        logger.debug(
            "call fn(%s) depth=%d", ", ".join(closure.parameters), self._call_depth + 1
        )
        body = closure.body
        statements = body.statements if isinstance(body, BlockStatement) else [body]
        self._call_depth += 1
        try:
            result = self._eval_block(statements, call_env)
        finally:
            self._call_depth -= 1
        return unwrap_return(result)

    def _call_builtin(self, name: str, args: list[Value], pos: Pos) -> Value:
        return _BUILTINS[name](self, args, pos)

    def write(self, text: str) -> None:
        self.stdout.write(text)


# ============================================================
# Built-ins
# ============================================================


def _check_arity(args: list[Value], expected: int, pos: Pos) -> None:
    if len(args) != expected:
        raise FunctionCallWrongArity(expected, len(args), pos)


def _output_text(v: Value) -> str:
    if isinstance(v, StringValue):
        return v.value
    return v.to_string()


def _bi_len(ev: Evaluator, args: list[Value], pos: Pos) -> Value:
    _check_arity(args, 1, pos)
    x = args[0]
    if isinstance(x, StringValue):
        return IntegerValue(len(x.value))
    if isinstance(x, ArrayValue):
        return IntegerValue(len(x.elements))
    if isinstance(x, MapValue):
        return IntegerValue(len(x.entries))
    raise UnsupportedArgumentType("len", x.kind(), pos)


def _bi_append(ev: Evaluator, args: list[Value], pos: Pos) -> Value:
    if len(args) < 2:
        raise FunctionCallWrongArity(2, len(args), pos, at_least=True)
    arr = args[0]
    if not isinstance(arr, ArrayValue):
        raise UnsupportedArgumentType("append", arr.kind(), pos)
    return ArrayValue(arr.elements + args[1:])


def _bi_rest(ev: Evaluator, args: list[Value], pos: Pos) -> Value:
    _check_arity(args, 1, pos)
    arr = args[0]
    if not isinstance(arr, ArrayValue):
        raise UnsupportedArgumentType("rest", arr.kind(), pos)
    return ArrayValue(arr.elements[1:])


def _bi_print(ev: Evaluator, args: list[Value], pos: Pos) -> Value:
    ev.write(" ".join(_output_text(a) for a in args))
    return UNIT


def _bi_println(ev: Evaluator, args: list[Value], pos: Pos) -> Value:
    ev.write(" ".join(_output_text(a) for a in args) + "\n")
    return UNIT


_BUILTINS: dict[str, Callable[[Evaluator, list[Value], Pos], Value]] = {
    "len": _bi_len,
    "append": _bi_append,
    "rest": _bi_rest,
    "print": _bi_print,
    "println": _bi_println,
}

