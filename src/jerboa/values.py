"""Jerboa runtime values."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import BlockStatement, Statement
from .emit import quote_string, to_source
from .environment import Environment


class Value:
    """A runtime value. `kind()` names the variant in error messages."""

    def kind(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class IntegerValue(Value):
    value: int  # signed 32-bit

    def kind(self) -> str:
        return "integer"

    def to_string(self) -> str:
        return str(self.value)


@dataclass
class BooleanValue(Value):
    value: bool

    def kind(self) -> str:
        return "boolean"

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class StringValue(Value):
    value: str

    def kind(self) -> str:
        return "string"

    def to_string(self) -> str:
        return quote_string(self.value)


@dataclass
class ArrayValue(Value):
    elements: list[Value]

    def kind(self) -> str:
        return "array"

    def to_string(self) -> str:
        inner = ", ".join(v.to_string() for v in self.elements)
        return f"[{inner}]"


@dataclass
class MapValue(Value):
    entries: dict[str, Value]

    def kind(self) -> str:
        return "map"

    def to_string(self) -> str:
        parts: list[str] = []
        for k, v in self.entries.items():
            parts.append(f"{quote_string(k)}: {v.to_string()}")
        return "{" + ", ".join(parts) + "}"


@dataclass(eq=False)
class Closure:
    """A function body paired with the scope it was created in.

    `env` is fixed at creation; every call binds its arguments in a fresh
    child of it.
    """

    parameters: list[str]
    body: Statement
    env: Environment

    def to_string(self) -> str:
        params = ", ".join(self.parameters)
        if isinstance(self.body, BlockStatement):
            inner = "".join(to_source(s) for s in self.body.statements)
        else:
            inner = to_source(self.body)
        if inner == "":
            return f"fn({params}) {{ }}"
        return f"fn({params}) {{ {inner} }}"


@dataclass
class FunctionValue(Value):
    # Closures compare by identity, so two function values are equal only
    # when they came from the same evaluation of a fn expression.
    closure: Closure

    def kind(self) -> str:
        return "function"

    def to_string(self) -> str:
        return self.closure.to_string()


@dataclass
class BuiltinValue(Value):
    name: str

    def kind(self) -> str:
        return "builtin"

    def to_string(self) -> str:
        return f"builtin({self.name})"


@dataclass
class ReturnValue(Value):
    """Marks a value propagating out of a `return`. Never escapes a call."""

    value: Value

    def kind(self) -> str:
        return self.value.kind()

    def to_string(self) -> str:
        return self.value.to_string()


@dataclass
class UnitValue(Value):
    def kind(self) -> str:
        return "unit"

    def to_string(self) -> str:
        return "()"


UNIT = UnitValue()


def unwrap_return(v: Value) -> Value:
    return v.value if isinstance(v, ReturnValue) else v
