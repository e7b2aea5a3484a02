"""Tests for runtime value display and equality."""

from jerboa.ast import BlockStatement
from jerboa.environment import Environment
from jerboa.values import (
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
    unwrap_return,
)


def test_display():
    assert IntegerValue(-3).to_string() == "-3"
    assert BooleanValue(True).to_string() == "true"
    assert StringValue('say "hi"\n').to_string() == '"say \\"hi\\"\\n"'
    assert ArrayValue([IntegerValue(1), StringValue("a")]).to_string() == '[1, "a"]'
    assert MapValue({"k": BooleanValue(False)}).to_string() == '{"k": false}'
    assert BuiltinValue("len").to_string() == "builtin(len)"
    assert UNIT.to_string() == "()"
    assert str(IntegerValue(7)) == "7"


def test_kinds():
    assert IntegerValue(1).kind() == "integer"
    assert BooleanValue(True).kind() == "boolean"
    assert StringValue("").kind() == "string"
    assert ArrayValue([]).kind() == "array"
    assert MapValue({}).kind() == "map"
    assert BuiltinValue("rest").kind() == "builtin"
    assert UNIT.kind() == "unit"


def test_structural_equality():
    assert ArrayValue([IntegerValue(1)]) == ArrayValue([IntegerValue(1)])
    assert MapValue({"a": IntegerValue(1)}) == MapValue({"a": IntegerValue(1)})
    assert IntegerValue(1) != BooleanValue(True)


def test_closures_compare_by_identity():
    env = Environment()
    body = BlockStatement(None, [])
    a = FunctionValue(Closure(["x"], body, env))
    b = FunctionValue(Closure(["x"], body, env))
    assert a == a
    assert a != b
    assert a.to_string() == "fn(x) { }"


def test_return_value_is_transparent_for_display():
    wrapped = ReturnValue(IntegerValue(5))
    assert wrapped.to_string() == "5"
    assert wrapped.kind() == "integer"
    assert unwrap_return(wrapped) == IntegerValue(5)
    assert unwrap_return(IntegerValue(6)) == IntegerValue(6)
