"""Tests for scope chains."""

import pytest

from jerboa.environment import Environment, NotFound
from jerboa.values import IntegerValue


def test_get_after_set():
    env = Environment()
    env.set("x", IntegerValue(1))
    assert env.get("x") == IntegerValue(1)


def test_lookup_walks_outward():
    root = Environment()
    root.set("x", IntegerValue(1))
    inner = root.child().child()
    assert inner.get("x") == IntegerValue(1)


def test_set_shadows_without_changing_outer():
    root = Environment()
    root.set("x", IntegerValue(1))
    inner = root.child()
    inner.set("x", IntegerValue(2))
    assert inner.get("x") == IntegerValue(2)
    assert root.get("x") == IntegerValue(1)


def test_child_sees_later_outer_bindings():
    root = Environment()
    inner = root.child()
    root.set("late", IntegerValue(3))
    assert inner.get("late") == IntegerValue(3)


def test_siblings_do_not_see_each_other():
    root = Environment()
    a = root.child()
    b = root.child()
    a.set("x", IntegerValue(1))
    with pytest.raises(NotFound):
        b.get("x")


def test_not_found_carries_name():
    with pytest.raises(NotFound) as exc_info:
        Environment().get("missing")
    assert exc_info.value.name == "missing"
    assert "missing" in str(exc_info.value)


def test_outer_reference():
    root = Environment()
    assert root.outer is None
    assert root.child().outer is root


def test_repr_lists_names():
    env = Environment()
    env.set("b", IntegerValue(1))
    env.set("a", IntegerValue(2))
    assert repr(env) == "<Environment [a, b] outer=False>"
