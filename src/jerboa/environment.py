"""Jerboa scopes — a chain of binding maps, innermost first."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .values import Value


class NotFound(LookupError):
    """Name is bound nowhere in the scope chain."""

    def __init__(self, name: str):
        super().__init__(f"unknown name '{name}'")
        self.name = name


class Environment:
    """One scope. Holds a reference to its enclosing scope, never to children.

    Closures keep the scope they were created in alive for as long as the
    closure itself is reachable.
    """

    def __init__(self, outer: Environment | None = None) -> None:
        self.bindings: dict[str, Value] = {}
        self.outer: Environment | None = outer

    def child(self) -> Environment:
        return Environment(self)

    def get(self, name: str) -> Value:
        env: Environment | None = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.outer
        raise NotFound(name)

    def set(self, name: str, value: Value) -> None:
        """Bind in this scope only; outer bindings are shadowed, not changed."""
        self.bindings[name] = value

    def __repr__(self) -> str:
        names = ", ".join(sorted(self.bindings))
        return f"<Environment [{names}] outer={self.outer is not None}>"
