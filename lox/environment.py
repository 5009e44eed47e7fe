"""Runtime variable scopes."""

from __future__ import annotations

from typing import Any

from lox.errors import LoxRuntimeError
from lox.tokens import Token


class Environment:
    """One lexical scope: a name-to-value mapping linked to its enclosing scope.

    Closures hold a reference to the environment they were declared in, so an
    environment may be shared by several function values; writes through one
    are visible through all of them.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.enclosing = enclosing
        self.values: dict[str, Any] = {}

    def define(self, name: str, value: Any) -> None:
        """Bind ``name`` in this scope, replacing any existing binding."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look ``name`` up here, then in enclosing scopes."""
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.", code="RUN002")

    def assign(self, name: Token, value: Any) -> None:
        """Overwrite the nearest existing binding of ``name``."""
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.", code="RUN002")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise ValueError(f"Resolved distance {distance} exceeds the scope chain.")
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        """Read ``name`` from the scope exactly ``distance`` hops up."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        """Write ``name`` in the scope exactly ``distance`` hops up."""
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(depth={depth}, names={sorted(self.values)})"
