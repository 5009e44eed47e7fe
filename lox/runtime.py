"""Runtime value model: callables, classes, instances and value helpers."""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from lox.ast import FunctionStmt
from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.tokens import Token

if TYPE_CHECKING:
    from lox.interpreter import Interpreter


class LoxCallable(ABC):
    """Anything that can appear as the callee of a call expression.

    Implemented by exactly three kinds: user functions, classes and native
    functions.
    """

    @abstractmethod
    def arity(self) -> int:
        """Number of arguments the callable accepts."""

    @abstractmethod
    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        """Invoke with already-evaluated arguments."""


class LoxFunction(LoxCallable):
    """User-defined function or method closed over its defining scope."""

    def __init__(self, declaration: FunctionStmt, closure: Environment, is_initializer: bool = False) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance: LoxInstance) -> LoxFunction:
        """Return a copy of this method with ``this`` bound to ``instance``."""
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        env = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            env.define(param.lexeme, argument)

        signal = interpreter.execute_block(self.declaration.body, env)

        # Initializers always yield the instance, even on a bare `return;`.
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if signal is not None:
            return signal.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    """A class value; calling it constructs an instance."""

    def __init__(self, name: str, superclass: LoxClass | None, methods: dict[str, LoxFunction]) -> None:
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> LoxFunction | None:
        """Look up a method on this class, then up the superclass chain."""
        klass: LoxClass | None = self
        while klass is not None:
            method = klass.methods.get(name)
            if method is not None:
                return method
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


class LoxInstance:
    """An object created by calling a class; owns its field mapping."""

    def __init__(self, klass: LoxClass) -> None:
        self.klass = klass
        self.fields: dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        """Read a field, falling back to a method bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.", code="RUN006")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"


class NativeFunction(LoxCallable):
    """Host-implemented function exposed in the global scope."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Any]) -> None:
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        return self._fn(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


def native_globals() -> dict[str, NativeFunction]:
    """Natives injected into every interpreter's global scope."""
    return {
        "clock": NativeFunction("clock", 0, time.time),
    }


def is_truthy(value: Any) -> bool:
    """Only ``nil`` and ``false`` are falsy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Lox equality: never coerces across types, ``nil == nil``, ``NaN == NaN``."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # bool is an int subclass in Python; keep `true == 1` false.
    if type(a) is not type(b):
        return False
    if isinstance(a, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def stringify(value: Any) -> str:
    """Display form used by ``print``."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            if value == 0 and math.copysign(1.0, value) < 0:
                return "-0"
            return str(int(value))
        return repr(value)
    return str(value)
