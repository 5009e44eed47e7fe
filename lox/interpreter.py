"""Tree-walking evaluator for resolved Lox programs."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from lox.ast import (
    AssignExpr,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    ClassStmt,
    Expr,
    ExpressionStmt,
    FunctionStmt,
    GetExpr,
    GroupingExpr,
    IfStmt,
    LiteralExpr,
    LogicalExpr,
    PrintStmt,
    ReturnStmt,
    SetExpr,
    Stmt,
    SuperExpr,
    ThisExpr,
    UnaryExpr,
    VarStmt,
    VariableExpr,
    WhileStmt,
)
from lox.environment import Environment
from lox.errors import LoxRuntimeError, StackOverflowError
from lox.resolver import Resolutions
from lox.runtime import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    is_equal,
    is_truthy,
    native_globals,
    stringify,
)
from lox.tokens import Token, TokenType


@dataclass(frozen=True)
class ReturnSignal:
    """Outcome of a statement that executed ``return``.

    Statement execution yields ``None`` for normal completion or one of
    these; blocks and loops stop at the first signal and hand it outward
    until the enclosing function call consumes it.
    """

    value: Any


class Interpreter:
    """Executes statements against a chain of environments."""

    def __init__(self, stdout: TextIO | None = None, max_call_depth: int | None = None) -> None:
        self.globals = Environment()
        self._environment = self.globals
        self._locals: Resolutions = {}
        self._stdout = stdout
        self.max_call_depth = max_call_depth
        self._call_depth = 0
        self._last_call: Token | None = None

        for name, native in native_globals().items():
            self.globals.define(name, native)

    def resolve(self, resolutions: Resolutions) -> None:
        """Record scope distances produced by the resolver."""
        self._locals.update(resolutions)

    def interpret(self, statements: list[Stmt]) -> LoxRuntimeError | None:
        """Run a program, stopping at the first runtime error.

        The error is returned rather than raised so the caller can report it;
        output already produced stays produced.
        """
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as err:
            return err
        except RecursionError:
            self._environment = self.globals
            self._call_depth = 0
            token = self._last_call or Token(TokenType.EOF, "", None, 0)
            return StackOverflowError(token)
        return None

    # -- statements -----------------------------------------------------

    def execute(self, stmt: Stmt) -> ReturnSignal | None:
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression)
            return None

        if isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expression)
            print(stringify(value), file=self._stdout or sys.stdout)
            return None

        if isinstance(stmt, VarStmt):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self._environment.define(stmt.name.lexeme, value)
            return None

        if isinstance(stmt, BlockStmt):
            return self.execute_block(stmt.statements, Environment(self._environment))

        if isinstance(stmt, IfStmt):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None

        if isinstance(stmt, WhileStmt):
            while is_truthy(self.evaluate(stmt.condition)):
                signal = self.execute(stmt.body)
                if signal is not None:
                    return signal
            return None

        if isinstance(stmt, FunctionStmt):
            function = LoxFunction(stmt, self._environment)
            self._environment.define(stmt.name.lexeme, function)
            return None

        if isinstance(stmt, ReturnStmt):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(value)

        if isinstance(stmt, ClassStmt):
            self._execute_class(stmt)
            return None

        raise TypeError(f"Unsupported statement type '{type(stmt).__name__}'.")

    def execute_block(self, statements: tuple[Stmt, ...] | list[Stmt], env: Environment) -> ReturnSignal | None:
        """Run ``statements`` inside ``env``, restoring the caller's scope afterward."""
        previous = self._environment
        self._environment = env
        try:
            for stmt in statements:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
            return None
        finally:
            self._environment = previous

    def _execute_class(self, stmt: ClassStmt) -> None:
        superclass: LoxClass | None = None
        if stmt.superclass is not None:
            value = self.evaluate(stmt.superclass)
            if not isinstance(value, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.", code="RUN007")
            superclass = value

        self._environment.define(stmt.name.lexeme, None)

        method_env = self._environment
        if superclass is not None:
            method_env = Environment(self._environment)
            method_env.define("super", superclass)

        methods = {
            method.name.lexeme: LoxFunction(method, method_env, is_initializer=method.name.lexeme == "init")
            for method in stmt.methods
        }
        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self._environment.assign(stmt.name, klass)

    # -- expressions ----------------------------------------------------

    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, LiteralExpr):
            return expr.value

        if isinstance(expr, VariableExpr):
            return self._look_up_variable(expr.name, expr)

        if isinstance(expr, AssignExpr):
            value = self.evaluate(expr.value)
            distance = self._locals.get(expr)
            if distance is None:
                self.globals.assign(expr.name, value)
            else:
                self._environment.assign_at(distance, expr.name, value)
            return value

        if isinstance(expr, BinaryExpr):
            return self._evaluate_binary(expr)

        if isinstance(expr, LogicalExpr):
            left = self.evaluate(expr.left)
            if expr.operator.token_type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, UnaryExpr):
            right = self.evaluate(expr.right)
            if expr.operator.token_type == TokenType.BANG:
                return not is_truthy(right)
            if expr.operator.token_type == TokenType.MINUS:
                _check_number_operand(expr.operator, right)
                return -right
            raise TypeError(f"Unsupported unary operator '{expr.operator.lexeme}'.")

        if isinstance(expr, GroupingExpr):
            return self.evaluate(expr.expression)

        if isinstance(expr, CallExpr):
            return self._evaluate_call(expr)

        if isinstance(expr, GetExpr):
            obj = self.evaluate(expr.obj)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.", code="RUN005")

        if isinstance(expr, SetExpr):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.", code="RUN005")
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, ThisExpr):
            return self._look_up_variable(expr.keyword, expr)

        if isinstance(expr, SuperExpr):
            return self._evaluate_super(expr)

        raise TypeError(f"Unsupported expression type '{type(expr).__name__}'.")

    def _evaluate_binary(self, expr: BinaryExpr) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator
        kind = op.token_type

        if kind == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind == TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(
                op,
                "Operands of '+' must be two numbers or two strings.",
                code="RUN003",
            )

        _check_number_operands(op, left, right)
        if kind == TokenType.MINUS:
            return left - right
        if kind == TokenType.STAR:
            return left * right
        if kind == TokenType.SLASH:
            return _divide(left, right)
        if kind == TokenType.GREATER:
            return left > right
        if kind == TokenType.GREATER_EQUAL:
            return left >= right
        if kind == TokenType.LESS:
            return left < right
        if kind == TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"Unsupported binary operator '{op.lexeme}'.")

    def _evaluate_call(self, expr: CallExpr) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.", code="RUN004")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
                code="RUN008",
            )

        self._last_call = expr.paren
        if self.max_call_depth is not None and self._call_depth >= self.max_call_depth:
            raise StackOverflowError(expr.paren)
        self._call_depth += 1
        try:
            return callee.call(self, arguments)
        finally:
            self._call_depth -= 1

    def _evaluate_super(self, expr: SuperExpr) -> Any:
        distance = self._locals[expr]
        superclass = self._environment.get_at(distance, "super")
        # The `this` scope always sits directly inside the `super` scope.
        instance = self._environment.get_at(distance - 1, "this")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.", code="RUN006")
        return method.bind(instance)

    def _look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self._locals.get(expr)
        if distance is None:
            return self.globals.get(name)
        return self._environment.get_at(distance, name.lexeme)


def _check_number_operand(operator: Token, operand: Any) -> None:
    if isinstance(operand, float):
        return
    raise LoxRuntimeError(operator, f"Operand of '{operator.lexeme}' must be a number.", code="RUN003")


def _check_number_operands(operator: Token, left: Any, right: Any) -> None:
    if isinstance(left, float) and isinstance(right, float):
        return
    raise LoxRuntimeError(operator, f"Operands of '{operator.lexeme}' must be numbers.", code="RUN003")


def _divide(left: float, right: float) -> float:
    try:
        return left / right
    except ZeroDivisionError:
        # IEEE 754 semantics: x/0 is a signed infinity, 0/0 is NaN.
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
