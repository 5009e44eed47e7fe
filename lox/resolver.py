"""Static scope resolution for Lox ASTs.

The resolver walks the tree once before execution and records, for every
local variable reference, how many scopes separate the use from its
declaration. Names that are not found in any enclosing block scope are left
out of the table and treated as globals by the interpreter.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Iterable

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
from lox.errors import ResolveError, where_for
from lox.tokens import Token


Resolutions = dict[Expr, int]


class FunctionType(Enum):
    """Kind of function body currently being resolved."""

    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    """Kind of class body currently being resolved."""

    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Computes scope distances and checks structural rules."""

    def __init__(self) -> None:
        self.errors: list[ResolveError] = []
        self._scopes: list[dict[str, bool]] = []
        self._locals: Resolutions = {}
        self._pending_globals: set[str] = set()
        self._defined_globals: set[str] = set()
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE

    def resolve(self, statements: list[Stmt], defined_globals: Iterable[str] = ()) -> Resolutions:
        """Resolve a program and return its expression-to-distance table.

        Each call starts from a clean state, so resolving the same statements
        twice yields an equal table and the same diagnostics. Names in
        ``defined_globals`` already hold a value at run time, as do names
        declared by earlier top-level statements.
        """
        self.errors = []
        self._scopes = []
        self._locals = {}
        self._pending_globals = set()
        self._defined_globals = set(defined_globals)
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE
        self._resolve_all(statements)
        return dict(self._locals)

    def _resolve_all(self, statements: tuple[Stmt, ...] | list[Stmt]) -> None:
        for stmt in statements:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, BlockStmt):
            self._begin_scope()
            self._resolve_all(stmt.statements)
            self._end_scope()
            return

        if isinstance(stmt, VarStmt):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                if not self._scopes and stmt.name.lexeme not in self._defined_globals:
                    self._pending_globals.add(stmt.name.lexeme)
                self._resolve_expr(stmt.initializer)
                self._pending_globals.discard(stmt.name.lexeme)
            self._define(stmt.name)
            return

        if isinstance(stmt, FunctionStmt):
            # Defined before the body so the function can recurse.
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt, FunctionType.FUNCTION)
            return

        if isinstance(stmt, ClassStmt):
            self._resolve_class(stmt)
            return

        if isinstance(stmt, (ExpressionStmt, PrintStmt)):
            self._resolve_expr(stmt.expression)
            return

        if isinstance(stmt, IfStmt):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
            return

        if isinstance(stmt, WhileStmt):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
            return

        if isinstance(stmt, ReturnStmt):
            if self._current_function == FunctionType.NONE:
                self._error(stmt.keyword, "Can't return from top-level code.", "RES003")
            if stmt.value is not None:
                if self._current_function == FunctionType.INITIALIZER:
                    self._error(stmt.keyword, "Can't return a value from an initializer.", "RES004")
                self._resolve_expr(stmt.value)
            return

        raise TypeError(f"Unsupported statement type '{type(stmt).__name__}'.")

    def _resolve_class(self, stmt: ClassStmt) -> None:
        enclosing_class = self._current_class
        self._current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class can't inherit from itself.", "RES007")
            self._current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)
            self._begin_scope()
            self._scopes[-1]["super"] = True

        self._begin_scope()
        self._scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self._resolve_function(method, kind)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self._current_class = enclosing_class

    def _resolve_function(self, function: FunctionStmt, kind: FunctionType) -> None:
        enclosing_function = self._current_function
        self._current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        self._resolve_all(function.body)
        self._end_scope()

        self._current_function = enclosing_function

    def _resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, VariableExpr):
            if self._scopes:
                uninitialized = self._scopes[-1].get(expr.name.lexeme) is False
            else:
                uninitialized = expr.name.lexeme in self._pending_globals
            if uninitialized:
                self._error(expr.name, "Can't read local variable in its own initializer.", "RES002")
            self._resolve_local(expr, expr.name)
            return

        if isinstance(expr, AssignExpr):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
            return

        if isinstance(expr, (BinaryExpr, LogicalExpr)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
            return

        if isinstance(expr, UnaryExpr):
            self._resolve_expr(expr.right)
            return

        if isinstance(expr, GroupingExpr):
            self._resolve_expr(expr.expression)
            return

        if isinstance(expr, CallExpr):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
            return

        if isinstance(expr, GetExpr):
            self._resolve_expr(expr.obj)
            return

        if isinstance(expr, SetExpr):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.obj)
            return

        if isinstance(expr, ThisExpr):
            if self._current_class == ClassType.NONE:
                self._error(expr.keyword, "Can't use 'this' outside of a class.", "RES005")
                return
            self._resolve_local(expr, expr.keyword)
            return

        if isinstance(expr, SuperExpr):
            if self._current_class == ClassType.NONE:
                self._error(expr.keyword, "Can't use 'super' outside of a class.", "RES006")
            elif self._current_class != ClassType.SUBCLASS:
                self._error(expr.keyword, "Can't use 'super' in a class with no superclass.", "RES006")
            self._resolve_local(expr, expr.keyword)
            return

        if isinstance(expr, LiteralExpr):
            return

        raise TypeError(f"Unsupported expression type '{type(expr).__name__}'.")

    def _resolve_local(self, expr: Expr, name: Token) -> None:
        for distance, scope in enumerate(reversed(self._scopes)):
            if name.lexeme in scope:
                self._locals[expr] = distance
                return

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: Token) -> None:
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in this scope.", "RES001")
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self._scopes:
            self._defined_globals.add(name.lexeme)
            return
        self._scopes[-1][name.lexeme] = True

    def _error(self, token: Token, message: str, code: str) -> None:
        self.errors.append(ResolveError(code=code, message=message, line=token.line, where=where_for(token)))
