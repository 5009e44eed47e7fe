"""AST model for Lox source programs.

Nodes are frozen and compare by identity (``eq=False``): the resolver keys its
scope-distance table on the node object itself, so two structurally equal
variable references in different places stay distinct.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lox.tokens import Token


@dataclass(frozen=True, eq=False)
class Expr:
    """Base class for expression nodes."""


@dataclass(frozen=True, eq=False)
class Stmt:
    """Base class for statement nodes."""


@dataclass(frozen=True, eq=False)
class LiteralExpr(Expr):
    """Literal value expression (number/string/bool/nil)."""

    value: Any


@dataclass(frozen=True, eq=False)
class VariableExpr(Expr):
    """Variable read."""

    name: Token


@dataclass(frozen=True, eq=False)
class AssignExpr(Expr):
    """Assignment to an existing variable."""

    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class LogicalExpr(Expr):
    """Short-circuiting ``and`` / ``or``."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class BinaryExpr(Expr):
    """Binary operator expression."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class UnaryExpr(Expr):
    """Unary operator expression."""

    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class GroupingExpr(Expr):
    """Parenthesized expression."""

    expression: Expr


@dataclass(frozen=True, eq=False)
class CallExpr(Expr):
    """Call expression; ``paren`` is the closing parenthesis used for error lines."""

    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]


@dataclass(frozen=True, eq=False)
class GetExpr(Expr):
    """Property read ``obj.name``."""

    obj: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class SetExpr(Expr):
    """Property write ``obj.name = value``."""

    obj: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class ThisExpr(Expr):
    keyword: Token


@dataclass(frozen=True, eq=False)
class SuperExpr(Expr):
    """Superclass method access ``super.method``."""

    keyword: Token
    method: Token


@dataclass(frozen=True, eq=False)
class ExpressionStmt(Stmt):
    """Expression used as a statement."""

    expression: Expr


@dataclass(frozen=True, eq=False)
class PrintStmt(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class VarStmt(Stmt):
    """Variable declaration with optional initializer."""

    name: Token
    initializer: Expr | None = None


@dataclass(frozen=True, eq=False)
class BlockStmt(Stmt):
    """Braced block opening a new lexical scope."""

    statements: tuple[Stmt, ...]


@dataclass(frozen=True, eq=False)
class IfStmt(Stmt):
    """Conditional statement with optional else branch."""

    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None = None


@dataclass(frozen=True, eq=False)
class WhileStmt(Stmt):
    """Loop statement; ``for`` loops are desugared into this node."""

    condition: Expr
    body: Stmt


@dataclass(frozen=True, eq=False)
class FunctionStmt(Stmt):
    """Function or method declaration."""

    name: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


@dataclass(frozen=True, eq=False)
class ReturnStmt(Stmt):
    """Return statement, optionally returning a value."""

    keyword: Token
    value: Expr | None = None


@dataclass(frozen=True, eq=False)
class ClassStmt(Stmt):
    """Class declaration with optional superclass and its methods."""

    name: Token
    superclass: VariableExpr | None
    methods: tuple[FunctionStmt, ...]
