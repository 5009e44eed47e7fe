"""Debug printer rendering AST nodes in parenthesized prefix form."""

from __future__ import annotations

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
from lox.runtime import stringify


class AstPrinter:
    """Renders expressions like ``(* (- 123) (group 45.67))``."""

    def print(self, node: Expr | Stmt) -> str:
        if isinstance(node, Stmt):
            return self._stmt(node)
        return self._expr(node)

    def _stmt(self, stmt: Stmt) -> str:
        if isinstance(stmt, ExpressionStmt):
            return self._parenthesize(";", self._expr(stmt.expression))
        if isinstance(stmt, PrintStmt):
            return self._parenthesize("print", self._expr(stmt.expression))
        if isinstance(stmt, VarStmt):
            if stmt.initializer is None:
                return self._parenthesize("var", stmt.name.lexeme)
            return self._parenthesize("var", stmt.name.lexeme, self._expr(stmt.initializer))
        if isinstance(stmt, BlockStmt):
            return self._parenthesize("block", *(self._stmt(inner) for inner in stmt.statements))
        if isinstance(stmt, IfStmt):
            parts = [self._expr(stmt.condition), self._stmt(stmt.then_branch)]
            if stmt.else_branch is not None:
                parts.append(self._stmt(stmt.else_branch))
            return self._parenthesize("if", *parts)
        if isinstance(stmt, WhileStmt):
            return self._parenthesize("while", self._expr(stmt.condition), self._stmt(stmt.body))
        if isinstance(stmt, FunctionStmt):
            return self._function("fun", stmt)
        if isinstance(stmt, ReturnStmt):
            if stmt.value is None:
                return "(return)"
            return self._parenthesize("return", self._expr(stmt.value))
        if isinstance(stmt, ClassStmt):
            parts = [stmt.name.lexeme]
            if stmt.superclass is not None:
                parts.extend(["<", stmt.superclass.name.lexeme])
            parts.extend(self._function("method", method) for method in stmt.methods)
            return self._parenthesize("class", *parts)
        raise TypeError(f"Unsupported statement type '{type(stmt).__name__}'.")

    def _expr(self, expr: Expr) -> str:
        if isinstance(expr, LiteralExpr):
            if isinstance(expr.value, str):
                return f'"{expr.value}"'
            return stringify(expr.value)
        if isinstance(expr, VariableExpr):
            return expr.name.lexeme
        if isinstance(expr, AssignExpr):
            return self._parenthesize("=", expr.name.lexeme, self._expr(expr.value))
        if isinstance(expr, (BinaryExpr, LogicalExpr)):
            return self._parenthesize(expr.operator.lexeme, self._expr(expr.left), self._expr(expr.right))
        if isinstance(expr, UnaryExpr):
            return self._parenthesize(expr.operator.lexeme, self._expr(expr.right))
        if isinstance(expr, GroupingExpr):
            return self._parenthesize("group", self._expr(expr.expression))
        if isinstance(expr, CallExpr):
            return self._parenthesize("call", self._expr(expr.callee), *(self._expr(a) for a in expr.arguments))
        if isinstance(expr, GetExpr):
            return self._parenthesize(".", self._expr(expr.obj), expr.name.lexeme)
        if isinstance(expr, SetExpr):
            return self._parenthesize("=", self._expr(expr.obj), expr.name.lexeme, self._expr(expr.value))
        if isinstance(expr, ThisExpr):
            return "this"
        if isinstance(expr, SuperExpr):
            return self._parenthesize("super", expr.method.lexeme)
        raise TypeError(f"Unsupported expression type '{type(expr).__name__}'.")

    def _function(self, label: str, function: FunctionStmt) -> str:
        params = "(" + " ".join(param.lexeme for param in function.params) + ")"
        body = [self._stmt(stmt) for stmt in function.body]
        return self._parenthesize(label, function.name.lexeme, params, *body)

    @staticmethod
    def _parenthesize(name: str, *parts: str) -> str:
        if not parts:
            return f"({name})"
        return f"({name} {' '.join(parts)})"
