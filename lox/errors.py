"""Structured diagnostics and exception hierarchy for Lox."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lox.tokens import Token, TokenType


STATIC = "static"
RUNTIME = "runtime"


@dataclass(frozen=True)
class Diagnostic:
    """Machine-readable diagnostic emitted by a pipeline phase."""

    code: str
    message: str
    line: int
    where: str = ""
    hint: str = ""
    kind: str = STATIC

    def to_dict(self) -> dict[str, Any]:
        """Serialize the diagnostic for JSON output."""
        return {
            "code": self.code,
            "kind": self.kind,
            "message": self.message,
            "line": self.line,
            "where": self.where,
            "hint": self.hint,
        }


class LoxError(Exception):
    """Base error carrying a code and the source line it refers to."""

    kind = STATIC

    def __init__(self, code: str, message: str, line: int, where: str = "", hint: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.line = line
        self.where = where
        self.hint = hint

    def to_diagnostic(self) -> Diagnostic:
        """Convert exception into serializable diagnostic."""
        return Diagnostic(
            code=self.code,
            message=self.message,
            line=self.line,
            where=self.where,
            hint=self.hint,
            kind=self.kind,
        )

    def __str__(self) -> str:
        return f"[{self.code}] {self.message} (line {self.line})"


class ScanError(LoxError):
    """Reported by lexical analysis failures."""


class ParseError(LoxError):
    """Reported by parser failures."""


class ResolveError(LoxError):
    """Reported by static resolution failures."""


class StaticErrors(LoxError):
    """Raised when a caller asks for static diagnostics as an exception."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        first = diagnostics[0]
        message = first.message
        if len(diagnostics) > 1:
            message = f"{first.message} (plus {len(diagnostics) - 1} additional error(s))."
        super().__init__(first.code, message, first.line, where=first.where, hint=first.hint)
        self.diagnostics = diagnostics


class LoxRuntimeError(LoxError):
    """Raised during interpretation; halts the current run."""

    kind = RUNTIME

    def __init__(self, token: Token, message: str, code: str = "RUN001", hint: str = "") -> None:
        super().__init__(code, message, token.line, hint=hint)
        self.token = token


class StackOverflowError(LoxRuntimeError):
    """Raised when language-level recursion exhausts the call stack."""

    def __init__(self, token: Token) -> None:
        super().__init__(
            token,
            "Stack overflow.",
            code="RUN010",
            hint="Reduce recursion depth or raise --recursion-limit.",
        )


def where_for(token: Token) -> str:
    """Describe the token a static error points at."""
    if token.token_type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


def format_diagnostic(diag: Diagnostic) -> str:
    """Format diagnostic the way the driver prints it to stderr."""
    if diag.kind == RUNTIME:
        return f"{diag.message}\n[line {diag.line}]"
    return f"[line {diag.line}] Error{diag.where}: {diag.message}"
