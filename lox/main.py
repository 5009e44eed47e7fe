"""Top-level pipeline orchestration for Lox: scan, parse, resolve, interpret."""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, TextIO, TypeVar

from lox.ast import Stmt
from lox.errors import Diagnostic, StaticErrors
from lox.interpreter import Interpreter
from lox.parser import Parser
from lox.resolver import Resolutions, Resolver
from lox.scanner import Scanner
from lox.tokens import Token


EXIT_OK = 0
EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

DEFAULT_RECURSION_LIMIT = 100_000
# Host C stack reserved per allowed Python frame on the worker thread.
STACK_BYTES_PER_FRAME = 4096
MIN_STACK_SIZE = 32 * 1024 * 1024

T = TypeVar("T")


@dataclass
class FrontendArtifacts:
    """Pipeline output from source through static resolution."""

    tokens: list[Token]
    statements: list[Stmt]
    resolutions: Resolutions
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@dataclass
class RunResult:
    """Outcome of running one source text through a session."""

    static_errors: list[Diagnostic] = field(default_factory=list)
    runtime_error: Diagnostic | None = None
    frontend: FrontendArtifacts | None = field(default=None, repr=False, compare=False)

    @property
    def exit_code(self) -> int:
        if self.static_errors:
            return EXIT_STATIC_ERROR
        if self.runtime_error is not None:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK

    @property
    def diagnostics(self) -> list[Diagnostic]:
        if self.runtime_error is None:
            return list(self.static_errors)
        return [*self.static_errors, self.runtime_error]


def scan_source(source: str) -> tuple[list[Token], list[Diagnostic]]:
    """Tokenize source, returning tokens and any lexical diagnostics."""
    scanner = Scanner(source)
    tokens = scanner.scan_tokens()
    return tokens, [err.to_diagnostic() for err in scanner.errors]


def parse_source(source: str) -> tuple[list[Stmt], list[Diagnostic]]:
    """Scan and parse source; diagnostics from both phases are returned in order."""
    tokens, diagnostics = scan_source(source)
    parser = Parser(tokens)
    statements = parser.parse()
    diagnostics.extend(err.to_diagnostic() for err in parser.errors)
    return statements, diagnostics


def check_source(
    source: str,
    *,
    strict: bool = False,
    defined_globals: Iterable[str] = (),
) -> FrontendArtifacts:
    """Run every static phase without executing anything.

    Resolution only happens when scanning and parsing were clean. Names in
    ``defined_globals`` already exist in the global scope, so a top-level
    initializer may read them. With ``strict=True`` any diagnostic is raised
    as ``StaticErrors``.
    """
    tokens, diagnostics = scan_source(source)
    parser = Parser(tokens)
    statements = parser.parse()
    diagnostics.extend(err.to_diagnostic() for err in parser.errors)

    # Resolving a tree with parse holes would only add noise.
    resolutions: Resolutions = {}
    if not diagnostics:
        resolver = Resolver()
        resolutions = resolver.resolve(statements, defined_globals=defined_globals)
        diagnostics.extend(err.to_diagnostic() for err in resolver.errors)

    if strict and diagnostics:
        raise StaticErrors(diagnostics)
    return FrontendArtifacts(tokens=tokens, statements=statements, resolutions=resolutions, diagnostics=diagnostics)


def call_with_deep_stack(fn: Callable[[], T], recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> T:
    """Call ``fn`` on a worker thread whose stack fits ``recursion_limit`` frames.

    Exceptions raised by ``fn`` are re-raised in the calling thread. The
    process recursion limit is restored once the worker finishes.
    """
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as err:
            outcome["error"] = err

    previous_limit = sys.getrecursionlimit()
    stack_size = max(MIN_STACK_SIZE, recursion_limit * STACK_BYTES_PER_FRAME)
    previous_stack_size = threading.stack_size(stack_size)
    try:
        sys.setrecursionlimit(max(previous_limit, recursion_limit))
        worker = threading.Thread(target=target, name="lox-worker", daemon=True)
        worker.start()
    finally:
        threading.stack_size(previous_stack_size)
    try:
        worker.join()
    finally:
        sys.setrecursionlimit(previous_limit)

    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


class Session:
    """One interpreter whose global state persists across runs (REPL lines)."""

    def __init__(
        self,
        stdout: TextIO | None = None,
        max_call_depth: int | None = None,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> None:
        self.interpreter = Interpreter(stdout=stdout, max_call_depth=max_call_depth)
        self.recursion_limit = recursion_limit

    def run(self, source: str) -> RunResult:
        """Run source; any static error skips execution entirely."""
        return call_with_deep_stack(lambda: self._run(source), self.recursion_limit)

    def _run(self, source: str) -> RunResult:
        frontend = check_source(source, defined_globals=self.interpreter.globals.values)
        if not frontend.ok:
            return RunResult(static_errors=frontend.diagnostics, frontend=frontend)

        self.interpreter.resolve(frontend.resolutions)
        error = self.interpreter.interpret(frontend.statements)
        if error is not None:
            return RunResult(runtime_error=error.to_diagnostic(), frontend=frontend)
        return RunResult(frontend=frontend)


def run_source(
    source: str,
    *,
    stdout: TextIO | None = None,
    max_call_depth: int | None = None,
    recursion_limit: int = DEFAULT_RECURSION_LIMIT,
) -> RunResult:
    """Run a complete program in a fresh session."""
    session = Session(stdout=stdout, max_call_depth=max_call_depth, recursion_limit=recursion_limit)
    return session.run(source)


def run_file(
    path: str | Path,
    *,
    stdout: TextIO | None = None,
    max_call_depth: int | None = None,
    recursion_limit: int = DEFAULT_RECURSION_LIMIT,
) -> RunResult:
    """Read a script from disk and run it."""
    source = Path(path).read_text(encoding="utf-8")
    return run_source(source, stdout=stdout, max_call_depth=max_call_depth, recursion_limit=recursion_limit)


if __name__ == "__main__":
    from lox.cli import run

    raise SystemExit(run())
