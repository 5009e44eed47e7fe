"""Command-line interface for the Lox interpreter."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from lox.errors import Diagnostic, format_diagnostic
from lox.main import (
    DEFAULT_RECURSION_LIMIT,
    EXIT_OK,
    EXIT_STATIC_ERROR,
    EXIT_USAGE,
    RunResult,
    Session,
    call_with_deep_stack,
    check_source,
    parse_source,
    scan_source,
)
from lox.printer import AstPrinter


def build_parser() -> argparse.ArgumentParser:
    """Build argparse command tree for the Lox CLI."""
    parser = argparse.ArgumentParser(prog="lox", description="Lox tree-walking interpreter")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a Lox script")
    _add_source_arguments(run_parser)
    _add_runtime_arguments(run_parser)
    run_parser.add_argument("--debug", action="store_true", help="Emit pipeline statistics to stderr")

    repl_parser = subparsers.add_parser("repl", help="Start an interactive session")
    _add_runtime_arguments(repl_parser)

    check_parser = subparsers.add_parser("check", help="Scan, parse and resolve without running")
    _add_source_arguments(check_parser)
    check_parser.add_argument("--json", action="store_true", help="Print diagnostics as JSON")

    ast_parser = subparsers.add_parser("ast", help="Print parsed statements in prefix form")
    _add_source_arguments(ast_parser)

    tokens_parser = subparsers.add_parser("tokens", help="Print the token stream")
    _add_source_arguments(tokens_parser)

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", nargs="?", help="Input .lox file")
    parser.add_argument("--code", help="Inline Lox source string")


def _add_runtime_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--recursion-limit",
        type=int,
        default=DEFAULT_RECURSION_LIMIT,
        help="Host recursion limit for the worker thread; each Lox call takes several host frames.",
    )
    parser.add_argument(
        "--max-call-depth",
        type=int,
        default=None,
        help="Optional cap on nested Lox calls before a stack overflow is reported.",
    )


def run(argv: list[str] | None = None) -> int:
    """Run CLI and return shell exit code."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "run":
            source = _resolve_source(args.input, args.code)
            session = Session(max_call_depth=args.max_call_depth, recursion_limit=args.recursion_limit)
            result = session.run(source)
            if args.debug:
                _print_debug(result, session)
            _report(result)
            return result.exit_code

        if args.command == "repl":
            return _repl(Session(max_call_depth=args.max_call_depth, recursion_limit=args.recursion_limit))

        if args.command == "check":
            source = _resolve_source(args.input, args.code)
            frontend = call_with_deep_stack(lambda: check_source(source))
            if args.json:
                print(json.dumps([diag.to_dict() for diag in frontend.diagnostics], indent=2, sort_keys=True))
            elif frontend.ok:
                print("OK")
            else:
                _print_diagnostics(frontend.diagnostics)
            return EXIT_OK if frontend.ok else EXIT_STATIC_ERROR

        if args.command == "ast":
            source = _resolve_source(args.input, args.code)
            statements, diagnostics = call_with_deep_stack(lambda: parse_source(source))
            if diagnostics:
                _print_diagnostics(diagnostics)
                return EXIT_STATIC_ERROR
            printer = AstPrinter()
            for line in call_with_deep_stack(lambda: [printer.print(stmt) for stmt in statements]):
                print(line)
            return EXIT_OK

        if args.command == "tokens":
            source = _resolve_source(args.input, args.code)
            tokens, diagnostics = scan_source(source)
            for token in tokens:
                print(token)
            if diagnostics:
                _print_diagnostics(diagnostics)
                return EXIT_STATIC_ERROR
            return EXIT_OK

        raise argparse.ArgumentTypeError(f"Unsupported command '{args.command}'.")

    except (argparse.ArgumentTypeError, OSError) as err:
        print(f"Usage error: {err}", file=sys.stderr)
        return EXIT_USAGE


def _repl(session: Session) -> int:
    while True:
        sys.stdout.write("> ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            sys.stdout.write("\n")
            return EXIT_OK
        # Each line stands alone: an error here must not affect the next one.
        _report(session.run(line))


def _report(result: RunResult) -> None:
    _print_diagnostics(result.diagnostics)


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diag in diagnostics:
        print(format_diagnostic(diag), file=sys.stderr)


def _print_debug(result: RunResult, session: Session) -> None:
    frontend = result.frontend
    if frontend is None:
        return
    print(
        f"debug: tokens={len(frontend.tokens)} "
        f"statements={len(frontend.statements)} "
        f"resolved={len(frontend.resolutions)}",
        file=sys.stderr,
    )
    print(f"debug: globals={sorted(session.interpreter.globals.values)}", file=sys.stderr)


def _resolve_source(input_path: str | None, inline_code: str | None) -> str:
    if input_path and inline_code is not None:
        raise argparse.ArgumentTypeError("Use either input file path or --code, not both.")
    if input_path:
        return Path(input_path).read_text(encoding="utf-8")
    if inline_code is not None:
        return inline_code
    raise argparse.ArgumentTypeError("No source provided. Pass input file path or --code.")


def main() -> None:
    """Console-script entry point."""
    raise SystemExit(run())


if __name__ == "__main__":
    raise SystemExit(run())
