"""Lox scanner, parser, resolver and tree-walking interpreter."""

from __future__ import annotations

from typing import Any


__all__ = [
    "RunResult",
    "Session",
    "check_source",
    "parse_source",
    "run_file",
    "run_source",
    "scan_source",
]


def run_source(*args: Any, **kwargs: Any):
    from lox.main import run_source as _run_source

    return _run_source(*args, **kwargs)


def run_file(*args: Any, **kwargs: Any):
    from lox.main import run_file as _run_file

    return _run_file(*args, **kwargs)


def check_source(*args: Any, **kwargs: Any):
    from lox.main import check_source as _check_source

    return _check_source(*args, **kwargs)


def parse_source(*args: Any, **kwargs: Any):
    from lox.main import parse_source as _parse_source

    return _parse_source(*args, **kwargs)


def scan_source(*args: Any, **kwargs: Any):
    from lox.main import scan_source as _scan_source

    return _scan_source(*args, **kwargs)


def __getattr__(name: str):
    if name == "Session":
        from lox.main import Session

        return Session
    if name == "RunResult":
        from lox.main import RunResult

        return RunResult
    raise AttributeError(name)
