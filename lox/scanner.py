"""Lox lexical analyzer."""

from __future__ import annotations

from typing import Final

from lox.errors import ScanError
from lox.tokens import KEYWORDS, Token, TokenType


_SINGLE_CHAR_TOKENS: Final[dict[str, TokenType]] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
}

# Operators that become a two-character token when followed by '='.
_EQUAL_SUFFIXED: Final[dict[str, tuple[TokenType, TokenType]]] = {
    "!": (TokenType.BANG, TokenType.BANG_EQUAL),
    "=": (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    "<": (TokenType.LESS, TokenType.LESS_EQUAL),
    ">": (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


class Scanner:
    """Converts Lox source text into a token stream.

    Errors do not stop the scan: each one is recorded in ``errors`` and the
    offending character (or unterminated string) is skipped so a single run
    reports as many problems as possible.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1
        self.tokens: list[Token] = []
        self.errors: list[ScanError] = []

    def scan_tokens(self) -> list[Token]:
        """Scan the full source and return the token stream ending in EOF."""
        while not self._is_at_end():
            self.start = self.current
            self._scan_token()

        self.tokens.append(Token(token_type=TokenType.EOF, lexeme="", literal=None, line=self.line))
        return self.tokens

    def _scan_token(self) -> None:
        ch = self._advance()

        if ch in " \r\t":
            return
        if ch == "\n":
            self.line += 1
            return

        if ch == "/" and self._match("/"):
            while self._peek() != "\n" and not self._is_at_end():
                self._advance()
            return

        token_type = _SINGLE_CHAR_TOKENS.get(ch)
        if token_type is not None:
            self._add_token(token_type)
            return

        pair = _EQUAL_SUFFIXED.get(ch)
        if pair is not None:
            self._add_token(pair[1] if self._match("=") else pair[0])
            return

        if ch == '"':
            self._string()
            return
        if _is_digit(ch):
            self._number()
            return
        if _is_alpha(ch):
            self._identifier()
            return

        self.errors.append(
            ScanError(
                code="LEX001",
                message="Unexpected character.",
                line=self.line,
                hint=f"Remove {ch!r} or place it inside a string literal.",
            )
        )

    def _string(self) -> None:
        start_line = self.line
        while self._peek() != '"' and not self._is_at_end():
            if self._peek() == "\n":
                self.line += 1
            self._advance()

        if self._is_at_end():
            self.errors.append(
                ScanError(
                    code="LEX002",
                    message="Unterminated string.",
                    line=self.line,
                    hint=f"Close the string opened on line {start_line} with a double quote.",
                )
            )
            return

        self._advance()  # closing quote
        self._add_token(TokenType.STRING, self.source[self.start + 1 : self.current - 1])

    def _number(self) -> None:
        while _is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot.
        if self._peek() == "." and _is_digit(self._peek(1)):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self.start : self.current]))

    def _identifier(self) -> None:
        while _is_alpha(self._peek()) or _is_digit(self._peek()):
            self._advance()
        text = self.source[self.start : self.current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _add_token(self, token_type: TokenType, literal: object = None) -> None:
        text = self.source[self.start : self.current]
        self.tokens.append(Token(token_type=token_type, lexeme=text, literal=literal, line=self.line))

    def _match(self, expected: str) -> bool:
        if self._is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def _peek(self, offset: int = 0) -> str:
        idx = self.current + offset
        if idx >= len(self.source):
            return "\0"
        return self.source[idx]

    def _advance(self) -> str:
        ch = self.source[self.current]
        self.current += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.current >= len(self.source)
