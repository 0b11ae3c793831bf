"""Lexer — turns script characters into keyword, identifier, string and brace tokens."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Optional

from scenario_script.reader import Reader


class ScriptSyntaxError(Exception):
    """Raised when a script is lexically or grammatically malformed.

    ``line`` and ``column`` point at the offending token when known.
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        self.line = line
        self.column = column
        if line is not None:
            message = f"{line}:{column}: {message}"
        super().__init__(message)


class UnterminatedLiteralError(ScriptSyntaxError):
    """Raised when the source ends inside a string literal."""


class TokenType(enum.Enum):
    KEYWORD = "KEYWORD"
    COMMENT = "COMMENT"
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    OPEN_BRACE = "OPEN_BRACE"
    CLOSE_BRACE = "CLOSE_BRACE"


KEYWORDS = frozenset({"author", "scene", "branch", "jump"})

_HORIZONTAL_WHITESPACE = (" ", "\t")
_WHITESPACE = (" ", "\t", "\r", "\n")


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.type.value} {self.value!r}"


class Lexer:
    """Produces tokens lazily, one per ``next_token()`` call.

    Comments are consumed but never returned.  ``None`` marks the end of the
    stream.
    """

    def __init__(self, reader: Reader) -> None:
        self._reader = reader

    def next_token(self) -> Optional[Token]:
        while not self._reader.is_eof():
            c = self._reader.peek()

            if c == "#":
                self._comment()
                continue

            if c in _WHITESPACE:
                self._reader.read()
                continue

            line, column = self._reader.position

            if c == '"':
                return Token(TokenType.STRING, self._string_literal(line, column), line, column)

            if c == "{":
                return Token(TokenType.OPEN_BRACE, self._reader.read(), line, column)

            if c == "}":
                return Token(TokenType.CLOSE_BRACE, self._reader.read(), line, column)

            word = self._word()
            kind = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENTIFIER
            return Token(kind, word, line, column)

        return None

    def tokens(self) -> Iterator[Token]:
        """Iterate over the remaining tokens until the end of the stream."""
        while (token := self.next_token()) is not None:
            yield token

    def _eat_horizontal_whitespace(self) -> None:
        while not self._reader.is_eof() and self._reader.peek() in _HORIZONTAL_WHITESPACE:
            self._reader.read()

    def _comment(self) -> str:
        self._reader.read()  # '#'
        self._eat_horizontal_whitespace()

        chars: list[str] = []
        while not self._reader.is_eof():
            if self._reader.peek() in ("\r", "\n"):
                break
            chars.append(self._reader.read())
        return "".join(chars)

    def _word(self) -> str:
        chars: list[str] = []
        while not self._reader.is_eof():
            if self._reader.peek() in _WHITESPACE:
                break
            chars.append(self._reader.read())
        return "".join(chars)

    def _string_literal(self, line: int, column: int) -> str:
        self._reader.read()  # opening quote

        chars: list[str] = []
        while not self._reader.is_eof():
            c = self._reader.peek()

            if c == "\\":
                self._reader.read()
                if self._reader.is_eof():
                    break
                chars.append(self._reader.read())
                continue

            if c == '"':
                self._reader.read()
                return "".join(chars)

            # Line endings are normalised to \n.
            if c == "\r":
                self._reader.read()
                continue

            chars.append(self._reader.read())
            if c in ("\n", " "):
                self._eat_horizontal_whitespace()

        raise UnterminatedLiteralError(
            "unterminated string literal: reached end of source before closing '\"'",
            line,
            column,
        )
