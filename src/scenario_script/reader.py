"""Character readers — sequential, lookahead-capable cursors over script text."""

from __future__ import annotations

from typing import Protocol, TextIO


class ReaderBoundsError(IndexError):
    """Raised when a reader is asked to look ahead past the end of its source."""


class Reader(Protocol):
    """What the lexer needs from a character source."""

    @property
    def position(self) -> tuple[int, int]: ...

    def peek(self, k: int = 1) -> str: ...

    def read(self, k: int = 1) -> str: ...

    def is_eof(self) -> bool: ...


class _Cursor:
    """Line/column bookkeeping shared by the concrete readers."""

    def __init__(self) -> None:
        self.line = 1
        self.column = 1

    def advance(self, consumed: str) -> None:
        newlines = consumed.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(consumed) - consumed.rfind("\n")
        else:
            self.column += len(consumed)


class BufferReader:
    """Cursor over a fixed, in-memory text buffer."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._cursor = _Cursor()

    @property
    def position(self) -> tuple[int, int]:
        """1-based ``(line, column)`` of the next unread character."""
        return self._cursor.line, self._cursor.column

    def peek(self, k: int = 1) -> str:
        """Return the next *k* characters without advancing.

        Raises ReaderBoundsError if fewer than *k* characters remain.
        """
        end = self._pos + k
        if end > len(self._source):
            raise ReaderBoundsError(
                f"cannot peek {k} character(s) at offset {self._pos}: "
                f"source has {len(self._source)}"
            )
        return self._source[self._pos:end]

    def read(self, k: int = 1) -> str:
        """Return the next *k* characters and advance past them."""
        s = self.peek(k)
        self._pos += k
        self._cursor.advance(s)
        return s

    def is_eof(self) -> bool:
        return self._pos >= len(self._source)


class StreamReader:
    """Cursor over a text stream, pulled in chunks as lookahead requires.

    Consumed characters are dropped from the internal buffer, so memory use
    stays bounded by the chunk size plus the largest lookahead.  The stream
    is not closed by the reader.
    """

    def __init__(self, stream: TextIO, chunk_size: int = 4096) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got: {chunk_size}")
        self._stream = stream
        self._chunk_size = chunk_size
        self._buffer = ""
        self._exhausted = False
        self._cursor = _Cursor()

    @property
    def position(self) -> tuple[int, int]:
        return self._cursor.line, self._cursor.column

    def _fill(self, k: int) -> None:
        while len(self._buffer) < k and not self._exhausted:
            chunk = self._stream.read(self._chunk_size)
            if not chunk:
                self._exhausted = True
                break
            self._buffer += chunk

    def peek(self, k: int = 1) -> str:
        self._fill(k)
        if k > len(self._buffer):
            raise ReaderBoundsError(
                f"cannot peek {k} character(s): only {len(self._buffer)} left in stream"
            )
        return self._buffer[:k]

    def read(self, k: int = 1) -> str:
        s = self.peek(k)
        self._buffer = self._buffer[k:]
        self._cursor.advance(s)
        return s

    def is_eof(self) -> bool:
        self._fill(1)
        return not self._buffer
