"""Recursive-descent parser — builds a Document of scenes from a token stream.

Grammar::

    document   := (author | scene)*
    author     := "author" IDENTIFIER "{" authorItem* "}"
    authorItem := branch | <any other token, braces balanced>
    scene      := "scene" IDENTIFIER "{" (author | branch)* "}"
    branch     := "branch" IDENTIFIER "{" <any token, braces balanced>* "}"

A ``branch`` written inside an author body belongs to the enclosing scene,
so it is only allowed for authors declared inside a scene.  Top-level
authors are attached to every scene once the whole source has been read.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TextIO

from scenario_script.lexer import Lexer, ScriptSyntaxError, Token, TokenType
from scenario_script.reader import BufferReader, StreamReader
from scenario_script.scene import Author, Branch, Document, Scene

log = logging.getLogger(__name__)


class UnexpectedEOFError(ScriptSyntaxError):
    """Raised when the source ends inside an open author, scene or branch block."""


class Parser:
    """Consumes a Lexer one token at a time.

    A parser is single-use: build a fresh Reader/Lexer/Parser chain for each
    source.
    """

    def __init__(self, lexer: Lexer) -> None:
        self._lexer = lexer

    # ── Public API ───────────────────────────────────────────────────────────

    def parse(self) -> list[Scene]:
        """Parse the whole source and return its scenes in order."""
        return self.parse_document().scenes

    def parse_document(self) -> Document:
        """Parse the whole source into a Document.

        Raises ScriptSyntaxError (or a subclass) on the first violation; no
        partial document is returned.
        """
        document = Document()

        while (token := self._lexer.next_token()) is not None:
            if token.type is not TokenType.KEYWORD:
                raise ScriptSyntaxError(
                    f"Unexpected token type '{token.type.value}', expected keyword 'author' or 'scene'",
                    token.line,
                    token.column,
                )

            if token.value == "author":
                document.authors.append(self._author(scene=None))
            elif token.value == "scene":
                document.scenes.append(self._scene())
            else:
                raise ScriptSyntaxError(
                    f"Expected keyword 'author' or 'scene', got '{token.value}'",
                    token.line,
                    token.column,
                )

        document.broadcast_authors()
        log.info(
            "Parsed %d scene(s), %d top-level author(s)",
            len(document.scenes),
            len(document.authors),
        )
        return document

    # ── Productions ──────────────────────────────────────────────────────────

    def _scene(self) -> Scene:
        scene = Scene(self._expect(TokenType.IDENTIFIER, "scene").value)
        self._expect(TokenType.OPEN_BRACE, f"scene '{scene.id}'")

        authors: list[Author] = []
        while (token := self._lexer.next_token()) is not None:
            if token.type is TokenType.CLOSE_BRACE:
                for author in authors:
                    scene.add_author(author)
                log.debug("Parsed %r", scene)
                return scene

            if token.type is TokenType.KEYWORD and token.value == "author":
                authors.append(self._author(scene=scene))
            elif token.type is TokenType.KEYWORD and token.value == "branch":
                self._branch(scene)
            else:
                raise ScriptSyntaxError(
                    f"Expected 'author', 'branch' or CLOSE_BRACE in scene '{scene.id}', got {token}",
                    token.line,
                    token.column,
                )

        raise UnexpectedEOFError(
            f"Expected CLOSE_BRACE for scene '{scene.id}' but reached end of source"
        )

    def _author(self, scene: Optional[Scene]) -> Author:
        author = Author(self._expect(TokenType.IDENTIFIER, "author").value)
        self._expect(TokenType.OPEN_BRACE, f"author '{author.id}'")

        while (token := self._lexer.next_token()) is not None:
            if token.type is TokenType.CLOSE_BRACE:
                log.debug("Parsed author %r", author.id)
                return author

            if token.type is TokenType.KEYWORD and token.value == "branch":
                if scene is None:
                    raise ScriptSyntaxError(
                        f"branch in top-level author '{author.id}' has no enclosing scene",
                        token.line,
                        token.column,
                    )
                self._branch(scene)
            elif token.type is TokenType.OPEN_BRACE:
                self._skip_group(f"author '{author.id}'")

        raise UnexpectedEOFError(
            f"Expected CLOSE_BRACE for author '{author.id}' but reached end of source"
        )

    def _branch(self, scene: Scene) -> None:
        branch = Branch(self._expect(TokenType.IDENTIFIER, "branch").value)
        self._expect(TokenType.OPEN_BRACE, f"branch '{branch.id}'")

        # Branch bodies are not translated into steps yet; the block stays empty.
        self._skip_group(f"branch '{branch.id}'")

        scene.add_branch(branch)
        log.debug("Parsed branch %r in scene %r", branch.id, scene.id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _expect(self, kind: TokenType, context: str) -> Token:
        token = self._lexer.next_token()
        if token is None:
            raise UnexpectedEOFError(
                f"Expected {kind.value} after {context} but reached end of source"
            )
        if token.type is not kind:
            raise ScriptSyntaxError(
                f"Expected {kind.value} after {context}, got {token}",
                token.line,
                token.column,
            )
        return token

    def _skip_group(self, context: str) -> None:
        """Consume tokens up to and including the CLOSE_BRACE matching an
        already-consumed OPEN_BRACE."""
        depth = 1
        while (token := self._lexer.next_token()) is not None:
            if token.type is TokenType.OPEN_BRACE:
                depth += 1
            elif token.type is TokenType.CLOSE_BRACE:
                depth -= 1
                if depth == 0:
                    return
        raise UnexpectedEOFError(
            f"Expected CLOSE_BRACE for {context} but reached end of source"
        )


def parse_text(source: str) -> Document:
    """Parse an in-memory script."""
    return Parser(Lexer(BufferReader(source))).parse_document()


def parse_stream(stream: TextIO, chunk_size: int = 4096) -> Document:
    """Parse a script read incrementally from a text stream."""
    return Parser(Lexer(StreamReader(stream, chunk_size=chunk_size))).parse_document()


def parse_file(path: str) -> Document:
    """Read a UTF-8 script file and parse it."""
    with Path(path).open(encoding="utf-8", newline="") as fh:
        return parse_stream(fh)
