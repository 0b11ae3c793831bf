"""Shared pytest fixtures for scenario-script tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from scenario_script.lexer import Lexer
from scenario_script.reader import BufferReader


@pytest.fixture()
def lex():
    """Factory fixture: tokenize a source string, return the list of tokens."""
    def _lex(source: str) -> list:
        return list(Lexer(BufferReader(source)).tokens())
    return _lex


@pytest.fixture()
def script_file(tmp_path: Path):
    """Factory fixture: write script text to a uniquely-named temp file, return the Path."""
    counter = {"n": 0}

    def _make(content: str) -> Path:
        counter["n"] += 1
        p = tmp_path / f"script_{counter['n']}.scn"
        p.write_text(content, encoding="utf-8")
        return p

    return _make
