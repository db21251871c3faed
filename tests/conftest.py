"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tmlang.automaton import Automaton
from tmlang.errors import Diagnostic
from tmlang.lexer import tokenize
from tmlang.parser import compile_source, parse
from tmlang.tokens import Token, TokenType

INCREMENTER = """\
initial state a { '0'/'0',R->a  ' '/'1',R->b }
state b { }
"""


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def diagnose():
    """Return a helper that parses source and returns its diagnostics."""

    def _diagnose(source: str) -> list[Diagnostic]:
        return parse(tokenize(source)).diagnostics

    return _diagnose


@pytest.fixture
def build():
    """Return a helper that compiles source and returns the automaton, failing on diagnostics."""

    def _build(source: str) -> Automaton:
        result = compile_source(source)
        assert result.diagnostics == [], [d.message for d in result.diagnostics]
        assert result.automaton is not None
        return result.automaton

    return _build


@pytest.fixture
def incrementer(build) -> Automaton:
    return build(INCREMENTER)


@pytest.fixture
def incrementer_source() -> str:
    return INCREMENTER
