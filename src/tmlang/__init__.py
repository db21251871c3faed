"""Turing machine language compiler and interpreter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tmlang.parser import CompileResult

__version__ = "0.1.0"


def compile(source: str) -> CompileResult:
    """Tokenize and parse source text into an automaton plus diagnostics."""
    from tmlang.parser import compile_source

    return compile_source(source)
