"""--debug token and automaton dumps to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from tmlang.automaton import Automaton
from tmlang.tokens import Token, TokenType


def dump_tokens(tokens: list[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token to *file*."""
    file.write("Tokens\n")
    for tok in tokens:
        line = f"  {tok.position:>5}+{tok.length:<3} {tok.type.name}"
        if tok.type == TokenType.ERROR:
            assert tok.error is not None
            line += f" {tok.error.name}"
        elif tok.value:
            line += f" {tok.value!r}"
        file.write(line + "\n")


def dump_automaton(automaton: Automaton, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable transition table to *file*."""
    file.write(f"Automaton initial={automaton.initial_state_id!r}\n")
    for state_id, state in automaton.states.items():
        file.write(f"  State {state_id}\n")
        for symbol, case in state.items():
            file.write(
                f"    {symbol!r} -> {case.replacement!r} {case.direction.value} {case.target_state_id}\n"
            )
