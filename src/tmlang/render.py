"""Automaton to source renderer — emits canonical Turing machine source."""

from __future__ import annotations

from tmlang.automaton import Automaton, Case, State


def render(automaton: Automaton, indent: str = "    ") -> str:
    """Render an automaton as source text that compiles back to an equal automaton.

    The initial state comes first, the remaining states follow in insertion
    order. Constants are not preserved; every symbol is written as a literal.
    """
    ordered = sorted(
        automaton.states.items(),
        key=lambda item: item[0] != automaton.initial_state_id,
    )
    blocks = [
        _render_state(state_id, state, state_id == automaton.initial_state_id, indent)
        for state_id, state in ordered
    ]
    return "\n\n".join(blocks) + "\n" if blocks else ""


def _render_state(state_id: str, state: State, initial: bool, indent: str) -> str:
    header = f"{'initial ' if initial else ''}state {state_id} {{"
    if not state:
        return header + "}"
    lines = [header]
    for symbol, case in state.items():
        lines.append(f"{indent}{_render_case(state_id, symbol, case)}")
    lines.append("}")
    return "\n".join(lines)


def _render_case(state_id: str, symbol: str, case: Case) -> str:
    target = "self" if case.target_state_id == state_id else case.target_state_id
    return f"'{symbol}'/'{case.replacement}',{case.direction.value}->{target}"
