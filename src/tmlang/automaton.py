"""Compiled automaton: states, cases and tape directions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Direction(Enum):
    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True, slots=True)
class Case:
    """Transition taken when the current cell holds the case's input symbol."""

    replacement: str
    direction: Direction
    target_state_id: str


# input symbol -> case
State = dict[str, Case]


@dataclass(slots=True)
class Automaton:
    """Transition graph with one designated initial state.

    An empty ``initial_state_id`` means no initial state was declared.
    The parser fills this in; callers treat it as read-only afterwards.
    """

    initial_state_id: str = ""
    states: dict[str, State] = field(default_factory=dict)

    @property
    def initial_state(self) -> State | None:
        return self.states.get(self.initial_state_id)

    def case_for(self, state_id: str, symbol: str) -> Case | None:
        """Return the case of ``state_id`` matching ``symbol``, or None."""
        state = self.states.get(state_id)
        if state is None:
            return None
        return state.get(symbol)
