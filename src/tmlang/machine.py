"""Turing machine interpreter — steps a compiled automaton over a padded tape.

Each step emits up to three events in a fixed order (replace, move, switch
state), or a single Finished event when no case matches the current cell.
``step()`` returns the events it emitted, and also hands each one to the
matching callback as it happens, so a host can pace a run either way.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from tmlang.automaton import Automaton, Direction
from tmlang.errors import MachineError

BLANK = " "
DEFAULT_MARGIN = 2


class RunStatus(Enum):
    STOPPED = auto()
    RUNNING = auto()
    PAUSED = auto()


@dataclass(frozen=True, slots=True)
class TapeSnapshot:
    """Immutable copy of the tape cells and pointer at one moment."""

    cells: str
    pointer: int

    @property
    def current(self) -> str:
        return self.cells[self.pointer]

    @property
    def content(self) -> str:
        """Cells with the blank padding on both ends removed."""
        return self.cells.strip(BLANK)


class Tape:
    """Growable tape that always keeps ``margin`` blank cells around the pointer."""

    def __init__(self, content: str = "", margin: int = DEFAULT_MARGIN) -> None:
        if margin < 1:
            raise ValueError(f"tape margin must be at least 1, got {margin}")
        self._margin = margin
        # An empty tape still needs a cell under the pointer
        self._cells = [BLANK] * margin + (list(content) or [BLANK]) + [BLANK] * margin
        self._pointer = margin

    @property
    def current(self) -> str:
        return self._cells[self._pointer]

    @property
    def pointer(self) -> int:
        return self._pointer

    def write(self, symbol: str) -> str:
        """Overwrite the current cell and return the symbol it held."""
        old = self._cells[self._pointer]
        self._cells[self._pointer] = symbol
        return old

    def move(self, direction: Direction) -> None:
        if direction is Direction.LEFT:
            self._pointer -= 1
            if self._pointer < self._margin:
                self._cells.insert(0, BLANK)
                self._pointer += 1
        else:
            self._pointer += 1
            if self._pointer >= len(self._cells) - self._margin:
                self._cells.append(BLANK)

    def snapshot(self) -> TapeSnapshot:
        return TapeSnapshot("".join(self._cells), self._pointer)


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Replaced:
    tape: TapeSnapshot
    old: str
    new: str


@dataclass(frozen=True, slots=True)
class Moved:
    tape: TapeSnapshot
    direction: Direction


@dataclass(frozen=True, slots=True)
class SwitchedState:
    state_id: str


@dataclass(frozen=True, slots=True)
class Finished:
    tape: TapeSnapshot


Event = Replaced | Moved | SwitchedState | Finished

OnReplaced = Callable[[TapeSnapshot, str, str], object]
OnMoved = Callable[[TapeSnapshot, Direction], object]
OnSwitchedState = Callable[[str], object]
OnFinished = Callable[[TapeSnapshot], object]


@dataclass(frozen=True, slots=True)
class _Callbacks:
    on_replaced: OnReplaced | None = None
    on_moved: OnMoved | None = None
    on_switched_state: OnSwitchedState | None = None
    on_finished: OnFinished | None = None

    def dispatch(self, event: Event) -> None:
        if isinstance(event, Replaced):
            if self.on_replaced is not None:
                self.on_replaced(event.tape, event.old, event.new)
        elif isinstance(event, Moved):
            if self.on_moved is not None:
                self.on_moved(event.tape, event.direction)
        elif isinstance(event, SwitchedState):
            if self.on_switched_state is not None:
                self.on_switched_state(event.state_id)
        elif isinstance(event, Finished):
            if self.on_finished is not None:
                self.on_finished(event.tape)


# ----------------------------------------------------------------------
# Machine
# ----------------------------------------------------------------------


class Machine:
    """Deterministic interpreter for one automaton and one tape.

    The automaton is borrowed read-only; the tape belongs to the machine.
    The only halting condition is a state with no case for the current cell.
    Stepping a halted machine finds no case again and re-emits Finished.
    """

    def __init__(self, automaton: Automaton, tape: str = "", *, margin: int = DEFAULT_MARGIN) -> None:
        if automaton.initial_state is None:
            raise MachineError("automaton has no initial state")
        self._automaton = automaton
        self._margin = margin
        self._input = tape
        self._tape = Tape(tape, margin)
        self._state_id = automaton.initial_state_id
        self._status = RunStatus.STOPPED
        self._halted = False
        self._steps = 0
        self._in_step = False
        self._pending_reset: str | None = None

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def state_id(self) -> str:
        return self._state_id

    @property
    def tape(self) -> TapeSnapshot:
        return self._tape.snapshot()

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def steps(self) -> int:
        """Steps taken since construction or the last reset."""
        return self._steps

    def step(
        self,
        on_replaced: OnReplaced | None = None,
        on_moved: OnMoved | None = None,
        on_switched_state: OnSwitchedState | None = None,
        on_finished: OnFinished | None = None,
    ) -> list[Event]:
        """Execute one step and return the events it emitted, in order."""
        callbacks = _Callbacks(on_replaced, on_moved, on_switched_state, on_finished)
        return self._step(callbacks)

    def run(
        self,
        on_replaced: OnReplaced | None = None,
        on_moved: OnMoved | None = None,
        on_switched_state: OnSwitchedState | None = None,
        on_finished: OnFinished | None = None,
        *,
        max_steps: int | None = None,
    ) -> int:
        """Step until the machine halts, is paused or stopped.

        With ``max_steps`` the machine is paused once that many steps ran.
        Returns the number of steps taken by this call.
        """
        if self._in_step:
            raise MachineError("cannot run a machine from inside one of its callbacks")

        callbacks = _Callbacks(on_replaced, on_moved, on_switched_state, on_finished)
        self._status = RunStatus.RUNNING
        taken = 0
        while self._status is RunStatus.RUNNING:
            if max_steps is not None and taken >= max_steps:
                self._status = RunStatus.PAUSED
                break
            self._step(callbacks)
            taken += 1
        return taken

    def pause(self) -> None:
        if self._status is not RunStatus.RUNNING:
            raise MachineError(f"can only pause a running machine (status is {self._status.name})")
        self._status = RunStatus.PAUSED

    def stop(self) -> None:
        """Stop the machine and re-seed the tape with its original input."""
        self.reset(self._input)

    def reset(self, tape: str) -> None:
        """Stop the machine and start over from the initial state on a new tape.

        Called from inside a step, the reset happens once that step has
        emitted all of its events.
        """
        self._status = RunStatus.STOPPED
        if self._in_step:
            self._pending_reset = tape
            return
        self._input = tape
        self._tape = Tape(tape, self._margin)
        self._state_id = self._automaton.initial_state_id
        self._halted = False
        self._steps = 0

    def _step(self, callbacks: _Callbacks) -> list[Event]:
        if self._in_step:
            raise MachineError("cannot step a machine from inside one of its callbacks")

        events: list[Event] = []

        def emit(event: Event) -> None:
            events.append(event)
            callbacks.dispatch(event)

        self._in_step = True
        try:
            case = self._automaton.case_for(self._state_id, self._tape.current)
            if case is None:
                self._halted = True
                self._status = RunStatus.STOPPED
                emit(Finished(self._tape.snapshot()))
            else:
                old = self._tape.write(case.replacement)
                emit(Replaced(self._tape.snapshot(), old, case.replacement))

                self._tape.move(case.direction)
                emit(Moved(self._tape.snapshot(), case.direction))

                self._state_id = case.target_state_id
                self._steps += 1
                emit(SwitchedState(self._state_id))
        finally:
            self._in_step = False

        if self._pending_reset is not None:
            tape, self._pending_reset = self._pending_reset, None
            self.reset(tape)
        return events
