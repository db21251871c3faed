"""Test the padded tape: margins, growth, and snapshots."""

import pytest

from tmlang.automaton import Direction
from tmlang.machine import BLANK, Tape, TapeSnapshot


class TestConstruction:
    def test_content_is_padded(self):
        tape = Tape("01", margin=2)
        snap = tape.snapshot()
        assert snap.cells == "  01  "
        assert snap.pointer == 2
        assert snap.current == "0"

    def test_empty_tape_has_a_cell(self):
        tape = Tape("", margin=1)
        assert tape.current == BLANK
        assert tape.snapshot().cells == "   "

    def test_margin_must_be_positive(self):
        with pytest.raises(ValueError, match="margin"):
            Tape("0", margin=0)


class TestWrite:
    def test_returns_old_symbol(self):
        tape = Tape("a")
        assert tape.write("b") == "a"
        assert tape.current == "b"


class TestMove:
    def test_right_within_content(self):
        tape = Tape("ab", margin=1)
        tape.move(Direction.RIGHT)
        assert tape.current == "b"
        assert len(tape.snapshot().cells) == 4

    def test_right_into_margin_appends(self):
        tape = Tape("ab", margin=1)
        tape.move(Direction.RIGHT)
        tape.move(Direction.RIGHT)
        snap = tape.snapshot()
        assert snap.cells == " ab  "
        assert snap.pointer == 3

    def test_left_into_margin_prepends(self):
        tape = Tape("ab", margin=1)
        tape.move(Direction.LEFT)
        snap = tape.snapshot()
        assert snap.cells == "  ab "
        assert snap.pointer == 1
        assert snap.current == BLANK

    def test_left_keeps_content_position(self):
        tape = Tape("xy", margin=2)
        for _ in range(5):
            tape.move(Direction.LEFT)
        snap = tape.snapshot()
        assert snap.pointer == 2
        assert snap.cells[snap.pointer + 5] == "x"

    @pytest.mark.parametrize("direction", [Direction.LEFT, Direction.RIGHT])
    def test_margin_always_kept(self, direction):
        tape = Tape("0", margin=3)
        for _ in range(20):
            tape.move(direction)
            snap = tape.snapshot()
            assert snap.pointer >= 3
            assert len(snap.cells) - snap.pointer - 1 >= 3


class TestSnapshot:
    def test_snapshot_is_a_copy(self):
        tape = Tape("a")
        snap = tape.snapshot()
        tape.write("z")
        assert snap.current == "a"

    def test_content_strips_blanks(self):
        assert TapeSnapshot("   1 0  ", 3).content == "1 0"
