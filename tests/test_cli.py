"""Tests for the CLI module: arg parsing, exit codes, output, tracing."""

from __future__ import annotations

from pathlib import Path

import pytest

from tmlang.cli import (
    DEFAULT_MAX_STEPS,
    CliOptions,
    build_parser,
    compile_file,
    main,
    run_machine,
)
from tmlang.errors import CompileError
from tmlang.machine import DEFAULT_MARGIN

INCREMENTER = "initial state a { '0'/'0',R->a  ' '/'1',R->b }\nstate b { }\n"


def _options(path: Path, **overrides) -> CliOptions:
    values = dict(
        input_file=path,
        tape="",
        margin=DEFAULT_MARGIN,
        max_steps=DEFAULT_MAX_STEPS,
        trace=False,
        check=False,
        watch=False,
        debug=False,
    )
    values.update(overrides)
    return CliOptions(**values)


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["m.tm"])
        assert ns.input == "m.tm"
        assert ns.tape is None
        assert ns.max_steps is None

    def test_tape_flag(self) -> None:
        ns = build_parser().parse_args(["m.tm", "-t", "0101"])
        assert ns.tape == "0101"

    def test_numeric_flags(self) -> None:
        ns = build_parser().parse_args(["m.tm", "--max-steps", "50", "--margin", "4"])
        assert ns.max_steps == 50
        assert ns.margin == 4

    def test_switches(self) -> None:
        ns = build_parser().parse_args(["m.tm", "--trace", "--check", "--watch", "--debug"])
        assert ns.trace and ns.check and ns.watch and ns.debug


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        assert main([str(prog), "-t", "0"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "01\n"
        assert "halted in state b" in captured.err

    def test_compile_error_returns_1(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "bad.tm"
        prog.write_text("state a { '0'/'1',R->nowhere }\n")
        assert main([str(prog)]) == 1
        err = capsys.readouterr().err
        assert 'state "nowhere" does not exist' in err
        assert "there must be one initial state" in err
        assert f"{prog}:1:22" in err

    def test_lex_error_returns_1(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "lex.tm"
        prog.write_text("initial state a { ! }\n")
        assert main([str(prog)]) == 1
        assert "illegal character" in capsys.readouterr().err

    def test_step_limit_returns_2(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "spin.tm"
        prog.write_text("initial state s { ' '/' ',R->self }\n")
        assert main([str(prog), "--max-steps", "10"]) == 2
        assert "without halting" in capsys.readouterr().err

    def test_bad_margin_returns_2(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        assert main([str(prog), "--margin", "0"]) == 2
        assert "margin" in capsys.readouterr().err

    def test_check_does_not_run(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "spin.tm"
        prog.write_text("initial state s { ' '/' ',R->self }\n")
        assert main([str(prog), "--check"]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ok" in captured.err


# ---------------------------------------------------------------------------
# Trace and debug output
# ---------------------------------------------------------------------------


class TestTrace:
    def test_trace_lists_events(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        assert main([str(prog), "-t", "0", "--trace"]) == 0
        err = capsys.readouterr().err.splitlines()
        assert err[0] == "state a"
        assert "replace ' ' -> '1'" in err
        assert "move R  |  01   |" in err
        assert "state b" in err
        assert "halt" in err

    def test_debug_dumps(self, tmp_path: Path, capsys) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        assert main([str(prog), "--check", "--debug"]) == 0
        err = capsys.readouterr().err
        assert "Tokens" in err
        assert "INITIAL" in err
        assert "Automaton initial='a'" in err
        assert "'0' -> '0' R a" in err


# ---------------------------------------------------------------------------
# compile_file / run_machine
# ---------------------------------------------------------------------------


class TestCompileAndRun:
    def test_compile_file(self, tmp_path: Path) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        automaton = compile_file(_options(prog))
        assert automaton.initial_state_id == "a"

    def test_compile_file_raises(self, tmp_path: Path) -> None:
        prog = tmp_path / "empty.tm"
        prog.write_text("")
        with pytest.raises(CompileError):
            compile_file(_options(prog))

    def test_run_machine(self, tmp_path: Path) -> None:
        prog = tmp_path / "inc.tm"
        prog.write_text(INCREMENTER)
        options = _options(prog, tape="00", margin=1)
        machine = run_machine(compile_file(options), options)
        assert machine.halted
        assert machine.tape.content == "001"
