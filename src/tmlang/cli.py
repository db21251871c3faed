"""Command-line interface for the Turing machine language."""

from __future__ import annotations

import argparse
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tmlang.automaton import Automaton, Direction
from tmlang.errors import CompileError
from tmlang.machine import DEFAULT_MARGIN, Machine, TapeSnapshot

DEFAULT_MAX_STEPS = 10_000


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Resolved settings for one compile-and-run invocation."""

    input_file: Path
    tape: str
    margin: int
    max_steps: int
    trace: bool
    check: bool
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the tmlang argument parser."""
    p = argparse.ArgumentParser(
        prog="tmlang",
        description="Compile and run a Turing machine program",
    )
    p.add_argument("input", help="Input .tm file")
    p.add_argument("-t", "--tape", help="Initial tape content (default: empty)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover tmlang.toml)",
    )
    p.add_argument(
        "--max-steps",
        type=int,
        default=None,
        metavar="N",
        help=f"Pause the machine after N steps (default: {DEFAULT_MAX_STEPS})",
    )
    p.add_argument(
        "--margin",
        type=int,
        default=None,
        metavar="N",
        help=f"Blank cells kept on each side of the tape (default: {DEFAULT_MARGIN})",
    )
    p.add_argument("--trace", action="store_true", help="Print every machine event to stderr")
    p.add_argument("--check", action="store_true", help="Compile only, do not run")
    p.add_argument("--watch", action="store_true", help="Watch for changes and rerun")
    p.add_argument("--debug", action="store_true", help="Dump tokens and automaton to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Read ``tmlang.toml`` (or an explicit config file); {} when there is none."""
    path = config_path if config_path is not None else input_dir / "tmlang.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    cfg_tape = config.get("tape")
    if not isinstance(cfg_tape, dict):
        cfg_tape = {}
    cfg_run = config.get("run")
    if not isinstance(cfg_run, dict):
        cfg_run = {}

    # Tape content: config < CLI
    tape = ""
    if isinstance(cfg_tape.get("input"), str):
        tape = cfg_tape["input"]
    if args.tape is not None:
        tape = args.tape

    # Margin: config < CLI
    margin = DEFAULT_MARGIN
    if isinstance(cfg_tape.get("margin"), int):
        margin = cfg_tape["margin"]
    if args.margin is not None:
        margin = args.margin
    if margin < 1:
        raise argparse.ArgumentTypeError(f"margin must be at least 1, got {margin}")

    # Step limit: config < CLI
    max_steps = DEFAULT_MAX_STEPS
    if isinstance(cfg_run.get("max_steps"), int):
        max_steps = cfg_run["max_steps"]
    if args.max_steps is not None:
        max_steps = args.max_steps
    if max_steps < 1:
        raise argparse.ArgumentTypeError(f"max steps must be at least 1, got {max_steps}")

    return CliOptions(
        input_file=input_file,
        tape=tape,
        margin=margin,
        max_steps=max_steps,
        trace=args.trace,
        check=args.check,
        watch=args.watch,
        debug=args.debug,
    )


def compile_file(options: CliOptions) -> Automaton:
    """Read and compile a program file; raises CompileError on diagnostics."""
    from tmlang.debug import dump_automaton, dump_tokens
    from tmlang.parser import compile_source

    source = options.input_file.read_text(encoding="utf-8")
    result = compile_source(source)

    if options.debug:
        dump_tokens(result.tokens, file=sys.stderr)
        if result.automaton is not None:
            dump_automaton(result.automaton, file=sys.stderr)

    return result.unwrap()


def run_machine(automaton: Automaton, options: CliOptions) -> Machine:
    """Run the automaton on the configured tape until it halts or hits the step limit."""
    machine = Machine(automaton, options.tape, margin=options.margin)

    if not options.trace:
        machine.run(max_steps=options.max_steps)
        return machine

    def on_replaced(tape: TapeSnapshot, old: str, new: str) -> None:
        print(f"replace {old!r} -> {new!r}", file=sys.stderr)

    def on_moved(tape: TapeSnapshot, direction: Direction) -> None:
        print(f"move {direction.value}  |{tape.cells}|", file=sys.stderr)

    def on_switched_state(state_id: str) -> None:
        print(f"state {state_id}", file=sys.stderr)

    def on_finished(tape: TapeSnapshot) -> None:
        print("halt", file=sys.stderr)

    print(f"state {machine.state_id}", file=sys.stderr)
    machine.run(
        on_replaced,
        on_moved,
        on_switched_state,
        on_finished,
        max_steps=options.max_steps,
    )
    return machine


def execute(options: CliOptions) -> int:
    """Compile and (unless --check) run once, reporting results. Returns an exit code."""
    try:
        automaton = compile_file(options)
    except CompileError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1

    if options.check:
        print(f"{options.input_file}: ok", file=sys.stderr)
        return 0

    machine = run_machine(automaton, options)
    sys.stdout.write(machine.tape.content + "\n")
    sys.stdout.flush()

    if not machine.halted:
        print(
            f"stopped after {machine.steps} steps without halting (state {machine.state_id})",
            file=sys.stderr,
        )
        return 2
    print(f"halted in state {machine.state_id} after {machine.steps} steps", file=sys.stderr)
    return 0


def watch_loop(options: CliOptions) -> None:
    """Rerun the program whenever its file changes, until interrupted."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                execute(options)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    return execute(options)
