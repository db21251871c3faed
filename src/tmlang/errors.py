"""Diagnostic kinds, positioned diagnostics, and error types with source context."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum, auto

from tmlang.tokens import LexErrorKind, Position, Token


class ParseErrorKind(Enum):
    # Grammar structure
    EXPECTED_KEYWORD_STATE = auto()
    EXPECTED_STATE_ID = auto()
    EXPECTED_LEFT_CURLY_BRACE = auto()
    EXPECTED_RIGHT_CURLY_BRACE = auto()
    EXPECTED_CASE_CHARACTER = auto()
    EXPECTED_SLASH = auto()
    EXPECTED_REPLACEMENT_CHARACTER = auto()
    EXPECTED_COMMA = auto()
    EXPECTED_DIRECTION = auto()
    EXPECTED_ARROW = auto()
    EXPECTED_TARGET_STATE = auto()
    EXPECTED_CONSTANT_IDENTIFIER = auto()
    EXPECTED_CONSTANT_VALUE = auto()

    # Symbol resolution
    ID_ALREADY_IN_USE = auto()
    INITIAL_STATE_ALREADY_EXISTS = auto()
    CHARACTER_CASE_ALREADY_EXISTS_WITHIN_STATE = auto()
    COULD_NOT_FIND_CONSTANT = auto()
    STATE_ID_DOES_NOT_EXIST = auto()
    NO_INITIAL_STATE_EXISTS = auto()


DiagnosticKind = LexErrorKind | ParseErrorKind

MESSAGES: dict[DiagnosticKind, str] = {
    LexErrorKind.ILLEGAL_CHARACTER: "illegal character",
    LexErrorKind.EXPECTED_MATCHING_HASHTAG: "unterminated comment, expected matching '#'",
    LexErrorKind.EXPECTED_MATCHING_APOSTROPHE: "expected matching apostrophe",
    LexErrorKind.EXPECTED_CHARACTER_EXPRESSION: "expected character expression",
    LexErrorKind.EXPECTED_GREATER_THAN_SYMBOL: "expected '>' after '-'",
    LexErrorKind.EXPECTED_MATCHING_QUOTATIONS: "unterminated string, expected matching '\"'",
    ParseErrorKind.EXPECTED_KEYWORD_STATE: "expected state declaration",
    ParseErrorKind.EXPECTED_STATE_ID: "expected state id",
    ParseErrorKind.EXPECTED_LEFT_CURLY_BRACE: "expected '{'",
    ParseErrorKind.EXPECTED_RIGHT_CURLY_BRACE: "expected '}' to close state",
    ParseErrorKind.EXPECTED_CASE_CHARACTER: "expected case character or '}'",
    ParseErrorKind.EXPECTED_SLASH: "expected '/' between case character and replacement character",
    ParseErrorKind.EXPECTED_REPLACEMENT_CHARACTER: "expected replacement character",
    ParseErrorKind.EXPECTED_COMMA: "expected ',' between replacement character and tape direction",
    ParseErrorKind.EXPECTED_DIRECTION: "expected direction 'L' or 'R'",
    ParseErrorKind.EXPECTED_ARROW: "expected '->' between direction and target state",
    ParseErrorKind.EXPECTED_TARGET_STATE: "expected target state",
    ParseErrorKind.EXPECTED_CONSTANT_IDENTIFIER: "expected constant name after 'define'",
    ParseErrorKind.EXPECTED_CONSTANT_VALUE: "expected character or string value for constant",
    ParseErrorKind.ID_ALREADY_IN_USE: "id \"{value}\" is already in use",
    ParseErrorKind.INITIAL_STATE_ALREADY_EXISTS: (
        "there should only be one initial state, \"{value}\" is already initial"
    ),
    ParseErrorKind.CHARACTER_CASE_ALREADY_EXISTS_WITHIN_STATE: (
        "case character '{value}' cannot exist more than once in the same state"
    ),
    ParseErrorKind.COULD_NOT_FIND_CONSTANT: "could not find character constant \"{value}\"",
    ParseErrorKind.STATE_ID_DOES_NOT_EXIST: "state \"{value}\" does not exist",
    ParseErrorKind.NO_INITIAL_STATE_EXISTS: "there must be one initial state",
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A positioned lexical or semantic error.

    ``position`` is a character offset into the source, or None for errors
    about the program as a whole (such as a missing initial state).
    """

    kind: DiagnosticKind
    position: int | None
    value: str = ""
    length: int = 0

    @classmethod
    def from_token(cls, token: Token) -> Diagnostic:
        """Build the lexical diagnostic carried by an ERROR token."""
        assert token.error is not None
        return cls(token.error, token.position, "", token.length)

    @property
    def is_lexical(self) -> bool:
        return isinstance(self.kind, LexErrorKind)

    @property
    def message(self) -> str:
        return MESSAGES[self.kind].format(value=self.value)


class LineIndex:
    """Maps source offsets to 1-based line and column numbers."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._starts = [0]
        for i, ch in enumerate(source):
            if ch == "\n":
                self._starts.append(i + 1)

    def position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self._source)))
        line_idx = bisect_right(self._starts, offset) - 1
        return Position(line_idx + 1, offset - self._starts[line_idx] + 1, offset)

    def line_text(self, line: int) -> str:
        """Return the text of a 1-based line without its line ending."""
        if not 1 <= line <= len(self._starts):
            return ""
        start = self._starts[line - 1]
        end = self._starts[line] if line < len(self._starts) else len(self._source)
        return self._source[start:end].rstrip("\n").rstrip("\r")


def format_diagnostic(
    diagnostic: Diagnostic,
    index: LineIndex,
    filename: str = "input.tm",
) -> str:
    """Render a diagnostic with a source excerpt and caret underline."""
    if diagnostic.position is None:
        return f"error: {diagnostic.message}\n  --> {filename}"

    pos = index.position(diagnostic.position)
    source_line = index.line_text(pos.line)
    col = pos.column

    # Underline the token, at least 1 char, but stay within line
    underline_len = max(1, min(diagnostic.length, len(source_line) - col + 1))

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(pos.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {diagnostic.message}\n"
        f"{' ' * gutter_width}--> {filename}:{pos.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class CompileError(Exception):
    """Raised when a compiled program with diagnostics is used as a machine."""

    def __init__(self, diagnostics: list[Diagnostic], source: str) -> None:
        self.diagnostics = list(diagnostics)
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.tm") -> str:
        index = LineIndex(self.source)
        return "\n\n".join(format_diagnostic(d, index, filename) for d in self.diagnostics)


class MachineError(Exception):
    """Raised on invalid use of a Machine (bad automaton, stepping a halted machine)."""
