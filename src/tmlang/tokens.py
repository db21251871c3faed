"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    COMMENT = auto()  # #...#  value is always empty
    CHARACTER = auto()  # 'x'
    STRING = auto()  # "..."

    IDENTIFIER = auto()  # [A-Za-z_][A-Za-z0-9_]*

    # Keywords
    INITIAL = auto()  # initial
    STATE = auto()  # state
    LEFT = auto()  # L
    RIGHT = auto()  # R
    SELF = auto()  # self
    DEFINE = auto()  # define

    # Punctuation
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    SLASH = auto()  # /
    COMMA = auto()  # ,
    ARROW = auto()  # ->

    EOF = auto()
    ERROR = auto()  # see Token.error


class LexErrorKind(Enum):
    ILLEGAL_CHARACTER = auto()
    EXPECTED_MATCHING_HASHTAG = auto()
    EXPECTED_MATCHING_APOSTROPHE = auto()
    EXPECTED_CHARACTER_EXPRESSION = auto()
    EXPECTED_GREATER_THAN_SYMBOL = auto()
    EXPECTED_MATCHING_QUOTATIONS = auto()


KEYWORDS: dict[str, TokenType] = {
    "initial": TokenType.INITIAL,
    "state": TokenType.STATE,
    "L": TokenType.LEFT,
    "R": TokenType.RIGHT,
    "self": TokenType.SELF,
    "define": TokenType.DEFINE,
}


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    ``position`` and ``length`` are character offsets into the source.
    ``error`` is set only on ``ERROR`` tokens.
    """

    type: TokenType
    value: str
    position: int
    length: int
    error: LexErrorKind | None = None

    @property
    def is_error(self) -> bool:
        return self.type is TokenType.ERROR


_SPACE = frozenset(" \f\n\r\t\v")


def is_alphabetic(ch: str) -> bool:
    """Return True if ch is an ASCII letter."""
    return "a" <= ch <= "z" or "A" <= ch <= "Z"


def is_digit(ch: str) -> bool:
    """Return True if ch is a decimal digit."""
    return "0" <= ch <= "9"


def is_alphanumeric(ch: str) -> bool:
    return is_alphabetic(ch) or is_digit(ch)


def is_space(ch: str) -> bool:
    """Return True for space, form feed, newline, carriage return, tab or vertical tab."""
    return ch in _SPACE


def is_identifier_start(ch: str) -> bool:
    return ch == "_" or is_alphabetic(ch)


def is_identifier_char(ch: str) -> bool:
    return ch == "_" or is_alphanumeric(ch)
