"""Symbol table entries produced by the declaration pass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class SymbolType(Enum):
    STATE = auto()
    CONSTANT = auto()


class SymbolDataType(Enum):
    CHARACTER = auto()
    STRING = auto()
    NONE = auto()


@dataclass(frozen=True, slots=True)
class SymbolData:
    """Literal value bound to a constant; ``NONE`` for states."""

    type: SymbolDataType
    value: str = ""


NO_DATA = SymbolData(SymbolDataType.NONE)


@dataclass(frozen=True, slots=True)
class Symbol:
    """A named binding to a declared state or a constant literal."""

    type: SymbolType
    identifier: str
    data: SymbolData = NO_DATA

    @property
    def is_state(self) -> bool:
        return self.type is SymbolType.STATE

    @property
    def character(self) -> str | None:
        """The bound character, or None unless this is a character constant."""
        if self.type is SymbolType.CONSTANT and self.data.type is SymbolDataType.CHARACTER:
            return self.data.value
        return None


SymbolTable = dict[str, Symbol]
