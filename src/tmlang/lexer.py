"""Turing machine language lexer — converts source text into a flat token stream.

Lexing never raises. Malformed input becomes ``ERROR`` tokens carrying a
:class:`LexErrorKind`, and scanning continues so every lexical error in the
source is reported in one pass.
"""

from __future__ import annotations

from tmlang.tokens import (
    KEYWORDS,
    LexErrorKind,
    Token,
    TokenType,
    is_identifier_char,
    is_identifier_start,
    is_space,
)

_PUNCTUATION: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "/": TokenType.SLASH,
    ",": TokenType.COMMA,
}


class Lexer:
    """Tokenize source text into a list of Token objects."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list, EOF included."""
        while not self._at_end():
            ch = self._peek()

            if is_space(ch):
                self._advance()
            elif ch == "#":
                self._lex_comment()
            elif ch == "'":
                self._lex_character()
            elif ch == '"':
                self._lex_string()
            elif is_identifier_start(ch):
                self._lex_identifier()
            elif ch in _PUNCTUATION:
                self._advance()
                self._emit(_PUNCTUATION[ch], "", self._pos - 1, 1)
            elif ch == "-":
                self._lex_arrow()
            else:
                self._error(LexErrorKind.ILLEGAL_CHARACTER, self._pos, 1)
                self._advance()

        self._emit(TokenType.EOF, "", self._pos, 0)
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _peek(self) -> str:
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        return ch

    def _emit(self, tt: TokenType, value: str, position: int, length: int) -> Token:
        tok = Token(tt, value, position, length)
        self._tokens.append(tok)
        return tok

    def _error(self, kind: LexErrorKind, position: int, length: int = 0) -> Token:
        tok = Token(TokenType.ERROR, "", position, length, kind)
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Token scanners
    # ------------------------------------------------------------------

    def _lex_comment(self) -> None:
        self._advance()  # consume opening #
        start = self._pos
        while not self._at_end():
            if self._advance() == "#":
                self._emit(TokenType.COMMENT, "", start, self._pos - start - 1)
                return
        self._error(LexErrorKind.EXPECTED_MATCHING_HASHTAG, self._pos, self._pos - start)

    def _lex_character(self) -> None:
        start = self._pos
        self._advance()  # consume opening apostrophe

        if self._at_end():
            self._error(LexErrorKind.EXPECTED_CHARACTER_EXPRESSION, self._pos)
            return
        ch = self._advance()

        if self._peek() != "'":
            self._error(LexErrorKind.EXPECTED_MATCHING_APOSTROPHE, self._pos)
            return
        self._advance()

        self._emit(TokenType.CHARACTER, ch, start + 1, 1)

    def _lex_string(self) -> None:
        start = self._pos
        self._advance()  # consume opening quote
        chars = []
        while not self._at_end():
            ch = self._advance()
            if ch == '"':
                self._emit(TokenType.STRING, "".join(chars), start + 1, len(chars))
                return
            chars.append(ch)
        self._error(LexErrorKind.EXPECTED_MATCHING_QUOTATIONS, self._pos, self._pos - start)

    def _lex_identifier(self) -> None:
        start = self._pos
        while not self._at_end() and is_identifier_char(self._peek()):
            self._advance()
        text = self._source[start : self._pos]
        keyword = KEYWORDS.get(text)
        if keyword is not None:
            self._emit(keyword, "", start, len(text))
        else:
            self._emit(TokenType.IDENTIFIER, text, start, len(text))

    def _lex_arrow(self) -> None:
        start = self._pos
        self._advance()  # consume -
        if self._peek() == ">":
            self._advance()
            self._emit(TokenType.ARROW, "", start, 2)
            return
        self._error(LexErrorKind.EXPECTED_GREATER_THAN_SYMBOL, self._pos)


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source).tokenize()
