"""Turing machine language parser — builds an automaton from a token stream.

Parsing runs two passes over the same comment-free token list. The
declaration pass collects every state and constant name into a symbol table
so that states may refer to states declared further down; the definition
pass then builds the automaton, resolving names against that table.

Neither pass raises: problems are collected as :class:`Diagnostic` values in
scan order, and the automaton is only usable when that list is empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tmlang.automaton import Automaton, Case, Direction, State
from tmlang.errors import CompileError, Diagnostic, ParseErrorKind
from tmlang.lexer import tokenize
from tmlang.symbols import Symbol, SymbolData, SymbolDataType, SymbolTable, SymbolType
from tmlang.tokens import Token, TokenType


@dataclass(slots=True)
class ParseResult:
    automaton: Automaton
    symbols: SymbolTable
    diagnostics: list[Diagnostic]

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@dataclass(slots=True)
class CompileResult:
    """Outcome of lexing and parsing a source text.

    ``automaton`` is None when lexing failed, since parsing is skipped then.
    """

    source: str
    tokens: list[Token]
    automaton: Automaton | None
    symbols: SymbolTable = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.automaton is not None and not self.diagnostics

    def unwrap(self) -> Automaton:
        """Return the automaton, or raise CompileError listing the diagnostics."""
        if not self.ok:
            raise CompileError(self.diagnostics, self.source)
        assert self.automaton is not None
        return self.automaton


class _CaseError(Exception):
    """Structural error inside a case; aborts the case at the current token."""

    def __init__(self, kind: ParseErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.name)


class Parser:
    """Two-pass parser for Turing machine token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = [t for t in tokens if t.type != TokenType.COMMENT]
        if not self._tokens or self._tokens[-1].type != TokenType.EOF:
            end = self._tokens[-1].position + self._tokens[-1].length if self._tokens else 0
            self._tokens.append(Token(TokenType.EOF, "", end, 0))
        self._pos = 0
        self._diagnostics: list[Diagnostic] = []

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _report(self, kind: ParseErrorKind, token: Token | None = None, value: str = "") -> None:
        if token is None:
            token = self._peek()
        self._diagnostics.append(Diagnostic(kind, token.position, value, token.length))

    def _synchronize(self) -> None:
        """Skip to the next token that can start a top-level definition."""
        while not self._at(TokenType.EOF, *_DEFINITION_START):
            self._advance()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> ParseResult:
        self._diagnostics = []

        self._pos = 0
        symbols = self._declare_symbols()

        self._pos = 0
        automaton = Automaton()
        while not self._at_eof():
            if self._at(TokenType.DEFINE):
                self._verify_definition()
            elif self._at(TokenType.INITIAL, TokenType.STATE):
                self._parse_state(automaton, symbols)
            else:
                self._report(ParseErrorKind.EXPECTED_KEYWORD_STATE)
                self._advance()
                self._synchronize()

        if not automaton.initial_state_id:
            self._diagnostics.append(Diagnostic(ParseErrorKind.NO_INITIAL_STATE_EXISTS, None))

        return ParseResult(automaton, symbols, self._diagnostics)

    # ------------------------------------------------------------------
    # Pass 1: declarations
    # ------------------------------------------------------------------

    def _declare_symbols(self) -> SymbolTable:
        symbols: SymbolTable = {}
        while not self._at_eof():
            start = self._pos
            declared = self._parse_declaration()
            if declared is not None:
                symbol, name_tok = declared
                if symbol.identifier in symbols:
                    self._report(ParseErrorKind.ID_ALREADY_IN_USE, name_tok, symbol.identifier)
                else:
                    symbols[symbol.identifier] = symbol
            elif self._pos != start and self._at(*_DEFINITION_START):
                # A broken declaration stopped on the start of the next one
                continue
            self._advance()
        return symbols

    def _parse_declaration(self) -> tuple[Symbol, Token] | None:
        """Try to read a declaration at the cursor; the cursor ends on its last token."""
        if self._at(TokenType.DEFINE):
            self._advance()
            if not self._at(TokenType.IDENTIFIER):
                return None
            name_tok = self._advance()
            value_tok = self._peek()
            if value_tok.type == TokenType.CHARACTER:
                data = SymbolData(SymbolDataType.CHARACTER, value_tok.value)
            elif value_tok.type == TokenType.STRING:
                data = SymbolData(SymbolDataType.STRING, value_tok.value)
            else:
                return None
            return Symbol(SymbolType.CONSTANT, name_tok.value, data), name_tok

        if self._at(TokenType.INITIAL):
            self._advance()
        if not self._at(TokenType.STATE):
            return None
        self._advance()
        if not self._at(TokenType.IDENTIFIER):
            return None
        name_tok = self._peek()
        return Symbol(SymbolType.STATE, name_tok.value), name_tok

    # ------------------------------------------------------------------
    # Pass 2: definitions
    # ------------------------------------------------------------------

    def _verify_definition(self) -> None:
        self._advance()  # consume DEFINE
        if not self._at(TokenType.IDENTIFIER):
            self._report(ParseErrorKind.EXPECTED_CONSTANT_IDENTIFIER)
            self._synchronize()
            return
        self._advance()
        if not self._at(TokenType.CHARACTER, TokenType.STRING):
            self._report(ParseErrorKind.EXPECTED_CONSTANT_VALUE)
            self._synchronize()
            return
        self._advance()

    def _parse_state(self, automaton: Automaton, symbols: SymbolTable) -> None:
        is_initial = False
        if self._at(TokenType.INITIAL):
            initial_tok = self._advance()
            if automaton.initial_state_id:
                self._report(
                    ParseErrorKind.INITIAL_STATE_ALREADY_EXISTS,
                    initial_tok,
                    automaton.initial_state_id,
                )
            else:
                is_initial = True

        if not self._at(TokenType.STATE):
            self._report(ParseErrorKind.EXPECTED_KEYWORD_STATE)
            self._synchronize()
            return
        self._advance()

        if not self._at(TokenType.IDENTIFIER):
            self._report(ParseErrorKind.EXPECTED_STATE_ID)
            self._synchronize()
            return
        state_id = self._advance().value

        if not self._at(TokenType.LBRACE):
            self._report(ParseErrorKind.EXPECTED_LEFT_CURLY_BRACE)
            self._synchronize()
            return
        self._advance()

        state: State = {}
        while not self._at(TokenType.RBRACE, TokenType.EOF, *_DEFINITION_START):
            try:
                self._parse_case(state_id, state, symbols)
            except _CaseError as exc:
                self._report(exc.kind)
                if not self._at(TokenType.RBRACE, *_DEFINITION_START):
                    self._advance()

        if self._at(TokenType.RBRACE):
            self._advance()
        else:
            self._report(ParseErrorKind.EXPECTED_RIGHT_CURLY_BRACE)

        # First declaration wins: a duplicate id or a name bound to a
        # constant is parsed for errors but never enters the automaton.
        symbol = symbols.get(state_id)
        if symbol is None or not symbol.is_state or state_id in automaton.states:
            return
        automaton.states[state_id] = state
        if is_initial:
            automaton.initial_state_id = state_id

    def _parse_case(self, state_id: str, state: State, symbols: SymbolTable) -> None:
        """Parse one case into ``state``.

        Structural errors raise _CaseError at the offending token. Resolution
        errors are reported once the case ends, ahead of any structural
        error, and the case is dropped.
        """
        problems: list[tuple[ParseErrorKind, Token, str]] = []
        try:
            parsed = self._read_case(state_id, state, symbols, problems)
        finally:
            for kind, tok, value in problems:
                self._report(kind, tok, value)
        if parsed is not None:
            character, case = parsed
            state[character] = case

    def _read_case(
        self,
        state_id: str,
        state: State,
        symbols: SymbolTable,
        problems: list[tuple[ParseErrorKind, Token, str]],
    ) -> tuple[str, Case] | None:
        symbol_tok = self._peek()
        character = self._parse_symbol(symbols, ParseErrorKind.EXPECTED_CASE_CHARACTER, problems)
        if character is not None and character in state:
            problems.append(
                (ParseErrorKind.CHARACTER_CASE_ALREADY_EXISTS_WITHIN_STATE, symbol_tok, character)
            )

        self._expect(TokenType.SLASH, ParseErrorKind.EXPECTED_SLASH)

        replacement = self._parse_symbol(
            symbols, ParseErrorKind.EXPECTED_REPLACEMENT_CHARACTER, problems
        )

        self._expect(TokenType.COMMA, ParseErrorKind.EXPECTED_COMMA)

        if self._at(TokenType.LEFT):
            direction = Direction.LEFT
        elif self._at(TokenType.RIGHT):
            direction = Direction.RIGHT
        else:
            raise _CaseError(ParseErrorKind.EXPECTED_DIRECTION)
        self._advance()

        self._expect(TokenType.ARROW, ParseErrorKind.EXPECTED_ARROW)

        target_tok = self._peek()
        if target_tok.type == TokenType.SELF:
            target = state_id
        elif target_tok.type == TokenType.IDENTIFIER:
            target = target_tok.value
            symbol = symbols.get(target)
            if symbol is None or not symbol.is_state:
                problems.append((ParseErrorKind.STATE_ID_DOES_NOT_EXIST, target_tok, target))
        else:
            raise _CaseError(ParseErrorKind.EXPECTED_TARGET_STATE)
        self._advance()

        if problems:
            return None
        assert character is not None and replacement is not None
        return character, Case(replacement, direction, target)

    def _parse_symbol(
        self,
        symbols: SymbolTable,
        missing: ParseErrorKind,
        problems: list[tuple[ParseErrorKind, Token, str]],
    ) -> str | None:
        tok = self._peek()
        if tok.type == TokenType.CHARACTER:
            self._advance()
            return tok.value
        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            symbol = symbols.get(tok.value)
            character = symbol.character if symbol is not None else None
            if character is None:
                problems.append((ParseErrorKind.COULD_NOT_FIND_CONSTANT, tok, tok.value))
            return character
        raise _CaseError(missing)

    def _expect(self, tt: TokenType, kind: ParseErrorKind) -> Token:
        if not self._at(tt):
            raise _CaseError(kind)
        return self._advance()


_DEFINITION_START: tuple[TokenType, ...] = (
    TokenType.DEFINE,
    TokenType.INITIAL,
    TokenType.STATE,
)


def parse(tokens: list[Token]) -> ParseResult:
    """Convenience function: run both parser passes over a token list."""
    return Parser(tokens).parse()


def compile_source(source: str) -> CompileResult:
    """Tokenize and parse source text.

    Lexical errors are returned on their own; parsing a malformed token
    stream would only produce noise.
    """
    tokens = tokenize(source)
    lex_errors = [Diagnostic.from_token(t) for t in tokens if t.is_error]
    if lex_errors:
        return CompileResult(source, tokens, None, {}, lex_errors)

    result = parse(tokens)
    return CompileResult(source, tokens, result.automaton, result.symbols, result.diagnostics)
