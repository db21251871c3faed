"""Test automaton building from well-formed programs."""

from tmlang.automaton import Case, Direction
from tmlang.lexer import tokenize
from tmlang.parser import compile_source, parse


class TestStates:
    def test_single_initial_state(self, build):
        automaton = build("initial state a { }")
        assert automaton.initial_state_id == "a"
        assert automaton.states == {"a": {}}

    def test_incrementer(self, incrementer):
        assert incrementer.initial_state_id == "a"
        assert incrementer.states["a"] == {
            "0": Case("0", Direction.RIGHT, "a"),
            " ": Case("1", Direction.RIGHT, "b"),
        }
        assert incrementer.states["b"] == {}

    def test_initial_state_need_not_be_first(self, build):
        automaton = build("state b { }\ninitial state a { ' '/'x',L->b }")
        assert automaton.initial_state_id == "a"
        assert list(automaton.states) == ["b", "a"]

    def test_comments_ignored(self, build):
        automaton = build("# header # initial state a { # inside # '0'/'1',R->self }")
        assert automaton.states["a"]["0"] == Case("1", Direction.RIGHT, "a")


class TestCases:
    def test_left_direction(self, build):
        automaton = build("initial state a { '1'/'0',L->a }")
        assert automaton.states["a"]["1"].direction == Direction.LEFT

    def test_self_resolves_to_enclosing_state(self, build):
        automaton = build("initial state loop { 'x'/'x',R->self }\nstate other { 'y'/'y',L->self }")
        assert automaton.states["loop"]["x"].target_state_id == "loop"
        assert automaton.states["other"]["y"].target_state_id == "other"

    def test_forward_reference(self, build):
        automaton = build("initial state a { '0'/'1',R->later }\nstate later { }")
        assert automaton.states["a"]["0"].target_state_id == "later"

    def test_constants_as_symbols(self, build):
        source = "define blank ' '\ndefine one '1'\ninitial state a { blank/one,R->self }"
        automaton = build(source)
        assert automaton.states["a"][" "] == Case("1", Direction.RIGHT, "a")

    def test_constant_defined_after_use(self, build):
        automaton = build("initial state a { mark/mark,L->self }\ndefine mark '*'")
        assert "*" in automaton.states["a"]

    def test_string_constant_may_be_defined(self, build):
        automaton = build('define title "adder"\ninitial state a { }')
        assert automaton.initial_state_id == "a"

    def test_case_order_preserved(self, build):
        automaton = build("initial state a { 'c'/'c',R->a 'a'/'a',R->a 'b'/'b',R->a }")
        assert list(automaton.states["a"]) == ["c", "a", "b"]


class TestAutomatonHelpers:
    def test_case_for(self, incrementer):
        assert incrementer.case_for("a", "0") == Case("0", Direction.RIGHT, "a")
        assert incrementer.case_for("b", " ") is None
        assert incrementer.case_for("missing", "0") is None

    def test_initial_state(self, incrementer):
        assert incrementer.initial_state is incrementer.states["a"]


class TestIdempotence:
    def test_same_tokens_same_result(self, incrementer_source):
        tokens = tokenize(incrementer_source)
        first = parse(tokens)
        second = parse(tokens)
        assert first.automaton == second.automaton
        assert first.diagnostics == second.diagnostics
        assert first.symbols == second.symbols

    def test_same_diagnostics_for_bad_source(self):
        tokens = tokenize("initial state a { '0' '1' } state b { x/'1',R->nowhere }")
        assert parse(tokens).diagnostics == parse(tokens).diagnostics

    def test_parser_does_not_mutate_tokens(self, incrementer_source):
        tokens = tokenize(incrementer_source)
        before = list(tokens)
        parse(tokens)
        assert tokens == before


class TestCompileSource:
    def test_ok(self, incrementer_source):
        result = compile_source(incrementer_source)
        assert result.ok
        assert result.unwrap().initial_state_id == "a"
        assert result.tokens[-1].position == len(incrementer_source)

    def test_package_compile(self, incrementer_source):
        import tmlang

        assert tmlang.compile(incrementer_source).ok
