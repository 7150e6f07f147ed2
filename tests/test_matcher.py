"""
Tests for the matching engine.
"""

from splint.lint.matcher import build_kind_index, find_matches, scan
from splint.parser.tokens import TokenKind


class TestFindMatches:
    """Single-rule sliding window."""

    def test_overlapping_unwraps(self, compiled, lex, unwrap_pattern):
        """a.unwrap().unwrap() matches twice."""
        rule = compiled(pattern=unwrap_pattern)
        tokens = lex("a.unwrap().unwrap()")

        matches = find_matches(rule, tokens)

        assert [m.start_index for m in matches] == [1, 5]

    def test_overlap_not_suppressed(self, compiled, lex):
        """Windows sharing tokens are all reported."""
        rule = compiled(pattern=[("Punct", ":"), ("Punct", ":")])
        tokens = lex(":::")
        assert [m.start_index for m in find_matches(rule, tokens)] == [0, 1]

    def test_any_ident_counts_every_ident(self, compiled, lex):
        rule = compiled(pattern=[("Ident", None)])
        tokens = lex("fn main() { let x = y.z(1, \"s\"); }")
        idents = sum(1 for t in tokens if t.kind is TokenKind.IDENT)

        assert len(find_matches(rule, tokens)) == idents

    def test_regex_value(self, compiled, lex):
        rule = compiled(pattern=[("Ident", "/^test_/")])
        tokens = lex("test_foo foo_test")

        matches = find_matches(rule, tokens)

        assert [tokens[m.start_index].value for m in matches] == ["test_foo"]

    def test_kind_must_match(self, compiled, lex):
        """An exact value on the wrong kind is not a match."""
        rule = compiled(pattern=[("Ident", "42")])
        assert find_matches(rule, lex('42 "42"')) == []

    def test_delim_alias(self, compiled, lex):
        rule = compiled(pattern=[("Delim", None)])
        assert len(find_matches(rule, lex("f(a[0])"))) == 4

    def test_pattern_spans_groups(self, compiled, lex):
        """Open, anything, close matches across the flattened group."""
        rule = compiled(pattern=[("DelimOpen", "("), ("Literal", None), ("DelimClose", ")")])
        matches = find_matches(rule, lex("f(1) g(x) h(\"s\")"))
        assert len(matches) == 2

    def test_pattern_longer_than_tokens(self, compiled, lex, unwrap_pattern):
        rule = compiled(pattern=unwrap_pattern)
        assert find_matches(rule, lex(".unwrap")) == []

    def test_empty_tokens(self, compiled):
        assert find_matches(compiled(), []) == []

    def test_match_window(self, compiled, lex, unwrap_pattern):
        rule = compiled(pattern=unwrap_pattern)
        tokens = lex("x.unwrap()")

        match = find_matches(rule, tokens)[0]

        assert match.end_index == 5
        assert [t.value for t in match.window(tokens)] == [".", "unwrap", "(", ")"]

    def test_index_gives_same_results(self, compiled, lex):
        """Candidate narrowing changes cost, not results."""
        tokens = lex("let v = a.b(c[0]).d{e}; f(g, h);")
        patterns = [
            [("Delim", None), ("Ident", None)],
            [("Punct", "."), ("Ident", None)],
            [("Ident", None), ("DelimOpen", None)],
            [("Literal", None)],
        ]
        index = build_kind_index(tokens)
        for pattern in patterns:
            rule = compiled(pattern=pattern)
            assert find_matches(rule, tokens, index) == find_matches(rule, tokens)


class TestScan:
    """Whole rule sets over one token sequence."""

    def test_rules_are_independent(self, compiled, lex, unwrap_pattern):
        tokens = lex("a.unwrap().unwrap()")
        unwrap = compiled(name="unwrap", pattern=unwrap_pattern, order=0)
        dot = compiled(name="dot", pattern=[("Punct", ".")], order=1)

        matches = scan(tokens, [unwrap, dot])

        assert [(m.rule_name, m.start_index) for m in matches] == [
            ("unwrap", 1),
            ("unwrap", 5),
            ("dot", 1),
            ("dot", 5),
        ]

    def test_empty_sequence(self, compiled):
        assert scan([], [compiled()]) == []

    def test_no_rules(self, lex):
        assert scan(lex("a b c"), []) == []

    def test_deterministic(self, compiled, lex, unwrap_pattern):
        tokens = lex("x.unwrap(); y.unwrap(); fn test_a() {}")
        rules = [
            compiled(name="u", pattern=unwrap_pattern, order=0),
            compiled(name="t", pattern=[("Ident", "fn"), ("Ident", "/^test_/")], order=1),
        ]
        first = scan(tokens, rules)
        assert all(scan(tokens, rules) == first for _ in range(5))
