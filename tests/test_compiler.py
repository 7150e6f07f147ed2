"""
Tests for the pattern compiler.
"""

import pytest

from splint.errors import InvalidPattern, InvalidRegex, RangeOutOfBounds, RuleConfigError, RuleSetError
from splint.lint.compiler import (
    ANY_VALUE,
    MatchMode,
    compile_rule,
    compile_rules,
    compile_value,
    normalize_kind,
)
from splint.lint.loader import load_rules
from splint.lint.rules import Rule, RuleSet
from splint.parser.tokens import TokenKind


class TestValueMatchers:
    """null / exact / regex values."""

    def test_none_is_any(self):
        assert compile_value(None, "r") is ANY_VALUE
        assert ANY_VALUE.matches("anything")

    def test_exact(self):
        matcher = compile_value("unwrap", "r")
        assert matcher.mode is MatchMode.EXACT
        assert matcher.matches("unwrap")
        assert not matcher.matches("unwrap_or")

    def test_regex(self):
        matcher = compile_value("/^test_/", "r")
        assert matcher.mode is MatchMode.REGEX
        assert matcher.text == "^test_"
        assert matcher.matches("test_foo")
        assert not matcher.matches("foo_test_")

    def test_regex_is_a_search(self):
        """Unanchored patterns match anywhere in the value."""
        matcher = compile_value("/unwrap/", "r")
        assert matcher.matches("unwrap_or_default")

    def test_lone_slash_is_exact(self):
        """A single "/" is the division punct, not an empty regex."""
        matcher = compile_value("/", "r")
        assert matcher.mode is MatchMode.EXACT
        assert matcher.matches("/")

    def test_empty_regex_matches_everything(self):
        matcher = compile_value("//", "r")
        assert matcher.mode is MatchMode.REGEX
        assert matcher.matches("x")

    def test_invalid_regex(self):
        with pytest.raises(InvalidRegex) as exc:
            compile_value("/[unclosed/", "bad_rule")
        assert exc.value.rule_name == "bad_rule"

    def test_str(self):
        assert str(compile_value("x", "r")) == "'x'"
        assert str(compile_value("/x+/", "r")) == "/x+/"
        assert str(ANY_VALUE) == "*"


class TestKinds:
    """Token kind names."""

    @pytest.mark.parametrize("name,expected", [
        ("Ident", "ident"),
        ("DelimOpen", "delimopen"),
        ("delim_open", "delimopen"),
        ("Delim-Close", "delimclose"),
    ])
    def test_normalize(self, name, expected):
        assert normalize_kind(name) == expected

    def test_delim_alias_accepts_both(self, compiled):
        rule = compiled(pattern=[("Delim", None)])
        assert rule.entries[0].kinds == frozenset({TokenKind.DELIM_OPEN, TokenKind.DELIM_CLOSE})

    def test_unknown_kind(self, compiled):
        with pytest.raises(InvalidPattern, match="unknown token kind"):
            compiled(name="typo", pattern=[("Identifier", "x")])


class TestCompileRule:
    """Single-rule compilation."""

    def test_entries_follow_pattern(self, compiled, unwrap_pattern):
        rule = compiled(pattern=unwrap_pattern, order=3)
        assert len(rule) == 4
        assert rule.order == 3
        assert rule.entries[0].kinds == frozenset({TokenKind.PUNCT})
        assert rule.entries[1].value.text == "unwrap"

    def test_empty_pattern(self):
        rule = Rule(name="empty", description="d", range=(0, 0), pattern=[])
        with pytest.raises(InvalidPattern, match="empty"):
            compile_rule(rule)

    @pytest.mark.parametrize("rng", [(2, 5), (-1, 0), (2, 1), (0, 3)])
    def test_range_out_of_bounds(self, make_rule, rng):
        rule = make_rule(pattern=[("Ident", None)] * 3, rng=rng)
        with pytest.raises(RangeOutOfBounds):
            compile_rule(rule)

    def test_range_full_pattern(self, compiled):
        rule = compiled(pattern=[("Ident", None)] * 3, rng=(0, 2))
        assert rule.range == (0, 2)

    def test_errors_name_the_rule(self, make_rule):
        rule = make_rule(name="my_rule", pattern=[("Ident", None)], rng=(0, 1))
        with pytest.raises(RuleConfigError) as exc:
            compile_rule(rule)
        assert "my_rule" in str(exc.value)

    def test_entry_matches_kind_and_value(self, compiled, lex):
        rule = compiled(pattern=[("Ident", "/^un/")])
        ident, punct = lex("unwrap ;")
        assert rule.entries[0].matches(ident)
        assert not rule.entries[0].matches(punct)


class TestCompileRules:
    """Whole rule sets."""

    def test_fixture_compiles_in_order(self, rules_dir):
        compiled = compile_rules(load_rules(rules_dir / "splint.json"))
        assert [r.name for r in compiled] == ["no_unwrap", "test_prefix", "todo_macro"]
        assert [r.order for r in compiled] == [0, 1, 2]
        assert compiled.errors == []
        assert compiled.get("test_prefix").range == (1, 1)
        assert compiled.get("missing") is None

    def _mixed(self, make_rule):
        return RuleSet(rules={
            "good": make_rule(name="good"),
            "bad_range": make_rule(name="bad_range", rng=(0, 4)),
            "bad_regex": make_rule(name="bad_regex", pattern=[("Ident", "/(/")]),
        })

    def test_strict_collects_every_error(self, make_rule):
        with pytest.raises(RuleSetError) as exc:
            compile_rules(self._mixed(make_rule))
        names = [e.rule_name for e in exc.value.errors]
        assert names == ["bad_range", "bad_regex"]
        assert "2 invalid rule(s)" in str(exc.value)

    def test_lenient_skips_and_records(self, make_rule, caplog):
        compiled = compile_rules(self._mixed(make_rule), strict=False)
        assert [r.name for r in compiled] == ["good"]
        assert len(compiled.errors) == 2
        assert "Skipping" in caplog.text

    def test_lenient_keeps_declaration_order(self, make_rule):
        ruleset = RuleSet(rules={
            "bad": make_rule(name="bad", rng=(1, 1)),
            "first": make_rule(name="first"),
            "second": make_rule(name="second"),
        })
        compiled = compile_rules(ruleset, strict=False)
        assert [r.order for r in compiled] == [1, 2]

    def test_empty_ruleset(self):
        assert len(compile_rules(RuleSet())) == 0
