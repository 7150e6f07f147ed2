"""
Tests for highlight range resolution.
"""

import pytest

from splint.errors import RangeOutOfBounds
from splint.lint.matcher import find_matches
from splint.lint.ranges import match_span, resolve_span


class TestResolveSpan:
    """Pattern range to source span."""

    def test_sub_range(self, lex):
        """(1, 2) covers `unwrap(` and nothing else."""
        tokens = lex("a.unwrap()")
        span = resolve_span(tokens, 1, (1, 2), 4, "r")

        assert span.start == tokens[2].span.start
        assert span.end == tokens[3].span.end
        assert (span.start.offset, span.end.offset) == (2, 9)

    def test_full_range_covers_match(self, lex):
        tokens = lex("a.unwrap()")
        span = resolve_span(tokens, 1, (0, 3), 4, "r")
        assert (span.start.offset, span.end.offset) == (1, 10)

    def test_single_token(self, lex):
        tokens = lex("fn test_x")
        span = resolve_span(tokens, 0, (1, 1), 2, "r")
        assert span == tokens[1].span

    def test_multiline(self, lex):
        tokens = lex("x\n    .unwrap()")
        span = resolve_span(tokens, 1, (0, 3), 4, "r")
        assert span.start.line == 2
        assert span.start.column == 5

    def test_out_of_bounds_rejected(self, lex):
        """Never clamped to the pattern."""
        tokens = lex("a b c d e f")
        with pytest.raises(RangeOutOfBounds) as exc:
            resolve_span(tokens, 0, (2, 5), 3, "wide")
        assert exc.value.rule_name == "wide"

    @pytest.mark.parametrize("rng", [(-1, 0), (1, 0), (0, 3)])
    def test_other_bad_ranges(self, lex, rng):
        with pytest.raises(RangeOutOfBounds):
            resolve_span(lex("a b c"), 0, rng, 3, "r")

    def test_match_past_end(self, lex):
        with pytest.raises(IndexError):
            resolve_span(lex("a b"), 1, (0, 1), 2, "r")


class TestMatchSpan:
    """Resolution from a Match."""

    def test_uses_rule_range(self, compiled, lex, unwrap_pattern):
        rule = compiled(pattern=unwrap_pattern, rng=(1, 2))
        tokens = lex("a.unwrap().unwrap()")

        spans = [match_span(tokens, m) for m in find_matches(rule, tokens)]

        assert [(s.start.offset, s.end.offset) for s in spans] == [(2, 9), (11, 18)]
