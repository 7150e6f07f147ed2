"""
Range resolver.

Maps a rule's inclusive (start, end) pattern range onto the tokens of a
match: the highlight runs from the start of token `offset + start` to the
end of token `offset + end`.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from splint.errors import RangeOutOfBounds
from splint.parser.tokens import Span, Token


def resolve_span(
    tokens: Sequence[Token],
    start_index: int,
    rng: Tuple[int, int],
    pattern_len: int,
    rule_name: str,
) -> Span:
    """
    Highlighted span for a match at start_index.

    Raises RangeOutOfBounds if rng does not fit in [0, pattern_len); it is
    never clamped.
    """
    start, end = rng
    if not (0 <= start <= end < pattern_len):
        raise RangeOutOfBounds(
            f"range ({start}, {end}) is outside pattern of length {pattern_len}",
            rule_name,
        )
    first = start_index + start
    last = start_index + end
    if start_index < 0 or last >= len(tokens):
        raise IndexError(f"match at {start_index} does not fit a sequence of {len(tokens)} tokens")
    return tokens[first].span.cover(tokens[last].span)


def match_span(tokens: Sequence[Token], match) -> Span:
    """Resolve the highlight for a matcher.Match."""
    return resolve_span(tokens, match.start_index, match.rule.range, len(match.rule), match.rule_name)
