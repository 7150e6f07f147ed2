"""
Matching engine.

Slides each compiled rule across the flat token sequence and reports every
offset where all pattern positions match. Overlapping occurrences of the
same rule are all reported; rules never affect each other.

Candidate offsets are narrowed with a per-scan index from token kind to
positions, so a rule is only tried where its first entry's kind occurs.
This changes cost, not results.
"""

from __future__ import annotations

import heapq
import logging
from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from splint.lint.compiler import CompiledRule
from splint.parser.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """One occurrence of a rule pattern, starting at start_index."""
    rule: CompiledRule = field(compare=False, repr=False)
    rule_name: str
    start_index: int

    @property
    def end_index(self) -> int:
        """Exclusive end offset of the matched window."""
        return self.start_index + len(self.rule)

    def window(self, tokens: Sequence[Token]) -> Sequence[Token]:
        return tokens[self.start_index:self.end_index]


def build_kind_index(tokens: Sequence[Token]) -> Dict[TokenKind, List[int]]:
    """Map each token kind to the ascending offsets where it occurs."""
    index: Dict[TokenKind, List[int]] = defaultdict(list)
    for i, tok in enumerate(tokens):
        index[tok.kind].append(i)
    return index


def _candidates(rule: CompiledRule, index: Dict[TokenKind, List[int]], last: int) -> Iterable[int]:
    """Offsets <= last where the rule's first entry kind appears."""
    lists = [index.get(kind, []) for kind in rule.entries[0].kinds]
    lists = [positions[:bisect_right(positions, last)] for positions in lists if positions]
    if not lists:
        return ()
    if len(lists) == 1:
        return lists[0]
    return heapq.merge(*lists)


def find_matches(
    rule: CompiledRule,
    tokens: Sequence[Token],
    index: Optional[Dict[TokenKind, List[int]]] = None,
) -> List[Match]:
    """
    Every offset where rule matches, ascending, overlaps included.

    A pattern longer than the token sequence yields no matches.
    """
    last = len(tokens) - len(rule)
    if last < 0:
        return []

    offsets: Iterable[int]
    if index is None:
        offsets = range(last + 1)
    else:
        offsets = _candidates(rule, index, last)

    return [
        Match(rule=rule, rule_name=rule.name, start_index=offset)
        for offset in offsets
        if rule.matches_at(tokens, offset)
    ]


def scan(tokens: Sequence[Token], rules: Iterable[CompiledRule]) -> List[Match]:
    """Run every rule over one token sequence. Grouped by rule, then offset."""
    if not tokens:
        return []

    index = build_kind_index(tokens)
    matches: List[Match] = []
    for rule in rules:
        matches.extend(find_matches(rule, tokens, index))

    logger.debug("Scanned %d tokens: %d matches", len(tokens), len(matches))
    return matches
