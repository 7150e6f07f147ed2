"""
Pattern compiler.

Turns a declarative Rule into a CompiledRule: one PatternEntry per
position, each holding the accepted token kinds and a ValueMatcher.
Regexes are compiled here, once per rule, never per comparison.
Compiled rules are immutable and shared read-only across worker threads.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from splint.errors import (
    InvalidPattern,
    InvalidRegex,
    RangeOutOfBounds,
    RuleConfigError,
    RuleSetError,
)
from splint.lint.rules import Needle, Rule, RuleSet
from splint.parser.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


# Normalized spelling -> accepted kinds. "delim" is the legacy single kind
# covering both sides of a group.
KIND_NAMES: Dict[str, FrozenSet[TokenKind]] = {
    "punct": frozenset({TokenKind.PUNCT}),
    "ident": frozenset({TokenKind.IDENT}),
    "literal": frozenset({TokenKind.LITERAL}),
    "delimopen": frozenset({TokenKind.DELIM_OPEN}),
    "delimclose": frozenset({TokenKind.DELIM_CLOSE}),
    "delim": frozenset({TokenKind.DELIM_OPEN, TokenKind.DELIM_CLOSE}),
}


class MatchMode(Enum):
    EXACT = "exact"
    REGEX = "regex"
    ANY = "any"


@dataclass(frozen=True)
class ValueMatcher:
    """Tagged value test: exact string, regex search, or wildcard."""
    mode: MatchMode
    text: Optional[str] = None
    regex: Optional["re.Pattern[str]"] = field(default=None, compare=False)

    def matches(self, value: str) -> bool:
        if self.mode is MatchMode.EXACT:
            return value == self.text
        if self.mode is MatchMode.REGEX:
            return self.regex.search(value) is not None
        return True

    def __str__(self) -> str:
        if self.mode is MatchMode.EXACT:
            return repr(self.text)
        if self.mode is MatchMode.REGEX:
            return f"/{self.text}/"
        return "*"


ANY_VALUE = ValueMatcher(MatchMode.ANY)


@dataclass(frozen=True)
class PatternEntry:
    """One compiled pattern position."""
    kinds: FrozenSet[TokenKind]
    value: ValueMatcher

    def matches(self, token: Token) -> bool:
        return token.kind in self.kinds and self.value.matches(token.value)

    def __str__(self) -> str:
        names = "|".join(sorted(k.value for k in self.kinds))
        return f"{names}({self.value})"


@dataclass(frozen=True)
class CompiledRule:
    """A rule ready for scanning. `order` is its declaration index."""
    rule: Rule
    entries: Tuple[PatternEntry, ...]
    order: int

    @property
    def name(self) -> str:
        return self.rule.name

    @property
    def range(self) -> Tuple[int, int]:
        return self.rule.range

    def __len__(self) -> int:
        return len(self.entries)

    def matches_at(self, tokens: Sequence[Token], offset: int) -> bool:
        """True if the window starting at offset satisfies every entry."""
        if offset < 0 or offset + len(self.entries) > len(tokens):
            return False
        for i, entry in enumerate(self.entries):
            if not entry.matches(tokens[offset + i]):
                return False
        return True


@dataclass
class CompiledRuleSet:
    """Compiled rules in declaration order, plus any rules that were skipped."""
    rules: Tuple[CompiledRule, ...] = ()
    errors: List[RuleConfigError] = field(default_factory=list)

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, name: str) -> Optional[CompiledRule]:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None


def normalize_kind(kind: str) -> str:
    return kind.replace("_", "").replace("-", "").strip().lower()


def compile_value(value: Optional[str], rule_name: str) -> ValueMatcher:
    """null -> ANY, /.../ -> REGEX, anything else -> EXACT."""
    if value is None:
        return ANY_VALUE
    if len(value) >= 2 and value.startswith("/") and value.endswith("/"):
        inner = value[1:-1]
        try:
            return ValueMatcher(MatchMode.REGEX, inner, re.compile(inner))
        except re.error as e:
            raise InvalidRegex(f"invalid regex {value!r}: {e}", rule_name) from e
    return ValueMatcher(MatchMode.EXACT, value)


def compile_needle(needle: Needle, rule_name: str) -> PatternEntry:
    kinds = KIND_NAMES.get(normalize_kind(needle.kind))
    if kinds is None:
        raise InvalidPattern(f"unknown token kind {needle.kind!r}", rule_name)
    return PatternEntry(kinds, compile_value(needle.value, rule_name))


def check_range(rng: Tuple[int, int], pattern_len: int, rule_name: str) -> None:
    """Require 0 <= start <= end < pattern_len."""
    start, end = rng
    if not (0 <= start <= end < pattern_len):
        raise RangeOutOfBounds(
            f"range ({start}, {end}) is outside pattern of length {pattern_len}",
            rule_name,
        )


def compile_rule(rule: Rule, order: int = 0) -> CompiledRule:
    """
    Compile a single rule.

    Raises:
        InvalidPattern: empty pattern or unknown kind
        InvalidRegex: a /.../ value does not compile
        RangeOutOfBounds: highlight range does not fit the pattern
    """
    if not rule.pattern:
        raise InvalidPattern("pattern is empty", rule.name)
    entries = tuple(compile_needle(n, rule.name) for n in rule.pattern)
    check_range(rule.range, len(entries), rule.name)
    return CompiledRule(rule=rule, entries=entries, order=order)


def compile_rules(ruleset: RuleSet, strict: bool = True) -> CompiledRuleSet:
    """
    Compile every rule of a rule set, keeping declaration order.

    In strict mode all broken rules are collected and raised together as a
    RuleSetError. Otherwise broken rules are logged, skipped and recorded in
    the result's `errors` so the caller can still fail the run.
    """
    compiled: List[CompiledRule] = []
    errors: List[RuleConfigError] = []

    for order, rule in enumerate(ruleset.rules.values()):
        try:
            compiled.append(compile_rule(rule, order))
        except RuleConfigError as e:
            errors.append(e)

    if errors and strict:
        raise RuleSetError(errors)

    for e in errors:
        logger.warning("Skipping %s", e)

    logger.debug("Compiled %d rules (%d skipped)", len(compiled), len(errors))
    return CompiledRuleSet(rules=tuple(compiled), errors=errors)
