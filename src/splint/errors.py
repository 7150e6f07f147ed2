"""
Exception taxonomy for splint.

Configuration problems (the rules file, an individual rule) are kept apart
from per-file problems (tokenization) so the CLI can report them
distinctly and pick the right exit status.
"""

from __future__ import annotations

from typing import List, Optional


class SplintError(Exception):
    """Base class for all splint errors."""


class RulesFileError(SplintError):
    """The rules file could not be found, read, decoded or validated."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class RuleConfigError(SplintError):
    """A single rule is broken. Always attributable to the rule, never a file."""

    def __init__(self, message: str, rule_name: str):
        self.rule_name = rule_name
        self.detail = message
        super().__init__(f"rule '{rule_name}': {message}")


class InvalidPattern(RuleConfigError):
    """Pattern is empty or one of its entries names an unknown token kind."""


class InvalidRegex(RuleConfigError):
    """A /.../ needle value is not a valid regular expression."""


class RangeOutOfBounds(RuleConfigError):
    """Highlight range does not fit inside the rule's pattern."""


class RuleSetError(SplintError):
    """One or more rules failed to compile."""

    def __init__(self, errors: List[RuleConfigError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} invalid rule(s):"]
        lines.extend(f"  - {e}" for e in self.errors)
        super().__init__("\n".join(lines))
