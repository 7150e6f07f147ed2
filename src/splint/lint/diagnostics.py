"""
Diagnostic aggregation.

Every match becomes a Diagnostic, whatever its severity. Within a file
diagnostics are ordered by highlight start offset, ties broken by rule
declaration order; files are ordered by path. The run fails if any
diagnostic comes from a `fail` rule.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from splint.errors import RuleConfigError
from splint.lint.matcher import Match
from splint.lint.ranges import match_span
from splint.parser.tokens import Span, Token


class Severity(Enum):
    """Whether a diagnostic fails the run or is only advisory."""
    FAIL = "fail"
    ADVISORY = "advisory"

    @property
    def level(self) -> str:
        """Compiler-style level name."""
        return "error" if self is Severity.FAIL else "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A located rule match, ready for rendering."""
    rule_name: str
    severity: Severity
    message: str
    span: Span
    file: str
    help: Optional[str] = None
    more: Optional[str] = None
    rule_order: int = field(default=0, compare=False)
    source_line: str = field(default="", compare=False, repr=False)

    @property
    def fails(self) -> bool:
        return self.severity is Severity.FAIL

    def sort_key(self) -> tuple:
        return (self.span.start.offset, self.rule_order, self.span.end.offset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule_name,
            "severity": self.severity.value,
            "level": self.severity.level,
            "message": self.message,
            "help": self.help,
            "more": self.more,
            "file": self.file,
            "span": self.span.to_dict(),
        }

    def __str__(self) -> str:
        return f"{self.file}:{self.span.start} {self.severity.level}[{self.rule_name}]: {self.message}"


@dataclass
class FileFailure:
    """A file that could not be read or tokenized. Not a lint diagnostic."""
    path: str
    error_type: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.error_type}: {self.message}"


def line_at(lines: Sequence[str], line_no: int) -> str:
    """Get line by 1-based line number."""
    if line_no <= 0 or line_no > len(lines):
        return ""
    return lines[line_no - 1]


def build_diagnostic(
    match: Match,
    tokens: Sequence[Token],
    file: str,
    lines: Sequence[str] = (),
) -> Diagnostic:
    rule = match.rule.rule
    span = match_span(tokens, match)
    return Diagnostic(
        rule_name=rule.name,
        severity=Severity.FAIL if rule.fail else Severity.ADVISORY,
        message=rule.description,
        span=span,
        file=file,
        help=rule.help,
        more=rule.more,
        rule_order=match.rule.order,
        source_line=line_at(lines, span.start.line),
    )


def aggregate(
    matches: Iterable[Match],
    tokens: Sequence[Token],
    file: str,
    lines: Sequence[str] = (),
) -> List[Diagnostic]:
    """Diagnostics for one file, in deterministic order."""
    diagnostics = [build_diagnostic(m, tokens, file, lines) for m in matches]
    diagnostics.sort(key=Diagnostic.sort_key)
    return diagnostics


def any_failure(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.fails for d in diagnostics)


@dataclass
class LintReport:
    """Outcome of a lint run."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    config_errors: List[RuleConfigError] = field(default_factory=list)
    files_scanned: int = 0
    elapsed_ms: float = 0.0

    @property
    def any_failure(self) -> bool:
        return any_failure(self.diagnostics)

    @property
    def fail_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.fails)

    @property
    def advisory_count(self) -> int:
        return len(self.diagnostics) - self.fail_count

    def by_file(self) -> Dict[str, List[Diagnostic]]:
        grouped: Dict[str, List[Diagnostic]] = OrderedDict()
        for d in self.diagnostics:
            grouped.setdefault(d.file, []).append(d)
        return grouped

    def summary(self) -> Dict[str, Any]:
        return {
            "files": self.files_scanned,
            "fails": self.fail_count,
            "warnings": self.advisory_count,
            "parse_failures": len(self.failures),
            "config_errors": len(self.config_errors),
            "any_failure": self.any_failure,
        }


class DiagnosticSink:
    """
    Thread-safe collector shared by pool workers.

    Appends are serialized with a lock; report() sorts by file path so the
    final output does not depend on worker scheduling.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_file: Dict[str, List[Diagnostic]] = {}
        self._failures: List[FileFailure] = []

    def add_file(self, file: str, diagnostics: List[Diagnostic]) -> None:
        with self._lock:
            self._by_file.setdefault(file, []).extend(diagnostics)

    def add_failure(self, failure: FileFailure) -> None:
        with self._lock:
            self._failures.append(failure)

    @property
    def files_seen(self) -> int:
        with self._lock:
            return len(self._by_file) + len(self._failures)

    def report(self) -> LintReport:
        with self._lock:
            diagnostics: List[Diagnostic] = []
            for file in sorted(self._by_file):
                diagnostics.extend(sorted(self._by_file[file], key=Diagnostic.sort_key))
            failures = sorted(self._failures, key=lambda f: f.path)
            return LintReport(
                diagnostics=diagnostics,
                failures=failures,
                files_scanned=len(self._by_file) + len(self._failures),
            )
