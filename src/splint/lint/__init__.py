"""
splint.lint - Rule compilation, token matching and diagnostics

Example usage:
    from splint.lint import load_rules, compile_rules, lint_paths

    compiled = compile_rules(load_rules("splint.json"))
    report = lint_paths(["src/main.rs"], compiled)
    if report.any_failure:
        print(f"{report.fail_count} fails")
"""

from splint.lint.rules import Needle, Rule, RuleSet
from splint.lint.loader import RULES_FILES, find_rules_file, load_rules, parse_rules
from splint.lint.compiler import (
    CompiledRule,
    CompiledRuleSet,
    MatchMode,
    PatternEntry,
    ValueMatcher,
    compile_rule,
    compile_rules,
)
from splint.lint.matcher import Match, find_matches, scan
from splint.lint.ranges import match_span, resolve_span
from splint.lint.diagnostics import (
    Diagnostic,
    DiagnosticSink,
    FileFailure,
    LintReport,
    Severity,
    aggregate,
)
from splint.lint.runner import lint_file, lint_source, lint_tokens
from splint.lint.pool import LintPool, lint_paths

__all__ = [
    # Rule schema
    "Needle",
    "Rule",
    "RuleSet",
    # Loading
    "RULES_FILES",
    "find_rules_file",
    "load_rules",
    "parse_rules",
    # Compiler
    "CompiledRule",
    "CompiledRuleSet",
    "MatchMode",
    "PatternEntry",
    "ValueMatcher",
    "compile_rule",
    "compile_rules",
    # Matching
    "Match",
    "find_matches",
    "scan",
    "match_span",
    "resolve_span",
    # Diagnostics
    "Diagnostic",
    "DiagnosticSink",
    "FileFailure",
    "LintReport",
    "Severity",
    "aggregate",
    # Running
    "lint_file",
    "lint_source",
    "lint_tokens",
    "LintPool",
    "lint_paths",
]
