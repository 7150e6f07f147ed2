"""
CLI entry point for splint.

Usage:
    splint src/main.rs                     Lint with ./splint.json (or .toml/.yaml)
    splint -r rules.toml "src/**/*.rs"     Lint a glob with an explicit rules file
    splint src/                            Lint every .rs file under a directory
    splint --json src/                     Machine-readable output
    splint -a src/                         Compiler-message JSON lines for editors

Exit status:
    0  no failing diagnostics
    1  at least one diagnostic from a `fail` rule, or a file failed to tokenize
    2  configuration error (rules file, invalid rule, no files)
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from splint import __version__
from splint.config import LintConfig, apply_env_overrides
from splint.errors import SplintError
from splint.lint.compiler import CompiledRuleSet, compile_rules
from splint.lint.diagnostics import LintReport
from splint.lint.loader import find_rules_file, load_rules
from splint.lint.pool import LintPool
from splint.reporting import render_compiler_messages, render_human, render_json
from splint.scanner import collect_files

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="splint",
        description="A simple linter to avoid pain in your codebases",
    )
    parser.add_argument("files", nargs="*", metavar="FILES", help="The files to lint (paths, directories or globs)")
    parser.add_argument("-r", "--rules", help="The rules to lint against (json|toml|yaml)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Quiet mode")
    parser.add_argument("-a", "--analyze", action="store_true", help="Editor/analyzer mode: compiler-message JSON lines")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("-j", "--jobs", type=int, help="Number of parallel workers")
    parser.add_argument(
        "--skip-invalid-rules",
        action="store_true",
        help="Skip rules that fail to compile instead of aborting (still exits 2)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"splint {__version__}")
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def config_from_args(args: argparse.Namespace) -> LintConfig:
    """Defaults, then environment, then explicit flags."""
    cfg = apply_env_overrides(LintConfig())
    output = "compiler" if args.analyze else "json" if args.json else "human"
    return replace(
        cfg,
        files=tuple(args.files),
        rules_path=Path(args.rules) if args.rules else cfg.rules_path,
        workers=max(1, args.jobs) if args.jobs else cfg.workers,
        output=output,
        quiet=args.quiet,
        skip_invalid_rules=args.skip_invalid_rules,
    )


def load_compiled_rules(cfg: LintConfig) -> CompiledRuleSet:
    """
    Find, load and compile the rules.

    Raises RulesFileError / RuleSetError.
    """
    rules_path = cfg.rules_path or find_rules_file()
    if rules_path is None:
        raise SplintError("Couldn't find rules file in current directory. You can specify one with -r")
    return compile_rules(load_rules(rules_path), strict=not cfg.skip_invalid_rules)


def _error(cfg: LintConfig, message: str) -> None:
    if not cfg.quiet:
        print(f"error: {message}", file=sys.stderr)


def emit(cfg: LintConfig, report: LintReport) -> None:
    if cfg.output == "compiler":
        for line in render_compiler_messages(report):
            print(line)
    elif cfg.output == "json":
        print(render_json(report))
    else:
        text = render_human(report, summary=not cfg.quiet)
        if text:
            print(text)

    for failure in report.failures:
        _error(cfg, f"couldn't lint {failure}")
    for err in report.config_errors:
        _error(cfg, f"skipped {err}")


def exit_code(cfg: LintConfig, report: LintReport) -> int:
    if report.config_errors:
        return EXIT_CONFIG
    # Editors expect a zero exit while findings are displayed
    if cfg.output == "compiler":
        return EXIT_OK
    if report.any_failure or report.failures:
        return EXIT_FAIL
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        cfg = config_from_args(args)
        compiled = load_compiled_rules(cfg)
    except (SplintError, ValueError) as e:
        if not args.quiet:
            print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    files = collect_files(cfg, cfg.files)
    if not files:
        _error(cfg, "No files provided.")
        return EXIT_CONFIG

    try:
        report = LintPool(compiled, num_workers=cfg.workers).run(files)
    except KeyboardInterrupt:
        _error(cfg, "interrupted")
        return EXIT_INTERRUPTED

    emit(cfg, report)
    return exit_code(cfg, report)


if __name__ == "__main__":
    raise SystemExit(main())
