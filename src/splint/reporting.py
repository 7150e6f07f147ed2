"""
Reporting and output formatting.

Handles:
- Human-readable output with source excerpts
- JSON output
- Compiler-message JSON lines for editor integration
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from splint.lint.diagnostics import Diagnostic, LintReport


def _underline(diag: Diagnostic) -> str:
    """Caret line under the highlighted part of the first source line."""
    line = diag.source_line
    start_col = diag.span.start.column
    if diag.span.end.line == diag.span.start.line:
        width = diag.span.end.column - start_col
    else:
        width = len(line) - (start_col - 1)
    # Keep tabs so the carets line up with the source line
    prefix = "".join(ch if ch == "\t" else " " for ch in line[:start_col - 1])
    return prefix + "^" * max(width, 1)


def render_diagnostic(diag: Diagnostic) -> str:
    """Render one diagnostic in compiler style."""
    line_no = str(diag.span.start.line)
    pad = " " * len(line_no)
    lines = [
        f"{diag.severity.level}[{diag.rule_name}]: {diag.message}",
        f"{pad}--> {diag.file}:{diag.span.start.line}:{diag.span.start.column}",
    ]
    if diag.source_line:
        lines.extend([
            f"{pad} |",
            f"{line_no} | {diag.source_line}",
            f"{pad} | {_underline(diag)}",
        ])
    if diag.help:
        lines.append(f"{pad} = help: {diag.help}")
    if diag.more:
        lines.append(f"{pad} = more: {diag.more}")
    return "\n".join(lines)


def render_summary(report: LintReport) -> str:
    return "\n".join([
        f"{report.fail_count} fails, {report.advisory_count} warnings",
        f"Finished linting {report.files_scanned} files in {report.elapsed_ms:.0f}ms",
    ])


def render_human(report: LintReport, summary: bool = True) -> str:
    """Render all diagnostics, optionally followed by the summary."""
    blocks = [render_diagnostic(d) for d in report.diagnostics]
    if summary:
        blocks.append(render_summary(report))
    return "\n\n".join(blocks)


def render_json(report: LintReport) -> str:
    """Render diagnostics, parse failures and summary as one JSON document."""
    return json.dumps(
        {
            "diagnostics": [d.to_dict() for d in report.diagnostics],
            "failures": [
                {"path": f.path, "error_type": f.error_type, "error": f.message}
                for f in report.failures
            ],
            "summary": report.summary(),
        },
        indent=2,
    )


def compiler_span(diag: Diagnostic) -> Dict[str, Any]:
    span = diag.span
    if span.end.line == span.start.line:
        highlight_end = span.end.column
    else:
        highlight_end = len(diag.source_line) + 1

    return {
        "byte_end": span.end.offset,
        "byte_start": span.start.offset,
        "column_end": span.end.column,
        "column_start": span.start.column,
        "expansion": None,
        "file_name": diag.file,
        "is_primary": True,
        "label": None,
        "line_end": span.end.line,
        "line_start": span.start.line,
        "suggested_replacement": None,
        "suggestion_applicability": None,
        "text": [
            {
                "highlight_end": highlight_end,
                "highlight_start": span.start.column,
                "text": diag.source_line,
            }
        ],
    }


def compiler_message(diag: Diagnostic) -> Dict[str, Any]:
    """A cargo `compiler-message` record so editors can show the diagnostic inline."""
    span = compiler_span(diag)
    return {
        "reason": "compiler-message",
        "package_id": "",
        "manifest_path": "",
        "target": {
            "kind": ["bin"],
            "crate_types": ["bin"],
            "name": "splint",
            "src_path": str(Path(diag.file).resolve()),
            "edition": "2021",
            "doc": True,
            "doctest": False,
            "test": True,
        },
        "message": {
            "rendered": render_diagnostic(diag),
            "$message_type": "diagnostic",
            "children": [
                {
                    "children": [],
                    "code": None,
                    "level": "note",
                    "message": diag.message,
                    "rendered": None,
                    "spans": [],
                },
                {
                    "children": [],
                    "code": None,
                    "level": "help",
                    "message": diag.help or "Lint failed here",
                    "rendered": None,
                    "spans": [span],
                },
            ],
            "code": {"code": diag.rule_name, "explanation": None},
            "level": diag.severity.level,
            "message": diag.rule_name,
            "spans": [span],
        },
    }


def render_compiler_messages(report: LintReport) -> List[str]:
    """One JSON line per diagnostic."""
    return [json.dumps(compiler_message(d)) for d in report.diagnostics]
