"""
Lint orchestration for a single source.

source text -> token tree -> flat tokens -> matches -> diagnostics
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from splint.lint.compiler import CompiledRule
from splint.lint.diagnostics import Diagnostic, aggregate
from splint.lint.matcher import scan
from splint.parser.lexer import split_lines, tokenize_source
from splint.parser.tokens import Token, flatten
from splint.scanner import load_source

logger = logging.getLogger(__name__)


def lint_tokens(
    tokens: Sequence[Token],
    rules: Iterable[CompiledRule],
    file: str = "<unknown>",
    lines: Sequence[str] = (),
) -> List[Diagnostic]:
    """Lint an already flattened token sequence. Never fails on content."""
    return aggregate(scan(tokens, rules), tokens, file, lines)


def lint_source(
    source: str,
    rules: Iterable[CompiledRule],
    file: str = "<unknown>",
    lines: Optional[Sequence[str]] = None,
) -> List[Diagnostic]:
    """
    Tokenize and lint source text.

    `lines` are the source lines as split by split_lines(); computed when
    not given. Raises LexerError if the source cannot be tokenized.
    """
    tokens = flatten(tokenize_source(source, filename=file))
    if lines is None:
        lines = split_lines(source)
    return lint_tokens(tokens, rules, file, lines)


def lint_file(path: Path, rules: Iterable[CompiledRule]) -> List[Diagnostic]:
    """
    Read, tokenize and lint one file.

    Raises OSError if unreadable and LexerError if it cannot be tokenized.
    """
    src = load_source(path)
    diagnostics = lint_source(src.text, rules, str(path), src.lines)
    logger.debug("%s: %d diagnostics", path, len(diagnostics))
    return diagnostics
