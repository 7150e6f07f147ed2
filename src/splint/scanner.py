"""
File discovery and source loading.

Handles:
- Explicit paths, directories and glob patterns
- Directory walking with exclusions
- Source file loading with encoding fallback
"""

from __future__ import annotations

import glob
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List

from splint.config import LintConfig, should_exclude_path
from splint.parser.lexer import read_source_text, split_lines

logger = logging.getLogger(__name__)


GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class SourceFile:
    """A loaded source file with content."""
    path: Path
    text: str
    lines: List[str]


def load_source(path: Path) -> SourceFile:
    """Load a single source file."""
    text = read_source_text(path)
    return SourceFile(path=Path(path), text=text, lines=split_lines(text))


def _walk_dir(cfg: LintConfig, root: Path) -> Iterator[Path]:
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        if should_exclude_path(cfg, path.relative_to(root)):
            continue
        if path.suffix in cfg.extensions:
            yield path


def iter_files(cfg: LintConfig, patterns: Iterable[str]) -> Iterator[Path]:
    """
    Expand each pattern: globs via glob (`**` allowed), directories by walking,
    anything else is passed through so a missing file is reported later.
    """
    for pattern in patterns:
        if any(ch in GLOB_CHARS for ch in pattern):
            hits = sorted(glob.glob(pattern, recursive=True))
            if not hits:
                logger.warning("Pattern matched no files: %s", pattern)
            for hit in hits:
                path = Path(hit)
                if path.is_file():
                    yield path
                elif path.is_dir():
                    yield from _walk_dir(cfg, path)
            continue

        path = Path(pattern)
        if path.is_dir():
            yield from _walk_dir(cfg, path)
        else:
            yield path


def collect_files(cfg: LintConfig, patterns: Iterable[str]) -> List[Path]:
    """Unique files for patterns, sorted by path."""
    seen = {}
    for path in iter_files(cfg, patterns):
        seen.setdefault(str(path), path)
    return [seen[key] for key in sorted(seen)]
