"""
Runtime configuration.

Defaults, overridden by environment variables, overridden by CLI flags.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


DEFAULT_WORKERS = min(os.cpu_count() or 2, 8)

OUTPUT_FORMATS = ("human", "json", "compiler")


@dataclass
class LintConfig:
    """Runtime configuration for a lint run."""

    # Rules file; None means search the working directory
    rules_path: Optional[Path] = None

    # Paths, directories or glob patterns to lint
    files: tuple[str, ...] = ()

    # Extensions picked up when a directory is given
    extensions: tuple[str, ...] = (".rs",)

    # Directory exclusions when walking directories
    exclude_dirs: tuple[str, ...] = (
        ".git",
        "target",
        "node_modules",
        ".venv",
        "__pycache__",
    )

    workers: int = DEFAULT_WORKERS

    # Output settings
    output: str = "human"
    quiet: bool = False

    # Skip broken rules (with a warning) instead of aborting
    skip_invalid_rules: bool = False

    def __post_init__(self) -> None:
        if self.output not in OUTPUT_FORMATS:
            raise ValueError(f"unknown output format {self.output!r}")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")


def apply_env_overrides(cfg: LintConfig, environ: Optional[Mapping[str, str]] = None) -> LintConfig:
    """Return a copy of cfg with SPLINT_RULES / SPLINT_WORKERS applied."""
    env = os.environ if environ is None else environ
    changes = {}

    if env.get("SPLINT_RULES"):
        changes["rules_path"] = Path(env["SPLINT_RULES"])

    workers = env.get("SPLINT_WORKERS")
    if workers:
        try:
            changes["workers"] = max(1, int(workers))
        except ValueError:
            logger.warning("Ignoring SPLINT_WORKERS=%r: not an integer", workers)

    return replace(cfg, **changes) if changes else cfg


def should_exclude_path(cfg: LintConfig, path: Path) -> bool:
    """Check if path should be excluded from directory walks."""
    return any(d in path.parts for d in cfg.exclude_dirs)
