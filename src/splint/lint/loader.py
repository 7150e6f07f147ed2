"""
Rules file discovery and loading.

JSON, TOML and YAML are interchangeable encodings of the same schema
(see rules.py). The format is picked from the file suffix; anything that
is not TOML or YAML is read as JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

# Use tomllib (Python 3.11+) or tomli as fallback
try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from splint.errors import RulesFileError
from splint.lint.rules import RuleSet

logger = logging.getLogger(__name__)


# Checked in order in the working directory when no rules path is given
RULES_FILES = (
    "splint.json",
    ".splint.json",
    "splint.toml",
    ".splint.toml",
    "splint.yaml",
    ".splint.yaml",
    "splint.yml",
    ".splint.yml",
)


def find_rules_file(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first default rules file present in directory (cwd by default)."""
    base = Path(directory) if directory is not None else Path.cwd()
    for name in RULES_FILES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def detect_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return "toml"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return "json"


def _decode(text: str, fmt: str) -> Any:
    if fmt == "toml":
        return tomllib.loads(text)
    if fmt == "yaml":
        return yaml.safe_load(text)
    return json.loads(text)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_rules(text: str, fmt: str = "json", source: str = "<string>") -> RuleSet:
    """Decode and validate rules from text in the given format."""
    try:
        data = _decode(text, fmt)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise RulesFileError(f"Couldn't parse rules: {e}", source) from e

    if not isinstance(data, dict):
        raise RulesFileError("Couldn't parse rules: expected a table with a 'rules' key", source)

    try:
        ruleset = RuleSet.model_validate(data)
    except ValidationError as e:
        raise RulesFileError(f"Invalid rules: {_format_validation_error(e)}", source) from e

    logger.debug("Loaded %d rules from %s", len(ruleset), source)
    return ruleset


def load_rules(path) -> RuleSet:
    """Load a rules file from disk."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise RulesFileError(f"Couldn't read rules: {e}", str(path)) from e
    return parse_rules(text, detect_format(path), source=str(path))
