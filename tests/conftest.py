"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from splint.lint.compiler import compile_rule
from splint.lint.rules import Rule
from splint.parser import flatten, tokenize_source


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def rules_dir(fixtures_dir):
    """Path to rules file fixtures."""
    return fixtures_dir / "rules"


@pytest.fixture
def src_dir(fixtures_dir):
    """Path to Rust source fixtures."""
    return fixtures_dir / "src"


# =============================================================================
# BUILDERS
# =============================================================================

def _make_rule(name="rule", pattern=(("Ident", None),), rng=None, fail=False,
               description="test rule", **extra) -> Rule:
    pattern = [list(p) for p in pattern]
    if rng is None:
        rng = (0, len(pattern) - 1)
    return Rule(
        name=name,
        description=description,
        fail=fail,
        range=rng,
        pattern=pattern,
        **extra,
    )


@pytest.fixture
def make_rule():
    """Factory for Rule models: make_rule(name, pattern, rng, fail)."""
    return _make_rule


@pytest.fixture
def compiled():
    """Factory compiling a single rule: compiled(name, pattern, rng, fail, order=0)."""
    def build(*args, order=0, **kwargs):
        return compile_rule(_make_rule(*args, **kwargs), order=order)
    return build


@pytest.fixture
def lex():
    """Tokenize source text into the flat token sequence."""
    def run(source: str):
        return flatten(tokenize_source(source, "<test>"))
    return run


@pytest.fixture
def unwrap_pattern():
    """`.unwrap()` as a four-token pattern."""
    return (("Punct", "."), ("Ident", "unwrap"), ("DelimOpen", "("), ("DelimClose", ")"))
