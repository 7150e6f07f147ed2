"""
splint - A simple linter to avoid pain in your codebases

Finds user-defined token sequences in Rust source and reports them as
diagnostics. Rules are declared in splint.json / splint.toml / splint.yaml.
"""

__version__ = "1.0.0"
__author__ = "splint contributors"

from splint.lint import compile_rules, lint_paths, lint_source, load_rules
