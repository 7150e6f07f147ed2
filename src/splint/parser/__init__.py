"""
splint.parser - Token model and Rust tokenizer

Turns source text into token trees and flattens them into the
index-addressable token sequence the matching engine scans.
"""

from splint.parser.tokens import (
    Delimiter,
    Group,
    Position,
    Span,
    Token,
    TokenKind,
    TokenTree,
    flatten,
)
from splint.parser.lexer import (
    Lexer,
    LexerError,
    read_source_text,
    split_lines,
    tokenize_file,
    tokenize_source,
)

__all__ = [
    # Token model
    "Delimiter",
    "Group",
    "Position",
    "Span",
    "Token",
    "TokenKind",
    "TokenTree",
    "flatten",
    # Lexer
    "Lexer",
    "LexerError",
    "read_source_text",
    "split_lines",
    "tokenize_file",
    "tokenize_source",
]
