"""
Token model.

The tokenizer hands us a tree: leaves are single tokens, delimited regions
are nested groups. Matching works on a flat list, so the tree is flattened
in pre-order with every group contributing an explicit open token, its
contents, then the close token. Spans are carried verbatim from the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Tuple, Union


class TokenKind(Enum):
    """Classification of a flattened token."""
    PUNCT = "Punct"            # . , ; : ! ' etc, one character each
    IDENT = "Ident"            # foo, unwrap, fn, r#type
    DELIM_OPEN = "DelimOpen"   # ( [ {
    DELIM_CLOSE = "DelimClose" # ) ] }
    LITERAL = "Literal"        # "text", 'c', 42u8, 1.5e3

    def __str__(self) -> str:
        return self.value


class Delimiter(Enum):
    """Bracket pair of a group. NONE groups are transparent when flattened."""
    PARENTHESIS = ("(", ")")
    BRACE = ("{", "}")
    BRACKET = ("[", "]")
    NONE = ("", "")

    @property
    def open(self) -> str:
        return self.value[0]

    @property
    def close(self) -> str:
        return self.value[1]

    @classmethod
    def from_open(cls, ch: str) -> "Delimiter":
        for d in cls:
            if d is not cls.NONE and d.open == ch:
                return d
        raise ValueError(f"not an opening delimiter: {ch!r}")


LEAF_KINDS = frozenset({TokenKind.PUNCT, TokenKind.IDENT, TokenKind.LITERAL})


@dataclass(frozen=True, order=True)
class Position:
    """Source position: 1-based line and column, 0-based UTF-8 byte offset."""
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Span:
    """Half-open source range [start, end)."""
    start: Position
    end: Position

    @property
    def length(self) -> int:
        return self.end.offset - self.start.offset

    def cover(self, other: "Span") -> "Span":
        """Smallest span starting at self and ending at other."""
        return Span(self.start, other.end)

    def to_dict(self) -> dict:
        return {
            "byte_start": self.start.offset,
            "byte_end": self.end.offset,
            "line_start": self.start.line,
            "line_end": self.end.line,
            "column_start": self.start.column,
            "column_end": self.end.column,
        }


@dataclass(frozen=True)
class Token:
    """One lexical unit. Also used as a tree leaf for Punct/Ident/Literal."""
    kind: TokenKind
    value: str
    span: Span

    def __repr__(self) -> str:
        return f"{self.kind.value}({self.value!r}) @{self.span.start}"


@dataclass
class Group:
    """A delimited region of the token tree."""
    delimiter: Delimiter
    open_span: Span
    close_span: Span
    children: List["TokenTree"] = field(default_factory=list)

    @property
    def span(self) -> Span:
        return self.open_span.cover(self.close_span)

    def __repr__(self) -> str:
        return f"Group({self.delimiter.open}{self.delimiter.close}, {len(self.children)} children)"


TokenTree = Union[Token, Group]


def flatten(trees: Iterable[TokenTree]) -> List[Token]:
    """
    Flatten a token tree into a pre-order token list.

    A group yields DelimOpen, its contents in order, then DelimClose.
    Iterative so deeply nested input cannot hit the recursion limit.
    """
    out: List[Token] = []
    # Stack entries are either a pending tree node or a close token to emit
    stack: List[Union[TokenTree, Tuple[Token]]] = list(reversed(list(trees)))

    while stack:
        item = stack.pop()

        if isinstance(item, tuple):
            out.append(item[0])
            continue

        if isinstance(item, Token):
            if item.kind not in LEAF_KINDS:
                raise ValueError(f"delimiter token found as a tree leaf: {item!r}")
            out.append(item)
            continue

        if item.delimiter is Delimiter.NONE:
            stack.extend(reversed(item.children))
            continue

        out.append(Token(TokenKind.DELIM_OPEN, item.delimiter.open, item.open_span))
        stack.append((Token(TokenKind.DELIM_CLOSE, item.delimiter.close, item.close_span),))
        stack.extend(reversed(item.children))

    return out
