"""
Rust Source Lexer (Tokenizer)

Converts raw .rs source into a token tree compatible with the token model:
identifiers, single-character punctuation, literals and delimited groups.
Comments and whitespace are dropped.

Follows the token-stream conventions used by Rust procedural macros:
- every punctuation character is its own Punct token (`::` is two tokens)
- a lifetime `'a` is Punct(') followed by Ident(a)
- literal values are the exact source text, quotes and suffixes included
"""

from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from splint.parser.tokens import (
    Delimiter,
    Group,
    Position,
    Span,
    Token,
    TokenKind,
    TokenTree,
)


PUNCT_CHARS = frozenset("=<>!~+-*/%^&|@.,;:#$?'\\")
OPEN_DELIMS = frozenset("([{")
CLOSE_DELIMS = frozenset(")]}")
BOM = '\ufeff'


class LexerError(Exception):
    """Error during lexical analysis."""
    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"Lexer error at line {line}, column {column}: {message}")


class Lexer:
    """
    Tokenizer for Rust source files.

    Usage:
        lexer = Lexer(source_text)
        trees = lexer.tokenize_tree()
    """

    @staticmethod
    def _is_ident_start(ch: Optional[str]) -> bool:
        """Check if character can start an identifier (letter or underscore)."""
        return ch is not None and (ch == '_' or ch.isalpha())

    @staticmethod
    def _is_ident_cont(ch: Optional[str]) -> bool:
        """Check if character can continue an identifier."""
        return ch is not None and (ch == '_' or ch.isalnum())

    def __init__(self, source: str, filename: str = "<unknown>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.offset = 0
        self.line = 1
        self.column = 1
        self.length = len(source)
        # A leading BOM is not a token or a column, but it still occupies bytes
        if source.startswith(BOM):
            self.pos = 1
            self.offset = len(BOM.encode("utf-8"))

    def _current(self) -> Optional[str]:
        """Get current character or None if at end."""
        if self.pos >= self.length:
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> Optional[str]:
        """Peek ahead by offset characters."""
        pos = self.pos + offset
        if pos >= self.length:
            return None
        return self.source[pos]

    def _advance(self) -> Optional[str]:
        """Advance one character and return it."""
        ch = self._current()
        if ch is not None:
            self.pos += 1
            self.offset += 1 if ch < '\x80' else len(ch.encode('utf-8'))
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return ch

    def _position(self) -> Position:
        return Position(offset=self.offset, line=self.line, column=self.column)

    def _error(self, message: str, start: Optional[Position] = None) -> LexerError:
        if start is None:
            start = self._position()
        return LexerError(message, start.line, start.column)

    def _skip_trivia(self) -> None:
        """Skip whitespace, line comments and (nested) block comments."""
        while True:
            ch = self._current()
            if ch is None:
                return
            if ch.isspace():
                self._advance()
            elif ch == '/' and self._peek() == '/':
                while self._current() not in (None, '\n'):
                    self._advance()
            elif ch == '/' and self._peek() == '*':
                self._skip_block_comment()
            else:
                return

    def _skip_block_comment(self) -> None:
        start = self._position()
        self._advance()
        self._advance()
        depth = 1
        while depth:
            ch = self._current()
            if ch is None:
                raise self._error("Unterminated block comment", start)
            if ch == '/' and self._peek() == '*':
                depth += 1
                self._advance()
            elif ch == '*' and self._peek() == '/':
                depth -= 1
                self._advance()
            self._advance()

    def _skip_shebang(self) -> None:
        # `#![attr]` at the top of a file is an inner attribute, not a shebang
        if self.source.startswith('#!', self.pos) and not self.source[self.pos + 2:].lstrip().startswith('['):
            while self._current() not in (None, '\n'):
                self._advance()

    def _read_identifier(self) -> None:
        while self._is_ident_cont(self._current()):
            self._advance()

    def _read_number(self) -> None:
        """Read an integer or float literal including any type suffix."""
        if self._current() == '0' and self._peek() in ('x', 'o', 'b'):
            self._advance()
            self._advance()
            while self._current() is not None and (self._current().isalnum() or self._current() == '_'):
                self._advance()
            return

        self._read_digits()

        # `1..2` and `1.foo()` keep the dot as punctuation
        if self._current() == '.' and self._peek() is not None and self._peek().isdigit():
            self._advance()
            self._read_digits()

        if self._current() in ('e', 'E'):
            nxt = self._peek()
            if nxt is not None and (nxt.isdigit() or (nxt in '+-' and (self._peek(2) or '').isdigit())):
                self._advance()
                if self._current() in ('+', '-'):
                    self._advance()
                self._read_digits()

        if self._is_ident_start(self._current()):
            self._read_identifier()

    def _read_digits(self) -> None:
        while self._current() is not None and (self._current().isdigit() or self._current() == '_'):
            self._advance()

    def _read_quoted(self, quote: str, start: Position) -> None:
        """Read a quoted string or char body, honouring backslash escapes."""
        self._advance()  # opening quote
        while True:
            ch = self._current()
            if ch is None:
                raise self._error("Unterminated string", start)
            if ch == '\\':
                self._advance()
                if self._current() is None:
                    raise self._error("Unterminated string", start)
                self._advance()
                continue
            self._advance()
            if ch == quote:
                return

    def _read_raw_string(self, start: Position) -> None:
        """Read r"..." / r#"..."# once the r (or br/cr) prefix is consumed."""
        hashes = 0
        while self._current() == '#':
            hashes += 1
            self._advance()
        if self._current() != '"':
            raise self._error("Expected '\"' in raw string literal", start)
        self._advance()
        terminator = '"' + '#' * hashes
        end = self.source.find(terminator, self.pos)
        if end < 0:
            raise self._error("Unterminated raw string", start)
        while self.pos < end + len(terminator):
            self._advance()
        self._read_suffix()

    def _read_suffix(self) -> None:
        if self._is_ident_start(self._current()):
            self._read_identifier()

    def _is_raw_string_start(self, at: int) -> bool:
        """True if position `at` begins `"` or `#..#"`."""
        i = self.pos + at
        while i < self.length and self.source[i] == '#':
            i += 1
        return i < self.length and self.source[i] == '"'

    def _try_prefixed_literal(self, start: Position) -> bool:
        """Handle r"", r#"", b"", b'', br"", c"", cr"" literals. Returns True if consumed."""
        ch = self._current()
        nxt = self._peek()

        if ch in ('b', 'c') and nxt == '"':
            self._advance()
            self._read_quoted('"', start)
            self._read_suffix()
            return True
        if ch == 'b' and nxt == "'":
            self._advance()
            self._read_quoted("'", start)
            self._read_suffix()
            return True
        if ch in ('b', 'c') and nxt == 'r' and self._is_raw_string_start(2):
            self._advance()
            self._advance()
            self._read_raw_string(start)
            return True
        if ch == 'r' and nxt in ('"', '#') and self._is_raw_string_start(1):
            self._advance()
            self._read_raw_string(start)
            return True
        return False

    def _lex_quote(self, start: Position) -> Optional[TokenKind]:
        """Disambiguate a `'`: char literal or lifetime marker."""
        nxt = self._peek()
        if nxt == '\\' or (nxt is not None and nxt != "'" and self._peek(2) == "'"):
            self._read_quoted("'", start)
            self._read_suffix()
            return TokenKind.LITERAL
        if self._is_ident_start(nxt):
            self._advance()
            return TokenKind.PUNCT
        raise self._error("Unexpected character \"'\"", start)

    def _make(self, kind: TokenKind, start: Position, start_pos: int) -> Token:
        return Token(kind, self.source[start_pos:self.pos], Span(start, self._position()))

    def tokenize(self) -> Iterator[Token]:
        """
        Generate the flat token stream, delimiters included.

        Delimiter balance is not checked here; see tokenize_tree().
        """
        self._skip_shebang()

        while True:
            self._skip_trivia()

            ch = self._current()
            if ch is None:
                return

            start = self._position()
            start_pos = self.pos

            if ch in OPEN_DELIMS:
                self._advance()
                yield self._make(TokenKind.DELIM_OPEN, start, start_pos)
                continue

            if ch in CLOSE_DELIMS:
                self._advance()
                yield self._make(TokenKind.DELIM_CLOSE, start, start_pos)
                continue

            if ch == '"':
                self._read_quoted('"', start)
                self._read_suffix()
                yield self._make(TokenKind.LITERAL, start, start_pos)
                continue

            if ch == "'":
                kind = self._lex_quote(start)
                yield self._make(kind, start, start_pos)
                continue

            if ch.isdigit():
                self._read_number()
                yield self._make(TokenKind.LITERAL, start, start_pos)
                continue

            if self._is_ident_start(ch):
                if self._try_prefixed_literal(start):
                    yield self._make(TokenKind.LITERAL, start, start_pos)
                    continue
                # Raw identifier: r#type
                if ch == 'r' and self._peek() == '#' and self._is_ident_start(self._peek(2)):
                    self._advance()
                    self._advance()
                self._read_identifier()
                yield self._make(TokenKind.IDENT, start, start_pos)
                continue

            if ch in PUNCT_CHARS:
                self._advance()
                yield self._make(TokenKind.PUNCT, start, start_pos)
                continue

            raise self._error(f"Unexpected character {ch!r}", start)

    def tokenize_tree(self) -> List[TokenTree]:
        """Tokenize and nest delimited regions into Group nodes."""
        root: List[TokenTree] = []
        stack: List[Tuple[Delimiter, Span, List[TokenTree]]] = []

        for tok in self.tokenize():
            if tok.kind is TokenKind.DELIM_OPEN:
                stack.append((Delimiter.from_open(tok.value), tok.span, []))
                continue

            if tok.kind is TokenKind.DELIM_CLOSE:
                if not stack:
                    raise LexerError(
                        f"Unexpected closing delimiter {tok.value!r}",
                        tok.span.start.line, tok.span.start.column,
                    )
                delim, open_span, children = stack.pop()
                if delim.close != tok.value:
                    raise LexerError(
                        f"Mismatched closing delimiter: expected {delim.close!r}, found {tok.value!r}",
                        tok.span.start.line, tok.span.start.column,
                    )
                group = Group(delim, open_span, tok.span, children)
                (stack[-1][2] if stack else root).append(group)
                continue

            (stack[-1][2] if stack else root).append(tok)

        if stack:
            delim, open_span, _ = stack[-1]
            raise LexerError(
                f"Unclosed delimiter {delim.open!r}",
                open_span.start.line, open_span.start.column,
            )

        return root


def read_source_text(filepath) -> str:
    """
    Read a source file. Handles encoding fallback.

    A UTF-8 BOM is kept so byte offsets stay relative to the start of the file.
    """
    data = Path(filepath).read_bytes()
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return data.decode('latin-1')


def split_lines(source: str) -> List[str]:
    """
    Split source into lines the way the lexer counts them.

    Only `\\n` ends a line; a trailing `\\r` is dropped. Form feeds and
    Unicode line separators stay inside their line. A leading BOM is dropped
    so the first line's columns line up with token columns.
    """
    if source.startswith(BOM):
        source = source[1:]
    if not source:
        return []
    lines = [line[:-1] if line.endswith('\r') else line for line in source.split('\n')]
    # A final newline does not open another line
    if lines and lines[-1] == '' and source.endswith('\n'):
        lines.pop()
    return lines


def tokenize_source(source: str, filename: str = "<unknown>") -> List[TokenTree]:
    """Tokenize source text into a token tree."""
    return Lexer(source, filename).tokenize_tree()


def tokenize_file(filepath) -> List[TokenTree]:
    """Tokenize a file into a token tree."""
    return tokenize_source(read_source_text(filepath), filename=str(filepath))
