"""
Kaleidoscope Lexer (Tokenizer)
==============================

This module implements the tokenizer for the Kaleidoscope toy language.
It pulls characters one at a time from a forward-only source (a string or
any readable text stream such as ``sys.stdin``) and produces one token per
call to ``next_token()``.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: a letter followed by letters and digits
- Numbers: digits with an optional fractional part, all read as float
- Operators: + - * / <
- Delimiters: ( ) , ;

Comments
--------
``#`` starts a comment that runs to the end of the line (or the end of the
input). Comments are skipped like whitespace.

Number Normalization
--------------------
A numeral whose ``.`` is not followed by a digit gets a ``0`` appended
before conversion, so ``3.`` reads as ``3.0`` rather than failing.

Lookahead
---------
Exactly one character of lookahead is kept between calls. A numeral or
identifier ends when the lookahead character can no longer extend it, and
that character is where the next call resumes.

Example Usage
-------------
>>> from kaleidoscope.frontend.lexer import Lexer
>>> lexer = Lexer("def add(x y) x+y", "test.ks")
>>> for token in lexer.tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'add', 1:5)
Token(LPAREN, '(', 1:8)
Token(IDENTIFIER, 'x', 1:9)
Token(IDENTIFIER, 'y', 1:11)
Token(RPAREN, ')', 1:12)
Token(IDENTIFIER, 'x', 1:14)
Token(OPERATOR, '+', 1:15)
Token(IDENTIFIER, 'y', 1:16)
Token(EOF, 1:17)
"""

import io
import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, TextIO

from kaleidoscope.errors import SourceLocation
from kaleidoscope.frontend.errors import LexicalFault


logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds produced by the lexer."""

    EOF = auto()            # End of input

    # === Keywords ===
    DEF = auto()            # def
    EXTERN = auto()         # extern

    # === Primary ===
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Numeric literals (float)

    # === Operators and Delimiters ===
    OPERATOR = auto()       # + - * / <
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    COMMA = auto()          # ,
    SEMICOLON = auto()      # ;


KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}

OPERATOR_CHARS = frozenset("+-*/<")

DELIMITERS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        type: The token kind
        value: Identifier/operator/delimiter text, float for numbers,
               None for EOF
        line: Line number where the token starts (1-indexed)
        column: Column number where the token starts (1-indexed)
        filename: Source name for error reporting
    """
    type: TokenType
    value: str | float | None
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Short human-readable form used in error hints."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.NUMBER:
            return f"number {self.value:g}"
        return f"'{self.value}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Kaleidoscope source, one token per call.

    The lexer never reads ahead more than one character, so it can sit
    directly on an interactive stream: a construct is parsed as soon as the
    character after it has been typed.

    Usage:
        lexer = Lexer(sys.stdin, "<stdin>")
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for error reporting)
    """

    IDENT_START = frozenset(string.ascii_letters)
    IDENT_CHARS = frozenset(string.ascii_letters + string.digits)
    DIGITS = frozenset(string.digits)

    def __init__(self, source: str | TextIO, filename: str = "<input>"):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a readable text stream
            filename: Name of the source (for error messages)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        self.filename = filename

        # Lookahead character; "" once the source is exhausted.
        # Starts as whitespace so the first call reads real input.
        self._last_char = " "

        # Position of the lookahead character
        self._line = 1
        self._column = 0

        # Characters read so far on the current line, for error context
        self._line_chars: list[str] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Returns:
            The next Token; EOF (repeatedly) once the input is exhausted

        Raises:
            LexicalFault: If a character matches no token rule. The
                character is consumed first.
        """
        while True:
            self._skip_whitespace()

            char = self._last_char
            start_line = self._line
            start_column = self._column

            if not char:
                return self._make_token(TokenType.EOF, None, start_line, start_column)

            if char in self.IDENT_START:
                return self._scan_identifier(start_line, start_column)

            if char in self.DIGITS:
                return self._scan_number(start_line, start_column)

            if char == "#":
                self._skip_comment()
                continue

            return self._scan_symbol(start_line, start_column)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including EOF.

        Raises:
            LexicalFault: If an invalid character is encountered
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def source_line(self, line: int) -> Optional[str]:
        """
        Text of the given line as read so far, if it is the current line.

        Only the current line is retained; earlier lines have already been
        discarded along with their characters.
        """
        if line == self._line:
            return "".join(self._line_chars)
        return None

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read_char(self) -> str:
        """Replace the lookahead with the next character from the source."""
        if self._last_char == "\n":
            self._line += 1
            self._column = 0
            self._line_chars = []

        char = self._stream.read(1)
        if char:
            self._column += 1
            if char != "\n":
                self._line_chars.append(char)
        elif self._last_char:
            # End of input sits one column past the last character
            self._column += 1

        self._last_char = char
        return char

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters."""
        while self._last_char and self._last_char.isspace():
            self._read_char()

    def _skip_comment(self) -> None:
        """Skip a '#' comment through the end of the line or input."""
        while True:
            char = self._read_char()
            if not char or char in "\n\r":
                return

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | float | None,
        line: int,
        column: int,
    ) -> Token:
        token = Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            filename=self.filename,
        )
        logger.debug(f"Scanned {token!r}")
        return token

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """
        Scan an identifier or keyword.

        Keywords are distinguished by checking the completed text against
        the keyword table.
        """
        chars = [self._last_char]
        while self._read_char() in self.IDENT_CHARS:
            chars.append(self._last_char)

        name = "".join(chars)
        token_type = KEYWORDS.get(name, TokenType.IDENTIFIER)
        return self._make_token(token_type, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal: digits, then optionally '.' and digits.

        A '.' with no digit after it is completed with a '0'.
        """
        chars = []
        while self._last_char in self.DIGITS:
            chars.append(self._last_char)
            self._read_char()

        if self._last_char == ".":
            chars.append(".")
            self._read_char()
            if self._last_char in self.DIGITS:
                while self._last_char in self.DIGITS:
                    chars.append(self._last_char)
                    self._read_char()
            else:
                chars.append("0")

        value = float("".join(chars))
        return self._make_token(TokenType.NUMBER, value, start_line, start_column)

    def _scan_symbol(self, start_line: int, start_column: int) -> Token:
        """Scan a single-character operator or delimiter."""
        char = self._last_char
        self._read_char()

        if char in OPERATOR_CHARS:
            return self._make_token(TokenType.OPERATOR, char, start_line, start_column)

        if char in DELIMITERS:
            return self._make_token(DELIMITERS[char], char, start_line, start_column)

        raise LexicalFault(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self.source_line(start_line),
        )
