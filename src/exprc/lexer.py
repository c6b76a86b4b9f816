"""
Expression Lexer (Tokenizer)
============================

This module implements the lexer for the arithmetic expression language.
It converts one line of source text into a stream of tokens for the parser.

Token Categories
----------------
| Text        | Token type   |
|-------------|--------------|
| +           | PLUS         |
| *           | TIMES        |
| ^           | POW          |
| (           | PAREN_OPEN   |
| )           | PAREN_CLOSE  |
| 0-9 (run)   | INT          |
| whitespace  | (discarded)  |
| anything    | ILLEGAL      |

At each position the alternatives are tried in the order of the table
above. Digit runs are consumed greedily. Any other single character is
reported as an ILLEGAL token and scanning continues; the lexer itself
never fails; rejecting ILLEGAL tokens is the parser's job.

The stream always ends with exactly one END token whose text is empty.

Example Usage
-------------
>>> from exprc.lexer import Lexer
>>> for token in Lexer("2 ^ (3+4)").tokenize():
...     print(token)
[INT, "2"]
[POW, "^"]
[PAREN_OPEN, "("]
[INT, "3"]
[PLUS, "+"]
[INT, "4"]
[PAREN_CLOSE, ")"]
[END, ""]
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import logging
import string

from exprc.errors import SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the expression language."""

    # === Operators ===
    PLUS = auto()           # +
    TIMES = auto()          # *
    POW = auto()            # ^

    # === Delimiters ===
    PAREN_OPEN = auto()     # (
    PAREN_CLOSE = auto()    # )

    # === Literals ===
    INT = auto()            # decimal digit run

    # === Structural ===
    END = auto()            # end of input, emitted exactly once
    ILLEGAL = auto()        # any unrecognized character


# Single-character tokens, in the order they are tried
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "*": TokenType.TIMES,
    "^": TokenType.POW,
    "(": TokenType.PAREN_OPEN,
    ")": TokenType.PAREN_CLOSE,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source line.

    This immutable class stores the token type, the exact matched text,
    and the position of its first character for error reporting.

    Attributes:
        type: The TokenType classification
        text: The matched substring ("" for END)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source
    """
    type: TokenType
    text: str
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        return f'[{self.type.name}, "{self.text}"]'

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Short human-readable description used in diagnostics."""
        if self.type == TokenType.END:
            return "end of input"
        return f"{self.type.name} '{self.text}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes one line of expression source.

    The token stream is produced lazily by a generator, so a parser can
    pull one token at a time. The generator is not restartable; call
    tokenize() again for a fresh stream.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source (for error reporting)
    """

    DIGITS = string.digits

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source text.

        Args:
            source: The expression to tokenize
            filename: Name of the source (for error messages)
        """
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects in source order, ending with a single END token
        """
        self._pos = 0
        self._line = 1
        self._column = 1

        while not self._at_end():
            token = self._scan_token()
            if token is not None:
                yield token

        yield self._make_token(TokenType.END, "", self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Look at the current character without advancing."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _make_token(self, token_type: TokenType, text: str, line: int, column: int) -> Token:
        return Token(
            type=token_type,
            text=text,
            line=line,
            column=column,
            filename=self.filename,
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token | None:
        """
        Scan the next lexical element.

        Returns:
            The next Token, or None when a whitespace run was skipped
        """
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start_line, start_column)

        if char in self.DIGITS:
            return self._scan_integer(start_line, start_column)

        if char.isspace():
            while not self._at_end() and self._peek().isspace():
                self._advance()
            return None

        self._advance()
        logger.debug(f"Illegal character {char!r} at {self.filename}:{start_line}:{start_column}")
        return self._make_token(TokenType.ILLEGAL, char, start_line, start_column)

    def _scan_integer(self, start_line: int, start_column: int) -> Token:
        """Scan a maximal run of decimal digits."""
        start = self._pos
        while not self._at_end() and self._peek() in self.DIGITS:
            self._advance()
        return self._make_token(TokenType.INT, self.source[start:self._pos], start_line, start_column)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source text and return the complete token list."""
    return list(Lexer(source, filename).tokenize())
