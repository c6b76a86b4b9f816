"""
exprc Error Hierarchy
=====================

This module defines the exception hierarchy for the expression compiler.
All exceptions inherit from ExprError, allowing callers to catch every
compiler-related failure with a single except clause.

Exception Hierarchy
-------------------
ExprError (base)
├── ExprSyntaxError - the parser met a token it cannot accept
│   ├── UnexpectedTokenError - a factor was expected
│   └── MissingTokenError - a specific token kind was expected
├── NestingDepthError - parentheses nest deeper than the parser allows
├── ASTInvariantError - a node was built with the wrong shape
├── EvaluationOverflowError - a value does not fit the evaluation range
└── StackImbalanceError - emitted CIL does not keep the stack balanced

Error Message Format
--------------------
All errors follow this format:

    filename:line:column: error: description
        source_line_text
           ^ (pointer to error location)
    hint: suggestion for fixing (when available)

Example:
    <stdin>:1:3: error: expected integer or '(', found end of input
        1+
          ^
    hint: the expression ends too early
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source text for error reporting.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class ExprError(Exception):
    """
    Base exception for all expression compiler errors.

    This class provides common functionality for error messages including
    source location tracking, source line context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, source context, and hint."""
        parts = []

        # Location prefix: filename:line:column: error: message
        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors (Parser)
# =============================================================================

class ExprSyntaxError(ExprError):
    """
    Syntax error in an expression.

    Raised by the parser on the first token it cannot accept. There is no
    recovery: the whole parse is aborted and no partial tree is returned.

    Examples:
        - Premature end of input: "1+"
        - Unbalanced parentheses: "(1+2"
        - Misplaced operator: "*3"
        - Unrecognized character: "1+#2"
    """
    pass


class UnexpectedTokenError(ExprSyntaxError):
    """
    A factor (integer literal or parenthesized expression) was expected
    but some other token was found.
    """

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"expected integer or '(', found {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(ExprSyntaxError):
    """
    A specific token kind was required (closing parenthesis, end of input)
    but another token was found.
    """

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            f"expected {expected}, found {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class NestingDepthError(ExprError):
    """
    Parenthesized groups nest deeper than the parser's limit.

    The input may be grammatical; it is rejected because each level of
    parentheses costs several Python stack frames.
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            f"parentheses nest deeper than {limit} levels",
            location=location,
            hint="split the expression or remove redundant parentheses",
            source_line=source_line,
        )


# =============================================================================
# Tree and Backend Errors
# =============================================================================

class ASTInvariantError(ExprError):
    """
    An AST node was constructed with the wrong number of children or with
    an anchor token that does not match its kind.
    """
    pass


class EvaluationOverflowError(ExprError):
    """
    A literal or an intermediate result does not fit a signed 32-bit
    integer while checked evaluation is enabled, or grows past the size
    limit of unchecked evaluation.
    """
    pass


class StackImbalanceError(ExprError):
    """
    An emitted CIL instruction sequence pops more values than it pushed,
    or does not leave exactly one value for the final print.
    """
    pass
