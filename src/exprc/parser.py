"""
Expression Recursive Descent Parser
===================================

This module implements an LL(1) recursive descent parser for the
arithmetic expression language. It pulls tokens from the lexer one at a
time and builds the AST defined in exprc.ast.

Grammar
-------
The ambiguous grammar

    Expr -> Expr "+" Term | Term        ("+" is left-associative)
    Term -> Term "*" Pow  | Pow         ("*" is left-associative)
    Pow  -> Fact "^" Pow  | Fact        ("^" is right-associative)
    Fact -> INT | "(" Expr ")"

is rewritten without left recursion:

    Program ::= Expr END
    Expr    ::= Term (PLUS Term)*
    Term    ::= Pow (TIMES Pow)*
    Pow     ::= Fact (POW Fact)*       (grouped to the right)
    Fact    ::= INT | PAREN_OPEN Expr PAREN_CLOSE

The loops in Expr and Term fold the accumulated result into the left child
of each new node, giving left-leaning trees. Pow collects its operands
and folds them from the right, giving right-leaning trees. Only
parentheses recurse; their nesting is limited to MAX_NESTING_DEPTH
levels and deeper input raises NestingDepthError.

Error Handling
--------------
The first token that does not fit the grammar raises an ExprSyntaxError.
There is no recovery or resynchronization, and no partial tree is returned.

Example Usage
-------------
>>> from exprc.parser import parse_source
>>> from exprc.backends.sexpr import SExpressionRenderer
>>> SExpressionRenderer().render(parse_source("2^3^2"))
'(expt 2 (expt 3 2))'
"""

from typing import Iterable, Optional
import logging

from exprc.ast import (
    ASTNode,
    make_add,
    make_literal,
    make_mul,
    make_pow,
    make_program,
)
from exprc.errors import MissingTokenError, NestingDepthError, UnexpectedTokenError
from exprc.lexer import Lexer, Token, TokenType

logger = logging.getLogger(__name__)


# Deepest parenthesis nesting accepted. Every level costs four Python
# stack frames (Fact, Expr, Term, Pow).
MAX_NESTING_DEPTH = 100

# Human-readable names for tokens the parser may demand
EXPECTED_NAMES: dict[TokenType, str] = {
    TokenType.PAREN_CLOSE: "')'",
    TokenType.END: "end of input",
}


class ExprParser:
    """
    Recursive descent parser for arithmetic expressions.

    The parser keeps exactly one token of lookahead (`current`) and no
    other state besides the current parenthesis nesting depth.

    Attributes:
        filename: Source filename for error reporting
        source_line: Original source text for error context
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        filename: str = "<input>",
        source_line: Optional[str] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: Token stream from the lexer (any iterable; consumed lazily)
            filename: Source filename for error messages
            source_line: Original source text for error context
        """
        self._tokens = iter(tokens)
        self.filename = filename
        self.source_line = source_line
        self._depth = 0
        self.current: Token = self._next_token()

    def parse(self) -> ASTNode:
        """
        Parse a complete program: one expression followed by END.

        Returns:
            The PROGRAM root node

        Raises:
            ExprSyntaxError: If the token stream is not a valid expression
        """
        expression = self._parse_expr()
        self._expect(TokenType.END)
        logger.debug(f"Parsed {self.filename} into a complete tree")
        return make_program(expression)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _next_token(self) -> Token:
        try:
            return next(self._tokens)
        except StopIteration:
            # Streams from the lexer always end with END; hand-built ones may not
            return Token(TokenType.END, "", filename=self.filename)

    def _check(self, token_type: TokenType) -> bool:
        """Check if the current token is of the given type."""
        return self.current.type == token_type

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self.current
        if token.type != TokenType.END:
            self.current = self._next_token()
        return token

    def _expect(self, token_type: TokenType) -> Token:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the current token is of another type
        """
        if self._check(token_type):
            return self._advance()

        expected = EXPECTED_NAMES.get(token_type, token_type.name)
        hint = None
        if token_type == TokenType.PAREN_CLOSE:
            hint = "add ')' to close the parenthesized expression"
        elif token_type == TokenType.END:
            hint = "remove the trailing input or join it with an operator"

        raise MissingTokenError(
            expected,
            self.current.describe(),
            location=self.current.location,
            source_line=self.source_line,
            hint=hint,
        )

    # =========================================================================
    # Productions
    # =========================================================================

    def _parse_expr(self) -> ASTNode:
        """Expr ::= Term (PLUS Term)*"""
        result = self._parse_term()
        while self._check(TokenType.PLUS):
            op_token = self._advance()
            result = make_add(op_token, result, self._parse_term())
        return result

    def _parse_term(self) -> ASTNode:
        """Term ::= Pow (TIMES Pow)*"""
        result = self._parse_pow()
        while self._check(TokenType.TIMES):
            op_token = self._advance()
            result = make_mul(op_token, result, self._parse_pow())
        return result

    def _parse_pow(self) -> ASTNode:
        """Pow ::= Fact (POW Fact)*, grouped to the right"""
        operands = [self._parse_fact()]
        operators = []
        while self._check(TokenType.POW):
            operators.append(self._advance())
            operands.append(self._parse_fact())

        # Right-associative: fold from the last operand back to the first
        result = operands.pop()
        while operators:
            result = make_pow(operators.pop(), operands.pop(), result)
        return result

    def _parse_fact(self) -> ASTNode:
        """Fact ::= INT | PAREN_OPEN Expr PAREN_CLOSE"""
        token = self.current

        if token.type == TokenType.INT:
            return make_literal(self._advance())

        if token.type == TokenType.PAREN_OPEN:
            if self._depth >= MAX_NESTING_DEPTH:
                raise NestingDepthError(
                    MAX_NESTING_DEPTH,
                    location=token.location,
                    source_line=self.source_line,
                )
            self._advance()
            self._depth += 1
            result = self._parse_expr()
            self._expect(TokenType.PAREN_CLOSE)
            self._depth -= 1
            return result

        if token.type == TokenType.ILLEGAL:
            hint = f"'{token.text}' is not part of the expression language"
        elif token.type == TokenType.END:
            hint = "the expression ends too early"
        else:
            hint = "an operator needs an operand on each side"

        raise UnexpectedTokenError(
            token.describe(),
            location=token.location,
            source_line=self.source_line,
            hint=hint,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> ASTNode:
    """
    Parse expression source text into an AST.

    This is a convenience function that combines lexing and parsing. The
    token stream is consumed lazily, one token at a time.

    Args:
        source: The expression text
        filename: Source filename for error messages

    Returns:
        The PROGRAM root node

    Raises:
        ExprSyntaxError: If parsing fails
    """
    lexer = Lexer(source, filename)
    parser = ExprParser(lexer.tokenize(), filename, source.rstrip("\r\n"))
    return parser.parse()
