"""
exprc - Arithmetic Expression Compiler
======================================

This package compiles one-line arithmetic expressions built from integer
literals, `+`, `*`, right-associative `^` and parentheses. The source is
parsed once into an immutable AST that any number of backends can then
traverse:

- **eval**: the integer value of the expression
- **sexpr**: fully parenthesized prefix notation, e.g. `(+ 1 (* 2 3))`
- **c**: a standalone C program printing the value
- **cil**: an ILASM listing for the .NET runtime printing the value

Pipeline
--------
    Source → Lexer → Parser → AST → Backend(s)

Quick Start
-----------
>>> from exprc import parse_source, Evaluator, SExpressionRenderer
>>> tree = parse_source("2^3^2")
>>> Evaluator().evaluate(tree)
512
>>> SExpressionRenderer().render(tree)
'(expt 2 (expt 3 2))'

Or use the command-line tool:
    $ exprc -e "(1+2)*3" -t eval
    9
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from exprc.errors import (
    ExprError,
    ExprSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    NestingDepthError,
    ASTInvariantError,
    EvaluationOverflowError,
    StackImbalanceError,
    SourceLocation,
)
from exprc.lexer import Lexer, Token, TokenType, tokenize
from exprc.ast import (
    ASTNode,
    ASTPrinter,
    ASTVisitor,
    NodeKind,
    make_add,
    make_binary,
    make_literal,
    make_mul,
    make_pow,
    make_program,
)
from exprc.parser import ExprParser, parse_source
from exprc.backends import (
    BACKEND_NAMES,
    CILGenerator,
    CSourceGenerator,
    Evaluator,
    SExpressionRenderer,
    check_stack_balance,
    run_backend,
)
from exprc.compiler import (
    CompilerOptions,
    CompilerResult,
    ExpressionCompiler,
    compile_expression,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ExprError",
    "ExprSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "NestingDepthError",
    "ASTInvariantError",
    "EvaluationOverflowError",
    "StackImbalanceError",
    "SourceLocation",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # AST
    "ASTNode",
    "ASTPrinter",
    "ASTVisitor",
    "NodeKind",
    "make_add",
    "make_binary",
    "make_literal",
    "make_mul",
    "make_pow",
    "make_program",
    # Parser
    "ExprParser",
    "parse_source",
    # Backends
    "BACKEND_NAMES",
    "CILGenerator",
    "CSourceGenerator",
    "Evaluator",
    "SExpressionRenderer",
    "check_stack_balance",
    "run_backend",
    # Compiler
    "CompilerOptions",
    "CompilerResult",
    "ExpressionCompiler",
    "compile_expression",
]
