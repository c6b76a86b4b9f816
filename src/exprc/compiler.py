"""
Expression Compiler Main Module
===============================

This module provides the main compiler interface. It orchestrates the
complete pipeline:

    Source → Lex → Parse → AST → Backend(s) → Artifacts

Usage
-----
Command line:
    $ exprc -e "1+2*3" -t sexpr

Programmatic:
    >>> from exprc import compile_expression
    >>> compile_expression("1+2*3", target="sexpr")
    '(+ 1 (* 2 3))'

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert the source line to tokens
2. **Parsing**: Build the AST (aborts on the first syntax error)
3. **Backends**: Run each selected backend over the same tree

Configuration
-------------
CompilerOptions holds every knob of the pipeline. Defaults can be
overridden from environment variables with CompilerOptions.from_env():

    EXPRC_TARGETS          comma separated backends, e.g. "eval,cil"
    EXPRC_POW_MODE         "exact" or "float"
    EXPRC_CHECK_OVERFLOW   "1"/"0", "true"/"false", "yes"/"no"
    EXPRC_ASSEMBLY_NAME    assembly name used by the CIL backend
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import os

from exprc.ast import ASTNode
from exprc.backends import BACKEND_NAMES, create_backend
from exprc.backends.cil import CILGenerator, check_stack_balance
from exprc.backends.evaluator import POW_MODES, Evaluator
from exprc.lexer import Lexer, Token
from exprc.parser import ExprParser

logger = logging.getLogger(__name__)

TRUE_STRINGS = ("1", "true", "yes", "on")
FALSE_STRINGS = ("0", "false", "no", "off")


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        targets: Backends to run, in order (default: all four)
        pow_mode: Evaluator power policy, "exact" or "float"
        check_overflow: Evaluator rejects values outside signed 32 bits
        assembly_name: Assembly name written by the CIL backend
        class_name: Class holding the CIL entry point
        method_name: CIL entry point method name
        verify_stack: Replay CIL output against a stack-depth counter
    """
    targets: tuple[str, ...] = BACKEND_NAMES
    pow_mode: str = "exact"
    check_overflow: bool = True
    assembly_name: str = "output"
    class_name: str = "Test"
    method_name: str = "whatever"
    verify_stack: bool = True

    def __post_init__(self):
        self.targets = tuple(self.targets)
        unknown = [t for t in self.targets if t not in BACKEND_NAMES]
        if unknown:
            raise ValueError(
                f"unknown target(s) {', '.join(unknown)} (choose from {', '.join(BACKEND_NAMES)})"
            )
        if self.pow_mode not in POW_MODES:
            raise ValueError(f"pow_mode must be one of {POW_MODES}, got {self.pow_mode!r}")

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Invalid values are ignored (with a warning) and the default is kept.

        Args:
            environ: Mapping to read from (default: os.environ)
        """
        env = os.environ if environ is None else environ
        options = cls()

        if targets := env.get("EXPRC_TARGETS"):
            names = tuple(t.strip() for t in targets.split(",") if t.strip())
            if names and all(n in BACKEND_NAMES for n in names):
                options.targets = names
            else:
                logger.warning(f"Ignoring invalid EXPRC_TARGETS={targets!r}")

        if pow_mode := env.get("EXPRC_POW_MODE"):
            if pow_mode in POW_MODES:
                options.pow_mode = pow_mode
            else:
                logger.warning(f"Ignoring invalid EXPRC_POW_MODE={pow_mode!r}")

        if check := env.get("EXPRC_CHECK_OVERFLOW"):
            if check.lower() in TRUE_STRINGS:
                options.check_overflow = True
            elif check.lower() in FALSE_STRINGS:
                options.check_overflow = False
            else:
                logger.warning(f"Ignoring invalid EXPRC_CHECK_OVERFLOW={check!r}")

        if assembly_name := env.get("EXPRC_ASSEMBLY_NAME"):
            options.assembly_name = assembly_name

        return options


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if every selected backend produced its artifact
        tokens: Token stream of the source
        ast: Abstract syntax tree (if parsing succeeded)
        outputs: Artifact text per backend name
        value: Integer value (when the eval backend ran)
    """
    filename: str = ""
    success: bool = False
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[ASTNode] = None
    outputs: dict[str, str] = field(default_factory=dict)
    value: Optional[int] = None


class ExpressionCompiler:
    """
    Expression compiler.

    Example:
        compiler = ExpressionCompiler(CompilerOptions(targets=("eval", "cil")))
        result = compiler.compile_source("2^3^2")
        print(result.value)            # 512
        print(result.outputs["cil"])   # ILASM listing

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile one line of expression source.

        Args:
            source: The expression text
            filename: Source filename for error messages

        Returns:
            CompilerResult holding the tree and one artifact per target

        Raises:
            ExprSyntaxError: If parsing fails (no artifact is produced)
            EvaluationOverflowError: If checked evaluation overflows
            StackImbalanceError: If CIL verification fails
        """
        result = CompilerResult(filename=filename)
        source_line = source.rstrip("\r\n")

        # Stage 1: Lexical analysis
        result.tokens = self._lex(source_line, filename)
        logger.debug(f"Tokenized {filename}: {len(result.tokens)} tokens")

        # Stage 2: Parsing
        result.ast = self._parse(result.tokens, filename, source_line)

        # Stage 3: Backends, all over the same immutable tree
        outputs = {}
        for target in self.options.targets:
            outputs[target] = self._generate(target, result.ast, result)
            logger.debug(f"Backend '{target}' produced {len(outputs[target])} characters")

        result.outputs = outputs
        result.success = True
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile the first line of a source file.

        Raises:
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        lines = path.read_text(encoding="utf-8").splitlines()
        return self.compile_source(lines[0] if lines else "", str(filepath))

    def _lex(self, source: str, filename: str) -> list[Token]:
        return list(Lexer(source, filename).tokenize())

    def _parse(self, tokens: list[Token], filename: str, source_line: str) -> ASTNode:
        return ExprParser(tokens, filename, source_line).parse()

    def _generate(self, target: str, ast: ASTNode, result: CompilerResult) -> str:
        backend = create_backend(target, self.options)

        if isinstance(backend, Evaluator):
            result.value = backend.evaluate(ast)
            return str(result.value)

        if isinstance(backend, CILGenerator) and self.options.verify_stack:
            depth = check_stack_balance(backend.instructions(ast))
            logger.debug(f"CIL stack check passed, max depth {depth}")

        return backend.emit(ast)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_expression(
    source: str,
    target: str = "sexpr",
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile an expression with a single backend and return its artifact.

    Args:
        source: The expression text
        target: Backend name: eval, sexpr, c or cil
        options: Compiler options (targets is overridden by `target`)

    Returns:
        The artifact text

    Raises:
        ExprSyntaxError: If parsing fails
        ValueError: If the target is unknown
    """
    base = options or CompilerOptions()
    single = CompilerOptions(
        targets=(target,),
        pow_mode=base.pow_mode,
        check_overflow=base.check_overflow,
        assembly_name=base.assembly_name,
        class_name=base.class_name,
        method_name=base.method_name,
        verify_stack=base.verify_stack,
    )
    result = ExpressionCompiler(single).compile_source(source)
    return result.outputs[target]
