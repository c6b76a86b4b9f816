"""
exprc - Expression Compiler Command-Line Interface
==================================================

This module implements the command-line driver. It reads one expression,
compiles it once and writes the artifacts of the selected backends.

Usage Examples
--------------
Run every backend (the default):
    $ exprc -e "1+2*3"

Evaluate only:
    $ echo "2^3^2" | exprc -t eval

Write a CIL listing for ilasm:
    $ exprc -e "2^10" -t cil -o output.il

Translate to C from the first line of a file:
    $ exprc expr.txt -t c -o expr.c

Inspect the front end:
    $ exprc -e "(1+2)*3" --tokens
    $ exprc -e "(1+2)*3" --ast
"""

import logging
from pathlib import Path
from typing import Optional

import click

from exprc import __version__
from exprc.ast import ASTPrinter
from exprc.backends import BACKEND_NAMES
from exprc.cli.errors import handle_cli_exception
from exprc.compiler import CompilerOptions, ExpressionCompiler
from exprc.lexer import tokenize
from exprc.parser import parse_source

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def read_source(expression: Optional[str], input_file: Optional[Path]) -> tuple[str, str]:
    """
    Return (source line, source name) from -e, a file, or stdin.

    Only the first line of a file or of stdin is read.
    """
    if expression is not None:
        return expression, "<expr>"

    if input_file is not None:
        lines = input_file.read_text(encoding="utf-8").splitlines()
        return (lines[0] if lines else ""), str(input_file)

    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        click.echo("> ", nl=False)
    return stdin.readline().rstrip("\r\n"), "<stdin>"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e", "--expression",
    help="Expression to compile (instead of INPUT_FILE or stdin)",
)
@click.option(
    "-t", "--target",
    "targets",
    multiple=True,
    type=click.Choice(list(BACKEND_NAMES) + ["all"], case_sensitive=False),
    help="Backend to run (can be repeated, default: $EXPRC_TARGETS or all)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the artifact to a file (requires a single --target)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--pow-mode",
    type=click.Choice(["exact", "float"], case_sensitive=False),
    default=None,
    help="Evaluator power policy: exact integers or truncated floating point",
)
@click.option(
    "--no-overflow-check",
    is_flag=True,
    help="Evaluate with unbounded integers instead of checked 32-bit arithmetic",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="exprc")
def main(
    input_file: Optional[Path],
    expression: Optional[str],
    targets: tuple[str, ...],
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    pow_mode: Optional[str],
    no_overflow_check: bool,
    verbose: bool,
) -> None:
    """
    Compile an arithmetic expression.

    INPUT_FILE holds the expression on its first line. Without INPUT_FILE
    or -e, one line is read from standard input.

    Without -t, the targets listed in EXPRC_TARGETS are run (default: all).

    \b
    Language:
        integers, + and * (left-associative),
        ^ (right-associative, binds tightest), parentheses

    \b
    Targets:
        eval     the integer value
        sexpr    prefix notation, e.g. (+ 1 (* 2 3))
        c        a standalone C program printing the value
        cil      an ILASM program printing the value
    """
    setup_logging(verbose)

    try:
        source, source_name = read_source(expression, input_file)

        if tokens:
            for token in tokenize(source, source_name):
                click.echo(repr(token))
            return

        if ast:
            click.echo(ASTPrinter().print(parse_source(source, source_name)))
            return

        # -t overrides EXPRC_TARGETS, which overrides the default of all targets
        options = CompilerOptions.from_env()
        if targets:
            names = [t.lower() for t in targets]
            if "all" in names:
                names = list(BACKEND_NAMES)
            options.targets = tuple(dict.fromkeys(names))
        selected = list(options.targets)

        if output is not None and len(selected) != 1:
            raise click.BadParameter("--output needs exactly one --target", param_hint="'-o'")

        if pow_mode:
            options.pow_mode = pow_mode.lower()
        if no_overflow_check:
            options.check_overflow = False

        logger.debug(f"Compiling {source_name} for {', '.join(selected)}")
        result = ExpressionCompiler(options).compile_source(source, source_name)

        if output is not None:
            text = result.outputs[selected[0]]
            output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
            if verbose:
                click.echo(f"Wrote {len(text)} characters to {output}", err=True)
            return

        for index, target in enumerate(selected):
            if index:
                click.echo()
            click.echo(result.outputs[target].rstrip("\n"))

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
