"""
Expression Backends
===================

Each backend is a read-only traversal of the AST that produces one
artifact. Backends keep no state between calls, so any of them may be run
repeatedly on the same tree, in any order.

| Name  | Class                | Artifact                          |
|-------|----------------------|-----------------------------------|
| eval  | Evaluator            | integer value                     |
| sexpr | SExpressionRenderer  | prefix notation, one line         |
| c     | CSourceGenerator     | standalone C program              |
| cil   | CILGenerator         | ILASM listing for the .NET runtime|

Usage
-----
>>> from exprc.parser import parse_source
>>> from exprc.backends import run_backend
>>> run_backend("eval", parse_source("(1+2)*3"))
'9'
"""

from typing import Optional, TYPE_CHECKING

from exprc.ast import ASTNode
from exprc.backends.evaluator import Evaluator
from exprc.backends.sexpr import SExpressionRenderer
from exprc.backends.csource import CSourceGenerator
from exprc.backends.cil import CILGenerator, check_stack_balance, stack_effect

if TYPE_CHECKING:
    from exprc.compiler import CompilerOptions


# Backend names in the order the full pipeline runs them
BACKEND_NAMES: tuple[str, ...] = ("eval", "sexpr", "c", "cil")

BACKENDS: dict[str, type] = {
    "eval": Evaluator,
    "sexpr": SExpressionRenderer,
    "c": CSourceGenerator,
    "cil": CILGenerator,
}


def create_backend(name: str, options: Optional["CompilerOptions"] = None):
    """
    Instantiate a backend by name, configured from compiler options.

    Raises:
        ValueError: If the backend name is unknown
    """
    if name not in BACKENDS:
        raise ValueError(
            f"unknown backend '{name}' (choose from {', '.join(BACKEND_NAMES)})"
        )

    if options is None:
        return BACKENDS[name]()

    if name == "eval":
        return Evaluator(pow_mode=options.pow_mode, check_overflow=options.check_overflow)
    if name == "cil":
        return CILGenerator(
            assembly_name=options.assembly_name,
            class_name=options.class_name,
            method_name=options.method_name,
        )
    return BACKENDS[name]()


def run_backend(name: str, root: ASTNode, options: Optional["CompilerOptions"] = None) -> str:
    """Run one backend over a tree and return its artifact as text."""
    backend = create_backend(name, options)
    return backend.emit(root)


__all__ = [
    "BACKEND_NAMES",
    "BACKENDS",
    "create_backend",
    "run_backend",
    "Evaluator",
    "SExpressionRenderer",
    "CSourceGenerator",
    "CILGenerator",
    "check_stack_balance",
    "stack_effect",
]
