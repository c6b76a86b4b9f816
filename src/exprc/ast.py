"""
Expression Abstract Syntax Tree (AST) Definitions
=================================================

This module defines the AST used between the parser and the backends.

Rather than one class per operator, there is a single node type tagged
with a NodeKind. Each node carries the token that anchors it in the
source and an ordered tuple of children:

| Kind    | Anchor token        | Children          |
|---------|---------------------|-------------------|
| PROGRAM | none                | 1 (the expression)|
| ADD     | PLUS                | 2 (left, right)   |
| MUL     | TIMES               | 2 (left, right)   |
| POW     | POW                 | 2 (base, exponent)|
| LITERAL | INT                 | 0                 |

Design Notes
------------
- Nodes are frozen dataclasses and children are tuples: a tree is
  immutable once built, so one tree can feed any number of backends.
- Arity and anchor invariants are checked when a node is constructed.
- Backends subclass ASTVisitor and implement one visit_<kind> method per
  NodeKind; a missing handler raises instead of producing wrong output.
- Traversals use an explicit stack, never Python recursion: a sum of
  thousands of terms is a tree thousands of levels deep.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator, Optional
import string

from exprc.errors import ASTInvariantError
from exprc.lexer import Token, TokenType


# =============================================================================
# Node Kinds
# =============================================================================

class NodeKind(Enum):
    """Kinds of AST nodes."""
    PROGRAM = auto()
    ADD = auto()
    MUL = auto()
    POW = auto()
    LITERAL = auto()


# Number of children each kind must have
ARITY: dict[NodeKind, int] = {
    NodeKind.PROGRAM: 1,
    NodeKind.ADD: 2,
    NodeKind.MUL: 2,
    NodeKind.POW: 2,
    NodeKind.LITERAL: 0,
}

# Operator token expected to anchor each binary kind
OPERATOR_TOKENS: dict[NodeKind, TokenType] = {
    NodeKind.ADD: TokenType.PLUS,
    NodeKind.MUL: TokenType.TIMES,
    NodeKind.POW: TokenType.POW,
}

BINARY_KINDS = frozenset(OPERATOR_TOKENS)


def is_decimal(text: str) -> bool:
    """True for a non-empty run of ASCII digits 0-9."""
    return bool(text) and all(char in string.digits for char in text)


# =============================================================================
# AST Node
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    A node of the expression tree.

    Attributes:
        kind: What the node represents
        anchor_token: Token the node is associated with (None for PROGRAM)
        children: Ordered child nodes, left operand first
    """
    kind: NodeKind
    anchor_token: Optional[Token] = None
    children: tuple["ASTNode", ...] = field(default_factory=tuple)

    def __post_init__(self):
        expected = ARITY[self.kind]
        if len(self.children) != expected:
            raise ASTInvariantError(
                f"{self.kind.name} node needs {expected} children, got {len(self.children)}",
                location=self.anchor_token.location if self.anchor_token else None,
            )

        if self.kind == NodeKind.LITERAL:
            token = self.anchor_token
            if token is None or token.type != TokenType.INT or not is_decimal(token.text):
                raise ASTInvariantError(
                    f"LITERAL node must be anchored on an INT token, got {token!r}"
                )
        elif self.kind in OPERATOR_TOKENS:
            token = self.anchor_token
            if token is not None and token.type != OPERATOR_TOKENS[self.kind]:
                raise ASTInvariantError(
                    f"{self.kind.name} node anchored on {token.type.name} token",
                    location=token.location,
                )

    def __getitem__(self, index: int) -> "ASTNode":
        return self.children[index]

    def __len__(self) -> int:
        return len(self.children)

    def __bool__(self) -> bool:
        # A leaf has no children but is still a node
        return True

    def __iter__(self) -> Iterator["ASTNode"]:
        return iter(self.children)

    def __str__(self) -> str:
        if self.anchor_token is None:
            return self.kind.name.capitalize()
        return f"{self.kind.name.capitalize()} {self.anchor_token!r}"

    @property
    def text(self) -> str:
        """Source text of the anchor token ("" when there is none)."""
        return self.anchor_token.text if self.anchor_token else ""


# =============================================================================
# Factory Functions
# =============================================================================

def make_literal(token: Token) -> ASTNode:
    """Create a LITERAL node from an INT token."""
    return ASTNode(NodeKind.LITERAL, token)


def make_binary(kind: NodeKind, op_token: Optional[Token], left: ASTNode, right: ASTNode) -> ASTNode:
    """Create an ADD, MUL or POW node."""
    if kind not in BINARY_KINDS:
        raise ASTInvariantError(f"{kind.name} is not a binary operator kind")
    return ASTNode(kind, op_token, (left, right))


def make_add(op_token: Optional[Token], left: ASTNode, right: ASTNode) -> ASTNode:
    return make_binary(NodeKind.ADD, op_token, left, right)


def make_mul(op_token: Optional[Token], left: ASTNode, right: ASTNode) -> ASTNode:
    return make_binary(NodeKind.MUL, op_token, left, right)


def make_pow(op_token: Optional[Token], base: ASTNode, exponent: ASTNode) -> ASTNode:
    return make_binary(NodeKind.POW, op_token, base, exponent)


def make_program(expression: ASTNode) -> ASTNode:
    """Wrap a complete expression in the PROGRAM root."""
    return ASTNode(NodeKind.PROGRAM, None, (expression,))


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on the node kind to visit_program, visit_add, visit_mul,
    visit_pow and visit_literal. Subclasses must provide all five; an
    unhandled kind raises NotImplementedError.

    The walk is post-order and driven by an explicit stack, so tree depth
    is not limited by the Python recursion limit. A handler receives the
    node followed by the results already computed for its children, left
    operand first:

        visit_literal(node)
        visit_add(node, left, right)
        visit_program(node, expression)

    Usage:
        class Counter(ASTVisitor):
            def visit_literal(self, node):
                return 1

            def visit_add(self, node, left, right):
                return left + right + 1
            ...

        Counter().visit(tree)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a tree bottom-up, calling one handler per node.

        Args:
            node: Root of the subtree to visit

        Returns:
            The result of the handler for `node` (varies by visitor)
        """
        results: list[Any] = []
        stack: list[tuple[ASTNode, bool]] = [(node, False)]

        while stack:
            current, expanded = stack.pop()
            if not expanded:
                stack.append((current, True))
                # Reversed so the left child is finished first
                for child in reversed(current.children):
                    stack.append((child, False))
                continue

            count = len(current.children)
            args = results[len(results) - count:] if count else []
            if count:
                del results[-count:]
            results.append(self._dispatch(current, args))

        return results[0]

    def _dispatch(self, node: ASTNode, args: list[Any]) -> Any:
        method_name = f"visit_{node.kind.name.lower()}"
        visitor = getattr(self, method_name, None)
        if visitor is None:
            return self.generic_visit(node)
        return visitor(node, *args)

    def generic_visit(self, node: ASTNode) -> Any:
        raise NotImplementedError(
            f"{self.__class__.__name__} has no handler for {node.kind.name} nodes"
        )


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter:
    """
    Pretty printer for AST debugging.

    Produces one line per node, children indented two spaces:

        Program
          Add [PLUS, "+"]
            Literal [INT, "1"]
            Literal [INT, "2"]

    Usage:
        printer = ASTPrinter()
        print(printer.print(tree))
    """

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        output: list[str] = []
        stack = [(node, 0)]
        while stack:
            current, indent_level = stack.pop()
            output.append(f"{'  ' * indent_level}{current}")
            for child in reversed(current.children):
                stack.append((child, indent_level + 1))
        return "\n".join(output)
