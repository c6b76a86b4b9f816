"""
S-Expression Backend
====================

Renders an expression tree in fully parenthesized prefix notation:

    1+2*3   ->  (+ 1 (* 2 3))
    2^3^2   ->  (expt 2 (expt 3 2))

The PROGRAM root renders as its single child, without extra wrapping.
"""

from exprc.ast import ASTNode, ASTVisitor, NodeKind

OPERATOR_NAMES: dict[NodeKind, str] = {
    NodeKind.ADD: "+",
    NodeKind.MUL: "*",
    NodeKind.POW: "expt",
}


class SExpressionRenderer(ASTVisitor):
    """Renders an expression tree as a one-line S-expression."""

    def render(self, root: ASTNode) -> str:
        return self.visit(root)

    def emit(self, root: ASTNode) -> str:
        return self.render(root)

    def visit_program(self, node: ASTNode, expression: str) -> str:
        return expression

    def _visit_operator(self, node: ASTNode, left: str, right: str) -> str:
        return f"({OPERATOR_NAMES[node.kind]} {left} {right})"

    visit_add = _visit_operator
    visit_mul = _visit_operator
    visit_pow = _visit_operator

    def visit_literal(self, node: ASTNode) -> str:
        return node.text
