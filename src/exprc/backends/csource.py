"""
C Source Backend
================

Translates an expression tree into a complete C program that prints the
value of the expression:

    #include <stdio.h>
    #include <math.h>

    int main(void) {
        printf("%d\\n", ((1+2)*3));
        return 0;
    }

Additions and multiplications are emitted as fully parenthesized infix.
Exponentiation has no C operator, so it becomes a call to pow() from
<math.h> with an explicit (int) cast that truncates the double result.
Link the program with -lm.
"""

from exprc.ast import ASTNode, ASTVisitor

PROGRAM_TEMPLATE = """\
#include <stdio.h>
#include <math.h>

int main(void) {{
    printf("%d\\n", {expression});
    return 0;
}}
"""


class CSourceGenerator(ASTVisitor):
    """Generates a standalone C program from an expression tree."""

    def generate(self, root: ASTNode) -> str:
        return self.visit(root)

    def emit(self, root: ASTNode) -> str:
        return self.generate(root)

    def visit_program(self, node: ASTNode, expression: str) -> str:
        return PROGRAM_TEMPLATE.format(expression=expression)

    def visit_add(self, node: ASTNode, left: str, right: str) -> str:
        return f"({left}+{right})"

    def visit_mul(self, node: ASTNode, left: str, right: str) -> str:
        return f"({left}*{right})"

    def visit_pow(self, node: ASTNode, base: str, exponent: str) -> str:
        return f"(int) pow({base},{exponent})"

    def visit_literal(self, node: ASTNode) -> str:
        return node.text
