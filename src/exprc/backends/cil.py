"""
CIL Backend
===========

Emits an ILASM listing for the .NET runtime. The generated program pushes
the value of the expression on the evaluation stack and prints it with
System.Console.WriteLine(int32).

Code Generation Strategy
------------------------
CIL is a stack machine, so each subtree is emitted in postfix order and
leaves exactly one int32 on the stack:

| Node    | Emitted code                                            |
|---------|---------------------------------------------------------|
| LITERAL | ldc.i4 N                                                |
| ADD     | <left> <right> add.ovf                                  |
| MUL     | <left> <right> mul.ovf                                  |
| POW     | <left> conv.i8 <right> conv.i8 call Pow(int64, int64)   |
|         | conv.i4                                                 |

add.ovf and mul.ovf trap on 32-bit overflow. The only power routine
available is the 64-bit Int64.Utils::Pow from the external int64lib
assembly, so both operands are widened with conv.i8 before the call and
the result is narrowed back with conv.i4.

Output Format
-------------
    .assembly 'output' { }

    .assembly extern int64lib { }

    .class public 'Test' extends ['mscorlib']'System'.'Object' {
      .method public static void 'whatever'() {
      .entrypoint
        ldc.i4 2
        ...
        call void class ['mscorlib']'System'.'Console'::'WriteLine'(int32)
        ret
      }
    }

Assemble with `ilasm output.il` against an int64lib.dll that provides
Int64.Utils::Pow.

Stack Checking
--------------
stack_effect() knows the net stack effect of every instruction this
backend emits; check_stack_balance() replays a body against an abstract
depth counter and fails if the depth ever goes negative or the body does
not leave exactly one value for the final print.
"""

from typing import Iterable
import logging

from exprc.ast import ASTNode, ASTVisitor, NodeKind
from exprc.errors import StackImbalanceError

logger = logging.getLogger(__name__)


# =============================================================================
# Instruction Text
# =============================================================================

INDENT = "    "

LOAD_CONSTANT = "ldc.i4"
ADD_CHECKED = "add.ovf"
MUL_CHECKED = "mul.ovf"
WIDEN = "conv.i8"
NARROW = "conv.i4"
CALL_POW = "call int64 class ['int64lib']'Int64'.'Utils'::'Pow'(int64, int64)"
CALL_PRINT = "call void class ['mscorlib']'System'.'Console'::'WriteLine'(int32)"
RETURN = "ret"

# Net change in stack depth for each emitted instruction
STACK_EFFECTS: dict[str, int] = {
    LOAD_CONSTANT: +1,
    ADD_CHECKED: -1,
    MUL_CHECKED: -1,
    WIDEN: 0,
    NARROW: 0,
    CALL_POW: -1,       # pops two int64, pushes one int64
    CALL_PRINT: -1,
    RETURN: 0,
}

HEADER_TEMPLATE = """\
.assembly '{assembly}' {{ }}

.assembly extern int64lib {{ }}

.class public '{class_name}' extends ['mscorlib']'System'.'Object' {{
  .method public static void '{method}'() {{
  .entrypoint
"""

FOOTER = f"""\
{INDENT}{CALL_PRINT}
{INDENT}{RETURN}
  }}
}}
"""


def stack_effect(instruction: str) -> int:
    """
    Return the net stack effect of one instruction line.

    Leading indentation is ignored; ldc.i4 is recognized with any operand.

    Raises:
        StackImbalanceError: If the instruction is not one this backend emits
    """
    text = instruction.strip()
    if text in STACK_EFFECTS:
        return STACK_EFFECTS[text]
    opcode = text.split(None, 1)[0] if text else ""
    if opcode == LOAD_CONSTANT:
        return STACK_EFFECTS[LOAD_CONSTANT]
    raise StackImbalanceError(f"unknown instruction '{text}'")


def check_stack_balance(instructions: Iterable[str], expected: int = 1) -> int:
    """
    Replay instructions against an abstract stack-depth counter.

    Args:
        instructions: Instruction lines, one per element
        expected: Depth the sequence must finish at

    Returns:
        The deepest stack depth reached

    Raises:
        StackImbalanceError: If the depth goes negative or ends != expected
    """
    depth = 0
    max_depth = 0
    for index, instruction in enumerate(instructions):
        depth += stack_effect(instruction)
        if depth < 0:
            raise StackImbalanceError(
                f"stack underflow at instruction {index + 1}: '{instruction.strip()}'"
            )
        max_depth = max(max_depth, depth)

    if depth != expected:
        raise StackImbalanceError(f"sequence leaves {depth} values on the stack, expected {expected}")
    return max_depth


# =============================================================================
# Code Generator
# =============================================================================

class CILGenerator(ASTVisitor):
    """
    Generates an ILASM program from an expression tree.

    Usage:
        gen = CILGenerator()
        listing = gen.generate(parse_source("2^10"))
        Path("output.il").write_text(listing)

    Attributes:
        assembly_name: Name of the emitted assembly
        class_name: Name of the class holding the entry point
        method_name: Name of the entry point method
    """

    def __init__(
        self,
        assembly_name: str = "output",
        class_name: str = "Test",
        method_name: str = "whatever",
    ):
        self.assembly_name = assembly_name
        self.class_name = class_name
        self.method_name = method_name

    def generate(self, root: ASTNode) -> str:
        """Return the complete ILASM listing for the tree."""
        return self.visit(root)

    def emit(self, root: ASTNode) -> str:
        return self.generate(root)

    def instructions(self, node: ASTNode) -> list[str]:
        """
        Return the body instructions for an expression, without indentation.

        For the PROGRAM root this is the code of its expression; the print
        and return of the method footer are not included.
        """
        if node.kind == NodeKind.PROGRAM:
            node = node[0]
        return self.visit(node)

    # =========================================================================
    # Node Handlers
    # =========================================================================
    # Expression handlers return their code as a list of instructions;
    # the left operand's list is extended in place.

    def visit_program(self, node: ASTNode, body: list[str]) -> str:
        logger.debug(f"Emitted {len(body)} CIL body instructions")
        header = HEADER_TEMPLATE.format(
            assembly=self.assembly_name,
            class_name=self.class_name,
            method=self.method_name,
        )
        return header + "".join(f"{INDENT}{line}\n" for line in body) + FOOTER

    def visit_add(self, node: ASTNode, left: list[str], right: list[str]) -> list[str]:
        left.extend(right)
        left.append(ADD_CHECKED)
        return left

    def visit_mul(self, node: ASTNode, left: list[str], right: list[str]) -> list[str]:
        left.extend(right)
        left.append(MUL_CHECKED)
        return left

    def visit_pow(self, node: ASTNode, base: list[str], exponent: list[str]) -> list[str]:
        base.append(WIDEN)
        base.extend(exponent)
        base.extend([WIDEN, CALL_POW, NARROW])
        return base

    def visit_literal(self, node: ASTNode) -> list[str]:
        return [f"{LOAD_CONSTANT} {node.text}"]
