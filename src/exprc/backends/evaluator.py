"""
Evaluator Backend
=================

Computes the integer value of an expression tree.

Power Policy
------------
The language has no unary minus, so every operand, and therefore every
exponent, is a non-negative integer. Two policies are offered for POW:

- "exact" (default): exact integer exponentiation.
- "float": raise in floating point and truncate toward zero, i.e.
  int(math.pow(a, b)). This reproduces the reference tool's output
  bit-for-bit, including its loss of precision once results pass 2**53.

Overflow Policy
---------------
With check_overflow=True (default) every literal and every intermediate
result must fit a signed 32-bit integer, the same range the CIL backend's
add.ovf / mul.ovf / conv.i4 instructions work in. Anything outside it
raises EvaluationOverflowError. With check_overflow=False the evaluator
returns Python's unbounded integers, up to MAX_UNCHECKED_BITS bits:
an operation whose result would be larger raises EvaluationOverflowError.
Powers are refused before they are computed, so 9^9^9 fails at once.
"""

import math

from exprc.ast import ASTNode, ASTVisitor
from exprc.errors import EvaluationOverflowError

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

POW_MODES = ("exact", "float")

# Size limits of unchecked evaluation. Results stay printable with str()
# under the default int-to-str digit limit.
MAX_UNCHECKED_BITS = 8192
MAX_LITERAL_DIGITS = 2500


class Evaluator(ASTVisitor):
    """
    Evaluates an expression tree to an integer.

    Usage:
        value = Evaluator().evaluate(parse_source("2^3^2"))   # 512
    """

    def __init__(self, pow_mode: str = "exact", check_overflow: bool = True):
        if pow_mode not in POW_MODES:
            raise ValueError(f"pow_mode must be one of {POW_MODES}, got {pow_mode!r}")
        self.pow_mode = pow_mode
        self.check_overflow = check_overflow

    def evaluate(self, root: ASTNode) -> int:
        """Return the value of the tree rooted at `root`."""
        return self.visit(root)

    def emit(self, root: ASTNode) -> str:
        return str(self.evaluate(root))

    def _checked(self, value: int, node: ASTNode) -> int:
        location = node.anchor_token.location if node.anchor_token else None
        if self.check_overflow and not INT32_MIN <= value <= INT32_MAX:
            raise EvaluationOverflowError(
                f"{node.kind.name.lower()} result {value} does not fit in 32 bits",
                location=location,
                hint="disable overflow checking to evaluate with unbounded integers",
            )
        if value.bit_length() > MAX_UNCHECKED_BITS:
            raise EvaluationOverflowError(
                f"{node.kind.name.lower()} result needs more than {MAX_UNCHECKED_BITS} bits",
                location=location,
            )
        return value

    # =========================================================================
    # Node Handlers
    # =========================================================================

    def visit_program(self, node: ASTNode, value: int) -> int:
        return value

    def visit_add(self, node: ASTNode, left: int, right: int) -> int:
        return self._checked(left + right, node)

    def visit_mul(self, node: ASTNode, left: int, right: int) -> int:
        return self._checked(left * right, node)

    def visit_pow(self, node: ASTNode, base: int, exponent: int) -> int:
        location = node.anchor_token.location if node.anchor_token else None

        if self.pow_mode == "float":
            try:
                value = int(math.pow(base, exponent))
            except OverflowError:
                raise EvaluationOverflowError(
                    f"pow({base}, {exponent}) overflows a double",
                    location=location,
                )
            return self._checked(value, node)

        if self.check_overflow and base > 1 and exponent >= 32:
            # Any base > 1 raised to 32 or more already exceeds int32
            raise EvaluationOverflowError(
                f"pow result {base}^{exponent} does not fit in 32 bits",
                location=location,
                hint="disable overflow checking to evaluate with unbounded integers",
            )
        if base > 1 and exponent * (base.bit_length() - 1) >= MAX_UNCHECKED_BITS:
            # base ** exponent has at least this many bits; refuse before computing
            raise EvaluationOverflowError(
                f"pow result {base}^{exponent} needs more than {MAX_UNCHECKED_BITS} bits",
                location=location,
            )
        return self._checked(base ** exponent, node)

    def visit_literal(self, node: ASTNode) -> int:
        if len(node.text.lstrip("0")) > MAX_LITERAL_DIGITS:
            raise EvaluationOverflowError(
                f"literal has more than {MAX_LITERAL_DIGITS} digits",
                location=node.anchor_token.location,
            )
        return self._checked(int(node.text), node)
