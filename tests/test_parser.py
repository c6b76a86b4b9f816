"""
Parser Test Suite
=================

Tests for the recursive descent parser: tree shapes for precedence and
associativity, anchor tokens, and rejection of malformed input.

Test Organization
-----------------
- TestTreeShape: precedence, associativity and grouping
- TestAnchorTokens: tokens recorded on nodes
- TestSyntaxErrors: malformed input aborts the parse
- TestTokenStreams: parser input other than a fresh lexer
- TestLongInput: long operator chains and the parenthesis nesting limit
"""

import pytest
from exprc.ast import NodeKind
from exprc.backends.sexpr import SExpressionRenderer
from exprc.errors import (
    ExprError,
    ExprSyntaxError,
    MissingTokenError,
    NestingDepthError,
    UnexpectedTokenError,
)
from exprc.lexer import Lexer, Token, TokenType
from exprc.parser import MAX_NESTING_DEPTH, ExprParser, parse_source


def sexpr(source: str) -> str:
    """Helper: parse and render as an S-expression."""
    return SExpressionRenderer().render(parse_source(source))


# =============================================================================
# Tree Shape Tests
# =============================================================================

class TestTreeShape:
    """The shape of the tree encodes precedence and associativity."""

    def test_root_is_program_with_one_child(self):
        root = parse_source("1")
        assert root.kind == NodeKind.PROGRAM
        assert len(root) == 1
        assert root[0].kind == NodeKind.LITERAL

    def test_addition_is_left_associative(self):
        assert sexpr("1+2+3") == "(+ (+ 1 2) 3)"

    def test_multiplication_is_left_associative(self):
        assert sexpr("2*3*4") == "(* (* 2 3) 4)"

    def test_power_is_right_associative(self):
        assert sexpr("2^3^2") == "(expt 2 (expt 3 2))"

    def test_long_power_chain_leans_right(self):
        assert sexpr("1^2^3^4") == "(expt 1 (expt 2 (expt 3 4)))"

    def test_multiplication_binds_tighter_than_addition(self):
        assert sexpr("1+2*3") == "(+ 1 (* 2 3))"
        assert sexpr("1*2+3") == "(+ (* 1 2) 3)"

    def test_power_binds_tighter_than_multiplication(self):
        assert sexpr("2*3^2") == "(* 2 (expt 3 2))"
        assert sexpr("2^3*2") == "(* (expt 2 3) 2)"

    def test_parentheses_override_precedence(self):
        assert sexpr("(1+2)*3") == "(* (+ 1 2) 3)"
        assert sexpr("(2^3)^2") == "(expt (expt 2 3) 2)"

    def test_redundant_parentheses_leave_no_trace(self):
        assert sexpr("((((7))))") == "7"

    def test_whitespace_is_irrelevant(self):
        assert sexpr(" 1 +\t2 * 3 ") == sexpr("1+2*3")

    def test_mixed_expression(self):
        assert sexpr("1+2*3^4^5+6") == "(+ (+ 1 (* 2 (expt 3 (expt 4 5)))) 6)"


# =============================================================================
# Anchor Token Tests
# =============================================================================

class TestAnchorTokens:
    """Each node keeps the token that anchors it."""

    def test_literal_anchor(self):
        literal = parse_source("42")[0]
        assert literal.anchor_token.type == TokenType.INT
        assert literal.anchor_token.text == "42"
        assert literal.text == "42"

    def test_operator_anchors(self):
        add = parse_source("1+2*3")[0]
        assert add.kind == NodeKind.ADD
        assert add.anchor_token.type == TokenType.PLUS
        mul = add[1]
        assert mul.kind == NodeKind.MUL
        assert mul.anchor_token.type == TokenType.TIMES
        assert mul.anchor_token.column == 4

    def test_program_has_no_anchor(self):
        assert parse_source("1").anchor_token is None

    def test_chain_anchors_in_source_order(self):
        outer = parse_source("1+2+3")[0]
        assert outer.anchor_token.column == 4
        assert outer[0].anchor_token.column == 2


# =============================================================================
# Syntax Error Tests
# =============================================================================

class TestSyntaxErrors:
    """Malformed input raises on the first bad token, with no partial tree."""

    @pytest.mark.parametrize("source", [
        "",
        "1+",
        "(1+2",
        "*3",
        "1+#2",
        "1 2",
        "()",
        "1+*2",
        "2^",
        "(1))",
        "#",
    ])
    def test_malformed_input(self, source):
        with pytest.raises(ExprSyntaxError):
            parse_source(source)

    def test_syntax_errors_are_expr_errors(self):
        with pytest.raises(ExprError):
            parse_source("1+")

    def test_premature_end(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("1+")
        assert exc_info.value.found == "end of input"
        assert exc_info.value.location.column == 3

    def test_missing_close_paren(self):
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("(1+2")
        assert exc_info.value.expected == "')'"

    def test_trailing_tokens(self):
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("1 2")
        assert exc_info.value.expected == "end of input"
        assert exc_info.value.location.column == 3

    def test_illegal_character_is_rejected(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("1+#2")
        assert "'#'" in exc_info.value.hint

    def test_leading_operator(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("*3")
        assert exc_info.value.location.column == 1

    def test_message_has_location_and_caret(self):
        with pytest.raises(ExprSyntaxError) as exc_info:
            parse_source("1+", "calc.txt")
        lines = str(exc_info.value).splitlines()
        assert lines[0].startswith("calc.txt:1:3: error:")
        assert lines[1] == "    1+"
        assert lines[2] == "      ^"


# =============================================================================
# Token Stream Tests
# =============================================================================

class TestTokenStreams:
    """The parser accepts any iterable of tokens."""

    def test_parse_from_list(self):
        tokens = list(Lexer("2*3").tokenize())
        root = ExprParser(tokens).parse()
        assert root[0].kind == NodeKind.MUL

    def test_parse_from_generator(self):
        root = ExprParser(Lexer("2*3").tokenize()).parse()
        assert root[0].kind == NodeKind.MUL

    def test_stream_without_end_is_treated_as_ended(self):
        tokens = [Token(TokenType.INT, "5")]
        root = ExprParser(tokens).parse()
        assert root[0].text == "5"

    def test_parser_stops_at_first_error(self):
        """Tokens after the failing one are never pulled."""
        pulled = []

        def stream():
            for token in Lexer("1++2+3").tokenize():
                pulled.append(token)
                yield token

        with pytest.raises(ExprSyntaxError):
            ExprParser(stream()).parse()
        assert len(pulled) == 3


# =============================================================================
# Long Input Tests
# =============================================================================

def nested(depth: int) -> str:
    """Helper: "1" wrapped in `depth` pairs of parentheses."""
    return "(" * depth + "1" + ")" * depth


def spine(node, side: int):
    """Helper: follow the left (0) or right (1) children down to a leaf."""
    length = 0
    while node.kind != NodeKind.LITERAL:
        node = node[side]
        length += 1
    return length


class TestLongInput:
    """Operator chains are loops; only parentheses nest Python calls."""

    @pytest.mark.parametrize("operator, kind", [
        ("+", NodeKind.ADD),
        ("*", NodeKind.MUL),
    ])
    def test_long_left_chain(self, operator, kind):
        root = parse_source(operator.join(["1"] * 5000))
        assert root[0].kind == kind
        assert spine(root[0], 0) == 4999
        assert spine(root[0], 1) == 1

    def test_long_power_chain(self):
        root = parse_source("^".join(["1"] * 5000))
        assert root[0].kind == NodeKind.POW
        assert spine(root[0], 1) == 4999
        assert spine(root[0], 0) == 1

    def test_power_chain_anchors_in_source_order(self):
        root = parse_source("2 ^ 3 ^ 4")
        assert root[0].anchor_token.column == 3
        assert root[0][1].anchor_token.column == 7

    def test_nesting_at_limit(self):
        root = parse_source(nested(MAX_NESTING_DEPTH))
        assert root[0].kind == NodeKind.LITERAL

    def test_nesting_past_limit(self):
        with pytest.raises(NestingDepthError) as exc_info:
            parse_source(nested(MAX_NESTING_DEPTH + 1))
        assert exc_info.value.limit == MAX_NESTING_DEPTH
        assert exc_info.value.location.column == MAX_NESTING_DEPTH + 1
        assert isinstance(exc_info.value, ExprError)

    def test_depth_is_per_group(self):
        """Sibling groups do not add up."""
        source = "+".join([nested(MAX_NESTING_DEPTH)] * 3)
        assert sexpr(source) == "(+ (+ 1 1) 1)"

    def test_deep_groups_inside_long_chain(self):
        source = "*".join([nested(50)] * 1000)
        assert spine(parse_source(source)[0], 0) == 999
