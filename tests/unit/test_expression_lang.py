"""Tests for the template expression language.

Covers:
- Tokenizer: token kinds, strings, numbers, error positions
- Parser: precedence, member access, calls, error handling
- Evaluator: JavaScript value semantics, containment of failures
"""

from __future__ import annotations

import math

import pytest

from sectionkit.core.expression_lang import (
    ExpressionEvalError,
    ExpressionParseError,
    ExpressionTokenError,
    evaluate,
    evaluate_source,
    evaluate_truthy,
    parse_expr,
)
from sectionkit.core.expression_lang.tokenizer import TokenKind, tokenize
from sectionkit.core.ir.expressions import (
    BinaryExpr,
    BinaryOp,
    ConditionalExpr,
    FieldRef,
    FuncCall,
    Literal,
    MemberExpr,
    UnaryExpr,
    UnaryOp,
    UndefinedLiteral,
)
from sectionkit.core.jsvalues import UNDEFINED

# ============================================================================
# Tokenizer tests
# ============================================================================


class TestTokenizer:
    """Tokenizer produces correct token sequences."""

    def test_integer(self) -> None:
        tokens = tokenize("42")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == "42"

    def test_decimal_with_leading_dot(self) -> None:
        tokens = tokenize(".5")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == ".5"

    def test_string_single_quotes(self) -> None:
        tokens = tokenize("'image'")
        assert tokens[0].kind == TokenKind.STRING
        assert tokens[0].value == "image"

    def test_string_escape(self) -> None:
        tokens = tokenize('"he\\"llo"')
        assert tokens[0].value == 'he"llo'

    def test_keywords(self) -> None:
        kinds = [t.kind for t in tokenize("true false null undefined")]
        assert kinds == [
            TokenKind.TRUE,
            TokenKind.FALSE,
            TokenKind.NULL,
            TokenKind.UNDEFINED,
            TokenKind.EOF,
        ]

    def test_strict_operators_win_over_loose(self) -> None:
        kinds = [t.kind for t in tokenize("a === b !== c == d")]
        assert kinds[1] == TokenKind.STRICT_EQ
        assert kinds[3] == TokenKind.STRICT_NE
        assert kinds[5] == TokenKind.EQ

    def test_identifier_with_dollar(self) -> None:
        tokens = tokenize("$el")
        assert tokens[0].kind == TokenKind.IDENT
        assert tokens[0].value == "$el"

    def test_unterminated_string(self) -> None:
        with pytest.raises(ExpressionTokenError):
            tokenize("'open")

    def test_unexpected_character_position(self) -> None:
        with pytest.raises(ExpressionTokenError) as exc_info:
            tokenize("a # b")
        assert exc_info.value.pos == 2

    def test_non_ascii_digit_is_rejected(self) -> None:
        with pytest.raises(ExpressionTokenError):
            tokenize("٣")


# ============================================================================
# Parser tests
# ============================================================================


class TestParser:
    """Parser builds the expected AST."""

    def test_dotted_path_is_field_ref(self) -> None:
        expr = parse_expr("bg.value")
        assert expr == FieldRef(path=["bg", "value"])

    def test_bracket_access(self) -> None:
        expr = parse_expr("items[0]")
        assert isinstance(expr, MemberExpr)
        assert expr.target == FieldRef(path=["items"])
        assert expr.key == Literal(value=0)

    def test_member_after_call(self) -> None:
        expr = parse_expr("max(a, b).length")
        assert isinstance(expr, MemberExpr)
        assert isinstance(expr.target, FuncCall)

    def test_multiplication_binds_tighter(self) -> None:
        expr = parse_expr("1 + 2 * 3")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == BinaryOp.ADD
        assert isinstance(expr.right, BinaryExpr)
        assert expr.right.op == BinaryOp.MUL

    def test_and_binds_tighter_than_or(self) -> None:
        expr = parse_expr("a || b && c")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == BinaryOp.OR
        assert isinstance(expr.right, BinaryExpr)
        assert expr.right.op == BinaryOp.AND

    def test_equality_below_relational(self) -> None:
        expr = parse_expr("a < b == true")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == BinaryOp.EQ

    def test_ternary(self) -> None:
        expr = parse_expr("show ? 'yes' : 'no'")
        assert isinstance(expr, ConditionalExpr)
        assert expr.consequent == Literal(value="yes")

    def test_unary_not(self) -> None:
        expr = parse_expr("!fullScreen")
        assert expr == UnaryExpr(op=UnaryOp.NOT, operand=FieldRef(path=["fullScreen"]))

    def test_undefined_literal(self) -> None:
        assert parse_expr("undefined") == UndefinedLiteral()

    def test_function_call_args(self) -> None:
        expr = parse_expr("min(1, x)")
        assert isinstance(expr, FuncCall)
        assert expr.name == "min"
        assert len(expr.args) == 2

    def test_trailing_tokens_rejected(self) -> None:
        with pytest.raises(ExpressionParseError):
            parse_expr("a b")

    def test_missing_close_paren(self) -> None:
        with pytest.raises(ExpressionParseError):
            parse_expr("(a + b")

    def test_token_error_surfaces_as_parse_error(self) -> None:
        with pytest.raises(ExpressionParseError):
            parse_expr("a @ b")


# ============================================================================
# Evaluator tests
# ============================================================================


def _eval(source: str, **ns: object) -> object:
    return evaluate(parse_expr(source), ns)


class TestEvaluator:
    """Evaluation follows JavaScript semantics."""

    def test_nested_lookup(self) -> None:
        assert _eval("bg.value", bg={"value": "#fff"}) == "#fff"

    def test_missing_identifier_is_undefined(self) -> None:
        assert _eval("missing") is UNDEFINED

    def test_missing_member_is_undefined(self) -> None:
        assert _eval("bg.nope", bg={}) is UNDEFINED

    def test_member_of_undefined_raises(self) -> None:
        with pytest.raises(ExpressionEvalError):
            _eval("missing.value")

    def test_string_concatenation(self) -> None:
        assert _eval("paddingTop + 'rem'", paddingTop=6) == "6rem"

    def test_numeric_string_arithmetic(self) -> None:
        assert _eval("'6' * 2") == 12

    def test_float_division(self) -> None:
        assert _eval("7 / 2") == 3.5

    def test_modulo_keeps_dividend_sign(self) -> None:
        assert _eval("-7 % 3") == -1

    def test_modulo_of_infinity_is_nan(self) -> None:
        assert math.isnan(_eval("x % 2", x="Infinity"))

    def test_modulo_by_infinity_keeps_dividend(self) -> None:
        assert _eval("5 % x", x="-Infinity") == 5

    def test_division_by_zero_raises(self) -> None:
        with pytest.raises(ExpressionEvalError):
            _eval("1 / 0")

    def test_loose_equality_coerces(self) -> None:
        assert _eval("'1' == 1") is True
        assert _eval("null == undefined") is True

    def test_strict_equality_does_not_coerce(self) -> None:
        assert _eval("'1' === 1") is False
        assert _eval("null === undefined") is False

    def test_or_returns_deciding_operand(self) -> None:
        assert _eval("title || 'Untitled'", title="") == "Untitled"

    def test_and_short_circuits(self) -> None:
        assert _eval("missing && missing.value") is UNDEFINED

    def test_length(self) -> None:
        assert _eval("items.length", items=["a", "b"]) == 2
        assert _eval("name.length", name="abc") == 3

    def test_relational_on_strings(self) -> None:
        assert _eval("'a' < 'b'") is True

    def test_relational_with_nan_is_false(self) -> None:
        assert _eval("'abc' < 1") is False

    def test_ternary(self) -> None:
        assert _eval("big ? 'display-1' : 'display-5'", big=False) == "display-5"

    def test_round_half_up(self) -> None:
        assert _eval("round(2.5)") == 3
        assert _eval("round(-2.5)") == -2

    def test_min_max(self) -> None:
        assert _eval("max(1, '3', 2)") == 3
        assert _eval("min()") == math.inf

    def test_unknown_function_raises(self) -> None:
        with pytest.raises(ExpressionEvalError):
            _eval("eval('1')")


class TestSafeEvaluation:
    """The directive entry points never raise."""

    def test_syntax_error_is_undefined(self) -> None:
        assert evaluate_source("a +", {}) is UNDEFINED

    def test_eval_error_is_undefined(self) -> None:
        assert evaluate_source("missing.deep.value", {}) is UNDEFINED

    def test_source_is_stripped(self) -> None:
        assert evaluate_source("  title  ", {"title": "Hi"}) == "Hi"

    def test_truthy_of_error_is_false(self) -> None:
        assert evaluate_truthy("1 / 0", {}) is False

    def test_truthy_string_zero(self) -> None:
        assert evaluate_truthy("flag", {"flag": "0"}) is True

    def test_truthy_empty_object(self) -> None:
        assert evaluate_truthy("bg", {"bg": {}}) is True

    def test_overflowing_parameter_in_modulo(self) -> None:
        assert math.isnan(evaluate_source("x % 2", {"x": "1e999"}))

    def test_numeric_text_follows_javascript(self) -> None:
        assert math.isnan(evaluate_source("x * 1", {"x": "inf"}))
        assert math.isnan(evaluate_source("x * 1", {"x": "1_000"}))
