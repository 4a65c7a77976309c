"""Tests for miniko.evaluator."""

from __future__ import annotations

import math

import pytest

from miniko.evaluator import (
    apply_operator,
    coerce_number,
    evaluate_condition,
    evaluate_number,
    parse_binary,
    parse_number_literal,
    resolve_list,
    resolve_number,
    split_top_level,
)


class TestResolveNumber:
    def test_literals(self):
        assert resolve_number("42", {}) == 42
        assert resolve_number("-3", {}) == -3
        assert resolve_number("2.5", {}) == 2.5

    def test_integral_float_literal_normalized(self):
        value = resolve_number("60.0", {})
        assert value == 60
        assert isinstance(value, int)

    def test_variable_lookup(self):
        assert resolve_number("x", {"x": 7}) == 7

    def test_unknown_token_is_zero(self):
        assert resolve_number("nope", {}) == 0
        assert resolve_number("", {}) == 0
        assert resolve_number("foo(bar)", {"bar": 1}) == 0

    def test_list_variable_coerces_to_zero(self):
        assert resolve_number("xs", {"xs": [1, 2]}) == 0

    def test_length_forms(self):
        variables = {"xs": [1, 2, 3]}
        assert resolve_number("xs.length", variables) == 3
        assert resolve_number("xs.Length", variables) == 3
        assert resolve_number("xs.len()", variables) == 3
        assert resolve_number("xs.Count", variables) == 3
        assert resolve_number("len(xs)", variables) == 3

    def test_length_of_string(self):
        assert resolve_number("len(s)", {"s": "abcd"}) == 4

    def test_index_read(self):
        variables = {"xs": [10, 20, 30], "i": 1}
        assert resolve_number("xs[0]", variables) == 10
        assert resolve_number("xs[i]", variables) == 20
        assert resolve_number("xs[i + 1]", variables) == 30

    def test_index_out_of_range_is_zero(self):
        variables = {"xs": [10, 20]}
        assert resolve_number("xs[5]", variables) == 0
        assert resolve_number("xs[-1]", variables) == 0

    def test_numeric_string_coerces(self):
        assert resolve_number("s", {"s": "12"}) == 12
        assert resolve_number("s", {"s": "hello"}) == 0


class TestParseNumberLiteral:
    def test_rejects_non_numbers(self):
        assert parse_number_literal("abc") is None
        assert parse_number_literal("1 + 2") is None

    def test_exponent(self):
        assert parse_number_literal("1e3") == 1000

    def test_literal_beyond_double_range_is_infinite(self):
        assert parse_number_literal("1e400") == math.inf
        assert parse_number_literal("-" + "9" * 400) == -math.inf


class TestCoerceNumber:
    def test_bool(self):
        assert coerce_number(True) == 1

    def test_other_types_are_zero(self):
        assert coerce_number(None) == 0
        assert coerce_number([1]) == 0


class TestResolveList:
    def test_bracket_literal(self):
        assert resolve_list("[1, 2, x]", {"x": 3}) == [1, 2, 3]

    def test_empty_literal(self):
        assert resolve_list("[]", {}) == []

    def test_not_a_list(self):
        assert resolve_list("x", {}) is None


class TestSplitTopLevel:
    def test_ignores_quoted_separators(self):
        assert split_top_level('"a, b", c', ",") == ['"a, b"', "c"]

    def test_ignores_nested_separators(self):
        assert split_top_level("f(a, b), c", ",") == ["f(a, b)", "c"]

    def test_multi_character_separator(self):
        assert split_top_level('cout << "x" << y', "<<") == ["cout", '"x"', "y"]


class TestApplyOperator:
    @pytest.mark.parametrize("value", [0, 1, -4, 2.5, 1000])
    def test_division_by_zero_returns_left(self, value):
        assert apply_operator(value, 0, "/") == value

    def test_division_result_normalized(self):
        result = apply_operator(10, 2, "/")
        assert result == 5
        assert isinstance(result, int)

    def test_fractional_division(self):
        assert apply_operator(7, 2, "/") == 3.5

    def test_product_beyond_double_range_saturates(self):
        huge = 10**300
        assert apply_operator(huge, huge, "*") == math.inf
        assert apply_operator(-huge, huge, "*") == -math.inf

    def test_overflowing_division_saturates(self):
        assert apply_operator(10**400, 3, "/") == math.inf
        assert apply_operator(-(10**400), 3, "/") == -math.inf

    def test_infinity_propagates(self):
        assert apply_operator(math.inf, 3, "/") == math.inf
        assert math.isnan(apply_operator(math.inf, math.inf, "-"))


class TestParseBinary:
    def test_simple_addition(self):
        result = parse_binary("a + 2", {"a": 3})
        assert result is not None
        assert (result.left, result.operator, result.right, result.result) == (3, "+", 2, 5)

    def test_first_operator_only(self):
        result = parse_binary("1 + 2 * 3", {})
        assert result.operator == "+"
        assert result.right == 0

    def test_negative_literal_not_split(self):
        assert parse_binary("-5", {}) is None

    def test_leading_sign_is_unary(self):
        result = parse_binary("-5 + 2", {})
        assert result.left == -5
        assert result.result == -3

    def test_sign_after_operator_is_unary(self):
        result = parse_binary("4 * -2", {})
        assert result.operator == "*"
        assert result.result == -8

    def test_operator_inside_brackets_ignored(self):
        result = parse_binary("xs[i + 1] + 1", {"xs": [5, 6], "i": 0})
        assert result.left == 6
        assert result.result == 7

    def test_plain_token_is_none(self):
        assert parse_binary("x", {"x": 1}) is None


class TestEvaluateNumber:
    def test_binary(self):
        assert evaluate_number("x * 2", {"x": 4}) == 8

    def test_parenthesized(self):
        assert evaluate_number("(x)", {"x": 4}) == 4


class TestEvaluateCondition:
    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("x > 3", True),
            ("x < 3", False),
            ("x >= 5", True),
            ("x <= 4", False),
            ("x == 5", True),
            ("x != 5", False),
            ("(x > 3)", True),
            ("x + 1 == 6", True),
        ],
    )
    def test_comparisons(self, condition, expected):
        assert evaluate_condition(condition, {"x": 5}) is expected

    def test_unmatched_syntax_is_false(self):
        assert evaluate_condition("x", {"x": 5}) is False

    def test_boolean_literals(self):
        assert evaluate_condition("True", {}) is True
        assert evaluate_condition("false", {}) is False
