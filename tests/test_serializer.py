from __future__ import annotations

import pytest

from expr_toolkit import (
    BinaryOp,
    Number,
    Variable,
    make_unary_function,
    parse_postfix,
    to_infix,
    to_postfix,
)
from expr_toolkit.serializer import format_number


@pytest.mark.parametrize("text", ["a", "7", "ab+", "23+5*", "ab^c/d-", "xy*z+"])
def test_postfix_of_parsed_digit_trees_reproduces_the_input(text: str) -> None:
    assert to_postfix(parse_postfix(text)) == text


def test_postfix_strips_whitespace() -> None:
    assert to_postfix(parse_postfix("a 2 ^")) == "a2^"


def test_postfix_brackets_numbers_outside_single_digits() -> None:
    tree = BinaryOp("+", Number(12), BinaryOp("*", Number(2.5), Number(-1)))
    assert to_postfix(tree) == "[12][2.5][-1]*+"


def test_postfix_emits_function_names_after_their_operand() -> None:
    tree = make_unary_function("sin", BinaryOp("+", Variable("a"), Number(1)))
    assert to_postfix(tree) == "a1+sin"


def test_infix_wraps_every_operation() -> None:
    assert to_infix(parse_postfix("abc*+")) == "(a + (b * c))"
    assert to_infix(parse_postfix("ab+c*")) == "((a + b) * c)"


def test_infix_prints_functions_with_call_syntax() -> None:
    tree = make_unary_function("l", make_unary_function("cos", Variable("x")))
    assert to_infix(tree) == "ln(cos(x))"


def test_empty_tree_renders_as_empty_strings() -> None:
    assert to_postfix(None) == ""
    assert to_infix(None) == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3.0, "3"), (-2.0, "-2"), (0.5, "0.5"), (1 / 3, "0.333333"), (1e20, "1e+20")],
)
def test_format_number_is_compact(value: float, expected: str) -> None:
    assert format_number(value) == expected
