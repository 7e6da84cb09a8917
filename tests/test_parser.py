from __future__ import annotations

import gc
import weakref
from importlib import import_module

import pytest

from expr_toolkit import (
    BinaryOp,
    ExpressionTooDeepError,
    IllegalCharacterError,
    InsufficientOperandsError,
    MalformedExpressionError,
    Number,
    ParseError,
    Variable,
    parse_postfix,
    to_infix,
)

parser_module = import_module("expr_toolkit.parser")


def test_parse_builds_left_and_right_operands_in_stack_order() -> None:
    root = parse_postfix("ab-")

    assert isinstance(root, BinaryOp)
    assert root.op == "-"
    assert isinstance(root.left, Variable) and root.left.name == "a"
    assert isinstance(root.right, Variable) and root.right.name == "b"


def test_parse_nested_expression_renders_expected_infix() -> None:
    assert to_infix(parse_postfix("23+5*")) == "((2 + 3) * 5)"
    assert to_infix(parse_postfix("ab+cd-/")) == "((a + b) / (c - d))"


def test_single_digit_and_single_variable_are_valid_trees() -> None:
    digit = parse_postfix("7")
    var = parse_postfix("x")

    assert isinstance(digit, Number) and digit.value == 7.0
    assert isinstance(var, Variable) and var.name == "x"


def test_whitespace_is_ignored_everywhere() -> None:
    assert to_infix(parse_postfix(" a\tb\r\n+ ")) == "(a + b)"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_is_malformed(text: str) -> None:
    with pytest.raises(MalformedExpressionError) as info:
        parse_postfix(text)
    assert info.value.remaining == 0
    assert info.value.kind == "MalformedExpression"


def test_leftover_operands_are_malformed() -> None:
    with pytest.raises(MalformedExpressionError) as info:
        parse_postfix("ab")
    assert info.value.remaining == 2


def test_operator_without_enough_operands_reports_position() -> None:
    with pytest.raises(InsufficientOperandsError) as info:
        parse_postfix("a+")
    assert info.value.position == 1
    assert info.value.operator == "+"
    assert info.value.available == 1


def test_leading_operator_has_no_operands() -> None:
    with pytest.raises(InsufficientOperandsError) as info:
        parse_postfix("*ab")
    assert info.value.available == 0


@pytest.mark.parametrize(
    ("text", "char", "position"),
    [("aB+", "B", 1), ("a b %", "%", 4), ("1.5", ".", 1)],
)
def test_illegal_characters_are_rejected(text: str, char: str, position: int) -> None:
    with pytest.raises(IllegalCharacterError) as info:
        parse_postfix(text)
    assert info.value.char == char
    assert info.value.position == position


def test_bracketed_number_escape_is_not_parsed() -> None:
    with pytest.raises(IllegalCharacterError) as info:
        parse_postfix("[2.5]a*")
    assert info.value.char == "["


def test_parse_errors_share_a_base_class_and_are_value_errors() -> None:
    with pytest.raises(ParseError):
        parse_postfix("+")
    with pytest.raises(ValueError):
        parse_postfix("?")


def test_depth_guard_rejects_deep_chains() -> None:
    text = "a" + "a+" * 10

    assert to_infix(parse_postfix(text, max_depth=11)).count("+") == 10
    with pytest.raises(ExpressionTooDeepError) as info:
        parse_postfix(text, max_depth=5)
    assert info.value.max_depth == 5
    assert info.value.depth == 6


def test_depth_guard_can_be_disabled() -> None:
    text = "a" + "a+" * 600

    with pytest.raises(ExpressionTooDeepError):
        parse_postfix(text)
    root = parse_postfix(text, max_depth=None)
    assert isinstance(root, BinaryOp)


def _parse_and_drop_error(text: str) -> None:
    try:
        parse_postfix(text)
    except ParseError:
        pass


@pytest.mark.parametrize("text", ["ab+c", "abc+*+-", "ab+!", "ab+c*" + "a" * 3])
def test_failed_parse_keeps_no_partial_nodes_alive(monkeypatch, text: str) -> None:
    refs: list[weakref.ref] = []

    def _tracking(factory):
        def _make(*args):
            node = factory(*args)
            refs.append(weakref.ref(node))
            return node

        return _make

    monkeypatch.setattr(parser_module, "make_number", _tracking(parser_module.make_number))
    monkeypatch.setattr(parser_module, "make_variable", _tracking(parser_module.make_variable))
    monkeypatch.setattr(parser_module, "make_binary_op", _tracking(parser_module.make_binary_op))

    _parse_and_drop_error(text)
    gc.collect()

    assert refs
    assert all(ref() is None for ref in refs)


def test_lone_operator_fails_before_building_any_node(monkeypatch) -> None:
    built: list[str] = []

    def _recording(name, factory):
        def _make(*args):
            built.append(name)
            return factory(*args)

        return _make

    for name in ("make_number", "make_variable", "make_binary_op"):
        monkeypatch.setattr(parser_module, name, _recording(name, getattr(parser_module, name)))

    with pytest.raises(InsufficientOperandsError) as info:
        parse_postfix("+")

    assert info.value.available == 0
    assert built == []
