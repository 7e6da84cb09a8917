from __future__ import annotations

import pytest
import sympy as sp

from expr_toolkit import BinaryOp, Number, make_unary_function, parse_postfix, to_latex, to_sympy


def test_leaves_convert_to_integers_floats_and_symbols() -> None:
    assert to_sympy(Number(3)) == sp.Integer(3)
    assert to_sympy(Number(2.5)) == sp.Float(2.5)
    assert to_sympy(parse_postfix("x")) == sp.Symbol("x")


def test_evaluated_conversion_matches_handwritten_sympy() -> None:
    a, b = sp.symbols("a b")
    tree = parse_postfix("ab-ab/+a2^*")

    expected = ((a - b) + a / b) * a**2
    assert sp.simplify(to_sympy(tree, evaluate=True) - expected) == 0


def test_functions_map_to_sympy_functions() -> None:
    x = sp.Symbol("x")
    for name, fn in [("sin", sp.sin), ("cos", sp.cos), ("tan", sp.tan), ("ln", sp.log)]:
        tree = make_unary_function(name, parse_postfix("x"))
        assert to_sympy(tree, evaluate=True) == fn(x)


def test_unevaluated_conversion_keeps_repeated_terms() -> None:
    converted = to_sympy(parse_postfix("aa+"))
    assert converted != 2 * sp.Symbol("a")
    assert converted.doit() == 2 * sp.Symbol("a")


def test_empty_tree_cannot_be_converted() -> None:
    with pytest.raises(ValueError):
        to_sympy(None)


def test_latex_rendering() -> None:
    tree = BinaryOp("/", make_unary_function("sin", parse_postfix("a")), parse_postfix("b"))
    rendered = to_latex(tree)
    assert r"\sin" in rendered
    assert "b" in rendered
    assert to_latex(None) == ""
