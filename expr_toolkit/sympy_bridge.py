"""Conversion of expression trees to SymPy.

Hosts use this bridge for pretty display (LaTeX) and for checking engine
results against SymPy (for example comparing :func:`expr_toolkit.derivative`
with :func:`sympy.diff`). The engine itself never depends on SymPy for its
own computations.
"""

from __future__ import annotations

from typing import Optional

import sympy as sp

from .nodes import BinaryOp, Node, Number, UnaryFunction, Variable, fold_tree

__all__ = ["to_sympy", "to_latex"]


_SYMPY_FUNCTIONS = {"s": sp.sin, "c": sp.cos, "t": sp.tan, "l": sp.log}


def _number(value: float) -> sp.Expr:
    if value.is_integer():
        return sp.Integer(int(value))
    return sp.Float(value)


def to_sympy(node: Optional[Node], *, evaluate: bool = False) -> sp.Expr:
    """Convert ``node`` to a SymPy expression.

    Parameters
    ----------
    node : Node
        Tree to convert.
    evaluate : bool, optional
        If ``False`` (default) SymPy's automatic simplification is suppressed
        so the result mirrors the tree's structure. Pass ``True`` for an
        expression suitable for symbolic comparison.

    Raises
    ------
    ValueError
        If ``node`` is ``None``.

    Examples
    --------
    >>> from expr_toolkit.parser import parse_postfix
    >>> to_sympy(parse_postfix("ab+a+"), evaluate=True)
    2*a + b
    """
    if node is None:
        raise ValueError("Cannot convert an empty expression to SymPy.")

    def visit(current: Node, args: tuple[sp.Expr, ...]) -> sp.Expr:
        if isinstance(current, Number):
            return _number(current.value)
        if isinstance(current, Variable):
            return sp.Symbol(current.name)
        if isinstance(current, UnaryFunction):
            return _SYMPY_FUNCTIONS[current.code](args[0], evaluate=evaluate)
        assert isinstance(current, BinaryOp)
        left, right = args
        if current.op == "+":
            return sp.Add(left, right, evaluate=evaluate)
        if current.op == "-":
            return sp.Add(left, sp.Mul(sp.Integer(-1), right, evaluate=evaluate), evaluate=evaluate)
        if current.op == "*":
            return sp.Mul(left, right, evaluate=evaluate)
        if current.op == "/":
            return sp.Mul(left, sp.Pow(right, -1, evaluate=evaluate), evaluate=evaluate)
        return sp.Pow(left, right, evaluate=evaluate)

    return fold_tree(node, visit)


def to_latex(node: Optional[Node]) -> str:
    """Render ``node`` as LaTeX, keeping its structure (``""`` for an empty tree)."""
    if node is None:
        return ""
    return sp.latex(to_sympy(node))
