"""Symbolic partial derivatives.

:func:`derivative` folds the tree bottom-up and assembles the derivative from the
usual rules (sum, product, quotient, power, chain rule for ``sin cos tan ln``).
The result is a brand-new tree: every subtree of the input that appears in the
result is deep-copied, so the two trees never share nodes.

No simplification happens here; ``d/da (a ^ 2)`` comes back as
``((2 * (a ^ 1)) * 1)``. Pass the result through
:func:`expr_toolkit.simplify.simplify` for a reduced form.
"""

from __future__ import annotations

import logging

from .errors import UnsupportedDerivativeError
from .nodes import (
    EPSILON,
    BinaryOp,
    Node,
    Number,
    UnaryFunction,
    Variable,
    clone,
    fold_tree,
    is_number,
    make_binary_op as op,
    make_number as num,
    make_unary_function as fn,
    check_variable_name,
)

__all__ = ["derivative"]


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def derivative(node: Node, variable: str) -> Node:
    """Return ``d(node)/d(variable)`` as a new tree.

    Parameters
    ----------
    node : Node
        Expression to differentiate.
    variable : str
        One-letter variable name; every other variable is held constant.

    Raises
    ------
    UnsupportedDerivativeError
        If the tree contains a node shape with no differentiation rule.
    ValueError
        If ``variable`` is not a single lowercase letter.

    Examples
    --------
    >>> from expr_toolkit.parser import parse_postfix
    >>> from expr_toolkit.serializer import to_infix
    >>> to_infix(derivative(parse_postfix("ab*"), "a"))
    '((1 * b) + (a * 0))'
    """
    check_variable_name(variable)
    logger.debug("Differentiating with respect to %r", variable)

    def visit(current: Node, derived: tuple[Node, ...]) -> Node:
        if isinstance(current, Number):
            return num(0)
        if isinstance(current, Variable):
            return num(1 if current.name == variable else 0)
        if isinstance(current, UnaryFunction):
            return _derive_function(current, *derived)
        if isinstance(current, BinaryOp):
            return _derive_operator(current, *derived)
        raise UnsupportedDerivativeError(f"No differentiation rule for {type(current).__name__}.")

    return fold_tree(node, visit)


def _derive_function(node: UnaryFunction, du: Node) -> Node:
    u = node.operand
    if node.code == "s":
        return op("*", fn("cos", clone(u)), du)
    if node.code == "c":
        return op("*", op("*", num(-1), fn("sin", clone(u))), du)
    if node.code == "t":
        sec2 = op("/", num(1), op("^", fn("cos", clone(u)), num(2)))
        return op("*", sec2, du)
    if node.code == "l":
        return op("/", du, clone(u))
    raise UnsupportedDerivativeError(f"No differentiation rule for function {node.code!r}.")


def _derive_operator(node: BinaryOp, du: Node, dv: Node) -> Node:
    u, v = node.left, node.right

    if node.op in "+-":
        return op(node.op, du, dv)

    if node.op == "*":
        return op("+", op("*", du, clone(v)), op("*", clone(u), dv))

    if node.op == "/":
        numerator = op("-", op("*", du, clone(v)), op("*", clone(u), dv))
        return op("/", numerator, op("^", clone(v), num(2)))

    if node.op == "^":
        if is_number(v):
            n = v.value
            if abs(n) < EPSILON:
                return num(0)
            if abs(n - 1.0) < EPSILON:
                return du
            power = op("^", clone(u), num(n - 1.0))
            return op("*", op("*", num(n), power), du)
        # General case: u^v * (v' * ln(u) + v * (u' / u))
        inside = op(
            "+",
            op("*", dv, fn("ln", clone(u))),
            op("*", clone(v), op("/", du, clone(u))),
        )
        return op("*", op("^", clone(u), clone(v)), inside)

    raise UnsupportedDerivativeError(f"No differentiation rule for operator {node.op!r}.")
