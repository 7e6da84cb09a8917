"""Algebraic simplification of expression trees.

Purpose
-------
:func:`simplify` rewrites a tree into a reduced, roughly canonical form. It is
a pure transformation: the input tree is never modified and the result shares
no nodes with it.

Rules
-----
Children are simplified before their parent. At each node the rules below are
tried in order; whenever a rule builds a new subtree, that subtree is
simplified again until nothing fires.

1. A function of a number is folded (``ln`` of a non-positive number is kept).
2. An operator between two numbers is folded (division by ~0 and non-finite
   results are kept).
3. Like terms of a ``+`` chain are combined: ``a*4 + a*5 -> a * 9`` and
   ``a + a + a -> a * 3``.
4. Like factors of a ``*`` chain are combined: ``a * a -> a ^ 2`` and
   numeric factors are multiplied into one scalar (``(a * 2) * 3 -> 6 * a``).
5. Identities: ``x+0, 0+x, x-0 -> x``; ``x*0, 0*x -> 0``;
   ``x*1, 1*x, x/1, x^1 -> x``; ``x^0 -> 1``.

Rule 5 only applies when rules 3 and 4 left the node alone.

Examples
--------
>>> from expr_toolkit.parser import parse_postfix
>>> from expr_toolkit.serializer import to_infix
>>> to_infix(simplify(parse_postfix("aa+a+")))
'(a * 3)'
>>> to_infix(simplify(parse_postfix("aa*")))
'(a ^ 2)'
>>> to_infix(simplify(parse_postfix("a2*3*")))
'(6 * a)'
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from .errors import EvaluationError
from .evaluator import apply_binary, apply_unary
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
    structurally_equal,
)
from .serializer import to_infix

__all__ = ["simplify"]


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def simplify(node: Node) -> Node:
    """Return an algebraically reduced copy of ``node``.

    The result evaluates to the same value as ``node`` wherever both
    evaluations succeed, and simplifying it again changes nothing.
    """
    result = _simplify(node)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Simplified %s -> %s", to_infix(node), to_infix(result))
    return result


def _simplify(node: Node) -> Node:
    return fold_tree(node, _reduce)


def _reduce(node: Node, children: tuple[Node, ...]) -> Node:
    if isinstance(node, Number):
        return Number(node.value)
    if isinstance(node, Variable):
        return Variable(node.name)
    if isinstance(node, UnaryFunction):
        return _reduce_function(UnaryFunction(node.code, *children))
    return _reduce_operator(BinaryOp(node.op, *children))


def _is_close(value: float, target: float) -> bool:
    return abs(value - target) < EPSILON


def _fold(compute, *args: float) -> Optional[Number]:
    """Evaluate a constant subexpression, or ``None`` if it must stay unfolded."""
    try:
        value = compute(*args)
    except EvaluationError:
        return None
    if not math.isfinite(value):
        return None
    return Number(value)


def _reduce_function(node: UnaryFunction) -> Node:
    if is_number(node.operand):
        folded = _fold(apply_unary, node.code, node.operand.value)
        if folded is not None:
            return folded
    return node


def _reduce_operator(node: BinaryOp) -> Node:
    left, right = node.left, node.right
    left_num = left.value if is_number(left) else None
    right_num = right.value if is_number(right) else None

    if left_num is not None and right_num is not None:
        folded = _fold(apply_binary, node.op, left_num, right_num)
        if folded is not None:
            return folded

    if node.op == "+":
        combined = _combine_terms(node)
        if combined is not None:
            return _simplify(combined)
    elif node.op == "*":
        combined = _combine_factors(node)
        if combined is not None:
            return _simplify(combined)

    return _apply_identities(node, left_num, right_num)


def _apply_identities(
    node: BinaryOp, left_num: Optional[float], right_num: Optional[float]
) -> Node:
    op = node.op

    def left_is(target: float) -> bool:
        return left_num is not None and _is_close(left_num, target)

    def right_is(target: float) -> bool:
        return right_num is not None and _is_close(right_num, target)

    if op == "+":
        if right_is(0.0):
            return node.left
        if left_is(0.0):
            return node.right
    elif op == "-":
        if right_is(0.0):
            return node.left
    elif op == "*":
        if right_is(0.0) or left_is(0.0):
            return Number(0.0)
        if right_is(1.0):
            return node.left
        if left_is(1.0):
            return node.right
    elif op == "/":
        if right_is(1.0):
            return node.left
    elif op == "^":
        if right_is(0.0):
            return Number(1.0)
        if right_is(1.0):
            return node.left
    return node


# ---------------------------------------------------------------------------
# Like-term combination over ``+`` chains
# ---------------------------------------------------------------------------

def _flatten(node: Node, op: str) -> list[Node]:
    """Operands of the ``op`` chain rooted at ``node``, left to right."""
    out: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, BinaryOp) and current.op == op:
            stack.append(current.right)
            stack.append(current.left)
        else:
            out.append(current)
    return out


def _split_term(term: Node) -> tuple[Optional[Node], float]:
    """Split ``term`` into ``(base, coefficient)``; a bare number has no base."""
    if isinstance(term, BinaryOp) and term.op == "*":
        left_const = is_number(term.left)
        right_const = is_number(term.right)
        if right_const and not left_const:
            return term.left, term.right.value
        if left_const and not right_const:
            return term.right, term.left.value
    if is_number(term):
        return None, term.value
    return term, 1.0


def _same_base(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return structurally_equal(a, b)


def _combine_terms(node: BinaryOp) -> Optional[Node]:
    terms = _flatten(node, "+")
    if len(terms) < 2:
        return None

    groups: list[list] = []  # [base, total coefficient], in first-seen order
    for term in terms:
        base, coefficient = _split_term(term)
        for group in groups:
            if _same_base(group[0], base):
                group[1] += coefficient
                break
        else:
            groups.append([base, coefficient])

    if len(groups) >= len(terms):
        return None

    result: Optional[Node] = None
    for base, coefficient in groups:
        if _is_close(coefficient, 0.0):
            continue
        if base is None:
            term = Number(coefficient)
        elif _is_close(coefficient, 1.0):
            term = clone(base)
        else:
            term = BinaryOp("*", clone(base), Number(coefficient))
        result = term if result is None else BinaryOp("+", result, term)

    return Number(0.0) if result is None else result


# ---------------------------------------------------------------------------
# Like-factor combination over ``*`` chains
# ---------------------------------------------------------------------------

def _combine_factors(node: BinaryOp) -> Optional[Node]:
    factors = _flatten(node, "*")
    if len(factors) < 2:
        return None

    scalar = 1.0
    symbolic: list[Node] = []
    for factor in factors:
        if is_number(factor):
            scalar *= factor.value
        else:
            symbolic.append(factor)

    groups: list[list] = []  # [factor, repetition count]
    for factor in symbolic:
        for group in groups:
            if structurally_equal(group[0], factor):
                group[1] += 1
                break
        else:
            groups.append([factor, 1])

    keeps_scalar = not _is_close(scalar, 1.0)
    merged_numbers = len(factors) > len(symbolic) + (1 if keeps_scalar else 0)
    merged_factors = len(groups) < len(symbolic)
    if not (merged_numbers or merged_factors):
        return None

    if _is_close(scalar, 0.0):
        return Number(0.0)

    result: Optional[Node] = Number(scalar) if keeps_scalar else None
    for factor, count in groups:
        term = clone(factor) if count == 1 else BinaryOp("^", clone(factor), Number(count))
        result = term if result is None else BinaryOp("*", result, term)

    return Number(scalar) if result is None else result
