"""Postfix (RPN) parser.

Grammar, one character at a time and ignoring whitespace:

- ``0``-``9`` push a :class:`~expr_toolkit.nodes.Number`;
- ``a``-``z`` push a :class:`~expr_toolkit.nodes.Variable`;
- ``+ - * / ^`` pop the right operand (top of stack), then the left one, and
  push the resulting :class:`~expr_toolkit.nodes.BinaryOp`;
- anything else is illegal.

Numbers are single digits only. The bracketed ``[<decimal>]`` form produced by
:func:`expr_toolkit.serializer.to_postfix` is deliberately not accepted.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import (
    ExpressionTooDeepError,
    IllegalCharacterError,
    InsufficientOperandsError,
    MalformedExpressionError,
)
from .nodes import OPERATORS, Node, make_binary_op, make_number, make_variable

__all__ = ["MAX_PARSE_DEPTH", "WHITESPACE", "parse_postfix"]


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


MAX_PARSE_DEPTH = 500
WHITESPACE = " \t\r\n"


def parse_postfix(text: str, *, max_depth: Optional[int] = MAX_PARSE_DEPTH) -> Node:
    """Build an expression tree from a postfix token string.

    Parameters
    ----------
    text : str
        Postfix source, e.g. ``"23+5*"`` for ``(2 + 3) * 5``.
    max_depth : int or None, optional
        Largest tree depth accepted, as a bound on input size. Tree passes
        walk explicit stacks, so the limit is not tied to the interpreter's
        recursion limit. ``None`` disables the check.

    Returns
    -------
    Node
        Root of the parsed tree.

    Raises
    ------
    IllegalCharacterError
        If ``text`` contains a character outside the grammar.
    InsufficientOperandsError
        If an operator is read while fewer than two operands are stacked.
    MalformedExpressionError
        If the input does not reduce to exactly one tree (empty input included).
    ExpressionTooDeepError
        If a node would be deeper than ``max_depth``.

    Examples
    --------
    >>> from expr_toolkit.serializer import to_infix
    >>> to_infix(parse_postfix("ab+c*"))
    '((a + b) * c)'
    """
    # Each entry is (node, depth of that subtree).
    stack: list[tuple[Node, int]] = []
    try:
        for position, char in enumerate(text):
            if char in WHITESPACE:
                continue
            if "0" <= char <= "9":
                stack.append((make_number(ord(char) - ord("0")), 1))
            elif "a" <= char <= "z":
                stack.append((make_variable(char), 1))
            elif char in OPERATORS:
                if len(stack) < 2:
                    raise InsufficientOperandsError(char, position, len(stack))
                right, right_depth = stack.pop()
                left, left_depth = stack.pop()
                depth = 1 + max(left_depth, right_depth)
                if max_depth is not None and depth > max_depth:
                    raise ExpressionTooDeepError(depth, max_depth, position)
                stack.append((make_binary_op(char, left, right), depth))
            else:
                raise IllegalCharacterError(char, position)

        if len(stack) != 1:
            raise MalformedExpressionError(len(stack))
    except Exception as exc:
        # Drop every partially built subtree before the error leaves the parser.
        stack.clear()
        logger.debug("Postfix parse failed for %r: %s", text, exc)
        raise

    root, depth = stack.pop()
    logger.debug("Parsed %r into a tree of depth %d", text, depth)
    return root
