"""Text renderings of expression trees.

Two formats are produced:

- **postfix** -- the parser's own grammar. Integral numbers in ``0..9`` print
  as one digit; every other number prints as ``[<decimal>]``. The parser does
  not read that escape back, so postfix text only round-trips for trees whose
  numbers are single digits.
- **infix** -- every binary operation wrapped as ``(L op R)`` and functions as
  ``name(arg)``. Intended for display; no precedence-based parenthesis elision.
"""

from __future__ import annotations

from typing import Optional

from .nodes import Node, Number, UnaryFunction, Variable, fold_tree

__all__ = ["format_number", "to_postfix", "to_infix"]


def format_number(value: float) -> str:
    """Format ``value`` compactly (six significant digits, no trailing ``.0``).

    >>> format_number(3.0), format_number(0.5), format_number(1 / 3)
    ('3', '0.5', '0.333333')
    """
    return format(value, "g")


def _postfix_number(value: float) -> str:
    if value.is_integer() and 0 <= value <= 9:
        return str(int(value))
    return f"[{format_number(value)}]"


def _postfix_token(node: Node, parts: tuple[str, ...]) -> str:
    if isinstance(node, Number):
        return _postfix_number(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, UnaryFunction):
        return parts[0] + node.name
    return parts[0] + parts[1] + node.op


def to_postfix(node: Optional[Node]) -> str:
    """Render ``node`` in postfix order; ``None`` renders as ``""``.

    >>> from expr_toolkit.parser import parse_postfix
    >>> to_postfix(parse_postfix("a b + 2 ^"))
    'ab+2^'
    """
    if node is None:
        return ""
    return fold_tree(node, _postfix_token)


def _infix_token(node: Node, parts: tuple[str, ...]) -> str:
    if isinstance(node, Number):
        return format_number(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, UnaryFunction):
        return f"{node.name}({parts[0]})"
    return f"({parts[0]} {node.op} {parts[1]})"


def to_infix(node: Optional[Node]) -> str:
    """Render ``node`` as fully parenthesized infix; ``None`` renders as ``""``."""
    if node is None:
        return ""
    return fold_tree(node, _infix_token)
