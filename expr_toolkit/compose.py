"""Tree composition, variable substitution and subtree wrapping.

All helpers return new trees built from deep copies; none of them modifies
its inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Optional

from .errors import EmptyOperandError, InvalidOperatorError
from .nodes import (
    OPERATORS,
    BinaryOp,
    Node,
    Number,
    UnaryFunction,
    Variable,
    clone,
    find_parent,
    fold_tree,
    function_code_from_name,
    rebuild_node,
)

if TYPE_CHECKING:
    from .ExprTree import ExprTree

__all__ = ["compose", "substitute", "wrap_in_function"]


def compose(first: "ExprTree", second: "ExprTree", operator: str) -> "ExprTree":
    """Combine two trees as ``(first) operator (second)``.

    The new tree owns deep copies of both roots. Its postfix text is the
    concatenation of the operands' postfix text followed by ``operator``.

    Raises
    ------
    InvalidOperatorError
        If ``operator`` is not one of ``+ - * / ^``.
    EmptyOperandError
        If either tree is empty.

    Examples
    --------
    >>> from expr_toolkit import ExprTree
    >>> compose(ExprTree.from_postfix("ab+"), ExprTree.from_postfix("c"), "*").infix
    '((a + b) * c)'
    """
    from .ExprTree import ExprTree

    if not (isinstance(operator, str) and len(operator) == 1 and operator in OPERATORS):
        raise InvalidOperatorError(operator)
    if first.root is None or second.root is None:
        raise EmptyOperandError("Both trees must be non-empty to compose them.")

    root = BinaryOp(operator, clone(first.root), clone(second.root))
    return ExprTree._from_parts(root, postfix=first.postfix + second.postfix + operator)


def substitute(node: Optional[Node], bindings: Mapping[str, float]) -> Optional[Node]:
    """Replace every bound variable with a number holding its value.

    Unbound variables and all other nodes are copied unchanged.

    >>> from expr_toolkit.parser import parse_postfix
    >>> from expr_toolkit.serializer import to_infix
    >>> to_infix(substitute(parse_postfix("ab*"), {"a": 2.5}))
    '(2.5 * b)'
    """
    if node is None:
        return None

    def visit(current: Node, children: tuple[Node, ...]) -> Node:
        if isinstance(current, Variable) and current.name in bindings:
            return Number(bindings[current.name])
        return rebuild_node(current, children)

    return fold_tree(node, visit)


def wrap_in_function(root: Node, target: Node, function: str) -> Node:
    """Return a copy of ``root`` with the subtree ``target`` wrapped as ``function(target)``.

    Parameters
    ----------
    root : Node
        Tree to copy.
    target : Node
        Node of ``root`` to wrap, matched by identity (for example a node
        picked with :func:`expr_toolkit.layout.hit_test`).
    function : str
        ``sin``, ``cos``, ``tan`` or ``ln`` (or the matching one-letter code).

    Raises
    ------
    LookupError
        If ``target`` is not a node of ``root``.
    ValueError
        If ``function`` is unknown.
    """
    code = function_code_from_name(function)
    if target is not root and find_parent(root, target) is None:
        raise LookupError("The node to wrap is not part of this tree.")

    def visit(current: Node, children: tuple[Node, ...]) -> Node:
        copy = rebuild_node(current, children)
        return UnaryFunction(code, copy) if current is target else copy

    return fold_tree(root, visit)
