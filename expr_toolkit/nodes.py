"""Expression-tree node model.

Purpose
-------
This module defines the four node variants every other engine module operates
on, together with tree-wide helpers (deep copy, traversal, structural
comparison). Nodes are immutable and compare by identity, so a node object can
key a layout map and two trees never accidentally share a subtree through
value equality.

Node variants
-------------
- :class:`Number` -- numeric leaf.
- :class:`Variable` -- single lowercase letter leaf.
- :class:`BinaryOp` -- ``+ - * / ^`` with a left and a right child.
- :class:`UnaryFunction` -- ``sin cos tan ln`` stored as a one-letter code.

Ownership
---------
Every transformation in the package builds a fresh tree and deep-copies any
subtree it reuses, so the result never shares node objects with its input.
Python reclaims dropped trees; :func:`release` exists for hosts that want an
explicit hand-off point and a node count.

Traversal
---------
Trees can be arbitrarily deep (a derivative is several times deeper than its
input, and compositions stack). Every walk in the package therefore uses an
explicit stack, either :func:`iter_nodes` (top-down) or :func:`fold_tree`
(bottom-up), and never Python recursion.

Examples
--------
>>> from expr_toolkit.nodes import clone, count_nodes, structurally_equal
>>> from expr_toolkit.nodes import make_binary_op, make_number, make_variable
>>> tree = make_binary_op("+", make_variable("a"), make_number(2))
>>> count_nodes(tree)
3
>>> structurally_equal(tree, clone(tree))
True
>>> clone(tree) is tree
False
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, TypeAlias, Union

__all__ = [
    "EPSILON",
    "OPERATORS",
    "FUNCTION_CODES",
    "UNKNOWN_FUNCTION_LABEL",
    "Number",
    "Variable",
    "BinaryOp",
    "UnaryFunction",
    "Node",
    "make_number",
    "make_variable",
    "make_binary_op",
    "make_unary_function",
    "function_code_from_name",
    "function_name_from_code",
    "is_number",
    "check_variable_name",
    "clone",
    "release",
    "iter_nodes",
    "fold_tree",
    "rebuild_node",
    "count_nodes",
    "tree_depth",
    "collect_variables",
    "structurally_equal",
    "find_parent",
]


EPSILON = 1e-12
OPERATORS = "+-*/^"
FUNCTION_CODES: dict[str, str] = {"sin": "s", "cos": "c", "tan": "t", "ln": "l"}
_FUNCTION_NAMES: dict[str, str] = {code: name for name, code in FUNCTION_CODES.items()}
UNKNOWN_FUNCTION_LABEL = "func?"


def check_variable_name(name: str) -> None:
    if not (isinstance(name, str) and len(name) == 1 and "a" <= name <= "z"):
        raise ValueError(f"Variable names are single lowercase letters, got {name!r}.")


@dataclass(frozen=True, eq=False)
class Number:
    """Numeric leaf holding a double-precision value."""

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True, eq=False)
class Variable:
    """Variable leaf identified by one lowercase letter."""

    name: str

    def __post_init__(self) -> None:
        check_variable_name(self.name)


@dataclass(frozen=True, eq=False)
class BinaryOp:
    """Binary operation ``left op right``."""

    op: str
    left: "Node"
    right: "Node"

    def __post_init__(self) -> None:
        if not (isinstance(self.op, str) and len(self.op) == 1 and self.op in OPERATORS):
            raise ValueError(f"Unknown binary operator {self.op!r}.")


@dataclass(frozen=True, eq=False)
class UnaryFunction:
    """Unary function application stored with its one-letter code."""

    code: str
    operand: "Node"

    def __post_init__(self) -> None:
        if self.code not in _FUNCTION_NAMES:
            raise ValueError(f"Unknown function code {self.code!r}.")

    @property
    def name(self) -> str:
        """Display name of the function (``sin``, ``cos``, ``tan`` or ``ln``)."""
        return function_name_from_code(self.code)


Node: TypeAlias = Union[Number, Variable, BinaryOp, UnaryFunction]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def function_code_from_name(name: str) -> str:
    """Return the one-letter code for ``name`` (``sin`` -> ``s``).

    Codes themselves are accepted and returned unchanged.

    Raises
    ------
    ValueError
        If ``name`` is neither a known function name nor a known code.
    """
    if name in FUNCTION_CODES:
        return FUNCTION_CODES[name]
    if name in _FUNCTION_NAMES:
        return name
    raise ValueError(f"Unknown function {name!r}; expected one of {', '.join(FUNCTION_CODES)}.")


def function_name_from_code(code: str) -> str:
    """Return the display name for ``code``; unknown codes map to ``func?``."""
    return _FUNCTION_NAMES.get(code, UNKNOWN_FUNCTION_LABEL)


def make_number(value: float) -> Number:
    return Number(value)


def make_variable(name: str) -> Variable:
    return Variable(name)


def make_binary_op(op: str, left: Node, right: Node) -> BinaryOp:
    return BinaryOp(op, left, right)


def make_unary_function(function: str, operand: Node) -> UnaryFunction:
    """Build ``function(operand)`` from a function name or code."""
    return UnaryFunction(function_code_from_name(function), operand)


def is_number(node: Optional[Node]) -> bool:
    return isinstance(node, Number)


# ---------------------------------------------------------------------------
# Tree-wide operations
# ---------------------------------------------------------------------------

def rebuild_node(node: Node, children: tuple[Node, ...]) -> Node:
    """Copy ``node`` itself with ``children`` as its new children (leaves are copied as-is)."""
    if isinstance(node, Number):
        return Number(node.value)
    if isinstance(node, Variable):
        return Variable(node.name)
    if isinstance(node, UnaryFunction):
        return UnaryFunction(node.code, *children)
    return BinaryOp(node.op, *children)


def clone(node: Optional[Node]) -> Optional[Node]:
    """Return a fully independent deep copy of ``node`` (``None`` stays ``None``)."""
    if node is None:
        return None
    return fold_tree(node, rebuild_node)


def release(node: Optional[Node]) -> int:
    """Drop a tree and return how many nodes it held.

    The caller must not use ``node`` afterwards; the interpreter reclaims the
    nodes once the last reference is gone. ``None`` is accepted and yields 0.
    """
    return count_nodes(node)


def _children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, UnaryFunction):
        return (node.operand,)
    return ()


def iter_nodes(node: Optional[Node]) -> Iterator[Node]:
    """Yield every node of the tree in pre-order (parent before children)."""
    if node is None:
        return
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def fold_tree(node: Node, visit: Callable[[Node, tuple[Any, ...]], Any]) -> Any:
    """Combine a tree bottom-up and return the result for ``node``.

    ``visit(current, results)`` is called once per node, children before their
    parent and left before right. ``results`` holds the values ``visit``
    returned for the node's children, in order (empty for leaves). Exceptions
    raised by ``visit`` propagate unchanged.

    Examples
    --------
    >>> from expr_toolkit.parser import parse_postfix
    >>> fold_tree(parse_postfix("ab+c*"), lambda n, kids: 1 + sum(kids))
    5
    """
    results: list[Any] = []
    # Each entry is (node, children already pushed).
    stack: list[tuple[Node, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        children = _children(current)
        if children and not expanded:
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(children))
            continue
        if children:
            args = tuple(results[-len(children):])
            del results[-len(children):]
        else:
            args = ()
        results.append(visit(current, args))
    return results[0]


def count_nodes(node: Optional[Node]) -> int:
    return sum(1 for _ in iter_nodes(node))


def tree_depth(node: Optional[Node]) -> int:
    """Number of levels in the tree; an empty tree has depth 0."""
    if node is None:
        return 0
    depth = 0
    stack: list[tuple[Node, int]] = [(node, 1)]
    while stack:
        current, level = stack.pop()
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in _children(current))
    return depth


def collect_variables(node: Optional[Node]) -> frozenset[str]:
    """Return the distinct variable names appearing in the tree."""
    return frozenset(n.name for n in iter_nodes(node) if isinstance(n, Variable))


def structurally_equal(a: Optional[Node], b: Optional[Node], eps: float = EPSILON) -> bool:
    """Compare two trees by shape, operators and leaves.

    Numeric leaves match when they differ by less than ``eps``.
    """
    if a is None or b is None:
        return a is None and b is None
    pairs: list[tuple[Node, Node]] = [(a, b)]
    while pairs:
        x, y = pairs.pop()
        if type(x) is not type(y):
            return False
        if isinstance(x, Number):
            if abs(x.value - y.value) >= eps:
                return False
        elif isinstance(x, Variable):
            if x.name != y.name:
                return False
        elif isinstance(x, UnaryFunction):
            if x.code != y.code:
                return False
            pairs.append((x.operand, y.operand))
        else:
            if x.op != y.op:
                return False
            pairs.append((x.right, y.right))
            pairs.append((x.left, y.left))
    return True


def find_parent(root: Optional[Node], target: Node) -> Optional[tuple[Node, str]]:
    """Locate the parent of ``target`` by identity.

    Returns
    -------
    tuple or None
        ``(parent, side)`` where ``side`` is ``"left"``, ``"right"`` or
        ``"operand"``; ``None`` when ``target`` is the root or not in the tree.
    """
    for node in iter_nodes(root):
        if isinstance(node, BinaryOp):
            if node.left is target:
                return node, "left"
            if node.right is target:
                return node, "right"
        elif isinstance(node, UnaryFunction) and node.operand is target:
            return node, "operand"
    return None
