"""``ExprTree``: the owner object host applications work with.

Purpose
-------
An :class:`ExprTree` owns one expression tree (or nothing) together with two
derived text caches, the postfix and the fully parenthesized infix rendering.
It is the surface a host UI calls into: parse user input, evaluate, take
derivatives, simplify, compose, substitute and lay out for drawing.

Ownership and caches
--------------------
- The root is replaced atomically. Every operation builds its result first and
  only then swaps it in, so a failing call leaves the tree exactly as it was.
- Operations that produce a different expression (``derivative``,
  ``substitute``, ``compose``, ``clone``, ``simplified``) return a new
  ``ExprTree`` that shares no nodes with this one.
- The caches are regenerated whenever the root changes. The one exception is
  :func:`expr_toolkit.compose.compose`, which concatenates the operands'
  postfix text instead of re-rendering it.

Logging
-------
This module uses the standard :mod:`logging` library and is silent by default:

>>> import logging
>>> logging.getLogger("expr_toolkit").setLevel(logging.DEBUG)  # doctest: +SKIP

Examples
--------
>>> tree = ExprTree.from_postfix("23+5*")
>>> tree.infix
'((2 + 3) * 5)'
>>> tree.evaluate()
25.0
>>> ExprTree.from_postfix("a2^").derivative("a").simplify().infix
'(2 * a)'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import numpy as np

from .compose import compose as _compose
from .compose import substitute as _substitute
from .compose import wrap_in_function as _wrap_in_function
from .derivative import derivative as _derivative
from .errors import EmptyOperandError, MalformedExpressionError
from .evaluator import evaluate as _evaluate
from .evaluator import evaluate_array as _evaluate_array
from .layout import Layout, LayoutOptions, layout_tree
from .nodes import Node, clone, collect_variables, count_nodes, release, tree_depth
from .parser import MAX_PARSE_DEPTH, parse_postfix
from .serializer import to_infix, to_postfix
from .simplify import simplify as _simplify

__all__ = ["ExprTree"]


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class ExprTree:
    """An owned expression tree with cached postfix and infix text.

    Parameters
    ----------
    root : Node, optional
        Initial root. The tree takes ownership; callers must not keep using
        the node elsewhere. ``None`` creates an empty tree.
    """

    __slots__ = ("_root", "_postfix", "_infix")

    def __init__(self, root: Optional[Node] = None) -> None:
        self._root: Optional[Node] = None
        self._postfix = ""
        self._infix = ""
        self._set_root(root)

    @classmethod
    def from_postfix(cls, text: str, *, max_depth: Optional[int] = MAX_PARSE_DEPTH) -> "ExprTree":
        """Parse ``text`` into a new tree (see :func:`expr_toolkit.parser.parse_postfix`)."""
        return cls(parse_postfix(text, max_depth=max_depth))

    @classmethod
    def _from_parts(cls, root: Node, *, postfix: str) -> "ExprTree":
        tree = cls()
        tree._root = root
        tree._postfix = postfix
        tree._infix = to_infix(root)
        return tree

    def _set_root(self, root: Optional[Node]) -> None:
        self._root = root
        self._postfix = to_postfix(root)
        self._infix = to_infix(root)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[Node]:
        return self._root

    @property
    def postfix(self) -> str:
        """Cached postfix text ("" for an empty tree)."""
        return self._postfix

    @property
    def infix(self) -> str:
        """Cached fully parenthesized infix text ("" for an empty tree)."""
        return self._infix

    @property
    def is_empty(self) -> bool:
        return self._root is None

    @property
    def node_count(self) -> int:
        return count_nodes(self._root)

    @property
    def depth(self) -> int:
        return tree_depth(self._root)

    def __len__(self) -> int:
        return self.node_count

    def __bool__(self) -> bool:
        return self._root is not None

    def __repr__(self) -> str:
        if self._root is None:
            return "ExprTree(<empty>)"
        return f"ExprTree({self._infix!r})"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def parse(self, text: str, *, max_depth: Optional[int] = MAX_PARSE_DEPTH) -> "ExprTree":
        """Replace the contents with the tree parsed from ``text``.

        On a parse error the current contents are kept and the error propagates.
        """
        root = parse_postfix(text, max_depth=max_depth)
        self._set_root(root)
        logger.debug("ExprTree parsed %r (%d nodes)", text, self.node_count)
        return self

    def clear(self) -> None:
        """Release the owned tree and empty both caches."""
        released = release(self._root)
        self._set_root(None)
        logger.debug("ExprTree cleared (%d nodes released)", released)

    def clone(self) -> "ExprTree":
        """Return an independent deep copy, caches included."""
        copy = type(self)()
        copy._root = clone(self._root)
        copy._postfix = self._postfix
        copy._infix = self._infix
        return copy

    # ------------------------------------------------------------------
    # Text and inspection
    # ------------------------------------------------------------------

    def to_postfix(self) -> str:
        """Render the current tree as postfix text."""
        return to_postfix(self._root)

    def to_infix(self) -> str:
        """Render the current tree as fully parenthesized infix text."""
        return to_infix(self._root)

    def collect_variables(self) -> frozenset[str]:
        return collect_variables(self._root)

    # ------------------------------------------------------------------
    # Semantic passes
    # ------------------------------------------------------------------

    def evaluate(self, bindings: Optional[Mapping[str, float]] = None) -> float:
        """Compute the tree's value; see :func:`expr_toolkit.evaluator.evaluate`.

        Raises
        ------
        MalformedExpressionError
            If the tree is empty.
        """
        if self._root is None:
            raise MalformedExpressionError(0)
        return _evaluate(self._root, bindings)

    def evaluate_array(self, bindings: Mapping[str, Any]) -> np.ndarray:
        """Evaluate over NumPy arrays; see :func:`expr_toolkit.evaluator.evaluate_array`."""
        if self._root is None:
            raise MalformedExpressionError(0)
        return _evaluate_array(self._root, bindings)

    def derivative(self, variable: str) -> "ExprTree":
        """Return the partial derivative with respect to ``variable`` as a new tree.

        Raises
        ------
        EmptyOperandError
            If the tree is empty.
        UnsupportedDerivativeError
            If a node has no differentiation rule.
        """
        if self._root is None:
            raise EmptyOperandError("Cannot differentiate an empty expression.")
        return type(self)(_derivative(self._root, variable))

    def simplify(self) -> "ExprTree":
        """Simplify in place and return ``self``.

        The reduced tree is built completely before it replaces the current
        root, so a failure leaves the tree untouched.
        """
        if self._root is not None:
            self._set_root(_simplify(self._root))
        return self

    def simplified(self) -> "ExprTree":
        """Return a simplified copy, leaving this tree unchanged."""
        if self._root is None:
            return type(self)()
        return type(self)(_simplify(self._root))

    def substitute(self, bindings: Mapping[str, float]) -> "ExprTree":
        """Return a copy where every bound variable is replaced by its value."""
        return type(self)(_substitute(self._root, bindings))

    def compose(self, other: "ExprTree", operator: str) -> "ExprTree":
        """Return ``(self) operator (other)``; see :func:`expr_toolkit.compose.compose`."""
        return _compose(self, other, operator)

    def wrap_in_function(self, target: Node, function: str) -> "ExprTree":
        """Wrap the subtree ``target`` as ``function(target)`` in place and return ``self``.

        Raises
        ------
        EmptyOperandError
            If the tree is empty.
        LookupError
            If ``target`` is not a node of this tree.
        """
        if self._root is None:
            raise EmptyOperandError("Cannot wrap a node of an empty expression.")
        self._set_root(_wrap_in_function(self._root, target, function))
        return self

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def layout(
        self,
        origin_x: int,
        origin_y: int,
        x_gap: Optional[int] = None,
        y_gap: Optional[int] = None,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        *,
        options: Optional[LayoutOptions] = None,
    ) -> Layout:
        """Compute node positions; see :func:`expr_toolkit.layout.layout_tree`."""
        return layout_tree(
            self._root,
            origin_x,
            origin_y,
            x_gap,
            y_gap,
            max_width,
            max_height,
            options=options,
        )
