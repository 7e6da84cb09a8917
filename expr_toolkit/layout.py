"""Geometric layout of expression trees for display.

Purpose
-------
Compute integer ``(x, y)`` positions for every node of a tree so a host can
draw it. The layout is a heuristic, not a collision-free or minimum-area
algorithm:

1. The root sits at the origin. Each child is placed one vertical step below
   its parent and shifted left (left child or function operand) or right
   (right child) by the current horizontal offset. The offset handed to the
   next level shrinks by the decay factor (0.65) but never drops below the
   minimum offset (25).
2. If the bounding box of all positions is wider or taller than the viewport,
   every position is scaled by one uniform factor about the box's horizontal
   center and top edge, and re-anchored at the origin.

Architecture
------------
A :class:`Layout` is derived data: it maps node objects (by identity) to
positions and never owns the tree. Recompute it whenever the tree or the view
parameters change. :func:`hit_test` maps a screen point back to a node.

Examples
--------
>>> from expr_toolkit.parser import parse_postfix
>>> tree = parse_postfix("ab+")
>>> positions = layout_tree(tree, 400, 40)
>>> positions[tree]
(400, 40)
>>> positions[tree.left], positions[tree.right]
((320, 95), (480, 95))
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .nodes import BinaryOp, Node, UnaryFunction

__all__ = ["LayoutOptions", "Layout", "layout_tree", "hit_test"]


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class LayoutOptions:
    """Tunable constants of the layout heuristic.

    Parameters
    ----------
    x_gap : int
        Horizontal offset between the root and its children.
    y_gap : int
        Vertical distance between consecutive levels.
    max_width : int
        Viewport width the finished layout must fit into.
    max_height : int
        Viewport height the finished layout must fit into.
    decay : float
        Factor applied to the horizontal offset at each level.
    min_offset : float
        Smallest horizontal offset handed to a deeper level.
    """

    x_gap: int = 80
    y_gap: int = 55
    max_width: int = 700
    max_height: int = 350
    decay: float = 0.65
    min_offset: float = 25.0


DEFAULT_LAYOUT_OPTIONS = LayoutOptions()


class Layout(Mapping[Node, tuple[int, int]]):
    """Read-only mapping from tree nodes (by identity) to ``(x, y)`` positions."""

    def __init__(self, positions: Optional[Mapping[Node, tuple[int, int]]] = None) -> None:
        self._positions: dict[Node, tuple[int, int]] = dict(positions or {})

    def __getitem__(self, node: Node) -> tuple[int, int]:
        return self._positions[node]

    def __iter__(self) -> Iterator[Node]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def bounding_box(self) -> Optional[tuple[int, int, int, int]]:
        """Return ``(min_x, min_y, max_x, max_y)``, or ``None`` for an empty layout."""
        if not self._positions:
            return None
        coords = np.array(list(self._positions.values()), dtype=np.int64)
        min_x, min_y = coords.min(axis=0)
        max_x, max_y = coords.max(axis=0)
        return int(min_x), int(min_y), int(max_x), int(max_y)

    def __repr__(self) -> str:
        return f"Layout({len(self._positions)} nodes, bbox={self.bounding_box()})"


def layout_tree(
    node: Optional[Node],
    origin_x: int,
    origin_y: int,
    x_gap: Optional[int] = None,
    y_gap: Optional[int] = None,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    *,
    options: Optional[LayoutOptions] = None,
) -> Layout:
    """Place every node of ``node``'s tree on an integer grid.

    Parameters
    ----------
    node : Node or None
        Root of the tree; ``None`` yields an empty layout.
    origin_x, origin_y : int
        Position of the root.
    x_gap, y_gap, max_width, max_height : int, optional
        Per-call overrides of the matching :class:`LayoutOptions` fields.
    options : LayoutOptions, optional
        Base configuration; defaults to :data:`DEFAULT_LAYOUT_OPTIONS`.

    Returns
    -------
    Layout
    """
    opts = options or DEFAULT_LAYOUT_OPTIONS
    x_gap = opts.x_gap if x_gap is None else x_gap
    y_gap = opts.y_gap if y_gap is None else y_gap
    max_width = opts.max_width if max_width is None else max_width
    max_height = opts.max_height if max_height is None else max_height

    if node is None:
        return Layout()

    positions: dict[Node, tuple[int, int]] = {}
    # Pre-order: push the right side first so the left side is placed first.
    stack: list[tuple[Node, int, int, float]] = [(node, int(origin_x), int(origin_y), float(x_gap))]
    while stack:
        current, cx, cy, offset = stack.pop()
        positions[current] = (cx, cy)
        next_offset = max(offset * opts.decay, opts.min_offset)
        if isinstance(current, BinaryOp):
            stack.append((current.right, cx + int(offset), cy + y_gap, next_offset))
            stack.append((current.left, cx - int(offset), cy + y_gap, next_offset))
        elif isinstance(current, UnaryFunction):
            stack.append((current.operand, cx - int(offset), cy + y_gap, next_offset))

    nodes = list(positions)
    coords = np.array([positions[n] for n in nodes], dtype=np.int64)
    min_x, min_y = (int(v) for v in coords.min(axis=0))
    max_x, max_y = (int(v) for v in coords.max(axis=0))
    width, height = max_x - min_x, max_y - min_y

    scale_x = max_width / width if width > max_width else 1.0
    scale_y = max_height / height if height > max_height else 1.0
    scale = min(scale_x, scale_y)

    if scale < 1.0:
        center_x = int((min_x + max_x) / 2)
        anchor = np.array([center_x, min_y], dtype=np.int64)
        origin = np.array([origin_x, origin_y], dtype=np.int64)
        scaled = origin + np.trunc((coords - anchor) * scale).astype(np.int64)
        positions = {n: (int(x), int(y)) for n, (x, y) in zip(nodes, scaled)}
        logger.debug(
            "Scaled layout of %d nodes by %.3f to fit %dx%d", len(nodes), scale, max_width, max_height
        )

    return Layout(positions)


def hit_test(
    layout: Layout,
    x: int,
    y: int,
    *,
    radius: int = 18,
    zoom: float = 1.0,
    center: tuple[int, int] = (0, 0),
    offset: tuple[int, int] = (0, 0),
) -> Optional[Node]:
    """Return the node drawn closest to screen point ``(x, y)``, if any is in reach.

    Layout positions are mapped to the screen by zooming about ``center`` and
    then shifting by ``offset``. A node is in reach when its screen position is
    within ``max(int(radius * zoom), 8)`` pixels of the point.
    """
    if not len(layout):
        return None
    nodes = list(layout)
    coords = np.array([layout[n] for n in nodes], dtype=np.float64)
    center_arr = np.array(center, dtype=np.float64)
    screen = (
        center_arr
        + np.trunc((coords - center_arr) * zoom)
        + np.array(offset, dtype=np.float64)
    )
    d2 = ((screen - np.array([x, y], dtype=np.float64)) ** 2).sum(axis=1)
    reach = max(int(radius * zoom), 8)
    best = int(np.argmin(d2))
    if d2[best] > reach * reach:
        return None
    return nodes[best]
