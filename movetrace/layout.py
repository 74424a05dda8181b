"""Tree layout and SVG serialization for dependency diagrams.

Layout is a single post-order pass: children are placed left to right
starting at the caller's x offset, each parent is centered over the span of
its children, and every depth level forms one horizontal band. Edges are
computed in a second pass once all coordinates are final.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .models import CYCLE_MARKER

NODE_WIDTH = 180
NODE_HEIGHT = 32
SIBLING_GAP = 20
LEVEL_GAP = 48

Edge = Tuple[float, float, float, float]


@dataclass
class PositionedNode:
    name: str
    x: float
    y: float
    depth: int
    subtree_width: float
    children: List["PositionedNode"] = field(default_factory=list)
    # Only used to draw the edge into this node.
    parent: Optional["PositionedNode"] = field(default=None, repr=False, compare=False)

    def walk(self) -> Iterator["PositionedNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class TreeLayout:
    root: PositionedNode
    width: float
    height: float


def children_of(node: Any) -> Sequence[Any]:
    children = getattr(node, "children", None)
    if children is None:
        children = getattr(node, "dependencies", None)
    return children or []


def layout(tree: Any, vertical_offset: float = 0) -> TreeLayout:
    """Assign coordinates to every node of ``tree``.

    Args:
        tree: Any node exposing ``name`` and ``children`` (or ``dependencies``).
        vertical_offset: Y coordinate of the root band, used to stack trees.

    Returns:
        TreeLayout with the positioned root and the canvas extent
        (maximum ``x + NODE_WIDTH`` and ``y + NODE_HEIGHT`` over all nodes).
    """
    extent = [0.0, 0.0]

    def place(node: Any, x_offset: float, depth: int, parent: Optional[PositionedNode]) -> PositionedNode:
        y = vertical_offset + depth * (NODE_HEIGHT + LEVEL_GAP)
        positioned = PositionedNode(
            name=str(node.name), x=x_offset, y=y, depth=depth, subtree_width=NODE_WIDTH, parent=parent
        )

        cursor = x_offset
        for child in children_of(node):
            placed = place(child, cursor, depth + 1, positioned)
            positioned.children.append(placed)
            cursor += placed.subtree_width + SIBLING_GAP

        if positioned.children:
            span = cursor - SIBLING_GAP - x_offset
            positioned.subtree_width = max(span, NODE_WIDTH)
            positioned.x = x_offset + (span - NODE_WIDTH) / 2

        extent[0] = max(extent[0], positioned.x + NODE_WIDTH)
        extent[1] = max(extent[1], y + NODE_HEIGHT)
        return positioned

    root = place(tree, 0, 0, None)
    return TreeLayout(root=root, width=extent[0], height=extent[1])


def edges(tree_layout: TreeLayout) -> List[Edge]:
    """Parent bottom-center to child top-center segments, in pre-order."""
    segments: List[Edge] = []
    for node in tree_layout.root.walk():
        if node.parent is None:
            continue
        parent = node.parent
        segments.append(
            (
                parent.x + NODE_WIDTH / 2,
                parent.y + NODE_HEIGHT,
                node.x + NODE_WIDTH / 2,
                node.y,
            )
        )
    return segments


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _primitives(tree_layout: TreeLayout) -> List[str]:
    lines = []
    for x1, y1, x2, y2 in edges(tree_layout):
        lines.append(
            f'  <line x1="{_num(x1)}" y1="{_num(y1)}" x2="{_num(x2)}" y2="{_num(y2)}" '
            'stroke="#64748b" stroke-width="1.5" />'
        )
    for node in tree_layout.root.walk():
        fill = "#fee2e2" if node.name.endswith(CYCLE_MARKER) else "#e0f2fe"
        lines.append(
            f'  <rect x="{_num(node.x)}" y="{_num(node.y)}" width="{NODE_WIDTH}" '
            f'height="{NODE_HEIGHT}" rx="6" fill="{fill}" stroke="#0f172a" />'
        )
        lines.append(
            f'  <text x="{_num(node.x + NODE_WIDTH / 2)}" y="{_num(node.y + NODE_HEIGHT / 2)}" '
            'text-anchor="middle" dominant-baseline="middle" '
            f'font-family="monospace" font-size="11">{html.escape(node.name, quote=True)}</text>'
        )
    return lines


def serialize(layouts: Sequence[TreeLayout]) -> str:
    """Wrap the primitives of one or more laid-out trees in a single SVG frame."""
    width = max((tl.width for tl in layouts), default=0)
    height = max((tl.height for tl in layouts), default=0)
    body: List[str] = []
    for tree_layout in layouts:
        body.extend(_primitives(tree_layout))
    header = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{_num(height)}" '
        f'viewBox="0 0 {_num(width)} {_num(height)}">'
    )
    return "\n".join([header, *body, "</svg>"]) + "\n"


def layout_stack(trees: Sequence[Any]) -> List[TreeLayout]:
    """Lay out trees one below the other; each offset is the previous tree's height."""
    layouts: List[TreeLayout] = []
    offset: float = 0
    for tree in trees:
        tree_layout = layout(tree, vertical_offset=offset)
        layouts.append(tree_layout)
        offset = tree_layout.height
    return layouts


def render_svg(trees: Sequence[Any]) -> str:
    return serialize(layout_stack(trees))
