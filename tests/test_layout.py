"""Tests for tree layout, SVG serialization and ASCII rendering."""

import html
import re

import pytest

from movetrace.graph_export import render_ascii_tree
from movetrace.layout import (
    LEVEL_GAP,
    NODE_HEIGHT,
    NODE_WIDTH,
    SIBLING_GAP,
    edges,
    layout,
    layout_stack,
    render_svg,
    serialize,
)
from movetrace.models import DependencyTreeNode, ModuleTreeNode


def _node(name, *children):
    return DependencyTreeNode(name=name, dependencies=list(children))


@pytest.fixture
def sample_tree() -> DependencyTreeNode:
    return _node("A", _node("B", _node("C")), _node("C"), _node("D", _node("E"), _node("F"), _node("G")))


class TestLayout:
    """Tests for coordinate assignment."""

    def test_leaf(self):
        """Test a childless node sits at the offset with width W."""
        result = layout(_node("solo"))

        assert result.root.x == 0
        assert result.root.y == 0
        assert result.root.subtree_width == NODE_WIDTH
        assert result.width == NODE_WIDTH
        assert result.height == NODE_HEIGHT

    def test_parent_centered_over_children(self):
        """Test a parent is centered over the span of its children."""
        result = layout(_node("P", _node("L"), _node("R")))
        span = 2 * NODE_WIDTH + SIBLING_GAP

        assert result.root.subtree_width == span
        assert result.root.x == (span - NODE_WIDTH) / 2
        left, right = result.root.children
        assert left.x == 0
        assert right.x == NODE_WIDTH + SIBLING_GAP

    def test_levels_form_bands(self, sample_tree):
        """Test y depends only on depth."""
        result = layout(sample_tree, vertical_offset=10)

        for node in result.root.walk():
            assert node.y == 10 + node.depth * (NODE_HEIGHT + LEVEL_GAP)
        assert result.height == 10 + 2 * (NODE_HEIGHT + LEVEL_GAP) + NODE_HEIGHT

    def test_subtree_width_covers_children(self, sample_tree):
        """Test no two sibling subtrees overlap."""
        result = layout(sample_tree)

        for node in result.root.walk():
            if not node.children:
                assert node.subtree_width == NODE_WIDTH
                continue
            needed = sum(c.subtree_width for c in node.children) + (len(node.children) - 1) * SIBLING_GAP
            assert node.subtree_width >= needed
            for left, right in zip(node.children, node.children[1:]):
                left_start = min(n.x for n in left.walk())
                left_end = max(n.x for n in left.walk()) + NODE_WIDTH
                right_start = min(n.x for n in right.walk())
                assert left_end <= right_start
                assert left_start < right_start

    def test_canvas_extent(self, sample_tree):
        """Test the canvas bounds every node."""
        result = layout(sample_tree)

        assert result.width == max(n.x + NODE_WIDTH for n in result.root.walk())
        assert result.height == max(n.y + NODE_HEIGHT for n in result.root.walk())

    def test_deterministic(self, sample_tree):
        """Test repeated layouts agree on coordinates and SVG text."""
        first = layout(sample_tree)
        second = layout(sample_tree)

        assert first.root == second.root
        assert render_svg([sample_tree]) == render_svg([sample_tree])

    def test_accepts_module_tree(self):
        """Test nodes exposing ``children`` are laid out too."""
        tree = ModuleTreeNode(name="0x1::Pkg", children=[ModuleTreeNode(name="0x1::m")])

        result = layout(tree)

        assert [c.name for c in result.root.children] == ["0x1::m"]

    def test_parent_back_reference(self, sample_tree):
        result = layout(sample_tree)

        assert result.root.parent is None
        for child in result.root.children:
            assert child.parent is result.root


class TestEdges:
    """Tests for the edge pass."""

    def test_edge_endpoints(self):
        """Test edges join bottom-center to top-center."""
        result = layout(_node("P", _node("L"), _node("R")))
        root = result.root
        left, right = root.children

        assert edges(result) == [
            (root.x + NODE_WIDTH / 2, root.y + NODE_HEIGHT, left.x + NODE_WIDTH / 2, left.y),
            (root.x + NODE_WIDTH / 2, root.y + NODE_HEIGHT, right.x + NODE_WIDTH / 2, right.y),
        ]

    def test_edge_count(self, sample_tree):
        result = layout(sample_tree)

        assert len(edges(result)) == sum(1 for _ in result.root.walk()) - 1


class TestSvg:
    """Tests for SVG output."""

    def test_primitive_counts(self, sample_tree):
        svg = render_svg([sample_tree])

        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
        assert svg.rstrip().endswith("</svg>")
        assert svg.count("<rect ") == 8
        assert svg.count("<text ") == 8
        assert svg.count("<line ") == 7

    def test_label_escaping_round_trip(self):
        """Test reserved markup characters survive escaping."""
        name = "0x1::<Weird> & \"quoted\" 'pkg'"
        svg = render_svg([_node(name)])

        labels = re.findall(r"<text [^>]*>(.*?)</text>", svg)
        assert len(labels) == 1
        assert "<Weird>" not in labels[0]
        assert html.unescape(labels[0]) == name

    def test_stacked_trees(self):
        """Test later trees start below the previous canvas."""
        first = _node("A", _node("B"))
        second = _node("C")

        layouts = layout_stack([first, second])

        assert layouts[0].root.y == 0
        assert layouts[1].root.y == layouts[0].height
        assert layouts[1].height == layouts[0].height + NODE_HEIGHT
        svg = serialize(layouts)
        assert svg.count("<svg ") == 1
        assert f'height="{int(layouts[1].height)}"' in svg
        assert svg.count("<rect ") == 3

    def test_cycle_nodes_highlighted(self):
        svg = render_svg([_node("A", _node("A (cycle detected)"))])

        assert svg.count('fill="#fee2e2"') == 1

    def test_empty_stack(self):
        assert serialize([]).count("<rect") == 0


class TestAsciiTree:
    """Tests for ASCII rendering."""

    def test_branches(self):
        tree = _node("A", _node("B", _node("C")), _node("C"))

        assert render_ascii_tree(tree) == (
            "A\n"
            "├── B\n"
            "│   └── C\n"
            "└── C\n"
        )

    def test_last_child_continuation(self):
        tree = _node("A", _node("B", _node("C"), _node("D")))

        assert render_ascii_tree(tree) == (
            "A\n"
            "└── B\n"
            "    ├── C\n"
            "    └── D\n"
        )

    def test_single_node(self):
        assert render_ascii_tree(_node("root")) == "root\n"
