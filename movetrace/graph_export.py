"""Tree export helpers for ASCII, SVG and Graphviz DOT outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Sequence

from .layout import children_of, render_svg


def render_ascii_tree(tree: Any) -> str:
    """Render a tree with box-drawing branches; the root line has no prefix."""
    return f"{tree.name}\n" + _render_children(children_of(tree), "")


def _render_children(children: Sequence[Any], prefix: str) -> str:
    out = ""
    for idx, child in enumerate(children):
        last = idx == len(children) - 1
        out += prefix + ("└── " if last else "├── ") + f"{child.name}\n"
        out += _render_children(children_of(child), prefix + ("    " if last else "│   "))
    return out


def export_svg(trees: Sequence[Any], output_file: Path) -> None:
    output_file.write_text(render_svg(trees), encoding="utf-8")


def export_dot(trees: Sequence[Any], output_file: Path) -> None:
    """Write trees as one Graphviz digraph; repeated packages share a node."""
    lines = ["digraph Dependencies {", "  rankdir=TB;", "  node [shape=box];"]
    seen_edges = set()

    def emit(node: Any) -> None:
        for child in children_of(node):
            edge = (node.name, child.name)
            if edge not in seen_edges:
                seen_edges.add(edge)
                lines.append(f'  "{_esc(node.name)}" -> "{_esc(child.name)}";')
            emit(child)

    roots: List[str] = []
    for tree in trees:
        roots.append(f'  "{_esc(tree.name)}";')
        emit(tree)

    lines[3:3] = roots
    lines.append("}")
    output_file.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
