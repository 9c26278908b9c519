"""
Visualization projection of a formula arena, plus a Graphviz `.dot` renderer.

The projection is derived data: it is rebuilt from the live arena nodes after
every structural change and is never read back by the rewrite rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .model import ASTNode

BREAK_MARK = "↵"


@dataclass(frozen=True)
class ViewNode:
    id: int
    label: str


@dataclass(frozen=True)
class ViewEdge:
    id: int
    source: int
    target: int


@dataclass
class ViewGraph:
    nodes: List[ViewNode] = field(default_factory=list)
    edges: List[ViewEdge] = field(default_factory=list)


def node_label(node: "ASTNode") -> str:
    label = node.token
    if node.should_in_bracket:
        label = f"({label})"
    if node.should_break:
        label += BREAK_MARK
    return label


def build_view(nodes: List["ASTNode"]) -> ViewGraph:
    """Project live nodes to labelled boxes and parent -> child edges."""
    view = ViewGraph()
    for node in nodes:
        if not node.is_live:
            continue
        view.nodes.append(ViewNode(node.id, node_label(node)))
        for child_id in node.children:
            view.edges.append(ViewEdge(len(view.edges), node.id, child_id))
    return view


def _escape(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"')


def graph_to_dot(view: ViewGraph, name: str = "formula") -> str:
    lines = [f"digraph {name} {{", "  rankdir=TB;", '  node [shape=box, fontname="Menlo"];']
    for node in view.nodes:
        lines.append(f'  n{node.id} [label="{_escape(node.label)}"];')
    for edge in view.edges:
        lines.append(f"  n{edge.source} -> n{edge.target};")
    lines.append("}")
    return "\n".join(lines)
