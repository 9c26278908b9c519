"""
Formula arena: an index-addressed store of `ASTNode`s plus the builder that
fills it from a parsed S-expression.

Arena rules (the rewrite catalog depends on all of them):
- A node's id equals its index in `AST.nodes`; ids are never reused.
- Deleting a node puts a tombstone in its slot. `delete` does not rewire:
  callers redirect parent/children references first.
- Rules never mutate an arena they were handed; they work on `clone()`.
- `view` is a projection and must be refreshed with `rebuild_view()` after
  every structural change.
"""

from __future__ import annotations

import copy
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import ArenaInvariantError
from .model import (
    EMPTY_LIST,
    LIST_MARKER,
    OPERATORS,
    ROOT_PARENT,
    ASTNode,
    tombstone,
)
from .sexpr import NO_SPAN, Compound, Expr, Span, Token, head_token, parse_sexpr
from .view import ViewGraph, build_view


class AST:
    """Owner of the node list, the root id and the derived view."""

    def __init__(self) -> None:
        self.nodes: List[ASTNode] = []
        self.root_id: int = ROOT_PARENT
        self.view = ViewGraph()

    # --- slots -------------------------------------------------------------

    def add_node(
        self,
        token: str,
        parent_id: int = ROOT_PARENT,
        children: Optional[List[int]] = None,
        span: Span = NO_SPAN,
    ) -> ASTNode:
        node = ASTNode(len(self.nodes), token, parent_id, list(children or []), span=span)
        self.nodes.append(node)
        return node

    def node(self, node_id: int) -> ASTNode:
        if node_id < 0 or node_id >= len(self.nodes):
            raise ArenaInvariantError(f"node id {node_id} is outside the arena (size {len(self.nodes)})")
        return self.nodes[node_id]

    @property
    def root(self) -> ASTNode:
        return self.node(self.root_id)

    def parent(self, node: ASTNode) -> Optional[ASTNode]:
        if node.parent_id == ROOT_PARENT:
            return None
        return self.node(node.parent_id)

    def live_nodes(self) -> Iterator[ASTNode]:
        return (node for node in self.nodes if node.is_live)

    def delete(self, node: ASTNode) -> None:
        self.nodes[node.id] = tombstone()

    def clone(self) -> "AST":
        return copy.deepcopy(self)

    # --- queries -----------------------------------------------------------

    def depth(self, node: ASTNode) -> int:
        """0 for the root, otherwise one more than the parent's depth."""
        depth = 0
        current = node
        while current.parent_id != ROOT_PARENT:
            if depth > len(self.nodes):
                raise ArenaInvariantError(f"parent cycle reached from node {node.id}")
            parent = self.node(current.parent_id)
            if not parent.is_live:
                raise ArenaInvariantError(f"node {current.id} points at deleted parent {current.parent_id}")
            current = parent
            depth += 1
        return depth

    def find_node(self, line: int, offset: int) -> Optional[ASTNode]:
        """
        Return the innermost live node whose source span contains the cursor.

        Positions compare as `(line, offset)` pairs, so multi-line spans work.
        When two candidates share a depth the first in arena order wins.
        Nodes created by rewrites have no span and are never returned.
        """
        best: Optional[ASTNode] = None
        best_depth = -1
        for node in self.live_nodes():
            if not node.span.contains(line, offset):
                continue
            depth = self.depth(node)
            if depth > best_depth:
                best, best_depth = node, depth
        return best

    def validate(self) -> None:
        """Raise `ArenaInvariantError` if any live node breaks the arena invariants."""
        root = self.root
        if not root.is_live or not root.is_root:
            raise ArenaInvariantError(f"root {self.root_id} is not a live parentless node")
        for index, node in enumerate(self.nodes):
            if not node.is_live:
                continue
            if node.id != index:
                raise ArenaInvariantError(f"node at slot {index} carries id {node.id}")
            if node.is_root:
                if node.id != self.root_id:
                    raise ArenaInvariantError(f"node {node.id} is parentless but the root is {self.root_id}")
            else:
                parent = self.node(node.parent_id)
                if not parent.is_live:
                    raise ArenaInvariantError(f"node {node.id} points at deleted parent {node.parent_id}")
                if parent.children.count(node.id) != 1:
                    raise ArenaInvariantError(f"parent {parent.id} does not list child {node.id} exactly once")
            for child_id in node.children:
                child = self.node(child_id)
                if not child.is_live:
                    raise ArenaInvariantError(f"node {node.id} references deleted child {child_id}")
                if child.parent_id != node.id:
                    raise ArenaInvariantError(f"child {child_id} of {node.id} points at parent {child.parent_id}")
            self.depth(node)

    # --- projection --------------------------------------------------------

    def rebuild_view(self) -> None:
        self.view = build_view(self.nodes)


def _build(ast: AST, compound: Compound) -> int:
    """
    Fill `ast` from `compound` in pre-order and return the root id.

    Ids come out as a recursive pre-order walk would assign them; the walk
    itself uses an explicit stack so deep nesting cannot exhaust the
    interpreter's recursion limit.
    """
    root_id = ROOT_PARENT
    pending: List[Tuple[Expr, int]] = [(compound, ROOT_PARENT)]
    while pending:
        expr, parent_id = pending.pop()
        elements: Sequence[Expr] = ()
        if isinstance(expr, Token):
            node = ast.add_node(expr.text, parent_id, span=expr.span)
        elif not expr.items:
            node = ast.add_node(EMPTY_LIST, parent_id, span=expr.span)
        else:
            head = head_token(expr)
            if head in OPERATORS:
                # Operator compounds drop the head; it becomes the node token.
                node = ast.add_node(head, parent_id, span=expr.span)
                elements = expr.items[1:]
            else:
                # Plain lists keep every element, the head included.
                node = ast.add_node(LIST_MARKER, parent_id, span=expr.span)
                elements = expr.items

        if parent_id == ROOT_PARENT:
            root_id = node.id
        else:
            ast.node(parent_id).children.append(node.id)
        pending.extend((element, node.id) for element in reversed(elements))
    return root_id


def build_ast(compound: Compound) -> AST:
    """Turn a parsed compound into a fresh arena rooted at id 0."""
    ast = AST()
    ast.root_id = _build(ast, compound)
    ast.rebuild_view()
    return ast


def parse_formula(text: str) -> AST:
    """Parse formula text into an arena. Raises `ParseError` on malformed input."""
    return build_ast(parse_sexpr(text))
