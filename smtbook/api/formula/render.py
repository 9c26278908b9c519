"""
Render an arena subtree back to formula text.

Parenthesization, line breaks and indentation are re-derived from node flags
(`should_in_bracket`, `should_break`), not from the original source text.
"""

from __future__ import annotations

import os
from typing import Dict, List, Optional, Tuple

from .arena import AST
from .model import OPERATORS, ASTNode

INDENT_UNIT = os.environ.get("SMTBOOK_INDENT", "\t")

HIGHLIGHT_OPEN = '<span class="highlighted">'
HIGHLIGHT_CLOSE = "</span>"

NO_HIGHLIGHT = -1


def render(
    ast: AST,
    node: Optional[ASTNode] = None,
    highlight_id: int = NO_HIGHLIGHT,
    *,
    indent: Optional[str] = None,
) -> str:
    """
    Render `node` (default: the root) and its subtree.

    Pass a `highlight_id` that matches a live node to wrap that node's text in
    highlight markup; the default (-1) matches nothing.
    """
    unit = INDENT_UNIT if indent is None else indent
    return _render(ast, ast.root if node is None else node, highlight_id, unit)


def _render(ast: AST, top: ASTNode, highlight_id: int, unit: str) -> str:
    """Post-order walk with an explicit stack; children finish before their parent."""
    finished: Dict[int, str] = {}
    pending: List[Tuple[ASTNode, bool]] = [(top, False)]
    while pending:
        node, expanded = pending.pop()
        if node.children and not expanded:
            pending.append((node, True))
            pending.extend((ast.node(child_id), False) for child_id in reversed(node.children))
            continue
        parts = [finished.pop(child_id) for child_id in node.children]
        finished[node.id] = _render_node(ast, node, parts, highlight_id, unit)
    return finished[top.id]


def _render_node(ast: AST, node: ASTNode, parts: List[str], highlight_id: int, unit: str) -> str:
    # The root keeps its parens even with a single element so the text reparses.
    at_root = node.id == ast.root_id and node.should_in_bracket
    if not node.children:
        result = node.token
        if at_root and node.token in OPERATORS:
            result = f"({result})"
    else:
        elements = parts if node.is_plain_list else [node.token, *parts]
        result = " ".join(elements)
        if node.should_in_bracket and (len(elements) != 1 or at_root):
            result = f"({result})"

    if node.id == highlight_id:
        result = f"{HIGHLIGHT_OPEN}{result}{HIGHLIGHT_CLOSE}"

    if node.should_break:
        result = "\n" + unit * ast.depth(node) + result

    return result
