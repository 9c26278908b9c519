"""
Arena node shapes for `smtbook.api.formula`.

Node identity *is* the arena index: `ASTNode.id` is assigned once, as the arena
length at creation time, and never reused. Deleted slots hold a tombstone so
that every other id stays valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .sexpr.model import NO_SPAN, Span

ROOT_PARENT = -1
TOMBSTONE_ID = -100
TOMBSTONE_TOKEN = "null-node"

# Token given to plain-list nodes (compounds whose head is not an operator).
# The renderer never prints it.
LIST_MARKER = "list"

# Token given to an empty compound `()`; it renders as itself.
EMPTY_LIST = "()"

OPERATORS = frozenset(
    [
        "+", "-", "*", "/",
        ">", "<", ">=", "<=", "=",
        "and", "or", "not", "=>",
        "assert",
        "declare-datatypes",
        "forall", "exists", "define",
        "select", "store",
    ]
)


@dataclass
class ASTNode:
    """One arena slot: a head symbol (or leaf text) plus parent/children ids."""

    id: int
    token: str
    parent_id: int = ROOT_PARENT
    children: List[int] = field(default_factory=list)
    should_break: bool = False
    should_in_bracket: bool = True
    span: Span = NO_SPAN

    @property
    def is_live(self) -> bool:
        return self.id != TOMBSTONE_ID

    @property
    def is_root(self) -> bool:
        return self.parent_id == ROOT_PARENT

    @property
    def is_plain_list(self) -> bool:
        return self.token == LIST_MARKER and bool(self.children)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "token": self.token,
            "parent_id": self.parent_id,
            "children": list(self.children),
            "should_break": self.should_break,
            "should_in_bracket": self.should_in_bracket,
            "span": [self.span.start_line, self.span.start_offset, self.span.end_line, self.span.end_offset],
        }


def tombstone() -> ASTNode:
    """Return a fresh tombstone slot value."""
    return ASTNode(TOMBSTONE_ID, TOMBSTONE_TOKEN, TOMBSTONE_ID, [])
