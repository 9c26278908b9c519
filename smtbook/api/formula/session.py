"""
Editing session: apply one rule at a cursor and record it for replay.

This is the host-facing loop of the tool. A host hands over the whole formula
text and a cursor; the session parses it, finds the node under the cursor,
applies the rule, and (only when something changed) records the rule with a
condition generalized from that edit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .arena import AST, parse_formula
from .conditions import ALWAYS, generalize
from .model import ASTNode
from .render import render
from .rules import run_rule
from .stack import RuleRecord, RuleStack, load_stack, save_stack

STATUS_APPLIED = "applied"
STATUS_UNCHANGED = "unchanged"
STATUS_NO_FOCUS = "no_focus"


@dataclass
class ApplyOutcome:
    changed: bool
    ast: AST
    record: Optional[RuleRecord] = None


@dataclass
class EditResult:
    """What a host needs after one edit: the new text plus what happened."""

    status: str
    text: str
    focus_id: Optional[int] = None
    record: Optional[RuleRecord] = None

    @property
    def changed(self) -> bool:
        return self.status == STATUS_APPLIED


def apply_rule(action: str, focus: ASTNode, ast: AST, params: Optional[Mapping[str, Any]] = None) -> ApplyOutcome:
    """
    Apply `action` to `focus` unconditionally and derive its replay record.

    The condition is generalized from the *pre-edit* arena. No record is
    produced when the rule did not change anything.
    """
    params = dict(params or {})
    changed, result = run_rule(action, focus, ast, params, ALWAYS)
    if not changed:
        return ApplyOutcome(False, result)
    record = RuleRecord(action=action, params=params, condition=generalize(action, focus, ast))
    return ApplyOutcome(True, result, record)


class Session:
    """Holds the rule stack recorded across edits of one document."""

    def __init__(self, stack: Optional[RuleStack] = None):
        self.stack = stack if stack is not None else RuleStack()

    def apply_at(
        self,
        text: str,
        line: int,
        offset: int,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> EditResult:
        """
        Parse `text`, apply `action` at the cursor and return the re-rendered text.

        A cursor that maps to no node is "nothing to do": the original text
        comes back with status `no_focus`.
        """
        ast = parse_formula(text)
        focus = ast.find_node(line, offset)
        if focus is None:
            return EditResult(STATUS_NO_FOCUS, text)
        outcome = apply_rule(action, focus, ast, params)
        if not outcome.changed:
            return EditResult(STATUS_UNCHANGED, text, focus.id)
        self.stack.push(outcome.record)
        return EditResult(STATUS_APPLIED, render(outcome.ast), focus.id, outcome.record)

    def save(self, path: Path) -> None:
        save_stack(self.stack, path)

    @classmethod
    def load(cls, path: Path) -> "Session":
        return cls(load_stack(path))
