"""
Fixpoint replay of a recorded rule stack.

For each record, in order: scan the live nodes of the current arena; the first
node whose application reports a change replaces the working arena and the
scan restarts for the *same* record. Only a full scan without any change
advances to the next record.

Nothing structural guarantees termination (`flipCmp` on `=` matches itself
forever), so every successful application counts against a step budget and
replay raises `ReplayLimitExceeded` instead of spinning.
"""

from __future__ import annotations

import os
import re
from typing import Iterable, List

from .arena import AST, parse_formula
from .errors import ReplayLimitExceeded, UnsupportedReorder
from .render import render
from .rules import get_rule
from .stack import RuleRecord

try:
    MAX_STEPS = int(os.environ.get("SMTBOOK_REPLAY_MAX_STEPS", "10000"))
except ValueError:
    MAX_STEPS = 10000

_LINE_BREAK = r"(?:\r\n|\r(?!\n)|\n)"
_BLANK_LINES = re.compile(rf"{_LINE_BREAK}[ \t]*{_LINE_BREAK}(?:[ \t]*{_LINE_BREAK})*")


def _apply_once(ast: AST, record: RuleRecord) -> tuple[bool, AST]:
    rule = get_rule(record.action)
    for node in list(ast.live_nodes()):
        try:
            changed, result = rule(node, ast, record.params, record.condition)
        except UnsupportedReorder:
            # The recorded move was legal where it was made; here it is not.
            continue
        if changed:
            return True, result
    return False, ast


def replay(ast: AST, stack: Iterable[RuleRecord], max_steps: int | None = None) -> AST:
    """Apply every record of `stack` to fixpoint, in order. `ast` is not mutated."""
    budget = MAX_STEPS if max_steps is None else max_steps
    steps = 0
    current = ast
    for index, record in enumerate(stack):
        while True:
            changed, current = _apply_once(current, record)
            if not changed:
                break
            steps += 1
            if steps > budget:
                raise ReplayLimitExceeded(
                    f"rule #{index} ({record.action}, condition: {record.condition}) "
                    f"did not reach a fixpoint within {budget} steps"
                )
    return current


def split_formulas(text: str) -> List[str]:
    """Split batch input on blank lines; empty chunks are dropped."""
    return [chunk.strip() for chunk in _BLANK_LINES.split(text) if chunk.strip()]


def replay_text(text: str, stack: Iterable[RuleRecord], max_steps: int | None = None) -> List[str]:
    """Parse each formula of a batch independently, replay `stack`, render the results."""
    records = list(stack)
    return [render(replay(parse_formula(chunk), records, max_steps)) for chunk in split_formulas(text)]
