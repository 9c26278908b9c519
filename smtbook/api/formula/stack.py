"""
Recorded rules and rule stacks.

A `RuleRecord` is one replayable edit: the rule name, its params and the
condition derived from the concrete edit. A `RuleStack` is an ordered list of
records; order matters because replay runs each record to fixpoint before
moving on.

On disk a stack is a JSON array of `{"action", "params", "condition"}`
objects. Loading validates every record so replay never sees half-formed
input.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .conditions import ALWAYS, Condition, condition_from_dict
from .errors import ConditionFormatError, StackFormatError
from .rules import RULES


@dataclass(frozen=True)
class RuleRecord:
    action: str
    params: Dict[str, Any] = field(default_factory=dict)
    condition: Condition = ALWAYS

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "params": dict(self.params), "condition": self.condition.to_dict()}

    @classmethod
    def from_dict(cls, doc: Any) -> "RuleRecord":
        if not isinstance(doc, dict):
            raise StackFormatError(f"rule record must be a JSON object (got {doc!r})")
        action = doc.get("action")
        if action not in RULES:
            raise StackFormatError(f"rule record has unknown action {action!r}")
        params = doc.get("params", {})
        if not isinstance(params, dict):
            raise StackFormatError(f"rule record params must be a JSON object (got {params!r})")
        try:
            condition = condition_from_dict(doc.get("condition", {"kind": "always"}))
        except ConditionFormatError as exc:
            raise StackFormatError(f"rule record for {action!r} has a bad condition: {exc}") from exc
        return cls(action=action, params=dict(params), condition=condition)


class RuleStack:
    """Ordered, append-only list of recorded rules."""

    def __init__(self, records: Optional[Iterable[RuleRecord]] = None):
        self.records: List[RuleRecord] = list(records or [])

    def push(self, record: RuleRecord) -> None:
        self.records.append(record)

    def __iter__(self) -> Iterator[RuleRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> RuleRecord:
        return self.records[index]

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self.records]

    def to_json(self) -> str:
        return json.dumps(self.to_list(), indent=2)

    @classmethod
    def from_list(cls, doc: Any) -> "RuleStack":
        if not isinstance(doc, list):
            raise StackFormatError(f"rule stack must be a JSON array (got {type(doc).__name__})")
        return cls(RuleRecord.from_dict(entry) for entry in doc)

    @classmethod
    def from_json(cls, text: str) -> "RuleStack":
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StackFormatError(f"rule stack is not valid JSON: {exc}") from exc
        return cls.from_list(doc)


def save_stack(stack: RuleStack, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(stack.to_json() + "\n")


def load_stack(path: Path) -> RuleStack:
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise StackFormatError(f"missing rule stack at {path}") from exc
    return RuleStack.from_json(text)
