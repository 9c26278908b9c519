"""
Applicability conditions for recorded rules.

A condition is plain data (no code): a small closed set of predicate shapes
that can be evaluated against any `(node, ast)` pair and serialized into a
rule stack. `generalize` derives one from a single concrete edit so the same
rule can later be replayed on other nodes and other formulas.

Serialized shapes:
- `{"kind": "always"}`
- `{"kind": "token", "value": "<token>"}`
- `{"kind": "depth", "value": <int>}`
- `{"kind": "flag", "flag": "should_break" | "should_in_bracket", "value": <bool>}`
- `{"kind": "and", "left": <condition>, "right": <condition>}`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Union

from .errors import ConditionFormatError

if TYPE_CHECKING:
    from .arena import AST
    from .model import ASTNode

FLAGS = ("should_break", "should_in_bracket")


@dataclass(frozen=True)
class AlwaysTrue:
    def evaluate(self, node: "ASTNode", ast: "AST") -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "always"}

    def __str__(self) -> str:
        return "true"


@dataclass(frozen=True)
class TokenEquals:
    value: str

    def evaluate(self, node: "ASTNode", ast: "AST") -> bool:
        return node.token == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "token", "value": self.value}

    def __str__(self) -> str:
        return f"token == {self.value!r}"


@dataclass(frozen=True)
class DepthEquals:
    value: int

    def evaluate(self, node: "ASTNode", ast: "AST") -> bool:
        return ast.depth(node) == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "depth", "value": self.value}

    def __str__(self) -> str:
        return f"depth == {self.value}"


@dataclass(frozen=True)
class FlagEquals:
    flag: str
    value: bool

    def __post_init__(self) -> None:
        if self.flag not in FLAGS:
            raise ConditionFormatError(f"unknown node flag {self.flag!r} (expected one of {', '.join(FLAGS)})")

    def evaluate(self, node: "ASTNode", ast: "AST") -> bool:
        return getattr(node, self.flag) == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "flag", "flag": self.flag, "value": self.value}

    def __str__(self) -> str:
        return f"{self.flag} == {self.value}"


@dataclass(frozen=True)
class And:
    left: "Condition"
    right: "Condition"

    def evaluate(self, node: "ASTNode", ast: "AST") -> bool:
        return self.left.evaluate(node, ast) and self.right.evaluate(node, ast)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "and", "left": self.left.to_dict(), "right": self.right.to_dict()}

    def __str__(self) -> str:
        return f"{self.left} and {self.right}"


Condition = Union[AlwaysTrue, TokenEquals, DepthEquals, FlagEquals, And]

ALWAYS = AlwaysTrue()


def _require(doc: Mapping[str, Any], key: str) -> Any:
    if key not in doc:
        raise ConditionFormatError(f"condition {dict(doc)!r} is missing {key!r}")
    return doc[key]


def condition_from_dict(doc: Any) -> Condition:
    """Rebuild a condition from its serialized dict form."""
    if not isinstance(doc, Mapping):
        raise ConditionFormatError(f"condition must be a JSON object (got {doc!r})")
    kind = doc.get("kind")
    if kind == "always":
        return ALWAYS
    if kind == "token":
        value = _require(doc, "value")
        if not isinstance(value, str):
            raise ConditionFormatError(f"token condition value must be a string (got {value!r})")
        return TokenEquals(value)
    if kind == "depth":
        value = _require(doc, "value")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConditionFormatError(f"depth condition value must be an integer (got {value!r})")
        return DepthEquals(value)
    if kind == "flag":
        value = _require(doc, "value")
        if not isinstance(value, bool):
            raise ConditionFormatError(f"flag condition value must be a boolean (got {value!r})")
        return FlagEquals(str(_require(doc, "flag")), value)
    if kind == "and":
        return And(condition_from_dict(_require(doc, "left")), condition_from_dict(_require(doc, "right")))
    raise ConditionFormatError(f"unknown condition kind {kind!r}")


def generalize(action: str, node: "ASTNode", ast: "AST") -> Condition:
    """
    Derive the condition under which `action` should reapply elsewhere.

    `node` and `ast` are the focus and arena *before* the edit: flag
    conditions record the pre-toggle value, so replay only toggles nodes that
    still look like the one originally edited.
    """
    if action == "move":
        return TokenEquals(node.token)
    if action == "changeBreak":
        return And(DepthEquals(ast.depth(node)), FlagEquals("should_break", node.should_break))
    if action == "changeBracket":
        return And(DepthEquals(ast.depth(node)), FlagEquals("should_in_bracket", node.should_in_bracket))
    if action in ("squashNegation", "replace"):
        return ALWAYS
    return And(TokenEquals(node.token), DepthEquals(ast.depth(node)))
