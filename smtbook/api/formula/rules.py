"""
Rewrite rule catalog.

Every rule has the same shape:

    rule(focus, ast, params, condition) -> (changed, result_ast)

and the same discipline:
1. clone the arena up front (the caller's AST is never touched),
2. resolve the focus by id in the clone and evaluate `condition` there,
3. mutate the clone only when the condition holds and the structure matches,
4. rebuild the view before returning a changed clone,
5. otherwise return `(False, clone)`.

`changed=False` means "nothing to apply here"; it is the normal outcome for a
rule that does not match, not a failure.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .arena import AST
from .conditions import ALWAYS, Condition
from .errors import RuleParamsError, UnknownRuleError, UnsupportedReorder
from .model import LIST_MARKER, ROOT_PARENT, ASTNode

RuleResult = Tuple[bool, AST]
Rule = Callable[[ASTNode, AST, Mapping[str, Any], Condition], RuleResult]

# Parents whose operands may be reordered without changing meaning.
REORDERABLE = frozenset(["+", "*", "=", "and", "or"])

# Negation pushed into a comparison: (not (< a b)) == (>= a b).
NEGATED_CMP = {"<": ">=", ">": "<="}

# Token a comparison takes once its two operands are swapped.
FLIPPED_CMP = {"=": "=", "<": ">=", ">": "<=", ">=": "<", "<=": ">"}


def _focus(node: ASTNode, ast: AST) -> Tuple[AST, ASTNode]:
    cloned = ast.clone()
    return cloned, cloned.node(node.id)


def _replace_in_parent(ast: AST, old: ASTNode, new: ASTNode) -> None:
    """Put `new` where `old` hangs: same parent slot, or the root."""
    new.parent_id = old.parent_id
    if old.parent_id == ROOT_PARENT:
        ast.root_id = new.id
        return
    parent = ast.node(old.parent_id)
    parent.children[parent.children.index(old.id)] = new.id


def squash_negation(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    """
    Collapse a `not` into what it negates.

    `(not (not p))` becomes `p`; `(not (< a b))` becomes `(>= a b)` and
    `(not (> a b))` becomes `(<= a b)`. Other shapes are left alone.
    """
    cloned, focus = _focus(node, ast)
    if focus.token != "not" or not focus.children:
        return False, cloned
    if not condition.evaluate(focus, cloned):
        return False, cloned

    child = cloned.node(focus.children[0])
    if child.token == "not":
        if not child.children:
            return False, cloned
        grandchild = cloned.node(child.children[0])
        _replace_in_parent(cloned, focus, grandchild)
        cloned.delete(focus)
        cloned.delete(child)
    elif child.token in NEGATED_CMP:
        child.token = NEGATED_CMP[child.token]
        _replace_in_parent(cloned, focus, child)
        cloned.delete(focus)
    else:
        return False, cloned

    cloned.rebuild_view()
    return True, cloned


def move(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    """
    Swap the focus with its left (`direction="l"`) or right (`"r"`) sibling.

    E.g. moving `z` left in `(+ x y z)` gives `(+ x z y)`. Moving past either
    end is a no-op.
    """
    direction = params.get("direction")
    if direction not in ("l", "r"):
        raise RuleParamsError(f"move needs params.direction 'l' or 'r' (got {direction!r})")

    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned

    parent = cloned.parent(focus)
    if parent is None or parent.token not in REORDERABLE:
        where = "the root" if parent is None else f"{parent.token!r}"
        raise UnsupportedReorder(f"cannot reorder {focus.token!r} under {where}; only {sorted(REORDERABLE)} allow it")

    siblings = parent.children
    position = siblings.index(focus.id)
    target = position - 1 if direction == "l" else position + 1
    if target < 0 or target >= len(siblings):
        return False, cloned

    siblings[position], siblings[target] = siblings[target], siblings[position]
    cloned.rebuild_view()
    return True, cloned


def flip_cmp(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    """
    Swap the operands of a binary comparison and adjust the operator.

    E.g. `(> x y)` becomes `(<= y x)`. The node keeps its id, parent and flags.
    """
    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned
    if focus.token not in FLIPPED_CMP or len(focus.children) != 2:
        return False, cloned

    focus.token = FLIPPED_CMP[focus.token]
    focus.children = [focus.children[1], focus.children[0]]
    cloned.rebuild_view()
    return True, cloned


def to_imp(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    """
    Rewrite one branch of a disjunction as an implication premise.

    `(or p q r)` with focus `p` becomes `(=> (not p) (or q r))`. The `or`
    slot is overwritten in place with the `=>`, so the rewritten node keeps
    its id.
    """
    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned
    parent = cloned.parent(focus)
    if parent is None or parent.token != "or":
        return False, cloned

    head = cloned.add_node("not", parent.id, [focus.id])
    focus.parent_id = head.id

    tail = cloned.add_node("or", parent.id)
    for child_id in parent.children:
        if child_id != focus.id:
            cloned.node(child_id).parent_id = tail.id
            tail.children.append(child_id)

    parent.token = "=>"
    parent.children = [head.id, tail.id]
    cloned.rebuild_view()
    return True, cloned


def replace(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    """
    Substitute `params.source` with `params.target` in every live token.

    The substitution is AST-wide, not scoped to the focus. With
    `params.regex` the source is a regular expression and the target may use
    group references. `params.count` caps substitutions per token: 1 (the
    default) rewrites the first occurrence, 0 rewrites all of them.
    Raises `RuleParamsError` if a token would become empty, or if an operator
    would become the plain-list marker and silently vanish from the output.
    """
    source = params.get("source")
    target = params.get("target")
    if not isinstance(source, str) or not source:
        raise RuleParamsError(f"replace needs a non-empty params.source (got {source!r})")
    if not isinstance(target, str):
        raise RuleParamsError(f"replace needs a string params.target (got {target!r})")
    count = params.get("count", 1)
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise RuleParamsError(f"replace params.count must be a non-negative integer (got {count!r})")

    if params.get("regex"):
        try:
            pattern = re.compile(source)
        except re.error as exc:
            raise RuleParamsError(f"replace params.source is not a valid regex: {exc}") from exc
    else:
        pattern = re.compile(re.escape(source))
        target = target.replace("\\", "\\\\")

    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned

    changed = False
    for live in cloned.live_nodes():
        if live.is_plain_list:
            continue
        updated = pattern.sub(target, live.token, count=count)
        if not updated or (live.children and updated == LIST_MARKER):
            raise RuleParamsError(
                f"replace would turn node {live.id} token {live.token!r} into {updated!r}; "
                f"empty tokens and {LIST_MARKER!r} on compound nodes are reserved"
            )
        if updated != live.token:
            live.token = updated
            changed = True

    if changed:
        cloned.rebuild_view()
    return changed, cloned


def change_break(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned
    focus.should_break = not focus.should_break
    cloned.rebuild_view()
    return True, cloned


def change_bracket(node: ASTNode, ast: AST, params: Mapping[str, Any], condition: Condition) -> RuleResult:
    cloned, focus = _focus(node, ast)
    if not condition.evaluate(focus, cloned):
        return False, cloned
    focus.should_in_bracket = not focus.should_in_bracket
    cloned.rebuild_view()
    return True, cloned


RULES: Dict[str, Rule] = {
    "squashNegation": squash_negation,
    "move": move,
    "flipCmp": flip_cmp,
    "toImp": to_imp,
    "replace": replace,
    "changeBreak": change_break,
    "changeBracket": change_bracket,
}


def get_rule(action: str) -> Rule:
    try:
        return RULES[action]
    except KeyError:
        raise UnknownRuleError(f"unknown rule {action!r} (known: {', '.join(sorted(RULES))})") from None


def run_rule(
    action: str,
    node: ASTNode,
    ast: AST,
    params: Optional[Mapping[str, Any]] = None,
    condition: Condition = ALWAYS,
) -> RuleResult:
    """Look up `action` in the catalog and apply it to `node`."""
    return get_rule(action)(node, ast, params or {}, condition)
