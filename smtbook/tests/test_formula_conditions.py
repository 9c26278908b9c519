from __future__ import annotations

import json

import pytest

from smtbook.api.formula.arena import parse_formula
from smtbook.api.formula.conditions import (
    ALWAYS,
    AlwaysTrue,
    And,
    DepthEquals,
    FlagEquals,
    TokenEquals,
    condition_from_dict,
    generalize,
)
from smtbook.api.formula.errors import ConditionFormatError


def _node(ast, token):
    return next(node for node in ast.live_nodes() if node.token == token)


def test_generalize_move_is_token_equality():
    ast = parse_formula("(+ x y z)")
    assert generalize("move", _node(ast, "z"), ast) == TokenEquals("z")


def test_generalize_flags_record_depth_and_current_value():
    ast = parse_formula("(assert (and p q))")
    node = _node(ast, "and")
    assert generalize("changeBreak", node, ast) == And(DepthEquals(1), FlagEquals("should_break", False))
    assert generalize("changeBracket", node, ast) == And(DepthEquals(1), FlagEquals("should_in_bracket", True))


@pytest.mark.parametrize("action", ["squashNegation", "replace"])
def test_generalize_always_true(action):
    ast = parse_formula("(not (not p))")
    assert generalize(action, ast.root, ast) == ALWAYS


@pytest.mark.parametrize("action", ["flipCmp", "toImp", "somethingElse"])
def test_generalize_default_is_token_and_depth(action):
    ast = parse_formula("(assert (or p (> x y)))")
    node = _node(ast, ">")
    assert generalize(action, node, ast) == And(TokenEquals(">"), DepthEquals(2))


def test_evaluate_against_other_nodes():
    ast = parse_formula("(and (> x y) (or (> a b)))")
    first, second = [node for node in ast.live_nodes() if node.token == ">"]
    condition = And(TokenEquals(">"), DepthEquals(1))
    assert condition.evaluate(first, ast)
    assert not condition.evaluate(second, ast)
    assert FlagEquals("should_in_bracket", True).evaluate(second, ast)
    assert not FlagEquals("should_break", True).evaluate(second, ast)
    assert AlwaysTrue().evaluate(second, ast)


def test_serialized_conditions_rebuild_equal_predicates():
    condition = And(DepthEquals(3), And(TokenEquals("x"), FlagEquals("should_break", False)))
    doc = json.loads(json.dumps(condition.to_dict()))
    assert doc["kind"] == "and"
    assert condition_from_dict(doc) == condition
    assert condition_from_dict({"kind": "always"}) is ALWAYS


def test_condition_str_is_readable():
    condition = And(TokenEquals("x"), DepthEquals(2))
    assert str(condition) == "token == 'x' and depth == 2"


@pytest.mark.parametrize(
    "doc",
    [
        None,
        [],
        {},
        {"kind": "eval", "code": "True"},
        {"kind": "token"},
        {"kind": "token", "value": 3},
        {"kind": "depth", "value": "2"},
        {"kind": "depth", "value": True},
        {"kind": "flag", "flag": "should_break", "value": 1},
        {"kind": "flag", "flag": "hidden", "value": True},
        {"kind": "and", "left": {"kind": "always"}},
    ],
)
def test_malformed_conditions_raise(doc):
    with pytest.raises(ConditionFormatError):
        condition_from_dict(doc)
