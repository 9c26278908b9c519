from __future__ import annotations

import pytest

from smtbook.api.formula.arena import parse_formula
from smtbook.api.formula.conditions import ALWAYS, And, DepthEquals, FlagEquals, TokenEquals
from smtbook.api.formula.errors import ReplayLimitExceeded
from smtbook.api.formula.render import render
from smtbook.api.formula.replay import replay, replay_text, split_formulas
from smtbook.api.formula.stack import RuleRecord


SQUASH_THEN_MOVE = [
    RuleRecord("squashNegation", {}, ALWAYS),
    RuleRecord("move", {"direction": "l"}, TokenEquals("x")),
]


def test_replay_two_formulas_squashes_before_moving():
    first = parse_formula("(and (not (not y)) x)")
    second = parse_formula("(or z (not (< a b)) x)")
    assert render(replay(first, SQUASH_THEN_MOVE)) == "(and x y)"
    assert render(replay(second, SQUASH_THEN_MOVE)) == "(or x z (>= a b))"


def test_replay_order_matters():
    # Moving first finds `x` under a `not`, which does not tolerate reordering.
    ast = parse_formula("(and y (not (not x)))")
    assert render(replay(ast, SQUASH_THEN_MOVE)) == "(and x y)"
    assert render(replay(ast, list(reversed(SQUASH_THEN_MOVE)))) == "(and y x)"


def test_replay_reaches_fixpoint_for_nested_negations():
    ast = parse_formula("(assert (not (not (not (not (not (> p q)))))))")
    result = replay(ast, [RuleRecord("squashNegation")])
    assert render(result) == "(assert (<= p q))"
    result.validate()


def test_replay_does_not_mutate_input():
    ast = parse_formula("(and (not (not y)) x)")
    before = [node.to_dict() for node in ast.nodes]
    replay(ast, SQUASH_THEN_MOVE)
    assert [node.to_dict() for node in ast.nodes] == before


def test_replay_skips_candidates_that_cannot_be_reordered():
    ast = parse_formula("(and (- x y) (+ y x))")
    result = replay(ast, [RuleRecord("move", {"direction": "l"}, TokenEquals("x"))])
    assert render(result) == "(and (- x y) (+ x y))"


def test_replay_flag_toggles_only_matching_depth():
    ast = parse_formula("(assert (and (> x 0) (< y 1)))")
    record = RuleRecord("changeBreak", {}, And(DepthEquals(2), FlagEquals("should_break", False)))
    result = replay(ast, [record])
    assert [node.token for node in result.live_nodes() if node.should_break] == [">", "<"]


def test_replay_step_budget():
    ast = parse_formula("(= x y)")
    looping = RuleRecord("flipCmp", {}, And(TokenEquals("="), DepthEquals(0)))
    with pytest.raises(ReplayLimitExceeded, match="flipCmp"):
        replay(ast, [looping], max_steps=5)


def test_split_formulas_on_blank_lines():
    text = "(and p q)\n\n(or\n  r\n  s)\n \n\n\n(not t)\n"
    assert split_formulas(text) == ["(and p q)", "(or\n  r\n  s)", "(not t)"]
    assert split_formulas("\n\n") == []


def test_split_formulas_on_lone_cr_and_crlf():
    assert split_formulas("(a b)\r\r(c d)\r") == ["(a b)", "(c d)"]
    assert split_formulas("(a\r\n b)\r\n\r\n(c d)\r\n") == ["(a\r\n b)", "(c d)"]
    assert split_formulas("(a\r b)\r \r\n(c d)") == ["(a\r b)", "(c d)"]


def test_replay_text_on_cr_only_batch():
    text = "(and (not (not y)) x)\r\r(or z x)\r"
    assert replay_text(text, SQUASH_THEN_MOVE) == ["(and x y)", "(or x z)"]


def test_replay_text_renders_each_formula():
    text = "(and (not (not y)) x)\n\n(or z (not (< a b)) x)\n"
    assert replay_text(text, SQUASH_THEN_MOVE) == ["(and x y)", "(or x z (>= a b))"]
