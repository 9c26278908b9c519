from __future__ import annotations

import pytest

from smtbook.api.formula.arena import AST, parse_formula
from smtbook.api.formula.errors import ArenaInvariantError, ParseError
from smtbook.api.formula.model import EMPTY_LIST, LIST_MARKER, TOMBSTONE_ID, TOMBSTONE_TOKEN


def _tokens(ast: AST) -> list[str]:
    return [node.token for node in ast.nodes]


def test_operator_compound_drops_head_from_children():
    ast = parse_formula("(assert (> x 0))")
    assert _tokens(ast) == ["assert", ">", "x", "0"]
    assert ast.root_id == 0
    assert ast.node(0).children == [1]
    assert ast.node(1).children == [2, 3]
    assert ast.node(2).parent_id == 1
    assert ast.node(0).parent_id == -1


def test_plain_list_keeps_every_element():
    ast = parse_formula("(f x y)")
    root = ast.root
    assert root.token == LIST_MARKER
    assert [ast.node(child).token for child in root.children] == ["f", "x", "y"]


def test_plain_list_with_compound_head():
    ast = parse_formula("((a b) c)")
    root = ast.root
    assert root.token == LIST_MARKER
    inner, leaf = (ast.node(child) for child in root.children)
    assert inner.token == LIST_MARKER
    assert [ast.node(child).token for child in inner.children] == ["a", "b"]
    assert leaf.token == "c"


def test_empty_compound_is_a_leaf():
    ast = parse_formula("(declare-fun c () Int)")
    assert [ast.node(child).token for child in ast.root.children] == ["declare-fun", "c", EMPTY_LIST, "Int"]


def test_parse_formula_propagates_parse_errors():
    with pytest.raises(ParseError):
        parse_formula("(and p")


def test_depth():
    ast = parse_formula("(assert (and p (not q)))")
    depths = {node.token: ast.depth(node) for node in ast.nodes}
    assert depths == {"assert": 0, "and": 1, "p": 2, "not": 2, "q": 3}


def test_depth_detects_parent_cycle():
    ast = parse_formula("(and p q)")
    ast.node(0).parent_id = 1
    with pytest.raises(ArenaInvariantError):
        ast.depth(ast.node(2))


def test_find_node_returns_innermost_match():
    ast = parse_formula("(assert (> x 0))")
    assert ast.find_node(0, 11).token == "x"
    assert ast.find_node(0, 9).token == ">"
    assert ast.find_node(0, 14).token == ">"
    assert ast.find_node(0, 2).token == "assert"
    assert ast.find_node(0, 7).token == "assert"


def test_find_node_outside_every_span():
    ast = parse_formula("(assert (> x 0))")
    assert ast.find_node(0, 16) is None
    assert ast.find_node(3, 0) is None


def test_find_node_compares_positions_across_lines():
    ast = parse_formula("(and\n  (> x 1)\n  q)")
    assert ast.find_node(1, 5).token == "x"
    assert ast.find_node(1, 0).token == "and"
    assert ast.find_node(2, 2).token == "q"
    # Past the `(> x 1)` compound but still inside the multi-line root.
    assert ast.find_node(1, 9).token == "and"


def test_delete_puts_tombstone_without_rewiring():
    ast = parse_formula("(not (not p))")
    ast.delete(ast.node(1))
    slot = ast.nodes[1]
    assert slot.id == TOMBSTONE_ID
    assert slot.token == TOMBSTONE_TOKEN
    assert not slot.is_live
    assert len(ast.nodes) == 3
    assert ast.node(0).children == [1]
    assert [node.id for node in ast.live_nodes()] == [0, 2]


def test_validate_accepts_fresh_arena():
    parse_formula("(assert (=> (and p q) (or (not r) (> x 0))))").validate()


def test_validate_rejects_dangling_child():
    ast = parse_formula("(not (not p))")
    ast.delete(ast.node(1))
    with pytest.raises(ArenaInvariantError):
        ast.validate()


def test_validate_rejects_duplicate_child_reference():
    ast = parse_formula("(and p q)")
    ast.node(0).children.append(1)
    with pytest.raises(ArenaInvariantError):
        ast.validate()


def test_clone_is_independent():
    ast = parse_formula("(and p q)")
    cloned = ast.clone()
    cloned.node(1).token = "r"
    cloned.node(0).children.reverse()
    assert ast.node(1).token == "p"
    assert ast.node(0).children == [1, 2]


def test_node_lookup_outside_arena():
    ast = parse_formula("(and p q)")
    with pytest.raises(ArenaInvariantError):
        ast.node(7)


def test_builder_assigns_preorder_ids():
    ast = parse_formula("(and (or a (not b)) ((f x) y) c)")
    assert _tokens(ast) == ["and", "or", "a", "not", "b", LIST_MARKER, LIST_MARKER, "f", "x", "y", "c"]
    assert ast.node(0).children == [1, 5, 10]
    assert ast.node(5).children == [6, 9]
    assert ast.node(6).children == [7, 8]
    ast.validate()


def test_deeply_nested_formula_builds():
    depth = 5000
    ast = parse_formula("(not " * depth + "p" + ")" * depth)
    assert len(ast.nodes) == depth + 1
    leaf = ast.nodes[-1]
    assert leaf.token == "p"
    assert leaf.parent_id == depth - 1
    assert ast.depth(leaf) == depth
    assert len(ast.view.edges) == depth
