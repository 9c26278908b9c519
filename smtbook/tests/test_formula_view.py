from __future__ import annotations

from smtbook.api.formula.arena import parse_formula
from smtbook.api.formula.rules import run_rule
from smtbook.api.formula.view import BREAK_MARK, graph_to_dot


def test_view_projects_live_nodes_and_edges():
    ast = parse_formula("(assert (> x 0))")
    labels = {node.id: node.label for node in ast.view.nodes}
    assert labels == {0: "(assert)", 1: "(>)", 2: "(x)", 3: "(0)"}
    assert [(edge.id, edge.source, edge.target) for edge in ast.view.edges] == [(0, 0, 1), (1, 1, 2), (2, 1, 3)]


def test_view_is_rebuilt_after_rewrites():
    ast = parse_formula("(assert (not (not p)))")
    _, squashed = run_rule("squashNegation", ast.node(1), ast)
    assert [node.id for node in squashed.view.nodes] == [0, 3]
    assert [(edge.source, edge.target) for edge in squashed.view.edges] == [(0, 3)]
    # The input arena keeps its own projection.
    assert len(ast.view.nodes) == 4


def test_view_labels_reflect_flags():
    ast = parse_formula("(and p q)")
    _, ast = run_rule("changeBreak", ast.node(1), ast)
    _, ast = run_rule("changeBracket", ast.node(2), ast)
    labels = {node.id: node.label for node in ast.view.nodes}
    assert labels[1] == "(p)" + BREAK_MARK
    assert labels[2] == "q"


def test_graph_to_dot():
    ast = parse_formula('(assert (= s "q"))')
    dot = graph_to_dot(ast.view)
    assert dot.startswith("digraph formula {")
    assert '  n0 [label="(assert)"];' in dot
    assert '  n3 [label="(\\"q\\")"];' in dot
    assert "  n0 -> n1;" in dot
    assert dot.endswith("}")
