#!/usr/bin/env python3
"""
`smtbook.api.formula` command-line interface.

This CLI is a thin host around the library:
- Parse a formula file and inspect its arena (`parse`, `find`, `dot`).
- Apply one rule at a cursor and append the generalized record to a rule
  stack file (`apply`). Cursor lines/offsets are 0-based.
- Replay a recorded stack over a batch file of blank-line separated formulas
  (`replay`).

Non-goals:
- Editor integration (selections, dialogs, command palettes) stays in the
  host editor; this CLI only exchanges text, cursor positions and stack files.

This is the entrypoint for `python -m smtbook.api.formula ...` (via `__main__.py`).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .arena import parse_formula
from .errors import FormulaError, StackFormatError
from .render import render
from .replay import replay_text
from .rules import RULES
from .session import STATUS_APPLIED, STATUS_NO_FOCUS, Session
from .stack import RuleStack, load_stack
from .view import graph_to_dot


# Text params are matched against tokens; `1` must stay the string "1".
_TEXT_PARAMS = frozenset(["source", "target"])


def _coerce(value: str) -> Any:
    """JSON-decode a `--param` value when possible (`true`, `1`), else keep the string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _load_params(args: argparse.Namespace) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for raw in getattr(args, "param", []) or []:
        if "=" not in raw:
            raise SystemExit(f"--param must be KEY=VALUE (got {raw!r})")
        key, value = raw.split("=", 1)
        if not key:
            raise SystemExit(f"--param key must be non-empty (got {raw!r})")
        params[key] = value if key in _TEXT_PARAMS else _coerce(value)
    return params


def _emit(text: str, out: Path | None) -> None:
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text if text.endswith("\n") else text + "\n")
        print(f"[+] wrote {out}")
    else:
        print(text)


def parse_command(args: argparse.Namespace) -> int:
    """`formula parse`: print the node table."""
    ast = parse_formula(args.path.read_text())
    if args.json:
        payload = {"root_id": ast.root_id, "nodes": [node.to_dict() for node in ast.nodes]}
        print(json.dumps(payload, indent=2))
        return 0
    for node in ast.live_nodes():
        indent = "  " * ast.depth(node)
        print(f"{node.id:4d} {indent}{node.token}")
    return 0


def find_command(args: argparse.Namespace) -> int:
    """`formula find`: print the node under a cursor."""
    ast = parse_formula(args.path.read_text())
    node = ast.find_node(args.line, args.offset)
    if node is None:
        print(f"[skip] no node at line {args.line}, offset {args.offset}")
        return 0
    print(json.dumps({**node.to_dict(), "depth": ast.depth(node), "text": render(ast, node)}, indent=2))
    return 0


def render_command(args: argparse.Namespace) -> int:
    """`formula render`: parse and re-render, optionally highlighting one node."""
    ast = parse_formula(args.path.read_text())
    _emit(render(ast, highlight_id=args.highlight), args.out)
    return 0


def dot_command(args: argparse.Namespace) -> int:
    """`formula dot`: Graphviz projection of the arena."""
    ast = parse_formula(args.path.read_text())
    _emit(graph_to_dot(ast.view), args.out)
    return 0


def apply_command(args: argparse.Namespace) -> int:
    """
    `formula apply`: one rule at a cursor.

    When `--stack` is given, the stack is loaded if it exists and the new
    record is appended to it; a no-op edit leaves the stack untouched.
    """
    stack = load_stack(args.stack) if args.stack and args.stack.exists() else RuleStack()
    session = Session(stack)
    result = session.apply_at(args.path.read_text(), args.line, args.offset, args.rule, _load_params(args))
    if result.status == STATUS_NO_FOCUS:
        print(f"[skip] nothing to do: no node at line {args.line}, offset {args.offset}")
        return 0
    if result.status != STATUS_APPLIED:
        print(f"[skip] nothing to do: {args.rule} does not change node {result.focus_id}")
        return 0
    print(f"[+] applied {args.rule} at node {result.focus_id} (condition: {result.record.condition})")
    if args.stack:
        session.save(args.stack)
        print(f"[+] recorded rule #{len(session.stack) - 1} in {args.stack}")
    _emit(result.text, args.out)
    return 0


def replay_command(args: argparse.Namespace) -> int:
    """`formula replay`: run a stack to fixpoint over every formula in a batch file."""
    if not args.stack.exists():
        raise StackFormatError(f"missing rule stack at {args.stack}")
    stack = load_stack(args.stack)
    rendered = replay_text(args.path.read_text(), stack, max_steps=args.max_steps)
    print(f"[+] replayed {len(stack)} rule(s) over {len(rendered)} formula(s)")
    _emit("\n\n".join(rendered), args.out)
    return 0


def _add_cursor(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--line", type=int, required=True, help="0-based cursor line")
    parser.add_argument("--offset", type=int, required=True, help="0-based cursor offset within the line")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="python -m smtbook.api.formula",
        description="Structural rewrites and rule replay for SMT-style formulas.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Print the node arena of a formula file.")
    p_parse.add_argument("path", type=Path)
    p_parse.add_argument("--json", action="store_true", help="Emit the full arena as JSON")
    p_parse.set_defaults(func=parse_command)

    p_find = sub.add_parser("find", help="Show the node under a cursor.")
    p_find.add_argument("path", type=Path)
    _add_cursor(p_find)
    p_find.set_defaults(func=find_command)

    p_render = sub.add_parser("render", help="Parse and re-render a formula file.")
    p_render.add_argument("path", type=Path)
    p_render.add_argument("--highlight", type=int, default=-1, help="Node id to wrap in highlight markup")
    p_render.add_argument("--out", type=Path, help="Output path (default: stdout)")
    p_render.set_defaults(func=render_command)

    p_dot = sub.add_parser("dot", help="Emit the arena as a Graphviz .dot graph.")
    p_dot.add_argument("path", type=Path)
    p_dot.add_argument("-o", "--out", type=Path, help="Output .dot path (default: stdout)")
    p_dot.set_defaults(func=dot_command)

    p_apply = sub.add_parser("apply", help="Apply one rule at a cursor and record it.")
    p_apply.add_argument("path", type=Path)
    _add_cursor(p_apply)
    p_apply.add_argument("--rule", required=True, choices=sorted(RULES))
    p_apply.add_argument("--param", action="append", default=[], help="Rule param KEY=VALUE (repeatable)")
    p_apply.add_argument("--stack", type=Path, help="Rule stack JSON to append the record to")
    p_apply.add_argument("--out", type=Path, help="Output path (default: stdout)")
    p_apply.set_defaults(func=apply_command)

    p_replay = sub.add_parser("replay", help="Replay a rule stack over blank-line separated formulas.")
    p_replay.add_argument("path", type=Path)
    p_replay.add_argument("--stack", type=Path, required=True)
    p_replay.add_argument("--max-steps", type=int, default=None, help="Step budget before giving up")
    p_replay.add_argument("--out", type=Path, help="Output path (default: stdout)")
    p_replay.set_defaults(func=replay_command)

    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except FormulaError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
