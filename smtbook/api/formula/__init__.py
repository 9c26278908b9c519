"""
Structural formula transformer for SMT-style S-expressions.

The pipeline is: text -> `sexpr` reader -> arena (`AST`) -> one rewrite rule
at a focus node -> generalized, replayable `RuleRecord` -> text. A recorded
`RuleStack` can later be replayed to fixpoint over a batch of formulas.

Scope / non-goals:
- This is a *structural* editing toolkit. It does not check sorts, solve, or
  claim semantic equivalence beyond what each shipped rule does.
- Only the parenthesized token-list grammar of `sexpr` is accepted.

Modules (functional groups):
- `sexpr`: positioned S-expression reader.
- `arena`: node arena, builder, cursor lookup, invariant checks.
- `rules`: rewrite rule catalog.
- `conditions`: serializable applicability conditions + generalizer.
- `stack`: rule records and JSON rule stacks.
- `replay`: fixpoint replay and batch splitting.
- `render`: arena -> text.
- `view`: visualization projection and Graphviz output.
- `session`: apply-at-cursor and record (host-facing).
- `cli`: `python -m smtbook.api.formula ...`.

Preferred imports:
- `from smtbook.api.formula import parse_formula, apply_rule, replay, render`
"""

from __future__ import annotations

from . import arena as arena  # noqa: F401
from . import conditions as conditions  # noqa: F401
from . import rules as rules  # noqa: F401
from . import sexpr as sexpr  # noqa: F401
from . import stack as stack  # noqa: F401
from . import view as view  # noqa: F401

from .arena import AST, build_ast, parse_formula  # noqa: F401
from .conditions import (  # noqa: F401
    AlwaysTrue,
    And,
    DepthEquals,
    FlagEquals,
    TokenEquals,
    condition_from_dict,
    generalize,
)
from .errors import (  # noqa: F401
    ArenaInvariantError,
    ConditionFormatError,
    FormulaError,
    MalformedInput,
    ParseError,
    ReplayLimitExceeded,
    RewriteError,
    RuleParamsError,
    StackFormatError,
    UnknownRuleError,
    UnsupportedReorder,
)
from .model import ASTNode  # noqa: F401
from .render import render  # noqa: F401
from .replay import replay, replay_text, split_formulas  # noqa: F401
from .rules import RULES, run_rule  # noqa: F401
from .session import ApplyOutcome, EditResult, Session, apply_rule  # noqa: F401
from .stack import RuleRecord, RuleStack, load_stack, save_stack  # noqa: F401

__all__ = [
    # modules
    "arena",
    "conditions",
    "rules",
    "sexpr",
    "stack",
    "view",
    # arena
    "AST",
    "ASTNode",
    "build_ast",
    "parse_formula",
    # rules / conditions
    "RULES",
    "run_rule",
    "And",
    "AlwaysTrue",
    "DepthEquals",
    "FlagEquals",
    "TokenEquals",
    "condition_from_dict",
    "generalize",
    # stacks / replay
    "RuleRecord",
    "RuleStack",
    "load_stack",
    "save_stack",
    "replay",
    "replay_text",
    "split_formulas",
    # session / render
    "ApplyOutcome",
    "EditResult",
    "Session",
    "apply_rule",
    "render",
    # errors
    "ArenaInvariantError",
    "ConditionFormatError",
    "FormulaError",
    "MalformedInput",
    "ParseError",
    "ReplayLimitExceeded",
    "RewriteError",
    "RuleParamsError",
    "StackFormatError",
    "UnknownRuleError",
    "UnsupportedReorder",
]
