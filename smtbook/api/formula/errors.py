"""
Error contract for `smtbook.api.formula`.

Callers get a small, predictable hierarchy rooted at `FormulaError` so a host
(CLI, editor plugin) can report failures without catching bare `Exception`.

"Rule did not match" is *not* an error: rules report `changed=False` for that.
Exceptions are reserved for bad input (unparseable text, malformed stacks,
bad rule params) and for requests the arena cannot honour (`UnsupportedReorder`).
"""

from __future__ import annotations


class FormulaError(Exception):
    """Base formula tooling error."""


class ParseError(FormulaError):
    """Raised when formula text is not one well-formed parenthesized compound."""


# Alternate name for the same condition, used by hosts that report
# "malformed input" rather than parse failures.
MalformedInput = ParseError


class ArenaInvariantError(FormulaError):
    """Raised when an arena breaks the parent/children or acyclicity invariants."""


class RewriteError(FormulaError):
    """Base error for rule application."""


class UnsupportedReorder(RewriteError):
    """Raised when `move` is requested under a parent that does not tolerate reordering."""


class RuleParamsError(RewriteError):
    """Raised when a rule is given missing or invalid params."""


class UnknownRuleError(RewriteError):
    """Raised when a rule name is not in the catalog."""


class ConditionFormatError(FormulaError):
    """Raised when a serialized condition cannot be turned back into a predicate."""


class StackFormatError(FormulaError):
    """Raised when a persisted rule stack is missing or malformed."""


class ReplayLimitExceeded(FormulaError):
    """Raised when replay does not reach a fixpoint within the step budget."""
