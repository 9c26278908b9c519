"""
Data model for the positioned S-expression reader used by `book`-style
formula tooling (`smtbook.api.formula.sexpr`).

The reader output is deliberately flat and dumb:
- `Token` is one atom (symbol, escaped pair run, or string literal) with the
  exact source range it came from.
- `Compound` is one parenthesized list of tokens/compounds, also with a range.

There are no tree semantics here (no operators, no parents). The arena builder
in `smtbook.api.formula.arena` owns that layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Span:
    """
    A source range. Lines and offsets are 0-based and both ends are inclusive.

    `end_line/end_offset` point at the last character of the range, not one
    past it. Offsets restart at 0 on every new line.
    """

    start_line: int
    start_offset: int
    end_line: int
    end_offset: int

    @property
    def known(self) -> bool:
        return self.start_line >= 0

    def contains(self, line: int, offset: int) -> bool:
        if not self.known:
            return False
        point = (line, offset)
        return (self.start_line, self.start_offset) <= point <= (self.end_line, self.end_offset)


NO_SPAN = Span(-1, -1, -1, -1)


@dataclass(frozen=True)
class Token:
    """An atom, e.g. `x`, `>=`, `a\\ b` or `"hello world"` (quotes kept)."""

    text: str
    span: Span


@dataclass(frozen=True)
class Compound:
    """A parenthesized list form, e.g. `(assert (> x 0))`."""

    items: Tuple["Expr", ...]
    span: Span


Expr = Union[Token, Compound]
