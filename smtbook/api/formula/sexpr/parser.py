"""
Positioned S-expression reader for SMT-style formulas.

Design constraints:
- Treat the input as exactly one parenthesized compound; the outer parens
  belong to the root form.
- Preserve string literals and backslash escapes verbatim inside a single
  token so rendering can reproduce them byte for byte.
- Record exact `(line, offset)` ranges for every token and compound so a host
  can map a cursor position back to a node.
- Keep error handling simple and loud: a malformed formula must not quietly
  "parse" into a misleading structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..errors import ParseError
from .model import Compound, Expr, Span, Token


@dataclass(frozen=True)
class _Lexeme:
    kind: str  # "(", ")" or "atom"
    text: str
    span: Span


class _Scanner:
    """Character cursor that keeps line/offset bookkeeping in one place."""

    def __init__(self, text: str):
        self.text = text
        self.i = 0
        self.line = 0
        self.offset = 0

    def done(self) -> bool:
        return self.i >= len(self.text)

    def peek(self) -> str:
        return self.text[self.i]

    def take(self) -> str:
        ch = self.text[self.i]
        self.i += 1
        if ch == "\r" and not self.done() and self.text[self.i] == "\n":
            # CRLF is one line break; the LF carries the bookkeeping.
            self.offset += 1
            return ch
        if ch in ("\n", "\r"):
            self.line += 1
            self.offset = 0
        else:
            self.offset += 1
        return ch

    def position(self) -> Tuple[int, int]:
        return self.line, self.offset


def _is_delimiter(ch: str) -> bool:
    return ch.isspace() or ch in ("(", ")")


def _scan_string(scanner: _Scanner, parts: List[str]) -> Tuple[int, int]:
    """Consume a `"..."` literal (opening quote already peeked). Returns the closing quote position."""
    start = scanner.position()
    parts.append(scanner.take())
    while not scanner.done():
        last = scanner.position()
        ch = scanner.take()
        parts.append(ch)
        if ch == "\\":
            if scanner.done():
                break
            parts.append(scanner.take())
            continue
        if ch == '"':
            return last
    raise ParseError(f"unterminated string literal starting at line {start[0]}, offset {start[1]}")


def _tokenize(text: str) -> List[_Lexeme]:
    """Split formula text into `(`, `)` and atom lexemes with source spans."""
    scanner = _Scanner(text)
    lexemes: List[_Lexeme] = []

    while not scanner.done():
        ch = scanner.peek()

        if ch.isspace():
            scanner.take()
            continue

        if ch in ("(", ")"):
            line, offset = scanner.position()
            scanner.take()
            lexemes.append(_Lexeme(ch, ch, Span(line, offset, line, offset)))
            continue

        start = scanner.position()
        end = start
        parts: List[str] = []
        while not scanner.done() and not _is_delimiter(scanner.peek()):
            ch = scanner.peek()
            if ch == '"':
                end = _scan_string(scanner, parts)
                continue
            end = scanner.position()
            parts.append(scanner.take())
            if ch == "\\":
                if scanner.done():
                    raise ParseError(f"dangling escape at line {end[0]}, offset {end[1]}")
                end = scanner.position()
                parts.append(scanner.take())
        lexemes.append(_Lexeme("atom", "".join(parts), Span(start[0], start[1], end[0], end[1])))

    return lexemes


def _parse_compound(lexemes: Sequence[_Lexeme], idx: int) -> Tuple[Compound, int]:
    """
    Parse one compound starting at the `(` in `lexemes[idx]`; return `(compound, next_idx)`.

    Open compounds are kept on an explicit stack, so nesting depth is not
    bounded by the interpreter's recursion limit.
    """
    open_stack: List[Tuple[_Lexeme, List[Expr]]] = [(lexemes[idx], [])]
    idx += 1
    while idx < len(lexemes):
        lex = lexemes[idx]
        idx += 1
        if lex.kind == "(":
            open_stack.append((lex, []))
            continue
        if lex.kind == ")":
            opener, items = open_stack.pop()
            span = Span(opener.span.start_line, opener.span.start_offset, lex.span.end_line, lex.span.end_offset)
            compound = Compound(tuple(items), span)
            if not open_stack:
                return compound, idx
            open_stack[-1][1].append(compound)
            continue
        open_stack[-1][1].append(Token(lex.text, lex.span))

    span = open_stack[-1][0].span
    raise ParseError(f"unterminated compound opened at line {span.start_line}, offset {span.start_offset}")


def parse_sexpr(text: str) -> Compound:
    """
    Parse formula text into its single top-level compound.

    Raises `ParseError` when the text is empty, does not start with `(`,
    leaves a compound or string unterminated, or carries anything after the
    closing paren of the outer compound.
    """
    lexemes = _tokenize(text)
    if not lexemes:
        raise ParseError("empty input: expected a parenthesized formula")
    first = lexemes[0]
    if first.kind != "(":
        raise ParseError(f"unexpected {first.text!r} at the beginning: expected '('")
    compound, idx = _parse_compound(lexemes, 0)
    if idx != len(lexemes):
        extra = lexemes[idx]
        raise ParseError(
            f"unexpected {extra.text!r} after the formula at line {extra.span.start_line}, "
            f"offset {extra.span.start_offset}"
        )
    return compound


def head_token(expr: Expr) -> str | None:
    """
    Return the head symbol of a compound, e.g. `"assert"` for `(assert ...)`.

    Returns `None` for tokens, empty compounds, and compounds whose head is
    itself a compound.
    """
    if not isinstance(expr, Compound) or not expr.items:
        return None
    head = expr.items[0]
    return head.text if isinstance(head, Token) else None
