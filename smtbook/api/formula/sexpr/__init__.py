"""
Positioned S-expression reader (host-neutral).

`parse_sexpr` turns formula text into nested `Token`/`Compound` values that
carry source spans. No operator knowledge lives here.
"""

from __future__ import annotations

from .model import NO_SPAN, Compound, Expr, Span, Token  # noqa: F401
from .parser import head_token, parse_sexpr  # noqa: F401

__all__ = ["NO_SPAN", "Compound", "Expr", "Span", "Token", "head_token", "parse_sexpr"]
