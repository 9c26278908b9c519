"""
`python -m smtbook.api.formula` entrypoint.

The CLI lives in `smtbook/api/formula/cli.py` so that importing the library
does not pull in argparse / command wiring.
"""

from __future__ import annotations

from . import cli


def main() -> int:
    """Delegate to `smtbook.api.formula.cli.main`."""
    return cli.main()


if __name__ == "__main__":
    raise SystemExit(main())
