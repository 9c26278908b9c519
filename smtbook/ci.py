#!/usr/bin/env python3
"""
Test driver for smtbook.

Runs the pytest suite from the repo root with the tree on PYTHONPATH.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent            # smtbook/
REPO_ROOT = ROOT.parent                           # repo root


def run_python_harness(extra: list[str]) -> None:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO_ROOT)
    cmd = [sys.executable, "-m", "pytest", *extra]
    print(f"[ci] python-harness: running {' '.join(cmd)}", flush=True)
    subprocess.check_call(cmd, cwd=REPO_ROOT, env=env)


def main() -> None:
    run_python_harness(sys.argv[1:])


if __name__ == "__main__":
    main()
