#!/usr/bin/env python3
# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI checks locally: formatting, lint, tests, docs and packaging."""

import argparse
import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("Tests", ["uv", "run", "--extra", "test", "pytest", "--cov=apimodel", "--cov-report=term-missing"]),
    ("Docs", ["uv", "run", "--extra", "docs", "sphinx-build", "-q", "-b", "html", "docs/sphinx", "build/docs"]),
    ("Build", ["uv", "build"]),
]


def main() -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run the APIModel CI checks locally.")
    parser.add_argument("--only", action="append", metavar="STEP", help="Run only the named step (repeatable)")
    args = parser.parse_args()

    selected = [(name, cmd) for name, cmd in STEPS if not args.only or name in args.only]
    results = [_run_step(name, cmd) for name, cmd in selected]

    sep = chalk.blue("=" * 60)
    print(f"\n{sep}\n{chalk.blue('  Summary')}\n{sep}")
    for name, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################

_REPO_ROOT = Path(__file__).resolve().parent.parent


def _run_step(name: str, cmd: list[str]) -> tuple[str, bool, float]:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}\n{chalk.blue(name)}\n{sep}")
    start = time.monotonic()
    proc = subprocess.run(cmd, cwd=_REPO_ROOT)
    return name, proc.returncode == 0, time.monotonic() - start


if __name__ == "__main__":
    sys.exit(main())
