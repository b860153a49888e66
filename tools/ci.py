#!/usr/bin/env python3
# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the local checks for gb: formatting, lint, tests with coverage, and a wheel build."""

import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

CHECKS: list[tuple[str, list[str]]] = [
    ("Format", ["ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["ruff", "check", "src/", "tests/", "tools/"]),
    ("Tests", [sys.executable, "-m", "pytest", "--cov=gb", "--cov-report=term-missing"]),
    ("Wheel", [sys.executable, "-m", "pip", "wheel", "--no-deps", "-w", "dist/", "."]),
]


def main() -> int:
    """Run every check, then print a pass/fail summary."""
    outcomes: list[tuple[str, int, float]] = []
    for name, cmd in CHECKS:
        _banner(name)
        started = time.monotonic()
        try:
            returncode = subprocess.run(cmd, cwd=ROOT).returncode
        except OSError as exc:
            print(chalk.red(f"Error: couldn't spawn {cmd[0]}: {exc}"))
            returncode = 127
        outcomes.append((name, returncode, time.monotonic() - started))

    _banner("Summary")
    for name, returncode, elapsed in outcomes:
        paint = chalk.green if returncode == 0 else chalk.red
        status = "PASS" if returncode == 0 else f"FAIL ({returncode})"
        print(paint(f"  {status:<10} {name} ({elapsed:.1f}s)"))
    print()
    return 0 if all(returncode == 0 for _, returncode, _ in outcomes) else 1


# ################
# Implementation
# ################

ROOT = Path(__file__).resolve().parent.parent


def _banner(title: str) -> None:
    rule = chalk.blue("=" * 60)
    print(f"\n{rule}\n{chalk.blue(title)}\n{rule}")


if __name__ == "__main__":
    sys.exit(main())
