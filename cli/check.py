"""CLI wrapper: Format check, lint, then unit tests."""

from __future__ import annotations

import sys

from cli._runner import run_all

SOURCE_DIRS = ("mycoassert", "tests", "cli")


def main() -> None:
    run_all(
        [
            [sys.executable, "-m", "ruff", "format", "--check", *SOURCE_DIRS],
            [sys.executable, "-m", "ruff", "check", *SOURCE_DIRS],
            [sys.executable, "-m", "pytest", "-q", "tests", *sys.argv[1:]],
        ]
    )
