"""
Shared CLI runner helper.

Every developer wrapper runs one or more tools in subprocesses and exits
with the exit code of the first tool that fails.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """
    Run a command and propagate its exit code.

    Args:
        cmd: Command and arguments to execute

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"])
    """
    run_all([cmd])


def run_all(cmds: Sequence[Sequence[str]]) -> None:
    """
    Run commands in order, stopping at the first non-zero exit code.

    Always raises SystemExit, with 0 when every command succeeded.
    """
    for cmd in cmds:
        result = subprocess.run(cmd)
        if result.returncode != 0:
            raise SystemExit(result.returncode)
    raise SystemExit(0)
