#!/usr/bin/env python3
"""
Git helper utilities for the updater
Used only for the human-readable change summary printed after an update.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from command_runner import CommandRunner

logger = logging.getLogger(__name__)


def run_git_command(args: List[str], cwd: Union[str, Path], runner: Optional[CommandRunner] = None) -> Tuple[int, str, str]:
    """Run a git command and return (returncode, stdout, stderr)."""
    runner = runner or CommandRunner()
    result = runner.run(args, cwd=cwd)
    return result.returncode, result.stdout, result.stderr


def diff_stat(paths: Sequence[Union[str, Path]], cwd: Union[str, Path], runner: Optional[CommandRunner] = None) -> str:
    """Return `git diff --stat` for the given paths, or "" if git is unavailable."""
    rc, out, err = run_git_command(["git", "diff", "--stat", "--", *[str(p) for p in paths]], cwd, runner)
    if rc != 0:
        logger.debug(f"git diff --stat failed: {err or out}")
        return ""
    return out
