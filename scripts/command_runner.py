#!/usr/bin/env python3
"""
External Command Runner
Thin wrapper around subprocess so the updater can be exercised with a fake
runner instead of real nix/git binaries.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr"""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CommandRunner:
    """Runs external commands and reports (returncode, stdout, stderr)"""

    def run(self, args: List[str], cwd: Optional[Union[str, Path]] = None,
            timeout: Optional[float] = None) -> CommandResult:
        logger.debug(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                cwd=str(cwd) if cwd is not None else None,
                timeout=timeout,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.TimeoutExpired:
            logger.error(f"{args[0]} timed out after {timeout}s")
            return CommandResult(124, "", f"Command timed out after {timeout} seconds")
        except OSError as e:
            logger.error(f"Failed to run {args[0]}: {e}")
            return CommandResult(127, "", str(e))
        return CommandResult(result.returncode, result.stdout.strip(), result.stderr.strip())

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)
