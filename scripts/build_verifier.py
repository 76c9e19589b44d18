#!/usr/bin/env python3
"""
Build Verification
Builds the flake package after an update and refreshes flake.lock once the
build is known to pass.
"""

import logging
from dataclasses import dataclass

from command_runner import CommandRunner
from updater_config import UpdaterConfig

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    ok: bool
    log: str = ""


def verify_build(config: UpdaterConfig, runner: CommandRunner) -> BuildResult:
    """
    Build the package target without creating a result link

    Never raises; a failed, missing or timed-out build comes back as ok=False
    and the caller decides what to do with it.
    """
    logger.info(f"🔨 Verifying build of {config.build_target}...")
    result = runner.run(
        ["nix", "build", config.build_target, "--no-link"],
        cwd=config.repo_root,
        timeout=config.build_timeout,
    )
    if result.ok:
        logger.info("✅ Build verification passed")
    else:
        logger.error(f"❌ Build verification failed (exit code {result.returncode})")
    return BuildResult(ok=result.ok, log=result.output)


def refresh_lock_file(config: UpdaterConfig, runner: CommandRunner) -> bool:
    """Best-effort `nix flake update`; returns True if it succeeded."""
    logger.info("🔄 Updating flake.lock...")
    result = runner.run(["nix", "flake", "update"], cwd=config.repo_root, timeout=config.build_timeout)
    if not result.ok:
        logger.warning(f"⚠️  nix flake update failed: {result.output or f'exit code {result.returncode}'}")
        return False
    return True
