#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hytale Launcher Nix Package Updater
Checks the official launcher manifest for a new release, updates package.nix
and verifies that the flake still builds. Rolls package.nix back if not.
"""

import argparse
import logging
import os
import sys
from enum import Enum
from typing import List, Optional

import requests
from packaging.version import InvalidVersion, Version

from build_verifier import refresh_lock_file, verify_build
from command_runner import CommandRunner
from git_helpers import diff_stat
from manifest_client import fetch_manifest, parse_manifest
from package_file import PackageState, apply_update, cleanup, read_current_state, restore
from sri_hash import is_sri_hash, to_local_encoding
from updater_config import UpdaterConfig, load_config
from updater_errors import ArgError, BuildVerificationError, PreconditionError, UpdaterError

logger = logging.getLogger("hytale-updater")

# Logging configuration
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'

HELP_FLAGS = ("--help", "-h")

# Lines of a failed build log repeated in the error output
BUILD_LOG_TAIL = 20


class UpdateDecision(Enum):
    UP_TO_DATE = "up to date"
    UPDATE_AVAILABLE = "update available"
    FORCED = "forced"


class UpdateOutcome(Enum):
    """How a run ended when nothing went wrong"""
    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"
    UPDATED = "updated"


# "Update available" in check mode keeps the non-zero exit code CI jobs rely on
EXIT_CODES = {
    UpdateOutcome.UP_TO_DATE: 0,
    UpdateOutcome.UPDATE_AVAILABLE: 1,
    UpdateOutcome.UPDATED: 0,
}


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ArgError instead of exiting with status 2"""

    def error(self, message):
        raise ArgError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="update-hytale-launcher.py",
        description="Hytale Launcher Nix package updater. Fetches version info from the official manifest.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
        epilog="""
Examples:
  python scripts/update-hytale-launcher.py            # Check and apply updates
  python scripts/update-hytale-launcher.py --check    # CI mode: check only, exit 1 if update needed
  python scripts/update-hytale-launcher.py --force    # Force regenerate (e.g., after flake.lock update)
        """
    )
    parser.add_argument("--check", action="store_true",
                        help="Only check for updates, don't apply (exit 1 if update available)")
    parser.add_argument("--force", action="store_true",
                        help="Force update even if versions match")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log warnings and errors")
    parser.add_argument(*HELP_FLAGS, action="store_true",
                        help="Show this help message")
    return parser


def parse_args(parser: argparse.ArgumentParser, argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse flags; positional arguments count as unknown options.

    Flags are handled left to right, so a --help that comes before an
    unknown option still wins.
    """
    args, extra = parser.parse_known_args(argv)
    if extra:
        tokens = list(sys.argv[1:] if argv is None else argv)
        help_at = [i for i, token in enumerate(tokens) if token in HELP_FLAGS]
        if help_at and help_at[0] < tokens.index(extra[0]):
            return args
        raise ArgError(f"Unknown option: {extra[0]}")
    return args


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging to stderr so stdout stays machine-readable."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    # Override with environment variable if set
    if LOG_LEVEL != 'INFO':
        level = getattr(logging, LOG_LEVEL, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )


def check_preconditions(config: UpdaterConfig, runner: CommandRunner) -> None:
    """Make sure we run from the flake repository and the build tools are installed."""
    missing = [name for name in config.marker_files if not (config.repo_root / name).is_file()]
    if not config.package_file.is_file():
        missing.append(config.package_file.name)
    if missing:
        raise PreconditionError(
            f"{' or '.join(missing)} not found in {config.repo_root}. Run from repository root."
        )

    for tool in config.required_tools:
        if not runner.which(tool):
            raise PreconditionError(f"{tool} is required")


def decide_update(current_version: str, latest_version: str, force: bool = False) -> UpdateDecision:
    if current_version != latest_version:
        return UpdateDecision.UPDATE_AVAILABLE
    if force:
        return UpdateDecision.FORCED
    return UpdateDecision.UP_TO_DATE


def is_downgrade(current_version: str, latest_version: str) -> bool:
    """True when both versions parse and upstream is older than what we have."""
    try:
        return Version(latest_version) < Version(current_version)
    except InvalidVersion:
        return False


def format_check_output(state: PackageState, latest_version: str, latest_hash: str) -> str:
    return "\n".join([
        "UPDATE_AVAILABLE=true",
        f"CURRENT_VERSION={state.version}",
        f"NEW_VERSION={latest_version}",
        f"CURRENT_HASH={state.hash}",
        f"NEW_HASH={latest_hash}",
    ])


def _log_build_tail(log: str) -> None:
    lines = [ln for ln in log.splitlines() if ln.strip()]
    for line in lines[-BUILD_LOG_TAIL:]:
        logger.error(f"   {line}")


def show_changes(config: UpdaterConfig, runner: CommandRunner) -> None:
    paths = []
    for p in (config.package_file, config.lock_file):
        try:
            paths.append(p.relative_to(config.repo_root))
        except ValueError:
            paths.append(p)
    summary = diff_stat(paths, config.repo_root, runner)
    if summary:
        logger.info("Changes applied:")
        for line in summary.splitlines():
            logger.info(f"   {line}")


def run_update(config: UpdaterConfig, runner: CommandRunner, session: Optional[requests.Session] = None,
               check_only: bool = False, force: bool = False) -> UpdateOutcome:
    """
    Run one check/update cycle

    Args:
        config: Updater configuration
        runner: Command runner used for nix and git
        session: HTTP session for the manifest download
        check_only: Report an available update on stdout instead of applying it
        force: Rewrite package.nix even if the version did not change

    Returns:
        UpdateOutcome describing what happened

    Raises:
        UpdaterError: on any fatal condition; package.nix is unchanged when raised
    """
    check_preconditions(config, runner)

    state = read_current_state(config.package_file)
    logger.info(f"Current version: {state.version}")
    logger.info(f"Current hash: {state.hash}")
    if state.hash and not is_sri_hash(state.hash):
        logger.warning(f"⚠️  Current hash does not look like a sha256 SRI hash: {state.hash}")

    raw = fetch_manifest(config.manifest_url, session, timeout=config.http_timeout)
    manifest = parse_manifest(raw, config.platform, config.arch)
    latest_hash = to_local_encoding(manifest.hash_hex)

    logger.info(f"Latest version: {manifest.version}")
    logger.info(f"Latest hash: {latest_hash}")

    decision = decide_update(state.version, manifest.version, force)
    if decision is UpdateDecision.UP_TO_DATE:
        logger.info(f"✅ Already up to date (v{state.version})")
        return UpdateOutcome.UP_TO_DATE

    if decision is UpdateDecision.FORCED:
        logger.info(f"🔁 Forcing update of {state.version}")
    else:
        logger.info(f"🆕 Update available: {state.version} → {manifest.version}")
        if is_downgrade(state.version, manifest.version):
            logger.warning(f"⚠️  Upstream version {manifest.version} is older than {state.version}")

    if check_only:
        print(format_check_output(state, manifest.version, latest_hash))
        return UpdateOutcome.UPDATE_AVAILABLE

    logger.info("Applying update...")
    apply_update(config.package_file, manifest.version, latest_hash)

    try:
        build = verify_build(config, runner)
    except BaseException:
        restore(config.package_file)
        raise

    if not build.ok:
        _log_build_tail(build.log)
        logger.error("Build failed, restoring backup...")
        restore(config.package_file)
        raise BuildVerificationError(
            f"Build of {config.build_target} failed with {manifest.version}; package file restored",
            build.log,
        )

    cleanup(config.package_file)
    logger.info(f"🎉 Successfully updated from {state.version} to {manifest.version}")

    refresh_lock_file(config, runner)
    show_changes(config, runner)
    return UpdateOutcome.UPDATED


def main(argv: Optional[List[str]] = None, config: Optional[UpdaterConfig] = None,
         runner: Optional[CommandRunner] = None, session: Optional[requests.Session] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    try:
        args = parse_args(parser, argv)
    except ArgError as e:
        setup_logging()
        logger.error(str(e))
        parser.print_help(sys.stderr)
        return 1

    if args.help:
        parser.print_help(sys.stdout)
        return 0

    setup_logging(args.verbose, args.quiet)

    try:
        config = config or load_config()
    except ValueError as e:
        # Malformed numeric environment overrides
        logger.error(f"❌ Invalid configuration: {e}")
        return 1
    runner = runner or CommandRunner()

    try:
        outcome = run_update(config, runner, session, check_only=args.check, force=args.force)
    except UpdaterError as e:
        logger.error(f"❌ {e}")
        return 1

    return EXIT_CODES[outcome]


if __name__ == "__main__":
    sys.exit(main())
