#!/usr/bin/env python3
"""
Updater Configuration
Holds every process-level assumption (paths, tools, URLs, timeouts) in one
value that is passed explicitly to each component.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

DEFAULT_MANIFEST_URL = "https://launcher.hytale.com/version/release/launcher.json"
DEFAULT_PACKAGE_FILE = "package.nix"
DEFAULT_FLAKE_ATTR = "hytale-launcher"
DEFAULT_PLATFORM = "linux"
DEFAULT_ARCH = "amd64"
DEFAULT_HTTP_TIMEOUT = 30  # seconds
MARKER_FILES = ("flake.nix",)
REQUIRED_TOOLS = ("nix",)


@dataclass(frozen=True)
class UpdaterConfig:
    """Context value shared by all updater components"""
    repo_root: Path
    package_file: Path
    manifest_url: str = DEFAULT_MANIFEST_URL
    flake_attr: str = DEFAULT_FLAKE_ATTR
    platform: str = DEFAULT_PLATFORM
    arch: str = DEFAULT_ARCH
    marker_files: Tuple[str, ...] = MARKER_FILES
    required_tools: Tuple[str, ...] = REQUIRED_TOOLS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    build_timeout: Optional[float] = None

    @property
    def lock_file(self) -> Path:
        return self.repo_root / "flake.lock"

    @property
    def build_target(self) -> str:
        return f".#{self.flake_attr}"


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def load_config(repo_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> UpdaterConfig:
    """
    Build the updater configuration from defaults and environment overrides

    Args:
        repo_root: Repository root; defaults to $HYTALE_REPO_ROOT or the current directory
        environ: Environment mapping to read overrides from (defaults to os.environ)

    Returns:
        Populated UpdaterConfig
    """
    env = os.environ if environ is None else environ

    if repo_root is None:
        repo_root = Path(env.get('HYTALE_REPO_ROOT') or Path.cwd())
    repo_root = Path(repo_root)

    package_file = Path(env.get('HYTALE_PACKAGE_FILE', DEFAULT_PACKAGE_FILE))
    if not package_file.is_absolute():
        package_file = repo_root / package_file

    http_timeout = _optional_float(env.get('HYTALE_UPDATE_TIMEOUT'))

    return UpdaterConfig(
        repo_root=repo_root,
        package_file=package_file,
        manifest_url=env.get('HYTALE_MANIFEST_URL', DEFAULT_MANIFEST_URL),
        flake_attr=env.get('HYTALE_FLAKE_ATTR', DEFAULT_FLAKE_ATTR),
        http_timeout=http_timeout if http_timeout is not None else DEFAULT_HTTP_TIMEOUT,
        build_timeout=_optional_float(env.get('HYTALE_BUILD_TIMEOUT')),
    )
