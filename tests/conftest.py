"""
Pytest configuration and shared fixtures for the Hytale launcher updater tests.

This module provides common fixtures that can be used across all test files.
"""
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests


# Add scripts directory to path for imports
SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(SCRIPTS_DIR))

from command_runner import CommandResult  # noqa: E402
from updater_config import UpdaterConfig  # noqa: E402


DEADBEEF_HEX = "deadbeef" * 8
DEADBEEF_SRI = "sha256-3q2+796tvu/erb7v3q2+796tvu/erb7v3q2+796tvu8="

SAMPLE_PACKAGE_NIX = """{ lib, stdenv, fetchurl, unzip, autoPatchelfHook }:

stdenv.mkDerivation rec {
  pname = "hytale-launcher";
  version = "1.2.0";

  src = fetchurl {
    url = "https://launcher.hytale.com/builds/release/linux/amd64/hytale-launcher-${version}.zip";
    sha256 = "sha256-AAAA";
  };

  nativeBuildInputs = [ unzip autoPatchelfHook ];

  passthru.previous = {
    version = "1.1.0";
    sha256 = "sha256-BBBB";
  };

  meta = with lib; {
    description = "Official launcher for Hytale";
    platforms = [ "x86_64-linux" ];
  };
}
"""


# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def repo_root():
    """Provide the repository root path."""
    return Path(__file__).parent.parent


@pytest.fixture
def scripts_dir(repo_root):
    """Provide the scripts directory path."""
    return repo_root / "scripts"


@pytest.fixture
def flake_repo(tmp_path):
    """Create a temporary flake checkout with flake.nix and package.nix."""
    (tmp_path / "flake.nix").write_text("{ outputs = { self }: { }; }\n", encoding="utf-8")
    (tmp_path / "package.nix").write_text(SAMPLE_PACKAGE_NIX, encoding="utf-8")
    return tmp_path


@pytest.fixture
def package_nix(flake_repo):
    return flake_repo / "package.nix"


@pytest.fixture
def updater_config(flake_repo):
    """Configuration pointing at the temporary flake checkout."""
    return UpdaterConfig(repo_root=flake_repo, package_file=flake_repo / "package.nix")


# ============================================================================
# Manifest Fixtures
# ============================================================================

@pytest.fixture
def sample_manifest():
    """Provide a launcher manifest shaped like the upstream launcher.json."""
    return {
        "version": "1.3.0",
        "download_url": {
            "windows": {
                "amd64": {
                    "url": "https://launcher.hytale.com/builds/release/windows/amd64/hytale-launcher-1.3.0.zip",
                    "sha256": "0" * 64,
                }
            },
            "linux": {
                "amd64": {
                    "url": "https://launcher.hytale.com/builds/release/linux/amd64/hytale-launcher-1.3.0.zip",
                    "sha256": DEADBEEF_HEX,
                }
            },
        },
    }


@pytest.fixture
def sample_manifest_raw(sample_manifest):
    return json.dumps(sample_manifest, indent=2)


# ============================================================================
# HTTP Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_http_response():
    """Create a mock HTTP response object."""
    def _create_mock(status_code=200, text="", headers=None):
        mock = MagicMock()
        mock.status_code = status_code
        mock.text = text
        mock.headers = headers or {}
        mock.raise_for_status = MagicMock()

        if status_code >= 400:
            mock.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status_code}")

        return mock
    return _create_mock


@pytest.fixture
def mock_session(mock_http_response, sample_manifest_raw):
    """HTTP session whose GET returns the sample manifest."""
    session = MagicMock()
    session.get.return_value = mock_http_response(200, sample_manifest_raw)
    return session


# ============================================================================
# Command Runner Fixtures
# ============================================================================

class FakeRunner:
    """Records commands instead of running them.

    `results` maps a command prefix tuple, e.g. ("nix", "build"), to a
    CommandResult or to a callable taking the argument list.
    """

    def __init__(self, tools=("nix", "curl", "git")):
        self.tools = set(tools)
        self.results = {}
        self.calls = []

    def run(self, args, cwd=None, timeout=None):
        self.calls.append(list(args))
        for prefix, result in self.results.items():
            if tuple(args[:len(prefix)]) == prefix:
                return result(args) if callable(result) else result
        return CommandResult(0, "", "")

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.tools else None

    def called(self, *prefix):
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]


@pytest.fixture
def fake_runner():
    return FakeRunner()


# ============================================================================
# Utility Functions
# ============================================================================

def load_module_from_path(module_name: str, file_path: Path):
    """
    Dynamically load a Python module from a file path.

    Args:
        module_name: Name to give the loaded module
        file_path: Path to the Python file

    Returns:
        The loaded module object
    """
    import importlib.util

    spec = importlib.util.spec_from_file_location(module_name, str(file_path))
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def load_module():
    """Provide the load_module_from_path function as a fixture."""
    return load_module_from_path

