#!/usr/bin/env python3
"""
Package Definition File Access
Reads and rewrites the version and sha256 fields of package.nix, keeping a
single .bak copy so a failed update can be rolled back byte-for-byte.
"""

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from updater_errors import PackageFileError, PreconditionError

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r'(version = ")([^"]*)(")')
HASH_RE = re.compile(r'(sha256 = ")(sha256-[^"]*)(")')
BACKUP_SUFFIX = ".bak"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class PackageState:
    """Version and SRI hash currently recorded in the package file"""
    version: str
    hash: str


def backup_path(path: PathLike) -> Path:
    p = Path(path)
    return p.with_name(p.name + BACKUP_SUFFIX)


def has_backup(path: PathLike) -> bool:
    return backup_path(path).exists()


def _read_text(path: Path) -> str:
    try:
        # newline="" keeps CRLF/LF exactly as stored
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except FileNotFoundError as e:
        raise PreconditionError(f"Package file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise PreconditionError(f"Package file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise PreconditionError(f"Cannot read package file {path}: {e}") from e


def read_current_state(path: PathLike) -> PackageState:
    """
    Read the recorded version and hash from a package file

    Only the first occurrence of each field counts. Missing fields come back
    as empty strings; callers decide whether that is fatal.
    """
    text = _read_text(Path(path))
    version_match = VERSION_RE.search(text)
    hash_match = HASH_RE.search(text)
    return PackageState(
        version=version_match.group(2) if version_match else "",
        hash=hash_match.group(2) if hash_match else "",
    )


def _write_atomic(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        shutil.copymode(str(path), tmp_name)
        os.replace(tmp_name, str(path))
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def apply_update(path: PathLike, new_version: str, new_hash: str) -> None:
    """
    Back up the package file, then set its version and hash in place

    Args:
        path: Package file to rewrite
        new_version: Version string to record
        new_hash: SRI hash to record

    Raises:
        PreconditionError: if the file cannot be read or lacks either field
        PackageFileError: if the backup or the rewritten file cannot be written
    """
    p = Path(path)
    text = _read_text(p)

    # Callables keep backslashes in the new values literal
    updated, version_count = VERSION_RE.subn(lambda m: m.group(1) + new_version + m.group(3), text, count=1)
    updated, hash_count = HASH_RE.subn(lambda m: m.group(1) + new_hash + m.group(3), updated, count=1)
    if not version_count:
        raise PreconditionError(f'No `version = "..."` field found in {p}')
    if not hash_count:
        raise PreconditionError(f'No `sha256 = "sha256-..."` field found in {p}')

    bak = backup_path(p)
    if bak.exists():
        logger.warning(f"⚠️  Replacing leftover backup from an earlier run: {bak}")
    try:
        shutil.copy2(str(p), str(bak))
    except OSError as e:
        raise PackageFileError(f"Cannot back up {p} to {bak}: {e}") from e
    logger.debug(f"Backed up {p.name} to {bak.name}")

    try:
        _write_atomic(p, updated)
    except OSError as e:
        restore(p)
        raise PackageFileError(f"Cannot write {p}: {e}; package file restored") from e
    logger.info(f"📝 Wrote version {new_version} and hash {new_hash} to {p.name}")


def restore(path: PathLike) -> None:
    """Put the backup back in place of the package file; no-op without a backup"""
    p = Path(path)
    bak = backup_path(p)
    if not bak.exists():
        return
    try:
        os.replace(str(bak), str(p))
    except OSError as e:
        raise PackageFileError(f"Cannot restore {p} from {bak}: {e}") from e
    logger.info(f"♻️  Restored {p.name} from backup")


def cleanup(path: PathLike) -> None:
    """Remove the backup after a verified update"""
    bak = backup_path(path)
    try:
        bak.unlink(missing_ok=True)
    except OSError as e:
        raise PackageFileError(f"Cannot remove backup {bak}: {e}") from e
