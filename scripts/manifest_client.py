#!/usr/bin/env python3
"""
Upstream Manifest Client
Downloads the launcher release manifest and pulls the release version and
the per-platform SHA256 digest out of it.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from updater_config import DEFAULT_ARCH, DEFAULT_HTTP_TIMEOUT, DEFAULT_PLATFORM
from updater_errors import FetchError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestInfo:
    """Release version and hex digest for one platform/architecture"""
    version: str
    hash_hex: str


def get_session() -> requests.Session:
    """Create an HTTP session that identifies as a regular browser.

    The launcher host rejects the default python-requests User-Agent.
    """
    session = requests.Session()
    session.headers.update({
        'User-Agent': (
            'Mozilla/5.0 (X11; Linux x86_64) '
            'AppleWebKit/537.36 (KHTML, like Gecko) '
            'Chrome/120.0.0.0 Safari/537.36'
        ),
        'Accept': 'application/json, text/plain;q=0.9, */*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
        'Accept-Encoding': 'gzip, deflate',
    })
    return session


def fetch_manifest(url: str, session: Optional[requests.Session] = None,
                   timeout: float = DEFAULT_HTTP_TIMEOUT) -> str:
    """
    Fetch the raw manifest document

    Args:
        url: Manifest URL
        session: HTTP session to use (a fresh browser-like session by default)
        timeout: Seconds to wait for the server

    Returns:
        Response body as text

    Raises:
        FetchError: on network failure, non-2xx status or empty body
    """
    session = session or get_session()
    logger.info(f"🔍 Fetching version manifest from: {url}")
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch manifest from {url}: {e}") from e

    if not 200 <= response.status_code < 300:
        raise FetchError(f"Failed to fetch manifest from {url}: HTTP {response.status_code}")

    body = response.text
    if not body or not body.strip():
        raise FetchError(f"Manifest at {url} is empty")
    return body


def _load(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Manifest is not valid JSON: {e}") from e


def _walk(node: Any):
    """Yield every dict in the document, depth-first in document order."""
    if isinstance(node, dict):
        yield node
        for value in node.values():
            yield from _walk(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk(item)


def parse_version(raw: str) -> str:
    """Return the release version: top-level "version", else the first one found."""
    doc = _load(raw)
    for node in _walk(doc):
        version = node.get("version")
        if isinstance(version, str) and version.strip():
            return version.strip()
    raise ParseError('Manifest has no "version" field')


def parse_hash(raw: str, platform: str = DEFAULT_PLATFORM, arch: str = DEFAULT_ARCH) -> str:
    """
    Return the hex SHA256 stored at <platform>.<arch>.sha256

    The platform table is usually top-level; if it is not, the first nested
    object that has a `platform` key is used.
    """
    doc = _load(raw)
    platform_table = None
    for node in _walk(doc):
        if platform in node:
            platform_table = node[platform]
            break

    if not isinstance(platform_table, dict):
        raise ParseError(f'Manifest has no "{platform}" section')

    arch_table = platform_table.get(arch)
    if not isinstance(arch_table, dict):
        raise ParseError(f'Manifest has no "{platform}.{arch}" section')

    digest = arch_table.get("sha256")
    if not isinstance(digest, str) or not digest.strip():
        raise ParseError(f'Manifest has no "{platform}.{arch}.sha256" field')
    return digest.strip()


def parse_manifest(raw: str, platform: str = DEFAULT_PLATFORM, arch: str = DEFAULT_ARCH) -> ManifestInfo:
    return ManifestInfo(version=parse_version(raw), hash_hex=parse_hash(raw, platform, arch))
