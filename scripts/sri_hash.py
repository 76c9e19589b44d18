#!/usr/bin/env python3
"""
SRI Hash Conversion
Converts the hex SHA256 digests published upstream into the
subresource-integrity form ("sha256-<base64>") used by package.nix.
"""

import base64
import binascii
import re

from updater_errors import ConversionError

SRI_PREFIX = "sha256-"
SHA256_HEX_LENGTH = 64
_HEX_RE = re.compile(r'^[0-9a-fA-F]+$')
_SRI_RE = re.compile(r'^sha256-[A-Za-z0-9+/]{43}=$')


def to_local_encoding(hex_digest: str) -> str:
    """
    Convert a hex encoded SHA256 digest to an SRI hash

    Args:
        hex_digest: 64 hex characters, optionally prefixed with "sha256:"

    Returns:
        SRI hash string, e.g. "sha256-47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="
    """
    if not isinstance(hex_digest, str):
        raise ConversionError(f"Expected hex digest string, got {type(hex_digest).__name__}")

    value = hex_digest.strip()
    if value.lower().startswith("sha256:"):
        value = value[len("sha256:"):]

    if len(value) != SHA256_HEX_LENGTH:
        raise ConversionError(f"Expected {SHA256_HEX_LENGTH} hex characters, got {len(value)}: {hex_digest!r}")
    if not _HEX_RE.match(value):
        raise ConversionError(f"Digest contains non-hex characters: {hex_digest!r}")

    try:
        raw = binascii.unhexlify(value)
    except binascii.Error as e:
        raise ConversionError(f"Invalid hex digest {hex_digest!r}: {e}") from e

    return SRI_PREFIX + base64.b64encode(raw).decode("ascii")


def is_sri_hash(value: str) -> bool:
    """True if value looks like a sha256 SRI hash"""
    return bool(_SRI_RE.match(value or ""))
