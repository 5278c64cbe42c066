"""
Crypto - Hashing Utilities
Domain-separated SHA-256 hashing for hash-tree digests and certificate
signatures.

This module provides:
- SHA-256 hashing for raw bytes
- Length-prefixed domain separators
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Every domain separator is prefixed with its own length, so no tag can be
  a prefix of another tag's encoding
- All operations are deterministic
"""
from __future__ import annotations

import hashlib


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def domain_sep(tag: str) -> bytes:
    """
    Encode a domain separator as a single length byte followed by the tag.

    Example:
        >>> domain_sep("ic-state-root")
        b'\\ric-state-root'
    """
    raw = tag.encode("ascii")
    if len(raw) > 255:
        raise ValueError(f"Domain separator too long: {len(raw)} bytes")
    return bytes([len(raw)]) + raw


def hash_with_domain(tag: str, *parts: bytes) -> bytes:
    """Compute sha256(domain_sep(tag) || part_1 || ... || part_n)."""
    hasher = hashlib.sha256(domain_sep(tag))
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                    or contains invalid hex characters
    """
    if not isinstance(hex_string, str):
        raise ValueError(f"Hex value must be a string, got {type(hex_string).__name__}")

    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "sha256",
    "domain_sep",
    "hash_with_domain",
    "to_hex",
    "from_hex",
]
