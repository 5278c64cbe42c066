"""
Crypto - Root Key Store

Holds the trust-anchor public key every certificate signature is checked
against. The built-in mainnet key is embedded twice, once as base64 text and
once as raw DER bytes, and the two must agree when this module is imported.
A mismatch means the installed code itself is corrupt.
"""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from statecert.crypto.hashing import sha256
from statecert.schemas.errors import RootKeyIntegrityException


# Mainnet root key, base64 of the DER SubjectPublicKeyInfo (BLS12-381 G2).
IC_ROOT_PUBLIC_KEY_BASE64 = (
    "MIGCMB0GDSsGAQQBgtx8BQMBAgEGDCsGAQQBgtx8BQMCAQNhAIFMDm7HH6tYOwi9gTc8JVw8NxsuhIY8"
    "mKTx4It0I10U+12cDNVG2WhfkToMCyzFNBWDv0tDkuRn25bWW5u0y3FxEvhHLg1aTRRQX/10hLASkQkc"
    "X4e5iINGP5gJGguqrg=="
)

# Same key, raw DER bytes.
IC_ROOT_KEY_DER = (
    b"\x30\x81\x82\x30\x1d\x06\x0d\x2b\x06\x01\x04\x01\x82\xdc\x7c\x05\x03\x01\x02\x01"
    b"\x06\x0c\x2b\x06\x01\x04\x01\x82\xdc\x7c\x05\x03\x02\x01\x03\x61\x00\x81\x4c\x0e"
    b"\x6e\xc7\x1f\xab\x58\x3b\x08\xbd\x81\x37\x3c\x25\x5c\x3c\x37\x1b\x2e\x84\x86\x3c"
    b"\x98\xa4\xf1\xe0\x8b\x74\x23\x5d\x14\xfb\x5d\x9c\x0c\xd5\x46\xd9\x68\x5f\x91\x3a"
    b"\x0c\x0b\x2c\xc5\x34\x15\x83\xbf\x4b\x43\x92\xe4\x67\xdb\x96\xd6\x5b\x9b\xb4\xcb"
    b"\x71\x71\x12\xf8\x47\x2e\x0d\x5a\x4d\x14\x50\x5f\xfd\x74\x84\xb0\x12\x91\x09\x1c"
    b"\x5f\x87\xb9\x88\x83\x46\x3f\x98\x09\x1a\x0b\xaa\xae"
)

IC_ROOT_KEY_LENGTH = 133


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RootKeyIntegrityException(f"Root key is not valid base64: {e}") from e


@dataclass(frozen=True)
class RootKeyStore:
    """
    Immutable trust anchor.

    Attributes:
        der: DER-encoded SubjectPublicKeyInfo of the root key
        source: Where the key came from ("builtin" or "override")
    """
    der: bytes
    source: str = "builtin"

    def __post_init__(self) -> None:
        if not self.der:
            raise RootKeyIntegrityException("Root key must not be empty")

    @classmethod
    def from_encodings(cls, base64_text: str, raw_der: bytes) -> "RootKeyStore":
        """
        Build the store from two independent encodings of the same key.

        Raises:
            RootKeyIntegrityException: If the encodings disagree
        """
        decoded = _decode_base64(base64_text)
        if decoded != raw_der:
            raise RootKeyIntegrityException(
                "Embedded root key encodings disagree: base64 text and raw bytes "
                "decode to different keys"
            )
        return cls(der=decoded, source="builtin")

    @classmethod
    def from_base64(cls, base64_text: str) -> "RootKeyStore":
        """Build a store from a single base64 key (local test networks)."""
        return cls(der=_decode_base64(base64_text), source="override")

    @property
    def fingerprint(self) -> str:
        """Short sha256 fingerprint for logs and reports."""
        return sha256(self.der).hex()[:16]


# Process-wide trust anchor, checked once at import.
IC_ROOT_KEY = RootKeyStore.from_encodings(IC_ROOT_PUBLIC_KEY_BASE64, IC_ROOT_KEY_DER)

if len(IC_ROOT_KEY.der) != IC_ROOT_KEY_LENGTH:
    raise RootKeyIntegrityException(
        f"Built-in root key must be {IC_ROOT_KEY_LENGTH} bytes, got {len(IC_ROOT_KEY.der)}"
    )


def get_root_key(override_base64: str | None = None) -> RootKeyStore:
    """Return the built-in root key, or an override when one is configured."""
    if override_base64:
        return RootKeyStore.from_base64(override_base64)
    return IC_ROOT_KEY


__all__ = [
    "IC_ROOT_PUBLIC_KEY_BASE64",
    "IC_ROOT_KEY_DER",
    "IC_ROOT_KEY",
    "RootKeyStore",
    "get_root_key",
]
