"""
Crypto - Principal

Textual identities of services ("canister ids"). The text form is the
lowercase, unpadded base32 encoding of crc32(raw) || raw, split into groups
of five characters joined by dashes.
"""
from __future__ import annotations

import base64
import binascii
import zlib
from dataclasses import dataclass

from statecert.schemas.errors import PrincipalFormatException


MAX_PRINCIPAL_LENGTH = 29


def _encode_text(raw: bytes) -> str:
    checksum = zlib.crc32(raw).to_bytes(4, "big")
    encoded = base64.b32encode(checksum + raw).decode("ascii").rstrip("=").lower()
    return "-".join(encoded[i:i + 5] for i in range(0, len(encoded), 5))


@dataclass(frozen=True)
class Principal:
    """A service identity. `raw` holds the decoded bytes."""
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) > MAX_PRINCIPAL_LENGTH:
            raise PrincipalFormatException(
                f"Principal must be at most {MAX_PRINCIPAL_LENGTH} bytes, got {len(self.raw)}"
            )

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        """
        Decode and checksum-verify a textual principal.

        Raises:
            PrincipalFormatException: On bad alphabet, checksum or grouping
        """
        compact = text.replace("-", "").upper()
        padding = "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(compact + padding)
        except (binascii.Error, ValueError) as e:
            raise PrincipalFormatException(f"Principal is not valid base32: {e}", text=text) from e

        if len(decoded) < 4:
            raise PrincipalFormatException("Principal text is too short", text=text)

        checksum, raw = decoded[:4], decoded[4:]
        if zlib.crc32(raw).to_bytes(4, "big") != checksum:
            raise PrincipalFormatException("Principal checksum mismatch", text=text)

        principal = cls(raw=raw)
        if principal.to_text() != text:
            raise PrincipalFormatException(
                "Principal text is not in canonical form", text=text
            )
        return principal

    def to_text(self) -> str:
        return _encode_text(self.raw)

    def __str__(self) -> str:
        return self.to_text()


__all__ = [
    "MAX_PRINCIPAL_LENGTH",
    "Principal",
]
