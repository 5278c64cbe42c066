"""
Crypto - Signature Primitive

The verifier treats signature checking as an opaque function:

    primitive(public_key_der, message, signature) -> bool

`verify_signature` is the default primitive. It parses a DER
SubjectPublicKeyInfo with `cryptography` and handles Ed25519 and ECDSA P-256
keys. Keys of any other scheme (the BLS12-381 mainnet root key among them)
raise UnsupportedKeyAlgorithmException; callers verifying such certificates
inject a primitive for that scheme.
"""
from __future__ import annotations

import importlib
import logging
from typing import Callable

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from statecert.crypto.hashing import domain_sep
from statecert.schemas.errors import UnsupportedKeyAlgorithmException


logger = logging.getLogger(__name__)


SignaturePrimitive = Callable[[bytes, bytes, bytes], bool]

# Prefix of the message a certificate signature covers
STATE_ROOT_DOMAIN = "ic-state-root"


def state_root_message(root_digest: bytes) -> bytes:
    """Build the signed message for a tree root: domain_sep("ic-state-root") || digest."""
    return domain_sep(STATE_ROOT_DOMAIN) + root_digest


def _load_public_key(public_key_der: bytes):
    try:
        return serialization.load_der_public_key(public_key_der)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise UnsupportedKeyAlgorithmException(
            "Root key is not a DER public key supported by the default signature "
            "primitive; supply a primitive for this key scheme",
            details={"key_length": len(public_key_der), "error": str(e)},
        ) from e


def verify_signature(public_key_der: bytes, message: bytes, signature: bytes) -> bool:
    """
    Verify `signature` over `message` with a DER-encoded public key.

    ECDSA signatures may be given either DER-encoded or as raw 64-byte r||s.

    Returns:
        True if the signature is valid, False otherwise

    Raises:
        UnsupportedKeyAlgorithmException: If the key scheme is not handled here
    """
    key = _load_public_key(public_key_der)
    logger.debug("Verifying signature with %s", type(key).__name__)

    if isinstance(key, Ed25519PublicKey):
        try:
            key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    if isinstance(key, ec.EllipticCurvePublicKey) and isinstance(key.curve, ec.SECP256R1):
        if len(signature) == 64:
            signature = encode_dss_signature(
                int.from_bytes(signature[:32], "big"),
                int.from_bytes(signature[32:], "big"),
            )
        try:
            key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
        except (InvalidSignature, ValueError):
            return False
        return True

    raise UnsupportedKeyAlgorithmException(
        f"Unsupported root key type: {type(key).__name__}",
        details={"key_type": type(key).__name__},
    )


def load_signature_primitive(reference: str) -> SignaturePrimitive:
    """
    Resolve a "package.module:function" reference to a signature primitive.

    Used by configuration to plug in a primitive for schemes the default
    does not handle (BLS12-381 for the mainnet root key).

    Raises:
        ValueError: If the reference is malformed, cannot be imported or
            does not name a callable
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(
            f"Signature primitive must be given as 'module:function', got {reference!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import signature primitive module {module_name!r}: {e}") from e

    primitive = getattr(module, attr, None)
    if not callable(primitive):
        raise ValueError(f"{reference!r} does not name a callable")
    logger.info("Using signature primitive %s", reference)
    return primitive


__all__ = [
    "SignaturePrimitive",
    "STATE_ROOT_DOMAIN",
    "state_root_message",
    "verify_signature",
    "load_signature_primitive",
]
