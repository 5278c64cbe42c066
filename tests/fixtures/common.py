"""
Common test fixtures shared by all modules.

Provides factory functions for the core statecert data structures:
- Ed25519 signing keys and their DER-encoded public keys
- Request status trees in the layout the extractor expects
- Signed certificates over such trees

Signatures are real: the certificate signs domain_sep("ic-state-root") ||
root digest, so the default signature primitive verifies them against a
RootKeyStore built from the matching public key.
"""

from __future__ import annotations

import base64
import time
from typing import Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from statecert.certificate.models import Certificate, encode_leb128
from statecert.crypto.root_key import RootKeyStore
from statecert.crypto.signatures import state_root_message
from statecert.hashtree.digest import tree_digest
from statecert.hashtree.tree import HashTree, labeled_map, leaf


# Governance service id used throughout the tests
GOVERNANCE_ID = "rrkah-fqaaa-aaaaa-aaaaq-cai"

DEFAULT_REQUEST_ID = bytes(range(32))
DEFAULT_REPLY = b"DIDL\x00\x01\x71\x05hello"

# Fixed certificate time: 2024-01-01T00:00:00Z in nanoseconds
FIXED_TIME_NS = 1_704_067_200 * 1_000_000_000


def make_signing_key() -> Ed25519PrivateKey:
    """Fresh Ed25519 key for signing test certificates."""
    return Ed25519PrivateKey.generate()


def public_key_der(private_key: Ed25519PrivateKey) -> bytes:
    """DER SubjectPublicKeyInfo of the key's public half."""
    return private_key.public_key().public_bytes(
        Encoding.DER, PublicFormat.SubjectPublicKeyInfo
    )


def make_root_key(private_key: Ed25519PrivateKey) -> RootKeyStore:
    """RootKeyStore trusting the given key."""
    return RootKeyStore.from_base64(base64.b64encode(public_key_der(private_key)).decode("ascii"))


def make_request_status_tree(
    *,
    request_id: bytes = DEFAULT_REQUEST_ID,
    status: str | bytes = "replied",
    reply: Optional[bytes] = DEFAULT_REPLY,
    time_ns: int = FIXED_TIME_NS,
    extra_fields: Optional[dict[str, bytes]] = None,
    extra_request_ids: tuple[bytes, ...] = (),
) -> HashTree:
    """
    Build a tree with a "time" leaf and one request under "request_status".

    Args:
        request_id: Label of the request
        status: Value of the status leaf
        reply: Reply payload, or None to leave the reply out
        time_ns: Certificate time
        extra_fields: Additional leaves under the request (e.g. reject_code)
        extra_request_ids: Further request ids, each with a "status" leaf
    """
    fields: dict[str, HashTree] = {"status": leaf(status)}
    if reply is not None:
        fields["reply"] = leaf(reply)
    for name, value in (extra_fields or {}).items():
        fields[name] = leaf(value)

    requests: dict[bytes, HashTree] = {request_id: labeled_map(fields)}
    for other_id in extra_request_ids:
        requests[other_id] = labeled_map({"status": leaf("replied")})

    return labeled_map({
        "request_status": labeled_map(requests),
        "time": leaf(encode_leb128(time_ns)),
    })


def sign_tree(tree: HashTree, private_key: Ed25519PrivateKey) -> bytes:
    """Sign the state root message of a tree."""
    return private_key.sign(state_root_message(tree_digest(tree)))


def make_certificate(
    private_key: Ed25519PrivateKey,
    tree: Optional[HashTree] = None,
) -> Certificate:
    """Certificate over `tree` (default: a replied request) signed by `private_key`."""
    if tree is None:
        tree = make_request_status_tree()
    return Certificate(tree=tree, signature=sign_tree(tree, private_key))


def now_ns() -> int:
    return time.time_ns()


def accept_any_signature(public_key_der: bytes, message: bytes, signature: bytes) -> bool:
    """Signature primitive that accepts everything; stands in for a BLS verifier."""
    return True


NOT_A_PRIMITIVE = "not callable"
