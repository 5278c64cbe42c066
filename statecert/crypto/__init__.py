"""
Cryptographic utilities.

Hashing with domain separation, the pluggable signature primitive, the
trust-anchor root key and textual principals.
"""
from .hashing import (
    sha256,
    domain_sep,
    hash_with_domain,
    to_hex,
    from_hex,
)
from .principal import Principal
from .root_key import (
    IC_ROOT_KEY,
    RootKeyStore,
    get_root_key,
)
from .signatures import (
    SignaturePrimitive,
    load_signature_primitive,
    state_root_message,
    verify_signature,
)

__all__ = [
    "sha256",
    "domain_sep",
    "hash_with_domain",
    "to_hex",
    "from_hex",
    "Principal",
    "IC_ROOT_KEY",
    "RootKeyStore",
    "get_root_key",
    "SignaturePrimitive",
    "load_signature_primitive",
    "state_root_message",
    "verify_signature",
]
