"""
Certificate - Model, Verification and Request Status

Usage:
    from statecert.certificate import (
        Certificate, CertificateVerifier, extract_request_status,
    )

    verified = CertificateVerifier(root_key=root_key).verify(certificate, canister_id)
    status = extract_request_status(verified.tree)
    payload = status.require_reply()
"""
from .models import (
    CERTIFICATE_FORMAT_VERSION,
    Certificate,
    decode_leb128,
    encode_leb128,
    tree_from_data,
    tree_to_data,
)
from .verifier import (
    CertificateVerifier,
    ExpiryPolicy,
    VerifiedCertificate,
    certificate_time_ns,
    verify_certificate,
)
from .request_status import (
    RequestState,
    RequestStatus,
    extract_request_status,
)

__all__ = [
    "CERTIFICATE_FORMAT_VERSION",
    "Certificate",
    "decode_leb128",
    "encode_leb128",
    "tree_from_data",
    "tree_to_data",
    "CertificateVerifier",
    "ExpiryPolicy",
    "VerifiedCertificate",
    "certificate_time_ns",
    "verify_certificate",
    "RequestState",
    "RequestStatus",
    "extract_request_status",
]
