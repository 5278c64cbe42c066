"""
Schemas - Errors, Canonical JSON and Check Results
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AmbiguousRequestIdException,
    CanonicalizationException,
    CertificateDecodeException,
    ErrorCodes,
    ExpiredCertificateException,
    FetchException,
    LookupUnknownException,
    MissingFieldException,
    PrincipalFormatException,
    RootKeyIntegrityException,
    SignatureInvalidException,
    StateCertError,
    StateCertException,
    TreeMalformedException,
    UnexpectedStatusException,
    UnsupportedKeyAlgorithmException,
    WorkflowStageException,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "AmbiguousRequestIdException",
    "CanonicalizationException",
    "CertificateDecodeException",
    "ErrorCodes",
    "ExpiredCertificateException",
    "FetchException",
    "LookupUnknownException",
    "MissingFieldException",
    "PrincipalFormatException",
    "RootKeyIntegrityException",
    "SignatureInvalidException",
    "StateCertError",
    "StateCertException",
    "TreeMalformedException",
    "UnexpectedStatusException",
    "UnsupportedKeyAlgorithmException",
    "WorkflowStageException",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
