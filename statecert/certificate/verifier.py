"""
Certificate - Signature Verifier

Validates a certificate against the trust anchor:

1. digest = tree_digest(certificate.tree)
2. primitive(root_key.der, domain_sep("ic-state-root") || digest, signature)
   must return True, else SignatureInvalidException
3. optional time window: the "time" leaf (LEB128 nanoseconds since the
   epoch) must fall inside the configured ExpiryPolicy
4. the expected signer is bound into the result; delegation chains are not
   resolved, so the signature must verify directly against the root key

Steps run strictly in this order. The certificate is never mutated.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from statecert.certificate.models import Certificate, decode_leb128
from statecert.crypto.principal import Principal
from statecert.crypto.root_key import IC_ROOT_KEY, RootKeyStore
from statecert.crypto.signatures import (
    SignaturePrimitive,
    state_root_message,
    verify_signature,
)
from statecert.hashtree.digest import tree_digest
from statecert.hashtree.lookup import LookupStatus, lookup_path
from statecert.schemas.errors import (
    CertificateDecodeException,
    ExpiredCertificateException,
    LookupUnknownException,
    MissingFieldException,
    SignatureInvalidException,
    TreeMalformedException,
)


logger = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000

TIME_PATH = (b"time",)


def _now_ns() -> int:
    return time.time_ns()


@dataclass(frozen=True)
class ExpiryPolicy:
    """
    Accepted window for the certificate "time" leaf.

    Attributes:
        max_age_s: Oldest accepted certificate, in seconds before now
        max_future_drift_s: Newest accepted certificate, in seconds after now
        clock: Returns the current time in nanoseconds since the epoch
    """
    max_age_s: float
    max_future_drift_s: float = 300.0
    clock: Callable[[], int] = field(default=_now_ns, compare=False)

    def check(self, certificate_time_ns: int) -> None:
        now = self.clock()
        age_ns = now - certificate_time_ns
        if age_ns > self.max_age_s * NANOS_PER_SECOND:
            raise ExpiredCertificateException(
                f"Certificate is {age_ns / NANOS_PER_SECOND:.0f}s old, "
                f"older than the accepted {self.max_age_s:.0f}s",
                certificate_time_ns=certificate_time_ns,
                details={"now_ns": now},
            )
        if -age_ns > self.max_future_drift_s * NANOS_PER_SECOND:
            raise ExpiredCertificateException(
                f"Certificate time is {-age_ns / NANOS_PER_SECOND:.0f}s in the future",
                certificate_time_ns=certificate_time_ns,
                details={"now_ns": now},
            )


def certificate_time_ns(certificate: Certificate) -> int:
    """
    Read the "time" leaf of a certificate tree.

    Raises:
        MissingFieldException: If the tree proves there is no time leaf
        LookupUnknownException: If the time leaf is pruned
        TreeMalformedException: If the path has the wrong shape
    """
    result = lookup_path(certificate.tree, TIME_PATH)
    if result.status is LookupStatus.FOUND:
        try:
            return decode_leb128(result.value)
        except CertificateDecodeException as e:
            raise TreeMalformedException(
                f"time is not a LEB128 number: {e.message}", path=TIME_PATH
            ) from e
    if result.status is LookupStatus.UNKNOWN:
        raise LookupUnknownException(TIME_PATH)
    if result.status is LookupStatus.ERROR:
        raise TreeMalformedException(result.reason or "malformed time leaf", path=TIME_PATH)
    raise MissingFieldException("time", path=TIME_PATH)


@dataclass(frozen=True)
class VerifiedCertificate:
    """
    A certificate whose signature has been checked.

    Only trees reached through this type are handed to extraction by the
    workflow.
    """
    certificate: Certificate
    root_digest: bytes
    signer: Principal
    root_key_fingerprint: str
    time_ns: Optional[int] = None

    @property
    def tree(self):
        return self.certificate.tree


class CertificateVerifier:
    """
    Verifies certificates against one root key with one signature primitive.

    Stateless after construction; one instance may be shared across threads.

    Usage:
        verifier = CertificateVerifier(root_key=IC_ROOT_KEY)
        verified = verifier.verify(certificate, "rrkah-fqaaa-aaaaa-aaaaq-cai")
    """

    def __init__(
        self,
        *,
        root_key: RootKeyStore = IC_ROOT_KEY,
        primitive: SignaturePrimitive = verify_signature,
        expiry: Optional[ExpiryPolicy] = None,
    ) -> None:
        self.root_key = root_key
        self.primitive = primitive
        self.expiry = expiry

    def verify(
        self,
        certificate: Certificate,
        expected_signer: Principal | str,
    ) -> VerifiedCertificate:
        """
        Verify a certificate.

        Args:
            certificate: Certificate to check
            expected_signer: Principal (or its text) the certificate must speak for

        Returns:
            VerifiedCertificate

        Raises:
            PrincipalFormatException: If expected_signer text is invalid
            SignatureInvalidException: If the signature does not verify
            ExpiredCertificateException: If outside the expiry window
            MissingFieldException / LookupUnknownException: If a window is
                configured and the time leaf cannot be read
            UnsupportedKeyAlgorithmException: If the primitive cannot handle the key
        """
        signer = (
            expected_signer
            if isinstance(expected_signer, Principal)
            else Principal.from_text(expected_signer)
        )

        root_digest = tree_digest(certificate.tree)
        logger.debug("Certificate root digest: %s", root_digest.hex())

        message = state_root_message(root_digest)
        if not self.primitive(self.root_key.der, message, certificate.signature):
            raise SignatureInvalidException(
                details={
                    "root_digest": root_digest.hex(),
                    "root_key_fingerprint": self.root_key.fingerprint,
                },
            )

        time_ns: Optional[int] = None
        if self.expiry is not None:
            time_ns = certificate_time_ns(certificate)
            self.expiry.check(time_ns)
        else:
            logger.debug("No expiry window configured; certificate time not checked")

        logger.info(
            "Certificate verified for %s against root key %s",
            signer,
            self.root_key.fingerprint,
        )
        return VerifiedCertificate(
            certificate=certificate,
            root_digest=root_digest,
            signer=signer,
            root_key_fingerprint=self.root_key.fingerprint,
            time_ns=time_ns,
        )


def verify_certificate(
    certificate: Certificate,
    expected_signer: Principal | str,
    *,
    root_key: RootKeyStore = IC_ROOT_KEY,
    primitive: SignaturePrimitive = verify_signature,
    expiry: Optional[ExpiryPolicy] = None,
) -> VerifiedCertificate:
    """Functional form of CertificateVerifier.verify."""
    verifier = CertificateVerifier(root_key=root_key, primitive=primitive, expiry=expiry)
    return verifier.verify(certificate, expected_signer)


__all__ = [
    "ExpiryPolicy",
    "VerifiedCertificate",
    "CertificateVerifier",
    "certificate_time_ns",
    "verify_certificate",
]
