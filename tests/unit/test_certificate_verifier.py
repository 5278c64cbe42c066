"""
Certificate Verifier Unit Tests
Tests for statecert/certificate/verifier.py

1. Valid certificate verifies and binds signer, digest and key fingerprint
2. Tampering with tree or signature raises SignatureInvalidException
3. Wrong or corrupted root keys fail
4. Expiry window: stale and far-future certificates rejected when bounded
5. Pluggable primitive receives the state root message
"""
import pytest

from statecert.certificate.models import Certificate, encode_leb128
from statecert.certificate.verifier import (
    CertificateVerifier,
    ExpiryPolicy,
    VerifiedCertificate,
    certificate_time_ns,
    verify_certificate,
)
from statecert.crypto.principal import Principal
from statecert.crypto.root_key import RootKeyStore
from statecert.crypto.signatures import state_root_message
from statecert.hashtree.digest import tree_digest
from statecert.hashtree.tree import fork, labeled, labeled_map, leaf, pruned
from statecert.schemas.errors import (
    ErrorCodes,
    ExpiredCertificateException,
    LookupUnknownException,
    MissingFieldException,
    PrincipalFormatException,
    SignatureInvalidException,
    StateCertException,
    TreeMalformedException,
    UnsupportedKeyAlgorithmException,
)

from fixtures.common import (
    FIXED_TIME_NS,
    GOVERNANCE_ID,
    make_certificate,
    make_request_status_tree,
    make_root_key,
    make_signing_key,
    public_key_der,
)


NANOS = 1_000_000_000


def fixed_clock(now_ns: int):
    return lambda: now_ns


class TestValidCertificate:
    """A correctly signed certificate verifies."""

    def test_verifies(self, certificate, root_key):
        verified = CertificateVerifier(root_key=root_key).verify(certificate, GOVERNANCE_ID)

        assert isinstance(verified, VerifiedCertificate)
        assert verified.root_digest == tree_digest(certificate.tree)
        assert verified.signer == Principal.from_text(GOVERNANCE_ID)
        assert verified.root_key_fingerprint == root_key.fingerprint
        assert verified.tree is certificate.tree
        assert verified.time_ns is None

    def test_accepts_principal_instance(self, certificate, root_key):
        signer = Principal.from_text(GOVERNANCE_ID)
        verified = verify_certificate(certificate, signer, root_key=root_key)
        assert verified.signer is signer

    def test_certificate_not_mutated(self, certificate, root_key):
        before = certificate.to_dict()
        verify_certificate(certificate, GOVERNANCE_ID, root_key=root_key)
        assert certificate.to_dict() == before

    def test_invalid_signer_text(self, certificate, root_key):
        with pytest.raises(PrincipalFormatException):
            verify_certificate(certificate, "not-a-principal", root_key=root_key)


class TestTampering:
    """Any modification breaks the signature."""

    def test_flipped_leaf_byte(self, signing_key, root_key):
        cert = make_certificate(signing_key)
        tampered_tree = make_request_status_tree(reply=b"DIDL\x00\x01\x71\x05hellp")
        tampered = Certificate(tree=tampered_tree, signature=cert.signature)

        assert tree_digest(tampered_tree) != tree_digest(cert.tree)
        with pytest.raises(SignatureInvalidException) as exc_info:
            verify_certificate(tampered, GOVERNANCE_ID, root_key=root_key)
        assert exc_info.value.code == ErrorCodes.SIGNATURE_INVALID
        assert exc_info.value.details["root_digest"] == tree_digest(tampered_tree).hex()

    def test_flipped_signature_byte(self, certificate, root_key):
        sig = bytearray(certificate.signature)
        sig[0] ^= 0x01
        tampered = Certificate(tree=certificate.tree, signature=bytes(sig))

        with pytest.raises(SignatureInvalidException):
            verify_certificate(tampered, GOVERNANCE_ID, root_key=root_key)

    def test_pruning_keeps_signature_valid(self, signing_key, root_key):
        """Pruning a branch preserves the digest, so the signature still holds."""
        tree = make_request_status_tree()
        cert = make_certificate(signing_key, tree)
        partial = fork(tree.left, pruned(tree_digest(tree.right)))

        verified = verify_certificate(
            Certificate(tree=partial, signature=cert.signature), GOVERNANCE_ID, root_key=root_key
        )
        assert verified.root_digest == tree_digest(tree)


class TestRootKeys:
    """Verification against the wrong trust anchor."""

    def test_wrong_key(self, certificate):
        other = make_root_key(make_signing_key())
        with pytest.raises(SignatureInvalidException):
            verify_certificate(certificate, GOVERNANCE_ID, root_key=other)

    def test_corrupted_key(self, signing_key, certificate):
        der = bytearray(public_key_der(signing_key))
        der[-1] ^= 0x01
        corrupted = RootKeyStore(der=bytes(der), source="override")

        # a flipped point byte either fails to load or fails to verify
        with pytest.raises(StateCertException) as exc_info:
            verify_certificate(certificate, GOVERNANCE_ID, root_key=corrupted)
        assert isinstance(
            exc_info.value, (SignatureInvalidException, UnsupportedKeyAlgorithmException)
        )

    def test_builtin_bls_key_needs_primitive(self, certificate):
        with pytest.raises(UnsupportedKeyAlgorithmException):
            verify_certificate(certificate, GOVERNANCE_ID)


class TestPluggablePrimitive:
    """The signature primitive is an injected collaborator."""

    def test_primitive_receives_state_root_message(self, certificate):
        calls = []

        def primitive(key, message, signature):
            calls.append((key, message, signature))
            return True

        store = RootKeyStore(der=b"opaque key", source="override")
        verify_certificate(certificate, GOVERNANCE_ID, root_key=store, primitive=primitive)

        assert calls == [(
            b"opaque key",
            state_root_message(tree_digest(certificate.tree)),
            certificate.signature,
        )]

    def test_primitive_false_is_invalid(self, certificate):
        store = RootKeyStore(der=b"opaque key", source="override")
        with pytest.raises(SignatureInvalidException):
            verify_certificate(
                certificate, GOVERNANCE_ID, root_key=store, primitive=lambda k, m, s: False
            )


class TestExpiryWindow:
    """Time leaf checks when an ExpiryPolicy is configured."""

    def _verify(self, signing_key, root_key, time_ns, now_ns, max_age_s=300.0):
        cert = make_certificate(signing_key, make_request_status_tree(time_ns=time_ns))
        policy = ExpiryPolicy(max_age_s=max_age_s, clock=fixed_clock(now_ns))
        return verify_certificate(cert, GOVERNANCE_ID, root_key=root_key, expiry=policy)

    def test_fresh_certificate_accepted(self, signing_key, root_key):
        verified = self._verify(signing_key, root_key, FIXED_TIME_NS, FIXED_TIME_NS + 10 * NANOS)
        assert verified.time_ns == FIXED_TIME_NS

    def test_stale_certificate_rejected(self, signing_key, root_key):
        with pytest.raises(ExpiredCertificateException) as exc_info:
            self._verify(signing_key, root_key, FIXED_TIME_NS, FIXED_TIME_NS + 3600 * NANOS)
        assert exc_info.value.details["certificate_time_ns"] == FIXED_TIME_NS

    def test_future_certificate_rejected(self, signing_key, root_key):
        with pytest.raises(ExpiredCertificateException):
            self._verify(signing_key, root_key, FIXED_TIME_NS + 3600 * NANOS, FIXED_TIME_NS)

    def test_small_future_drift_accepted(self, signing_key, root_key):
        verified = self._verify(signing_key, root_key, FIXED_TIME_NS + 60 * NANOS, FIXED_TIME_NS)
        assert verified.time_ns == FIXED_TIME_NS + 60 * NANOS

    def test_unbounded_accepts_old_and_future(self, signing_key, root_key):
        for time_ns in (0, FIXED_TIME_NS * 2):
            cert = make_certificate(signing_key, make_request_status_tree(time_ns=time_ns))
            verify_certificate(cert, GOVERNANCE_ID, root_key=root_key)

    def test_missing_time_leaf(self, signing_key, root_key):
        tree = labeled_map({"request_status": labeled("x", leaf("y"))})
        cert = make_certificate(signing_key, tree)
        policy = ExpiryPolicy(max_age_s=300.0, clock=fixed_clock(FIXED_TIME_NS))
        with pytest.raises(MissingFieldException) as exc_info:
            verify_certificate(cert, GOVERNANCE_ID, root_key=root_key, expiry=policy)
        assert exc_info.value.field == "time"

    def test_pruned_time_leaf(self, signing_key, root_key):
        tree = labeled("time", pruned(tree_digest(leaf(encode_leb128(FIXED_TIME_NS)))))
        cert = make_certificate(signing_key, tree)
        policy = ExpiryPolicy(max_age_s=300.0, clock=fixed_clock(FIXED_TIME_NS))
        with pytest.raises(LookupUnknownException):
            verify_certificate(cert, GOVERNANCE_ID, root_key=root_key, expiry=policy)


class TestCertificateTime:
    """certificate_time_ns reads the LEB128 time leaf."""

    def test_reads_time(self, certificate):
        assert certificate_time_ns(certificate) == FIXED_TIME_NS

    def test_bad_time_encoding(self):
        cert = Certificate(tree=labeled("time", leaf(b"\x80")), signature=b"")
        with pytest.raises(TreeMalformedException) as exc_info:
            certificate_time_ns(cert)
        assert exc_info.value.details["path"] == ["time"]
