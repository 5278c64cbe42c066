"""
Certified Call Workflow

Two-phase runner separating network trust from cryptographic trust:

    phase 1: fetch -> persist           (talks to the network)
    phase 2: load -> verify -> extract -> decode   (offline)

Only the persisted certificate crosses the phase boundary. The reply the
gateway returned alongside it is not trusted; the reply handed to the
decoder is the one read out of the verified tree.

Every stage failure is raised as WorkflowStageException naming the stage.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from statecert.certificate.models import Certificate
from statecert.certificate.request_status import RequestStatus, extract_request_status
from statecert.certificate.verifier import (
    CertificateVerifier,
    ExpiryPolicy,
    VerifiedCertificate,
)
from statecert.config.runtime import RuntimeConfig, get_default_config
from statecert.crypto.hashing import from_hex
from statecert.crypto.principal import Principal
from statecert.crypto.root_key import get_root_key
from statecert.crypto.signatures import load_signature_primitive, verify_signature
from statecert.schemas.errors import StateCertError, WorkflowStageException
from statecert.schemas.verification import CheckResult, VerificationResult

from orchestrator.artifacts.io import load_certificate, save_certificate
from orchestrator.fetch import CertificateSource, FetchedCall, HttpCertificateSource


logger = logging.getLogger(__name__)

T = TypeVar("T")

ReplyDecoder = Callable[[bytes], Any]


class WorkflowStage(str, Enum):
    """Stages of the certified call workflow, in execution order."""
    FETCH = "fetch"
    PERSIST = "persist"
    LOAD = "load"
    VERIFY = "verify"
    EXTRACT = "extract"
    DECODE = "decode"


def _raw_reply(reply: bytes) -> bytes:
    return reply


@dataclass
class WorkflowResult:
    """Everything the workflow produced, stage by stage."""
    path: Optional[Path] = None
    sha256: Optional[str] = None
    verified: Optional[VerifiedCertificate] = None
    request_status: Optional[RequestStatus] = None
    decoded_reply: Any = None
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def root_digest(self) -> Optional[bytes]:
        return self.verified.root_digest if self.verified else None

    @property
    def reply(self) -> Optional[bytes]:
        return self.request_status.reply if self.request_status else None

    def verification(self, error: Optional[StateCertError] = None) -> VerificationResult:
        return VerificationResult.from_checks(self.checks, error)

    def to_dict(self) -> dict[str, Any]:
        status = self.request_status
        return {
            "ok": self.verification().ok,
            "path": str(self.path) if self.path else None,
            "sha256": self.sha256,
            "root_digest": self.root_digest.hex() if self.root_digest else None,
            "signer": str(self.verified.signer) if self.verified else None,
            "root_key_fingerprint": self.verified.root_key_fingerprint if self.verified else None,
            "status": status.status if status else None,
            "request_id": status.id.hex() if status else None,
            "reply_size": len(status.reply) if status else None,
            "checks": [c.model_dump() for c in self.checks],
        }


class CertifiedCallWorkflow:
    """
    Fetch, persist, reload and verify one certified call.

    Usage:
        workflow = CertifiedCallWorkflow(config)
        result = workflow.run("signed_reply.json")
        print(result.request_status.status, result.decoded_reply)

    Collaborators default to what the config describes and can be replaced
    individually (a fake source in tests, a BLS-capable verifier primitive
    for mainnet certificates).
    """

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        *,
        source: Optional[CertificateSource] = None,
        verifier: Optional[CertificateVerifier] = None,
        reply_decoder: Optional[ReplyDecoder] = None,
    ) -> None:
        self.config = config or get_default_config()
        self._source = source
        self._verifier = verifier
        self.reply_decoder = reply_decoder or _raw_reply

    @property
    def source(self) -> CertificateSource:
        if self._source is None:
            self._source = HttpCertificateSource(
                self.config.network.gateway_url,
                proxy=self.config.network.proxy,
            )
        return self._source

    @property
    def verifier(self) -> CertificateVerifier:
        if self._verifier is None:
            verification = self.config.verification
            expiry = None
            if verification.max_age_s is not None:
                expiry = ExpiryPolicy(
                    max_age_s=verification.max_age_s,
                    max_future_drift_s=verification.max_future_drift_s,
                )
            trust = self.config.trust
            primitive = (
                load_signature_primitive(trust.signature_primitive)
                if trust.signature_primitive
                else verify_signature
            )
            self._verifier = CertificateVerifier(
                root_key=get_root_key(trust.root_key_b64),
                primitive=primitive,
                expiry=expiry,
            )
        return self._verifier

    def _stage(self, stage: WorkflowStage, result: WorkflowResult, func: Callable[[], T]) -> T:
        """Run one stage; a failure is recorded as a failed check and re-raised."""
        logger.debug("Stage %s starting", stage.value)
        try:
            value = func()
        except Exception as e:
            logger.error("Stage %s failed: %s", stage.value, e)
            failure = WorkflowStageException(stage.value, e)
            result.checks.append(CheckResult.failed(
                stage.value, str(e), details=failure.details["cause"]
            ))
            raise failure from e
        logger.debug("Stage %s done", stage.value)
        return value

    def fetch_and_persist(
        self,
        out_path: Optional[str | Path] = None,
        result: Optional[WorkflowResult] = None,
    ) -> WorkflowResult:
        """
        Phase 1: fetch the certified call and write its certificate to disk.

        Raises:
            WorkflowStageException: stage "fetch" or "persist"
        """
        result = result or WorkflowResult()
        call = self.config.call
        target = Path(out_path or self.config.artifact_path)

        canister_id = self._stage(
            WorkflowStage.FETCH, result, lambda: Principal.from_text(call.canister_id)
        )
        arg = self._stage(WorkflowStage.FETCH, result, lambda: from_hex(call.arg_hex))
        fetched: FetchedCall = self._stage(
            WorkflowStage.FETCH,
            result,
            lambda: self.source.fetch_certified_call(
                canister_id,
                call.method,
                arg,
                timeout_s=self.config.network.timeout,
            ),
        )
        result.checks.append(CheckResult.passed(
            "fetch",
            f"Fetched {call.method} from {canister_id}",
            details={"unverified_reply_size": len(fetched.reply)},
        ))

        path, sha256 = self._stage(
            WorkflowStage.PERSIST, result, lambda: save_certificate(fetched.certificate, target)
        )
        result.path = path
        result.sha256 = sha256
        result.checks.append(CheckResult.passed(
            "persist", f"Certificate written to {path}", details={"sha256": sha256}
        ))
        return result

    def load_and_verify(
        self,
        path: Optional[str | Path] = None,
        result: Optional[WorkflowResult] = None,
    ) -> WorkflowResult:
        """
        Phase 2: load a persisted certificate, verify it, extract and decode the reply.

        Raises:
            WorkflowStageException: stage "load", "verify", "extract" or "decode"
        """
        result = result or WorkflowResult()
        source_path = Path(path or result.path or self.config.artifact_path)
        if result.path is None:
            result.path = source_path

        certificate: Certificate = self._stage(
            WorkflowStage.LOAD, result, lambda: load_certificate(source_path)
        )
        result.checks.append(CheckResult.passed("load", f"Certificate loaded from {source_path}"))

        verified = self._stage(
            WorkflowStage.VERIFY,
            result,
            lambda: self.verifier.verify(certificate, self.config.call.canister_id),
        )
        result.verified = verified
        result.checks.append(CheckResult.passed(
            "verify",
            "Certificate signature verified",
            details={
                "root_digest": verified.root_digest.hex(),
                "root_key_fingerprint": verified.root_key_fingerprint,
            },
        ))

        status = self._stage(WorkflowStage.EXTRACT, result, lambda: extract_request_status(verified.tree))
        result.request_status = status
        reply = self._stage(WorkflowStage.EXTRACT, result, status.require_reply)
        result.checks.append(CheckResult.passed(
            "extract",
            f"Request {status.id.hex()} is {status.status}",
            details={"reply_size": len(reply)},
        ))

        result.decoded_reply = self._stage(WorkflowStage.DECODE, result, lambda: self.reply_decoder(reply))
        result.checks.append(CheckResult.passed("decode", "Reply decoded"))
        return result

    def run(self, out_path: Optional[str | Path] = None) -> WorkflowResult:
        """Run both phases back to back."""
        result = self.fetch_and_persist(out_path)
        logger.info("Certificate persisted; verifying offline copy")
        return self.load_and_verify(result.path, result)


__all__ = [
    "WorkflowStage",
    "WorkflowResult",
    "CertifiedCallWorkflow",
    "ReplyDecoder",
]
