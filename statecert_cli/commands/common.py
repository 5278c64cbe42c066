"""
Shared CLI output helpers: exit codes, the workflow summary and stage
failure reporting.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from statecert.schemas.errors import CertificateDecodeException, WorkflowStageException

from orchestrator.pipeline import WorkflowResult, WorkflowStage


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

# Stages whose failure means the certificate or its content was rejected
VERIFICATION_STAGES = frozenset({
    WorkflowStage.VERIFY.value,
    WorkflowStage.EXTRACT.value,
    WorkflowStage.DECODE.value,
})


@dataclass
class WorkflowSummary:
    """Summary of a workflow run for CLI output."""
    ok: bool = False
    path: str = ""
    sha256: str | None = None
    canister_id: str = ""
    method: str = ""
    root_digest: str | None = None
    root_key_fingerprint: str | None = None
    status: str | None = None
    request_id: str | None = None
    reply_hex: str | None = None
    failed_stage: str | None = None
    error: dict[str, Any] | None = None
    checks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        for key in ("sha256", "root_digest", "root_key_fingerprint", "status",
                    "request_id", "reply_hex", "failed_stage", "error"):
            if d[key] is None:
                del d[key]
        if not d["checks"]:
            del d["checks"]
        return d


def build_summary(
    result: Optional[WorkflowResult],
    *,
    canister_id: str,
    method: str,
    debug: bool = False,
    failure: Optional[WorkflowStageException] = None,
) -> WorkflowSummary:
    """
    Build a WorkflowSummary from a (possibly partial) workflow result.

    Failed checks are always listed; passed ones only with `debug`.
    """
    summary = WorkflowSummary(canister_id=canister_id, method=method)
    result = result or WorkflowResult()
    verification = result.verification(failure.to_error_model() if failure else None)

    summary.ok = verification.ok
    summary.path = str(result.path) if result.path else ""
    summary.sha256 = result.sha256
    if result.verified is not None:
        summary.root_digest = result.verified.root_digest.hex()
        summary.root_key_fingerprint = result.verified.root_key_fingerprint
    if result.request_status is not None:
        summary.status = result.request_status.status
        summary.request_id = result.request_status.id.hex()
        if result.request_status.reply:
            summary.reply_hex = "0x" + result.request_status.reply.hex()

    checks = verification.checks if debug else verification.failed_checks
    summary.checks = [c.model_dump() for c in checks]

    if failure is not None:
        summary.failed_stage = failure.stage
        summary.error = verification.error.model_dump()
    return summary


def exit_code_for(failure: WorkflowStageException) -> int:
    """
    Map a stage failure to an exit code.

    A certificate file that loads but does not decode is rejected content,
    not an IO problem.
    """
    if failure.stage in VERIFICATION_STAGES:
        return EXIT_VERIFICATION_FAILED
    if failure.stage == WorkflowStage.LOAD.value and isinstance(
        failure.cause, CertificateDecodeException
    ):
        return EXIT_VERIFICATION_FAILED
    return EXIT_RUNTIME_ERROR


def print_summary_human(summary: WorkflowSummary) -> None:
    """Print summary in human-readable format."""
    print(f"canister: {summary.canister_id}")
    print(f"method: {summary.method}")
    if summary.path:
        print(f"certificate: {summary.path}")
    if summary.sha256:
        print(f"sha256: {summary.sha256}")
    if summary.root_digest:
        print(f"root_digest: {summary.root_digest}")
        print(f"root_key: {summary.root_key_fingerprint}")
    if summary.status:
        print(f"request_id: {summary.request_id}")
        print(f"status: {summary.status}")
    if summary.reply_hex:
        print(f"reply: {summary.reply_hex}")
    print(f"ok: {str(summary.ok).lower()}")

    if summary.failed_stage:
        message = summary.error.get("message", "") if summary.error else ""
        print(f"\nfailed stage: {summary.failed_stage}")
        print(f"  ✗ {message}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}: {check['message']}")


def print_summary_json(summary: WorkflowSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def print_summary(summary: WorkflowSummary, output_json: bool) -> None:
    if output_json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)


def report_failure(failure: WorkflowStageException) -> None:
    """Diagnostic line on stderr naming the failed stage."""
    print(f"Error in stage '{failure.stage}': {failure.cause}", file=sys.stderr)
