"""
Orchestrator - Certified Call Workflow

Wires the statecert core to the outside world: fetching a certified call,
persisting its certificate, and replaying verification offline.

Public API:
- CertifiedCallWorkflow: Two-phase runner (fetch/persist, load/verify/extract)
- WorkflowResult: Artifacts produced by a workflow run
- WorkflowStage: Stage names used in failure diagnostics
- CertificateSource / HttpCertificateSource / FetchedCall: Network collaborator
"""

from orchestrator.fetch import (
    CertificateSource,
    FetchedCall,
    HttpCertificateSource,
)
from orchestrator.pipeline import (
    CertifiedCallWorkflow,
    ReplyDecoder,
    WorkflowResult,
    WorkflowStage,
)


__all__ = [
    # Workflow
    "CertifiedCallWorkflow",
    "WorkflowResult",
    "WorkflowStage",
    "ReplyDecoder",
    # Network
    "CertificateSource",
    "FetchedCall",
    "HttpCertificateSource",
]
