"""
CLI Verify Command

Verify a persisted certificate offline:
- Load and decode the certificate file
- Recompute the root digest and check the signature against the root key
- Optionally check the certificate time window
- Extract the request status and reply

Usage:
    statecert verify signed_reply.json [--canister ID] [--root-key B64] [--max-age S] [--json] [--debug]
"""

from __future__ import annotations

import logging
from argparse import Namespace
from pathlib import Path

from statecert.schemas.errors import WorkflowStageException

from orchestrator.pipeline import CertifiedCallWorkflow, WorkflowResult
from statecert_cli.commands.common import (
    EXIT_SUCCESS,
    build_summary,
    exit_code_for,
    print_summary,
    report_failure,
)
from statecert_cli.config import runtime_from_args, wants_json


logger = logging.getLogger(__name__)


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    runtime = runtime_from_args(args.cli_config, args)
    cert_path = Path(args.cert_path or runtime.artifact_path)
    output_json = wants_json(args.cli_config, args)

    workflow = CertifiedCallWorkflow(runtime)
    result = WorkflowResult(path=cert_path)

    if not output_json:
        print(f"Verifying {cert_path} for {runtime.call.canister_id}")
    try:
        workflow.load_and_verify(cert_path, result)
    except WorkflowStageException as e:
        report_failure(e)
        summary = build_summary(
            result,
            canister_id=runtime.call.canister_id,
            method=runtime.call.method,
            debug=args.debug,
            failure=e,
        )
        print_summary(summary, output_json)
        logger.warning("Verification failed at stage %s", e.stage)
        return exit_code_for(e)

    summary = build_summary(
        result,
        canister_id=runtime.call.canister_id,
        method=runtime.call.method,
        debug=args.debug,
    )
    print_summary(summary, output_json)
    logger.info("Verification passed")
    return EXIT_SUCCESS
