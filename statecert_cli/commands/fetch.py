"""
CLI Fetch Command

Fetch a certified call and persist its certificate. Nothing is verified;
run `statecert verify` on the written file afterwards.

Usage:
    statecert fetch [--out PATH] [--canister ID] [--method NAME] [--arg 0xHEX] [--json]
"""

from __future__ import annotations

import logging
from argparse import Namespace

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


def fetch_cmd(args: Namespace) -> int:
    """
    Execute the fetch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    runtime = runtime_from_args(args.cli_config, args)
    workflow = CertifiedCallWorkflow(runtime)
    output_json = wants_json(args.cli_config, args)

    if not output_json:
        print(f"Fetching {runtime.call.method} from {runtime.call.canister_id} via {runtime.network.gateway_url}")
    result = WorkflowResult()
    try:
        workflow.fetch_and_persist(args.out, result)
    except WorkflowStageException as e:
        report_failure(e)
        summary = build_summary(
            result,
            canister_id=runtime.call.canister_id,
            method=runtime.call.method,
            failure=e,
        )
        print_summary(summary, output_json)
        return exit_code_for(e)

    summary = build_summary(
        result,
        canister_id=runtime.call.canister_id,
        method=runtime.call.method,
        debug=args.debug,
    )
    print_summary(summary, output_json)
    logger.info("Certificate saved to %s", result.path)
    return EXIT_SUCCESS
