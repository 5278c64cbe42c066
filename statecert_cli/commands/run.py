"""
CLI Run Command

The reference workflow end to end: fetch the certified call, persist the
certificate, reload it from disk and verify it.

Usage:
    statecert run [--out PATH] [--canister ID] [--method NAME] [--json] [--debug]
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


def run_cmd(args: Namespace) -> int:
    """
    Execute the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    runtime = runtime_from_args(args.cli_config, args)
    output_json = wants_json(args.cli_config, args)
    workflow = CertifiedCallWorkflow(runtime)
    result = WorkflowResult()

    if not output_json:
        print(f"Calling {runtime.call.method} on {runtime.call.canister_id}")
    try:
        workflow.fetch_and_persist(args.out, result)
        if not output_json:
            print(f"Certificate written to {result.path}; verifying offline copy")
        workflow.load_and_verify(result.path, result)
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
        return exit_code_for(e)

    summary = build_summary(
        result,
        canister_id=runtime.call.canister_id,
        method=runtime.call.method,
        debug=args.debug,
    )
    print_summary(summary, output_json)
    return EXIT_SUCCESS
