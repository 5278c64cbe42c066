"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m statecert_cli fetch [--out PATH] [--canister ID] [--method NAME] [--json]
    python -m statecert_cli verify <cert_path> [--canister ID] [--root-key B64] [--max-age S] [--json] [--debug]
    python -m statecert_cli run [--out PATH] [--json] [--debug]
    python -m statecert_cli paths <cert_path> [--json]
    python -m statecert_cli config --init

Environment Variables:
    STATECERT_LOG_LEVEL         Log level (default: INFO)
    STATECERT_LOG_FILE          Also write logs to this file
    STATECERT_GATEWAY_URL       Gateway base URL (default: https://ic0.app)
    STATECERT_CANISTER_ID       Service to call
    STATECERT_METHOD            Method to call
    STATECERT_ROOT_KEY_B64      Root key override for local networks
    STATECERT_MAX_AGE_S         Reject certificates older than this
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from statecert import __version__
from statecert_cli.commands import fetch, paths, run, verify
from statecert_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from statecert_cli.config import CLIConfig, get_default_config_template, load_config


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_call_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--canister",
        type=str,
        default=None,
        help="Textual id of the service to call (default: from config)",
    )
    parser.add_argument(
        "--method",
        type=str,
        default=None,
        help="Method to call (default: from config)",
    )
    parser.add_argument(
        "--arg",
        type=str,
        default=None,
        help="Call argument as 0x-prefixed hex (default: empty)",
    )
    parser.add_argument(
        "--gateway",
        type=str,
        default=None,
        help="Gateway base URL (default: from config)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Fetch timeout in seconds",
    )


def _add_trust_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root-key",
        dest="root_key",
        type=str,
        default=None,
        help=(
            "Base64 DER root public key overriding the built-in key. The built-in "
            "mainnet key is BLS, which the default verifier does not support: pass "
            "an Ed25519 or P-256 key here or use --signature-primitive"
        ),
    )
    parser.add_argument(
        "--signature-primitive",
        dest="signature_primitive",
        type=str,
        default=None,
        help="Signature verifier as module:function(public_key_der, message, signature) -> bool",
    )
    parser.add_argument(
        "--max-age",
        dest="max_age",
        type=float,
        default=None,
        help="Reject certificates older than this many seconds (default: no bound)",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include per-stage checks in output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="statecert",
        description="Fetch and verify certified replies from a replicated state machine.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./statecert.json or ~/.config/statecert/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- fetch command ---
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch a certified call and persist its certificate",
        description="Call the service through the gateway and write the certificate to disk.",
    )
    fetch_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the certificate (default: signed_reply.json)",
    )
    _add_call_arguments(fetch_parser)
    _add_output_arguments(fetch_parser)
    fetch_parser.set_defaults(func=fetch.fetch_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a persisted certificate offline",
        description="Check the certificate signature and extract the request status and reply.",
    )
    verify_parser.add_argument(
        "cert_path",
        type=str,
        nargs="?",
        default=None,
        help="Path to the certificate file (default: from config)",
    )
    verify_parser.add_argument(
        "--canister",
        type=str,
        default=None,
        help="Textual id of the service the certificate must speak for",
    )
    _add_trust_arguments(verify_parser)
    _add_output_arguments(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- run command ---
    run_parser = subparsers.add_parser(
        "run",
        help="Fetch, persist, reload and verify in one go",
        description="Run the complete certified call workflow.",
    )
    run_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the certificate (default: signed_reply.json)",
    )
    _add_call_arguments(run_parser)
    _add_trust_arguments(run_parser)
    _add_output_arguments(run_parser)
    run_parser.set_defaults(func=run.run_cmd)

    # --- paths command ---
    paths_parser = subparsers.add_parser(
        "paths",
        help="List the leaf paths revealed by a certificate (unverified)",
    )
    paths_parser.add_argument(
        "cert_path",
        type=str,
        help="Path to the certificate file",
    )
    paths_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    paths_parser.set_defaults(func=paths.paths_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file (statecert.json)",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    config: CLIConfig = args.cli_config

    if args.init:
        config_path = Path.cwd() / "statecert.json"
        if config_path.exists():
            print(f"Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created config file: {config_path}")
        return EXIT_SUCCESS

    if args.show:
        config_dict = {
            "log_level": config.log_level,
            "log_file": config.log_file,
            "default_output_format": config.default_output_format,
            "runtime": config.runtime.to_dict(),
        }
        if config_dict["runtime"]["trust"]["root_key_b64"]:
            config_dict["runtime"]["trust"]["root_key_b64"] = "(override configured)"
        print(json.dumps(config_dict, indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: statecert config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
