"""
CLI Paths Command

Diagnostic listing of the leaf paths a certificate tree reveals. Pruned
branches are not entered. The certificate is NOT verified.

Usage:
    statecert paths signed_reply.json [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from statecert.hashtree.lookup import list_paths, lookup_path
from statecert.schemas.errors import StateCertException

from orchestrator.artifacts.io import ArtifactIOError, load_certificate
from statecert_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, EXIT_VERIFICATION_FAILED
from statecert_cli.config import wants_json


logger = logging.getLogger(__name__)


def _render_label(label: bytes) -> str:
    try:
        text = label.decode("utf-8")
    except UnicodeDecodeError:
        return "0x" + label.hex()
    return text if text.isprintable() else "0x" + label.hex()


def paths_cmd(args: Namespace) -> int:
    """
    Execute the paths command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    cert_path = Path(args.cert_path)
    try:
        certificate = load_certificate(cert_path)
    except ArtifactIOError as e:
        print(f"Error loading certificate: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except StateCertException as e:
        print(f"Error decoding certificate: {e}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    entries = []
    for path in list_paths(certificate.tree):
        value = lookup_path(certificate.tree, path).value or b""
        entries.append({
            "path": [_render_label(label) for label in path],
            "size": len(value),
        })

    if wants_json(args.cli_config, args):
        print(json.dumps({
            "certificate": str(cert_path),
            "root_digest": certificate.root_digest.hex(),
            "paths": entries,
        }, indent=2))
    else:
        print(f"certificate: {cert_path} (unverified)")
        print(f"root_digest: {certificate.root_digest.hex()}")
        print(f"\npaths ({len(entries)}):")
        for entry in entries:
            print(f"  /{'/'.join(entry['path'])} ({entry['size']} bytes)")

    return EXIT_SUCCESS
