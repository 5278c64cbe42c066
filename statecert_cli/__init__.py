"""
statecert CLI

Command-line interface for fetching and verifying certified replies.

Usage:
    python -m statecert_cli run --out signed_reply.json
    python -m statecert_cli fetch --out signed_reply.json
    python -m statecert_cli verify signed_reply.json
    python -m statecert_cli paths signed_reply.json
"""

__version__ = "0.1.0"
