"""
CLI command modules.
"""

from statecert_cli.commands import fetch, paths, run, verify

__all__ = ["fetch", "paths", "run", "verify"]
