"""
Test fixtures package for statecert tests.

This package provides factory functions for creating test objects:
- common.py: signing keys, request status trees and signed certificates

Usage:
    from fixtures import make_signing_key, make_certificate, make_root_key

    def test_something():
        key = make_signing_key()
        cert = make_certificate(key)
"""

from .common import (
    DEFAULT_REPLY,
    DEFAULT_REQUEST_ID,
    FIXED_TIME_NS,
    GOVERNANCE_ID,
    make_certificate,
    make_request_status_tree,
    make_root_key,
    make_signing_key,
    public_key_der,
    sign_tree,
)

__all__ = [
    "DEFAULT_REPLY",
    "DEFAULT_REQUEST_ID",
    "FIXED_TIME_NS",
    "GOVERNANCE_ID",
    "make_certificate",
    "make_request_status_tree",
    "make_root_key",
    "make_signing_key",
    "public_key_der",
    "sign_tree",
]
