"""
Pytest configuration and shared fixtures for statecert tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_signing_key = _common.make_signing_key
make_root_key = _common.make_root_key
make_certificate = _common.make_certificate
make_request_status_tree = _common.make_request_status_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def signing_key():
    """Provide a fresh Ed25519 signing key."""
    return make_signing_key()


@pytest.fixture
def root_key(signing_key):
    """Provide a RootKeyStore trusting `signing_key`."""
    return make_root_key(signing_key)


@pytest.fixture
def request_status_tree():
    """Provide a tree holding one replied request."""
    return make_request_status_tree()


@pytest.fixture
def certificate(signing_key, request_status_tree):
    """Provide a certificate over `request_status_tree` signed by `signing_key`."""
    return make_certificate(signing_key, request_status_tree)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep STATECERT_* variables from the caller's shell out of the tests."""
    import os
    for name in list(os.environ):
        if name.startswith("STATECERT_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in a list of CheckResults."""
    def _assert(checks, check_id: str):
        matching = [c for c in checks if c.check_id == check_id]
        assert len(matching) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in checks]}"
        assert matching[0].ok, f"Check '{check_id}' failed: {matching[0].message}"
    return _assert
