"""
Runtime Configuration Module

Provides configuration loading for fetching and verifying certificates.
"""

from .runtime import (
    CallConfig,
    NetworkConfig,
    RuntimeConfig,
    TrustConfig,
    VerificationConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "CallConfig",
    "NetworkConfig",
    "RuntimeConfig",
    "TrustConfig",
    "VerificationConfig",
    "get_default_config",
    "set_default_config",
]
