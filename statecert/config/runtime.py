"""
Runtime Configuration

Central configuration for fetching, persisting and verifying certificates.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


# Governance service and the call the reference workflow makes.
DEFAULT_CANISTER_ID = "rrkah-fqaaa-aaaaa-aaaaq-cai"
DEFAULT_METHOD = "get_build_metadata"
DEFAULT_GATEWAY_URL = "https://ic0.app"
DEFAULT_ARTIFACT_PATH = "signed_reply.json"


@dataclass
class NetworkConfig:
    """Configuration for the network collaborator."""
    gateway_url: str = DEFAULT_GATEWAY_URL
    timeout: float = 30.0
    proxy: Optional[str] = None


@dataclass
class CallConfig:
    """The certified call to fetch."""
    canister_id: str = DEFAULT_CANISTER_ID
    method: str = DEFAULT_METHOD
    arg_hex: str = "0x"


@dataclass
class TrustConfig:
    """
    Trust anchor settings.

    `root_key_b64` overrides the built-in key. `signature_primitive` names a
    "module:function" verifier to use instead of the default, which cannot
    check the BLS signatures made under the built-in mainnet key.
    """
    root_key_b64: Optional[str] = None
    signature_primitive: Optional[str] = None


@dataclass
class VerificationConfig:
    """
    Certificate freshness window.

    `max_age_s=None` disables the time check, which is what the offline
    replay of a stored certificate needs.
    """
    max_age_s: Optional[float] = None
    max_future_drift_s: float = 300.0


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    network: NetworkConfig = field(default_factory=NetworkConfig)
    call: CallConfig = field(default_factory=CallConfig)
    trust: TrustConfig = field(default_factory=TrustConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    artifact_path: str = DEFAULT_ARTIFACT_PATH

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - STATECERT_GATEWAY_URL: Base URL of the certifying gateway
        - STATECERT_TIMEOUT: Fetch timeout in seconds
        - STATECERT_HTTP_PROXY: HTTP proxy URL
        - STATECERT_CANISTER_ID: Service to call
        - STATECERT_METHOD: Method to call
        - STATECERT_ROOT_KEY_B64: Root key override (local networks)
        - STATECERT_SIGNATURE_PRIMITIVE: "module:function" signature primitive
        - STATECERT_MAX_AGE_S: Freshness window in seconds
        - STATECERT_ARTIFACT_PATH: Where the certificate is persisted
        """
        overrides: dict[str, Any] = {}

        if os.getenv("STATECERT_GATEWAY_URL"):
            overrides.setdefault("network", {})["gateway_url"] = os.getenv("STATECERT_GATEWAY_URL")
        if os.getenv("STATECERT_TIMEOUT"):
            overrides.setdefault("network", {})["timeout"] = float(os.getenv("STATECERT_TIMEOUT"))
        if os.getenv("STATECERT_HTTP_PROXY"):
            overrides.setdefault("network", {})["proxy"] = os.getenv("STATECERT_HTTP_PROXY")

        if os.getenv("STATECERT_CANISTER_ID"):
            overrides.setdefault("call", {})["canister_id"] = os.getenv("STATECERT_CANISTER_ID")
        if os.getenv("STATECERT_METHOD"):
            overrides.setdefault("call", {})["method"] = os.getenv("STATECERT_METHOD")

        if os.getenv("STATECERT_ROOT_KEY_B64"):
            overrides.setdefault("trust", {})["root_key_b64"] = os.getenv("STATECERT_ROOT_KEY_B64")
        if os.getenv("STATECERT_SIGNATURE_PRIMITIVE"):
            overrides.setdefault("trust", {})["signature_primitive"] = os.getenv(
                "STATECERT_SIGNATURE_PRIMITIVE"
            )

        if os.getenv("STATECERT_MAX_AGE_S"):
            overrides.setdefault("verification", {})["max_age_s"] = float(
                os.getenv("STATECERT_MAX_AGE_S")
            )

        if os.getenv("STATECERT_ARTIFACT_PATH"):
            overrides["artifact_path"] = os.getenv("STATECERT_ARTIFACT_PATH")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        network_data = data.get("network") or {}
        call_data = data.get("call") or {}
        trust_data = data.get("trust") or {}
        verification_data = data.get("verification") or {}

        return cls(
            network=NetworkConfig(**network_data),
            call=CallConfig(**call_data),
            trust=TrustConfig(**trust_data),
            verification=VerificationConfig(**verification_data),
            artifact_path=data.get("artifact_path", DEFAULT_ARTIFACT_PATH),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("network", "call", "trust", "verification"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "artifact_path" in overrides:
            new_config.artifact_path = overrides["artifact_path"]
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "network": {
                "gateway_url": self.network.gateway_url,
                "timeout": self.network.timeout,
                "proxy": self.network.proxy,
            },
            "call": {
                "canister_id": self.call.canister_id,
                "method": self.call.method,
                "arg_hex": self.call.arg_hex,
            },
            "trust": {
                "root_key_b64": self.trust.root_key_b64,
                "signature_primitive": self.trust.signature_primitive,
            },
            "verification": {
                "max_age_s": self.verification.max_age_s,
                "max_future_drift_s": self.verification.max_future_drift_s,
            },
            "artifact_path": self.artifact_path,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
