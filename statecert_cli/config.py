"""
CLI Configuration

Configuration management for the statecert CLI.
Supports environment variables and configuration files.
"""

from __future__ import annotations

import json
import os
from argparse import Namespace
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from statecert.config.runtime import RuntimeConfig


# Environment variable prefix
ENV_PREFIX = "STATECERT_"


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"

    # Fetch / verify settings shared with the library
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    config = CLIConfig()
    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)
    config.default_output_format = data.get(
        "default_output_format", config.default_output_format
    )
    config.runtime = RuntimeConfig.from_dict(data.get("runtime") or {})
    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / "statecert.json",
            Path.cwd() / ".statecert.json",
            Path.home() / ".config" / "statecert" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")
    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        config.default_output_format = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT")

    config.runtime = config.runtime.with_env_overrides()
    return config


def runtime_from_args(config: CLIConfig, args: Namespace) -> RuntimeConfig:
    """
    Apply command-line flags on top of the configured runtime settings.

    Flags a command does not define are ignored.
    """
    data: dict[str, Any] = config.runtime.to_dict()

    def _set(section: str | None, key: str, attr: str) -> None:
        value = getattr(args, attr, None)
        if value is None:
            return
        if section is None:
            data[key] = value
        else:
            data[section][key] = value

    _set("network", "gateway_url", "gateway")
    _set("network", "timeout", "timeout")
    _set("call", "canister_id", "canister")
    _set("call", "method", "method")
    _set("call", "arg_hex", "arg")
    _set("trust", "root_key_b64", "root_key")
    _set("trust", "signature_primitive", "signature_primitive")
    _set("verification", "max_age_s", "max_age")
    return RuntimeConfig.from_dict(data)


def wants_json(config: CLIConfig, args: Namespace) -> bool:
    """Whether output should be JSON (flag or configured default)."""
    return bool(getattr(args, "json", False)) or config.default_output_format == "json"


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "log_level": "INFO",
  "log_file": null,
  "default_output_format": "human",
  "runtime": {
    "network": {
      "gateway_url": "https://ic0.app",
      "timeout": 30.0,
      "proxy": null
    },
    "call": {
      "canister_id": "rrkah-fqaaa-aaaaa-aaaaq-cai",
      "method": "get_build_metadata",
      "arg_hex": "0x"
    },
    "trust": {
      "root_key_b64": null,
      "signature_primitive": null
    },
    "verification": {
      "max_age_s": null,
      "max_future_drift_s": 300.0
    },
    "artifact_path": "signed_reply.json"
  }
}
"""
