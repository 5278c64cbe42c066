"""
Artifact IO

Saving and loading the persisted certificate artifact.
"""

from orchestrator.artifacts.io import (
    ArtifactIOError,
    ArtifactMissingError,
    compute_sha256,
    dump_certificate,
    parse_certificate,
    save_certificate,
    load_certificate,
)

__all__ = [
    "ArtifactIOError",
    "ArtifactMissingError",
    "compute_sha256",
    "dump_certificate",
    "parse_certificate",
    "save_certificate",
    "load_certificate",
]
