"""
Artifact IO

Purpose: Persist a fetched certificate to disk and read it back verbatim for
offline verification. The file is one canonical JSON document (see
statecert.certificate.models for the layout), written atomically.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path

from statecert.certificate.models import Certificate
from statecert.schemas.canonical import dumps_canonical
from statecert.schemas.errors import CertificateDecodeException


logger = logging.getLogger(__name__)


class ArtifactIOError(Exception):
    """Error reading or writing a certificate artifact."""
    pass


class ArtifactMissingError(ArtifactIOError):
    """The artifact file does not exist."""
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Certificate artifact not found: {path}")


def compute_sha256(data: bytes) -> str:
    """Compute SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def dump_certificate(certificate: Certificate) -> bytes:
    """Serialize a certificate to canonical JSON bytes."""
    return dumps_canonical(certificate.to_dict()).encode("utf-8")


def parse_certificate(data: bytes) -> Certificate:
    """
    Parse certificate bytes produced by dump_certificate.

    Raises:
        CertificateDecodeException: If the bytes are not a valid certificate document
    """
    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CertificateDecodeException(f"Certificate artifact is not valid JSON: {e}") from e
    except RecursionError as e:
        raise CertificateDecodeException("Certificate artifact is nested too deeply") from e
    return Certificate.from_dict(document)


def save_certificate(certificate: Certificate, path: str | Path) -> tuple[Path, str]:
    """
    Atomically write a certificate to `path`.

    The document is written to a temporary file in the same directory and
    renamed over the target, so readers see either the old file or the
    complete new one.

    Returns:
        (path, sha256 hex of the written bytes)
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = dump_certificate(certificate)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, out_path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArtifactIOError(f"Failed to write certificate to {out_path}: {e}") from e

    sha256 = compute_sha256(data)
    logger.info("Saved certificate to %s (%d bytes, sha256=%s)", out_path, len(data), sha256)
    return out_path, sha256


def load_certificate(path: str | Path) -> Certificate:
    """
    Load a certificate previously written by save_certificate.

    Raises:
        ArtifactMissingError: If the file does not exist
        ArtifactIOError: If the file cannot be read
        CertificateDecodeException: If the content is malformed
    """
    in_path = Path(path)
    if not in_path.exists():
        raise ArtifactMissingError(in_path)
    try:
        data = in_path.read_bytes()
    except OSError as e:
        raise ArtifactIOError(f"Failed to read certificate from {in_path}: {e}") from e

    logger.info("Loaded certificate from %s (sha256=%s)", in_path, compute_sha256(data))
    return parse_certificate(data)


__all__ = [
    "ArtifactIOError",
    "ArtifactMissingError",
    "compute_sha256",
    "dump_certificate",
    "parse_certificate",
    "save_certificate",
    "load_certificate",
]
