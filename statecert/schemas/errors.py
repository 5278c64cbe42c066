"""
Schemas - Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy for certificate decoding, verification and
request-status extraction. Defines both Pydantic models for structured error
reporting and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Decoding & Serialization Errors
    DECODE_ERROR = "DECODE_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    PRINCIPAL_FORMAT_ERROR = "PRINCIPAL_FORMAT_ERROR"

    # Tree & Lookup Errors
    TREE_MALFORMED = "TREE_MALFORMED"
    LOOKUP_UNKNOWN = "LOOKUP_UNKNOWN"

    # Trust Errors
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    EXPIRED_CERTIFICATE = "EXPIRED_CERTIFICATE"
    ROOT_KEY_INTEGRITY = "ROOT_KEY_INTEGRITY"
    UNSUPPORTED_KEY_ALGORITHM = "UNSUPPORTED_KEY_ALGORITHM"

    # Extraction Errors
    MISSING_FIELD = "MISSING_FIELD"
    AMBIGUOUS_REQUEST_ID = "AMBIGUOUS_REQUEST_ID"
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"

    # Workflow Errors
    FETCH_FAILED = "FETCH_FAILED"
    WORKFLOW_STAGE_FAILED = "WORKFLOW_STAGE_FAILED"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class StateCertError(BaseModel):
    """
    Error model for structured error reporting.

    Used by the CLI to emit machine-readable diagnostics and by the workflow
    to attach failures to check results.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.SIGNATURE_INVALID],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class StateCertException(Exception):
    """
    Base exception for all certificate errors.

    Carries structured error information and can be converted to a
    StateCertError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "STATECERT_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> StateCertError:
        """Convert this exception to a StateCertError model."""
        return StateCertError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


def _render_path(path: Any) -> list[str]:
    """Render a label path for error details (UTF-8 where possible, else hex)."""
    rendered: list[str] = []
    for segment in path or []:
        if isinstance(segment, bytes):
            try:
                rendered.append(segment.decode("utf-8"))
            except UnicodeDecodeError:
                rendered.append("0x" + segment.hex())
        else:
            rendered.append(str(segment))
    return rendered


class CanonicalizationException(StateCertException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class CertificateDecodeException(StateCertException):
    """Exception raised when a persisted or fetched certificate is malformed."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.DECODE_ERROR,
            details=full_details,
            retryable=False,
        )


class PrincipalFormatException(StateCertException):
    """Exception raised when a textual principal cannot be decoded."""

    def __init__(self, message: str, text: str | None = None) -> None:
        details = {"text": text} if text is not None else {}
        super().__init__(
            message=message,
            code=ErrorCodes.PRINCIPAL_FORMAT_ERROR,
            details=details,
            retryable=False,
        )


class TreeMalformedException(StateCertException):
    """Exception raised when a lookup hits an inconsistent node shape."""

    def __init__(
        self,
        message: str,
        path: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if path is not None:
            full_details["path"] = _render_path(path)
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_MALFORMED,
            details=full_details,
            retryable=False,
        )


class LookupUnknownException(StateCertException):
    """
    Exception raised when a pruned branch prevents a decision.

    Retryable: a less-pruned certificate may answer the same query.
    """

    def __init__(self, path: Any) -> None:
        rendered = _render_path(path)
        super().__init__(
            message=f"Cannot decide path {'/'.join(rendered)}: branch is pruned",
            code=ErrorCodes.LOOKUP_UNKNOWN,
            details={"path": rendered},
            retryable=True,
        )


class SignatureInvalidException(StateCertException):
    """Exception raised when the certificate signature does not verify."""

    def __init__(
        self,
        message: str = "Certificate signature does not verify against the root key",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SIGNATURE_INVALID,
            details=details,
            retryable=False,
        )


class ExpiredCertificateException(StateCertException):
    """Exception raised when the certificate time is outside the accepted window."""

    def __init__(
        self,
        message: str,
        certificate_time_ns: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if certificate_time_ns is not None:
            full_details["certificate_time_ns"] = certificate_time_ns
        super().__init__(
            message=message,
            code=ErrorCodes.EXPIRED_CERTIFICATE,
            details=full_details,
            retryable=True,
        )


class RootKeyIntegrityException(StateCertException):
    """Exception raised when the embedded root key encodings disagree."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.ROOT_KEY_INTEGRITY,
            retryable=False,
        )


class UnsupportedKeyAlgorithmException(StateCertException):
    """Exception raised when no signature primitive handles the root key scheme."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.UNSUPPORTED_KEY_ALGORITHM,
            details=details,
            retryable=False,
        )


class MissingFieldException(StateCertException):
    """Exception raised when a required field is proven absent from the tree."""

    def __init__(self, field: str, path: Any = None) -> None:
        details: dict[str, Any] = {"field": field}
        if path is not None:
            details["path"] = _render_path(path)
        super().__init__(
            message=f"Required field missing from certificate tree: {field}",
            code=ErrorCodes.MISSING_FIELD,
            details=details,
            retryable=False,
        )
        self.field = field


class AmbiguousRequestIdException(StateCertException):
    """Exception raised when request_status does not hold exactly one request id."""

    def __init__(self, request_ids: list[bytes]) -> None:
        ids_hex = sorted("0x" + rid.hex() for rid in request_ids)
        super().__init__(
            message=f"Expected exactly one request id under request_status, found {len(ids_hex)}",
            code=ErrorCodes.AMBIGUOUS_REQUEST_ID,
            details={"request_ids": ids_hex},
            retryable=False,
        )
        self.request_ids = request_ids


class UnexpectedStatusException(StateCertException):
    """Exception raised when the request status does not allow the requested data."""

    def __init__(self, actual: str, expected: str | None = None) -> None:
        details: dict[str, Any] = {"actual": actual}
        message = f"Unexpected request status: {actual!r}"
        if expected is not None:
            details["expected"] = expected
            message += f" (expected {expected!r})"
        super().__init__(
            message=message,
            code=ErrorCodes.UNEXPECTED_STATUS,
            details=details,
            retryable=False,
        )
        self.actual = actual


class FetchException(StateCertException):
    """
    Exception raised when the network collaborator fails.

    Transport failures and 5xx responses are retryable; 4xx responses are not.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if status_code is not None:
            full_details["status_code"] = status_code
        super().__init__(
            message=message,
            code=ErrorCodes.FETCH_FAILED,
            details=full_details,
            retryable=status_code is None or status_code >= 500,
        )


class WorkflowStageException(StateCertException):
    """Exception raised by the workflow, naming the stage that failed."""

    def __init__(self, stage: str, cause: Exception) -> None:
        details: dict[str, Any] = {"stage": stage}
        retryable = False
        if isinstance(cause, StateCertException):
            details["cause"] = cause.to_error_model().model_dump()
            retryable = cause.retryable
        else:
            details["cause"] = {"type": type(cause).__name__, "message": str(cause)}
        super().__init__(
            message=f"Stage '{stage}' failed: {cause}",
            code=ErrorCodes.WORKFLOW_STAGE_FAILED,
            details=details,
            retryable=retryable,
        )
        self.stage = stage
        self.cause = cause
