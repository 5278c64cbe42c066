"""
Schemas - Verification Results
File: verification.py

Purpose: Standard result format for workflow stages. Each stage of the
fetch / persist / load / verify / extract workflow reports a CheckResult.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import StateCertError


# Severity levels for checks
CheckSeverity = Literal["info", "error"]


class CheckResult(BaseModel):
    """Result of a single verification check."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """Aggregate of check results for one certificate."""

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(..., description="Whether every error-level check passed")
    checks: list[CheckResult] = Field(default_factory=list)
    error: StateCertError | None = Field(
        default=None,
        description="Structured error for the first failing stage, if any",
    )

    @property
    def failed_checks(self) -> list[CheckResult]:
        return [c for c in self.checks if not c.ok]

    @classmethod
    def from_checks(
        cls,
        checks: list[CheckResult],
        error: StateCertError | None = None,
    ) -> "VerificationResult":
        return cls(ok=all(c.ok for c in checks) and error is None, checks=checks, error=error)
