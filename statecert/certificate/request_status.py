"""
Certificate - Request Status Extraction

Pulls the status of a single call out of a verified state tree:

    /time                                  certificate time (required)
    /request_status/<id>/status            call state (required)
    /request_status/<id>/reply             reply payload (required when replied)
    /request_status/<id>/reject_code       LEB128 code (rejected calls)
    /request_status/<id>/reject_message    UTF-8 text (rejected calls)
    /request_status/<id>/error_code        UTF-8 text (rejected calls)

Exactly one request id must be present under request_status.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from statecert.certificate.models import decode_leb128
from statecert.hashtree.lookup import (
    LookupStatus,
    list_paths,
    lookup_path,
    lookup_subtree,
)
from statecert.hashtree.tree import Fork, HashTree, Labeled, Pruned
from statecert.schemas.errors import (
    AmbiguousRequestIdException,
    CertificateDecodeException,
    LookupUnknownException,
    MissingFieldException,
    TreeMalformedException,
    UnexpectedStatusException,
)


logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    """Recognized values of the status leaf."""
    RECEIVED = "received"
    PROCESSING = "processing"
    REPLIED = "replied"
    REJECTED = "rejected"
    DONE = "done"
    UNKNOWN = "unknown"


class RequestStatus(BaseModel):
    """Status of one call, derived from a verified tree."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    time: bytes = Field(..., description="Raw LEB128 certificate time")
    id: bytes = Field(..., description="Request identifier")
    status: str = Field(..., description="One of the RequestState values")
    reply: bytes = Field(default=b"", description="Reply payload (replied calls only)")
    reject_code: Optional[int] = Field(default=None)
    reject_message: Optional[str] = Field(default=None)
    error_code: Optional[str] = Field(default=None)

    @property
    def state(self) -> RequestState:
        return RequestState(self.status)

    def require_reply(self) -> bytes:
        """
        Return the reply payload of a replied call.

        Raises:
            UnexpectedStatusException: If the status is anything but "replied"
        """
        if self.status != RequestState.REPLIED.value:
            raise UnexpectedStatusException(self.status, expected=RequestState.REPLIED.value)
        return self.reply


def _lookup_leaf(tree: HashTree, path: Sequence[bytes], full_path: Sequence[bytes]) -> Optional[bytes]:
    """FOUND -> value, ABSENT -> None; UNKNOWN and ERROR raise."""
    result = lookup_path(tree, path)
    if result.status is LookupStatus.FOUND:
        return result.value
    if result.status is LookupStatus.ABSENT:
        return None
    if result.status is LookupStatus.UNKNOWN:
        raise LookupUnknownException(full_path)
    raise TreeMalformedException(result.reason or "malformed tree", path=full_path)


def _decode_text(value: bytes, field: str, path: Sequence[bytes]) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TreeMalformedException(
            f"{field} is not valid UTF-8: {e}", path=path
        ) from e


def _decode_number(value: bytes, field: str, path: Sequence[bytes]) -> int:
    try:
        return decode_leb128(value)
    except CertificateDecodeException as e:
        raise TreeMalformedException(f"{field} is not a LEB128 number: {e.message}", path=path) from e


def _contains_pruned(tree: HashTree) -> bool:
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Pruned):
            return True
        if isinstance(node, Labeled):
            stack.append(node.subtree)
        elif isinstance(node, Fork):
            stack.append(node.left)
            stack.append(node.right)
    return False


def _single_request_id(subtree: HashTree) -> bytes:
    request_ids = {path[0] for path in list_paths(subtree) if path}
    if not request_ids and _contains_pruned(subtree):
        raise LookupUnknownException((b"request_status",))
    if len(request_ids) != 1:
        raise AmbiguousRequestIdException(sorted(request_ids))
    return next(iter(request_ids))


def extract_request_status(tree: HashTree) -> RequestStatus:
    """
    Extract the request status from a verified tree.

    Args:
        tree: The tree of a VerifiedCertificate

    Returns:
        RequestStatus

    Raises:
        MissingFieldException: time, request_status, status, or reply of a
            replied call is proven absent
        AmbiguousRequestIdException: Zero or several request ids
        LookupUnknownException: A required path is pruned
        TreeMalformedException: A path has the wrong shape or bad encoding
        UnexpectedStatusException: The status leaf holds an unrecognized value
    """
    time_path = (b"time",)
    time_value = _lookup_leaf(tree, time_path, time_path)
    if time_value is None:
        raise MissingFieldException("time", path=time_path)

    prefix = (b"request_status",)
    subtree_result = lookup_subtree(tree, prefix)
    if subtree_result.status is LookupStatus.UNKNOWN:
        raise LookupUnknownException(prefix)
    if subtree_result.status is LookupStatus.ERROR:
        raise TreeMalformedException(subtree_result.reason or "malformed tree", path=prefix)
    if subtree_result.status is LookupStatus.ABSENT:
        raise MissingFieldException("request_status", path=prefix)
    request_status = subtree_result.tree
    if isinstance(request_status, Pruned):
        raise LookupUnknownException(prefix)

    request_id = _single_request_id(request_status)
    logger.debug("Request id: %s", request_id.hex())

    def field(name: str) -> Optional[bytes]:
        local = (request_id, name.encode("ascii"))
        return _lookup_leaf(request_status, local, prefix + local)

    status_path = prefix + (request_id, b"status")
    status_value = field("status")
    if status_value is None:
        raise MissingFieldException("status", path=status_path)
    status = _decode_text(status_value, "status", status_path)
    if status not in {s.value for s in RequestState}:
        raise UnexpectedStatusException(status)

    reply = field("reply")
    if reply is None and status == RequestState.REPLIED.value:
        raise MissingFieldException("reply", path=prefix + (request_id, b"reply"))

    reject_code_raw = field("reject_code")
    reject_message_raw = field("reject_message")
    error_code_raw = field("error_code")

    return RequestStatus(
        time=time_value,
        id=request_id,
        status=status,
        reply=reply or b"",
        reject_code=(
            _decode_number(reject_code_raw, "reject_code", prefix + (request_id, b"reject_code"))
            if reject_code_raw is not None
            else None
        ),
        reject_message=(
            _decode_text(reject_message_raw, "reject_message", prefix + (request_id, b"reject_message"))
            if reject_message_raw is not None
            else None
        ),
        error_code=(
            _decode_text(error_code_raw, "error_code", prefix + (request_id, b"error_code"))
            if error_code_raw is not None
            else None
        ),
    )


__all__ = [
    "RequestState",
    "RequestStatus",
    "extract_request_status",
]
