"""
Request Status Extraction Unit Tests
Tests for statecert/certificate/request_status.py

1. Replied call yields status, id and reply
2. Zero or several request ids are ambiguous
3. Rejected calls carry reject fields; require_reply refuses them
4. Pruned branches raise LookupUnknown, never absence
5. Missing and malformed fields
"""
import pytest

from statecert.certificate.models import encode_leb128
from statecert.certificate.request_status import (
    RequestState,
    RequestStatus,
    extract_request_status,
)
from statecert.hashtree.digest import tree_digest
from statecert.hashtree.tree import empty, labeled_map, leaf, pruned
from statecert.schemas.errors import (
    AmbiguousRequestIdException,
    LookupUnknownException,
    MissingFieldException,
    TreeMalformedException,
    UnexpectedStatusException,
)

from fixtures.common import (
    DEFAULT_REPLY,
    DEFAULT_REQUEST_ID,
    FIXED_TIME_NS,
    make_request_status_tree,
)


class TestReplied:
    """The common case: one replied request."""

    def test_extracts_fields(self, request_status_tree):
        status = extract_request_status(request_status_tree)

        assert status.id == DEFAULT_REQUEST_ID
        assert status.status == "replied"
        assert status.state is RequestState.REPLIED
        assert status.reply == DEFAULT_REPLY
        assert status.time == encode_leb128(FIXED_TIME_NS)
        assert status.reject_code is None

    def test_require_reply(self, request_status_tree):
        assert extract_request_status(request_status_tree).require_reply() == DEFAULT_REPLY

    def test_replied_without_reply(self):
        tree = make_request_status_tree(reply=None)
        with pytest.raises(MissingFieldException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.field == "reply"

    def test_status_is_frozen(self, request_status_tree):
        status = extract_request_status(request_status_tree)
        with pytest.raises(Exception):
            status.status = "rejected"


class TestAmbiguity:
    """Exactly one request id must be present."""

    def test_two_request_ids(self):
        tree = make_request_status_tree(extra_request_ids=(b"\xff" * 32,))
        with pytest.raises(AmbiguousRequestIdException) as exc_info:
            extract_request_status(tree)
        assert len(exc_info.value.request_ids) == 2
        assert DEFAULT_REQUEST_ID in exc_info.value.request_ids

    def test_no_request_ids(self):
        tree = labeled_map({
            "request_status": empty(),
            "time": leaf(encode_leb128(FIXED_TIME_NS)),
        })
        with pytest.raises(AmbiguousRequestIdException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.request_ids == []

    def test_only_pruned_request_ids(self):
        """An id whose whole subtree is pruned hides the request, it is not absent."""
        tree = labeled_map({
            "request_status": labeled_map({DEFAULT_REQUEST_ID: pruned(b"\x00" * 32)}),
            "time": leaf(encode_leb128(FIXED_TIME_NS)),
        })
        with pytest.raises(LookupUnknownException):
            extract_request_status(tree)


class TestRejected:
    """Rejected calls expose their reject fields."""

    def test_rejected_fields(self):
        tree = make_request_status_tree(
            status="rejected",
            reply=None,
            extra_fields={
                "reject_code": encode_leb128(4),
                "reject_message": b"canister trapped",
                "error_code": b"IC0503",
            },
        )
        status = extract_request_status(tree)

        assert status.state is RequestState.REJECTED
        assert status.reply == b""
        assert status.reject_code == 4
        assert status.reject_message == "canister trapped"
        assert status.error_code == "IC0503"

    def test_require_reply_on_rejected(self):
        status = extract_request_status(make_request_status_tree(status="rejected", reply=None))
        with pytest.raises(UnexpectedStatusException) as exc_info:
            status.require_reply()
        assert exc_info.value.actual == "rejected"

    @pytest.mark.parametrize("state", ["received", "processing", "done", "unknown"])
    def test_other_states_have_no_reply(self, state):
        status = extract_request_status(make_request_status_tree(status=state, reply=None))
        assert status.status == state
        with pytest.raises(UnexpectedStatusException):
            status.require_reply()


class TestPrunedBranches:
    """Unknown is never reported as absence."""

    def test_pruned_status(self):
        tree = labeled_map({
            "request_status": labeled_map({
                DEFAULT_REQUEST_ID: labeled_map({
                    "reply": leaf(DEFAULT_REPLY),
                    "status": pruned(tree_digest(leaf("replied"))),
                }),
            }),
            "time": leaf(encode_leb128(FIXED_TIME_NS)),
        })
        with pytest.raises(LookupUnknownException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.retryable is True

    def test_pruned_request_status(self):
        tree = labeled_map({
            "request_status": pruned(b"\x44" * 32),
            "time": leaf(encode_leb128(FIXED_TIME_NS)),
        })
        with pytest.raises(LookupUnknownException):
            extract_request_status(tree)

    def test_pruned_time(self):
        tree = labeled_map({
            "request_status": labeled_map({}),
            "time": pruned(b"\x55" * 32),
        })
        with pytest.raises(LookupUnknownException):
            extract_request_status(tree)


class TestMissingAndMalformed:
    """Proven-absent and badly shaped fields."""

    def test_missing_time(self):
        tree = labeled_map({"request_status": labeled_map({})})
        with pytest.raises(MissingFieldException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.field == "time"

    def test_missing_request_status(self):
        tree = labeled_map({"time": leaf(encode_leb128(FIXED_TIME_NS))})
        with pytest.raises(MissingFieldException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.field == "request_status"

    def test_missing_status(self):
        tree = labeled_map({
            "request_status": labeled_map({
                DEFAULT_REQUEST_ID: labeled_map({"reply": leaf(DEFAULT_REPLY)}),
            }),
            "time": leaf(encode_leb128(FIXED_TIME_NS)),
        })
        with pytest.raises(MissingFieldException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.field == "status"

    def test_unrecognized_status(self):
        with pytest.raises(UnexpectedStatusException) as exc_info:
            extract_request_status(make_request_status_tree(status="exploded"))
        assert exc_info.value.actual == "exploded"

    def test_status_not_utf8(self):
        with pytest.raises(TreeMalformedException):
            extract_request_status(make_request_status_tree(status=b"\xff\xfe"))

    def test_reject_code_not_leb128(self):
        tree = make_request_status_tree(
            status="rejected", reply=None, extra_fields={"reject_code": b"\x80"}
        )
        with pytest.raises(TreeMalformedException) as exc_info:
            extract_request_status(tree)
        assert exc_info.value.details["path"][-1] == "reject_code"

    def test_time_is_interior_node(self):
        tree = labeled_map({
            "request_status": labeled_map({}),
            "time": labeled_map({"nested": leaf("x")}),
        })
        with pytest.raises(TreeMalformedException):
            extract_request_status(tree)


class TestRequestStatusModel:
    """RequestStatus pydantic model."""

    def test_state_property(self):
        status = RequestStatus(time=b"\x00", id=b"\x01", status="done")
        assert status.state is RequestState.DONE
        assert status.reply == b""
