"""Tests for the error hierarchy and the OperationResult envelope."""

from __future__ import annotations

import pytest

from peering_spine.core.errors import (
    BackendError,
    ErrorCategory,
    FieldError,
    FieldErrorCode,
    MissingCredentialError,
    PayloadValidationError,
    PeeringError,
    UnknownTypeError,
    UnsupportedOperationError,
)
from peering_spine.core.result import OperationResult, start_timer


# ── Errors ───────────────────────────────────────────────────────────────


class TestPeeringError:
    def test_defaults(self):
        error = PeeringError("boom")
        assert error.code == "INTERNAL_ERROR"
        assert error.category is ErrorCategory.INTERNAL
        assert error.retryable is False
        assert str(error) == "boom"

    def test_with_context_sets_known_and_metadata(self):
        error = PeeringError("boom").with_context(object_type="net", batch=2)
        assert error.context.object_type == "net"
        assert error.context.metadata == {"batch": 2}
        assert error.to_dict()["context"] == {"object_type": "net", "batch": 2}

    def test_cause_is_chained(self):
        cause = RuntimeError("socket closed")
        error = PeeringError("boom", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "socket closed"


class TestTaxonomy:
    def test_unknown_type(self):
        error = UnknownTypeError("carrier", known=["org", "net"])
        assert error.code == "UNKNOWN_TYPE"
        assert error.message == "Unknown object type: carrier. Available: org, net"
        assert error.to_dict()["type_name"] == "carrier"

    def test_unsupported_operation(self):
        error = UnsupportedOperationError("poc", "delete")
        assert error.code == "UNSUPPORTED_OPERATION"
        assert error.details() == {"type_name": "poc", "operation": "delete"}

    def test_missing_credential(self):
        error = MissingCredentialError()
        assert error.category is ErrorCategory.AUTH
        assert "PEERINGDB_API_KEY" in error.message

    def test_payload_validation_message(self):
        error = PayloadValidationError(
            "net",
            "create",
            [
                FieldError("asn", "Field required", FieldErrorCode.MISSING_REQUIRED_FIELD),
                FieldError("bogus", "Extra inputs are not permitted", FieldErrorCode.UNEXPECTED_FIELD),
            ],
        )
        assert error.message == "Validation failed for net: asn: Field required, bogus: Extra inputs are not permitted"
        assert error.retryable is False
        assert error.codes_for("asn") == [FieldErrorCode.MISSING_REQUIRED_FIELD]
        assert error.codes_for("name") == []


class TestBackendError:
    @pytest.mark.parametrize("status,retryable", [(429, True), (500, True), (503, True), (400, False), (404, False)])
    def test_retryable_by_status(self, status, retryable):
        assert BackendError("x", status=status).retryable is retryable

    def test_no_status_is_network(self):
        error = BackendError("connection refused")
        assert error.category is ErrorCategory.NETWORK
        assert error.retryable is True

    def test_with_status_is_source(self):
        error = BackendError("Resource not found.", status=404, url="https://www.peeringdb.com/api/net/1")
        assert error.category is ErrorCategory.SOURCE
        assert error.context.http_status == 404
        d = error.to_dict()
        assert d["status"] == 404
        assert d["url"] == "https://www.peeringdb.com/api/net/1"
        assert "body" not in d


# ── OperationResult ──────────────────────────────────────────────────────


class TestOperationResult:
    def test_ok(self):
        result = OperationResult.ok({"id": 1}, elapsed_ms=1.234, metadata={"uri": "peeringdb://net/1"})
        assert result.success
        assert result.error_message is None
        assert result.to_dict() == {
            "success": True,
            "data": {"id": 1},
            "elapsed_ms": 1.23,
            "metadata": {"uri": "peeringdb://net/1"},
        }

    def test_fail(self):
        result = OperationResult.fail("UNKNOWN_OPERATION", "nope")
        assert not result.success
        assert result.error_message == "nope"
        assert result.to_dict() == {
            "success": False,
            "error": {"code": "UNKNOWN_OPERATION", "message": "nope", "retryable": False},
        }

    def test_from_error_carries_details_and_context(self):
        error = BackendError("Rate limit exceeded. Please try again later.", status=429).with_context(
            object_type="net", operation="create"
        )
        result = OperationResult.from_error(error)
        assert result.error.code == "BACKEND_ERROR"
        assert result.error.category is ErrorCategory.SOURCE
        assert result.error.retryable is True
        assert result.error.details["status"] == 429
        assert result.error.details["context"]["object_type"] == "net"

    def test_timer(self):
        timer = start_timer()
        assert timer.elapsed_ms >= 0
