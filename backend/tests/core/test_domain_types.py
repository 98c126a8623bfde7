"""Domain Types — verifies descriptor immutability and envelope tagging."""

import dataclasses

import pytest

from crm_client.core.domain_types import (
    AuthToken,
    CallState,
    ContentKind,
    HttpMethod,
    RequestDescriptor,
    ResponseEnvelope,
)
from crm_client.core.errors import ApiError, ErrorKind, ErrorRecord


def test_descriptor_is_frozen():
    descriptor = RequestDescriptor("/opportunities")
    with pytest.raises(dataclasses.FrozenInstanceError):
        descriptor.attempt = 2


def test_next_attempt_returns_new_descriptor():
    descriptor = RequestDescriptor("/email/send", HttpMethod.POST, body={"a": 1})
    retried = descriptor.next_attempt()
    assert retried.attempt == 1
    assert retried.body == {"a": 1}
    assert descriptor.attempt == 0


def test_descriptor_path_strips_query():
    assert RequestDescriptor("/opportunities?page=2").path == "/opportunities"


def test_descriptor_rejects_negative_attempt():
    with pytest.raises(ValueError):
        RequestDescriptor("/x", attempt=-1)


def test_descriptor_defers_timeout_to_client():
    assert RequestDescriptor("/x").timeout_ms is None
    with pytest.raises(ValueError):
        RequestDescriptor("/x", timeout_ms=0)


def test_envelope_constructors_tag_kind():
    assert ResponseEnvelope.json({}).content_kind is ContentKind.JSON
    assert ResponseEnvelope.text("hi").content_kind is ContentKind.TEXT
    assert ResponseEnvelope.binary(b"%PDF").content_kind is ContentKind.BINARY


def test_auth_token_header_and_validation():
    assert AuthToken("abc").as_header() == "Bearer abc"
    with pytest.raises(ValueError):
        AuthToken("")


def test_call_state_has_five_states():
    assert len(CallState) == 5


def test_api_error_carries_record():
    record = ErrorRecord(
        kind=ErrorKind.NOT_FOUND, message="Not Found",
        correlation_id="req_1_4", http_status=404,
    )
    err = ApiError(record)
    assert err.kind is ErrorKind.NOT_FOUND
    assert err.correlation_id == "req_1_4"
    body = err.to_response()["error"]
    assert body["kind"] == "NOT_FOUND"
    assert body["http_status"] == 404
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.message = "changed"
