import logging

from core.log_serializers import (
    MAX_BODY_SIZE,
    is_binary_content,
    redact_body,
    redact_headers,
    serialize_body,
    truncate_body,
)
from core.request_context import (
    RequestIdFilter,
    generate_request_id,
    get_request_id,
    reset_request_context,
    set_request_context,
)


def test_short_bodies_pass_through():
    assert truncate_body({"a": 1}) == {"a": 1}
    assert truncate_body("hello") == "hello"
    assert truncate_body(None) is None


def test_long_bodies_are_truncated():
    body = "x" * (MAX_BODY_SIZE + 5)
    truncated = truncate_body(body)
    assert truncated["truncated"] is True
    assert truncated["originalSize"] == MAX_BODY_SIZE + 5
    assert len(truncated["content"]) == MAX_BODY_SIZE


def test_dicts_are_measured_as_json():
    truncated = truncate_body({"description": "y" * MAX_BODY_SIZE})
    assert truncated["truncated"] is True
    assert truncated["content"].startswith('{"description": "yyy')


def test_binary_content_is_omitted():
    assert is_binary_content("image/png")
    assert is_binary_content("application/octet-stream")
    assert not is_binary_content("application/json")
    assert not is_binary_content(None)

    assert serialize_body(b"\x89PNG", "image/png", {"content-length": "2048"}) == {
        "binaryOmitted": True,
        "contentType": "image/png",
        "contentLength": "2048",
    }
    assert serialize_body(b"...", "video/mp4", {})["contentLength"] == "unknown"
    assert serialize_body({"a": 1}, "application/json", {}) == {"a": 1}


def test_secrets_are_redacted():
    assert redact_headers({"Authorization": "Basic abc", "Accept": "*/*"}) == {
        "Authorization": "***",
        "Accept": "*/*",
    }
    assert redact_body({"email": "a@b.co", "password": "hunter22", "nested": [{"password": "x"}]}) == {
        "email": "a@b.co",
        "password": "***",
        "nested": [{"password": "***"}],
    }


def test_response_secrets_are_redacted():
    assert redact_body({"userId": "u1", "accessToken": "eyJ..."}) == {"userId": "u1", "accessToken": "***"}
    assert redact_body({"id": "a1", "managementPassword": "Abc123Def456"})["managementPassword"] == "***"


def test_request_id_shape():
    request_id = generate_request_id()
    assert len(request_id) == 10
    assert request_id.isalnum()


def test_request_context_is_scoped():
    assert get_request_id() is None
    token = set_request_context("abc123")
    try:
        assert get_request_id() == "abc123"
    finally:
        reset_request_context(token)
    assert get_request_id() is None


def test_filter_stamps_records():
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

    RequestIdFilter().filter(record)
    assert record.request_id == "-"

    token = set_request_context("req-42")
    try:
        RequestIdFilter().filter(record)
        assert record.request_id == "req-42"
    finally:
        reset_request_context(token)
