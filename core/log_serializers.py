"""
Body serializers for request logging
"""
import json
import re
from typing import Any, Mapping, Optional

MAX_BODY_SIZE = 10240

BINARY_CONTENT_TYPES = [
    re.compile(r"^image/"),
    re.compile(r"^video/"),
    re.compile(r"^audio/"),
    re.compile(r"^application/pdf"),
    re.compile(r"^application/octet-stream"),
    re.compile(r"^application/zip"),
    re.compile(r"^application/gzip"),
]

REDACTED = "***"
SENSITIVE_HEADERS = {"authorization"}
SENSITIVE_BODY_KEYS = {"password", "managementPassword", "accessToken"}


def truncate_body(body: Any) -> Any:
    """Cut bodies longer than MAX_BODY_SIZE characters.

    Dicts and lists are measured by their JSON form. Truncated bodies come
    back as ``{"content", "truncated", "originalSize"}``.
    """
    if not body:
        return body

    body_string = body if isinstance(body, str) else json.dumps(body, default=str)

    if len(body_string) > MAX_BODY_SIZE:
        return {
            "content": body_string[:MAX_BODY_SIZE],
            "truncated": True,
            "originalSize": len(body_string),
        }

    return body


def is_binary_content(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return any(pattern.match(content_type) for pattern in BINARY_CONTENT_TYPES)


def serialize_body(body: Any, content_type: Optional[str], headers: Mapping[str, str]) -> Any:
    if is_binary_content(content_type):
        return {
            "binaryOmitted": True,
            "contentType": content_type,
            "contentLength": headers.get("content-length") or "unknown",
        }

    return truncate_body(body)


def redact_headers(headers: Mapping[str, str]) -> dict:
    return {
        name: REDACTED if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def redact_body(body: Any) -> Any:
    if isinstance(body, dict):
        return {
            key: REDACTED if key in SENSITIVE_BODY_KEYS else redact_body(value)
            for key, value in body.items()
        }
    if isinstance(body, list):
        return [redact_body(item) for item in body]
    return body
