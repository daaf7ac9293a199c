"""
Per-request context shared with the logging filter
"""
import logging
import secrets
import string
from contextvars import ContextVar, Token
from typing import Optional

REQUEST_ID_LENGTH = 10
_ALPHABET = string.ascii_letters + string.digits

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(REQUEST_ID_LENGTH))


def set_request_context(request_id: str) -> Token:
    return _request_id.set(request_id)


def reset_request_context(token: Token) -> None:
    _request_id.reset(token)


def get_request_id() -> Optional[str]:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamps every log record with the current request id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True
