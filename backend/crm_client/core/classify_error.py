"""Error Classification — pure mapping from raw failures to ErrorKind.

Invariants:
    - classify_status never returns None; unknown non-2xx statuses are HTTP_ERROR
    - classify_exception maps deadline, connection, and decode failures; the rest are UNKNOWN_ERROR
    - extract_error_message never raises, whatever the error body looks like

Design Decisions:
    - Pure functions here; the AUTH_ERROR side effect (token clear + notify)
      lives in infrastructure/error_classifier.py (functional core, imperative shell)
"""

import asyncio
import json
from http import HTTPStatus
from typing import Any

import httpx

from crm_client.core.errors import ErrorKind

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.AUTH_ERROR,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMIT,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.NETWORK_ERROR,
    503: ErrorKind.NETWORK_ERROR,
    504: ErrorKind.NETWORK_ERROR,
}


class DeadlineExceeded(Exception):
    """Raised when the per-attempt deadline elapses before a response."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class ResponseDecodeError(Exception):
    """Raised when a success body cannot be decoded per its content type."""


def classify_status(status: int) -> ErrorKind:
    """Map a non-2xx HTTP status to its ErrorKind."""
    return _STATUS_KINDS.get(status, ErrorKind.HTTP_ERROR)


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map a transport-level failure to its ErrorKind."""
    # TimeoutException subclasses TransportError, so check it first
    if isinstance(exc, (DeadlineExceeded, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, (ResponseDecodeError, httpx.DecodingError, json.JSONDecodeError)):
        return ErrorKind.PARSE_ERROR
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN_ERROR


def default_status_text(status: int) -> str:
    """Reason phrase for a status, or 'HTTP <status>' when unknown."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"HTTP {status}"


def extract_error_message(status: int, body: Any) -> tuple[str, Any | None]:
    """Pull (message, details) out of a decoded error body.

    Structured bodies may carry `message` and `details`; anything else falls
    back to the status's default text.
    """
    if isinstance(body, dict):
        message = body.get("message")
        details = body.get("details")
        if isinstance(message, str) and message:
            return message, details
        return default_status_text(status), details
    return default_status_text(status), None
