"""Error Classifier — turns a failed attempt into an ErrorRecord, clearing auth on 401.

Invariants:
    - Every record carries the correlation id of the attempt that failed
    - AUTH_ERROR clears the TokenStore and notifies auth-required listeners,
      regardless of other calls in flight
    - No other classification has a side effect
"""

import logging
from typing import Any, Callable

from crm_client.core.classify_error import (
    classify_exception,
    classify_status,
    extract_error_message,
)
from crm_client.core.errors import ErrorKind, ErrorRecord
from crm_client.infrastructure.token_store import TokenStore

logger = logging.getLogger(__name__)

AuthRequiredListener = Callable[[ErrorRecord], None]


class ErrorClassifier:
    """Classifies failures for one ApiClient."""

    def __init__(self, token_store: TokenStore):
        self._token_store = token_store
        self._auth_listeners: list[AuthRequiredListener] = []

    def subscribe_auth_required(
        self, listener: AuthRequiredListener,
    ) -> Callable[[], None]:
        self._auth_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._auth_listeners:
                self._auth_listeners.remove(listener)

        return unsubscribe

    def from_response(
        self, status: int, body: Any, correlation_id: str,
    ) -> ErrorRecord:
        """Classify a non-2xx response with its (possibly undecodable) body."""
        message, details = extract_error_message(status, body)
        record = ErrorRecord(
            kind=classify_status(status),
            message=message,
            correlation_id=correlation_id,
            http_status=status,
            details=details,
        )
        self._apply_side_effects(record)
        return record

    def from_exception(
        self, exc: BaseException, correlation_id: str,
    ) -> ErrorRecord:
        """Classify a transport-level failure (timeout, reset, decode)."""
        kind = classify_exception(exc)
        record = ErrorRecord(
            kind=kind,
            message=str(exc) or exc.__class__.__name__,
            correlation_id=correlation_id,
            cause=exc,
        )
        self._apply_side_effects(record)
        return record

    def _apply_side_effects(self, record: ErrorRecord) -> None:
        if record.kind is not ErrorKind.AUTH_ERROR:
            return
        logger.warning(
            "Authentication rejected, clearing token",
            extra={"correlation_id": record.correlation_id},
        )
        self._token_store.clear()
        for listener in list(self._auth_listeners):
            listener(record)
