"""Token Store — owns the auth credential, its persistence, and change notifications.

Invariants:
    - Holds at most one token; persisted under TOKEN_STORAGE_KEY
    - get() never mutates
    - token-changed fires exactly once per transition (no event for a no-op set/clear)
    - Observers are scoped to this instance

Design Decisions:
    - Instance injected into ApiClient, never a module-level singleton
    - Observer exceptions propagate: a broken listener is a bug, not noise
"""

import logging
from typing import Callable

from crm_client.core.domain_types import AuthToken, TOKEN_STORAGE_KEY
from crm_client.core.repository_protocols import KeyValueStorage

logger = logging.getLogger(__name__)

TokenListener = Callable[[bool], None]


class TokenStore:
    """Current bearer credential for one ApiClient."""

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage
        self._listeners: list[TokenListener] = []
        stored = storage.get(TOKEN_STORAGE_KEY)
        self._token: AuthToken | None = (
            AuthToken(stored) if isinstance(stored, str) and stored else None
        )

    def get(self) -> AuthToken | None:
        return self._token

    def has_token(self) -> bool:
        return self._token is not None

    def set(self, token: AuthToken | str) -> None:
        if isinstance(token, str):
            token = AuthToken(token)
        if self._token == token:
            return
        self._token = token
        self._storage.set(TOKEN_STORAGE_KEY, token.value)
        logger.info("Auth token updated")
        self._notify(True)

    def clear(self) -> None:
        if self._token is None:
            return
        self._token = None
        self._storage.delete(TOKEN_STORAGE_KEY)
        logger.info("Auth token cleared")
        self._notify(False)

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """Register a token-changed listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, has_token: bool) -> None:
        for listener in list(self._listeners):
            listener(has_token)
