"""Mock Router — answers the live endpoint contract from local deterministic fixtures.

Invariants:
    - Routes match on (method, path); query strings are stripped first
    - Every route suspends for `latency_ms` before answering (async contract kept)
    - Unmatched routes return an empty JSON object, never an error
    - Auth routes mint/clear tokens on the TokenStore the router is bound to
    - Preferences read/write the shared KeyValueStorage

Design Decisions:
    - Explicit route table (no decorator magic): the full mock surface is visible in one place
    - Clock and sleep injected so tests run instantly and timestamps are pinned
"""

import asyncio
import logging
import re
import time
import uuid
from typing import Any, Awaitable, Callable

from crm_client.core import mock_fixtures
from crm_client.core.domain_types import (
    HttpMethod,
    PREFERENCES_STORAGE_KEY,
    ResponseEnvelope,
)
from crm_client.core.repository_protocols import KeyValueStorage
from crm_client.infrastructure.token_store import TokenStore

logger = logging.getLogger(__name__)

DEFAULT_MOCK_LATENCY_MS = 200

Sleep = Callable[[float], Awaitable[Any]]
Handler = Callable[[dict[str, str], Any], ResponseEnvelope]

_PDF_DOWNLOAD = re.compile(r"^/pdf/download/(?P<pdf_id>[^/]+)$")


class MockRouter:
    """Offline data source for an ApiClient in mock mode."""

    def __init__(
        self,
        token_store: TokenStore,
        storage: KeyValueStorage,
        latency_ms: int = DEFAULT_MOCK_LATENCY_MS,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
    ):
        self._token_store = token_store
        self._storage = storage
        self.latency_ms = latency_ms
        self._clock = clock
        self._sleep = sleep
        self._routes: dict[tuple[HttpMethod, str], Handler] = {
            (HttpMethod.GET, "/opportunities"): self._opportunities,
            (HttpMethod.GET, "/sales-orders"): self._sales_orders,
            (HttpMethod.GET, "/dashboard/summary"): self._dashboard_summary,
            (HttpMethod.GET, "/helpdesk-tickets"): self._helpdesk_tickets,
            (HttpMethod.GET, "/user/preferences"): self._read_preferences,
            (HttpMethod.PUT, "/user/preferences"): self._write_preferences,
            (HttpMethod.POST, "/pdf/generate"): self._generate_pdf,
            (HttpMethod.POST, "/email/send"): self._send_email,
            (HttpMethod.POST, "/auth/login"): self._mint_token,
            (HttpMethod.POST, "/auth/refresh"): self._mint_token,
            (HttpMethod.POST, "/auth/logout"): self._logout,
            (HttpMethod.GET, "/health"): self._health,
        }

    def bound_to(self, token_store: TokenStore) -> "MockRouter":
        """Same fixtures and storage, minting tokens on another TokenStore."""
        return MockRouter(
            token_store, self._storage, self.latency_ms, self._clock, self._sleep,
        )

    async def route(
        self, method: HttpMethod | str, path: str, payload: Any = None,
    ) -> ResponseEnvelope:
        """Answer one request after the simulated latency."""
        method = HttpMethod(method.upper())
        bare_path = path.split("?", 1)[0]
        await self._sleep(self.latency_ms / 1000)

        handler = self._routes.get((method, bare_path))
        if handler is not None:
            return handler({}, payload)
        if method is HttpMethod.GET:
            match = _PDF_DOWNLOAD.match(bare_path)
            if match:
                return self._download_pdf(match.groupdict(), payload)

        logger.debug(f"No mock route for {method.value} {bare_path}")
        return ResponseEnvelope.json({})

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # ─── Handlers ────────────────────────────────────────────────

    def _opportunities(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json(mock_fixtures.opportunities_listing())

    def _sales_orders(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json(
            mock_fixtures.sales_orders_listing(self._now_ms()),
        )

    def _dashboard_summary(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json(
            mock_fixtures.dashboard_summary(self._now_ms()),
        )

    def _helpdesk_tickets(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json(
            mock_fixtures.helpdesk_listing(self._now_ms()),
        )

    def _read_preferences(self, params, payload) -> ResponseEnvelope:
        stored = self._storage.get(PREFERENCES_STORAGE_KEY)
        if isinstance(stored, dict):
            return ResponseEnvelope.json(stored)
        return ResponseEnvelope.json(dict(mock_fixtures.DEFAULT_PREFERENCES))

    def _write_preferences(self, params, payload) -> ResponseEnvelope:
        self._storage.set(PREFERENCES_STORAGE_KEY, payload)
        return ResponseEnvelope.json({"success": True, "preferences": payload})

    def _generate_pdf(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json(
            {"id": f"pdf_{self._now_ms()}", "status": "generated"},
        )

    def _download_pdf(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.binary(
            f"Mock PDF {params['pdf_id']}".encode("utf-8"),
        )

    def _send_email(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json({"success": True})

    def _mint_token(self, params, payload) -> ResponseEnvelope:
        token = f"mock_{self._now_ms()}_{uuid.uuid4().hex[:12]}"
        self._token_store.set(token)
        return ResponseEnvelope.json({"token": token})

    def _logout(self, params, payload) -> ResponseEnvelope:
        self._token_store.clear()
        return ResponseEnvelope.json({"success": True})

    def _health(self, params, payload) -> ResponseEnvelope:
        return ResponseEnvelope.json({"status": "ok"})
