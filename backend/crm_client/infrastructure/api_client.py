"""Resilient API Client — the single chokepoint for dashboard reads and writes.

Invariants:
    - Every attempt gets a fresh correlation id (X-Request-ID) and one log line
    - Live attempts run under a deadline; elapsing yields TIMEOUT
    - Retryable kinds (RATE_LIMIT, SERVER_ERROR, NETWORK_ERROR, TIMEOUT):
      max 3 retries with exponential backoff; everything else fails at once
    - Attempt N+1 never starts before attempt N is fully classified
    - Failures surface as ApiError(ErrorRecord): raw transport errors never escape
    - Mock responses are never classified as failures
    - Transport mode is fixed at construction

Design Decisions:
    - Loop over recursion for retries: one frame per logical call
    - Sleep injected: tests record backoff delays without waiting
"""

import asyncio
import copy
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping
from urllib.parse import urlencode

import httpx

from crm_client.core.classify_error import DeadlineExceeded, ResponseDecodeError
from crm_client.core.domain_types import (
    CallState,
    HttpMethod,
    RequestDescriptor,
    ResponseEnvelope,
    TransportMode,
)
from crm_client.core.errors import ApiError, ConfigurationError, ErrorRecord
from crm_client.core.repository_protocols import KeyValueStorage
from crm_client.core.request_ids import RequestIdGenerator
from crm_client.core.retry_policy import RetryPolicy
from crm_client.infrastructure.error_classifier import (
    AuthRequiredListener,
    ErrorClassifier,
)
from crm_client.infrastructure.mock_router import MockRouter
from crm_client.infrastructure.storage import InMemoryStorage
from crm_client.infrastructure.token_store import TokenListener, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
HEALTH_CHECK_TIMEOUT_MS = 5000

Sleep = Callable[[float], Awaitable[Any]]


def report_filename(pdf_id: str) -> str:
    """Download name for a generated dashboard report."""
    return f"dashboard-report-{pdf_id}.pdf"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _with_query(endpoint: str, params: Mapping[str, Any] | None) -> str:
    if not params:
        return endpoint
    query = urlencode({k: v for k, v in params.items() if v is not None})
    return f"{endpoint}?{query}" if query else endpoint


@dataclass
class _CallCounters:
    total_requests: int = 0
    in_flight: int = 0


class ApiClient:
    """Retrying, deadline-bound HTTP client with a mock twin."""

    def __init__(
        self,
        base_url: str,
        *,
        mode: TransportMode,
        storage: KeyValueStorage,
        token_store: TokenStore | None = None,
        tenant_id: str = "company_a",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retry_policy: RetryPolicy | None = None,
        mock_router: MockRouter | None = None,
        http_client: httpx.AsyncClient | None = None,
        request_ids: RequestIdGenerator | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.mode = mode
        self.tenant_id = tenant_id
        self.timeout_ms = timeout_ms
        self.retry_policy = retry_policy or RetryPolicy()
        self.token_store = token_store or TokenStore(storage)
        self._classifier = ErrorClassifier(self.token_store)
        self._request_ids = request_ids or RequestIdGenerator()
        self._sleep = sleep
        self._counters = _CallCounters()

        self._mock_router: MockRouter | None = None
        self._http: httpx.AsyncClient | None = None
        self._owns_http = False
        if mode is TransportMode.MOCK:
            self._mock_router = mock_router or MockRouter(
                self.token_store, storage, sleep=sleep,
            )
        else:
            if not self.base_url:
                raise ConfigurationError("Live transport requires a base URL")
            self._http = http_client
            if self._http is None:
                self._http = httpx.AsyncClient(follow_redirects=True)
                self._owns_http = True
        logger.info(
            f"API client ready ({mode.value})",
            extra={"transport": mode.value},
        )

    # ─── Lifecycle ───────────────────────────────────────────────

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def is_mock(self) -> bool:
        return self.mode is TransportMode.MOCK

    def is_authenticated(self) -> bool:
        return self.token_store.has_token()

    def on_auth_required(
        self, listener: AuthRequiredListener,
    ) -> Callable[[], None]:
        """Register an auth-required listener. Returns an unsubscribe callable."""
        return self._classifier.subscribe_auth_required(listener)

    def on_token_changed(self, listener: TokenListener) -> Callable[[], None]:
        return self.token_store.subscribe(listener)

    def get_stats(self) -> dict:
        return {
            "total_requests": self._counters.total_requests,
            "total_attempts": self._request_ids.issued,
            "in_flight": self._counters.in_flight,
            "mode": self.mode.value,
        }

    def for_caller(self, token: str | None) -> "ApiClient":
        """View of this client that acts with the caller's own credential.

        The view shares transport, retry policy, id sequence and stats, but
        holds `token` in a private in-memory TokenStore. Logins, refreshes and
        401s through the view never touch this client's TokenStore.
        """
        caller_tokens = TokenStore(InMemoryStorage())
        if token:
            caller_tokens.set(token)
        view = copy.copy(self)
        view.token_store = caller_tokens
        view._classifier = ErrorClassifier(caller_tokens)
        view._owns_http = False
        if self._mock_router is not None:
            view._mock_router = self._mock_router.bound_to(caller_tokens)
        return view

    # ─── Core Request Loop ───────────────────────────────────────

    async def request(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        """Execute one logical call, retrying per policy.

        Raises ApiError carrying the ErrorRecord of the last attempt.
        """
        if descriptor.timeout_ms is None:
            descriptor = replace(descriptor, timeout_ms=self.timeout_ms)
        logger.debug(
            f"API call {descriptor.method.value} {descriptor.path}",
            extra={
                "method": descriptor.method.value,
                "target": descriptor.path,
                "state": CallState.BUILDING.value,
            },
        )
        self._counters.total_requests += 1
        self._counters.in_flight += 1
        try:
            while True:
                correlation_id = self._request_ids.next()
                headers = self._build_headers(descriptor, correlation_id)
                self._log_attempt(descriptor, correlation_id)

                outcome = await self._attempt(descriptor, headers, correlation_id)
                if isinstance(outcome, ResponseEnvelope):
                    logger.info(
                        f"API response {descriptor.method.value} {descriptor.path}: success",
                        extra={
                            "correlation_id": correlation_id,
                            "state": CallState.SUCCESS.value,
                        },
                    )
                    return outcome

                scheduled = self.retry_policy.schedule(descriptor, outcome)
                if scheduled is None:
                    self._log_terminal(descriptor, outcome)
                    raise ApiError(outcome)

                logger.warning(
                    f"Retry {scheduled.descriptor.attempt} for "
                    f"{descriptor.method.value} {descriptor.path} "
                    f"after {scheduled.delay_ms}ms ({outcome.kind.value})",
                    extra={
                        "correlation_id": correlation_id,
                        "error_kind": outcome.kind.value,
                        "delay_ms": scheduled.delay_ms,
                        "state": CallState.FAILED_RETRYABLE.value,
                    },
                )
                await self._sleep(scheduled.delay_ms / 1000)
                descriptor = scheduled.descriptor
        finally:
            self._counters.in_flight -= 1

    async def _attempt(
        self,
        descriptor: RequestDescriptor,
        headers: dict[str, str],
        correlation_id: str,
    ) -> ResponseEnvelope | ErrorRecord:
        if self._mock_router is not None:
            return await self._mock_router.route(
                descriptor.method, descriptor.endpoint, descriptor.body,
            )
        return await self._send_live(descriptor, headers, correlation_id)

    async def _send_live(
        self,
        descriptor: RequestDescriptor,
        headers: dict[str, str],
        correlation_id: str,
    ) -> ResponseEnvelope | ErrorRecord:
        timeout_s = descriptor.timeout_ms / 1000
        try:
            response = await asyncio.wait_for(
                self._http.request(
                    descriptor.method.value,
                    f"{self.base_url}{descriptor.endpoint}",
                    headers=headers,
                    timeout=timeout_s,
                    follow_redirects=True,
                    **self._body_kwargs(descriptor.body),
                ),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError as e:
            deadline = DeadlineExceeded(descriptor.timeout_ms)
            deadline.__cause__ = e
            return self._classifier.from_exception(deadline, correlation_id)
        except httpx.HTTPError as e:
            return self._classifier.from_exception(e, correlation_id)
        except Exception as e:
            logger.error(
                f"Unexpected transport error: {e}", exc_info=True,
                extra={"correlation_id": correlation_id},
            )
            return self._classifier.from_exception(e, correlation_id)

        if not response.is_success:
            return self._classifier.from_response(
                response.status_code, _error_body(response), correlation_id,
            )
        try:
            return _decode_body(response)
        except ResponseDecodeError as e:
            return self._classifier.from_exception(e, correlation_id)

    def _build_headers(
        self, descriptor: RequestDescriptor, correlation_id: str,
    ) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **descriptor.headers,
        }
        token = self.token_store.get()
        if token is not None:
            headers["Authorization"] = token.as_header()
        headers["X-Company-ID"] = self.tenant_id
        headers["X-Request-ID"] = correlation_id
        return headers

    @staticmethod
    def _body_kwargs(body: Any) -> dict[str, Any]:
        if body is None:
            return {}
        if isinstance(body, (bytes, str)):
            return {"content": body}
        return {"json": body}

    def _log_attempt(self, descriptor: RequestDescriptor, correlation_id: str) -> None:
        logger.info(
            f"API request [{correlation_id}]: {descriptor.method.value} "
            f"{self.base_url}{descriptor.path}",
            extra={
                "correlation_id": correlation_id,
                "method": descriptor.method.value,
                "target": descriptor.path,
                "attempt": descriptor.attempt,
                "state": CallState.IN_FLIGHT.value,
            },
        )

    def _log_terminal(self, descriptor: RequestDescriptor, record: ErrorRecord) -> None:
        logger.error(
            f"API request failed: {descriptor.method.value} {descriptor.path} "
            f"({record.kind.value}: {record.message})",
            extra={
                "correlation_id": record.correlation_id,
                "error_kind": record.kind.value,
                "http_status": record.http_status,
                "attempt": descriptor.attempt,
                "state": CallState.FAILED_TERMINAL.value,
            },
        )

    # ─── Verb Wrappers ───────────────────────────────────────────

    def _descriptor(
        self,
        method: HttpMethod,
        endpoint: str,
        body: Any = None,
        timeout_ms: int | None = None,
        retry: bool = True,
    ) -> RequestDescriptor:
        return RequestDescriptor(
            endpoint=endpoint,
            method=method,
            body=body,
            timeout_ms=timeout_ms,
            retry_enabled=retry,
        )

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout_ms: int | None = None,
        retry: bool = True,
    ) -> Any:
        envelope = await self.request(self._descriptor(
            HttpMethod.GET, _with_query(endpoint, params),
            timeout_ms=timeout_ms, retry=retry,
        ))
        return envelope.payload

    async def post(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        envelope = await self.request(
            self._descriptor(HttpMethod.POST, endpoint, data, **kwargs),
        )
        return envelope.payload

    async def put(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        envelope = await self.request(
            self._descriptor(HttpMethod.PUT, endpoint, data, **kwargs),
        )
        return envelope.payload

    async def patch(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        envelope = await self.request(
            self._descriptor(HttpMethod.PATCH, endpoint, data, **kwargs),
        )
        return envelope.payload

    async def delete(self, endpoint: str, **kwargs) -> Any:
        envelope = await self.request(
            self._descriptor(HttpMethod.DELETE, endpoint, **kwargs),
        )
        return envelope.payload

    # ─── Dashboard Data ──────────────────────────────────────────

    async def list_opportunities(
        self,
        date_range: str = "90",
        status: str = "all",
        assigned_to: str = "all",
        category: str = "all",
        page: int = 1,
        limit: int = 100,
    ) -> Any:
        return await self.get("/opportunities", {
            "date_range": date_range,
            "status": status,
            "assigned_to": assigned_to,
            "category": category,
            "page": page,
            "limit": limit,
        })

    async def list_sales_orders(
        self,
        date_range: str = "90",
        status: str = "all",
        page: int = 1,
        limit: int = 100,
    ) -> Any:
        return await self.get("/sales-orders", {
            "date_range": date_range,
            "status": status,
            "page": page,
            "limit": limit,
        })

    async def list_helpdesk_tickets(
        self,
        date_range: str = "30",
        status: str = "open",
        priority: str = "all",
        page: int = 1,
        limit: int = 50,
    ) -> Any:
        return await self.get("/helpdesk-tickets", {
            "date_range": date_range,
            "status": status,
            "priority": priority,
            "page": page,
            "limit": limit,
        })

    async def get_dashboard_summary(self) -> Any:
        return await self.get("/dashboard/summary")

    async def get_user_preferences(self) -> Any:
        return await self.get("/user/preferences")

    async def update_user_preferences(self, preferences: Mapping[str, Any]) -> Any:
        return await self.put("/user/preferences", dict(preferences))

    # ─── Reports ─────────────────────────────────────────────────

    async def generate_pdf(
        self,
        dashboard_type: str,
        data: Any,
        filters: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self.post("/pdf/generate", {
            "dashboard_type": dashboard_type,
            "data": data,
            "filters": dict(filters or {}),
            "company": self.tenant_id,
            "timestamp": _now_iso(),
            "options": {
                "format": "A4",
                "orientation": "portrait",
                "include_charts": True,
                "include_tables": True,
            },
        })

    async def download_pdf(self, pdf_id: str) -> ResponseEnvelope:
        """Fetch a generated report. Binary on success; JSON if the server says so."""
        return await self.request(
            self._descriptor(HttpMethod.GET, f"/pdf/download/{pdf_id}"),
        )

    async def send_email(
        self,
        recipients: str | list[str],
        subject: str,
        message: str,
        dashboard_type: str,
    ) -> Any:
        if isinstance(recipients, str):
            recipients = [recipients]
        return await self.post("/email/send", {
            "to": list(recipients),
            "subject": subject,
            "message": message,
            "dashboard_type": dashboard_type,
            "company": self.tenant_id,
            "timestamp": _now_iso(),
        })

    # ─── Auth ────────────────────────────────────────────────────

    async def login(self, credentials: Mapping[str, Any]) -> Any:
        response = await self.post("/auth/login", dict(credentials))
        self._adopt_token(response)
        return response

    async def refresh_token(self) -> Any:
        response = await self.post("/auth/refresh")
        self._adopt_token(response)
        return response

    async def logout(self) -> Any:
        """End the session. The local token is cleared even if the call fails."""
        try:
            return await self.post("/auth/logout")
        finally:
            self.token_store.clear()

    def _adopt_token(self, response: Any) -> None:
        if isinstance(response, dict) and response.get("token"):
            self.token_store.set(str(response["token"]))

    # ─── Health ──────────────────────────────────────────────────

    async def health_check(self) -> dict:
        """Probe /health once (no retries). Reports status, never raises ApiError."""
        started = time.perf_counter()
        try:
            await self.get(
                "/health", timeout_ms=HEALTH_CHECK_TIMEOUT_MS, retry=False,
            )
        except ApiError as e:
            return {
                "status": "unhealthy",
                "error": e.record.message,
                "kind": e.kind.value,
                "timestamp": _now_iso(),
            }
        return {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - started) * 1000),
            "timestamp": _now_iso(),
        }


def _error_body(response: httpx.Response) -> Any:
    """Structured error body if there is one; None falls back to status text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _decode_body(response: httpx.Response) -> ResponseEnvelope:
    content_type = response.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        if not response.content:
            return ResponseEnvelope.json(None)
        try:
            return ResponseEnvelope.json(response.json())
        except ValueError as e:
            raise ResponseDecodeError(f"Failed to decode JSON response: {e}") from e
    if content_type.startswith("text/"):
        return ResponseEnvelope.text(response.text)
    return ResponseEnvelope.binary(response.content)
