"""Client Factory — wires an ApiClient from Settings.

Invariants:
    - Transport mode is resolved here, once, and passed in as configuration
    - TokenStore, MockRouter, and ApiClient share one KeyValueStorage
"""

import asyncio
from typing import Any, Mapping

from crm_client.config import Settings
from crm_client.core.domain_types import MOCK_MODE_STORAGE_KEY
from crm_client.core.repository_protocols import KeyValueStorage
from crm_client.core.retry_policy import RetryPolicy
from crm_client.core.transport_mode import resolve_transport_mode
from crm_client.infrastructure.api_client import ApiClient, Sleep
from crm_client.infrastructure.mock_router import MockRouter
from crm_client.infrastructure.storage import JsonFileStorage
from crm_client.infrastructure.token_store import TokenStore


def build_api_client(
    settings: Settings,
    *,
    storage: KeyValueStorage | None = None,
    query: str | Mapping[str, Any] | None = None,
    scheme: str | None = None,
    sleep: Sleep = asyncio.sleep,
    **client_kwargs: Any,
) -> ApiClient:
    """Build a client whose transport is fixed for its lifetime."""
    storage = storage or JsonFileStorage(settings.storage_path)
    mode = resolve_transport_mode(
        settings.api_base_url,
        force_mock=settings.mock_mode,
        query=query,
        stored_flag=storage.get(MOCK_MODE_STORAGE_KEY),
        scheme=scheme,
    )
    token_store = TokenStore(storage)
    mock_router = MockRouter(
        token_store, storage,
        latency_ms=settings.mock_latency_ms,
        sleep=sleep,
    )
    return ApiClient(
        settings.api_base_url,
        mode=mode,
        storage=storage,
        token_store=token_store,
        tenant_id=settings.tenant_id,
        timeout_ms=settings.api_timeout_ms,
        retry_policy=RetryPolicy(
            max_retries=settings.api_max_retries,
            base_delay_ms=settings.api_base_delay_ms,
            max_delay_ms=settings.api_max_delay_ms,
        ),
        mock_router=mock_router,
        sleep=sleep,
        **client_kwargs,
    )
