"""Root conftest — shared test configuration and client fixtures.

Design Decisions:
    - RecordingSleep replaces asyncio.sleep: backoff and mock latency are
      recorded, never waited on
    - Live transport faked with httpx.MockTransport (no sockets)
"""

import os

import httpx
import pytest

# Ensure tests never hit the real backend or the real storage file
os.environ.setdefault("API_BASE_URL", "mock")
os.environ.setdefault("STORAGE_PATH", ".pytest_cache/crm_client_storage.json")

from crm_client.core.domain_types import TransportMode  # noqa: E402
from crm_client.infrastructure.api_client import ApiClient  # noqa: E402
from crm_client.infrastructure.mock_router import MockRouter  # noqa: E402
from crm_client.infrastructure.storage import InMemoryStorage  # noqa: E402
from crm_client.infrastructure.token_store import TokenStore  # noqa: E402

BASE_URL = "https://api.test/v1"


class RecordingSleep:
    """Async sleep stand-in that records requested delays (in ms)."""

    def __init__(self):
        self.delays_ms: list[int] = []

    async def __call__(self, seconds: float) -> None:
        self.delays_ms.append(round(seconds * 1000))


class FixedClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def token_store(storage):
    return TokenStore(storage)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def mock_client(storage, token_store, sleep, clock):
    """ApiClient on the mock transport with zero real latency."""
    router = MockRouter(token_store, storage, clock=clock, sleep=sleep)
    return ApiClient(
        "mock",
        mode=TransportMode.MOCK,
        storage=storage,
        token_store=token_store,
        mock_router=router,
        sleep=sleep,
    )


@pytest.fixture
async def make_live_client(storage, token_store, sleep):
    """Factory: ApiClient whose HTTP calls are answered by `handler`."""
    created: list[httpx.AsyncClient] = []

    def _make(handler, **kwargs) -> ApiClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        created.append(http)
        return ApiClient(
            BASE_URL,
            mode=TransportMode.LIVE,
            storage=storage,
            token_store=token_store,
            http_client=http,
            sleep=sleep,
            **kwargs,
        )

    yield _make
    for http in created:
        await http.aclose()
