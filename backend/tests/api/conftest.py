"""Gateway fixtures — FastAPI app wired to a test ApiClient.

Design Decisions:
    - ASGITransport does not run lifespan; the client is injected via create_app
"""

import pytest
from httpx import ASGITransport, AsyncClient

from crm_client.main import create_app


@pytest.fixture
async def gateway(mock_client):
    """Gateway over the mock-transport ApiClient."""
    app = create_app(api_client=mock_client)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def make_gateway(make_live_client):
    """Factory: gateway over a live-transport ApiClient answered by `handler`."""
    opened: list[AsyncClient] = []

    def _make(handler) -> AsyncClient:
        app = create_app(api_client=make_live_client(handler))
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        opened.append(c)
        return c

    yield _make
    for c in opened:
        await c.aclose()
