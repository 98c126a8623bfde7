"""Dashboard Gateway — verifies routes delegate to ApiClient and surface ErrorRecords.

Invariants:
    - Data routes return the client's payload unchanged
    - ApiError → {"error": ErrorRecord} with kind-mapped status
    - Validation errors → 400 with field details
    - Upstream sees only the bearer token the caller presented
"""

import httpx

from crm_client.api.error_handlers import gateway_status
from crm_client.core.errors import ErrorKind


async def test_liveness(gateway):
    res = await gateway.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_mock_upstream(gateway):
    res = await gateway.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["transport"] == "mock"


async def test_readiness_503_when_upstream_down(make_gateway):
    gateway = make_gateway(lambda request: httpx.Response(503))
    res = await gateway.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["upstream"]["kind"] == "NETWORK_ERROR"


async def test_opportunities_listing(gateway):
    res = await gateway.get("/api/v1/dashboard/opportunities", params={"status": "new"})
    assert res.status_code == 200
    assert res.json()["summary"]["totalPipelineValue"] == 295000


async def test_summary_and_tickets(gateway):
    summary = (await gateway.get("/api/v1/dashboard/summary")).json()
    tickets = (await gateway.get("/api/v1/dashboard/helpdesk-tickets")).json()
    orders = (await gateway.get("/api/v1/dashboard/sales-orders")).json()
    assert summary["salesOrders"]["totalOrders"] == 3
    assert len(tickets["tickets"]) == 2
    assert len(orders["orders"]) == 3


async def test_preferences_round_trip(gateway):
    res = await gateway.put("/api/v1/dashboard/preferences", json={"theme": "dark"})
    assert res.json() == {"success": True, "preferences": {"theme": "dark"}}
    assert (await gateway.get("/api/v1/dashboard/preferences")).json() == {"theme": "dark"}


async def test_invalid_preferences_rejected(gateway):
    res = await gateway.put("/api/v1/dashboard/preferences", json={"pageSize": 0})
    assert res.status_code == 400
    assert res.json()["error"]["kind"] == "VALIDATION_ERROR"


async def test_pdf_generate_then_download(gateway):
    created = await gateway.post(
        "/api/v1/reports/pdf", json={"dashboard_type": "opportunities"},
    )
    assert created.status_code == 201
    pdf_id = created.json()["id"]

    res = await gateway.get(f"/api/v1/reports/pdf/{pdf_id}")
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert f"dashboard-report-{pdf_id}.pdf" in res.headers["content-disposition"]
    assert res.content == f"Mock PDF {pdf_id}".encode()


async def test_email_report_validates_recipients(gateway):
    bad = await gateway.post("/api/v1/reports/email", json={
        "dashboard_type": "salesOrders", "recipients": ["not-an-email"],
    })
    assert bad.status_code == 400

    ok = await gateway.post("/api/v1/reports/email", json={
        "dashboard_type": "salesOrders", "recipients": ["ceo@companya.com"],
    })
    assert ok.status_code == 202
    assert ok.json() == {"success": True}


async def test_login_returns_token_to_caller_only(gateway, token_store):
    res = await gateway.post(
        "/api/v1/auth/login", json={"username": "demo", "password": "pw"},
    )
    session = res.json()
    assert session["authenticated"] is True
    assert session["token"].startswith("mock_")
    assert not token_store.has_token()

    res = await gateway.post(
        "/api/v1/auth/logout",
        headers={"Authorization": f"Bearer {session['token']}"},
    )
    assert res.json() == {"authenticated": False, "token": None}


def _recording_upstream(seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, request.headers.get("Authorization")))
        if request.url.path.endswith("/auth/login"):
            return httpx.Response(200, json={"token": "alice-secret"})
        return httpx.Response(200, json={"opportunities": []})
    return handler


async def test_anonymous_caller_gets_no_stored_credential(make_gateway, token_store):
    seen: list = []
    alice = make_gateway(_recording_upstream(seen))
    await alice.post("/api/v1/auth/login", json={"username": "alice", "password": "pw"})

    # no Authorization header on the follow-up call
    res = await alice.get("/api/v1/dashboard/opportunities")

    assert res.status_code == 200
    assert seen[-1] == ("/v1/opportunities", None)
    assert not token_store.has_token()


async def test_caller_bearer_token_forwarded_upstream(make_gateway):
    seen: list = []
    gateway = make_gateway(_recording_upstream(seen))

    await gateway.get(
        "/api/v1/dashboard/opportunities",
        headers={"Authorization": "Bearer bob-token"},
    )

    assert seen == [("/v1/opportunities", "Bearer bob-token")]


async def test_upstream_error_surfaced_unchanged(make_gateway):
    gateway = make_gateway(lambda request: httpx.Response(
        404, json={"message": "No such report", "details": {"id": "x"}},
    ))
    res = await gateway.get("/api/v1/reports/pdf/x")

    assert res.status_code == 404
    error = res.json()["error"]
    assert error["kind"] == "NOT_FOUND"
    assert error["message"] == "No such report"
    assert error["details"] == {"id": "x"}
    assert error["correlation_id"].startswith("req_")


async def test_upstream_401_maps_to_401(make_gateway, token_store):
    token_store.set("gateway-own")
    gateway = make_gateway(lambda request: httpx.Response(401))
    res = await gateway.get(
        "/api/v1/dashboard/summary", headers={"Authorization": "Bearer stale"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "AUTH_ERROR"
    assert token_store.get().value == "gateway-own"


def test_gateway_status_mapping():
    assert gateway_status(ErrorKind.TIMEOUT) == 504
    assert gateway_status(ErrorKind.RATE_LIMIT) == 429
    assert gateway_status(ErrorKind.SERVER_ERROR) == 502
    assert gateway_status(ErrorKind.UNKNOWN_ERROR) == 502
