"""Structured Logging — verifies JSON output and request extras."""

import json
import logging

import httpx

from crm_client.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "crm_client.test", logging.INFO, __file__, 1, "API request", None, None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_includes_request_extras():
    out = json.loads(JSONFormatter().format(_record(
        correlation_id="req_1_1", method="GET", target="/opportunities", attempt=0,
    )))
    assert out["message"] == "API request"
    assert out["correlation_id"] == "req_1_1"
    assert out["method"] == "GET"
    assert out["target"] == "/opportunities"
    assert out["attempt"] == 0


def test_json_formatter_omits_absent_extras():
    out = json.loads(JSONFormatter().format(_record()))
    assert "correlation_id" not in out
    assert out["level"] == "INFO"


async def test_every_attempt_logged_with_correlation_id(mock_client, caplog):
    caplog.set_level(logging.INFO, logger="crm_client.infrastructure.api_client")
    await mock_client.get_dashboard_summary()
    attempts = [
        r for r in caplog.records
        if getattr(r, "state", None) == "in_flight"
    ]
    assert len(attempts) == 1
    assert attempts[0].target == "/dashboard/summary"
    assert attempts[0].correlation_id.startswith("req_")


async def test_call_states_logged_in_lifecycle_order(make_live_client, caplog):
    caplog.set_level(logging.DEBUG, logger="crm_client.infrastructure.api_client")
    responses = iter([httpx.Response(500), httpx.Response(200, json={})])
    client = make_live_client(lambda request: next(responses))

    await client.get("/opportunities")

    states = [
        r.state for r in caplog.records if getattr(r, "state", None) is not None
    ]
    assert states == [
        "building", "in_flight", "failed_retryable", "in_flight", "success",
    ]
