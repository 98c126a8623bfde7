"""Transport Mode — verifies every mock trigger and the live default."""

import pytest

from crm_client.core.domain_types import TransportMode
from crm_client.core.transport_mode import resolve_transport_mode

LIVE_URL = "https://api.companya.com/v1"


def test_live_by_default():
    assert resolve_transport_mode(LIVE_URL) is TransportMode.LIVE


@pytest.mark.parametrize("kwargs", [
    {"force_mock": True},
    {"query": "?mock=1"},
    {"query": "page=2&mock=1"},
    {"query": {"mock": "1"}},
    {"query": {"mock": ["1"]}},
    {"stored_flag": "true"},
    {"stored_flag": True},
    {"scheme": "file:"},
    {"scheme": "FILE"},
])
def test_mock_triggers(kwargs):
    assert resolve_transport_mode(LIVE_URL, **kwargs) is TransportMode.MOCK


@pytest.mark.parametrize("base_url", ["", None, "mock", " mock "])
def test_sentinel_or_missing_base_url_is_mock(base_url):
    assert resolve_transport_mode(base_url) is TransportMode.MOCK


@pytest.mark.parametrize("kwargs", [
    {"query": "mock=0"},
    {"stored_flag": "false"},
    {"stored_flag": False},
    {"scheme": "https"},
])
def test_non_triggers_stay_live(kwargs):
    assert resolve_transport_mode(LIVE_URL, **kwargs) is TransportMode.LIVE
