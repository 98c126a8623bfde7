"""Transport Mode Resolution — decides LIVE vs MOCK once, from explicit inputs.

Invariants:
    - Pure: every input is passed in, nothing is sniffed from ambient state
    - MOCK when any trigger fires: forced flag, `mock=1` query parameter,
      persisted flag, empty or sentinel base address, `file` execution scheme
"""

from typing import Any, Mapping
from urllib.parse import parse_qs

from crm_client.core.domain_types import MOCK_BASE_URL_SENTINEL, TransportMode


def _query_requests_mock(query: str | Mapping[str, Any] | None) -> bool:
    if not query:
        return False
    if isinstance(query, str):
        values = parse_qs(query.lstrip("?")).get("mock", [])
    else:
        raw = query.get("mock")
        values = raw if isinstance(raw, list) else [raw]
    return any(str(v) == "1" for v in values)


def _flag_is_set(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"


def resolve_transport_mode(
    base_url: str | None,
    *,
    force_mock: bool = False,
    query: str | Mapping[str, Any] | None = None,
    stored_flag: Any | None = None,
    scheme: str | None = None,
) -> TransportMode:
    """Resolve the transport for a client instance."""
    if force_mock:
        return TransportMode.MOCK
    if _query_requests_mock(query):
        return TransportMode.MOCK
    if stored_flag is not None and _flag_is_set(stored_flag):
        return TransportMode.MOCK
    if not base_url or base_url.strip() == MOCK_BASE_URL_SENTINEL:
        return TransportMode.MOCK
    if scheme and scheme.lower().rstrip(":") == "file":
        return TransportMode.MOCK
    return TransportMode.LIVE
