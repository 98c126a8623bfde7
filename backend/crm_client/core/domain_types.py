"""Domain Types — request/response value objects and the enums that tag them.

Invariants:
    - RequestDescriptor is frozen; a retry produces a new descriptor (attempt + 1)
    - ResponseEnvelope always carries the ContentKind used to decode its payload
    - All valid states encoded as Enums: no raw string matching

Design Decisions:
    - Frozen dataclasses over dicts: attempts cannot be mutated in flight
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping


# ─── Persisted Keys ──────────────────────────────────────────────

TOKEN_STORAGE_KEY = "crm_auth_token"
MOCK_MODE_STORAGE_KEY = "crm_mock_mode"
PREFERENCES_STORAGE_KEY = "crm_user_preferences"

# Base address meaning "no backend"
MOCK_BASE_URL_SENTINEL = "mock"


# ─── Enums ───────────────────────────────────────────────────────

class HttpMethod(str, Enum):
    """Verbs accepted by ApiClient.request."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ContentKind(str, Enum):
    """How a response body was decoded."""
    JSON = "json"
    TEXT = "text"
    BINARY = "binary"


class TransportMode(str, Enum):
    """Where requests are answered. Resolved once per client."""
    LIVE = "live"
    MOCK = "mock"


class CallState(str, Enum):
    """Lifecycle of one logical call.

    BUILDING → IN_FLIGHT → SUCCESS
                         → FAILED_RETRYABLE → (delay) → IN_FLIGHT
                         → FAILED_TERMINAL
    """
    BUILDING = "building"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED_TERMINAL = "failed_terminal"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class RequestDescriptor:
    """One attempt of a logical call.

    timeout_ms None means the owning client's configured deadline.
    """
    endpoint: str
    method: HttpMethod = HttpMethod.GET
    body: Any | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None
    attempt: int = 0
    retry_enabled: bool = True

    def __post_init__(self):
        if self.attempt < 0:
            raise ValueError("attempt must be >= 0")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def path(self) -> str:
        """Endpoint without its query string."""
        return self.endpoint.split("?", 1)[0]

    def next_attempt(self) -> "RequestDescriptor":
        return replace(self, attempt=self.attempt + 1)


@dataclass(frozen=True)
class ResponseEnvelope:
    """Decoded response payload tagged with its content kind."""
    content_kind: ContentKind
    payload: Any

    @classmethod
    def json(cls, payload: Any) -> "ResponseEnvelope":
        return cls(ContentKind.JSON, payload)

    @classmethod
    def text(cls, payload: str) -> "ResponseEnvelope":
        return cls(ContentKind.TEXT, payload)

    @classmethod
    def binary(cls, payload: bytes) -> "ResponseEnvelope":
        return cls(ContentKind.BINARY, payload)


@dataclass(frozen=True)
class AuthToken:
    """Bearer credential held by TokenStore."""
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("token value cannot be empty")

    def as_header(self) -> str:
        return f"Bearer {self.value}"
