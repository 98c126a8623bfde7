"""Error Hierarchy — closed error taxonomy and the immutable record every failure becomes.

Invariants:
    - Every failed call surfaces exactly one ErrorRecord with one ErrorKind
    - ErrorRecord is frozen once constructed
    - correlation_id is the id of the attempt that failed, not the first attempt
    - to_response() produces the REST envelope used by the dashboard gateway

Design Decisions:
    - Single hierarchy with DashboardClientError base: callers catch one type
    - ErrorRecord as dataclass carried by ApiError: the record is data, the
      exception is only the propagation vehicle
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure classifications."""
    AUTH_ERROR = "AUTH_ERROR"          # 401
    FORBIDDEN = "FORBIDDEN"            # 403
    NOT_FOUND = "NOT_FOUND"            # 404
    RATE_LIMIT = "RATE_LIMIT"          # 429
    SERVER_ERROR = "SERVER_ERROR"      # 500
    NETWORK_ERROR = "NETWORK_ERROR"    # 502/503/504, connection failure
    TIMEOUT = "TIMEOUT"                # deadline exceeded
    PARSE_ERROR = "PARSE_ERROR"        # body decode failure
    HTTP_ERROR = "HTTP_ERROR"          # any other non-2xx
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Normalized description of a failed attempt."""
    kind: ErrorKind
    message: str
    correlation_id: str
    http_status: int | None = None
    details: Any | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False,
    )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "correlation_id": self.correlation_id,
            "http_status": self.http_status,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class DashboardClientError(Exception):
    """Base exception for all client errors."""


class ApiError(DashboardClientError):
    """Terminal failure of a request. Always carries an ErrorRecord."""

    def __init__(self, record: ErrorRecord):
        super().__init__(record.message)
        self.record = record

    @property
    def kind(self) -> ErrorKind:
        return self.record.kind

    @property
    def correlation_id(self) -> str:
        return self.record.correlation_id

    @property
    def http_status(self) -> int | None:
        return self.record.http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {"error": self.record.to_dict()}

    def __repr__(self) -> str:
        return (
            f"ApiError(kind={self.kind.value}, status={self.http_status}, "
            f"correlation_id={self.correlation_id!r})"
        )


class ConfigurationError(DashboardClientError):
    """Client constructed with an unusable configuration."""
