"""Retry Policy — pure retry decision and exponential backoff math.

Invariants:
    - should_retry(kind, attempt) is True iff kind is retryable and attempt < max_retries
    - delay_for(retry) == min(base_delay_ms * 2**retry, max_delay_ms); retry is 1-based
    - No IO, no sleeping: ApiClient owns the suspension
"""

from dataclasses import dataclass

from crm_client.core.domain_types import RequestDescriptor
from crm_client.core.errors import ErrorKind, ErrorRecord

RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.NETWORK_ERROR,
    ErrorKind.TIMEOUT,
    ErrorKind.SERVER_ERROR,
    ErrorKind.RATE_LIMIT,
})

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 30_000


@dataclass(frozen=True)
class RetryPolicy:
    """Stateless retry rules shared by every call of a client."""
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")

    def should_retry(self, kind: ErrorKind, attempt: int) -> bool:
        return kind in RETRYABLE_KINDS and attempt < self.max_retries

    def delay_for(self, retry: int) -> int:
        """Backoff before the given 1-based retry, in milliseconds."""
        if retry < 0:
            raise ValueError("retry must be >= 0")
        # Cap the exponent too so huge retry counts don't build huge ints
        exponent = min(retry, 32)
        return min(self.base_delay_ms * (2 ** exponent), self.max_delay_ms)

    def schedule(
        self, descriptor: RequestDescriptor, cause: ErrorRecord,
    ) -> "ScheduledRetry | None":
        """Plan the next attempt, or None when the failure is terminal."""
        if not descriptor.retry_enabled:
            return None
        if not self.should_retry(cause.kind, descriptor.attempt):
            return None
        next_descriptor = descriptor.next_attempt()
        return ScheduledRetry(
            descriptor=next_descriptor,
            delay_ms=self.delay_for(next_descriptor.attempt),
            cause=cause,
        )


@dataclass(frozen=True)
class ScheduledRetry:
    """A retry waiting on its backoff delay."""
    descriptor: RequestDescriptor
    delay_ms: int
    cause: ErrorRecord
