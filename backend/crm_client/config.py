"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Retry, timeout, and mock-latency literals are defaults, overridable per deployment

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - api_base_url "mock" (or empty) selects the mock transport
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Upstream API
    api_base_url: str = "https://api.companya.com/v1"
    api_timeout_ms: int = Field(30_000, gt=0)
    api_max_retries: int = Field(3, ge=0)
    api_base_delay_ms: int = Field(1000, ge=0)
    api_max_delay_ms: int = Field(30_000, ge=0)
    tenant_id: str = "company_a"

    @field_validator("api_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints start with '/', so the base must not end with one."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    # Mock transport
    mock_mode: bool = False
    mock_latency_ms: int = Field(200, ge=0)

    # Durable client-side storage (token, mock flag, preferences)
    storage_path: str = ".crm_client/storage.json"

    # Gateway
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
