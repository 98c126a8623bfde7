"""Route Dependencies — access to the process-wide ApiClient and per-caller views.

Invariants:
    - The gateway never attaches a stored credential to a caller's request:
      upstream sees exactly the bearer token the caller presented, or none
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm_client.core.errors import ConfigurationError
from crm_client.infrastructure.api_client import ApiClient

bearer_scheme = HTTPBearer(auto_error=False)


def get_api_client(request: Request) -> ApiClient:
    client = getattr(request.app.state, "api_client", None)
    if client is None:
        raise ConfigurationError("API client not initialized")
    return client


def get_caller_client(
    client: ApiClient = Depends(get_api_client),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> ApiClient:
    token = credentials.credentials if credentials is not None else None
    return client.for_caller(token)
