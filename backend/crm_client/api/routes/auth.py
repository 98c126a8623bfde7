"""Auth — login, logout, and token refresh on behalf of the calling browser.

Invariants:
    - The gateway keeps no session: login/refresh hand the upstream token back
      to the caller, who presents it as a bearer token on later requests
    - Logout and refresh act only on the caller's own credential
"""

from fastapi import APIRouter, Depends

from crm_client.api.dependencies import get_caller_client
from crm_client.infrastructure.api_client import ApiClient
from crm_client.schemas.reports import LoginRequest

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _session(client: ApiClient) -> dict:
    token = client.token_store.get()
    return {
        "authenticated": token is not None,
        "token": token.value if token is not None else None,
    }


@router.post("/login")
async def login(body: LoginRequest, client: ApiClient = Depends(get_caller_client)):
    await client.login(body.model_dump())
    return _session(client)


@router.post("/refresh")
async def refresh(client: ApiClient = Depends(get_caller_client)):
    await client.refresh_token()
    return _session(client)


@router.post("/logout")
async def logout(client: ApiClient = Depends(get_caller_client)):
    await client.logout()
    return _session(client)
