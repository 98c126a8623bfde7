"""Dashboard Data — opportunities, sales orders, helpdesk tickets, summary, preferences.

Invariants:
    - Query parameters map 1:1 onto ApiClient filter arguments (same defaults)
    - Upstream failures propagate as ApiError to the global handler
"""

from fastapi import APIRouter, Depends, Query

from crm_client.api.dependencies import get_caller_client
from crm_client.infrastructure.api_client import ApiClient
from crm_client.schemas.reports import PreferencesUpdate

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/opportunities")
async def list_opportunities(
    date_range: str = Query("90"),
    status: str = Query("all"),
    assigned_to: str = Query("all"),
    category: str = Query("all"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    client: ApiClient = Depends(get_caller_client),
):
    return await client.list_opportunities(
        date_range=date_range, status=status, assigned_to=assigned_to,
        category=category, page=page, limit=limit,
    )


@router.get("/sales-orders")
async def list_sales_orders(
    date_range: str = Query("90"),
    status: str = Query("all"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    client: ApiClient = Depends(get_caller_client),
):
    return await client.list_sales_orders(
        date_range=date_range, status=status, page=page, limit=limit,
    )


@router.get("/helpdesk-tickets")
async def list_helpdesk_tickets(
    date_range: str = Query("30"),
    status: str = Query("open"),
    priority: str = Query("all"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    client: ApiClient = Depends(get_caller_client),
):
    return await client.list_helpdesk_tickets(
        date_range=date_range, status=status, priority=priority,
        page=page, limit=limit,
    )


@router.get("/summary")
async def dashboard_summary(client: ApiClient = Depends(get_caller_client)):
    return await client.get_dashboard_summary()


@router.get("/preferences")
async def read_preferences(client: ApiClient = Depends(get_caller_client)):
    return await client.get_user_preferences()


@router.put("/preferences")
async def write_preferences(
    body: PreferencesUpdate, client: ApiClient = Depends(get_caller_client),
):
    return await client.update_user_preferences(body.model_dump(exclude_none=True))
