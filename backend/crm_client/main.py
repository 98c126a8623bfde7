"""Dashboard Gateway — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - One ApiClient per process, built in lifespan unless injected;
      requests run through per-caller views carrying the caller's bearer token
    - CORS configured from settings (not hardcoded)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_client.api.error_handlers import register_error_handlers
from crm_client.api.routes import auth, dashboard, health, reports
from crm_client.config import get_settings
from crm_client.infrastructure.api_client import ApiClient
from crm_client.infrastructure.client_factory import build_api_client
from crm_client.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(api_client: ApiClient | None = None) -> FastAPI:
    """Build the gateway. An injected client is used as-is and not closed."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        owned = app.state.api_client is None
        if owned:
            app.state.api_client = build_api_client(settings)
        logger.info("Dashboard gateway started")
        yield
        if owned:
            await app.state.api_client.aclose()
        logger.info("Dashboard gateway shutting down")

    app = FastAPI(
        title="CRM Dashboard Gateway", version="1.0.0", lifespan=lifespan,
    )
    app.state.api_client = api_client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(dashboard.router)
    app.include_router(reports.router)
    app.include_router(auth.router)

    register_error_handlers(app)
    return app


app = create_app()
