"""FastAPI application for the back-office REST API.

This package provides REST endpoints for:
- Health checks
- Authentication and user administration
- Bookings and booking payments
- Orders, products, contacts and subscriptions
- Admin statistics
- Payment provider webhooks
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from backoffice.config import Settings
from backoffice.utils.logging import configure_logging
from backoffice_api.dependencies import get_settings
from backoffice_api.exceptions import register_exception_handlers
from backoffice_api.middleware import CorrelationIdMiddleware
from backoffice_api.routes import (
    auth_router,
    booking_payments_router,
    bookings_router,
    contacts_router,
    health_router,
    orders_router,
    products_router,
    stats_router,
    subscriptions_router,
    webhooks_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Configured FastAPI app with all routers under /api
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Back-office API",
        description="REST API for bookings, orders, products, contacts and subscriptions",
        version="0.1.0",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    # This matches CloudFront routing: /api/* → API Gateway
    for router in (
        health_router,
        auth_router,
        bookings_router,
        booking_payments_router,
        orders_router,
        products_router,
        contacts_router,
        subscriptions_router,
        stats_router,
        webhooks_router,
    ):
        app.include_router(router, prefix="/api")

    @app.get("/api/ping")
    async def ping() -> dict[str, Any]:
        """Root health check endpoint at /api/ping."""
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": "backoffice-api",
        }

    logger.info("Back-office API configured for environment: %s", settings.environment)
    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("backoffice_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
