"""
FastAPI application for the appointment booking engine

Availability reads are public; bookings and status changes need a bearer
token issued by the auth service.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from booking_api.api.v1.router import api_v1_router
from booking_api.config.database import Database
from booking_api.config.settings import get_settings
from booking_api.core.errors import register_error_handlers
from booking_api.core.middleware import correlation_id_middleware, request_logging_middleware
from booking_api.core.monitoring import health_router
from booking_api.services.notification.notification_dispatcher import (
    CeleryNotificationDispatcher,
    NotificationDispatcher,
    NullNotificationDispatcher,
)
from booking_api.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    if getattr(app.state, "database", None) is None:
        app.state.database = Database.from_settings(settings)
    logger.info(f"{settings.APP_NAME} starting up (database: {app.state.database.dialect_name})")

    routes = sorted(
        (route.path, ",".join(sorted(route.methods)))
        for route in app.routes
        if isinstance(route, APIRoute)
    )
    for path, methods in routes:
        logger.debug(f"  {methods:12} {path}")
    logger.info(f"Total routes registered: {len(routes)}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down...")
    app.state.database.dispose()


def default_dispatcher() -> NotificationDispatcher:
    if settings.NOTIFICATIONS_ENABLED:
        return CeleryNotificationDispatcher()
    return NullNotificationDispatcher()


def create_app(
        database: Optional[Database] = None,
        dispatcher: Optional[NotificationDispatcher] = None
) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=settings.APP_NAME,
        description="Slot availability and conflict-free appointment booking",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.state.database = database
    app.state.notification_dispatcher = dispatcher or default_dispatcher()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    register_error_handlers(app)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "booking_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
