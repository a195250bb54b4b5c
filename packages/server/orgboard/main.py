"""
OrgBoard API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orgboard.core.config import get_settings
from orgboard.core.errors import register_exception_handlers
from orgboard.core.logging import configure_logging
from orgboard.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from orgboard.api.v1 import router as api_router
from orgboard.api.v1.auth import router as auth_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="OrgBoard",
        description="Role-based committee and task boards for student organizations.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (order matters: last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["Authentication"])
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        log.info("OrgBoard starting", api_prefix=settings.api_prefix)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("OrgBoard shutting down")

    return app


app = create_app()
