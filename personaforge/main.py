"""
PersonaForge API - FastAPI Application

Main entry point for the API server.
Run with: uvicorn personaforge.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from personaforge.config.settings import settings
from personaforge.config.database import init_db
from personaforge.endpoints import api_router
from personaforge.middleware.auth import AuthMiddleware
from personaforge.middleware.error_handler import setup_exception_handlers
from personaforge.middleware.logging import LoggingMiddleware, configure_logging

# Configure structured logging
configure_logging(settings.LOG_LEVEL)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(
        "Starting PersonaForge API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        environment=settings.ENVIRONMENT,
    )

    if settings.ENVIRONMENT == "production" and settings.SECRET_KEY == "change-me-in-production":
        logger.critical("SECRET_KEY must be set in production")
        raise RuntimeError("SECRET_KEY must be set in production")

    # Production schemas are managed by Alembic
    if settings.ENVIRONMENT != "production":
        logger.info("Initializing database tables")
        init_db()

    yield

    logger.info("Shutting down PersonaForge API")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Synthetic identity and social-media persona generator",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    setup_exception_handlers(app)

    # Middleware added last runs first: CORS -> logging -> auth -> routes
    app.add_middleware(AuthMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def root_health():
        """Simple health check for load balancer."""
        return {"status": "ok", "version": settings.APP_VERSION}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/api/docs" if settings.DEBUG else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "personaforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
