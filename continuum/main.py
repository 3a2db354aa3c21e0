"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from continuum.api.router import router as api_router
from continuum.core.config import get_settings
from continuum.core.exceptions import setup_exception_handlers
from continuum.core.health import HealthCheckService, HealthStatus
from continuum.core.logging import setup_logging, setup_request_logging
from continuum.core.redis import RedisClient, close_redis, init_redis
from continuum.core.tracking_middleware import PageTrackingMiddleware, RedirectMiddleware
from continuum.web.pages import router as pages_router

logger = logging.getLogger("continuum")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Application lifespan handler for startup and shutdown."""
    settings = get_settings()
    init_redis(settings)
    logger.info("Application started", extra={"env": settings.app_env})
    yield
    logger.info("Application shutting down")
    close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    setup_logging(settings)

    app = FastAPI(
        title="Continuum Clinic",
        description="Marketing site, client portal and admin back-office for a veterinary longevity clinic",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Setup request logging middleware (must be added before CORS)
    setup_request_logging(app)

    app.add_middleware(PageTrackingMiddleware)
    app.add_middleware(RedirectMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Simple health check endpoint for basic liveness checks."""
        return {"status": "healthy"}

    @app.get("/health/live", tags=["health"])
    async def liveness_check() -> dict[str, str]:
        """Returns 200 whenever the process is serving requests."""
        result = await HealthCheckService(settings=settings).check_liveness()
        return {"status": result.status.value}

    @app.get("/health/ready", tags=["health"])
    async def readiness_check(redis: RedisClient) -> Response:
        """Readiness check.

        Returns 200 if Redis answers, 503 otherwise.
        """
        health_service = HealthCheckService(redis=redis, settings=settings)
        result = await health_service.check_readiness()

        status_code = 200 if result.status != HealthStatus.UNHEALTHY else 503
        return JSONResponse(content=result.to_dict(), status_code=status_code)

    @app.get("/health/detailed", tags=["health"])
    async def detailed_health_check(redis: RedisClient) -> dict[str, Any]:
        """Detailed health check with all component statuses."""
        health_service = HealthCheckService(redis=redis, settings=settings)
        result = await health_service.check_all()
        return result.to_dict()

    app.include_router(api_router)
    app.include_router(pages_router)

    return app


# Create application instance
app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "continuum.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.app_log_level.lower(),
    )


if __name__ == "__main__":
    run()
