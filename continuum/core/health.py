"""Health check service for monitoring application dependencies."""

import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from redis import Redis, RedisError

from continuum.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""

    name: str
    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = None


@dataclass
class HealthCheckResult:
    """Overall health check result."""

    status: HealthStatus
    components: list[ComponentHealth]
    version: str = "0.1.0"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "version": self.version,
            "components": {
                c.name: {
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                }
                for c in self.components
            },
        }


class HealthCheckService:
    """Service for checking health of application dependencies."""

    CRITICAL_COMPONENTS = {"redis"}

    def __init__(
        self,
        redis: Redis | None = None,  # type: ignore[type-arg]
        settings: Settings | None = None,
    ) -> None:
        """Initialize health check service.

        Args:
            redis: Redis client for the store health check
            settings: Application settings
        """
        self.redis = redis
        self.settings = settings or get_settings()

    async def check_redis(self) -> ComponentHealth:
        """Check Redis connectivity.

        Returns:
            ComponentHealth for Redis
        """
        if self.redis is None:
            return ComponentHealth(
                name="redis",
                status=HealthStatus.UNHEALTHY,
                message="No Redis client available",
            )

        start = time.perf_counter()
        try:
            self.redis.ping()
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return ComponentHealth(
                name="redis",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        latency = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            name="redis",
            status=HealthStatus.HEALTHY,
            message="Connected",
            latency_ms=round(latency, 2),
        )

    async def check_email(self) -> ComponentHealth:
        """Check email provider configuration. No request is sent.

        Returns:
            ComponentHealth for email
        """
        if not self.settings.resend_api_key:
            return ComponentHealth(
                name="email",
                status=HealthStatus.DEGRADED,
                message="RESEND_API_KEY not configured",
            )
        return ComponentHealth(name="email", status=HealthStatus.HEALTHY, message="Configured")

    async def check_all(self) -> HealthCheckResult:
        """Check all dependencies and return overall health.

        Returns:
            HealthCheckResult with overall status and component details
        """
        components = [
            await self.check_redis(),
            await self.check_email(),
        ]

        # Determine overall status
        if all(c.status == HealthStatus.HEALTHY for c in components):
            overall_status = HealthStatus.HEALTHY
        elif any(
            c.status == HealthStatus.UNHEALTHY and c.name in self.CRITICAL_COMPONENTS
            for c in components
        ):
            overall_status = HealthStatus.UNHEALTHY
        else:
            overall_status = HealthStatus.DEGRADED

        return HealthCheckResult(status=overall_status, components=components)

    async def check_liveness(self) -> ComponentHealth:
        """Check if the application is alive.

        Returns:
            ComponentHealth for liveness
        """
        return ComponentHealth(
            name="liveness",
            status=HealthStatus.HEALTHY,
            message="Application is running",
        )

    async def check_readiness(self) -> HealthCheckResult:
        """Check if the application is ready to serve traffic.

        Returns:
            HealthCheckResult for readiness
        """
        return await self.check_all()
