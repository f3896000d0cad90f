"""Health check service."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from coldchain import __version__

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = None


@dataclass
class SystemHealth:
    """Overall system health status."""

    status: HealthStatus
    version: str
    components: list[ComponentHealth]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "version": self.version,
            "components": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                }
                for c in self.components
            ],
        }


class HealthService:
    """Service for checking health of system components."""

    VERSION = __version__

    async def check_database(self, session: AsyncSession) -> ComponentHealth:
        """Check database connectivity and response time."""
        start = time.perf_counter()
        try:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            latency = (time.perf_counter() - start) * 1000

            return ComponentHealth(
                name="database",
                status=HealthStatus.HEALTHY,
                message="Database responding",
                latency_ms=round(latency, 2),
            )
        except Exception as e:
            latency = (time.perf_counter() - start) * 1000
            logger.error("Database health check failed", error=str(e))
            return ComponentHealth(
                name="database",
                status=HealthStatus.UNHEALTHY,
                message=f"Connection failed: {str(e)[:100]}",
                latency_ms=round(latency, 2),
            )

    async def get_readiness(self, session: AsyncSession) -> SystemHealth:
        """Readiness: the store must answer."""
        db_health = await self.check_database(session)
        return SystemHealth(
            status=db_health.status,
            version=self.VERSION,
            components=[db_health],
        )

    def get_liveness(self) -> SystemHealth:
        """Get basic liveness status (application is running)."""
        return SystemHealth(
            status=HealthStatus.HEALTHY,
            version=self.VERSION,
            components=[
                ComponentHealth(
                    name="application",
                    status=HealthStatus.HEALTHY,
                    message="Application is running",
                )
            ],
        )


health_service = HealthService()
