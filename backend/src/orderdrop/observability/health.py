"""Health checks for the request store, remote file store, and Celery broker."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.requests.errors import UpstreamError
from ..domain.storage.ports.remote_file_store_port import RemoteFileStorePort
from ..utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def check_database_health(db: Session) -> ComponentHealth:
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Database unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
        latency_ms=_elapsed_ms(start),
    )


def check_redis_health(redis_url: str, timeout_seconds: float = 2.0) -> ComponentHealth:
    start = time.perf_counter()
    try:
        client = redis.from_url(redis_url, socket_connect_timeout=timeout_seconds, socket_timeout=timeout_seconds)
        try:
            client.ping()
        finally:
            client.close()
    except redis.RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Redis unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Redis connection OK",
        latency_ms=_elapsed_ms(start),
    )


async def check_object_storage_health(
    file_store: RemoteFileStorePort,
    timeout_seconds: float,
) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await call_with_timeout(file_store.check_health(), timeout_seconds, "Object storage health check")
    except UpstreamError as e:
        logger.error(f"Object storage health check failed: {e.message}")
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Object storage unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Object storage connection OK",
        latency_ms=_elapsed_ms(start),
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Healthy only if every component is; unhealthy if any component is."""
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
