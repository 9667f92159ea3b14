"""Observability API endpoints: metrics, health, and readiness."""

import asyncio

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..bootstrap import AppContainer
from ..database import get_db
from ..dependencies import get_container
from .health import (
    HealthStatus,
    check_database_health,
    check_object_storage_health,
    check_redis_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Health check endpoint")
async def health_check(
    db: Session = Depends(get_db),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Check the database, object storage, and Redis broker.

    Returns 200 when nothing is unhealthy, 503 otherwise.
    """
    timeout = min(HEALTH_CHECK_TIMEOUT_SECONDS, container.settings.EXTERNAL_CALL_TIMEOUT_SECONDS)
    components = {
        "database": check_database_health(db),
        "object_storage": await check_object_storage_health(container.file_store, timeout),
        "redis": await asyncio.to_thread(check_redis_health, container.settings.REDIS_URL, timeout),
    }
    overall_status = get_overall_health(components)

    return JSONResponse(
        status_code=200 if overall_status != HealthStatus.UNHEALTHY else 503,
        content={
            "status": overall_status.value,
            "components": {
                name: {
                    "status": comp.status.value,
                    "message": comp.message,
                    "latency_ms": comp.latency_ms,
                }
                for name, comp in components.items()
            },
        },
    )


@router.get("/ready", summary="Readiness check endpoint")
def readiness_check(db: Session = Depends(get_db)):
    """Ready when the request store answers."""
    db_health = check_database_health(db)
    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready", "message": "Application is ready to serve traffic"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "message": db_health.message},
    )
