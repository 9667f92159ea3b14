"""Observability: structured logging, request correlation, metrics, health checks."""

from .health import ComponentHealth, HealthStatus
from .logging_config import configure_logging
from .middleware import RequestIDMiddleware
from .request_id import get_request_id, set_request_id

__all__ = [
    "ComponentHealth",
    "HealthStatus",
    "RequestIDMiddleware",
    "configure_logging",
    "get_request_id",
    "set_request_id",
]
