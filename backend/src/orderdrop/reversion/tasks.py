"""Celery tasks for the reversion sweep.

Tasks:
- reversion_sweep_task: daily job scheduled by REVERSION_SWEEP_SCHEDULE
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from celery import shared_task
from celery.signals import worker_process_shutdown
from sqlalchemy.engine import Engine

from ..config import get_settings
from ..database import create_db_engine, create_session_factory
from ..domain.requests.ports.request_store_port import RequestStorePort
from ..infrastructure.repositories.request_repository import RequestRepository
from ..observability.metrics import record_sweep_results
from .service import ReversionService

logger = logging.getLogger(__name__)


@lru_cache()
def get_worker_engine() -> Engine:
    return create_db_engine(get_settings().DATABASE_URL)


@lru_cache()
def get_worker_store() -> RequestStorePort:
    """Request store for this worker process, built on first use."""
    return RequestRepository(create_session_factory(get_worker_engine()))


@worker_process_shutdown.connect
def _dispose_worker_store(**kwargs) -> None:
    get_worker_store.cache_clear()
    if get_worker_engine.cache_info().currsize:
        get_worker_engine().dispose()
        get_worker_engine.cache_clear()


@shared_task(name="reversion.sweep", bind=True)
def reversion_sweep_task(self) -> Dict[str, Any]:
    """Expire stale reset requests back to Completed.

    Per-request failures are counted in the result, never raised. Running the
    task twice in a row finds nothing left to revert the second time.

    Returns:
        Dict with sweep statistics: status, cutoff, candidates, reverted,
        skipped, errors, duration_seconds
    """
    logger.info("Reversion sweep task started")
    try:
        service = ReversionService(get_worker_store(), get_settings().RESET_GRACE_PERIOD_DAYS)
        statistics = service.run_sweep()
    except Exception as e:
        logger.error("Reversion sweep task failed", exc_info=True, extra={"error": str(e)})
        # Return error status but don't raise (allow task to complete)
        return {
            "status": "failed",
            "error": str(e),
            "reverted": 0,
        }

    record_sweep_results(statistics.reverted, statistics.skipped, statistics.errors)
    result = statistics.to_task_result()
    logger.info("Reversion sweep task completed", extra={"outcome": "completed"})
    return result
