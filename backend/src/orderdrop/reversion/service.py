"""Reversion sweep

Expires unattended reset requests: every Completed-Reset-Requested request
whose last update is older than the grace period goes back to Completed
(the seller's silence counts as a refusal). Each request is updated
independently, so one failure never aborts the sweep.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable

from ..domain.requests.errors import InvalidStateError, OrderDropError, RequestNotFoundError
from ..domain.requests.ports.request_store_port import RequestStorePort
from ..domain.requests.request_status import RequestEvent, RequestStatus
from ..utils.timestamps import utc_now
from .schemas import ReversionStatistics

logger = logging.getLogger(__name__)


class ReversionService:
    """Runs the grace-period sweep over the request store.

    Args:
        store: Request store
        grace_period_days: Age after which an unconfirmed reset expires
        clock: Source of the current UTC time (replaced in tests)
    """

    def __init__(
        self,
        store: RequestStorePort,
        grace_period_days: int,
        clock: Callable[[], datetime] = utc_now,
    ):
        if grace_period_days < 1:
            raise ValueError("grace_period_days must be at least 1")
        self.store = store
        self.grace_period = timedelta(days=grace_period_days)
        self.clock = clock

    def calculate_cutoff(self, now: datetime) -> datetime:
        return now - self.grace_period

    def run_sweep(self) -> ReversionStatistics:
        """Revert every stale reset request to Completed.

        Returns:
            ReversionStatistics for the sweep

        Raises:
            StorageError: Only if the stale request query itself fails
        """
        started = self.clock()
        started_monotonic = time.monotonic()
        cutoff = self.calculate_cutoff(started)

        candidate_ids = self.store.list_stale(RequestStatus.RESET_REQUESTED, cutoff)
        logger.info(f"Reversion sweep started: {len(candidate_ids)} stale reset request(s)")

        reverted = skipped = errors = 0
        for request_id in candidate_ids:
            try:
                self.store.apply_event(request_id, RequestEvent.GRACE_PERIOD_ELAPSED, self.clock())
            except (InvalidStateError, RequestNotFoundError) as e:
                # Confirmed or reverted since the query ran
                skipped += 1
                logger.info(f"Skipped request: {e.message}", extra={"upload_request_id": request_id})
            except OrderDropError as e:
                errors += 1
                logger.error(
                    f"Failed to revert request: {e.message}",
                    extra={"upload_request_id": request_id},
                )
            else:
                reverted += 1
                logger.info("Reset request expired", extra={"upload_request_id": request_id})

        statistics = ReversionStatistics(
            job_started_at=started,
            job_completed_at=self.clock(),
            duration_seconds=round(time.monotonic() - started_monotonic, 3),
            cutoff=cutoff,
            candidates=len(candidate_ids),
            reverted=reverted,
            skipped=skipped,
            errors=errors,
        )
        logger.info(
            f"Reversion sweep finished: reverted={reverted}, skipped={skipped}, errors={errors}"
        )
        return statistics
