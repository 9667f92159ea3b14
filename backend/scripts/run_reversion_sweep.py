#!/usr/bin/env python3
"""Run one reversion sweep synchronously.

Reverts Completed-Reset-Requested requests older than the grace period to
Completed, without going through Celery. Useful for cron-only deployments
and for checking what the scheduled task would do.

Usage:
    python scripts/run_reversion_sweep.py
    python scripts/run_reversion_sweep.py --grace-days 7 --json
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from orderdrop.config import get_settings  # noqa: E402
from orderdrop.database import create_db_engine, create_session_factory  # noqa: E402
from orderdrop.infrastructure.repositories import RequestRepository  # noqa: E402
from orderdrop.observability.logging_config import configure_logging  # noqa: E402
from orderdrop.reversion.service import ReversionService  # noqa: E402


def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Expire stale reset requests")
    parser.add_argument(
        "--grace-days",
        type=int,
        default=settings.RESET_GRACE_PERIOD_DAYS,
        help=f"Grace period in days (default: {settings.RESET_GRACE_PERIOD_DAYS})",
    )
    parser.add_argument("--json", action="store_true", help="Print statistics as JSON")
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        service = ReversionService(RequestRepository(create_session_factory(engine)), args.grace_days)
        statistics = service.run_sweep()
    finally:
        engine.dispose()

    if args.json:
        print(json.dumps(statistics.to_task_result(), indent=2))
    else:
        print(
            f"Cutoff {statistics.cutoff.isoformat()}: {statistics.candidates} stale, "
            f"{statistics.reverted} reverted, {statistics.skipped} skipped, {statistics.errors} errors"
        )
    return 1 if statistics.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
