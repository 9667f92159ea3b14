"""Celery application for OrderDrop.

Runs the daily reversion sweep through Celery beat. Start with:

    celery -A orderdrop.workers.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from ..config import Settings, get_settings

REVERSION_SWEEP_TASK = "reversion.sweep"


def crontab_from_expression(expression: str) -> crontab:
    """Build a crontab from a five-field cron expression.

    Example:
        >>> crontab_from_expression("0 0 * * *")  # daily at midnight
        <crontab: 0 0 * * * (m/h/dM/MY/d)>

    Raises:
        ValueError: If the expression does not have exactly five fields
    """
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Cron expression must have 5 fields (got '{expression}')")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def create_celery_app(settings: Settings) -> Celery:
    app = Celery(
        "orderdrop",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["orderdrop.reversion.tasks"],
    )
    app.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        beat_schedule={
            "reversion-sweep-daily": {
                "task": REVERSION_SWEEP_TASK,
                "schedule": crontab_from_expression(settings.REVERSION_SWEEP_SCHEDULE),
                "options": {
                    "expires": 3600,  # Task expires after 1 hour if not picked up
                },
            },
        },
    )
    return app


celery_app = create_celery_app(get_settings())
