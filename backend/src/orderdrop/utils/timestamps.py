"""Timestamp helpers.

Everything is stored in UTC. The seller's time zone only affects how a
completion time is displayed.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_local_timestamp(moment: datetime, zone: ZoneInfo) -> str:
    """Format a UTC moment in the given zone.

    Example:
        >>> format_local_timestamp(datetime(2024, 1, 5, 17, 30, tzinfo=timezone.utc),
        ...                        ZoneInfo("America/New_York"))
        '2024-01-05 12:30:00 EST'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone).strftime(DISPLAY_FORMAT)
