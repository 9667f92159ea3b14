"""Small shared helpers: per-key locks, bounded external calls, display timestamps."""

from .locks import KeyedLock
from .timeouts import call_with_timeout
from .timestamps import format_local_timestamp, utc_now

__all__ = ["KeyedLock", "call_with_timeout", "format_local_timestamp", "utc_now"]
