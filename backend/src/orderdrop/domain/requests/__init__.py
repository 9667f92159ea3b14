"""Requests domain module - upload request lifecycle, errors, folder naming"""

from .errors import (
    OrderDropError,
    ValidationError,
    UnauthorizedError,
    RequestNotFoundError,
    InvalidStateError,
    DuplicateOrderError,
    StorageError,
    UpstreamError,
    RemoteFileStoreError,
    NotificationError,
)
from .folder_naming import folder_name_for
from .request_status import (
    RequestStatus,
    RequestEvent,
    EVENT_TRANSITIONS,
    can_apply,
    next_status,
    get_allowed_events,
)

__all__ = [
    "OrderDropError",
    "ValidationError",
    "UnauthorizedError",
    "RequestNotFoundError",
    "InvalidStateError",
    "DuplicateOrderError",
    "StorageError",
    "UpstreamError",
    "RemoteFileStoreError",
    "NotificationError",
    "folder_name_for",
    "RequestStatus",
    "RequestEvent",
    "EVENT_TRANSITIONS",
    "can_apply",
    "next_status",
    "get_allowed_events",
]
