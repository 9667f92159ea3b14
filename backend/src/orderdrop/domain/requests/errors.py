"""Error taxonomy for the upload request lifecycle.

Every error carries the HTTP status and machine code the API layer reports.
The single exception handler in main.py does the mapping; services only raise.
"""

from typing import Optional


class OrderDropError(Exception):
    """Base class for all lifecycle errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderDropError):
    """Missing or malformed input."""

    status_code = 400
    error_code = "validation_error"


class UnauthorizedError(OrderDropError):
    """Signature or link token did not verify."""

    status_code = 401
    error_code = "unauthorized"


class RequestNotFoundError(OrderDropError):
    """Unknown request id, order reference, or remote folder."""

    status_code = 404
    error_code = "not_found"


class InvalidStateError(OrderDropError):
    """Transition not permitted from the record's current status."""

    status_code = 409
    error_code = "invalid_state"

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status


class DuplicateOrderError(OrderDropError):
    """A request already exists for this order reference."""

    status_code = 409
    error_code = "duplicate_order"

    def __init__(self, order_reference: str):
        super().__init__(f"A request already exists for order {order_reference}")
        self.order_reference = order_reference


class StorageError(OrderDropError):
    """Request store failure."""

    status_code = 500
    error_code = "storage_error"


class UpstreamError(OrderDropError):
    """Remote file store or notifier failure."""

    status_code = 502
    error_code = "upstream_error"

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class RemoteFileStoreError(UpstreamError):
    """Remote file store operation failed."""


class NotificationError(UpstreamError):
    """Email delivery failed."""
