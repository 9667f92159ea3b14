"""Request Store Port - Domain interface for upload request persistence.

Adapters must implement this interface to provide durable keyed request records.
Status changes go through compare_and_set_status only, which must be atomic:
the update applies only if the stored status still equals the expected one.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..request_status import EVENT_TRANSITIONS, RequestEvent, RequestStatus


class RequestSource(str, Enum):
    """Where an order entered the system"""
    API = "api"
    SHOPIFY = "shopify"


@dataclass(frozen=True)
class NewUploadRequest:
    """Validated input for a new request record."""
    buyer_name: str
    buyer_email: str
    order_reference: str
    source: RequestSource
    created_at: datetime


@dataclass(frozen=True)
class UploadRequestRecord:
    """Snapshot of a persisted request record.

    Attributes:
        id: Opaque unique identifier, also the upload link capability token
        buyer_name: Buyer display name
        buyer_email: Buyer email address
        order_reference: External order id (unique)
        source: Intake path that created the record
        status: Current lifecycle status
        created_at: Creation time (UTC)
        last_updated_at: Time of the last state transition (UTC)
    """
    id: str
    buyer_name: str
    buyer_email: str
    order_reference: str
    source: RequestSource
    status: RequestStatus
    created_at: datetime
    last_updated_at: datetime


class RequestStorePort(ABC):
    """Port interface for the request store."""

    @abstractmethod
    def create(self, new_request: NewUploadRequest) -> UploadRequestRecord:
        """Persist a new Pending record with a freshly generated id.

        Raises:
            DuplicateOrderError: If a record already exists for the order reference
            StorageError: If the store is unavailable
        """

    @abstractmethod
    def get_by_id(self, request_id: str) -> Optional[UploadRequestRecord]:
        """Return the record or None."""

    @abstractmethod
    def get_by_order_reference(self, order_reference: str) -> Optional[UploadRequestRecord]:
        """Return the record for an order reference or None."""

    @abstractmethod
    def compare_and_set_status(
        self,
        request_id: str,
        expected: RequestStatus,
        new_status: RequestStatus,
        at: datetime,
    ) -> UploadRequestRecord:
        """Atomically move a record from expected to new_status.

        Also stamps last_updated_at with `at`.

        Raises:
            RequestNotFoundError: If no record has this id
            InvalidStateError: If the stored status is not `expected`
            StorageError: If the store is unavailable
        """

    @abstractmethod
    def list_stale(self, status: RequestStatus, older_than: datetime) -> List[str]:
        """Ids of records in `status` whose last_updated_at is before `older_than`."""

    def apply_event(self, request_id: str, event: RequestEvent, at: datetime) -> UploadRequestRecord:
        """Apply a lifecycle event through the compare-and-set primitive."""
        source, target = EVENT_TRANSITIONS[event]
        return self.compare_and_set_status(request_id, source, target, at)
