"""Order intake service

Validates and normalizes incoming order data, persists a new Pending request
record, and returns the buyer's upload link. The direct API path makes no
remote file store or notifier calls; the webhook service notifies the buyer
itself after intake succeeds.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..domain.requests.errors import ValidationError
from ..domain.requests.ports.request_store_port import (
    NewUploadRequest,
    RequestSource,
    RequestStorePort,
    UploadRequestRecord,
)
from ..utils.timestamps import utc_now

logger = logging.getLogger(__name__)

# Deliberately loose: one @, no whitespace, a dot in the domain
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def build_upload_link(base_url: str, request_id: str) -> str:
    """Upload link for a request.

    Example:
        >>> build_upload_link("https://shop.example/", "abc")
        'https://shop.example/upload-form/abc'
    """
    return f"{base_url.rstrip('/')}/upload-form/{request_id}"


@dataclass(frozen=True)
class CreatedRequest:
    record: UploadRequestRecord
    upload_link: str


def _required(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"Missing required field: {field_name}")
    return str(value).strip()


class IntakeService:
    """Creates upload requests.

    Args:
        store: Request store
        base_url: Public base URL for upload links
        clock: Source of the current UTC time (replaced in tests)
    """

    def __init__(
        self,
        store: RequestStorePort,
        base_url: str,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.base_url = base_url
        self.clock = clock

    def create_request(
        self,
        buyer_name: Optional[str],
        buyer_email: Optional[str],
        order_reference: Optional[str],
        occurred_at: Optional[datetime] = None,
        source: RequestSource = RequestSource.API,
    ) -> CreatedRequest:
        """Persist a new Pending request and return it with its upload link.

        Raises:
            ValidationError: If a required field is empty or the email is malformed
            DuplicateOrderError: If the order reference already has a request
            StorageError: If the request store is unavailable
        """
        name = _required(buyer_name, "name")
        email = _required(buyer_email, "email")
        reference = _required(order_reference, "receiptId")

        if not EMAIL_PATTERN.match(email):
            raise ValidationError(f"Invalid email address: {email}")

        record = self.store.create(
            NewUploadRequest(
                buyer_name=name,
                buyer_email=email,
                order_reference=reference,
                source=source,
                created_at=occurred_at or self.clock(),
            )
        )
        upload_link = build_upload_link(self.base_url, record.id)

        logger.info(
            f"Upload request created from {source.value}",
            extra={"upload_request_id": record.id, "order_reference": reference},
        )
        return CreatedRequest(record=record, upload_link=upload_link)
