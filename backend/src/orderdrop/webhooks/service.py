"""Webhook verifier service

Authenticates inbound order events and hands them to order intake exactly
once per order reference. Processing order per event:

1. Verify the HMAC over the raw body. Nothing is parsed before this passes.
2. Parse the order fields.
3. Suppress duplicates by order reference.
4. Require a buyer email.
5. Create the request, then email the buyer the upload link (best-effort).
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain.notifications.ports.notifier_port import NotificationTemplate, NotifierPort
from ..domain.requests.errors import DuplicateOrderError, UpstreamError, ValidationError
from ..domain.requests.ports.request_store_port import RequestSource, RequestStorePort
from ..intake.service import EMAIL_PATTERN, IntakeService
from ..utils.timeouts import call_with_timeout
from .shopify import parse_order_payload
from .signature import verify_signature

logger = logging.getLogger(__name__)


class WebhookOutcome(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class WebhookRejection(str, Enum):
    INVALID_SIGNATURE = "invalid signature"
    MALFORMED_PAYLOAD = "malformed payload"
    MISSING_EMAIL = "missing email"


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of one webhook delivery.

    Attributes:
        outcome: accepted, duplicate, or rejected
        request_id: Created or pre-existing request id
        reason: Set only for rejected deliveries
        notified: Whether the buyer email went out (accepted only)
    """
    outcome: WebhookOutcome
    request_id: Optional[str] = None
    reason: Optional[WebhookRejection] = None
    notified: bool = False

    @property
    def http_status(self) -> int:
        if self.outcome != WebhookOutcome.REJECTED:
            return 200
        if self.reason == WebhookRejection.INVALID_SIGNATURE:
            return 401
        return 400


class WebhookService:
    """Ingests commerce-platform order events.

    Args:
        store: Request store (duplicate lookup)
        intake: Order intake service
        notifier: Buyer email
        webhook_secret: Shared HMAC secret; when unset every event is rejected
        timeout_seconds: Bound on the notifier call
    """

    def __init__(
        self,
        store: RequestStorePort,
        intake: IntakeService,
        notifier: NotifierPort,
        webhook_secret: Optional[str],
        timeout_seconds: float,
    ):
        self.store = store
        self.intake = intake
        self.notifier = notifier
        self.webhook_secret = webhook_secret
        self.timeout_seconds = timeout_seconds

    async def ingest_order_event(self, raw_body: bytes, signature: Optional[str]) -> WebhookResult:
        """Verify, deduplicate, and accept one order event.

        Validation problems become a rejected result rather than an exception.

        Raises:
            StorageError: If the request store is unavailable
        """
        if not self.webhook_secret:
            logger.error("SHOPIFY_WEBHOOK_SECRET is not configured; rejecting webhook")
            return WebhookResult(WebhookOutcome.REJECTED, reason=WebhookRejection.INVALID_SIGNATURE)

        if not verify_signature(self.webhook_secret, raw_body, signature):
            logger.warning(
                "Webhook signature verification failed",
                extra={"outcome": WebhookOutcome.REJECTED.value},
            )
            return WebhookResult(WebhookOutcome.REJECTED, reason=WebhookRejection.INVALID_SIGNATURE)

        try:
            order = parse_order_payload(raw_body)
        except ValidationError as e:
            logger.warning(f"Rejected webhook payload: {e.message}")
            return WebhookResult(WebhookOutcome.REJECTED, reason=WebhookRejection.MALFORMED_PAYLOAD)

        existing = await asyncio.to_thread(self.store.get_by_order_reference, order.order_reference)
        if existing is not None:
            logger.info(
                "Duplicate webhook delivery ignored",
                extra={
                    "order_reference": order.order_reference,
                    "upload_request_id": existing.id,
                    "outcome": WebhookOutcome.DUPLICATE.value,
                },
            )
            return WebhookResult(WebhookOutcome.DUPLICATE, request_id=existing.id)

        if not order.buyer_email or not EMAIL_PATTERN.match(order.buyer_email):
            logger.warning(
                "Webhook order has no buyer email",
                extra={"order_reference": order.order_reference},
            )
            return WebhookResult(WebhookOutcome.REJECTED, reason=WebhookRejection.MISSING_EMAIL)

        try:
            created = await asyncio.to_thread(
                self.intake.create_request,
                buyer_name=order.buyer_name,
                buyer_email=order.buyer_email,
                order_reference=order.order_reference,
                occurred_at=order.occurred_at,
                source=RequestSource.SHOPIFY,
            )
        except DuplicateOrderError:
            # Concurrent delivery won the unique constraint
            existing = await asyncio.to_thread(self.store.get_by_order_reference, order.order_reference)
            return WebhookResult(
                WebhookOutcome.DUPLICATE,
                request_id=existing.id if existing else None,
            )
        except ValidationError as e:
            logger.warning(
                f"Webhook order failed validation: {e.message}",
                extra={"order_reference": order.order_reference},
            )
            return WebhookResult(WebhookOutcome.REJECTED, reason=WebhookRejection.MALFORMED_PAYLOAD)

        record = created.record
        notified = await self._notify_buyer(record.buyer_email, {
            "buyer_name": record.buyer_name,
            "order_reference": record.order_reference,
            "upload_link": created.upload_link,
        }, record.id)

        logger.info(
            "Webhook order accepted",
            extra={
                "order_reference": record.order_reference,
                "upload_request_id": record.id,
                "outcome": WebhookOutcome.ACCEPTED.value,
            },
        )
        return WebhookResult(WebhookOutcome.ACCEPTED, request_id=record.id, notified=notified)

    async def _notify_buyer(self, to_address: str, data: dict, request_id: str) -> bool:
        try:
            await call_with_timeout(
                self.notifier.send(to_address, NotificationTemplate.UPLOAD_LINK, data),
                self.timeout_seconds,
                "Upload link email",
            )
            return True
        except UpstreamError as e:
            # Record stays Pending; the link can be resent out of band
            logger.error(
                f"Failed to email upload link: {e.message}",
                extra={"upload_request_id": request_id},
            )
            return False
