"""Reset workflow

A buyer who uploaded the wrong files asks to start over (request_reset); the
seller confirms through a signed link (confirm_reset), which empties the
order folder and reopens the request for upload. Unconfirmed requests are
expired by the reversion sweep.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List

from ..domain.notifications.ports.notifier_port import NotificationTemplate, NotifierPort
from ..domain.requests.errors import (
    RequestNotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from ..domain.requests.folder_naming import folder_name_for
from ..domain.requests.ports.request_store_port import RequestStorePort, UploadRequestRecord
from ..domain.requests.request_status import RequestEvent, RequestStatus, next_status
from ..domain.storage.ports.remote_file_store_port import RemoteFileStorePort
from ..intake.service import build_upload_link
from ..utils.locks import KeyedLock
from ..utils.timeouts import call_with_timeout
from ..utils.timestamps import utc_now
from .tokens import ResetTokenSigner, build_reset_link

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetConfirmation:
    """Outcome of confirm_reset.

    Attributes:
        record: Request after the Pending transition
        deleted: Remote file ids removed
        failed: Remote file ids that could not be removed (left orphaned)
    """
    record: UploadRequestRecord
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class ResetService:
    """Buyer reset requests and seller confirmations."""

    def __init__(
        self,
        store: RequestStorePort,
        file_store: RemoteFileStorePort,
        notifier: NotifierPort,
        locks: KeyedLock,
        signer: ResetTokenSigner,
        base_url: str,
        seller_email: str,
        grace_period_days: int,
        timeout_seconds: float,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.file_store = file_store
        self.notifier = notifier
        self.locks = locks
        self.signer = signer
        self.base_url = base_url
        self.seller_email = seller_email
        self.grace_period_days = grace_period_days
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    def _get(self, request_id: str) -> UploadRequestRecord:
        record = self.store.get_by_id(request_id)
        if record is None:
            raise RequestNotFoundError(f"Upload request {request_id} not found")
        return record

    async def request_reset(self, request_id: str) -> UploadRequestRecord:
        """Move a Completed request to Completed-Reset-Requested and notify the seller.

        Repeating the call while the reset is pending changes nothing but
        sends the seller notice again.

        Raises:
            RequestNotFoundError: Unknown request id
            InvalidStateError: Request is still Pending
        """
        async with self.locks.hold(request_id):
            record = await asyncio.to_thread(self._get, request_id)
            if record.status == RequestStatus.RESET_REQUESTED:
                logger.info(
                    "Reset already requested; re-sending seller notice",
                    extra={"upload_request_id": request_id},
                )
            else:
                next_status(record.status, RequestEvent.RESET_REQUESTED)
                record = await asyncio.to_thread(
                    self.store.apply_event, request_id, RequestEvent.RESET_REQUESTED, self.clock()
                )
                logger.info(
                    "Reset requested",
                    extra={"upload_request_id": request_id, "order_reference": record.order_reference},
                )

        confirm_link = build_reset_link(self.base_url, record.id, self.signer.sign(record.id))
        await self._notify(
            self.seller_email,
            NotificationTemplate.RESET_REQUESTED,
            {
                "buyer_name": record.buyer_name,
                "buyer_email": record.buyer_email,
                "order_reference": record.order_reference,
                "confirm_link": confirm_link,
                "grace_period_days": self.grace_period_days,
            },
            record.id,
        )
        return record

    async def confirm_reset(self, request_id: str, token: str) -> ResetConfirmation:
        """Purge the order folder and reopen the request for upload.

        File deletion is best-effort: a file that cannot be removed is
        reported and left behind, and the request still returns to Pending.

        Raises:
            UnauthorizedError: Token does not match the request id
            RequestNotFoundError: Unknown request id or missing remote folder
            InvalidStateError: No reset is pending for the request
            UpstreamError: The folder could not be located or listed
        """
        if not self.signer.verify(request_id, token):
            logger.warning("Reset confirmation with invalid token", extra={"upload_request_id": request_id})
            raise UnauthorizedError("Invalid or missing reset token")

        async with self.locks.hold(request_id):
            record = await asyncio.to_thread(self._get, request_id)
            next_status(record.status, RequestEvent.RESET_CONFIRMED)

            folder_name = folder_name_for(record.order_reference, record.buyer_name)
            folder_id = await call_with_timeout(
                self.file_store.find_folder(folder_name),
                self.timeout_seconds,
                "Folder lookup",
            )
            if folder_id is None:
                raise RequestNotFoundError(f"Remote folder {folder_name} not found")

            remote_files = await call_with_timeout(
                self.file_store.list_files(folder_id),
                self.timeout_seconds,
                "Folder listing",
            )

            deleted: List[str] = []
            failed: List[str] = []
            for remote_file in remote_files:
                try:
                    await call_with_timeout(
                        self.file_store.delete_file(remote_file.file_id),
                        self.timeout_seconds,
                        f"Delete of {remote_file.name}",
                    )
                except UpstreamError as e:
                    logger.error(
                        f"Could not delete remote file {remote_file.file_id}: {e.message}",
                        extra={"upload_request_id": request_id},
                    )
                    failed.append(remote_file.file_id)
                    continue
                deleted.append(remote_file.file_id)

            record = await asyncio.to_thread(
                self.store.apply_event, request_id, RequestEvent.RESET_CONFIRMED, self.clock()
            )

        logger.info(
            f"Reset confirmed: {len(deleted)} file(s) deleted, {len(failed)} left behind",
            extra={"upload_request_id": request_id, "order_reference": record.order_reference},
        )

        await self._notify(
            record.buyer_email,
            NotificationTemplate.RESET_CONFIRMED,
            {
                "buyer_name": record.buyer_name,
                "order_reference": record.order_reference,
                "upload_link": build_upload_link(self.base_url, record.id),
            },
            record.id,
        )
        return ResetConfirmation(record=record, deleted=deleted, failed=failed)

    async def _notify(
        self,
        to_address: str,
        template: NotificationTemplate,
        data: Dict[str, object],
        request_id: str,
    ) -> None:
        try:
            await call_with_timeout(
                self.notifier.send(to_address, template, data),
                self.timeout_seconds,
                f"{template.value} email",
            )
        except UpstreamError as e:
            logger.error(
                f"Failed to send {template.value} email: {e.message}",
                extra={"upload_request_id": request_id},
            )
