"""Upload handler

Delivers a buyer's files into the order's remote folder and completes the
request. Policy is best-effort: every file is attempted and failures are
reported per file. The request becomes Completed when at least one file was
stored; when none were, the call fails and the request stays Pending so the
buyer can retry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Sequence
from zoneinfo import ZoneInfo

from ..domain.notifications.ports.notifier_port import NotificationTemplate, NotifierPort
from ..domain.requests.errors import (
    RequestNotFoundError,
    UpstreamError,
    ValidationError,
)
from ..domain.requests.folder_naming import folder_name_for
from ..domain.requests.ports.request_store_port import RequestStorePort, UploadRequestRecord
from ..domain.requests.request_status import RequestEvent, next_status
from ..domain.storage.ports.remote_file_store_port import InboundFile, RemoteFileStorePort
from ..utils.locks import KeyedLock
from ..utils.timeouts import call_with_timeout
from ..utils.timestamps import format_local_timestamp, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    file_name: str
    file_id: str


@dataclass(frozen=True)
class FailedFile:
    file_name: str
    error: str


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one submit_files call.

    Attributes:
        record: Request after the Completed transition
        folder_name: Remote folder the files went to
        completed_at: Completion time in the seller's time zone
        uploaded: Files stored remotely, in input order
        failed: Files that could not be stored, with the reason
    """
    record: UploadRequestRecord
    folder_name: str
    completed_at: str
    uploaded: List[UploadedFile] = field(default_factory=list)
    failed: List[FailedFile] = field(default_factory=list)


class UploadService:
    """Handles buyer uploads for Pending requests."""

    def __init__(
        self,
        store: RequestStorePort,
        file_store: RemoteFileStorePort,
        notifier: NotifierPort,
        locks: KeyedLock,
        seller_email: str,
        seller_zone: ZoneInfo,
        timeout_seconds: float,
        notify_seller: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.file_store = file_store
        self.notifier = notifier
        self.locks = locks
        self.seller_email = seller_email
        self.seller_zone = seller_zone
        self.timeout_seconds = timeout_seconds
        self.notify_seller = notify_seller
        self.clock = clock

    def get_request(self, request_id: str) -> UploadRequestRecord:
        """Look up a request for the upload form.

        Raises:
            RequestNotFoundError: If the id is unknown
        """
        record = self.store.get_by_id(request_id)
        if record is None:
            raise RequestNotFoundError(f"Upload request {request_id} not found")
        return record

    async def submit_files(self, request_id: str, files: Sequence[InboundFile]) -> UploadResult:
        """Upload files for a Pending request and mark it Completed.

        Args:
            request_id: Upload request id from the link
            files: Validated, spooled files

        Returns:
            UploadResult with per-file outcomes

        Raises:
            RequestNotFoundError: Unknown request id
            InvalidStateError: Request is not Pending (no remote writes happen)
            ValidationError: No files were submitted
            UpstreamError: Folder resolution failed, or no file could be stored
        """
        async with self.locks.hold(request_id):
            record = await asyncio.to_thread(self.get_request, request_id)
            next_status(record.status, RequestEvent.FILES_SUBMITTED)
            if not files:
                raise ValidationError("No files were uploaded")

            folder_name = folder_name_for(record.order_reference, record.buyer_name)
            folder_id = await call_with_timeout(
                self.file_store.find_or_create_folder(folder_name),
                self.timeout_seconds,
                "Folder resolution",
            )
            await call_with_timeout(
                self.file_store.share_folder(folder_id, self.seller_email),
                self.timeout_seconds,
                "Folder share",
            )

            uploaded: List[UploadedFile] = []
            failed: List[FailedFile] = []
            for inbound in files:
                try:
                    file_id = await call_with_timeout(
                        self.file_store.upload_file(folder_id, inbound),
                        self.timeout_seconds,
                        f"Upload of {inbound.original_name}",
                    )
                except UpstreamError as e:
                    logger.error(
                        f"File upload failed: {inbound.original_name}: {e.message}",
                        extra={"upload_request_id": request_id},
                    )
                    failed.append(FailedFile(file_name=inbound.original_name, error=e.message))
                    continue
                uploaded.append(UploadedFile(file_name=inbound.original_name, file_id=file_id))

            if not uploaded:
                raise UpstreamError(
                    f"None of the {len(files)} file(s) could be stored; please try again",
                    retryable=True,
                )

            completed = self.clock()
            record = await asyncio.to_thread(
                self.store.apply_event, request_id, RequestEvent.FILES_SUBMITTED, completed
            )

        completed_at = format_local_timestamp(completed, self.seller_zone)
        logger.info(
            f"Upload completed: {len(uploaded)} stored, {len(failed)} failed",
            extra={"upload_request_id": request_id, "order_reference": record.order_reference},
        )

        if self.notify_seller:
            await self._notify_seller(record, folder_name, completed_at, len(uploaded))

        return UploadResult(
            record=record,
            folder_name=folder_name,
            completed_at=completed_at,
            uploaded=uploaded,
            failed=failed,
        )

    async def _notify_seller(
        self,
        record: UploadRequestRecord,
        folder_name: str,
        completed_at: str,
        file_count: int,
    ) -> None:
        try:
            await call_with_timeout(
                self.notifier.send(
                    self.seller_email,
                    NotificationTemplate.UPLOAD_COMPLETED,
                    {
                        "buyer_name": record.buyer_name,
                        "order_reference": record.order_reference,
                        "folder_name": folder_name,
                        "completed_at": completed_at,
                        "file_count": file_count,
                    },
                ),
                self.timeout_seconds,
                "Upload completed email",
            )
        except UpstreamError as e:
            logger.error(
                f"Failed to notify seller of upload: {e.message}",
                extra={"upload_request_id": record.id},
            )
