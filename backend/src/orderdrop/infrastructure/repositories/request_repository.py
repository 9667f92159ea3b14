"""SQLAlchemy implementation of the request store port.

Each operation runs in its own short session. Status changes are a single
conditional UPDATE (compare-and-set on status), so two concurrent callers can
never both move a record out of the same state.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, List, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ...database import session_scope
from ...domain.requests.errors import (
    DuplicateOrderError,
    InvalidStateError,
    RequestNotFoundError,
    StorageError,
)
from ...domain.requests.ports.request_store_port import (
    NewUploadRequest,
    RequestStorePort,
    UploadRequestRecord,
)
from ...domain.requests.request_status import RequestStatus
from ...models.upload_request import UploadRequest

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_record(row: UploadRequest) -> UploadRequestRecord:
    return UploadRequestRecord(
        id=row.id,
        buyer_name=row.buyer_name,
        buyer_email=row.buyer_email,
        order_reference=row.order_reference,
        source=row.source,
        status=row.status,
        created_at=_as_utc(row.created_at),
        last_updated_at=_as_utc(row.last_updated_at),
    )


class RequestRepository(RequestStorePort):
    """Request store backed by the upload_request table.

    Usage:
        repository = RequestRepository(create_session_factory(engine))
        record = repository.create(new_request)
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        try:
            with session_scope(self.session_factory) as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Request store operation failed: {e}", exc_info=True)
            raise StorageError("Request store is unavailable") from e

    def create(self, new_request: NewUploadRequest) -> UploadRequestRecord:
        created_at = _as_utc(new_request.created_at)
        row = UploadRequest(
            buyer_name=new_request.buyer_name,
            buyer_email=new_request.buyer_email,
            order_reference=new_request.order_reference,
            source=new_request.source,
            status=RequestStatus.PENDING,
            created_at=created_at,
            last_updated_at=created_at,
        )
        try:
            with self._session() as session:
                session.add(row)
                session.flush()
                record = _to_record(row)
        except IntegrityError as e:
            logger.info(
                "Order reference already has a request",
                extra={"order_reference": new_request.order_reference},
            )
            raise DuplicateOrderError(new_request.order_reference) from e

        logger.info(
            f"Created upload request: id={record.id}, source={record.source.value}",
            extra={"upload_request_id": record.id, "order_reference": record.order_reference},
        )
        return record

    def get_by_id(self, request_id: str) -> Optional[UploadRequestRecord]:
        with self._session() as session:
            row = session.get(UploadRequest, request_id)
            return _to_record(row) if row is not None else None

    def get_by_order_reference(self, order_reference: str) -> Optional[UploadRequestRecord]:
        with self._session() as session:
            row = session.execute(
                select(UploadRequest).where(UploadRequest.order_reference == order_reference)
            ).scalar_one_or_none()
            return _to_record(row) if row is not None else None

    def compare_and_set_status(
        self,
        request_id: str,
        expected: RequestStatus,
        new_status: RequestStatus,
        at: datetime,
    ) -> UploadRequestRecord:
        with self._session() as session:
            result = session.execute(
                update(UploadRequest)
                .where(
                    and_(
                        UploadRequest.id == request_id,
                        UploadRequest.status == expected,
                    )
                )
                .values(status=new_status, last_updated_at=_as_utc(at))
                .execution_options(synchronize_session=False)
            )

            row = session.get(UploadRequest, request_id, populate_existing=True)
            if row is None:
                raise RequestNotFoundError(f"Upload request {request_id} not found")
            if result.rowcount == 0:
                raise InvalidStateError(
                    f"Upload request {request_id} is {row.status.value}, "
                    f"expected {expected.value}",
                    current_status=row.status.value,
                )
            record = _to_record(row)

        logger.info(
            f"Upload request status changed: {expected.value} -> {new_status.value}",
            extra={"upload_request_id": request_id},
        )
        return record

    def list_stale(self, status: RequestStatus, older_than: datetime) -> List[str]:
        with self._session() as session:
            rows = session.execute(
                select(UploadRequest.id)
                .where(
                    and_(
                        UploadRequest.status == status,
                        UploadRequest.last_updated_at < _as_utc(older_than),
                    )
                )
                .order_by(UploadRequest.last_updated_at)
            ).scalars().all()
            return list(rows)
