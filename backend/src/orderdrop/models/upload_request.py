"""UploadRequest SQLAlchemy model

UploadRequest is the only persistent entity: one row per order, tracking the
buyer, the external order reference, and the upload lifecycle status.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Index, String, Text, UniqueConstraint

from ..domain.requests.ports.request_store_port import RequestSource
from ..domain.requests.request_status import RequestStatus
from .base import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def generate_request_id() -> str:
    """Generate a new request id (also the upload link token)."""
    return str(uuid4())


class UploadRequest(Base):
    """Upload request for one order.

    The id is the unguessable capability embedded in the upload link.
    order_reference is unique so retried webhook deliveries cannot create
    a second record for the same order.
    """
    __tablename__ = "upload_request"
    __table_args__ = (
        UniqueConstraint("order_reference", name="uq_upload_request_order_reference"),
        Index("ix_upload_request_status_last_updated", "status", "last_updated_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_request_id)
    buyer_name = Column(Text, nullable=False)
    buyer_email = Column(Text, nullable=False)
    order_reference = Column(Text, nullable=False)
    source = Column(
        SQLEnum(
            RequestSource,
            name="requestsource",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=RequestSource.API,
    )
    status = Column(
        SQLEnum(
            RequestStatus,
            name="requeststatus",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_updated_at = Column(DateTime(timezone=True), nullable=False)
