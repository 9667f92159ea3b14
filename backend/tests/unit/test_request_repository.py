"""Unit tests for the SQLAlchemy request store (in-memory SQLite)"""

from datetime import datetime, timedelta, timezone

import pytest

from orderdrop.domain.requests import (
    DuplicateOrderError,
    InvalidStateError,
    RequestEvent,
    RequestNotFoundError,
    RequestStatus,
)
from orderdrop.domain.requests.ports import NewUploadRequest, RequestSource

CREATED_AT = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


def _new(order_reference: str = "1001", created_at: datetime = CREATED_AT) -> NewUploadRequest:
    return NewUploadRequest(
        buyer_name="Jane Doe",
        buyer_email="jane@example.com",
        order_reference=order_reference,
        source=RequestSource.API,
        created_at=created_at,
    )


class TestRequestRepository:
    """Test create, lookup, and compare-and-set"""

    def test_create_returns_pending_record(self, store):
        """Test new records start Pending with a generated id"""
        record = store.create(_new())

        assert record.status == RequestStatus.PENDING
        assert len(record.id) == 36
        assert record.created_at == CREATED_AT
        assert record.last_updated_at == CREATED_AT

    def test_ids_are_unique(self, store):
        """Test two creates never share an id"""
        first = store.create(_new("1001"))
        second = store.create(_new("1002"))
        assert first.id != second.id

    def test_duplicate_order_reference_rejected(self, store):
        """Test the order reference unique constraint surfaces as DuplicateOrderError"""
        store.create(_new("1001"))
        with pytest.raises(DuplicateOrderError) as exc_info:
            store.create(_new("1001"))
        assert exc_info.value.order_reference == "1001"

    def test_lookup_by_id_and_reference(self, store):
        """Test both lookups return the same snapshot"""
        record = store.create(_new())
        assert store.get_by_id(record.id) == record
        assert store.get_by_order_reference("1001") == record
        assert store.get_by_id("missing") is None
        assert store.get_by_order_reference("missing") is None

    def test_compare_and_set_applies_when_expected_matches(self, store):
        """Test a matching expected status moves the record and stamps the time"""
        record = store.create(_new())
        at = CREATED_AT + timedelta(hours=1)

        updated = store.compare_and_set_status(record.id, RequestStatus.PENDING, RequestStatus.COMPLETED, at)

        assert updated.status == RequestStatus.COMPLETED
        assert updated.last_updated_at == at
        assert store.get_by_id(record.id).status == RequestStatus.COMPLETED

    def test_compare_and_set_fails_when_status_moved(self, store):
        """Test a stale expected status is refused and nothing changes"""
        record = store.create(_new())
        store.apply_event(record.id, RequestEvent.FILES_SUBMITTED, CREATED_AT)

        with pytest.raises(InvalidStateError) as exc_info:
            store.apply_event(record.id, RequestEvent.FILES_SUBMITTED, CREATED_AT)

        assert exc_info.value.current_status == "Completed"
        assert store.get_by_id(record.id).status == RequestStatus.COMPLETED

    def test_compare_and_set_unknown_id(self, store):
        """Test an unknown id raises RequestNotFoundError"""
        with pytest.raises(RequestNotFoundError):
            store.compare_and_set_status("missing", RequestStatus.PENDING, RequestStatus.COMPLETED, CREATED_AT)

    def test_list_stale_filters_by_status_and_age(self, store):
        """Test only old records in the requested status are listed"""
        old = store.create(_new("1"))
        recent = store.create(_new("2"))
        pending = store.create(_new("3"))
        for record, at in ((old, CREATED_AT), (recent, CREATED_AT + timedelta(days=10))):
            store.apply_event(record.id, RequestEvent.FILES_SUBMITTED, at)
            store.apply_event(record.id, RequestEvent.RESET_REQUESTED, at)

        stale = store.list_stale(RequestStatus.RESET_REQUESTED, CREATED_AT + timedelta(days=5))

        assert stale == [old.id]
        assert pending.id not in stale
