"""Unit tests for order intake"""

from datetime import datetime, timezone

import pytest

from orderdrop.domain.requests import DuplicateOrderError, RequestStatus, ValidationError
from orderdrop.domain.requests.ports import RequestSource
from orderdrop.intake import IntakeService, build_upload_link


@pytest.fixture
def intake(store, clock):
    return IntakeService(store, "https://uploads.shop.example/", clock=clock)


class TestIntakeService:
    """Test createRequest validation and persistence"""

    def test_creates_pending_record_with_link(self, intake, store):
        """Test the example order becomes a Pending record with its upload link"""
        created = intake.create_request("Jane Doe", "jane@x.com", "1001")

        assert created.record.status == RequestStatus.PENDING
        assert created.upload_link == f"https://uploads.shop.example/upload-form/{created.record.id}"
        assert store.get_by_id(created.record.id) == created.record

    def test_defaults_to_current_time(self, intake, clock):
        """Test createdAt is the clock time when no timestamp is given"""
        created = intake.create_request("Jane Doe", "jane@x.com", "1001")
        assert created.record.created_at == clock.now

    def test_uses_occurred_at(self, intake):
        """Test a supplied order time is kept"""
        occurred = datetime(2023, 12, 24, 18, 0, tzinfo=timezone.utc)
        created = intake.create_request("Jane Doe", "jane@x.com", "1001", occurred_at=occurred)
        assert created.record.created_at == occurred

    def test_strips_whitespace(self, intake):
        """Test inputs are normalized before storing"""
        created = intake.create_request("  Jane Doe ", " jane@x.com ", " 1001 ")
        assert created.record.buyer_name == "Jane Doe"
        assert created.record.buyer_email == "jane@x.com"
        assert created.record.order_reference == "1001"

    @pytest.mark.parametrize(
        "name,email,reference",
        [
            (None, "jane@x.com", "1001"),
            ("Jane", "", "1001"),
            ("Jane", "jane@x.com", "   "),
        ],
    )
    def test_missing_fields_rejected(self, intake, store, name, email, reference):
        """Test empty or missing fields raise ValidationError and create nothing"""
        with pytest.raises(ValidationError):
            intake.create_request(name, email, reference)
        assert store.get_by_order_reference("1001") is None

    def test_malformed_email_rejected(self, intake):
        """Test an address without a domain is refused"""
        with pytest.raises(ValidationError):
            intake.create_request("Jane", "jane-at-example", "1001")

    def test_duplicate_reference(self, intake):
        """Test a second request for the same order is refused"""
        intake.create_request("Jane", "jane@x.com", "1001")
        with pytest.raises(DuplicateOrderError):
            intake.create_request("Jane", "jane@x.com", "1001")

    def test_records_source(self, intake):
        """Test the intake path is stored on the record"""
        created = intake.create_request("Jane", "jane@x.com", "1001", source=RequestSource.SHOPIFY)
        assert created.record.source == RequestSource.SHOPIFY


def test_build_upload_link_trims_trailing_slash():
    """Test link building tolerates a trailing slash on the base URL"""
    assert build_upload_link("https://a.example/", "abc") == "https://a.example/upload-form/abc"
