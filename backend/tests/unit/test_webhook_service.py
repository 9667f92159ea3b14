"""Unit tests for webhook ingestion (verify, dedupe, accept)"""

import json
import threading

import pytest

from orderdrop.domain.notifications.ports import NotificationTemplate
from orderdrop.domain.requests import DuplicateOrderError, RequestStatus
from orderdrop.domain.requests.ports import RequestSource
from orderdrop.intake import IntakeService
from orderdrop.webhooks import WebhookOutcome, WebhookRejection, WebhookService
from orderdrop.webhooks.signature import compute_signature

SECRET = "whsec"


def _payload(order_id=1001, email="jane@x.com", **extra) -> bytes:
    body = {"id": order_id, "customer": {"first_name": "Jane", "last_name": "Doe"}}
    if email is not None:
        body["email"] = email
    body.update(extra)
    return json.dumps(body).encode()


@pytest.fixture
def service(store, notifier, clock):
    intake = IntakeService(store, "https://uploads.shop.example", clock=clock)
    return WebhookService(store, intake, notifier, webhook_secret=SECRET, timeout_seconds=1.0)


class TestWebhookService:
    """Test ingestOrderEvent outcomes and side effects"""

    @pytest.mark.asyncio
    async def test_accepts_signed_order(self, service, store, notifier):
        """Test a valid event creates a Pending record and emails the buyer"""
        body = _payload()
        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.outcome == WebhookOutcome.ACCEPTED
        assert result.http_status == 200
        assert result.notified is True

        record = store.get_by_order_reference("1001")
        assert record.id == result.request_id
        assert record.status == RequestStatus.PENDING
        assert record.source == RequestSource.SHOPIFY
        assert record.buyer_name == "Jane Doe"

        [email] = notifier.sent
        assert email.to_address == "jane@x.com"
        assert email.template == NotificationTemplate.UPLOAD_LINK
        assert email.data["upload_link"].endswith(f"/upload-form/{record.id}")

    @pytest.mark.asyncio
    async def test_bad_signature_rejected_before_anything(self, service, store, notifier):
        """Test a mismatched signature yields 401 and creates nothing"""
        body = _payload()
        result = await service.ingest_order_event(body, compute_signature("wrong", body))

        assert result.outcome == WebhookOutcome.REJECTED
        assert result.reason == WebhookRejection.INVALID_SIGNATURE
        assert result.http_status == 401
        assert store.get_by_order_reference("1001") is None
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_unsigned_garbage_not_parsed(self, service):
        """Test malformed bodies without a valid signature are rejected as unauthorized"""
        result = await service.ingest_order_event(b"{not json", None)
        assert result.reason == WebhookRejection.INVALID_SIGNATURE

    @pytest.mark.asyncio
    async def test_unset_secret_rejects_everything(self, store, notifier, clock):
        """Test the endpoint fails closed when no secret is configured"""
        intake = IntakeService(store, "https://u.example", clock=clock)
        service = WebhookService(store, intake, notifier, webhook_secret=None, timeout_seconds=1.0)
        body = _payload()

        result = await service.ingest_order_event(body, compute_signature("", body))

        assert result.http_status == 401

    @pytest.mark.asyncio
    async def test_duplicate_delivery(self, service, store, notifier):
        """Test a retried delivery reports duplicate and keeps exactly one record"""
        body = _payload()
        signature = compute_signature(SECRET, body)
        first = await service.ingest_order_event(body, signature)
        second = await service.ingest_order_event(body, signature)

        assert second.outcome == WebhookOutcome.DUPLICATE
        assert second.request_id == first.request_id
        assert second.http_status == 200
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_duplicate_checked_before_email(self, service):
        """Test a known order is a duplicate even if the retry lacks an email"""
        body = _payload()
        await service.ingest_order_event(body, compute_signature(SECRET, body))

        retry = _payload(email=None)
        result = await service.ingest_order_event(retry, compute_signature(SECRET, retry))

        assert result.outcome == WebhookOutcome.DUPLICATE

    @pytest.mark.asyncio
    async def test_missing_email_rejected(self, service, store):
        """Test an order without a buyer email is rejected with 400"""
        body = _payload(email=None)
        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.outcome == WebhookOutcome.REJECTED
        assert result.reason == WebhookRejection.MISSING_EMAIL
        assert result.http_status == 400
        assert store.get_by_order_reference("1001") is None

    @pytest.mark.asyncio
    async def test_malformed_payload_rejected(self, service):
        """Test a signed body without an order id is rejected with 400"""
        body = b'{"email": "jane@x.com"}'
        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.reason == WebhookRejection.MALFORMED_PAYLOAD
        assert result.http_status == 400

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_record(self, service, store, notifier):
        """Test an email outage does not undo the accepted order"""
        notifier.fail = True
        body = _payload()
        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.outcome == WebhookOutcome.ACCEPTED
        assert result.notified is False
        assert store.get_by_order_reference("1001").status == RequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_concurrent_create_reported_as_duplicate(self, service, store, monkeypatch):
        """Test losing the unique-constraint race yields duplicate, not an error"""
        body = _payload()
        existing = service.intake.create_request("Jane", "jane@x.com", "1001")
        lookups = iter([None, existing.record])
        monkeypatch.setattr(store, "get_by_order_reference", lambda ref: next(lookups))

        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.outcome == WebhookOutcome.DUPLICATE
        assert result.request_id == existing.record.id

    @pytest.mark.asyncio
    async def test_store_calls_run_off_the_event_loop(self, service, store, monkeypatch):
        """Test the duplicate lookup and record creation run in worker threads"""
        loop_thread = threading.get_ident()
        store_threads = []

        def recording(method):
            def wrapper(*args, **kwargs):
                store_threads.append(threading.get_ident())
                return method(*args, **kwargs)
            return wrapper

        monkeypatch.setattr(store, "get_by_order_reference", recording(store.get_by_order_reference))
        monkeypatch.setattr(store, "create", recording(store.create))

        body = _payload()
        result = await service.ingest_order_event(body, compute_signature(SECRET, body))

        assert result.outcome == WebhookOutcome.ACCEPTED
        assert len(store_threads) == 2
        assert loop_thread not in store_threads

    @pytest.mark.asyncio
    async def test_order_timestamp_used(self, service, store):
        """Test created_at from the payload becomes the record's createdAt"""
        body = _payload(created_at="2024-02-01T10:15:00Z")
        await service.ingest_order_event(body, compute_signature(SECRET, body))

        record = store.get_by_order_reference("1001")
        assert record.created_at.isoformat() == "2024-02-01T10:15:00+00:00"


def test_duplicate_error_is_conflict():
    """Test the direct-API duplicate maps to 409"""
    assert DuplicateOrderError("1").status_code == 409
