"""Integration tests for POST /shopify-webhook"""

import json

from fastapi.testclient import TestClient

from orderdrop.domain.notifications.ports import NotificationTemplate
from orderdrop.domain.requests import RequestStatus
from orderdrop.webhooks.signature import SIGNATURE_HEADER, compute_signature

from ..conftest import TEST_WEBHOOK_SECRET


def order_body(order_id=5551, email="buyer@x.com"):
    payload = {
        "id": order_id,
        "email": email,
        "created_at": "2024-03-01T10:00:00-05:00",
        "customer": {"first_name": "Sam", "last_name": "Buyer"},
    }
    return json.dumps(payload).encode()


def post_signed(client: TestClient, body: bytes, secret: str = TEST_WEBHOOK_SECRET):
    return client.post(
        "/shopify-webhook",
        content=body,
        headers={"Content-Type": "application/json", SIGNATURE_HEADER: compute_signature(secret, body)},
    )


class TestShopifyWebhook:

    def test_accepts_order(self, client: TestClient, store, notifier):
        response = post_signed(client, order_body())

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "accepted"
        assert "reason" not in data

        record = store.get_by_order_reference("5551")
        assert record.id == data["requestId"]
        assert record.status == RequestStatus.PENDING
        assert record.buyer_name == "Sam Buyer"

        [email] = notifier.sent_with(NotificationTemplate.UPLOAD_LINK)
        assert email.to_address == "buyer@x.com"
        assert email.data["upload_link"] == f"https://uploads.shop.example/upload-form/{record.id}"

    def test_redelivery_is_duplicate(self, client: TestClient, notifier):
        first = post_signed(client, order_body())
        second = post_signed(client, order_body())

        assert second.status_code == 200
        assert second.json() == {"outcome": "duplicate", "requestId": first.json()["requestId"]}
        assert len(notifier.sent) == 1

    def test_bad_signature(self, client: TestClient, store):
        response = post_signed(client, order_body(), secret="not-the-secret")

        assert response.status_code == 401
        assert response.json() == {"outcome": "rejected", "reason": "invalid signature"}
        assert store.get_by_order_reference("5551") is None

    def test_missing_signature(self, client: TestClient):
        response = client.post("/shopify-webhook", content=order_body())

        assert response.status_code == 401

    def test_missing_email(self, client: TestClient, store):
        response = post_signed(client, order_body(email=None))

        assert response.status_code == 400
        assert response.json()["reason"] == "missing email"
        assert store.get_by_order_reference("5551") is None

    def test_malformed_payload(self, client: TestClient):
        response = post_signed(client, b"{not json")

        assert response.status_code == 400
        assert response.json()["reason"] == "malformed payload"

    def test_api_order_then_webhook_is_duplicate(self, client: TestClient):
        """Test both intake paths share one request per order reference"""
        created = client.post(
            "/process-order", json={"name": "Sam Buyer", "email": "buyer@x.com", "receiptId": "5551"}
        )

        response = post_signed(client, order_body())

        assert response.json()["outcome"] == "duplicate"
        assert response.json()["requestId"] == created.json()["requestId"]
