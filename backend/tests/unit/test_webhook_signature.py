"""Unit tests for webhook signature verification and payload mapping"""

import base64
import hashlib
import hmac
import json

import pytest

from orderdrop.domain.requests import ValidationError
from orderdrop.webhooks.shopify import parse_order_payload, resolve_buyer_name
from orderdrop.webhooks.signature import compute_signature, verify_signature

SECRET = "shpss_test"
BODY = b'{"id": 1001, "email": "jane@x.com"}'


class TestSignature:
    """Test HMAC computation and constant-time verification"""

    def test_matches_shopify_algorithm(self):
        """Test the signature is base64 HMAC-SHA256 of the raw body"""
        expected = base64.b64encode(hmac.new(SECRET.encode(), BODY, hashlib.sha256).digest()).decode()
        assert compute_signature(SECRET, BODY) == expected

    def test_valid_signature_verifies(self):
        """Test a correct signature is accepted"""
        assert verify_signature(SECRET, BODY, compute_signature(SECRET, BODY)) is True

    def test_tampered_body_fails(self):
        """Test any change to the raw bytes invalidates the signature"""
        signature = compute_signature(SECRET, BODY)
        assert verify_signature(SECRET, BODY + b" ", signature) is False

    def test_wrong_secret_fails(self):
        """Test a signature made with another secret is rejected"""
        assert verify_signature(SECRET, BODY, compute_signature("other", BODY)) is False

    @pytest.mark.parametrize("signature", [None, "", "not-base64-at-all", "ünïcode"])
    def test_missing_or_garbage_signature_fails(self, signature):
        """Test absent or malformed headers never verify"""
        assert verify_signature(SECRET, BODY, signature) is False

    def test_unset_secret_never_verifies(self):
        """Test verification fails closed without a configured secret"""
        assert verify_signature(None, BODY, compute_signature(SECRET, BODY)) is False


class TestShopifyPayload:
    """Test extraction of order fields from the webhook body"""

    def test_full_payload(self):
        """Test id, email, customer name, and created_at are extracted"""
        body = json.dumps({
            "id": 450789469,
            "email": "jane@x.com",
            "created_at": "2024-02-01T10:15:00-05:00",
            "customer": {"first_name": "Jane", "last_name": "Doe"},
        }).encode()

        order = parse_order_payload(body)

        assert order.order_reference == "450789469"
        assert order.buyer_email == "jane@x.com"
        assert order.buyer_name == "Jane Doe"
        assert order.occurred_at.isoformat() == "2024-02-01T10:15:00-05:00"

    def test_email_falls_back_to_customer(self):
        """Test the customer email is used when the order has none"""
        order = parse_order_payload(json.dumps({"id": 1, "customer": {"email": "c@x.com"}}).encode())
        assert order.buyer_email == "c@x.com"

    def test_missing_email(self):
        """Test an order without any email parses with buyer_email None"""
        order = parse_order_payload(b'{"id": 1}')
        assert order.buyer_email is None

    def test_bad_timestamp_ignored(self):
        """Test an unparseable created_at is dropped rather than failing"""
        order = parse_order_payload(b'{"id": 1, "created_at": "yesterday"}')
        assert order.occurred_at is None

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"email": "a@b.com"}', b"\xff\xfe"])
    def test_malformed_bodies_rejected(self, body):
        """Test non-object JSON, invalid UTF-8, or a missing id raise ValidationError"""
        with pytest.raises(ValidationError):
            parse_order_payload(body)

    def test_name_fallback_order(self):
        """Test buyer name falls back through billing, shipping, then email"""
        assert resolve_buyer_name({"billing_address": {"name": "Bill Payer"}}, "x@y.com") == "Bill Payer"
        assert resolve_buyer_name(
            {"shipping_address": {"first_name": "Ship", "last_name": "To"}}, "x@y.com"
        ) == "Ship To"
        assert resolve_buyer_name({}, "jane.doe@x.com") == "jane.doe"
        assert resolve_buyer_name({}, None) is None
