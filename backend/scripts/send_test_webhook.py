#!/usr/bin/env python3
"""Send a signed Shopify-style order webhook to a running OrderDrop API.

Signs the payload exactly like Shopify does (base64 HMAC-SHA256 of the raw
body) so the webhook endpoint can be exercised end to end.

Usage:
    python scripts/send_test_webhook.py --secret $SHOPIFY_WEBHOOK_SECRET
    python scripts/send_test_webhook.py --secret s3cret --order-id 1001 \
        --email jane@example.com --first-name Jane --last-name Doe
    python scripts/send_test_webhook.py --secret wrong   # expect 401
"""

import argparse
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from orderdrop.webhooks.signature import SIGNATURE_HEADER, compute_signature  # noqa: E402


def build_payload(order_id: str, email: str, first_name: str, last_name: str) -> dict:
    return {
        "id": int(order_id) if order_id.isdigit() else order_id,
        "name": f"#{order_id}",
        "email": email,
        "created_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "customer": {"first_name": first_name, "last_name": last_name, "email": email},
        "billing_address": {"name": f"{first_name} {last_name}"},
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a signed test order webhook")
    parser.add_argument("--url", default="http://localhost:8000/shopify-webhook", help="Webhook URL")
    parser.add_argument("--secret", default=os.getenv("SHOPIFY_WEBHOOK_SECRET"), help="Shared secret")
    parser.add_argument("--order-id", default=datetime.now().strftime("%Y%m%d%H%M%S"), help="Order id")
    parser.add_argument("--email", default="buyer@example.com", help="Buyer email")
    parser.add_argument("--first-name", default="Test", help="Buyer first name")
    parser.add_argument("--last-name", default="Buyer", help="Buyer last name")
    parser.add_argument("--no-signature", action="store_true", help="Omit the signature header")
    args = parser.parse_args()

    if not args.secret and not args.no_signature:
        parser.error("--secret (or SHOPIFY_WEBHOOK_SECRET) is required unless --no-signature is set")

    body = json.dumps(build_payload(args.order_id, args.email, args.first_name, args.last_name)).encode("utf-8")
    headers = {"Content-Type": "application/json", "X-Shopify-Topic": "orders/create"}
    if not args.no_signature:
        headers[SIGNATURE_HEADER] = compute_signature(args.secret, body)

    response = httpx.post(args.url, content=body, headers=headers, timeout=30.0)
    print(f"{response.status_code} {response.text}")
    return 0 if response.status_code < 400 else 1


if __name__ == "__main__":
    sys.exit(main())
