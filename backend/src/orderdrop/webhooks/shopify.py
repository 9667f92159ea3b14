"""Shopify order payload mapping

Extracts the fields the upload lifecycle needs from an orders/create webhook:
order id, buyer email, buyer name, and the order timestamp.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..domain.requests.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopifyOrder:
    order_reference: str
    buyer_email: Optional[str]
    buyer_name: Optional[str]
    occurred_at: Optional[datetime]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _address_name(payload: Dict[str, Any], key: str) -> Optional[str]:
    address = payload.get(key)
    if not isinstance(address, dict):
        return None
    name = _clean(address.get("name"))
    if name:
        return name
    parts = [_clean(address.get("first_name")), _clean(address.get("last_name"))]
    return " ".join(p for p in parts if p) or None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    text = _clean(value)
    if not text:
        return None
    try:
        # Shopify sends ISO 8601 with offset, older payloads may end in Z
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable order timestamp: {text}")
        return None


def resolve_buyer_name(payload: Dict[str, Any], buyer_email: Optional[str]) -> Optional[str]:
    """Best available display name for the buyer.

    Order: customer first/last name, billing address, shipping address,
    then the local part of the email address.
    """
    customer = payload.get("customer")
    if isinstance(customer, dict):
        parts = [_clean(customer.get("first_name")), _clean(customer.get("last_name"))]
        name = " ".join(p for p in parts if p)
        if name:
            return name

    for key in ("billing_address", "shipping_address"):
        name = _address_name(payload, key)
        if name:
            return name

    if buyer_email and "@" in buyer_email:
        return buyer_email.split("@", 1)[0]
    return None


def parse_order_payload(raw_body: bytes) -> ShopifyOrder:
    """Parse a verified webhook body.

    Raises:
        ValidationError: If the body is not a JSON object or has no order id
    """
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError("Webhook body is not valid JSON") from e

    if not isinstance(payload, dict):
        raise ValidationError("Webhook body must be a JSON object")

    order_reference = _clean(payload.get("id"))
    if not order_reference:
        raise ValidationError("Webhook payload has no order id")

    customer = payload.get("customer") if isinstance(payload.get("customer"), dict) else {}
    buyer_email = (
        _clean(payload.get("email"))
        or _clean(payload.get("contact_email"))
        or _clean(customer.get("email"))
    )

    return ShopifyOrder(
        order_reference=order_reference,
        buyer_email=buyer_email,
        buyer_name=resolve_buyer_name(payload, buyer_email),
        occurred_at=_parse_timestamp(payload.get("created_at")),
    )
