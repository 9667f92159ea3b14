"""Shopify webhook signature verification.

Shopify signs the exact raw request body with HMAC-SHA256 using the app's
shared secret and sends the base64 digest in X-Shopify-Hmac-Sha256.
"""

import base64
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"


def compute_signature(secret: str, raw_body: bytes) -> str:
    """Base64 HMAC-SHA256 of the raw body."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(secret: Optional[str], raw_body: bytes, signature: Optional[str]) -> bool:
    """Constant-time check of a signature header against the raw body.

    An unset secret or a missing header never verifies.
    """
    if not secret or not signature:
        return False
    expected = compute_signature(secret, raw_body)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("ascii", "replace"))
