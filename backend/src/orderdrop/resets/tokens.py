"""Signed reset confirmation links

The seller's confirmation link carries an HMAC of the request id keyed with
SECRET_KEY, so knowing a request id alone is not enough to wipe its files.
"""

import base64
import hashlib
import hmac
from typing import Optional
from urllib.parse import urlencode


class ResetTokenSigner:
    """Signs and verifies reset confirmation tokens.

    Example:
        signer = ResetTokenSigner("secret")
        token = signer.sign(request_id)
        assert signer.verify(request_id, token)
    """

    PURPOSE = b"reset-confirm:"

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("SECRET_KEY is required to sign reset links")
        self._key = secret_key.encode("utf-8")

    def sign(self, request_id: str) -> str:
        digest = hmac.new(self._key, self.PURPOSE + request_id.encode("utf-8"), hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")

    def verify(self, request_id: str, token: Optional[str]) -> bool:
        if not token:
            return False
        return hmac.compare_digest(self.sign(request_id).encode("ascii"), token.encode("ascii", "replace"))


def build_reset_link(base_url: str, request_id: str, token: str) -> str:
    """Seller confirmation link.

    Example:
        >>> build_reset_link("https://shop.example", "abc", "t0k")
        'https://shop.example/reset-upload/abc?token=t0k'
    """
    return f"{base_url.rstrip('/')}/reset-upload/{request_id}?{urlencode({'token': token})}"
