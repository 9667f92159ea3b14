"""Request ID correlation.

The current HTTP request's id lives in a ContextVar so every log line written
while handling it, including from awaited services, carries the same id.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

REQUEST_ID_HEADER = "X-Request-ID"
NO_REQUEST_ID = "no-request-id"

# Client-supplied ids are echoed back and logged, so keep them boring
_ACCEPTABLE_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse a well-formed incoming X-Request-ID, otherwise mint a new one."""
    if header_value and _ACCEPTABLE_ID.match(header_value):
        return header_value
    return generate_request_id()


def get_request_id() -> str:
    return request_id_var.get() or NO_REQUEST_ID


def set_request_id(request_id: Optional[str]) -> None:
    request_id_var.set(request_id)
