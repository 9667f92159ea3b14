"""Bounded calls to external collaborators."""

import asyncio
import logging
from typing import Awaitable, TypeVar

from ..domain.requests.errors import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_timeout(awaitable: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """Await an external call, failing after timeout_seconds.

    Args:
        awaitable: Remote file store or notifier coroutine
        timeout_seconds: Upper bound on the call
        operation: Short label used in logs and the error message

    Raises:
        UpstreamError: Retryable, if the call did not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.error(f"{operation} timed out after {timeout_seconds}s")
        raise UpstreamError(f"{operation} timed out", retryable=True) from e
