"""Shopify webhook endpoint

The body is read as raw bytes: the signature covers the exact bytes Shopify
sent, so no JSON parsing may happen before verification.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..dependencies import get_webhook_service
from ..observability.metrics import record_request_created, record_webhook_outcome
from .schemas import WebhookResponse
from .service import WebhookOutcome, WebhookService
from .signature import SIGNATURE_HEADER

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])


@router.post("/shopify-webhook", response_model=WebhookResponse)
async def shopify_webhook(
    request: Request,
    service: WebhookService = Depends(get_webhook_service),
) -> JSONResponse:
    """Ingest a Shopify order event.

    Returns 200 for accepted and duplicate deliveries, 401 for a bad
    signature, 400 for a malformed payload or a missing buyer email.
    """
    raw_body = await request.body()
    result = await service.ingest_order_event(raw_body, request.headers.get(SIGNATURE_HEADER))

    record_webhook_outcome(result.outcome.value)
    if result.outcome == WebhookOutcome.ACCEPTED:
        record_request_created("shopify")

    body = WebhookResponse(
        outcome=result.outcome.value,
        request_id=result.request_id,
        reason=result.reason.value if result.reason else None,
    )
    return JSONResponse(
        status_code=result.http_status,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
