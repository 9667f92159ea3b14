"""Order intake API endpoint

POST /process-order creates an upload request from a direct API call.
"""

import logging

from fastapi import APIRouter, Depends, status

from ..dependencies import get_intake_service
from ..observability.metrics import record_request_created
from .schemas import ProcessOrderRequest, ProcessOrderResponse
from .service import IntakeService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


@router.post(
    "/process-order",
    response_model=ProcessOrderResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def process_order(
    body: ProcessOrderRequest,
    intake: IntakeService = Depends(get_intake_service),
) -> ProcessOrderResponse:
    """Create a Pending upload request and return its upload link.

    Returns 400 validation_error when name, email, or receiptId is missing,
    409 duplicate_order when the receipt id already has a request.
    """
    created = intake.create_request(
        buyer_name=body.name,
        buyer_email=body.email,
        order_reference=body.receipt_id,
        occurred_at=body.timestamp,
    )
    record_request_created(created.record.source.value)

    return ProcessOrderResponse(
        request_id=created.record.id,
        upload_link=created.upload_link,
    )
