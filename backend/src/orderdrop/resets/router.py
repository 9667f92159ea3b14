"""Reset workflow endpoints

POST /request-restart is called from the buyer's upload page.
GET /reset-upload/{id} is the seller's signed confirmation link.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from ..dependencies import get_reset_service
from ..domain.requests.errors import (
    InvalidStateError,
    OrderDropError,
    RequestNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..observability.metrics import record_reset_action
from ..uploads.pages import error_page, invalid_link_page, message_page
from .schemas import RequestRestartResponse
from .service import ResetService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Resets"])


async def _request_id_from(request: Request) -> str:
    request_id = request.query_params.get("id")
    if not request_id:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
            form = await request.form()
            request_id = form.get("id")
    if not request_id or not str(request_id).strip():
        raise ValidationError("Missing required field: id")
    return str(request_id).strip()


@router.post("/request-restart", response_model=RequestRestartResponse)
async def request_restart(
    request: Request,
    service: ResetService = Depends(get_reset_service),
) -> RequestRestartResponse:
    """Ask the seller to reset a completed upload.

    Takes `id` as a form field or query parameter. Returns 404 for an unknown
    id and 409 while the request is still Pending.
    """
    request_id = await _request_id_from(request)
    record = await service.request_reset(request_id)
    record_reset_action("requested")
    return RequestRestartResponse(success=True, status=record.status.value)


@router.get("/reset-upload/{request_id}", response_class=HTMLResponse)
async def reset_upload(
    request_id: str,
    token: Optional[str] = Query(None, description="Signed confirmation token"),
    service: ResetService = Depends(get_reset_service),
) -> HTMLResponse:
    """Confirm a reset: delete the uploaded files and reopen the upload link."""
    try:
        confirmation = await service.confirm_reset(request_id, token)
    except UnauthorizedError:
        return HTMLResponse(
            message_page("Link not valid", "This confirmation link is not valid."),
            status_code=401,
        )
    except RequestNotFoundError:
        return HTMLResponse(invalid_link_page(), status_code=404)
    except InvalidStateError:
        return HTMLResponse(
            message_page("Nothing to reset", "There is no pending restart request for this order."),
            status_code=409,
        )
    except OrderDropError as e:
        logger.error(f"Reset confirmation failed: {e.message}", extra={"upload_request_id": request_id})
        return HTMLResponse(error_page(), status_code=e.status_code)

    record_reset_action("confirmed")
    message = "The uploaded files were deleted and the buyer can upload again."
    if confirmation.failed:
        message += f" {len(confirmation.failed)} file(s) could not be deleted and remain in the folder."
    return HTMLResponse(message_page("Reset confirmed", message))
