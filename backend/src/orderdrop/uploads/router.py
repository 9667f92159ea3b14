"""Upload endpoints

GET /upload-form/{id} renders the buyer's page; POST /upload receives the files.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import HTMLResponse

from ..config import Settings
from ..dependencies import get_file_receiver, get_settings_dep, get_upload_service
from ..domain.requests.errors import OrderDropError, RequestNotFoundError
from ..observability.metrics import record_files_uploaded
from .pages import error_page, invalid_link_page, upload_form_page
from .receiver import InboundFileReceiver
from .schemas import FailedUploadResponse, UploadedFileResponse, UploadResponse
from .service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.get("/upload-form/{request_id}", response_class=HTMLResponse)
def upload_form(
    request_id: str,
    service: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_settings_dep),
) -> HTMLResponse:
    """Render the upload page for a request.

    Unknown ids get a generic invalid-link page (404); store failures a
    generic error page (500). Neither leaks internal details.
    """
    try:
        record = service.get_request(request_id)
    except RequestNotFoundError:
        return HTMLResponse(invalid_link_page(), status_code=status.HTTP_404_NOT_FOUND)
    except OrderDropError as e:
        logger.error(f"Upload form unavailable: {e.message}", extra={"upload_request_id": request_id})
        return HTMLResponse(error_page(), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTMLResponse(upload_form_page(record, settings.MAX_BATCH_UPLOAD_FILES))


@router.post("/upload", response_model=UploadResponse)
async def upload_files(
    request_id: str = Form(..., alias="id", description="Upload request id"),
    files: Optional[List[UploadFile]] = File(None, description="Files to upload"),
    service: UploadService = Depends(get_upload_service),
    receiver: InboundFileReceiver = Depends(get_file_receiver),
) -> UploadResponse:
    """Upload files for a Pending request.

    Returns 404 for an unknown id, 409 if the request is not Pending,
    400 for invalid files, 502 if nothing could be stored.
    """
    async with receiver.receive(files) as inbound:
        result = await service.submit_files(request_id, inbound)

    record_files_uploaded("success", len(result.uploaded))
    record_files_uploaded("error", len(result.failed))

    return UploadResponse(
        success=True,
        status=result.record.status.value,
        completed_at=result.completed_at,
        files=[
            UploadedFileResponse(file_name=f.file_name, file_id=f.file_id)
            for f in result.uploaded
        ],
        failed=[
            FailedUploadResponse(file_name=f.file_name, error=f.error)
            for f in result.failed
        ],
    )
