"""Upload API request/response schemas"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class UploadedFileResponse(BaseModel):
    """A file stored in the order folder"""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Sanitized original filename")
    file_id: str = Field(..., alias="fileId", description="Remote file id")


class FailedUploadResponse(BaseModel):
    """A file that could not be stored"""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Sanitized original filename")
    error: str = Field(..., description="Error message")


class UploadResponse(BaseModel):
    """Response for POST /upload"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="True when the request was completed")
    status: str = Field(..., description="Request status after the upload")
    completed_at: str = Field(..., alias="completedAt", description="Completion time in the seller's time zone")
    files: List[UploadedFileResponse] = Field(..., description="Successfully stored files")
    failed: List[FailedUploadResponse] = Field(default_factory=list, description="Failed files")
