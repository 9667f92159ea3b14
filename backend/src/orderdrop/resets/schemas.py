"""Reset workflow response schemas"""

from pydantic import BaseModel, Field


class RequestRestartResponse(BaseModel):
    """Response for POST /request-restart"""
    success: bool = Field(True, description="Always true on success")
    status: str = Field(..., description="Request status after the call")
