"""Webhook response schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WebhookResponse(BaseModel):
    """Response for POST /shopify-webhook"""
    model_config = ConfigDict(populate_by_name=True)

    outcome: str = Field(..., description="accepted, duplicate, or rejected")
    request_id: Optional[str] = Field(None, alias="requestId", description="Upload request id, when known")
    reason: Optional[str] = Field(None, description="Why the event was rejected")
