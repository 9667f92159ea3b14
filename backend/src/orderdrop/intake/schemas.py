"""Order intake request/response schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessOrderRequest(BaseModel):
    """Body of POST /process-order

    Fields are optional at the schema level so that missing values produce
    the service's "Missing required field" message. Marketplace receipt
    numbers often arrive as JSON numbers and are kept as strings.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    name: Optional[str] = Field(None, description="Buyer name")
    email: Optional[str] = Field(None, description="Buyer email address")
    receipt_id: Optional[str] = Field(None, alias="receiptId", description="External order reference")
    timestamp: Optional[datetime] = Field(None, description="Order time (defaults to now)")


class ProcessOrderResponse(BaseModel):
    """Response for POST /process-order"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true on success")
    request_id: str = Field(..., alias="requestId", description="Upload request id")
    upload_link: str = Field(..., alias="uploadLink", description="Link to send to the buyer")
