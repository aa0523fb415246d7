from typing import Optional
from pydantic import BaseModel, Field

class CommunicationCreate(BaseModel):
    """Schema for sending a message to a customer."""
    customer_id: str = Field(..., description="Recipient customer")
    type: str = Field(..., description="'email' or 'sms'")
    subject: Optional[str] = Field(None, description="Email subject")
    message: str = Field(..., description="Message body")
