from typing import Optional
from pydantic import BaseModel, Field

class TransactionCreate(BaseModel):
    """Schema for recording a ledger transaction."""
    type: str = Field(..., description="e.g., 'payment', 'refund', 'deposit'")
    amount: float = Field(..., description="Amount")
    payment_method: str = Field(..., description="e.g., 'cash', 'card', 'check'")
    reference_id: Optional[str] = Field(None, description="Source entity (sale, repair order)")
    customer_id: Optional[str] = Field(None, description="Customer")
    description: Optional[str] = Field(None, description="Description")
