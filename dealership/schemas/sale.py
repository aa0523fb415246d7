from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class SaleCreate(BaseModel):
    """Schema for creating a sale. The salesperson is the authenticated user."""
    customer_id: str = Field(..., description="Buying customer")
    vehicle_id: str = Field(..., description="Vehicle being sold, must be Available")
    sale_price: float = Field(..., gt=0, description="Agreed price")
    financing_type: Optional[str] = Field(None, description="e.g., 'cash', 'loan', 'lease'")
    interest_rate: Optional[float] = Field(None, ge=0, description="Annual rate in percent")
    term_months: Optional[int] = Field(None, gt=0, description="Loan term in months")
    down_payment: Optional[float] = Field(None, ge=0, description="Down payment")
    trade_in_vehicle_id: Optional[str] = Field(None, description="Vehicle traded in")
    trade_in_value: Optional[float] = Field(None, ge=0, description="Credit for the trade-in")
    delivery_date: Optional[datetime] = Field(None, description="Planned delivery")
    warranty_package: Optional[str] = Field(None, description="Warranty package name")

class SaleUpdate(BaseModel):
    """Schema for a partial sale update."""
    sale_status: Optional[str] = Field(None, description="Pending, Approved, Completed, Financed or Cancelled")
    delivery_date: Optional[datetime] = Field(None, description="Planned delivery")
    warranty_package: Optional[str] = Field(None, description="Warranty package name")
    down_payment: Optional[float] = Field(None, ge=0, description="Down payment")

class SaleQuoteRequest(BaseModel):
    """Schema for pricing a deal without recording it."""
    sale_price: float = Field(..., gt=0, description="Agreed price")
    trade_in_value: float = Field(0, ge=0, description="Credit for the trade-in")
    down_payment: float = Field(0, ge=0, description="Down payment")
    tax_rate: float = Field(0.08, ge=0, le=1, description="Sales tax as a fraction")
    fees: float = Field(0, ge=0, description="Documentation and registration fees")
    interest_rate: float = Field(0, ge=0, description="Annual rate in percent")
    term_months: Optional[int] = Field(None, gt=0, description="Loan term in months")
