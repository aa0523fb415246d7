from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

class CustomerBase(BaseModel):
    """Optional customer fields shared by create and update."""
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State")
    zip: Optional[str] = Field(None, description="ZIP code, 12345 or 12345-6789")
    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    drivers_license: Optional[str] = Field(None, description="Driver's license number")
    preferred_contact: Optional[str] = Field(None, description="Preferred channel ('email' or 'sms')")

class CustomerCreate(CustomerBase):
    """Schema for creating a customer."""
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address")
    phone: str = Field(..., description="Phone number")

class CustomerUpdate(CustomerBase):
    """Schema for a partial customer update."""
    name: Optional[str] = Field(None, description="Full name")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number")
