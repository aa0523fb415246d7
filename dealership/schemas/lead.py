from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class LeadBase(BaseModel):
    contact_phone: Optional[str] = Field(None, description="Contact phone")
    contact_email: Optional[str] = Field(None, description="Contact email")
    vehicle_interested: Optional[str] = Field(None, description="Vehicle the prospect asked about")
    inquiry_date: Optional[datetime] = Field(None, description="First inquiry, defaults to now")
    follow_up_date: Optional[datetime] = Field(None, description="Scheduled follow-up")
    assigned_to: Optional[str] = Field(None, description="Assignee user id, defaults to the creator")
    estimated_value: Optional[float] = Field(None, ge=0, description="Expected deal value")
    notes: Optional[str] = Field(None, description="Free-text notes")

class LeadCreate(LeadBase):
    """Schema for creating a lead."""
    lead_source: str = Field(..., description="e.g., 'Website', 'Referral', 'Walk-in'")
    contact_name: str = Field(..., description="Prospect name")
    lead_status: str = Field("New", description="New, Contacted, Qualified, Converted or Lost")

class LeadUpdate(LeadBase):
    """Schema for a partial lead update."""
    lead_source: Optional[str] = Field(None, description="Lead source")
    contact_name: Optional[str] = Field(None, description="Prospect name")
    lead_status: Optional[str] = Field(None, description="New, Contacted, Qualified, Converted or Lost")
