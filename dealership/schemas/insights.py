from typing import List, Optional
from pydantic import BaseModel, Field

class LeadScoringRequest(BaseModel):
    """Schema for batch lead scoring. Without ids, every New and Contacted lead is scored."""
    lead_ids: Optional[List[str]] = Field(None, description="Leads to score")

class EngagementRequest(BaseModel):
    """Schema for requesting outreach recommendations for one customer."""
    customer_id: str = Field(..., description="Customer to analyze")
