"""
SQLAlchemy model for the leads table.
"""

import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class LeadStatus(str, enum.Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    CONVERTED = "Converted"
    LOST = "Lost"


class Lead(Base, BaseModel):
    __tablename__ = "leads"

    lead_source = Column(String, nullable=False)
    lead_status = Column(String, nullable=False, default=LeadStatus.NEW.value)
    contact_name = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True, index=True)
    contact_email = Column(String, nullable=True, index=True)
    vehicle_interested = Column(String, nullable=True)
    inquiry_date = Column(DateTime, nullable=True)
    follow_up_date = Column(DateTime, nullable=True)
    assigned_to = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    estimated_value = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Lead {self.contact_name} [{self.lead_status}]>"
