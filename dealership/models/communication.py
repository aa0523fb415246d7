"""
SQLAlchemy model for the communications table.
"""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class CommunicationType(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class CommunicationStatus(str, enum.Enum):
    SENT = "Sent"
    FAILED = "Failed"


class Communication(Base, BaseModel):
    """
    Outbound customer message; ``status`` reflects the notifier outcome.
    """
    __tablename__ = "communications"

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    type = Column(String, nullable=False)
    subject = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    sent_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    sent_date = Column(DateTime, nullable=False)
    status = Column(String, nullable=False)

    def __repr__(self):
        return f"<Communication {self.type} to {self.customer_id} [{self.status}]>"
