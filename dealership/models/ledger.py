"""
SQLAlchemy model for the financial ledger (transactions table).
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text

from dealership.db.session import Base
from dealership.db.base_model import BaseModel

class LedgerTransaction(Base, BaseModel):
    __tablename__ = "transactions"

    type = Column(String, nullable=False, index=True)  # e.g., 'payment', 'refund', 'deposit'
    reference_id = Column(String(36), nullable=True)  # Source entity, reference without constraint
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    payment_method = Column(String, nullable=False)
    transaction_date = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="Completed", index=True)
    description = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    def __repr__(self):
        return f"<LedgerTransaction {self.type} {self.amount}>"
