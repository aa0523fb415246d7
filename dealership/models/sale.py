"""
SQLAlchemy model for the sales table.
"""

import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class SaleStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    COMPLETED = "Completed"
    FINANCED = "Financed"
    CANCELLED = "Cancelled"


class Sale(Base, BaseModel):
    """
    Vehicle sale. Creating one flips the vehicle to Sold; cancelling one
    returns it to Available.
    """
    __tablename__ = "sales"

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    sale_date = Column(DateTime, nullable=False)
    sale_price = Column(Float, nullable=False)

    # Financing
    financing_type = Column(String, nullable=True)  # e.g., 'cash', 'loan', 'lease'
    interest_rate = Column(Float, nullable=True)    # annual percentage
    term_months = Column(Integer, nullable=True)
    down_payment = Column(Float, nullable=True)
    amount_financed = Column(Float, nullable=True)
    monthly_payment = Column(Float, nullable=True)

    salesperson_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    trade_in_vehicle_id = Column(String(36), nullable=True)  # Reference without constraint
    trade_in_value = Column(Float, nullable=True)
    delivery_date = Column(DateTime, nullable=True)
    warranty_package = Column(String, nullable=True)
    sale_status = Column(String, nullable=False, default=SaleStatus.PENDING.value, index=True)

    def __repr__(self):
        return f"<Sale {self.id} vehicle {self.vehicle_id} [{self.sale_status}]>"
