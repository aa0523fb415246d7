"""
SQLAlchemy model for the vehicles table.
"""

import enum

from sqlalchemy import Column, Float, Integer, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "Available"
    SOLD = "Sold"
    PENDING = "Pending"
    RESERVED = "Reserved"
    SERVICE = "Service"


class Vehicle(Base, BaseModel):
    """
    Inventory vehicle. ``status`` is the single source of truth for sale
    eligibility; it becomes Sold only through sale creation.
    """
    __tablename__ = "vehicles"

    vin = Column(String(17), unique=True, nullable=False, index=True)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String, nullable=True)
    mileage = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=VehicleStatus.AVAILABLE.value, index=True)
    type = Column(String, nullable=True)  # e.g., 'new', 'used', 'certified'
    purchase_price = Column(Float, nullable=True)
    sale_price = Column(Float, nullable=True)
    stock_number = Column(String, nullable=True)
    location = Column(String, nullable=True)
    condition = Column(String, nullable=True)

    def __repr__(self):
        return f"<Vehicle {self.year} {self.make} {self.model} ({self.vin})>"
