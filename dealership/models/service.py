"""
SQLAlchemy models for service-department tables: appointments, repair
orders with their line items, and the per-vehicle service history.
"""

import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Appointments in these states occupy the technician's slot
ACTIVE_APPOINTMENT_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.IN_PROGRESS.value)


class RepairOrderStatus(str, enum.Enum):
    OPEN = "Open"
    COMPLETED = "Completed"


class ItemType(str, enum.Enum):
    LABOR = "labor"
    PART = "part"


class ServiceAppointment(Base, BaseModel):
    __tablename__ = "service_appointments"

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    appointment_date = Column(DateTime, nullable=False, index=True)
    service_type = Column(String, nullable=False)
    assigned_technician_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String, nullable=False, default=AppointmentStatus.SCHEDULED.value)
    estimated_completion = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<ServiceAppointment {self.id} at {self.appointment_date}>"


class RepairOrder(Base, BaseModel):
    """
    Service job. The four totals are recomputed from the items on every item
    insertion and are never set directly.
    """
    __tablename__ = "repair_orders"

    appointment_id = Column(String(36), ForeignKey("service_appointments.id"), nullable=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    technician_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    open_date = Column(DateTime, nullable=False)
    close_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default=RepairOrderStatus.OPEN.value, index=True)
    mileage = Column(Integer, nullable=True)

    # Derived totals
    labor_total = Column(Float, nullable=False, default=0.0)
    parts_total = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)

    items = relationship("RepairOrderItem", back_populates="repair_order")

    def __repr__(self):
        return f"<RepairOrder {self.id} [{self.status}] total={self.total_amount}>"


class RepairOrderItem(Base, BaseModel):
    __tablename__ = "repair_order_items"

    repair_order_id = Column(String(36), ForeignKey("repair_orders.id"), nullable=False, index=True)
    type = Column(String, nullable=False)  # 'labor' or 'part'
    description = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    part_id = Column(String(36), ForeignKey("parts.id"), nullable=True)
    labor_hours = Column(Float, nullable=True)

    repair_order = relationship("RepairOrder", back_populates="items")

    def __repr__(self):
        return f"<RepairOrderItem {self.type} x{self.quantity} on {self.repair_order_id}>"


class ServiceHistory(Base, BaseModel):
    """
    Completed-service record, written when a repair order is completed.
    """
    __tablename__ = "service_history"

    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    technician_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    repair_order_id = Column(String(36), ForeignKey("repair_orders.id"), nullable=True)
    service_date = Column(DateTime, nullable=False)
    mileage = Column(Integer, nullable=True)
    service_type = Column(String, nullable=False, default="Repair")
    description = Column(Text, nullable=True)
    cost = Column(Float, nullable=False, default=0.0)

    def __repr__(self):
        return f"<ServiceHistory vehicle {self.vehicle_id} on {self.service_date}>"
