from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class AppointmentCreate(BaseModel):
    """Schema for scheduling a service appointment."""
    customer_id: str = Field(..., description="Customer")
    vehicle_id: str = Field(..., description="Vehicle to service")
    appointment_date: datetime = Field(..., description="Scheduled start")
    service_type: str = Field(..., description="e.g., 'Oil Change', 'Brake Service'")
    assigned_technician_id: Optional[str] = Field(None, description="Technician; one appointment per exact time")
    estimated_completion: Optional[datetime] = Field(None, description="Expected completion")
    notes: Optional[str] = Field(None, description="Notes")

class AppointmentUpdate(BaseModel):
    """Schema for a partial appointment update."""
    appointment_date: Optional[datetime] = Field(None, description="Scheduled start")
    service_type: Optional[str] = Field(None, description="Service type")
    assigned_technician_id: Optional[str] = Field(None, description="Technician")
    status: Optional[str] = Field(None, description="Scheduled, In Progress, Completed or Cancelled")
    estimated_completion: Optional[datetime] = Field(None, description="Expected completion")
    notes: Optional[str] = Field(None, description="Notes")

class RepairOrderCreate(BaseModel):
    """Schema for opening a repair order. Totals start at zero."""
    appointment_id: Optional[str] = Field(None, description="Originating appointment")
    customer_id: str = Field(..., description="Customer")
    vehicle_id: str = Field(..., description="Vehicle")
    technician_id: str = Field(..., description="Responsible technician")
    mileage: Optional[int] = Field(None, ge=0, description="Odometer at check-in")

class RepairOrderUpdate(BaseModel):
    """Schema for a repair order status update. Totals are not writable."""
    status: Optional[str] = Field(None, description="Open or Completed")
    close_date: Optional[datetime] = Field(None, description="Close date, defaults to now on completion")
    mileage: Optional[int] = Field(None, ge=0, description="Odometer reading")

class RepairOrderItemCreate(BaseModel):
    """Schema for adding a labor or part line to a repair order."""
    type: str = Field(..., description="'labor' or 'part'")
    description: str = Field(..., description="Line description")
    quantity: int = Field(..., gt=0, description="Quantity (hours are tracked in labor_hours)")
    unit_price: float = Field(..., ge=0, description="Price per unit")
    part_id: Optional[str] = Field(None, description="Part drawn from inventory")
    labor_hours: Optional[float] = Field(None, ge=0, description="Labor hours")
