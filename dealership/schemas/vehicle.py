from typing import Optional
from pydantic import BaseModel, Field

class VehicleBase(BaseModel):
    """Descriptive vehicle fields shared by create and update."""
    color: Optional[str] = Field(None, description="Exterior color")
    mileage: Optional[int] = Field(None, ge=0, description="Odometer reading in miles")
    type: Optional[str] = Field(None, description="e.g., 'new', 'used', 'certified'")
    purchase_price: Optional[float] = Field(None, ge=0, description="Acquisition price")
    sale_price: Optional[float] = Field(None, ge=0, description="Asking price")
    stock_number: Optional[str] = Field(None, description="Lot stock number")
    location: Optional[str] = Field(None, description="Lot location")
    condition: Optional[str] = Field(None, description="Condition grade")

class VehicleCreate(VehicleBase):
    """Schema for adding a vehicle to inventory."""
    vin: str = Field(..., description="17-character Vehicle Identification Number")
    make: str = Field(..., description="Manufacturer")
    model: str = Field(..., description="Model name")
    year: int = Field(..., ge=1900, le=2100, description="Model year")
    status: Optional[str] = Field(None, description="Initial status, defaults to Available")

class VehicleUpdate(VehicleBase):
    """Schema for a partial vehicle update. The VIN cannot change."""
    make: Optional[str] = Field(None, description="Manufacturer")
    model: Optional[str] = Field(None, description="Model name")
    year: Optional[int] = Field(None, ge=1900, le=2100, description="Model year")
    status: Optional[str] = Field(None, description="Available, Pending, Reserved or Service")
