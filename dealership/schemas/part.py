from typing import Optional
from pydantic import BaseModel, Field

class PartBase(BaseModel):
    cost: Optional[float] = Field(None, ge=0, description="Unit cost")
    retail_price: Optional[float] = Field(None, ge=0, description="Unit retail price")
    supplier: Optional[str] = Field(None, description="Supplier")
    location: Optional[str] = Field(None, description="Bin location")

class PartCreate(PartBase):
    """Schema for adding a part to inventory."""
    part_number: str = Field(..., description="Unique part number")
    description: str = Field(..., description="Description")
    category: str = Field(..., description="Category")
    quantity_on_hand: int = Field(0, ge=0, description="Units in stock")
    reorder_level: int = Field(10, ge=0, description="Low-stock threshold")

class PartUpdate(PartBase):
    """Schema for a partial part update, including restocking."""
    part_number: Optional[str] = Field(None, description="Unique part number")
    description: Optional[str] = Field(None, description="Description")
    category: Optional[str] = Field(None, description="Category")
    quantity_on_hand: Optional[int] = Field(None, description="Units in stock")
    reorder_level: Optional[int] = Field(None, ge=0, description="Low-stock threshold")
