from typing import Optional
from pydantic import BaseModel, Field

class RegisterRequest(BaseModel):
    """Schema for registering a staff account."""
    email: str = Field(..., description="Login email, unique (case-insensitive)")
    password: str = Field(..., description="Plain password, at least 6 characters")
    name: str = Field(..., description="Display name")
    role: str = Field(..., description="One of admin, sales, service_manager, technician, accountant, inventory_manager")
    phone: Optional[str] = Field(None, description="Contact phone")

class LoginRequest(BaseModel):
    """Schema for exchanging credentials for a bearer token."""
    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Plain password")
