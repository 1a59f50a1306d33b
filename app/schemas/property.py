from pydantic import BaseModel, Field
from typing import Optional, Dict, Any

from app.models.property import PropertyStatus


class PropertyBase(BaseModel):
    name: str
    address: str
    status: PropertyStatus = PropertyStatus.AVAILABLE
    rent: int = Field(..., ge=0)
    image_url: Optional[str] = None
    utilities: Dict[str, Any] = {}


class PropertyCreate(PropertyBase):
    # Admins create on behalf of a landlord; landlords always own what they create
    landlord_id: Optional[int] = None


class PropertyResponse(PropertyBase):
    id: int
    landlord_id: int

    class Config:
        from_attributes = True
