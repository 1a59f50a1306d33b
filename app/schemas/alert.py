from pydantic import BaseModel, Field
from datetime import datetime

from app.models.alert import AlertStatus


class SecurityAlertCreate(BaseModel):
    property_id: int
    type: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1)


class SecurityAlertResponse(BaseModel):
    id: int
    property_id: int
    type: str
    message: str
    timestamp: datetime
    status: AlertStatus

    class Config:
        from_attributes = True
