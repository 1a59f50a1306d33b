"""
Maintenance Request/Response Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime

from app.models.maintenance import MaintenancePriority, MaintenanceStatus


class MaintenanceRequestCreate(BaseModel):
    property_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=50)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM

    class Config:
        json_schema_extra = {
            "example": {
                "property_id": 1,
                "title": "Kitchen sink leaking",
                "description": "Water pooling under the sink since this morning",
                "category": "plumbing",
                "priority": "high"
            }
        }


class MaintenanceRequestResponse(BaseModel):
    id: int
    property_id: int
    tenant_id: int
    assigned_staff_id: Optional[int] = None
    title: str
    description: str
    category: str
    status: MaintenanceStatus
    priority: MaintenancePriority
    created_at: datetime
    completed_at: Optional[datetime] = None
    resolution: Optional[str] = None

    class Config:
        from_attributes = True


class MaintenanceAssign(BaseModel):
    staff_id: int


class MaintenanceCompletion(BaseModel):
    description: str = Field(..., min_length=1)
    work_done: str = Field(..., min_length=1)
    materials: List[Any] = []
    cost: float = Field(0.0, ge=0)
    time_spent: Optional[str] = None


class MaintenanceReportResponse(BaseModel):
    id: int
    request_id: int
    staff_id: int
    description: str
    work_done: str
    materials: List[Any] = []
    cost: float
    time_spent: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MaintenanceCompletionResponse(BaseModel):
    request: MaintenanceRequestResponse
    report: MaintenanceReportResponse


class RecommendationResponse(BaseModel):
    request_id: int
    recommendation: str
