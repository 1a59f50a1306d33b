from sqlalchemy import Column, String, ForeignKey, Text, Integer, Float, DateTime, JSON, Enum as SQLEnum
from app.db.base import Base, utcnow
from enum import Enum


class MaintenanceStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


# category -> staff specialization required to handle it
MAINTENANCE_CATEGORIES = {
    "plumbing": "plumber",
    "electrical": "electrician",
    "hvac": "hvac",
    "appliance": "appliance",
    "structural": "carpenter",
    "pest": "pest_control",
    "landscaping": "gardener",
    "general": "general",
}


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Non-null whenever status is assigned or completed
    assigned_staff_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)
    priority = Column(SQLEnum(MaintenancePriority), default=MaintenancePriority.MEDIUM, nullable=False)
    status = Column(SQLEnum(MaintenanceStatus), default=MaintenanceStatus.PENDING, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    resolution = Column(Text, nullable=True)


class MaintenanceReport(Base):
    """Staff write-up filed when a request is completed. Never modified afterwards."""
    __tablename__ = "maintenance_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(Integer, ForeignKey("maintenance_requests.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    description = Column(Text, nullable=False)
    work_done = Column(Text, nullable=False)
    materials = Column(JSON, default=list, nullable=False)
    cost = Column(Float, default=0.0, nullable=False)
    time_spent = Column(String(50), nullable=True)  # "2h30m", "45 minutes"

    created_at = Column(DateTime, default=utcnow, nullable=False)
