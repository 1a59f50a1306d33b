"""
Security Alert Model

Alerts raised against a property (intrusion, gate left open, camera offline)
and pushed to dashboards over the WebSocket channel.
"""
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Enum as SQLEnum

from app.db.base import Base, utcnow


class AlertStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


class SecurityAlert(Base):
    __tablename__ = "security_alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)

    type = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    status = Column(SQLEnum(AlertStatus), default=AlertStatus.UNREAD, nullable=False)

    def __repr__(self) -> str:
        return f"<SecurityAlert id={self.id} property_id={self.property_id} type={self.type}>"
