from sqlalchemy import Column, String, ForeignKey, Integer, JSON, Enum as SQLEnum
from enum import Enum
from app.db.base import Base


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    status = Column(SQLEnum(PropertyStatus), default=PropertyStatus.AVAILABLE, nullable=False)
    rent = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)

    # {"water": {"usage": 12.5, "rate": 2.0}, ...}
    utilities = Column(JSON, default=dict, nullable=False)
