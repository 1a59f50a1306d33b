"""
User Model
Tenants, landlords, maintenance staff and administrators share one table
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class UserRole(str, Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"
    STAFF = "staff"
    ADMIN = "admin"


class User(Base):
    """
    Application user

    Staff members carry a specialization (plumber, electrician, ...) which the
    maintenance dispatcher matches against request categories.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole), default=UserRole.TENANT, nullable=False, index=True)

    # Profile
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    specialization: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username} role={self.role}>"
