"""
Payment Models
Database models for invoices, payments and payment reminders
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, String, Float, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class InvoiceStatus(str, Enum):
    """Invoice status enum"""
    PENDING = "pending"
    PAID = "paid"


class InvoiceType(str, Enum):
    """Invoice type enum"""
    UTILITY = "utility"
    RENT = "rent"


class PaymentStatus(str, Enum):
    """Payment status enum"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """Payment method enum"""
    CARD = "card"
    MPESA = "mpesa"


class ReminderType(str, Enum):
    """Reminder delivery channel"""
    EMAIL = "email"
    SMS = "sms"


class ReminderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Invoice(Base):
    """Bill issued to a tenant for a property"""
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(SQLEnum(InvoiceStatus), default=InvoiceStatus.PENDING, nullable=False)
    type: Mapped[InvoiceType] = mapped_column(SQLEnum(InvoiceType), default=InvoiceType.UTILITY, nullable=False)

    # {"month": 5, "year": 2025}
    period: Mapped[dict] = mapped_column(JSON, nullable=False)
    # Per-utility breakdown the amount was computed from
    details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class Payment(Base):
    """Payment transaction record"""
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(SQLEnum(PaymentMethod), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    # Gateway reference (Stripe PaymentIntent id, Africa's Talking transaction id)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_metadata: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class PaymentReminder(Base):
    """Reminder scheduled ahead of an invoice due date, sent by the reminder sweep"""
    __tablename__ = "payment_reminders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)

    type: Mapped[ReminderType] = mapped_column(SQLEnum(ReminderType), nullable=False)
    status: Mapped[ReminderStatus] = mapped_column(SQLEnum(ReminderStatus), default=ReminderStatus.PENDING, nullable=False, index=True)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
