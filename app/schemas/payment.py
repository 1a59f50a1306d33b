"""
Billing Request/Response Schemas
Pydantic models for invoice, payment and reminder API validation
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.models.payment import (
    InvoiceStatus,
    InvoiceType,
    PaymentMethod,
    PaymentStatus,
    ReminderStatus,
    ReminderType,
)


# ==================== Invoices ====================

class UtilityUsage(BaseModel):
    cost: float = Field(..., ge=0, description="Amount billed for this utility")
    usage: Optional[float] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None


class UtilityInvoiceCreate(BaseModel):
    property_id: int
    tenant_id: int
    utilities: Dict[str, UtilityUsage] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "property_id": 1,
                "tenant_id": 2,
                "utilities": {
                    "water": {"usage": 12.5, "rate": 2.0, "cost": 25.0},
                    "electricity": {"usage": 140, "rate": 0.25, "cost": 35.0}
                }
            }
        }


class InvoiceResponse(BaseModel):
    id: int
    property_id: int
    tenant_id: int
    amount: float
    due_date: datetime
    status: InvoiceStatus
    type: InvoiceType
    period: Dict[str, Any]
    details: Dict[str, Any]
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== Payments ====================

class CardPaymentRequest(BaseModel):
    invoice_id: int
    payment_method_id: str = Field(..., description="Stripe payment method id (pm_...)")


class MpesaPaymentRequest(BaseModel):
    invoice_id: int
    phone_number: str = Field(..., min_length=9)


class PaymentResponse(BaseModel):
    id: int
    invoice_id: int
    amount: float
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="payment_metadata")
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== Reminders ====================

class PaymentReminderResponse(BaseModel):
    id: int
    invoice_id: int
    type: ReminderType
    status: ReminderStatus
    scheduled_for: datetime
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReminderSweepResult(BaseModel):
    reminder_id: int
    invoice_id: int
    type: str
    status: str


class ReminderSweepResponse(BaseModel):
    success: bool
    processed: int
    results: List[ReminderSweepResult]
