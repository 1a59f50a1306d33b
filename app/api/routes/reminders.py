"""
Payment Reminder Routes
Listing plus the externally triggered reminder sweep (cron / dashboard button)
"""
from fastapi import APIRouter, Depends
from typing import List, Optional

from app.dependencies import get_storage, require_role
from app.models.user import User, UserRole
from app.schemas.payment import PaymentReminderResponse, ReminderSweepResponse
from app.services import billing_service
from app.storage import Storage

router = APIRouter()


@router.get("", response_model=List[PaymentReminderResponse])
@router.get("/", response_model=List[PaymentReminderResponse], include_in_schema=False)
def list_reminders(
    invoice_id: Optional[int] = None,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
):
    return storage.get_payment_reminders(invoice_id)


@router.post("/send", response_model=ReminderSweepResponse)
def send_due_reminders(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
):
    """Send every pending reminder whose scheduled time has passed"""
    results = billing_service.send_payment_reminders(storage)
    return {"success": True, "processed": len(results), "results": results}
