"""
Payment Routes
Card (Stripe) and M-Pesa (Africa's Talking) payments against invoices
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.api.routes.invoices import visible_invoices
from app.dependencies import get_current_user, get_storage
from app.models.payment import Invoice
from app.models.user import User, UserRole
from app.schemas.payment import CardPaymentRequest, MpesaPaymentRequest, PaymentResponse
from app.services import billing_service
from app.services.billing_service import InvoiceAlreadyPaid
from app.services.payment_gateways import PaymentGatewayError
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _payable_invoice(storage: Storage, invoice_id: int, user: User) -> Invoice:
    invoice = storage.get_invoice(invoice_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    if user.role != UserRole.ADMIN and invoice.tenant_id != user.id:
        raise HTTPException(status_code=403, detail="You can only pay your own invoices")
    return invoice


@router.get("", response_model=List[PaymentResponse])
@router.get("/", response_model=List[PaymentResponse], include_in_schema=False)
def list_payments(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Most recent first"""
    invoice_ids = {i.id for i in visible_invoices(storage, current_user)}
    return [p for p in storage.get_payments() if p.invoice_id in invoice_ids]


@router.post("/card", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def pay_by_card(
    payment_in: CardPaymentRequest,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    invoice = _payable_invoice(storage, payment_in.invoice_id, current_user)
    try:
        return billing_service.process_card_payment(storage, invoice, payment_in.payment_method_id)
    except InvoiceAlreadyPaid as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaymentGatewayError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/mpesa", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def pay_by_mpesa(
    payment_in: MpesaPaymentRequest,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Start an M-Pesa prompt on the payer's phone; the payment stays pending"""
    invoice = _payable_invoice(storage, payment_in.invoice_id, current_user)
    try:
        return await billing_service.process_mpesa_payment(storage, invoice, payment_in.phone_number)
    except InvoiceAlreadyPaid as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaymentGatewayError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
