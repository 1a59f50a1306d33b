"""
Invoice Routes
Utility invoice generation and role-scoped invoice listing
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.dependencies import get_current_user, get_storage, require_role
from app.models.payment import Invoice
from app.models.user import User, UserRole
from app.schemas.payment import InvoiceResponse, UtilityInvoiceCreate
from app.services import billing_service
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def visible_invoices(storage: Storage, user: User) -> List[Invoice]:
    invoices = storage.get_invoices()
    if user.role == UserRole.ADMIN:
        return invoices
    if user.role == UserRole.TENANT:
        return [i for i in invoices if i.tenant_id == user.id]
    if user.role == UserRole.LANDLORD:
        owned = {p.id for p in storage.get_properties() if p.landlord_id == user.id}
        return [i for i in invoices if i.property_id in owned]
    return []


@router.get("", response_model=List[InvoiceResponse])
@router.get("/", response_model=List[InvoiceResponse], include_in_schema=False)
def list_invoices(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    return visible_invoices(storage, current_user)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_utility_invoice(
    invoice_in: UtilityInvoiceCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
):
    """Bill a tenant for utility usage; reminders are scheduled automatically"""
    property = storage.get_property(invoice_in.property_id)
    if property is None:
        raise HTTPException(status_code=404, detail="Property not found")
    if current_user.role == UserRole.LANDLORD and property.landlord_id != current_user.id:
        raise HTTPException(status_code=403, detail="You do not manage this property")

    tenant = storage.get_user(invoice_in.tenant_id)
    if tenant is None or tenant.role != UserRole.TENANT:
        raise HTTPException(status_code=400, detail="tenant_id must reference a tenant")

    utilities = {name: usage.model_dump(exclude_none=True) for name, usage in invoice_in.utilities.items()}
    return billing_service.generate_utility_invoice(
        storage,
        property_id=property.id,
        tenant_id=tenant.id,
        utilities=utilities,
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    invoice = storage.get_invoice(invoice_id)
    if invoice is None or invoice not in visible_invoices(storage, current_user):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice
