"""
Utility Billing Service

Responsibilities:
  • generate_utility_invoice - total the utility usage, create the invoice and
                               schedule its email/SMS reminders
  • process_card_payment     - Stripe charge, marks the invoice paid on success
  • process_mpesa_payment    - Africa's Talking mobile checkout (settles later)
  • send_payment_reminders   - reminder sweep over due, pending reminders

The sweep takes no lock; two sweeps running at once can send a reminder twice.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from app.core.config import settings
from app.db.base import utcnow
from app.models.payment import (
    Invoice,
    InvoiceStatus,
    InvoiceType,
    Payment,
    PaymentMethod,
    PaymentReminder,
    PaymentStatus,
    ReminderStatus,
    ReminderType,
)
from app.services import notification_service
from app.services.payment_gateways import (
    AfricasTalkingPaymentsService,
    PaymentGatewayError,
    StripeService,
    get_mpesa_service,
    get_stripe_service,
)
from app.storage import Storage

logger = logging.getLogger(__name__)


class InvoiceAlreadyPaid(ValueError):
    pass


def calculate_invoice_total(utilities: Dict[str, dict]) -> float:
    """Sum of the cost of every utility entry."""
    return round(sum(float(usage.get("cost") or 0) for usage in utilities.values()), 2)


def generate_utility_invoice(
    storage: Storage,
    property_id: int,
    tenant_id: int,
    utilities: Dict[str, dict],
    now: Optional[datetime] = None,
) -> Invoice:
    now = now or utcnow()
    invoice = storage.create_invoice(
        property_id=property_id,
        tenant_id=tenant_id,
        amount=calculate_invoice_total(utilities),
        due_date=now + timedelta(days=settings.INVOICE_DUE_DAYS),
        type=InvoiceType.UTILITY,
        period={"month": now.month, "year": now.year},
        details=utilities,
        status=InvoiceStatus.PENDING,
        created_at=now,
    )
    logger.info(f"[billing] Invoice {invoice.id} created for tenant {tenant_id}: {invoice.amount:.2f}")

    schedule_payment_reminders(storage, invoice)
    return invoice


def schedule_payment_reminders(storage: Storage, invoice: Invoice) -> List[PaymentReminder]:
    """Email reminder EMAIL_REMINDER_DAYS before due, SMS reminder SMS_REMINDER_DAYS before due."""
    reminders = [
        storage.create_payment_reminder(
            invoice_id=invoice.id,
            type=ReminderType.EMAIL,
            status=ReminderStatus.PENDING,
            scheduled_for=invoice.due_date - timedelta(days=settings.EMAIL_REMINDER_DAYS),
        ),
        storage.create_payment_reminder(
            invoice_id=invoice.id,
            type=ReminderType.SMS,
            status=ReminderStatus.PENDING,
            scheduled_for=invoice.due_date - timedelta(days=settings.SMS_REMINDER_DAYS),
        ),
    ]
    logger.info(f"[billing] Scheduled {len(reminders)} reminders for invoice {invoice.id}")
    return reminders


def send_payment_reminders(storage: Storage, now: Optional[datetime] = None) -> List[dict]:
    """
    Dispatch every pending reminder whose scheduled time has passed.
    Each reminder ends up SENT, FAILED when it could not be delivered, or
    CANCELLED when its invoice has been paid in the meantime.
    Returns one result per reminder processed.
    """
    now = now or utcnow()
    due_reminders = storage.get_due_payment_reminders(now)

    results = []
    for reminder in due_reminders:
        status = _dispatch_reminder(storage, reminder)
        storage.update_payment_reminder(
            reminder.id,
            status=status,
            sent_at=utcnow() if status == ReminderStatus.SENT else None,
        )
        results.append({
            "reminder_id": reminder.id,
            "invoice_id": reminder.invoice_id,
            "type": reminder.type.value,
            "status": status.value,
        })

    logger.info(f"[billing] Reminder sweep processed {len(results)} reminders")
    return results


def cancel_payment_reminders(storage: Storage, invoice_id: int) -> int:
    """Cancel the pending reminders of an invoice. Call once it is paid."""
    reminders = storage.get_payment_reminders(invoice_id, status=ReminderStatus.PENDING)
    for reminder in reminders:
        storage.update_payment_reminder(reminder.id, status=ReminderStatus.CANCELLED)
    if reminders:
        logger.info(f"[billing] Cancelled {len(reminders)} reminders for invoice {invoice_id}")
    return len(reminders)


def _dispatch_reminder(storage: Storage, reminder: PaymentReminder) -> ReminderStatus:
    invoice = storage.get_invoice(reminder.invoice_id)
    if invoice is None:
        logger.warning(f"[billing] Reminder {reminder.id}: invoice {reminder.invoice_id} not found")
        return ReminderStatus.FAILED

    if invoice.status == InvoiceStatus.PAID:
        logger.info(f"[billing] Reminder {reminder.id}: invoice {invoice.id} already paid, skipped")
        return ReminderStatus.CANCELLED

    tenant = storage.get_user(invoice.tenant_id)
    if tenant is None:
        logger.warning(f"[billing] Reminder {reminder.id}: tenant {invoice.tenant_id} not found")
        return ReminderStatus.FAILED

    if reminder.type == ReminderType.EMAIL:
        sent = notification_service.send_payment_reminder_email(tenant, invoice)
    elif reminder.type == ReminderType.SMS:
        if not tenant.phone:
            logger.warning(f"[billing] Reminder {reminder.id}: tenant {tenant.id} has no phone")
            return ReminderStatus.FAILED
        sent = notification_service.send_payment_reminder_sms(tenant, invoice)
    else:
        logger.warning(f"[billing] Unknown reminder type {reminder.type}")
        sent = False

    return ReminderStatus.SENT if sent else ReminderStatus.FAILED


# ─────────────────────── Payments ───────────────────────

def _ensure_payable(invoice: Invoice) -> None:
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceAlreadyPaid(f"Invoice {invoice.id} is already paid")


def process_card_payment(
    storage: Storage,
    invoice: Invoice,
    payment_method_id: str,
    gateway: Optional[StripeService] = None,
) -> Payment:
    _ensure_payable(invoice)
    gateway = gateway or get_stripe_service()

    try:
        intent = gateway.charge(
            amount=invoice.amount,
            payment_method_id=payment_method_id,
            return_url=f"{settings.APP_URL}/payment/confirm",
            metadata={"invoice_id": invoice.id},
        )
    except PaymentGatewayError as e:
        storage.create_payment(
            invoice_id=invoice.id,
            amount=invoice.amount,
            method=PaymentMethod.CARD,
            status=PaymentStatus.FAILED,
            payment_metadata={"error": str(e)},
        )
        raise

    payment = storage.create_payment(
        invoice_id=invoice.id,
        amount=invoice.amount,
        method=PaymentMethod.CARD,
        status=PaymentStatus.COMPLETED if intent.status == "succeeded" else PaymentStatus.PENDING,
        transaction_id=intent.id,
        payment_metadata={"stripe_payment_intent_id": intent.id, "stripe_status": intent.status},
    )

    if payment.status == PaymentStatus.COMPLETED:
        storage.update_invoice_status(invoice.id, InvoiceStatus.PAID)
        cancel_payment_reminders(storage, invoice.id)
        logger.info(f"[billing] Invoice {invoice.id} paid by card (payment {payment.id})")
    else:
        logger.info(f"[billing] Card payment {payment.id} for invoice {invoice.id} is {intent.status}")

    return payment


async def process_mpesa_payment(
    storage: Storage,
    invoice: Invoice,
    phone_number: str,
    gateway: Optional[AfricasTalkingPaymentsService] = None,
) -> Payment:
    _ensure_payable(invoice)
    gateway = gateway or get_mpesa_service()

    payment = storage.create_payment(
        invoice_id=invoice.id,
        amount=invoice.amount,
        method=PaymentMethod.MPESA,
        status=PaymentStatus.PENDING,
        payment_metadata={},
    )

    try:
        response = await gateway.mobile_checkout(
            phone_number=notification_service.normalize_phone(phone_number),
            amount=invoice.amount,
            metadata={"invoice_id": invoice.id, "payment_id": payment.id},
        )
    except PaymentGatewayError as e:
        storage.update_payment(
            payment.id,
            status=PaymentStatus.FAILED,
            payment_metadata={"error": str(e)},
        )
        raise

    transaction_id = response.get("transactionId")
    payment = storage.update_payment(
        payment.id,
        transaction_id=transaction_id,
        payment_metadata={"mpesa_transaction_id": transaction_id},
    )
    logger.info(f"[billing] M-Pesa checkout started for invoice {invoice.id} (tx {transaction_id})")
    return payment
