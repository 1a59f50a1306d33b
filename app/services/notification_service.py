"""
Notification Service: email and SMS dispatch.

Email: SMTP with STARTTLS. Reads SMTP_* settings.
SMS:   Africa's Talking (AT) messaging API. Reads AT_API_KEY + AT_USERNAME.

If a channel is not configured the message is logged and treated as sent, so
development environments never fail on outbound delivery. Provider errors are
logged and reported as False; callers never see an exception.
"""
import json
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    """
    Convert any Kenyan phone format to +2547XXXXXXXX.
    Accepts: 07XXXXXXXX, +2547XXXXXXXX, 2547XXXXXXXX, 7XXXXXXXX
    """
    phone = phone.strip().replace(" ", "").replace("-", "")
    if phone.startswith("+"):
        phone = phone[1:]
    if phone.startswith("0"):
        phone = "254" + phone[1:]
    if phone.startswith("7") or phone.startswith("1"):
        phone = "254" + phone
    return "+" + phone


# ─────────────────────── Email ───────────────────────

def send_email(to: str, subject: str, body_html: str, body_text: str = "") -> bool:
    """
    Dispatch a transactional email via SMTP.
    Returns True on success (or when SMTP is not configured), False on error.
    """
    if not to:
        logger.warning(f"[EMAIL] No recipient for '{subject}'")
        return False

    if not settings.email_configured:
        logger.info(f"[EMAIL - not configured] To '{to}': {subject}")
        return True  # treat as sent in dev mode

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = settings.EMAIL_FROM
        msg["To"] = to
        if body_text:
            msg.attach(MIMEText(body_text, "plain"))
        msg.attach(MIMEText(body_html, "html"))

        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=10) as srv:
            srv.ehlo()
            srv.starttls()
            srv.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            srv.sendmail(settings.EMAIL_FROM, to, msg.as_string())

        logger.info(f"[EMAIL] Sent to '{to}': {subject}")
        return True
    except Exception as exc:
        logger.error(f"[EMAIL] Failed sending to '{to}': {exc}")
        return False


# ─────────────────────── SMS ───────────────────────

def send_sms(phone: Optional[str], message: str) -> bool:
    """
    Send SMS via Africa's Talking API.
    Returns True on success, False on failure.
    Falls back to logging if AT_API_KEY is not configured.
    """
    if not phone:
        logger.warning("[AT SMS] No phone number, skipping")
        return False

    phone = normalize_phone(phone)

    if not settings.sms_configured:
        logger.info(f"[AT SMS - no key] To {phone}: {message}")
        return True  # treat as sent in dev mode

    payload = {
        "username": settings.AT_USERNAME,
        "to": phone,
        "message": message,
    }
    if settings.AT_SENDER_ID:
        payload["from"] = settings.AT_SENDER_ID

    try:
        with httpx.Client(timeout=15) as client:
            response = client.post(
                settings.AT_SMS_URL,
                data=payload,
                headers={
                    "apiKey": settings.AT_API_KEY,
                    "Accept": "application/json",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
            result = response.json()
            recipients = result.get("SMSMessageData", {}).get("Recipients", [])
            if recipients and recipients[0].get("status") == "Success":
                logger.info(f"[AT SMS] Sent to {phone}")
                return True
            else:
                logger.warning(f"[AT SMS] Send failed for {phone}: {result}")
                return False
    except Exception as exc:
        logger.error(f"[AT SMS] Exception sending to {phone}: {exc}")
        return False


# ─────────────────────── Maintenance templates ───────────────────────

def notify_staff_assigned(staff, request) -> None:
    """Tell a staff member a request has been assigned to them."""
    html = f"""
    <p>New maintenance request assigned:</p>
    <ul>
      <li>Category: {request.category}</li>
      <li>Description: {request.description}</li>
      <li>Priority: {_value(request.priority)}</li>
      <li>Location: Unit {request.property_id}</li>
    </ul>
    """
    send_email(staff.email, "New Maintenance Request Assigned", html)

    if staff.phone:
        send_sms(
            staff.phone,
            f"New maintenance request assigned: {request.category} - {request.description}. "
            f"Priority: {_value(request.priority)}",
        )


def notify_tenant_assigned(tenant, request) -> None:
    html = f"""
    <p>Your maintenance request has been created and assigned:</p>
    <ul>
      <li>Category: {request.category}</li>
      <li>Description: {request.description}</li>
      <li>Status: Assigned to maintenance staff</li>
    </ul>
    <p>We will keep you updated on the progress.</p>
    """
    send_email(tenant.email, "Maintenance Request Update", html)

    if tenant.phone:
        send_sms(
            tenant.phone,
            f"Your maintenance request for {request.category} has been assigned to our staff. "
            f"We'll keep you updated.",
        )


def notify_tenant_completed(tenant, request, report) -> None:
    completed = request.completed_at.strftime("%d %B %Y %H:%M") if request.completed_at else "today"
    html = f"""
    <p>Your maintenance request has been completed:</p>
    <ul>
      <li>Category: {request.category}</li>
      <li>Resolution: {report.work_done}</li>
      <li>Completed on: {completed}</li>
    </ul>
    <p>Thank you for your patience.</p>
    """
    send_email(tenant.email, "Maintenance Request Completed", html)

    if tenant.phone:
        send_sms(
            tenant.phone,
            f"Your maintenance request for {request.category} has been completed. "
            f"Please check your email for details.",
        )


def notify_landlord_completed(landlord, request, report) -> None:
    html = f"""
    <p>Maintenance request completed:</p>
    <ul>
      <li>Category: {request.category}</li>
      <li>Description: {request.description}</li>
      <li>Resolution: {report.work_done}</li>
      <li>Cost: ${report.cost:.2f}</li>
      <li>Time Spent: {report.time_spent or "n/a"}</li>
      <li>Materials Used: {json.dumps(report.materials or [])}</li>
    </ul>
    """
    send_email(landlord.email, "Maintenance Request Completed", html)


# ─────────────────────── Billing templates ───────────────────────

def send_payment_reminder_email(tenant, invoice) -> bool:
    due = invoice.due_date.strftime("%d %B %Y")
    html = f"""
    <h1>Payment Reminder</h1>
    <p>Your payment of ${invoice.amount:.2f} is due on {due}.</p>
    <p>Please log in to your account to make the payment.</p>
    """
    return send_email(tenant.email, "Payment Reminder: Invoice Due Soon", html)


def send_payment_reminder_sms(tenant, invoice) -> bool:
    due = invoice.due_date.strftime("%d %B %Y")
    return send_sms(
        tenant.phone,
        f"Payment Reminder: Your payment of ${invoice.amount:.2f} is due on {due}. "
        f"Please log in to make payment.",
    )


def _value(enum_or_str) -> str:
    return enum_or_str.value if hasattr(enum_or_str, "value") else str(enum_or_str)
